import pytest

from objectapi.core.metadata import apply_meta, validate_meta_entry
from objectapi.core.models import User


@pytest.mark.parametrize(
    "name,value",
    [
        ("color", "blue"),
        ("age", 42),
        ("ratio", 0.5),
        ("active", True),
        ("remove.me", None),
        ("a-b_c.d", "x" * 1024),
    ],
)
def test_accepts_valid_entries(name, value):
    assert validate_meta_entry(name, value) is None


@pytest.mark.parametrize(
    "name,value,fragment",
    [
        ("", "x", "non-empty"),
        (5, "x", "non-empty"),
        ("n" * 129, "x", "128"),
        ("bad name", "x", "invalid characters"),
        ("created", 1, "reserved"),
        ("tags", ["a", "b"], "scalar"),
        ("nested", {"a": 1}, "scalar"),
        ("long", "x" * 1025, "1024"),
    ],
)
def test_rejects_invalid_entries(name, value, fragment):
    status, body = validate_meta_entry(name, value)
    assert status == 400
    assert fragment in body["error"]


def test_apply_meta_sets_and_removes_keys():
    user = User(email="a@b.se", nick="a", meta={"old": 1, "keep": 2})
    assert apply_meta(user, {"old": None, "new": "v", "keep": "null"}) is None
    assert user.meta == {"new": "v"}


def test_apply_meta_stops_at_first_rejection():
    user = User(email="a@b.se", nick="a")
    result = apply_meta(user, {"first": 1, "bad name": 2, "third": 3})
    assert result[0] == 400
    assert user.meta == {"first": 1}


def test_apply_meta_uses_given_validator():
    user = User(email="a@b.se", nick="a")
    result = apply_meta(user, {"x": 1}, lambda name, value: (418, {"error": "teapot"}))
    assert result == (418, {"error": "teapot"})
    assert user.meta == {}
