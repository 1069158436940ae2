"""End-to-end tests for /api/user through the Flask test client."""
import pytest

import scripts.admin as admin_cli
from objectapi.core.audit import verify_audit_log
from objectapi.core.authorization import ADMIN_DELETE_ERROR, NOT_OWNER_ERROR


def test_create_with_json(client, repository):
    response = client.post(
        "/api/user",
        json={"email": "carol@example.com", "nick": "carol", "password": "pw", "meta": {"team": "blue"}},
    )

    assert response.status_code == 201
    payload = response.get_json()
    assert payload["email"] == "carol@example.com"
    assert payload["meta"]["team"] == "blue"
    assert "created" in payload["meta"]
    assert repository.load("carol@example.com") is not None


def test_create_with_form_meta_keys(client, repository):
    response = client.post(
        "/api/user",
        data={
            "email": "dave@example.com",
            "nick": "dave",
            "password": "pw",
            "meta[team]": "red",
            "meta[floor]": "3",
        },
    )

    assert response.status_code == 201
    assert repository.load("dave@example.com").meta == {
        "created": response.get_json()["meta"]["created"],
        "team": "red",
        "floor": "3",
    }


def test_create_missing_fields(client):
    response = client.post("/api/user", data={"email": "x@example.com"})
    assert response.status_code == 400
    assert response.get_json() == {"error": "Missing required arguments: nick, password"}


def test_create_duplicate(client, alice):
    response = client.post("/api/user", data={"email": "alice@example.com", "nick": "a2", "password": "pw"})
    assert response.status_code == 409
    assert response.get_json() == {"error": "E-mail taken by another user"}


def test_create_bad_meta_rolls_back(client, repository):
    response = client.post(
        "/api/user",
        json={"email": "erin@example.com", "nick": "erin", "password": "pw", "meta": {"created": 1}},
    )
    assert response.status_code == 400
    assert "reserved" in response.get_json()["error"]
    assert repository.load("erin@example.com") is None


def test_read_user(client, alice):
    response = client.get(f"/api/user/{alice.id}")
    assert response.status_code == 200
    assert response.get_json()["nick"] == "alice"

    assert client.get("/api/user/alice@example.com").get_json()["id"] == alice.id


def test_head_has_no_body(client, alice):
    response = client.head(f"/api/user/{alice.id}")
    assert response.status_code == 200
    assert response.data == b""


def test_read_unknown_user(client):
    response = client.get("/api/user/424242")
    assert response.status_code == 404
    assert response.get_json() == {"error": "User not found"}


def test_list_users(client, alice, bob):
    payload = client.get("/api/user?limit=1&offset=1").get_json()
    assert payload["total"] == 2
    assert [u["email"] for u in payload["objects"]] == ["bob@example.com"]


def test_update_requires_credentials(client, alice):
    response = client.post(f"/api/user/{alice.id}", data={"nick": "x"})
    assert response.status_code == 401
    assert response.get_json() == {"error": "Authentication required"}


def test_wrong_password_is_anonymous(client, alice, auth_header):
    response = client.post(
        f"/api/user/{alice.id}", data={"nick": "x"}, headers=auth_header("alice@example.com", "wrong")
    )
    assert response.status_code == 401


def test_update_self(client, repository, alice, auth_header):
    response = client.post(
        f"/api/user/{alice.id}",
        data={"nick": "ally", "password": ""},
        headers=auth_header("alice@example.com", "alice-pass"),
    )

    assert response.status_code == 200
    assert response.get_json()["nick"] == "ally"
    stored = repository.load(alice.id)
    assert stored.nick == "ally"
    assert stored.check_password("alice-pass")


def test_update_other_is_denied(client, alice, bob, auth_header):
    response = client.post(
        f"/api/user/{bob.id}", data={"nick": "x"}, headers=auth_header("alice@example.com", "alice-pass")
    )
    assert response.status_code == 401
    assert response.get_json() == {"error": NOT_OWNER_ERROR}


def test_update_to_taken_email(client, alice, bob, auth_header):
    response = client.post(
        f"/api/user/{alice.id}",
        json={"email": "bob@example.com"},
        headers=auth_header("alice@example.com", "alice-pass"),
    )
    assert response.status_code == 409
    assert response.get_json() == {"error": "E-mail taken by another user"}


def test_delete_self(client, repository, alice, auth_header):
    response = client.delete(f"/api/user/{alice.id}", headers=auth_header("alice@example.com", "alice-pass"))
    assert response.status_code == 204
    assert repository.load(alice.id) is None


def test_admin_deletes_other(client, repository, admin_user, bob, auth_header):
    response = client.delete("/api/user/bob@example.com", headers=auth_header("root@example.com", "root-pass"))
    assert response.status_code == 204
    assert repository.load(bob.id) is None


def test_admin_can_not_be_deleted(client, admin_user, auth_header):
    response = client.delete(
        f"/api/user/{admin_user.id}", headers=auth_header("root@example.com", "root-pass")
    )
    assert response.status_code == 403
    assert response.get_json() == {"error": ADMIN_DELETE_ERROR}


def test_delete_collection(client, alice, auth_header):
    response = client.delete("/api/user", headers=auth_header("alice@example.com", "alice-pass"))
    assert response.status_code == 400
    assert response.get_json() == {"error": "No object given"}


@pytest.mark.parametrize("method", ["put", "patch"])
def test_unsupported_methods(client, alice, method):
    response = getattr(client, method)(f"/api/user/{alice.id}", json={"nick": "x"})
    assert response.status_code == 405
    assert response.get_json() == {"error": f"Method {method.upper()} not allowed"}


def test_serialization_filter_applies(app, client, hooks, alice):
    hooks.add_filter("user.array", lambda data, ctx: {k: v for k, v in data.items() if k != "meta"})
    payload = client.get(f"/api/user/{alice.id}").get_json()
    assert "meta" not in payload


def test_writes_are_audited(client, settings, alice, auth_header):
    client.post(f"/api/user/{alice.id}", data={"nick": "al"}, headers=auth_header("alice@example.com", "alice-pass"))
    client.post("/api/user", data={"email": "new@example.com", "nick": "new", "password": "pw"})

    total, valid = verify_audit_log(settings.audit_log_dir, settings.audit_log_signing_key)
    assert total == 2
    assert valid == 2


def test_id_beyond_storage_range(client):
    response = client.get("/api/user/99999999999999999999")
    assert response.status_code == 404
    assert response.get_json() == {"error": "User not found"}


def test_offset_beyond_storage_range(client, alice):
    response = client.get("/api/user?offset=99999999999999999999")
    assert response.status_code == 200
    assert response.get_json()["objects"] == []


def test_revoked_admin_loses_privileges_immediately(client, db_path, admin_user, bob, auth_header, monkeypatch, tmp_path):
    monkeypatch.setenv("AUDIT_LOG_DIR", str(tmp_path / "cli-audit"))
    root = auth_header("root@example.com", "root-pass")
    assert client.get("/api/user/root@example.com").get_json()["admin"] is True

    assert admin_cli.main(["--db", db_path, "revoke", "--user", "root@example.com"]) == 0

    denied = client.delete(f"/api/user/{bob.id}", headers=root)
    assert denied.status_code == 401
    assert denied.get_json() == {"error": NOT_OWNER_ERROR}

    assert client.delete("/api/user/root@example.com", headers=root).status_code == 204
