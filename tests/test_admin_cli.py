import pytest

import scripts.admin as admin
from objectapi.core.audit import verify_audit_log
from objectapi.core.db import get_connection
from objectapi.core.repository import UserRepository


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, tmp_path):
    monkeypatch.setenv("AUDIT_LOG_DIR", str(tmp_path / "audit"))
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "cli-key")
    monkeypatch.delenv("DATABASE_PATH", raising=False)
    return tmp_path


def _load(db_path, ref):
    conn = get_connection(db_path)
    try:
        return UserRepository(conn).load(ref)
    finally:
        conn.close()


def test_no_command_prints_help(db_path, capsys):
    assert admin.main(["--db", db_path]) == 1
    assert "usage" in capsys.readouterr().out


def test_create_admin(db_path, capsys):
    code = admin.main([
        "--db", db_path, "create-admin",
        "--email", "root@example.com", "--nick", "root", "--password", "pw",
    ])

    assert code == 0
    assert "root@example.com" in capsys.readouterr().out
    user = _load(db_path, "root@example.com")
    assert user.is_admin()
    assert user.check_password("pw")


def test_create_admin_duplicate(db_path, alice, capsys):
    code = admin.main([
        "--db", db_path, "create-admin",
        "--email", "alice@example.com", "--nick", "a", "--password", "pw",
    ])
    assert code == 1
    assert "taken" in capsys.readouterr().err


def test_grant_and_revoke(db_path, alice, cli_env):
    assert admin.main(["--db", db_path, "grant", "--user", "alice@example.com"]) == 0
    assert _load(db_path, alice.id).is_admin()

    assert admin.main(["--db", db_path, "--operator", "ops", "revoke", "--user", str(alice.id)]) == 0
    assert not _load(db_path, alice.id).is_admin()

    assert verify_audit_log(cli_env / "audit", "cli-key") == (2, 2)


def test_show(db_path, alice, capsys):
    assert admin.main(["--db", db_path, "show", "--user", str(alice.id)]) == 0
    out = capsys.readouterr().out
    assert "alice@example.com" in out
    assert out.strip().endswith("user")


@pytest.mark.parametrize("ref", ["999", "ghost@example.com", "not a ref"])
def test_unknown_user(db_path, db, ref, capsys):
    assert admin.main(["--db", db_path, "grant", "--user", ref]) == 1
    assert "not found" in capsys.readouterr().err
