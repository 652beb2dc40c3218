"""
Tests for the set_role command line tool.
"""

import pytest

import set_role


@pytest.fixture(autouse=True)
def no_firebase_init(monkeypatch):
    monkeypatch.setattr(set_role, "init_firebase", lambda: None)


def test_promotes_user(db, doctor, capsys):
    assert set_role.main([doctor["email"], "admin"]) == 0
    assert db.docs("users")[doctor["id"]]["role"] == "admin"
    assert "Role 'admin' set" in capsys.readouterr().out


def test_unknown_email(db, capsys):
    assert set_role.main(["nobody@greedoc-mail.com", "admin"]) == 1
    assert "No user with email" in capsys.readouterr().err


def test_unknown_role_rejected(db, doctor):
    with pytest.raises(ValueError):
        set_role.set_role(doctor["email"], "superuser")
