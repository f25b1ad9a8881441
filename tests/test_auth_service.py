from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from workinfo.repositories.sql_repository import SQLRepository
from workinfo.services.auth_service import AuthService, InvalidCredentialsError, RegistrationError
from workinfo.services.session_service import resolve_session


def _register(svc: AuthService, **overrides):
    data = {
        "email": "ana@acme.com",
        "password": "s3cretpass",
        "password_confirm": "s3cretpass",
        "username": "Ana_Silva",
    }
    data.update(overrides)
    return svc.register(data["email"], data["password"], data["password_confirm"], data["username"])


def test_register_logs_user_in_and_lowercases_username(db_env):
    svc = AuthService()
    result = _register(svc)
    assert result.user.username == "ana_silva"
    ctx = resolve_session(result.session_token)
    assert ctx.is_authenticated
    assert ctx.user_id == result.user.id


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"email": ""}, "Email, password, and username are required"),
        ({"username": "  "}, "Email, password, and username are required"),
        ({"password_confirm": "different1"}, "Passwords do not match"),
        ({"password": "short", "password_confirm": "short"}, "Password must be at least 8 characters long"),
        ({"email": "ana@acme"}, "Invalid email format"),
        ({"username": "a-b"}, "Username must be 3-20 characters: letters, numbers and underscores"),
    ],
)
def test_register_validation(db_env, overrides, message):
    with pytest.raises(RegistrationError) as exc:
        _register(AuthService(), **overrides)
    assert exc.value.message == message


def test_register_rejects_taken_username_and_email(db_env):
    svc = AuthService()
    _register(svc)
    with pytest.raises(RegistrationError, match="Username is already taken"):
        _register(svc, email="other@acme.com", username="ANA_SILVA")
    with pytest.raises(RegistrationError, match="already exists"):
        _register(svc, email="ANA@acme.com", username="someone_else")


def test_check_username_availability(db_env):
    svc = AuthService()
    assert svc.check_username_availability("ana_silva") is True
    _register(svc)
    assert svc.check_username_availability("Ana_Silva") is False
    assert svc.check_username_availability("") is False


def test_check_username_availability_treats_errors_as_taken(db_env, monkeypatch):
    svc = AuthService()

    def broken(username):
        raise OperationalError("select", {}, Exception("db down"))

    monkeypatch.setattr(svc.repository, "username_exists", broken)
    assert svc.check_username_availability("free_name") is False


def test_login_and_logout(db_env):
    svc = AuthService()
    _register(svc)
    result = svc.login("Ana@Acme.com", "s3cretpass")
    assert resolve_session(result.session_token).is_authenticated
    svc.logout(result.session_token)
    assert not resolve_session(result.session_token).is_authenticated


@pytest.mark.parametrize(
    "email, password, message",
    [
        ("", "x", "Email and password are required"),
        ("ana@acme.com", "", "Email and password are required"),
        ("ana@acme.com", "wrongpass", "Invalid email or password"),
        ("nobody@acme.com", "s3cretpass", "Invalid email or password"),
    ],
)
def test_login_failures(db_env, email, password, message):
    svc = AuthService()
    _register(svc)
    with pytest.raises(InvalidCredentialsError) as exc:
        svc.login(email, password)
    assert exc.value.message == message


def test_password_is_stored_hashed(db_env):
    _register(AuthService())
    user = SQLRepository().get_user_by_username("ana_silva")
    assert user.password_hash != "s3cretpass"
    assert user.password_hash.startswith("$argon2")
