"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from workinfo.core.security import hash_password, needs_rehash, verify_password
from workinfo.db.models import User
from workinfo.domain.contact import is_valid_email
from workinfo.domain.usernames import is_valid_username, normalize_username
from workinfo.repositories.sql_repository import SQLRepository
from workinfo.services.session_service import delete_session, issue_session

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AuthError(Exception):
    """Base class for authentication-related exceptions."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RegistrationError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


@dataclass
class LoginSuccess:
    user: User
    session_token: str


@dataclass
class AuthService:
    """Handles registration, login and logout flows."""

    def __post_init__(self):
        self.repository = SQLRepository()

    # -------------------------------------- validation --------------------------------------
    def validate_email(self, email: str | None) -> bool:
        return is_valid_email(email)

    def validate_username(self, username: str | None) -> bool:
        return is_valid_username(username)

    def check_username_availability(self, username: str | None) -> bool:
        """True when nobody owns ``username`` yet. Lookup failures count as taken."""
        candidate = normalize_username(username)
        if not candidate:
            return False
        try:
            return not self.repository.username_exists(candidate)
        except SQLAlchemyError:
            logger.exception("Username availability check failed for %s", candidate)
            return False

    # -------------------------------------- registration --------------------------------------
    def register(self, email: str, password: str, password_confirm: str, username: str) -> LoginSuccess:
        raw_email = (email or "").strip()
        raw_username = (username or "").strip()
        if not raw_email or not password or not raw_username:
            raise RegistrationError("Email, password, and username are required")
        if password != password_confirm:
            raise RegistrationError("Passwords do not match")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise RegistrationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        if not self.validate_email(raw_email):
            raise RegistrationError("Invalid email format")
        if not self.validate_username(raw_username):
            raise RegistrationError("Username must be 3-20 characters: letters, numbers and underscores")
        if not self.check_username_availability(raw_username):
            raise RegistrationError("Username is already taken")
        if self.repository.get_user_by_email(raw_email):
            raise RegistrationError("An account with this email already exists")
        try:
            user = self.repository.create_user(raw_email, normalize_username(raw_username), hash_password(password))
        except IntegrityError as exc:
            # Lost a race against another registration with the same email/username.
            raise RegistrationError("Username is already taken") from exc
        logger.info("Registered user %s", user.username)
        return LoginSuccess(user=user, session_token=issue_session(user.id))

    # -------------------------------------- login --------------------------------------
    def login(self, email: str, password: str) -> LoginSuccess:
        raw_email = (email or "").strip()
        if not raw_email or not password:
            raise InvalidCredentialsError("Email and password are required")
        user = self.repository.get_user_by_email(raw_email)
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid email or password")
        if needs_rehash(user.password_hash):
            self.repository.update_user_password(user.id, hash_password(password))
        return LoginSuccess(user=user, session_token=issue_session(user.id))

    def logout(self, session_token: Optional[str]) -> None:
        if not session_token:
            return
        delete_session(session_token)
