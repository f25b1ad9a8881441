"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update, delete, func

from workinfo.db.models import Card, User, UserSession
from workinfo.db.session import get_session

# Card columns a user may write through the card form.
CARD_FIELDS = (
    "first_name",
    "last_name",
    "company",
    "title",
    "email",
    "mobile",
    "office",
    "website",
    "note",
    "profile_image",
    "theme_primary_light",
    "theme_primary_dark",
    "tracking_script",
)


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    # -------------------------- users --------------------------
    def get_user(self, user_id: str) -> Optional[User]:
        with get_session() as session:
            return session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        email_value = (email or "").strip().lower()
        if not email_value:
            return None
        with get_session() as session:
            stmt = select(User).where(func.lower(User.email) == email_value)
            return session.execute(stmt).scalar_one_or_none()

    def get_user_by_username(self, username: str) -> Optional[User]:
        username_value = (username or "").strip().lower()
        if not username_value:
            return None
        with get_session() as session:
            stmt = select(User).where(User.username == username_value)
            return session.execute(stmt).scalar_one_or_none()

    def username_exists(self, username: str) -> bool:
        username_value = (username or "").strip().lower()
        if not username_value:
            return False
        with get_session() as session:
            stmt = select(User.id).where(User.username == username_value).limit(1)
            return session.execute(stmt).first() is not None

    def create_user(self, email: str, username: str, password_hash: str) -> User:
        now = datetime.now(timezone.utc)
        entity = User(
            email=(email or "").strip(),
            username=(username or "").strip().lower(),
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def update_user_password(self, user_id: str, password_hash: str) -> None:
        with get_session() as session:
            stmt = (
                update(User)
                .where(User.id == user_id)
                .values(password_hash=password_hash, updated_at=datetime.now(timezone.utc))
            )
            session.execute(stmt)
            session.commit()

    def delete_user(self, user_id: str) -> None:
        with get_session() as session:
            session.execute(delete(UserSession).where(UserSession.user_id == user_id))
            session.execute(delete(Card).where(Card.user_id == user_id))
            session.execute(delete(User).where(User.id == user_id))
            session.commit()

    # -------------------------- cards --------------------------
    def get_card(self, card_id: str) -> Optional[Card]:
        with get_session() as session:
            return session.get(Card, card_id)

    def get_active_card_for_user(self, user_id: str) -> Optional[Card]:
        with get_session() as session:
            stmt = (
                select(Card)
                .where(Card.user_id == user_id, Card.is_active.is_(True))
                .order_by(Card.created_at)
                .limit(1)
            )
            return session.execute(stmt).scalars().first()

    def get_active_card_by_username(self, username: str) -> Optional[Card]:
        username_value = (username or "").strip().lower()
        if not username_value:
            return None
        with get_session() as session:
            stmt = (
                select(Card)
                .where(Card.username == username_value, Card.is_active.is_(True))
                .order_by(Card.created_at)
                .limit(1)
            )
            return session.execute(stmt).scalars().first()

    def list_cards(self, *, active_only: bool = False) -> list[Card]:
        with get_session() as session:
            stmt = select(Card)
            if active_only:
                stmt = stmt.where(Card.is_active.is_(True))
            return list(session.execute(stmt).scalars().all())

    def create_card(self, user_id: str, username: str, data: dict | None = None) -> Card:
        now = datetime.now(timezone.utc)
        values = {key: value for key, value in (data or {}).items() if key in CARD_FIELDS}
        entity = Card(
            user_id=user_id,
            username=(username or "").strip().lower(),
            is_active=True,
            created_at=now,
            updated_at=now,
            **values,
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def update_card(self, card_id: str, data: dict) -> Optional[Card]:
        values = {key: value for key, value in (data or {}).items() if key in CARD_FIELDS}
        with get_session() as session:
            card = session.get(Card, card_id)
            if not card:
                return None
            for key, value in values.items():
                setattr(card, key, value)
            card.is_active = True
            card.updated_at = datetime.now(timezone.utc)
            session.commit()
            session.refresh(card)
            return card

    def delete_card(self, card_id: str) -> None:
        with get_session() as session:
            session.execute(delete(Card).where(Card.id == card_id))
            session.commit()

    # -------------------------- sessions --------------------------
    def create_session(self, user_id: str, expires_at: datetime) -> str:
        token = secrets.token_urlsafe(32)
        entity = UserSession(token=token, user_id=user_id, expires_at=expires_at)
        with get_session() as session:
            session.add(entity)
            session.commit()
        return token

    def get_user_session(self, token: str) -> Optional[UserSession]:
        if not token:
            return None
        with get_session() as session:
            return session.get(UserSession, token)

    def extend_session(self, token: str, expires_at: datetime) -> None:
        with get_session() as session:
            stmt = update(UserSession).where(UserSession.token == token).values(expires_at=expires_at)
            session.execute(stmt)
            session.commit()

    def delete_user_session(self, token: str) -> None:
        with get_session() as session:
            session.execute(delete(UserSession).where(UserSession.token == token))
            session.commit()

    def delete_user_sessions(self, user_id: str) -> None:
        with get_session() as session:
            session.execute(delete(UserSession).where(UserSession.user_id == user_id))
            session.commit()
