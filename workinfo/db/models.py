"""SQLAlchemy models for users, their cards and login sessions."""
from __future__ import annotations

import secrets

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .session import Base


def new_record_id() -> str:
    return secrets.token_hex(8)


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_record_id)
    email = Column(String(255), unique=True, nullable=False)
    username = Column(String(32), unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    cards = relationship("Card", back_populates="owner", cascade="all,delete-orphan")
    sessions = relationship("UserSession", back_populates="user", cascade="all,delete-orphan")


class Card(Base):
    __tablename__ = "cards"

    id = Column(String(32), primary_key=True, default=new_record_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    username = Column(String(32), nullable=False, index=True)
    first_name = Column(String(120), nullable=False, default="")
    last_name = Column(String(120), nullable=False, default="")
    company = Column(String(200), nullable=False, default="")
    title = Column(String(200), nullable=True)
    email = Column(String(255), nullable=True)
    mobile = Column(String(40), nullable=True)
    office = Column(String(40), nullable=True)
    website = Column(String(500), nullable=True)
    note = Column(Text, nullable=True)
    profile_image = Column(String(255), nullable=True)
    theme_primary_light = Column(String(16), nullable=True)
    theme_primary_dark = Column(String(16), nullable=True)
    tracking_script = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    owner = relationship("User", back_populates="cards")


class UserSession(Base):
    __tablename__ = "sessions"

    token = Column(String(128), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="sessions")
