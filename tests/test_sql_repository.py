"""
Smoke tests for the SQLRepository against a temporary SQLite database.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from workinfo.repositories.sql_repository import SQLRepository


def test_user_and_card_flow(db_env):
    repo = SQLRepository()
    user = repo.create_user("Alice@Example.com", "Alice", "hash")
    assert user.username == "alice"
    assert repo.get_user_by_email("alice@example.com").id == user.id
    assert repo.username_exists("ALICE")
    assert not repo.username_exists("bob")

    card = repo.create_card(user.id, user.username, {"first_name": "Alice", "is_active": False, "bogus": 1})
    assert card.is_active is True
    assert card.first_name == "Alice"
    assert repo.get_active_card_by_username("Alice").id == card.id
    assert repo.get_active_card_for_user(user.id).id == card.id

    updated = repo.update_card(card.id, {"company": "Acme", "username": "hijack"})
    assert updated.company == "Acme"
    assert updated.username == "alice"
    assert repo.update_card("missing", {"company": "x"}) is None

    assert [c.id for c in repo.list_cards(active_only=True)] == [card.id]
    repo.delete_card(card.id)
    assert repo.get_card(card.id) is None


def test_session_flow(db_env):
    repo = SQLRepository()
    user = repo.create_user("bob@example.com", "bob", "hash")
    expires = datetime.now(timezone.utc) + timedelta(hours=1)
    token = repo.create_session(user.id, expires)
    assert repo.get_user_session(token).user_id == user.id

    later = expires + timedelta(days=1)
    repo.extend_session(token, later)
    stored = repo.get_user_session(token).expires_at
    assert stored.replace(tzinfo=None) == later.replace(tzinfo=None)

    other = repo.create_session(user.id, expires)
    repo.delete_user_session(token)
    assert repo.get_user_session(token) is None
    repo.delete_user_sessions(user.id)
    assert repo.get_user_session(other) is None


def test_delete_user_removes_cards_and_sessions(db_env):
    repo = SQLRepository()
    user = repo.create_user("carol@example.com", "carol", "hash")
    card = repo.create_card(user.id, user.username)
    token = repo.create_session(user.id, datetime.now(timezone.utc) + timedelta(hours=1))
    repo.delete_user(user.id)
    assert repo.get_user(user.id) is None
    assert repo.get_card(card.id) is None
    assert repo.get_user_session(token) is None


def test_create_all_reports_only_missing_tables(db_env, caplog):
    from sqlalchemy import inspect

    from workinfo.db import create_tables, models, session as db_session

    engine = db_session.get_engine()
    models.UserSession.__table__.drop(bind=engine)
    with caplog.at_level("INFO", logger="workinfo.db.create_tables"):
        assert create_tables.create_all() == ["sessions"]
    assert "Created table sessions" in caplog.text
    assert {"users", "cards", "sessions"} <= set(inspect(engine).get_table_names())
    assert create_tables.create_all() == []
