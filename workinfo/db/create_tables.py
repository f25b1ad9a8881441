"""
Create the WorkInfo schema (users, cards, sessions).

Usage:
  python -m workinfo.db.create_tables
"""
from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from workinfo.core.config import get_settings
from workinfo.core.logging import configure_logging

from .models import Card, User, UserSession
from .session import Base, get_engine

logger = logging.getLogger(__name__)

TABLES = (User.__table__, Card.__table__, UserSession.__table__)


def create_all() -> list[str]:
    """Create any missing tables; returns the names that were created."""
    engine = get_engine()
    existing = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine, tables=list(TABLES))
    created = [table.name for table in TABLES if table.name not in existing]
    for name in created:
        logger.info("Created table %s", name)
    if not created:
        logger.info("Schema already up to date (%s)", ", ".join(table.name for table in TABLES))
    return created


def main() -> None:
    configure_logging(get_settings().log_level)
    try:
        create_all()
    except SQLAlchemyError as exc:
        logger.error("Failed to create tables: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
