"""Create the database schema and seed the FREE/PRO roles.

Runs at application startup; can also be invoked directly:
  python -m todo_api.db.create_tables
"""
from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from .session import Base, get_engine
from . import models  # noqa: F401  # ensure models are imported for metadata


def create_all() -> None:
    engine = get_engine()
    Base.metadata.create_all(bind=engine)


def init_db() -> None:
    """Create missing tables, then seed the default roles idempotently."""
    from todo_api.domain.identity import DEFAULT_ROLES
    from todo_api.repositories.role_store import RoleStore

    create_all()
    RoleStore().ensure_roles(DEFAULT_ROLES)


if __name__ == "__main__":
    try:
        init_db()
        print("Database tables created and roles seeded.")
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to initialise database: {exc}") from exc
