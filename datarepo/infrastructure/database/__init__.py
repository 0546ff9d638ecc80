"""Database infrastructure package."""

from datarepo.infrastructure.database.session import (
    close_db,
    create_session_factory,
    get_engine,
    get_session_factory,
)

__all__ = [
    "close_db",
    "create_session_factory",
    "get_engine",
    "get_session_factory",
]
