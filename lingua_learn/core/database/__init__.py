"""
Database layer for Lingua Learn.

Structure:
- entities/: SQLModel table models organized by business domain
- session.py: Global engine and session factory management
- utils.py: Engine/session helpers and pagination
"""

from .base import Base, utc_now
from .session import (
    async_session_maker,
    engine,
    get_session,
    init_db,
)
from .utils import (
    Page,
    create_all,
    create_engine,
    create_sessionmaker,
    paginate,
)

__all__ = [
    "Base",
    "Page",
    "async_session_maker",
    "create_all",
    "create_engine",
    "create_sessionmaker",
    "engine",
    "get_session",
    "init_db",
    "paginate",
    "utc_now",
]
