"""Database engine, sessions and CRUD operations."""

from src.db.database import close_db, engine, get_db, init_db

__all__ = ["close_db", "engine", "get_db", "init_db"]
