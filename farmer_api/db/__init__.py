"""Async persistence layer: engine, sessions and schema management."""

from .create_tables import create_all, drop_all
from .session import Base, get_engine, get_session

__all__ = ["Base", "create_all", "drop_all", "get_engine", "get_session"]
