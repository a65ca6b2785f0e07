"""
Persistence adapters.

Services depend on the IdentityStore contract; SQLRepository is the SQLAlchemy
implementation. Every read returns a record without the PIN hash.
"""

from .base import DuplicateRecordError, FarmOwner, FarmRecord, IdentityStore, UserRecord
from .sql_repository import SQLRepository

__all__ = [
    "DuplicateRecordError",
    "FarmOwner",
    "FarmRecord",
    "IdentityStore",
    "SQLRepository",
    "UserRecord",
]
