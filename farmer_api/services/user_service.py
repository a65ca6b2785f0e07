"""Farmer profile use cases (list, read, update, delete)."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from farmer_api.core.utils import Page, normalize_paging, page_meta
from farmer_api.repositories import DuplicateRecordError, SQLRepository, UserRecord
from farmer_api.repositories.sql_repository import PROFILE_FIELDS
from farmer_api.services.errors import BadRequestError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("first_name", "last_name", "gender", "age_group", "residence_county")


def _not_found(user_id: str) -> NotFoundError:
    return NotFoundError(f"User with ID {user_id} not found")


@dataclass
class UserService:
    repository: Optional[SQLRepository] = None

    def __post_init__(self):
        if self.repository is None:
            self.repository = SQLRepository()

    async def list_users(self, page: Optional[int] = None, limit: Optional[int] = None, search: Optional[str] = None) -> Page[UserRecord]:
        page, limit = normalize_paging(page, limit)
        term = (search or "").strip() or None
        users, total = await self.repository.list_users(offset=(page - 1) * limit, limit=limit, search=term)
        return Page(data=users, meta=page_meta(total, page, limit))

    async def get_user(self, user_id: str) -> UserRecord:
        user = await self.repository.find_by_id(user_id)
        if not user:
            raise _not_found(user_id)
        return user

    async def update_user(self, user_id: str, changes: Mapping[str, Any]) -> UserRecord:
        """Apply profile changes; credential and verification fields are not editable here."""
        fields = {key: value for key, value in changes.items() if key in PROFILE_FIELDS}
        for key in REQUIRED_FIELDS:
            if key in fields and fields[key] is None:
                raise BadRequestError(f"{key.replace('_', ' ')} cannot be null")
        if "email" in fields:
            fields["email"] = (fields["email"] or "").strip() or None
            if fields["email"]:
                owner = await self.repository.find_by_email(fields["email"])
                if owner and owner.id != user_id:
                    raise ConflictError("email already exists")
        try:
            user = await self.repository.update_user(user_id, **fields)
        except DuplicateRecordError as exc:
            raise ConflictError("email already exists") from exc
        if not user:
            raise _not_found(user_id)
        logger.info("Updated profile of user %s (%s)", user_id, ", ".join(sorted(fields)) or "no changes")
        return user

    async def delete_user(self, user_id: str) -> dict[str, str]:
        if not await self.repository.delete_user(user_id):
            raise _not_found(user_id)
        logger.info("Deleted user %s", user_id)
        return {"message": "User deleted successfully"}
