"""Farm use cases (list, read, update, delete)."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from farmer_api.core.utils import Page, normalize_paging, page_meta
from farmer_api.repositories import FarmRecord, SQLRepository
from farmer_api.repositories.sql_repository import FARM_FIELDS
from farmer_api.services.errors import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "county", "administrative_location", "size", "ownership")


def _not_found(farm_id: str) -> NotFoundError:
    return NotFoundError(f"Farm with ID {farm_id} not found")


@dataclass
class FarmService:
    repository: Optional[SQLRepository] = None

    def __post_init__(self):
        if self.repository is None:
            self.repository = SQLRepository()

    async def list_farms(self, page: Optional[int] = None, limit: Optional[int] = None, search: Optional[str] = None) -> Page[FarmRecord]:
        page, limit = normalize_paging(page, limit)
        term = (search or "").strip() or None
        farms, total = await self.repository.list_farms(offset=(page - 1) * limit, limit=limit, search=term)
        return Page(data=farms, meta=page_meta(total, page, limit))

    async def get_farm(self, farm_id: str) -> FarmRecord:
        farm = await self.repository.find_farm(farm_id)
        if not farm:
            raise _not_found(farm_id)
        return farm

    async def update_farm(self, farm_id: str, changes: Mapping[str, Any]) -> FarmRecord:
        fields = {key: value for key, value in changes.items() if key in FARM_FIELDS}
        for key in REQUIRED_FIELDS:
            if key in fields and fields[key] is None:
                raise BadRequestError(f"{key.replace('_', ' ')} cannot be null")
        if "farming_types" in fields and not fields["farming_types"]:
            raise BadRequestError("at least one farming type is required")
        farm = await self.repository.update_farm(farm_id, **fields)
        if not farm:
            raise _not_found(farm_id)
        logger.info("Updated farm %s", farm_id)
        return farm

    async def delete_farm(self, farm_id: str) -> dict[str, str]:
        if not await self.repository.delete_farm(farm_id):
            raise _not_found(farm_id)
        logger.info("Deleted farm %s", farm_id)
        return {"message": "Farm deleted successfully"}
