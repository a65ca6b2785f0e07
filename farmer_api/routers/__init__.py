"""
FastAPI routers grouped by domain (auth, users, farms).

Each file inside this package exposes an APIRouter that is included in the
main application (app.py). Routers translate HTTP bodies into service calls
and service records into response schemas; they hold no business rules.
"""

from __future__ import annotations

from dataclasses import asdict

from farmer_api.repositories import FarmRecord, UserRecord
from farmer_api.schemas import FarmOut, UserOut


def user_out(record: UserRecord) -> UserOut:
    return UserOut.model_validate(asdict(record))


def farm_out(record: FarmRecord) -> FarmOut:
    return FarmOut.model_validate(asdict(record))
