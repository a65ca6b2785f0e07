"""
Smoke tests for the SQLRepository against a temporary SQLite database.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from conftest import farm, profile
from farmer_api.db.models import Farm
from farmer_api.db.session import get_session
from farmer_api.domain.otp import OtpPurpose, PendingOtp
from farmer_api.repositories import DuplicateRecordError, SQLRepository

EXPIRY = datetime(2025, 5, 7, 18, 0, tzinfo=timezone.utc)


async def _create(repo: SQLRepository, phone: str = "+254712345678", email: str | None = "mwangi@example.com", **profile_overrides):
    fields = {**profile(**profile_overrides), "phone_number": phone, "email": email}
    return await repo.create_user_with_farm(
        fields,
        farm(),
        pin_hash="argon2$hash",
        pending_otp=PendingOtp(code="123456", expires_at=EXPIRY),
    )


async def _farm_count() -> int:
    async with get_session() as session:
        return (await session.execute(select(func.count()).select_from(Farm))).scalar_one()


async def test_create_user_with_farm_and_lookups(repo):
    user = await _create(repo)

    assert user.id
    assert user.is_verified is False
    assert user.pending_otp == PendingOtp(code="123456", expires_at=EXPIRY, purpose=OtpPurpose.VERIFY)
    assert user.farm is not None
    assert user.farm.user_id == user.id
    assert user.farm.farming_types == ["Dairy cattle", "Poultry", "Crops"]
    assert not hasattr(user, "pin_hash")

    assert (await repo.find_by_phone("+254712345678")).id == user.id
    assert (await repo.find_by_email("mwangi@example.com")).id == user.id
    assert (await repo.find_by_id(user.id)).farm.name == "Kamau Mixed Farm"
    assert await repo.find_by_phone("+254700000000") is None
    assert await repo.find_by_id("missing") is None
    assert await repo.get_pin_hash(user.id) == "argon2$hash"


async def test_duplicate_phone_is_rejected_and_one_record_kept(repo):
    await _create(repo)

    with pytest.raises(DuplicateRecordError) as excinfo:
        await _create(repo, email="other@example.com")

    assert excinfo.value.field_name == "phone_number"
    users, total = await repo.list_users(offset=0, limit=10)
    assert total == 1
    assert await _farm_count() == 1


async def test_duplicate_email_is_rejected(repo):
    await _create(repo)

    with pytest.raises(DuplicateRecordError) as excinfo:
        await _create(repo, phone="+254700000001")

    assert excinfo.value.field_name == "email"


async def test_users_without_email_do_not_collide(repo):
    await _create(repo, email=None)
    await _create(repo, phone="+254700000001", email=None)

    _, total = await repo.list_users(offset=0, limit=10)
    assert total == 2


async def test_failed_farm_insert_rolls_back_the_user(repo):
    fields = {**profile(), "phone_number": "+254712345678", "email": None}
    broken_farm = farm(name=None)

    with pytest.raises(IntegrityError):
        await repo.create_user_with_farm(fields, broken_farm, pin_hash="argon2$hash", pending_otp=None)

    assert await repo.find_by_phone("+254712345678") is None
    assert await _farm_count() == 0


async def test_update_user_replaces_and_clears_the_otp_slot(repo):
    user = await _create(repo)
    reset = PendingOtp(code="654321", expires_at=EXPIRY + timedelta(hours=1), purpose=OtpPurpose.RESET)

    updated = await repo.update_user(user.id, pending_otp=reset)
    assert updated.pending_otp == reset

    cleared = await repo.update_user(user.id, pending_otp=None, is_verified=True)
    assert cleared.pending_otp is None
    assert cleared.is_verified is True

    assert await repo.update_user("missing", is_verified=True) is None
    with pytest.raises(ValueError):
        await repo.update_user(user.id, phone_number="+254799999999")


async def test_update_user_email_conflict(repo):
    await _create(repo)
    other = await _create(repo, phone="+254700000001", email="other@example.com")

    with pytest.raises(DuplicateRecordError):
        await repo.update_user(other.id, email="mwangi@example.com")


async def test_delete_user_cascades_to_farm(repo):
    user = await _create(repo)

    assert await repo.delete_user(user.id) is True
    assert await repo.find_by_id(user.id) is None
    assert await _farm_count() == 0
    assert await repo.delete_user(user.id) is False


async def test_list_users_search_and_paging(repo):
    await _create(repo, phone="+254700000001", email="a@example.com", first_name="Achieng", last_name="Otieno")
    await _create(repo, phone="+254700000002", email="b@example.com", first_name="Wanjiru", last_name="Kamau")
    await _create(repo, phone="+254711111111", email="c@example.com", first_name="Kiprop", last_name="Ruto")

    users, total = await repo.list_users(offset=0, limit=2)
    assert total == 3
    assert [u.first_name for u in users] == ["Kiprop", "Wanjiru"]

    users, total = await repo.list_users(offset=0, limit=10, search="kamau")
    assert total == 1
    assert users[0].first_name == "Wanjiru"

    users, total = await repo.list_users(offset=0, limit=10, search="71111")
    assert [u.first_name for u in users] == ["Kiprop"]


async def test_farm_crud_and_search(repo):
    user = await _create(repo)
    farm_id = user.farm.id

    found = await repo.find_farm(farm_id)
    assert found.owner.id == user.id
    assert found.owner.phone_number == "+254712345678"

    updated = await repo.update_farm(farm_id, size=7.25, farming_types=["Maize"])
    assert updated.size == 7.25
    assert updated.farming_types == ["Maize"]

    farms, total = await repo.list_farms(offset=0, limit=10, search="kikuyu")
    assert total == 1
    assert farms[0].owner.first_name == "Mwangi"
    _, total = await repo.list_farms(offset=0, limit=10, search="Nakuru")
    assert total == 0

    assert await repo.delete_farm(farm_id) is True
    assert await repo.find_farm(farm_id) is None
    assert (await repo.find_by_id(user.id)).farm is None
    assert await repo.update_farm(farm_id, size=1) is None


async def test_search_treats_wildcards_literally(repo):
    await _create(repo, phone="+254700000001", email="a@example.com", first_name="Achieng")
    await _create(repo, phone="+254700000002", email="b_c@example.com", first_name="Wanjiru")

    _, total = await repo.list_users(offset=0, limit=10, search="%")
    assert total == 0

    users, total = await repo.list_users(offset=0, limit=10, search="b_c")
    assert total == 1
    assert users[0].first_name == "Wanjiru"
    _, total = await repo.list_users(offset=0, limit=10, search="a_example")
    assert total == 0

    _, total = await repo.list_farms(offset=0, limit=10, search="%")
    assert total == 0
    _, total = await repo.list_farms(offset=0, limit=10, search="Kik_yu")
    assert total == 0
