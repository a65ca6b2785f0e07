from __future__ import annotations

import re
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from argon2 import PasswordHasher

# Make the package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from farmer_api.core import config as core_config  # noqa: E402
from farmer_api.core.otp import OtpGenerator  # noqa: E402
from farmer_api.core.security import PinHasher  # noqa: E402
from farmer_api.domain.otp import OtpPurpose  # noqa: E402
from farmer_api.db import session as db_session  # noqa: E402
from farmer_api.db.create_tables import create_all, drop_all  # noqa: E402
from farmer_api.repositories import SQLRepository  # noqa: E402
from farmer_api.services.auth_service import AuthService  # noqa: E402

CODE_PATTERN = re.compile(r"\b(\d{6})\b")


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeSmsGateway:
    """Records outgoing messages; ``succeed`` controls the delivery result."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.error: BaseException | None = None
        self.sent: list[tuple[str, str]] = []

    async def send_sms(self, phone_number: str, message: str) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append((phone_number, message))
        return self.succeed

    def last_code(self) -> str:
        _phone, message = self.sent[-1]
        return CODE_PATTERN.search(message).group(1)


class RecordingOtpGenerator(OtpGenerator):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.issued = []

    def generate(self, purpose: OtpPurpose = OtpPurpose.VERIFY):
        pending = super().generate(purpose)
        self.issued.append(pending)
        return pending

    @property
    def last_code(self) -> str:
        return self.issued[-1].code


def _reset_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
async def db_env(tmp_path, monkeypatch):
    """Point the app at a temporary SQLite file and reset the settings/engine caches."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{db_file}")
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("SMS_BACKEND", "console")
    _reset_caches()
    await create_all()

    yield db_file

    await drop_all()
    await db_session.get_engine().dispose()
    _reset_caches()


@pytest.fixture()
def clock():
    return FrozenClock(datetime(2025, 5, 7, 17, 46, 51, tzinfo=timezone.utc))


@pytest.fixture()
def sms():
    return FakeSmsGateway()


@pytest.fixture(scope="session")
def hasher():
    # Cheap Argon2 parameters keep the suite fast; the format is unchanged.
    return PinHasher(PasswordHasher(time_cost=1, memory_cost=8, parallelism=1))


@pytest.fixture()
def otp_generator(clock):
    return RecordingOtpGenerator(ttl=timedelta(minutes=10), clock=clock)


@pytest.fixture()
def repo(db_env):
    return SQLRepository()


@pytest.fixture()
def auth(repo, hasher, otp_generator, sms, clock):
    return AuthService(repository=repo, hasher=hasher, otp_generator=otp_generator, sms_gateway=sms, clock=clock)


def profile(**overrides):
    data = {
        "first_name": "Mwangi",
        "middle_name": "Kamau",
        "last_name": "Kariuki",
        "gender": "Male",
        "age_group": "35-44",
        "residence_county": "Kiambu",
        "residence_location": "Kikuyu Town",
        "business_number": "+254720123456",
        "years_of_experience": 8,
    }
    data.update(overrides)
    return data


def farm(**overrides):
    data = {
        "name": "Kamau Mixed Farm",
        "county": "Kiambu",
        "administrative_location": "Kikuyu",
        "size": 5.5,
        "ownership": "Freehold",
        "farming_types": ["Dairy cattle", "Poultry", "Crops"],
    }
    data.update(overrides)
    return data
