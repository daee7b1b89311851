"""Test configuration and fixtures."""

import logging
import random
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fakeredis import FakeAsyncRedis, FakeServer
from sqlalchemy import Integer, String
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from healthlink_auth.config import OTPSettings, StoreBackend
from healthlink_auth.db.models import BaseHealthLinkUserTable
from healthlink_auth.db.protocols import UserRole
from healthlink_auth.db.sqlalchemy.adapter import SQLAlchemyUserDirectory
from healthlink_auth.exceptions import MailSendError
from healthlink_auth.safe_logger import AuditEvent, SafeLogger
from healthlink_auth.service import OTPService
from healthlink_auth.store.memory.adapter import InMemoryOTPStore
from healthlink_auth.store.redis.adapter import RedisOTPStore

# ============================================================================
# Database Models for Testing
# ============================================================================


class Base(DeclarativeBase):
    """Base class for test database models."""


class User(BaseHealthLinkUserTable, Base):
    """Test user model."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)


# ============================================================================
# Test Doubles
# ============================================================================


class RecordingSafeLogger(SafeLogger):
    """Safe logger that keeps every emitted event for assertions."""

    def __init__(self) -> None:
        super().__init__(logging.getLogger("tests.audit"))
        self.events: list[tuple[str, dict[str, Any], int]] = []

    def emit(self, event: AuditEvent, level: int) -> None:
        self.events.append((event.name, dict(event.fields), level))
        super().emit(event, level)

    @property
    def names(self) -> list[str]:
        return [name for name, _, _ in self.events]

    def find(self, name: str) -> list[dict[str, Any]]:
        return [fields for event, fields, _ in self.events if event == name]


class RecordingMailer:
    """Mailer that records messages instead of talking to SMTP."""

    def __init__(self) -> None:
        self.sync_sent: list[tuple[str, str, str]] = []
        self.async_sent: list[tuple[str, str, str]] = []
        self.fail_sync = False

    async def send_sync(self, to: str, subject: str, body: str) -> None:
        if self.fail_sync:
            raise MailSendError(to, "Connection refused")
        self.sync_sent.append((to, subject, body))

    def send_async(self, to: str, subject: str, body: str) -> None:
        self.async_sent.append((to, subject, body))

    @property
    def all_sent(self) -> list[tuple[str, str, str]]:
        return self.sync_sent + self.async_sent


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


# ============================================================================
# Basic Fixtures
# ============================================================================


@pytest.fixture
def audit() -> RecordingSafeLogger:
    """Provide an event-recording safe logger."""
    return RecordingSafeLogger()


@pytest.fixture
def mailer() -> RecordingMailer:
    """Provide a recording mailer."""
    return RecordingMailer()


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    """Provide a seeded random source."""
    return random.Random(1234)


@pytest.fixture
def memory_settings() -> OTPSettings:
    """In-process backend with mail enabled."""
    return OTPSettings(backend=StoreBackend.IN_PROCESS, mail_enabled=True, _env_file=None)


@pytest.fixture
def shared_settings() -> OTPSettings:
    """Shared backend with mail enabled and the default limits."""
    return OTPSettings(backend=StoreBackend.SHARED, mail_enabled=True, _env_file=None)


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def memory_store(clock: FakeClock) -> InMemoryOTPStore:
    """Create an in-memory store driven by the fake clock."""
    return InMemoryOTPStore(clock=clock)


@pytest.fixture
async def redis_client():  # type: ignore[no-untyped-def]
    """Create a fake Redis client with its own server."""
    client = FakeAsyncRedis(server=FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def redis_store(redis_client: FakeAsyncRedis, audit: RecordingSafeLogger) -> RedisOTPStore:
    """Create a Redis store on the fake server."""
    return RedisOTPStore(redis_client, audit)


@pytest.fixture
def unreachable_redis_store(audit: RecordingSafeLogger) -> RedisOTPStore:
    """Create a Redis store whose server refuses every connection."""
    server = FakeServer()
    server.connected = False
    return RedisOTPStore(FakeAsyncRedis(server=server, decode_responses=True), audit)


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def memory_service(
    memory_settings: OTPSettings,
    memory_store: InMemoryOTPStore,
    mailer: RecordingMailer,
    audit: RecordingSafeLogger,
    rng: random.Random,
) -> OTPService:
    """OTP service on the in-process backend."""
    return OTPService(memory_settings, memory_store, mailer, audit, rng=rng)


@pytest.fixture
def shared_service(
    shared_settings: OTPSettings,
    redis_store: RedisOTPStore,
    mailer: RecordingMailer,
    audit: RecordingSafeLogger,
    rng: random.Random,
) -> OTPService:
    """OTP service on the shared (Redis) backend."""
    return OTPService(shared_settings, redis_store, mailer, audit, rng=rng)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def async_engine():  # type: ignore[no-untyped-def]
    """Create an async SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def async_session(async_engine) -> AsyncSession:  # type: ignore[no-untyped-def]
    """Create an async database session."""
    async_session_maker = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session_maker() as session:
        yield session


@pytest.fixture
async def user_directory(async_session: AsyncSession) -> SQLAlchemyUserDirectory[User]:
    """Create a SQLAlchemyUserDirectory instance."""
    return SQLAlchemyUserDirectory(async_session, User)


@pytest.fixture
async def patient(async_session: AsyncSession) -> User:
    """Create an active, unverified patient."""
    user = User(email="patient@example.com", role=UserRole.PATIENT, full_name="Ayesha Khan")
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


@pytest.fixture
async def inactive_doctor(async_session: AsyncSession) -> User:
    """Create a deactivated doctor account."""
    user = User(email="doctor@example.com", role=UserRole.DOCTOR, is_active=False)
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user
