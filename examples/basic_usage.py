"""Example FastAPI application with HealthLink OTP endpoints.

This example demonstrates:
- Setting up a user model with BaseHealthLinkUserTable
- Building the OTP runtime from environment settings
- Starting the sweeper and draining background mail with the app lifespan
- Registering the OTP router with a user directory
- Creating an emergency patient with a temporary password
"""
import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from sqlalchemy import Integer, String
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from healthlink_auth import (
    BaseHealthLinkUserTable,
    OTPService,
    SQLAlchemyUserDirectory,
    UserRole,
    build_otp_runtime,
    generate_temporary_password,
    get_otp_router,
    otp_lifespan,
)

# Database configuration
DATABASE_URL = "sqlite+aiosqlite:///./healthlink.db"

logging.basicConfig(level=logging.INFO)


class Base(DeclarativeBase):
    pass


class User(BaseHealthLinkUserTable, Base):
    """HealthLink account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)


engine = create_async_engine(DATABASE_URL, echo=False)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)

# Reads HEALTHLINK_OTP_* and HEALTHLINK_MAIL_* from the environment / .env
otp_runtime = build_otp_runtime()


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


async def get_user_directory(
    session: AsyncSession = Depends(get_async_session),
) -> SQLAlchemyUserDirectory[User]:
    return SQLAlchemyUserDirectory(session, User)


def get_otp_service() -> OTPService:
    return otp_runtime.service


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with otp_lifespan(otp_runtime):
        yield
    await engine.dispose()


app = FastAPI(title="HealthLink Auth", lifespan=lifespan)
app.include_router(
    get_otp_router(get_otp_service, get_user_directory),
    prefix="/api/v1/auth",
    tags=["auth"],
)


@app.post("/api/v1/doctors/emergency-patients")
async def create_emergency_patient(
    full_name: str,
    phone_number: str,
    session: AsyncSession = Depends(get_async_session),
) -> dict[str, str]:
    """Create a pre-verified patient account and hand back a temporary password.

    The password is returned for display only and is not persisted, so the
    account cannot log in with it. A real handler hashes it with the
    application's password hasher and stores the hash on the user row.
    """
    temporary_password = generate_temporary_password()
    patient = User(
        email=f"{phone_number.lstrip('+')}@emergency.healthlink.local",
        full_name=full_name,
        phone_number=phone_number,
        role=UserRole.PATIENT,
        is_email_verified=True,
    )
    session.add(patient)
    await session.commit()
    return {"email": patient.email, "temporary_password": temporary_password}
