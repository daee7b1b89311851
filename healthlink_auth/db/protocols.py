"""Protocols describing the user directory the OTP flows read from."""

from enum import StrEnum
from typing import Any, Protocol, TypeVar, runtime_checkable


class UserRole(StrEnum):
    """Roles a HealthLink account can hold."""

    PATIENT = "PATIENT"
    DOCTOR = "DOCTOR"
    STAFF = "STAFF"
    ORGANIZATION = "ORGANIZATION"
    PLATFORM_OWNER = "PLATFORM_OWNER"
    ADMIN = "ADMIN"


@runtime_checkable
class HealthLinkUserProtocol(Protocol):
    """
    Attributes the OTP flows need from a user record.

    Any user model (SQLAlchemy, Pydantic, etc.) can back the directory as long
    as it provides these.
    """

    id: Any
    email: str
    role: UserRole
    is_email_verified: bool
    is_active: bool


UserType = TypeVar("UserType", bound=HealthLinkUserProtocol)


@runtime_checkable
class UserDirectory(Protocol[UserType]):
    """Lookup of users by email, plus the single write the OTP flow performs."""

    async def get_by_email(self, email: str) -> UserType | None:
        """Return the user registered under ``email``, if any."""
        ...

    async def mark_email_verified(self, user: UserType) -> None:
        """Record that the user proved ownership of their email."""
        ...
