"""Database model mixin for HealthLink users."""

from sqlalchemy import Boolean, Enum, String
from sqlalchemy.orm import Mapped, mapped_column  # type: ignore[import-untyped]

from healthlink_auth.db.protocols import UserRole


class BaseHealthLinkUserTable:
    """
    Mixin with the user columns the OTP flows read and write.

    Required fields:
        - email: Login email (unique, indexed); OTPs are keyed by it
        - role: Account role
        - is_email_verified: Set after a successful registration OTP
        - is_active: Inactive accounts are treated as unknown

    Example:
        ```python
        from sqlalchemy.orm import DeclarativeBase

        class Base(DeclarativeBase):
            pass

        class User(BaseHealthLinkUserTable, Base):
            __tablename__ = "users"

            id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
            full_name: Mapped[str] = mapped_column(String(100))
        ```
    """

    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=32),
        default=UserRole.PATIENT,
        nullable=False,
    )

    is_email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
