"""Configuration for the HealthLink OTP subsystem."""

from datetime import timedelta
from enum import StrEnum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreBackend(StrEnum):
    """Where OTP records live."""

    SHARED = "shared"
    IN_PROCESS = "in-process"


class OTPSettings(BaseSettings):
    """
    OTP configuration, loaded from ``HEALTHLINK_OTP_*`` environment variables or ``.env``.

    Settings are frozen: the service captures one instance at construction and
    there is no runtime reconfiguration.

    Example:
        ```python
        settings = OTPSettings(backend=StoreBackend.SHARED, mail_enabled=True)
        settings.ttl  # timedelta(minutes=5)
        ```
    """

    model_config = SettingsConfigDict(
        env_prefix="HEALTHLINK_OTP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    backend: StoreBackend = StoreBackend.IN_PROCESS
    """``shared`` stores codes in Redis, ``in-process`` keeps them in memory."""

    mail_enabled: bool = False

    # OTP configuration
    code_length: int = Field(default=6, ge=4, le=10)
    ttl_minutes: float = Field(default=5, gt=0)

    # Rate limiting (shared backend only)
    max_attempts_per_window: int = Field(default=5, ge=1)
    window_hours: float = Field(default=1, gt=0)

    # In-process sweeper
    sweep_interval_minutes: float = Field(default=5, gt=0)

    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: float = 5.0

    expose_code: bool = False
    """Include the generated code in HTTP responses. Development and tests only."""

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=self.ttl_minutes)

    @property
    def window(self) -> timedelta:
        return timedelta(hours=self.window_hours)

    @property
    def sweep_interval(self) -> timedelta:
        return timedelta(minutes=self.sweep_interval_minutes)

    @property
    def uses_shared_store(self) -> bool:
        return self.backend is StoreBackend.SHARED


class MailSettings(BaseSettings):
    """SMTP relay settings, loaded from ``HEALTHLINK_MAIL_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HEALTHLINK_MAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    from_address: str = Field(default="noreply@healthlink.com", alias="HEALTHLINK_MAIL_FROM")
    from_name: str = "HealthLink Platform"

    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_start_tls: bool = True
    smtp_timeout: float = 30.0

    @field_validator("from_address")
    @classmethod
    def validate_from_address(cls, value: str) -> str:
        """
        Reject sender addresses that cannot possibly be delivered from.

        Raises:
            ValueError: If the address has no ``@``
        """
        if "@" not in value:
            raise ValueError("from_address must be an email address")
        return value
