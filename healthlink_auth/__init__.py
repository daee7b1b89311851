"""HealthLink Auth - email OTP generation, storage, rate limiting and verification."""

from healthlink_auth.config import MailSettings, OTPSettings, StoreBackend
from healthlink_auth.db import (
    BaseHealthLinkUserTable,
    SQLAlchemyUserDirectory,
    UserDirectory,
    UserRole,
)
from healthlink_auth.exceptions import (
    MailSendError,
    OTPRateLimitExceeded,
    OTPStoreUnavailableError,
)
from healthlink_auth.mail import MailDispatcher
from healthlink_auth.router import get_otp_router
from healthlink_auth.runtime import OTPRuntime, build_otp_runtime, otp_lifespan
from healthlink_auth.safe_logger import SafeLogger, mask_email
from healthlink_auth.schemas import (
    MessageResponse,
    OTPPurpose,
    OTPRequest,
    OTPVerify,
    VerificationResponse,
)
from healthlink_auth.security import generate_otp, generate_temporary_password
from healthlink_auth.service import OTPService
from healthlink_auth.store import InMemoryOTPStore, OTPSweeper, RedisOTPStore

__version__ = "0.1.0"

__all__ = [
    "BaseHealthLinkUserTable",
    "InMemoryOTPStore",
    "MailDispatcher",
    "MailSendError",
    "MailSettings",
    "MessageResponse",
    "OTPPurpose",
    "OTPRateLimitExceeded",
    "OTPRequest",
    "OTPRuntime",
    "OTPService",
    "OTPSettings",
    "OTPStoreUnavailableError",
    "OTPSweeper",
    "OTPVerify",
    "RedisOTPStore",
    "SQLAlchemyUserDirectory",
    "SafeLogger",
    "StoreBackend",
    "UserDirectory",
    "UserRole",
    "VerificationResponse",
    "build_otp_runtime",
    "generate_otp",
    "generate_temporary_password",
    "get_otp_router",
    "mask_email",
    "otp_lifespan",
]
