"""API router for OTP endpoints."""

from collections.abc import Callable
from typing import Any

from fastapi import (  # type: ignore[import-untyped]
    APIRouter,
    Depends,
    HTTPException,
    Query,
    status,
)
from pydantic import EmailStr  # type: ignore[import-untyped]

from healthlink_auth.db.protocols import UserDirectory
from healthlink_auth.schemas import (
    MessageResponse,
    OTPPurpose,
    OTPRequest,
    OTPVerify,
    VerificationResponse,
)
from healthlink_auth.service import OTPService

GENERIC_SENT_MESSAGE = "If an account exists for this email, an OTP code has been sent"


def _no_user_directory() -> None:
    return None


def get_otp_router(
    get_otp_service: Callable[..., OTPService],
    get_user_directory: Callable[..., UserDirectory[Any]] | None = None,
) -> APIRouter:
    """
    Create an APIRouter with OTP endpoints.

    Args:
        get_otp_service: Dependency returning the OTPService instance
        get_user_directory: Optional dependency returning a UserDirectory.
            When given, login and password-reset codes are only sent to
            known accounts, and registration verification marks the
            account's email as verified.

    Returns:
        Configured APIRouter instance

    Example:
        ```python
        from fastapi import FastAPI

        app = FastAPI()
        otp_router = get_otp_router(get_otp_service, get_user_directory)
        app.include_router(otp_router, prefix="/api/v1/auth", tags=["auth"])
        ```
    """
    router = APIRouter()
    directory_dependency = get_user_directory or _no_user_directory

    @router.post(
        "/request-otp",
        response_model=MessageResponse,
        status_code=status.HTTP_200_OK,
        summary="Request OTP code",
        description="Generate and email a one-time verification code",
    )
    async def request_otp(
        request: OTPRequest,
        service: OTPService = Depends(get_otp_service),
        directory: UserDirectory[Any] | None = Depends(directory_dependency),
    ) -> MessageResponse:
        """
        Request an OTP code for the given email.

        Unknown accounts get the same answer as known ones, and every email
        spends its rate-limit budget before the account lookup, so neither
        the answer nor a 429 reveals whether an email is registered.

        Raises:
            HTTPException: 429 if the email exhausted its request budget
        """
        email = str(request.email)
        registration = request.purpose is OTPPurpose.REGISTRATION

        admitted = False
        if directory is not None and not registration:
            await service.admit_request(email)
            admitted = True
            user = await directory.get_by_email(email)
            if user is None:
                return MessageResponse(message=GENERIC_SENT_MESSAGE)

        code = await service.generate(email, registration=registration, admitted=admitted)

        return MessageResponse(
            message=(
                GENERIC_SENT_MESSAGE
                if not service.settings.expose_code
                else f"Developer mode: OTP code is {code}"
            )
        )

    @router.post(
        "/verify-otp",
        response_model=VerificationResponse,
        status_code=status.HTTP_200_OK,
        summary="Verify OTP code",
        description="Verify and consume a one-time code",
    )
    async def verify_otp(
        request: OTPVerify,
        service: OTPService = Depends(get_otp_service),
        directory: UserDirectory[Any] | None = Depends(directory_dependency),
    ) -> VerificationResponse:
        """
        Verify an OTP code.

        Raises:
            HTTPException: 400 if the code is wrong, expired, or already used
        """
        email = str(request.email)
        if not await service.verify(email, request.code):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired OTP code",
            )

        if directory is not None and request.purpose is OTPPurpose.REGISTRATION:
            user = await directory.get_by_email(email)
            if user is not None and not user.is_email_verified:
                await directory.mark_email_verified(user)

        return VerificationResponse(verified=True)

    @router.delete(
        "/otp",
        response_model=MessageResponse,
        status_code=status.HTTP_200_OK,
        summary="Cancel OTP code",
        description="Discard any pending code for the email",
    )
    async def cancel_otp(
        email: EmailStr = Query(..., description="Email address whose code is discarded"),
        service: OTPService = Depends(get_otp_service),
    ) -> MessageResponse:
        await service.delete(str(email))
        return MessageResponse(message="OTP code cancelled")

    return router
