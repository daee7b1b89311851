"""Pydantic schemas for request/response models."""

from enum import StrEnum

from pydantic import BaseModel, EmailStr, Field  # type: ignore[import-untyped]


class OTPPurpose(StrEnum):
    """Workflow an OTP is requested for."""

    REGISTRATION = "registration"
    LOGIN = "login"
    PASSWORD_RESET = "password_reset"


class OTPRequest(BaseModel):
    """Request schema for OTP generation."""

    email: EmailStr = Field(..., description="Email address to send OTP code to")
    purpose: OTPPurpose = Field(
        default=OTPPurpose.LOGIN, description="Workflow the code is requested for"
    )


class OTPVerify(BaseModel):
    """Request schema for OTP verification."""

    email: EmailStr = Field(..., description="Email address the code was sent to")
    code: str = Field(
        ..., min_length=4, max_length=10, pattern=r"^[0-9]+$", description="OTP code to verify"
    )
    purpose: OTPPurpose = Field(
        default=OTPPurpose.LOGIN, description="Workflow the code was requested for"
    )


class MessageResponse(BaseModel):
    """Generic message response schema."""

    message: str = Field(..., description="Response message")


class VerificationResponse(BaseModel):
    """Response schema for a successful verification."""

    verified: bool = Field(..., description="Whether the code was accepted")
