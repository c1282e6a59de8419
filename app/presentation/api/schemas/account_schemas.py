"""Pydantic schemas for account authentication endpoints.

Fields are optional on purpose: presence is one of the rules enforced by the
account workflows, which report it as ``MissingFields``.
"""

from typing import Optional

from pydantic import BaseModel


class SignUpRequest(BaseModel):
    """Request schema for account registration."""

    fullname: Optional[str] = None
    email: Optional[str] = None
    current_password: Optional[str] = None


class SignUpResponse(BaseModel):
    """Response schema for account registration."""

    message: str
    userId: int
    email: str


class SignInRequest(BaseModel):
    """Request schema for the password step of sign-in."""

    email: Optional[str] = None
    current_password: Optional[str] = None


class CodeRequest(BaseModel):
    """Request schema carrying an emailed or texted code."""

    email: Optional[str] = None
    code: Optional[str] = None


class ResendRequest(BaseModel):
    """Request schema to resend the verification code."""

    email: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    message: str
    token: str
