"""API router for account registration, verification and two-step sign-in.

Workflow failures are raised as ``AuthError`` and rendered by the
application-level exception handler.
"""

from fastapi import APIRouter, Depends, status

from ....application.services.account_service import AccountService
from ....core.dependencies import get_account_service
from ..schemas.account_schemas import (
    CodeRequest,
    MessageResponse,
    ResendRequest,
    SignInRequest,
    SignUpRequest,
    SignUpResponse,
    TokenResponse,
)

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


@router.post("/signup", response_model=SignUpResponse, status_code=status.HTTP_201_CREATED)
def sign_up(
    payload: SignUpRequest,
    account_service: AccountService = Depends(get_account_service),
) -> SignUpResponse:
    result = account_service.sign_up(payload.fullname, payload.email, payload.current_password)
    return SignUpResponse(message="User created successfully", userId=result.user_id, email=result.email)


@router.post("/verify", response_model=TokenResponse)
def verify(
    payload: CodeRequest,
    account_service: AccountService = Depends(get_account_service),
) -> TokenResponse:
    token = account_service.verify_email(payload.email, payload.code)
    return TokenResponse(message="Account verified successfully", token=token)


@router.post("/resend", response_model=MessageResponse)
def resend(
    payload: ResendRequest,
    account_service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    account_service.resend_verification_code(payload.email)
    return MessageResponse(message="Verification code sent successfully. Please check your email.")


@router.post("/signin", response_model=MessageResponse)
def sign_in(
    payload: SignInRequest,
    account_service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    account_service.sign_in(payload.email, payload.current_password)
    return MessageResponse(message="2FA code sent")


@router.post("/signin/verify", response_model=TokenResponse)
def confirm_second_factor(
    payload: CodeRequest,
    account_service: AccountService = Depends(get_account_service),
) -> TokenResponse:
    token = account_service.confirm_second_factor(payload.email, payload.code)
    return TokenResponse(message="Login successful", token=token)
