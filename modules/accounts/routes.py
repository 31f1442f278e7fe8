"""
Auth API endpoints.

Signup, email verification, sign-in and password reset. None of these
require a token; everything account-scoped lives under /api/users and
/api/admin.
"""

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_account_service

from .interfaces import IAccountService
from .models import (
    AuthResult,
    EmailRequest,
    MessageResponse,
    RequestContext,
    ResetPasswordRequest,
    SignInRequest,
    SignUpRequest,
    SignUpResult,
    VerifyEmailRequest,
)

router = APIRouter()


def request_context(request: Request) -> RequestContext:
    """Capture caller IP and user agent for the activity log."""
    return RequestContext(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


@router.post("/signup", response_model=SignUpResult, status_code=201)
async def sign_up(
    body: SignUpRequest,
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> SignUpResult:
    """
    Create an account and email a verification code.

    The account cannot sign in until the code is confirmed via
    /verify-email.
    """
    return await service.sign_up(body, context)


@router.post("/verify-email", response_model=AuthResult)
async def verify_email(
    body: VerifyEmailRequest,
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> AuthResult:
    """Confirm the emailed code. Returns a session token on success."""
    return await service.verify_email(body.email, body.code, context)


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    body: EmailRequest,
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> MessageResponse:
    return await service.resend_verification(body.email, context)


@router.post("/signin", response_model=AuthResult)
async def sign_in(
    body: SignInRequest,
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> AuthResult:
    """
    Sign in with email and password.

    Five consecutive failures lock the account for two hours (423).
    """
    return await service.sign_in(body, context)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: EmailRequest,
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> MessageResponse:
    return await service.request_password_reset(body.email, context)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> MessageResponse:
    return await service.reset_password(body.email, body.code, body.new_password, context)
