"""
User-related endpoints.

Provides endpoints for the signed-in user's own profile, onboarding,
activity and account deletion.
"""

from fastapi import APIRouter, Depends

from modules.accounts.interfaces import IAccountService
from modules.accounts.models import (
    AccountPublic,
    ActivityListResponse,
    DeleteAccountRequest,
    MessageResponse,
    ProfileUpdate,
    RequestContext,
)
from modules.accounts.routes import request_context
from shared.models import AuthenticatedUser

from ..dependencies import get_account_service
from ..middleware.auth import get_current_user

router = APIRouter()


@router.get("/me", response_model=AccountPublic)
async def get_current_user_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IAccountService = Depends(get_account_service),
) -> AccountPublic:
    """
    Get the current user's profile.

    Requires authentication.
    """
    return await service.get_account(user.id)


@router.put("/me", response_model=AccountPublic)
async def update_current_user_profile(
    update: ProfileUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> AccountPublic:
    """Update profile fields. Fields left out of the body are unchanged."""
    return await service.update_profile(user.id, update, context)


@router.post("/me/onboarding/complete", response_model=AccountPublic)
async def complete_onboarding(
    user: AuthenticatedUser = Depends(get_current_user),
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> AccountPublic:
    """
    Finish onboarding.

    Fails with MISSING_FIELDS listing every required profile field that is
    still empty.
    """
    return await service.complete_onboarding(user.id, context)


@router.get("/me/activity", response_model=ActivityListResponse)
async def get_own_activity(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IAccountService = Depends(get_account_service),
) -> ActivityListResponse:
    activities = await service.get_activity(user, user.id)
    return ActivityListResponse(account_id=user.id, activities=activities)


@router.delete("/me", response_model=MessageResponse)
async def delete_own_account(
    body: DeleteAccountRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> MessageResponse:
    """Delete the signed-in account. The current password is required."""
    return await service.delete_account(user.id, body.password, context)
