"""
Admin endpoints.

Account moderation and reviewer approval. Every route requires an admin
token; admin accounts themselves cannot be blocked, suspended or deleted
from here.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from modules.accounts.interfaces import IAccountService
from modules.accounts.models import (
    AccountListResponse,
    AccountPublic,
    ActivityListResponse,
    MessageResponse,
    ModerationRequest,
    RequestContext,
)
from modules.accounts.routes import request_context
from shared.models import AuthenticatedUser

from ..dependencies import get_account_service
from ..middleware.auth import require_admin

router = APIRouter()


@router.get("/users", response_model=AccountListResponse)
async def list_users(
    email: Optional[str] = Query(default=None, description="Substring match on email"),
    admin: AuthenticatedUser = Depends(require_admin),
    service: IAccountService = Depends(get_account_service),
) -> AccountListResponse:
    """List accounts, oldest first, optionally filtered by email."""
    accounts = await service.list_accounts(admin, email)
    return AccountListResponse(accounts=accounts, count=len(accounts))


@router.get("/users/{account_id}/activity", response_model=ActivityListResponse)
async def get_user_activity(
    account_id: str,
    admin: AuthenticatedUser = Depends(require_admin),
    service: IAccountService = Depends(get_account_service),
) -> ActivityListResponse:
    activities = await service.get_activity(admin, account_id)
    return ActivityListResponse(account_id=account_id, activities=activities)


@router.post("/users/{account_id}/block", response_model=AccountPublic)
async def block_user(
    account_id: str,
    body: Optional[ModerationRequest] = None,
    admin: AuthenticatedUser = Depends(require_admin),
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> AccountPublic:
    reason = body.reason if body else None
    return await service.block_account(admin, account_id, reason, context)


@router.post("/users/{account_id}/unblock", response_model=AccountPublic)
async def unblock_user(
    account_id: str,
    admin: AuthenticatedUser = Depends(require_admin),
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> AccountPublic:
    return await service.unblock_account(admin, account_id, context)


@router.post("/users/{account_id}/suspend", response_model=AccountPublic)
async def suspend_user(
    account_id: str,
    body: Optional[ModerationRequest] = None,
    admin: AuthenticatedUser = Depends(require_admin),
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> AccountPublic:
    reason = body.reason if body else None
    return await service.suspend_account(admin, account_id, reason, context)


@router.post("/users/{account_id}/unsuspend", response_model=AccountPublic)
async def unsuspend_user(
    account_id: str,
    admin: AuthenticatedUser = Depends(require_admin),
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> AccountPublic:
    return await service.unsuspend_account(admin, account_id, context)


@router.delete("/users/{account_id}", response_model=MessageResponse)
async def delete_user(
    account_id: str,
    admin: AuthenticatedUser = Depends(require_admin),
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> MessageResponse:
    return await service.admin_delete_account(admin, account_id, context)


@router.post("/users/{account_id}/reset-onboarding", response_model=AccountPublic)
async def reset_user_onboarding(
    account_id: str,
    admin: AuthenticatedUser = Depends(require_admin),
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> AccountPublic:
    """Clear the onboarding profile so the user goes through it again."""
    return await service.reset_onboarding(admin, account_id, context)


@router.post("/reviewers/{account_id}/approve", response_model=AccountPublic)
async def approve_reviewer(
    account_id: str,
    admin: AuthenticatedUser = Depends(require_admin),
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> AccountPublic:
    return await service.approve_reviewer(admin, account_id, context)


@router.post("/reviewers/{account_id}/reject", response_model=AccountPublic)
async def reject_reviewer(
    account_id: str,
    body: Optional[ModerationRequest] = None,
    admin: AuthenticatedUser = Depends(require_admin),
    context: RequestContext = Depends(request_context),
    service: IAccountService = Depends(get_account_service),
) -> AccountPublic:
    reason = body.reason if body else None
    return await service.reject_reviewer(admin, account_id, reason, context)
