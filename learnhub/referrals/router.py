from fastapi import APIRouter, Depends, Query
from typing import List

from learnhub.core.auth import UserContext, get_current_user, require_admin
from learnhub.core.dependencies import get_linker
from learnhub.referrals.linker import ReferralLinker
from learnhub.referrals.models import (
    ReferralCreate, ReferralStatusUpdate, ReferralResponse, ReferralCodeResponse
)

router = APIRouter(prefix="/referrals", tags=["Referrals"])


@router.post("", response_model=ReferralResponse, status_code=201)
async def create_referral(
    data: ReferralCreate,
    linker: ReferralLinker = Depends(get_linker),
    admin: UserContext = Depends(require_admin)
):
    return await linker.create_referral(data.referred_user_id, data.referral_code)


@router.get("", response_model=List[ReferralResponse])
async def all_referrals(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    linker: ReferralLinker = Depends(get_linker),
    admin: UserContext = Depends(require_admin)
):
    return await linker.list_all(skip, limit)


@router.get("/my-referrals", response_model=List[ReferralResponse])
async def my_referrals(
    linker: ReferralLinker = Depends(get_linker),
    user: UserContext = Depends(get_current_user)
):
    return await linker.list_for_referrer(user.user_id)


@router.get("/my-code", response_model=ReferralCodeResponse)
async def my_referral_code(
    linker: ReferralLinker = Depends(get_linker),
    user: UserContext = Depends(get_current_user)
):
    """Users registered before codes existed get one on first request"""
    return {"referral_code": await linker.get_or_create_referral_code(user.user_id)}


@router.get("/{referral_id}", response_model=ReferralResponse)
async def get_referral(
    referral_id: str,
    linker: ReferralLinker = Depends(get_linker),
    admin: UserContext = Depends(require_admin)
):
    return await linker.get(referral_id)


@router.patch("/{referral_id}", response_model=ReferralResponse)
async def update_referral_status(
    referral_id: str,
    data: ReferralStatusUpdate,
    linker: ReferralLinker = Depends(get_linker),
    admin: UserContext = Depends(require_admin)
):
    """Approving rewards the referrer once; repeating it is a no-op"""
    return await linker.update_status(referral_id, data.status)
