from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.core.auth import UserContext, get_current_user
from learnhub.core.database import get_db
from learnhub.core.dependencies import get_linker
from learnhub.referrals.linker import ReferralLinker
from learnhub.users.models import UserCreate, UserResponse, UserRole
from learnhub.users import service

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    data: UserCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    linker: ReferralLinker = Depends(get_linker)
):
    """
    Create the user record (credentials are handled by the auth service)
    Optional referred_by links the new user to the referrer
    """
    if data.role == UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Admin accounts cannot self-register")
    return await service.register_user(db, linker, data.model_dump(mode="json"))


@router.get("/me", response_model=UserResponse)
async def get_me(
    user: UserContext = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.get_user(db, user.user_id)
