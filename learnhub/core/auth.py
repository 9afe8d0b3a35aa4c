from fastapi import Depends, Header, HTTPException
from jose import jwt, JWTError
from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.core import config
from learnhub.core.database import get_db
from learnhub.users.models import UserRole


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or Expired Token")


def verify_token(authorization: str = Header(None)) -> dict:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return decode_token(authorization.split(" ", 1)[1])


class UserContext:
    """
    Validated caller profile
    """
    def __init__(self, user_id: str, profile: dict):
        self.user_id = user_id
        self.email = profile.get("email")
        self.role = profile.get("role", UserRole.JOBSEEKER.value)
        self.profile = profile

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


async def get_current_user(
    payload: dict = Depends(verify_token),
    db: AsyncIOMotorDatabase = Depends(get_db)
) -> UserContext:
    """
    Dependency: resolves the token subject to a stored user

    Raises:
        401: Invalid token or unknown user
    """
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: missing user_id")

    profile = await db.users.find_one({"user_id": user_id})
    if not profile:
        raise HTTPException(status_code=401, detail="User no longer exists")

    return UserContext(user_id, profile)


async def require_admin(user: UserContext = Depends(get_current_user)) -> UserContext:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Access denied. Admin privileges required.")
    return user


async def require_instructor(user: UserContext = Depends(get_current_user)) -> UserContext:
    if user.role not in (UserRole.INSTRUCTOR.value, UserRole.ADMIN.value):
        raise HTTPException(status_code=403, detail="Access denied. Instructor privileges required.")
    return user
