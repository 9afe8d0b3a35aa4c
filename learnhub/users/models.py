from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum

# ==================== ENUMS ====================

class UserRole(str, Enum):
    JOBSEEKER = "jobseeker"
    EMPLOYER = "employer"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"

# ==================== USER MODELS ====================

class UserCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=254)
    phone: Optional[str] = None
    role: UserRole = UserRole.JOBSEEKER
    referred_by: Optional[str] = None  # referral code of the referrer

class UserResponse(BaseModel):
    user_id: str
    first_name: str
    last_name: str
    email: str
    role: UserRole
    referral_code: Optional[str] = None
    referred_by: Optional[str] = None
    points: int = 0
    created_at: datetime
