from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum


class ReferralStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class ReferralCreate(BaseModel):
    referred_user_id: str
    referral_code: str

class ReferralStatusUpdate(BaseModel):
    # Plain str so unknown values reach the linker and fail as InvalidStatus
    status: str

class ReferralParty(BaseModel):
    user_id: str
    first_name: str
    last_name: str
    email: str

class ReferralResponse(BaseModel):
    referral_id: str
    referrer_id: str
    referred_user_id: str
    referral_code: str
    status: ReferralStatus
    referrer: Optional[ReferralParty] = None
    referred_user: Optional[ReferralParty] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

class ReferralCodeResponse(BaseModel):
    referral_code: str
