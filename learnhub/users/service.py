from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from datetime import datetime
import logging
import uuid

from learnhub.core.errors import NotFound, EmailTaken, GenerationExhausted
from learnhub.identifiers.generator import IdKind
from learnhub.referrals.linker import ReferralLinker

logger = logging.getLogger(__name__)


async def register_user(db: AsyncIOMotorDatabase, linker: ReferralLinker, data: dict) -> dict:
    """
    Store a new user profile and hand out their own referral code
    A referred_by code is checked before anything is written
    """
    referred_by = data.get("referred_by")
    if referred_by:
        await linker.resolve_code(referred_by)

    now = datetime.utcnow()
    user = {
        "user_id": f"USR_{uuid.uuid4().hex[:12].upper()}",
        "first_name": data["first_name"].strip(),
        "last_name": data["last_name"].strip(),
        "email": data["email"].strip().lower(),
        "phone": data.get("phone"),
        "role": data.get("role", "jobseeker"),
        "points": 0,
        "created_at": now,
        "updated_at": now,
    }
    if referred_by:
        user["referred_by"] = referred_by

    for _ in range(linker.generator.max_attempts):
        user["referral_code"] = await linker.generator.generate(IdKind.REFERRAL)
        try:
            await db.users.insert_one(user)
            break
        except DuplicateKeyError:
            user.pop("_id", None)
            if await db.users.find_one({"email": user["email"]}, {"_id": 1}):
                raise EmailTaken()
            # Referral code taken since it was generated
            logger.warning("Referral code %s claimed concurrently, regenerating", user["referral_code"])
    else:
        raise GenerationExhausted("Could not assign a referral code")

    user.pop("_id", None)
    logger.info("Registered user %s (%s)", user["user_id"], user["role"])

    if referred_by:
        await linker.create_referral(user["user_id"], referred_by)

    return user


async def get_user(db: AsyncIOMotorDatabase, user_id: str) -> dict:
    user = await db.users.find_one({"user_id": user_id}, {"_id": 0})
    if not user:
        raise NotFound("User not found")
    return user
