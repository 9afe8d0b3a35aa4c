"""
Referral linking and rewards

A referred user appears in at most one referral, ever (unique index on
referred_user_id). Approval rewards the referrer once per transition into
"approved": the status write only matches when the stored status differs,
so repeating an approval changes nothing and awards nothing.
"""

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from datetime import datetime
from typing import List, Optional
import logging
import uuid

from learnhub.core import config
from learnhub.core.errors import NotFound, AlreadyReferred, CodeNotFound, InvalidStatus, GenerationExhausted
from learnhub.identifiers.generator import IdentifierGenerator, IdKind
from learnhub.notifications.notifier import Notifier, notify_safely
from learnhub.referrals.models import ReferralStatus

logger = logging.getLogger(__name__)

VALID_STATUSES = {s.value for s in ReferralStatus}


class ReferralLinker:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        generator: IdentifierGenerator,
        notifier: Optional[Notifier] = None,
        reward_points: int = None
    ):
        self.db = db
        self.generator = generator
        self.notifier = notifier
        self.reward_points = config.REFERRAL_REWARD_POINTS if reward_points is None else reward_points

    async def resolve_code(self, referral_code: str) -> dict:
        referrer = await self.db.users.find_one({"referral_code": referral_code})
        if not referrer:
            raise CodeNotFound()
        return referrer

    async def create_referral(self, referred_user_id: str, referral_code: str) -> dict:
        """
        Link referred_user_id to the owner of referral_code

        Raises:
            CodeNotFound: nobody owns the code
            NotFound: referred user missing
            AlreadyReferred: user already has a referral record
        """
        referrer = await self.resolve_code(referral_code)

        referred = await self.db.users.find_one({"user_id": referred_user_id}, {"_id": 1})
        if not referred:
            raise NotFound("Referred user not found")

        if await self.db.referrals.find_one({"referred_user_id": referred_user_id}, {"_id": 1}):
            raise AlreadyReferred()

        now = datetime.utcnow()
        referral = {
            "referral_id": f"REF_{uuid.uuid4().hex[:12].upper()}",
            "referrer_id": referrer["user_id"],
            "referred_user_id": referred_user_id,
            "referral_code": referral_code,
            "status": ReferralStatus.PENDING.value,
            "created_at": now,
            "updated_at": now,
        }

        try:
            await self.db.referrals.insert_one(referral)
        except DuplicateKeyError:
            raise AlreadyReferred()

        referral.pop("_id", None)
        logger.info("Referral %s: %s referred %s", referral["referral_id"], referrer["user_id"], referred_user_id)

        await notify_safely(self.notifier, "referral_created", {
            "email": referrer.get("email"),
            "referral_id": referral["referral_id"],
            "referred_user_id": referred_user_id,
        })
        return referral

    async def update_status(self, referral_id: str, new_status: str) -> dict:
        """
        Move a referral to new_status, rewarding the referrer on approval

        Raises:
            InvalidStatus: status outside pending/approved/rejected
            NotFound: referral missing
        """
        if new_status not in VALID_STATUSES:
            raise InvalidStatus(f"Invalid status: {new_status}")

        previous = await self.db.referrals.find_one_and_update(
            {"referral_id": referral_id, "status": {"$ne": new_status}},
            {"$set": {"status": new_status, "updated_at": datetime.utcnow()}},
            projection={"_id": 0},
            return_document=ReturnDocument.BEFORE
        )

        if previous is None:
            current = await self.get(referral_id)
            # Same status as stored: nothing to do
            return current

        if new_status == ReferralStatus.APPROVED.value:
            await self._reward(previous)

        return await self.get(referral_id)

    async def _reward(self, referral: dict):
        result = await self.db.users.update_one(
            {"user_id": referral["referrer_id"]},
            {"$inc": {"points": self.reward_points}, "$set": {"updated_at": datetime.utcnow()}}
        )
        if result.matched_count == 0:
            logger.warning("Referrer %s of referral %s no longer exists, reward skipped",
                           referral["referrer_id"], referral["referral_id"])
            return

        logger.info("Referrer %s awarded %d points for %s",
                    referral["referrer_id"], self.reward_points, referral["referral_id"])

        referrer = await self.db.users.find_one({"user_id": referral["referrer_id"]})
        await notify_safely(self.notifier, "referral_approved", {
            "email": referrer.get("email") if referrer else None,
            "referral_id": referral["referral_id"],
            "points_awarded": self.reward_points,
        })

    async def get_or_create_referral_code(self, user_id: str) -> str:
        user = await self.db.users.find_one({"user_id": user_id}, {"referral_code": 1})
        if not user:
            raise NotFound("User not found")

        if user.get("referral_code"):
            return user["referral_code"]

        for _ in range(self.generator.max_attempts):
            code = await self.generator.generate(IdKind.REFERRAL)
            try:
                # None matches both an absent and a null code
                await self.db.users.update_one(
                    {"user_id": user_id, "referral_code": None},
                    {"$set": {"referral_code": code, "updated_at": datetime.utcnow()}}
                )
            except DuplicateKeyError:
                # Code claimed by someone else in the meantime
                continue
            break

        # Re-read: a concurrent request may have set the code first
        user = await self.db.users.find_one({"user_id": user_id}, {"referral_code": 1})
        if not user or not user.get("referral_code"):
            raise GenerationExhausted("Could not assign a referral code")
        return user["referral_code"]

    # ==================== READS ====================

    async def _with_parties(self, referrals: List[dict]) -> List[dict]:
        """Attach name and email of both referrer and referred user"""
        user_ids = {r["referrer_id"] for r in referrals} | {r["referred_user_id"] for r in referrals}
        cursor = self.db.users.find(
            {"user_id": {"$in": list(user_ids)}},
            {"_id": 0, "user_id": 1, "first_name": 1, "last_name": 1, "email": 1}
        )
        users = {u["user_id"]: u for u in await cursor.to_list(length=None)}

        for referral in referrals:
            referral["referrer"] = users.get(referral["referrer_id"])
            referral["referred_user"] = users.get(referral["referred_user_id"])
        return referrals

    async def get(self, referral_id: str) -> dict:
        referral = await self.db.referrals.find_one({"referral_id": referral_id}, {"_id": 0})
        if not referral:
            raise NotFound("Referral not found")
        return (await self._with_parties([referral]))[0]

    async def list_for_referrer(self, referrer_id: str) -> List[dict]:
        cursor = self.db.referrals.find({"referrer_id": referrer_id}, {"_id": 0}).sort("created_at", -1)
        return await self._with_parties(await cursor.to_list(length=None))

    async def list_all(self, skip: int = 0, limit: int = 50) -> List[dict]:
        cursor = self.db.referrals.find({}, {"_id": 0}).sort("created_at", -1).skip(skip).limit(limit)
        return await self._with_parties(await cursor.to_list(length=limit))
