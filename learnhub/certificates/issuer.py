"""
Certificate issuance and lookup

A certificate is issued at most once per (user, course). The unique index on
(user_id, course_id) decides races; the lookup in front of it only produces
the clearer error for the common case.
"""

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from datetime import datetime
from typing import List, Optional
import logging

from learnhub.core import config
from learnhub.core.auth import UserContext
from learnhub.core.errors import NotFound, AlreadyIssued, Forbidden, GenerationExhausted
from learnhub.identifiers.generator import IdentifierGenerator, IdKind
from learnhub.notifications.notifier import Notifier, notify_safely

logger = logging.getLogger(__name__)


def build_certificate_url(certificate_id: str, base_url: str = None) -> str:
    base = (base_url or config.CLIENT_URL).rstrip("/")
    return f"{base}/verify-certificate/{certificate_id}"


class CertificateIssuer:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        generator: IdentifierGenerator,
        notifier: Optional[Notifier] = None,
        base_url: str = None
    ):
        self.db = db
        self.generator = generator
        self.notifier = notifier
        self.base_url = base_url or config.CLIENT_URL

    async def issue(self, user_id: str, course_id: str) -> dict:
        """
        Issue the certificate for a completed course

        Raises:
            NotFound: user or course missing
            AlreadyIssued: a certificate exists for this pair
            GenerationExhausted: no free certificate id found
        """
        user = await self.db.users.find_one({"user_id": user_id})
        if not user:
            raise NotFound("User not found")

        course = await self.db.courses.find_one({"course_id": course_id})
        if not course:
            raise NotFound("Course not found")

        if await self._exists(user_id, course_id):
            raise AlreadyIssued()

        certificate = None
        for _ in range(self.generator.max_attempts):
            certificate_id = await self.generator.generate(IdKind.CERTIFICATE)
            candidate = {
                "certificate_id": certificate_id,
                "user_id": user_id,
                "course_id": course_id,
                "certificate_url": build_certificate_url(certificate_id, self.base_url),
                "issued_at": datetime.utcnow(),
            }
            try:
                await self.db.certificates.insert_one(candidate)
            except DuplicateKeyError:
                if await self._exists(user_id, course_id):
                    raise AlreadyIssued()
                # certificate_id was taken between generate and insert
                continue
            certificate = candidate
            break

        if certificate is None:
            raise GenerationExhausted("Could not allocate a unique certificate id")

        certificate.pop("_id", None)
        logger.info("Certificate %s issued to %s for %s", certificate["certificate_id"], user_id, course_id)

        await notify_safely(self.notifier, "certificate_issued", {
            "email": user.get("email"),
            "first_name": user.get("first_name"),
            "course_title": course.get("title"),
            "certificate_id": certificate["certificate_id"],
            "certificate_url": certificate["certificate_url"],
        })

        return certificate

    async def _exists(self, user_id: str, course_id: str) -> bool:
        return await self.db.certificates.find_one({"user_id": user_id, "course_id": course_id}, {"_id": 1}) is not None

    # ==================== READS ====================

    async def list_for_user(self, user_id: str) -> List[dict]:
        certificates = await self.db.certificates.find({"user_id": user_id}, {"_id": 0}).sort("issued_at", -1).to_list(length=None)
        for cert in certificates:
            course = await self.db.courses.find_one({"course_id": cert["course_id"]}, {"title": 1})
            cert["course_title"] = course.get("title") if course else None
        return certificates

    async def verify(self, certificate_id: str) -> dict:
        """Public check by certificate id"""
        cert = await self.db.certificates.find_one({"certificate_id": certificate_id})
        if not cert:
            return {"is_valid": False, "message": "Certificate not found or invalid."}

        user = await self.db.users.find_one({"user_id": cert["user_id"]}) or {}
        course = await self.db.courses.find_one({"course_id": cert["course_id"]}) or {}

        return {
            "is_valid": True,
            "message": "Certificate is valid.",
            "certificate_id": cert["certificate_id"],
            "recipient_name": f"{user.get('first_name', '')} {user.get('last_name', '')}".strip() or None,
            "course_name": course.get("title"),
            "issued_at": cert["issued_at"],
        }

    async def get(self, certificate_id: str, requester: UserContext) -> dict:
        cert = await self.db.certificates.find_one({"certificate_id": certificate_id}, {"_id": 0})
        if not cert:
            raise NotFound("Certificate not found")
        if cert["user_id"] != requester.user_id and not requester.is_admin:
            raise Forbidden("Not authorized to view this certificate")
        return cert

    async def revoke(self, certificate_id: str) -> None:
        result = await self.db.certificates.delete_one({"certificate_id": certificate_id})
        if result.deleted_count == 0:
            raise NotFound("Certificate not found")
        logger.info("Certificate %s revoked", certificate_id)
