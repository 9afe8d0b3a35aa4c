"""
Human-readable unique codes (certificate ids, referral codes)

Codes are random hex; uniqueness is confirmed against the collection that
owns the code before it is handed out. The unique index on that field still
has the last word, callers treat a duplicate-key error as "try again".
"""

from motor.motor_asyncio import AsyncIOMotorDatabase
from enum import Enum
import logging
import secrets

from learnhub.core import config
from learnhub.core.errors import GenerationExhausted

logger = logging.getLogger(__name__)


class IdKind(str, Enum):
    CERTIFICATE = "certificate"
    REFERRAL = "referral"


# kind -> (prefix, random bytes, collection, field)
ID_FORMATS = {
    IdKind.CERTIFICATE: ("CERT-", 8, "certificates", "certificate_id"),
    IdKind.REFERRAL: ("", 4, "users", "referral_code"),
}


def random_code(kind: IdKind) -> str:
    prefix, nbytes, _, _ = ID_FORMATS[kind]
    return f"{prefix}{secrets.token_hex(nbytes).upper()}"


class IdentifierGenerator:
    def __init__(self, db: AsyncIOMotorDatabase, max_attempts: int = None):
        self.db = db
        self.max_attempts = max_attempts or config.ID_GENERATION_MAX_ATTEMPTS

    async def is_taken(self, kind: IdKind, code: str) -> bool:
        _, _, collection, field = ID_FORMATS[kind]
        existing = await self.db[collection].find_one({field: code}, {"_id": 1})
        return existing is not None

    async def generate(self, kind: IdKind) -> str:
        kind = IdKind(kind)
        for attempt in range(1, self.max_attempts + 1):
            code = random_code(kind)
            if not await self.is_taken(kind, code):
                return code
            logger.warning("Generated %s code collided (attempt %d/%d)", kind.value, attempt, self.max_attempts)

        raise GenerationExhausted(
            f"Could not generate a unique {kind.value} code after {self.max_attempts} attempts"
        )
