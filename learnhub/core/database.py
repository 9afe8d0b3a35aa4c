from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
import logging

from learnhub.core import config

logger = logging.getLogger(__name__)


def create_client(url: str = None) -> AsyncIOMotorClient:
    """Create the Mongo client once at startup, with hard timeouts"""
    return AsyncIOMotorClient(
        url or config.MONGO_URL,
        serverSelectionTimeoutMS=config.MONGO_TIMEOUT_MS,
        socketTimeoutMS=config.MONGO_TIMEOUT_MS,
        connectTimeoutMS=config.MONGO_TIMEOUT_MS,
    )


async def get_db(request: Request) -> AsyncIOMotorDatabase:
    """Database dependency"""
    return request.app.state.db


# ==================== SERIALIZATION ====================

def serialize_mongo(doc: dict) -> dict:
    if doc and "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


def serialize_many(docs: list) -> list:
    return [serialize_mongo(doc) for doc in docs]


# ==================== DATABASE INDEXES ====================

async def create_indexes(db: AsyncIOMotorDatabase):
    """
    Create MongoDB indexes
    Unique indexes here are the real guard for every uniqueness rule,
    application lookups in front of them are only a fast path
    """
    # Users
    await db.users.create_index("user_id", unique=True)
    await db.users.create_index("email", unique=True)
    # Field is omitted until a code is assigned
    await db.users.create_index("referral_code", unique=True, sparse=True)

    # Courses
    await db.courses.create_index("course_id", unique=True)
    await db.courses.create_index("instructor_id")

    # Progress: one record per (user, course)
    await db.progress.create_index("progress_id", unique=True)
    await db.progress.create_index([("user_id", 1), ("course_id", 1)], unique=True)

    # Certificates: one per (user, course), public id unique
    await db.certificates.create_index("certificate_id", unique=True)
    await db.certificates.create_index([("user_id", 1), ("course_id", 1)], unique=True)
    await db.certificates.create_index([("user_id", 1), ("issued_at", -1)])

    # Referrals: a user can be referred only once
    await db.referrals.create_index("referral_id", unique=True)
    await db.referrals.create_index("referred_user_id", unique=True)
    await db.referrals.create_index("referrer_id")
    await db.referrals.create_index("referral_code")

    logger.info("LearnHub indexes created")
