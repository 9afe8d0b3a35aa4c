from datetime import datetime
import uuid

import httpx
import pytest
from jose import jwt
from mongomock_motor import AsyncMongoMockClient

from learnhub.core import config
from learnhub.core.database import create_indexes
from learnhub.core.errors import NotificationFailure
from learnhub.identifiers.generator import IdentifierGenerator
from learnhub.notifications.notifier import Notifier
from learnhub.certificates.issuer import CertificateIssuer
from learnhub.progress.evaluator import CompletionEvaluator
from learnhub.progress.tracker import ProgressTracker
from learnhub.referrals.linker import ReferralLinker


class RecordingNotifier(Notifier):
    def __init__(self):
        self.events = []

    async def notify(self, event, payload):
        self.events.append((event, payload))


class FailingNotifier(Notifier):
    async def notify(self, event, payload):
        raise NotificationFailure("relay down")


@pytest.fixture
async def db():
    database = AsyncMongoMockClient()[f"learnhub_test_{uuid.uuid4().hex[:8]}"]
    await create_indexes(database)
    return database


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def generator(db):
    return IdentifierGenerator(db)


@pytest.fixture
def issuer(db, generator, notifier):
    return CertificateIssuer(db, generator, notifier, base_url="https://learnhub.test")


@pytest.fixture
def evaluator(db, issuer):
    return CompletionEvaluator(db, issuer)


@pytest.fixture
def tracker(db):
    return ProgressTracker(db)


@pytest.fixture
def linker(db, generator, notifier):
    return ReferralLinker(db, generator, notifier, reward_points=10)


# ==================== DATA HELPERS ====================

async def make_user(db, role="jobseeker", referral_code=None, **extra):
    user_id = f"USR_{uuid.uuid4().hex[:12].upper()}"
    user = {
        "user_id": user_id,
        "first_name": "Ama",
        "last_name": "Mensah",
        "email": f"{user_id.lower()}@example.com",
        "role": role,
        "points": 0,
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
        **extra,
    }
    if referral_code:
        user["referral_code"] = referral_code
    await db.users.insert_one(user)
    return user


async def make_course(db, module_count=2, instructor_id="USR_INSTRUCTOR", course_id=None):
    course_id = course_id or f"COURSE_{uuid.uuid4().hex[:12].upper()}"
    modules = [
        {
            "module_id": f"m{i + 1}",
            "title": f"Module {i + 1}",
            "type": "Quiz",
            "url": None,
            "order": i,
            "created_at": datetime.utcnow(),
        }
        for i in range(module_count)
    ]
    await db.courses.insert_one({
        "course_id": course_id,
        "title": "Intro to Data",
        "description": "Basics",
        "category": "Technology",
        "level": "Beginner",
        "price": 0,
        "instructor_id": instructor_id,
        "modules": modules,
        "created_at": datetime.utcnow(),
    })
    return await db.courses.find_one({"course_id": course_id}, {"_id": 0})


def auth_header(user_id: str) -> dict:
    token = jwt.encode({"sub": user_id}, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def api(db, notifier):
    from learnhub.main import create_app

    app = create_app(db=db, notifier=notifier)
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
