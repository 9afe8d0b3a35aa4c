"""
Course completion check, run after every module completion
"""

from motor.motor_asyncio import AsyncIOMotorDatabase
from dataclasses import dataclass
from typing import Optional
import logging

from learnhub.core.errors import AlreadyIssued
from learnhub.certificates.issuer import CertificateIssuer
from learnhub.courses.database import get_course, module_ids

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    completed: bool
    reason: str
    certificate: Optional[dict] = None


class CompletionEvaluator:
    def __init__(self, db: AsyncIOMotorDatabase, issuer: CertificateIssuer):
        self.db = db
        self.issuer = issuer

    async def evaluate(self, user_id: str, course_id: str) -> EvaluationResult:
        course = await get_course(self.db, course_id)
        if not course:
            return EvaluationResult(False, "course_not_found")

        current = set(module_ids(course))
        # An empty course is never "complete"
        if not current:
            return EvaluationResult(False, "no_modules")

        progress = await self.db.progress.find_one({"user_id": user_id, "course_id": course_id})
        if not progress:
            return EvaluationResult(False, "no_progress")

        # Modules removed from the course since completion do not count
        done = {m["module_id"] for m in progress.get("modules_completed", [])} & current
        if len(done) != len(current):
            return EvaluationResult(False, "incomplete")

        try:
            certificate = await self.issuer.issue(user_id, course_id)
        except AlreadyIssued:
            return EvaluationResult(True, "already_issued")

        return EvaluationResult(True, "issued", certificate)

    async def evaluate_safely(self, user_id: str, course_id: str) -> Optional[EvaluationResult]:
        """Background entry point: never raises"""
        try:
            result = await self.evaluate(user_id, course_id)
        except Exception:
            logger.exception("Completion check failed for user %s, course %s", user_id, course_id)
            return None

        if result.reason == "issued":
            logger.info("Course %s completed by %s, certificate issued", course_id, user_id)
        elif result.reason == "already_issued":
            logger.info("Course %s already certified for %s", course_id, user_id)
        return result
