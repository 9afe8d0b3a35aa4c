"""
Module completion tracking

One progress document per (user, course). Completion entries are keyed by
module_id; the append is a single conditional update so two requests for
the same module can never both land.
"""

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from datetime import datetime
from typing import Callable, List, Optional, Tuple
import logging
import uuid

from learnhub.core.errors import NotFound, InvalidModule
from learnhub.courses.database import get_course, module_ids

logger = logging.getLogger(__name__)

# Called with (user_id, course_id) after every persisted completion call
CompletionHook = Callable[[str, str], None]


class ProgressTracker:
    def __init__(self, db: AsyncIOMotorDatabase, on_completion: Optional[CompletionHook] = None):
        self.db = db
        self.on_completion = on_completion

    async def record_module_completion(self, user_id: str, course_id: str, module_id: str) -> Tuple[dict, bool]:
        """
        Mark module_id done for the user

        Returns:
            (progress document after the update, whether anything changed)

        Raises:
            NotFound: course does not exist
            InvalidModule: module is not one of the course's current modules
        """
        course = await get_course(self.db, course_id)
        if not course:
            raise NotFound("Course not found")

        if module_id not in module_ids(course):
            raise InvalidModule()

        now = datetime.utcnow()
        entry = {"module_id": module_id, "completed_at": now}

        changed = await self._create(user_id, course_id, entry, now)
        if not changed:
            changed = await self._append(user_id, course_id, entry, now)

        progress = await self.get_progress(user_id, course_id)

        if changed:
            logger.info("User %s completed module %s of %s", user_id, module_id, course_id)

        if self.on_completion is not None:
            self.on_completion(user_id, course_id)

        return progress, changed

    async def _create(self, user_id: str, course_id: str, entry: dict, now: datetime) -> bool:
        existing = await self.db.progress.find_one({"user_id": user_id, "course_id": course_id}, {"_id": 1})
        if existing:
            return False

        try:
            await self.db.progress.insert_one({
                "progress_id": f"PRG_{uuid.uuid4().hex[:12].upper()}",
                "user_id": user_id,
                "course_id": course_id,
                "modules_completed": [entry],
                "last_accessed": now,
                "created_at": now,
                "updated_at": now,
            })
        except DuplicateKeyError:
            # Another request created the record first; append instead
            return False
        return True

    async def _append(self, user_id: str, course_id: str, entry: dict, now: datetime) -> bool:
        result = await self.db.progress.update_one(
            {
                "user_id": user_id,
                "course_id": course_id,
                "modules_completed.module_id": {"$ne": entry["module_id"]},
            },
            {
                "$push": {"modules_completed": entry},
                "$set": {"last_accessed": now, "updated_at": now},
            }
        )
        return result.modified_count > 0

    # ==================== READS ====================

    async def get_progress(self, user_id: str, course_id: str) -> dict:
        progress = await self.db.progress.find_one({"user_id": user_id, "course_id": course_id}, {"_id": 0})
        if not progress:
            raise NotFound("Progress not found for this course")
        return progress

    async def summarize(self, user_id: str) -> List[dict]:
        """Completion summary for every course the user has started"""
        records = await self.db.progress.find({"user_id": user_id}, {"_id": 0}).sort("last_accessed", -1).to_list(length=None)

        summary = []
        for record in records:
            course = await get_course(self.db, record["course_id"])
            if not course:
                continue

            current = set(module_ids(course))
            completed = len({m["module_id"] for m in record["modules_completed"]} & current)
            total = len(current)

            summary.append({
                "course_id": record["course_id"],
                "title": course.get("title"),
                "thumbnail_url": course.get("thumbnail_url"),
                "total_modules": total,
                "completed_modules": completed,
                "completion_percentage": round(completed / total * 100, 2) if total > 0 else 0.0,
                "last_accessed": record["last_accessed"],
            })

        return summary
