from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
from typing import List, Optional
import uuid

from learnhub.core.errors import NotFound, Forbidden, LearnHubError
from learnhub.core.auth import UserContext
from learnhub.courses.models import URL_REQUIRED_TYPES, ModuleType

# ==================== COURSE CRUD ====================

async def create_course(db: AsyncIOMotorDatabase, course_data: dict, instructor_id: str) -> dict:
    """Create a course with an empty module list"""
    course = {
        "course_id": f"COURSE_{uuid.uuid4().hex[:12].upper()}",
        "title": course_data["title"],
        "description": course_data["description"],
        "category": course_data["category"],
        "level": course_data.get("level", "Beginner"),
        "price": course_data["price"],
        "thumbnail_url": course_data.get("thumbnail_url"),
        "duration": course_data.get("duration"),
        "instructor_id": instructor_id,
        "modules": [],
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    }
    await db.courses.insert_one(course)
    course.pop("_id", None)
    return course

async def get_course(db: AsyncIOMotorDatabase, course_id: str) -> Optional[dict]:
    """Get course by ID"""
    return await db.courses.find_one({"course_id": course_id}, {"_id": 0})

async def require_course(db: AsyncIOMotorDatabase, course_id: str) -> dict:
    course = await get_course(db, course_id)
    if not course:
        raise NotFound("Course not found")
    return course

async def list_courses(db: AsyncIOMotorDatabase, filters: dict, skip: int = 0, limit: int = 20) -> List[dict]:
    """List courses with filters"""
    query = {}
    if filters.get("category"):
        query["category"] = filters["category"]
    if filters.get("level"):
        query["level"] = filters["level"]
    if filters.get("instructor_id"):
        query["instructor_id"] = filters["instructor_id"]

    cursor = db.courses.find(query, {"_id": 0}).sort("created_at", -1).skip(skip).limit(limit)
    return await cursor.to_list(length=limit)

async def update_course(db: AsyncIOMotorDatabase, course_id: str, updates: dict) -> dict:
    """Partial update; modules are managed through the module operations"""
    await require_course(db, course_id)
    if updates:
        await db.courses.update_one(
            {"course_id": course_id},
            {"$set": {**updates, "updated_at": datetime.utcnow()}}
        )
    return await require_course(db, course_id)

async def delete_course(db: AsyncIOMotorDatabase, course_id: str) -> bool:
    result = await db.courses.delete_one({"course_id": course_id})
    if result.deleted_count == 0:
        raise NotFound("Course not found")
    return True

def module_ids(course: dict) -> List[str]:
    return [m["module_id"] for m in course.get("modules", [])]

# ==================== OWNERSHIP ====================

async def verify_course_owner(db: AsyncIOMotorDatabase, course_id: str, user: UserContext) -> dict:
    """Instructor of the course or an admin"""
    course = await require_course(db, course_id)
    if course["instructor_id"] != user.user_id and not user.is_admin:
        raise Forbidden("Only the course instructor can manage this course")
    return course

# ==================== MODULE CRUD ====================

async def add_module(db: AsyncIOMotorDatabase, course_id: str, module_data: dict) -> dict:
    """Append a module at the end of the course"""
    course = await require_course(db, course_id)

    module = {
        "module_id": f"MOD_{uuid.uuid4().hex[:10].upper()}",
        "title": module_data["title"],
        "type": module_data["type"],
        "url": module_data.get("url"),
        "order": len(course.get("modules", [])),
        "created_at": datetime.utcnow(),
    }

    await db.courses.update_one(
        {"course_id": course_id},
        {"$push": {"modules": module}, "$set": {"updated_at": datetime.utcnow()}}
    )
    return module

async def update_module(db: AsyncIOMotorDatabase, course_id: str, module_id: str, updates: dict) -> dict:
    course = await require_course(db, course_id)
    module = next((m for m in course.get("modules", []) if m["module_id"] == module_id), None)
    if not module:
        raise NotFound("Module not found")

    merged = {**module, **updates}
    if ModuleType(merged["type"]) in URL_REQUIRED_TYPES and not merged.get("url"):
        raise LearnHubError(f"{ModuleType(merged['type']).value} modules require a url")

    await db.courses.update_one(
        {"course_id": course_id, "modules.module_id": module_id},
        {"$set": {
            **{f"modules.$.{field}": value for field, value in updates.items()},
            "updated_at": datetime.utcnow()
        }}
    )
    return merged

async def remove_module(db: AsyncIOMotorDatabase, course_id: str, module_id: str) -> bool:
    result = await db.courses.update_one(
        {"course_id": course_id, "modules.module_id": module_id},
        {"$pull": {"modules": {"module_id": module_id}}, "$set": {"updated_at": datetime.utcnow()}}
    )
    if result.matched_count == 0:
        await require_course(db, course_id)
        raise NotFound("Module not found")
    return True
