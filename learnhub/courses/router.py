from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List, Optional

from learnhub.core.auth import UserContext, get_current_user, require_instructor
from learnhub.core.database import get_db
from learnhub.courses.models import (
    CourseCreate, CourseUpdate, CourseResponse, ModuleCreate, ModuleUpdate, ModuleResponse,
    CourseCategory, CourseLevel
)
from learnhub.courses import database

router = APIRouter(prefix="/courses", tags=["Courses"])

# ==================== COURSES ====================

@router.post("", response_model=CourseResponse, status_code=201)
async def create_course(
    data: CourseCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: UserContext = Depends(require_instructor)
):
    """The caller becomes the course instructor"""
    return await database.create_course(db, data.model_dump(mode="json"), user.user_id)


@router.get("", response_model=List[CourseResponse])
async def list_courses(
    category: Optional[CourseCategory] = None,
    level: Optional[CourseLevel] = None,
    instructor_id: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    filters = {
        "category": category.value if category else None,
        "level": level.value if level else None,
        "instructor_id": instructor_id,
    }
    return await database.list_courses(db, filters, skip, limit)


@router.get("/{course_id}", response_model=CourseResponse)
async def get_course(course_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await database.require_course(db, course_id)


@router.put("/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: str,
    data: CourseUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: UserContext = Depends(get_current_user)
):
    """Only the fields sent are changed"""
    await database.verify_course_owner(db, course_id, user)
    return await database.update_course(db, course_id, data.model_dump(mode="json", exclude_none=True))


@router.delete("/{course_id}")
async def delete_course(
    course_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: UserContext = Depends(get_current_user)
):
    await database.verify_course_owner(db, course_id, user)
    await database.delete_course(db, course_id)
    return {"message": "Course removed"}

# ==================== MODULES ====================

@router.post("/{course_id}/modules", response_model=ModuleResponse, status_code=201)
async def add_module(
    course_id: str,
    data: ModuleCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: UserContext = Depends(get_current_user)
):
    await database.verify_course_owner(db, course_id, user)
    return await database.add_module(db, course_id, data.model_dump(mode="json"))


@router.put("/{course_id}/modules/{module_id}", response_model=ModuleResponse)
async def update_module(
    course_id: str,
    module_id: str,
    data: ModuleUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: UserContext = Depends(get_current_user)
):
    await database.verify_course_owner(db, course_id, user)
    return await database.update_module(db, course_id, module_id, data.model_dump(mode="json", exclude_none=True))


@router.delete("/{course_id}/modules/{module_id}")
async def remove_module(
    course_id: str,
    module_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: UserContext = Depends(get_current_user)
):
    await database.verify_course_owner(db, course_id, user)
    await database.remove_module(db, course_id, module_id)
    return {"message": "Module removed successfully"}
