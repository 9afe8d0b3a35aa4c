from fastapi import APIRouter, BackgroundTasks, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List

from learnhub.core.auth import UserContext, get_current_user
from learnhub.core.database import get_db
from learnhub.core.dependencies import get_evaluator
from learnhub.progress.evaluator import CompletionEvaluator
from learnhub.progress.models import (
    ModuleCompletionRequest, ModuleCompletionResponse, ProgressResponse, CourseProgressSummary
)
from learnhub.progress.tracker import ProgressTracker

router = APIRouter(prefix="/progress", tags=["Progress"])


@router.post("/complete-module", response_model=ModuleCompletionResponse)
async def complete_module(
    data: ModuleCompletionRequest,
    background_tasks: BackgroundTasks,
    db: AsyncIOMotorDatabase = Depends(get_db),
    evaluator: CompletionEvaluator = Depends(get_evaluator),
    user: UserContext = Depends(get_current_user)
):
    """
    Record a finished module
    The completion check (and certificate issuance) runs after the response
    """
    tracker = ProgressTracker(
        db,
        on_completion=lambda user_id, course_id: background_tasks.add_task(
            evaluator.evaluate_safely, user_id, course_id
        )
    )
    progress, updated = await tracker.record_module_completion(user.user_id, data.course_id, data.module_id)

    return {
        "message": "Module completion updated successfully." if updated else "Module already completed.",
        "updated": updated,
        "progress": progress,
    }


@router.get("/my-courses-progress", response_model=List[CourseProgressSummary])
async def my_courses_progress(
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: UserContext = Depends(get_current_user)
):
    return await ProgressTracker(db).summarize(user.user_id)


@router.get("/{course_id}", response_model=ProgressResponse)
async def course_progress(
    course_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: UserContext = Depends(get_current_user)
):
    return await ProgressTracker(db).get_progress(user.user_id, course_id)
