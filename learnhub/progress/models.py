from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class ModuleCompletionRequest(BaseModel):
    course_id: str
    module_id: str

class CompletedModule(BaseModel):
    module_id: str
    completed_at: datetime

class ProgressResponse(BaseModel):
    progress_id: str
    user_id: str
    course_id: str
    modules_completed: List[CompletedModule] = []
    last_accessed: datetime
    created_at: datetime

class ModuleCompletionResponse(BaseModel):
    message: str
    updated: bool
    progress: ProgressResponse

class CourseProgressSummary(BaseModel):
    course_id: str
    title: Optional[str] = None
    thumbnail_url: Optional[str] = None
    total_modules: int
    completed_modules: int
    completion_percentage: float
    last_accessed: datetime
