from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import datetime
from enum import Enum

# ==================== ENUMS ====================

class CourseCategory(str, Enum):
    TECHNOLOGY = "Technology"
    BUSINESS = "Business"
    ARTS = "Arts"
    SCIENCE = "Science"
    HEALTH = "Health"
    OTHER = "Other"

class CourseLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"

class ModuleType(str, Enum):
    VIDEO = "Video"
    ARTICLE = "Article"
    QUIZ = "Quiz"
    ASSIGNMENT = "Assignment"

# Module types that point at external content
URL_REQUIRED_TYPES = {ModuleType.VIDEO, ModuleType.ARTICLE}

URL_PATTERN = r"^https?://.+"

# ==================== COURSE MODELS ====================

class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    category: CourseCategory
    level: CourseLevel = CourseLevel.BEGINNER
    price: float = Field(..., ge=0)
    thumbnail_url: Optional[str] = None
    duration: Optional[str] = None  # "6 weeks"

class CourseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    category: Optional[CourseCategory] = None
    level: Optional[CourseLevel] = None
    price: Optional[float] = Field(None, ge=0)
    thumbnail_url: Optional[str] = None
    duration: Optional[str] = None

# ==================== MODULE MODELS ====================

class ModuleCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    type: ModuleType
    url: Optional[str] = Field(None, pattern=URL_PATTERN)

    @model_validator(mode="after")
    def check_url(self):
        if self.type in URL_REQUIRED_TYPES and not self.url:
            raise ValueError(f"{self.type.value} modules require a url")
        return self

class ModuleUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[ModuleType] = None
    url: Optional[str] = Field(None, pattern=URL_PATTERN)

class ModuleResponse(BaseModel):
    module_id: str
    title: str
    type: ModuleType
    url: Optional[str] = None
    order: int
    created_at: datetime

class CourseResponse(BaseModel):
    course_id: str
    title: str
    description: str
    category: CourseCategory
    level: CourseLevel
    price: float
    thumbnail_url: Optional[str] = None
    duration: Optional[str] = None
    instructor_id: str
    modules: List[ModuleResponse] = []
    created_at: datetime
