from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from typing import Optional, List
from datetime import datetime

from app.core.constants import CourseDifficultyEnum, CourseStatusEnum, ReviewActionEnum
from app.schemas.lesson import Lesson
from app.schemas.user import UserSummary


def _strip_tags(v):
    if v is None:
        return v
    if isinstance(v, str):
        v = v.split(",")
    return [tag.strip() for tag in v if tag and tag.strip()]


class CourseBase(BaseModel):
    title: str
    description: str
    category: str
    difficulty: CourseDifficultyEnum = Field(default=CourseDifficultyEnum.BEGINNER)
    duration: int = Field(default=0, ge=0, description="Duration in minutes")
    tags: List[str] = Field(default_factory=list)

    model_config = ConfigDict(use_enum_values=True)

class CourseCreate(CourseBase):
    @field_validator("title")
    def title_length(cls, v):
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Title must be at least 3 characters")
        return v

    @field_validator("description")
    def description_length(cls, v):
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Description must be at least 10 characters")
        return v

    @field_validator("category")
    def category_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Category is required")
        return v

    @field_validator("tags", mode="before")
    def split_tags(cls, v):
        return _strip_tags(v) or []

class CourseUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[CourseDifficultyEnum] = None
    duration: Optional[int] = Field(default=None, ge=0)
    tags: Optional[List[str]] = None

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("title", "description", "category", "difficulty", "duration", "tags")
    def not_null(cls, v, info: ValidationInfo):
        # Omit a field to leave it unchanged; null would clear a required column.
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("title")
    def title_length(cls, v):
        if v is None:
            return v
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Title must be at least 3 characters")
        return v

    @field_validator("description")
    def description_length(cls, v):
        if v is None:
            return v
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Description must be at least 10 characters")
        return v

    @field_validator("category")
    def category_required(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Category is required")
        return v

    @field_validator("tags", mode="before")
    def split_tags(cls, v):
        return _strip_tags(v)

class Course(CourseBase):
    id: int
    thumbnail: Optional[str] = None
    creator_id: int
    creator: Optional[UserSummary] = None
    status: CourseStatusEnum
    published_at: Optional[datetime] = None
    published_by: Optional[int] = None
    enrollment_count: int = 0
    lesson_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

class CourseSummary(BaseModel):
    id: int
    title: str
    description: str
    thumbnail: Optional[str] = None
    category: str
    difficulty: CourseDifficultyEnum
    creator_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

class CourseDetail(BaseModel):
    course: Course
    lessons: List[Lesson] = Field(default_factory=list)

class CourseReviewRequest(BaseModel):
    action: ReviewActionEnum
