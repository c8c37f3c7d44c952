from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from typing import Optional, List
from datetime import datetime

from app.core.constants import ResourceTypeEnum


class LessonResource(BaseModel):
    title: str
    url: str
    type: ResourceTypeEnum = ResourceTypeEnum.LINK

    model_config = ConfigDict(use_enum_values=True)


class LessonUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    order_index: Optional[int] = Field(default=None, ge=1)
    transcript: Optional[str] = None
    resources: Optional[List[LessonResource]] = None

    @field_validator("title", "description", "order_index", "transcript", "resources")
    def not_null(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("title")
    def title_length(cls, v):
        if v is not None and len(v.strip()) < 3:
            raise ValueError("Title must be at least 3 characters")
        return v.strip() if v else v

    @field_validator("description")
    def description_length(cls, v):
        if v is not None and len(v.strip()) < 10:
            raise ValueError("Description must be at least 10 characters")
        return v.strip() if v else v


class Lesson(BaseModel):
    id: int
    course_id: int
    title: str
    description: str
    order_index: int
    video_url: Optional[str] = None
    video_duration: int = 0
    transcript: str = ""
    resources: List[LessonResource] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LessonWithProgress(Lesson):
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    time_spent: int = 0
    last_position: int = 0
