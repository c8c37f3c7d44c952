from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from app.schemas.course import Course, CourseSummary
from app.schemas.course_enrollment import CourseEnrollment
from app.schemas.lesson import LessonWithProgress


class LessonCompleteRequest(BaseModel):
    time_spent: Optional[int] = Field(default=None, ge=0, description="Seconds spent on the lesson")
    last_position: Optional[int] = Field(default=None, ge=0, description="Last playback position in seconds")


class LessonProgress(BaseModel):
    id: int
    user_id: int
    lesson_id: int
    course_id: int
    is_completed: bool
    completed_at: Optional[datetime] = None
    time_spent: int
    last_position: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LessonCompletion(BaseModel):
    progress: LessonProgress
    course_progress: int
    is_course_completed: bool


class ProgressSummary(BaseModel):
    total_lessons: int
    completed_lessons: int
    percentage: int
    is_completed: bool


class CourseProgress(BaseModel):
    course: Course
    enrollment: CourseEnrollment
    lessons: List[LessonWithProgress]
    progress: ProgressSummary


class CourseProgressOverview(BaseModel):
    enrollment: CourseEnrollment
    course: CourseSummary
    total_lessons: int
    completed_lessons: int
    progress: int
    is_completed: bool
    lessons: List[LessonWithProgress]
