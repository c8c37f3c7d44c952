from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from app.schemas.course import CourseSummary


class CourseEnrollment(BaseModel):
    id: int
    user_id: int
    course_id: int
    enrolled_at: datetime
    completed_at: Optional[datetime] = None
    progress_percentage: int
    is_completed: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CourseEnrollmentWithCourse(CourseEnrollment):
    course: CourseSummary


class EnrollmentStatus(BaseModel):
    is_enrolled: bool
    enrollment: Optional[CourseEnrollment] = None
