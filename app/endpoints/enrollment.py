from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.schemas.course_enrollment import CourseEnrollment, CourseEnrollmentWithCourse, EnrollmentStatus
from app.schemas.response import APIResponse
from app.schemas.user import UserContext
from app.services.enrollment import enrollment_service
from app.utils import deps

router = APIRouter()


@router.get("/my-courses", response_model=APIResponse[List[CourseEnrollmentWithCourse]])
def get_my_courses(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.require_role(RoleEnum.LEARNER))
):
    enrollments = enrollment_service.get_my_enrollments(db, current_user_context=context)
    return APIResponse(
        message="Enrolled courses retrieved successfully",
        data=[CourseEnrollmentWithCourse.model_validate(e) for e in enrollments]
    )


@router.post("/{course_id}", response_model=APIResponse[CourseEnrollment], status_code=status.HTTP_201_CREATED)
def enroll_in_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    enrollment = enrollment_service.enroll(db, course_id=course_id, current_user_context=context)
    return APIResponse(message="Successfully enrolled in course", data=CourseEnrollment.model_validate(enrollment))


@router.get("/{course_id}/status", response_model=APIResponse[EnrollmentStatus])
def get_enrollment_status(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    enrollment_status = enrollment_service.get_enrollment_status(db, course_id=course_id, current_user_context=context)
    return APIResponse(message="Enrollment status retrieved successfully", data=enrollment_status)
