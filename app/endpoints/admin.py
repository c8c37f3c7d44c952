from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum, CourseStatusEnum
from app.schemas.course import Course, CourseReviewRequest
from app.schemas.creator_application import CreatorApplication, CreatorApplicationWithUser, CreatorReviewRequest
from app.schemas.response import APIResponse
from app.schemas.user import UserContext
from app.services.course import course_service
from app.services.creator import creator_service
from app.utils import deps

router = APIRouter()

require_admin = deps.require_role(RoleEnum.ADMIN)


@router.get("/courses", response_model=APIResponse[List[Course]])
def get_courses_for_review(
    db: Session = Depends(deps.get_db),
    status: CourseStatusEnum = CourseStatusEnum.PENDING,
    context: UserContext = Depends(require_admin)
):
    courses = course_service.get_courses_for_review(db, status=status)
    return APIResponse(message="Courses retrieved successfully", data=[Course.model_validate(c) for c in courses])


@router.patch("/courses/{course_id}/publish", response_model=APIResponse[Course])
def review_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    review_in: CourseReviewRequest,
    context: UserContext = Depends(require_admin)
):
    course = course_service.review_course(db, course_id=course_id, action=review_in.action, current_user_context=context)
    return APIResponse(message=f"Course {course.status.value} successfully", data=Course.model_validate(course))


@router.get("/creators", response_model=APIResponse[List[CreatorApplicationWithUser]])
def get_pending_creator_applications(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(require_admin)
):
    applications = creator_service.get_pending_applications(db)
    return APIResponse(
        message="Pending applications retrieved successfully",
        data=[CreatorApplicationWithUser.model_validate(a) for a in applications]
    )


@router.patch("/creator/{application_id}/approve", response_model=APIResponse[CreatorApplication])
def review_creator_application(
    *,
    db: Session = Depends(deps.get_transactional_db),
    application_id: int,
    review_in: CreatorReviewRequest,
    context: UserContext = Depends(require_admin)
):
    application = creator_service.review_application(
        db, application_id=application_id, action=review_in.action, current_user_context=context
    )
    return APIResponse(
        message=f"Application {application.status.value} successfully",
        data=CreatorApplication.model_validate(application)
    )
