from typing import List, Optional
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.schemas.lesson_progress import CourseProgress, CourseProgressOverview, LessonCompleteRequest, LessonCompletion
from app.schemas.response import APIResponse
from app.schemas.user import UserContext
from app.services.course_progress import course_progress_service
from app.utils import deps

router = APIRouter()


@router.get("", response_model=APIResponse[List[CourseProgressOverview]])
def get_progress_overview(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.require_role(RoleEnum.LEARNER))
):
    overview = course_progress_service.get_progress_overview(db, current_user_context=context)
    return APIResponse(message="Progress retrieved successfully", data=overview)


@router.patch("/{lesson_id}/complete", response_model=APIResponse[LessonCompletion])
def complete_lesson(
    *,
    db: Session = Depends(deps.get_transactional_db),
    lesson_id: int,
    completion_in: Optional[LessonCompleteRequest] = Body(None),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    completion = course_progress_service.complete_lesson(
        db,
        lesson_id=lesson_id,
        completion_in=completion_in or LessonCompleteRequest(),
        current_user_context=context,
    )
    return APIResponse(message="Lesson marked as complete", data=completion)


@router.get("/{course_id}", response_model=APIResponse[CourseProgress])
def get_course_progress(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    context: UserContext = Depends(deps.require_role(RoleEnum.LEARNER))
):
    progress = course_progress_service.get_course_progress(db, course_id=course_id, current_user_context=context)
    return APIResponse(message="Course progress retrieved successfully", data=progress)
