from typing import List, Optional
from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from app.core.constants import CourseDifficultyEnum
from app.schemas.course import Course, CourseCreate, CourseDetail, CourseUpdate
from app.schemas.response import APIResponse
from app.schemas.user import UserContext
from app.services.course import course_service
from app.services.media_storage import MediaStorage
from app.utils import deps

router = APIRouter()


@router.post("", response_model=APIResponse[Course], status_code=status.HTTP_201_CREATED)
def create_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_in: CourseCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    new_course = course_service.create_course(db, course_in=course_in, current_user_context=context)
    return APIResponse(message="Course created successfully", data=Course.model_validate(new_course))


@router.get("", response_model=APIResponse[List[Course]])
def get_courses(
    db: Session = Depends(deps.get_db),
    context: Optional[UserContext] = Depends(deps.get_optional_user_context),
    category: Optional[str] = None,
    difficulty: Optional[CourseDifficultyEnum] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100
):
    courses = course_service.get_courses(
        db,
        current_user_context=context,
        category=category,
        difficulty=difficulty,
        search=search,
        skip=skip,
        limit=limit,
    )
    return APIResponse(message="Courses retrieved successfully", data=[Course.model_validate(c) for c in courses])


@router.get("/{course_id}", response_model=APIResponse[CourseDetail])
def read_course(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    context: Optional[UserContext] = Depends(deps.get_optional_user_context)
):
    course_detail = course_service.get_course(db, course_id=course_id, current_user_context=context)
    return APIResponse(message="Course retrieved successfully", data=course_detail)


@router.put("/{course_id}", response_model=APIResponse[Course])
def update_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    course_in: CourseUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    course = course_service.update_course(db, course_id=course_id, course_in=course_in, current_user_context=context)
    return APIResponse(message="Course updated successfully", data=Course.model_validate(course))


@router.post("/{course_id}/thumbnail", response_model=APIResponse[Course])
async def upload_course_thumbnail(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    file: UploadFile = File(...),
    storage: MediaStorage = Depends(deps.get_media_storage),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    content = await file.read()
    course = course_service.upload_thumbnail(
        db,
        course_id=course_id,
        content=content,
        filename=file.filename,
        content_type=file.content_type,
        storage=storage,
        current_user_context=context,
    )
    return APIResponse(message="Thumbnail uploaded successfully", data=Course.model_validate(course))


@router.patch("/{course_id}/submit", response_model=APIResponse[Course])
def submit_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    course = course_service.submit_course(db, course_id=course_id, current_user_context=context)
    return APIResponse(message="Course submitted for review", data=Course.model_validate(course))


@router.delete("/{course_id}", response_model=APIResponse[None])
def delete_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    course_service.delete_course(db, course_id=course_id, current_user_context=context)
    return APIResponse(message="Course deleted successfully")
