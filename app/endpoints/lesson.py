from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from app.schemas.lesson import Lesson, LessonUpdate
from app.schemas.response import APIResponse
from app.schemas.user import UserContext
from app.services.lesson import lesson_service
from app.services.media_storage import MediaStorage
from app.services.transcript import TranscriptGenerator
from app.utils import deps

router = APIRouter()


@router.post("", response_model=APIResponse[Lesson], status_code=status.HTTP_201_CREATED)
async def create_lesson(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int = Form(...),
    title: str = Form(...),
    description: str = Form(...),
    order_index: Optional[int] = Form(None),
    video_duration: int = Form(0),
    resources: Optional[str] = Form(None),
    video: UploadFile = File(...),
    storage: MediaStorage = Depends(deps.get_media_storage),
    transcript_generator: TranscriptGenerator = Depends(deps.get_transcript_generator),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    video_content = await video.read()
    lesson = await lesson_service.create_lesson(
        db,
        course_id=course_id,
        title=title,
        description=description,
        order_index=order_index,
        video_duration=video_duration,
        resources=resources,
        video_content=video_content,
        video_filename=video.filename,
        video_content_type=video.content_type,
        storage=storage,
        transcript_generator=transcript_generator,
        current_user_context=context,
    )
    return APIResponse(message="Lesson created successfully", data=Lesson.model_validate(lesson))


@router.get("/{lesson_id}", response_model=APIResponse[Lesson])
def read_lesson(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    context: Optional[UserContext] = Depends(deps.get_optional_user_context)
):
    lesson = lesson_service.get_lesson(db, lesson_id=lesson_id, current_user_context=context)
    return APIResponse(message="Lesson retrieved successfully", data=Lesson.model_validate(lesson))


@router.put("/{lesson_id}", response_model=APIResponse[Lesson])
def update_lesson(
    *,
    db: Session = Depends(deps.get_transactional_db),
    lesson_id: int,
    lesson_in: LessonUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    lesson = lesson_service.update_lesson(db, lesson_id=lesson_id, lesson_in=lesson_in, current_user_context=context)
    return APIResponse(message="Lesson updated successfully", data=Lesson.model_validate(lesson))


@router.delete("/{lesson_id}", response_model=APIResponse[None])
def delete_lesson(
    *,
    db: Session = Depends(deps.get_transactional_db),
    lesson_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    lesson_service.delete_lesson(db, lesson_id=lesson_id, current_user_context=context)
    return APIResponse(message="Lesson deleted successfully")


@router.post("/{lesson_id}/regenerate-transcript", response_model=APIResponse[Lesson])
async def regenerate_transcript(
    *,
    db: Session = Depends(deps.get_transactional_db),
    lesson_id: int,
    transcript_generator: TranscriptGenerator = Depends(deps.get_transcript_generator),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    lesson = await lesson_service.regenerate_transcript(
        db, lesson_id=lesson_id, transcript_generator=transcript_generator, current_user_context=context
    )
    return APIResponse(message="Transcript regenerated successfully", data=Lesson.model_validate(lesson))
