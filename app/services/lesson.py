import json
import logging
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    ConflictException,
    NotFoundException,
    ServiceUnavailableException,
    ValidationException,
)
from app.crud.course import course as crud_course
from app.crud.course_enrollment import course_enrollment as crud_enrollment
from app.crud.lesson import lesson as crud_lesson
from app.models.lesson import Lesson
from app.schemas.lesson import LessonResource, LessonUpdate
from app.schemas.user import UserContext
from app.services.media_storage import MediaStorage
from app.services.transcript import TranscriptGenerator
from app.utils.permission import PermissionHelper

logger = logging.getLogger(__name__)

VIDEO_CONTENT_PREFIX = "video/"

_resources_adapter = TypeAdapter(List[LessonResource])


def parse_resources(raw: Optional[str]) -> List[dict]:
    """Parses the multipart `resources` field (a JSON array) into plain dicts."""
    if raw is None or not raw.strip():
        return []
    try:
        resources = _resources_adapter.validate_python(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValidationException(f"Invalid resources: {e}")
    return [resource.model_dump() for resource in resources]


class LessonService:

    def _get_or_raise(self, db: Session, lesson_id: int) -> Lesson:
        lesson = crud_lesson.get(db, id=lesson_id)
        if not lesson:
            raise NotFoundException("Lesson not found.")
        return lesson

    def _require_mutable(self, context: UserContext, lesson_course) -> None:
        PermissionHelper.require_course_mutation_permission(context, lesson_course, "modify lessons of")
        PermissionHelper.require_draft(lesson_course, "Can only modify lessons of draft courses.")

    async def create_lesson(
        self,
        db: Session,
        *,
        course_id: int,
        title: str,
        description: str,
        order_index: Optional[int],
        video_duration: int,
        resources: Optional[str],
        video_content: bytes,
        video_filename: Optional[str],
        video_content_type: Optional[str],
        storage: MediaStorage,
        transcript_generator: TranscriptGenerator,
        current_user_context: UserContext,
    ) -> Lesson:
        course = crud_course.get(db, id=course_id)
        if not course:
            raise NotFoundException("Course not found.")
        self._require_mutable(current_user_context, course)

        title = (title or "").strip()
        description = (description or "").strip()
        if len(title) < 3:
            raise ValidationException("Title must be at least 3 characters")
        if len(description) < 10:
            raise ValidationException("Description must be at least 10 characters")
        if video_duration < 0:
            raise ValidationException("Video duration cannot be negative")
        parsed_resources = parse_resources(resources)

        if not video_content_type or not video_content_type.startswith(VIDEO_CONTENT_PREFIX):
            raise ValidationException("Lesson video must be a video file.")
        if not video_content:
            raise ValidationException("Lesson video file is empty.")
        if len(video_content) > settings.MAX_VIDEO_SIZE:
            raise ValidationException(f"Video exceeds the maximum size of {settings.MAX_VIDEO_SIZE} bytes.")

        if order_index is None:
            order_index = crud_lesson.next_order_index(db, course_id=course_id)
        elif order_index < 1:
            raise ValidationException("Order index must be at least 1")
        elif crud_lesson.get_by_course_and_order(db, course_id=course_id, order_index=order_index):
            raise ConflictException(f"A lesson with order {order_index} already exists in this course.")

        try:
            video_url = storage.upload_video(video_content, filename=video_filename)
        except Exception as e:
            logger.error(f"Video upload failed for course {course_id}: {e}")
            raise ServiceUnavailableException("Video upload failed. Please try again later.")

        transcript = await transcript_generator.generate(video_url, video_duration)

        try:
            lesson = crud_lesson.create(db, obj_in={
                "course_id": course_id,
                "title": title,
                "description": description,
                "order_index": order_index,
                "video_url": video_url,
                "video_duration": video_duration,
                "transcript": transcript.transcript,
                "resources": parsed_resources,
            })
        except IntegrityError:
            db.rollback()
            logger.warning(f"Lesson insert for course {course_id} lost order {order_index}; orphaned upload {video_url}")
            raise ConflictException(f"A lesson with order {order_index} already exists in this course.")

        logger.info(f"Lesson {lesson.id} created in course {course_id} (transcript generated: {transcript.success})")
        return lesson

    def get_lesson(self, db: Session, lesson_id: int, current_user_context: Optional[UserContext]) -> Lesson:
        lesson = self._get_or_raise(db, lesson_id)
        course = lesson.course

        if PermissionHelper.can_view_course(current_user_context, course):
            return lesson
        if current_user_context is not None and crud_enrollment.get_by_user_and_course(
            db, user_id=current_user_context.user.id, course_id=course.id
        ):
            return lesson
        raise NotFoundException("Lesson not found.")

    def get_lessons_by_course(self, db: Session, course_id: int, current_user_context: Optional[UserContext]) -> List[Lesson]:
        course = crud_course.get(db, id=course_id)
        if not course:
            raise NotFoundException("Course not found.")
        PermissionHelper.require_course_view_permission(current_user_context, course)
        return crud_lesson.get_by_course(db, course_id=course_id)

    def update_lesson(self, db: Session, lesson_id: int, lesson_in: LessonUpdate, current_user_context: UserContext) -> Lesson:
        lesson = self._get_or_raise(db, lesson_id)
        self._require_mutable(current_user_context, lesson.course)

        update_data = lesson_in.model_dump(exclude_unset=True)
        new_order = update_data.get("order_index")
        reordering = new_order is not None and new_order != lesson.order_index
        if reordering:
            clash = crud_lesson.get_by_course_and_order(db, course_id=lesson.course_id, order_index=new_order)
            if clash:
                raise ConflictException(f"A lesson with order {new_order} already exists in this course.")

        try:
            return crud_lesson.update(db, db_obj=lesson, obj_in=update_data)
        except IntegrityError:
            db.rollback()
            if not reordering:
                raise
            raise ConflictException(f"A lesson with order {new_order} already exists in this course.")

    def delete_lesson(self, db: Session, lesson_id: int, current_user_context: UserContext) -> None:
        lesson = self._get_or_raise(db, lesson_id)
        self._require_mutable(current_user_context, lesson.course)

        crud_lesson.delete(db, id=lesson_id)
        logger.info(f"Lesson {lesson_id} deleted")

    async def regenerate_transcript(
        self,
        db: Session,
        lesson_id: int,
        *,
        transcript_generator: TranscriptGenerator,
        current_user_context: UserContext,
    ) -> Lesson:
        lesson = self._get_or_raise(db, lesson_id)
        self._require_mutable(current_user_context, lesson.course)

        result = await transcript_generator.generate(lesson.video_url, lesson.video_duration)
        if not result.success:
            raise ServiceUnavailableException("Transcript generation failed. Please try again or add it manually.")

        return crud_lesson.update(db, db_obj=lesson, obj_in={"transcript": result.transcript})

lesson_service = LessonService()
