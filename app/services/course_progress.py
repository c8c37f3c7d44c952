import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum, CourseStatusEnum
from app.core.exceptions import ForbiddenException, NotFoundException, PreconditionFailedException
from app.crud.course_enrollment import course_enrollment as crud_enrollment
from app.crud.lesson import lesson as crud_lesson
from app.crud.lesson_progress import lesson_progress as crud_lesson_progress
from app.models.course_enrollment import CourseEnrollment
from app.models.lesson_progress import LessonProgress
from app.schemas.course import Course as CourseSchema, CourseSummary
from app.schemas.course_enrollment import CourseEnrollment as CourseEnrollmentSchema
from app.schemas.lesson import LessonWithProgress, Lesson as LessonSchema
from app.schemas.lesson_progress import (
    CourseProgress,
    CourseProgressOverview,
    LessonCompleteRequest,
    LessonCompletion,
    LessonProgress as LessonProgressSchema,
    ProgressSummary,
)
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


def calculate_progress(completed: int, total: int) -> int:
    """Whole-number completion percentage, rounded half up. No lessons means 0%."""
    if total <= 0:
        return 0
    completed = max(0, min(completed, total))
    return (200 * completed + total) // (2 * total)


def aggregate_progress(lesson_ids: Iterable[int], progress_records: Iterable[LessonProgress]) -> Tuple[int, int, int]:
    """Re-derives (completed, total, percentage) from the course's current lessons.

    Records for lessons no longer in the course are ignored.
    """
    lesson_ids = set(lesson_ids)
    completed = {
        record.lesson_id
        for record in progress_records
        if record.is_completed and record.lesson_id in lesson_ids
    }
    total = len(lesson_ids)
    return len(completed), total, calculate_progress(len(completed), total)


def apply_progress(enrollment: CourseEnrollment, percentage: int, now: Optional[datetime] = None) -> None:
    """Writes the aggregate onto the enrollment; dropping below 100% re-opens it."""
    enrollment.progress_percentage = percentage
    enrollment.is_completed = percentage == 100
    if enrollment.is_completed:
        if enrollment.completed_at is None:
            enrollment.completed_at = now or datetime.now(timezone.utc)
    else:
        enrollment.completed_at = None


class CourseProgressService:

    def _get_enrollment_or_raise(self, db: Session, user_id: int, course_id: int) -> CourseEnrollment:
        enrollment = crud_enrollment.get_by_user_and_course(db, user_id=user_id, course_id=course_id)
        if not enrollment:
            raise NotFoundException("You are not enrolled in this course.")
        return enrollment

    def _recompute(self, db: Session, enrollment: CourseEnrollment) -> int:
        lesson_ids = crud_lesson.get_ids_by_course(db, course_id=enrollment.course_id)
        records = crud_lesson_progress.get_by_user_and_lessons(db, user_id=enrollment.user_id, lesson_ids=lesson_ids)
        _, _, percentage = aggregate_progress(lesson_ids, records)
        apply_progress(enrollment, percentage)
        db.add(enrollment)
        return percentage

    def _upsert_progress(
        self, db: Session, *, user_id: int, lesson_id: int, course_id: int, completion_in: LessonCompleteRequest, now: datetime
    ) -> LessonProgress:
        progress = crud_lesson_progress.get_by_user_and_lesson(db, user_id=user_id, lesson_id=lesson_id)
        if progress is None:
            try:
                progress = crud_lesson_progress.create(db, obj_in={
                    "user_id": user_id,
                    "lesson_id": lesson_id,
                    "course_id": course_id,
                    "is_completed": False,
                    "time_spent": 0,
                    "last_position": 0,
                }, commit=False)
            except IntegrityError:
                # A concurrent completion inserted the row first; continue with it.
                db.rollback()
                progress = crud_lesson_progress.get_by_user_and_lesson(db, user_id=user_id, lesson_id=lesson_id)

        progress.is_completed = True
        progress.completed_at = now
        # Known progress is only overwritten by a real (non-zero) value.
        if completion_in.time_spent:
            progress.time_spent = completion_in.time_spent
        if completion_in.last_position:
            progress.last_position = completion_in.last_position
        db.add(progress)
        db.flush()
        return progress

    def complete_lesson(
        self,
        db: Session,
        lesson_id: int,
        completion_in: LessonCompleteRequest,
        current_user_context: UserContext,
    ) -> LessonCompletion:
        permission_helper.require_role(current_user_context, RoleEnum.LEARNER, "Only learners can track lesson progress.")

        lesson = crud_lesson.get(db, id=lesson_id)
        if not lesson:
            raise NotFoundException("Lesson not found.")

        user_id = current_user_context.user.id
        enrollment = crud_enrollment.get_by_user_and_course(db, user_id=user_id, course_id=lesson.course_id)
        if not enrollment:
            raise ForbiddenException("You must be enrolled in this course to track progress.")
        if lesson.course.status != CourseStatusEnum.PUBLISHED:
            raise PreconditionFailedException("Course is not published.")

        now = datetime.now(timezone.utc)
        progress = self._upsert_progress(
            db, user_id=user_id, lesson_id=lesson.id, course_id=lesson.course_id, completion_in=completion_in, now=now
        )
        enrollment = crud_enrollment.get_by_user_and_course(db, user_id=user_id, course_id=lesson.course_id)
        percentage = self._recompute(db, enrollment)
        db.commit()
        db.refresh(progress)

        if enrollment.is_completed:
            logger.info(f"User {user_id} completed course {lesson.course_id}")

        return LessonCompletion(
            progress=LessonProgressSchema.model_validate(progress),
            course_progress=percentage,
            is_course_completed=enrollment.is_completed,
        )

    def _lessons_with_progress(self, lessons, records: List[LessonProgress]) -> List[LessonWithProgress]:
        by_lesson = {record.lesson_id: record for record in records}
        result = []
        for lesson in lessons:
            record = by_lesson.get(lesson.id)
            data = LessonSchema.model_validate(lesson).model_dump()
            if record:
                data.update(
                    is_completed=record.is_completed,
                    completed_at=record.completed_at,
                    time_spent=record.time_spent,
                    last_position=record.last_position,
                )
            result.append(LessonWithProgress(**data))
        return result

    def get_course_progress(self, db: Session, course_id: int, current_user_context: UserContext) -> CourseProgress:
        enrollment = self._get_enrollment_or_raise(db, current_user_context.user.id, course_id)
        course = enrollment.course

        lessons = crud_lesson.get_by_course(db, course_id=course_id)
        records = crud_lesson_progress.get_by_user_and_lessons(
            db, user_id=enrollment.user_id, lesson_ids=[lesson.id for lesson in lessons]
        )
        completed, total, percentage = aggregate_progress([lesson.id for lesson in lessons], records)

        return CourseProgress(
            course=CourseSchema.model_validate(course),
            enrollment=CourseEnrollmentSchema.model_validate(enrollment),
            lessons=self._lessons_with_progress(lessons, records),
            progress=ProgressSummary(
                total_lessons=total,
                completed_lessons=completed,
                percentage=percentage,
                is_completed=percentage == 100,
            ),
        )

    def get_progress_overview(self, db: Session, current_user_context: UserContext) -> List[CourseProgressOverview]:
        permission_helper.require_role(current_user_context, RoleEnum.LEARNER, "Only learners have progress dashboards.")

        overview = []
        for enrollment in crud_enrollment.get_by_user(db, user_id=current_user_context.user.id):
            lessons = crud_lesson.get_by_course(db, course_id=enrollment.course_id)
            records = crud_lesson_progress.get_by_user_and_lessons(
                db, user_id=enrollment.user_id, lesson_ids=[lesson.id for lesson in lessons]
            )
            completed, total, _ = aggregate_progress([lesson.id for lesson in lessons], records)
            overview.append(CourseProgressOverview(
                enrollment=CourseEnrollmentSchema.model_validate(enrollment),
                course=CourseSummary.model_validate(enrollment.course),
                total_lessons=total,
                completed_lessons=completed,
                progress=enrollment.progress_percentage,
                is_completed=enrollment.is_completed,
                lessons=self._lessons_with_progress(lessons, records),
            ))
        return overview

course_progress_service = CourseProgressService()
