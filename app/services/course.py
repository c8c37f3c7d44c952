import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import RoleEnum, CourseStatusEnum, ReviewActionEnum
from app.core.exceptions import NotFoundException, PreconditionFailedException, ServiceUnavailableException, ValidationException
from app.crud.course import course as crud_course
from app.crud.lesson import lesson as crud_lesson
from app.models.course import Course
from app.schemas.course import CourseCreate, CourseUpdate, CourseDetail, Course as CourseSchema
from app.schemas.lesson import Lesson as LessonSchema
from app.schemas.user import UserContext
from app.services.media_storage import MediaStorage
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)

IMAGE_CONTENT_PREFIX = "image/"


class CourseService:

    def _get_or_raise(self, db: Session, course_id: int) -> Course:
        course = crud_course.get(db, id=course_id)
        if not course:
            raise NotFoundException("Course not found.")
        return course

    def create_course(self, db: Session, course_in: CourseCreate, current_user_context: UserContext) -> Course:
        permission_helper.require_role(current_user_context, RoleEnum.CREATOR, "Only creators can create courses.")

        course_data = course_in.model_dump()
        course_data["creator_id"] = current_user_context.user.id
        course_data["status"] = CourseStatusEnum.DRAFT
        new_course = crud_course.create(db, obj_in=course_data)

        logger.info(f"Creator {current_user_context.user.id} created course {new_course.id}")
        return crud_course.get(db, id=new_course.id)

    def get_courses(
        self,
        db: Session,
        current_user_context: Optional[UserContext],
        *,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Course]:
        if permission_helper.is_admin(current_user_context):
            statuses, creator_id = None, None
        elif permission_helper.is_creator(current_user_context):
            statuses, creator_id = [CourseStatusEnum.PUBLISHED], current_user_context.user.id
        else:
            statuses, creator_id = [CourseStatusEnum.PUBLISHED], None

        return crud_course.search(
            db,
            statuses=statuses,
            include_creator_id=creator_id,
            category=category,
            difficulty=difficulty,
            search=search,
            skip=skip,
            limit=limit,
        )

    def get_course(self, db: Session, course_id: int, current_user_context: Optional[UserContext]) -> CourseDetail:
        course = self._get_or_raise(db, course_id)
        permission_helper.require_course_view_permission(current_user_context, course)

        return CourseDetail(
            course=CourseSchema.model_validate(course),
            lessons=[LessonSchema.model_validate(lesson) for lesson in course.lessons],
        )

    def update_course(self, db: Session, course_id: int, course_in: CourseUpdate, current_user_context: UserContext) -> Course:
        course = self._get_or_raise(db, course_id)
        permission_helper.require_course_mutation_permission(current_user_context, course, "update")
        permission_helper.require_draft(course, "Can only update draft courses.")

        crud_course.update(db, db_obj=course, obj_in=course_in)
        return crud_course.get(db, id=course_id)

    def upload_thumbnail(
        self,
        db: Session,
        course_id: int,
        *,
        content: bytes,
        filename: Optional[str],
        content_type: Optional[str],
        storage: MediaStorage,
        current_user_context: UserContext,
    ) -> Course:
        course = self._get_or_raise(db, course_id)
        permission_helper.require_course_mutation_permission(current_user_context, course, "update")
        permission_helper.require_draft(course, "Can only update draft courses.")

        if not content_type or not content_type.startswith(IMAGE_CONTENT_PREFIX):
            raise ValidationException("Thumbnail must be an image file.")
        if not content:
            raise ValidationException("Thumbnail file is empty.")
        if len(content) > settings.MAX_IMAGE_SIZE:
            raise ValidationException(f"Thumbnail exceeds the maximum size of {settings.MAX_IMAGE_SIZE} bytes.")

        try:
            thumbnail_url = storage.upload_image(content, filename=filename)
        except Exception as e:
            logger.error(f"Thumbnail upload failed for course {course_id}: {e}")
            raise ServiceUnavailableException("Thumbnail upload failed. Please try again later.")

        crud_course.update(db, db_obj=course, obj_in={"thumbnail": thumbnail_url})
        return crud_course.get(db, id=course_id)

    def submit_course(self, db: Session, course_id: int, current_user_context: UserContext) -> Course:
        course = self._get_or_raise(db, course_id)
        permission_helper.require_course_mutation_permission(current_user_context, course, "submit")
        permission_helper.require_draft(course, "Only draft courses can be submitted for review.")

        if crud_lesson.count_by_course(db, course_id=course.id) < 1:
            raise PreconditionFailedException("Course must have at least one lesson before submission.")

        crud_course.update(db, db_obj=course, obj_in={"status": CourseStatusEnum.PENDING})
        logger.info(f"Course {course_id} submitted for review")
        return crud_course.get(db, id=course_id)

    def delete_course(self, db: Session, course_id: int, current_user_context: UserContext) -> None:
        course = self._get_or_raise(db, course_id)
        permission_helper.require_course_mutation_permission(current_user_context, course, "delete")
        permission_helper.require_draft(course, "Can only delete draft courses.")

        crud_course.delete(db, id=course_id)
        logger.info(f"Course {course_id} deleted with its lessons")

    def get_courses_for_review(self, db: Session, status: CourseStatusEnum = CourseStatusEnum.PENDING) -> List[Course]:
        return crud_course.get_by_status(db, status=status)

    def review_course(self, db: Session, course_id: int, action: ReviewActionEnum, current_user_context: UserContext) -> Course:
        permission_helper.require_role(current_user_context, RoleEnum.ADMIN, "Only admins can review courses.")

        course = self._get_or_raise(db, course_id)
        if course.status != CourseStatusEnum.PENDING:
            raise PreconditionFailedException("Only pending courses can be reviewed.")

        if action == ReviewActionEnum.PUBLISH:
            update_data = {
                "status": CourseStatusEnum.PUBLISHED,
                "published_at": datetime.now(timezone.utc),
                "published_by": current_user_context.user.id,
            }
        else:
            update_data = {"status": CourseStatusEnum.REJECTED, "published_at": None, "published_by": None}

        crud_course.update(db, db_obj=course, obj_in=update_data)
        logger.info(f"Course {course_id} {update_data['status'].value} by admin {current_user_context.user.id}")
        return crud_course.get(db, id=course_id)

course_service = CourseService()
