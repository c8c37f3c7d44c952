import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum, CourseStatusEnum
from app.core.exceptions import ConflictException, NotFoundException, PreconditionFailedException
from app.crud.course import course as crud_course
from app.crud.course_enrollment import course_enrollment as crud_enrollment
from app.models.course_enrollment import CourseEnrollment
from app.schemas.course_enrollment import EnrollmentStatus, CourseEnrollment as CourseEnrollmentSchema
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class EnrollmentService:

    def enroll(self, db: Session, course_id: int, current_user_context: UserContext) -> CourseEnrollment:
        permission_helper.require_role(current_user_context, RoleEnum.LEARNER, "Only learners can enroll in courses.")

        course = crud_course.get(db, id=course_id)
        if not course:
            raise NotFoundException("Course not found.")
        if course.status != CourseStatusEnum.PUBLISHED:
            raise PreconditionFailedException("Course is not available for enrollment.")

        user_id = current_user_context.user.id
        if crud_enrollment.get_by_user_and_course(db, user_id=user_id, course_id=course_id):
            raise ConflictException("Already enrolled in this course.")

        try:
            enrollment = crud_enrollment.create(db, obj_in={
                "user_id": user_id,
                "course_id": course_id,
                "enrolled_at": datetime.now(timezone.utc),
                "progress_percentage": 0,
                "is_completed": False,
            }, commit=False)
        except IntegrityError:
            # Lost a race with a concurrent enrollment for the same pair.
            db.rollback()
            raise ConflictException("Already enrolled in this course.")

        crud_course.adjust_enrollment_count(db, course_id=course_id, delta=1, commit=False)
        db.commit()

        logger.info(f"User {user_id} enrolled in course {course_id}")
        return crud_enrollment.get(db, id=enrollment.id)

    def get_my_enrollments(self, db: Session, current_user_context: UserContext) -> List[CourseEnrollment]:
        return crud_enrollment.get_by_user(db, user_id=current_user_context.user.id)

    def get_enrollment_status(self, db: Session, course_id: int, current_user_context: UserContext) -> EnrollmentStatus:
        enrollment = crud_enrollment.get_by_user_and_course(db, user_id=current_user_context.user.id, course_id=course_id)
        return EnrollmentStatus(
            is_enrolled=enrollment is not None,
            enrollment=CourseEnrollmentSchema.model_validate(enrollment) if enrollment else None,
        )

enrollment_service = EnrollmentService()
