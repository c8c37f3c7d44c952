from sqlalchemy.orm import Session, selectinload
from typing import List, Optional

from app.crud.base import CRUDBase
from app.models.course_enrollment import CourseEnrollment
from app.models.course import Course
from app.schemas.course_enrollment import CourseEnrollment as CourseEnrollmentSchema

class CRUDCourseEnrollment(CRUDBase[CourseEnrollment, CourseEnrollmentSchema, CourseEnrollmentSchema]):

    def _query_with_relationships(self, db: Session):
        return db.query(CourseEnrollment).options(
            selectinload(CourseEnrollment.course).selectinload(Course.creator),
        )

    def get(self, db: Session, id: int) -> Optional[CourseEnrollment]:
        return self._query_with_relationships(db).filter(CourseEnrollment.id == id).first()

    def get_by_user_and_course(self, db: Session, user_id: int, course_id: int) -> Optional[CourseEnrollment]:
        return (
            self._query_with_relationships(db)
            .filter(CourseEnrollment.user_id == user_id)
            .filter(CourseEnrollment.course_id == course_id)
            .first()
        )

    def get_by_user(self, db: Session, user_id: int, skip: int = 0, limit: int = 100) -> List[CourseEnrollment]:
        return (
            self._query_with_relationships(db)
            .filter(CourseEnrollment.user_id == user_id)
            .order_by(CourseEnrollment.enrolled_at.desc(), CourseEnrollment.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

course_enrollment = CRUDCourseEnrollment(CourseEnrollment)
