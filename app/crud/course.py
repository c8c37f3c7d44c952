from sqlalchemy.orm import Session, selectinload
from sqlalchemy import or_, update, case
from typing import List, Optional

from app.crud.base import CRUDBase
from app.models.course import Course
from app.core.constants import CourseStatusEnum
from app.schemas.course import CourseCreate, CourseUpdate


class CRUDCourse(CRUDBase[Course, CourseCreate, CourseUpdate]):

    def _query_with_relationships(self, db: Session):
        return db.query(Course).options(
            selectinload(Course.creator),
            selectinload(Course.lessons),
        )

    def get(self, db: Session, id: int) -> Optional[Course]:
        return self._query_with_relationships(db).filter(Course.id == id).first()

    def search(
        self,
        db: Session,
        *,
        statuses: Optional[List[CourseStatusEnum]] = None,
        include_creator_id: Optional[int] = None,
        status: Optional[CourseStatusEnum] = None,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Course]:
        query = self._query_with_relationships(db)

        if statuses is not None:
            visibility = Course.status.in_(statuses)
            if include_creator_id is not None:
                visibility = or_(visibility, Course.creator_id == include_creator_id)
            query = query.filter(visibility)
        if status:
            query = query.filter(Course.status == status)
        if category:
            query = query.filter(Course.category == category)
        if difficulty:
            query = query.filter(Course.difficulty == difficulty)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Course.title.ilike(pattern), Course.description.ilike(pattern)))

        return query.order_by(Course.created_at.desc(), Course.id.desc()).offset(skip).limit(limit).all()

    def get_by_status(self, db: Session, *, status: CourseStatusEnum) -> List[Course]:
        return (
            self._query_with_relationships(db)
            .filter(Course.status == status)
            .order_by(Course.created_at.desc(), Course.id.desc())
            .all()
        )

    def adjust_enrollment_count(self, db: Session, *, course_id: int, delta: int, commit: bool = True) -> None:
        """Atomic in-database increment of the denormalized counter, floored at zero."""
        new_value = Course.enrollment_count + delta
        db.execute(
            update(Course)
            .where(Course.id == course_id)
            .values(enrollment_count=case((new_value < 0, 0), else_=new_value))
            .execution_options(synchronize_session=False)
        )
        if commit:
            db.commit()

course = CRUDCourse(Course)
