from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func
from typing import Any, List, Optional

from app.crud.base import CRUDBase
from app.models.lesson import Lesson
from app.schemas.lesson import LessonUpdate

class CRUDLesson(CRUDBase[Lesson, LessonUpdate, LessonUpdate]):
    def get(self, db: Session, id: Any) -> Optional[Lesson]:
        return db.query(self.model).filter(self.model.id == id).options(selectinload(self.model.course)).first()

    def get_by_course(self, db: Session, *, course_id: int) -> List[Lesson]:
        return db.query(self.model).filter(self.model.course_id == course_id).order_by(self.model.order_index).all()

    def get_ids_by_course(self, db: Session, *, course_id: int) -> List[int]:
        rows = db.query(self.model.id).filter(self.model.course_id == course_id).all()
        return [row.id for row in rows]

    def count_by_course(self, db: Session, *, course_id: int) -> int:
        return db.query(func.count(self.model.id)).filter(self.model.course_id == course_id).scalar() or 0

    def get_by_course_and_order(self, db: Session, *, course_id: int, order_index: int) -> Optional[Lesson]:
        return (
            db.query(self.model)
            .filter(self.model.course_id == course_id, self.model.order_index == order_index)
            .first()
        )

    def next_order_index(self, db: Session, *, course_id: int) -> int:
        current = db.query(func.max(self.model.order_index)).filter(self.model.course_id == course_id).scalar()
        return (current or 0) + 1

lesson = CRUDLesson(Lesson)
