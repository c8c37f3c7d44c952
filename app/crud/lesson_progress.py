from sqlalchemy.orm import Session
from typing import List, Optional

from app.crud.base import CRUDBase
from app.models.lesson_progress import LessonProgress
from app.schemas.lesson_progress import LessonProgress as LessonProgressSchema

class CRUDLessonProgress(CRUDBase[LessonProgress, LessonProgressSchema, LessonProgressSchema]):

    def get_by_user_and_lesson(self, db: Session, user_id: int, lesson_id: int) -> Optional[LessonProgress]:
        return (
            db.query(LessonProgress)
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.lesson_id == lesson_id)
            .first()
        )

    def get_by_user_and_lessons(self, db: Session, user_id: int, lesson_ids: List[int]) -> List[LessonProgress]:
        if not lesson_ids:
            return []
        return (
            db.query(LessonProgress)
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.lesson_id.in_(lesson_ids))
            .all()
        )

lesson_progress = CRUDLessonProgress(LessonProgress)
