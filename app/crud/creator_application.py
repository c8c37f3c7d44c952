from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.creator_application import CreatorApplication
from app.core.constants import ApplicationStatusEnum
from app.schemas.creator_application import CreatorApplicationCreate


class CRUDCreatorApplication(CRUDBase[CreatorApplication, CreatorApplicationCreate, CreatorApplicationCreate]):
    def get_by_user(self, db: Session, *, user_id: int) -> Optional[CreatorApplication]:
        return db.query(CreatorApplication).filter(CreatorApplication.user_id == user_id).first()

    def get_by_status(self, db: Session, *, status: ApplicationStatusEnum) -> List[CreatorApplication]:
        return (
            db.query(CreatorApplication)
            .options(selectinload(CreatorApplication.user))
            .filter(CreatorApplication.status == status)
            .order_by(CreatorApplication.applied_at)
            .all()
        )

creator_application = CRUDCreatorApplication(CreatorApplication)
