from typing import Optional
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.user import User
from app.core.constants import RoleEnum
from app.schemas.user import UserCreate


class CRUDUser(CRUDBase[User, UserCreate, UserCreate]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    def promote_to_creator(self, db: Session, *, user: User, commit: bool = True) -> User:
        user.role = RoleEnum.CREATOR
        user.is_creator_approved = True
        db.add(user)
        if commit:
            db.commit()
            db.refresh(user)
        return user

user = CRUDUser(User)
