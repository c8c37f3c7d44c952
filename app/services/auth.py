import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import RoleEnum
from app.core.exceptions import ConflictException
from app.core.security import get_password_hash, verify_password, create_access_token
from app.crud.user import user as crud_user
from app.models.user import User
from app.schemas.token import LoginResponse, Token
from app.schemas.user import UserCreate, User as UserSchema

logger = logging.getLogger(__name__)


class AuthService:
    def register(self, db: Session, *, user_in: UserCreate) -> User:
        email = user_in.email.lower()
        if crud_user.get_by_email(db, email=email):
            raise ConflictException("A user with this email already exists.")

        user_data = {
            "name": user_in.name,
            "email": email,
            "hashed_password": get_password_hash(user_in.password),
            "role": RoleEnum.LEARNER,
        }
        try:
            new_user = crud_user.create(db, obj_in=user_data)
        except IntegrityError:
            db.rollback()
            raise ConflictException("A user with this email already exists.")

        logger.info(f"Registered learner {new_user.id}")
        return new_user

    def login(self, db: Session, *, email: str, password: str) -> LoginResponse:
        user = crud_user.get_by_email(db, email=email)
        if not user or not verify_password(password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User is inactive",
            )

        access_token = create_access_token(user_id=user.id, role=user.role.value)
        return LoginResponse(
            token=Token(access_token=access_token, token_type="bearer"),
            user=UserSchema.model_validate(user),
        )

    def ensure_first_admin(self, db: Session) -> None:
        """Seeds the bootstrap admin account from settings when configured."""
        if not settings.FIRST_ADMIN_EMAIL or not settings.FIRST_ADMIN_PASSWORD:
            return

        existing = crud_user.get_by_email(db, email=settings.FIRST_ADMIN_EMAIL)
        if existing:
            return

        crud_user.create(db, obj_in={
            "name": settings.FIRST_ADMIN_NAME,
            "email": settings.FIRST_ADMIN_EMAIL.lower(),
            "hashed_password": get_password_hash(settings.FIRST_ADMIN_PASSWORD),
            "role": RoleEnum.ADMIN,
        })
        logger.info(f"Created bootstrap admin {settings.FIRST_ADMIN_EMAIL}")

auth_service = AuthService()
