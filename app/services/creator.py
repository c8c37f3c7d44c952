import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum, ApplicationStatusEnum, ApplicationActionEnum
from app.core.exceptions import NotFoundException, PreconditionFailedException, ConflictException
from app.crud.creator_application import creator_application as crud_application
from app.crud.user import user as crud_user
from app.models.creator_application import CreatorApplication
from app.schemas.creator_application import CreatorApplicationCreate, CreatorStatus, CreatorApplication as CreatorApplicationSchema
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class CreatorService:

    def apply(self, db: Session, application_in: CreatorApplicationCreate, current_user_context: UserContext) -> CreatorApplication:
        permission_helper.require_role(current_user_context, RoleEnum.LEARNER, "Only learners can apply to become creators.")

        user_id = current_user_context.user.id
        existing = crud_application.get_by_user(db, user_id=user_id)
        if existing:
            if existing.status == ApplicationStatusEnum.PENDING:
                raise PreconditionFailedException("You already have a pending application.")
            if existing.status == ApplicationStatusEnum.APPROVED:
                raise PreconditionFailedException("You are already an approved creator.")
            # A rejected applicant may apply again; the record is reset to pending.
            updated = crud_application.update(db, db_obj=existing, obj_in={
                **application_in.model_dump(),
                "status": ApplicationStatusEnum.PENDING,
                "applied_at": datetime.now(timezone.utc),
                "reviewed_at": None,
                "reviewed_by": None,
            })
            logger.info(f"User {user_id} re-applied to become a creator")
            return updated

        try:
            application = crud_application.create(db, obj_in={
                **application_in.model_dump(),
                "user_id": user_id,
                "status": ApplicationStatusEnum.PENDING,
                "applied_at": datetime.now(timezone.utc),
            })
        except IntegrityError:
            db.rollback()
            raise ConflictException("You already have an application on file.")

        logger.info(f"User {user_id} applied to become a creator")
        return application

    def get_status(self, db: Session, current_user_context: UserContext) -> CreatorStatus:
        application = crud_application.get_by_user(db, user_id=current_user_context.user.id)
        return CreatorStatus(
            is_creator_approved=current_user_context.user.is_creator_approved,
            application=CreatorApplicationSchema.model_validate(application) if application else None,
        )

    def get_pending_applications(self, db: Session) -> List[CreatorApplication]:
        return crud_application.get_by_status(db, status=ApplicationStatusEnum.PENDING)

    def review_application(
        self, db: Session, application_id: int, action: ApplicationActionEnum, current_user_context: UserContext
    ) -> CreatorApplication:
        permission_helper.require_role(current_user_context, RoleEnum.ADMIN, "Only admins can review creator applications.")

        application = crud_application.get(db, id=application_id)
        if not application:
            raise NotFoundException("Application not found.")
        if application.status != ApplicationStatusEnum.PENDING:
            raise PreconditionFailedException("Application has already been reviewed.")

        approved = action == ApplicationActionEnum.APPROVE
        application.status = ApplicationStatusEnum.APPROVED if approved else ApplicationStatusEnum.REJECTED
        application.reviewed_at = datetime.now(timezone.utc)
        application.reviewed_by = current_user_context.user.id
        db.add(application)

        if approved:
            applicant = crud_user.get(db, id=application.user_id)
            crud_user.promote_to_creator(db, user=applicant, commit=False)

        db.commit()
        db.refresh(application)
        logger.info(f"Creator application {application.id} {application.status.value} by admin {current_user_context.user.id}")
        return application

creator_service = CreatorService()
