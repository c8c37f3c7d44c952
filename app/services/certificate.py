import hashlib
import hmac
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import RoleEnum
from app.core.exceptions import ConflictException, ForbiddenException, NotFoundException, PreconditionFailedException
from app.crud.certificate import certificate as crud_certificate
from app.crud.course import course as crud_course
from app.crud.course_enrollment import course_enrollment as crud_enrollment
from app.models.certificate import Certificate
from app.schemas.certificate import CertificatePublic, CertificateVerification
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


def generate_serial(user_id: int, course_id: int, issued_at: datetime, secret_key: Optional[str] = None) -> str:
    """64-char hex serial, keyed so it cannot be derived from public data."""
    key = (secret_key or settings.SECRET_KEY).encode()
    message = f"{user_id}:{course_id}:{issued_at.isoformat()}".encode()
    return hmac.new(key, message, hashlib.sha256).hexdigest()


class CertificateService:

    def issue_certificate(self, db: Session, course_id: int, current_user_context: UserContext) -> Tuple[Certificate, bool]:
        """Returns the certificate and whether it was minted by this call."""
        permission_helper.require_role(current_user_context, RoleEnum.LEARNER, "Only learners can earn certificates.")

        course = crud_course.get(db, id=course_id)
        if not course:
            raise NotFoundException("Course not found.")

        user_id = current_user_context.user.id
        enrollment = crud_enrollment.get_by_user_and_course(db, user_id=user_id, course_id=course_id)
        if not enrollment:
            raise ForbiddenException("You are not enrolled in this course.")
        if not enrollment.is_completed:
            raise PreconditionFailedException("Course not completed yet.")

        existing = crud_certificate.get_by_user_and_course(db, user_id=user_id, course_id=course_id)
        if existing:
            return existing, False

        issued_at = datetime.now(timezone.utc)
        try:
            certificate = crud_certificate.create(db, obj_in={
                "user_id": user_id,
                "course_id": course_id,
                "serial_hash": generate_serial(user_id, course_id, issued_at),
                "issued_at": issued_at,
                "course_title": course.title,
                "user_name": current_user_context.user.name,
                "completion_date": enrollment.completed_at or issued_at,
            })
        except IntegrityError:
            db.rollback()
            winner = crud_certificate.get_by_user_and_course(db, user_id=user_id, course_id=course_id)
            if winner:
                return winner, False
            raise ConflictException("Certificate serial collision. Please retry.")

        logger.info(f"Issued certificate {certificate.serial_hash[:16]} to user {user_id} for course {course_id}")
        return certificate, True

    def verify_certificate(self, db: Session, serial_hash: str) -> CertificateVerification:
        certificate = crud_certificate.get_by_serial(db, serial_hash=serial_hash)
        if not certificate:
            return CertificateVerification(valid=False)
        return CertificateVerification(valid=True, certificate=CertificatePublic.model_validate(certificate))

    def get_my_certificates(self, db: Session, current_user_context: UserContext) -> List[Certificate]:
        return crud_certificate.get_by_user(db, user_id=current_user_context.user.id)

    def get_certificate(self, db: Session, course_id: int, current_user_context: UserContext) -> Certificate:
        certificate = crud_certificate.get_by_user_and_course(db, user_id=current_user_context.user.id, course_id=course_id)
        if not certificate:
            raise NotFoundException("Certificate not found.")
        return certificate

certificate_service = CertificateService()
