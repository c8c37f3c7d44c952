from typing import List
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.schemas.certificate import Certificate, CertificateVerification
from app.schemas.response import APIResponse
from app.schemas.user import UserContext
from app.services.certificate import certificate_service
from app.services.certificate_renderer import CertificateRenderer, certificate_filename
from app.utils import deps

router = APIRouter()

require_learner = deps.require_role(RoleEnum.LEARNER)


@router.get("/verify/{serial_hash}", response_model=APIResponse[CertificateVerification])
def verify_certificate(
    *,
    db: Session = Depends(deps.get_db),
    serial_hash: str
):
    verification = certificate_service.verify_certificate(db, serial_hash=serial_hash)
    message = "Certificate is valid" if verification.valid else "Certificate not found"
    return APIResponse(message=message, data=verification)


@router.get("", response_model=APIResponse[List[Certificate]])
def get_my_certificates(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(require_learner)
):
    certificates = certificate_service.get_my_certificates(db, current_user_context=context)
    return APIResponse(message="Certificates retrieved successfully", data=[Certificate.model_validate(c) for c in certificates])


@router.post("/{course_id}", response_model=APIResponse[Certificate], status_code=status.HTTP_201_CREATED)
def issue_certificate(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    response: Response,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    certificate, created = certificate_service.issue_certificate(db, course_id=course_id, current_user_context=context)
    if not created:
        response.status_code = status.HTTP_200_OK
        return APIResponse(message="Certificate already issued", data=Certificate.model_validate(certificate))
    return APIResponse(message="Certificate issued successfully", data=Certificate.model_validate(certificate))


@router.get("/{course_id}", response_model=APIResponse[Certificate])
def get_certificate(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    context: UserContext = Depends(require_learner)
):
    certificate = certificate_service.get_certificate(db, course_id=course_id, current_user_context=context)
    return APIResponse(message="Certificate retrieved successfully", data=Certificate.model_validate(certificate))


@router.get("/{course_id}/download")
def download_certificate(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    context: UserContext = Depends(require_learner)
):
    certificate = certificate_service.get_certificate(db, course_id=course_id, current_user_context=context)
    pdf = CertificateRenderer.render_pdf(certificate)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{certificate_filename(certificate.serial_hash)}"'},
    )
