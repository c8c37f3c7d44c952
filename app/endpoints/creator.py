from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.schemas.creator_application import CreatorApplication, CreatorApplicationCreate, CreatorStatus
from app.schemas.response import APIResponse
from app.schemas.user import UserContext
from app.services.creator import creator_service
from app.utils import deps

router = APIRouter()


@router.post("/apply", response_model=APIResponse[CreatorApplication], status_code=status.HTTP_201_CREATED)
def apply_for_creator(
    *,
    db: Session = Depends(deps.get_transactional_db),
    application_in: CreatorApplicationCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    application = creator_service.apply(db, application_in=application_in, current_user_context=context)
    return APIResponse(message="Application submitted successfully", data=CreatorApplication.model_validate(application))


@router.get("/status", response_model=APIResponse[CreatorStatus])
def get_creator_status(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    creator_status = creator_service.get_status(db, current_user_context=context)
    return APIResponse(message="Creator status retrieved successfully", data=creator_status)
