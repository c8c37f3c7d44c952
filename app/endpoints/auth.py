from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.schemas.token import LoginRequest, LoginResponse
from app.schemas.user import User, UserCreate, UserContext
from app.services.auth import auth_service
from app.utils import deps

router = APIRouter()


@router.post("/register", response_model=APIResponse[User], status_code=status.HTTP_201_CREATED)
def register(
    *,
    db: Session = Depends(deps.get_transactional_db),
    user_in: UserCreate
):
    new_user = auth_service.register(db, user_in=user_in)
    return APIResponse(message="Registration successful", data=User.model_validate(new_user))


@router.post("/login", response_model=APIResponse[LoginResponse])
def login(
    *,
    db: Session = Depends(deps.get_db),
    login_in: LoginRequest
):
    login_response = auth_service.login(db, email=login_in.email, password=login_in.password)
    return APIResponse(message="Login successful", data=login_response)


@router.get("/me", response_model=APIResponse[User])
def read_current_user(
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    return APIResponse(message="User retrieved successfully", data=context.user)
