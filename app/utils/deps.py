import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.database import SessionLocal
from app.core.security import decode_access_token
from app.core.constants import RoleEnum
from app.crud.user import user as user_crud
from app.schemas.token import TokenPayload
from app.schemas.user import UserContext, User as UserSchema
from app.services.media_storage import MediaStorage, build_media_storage
from app.services.transcript import TranscriptGenerator, transcript_generator

logger = logging.getLogger(__name__)

http_bearer = HTTPBearer(auto_error=False)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_transactional_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

def _resolve_context(db: Session, token: str) -> UserContext:
    try:
        payload = decode_access_token(token)
        token_data = TokenPayload(**payload)
    except JWTError:
        raise _credentials_exception()
    except ValidationError:
        raise _credentials_exception("Invalid token payload")

    if not token_data.sub or not token_data.sub.isdigit():
        raise _credentials_exception("Invalid token payload")

    user = user_crud.get(db, id=int(token_data.sub))
    if not user:
        raise _credentials_exception("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    # The stored role wins over the token claim so role changes apply immediately.
    return UserContext(user=UserSchema.model_validate(user), role=user.role)

def get_current_user_with_context(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)
) -> UserContext:
    if credentials is None:
        raise _credentials_exception("Not authenticated")
    return _resolve_context(db, credentials.credentials)

def get_optional_user_context(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)
) -> Optional[UserContext]:
    """Resolves the caller when a valid token is present; anonymous otherwise."""
    if credentials is None:
        return None
    try:
        return _resolve_context(db, credentials.credentials)
    except HTTPException as e:
        logger.debug(f"Ignoring invalid credentials on public route: {e.detail}")
        return None

def require_role(*roles: RoleEnum):
    """Dependency that checks the caller acts under one of the given roles."""
    allowed = {r.value for r in roles}

    def _verify_role(context: UserContext = Depends(get_current_user_with_context)) -> UserContext:
        if context.role not in allowed:
            names = " or ".join(sorted(allowed))
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"This action requires the {names} role."
            )
        return context
    return _verify_role

def get_media_storage() -> MediaStorage:
    return build_media_storage()

def get_transcript_generator() -> TranscriptGenerator:
    return transcript_generator
