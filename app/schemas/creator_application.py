from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime

from app.core.constants import ApplicationStatusEnum, ApplicationActionEnum
from app.schemas.user import UserSummary


class CreatorApplicationCreate(BaseModel):
    motivation: str = Field(..., description="Why the applicant wants to teach (at least 50 characters)")
    experience: str = Field(..., description="Relevant experience (at least 20 characters)")
    specialization: str

    @field_validator("motivation")
    def motivation_length(cls, v):
        v = v.strip()
        if len(v) < 50:
            raise ValueError("Motivation must be at least 50 characters")
        return v

    @field_validator("experience")
    def experience_length(cls, v):
        v = v.strip()
        if len(v) < 20:
            raise ValueError("Experience must be at least 20 characters")
        return v

    @field_validator("specialization")
    def specialization_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Specialization is required")
        return v


class CreatorApplication(BaseModel):
    id: int
    user_id: int
    status: ApplicationStatusEnum
    motivation: str
    experience: str
    specialization: str
    applied_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class CreatorApplicationWithUser(CreatorApplication):
    user: UserSummary


class CreatorStatus(BaseModel):
    is_creator_approved: bool
    application: Optional[CreatorApplication] = None


class CreatorReviewRequest(BaseModel):
    action: ApplicationActionEnum
