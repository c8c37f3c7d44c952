from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class Certificate(BaseModel):
    id: int
    user_id: int
    course_id: int
    serial_hash: str
    issued_at: datetime
    course_title: str
    user_name: str
    completion_date: datetime

    model_config = ConfigDict(from_attributes=True)


class CertificatePublic(BaseModel):
    """Non-sensitive projection returned by public verification."""
    serial_hash: str
    user_name: str
    course_title: str
    completion_date: datetime
    issued_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CertificateVerification(BaseModel):
    valid: bool
    certificate: Optional[CertificatePublic] = None
