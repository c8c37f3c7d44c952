from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import ApplicationStatusEnum

class CreatorApplication(Base):
    __tablename__ = "creator_applications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    status = Column(Enum(ApplicationStatusEnum), nullable=False, default=ApplicationStatusEnum.PENDING)
    motivation = Column(Text, nullable=False)
    experience = Column(Text, nullable=False)
    specialization = Column(String, nullable=False)
    applied_at = Column(DateTime(timezone=True), nullable=False)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="creator_application", foreign_keys=[user_id])
