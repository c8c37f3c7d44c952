from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import CourseStatusEnum, CourseDifficultyEnum

class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, index=True, nullable=False)
    description = Column(Text, nullable=False)
    thumbnail = Column(String, nullable=True)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(Enum(CourseStatusEnum), nullable=False, default=CourseStatusEnum.DRAFT, index=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    published_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    duration = Column(Integer, nullable=False, default=0) # Duration in minutes
    difficulty = Column(Enum(CourseDifficultyEnum), nullable=False, default=CourseDifficultyEnum.BEGINNER)
    category = Column(String, nullable=False, index=True)
    tags = Column(JSON, nullable=False, default=list)
    enrollment_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    creator = relationship("User", back_populates="courses", foreign_keys=[creator_id])
    publisher = relationship("User", foreign_keys=[published_by])
    lessons = relationship(
        "Lesson",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Lesson.order_index",
    )
    enrollments = relationship("CourseEnrollment", back_populates="course", cascade="all, delete-orphan")
    certificates = relationship("Certificate", back_populates="course")

    @property
    def lesson_count(self) -> int:
        return len(self.lessons)

    @property
    def creator_name(self):
        return self.creator.name if self.creator else None
