from enum import Enum


TRANSCRIPT_FALLBACK = "Transcript generation failed. Please add manually."

class RoleEnum(str, Enum):
    LEARNER = "learner"
    CREATOR = "creator"
    ADMIN = "admin"

class CourseStatusEnum(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"

class CourseDifficultyEnum(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

class ReviewActionEnum(str, Enum):
    PUBLISH = "publish"
    REJECT = "reject"

class ApplicationStatusEnum(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class ApplicationActionEnum(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"

class ResourceTypeEnum(str, Enum):
    PDF = "pdf"
    LINK = "link"
    DOCUMENT = "document"
