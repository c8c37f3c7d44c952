from typing import Optional

from app.models.course import Course
from app.schemas.user import UserContext
from app.core.constants import RoleEnum, CourseStatusEnum
from app.core.exceptions import ForbiddenException, NotFoundException, PreconditionFailedException


class PermissionHelper:
    @staticmethod
    def is_admin(context: Optional[UserContext]) -> bool:
        return context is not None and context.role == RoleEnum.ADMIN

    @staticmethod
    def is_creator(context: Optional[UserContext]) -> bool:
        return context is not None and context.role == RoleEnum.CREATOR

    @staticmethod
    def is_learner(context: Optional[UserContext]) -> bool:
        return context is not None and context.role == RoleEnum.LEARNER

    @staticmethod
    def is_owner_of_course(context: Optional[UserContext], course: Course) -> bool:
        return context is not None and course.creator_id == context.user.id

    @staticmethod
    def can_mutate(context: Optional[UserContext], course: Course) -> bool:
        """Capability check shared by every course and lesson mutation."""
        return PermissionHelper.is_creator(context) and PermissionHelper.is_owner_of_course(context, course)

    @staticmethod
    def can_view_course(context: Optional[UserContext], course: Course) -> bool:
        if course.status == CourseStatusEnum.PUBLISHED:
            return True
        if PermissionHelper.is_admin(context):
            return True
        return PermissionHelper.is_owner_of_course(context, course)

    @staticmethod
    def require_role(context: UserContext, role: RoleEnum, error_message: Optional[str] = None):
        if context.role != role:
            raise ForbiddenException(error_message or f"Only {role.value}s can perform this action.")

    @staticmethod
    def require_course_view_permission(context: Optional[UserContext], course: Course):
        # Hidden courses are reported as missing so their existence is not leaked.
        if not PermissionHelper.can_view_course(context, course):
            raise NotFoundException("Course not found.")

    @staticmethod
    def require_course_mutation_permission(context: UserContext, course: Course, action: str = "modify"):
        if not PermissionHelper.can_mutate(context, course):
            raise ForbiddenException(f"Not authorized to {action} this course.")

    @staticmethod
    def require_draft(course: Course, error_message: str = "Can only modify draft courses."):
        if course.status != CourseStatusEnum.DRAFT:
            raise PreconditionFailedException(error_message)
