"""Typed failures raised by the services.

Each category carries the HTTP status the API boundary answers with; the
services themselves never build HTTP responses.
"""

from __future__ import annotations

from uuid import UUID


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationFailedError(ServiceError):
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class ForbiddenError(ServiceError):
    status_code = 403


class CourseNotFoundError(NotFoundError):
    def __init__(self, course_id: UUID) -> None:
        self.course_id = course_id
        super().__init__("Course not found")


class AlreadyEnrolledError(ConflictError):
    def __init__(self, user_id: UUID, course_id: UUID) -> None:
        self.user_id = user_id
        self.course_id = course_id
        super().__init__("Already enrolled in this course")


class NotEnrolledError(ForbiddenError):
    def __init__(self, user_id: UUID, course_id: UUID) -> None:
        self.user_id = user_id
        self.course_id = course_id
        super().__init__("Not enrolled in this course")


class ProgressConflictError(ConflictError):
    """A concurrent writer created the same (user, module) record first.

    Safe to retry: the retry lands on the update path.
    """

    def __init__(self, user_id: UUID, module_id: UUID) -> None:
        self.user_id = user_id
        self.module_id = module_id
        super().__init__("Progress record was modified concurrently, retry")


class InvalidProgressError(ValidationFailedError):
    """A progress report the ledger refuses to store (negative time, score out of range)."""


class UserAlreadyExistsError(ConflictError):
    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("User with this email already exists")


class AccountDisabledError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__("Account is deactivated")
