"""Service-layer exceptions shared by every HomeTeam service.

Routers translate these into HTTP responses through
``app.utils.router_helpers.handle_service_errors``.
"""


class ServiceError(Exception):
    """Base exception for service errors (unexpected failures map to 500)"""

    pass


# 400 - malformed or unacceptable input
class ValidationError(ServiceError):
    """Request data failed validation"""

    pass


class InvalidRoleError(ValidationError):
    """Role is not one of the assignable roles"""

    pass


class InvalidStatusError(ValidationError):
    """Task status is not a known status"""

    pass


class InvalidAssigneeError(ValidationError):
    """Assignee is not an active member of the task's unit"""

    pass


class UnsupportedMediaTypeError(ValidationError):
    """Content type is not allowed for completion media"""

    pass


class InvitationExpiredError(ValidationError):
    """Invitation was found but is past its expiry"""

    pass


# 401
class AuthenticationError(ServiceError):
    """Missing, invalid or expired credentials"""

    pass


# 403
class PermissionDeniedError(ServiceError):
    """Authenticated but lacking the required role or ownership"""

    pass


# 404
class NotFoundError(ServiceError):
    """Requested resource does not exist"""

    pass


class UserNotFoundError(NotFoundError):
    pass


class UnitNotFoundError(NotFoundError):
    pass


class MemberNotFoundError(NotFoundError):
    pass


class InvitationNotFoundError(NotFoundError):
    pass


class TaskNotFoundError(NotFoundError):
    pass


class MediaNotFoundError(NotFoundError):
    pass


# 409
class ConflictError(ServiceError):
    """Resource already exists"""

    pass


class AlreadyMemberError(ConflictError):
    """User already has a membership row for the unit"""

    pass


# 400 - invariant violations
class BusinessRuleViolationError(ServiceError):
    """Business rule violation"""

    pass


class LastAdminViolationError(BusinessRuleViolationError):
    """Operation would leave the unit without an active admin"""

    pass
