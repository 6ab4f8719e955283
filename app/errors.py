"""Error taxonomy of the dating core.

Every failure a service can report is one of five kinds. Callers can catch the
kind (for example ``ConflictError``) or the concrete error (``DuplicateLikeError``).
"""


class DatingCoreError(Exception):
    """Base exception for all dating core errors."""

    pass


class ValidationError(DatingCoreError):
    """Malformed input, such as a bad tag name or acting on oneself."""

    pass


class NotFoundError(DatingCoreError):
    """A referenced user, profile or record does not exist."""

    pass


class ConflictError(DatingCoreError):
    """The record being created already exists."""

    pass


class PreconditionError(DatingCoreError):
    """The caller is not in a state that allows the operation."""

    pass


class StateError(DatingCoreError):
    """The operation targets an edge that does not exist."""

    pass


# Validation
class InvalidTagError(ValidationError):
    pass


class SelfLikeError(ValidationError):
    pass


class SelfBlockError(ValidationError):
    pass


class SelfReportError(ValidationError):
    pass


class SelfViewError(ValidationError):
    pass


class EmptyMessageError(ValidationError):
    pass


# Not found
class UserNotFoundError(NotFoundError):
    pass


class TargetNotFoundError(NotFoundError):
    pass


class ProfileNotFoundError(NotFoundError):
    pass


class PhotoNotFoundError(NotFoundError):
    pass


class NotificationNotFoundError(NotFoundError):
    pass


class MatchNotFoundError(NotFoundError):
    pass


class MessageNotFoundError(NotFoundError):
    pass


# Conflict
class DuplicateLikeError(ConflictError):
    pass


class AlreadyBlockedError(ConflictError):
    pass


class AlreadyReportedError(ConflictError):
    pass


class TagAlreadyAttachedError(ConflictError):
    pass


class PhotoLimitError(ConflictError):
    pass


# Precondition
class ProfileIncompleteError(PreconditionError):
    pass


class NoProfilePictureError(PreconditionError):
    pass


class BlockedInteractionError(PreconditionError):
    pass


# State
class LikeNotFoundError(StateError):
    pass


class NotBlockedError(StateError):
    pass


class TagNotAttachedError(StateError):
    pass
