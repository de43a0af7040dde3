class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DomainError"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "ValidationError"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "Forbidden"


class NotFoundError(DomainError):
    """Raised when a referenced attendance, slot or committee does not exist."""

    code = "NotFound"


class InvalidShiftError(ValidationError):
    code = "InvalidShift"


class SlotBlockedError(ValidationError):
    code = "SlotBlocked"


class CapacityExceededError(ValidationError):
    code = "CapacityExceeded"


class AlreadyRegisteredError(ValidationError):
    code = "AlreadyRegistered"


class InvalidStateError(ValidationError):
    code = "InvalidState"


class WrongDayError(ValidationError):
    code = "WrongDay"


class OutsideWindowError(ValidationError):
    code = "OutsideWindow"


class NotAMemberError(AuthorizationError):
    code = "NotAMember"


class NotOwnerError(AuthorizationError):
    code = "NotOwner"


class DuplicateSlotError(DomainError):
    """A concurrent create already produced the (committee, date, shift) slot.

    Internal: the allocator retries its lookup and never lets this escape.
    """

    code = "DuplicateSlot"
