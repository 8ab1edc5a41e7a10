import logging

from nestly.schemas.validation import ValidationErrorCode

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for service layer errors."""

    def __init__(self, message="An internal service error occurred.", status_code=500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ListingNotFoundError(ServiceError):
    def __init__(self, message="Listing not found."):
        super().__init__(message, status_code=404)


class UserNotFoundError(ServiceError):
    def __init__(self, message="User not found."):
        super().__init__(message, status_code=404)


class NotAuthorizedError(ServiceError):
    def __init__(self, message="User not authorized for this action."):
        super().__init__(message, status_code=403)


class BusinessRuleError(ServiceError):
    """For violations of specific business rules."""

    def __init__(self, message="Action violates business rules."):
        super().__init__(message, status_code=400)


class MessageValidationError(BusinessRuleError):
    """A message was rejected before reaching the store."""

    code: ValidationErrorCode

    def __init__(self, message: str):
        super().__init__(message)


class EmptyMessageError(MessageValidationError):
    code = ValidationErrorCode.EMPTY_MESSAGE

    def __init__(self, message="Please enter a message."):
        super().__init__(message)


class MessageTooLongError(MessageValidationError):
    code = ValidationErrorCode.MESSAGE_TOO_LONG

    def __init__(self, message="Message must be at most 500 characters."):
        super().__init__(message)


class SelfMessagingError(MessageValidationError):
    code = ValidationErrorCode.SELF_MESSAGING

    def __init__(self, message="You cannot send messages to yourself."):
        super().__init__(message)


class ListingValidationError(ServiceError):
    """Carries every rule a listing draft broke, not just the first."""

    def __init__(
        self,
        errors: list[ValidationErrorCode],
        message="Listing draft failed validation.",
    ):
        self.errors = list(errors)
        super().__init__(message, status_code=422)


class PersistenceError(ServiceError):
    """The store rejected or failed an operation. Never retried here."""

    def __init__(self, message="A database error occurred."):
        super().__init__(message, status_code=500)
