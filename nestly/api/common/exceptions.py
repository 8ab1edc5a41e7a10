import logging
from typing import Any

from fastapi import HTTPException, status

from nestly.services.exceptions import (
    BusinessRuleError,
    ListingNotFoundError,
    ListingValidationError,
    MessageValidationError,
    NotAuthorizedError,
    PersistenceError,
    ServiceError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


class APIException(HTTPException):
    """Base class for API specific exceptions."""

    def __init__(
        self, status_code: int, detail: Any = None, headers: dict | None = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class NotFoundError(APIException):
    def __init__(self, detail: Any = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class BadRequestError(APIException):
    def __init__(self, detail: Any = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ForbiddenError(APIException):
    def __init__(self, detail: Any = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnprocessableEntityError(APIException):
    def __init__(self, detail: Any = "Unprocessable entity"):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail
        )


class InternalServerError(APIException):
    def __init__(self, detail: Any = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
        )


def handle_service_error(e: ServiceError):
    """
    Maps ServiceError subclasses to the matching APIException.
    Always raises; called by the @handle_route_errors decorator.
    """
    logger.warning(f"Handling service error: {e.__class__.__name__} - {e.message}")

    if isinstance(e, (ListingNotFoundError, UserNotFoundError)):
        raise NotFoundError(detail=e.message)
    elif isinstance(e, NotAuthorizedError):
        raise ForbiddenError(detail=e.message)
    elif isinstance(e, MessageValidationError):
        raise BadRequestError(detail={"code": e.code.value, "message": e.message})
    elif isinstance(e, BusinessRuleError):
        raise BadRequestError(detail=e.message)
    elif isinstance(e, ListingValidationError):
        raise UnprocessableEntityError(
            detail={
                "message": e.message,
                "errors": [code.value for code in e.errors],
            }
        )
    elif isinstance(e, PersistenceError):
        raise InternalServerError(detail=e.message)
    raise APIException(status_code=e.status_code, detail=e.message)
