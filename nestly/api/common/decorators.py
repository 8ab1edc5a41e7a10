import logging
from functools import wraps

from fastapi import HTTPException, status

from nestly.api.common.exceptions import handle_service_error
from nestly.services.exceptions import (
    BusinessRuleError,
    ListingNotFoundError,
    ListingValidationError,
    NotAuthorizedError,
    PersistenceError,
    ServiceError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


def log_route_call(func):
    """
    A decorator to log the entry and exit of a route function.
    It logs the function name, arguments, and whether it completed successfully or raised an error.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        route_logger = logging.getLogger(func.__module__)

        # Sessions and services are noise in the log; only plain values are kept
        logged_kwargs = {
            k: repr(v)
            for k, v in kwargs.items()
            if isinstance(v, (str, int, float, bool)) or v is None
        }

        route_logger.info(f"Entering route: {func.__name__} (kwargs: {logged_kwargs})")
        try:
            result = await func(*args, **kwargs)
            route_logger.info(f"Successfully exited route: {func.__name__}")
            return result
        except Exception as e:
            route_logger.error(
                f"Error during route: {func.__name__}. Exception: {type(e).__name__} - {e}",
                exc_info=False,
            )
            raise

    return wrapper


def handle_route_errors(func):
    """
    A decorator to standardize error handling in API routes.
    It catches service-layer exceptions, logs them, and hands them to
    handle_service_error; anything unexpected becomes a 500.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (
            BusinessRuleError,
            ListingNotFoundError,
            ListingValidationError,
            NotAuthorizedError,
            UserNotFoundError,
        ) as e:
            logger.info(f"Service error in {func.__name__} route: {e}")
            handle_service_error(e)
        except (PersistenceError, ServiceError) as e:
            logger.error(f"Service error in {func.__name__} route: {e}", exc_info=True)
            handle_service_error(e)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(
                f"Unexpected error in {func.__name__} route: {e}", exc_info=True
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An unexpected server error occurred.",
            )

    return wrapper
