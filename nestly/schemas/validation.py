import enum


class ValidationErrorCode(str, enum.Enum):
    """User-correctable input problems reported by the composers."""

    EMPTY_MESSAGE = "empty_message"
    MESSAGE_TOO_LONG = "message_too_long"
    SELF_MESSAGING = "self_messaging"
    TITLE_REQUIRED = "title_required"
    TITLE_TOO_SHORT = "title_too_short"
    DESCRIPTION_REQUIRED = "description_required"
    DESCRIPTION_TOO_SHORT = "description_too_short"
    INVALID_PRICE = "invalid_price"
    LOCATION_REQUIRED = "location_required"
    LOCATION_TOO_SHORT = "location_too_short"
