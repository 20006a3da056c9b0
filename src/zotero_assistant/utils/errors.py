"""
Unified error handling for Zotero Assistant.

Client layers translate pyzotero and httpx failures into this hierarchy;
public operations convert it into structured results at their boundary.
"""

import logging

logger = logging.getLogger(__name__)


class ZoteroMCPError(Exception):
    """Base exception for Zotero Assistant errors."""

    error_type = "error"

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}. {self.suggestion}"
        return self.message


class ValidationError(ZoteroMCPError):
    """Input validation error."""

    error_type = "validation"


class InvalidItemTypeError(ValidationError):
    """The store rejected a canonical item type name."""

    error_type = "invalid_item_type"

    def __init__(self, item_type: str, store_message: str):
        super().__init__(
            f"Invalid item type '{item_type}': {store_message}",
            suggestion="Use one of the friendly names from get_help or a "
            "canonical Zotero item type such as 'journalArticle'",
        )
        self.item_type = item_type
        self.store_message = store_message


class TransportError(ZoteroMCPError):
    """Network failure or timeout talking to Zotero or a source URL."""

    error_type = "transport"


class RemoteRejection(ZoteroMCPError):
    """The remote side answered with a non-2xx status or an unreadable body."""

    error_type = "remote_rejection"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(message, suggestion)
        self.status_code = status_code
        self.body = body


class ConflictError(ZoteroMCPError):
    """A version-conditioned write was rejected because the item changed."""

    error_type = "conflict"

    def __init__(self, item_key: str, version: int | None = None):
        super().__init__(
            f"Item {item_key} was modified since version {version}",
            suggestion="Re-read the item and decide whether to apply the changes again",
        )
        self.item_key = item_key
        self.version = version


class NotFoundError(ZoteroMCPError):
    """Resource not found error."""

    error_type = "not_found"


class AuthenticationError(ZoteroMCPError):
    """Authentication or authorization error."""

    error_type = "authentication"


class ConfigurationError(ZoteroMCPError):
    """Configuration error."""

    error_type = "configuration"


def handle_error(error: Exception, operation: str = "operation") -> tuple[str, str]:
    """
    Handle errors consistently across all operations.

    Args:
        error: The exception that occurred
        operation: Name of the operation that failed

    Returns:
        Tuple of (error_type, user-facing message)
    """
    if isinstance(error, ZoteroMCPError):
        logger.error(f"Error in {operation}: {error}")
        return error.error_type, str(error)

    logger.exception(f"Unexpected error in {operation}")
    return "internal", f"Error in {operation}: {type(error).__name__} - {error}"


def format_api_error(status_code: int, message: str = "") -> str:
    """Format an API error with appropriate message."""
    error_messages = {
        400: "Bad request. Please check your input parameters.",
        401: "Authentication required. Please set ZOTERO_API_KEY.",
        403: "Access denied. The API key lacks permission for this library.",
        404: "Resource not found. Please check the item or collection key.",
        412: "Precondition failed. The item was modified by another client.",
        413: "Request too large.",
        429: "Rate limit exceeded. Please wait before making more requests.",
        500: "Zotero server error. Please try again later.",
        503: "Zotero service unavailable. Please try again later.",
    }

    default_message = f"API error (status {status_code})"
    base_message = error_messages.get(status_code, default_message)

    if message:
        return f"{base_message} Details: {message}"
    return base_message
