"""
Base exceptions for the eCloud client.

Every error raised by this package derives from EcloudError, so callers can
catch that one class to handle any client failure generically.
"""

from typing import Optional


class EcloudError(Exception):
    """
    Base exception for all eCloud client errors.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        """
        Initialize eCloud error.

        Args:
            message: Human-readable error description
            original_error: The underlying exception that caused this error (optional)
        """
        self.message = message
        self.original_error = original_error

        super().__init__(self.message)


class ConfigurationError(EcloudError):
    """Exception raised when the client configuration is incomplete."""
    pass


class NotAuthenticatedError(EcloudError):
    """Exception raised when an operation needs a prior successful login."""

    def __init__(self, message: str = "client not authenticated"):
        super().__init__(message)


class RecordValidationError(EcloudError):
    """
    Exception raised when input fails client-side validation.

    These errors are detected before any network call is made and are
    never retried.
    """
    pass


class MissingAttachmentError(RecordValidationError):
    """Exception raised when an upload carries neither report."""

    def __init__(self, message: str = "no medical report or laboratory report to upload"):
        super().__init__(message)


class InvalidAttachmentError(RecordValidationError):
    """
    Exception raised when an attachment is present but is not a valid PDF.
    """

    def __init__(self, attachment: str, message: Optional[str] = None):
        """
        Initialize invalid attachment error.

        Args:
            attachment: Form field name of the offending attachment
            message: Optional override for the default message
        """
        self.attachment = attachment
        super().__init__(message or f"invalid PDF for {attachment.replace('_', ' ')}")


class PaymentValidationError(RecordValidationError):
    """Exception raised when payment parameters are rejected locally."""
    pass


class ProtocolError(EcloudError):
    """
    Exception raised when a successful response breaks the server contract.

    For example a login response that decodes fine but carries no token.
    """
    pass


class EmptyTokenError(ProtocolError):
    """Exception raised when the login response holds an empty token."""

    def __init__(self, message: str = "empty token received"):
        super().__init__(message)
