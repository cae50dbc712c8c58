"""
Custom exceptions for HTTP client operations.

This module provides a hierarchy of exceptions for handling HTTP-related errors
in a consistent way across the client.
"""

from typing import Optional

from ecloud.core.exceptions import EcloudError


class HTTPClientError(EcloudError):
    """
    Base exception for all HTTP client errors.

    This is the parent class for all HTTP-related exceptions in the client.
    Catch this to handle any HTTP error generically.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None
    ):
        """
        Initialize HTTP client error.

        Args:
            message: Human-readable error description
            url: The URL that was being accessed (optional)
            status_code: HTTP status code if applicable (optional)
            original_error: The underlying exception that caused this error (optional)
        """
        self.url = url
        self.status_code = status_code

        super().__init__(message, original_error=original_error)

    def __str__(self) -> str:
        """Return string representation of the error."""
        parts = [self.message]
        if self.url:
            parts.append(f"URL: {self.url}")
        if self.status_code:
            parts.append(f"Status: {self.status_code}")
        return " | ".join(parts)


class HTTPConnectionError(HTTPClientError):
    """
    Exception raised when connection to the server fails.

    This includes DNS resolution failures, refused connections and
    connections dropped mid-response.
    """
    pass


class HTTPTimeoutError(HTTPClientError):
    """
    Exception raised when a request times out.

    This occurs when the server doesn't respond within the specified timeout period.
    """
    pass


class HTTPStatusError(HTTPClientError):
    """
    Exception raised when the server returns an error status code.

    The message is the server-supplied ``error`` field when the body is a JSON
    error object, otherwise the raw body text.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        self.body = body
        super().__init__(message, url=url, status_code=status_code, original_error=original_error)


class EmptyResponseBodyError(HTTPStatusError):
    """Exception raised when an error response carries no body at all."""
    pass


class ResponseDecodeError(HTTPClientError):
    """
    Exception raised when a response body cannot be read or decoded.

    Kept apart from HTTPStatusError: the server did not report this failure,
    the client failed to interpret what it received.
    """
    pass


class RequestPreparationError(HTTPClientError):
    """Exception raised when a request body cannot be prepared for sending."""
    pass
