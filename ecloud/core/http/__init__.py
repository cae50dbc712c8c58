"""
HTTP client abstraction layer.

This module provides the resilient async request executor, its retry
policies, error decoding and exception hierarchy.
"""

from ecloud.core.http.client import HTTPClient, RequestState
from ecloud.core.http.error_decoder import decode_error, extract_error_message
from ecloud.core.http.exceptions import (
    EmptyResponseBodyError,
    HTTPClientError,
    HTTPConnectionError,
    HTTPStatusError,
    HTTPTimeoutError,
    RequestPreparationError,
    ResponseDecodeError
)
from ecloud.core.http.retry import (
    ConstantRetryPolicy,
    DefaultRetryPolicy,
    ExponentialRetryPolicy,
    RetryPolicy
)

__all__ = [
    "HTTPClient",
    "RequestState",
    "decode_error",
    "extract_error_message",
    "HTTPClientError",
    "HTTPConnectionError",
    "HTTPTimeoutError",
    "HTTPStatusError",
    "EmptyResponseBodyError",
    "ResponseDecodeError",
    "RequestPreparationError",
    "RetryPolicy",
    "DefaultRetryPolicy",
    "ConstantRetryPolicy",
    "ExponentialRetryPolicy",
]
