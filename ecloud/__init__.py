"""
Async client for the eCloud patient-records API.
"""

from ecloud.client import EcloudClient
from ecloud.core.config import ClientConfig, load_config
from ecloud.core.exceptions import (
    ConfigurationError,
    EcloudError,
    EmptyTokenError,
    InvalidAttachmentError,
    MissingAttachmentError,
    NotAuthenticatedError,
    PaymentValidationError,
    ProtocolError,
    RecordValidationError
)
from ecloud.core.logging import get_logger, setup_logging

__all__ = [
    "EcloudClient",
    "ClientConfig",
    "load_config",
    "setup_logging",
    "get_logger",
    "EcloudError",
    "ConfigurationError",
    "NotAuthenticatedError",
    "RecordValidationError",
    "MissingAttachmentError",
    "InvalidAttachmentError",
    "PaymentValidationError",
    "ProtocolError",
    "EmptyTokenError",
]
