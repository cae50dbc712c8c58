"""
Turns non-success responses into exceptions.

The server reports failures as ``{"error": "<message>"}``; anything else is
passed through as raw text so no diagnostic is lost.
"""

import json
from typing import Optional

import httpx

from ecloud.core.http.exceptions import (
    EmptyResponseBodyError,
    HTTPClientError,
    HTTPStatusError,
    ResponseDecodeError
)


def extract_error_message(body: bytes) -> Optional[str]:
    """
    Pull a human-readable message out of an error body.

    Args:
        body: Raw response body

    Returns:
        The ``error`` field of a JSON error object, else the raw body text,
        or None when the body is empty
    """
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        payload = None

    if isinstance(payload, dict):
        message = payload.get("error")
        if isinstance(message, str) and message:
            return message

    # Fallback: plain text or unknown structure
    if not body:
        return None
    return body.decode("utf-8", errors="replace")


def _response_url(response: httpx.Response) -> Optional[str]:
    try:
        return str(response.request.url)
    except RuntimeError:
        return None


async def decode_error(response: httpx.Response) -> HTTPClientError:
    """
    Build the exception describing a non-success response.

    The body is drained and the response closed. The caller raises the
    returned exception.

    Args:
        response: Response with a non-2xx status

    Returns:
        HTTPStatusError carrying the remote message and status code,
        EmptyResponseBodyError for an empty body, or ResponseDecodeError
        if the body could not be read
    """
    url = _response_url(response)

    try:
        body = await response.aread()
    except (httpx.HTTPError, httpx.StreamError) as e:
        return ResponseDecodeError(
            message=f"failed to read response body: {str(e)}",
            url=url,
            status_code=response.status_code,
            original_error=e
        )
    finally:
        await response.aclose()

    message = extract_error_message(body)
    if message is None:
        return EmptyResponseBodyError(
            message="empty response body",
            url=url,
            status_code=response.status_code,
            body=""
        )

    return HTTPStatusError(
        message=message,
        url=url,
        status_code=response.status_code,
        body=body.decode("utf-8", errors="replace")
    )
