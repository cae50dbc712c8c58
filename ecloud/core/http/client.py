"""
Resilient request executor for the eCloud API.

This module turns one logical operation (method, URL, body, headers) into a
completed HTTP exchange despite network errors, server errors and expired
bearer tokens, built on top of httpx.
"""

import asyncio
import gzip
import json as jsonlib
import logging
from enum import Enum
from typing import Any, Awaitable, BinaryIO, Callable, Dict, Optional, Union

import httpx

from ecloud.core.exceptions import EcloudError
from ecloud.core.http.exceptions import (
    HTTPClientError,
    HTTPConnectionError,
    HTTPTimeoutError,
    RequestPreparationError,
    ResponseDecodeError
)
from ecloud.core.http.retry import DefaultRetryPolicy, RetryPolicy
from ecloud.core.logging import get_logger
from ecloud.providers.auth.base_auth_provider import AuthProvider

RequestContent = Union[bytes, bytearray, str, BinaryIO]
SleepFunc = Callable[[float], Awaitable[None]]

MULTIPART_FORM_DATA = "multipart/form-data"
JSON_CONTENT_TYPE = "application/json"


class RequestState(Enum):
    """States of the retry loop run by HTTPClient.execute."""

    ATTEMPTING = "attempting"
    AWAITING_BACKOFF = "awaiting_backoff"
    REFRESHING_CREDENTIAL = "refreshing_credential"
    DONE = "done"


class HTTPClient:
    """
    Async HTTP client that retries, refreshes credentials and compresses.

    Every request goes through execute(), which:
    - injects the bearer token and the default JSON headers
    - gzip-compresses non-multipart bodies once, before the first attempt
    - retries transport errors per the retry policy
    - refreshes the token once per 401 and replays the request

    Status interpretation is left to the caller; any other 4xx/5xx response
    is returned on the attempt that produced it, not raised.

    Example:
        ```python
        async with HTTPClient(retry_policy=DefaultRetryPolicy(3)) as client:
            response = await client.get("https://api.example.com/data")
            data = response.json()
        ```
    """

    def __init__(
        self,
        retry_policy: Optional[RetryPolicy] = None,
        auth_provider: Optional[AuthProvider] = None,
        client: Optional[httpx.AsyncClient] = None,
        default_timeout: float = 30.0,
        logger: Optional[logging.Logger] = None,
        sleep: Optional[SleepFunc] = None
    ):
        """
        Initialize HTTP client.

        Args:
            retry_policy: Retry strategy (default: DefaultRetryPolicy with 3 retries)
            auth_provider: Source of the bearer token; may be attached later
            client: httpx.AsyncClient to send through (created when not given)
            default_timeout: Default timeout in seconds for all requests (default: 30.0)
            logger: Logger for retry and refresh events (default: module logger)
            sleep: Coroutine used to wait between attempts (default: asyncio.sleep)
        """
        self.retry_policy = retry_policy or DefaultRetryPolicy()
        self.auth_provider = auth_provider
        self.default_timeout = default_timeout
        self.logger = logger or get_logger(__name__)
        self._sleep = sleep or asyncio.sleep
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=default_timeout)

    async def __aenter__(self) -> "HTTPClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None
    ) -> httpx.Response:
        """Make a GET request through execute()."""
        if params:
            url = str(httpx.URL(url).copy_merge_params(params))
        return await self.execute("GET", url, headers=headers, timeout=timeout)

    async def post(
        self,
        url: str,
        json: Optional[Any] = None,
        content: Optional[RequestContent] = None,
        headers: Optional[Dict[str, str]] = None,
        compress: bool = True,
        authenticate: bool = True,
        timeout: Optional[float] = None
    ) -> httpx.Response:
        """
        Make a POST request through execute().

        Args:
            url: The URL to request
            json: JSON-serializable payload (ignored when content is given)
            content: Raw body (bytes, str or binary file object)
            headers: HTTP headers to send (optional)
            compress: Gzip the body unless it is multipart (default: True)
            authenticate: Send the bearer token and refresh on 401 (default: True)
            timeout: Request timeout in seconds (uses default if not specified)

        Returns:
            httpx.Response object
        """
        if content is None and json is not None:
            content = jsonlib.dumps(json).encode("utf-8")
        return await self.execute(
            "POST", url, content=content, headers=headers,
            compress=compress, authenticate=authenticate, timeout=timeout
        )

    async def execute(
        self,
        method: str,
        url: str,
        content: Optional[RequestContent] = None,
        headers: Optional[Dict[str, str]] = None,
        compress: bool = True,
        authenticate: bool = True,
        timeout: Optional[float] = None
    ) -> httpx.Response:
        """
        Run one logical request through the retry loop.

        Args:
            method: HTTP method
            url: Absolute URL
            content: Request body (bytes, str or binary file object), optional
            headers: Header overrides; a multipart Content-Type disables compression
            compress: Gzip the body when present and not multipart (default: True)
            authenticate: Send the bearer token and refresh on 401 (default: True)
            timeout: Request timeout in seconds (uses default if not specified)

        Returns:
            The first non-retried response, or the last response captured
            once attempts ran out. The caller owns and must close it.

        Raises:
            RequestPreparationError: If the body cannot be read or compressed
            HTTPTimeoutError: If the last attempt timed out and no response was captured
            HTTPConnectionError: If the last attempt failed to connect and no response was captured
            ResponseDecodeError: If the response body cannot be decoded (e.g. corrupt gzip)
            HTTPClientError: For any other request failure, such as too many redirects
        """
        headers = headers or {}
        is_multipart = headers_are_multipart(headers)

        body = self._read_body(content, url)
        compressed = compress and body is not None and not is_multipart
        if compressed:
            body = self._compress(body, url)

        last_error: Optional[httpx.TransportError] = None
        last_response: Optional[httpx.Response] = None
        max_retries = self.retry_policy.max_retries
        state = RequestState.ATTEMPTING

        for attempt in range(max_retries + 1):
            # A stale 401 kept from the previous attempt is released before retrying
            if last_response is not None:
                await last_response.aclose()
                last_response = None

            state = self._transition(state, RequestState.ATTEMPTING, attempt, method, url)
            token = self._current_token() if authenticate else None
            request = self._client.build_request(
                method,
                url,
                content=body,
                headers=self._build_headers(headers, token, is_multipart, compressed),
                timeout=timeout if timeout is not None else self.default_timeout,
            )

            try:
                response = await self._client.send(request)
            except httpx.TransportError as e:
                last_error = e
                if not self.retry_policy.should_retry(attempt, e, None):
                    break
                self.logger.debug(f"request failed, retrying: {e!r}")
                state = self._transition(state, RequestState.AWAITING_BACKOFF, attempt, method, url)
                await self._sleep(self.retry_policy.backoff(attempt))
                continue
            except httpx.RequestError as e:
                # Decoding and redirect failures are never retried
                self._transition(state, RequestState.DONE, attempt, method, url)
                raise self._wrap_request_error(e, method, url)

            if response.status_code == 401 and token is not None:
                state = self._transition(state, RequestState.REFRESHING_CREDENTIAL, attempt, method, url)
                self.logger.debug("received 401, attempting token refresh")
                try:
                    await self.auth_provider.refresh(stale_token=token)
                except EcloudError as e:
                    self.logger.error(f"token refresh failed: {e}")
                    self._transition(state, RequestState.DONE, attempt, method, url)
                    return response

                if self.retry_policy.should_retry(attempt, None, response):
                    last_response = response
                    last_error = None
                    state = self._transition(state, RequestState.AWAITING_BACKOFF, attempt, method, url)
                    await self._sleep(self.retry_policy.backoff(attempt))
                    continue

            self._transition(state, RequestState.DONE, attempt, method, url)
            return response

        self._transition(state, RequestState.DONE, max_retries, method, url)
        if last_response is not None:
            return last_response
        raise self._wrap_transport_error(last_error, method, url)

    def _current_token(self) -> Optional[str]:
        """Token to send, or None when the auth provider is not authenticated."""
        if self.auth_provider is None or not self.auth_provider.is_authenticated():
            return None
        return self.auth_provider.get_token()

    def _build_headers(
        self,
        overrides: Dict[str, str],
        token: Optional[str],
        is_multipart: bool,
        compressed: bool
    ) -> httpx.Headers:
        """Bearer token first, caller overrides next, defaults only where absent."""
        headers = httpx.Headers()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        for name, value in overrides.items():
            headers[name] = value

        if "Content-Type" not in headers and not is_multipart:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        if "Accept" not in headers:
            headers["Accept"] = JSON_CONTENT_TYPE

        headers["Accept-Encoding"] = "gzip"
        if compressed:
            headers["Content-Encoding"] = "gzip"
        return headers

    def _read_body(self, content: Optional[RequestContent], url: str) -> Optional[bytes]:
        """Materialize the body once so every attempt can resend it."""
        if content is None:
            return None
        if isinstance(content, (bytes, bytearray)):
            return bytes(content)
        if isinstance(content, str):
            return content.encode("utf-8")
        if hasattr(content, "read"):
            try:
                data = content.read()
            except OSError as e:
                raise RequestPreparationError(
                    message=f"failed to read request body: {str(e)}",
                    url=url,
                    original_error=e
                )
            return data.encode("utf-8") if isinstance(data, str) else bytes(data)

        raise RequestPreparationError(
            message=f"unsupported request body type: {type(content).__name__}",
            url=url
        )

    def _compress(self, body: bytes, url: str) -> bytes:
        try:
            return gzip.compress(body)
        except (OSError, ValueError) as e:
            raise RequestPreparationError(
                message=f"failed to compress request body: {str(e)}",
                url=url,
                original_error=e
            )

    def _transition(
        self,
        current: RequestState,
        target: RequestState,
        attempt: int,
        method: str,
        url: str
    ) -> RequestState:
        if current is not target:
            self.logger.debug(f"{method} {url} attempt {attempt}: {current.value} -> {target.value}")
        return target

    def _wrap_transport_error(
        self,
        error: Optional[httpx.TransportError],
        method: str,
        url: str
    ) -> HTTPClientError:
        if isinstance(error, httpx.TimeoutException):
            return HTTPTimeoutError(
                message=f"Request to {url} timed out: {str(error)}",
                url=url,
                original_error=error
            )
        return HTTPConnectionError(
            message=f"Connection failed for {method} {url}: {str(error)}",
            url=url,
            original_error=error
        )

    def _wrap_request_error(self, error: httpx.RequestError, method: str, url: str) -> HTTPClientError:
        if isinstance(error, httpx.DecodingError):
            return ResponseDecodeError(
                message=f"failed to decode response body for {method} {url}: {str(error)}",
                url=url,
                original_error=error
            )
        return HTTPClientError(
            message=f"Unexpected error during {method} {url}: {str(error)}",
            url=url,
            original_error=error
        )


def headers_are_multipart(headers: Dict[str, str]) -> bool:
    """True when the Content-Type header declares multipart/form-data."""
    content_type = httpx.Headers(headers).get("Content-Type", "")
    return content_type.lower().startswith(MULTIPART_FORM_DATA)
