from typing import Any, List, Optional, Type, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from ecloud.core.config import ClientConfig
from ecloud.core.http.client import HTTPClient
from ecloud.core.http.error_decoder import decode_error
from ecloud.core.http.exceptions import ResponseDecodeError

T = TypeVar("T")


class BaseService:
    """
    Shared plumbing for the eCloud API services.

    Args:
        http_client: Executor every request goes through.
        config: Client configuration (base URL, hospital identity).
    """

    def __init__(self, http_client: HTTPClient, config: ClientConfig):
        self.http_client = http_client
        self.config = config

    def _url(self, path: str) -> str:
        return f"{self.config.api_base_url}{path}"

    async def _read_model(self, response: httpx.Response, model: Type[T], description: str) -> T:
        """
        Check the status, decode the body into ``model`` and close the response.

        Args:
            response: Response returned by the executor
            model: Pydantic model or type (e.g. list[Subscriber]) to decode into
            description: What is being decoded, used in error messages

        Returns:
            Decoded value

        Raises:
            HTTPStatusError: If the server returned a non-2xx status
            ResponseDecodeError: If the body does not match ``model``
        """
        try:
            if not response.is_success:
                raise await decode_error(response)
            return self._decode(response, model, description)
        finally:
            await response.aclose()

    async def _read_list(self, response: httpx.Response, model: Type[T], description: str) -> List[T]:
        """Like _read_model for list endpoints; a ``null`` body means no items."""
        items = await self._read_model(response, Optional[List[model]], description)
        return items or []

    async def _expect_success(self, response: httpx.Response) -> None:
        """Raise the decoded error for a non-2xx response; close it either way."""
        try:
            if not response.is_success:
                raise await decode_error(response)
        finally:
            await response.aclose()

    @staticmethod
    def _decode(response: httpx.Response, model: Type[T], description: str) -> T:
        try:
            return TypeAdapter(model).validate_json(response.content)
        except ValidationError as e:
            raise ResponseDecodeError(
                message=f"unable to decode {description} json: {str(e)}",
                url=str(response.request.url),
                status_code=response.status_code,
                original_error=e
            )

    @staticmethod
    def _dump(model: Any) -> dict:
        return model.model_dump(mode="json", exclude_none=True)
