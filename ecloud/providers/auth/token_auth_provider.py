import asyncio
from typing import Optional

from pydantic import ValidationError

from ecloud.core.config import ClientConfig
from ecloud.core.exceptions import EmptyTokenError, NotAuthenticatedError
from ecloud.core.http.client import HTTPClient
from ecloud.core.http.error_decoder import decode_error
from ecloud.core.http.exceptions import ResponseDecodeError
from ecloud.core.logging import get_logger
from ecloud.providers.auth.base_auth_provider import AuthProvider
from ecloud.pydantic_models.auth.credential_model import Credential
from ecloud.pydantic_models.auth.login_model import LoginRequest, LoginResponse, User

logger = get_logger(__name__)

LOGIN_PATH = "/api/auth/login"


class TokenAuthProvider(AuthProvider):
    """
    Bearer token provider backed by the eCloud login endpoint.

    Refreshing simply repeats the login exchange; the service has no
    dedicated refresh grant. The held Credential is swapped wholesale under
    a lock, so concurrent requests see either the old or the new token, and
    concurrent 401s trigger a single login.
    """

    def __init__(self, http_client: HTTPClient, config: ClientConfig):
        """
        Initialize token auth provider.

        Args:
            http_client: Executor used for the login exchange
            config: Client configuration holding the login credentials
        """
        self.http_client = http_client
        self.config = config
        self._credential = Credential.anonymous()
        self._lock = asyncio.Lock()

    @property
    def credential(self) -> Credential:
        return self._credential

    async def login(self) -> LoginResponse:
        async with self._lock:
            return await self._login_exchange()

    def get_token(self) -> str:
        return self._credential.token

    def get_user(self) -> User:
        if not self._credential.authenticated or self._credential.user is None:
            raise NotAuthenticatedError()
        return self._credential.user

    def is_authenticated(self) -> bool:
        return self._credential.authenticated and self._credential.token != ""

    async def refresh(self, stale_token: Optional[str] = None) -> None:
        async with self._lock:
            if stale_token is not None and self._credential.token != stale_token:
                logger.debug("token already refreshed by a concurrent request")
                return
            await self._login_exchange()

    async def _login_exchange(self) -> LoginResponse:
        """
        POST the login request and install the returned credential.

        The login itself is sent without a bearer token so a rejected
        login cannot trigger another refresh.

        Raises:
            HTTPStatusError: If the server rejects the login
            ResponseDecodeError: If the response body is not a login response
            EmptyTokenError: If the response carries no token
        """
        url = f"{self.config.api_base_url}{LOGIN_PATH}"
        payload = LoginRequest(eclinic_id=self.config.eclinic_id, password=self.config.password)

        response = await self.http_client.post(url, json=payload.model_dump(), authenticate=False)
        try:
            if not response.is_success:
                raise await decode_error(response)

            try:
                login_response = LoginResponse.model_validate_json(response.content)
            except ValidationError as e:
                raise ResponseDecodeError(
                    message=f"error decoding login response: {str(e)}",
                    url=url,
                    status_code=response.status_code,
                    original_error=e
                )
        finally:
            await response.aclose()

        if not login_response.token:
            raise EmptyTokenError()

        self._credential = Credential.from_login(login_response)

        logger.info(f"successfully authenticated user: {login_response.user.eclinic_id}")
        return login_response
