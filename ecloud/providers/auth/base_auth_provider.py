from abc import ABC, abstractmethod
from typing import Optional

from ecloud.pydantic_models.auth.login_model import LoginResponse, User


class AuthProvider(ABC):
    """
    Abstract base class for authentication providers.

    The request executor reads the token from a provider before every
    attempt and asks it to refresh when the server answers 401.
    """

    @abstractmethod
    async def login(self) -> LoginResponse:
        """
        Exchange the configured credentials for a bearer token.

        Returns:
            The decoded login response

        Raises:
            EcloudError: If the exchange fails or the response is malformed
        """
        pass

    @abstractmethod
    def get_token(self) -> str:
        """Current bearer token, empty before the first login."""
        pass

    @abstractmethod
    def get_user(self) -> User:
        """
        Identity returned by the last successful login.

        Raises:
            NotAuthenticatedError: If no login has succeeded yet
        """
        pass

    @abstractmethod
    def is_authenticated(self) -> bool:
        """True when a login succeeded and a token is held."""
        pass

    @abstractmethod
    async def refresh(self, stale_token: Optional[str] = None) -> None:
        """
        Obtain a fresh token.

        Args:
            stale_token: Token that was just rejected; when the held token
                already differs, another caller refreshed and nothing is done

        Raises:
            EcloudError: If the refresh fails; prior state is left untouched
        """
        pass
