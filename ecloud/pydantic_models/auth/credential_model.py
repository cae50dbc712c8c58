from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from ecloud.pydantic_models.auth.login_model import LoginResponse, User


class Credential(BaseModel):
    """
    Bearer token plus the identity it was issued for.

    Instances are immutable; a login produces a new Credential that replaces
    the previous one wholesale.
    """

    model_config = ConfigDict(frozen=True)

    token: str = ""
    user: Optional[User] = None
    authenticated: bool = False
    issued_at: Optional[datetime] = None

    @model_validator(mode="after")
    def token_required_when_authenticated(self) -> "Credential":
        if self.authenticated and not self.token:
            raise ValueError("an authenticated credential needs a non-empty token")
        return self

    @classmethod
    def anonymous(cls) -> "Credential":
        return cls()

    @classmethod
    def from_login(cls, login: LoginResponse) -> "Credential":
        return cls(
            token=login.token,
            user=login.user,
            authenticated=True,
            issued_at=datetime.now(timezone.utc),
        )
