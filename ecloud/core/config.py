import os
from dotenv import load_dotenv
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ecloud.core.exceptions import ConfigurationError

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3


class ClientConfig(BaseModel):
    """Connection and identity settings for an eCloud client."""

    api_base_url: str = Field("", description="Base URL of the eCloud API")
    eclinic_id: str = Field("", description="eClinic login ID")
    password: str = Field("", description="eClinic login password")
    hospital_number: str = Field("", description="Globally unique hospital number")
    hospital_name: str = Field("", description="Hospital display name")
    eclinic_base_url: str = Field("", description="Base URL of the local eClinic HMS")

    timeout: float = Field(DEFAULT_TIMEOUT, description="Request timeout in seconds")
    max_retries: int = Field(DEFAULT_MAX_RETRIES, ge=0, description="Retries after the first attempt")
    log_level: str = Field("INFO", description="Level passed to setup_logging")

    # Zero or missing means "use the default"
    @field_validator('timeout', mode='before')
    @classmethod
    def default_timeout(cls, v: Optional[float]) -> float:
        if v is None or v == 0:
            return DEFAULT_TIMEOUT
        return v

    @field_validator('api_base_url', 'eclinic_base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def validate_config(self) -> "ClientConfig":
        """
        Check that every required setting is present.

        Returns:
            The same config, for chaining

        Raises:
            ConfigurationError: naming the first missing setting
        """
        required = [
            (self.api_base_url, "ecloud ApiBaseURL is required"),
            (self.eclinic_id, "ecloud EclinicID is required"),
            (self.password, "ecloud password is required"),
            (self.hospital_number, "hospital number is required"),
            (self.hospital_name, "hospital name is required"),
            (self.eclinic_base_url, "EclinicBaseURL is required"),
        ]
        for value, message in required:
            if not value:
                raise ConfigurationError(message)
        return self


def load_config(env_file: Optional[Path] = None) -> ClientConfig:
    """
    Build a ClientConfig from ECLOUD_* environment variables.

    A .env file is loaded first (from the working directory unless env_file
    is given); variables already set in the environment win.

    Args:
        env_file: Optional path to a .env file

    Returns:
        Unvalidated ClientConfig; call validate_config() before use
    """
    load_dotenv(dotenv_path=env_file or Path.cwd() / ".env")

    return ClientConfig(
        api_base_url=os.getenv("ECLOUD_API_BASE_URL", ""),
        eclinic_id=os.getenv("ECLOUD_ECLINIC_ID", ""),
        password=os.getenv("ECLOUD_PASSWORD", ""),
        hospital_number=os.getenv("ECLOUD_HOSPITAL_NUMBER", ""),
        hospital_name=os.getenv("ECLOUD_HOSPITAL_NAME", ""),
        eclinic_base_url=os.getenv("ECLOUD_ECLINIC_BASE_URL", ""),
        timeout=float(os.getenv("ECLOUD_TIMEOUT", str(DEFAULT_TIMEOUT))),
        max_retries=int(os.getenv("ECLOUD_MAX_RETRIES", str(DEFAULT_MAX_RETRIES))),
        log_level=os.getenv("ECLOUD_LOG_LEVEL", "INFO"),
    )
