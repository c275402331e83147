"""Client configuration with environment variable loading.

Pydantic-based configuration for the conversation API client.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()


class ClientConfig(BaseModel):
    """Configuration for talking to the conversation backend.

    Attributes:
        api_url: Base URL of the REST API, without trailing slash.
        api_token: Bearer token; empty means unauthenticated (public chat).
        timeout: Request timeout in seconds, also bounds idle stream reads.
    """

    api_url: str = Field(
        default_factory=lambda: os.getenv("FORMCHAT_API_URL", "http://localhost:3000/api"),
        description="Conversation API base URL",
    )
    api_token: str = Field(
        default_factory=lambda: os.getenv("FORMCHAT_API_TOKEN", ""),
        description="Bearer token sent with every request",
    )
    timeout: float = Field(
        default=120.0,
        ge=1.0,
        le=600.0,
        description="Request timeout in seconds",
    )

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("FORMCHAT_API_URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("api_token")
    @classmethod
    def strip_api_token(cls, v: str) -> str:
        return v.strip()


def get_client_config() -> ClientConfig:
    """Create client configuration from environment.

    Returns:
        Configured ClientConfig instance.

    Raises:
        ValueError: If FORMCHAT_API_URL is not an http(s) URL.
    """
    return ClientConfig()
