"""HTTP client for the conversational form backend.

Responsibilities:
    - Configuration from environment (base URL, bearer token, timeout)
    - Authenticated JSON transport with a uniform error type
    - Conversation endpoints, streaming replies with non-streaming fallback
    - Incremental parsing of the ``data:`` line protocol

Has no UI dependencies, so it can be used from scripts and services as well.
"""

from formchat.client.config import ClientConfig, get_client_config
from formchat.client.conversation import ConversationApi
from formchat.client.errors import ApiError, ConversationError, StreamingError
from formchat.client.http import ApiClient

__all__ = [
    "ApiClient",
    "ApiError",
    "ClientConfig",
    "ConversationApi",
    "ConversationError",
    "StreamingError",
    "get_client_config",
]
