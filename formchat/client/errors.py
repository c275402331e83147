"""Exceptions raised by the conversation client."""


class ConversationError(Exception):
    """Base class for conversation client failures."""

    pass


class ApiError(ConversationError):
    """Raised when a REST call fails.

    Attributes:
        status_code: HTTP status of the failed response, or None when the
            request never got a response (connection error, timeout).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StreamingError(ConversationError):
    """Raised when the message stream reports an error or ends incomplete."""

    pass
