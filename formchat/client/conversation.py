"""Conversation endpoints, including the streaming message client.

``send_message`` streams the assistant reply over a long-lived GET and falls
back to the plain request/response endpoint whenever streaming is not
available or ends without a verdict. Callers see a single outcome either way.
"""

import json
import logging
import uuid
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from formchat.client.errors import ApiError, StreamingError
from formchat.client.http import ApiClient
from formchat.client.stream import ChunkObserver, SSELineDecoder, StreamAccumulator
from formchat.models.schemas import (
    ChatMessage,
    ConversationState,
    MessageResult,
    SendMessageInput,
    StartSessionInput,
    StartSessionResponse,
)

logger = logging.getLogger(__name__)

IDEMPOTENCY_HEADER = "Idempotency-Key"

ModelT = TypeVar("ModelT", bound=BaseModel)


def _validate(model: type[ModelT], data: Any) -> ModelT:
    """Validate a response body, reporting a malformed one as ``ApiError``."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Unexpected {model.__name__} payload: {e}")
        raise ApiError(f"Invalid response: expected {model.__name__}") from e


class ConversationApi:
    """Client for ``/conversations`` endpoints.

    Args:
        api: Authenticated transport shared with other API clients.
    """

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def start_session(self, session_input: StartSessionInput) -> StartSessionResponse:
        """Start a conversation with a published agent.

        Raises:
            ApiError: If the agent is unknown or the password is rejected.
        """
        data = await self._api.post(
            "/conversations/start",
            json=session_input.model_dump(exclude_none=True),
        )
        response = _validate(StartSessionResponse, data)
        logger.info(
            f"Started session {response.session_id} with agent {session_input.agent_slug}"
        )
        return response

    async def send_message(
        self,
        message_input: SendMessageInput,
        on_chunk: ChunkObserver | None = None,
    ) -> MessageResult:
        """Send a message and stream the assistant's reply.

        Args:
            message_input: Session, text, and optional field answer.
            on_chunk: Called for each content, field and status chunk as it
                arrives.

        Returns:
            The final assistant message and conversation state.

        Raises:
            StreamingError: If the stream reports an error, or finishes
                without ever sending a conversation state.
            ApiError: If the non-streaming fallback request fails.
        """
        # One key per logical send, shared by the stream and the fallback.
        idempotency_key = str(uuid.uuid4())

        try:
            result = await self._stream_message(message_input, on_chunk, idempotency_key)
        except StreamingError:
            raise
        except Exception as e:
            logger.warning(
                f"Streaming failed for session {message_input.session_id}, "
                f"falling back to non-streaming: {e}"
            )
            result = None

        if result is None:
            return await self._post_message(message_input, idempotency_key)
        return result

    async def send_message_non_streaming(self, message_input: SendMessageInput) -> MessageResult:
        """Send a message and wait for the complete reply.

        Raises:
            ApiError: If the request fails.
        """
        return await self._post_message(message_input, str(uuid.uuid4()))

    async def get_state(self, session_id: str) -> ConversationState:
        data = await self._api.get(f"/conversations/{session_id}/state")
        return _validate(ConversationState, data)

    async def get_messages(self, session_id: str) -> list[ChatMessage]:
        data = await self._api.get(f"/conversations/{session_id}/messages")
        return [_validate(ChatMessage, item) for item in data or []]

    async def _stream_message(
        self,
        message_input: SendMessageInput,
        on_chunk: ChunkObserver | None,
        idempotency_key: str,
    ) -> MessageResult | None:
        """Run one streaming exchange.

        Returns:
            The result, or None when the caller should fall back: a non-2xx
            status, or a stream that closed before any terminal chunk.
        """
        session_id = message_input.session_id
        params = {"content": message_input.content}
        if message_input.field_key is not None:
            params["field_key"] = message_input.field_key
        if message_input.field_value is not None:
            params["field_value"] = json.dumps(message_input.field_value, separators=(",", ":"))

        async with self._api.stream(
            "GET",
            f"/conversations/{session_id}/message/stream",
            params=params,
            headers={"Accept": "text/event-stream", IDEMPOTENCY_HEADER: idempotency_key},
        ) as response:
            if not response.is_success:
                logger.warning(
                    f"Stream endpoint returned {response.status_code} for session {session_id}"
                )
                return None

            decoder = SSELineDecoder()
            accumulator = StreamAccumulator(on_chunk)
            async for data in response.aiter_bytes():
                result = accumulator.feed_lines(decoder.feed(data))
                if accumulator.terminal:
                    return result

        logger.warning(f"Stream for session {session_id} closed without a terminal chunk")
        return None

    async def _post_message(
        self, message_input: SendMessageInput, idempotency_key: str
    ) -> MessageResult:
        data = await self._api.post(
            f"/conversations/{message_input.session_id}/message",
            json=message_input.model_dump(exclude={"session_id"}, exclude_none=True),
            headers={IDEMPOTENCY_HEADER: idempotency_key},
        )
        return _validate(MessageResult, data)
