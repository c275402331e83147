"""Client-side state for one conversation.

Keeps the transcript, the latest conversation state, and the streaming flag
consistent while a message is in flight. The UI renders from this object and
never talks to the API directly.
"""

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from formchat.client.conversation import ConversationApi
from formchat.models.schemas import (
    AgentSummary,
    ChatMessage,
    ChunkType,
    ConversationState,
    ConversationStatus,
    MessageRole,
    SendMessageInput,
    StartSessionInput,
    StreamingChunk,
)

logger = logging.getLogger(__name__)


class FieldProgress(BaseModel):
    """How far the conversation is through its required fields.

    Attributes:
        completed: Required fields already collected.
        total: Number of required fields.
        percent: Completion percentage, 0 when nothing is required.
        pending: Required field keys not yet collected, in schema order.
    """

    completed: int = Field(ge=0)
    total: int = Field(ge=0)
    percent: float = Field(ge=0.0, le=100.0)
    pending: list[str] = Field(default_factory=list)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _local_id(prefix: str) -> str:
    return f"{prefix}-{time.time_ns() // 1_000_000}"


class ChatSession:
    """Manages chat state for a visitor's conversation."""

    def __init__(self, api: ConversationApi) -> None:
        self._api = api
        self.session_id: str | None = None
        self.agent: AgentSummary | None = None
        self.state: ConversationState | None = None
        self.messages: list[ChatMessage] = []
        self.is_streaming: bool = False
        self.streaming_content: str = ""

    @property
    def is_completed(self) -> bool:
        return self.state is not None and self.state.status == ConversationStatus.COMPLETED

    async def start(self, agent_slug: str, password: str | None = None) -> None:
        """Start a new session with the agent published under ``agent_slug``.

        Raises:
            ApiError: If the backend refuses to start the session.
        """
        response = await self._api.start_session(
            StartSessionInput(agent_slug=agent_slug, password=password)
        )
        self.session_id = response.session_id
        self.agent = response.agent
        self.state = response.conversation_state
        self.messages = [response.initial_message] if response.initial_message else []

    async def load(self, session_id: str) -> None:
        """Resume an existing session from the backend."""
        self.messages = await self._api.get_messages(session_id)
        self.state = await self._api.get_state(session_id)
        self.session_id = session_id

    async def send(
        self,
        content: str,
        field_key: str | None = None,
        field_value: Any = None,
        on_update: Callable[[], None] | None = None,
    ) -> ChatMessage | None:
        """Send a user message and stream the reply into the transcript.

        The user message and an empty assistant placeholder are appended
        immediately; chunks fill in the placeholder as they arrive.

        Args:
            content: Message text.
            field_key: Form field being answered.
            field_value: Value for ``field_key``.
            on_update: Called after every change to messages or state.

        Returns:
            The final assistant message, or None if nothing was sent because
            no session is open or a reply is still streaming.

        Raises:
            ConversationError: If the send fails. The placeholder is removed
                before the error propagates.
        """
        if self.session_id is None or self.is_streaming:
            return None

        def notify() -> None:
            if on_update is not None:
                on_update()

        self.messages.append(
            ChatMessage(
                id=_local_id("user"),
                role=MessageRole.USER,
                content=content,
                timestamp=_now_iso(),
                field_key=field_key,
                field_value=field_value,
            )
        )
        placeholder = ChatMessage(
            id=_local_id("assistant"),
            role=MessageRole.ASSISTANT,
            content="",
            timestamp=_now_iso(),
        )
        self.messages.append(placeholder)
        self.is_streaming = True
        self.streaming_content = ""
        notify()

        def on_chunk(chunk: StreamingChunk) -> None:
            if chunk.type is ChunkType.CONTENT and chunk.content:
                self.streaming_content += chunk.content
                placeholder.content = self.streaming_content
            elif chunk.type is ChunkType.STATUS and chunk.status is not None:
                self.state = chunk.status
            elif chunk.type is ChunkType.FIELD:
                placeholder.field_key = chunk.field_key
                placeholder.field_value = chunk.field_value
            notify()

        try:
            result = await self._api.send_message(
                SendMessageInput(
                    session_id=self.session_id,
                    content=content,
                    field_key=field_key,
                    field_value=field_value,
                ),
                on_chunk=on_chunk,
            )
        except Exception as e:
            self.messages = [m for m in self.messages if m.id != placeholder.id]
            logger.error(f"Failed to send message in session {self.session_id}: {e}")
            raise
        finally:
            self.is_streaming = False
            self.streaming_content = ""

        self.messages = [
            result.message if m.id == placeholder.id else m for m in self.messages
        ]
        self.state = result.state
        if self.is_completed:
            logger.info(f"Conversation {self.session_id} completed")
        notify()
        return result.message

    def progress(self) -> FieldProgress:
        """Summarize required-field progress from the current state."""
        if self.state is None:
            return FieldProgress(completed=0, total=0, percent=0.0)

        required = self.state.required_fields
        done = set(self.state.completed_fields)
        completed = sum(1 for key in required if key in done)
        total = len(required)
        return FieldProgress(
            completed=completed,
            total=total,
            percent=round(completed / total * 100, 1) if total else 0.0,
            pending=[key for key in required if key not in done],
        )
