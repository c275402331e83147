from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConversationStatus(str, Enum):
    """Lifecycle status of a conversation session."""

    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChunkType(str, Enum):
    """Discriminator values for streamed chunks."""

    CONTENT = "content"
    FIELD = "field"
    STATUS = "status"
    ERROR = "error"
    DONE = "done"


class ConversationState(BaseModel):
    """Backend-owned snapshot of a session's field-collection progress.

    Attributes:
        session_id: Session the snapshot belongs to.
        agent_id: Agent running the conversation.
        status: Lifecycle status (active, completed, abandoned).
        collected_fields: Field values gathered so far, keyed by field key.
        required_fields: Keys the agent must collect.
        completed_fields: Keys already collected.
        current_field: Key the agent is currently asking for, if any.
    """

    model_config = ConfigDict(extra="ignore")

    session_id: str
    agent_id: str
    status: ConversationStatus
    collected_fields: dict[str, Any] = Field(default_factory=dict)
    required_fields: list[str] = Field(default_factory=list)
    completed_fields: list[str] = Field(default_factory=list)
    current_field: str | None = None
    started_at: str | None = None
    updated_at: str | None = None


class TokenUsage(BaseModel):
    prompt: int = 0
    completion: int = 0
    total: int = 0


class MessageMetadata(BaseModel):
    model: str | None = None
    token_usage: TokenUsage | None = None
    clarification_needed: bool | None = None
    validation_error: str | None = None


class ChatMessage(BaseModel):
    """A single message in the conversation transcript.

    Attributes:
        id: Message identifier (backend-assigned or locally generated).
        role: The speaker (user, assistant, or system).
        content: The message text.
        timestamp: ISO 8601 creation time.
        field_key: Form field this message answered or extracted, if any.
        field_value: Value submitted or extracted for ``field_key``.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    role: MessageRole
    content: str = ""
    timestamp: str
    field_key: str | None = None
    field_value: Any = None
    metadata: MessageMetadata | None = None


class StreamingChunk(BaseModel):
    """One ``data:`` line of the message stream.

    Only the fields relevant to ``type`` are populated; ``status`` carries a
    full state snapshot for status chunks.
    """

    model_config = ConfigDict(extra="ignore")

    type: ChunkType
    content: str | None = None
    field_key: str | None = None
    field_value: Any = None
    status: ConversationState | None = None
    error: str | None = None
    done: bool | None = None


class SendMessageInput(BaseModel):
    """Payload for sending one user message.

    Attributes:
        session_id: Target session.
        content: Message text; may be empty when only a field value is sent.
        field_key: Form field being answered.
        field_value: JSON-serializable value for ``field_key``.
    """

    session_id: str = Field(..., min_length=1)
    content: str = ""
    field_key: str | None = None
    field_value: Any = None

    @field_validator("session_id", mode="before")
    @classmethod
    def strip_session_id(cls, v: str) -> str:
        """Strip whitespace from session id before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class MessageResult(BaseModel):
    """Final assistant message and the state it left the conversation in."""

    message: ChatMessage
    state: ConversationState


class StartSessionInput(BaseModel):
    agent_slug: str = Field(..., min_length=1)
    password: str | None = None
    captcha_token: str | None = None


class AgentSummary(BaseModel):
    """Public-facing agent details returned when a session starts."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    avatar_url: str | None = None
    welcome_message: str = ""
    primary_color: str = ""


class StartSessionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    session_id: str
    agent: AgentSummary
    conversation_state: ConversationState
    initial_message: ChatMessage | None = None
