"""Pydantic models for the conversation API wire format.

Provides type safety and validation for everything exchanged with the backend.

Models:
    - ConversationState: Backend snapshot of field-collection progress
    - ChatMessage: Individual message in the transcript
    - StreamingChunk: One parsed line of the message stream
    - SendMessageInput / MessageResult: Send request and outcome
    - StartSessionInput / StartSessionResponse: Session bootstrap
"""

from formchat.models.schemas import (
    AgentSummary,
    ChatMessage,
    ChunkType,
    ConversationState,
    ConversationStatus,
    MessageMetadata,
    MessageResult,
    MessageRole,
    SendMessageInput,
    StartSessionInput,
    StartSessionResponse,
    StreamingChunk,
    TokenUsage,
)

__all__ = [
    "AgentSummary",
    "ChatMessage",
    "ChunkType",
    "ConversationState",
    "ConversationStatus",
    "MessageMetadata",
    "MessageResult",
    "MessageRole",
    "SendMessageInput",
    "StartSessionInput",
    "StartSessionResponse",
    "StreamingChunk",
    "TokenUsage",
]
