"""Incremental parsing of the message stream.

The backend answers ``GET .../message/stream`` with newline-terminated lines;
lines starting with ``data: `` carry one JSON ``StreamingChunk``. This module
turns raw byte increments into chunks and folds chunks into a final
``MessageResult``. It knows nothing about HTTP, so the same code runs against
any byte source.
"""

import codecs
import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import ValidationError

from formchat.client.errors import StreamingError
from formchat.models.schemas import (
    ChatMessage,
    ChunkType,
    ConversationState,
    MessageResult,
    MessageRole,
    StreamingChunk,
)

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DEFAULT_STREAM_ERROR = "Streaming error"
INCOMPLETE_RESPONSE = "Incomplete response"

ChunkObserver = Callable[[StreamingChunk], None]


class SSELineDecoder:
    """Split a UTF-8 byte stream into ``\\n``-terminated lines.

    Decoder state is carried between feeds, so a multi-byte character split
    across two increments still decodes to one character.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    def feed(self, data: bytes) -> list[str]:
        """Decode ``data`` and return the lines it completed.

        The trailing fragment after the last newline stays buffered.
        """
        self._buffer += self._decoder.decode(data)
        *lines, self._buffer = self._buffer.split("\n")
        return lines

    @property
    def pending(self) -> str:
        return self._buffer


def parse_chunk_line(line: str) -> StreamingChunk | None:
    """Parse one stream line into a chunk.

    Args:
        line: A complete line, without its newline.

    Returns:
        The parsed chunk, or None for lines to ignore: blank lines, lines
        without the ``data: `` prefix, and payloads that are not valid JSON
        or do not match the chunk schema.
    """
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX) :]
    try:
        return StreamingChunk.model_validate_json(payload)
    except ValidationError:
        logger.debug(f"Skipping malformed stream line: {payload[:80]!r}")
        return None


class StreamPhase(str, Enum):
    RECEIVING = "receiving"
    FAILED = "failed"
    COMPLETED = "completed"


class StreamAccumulator:
    """Fold streamed chunks into a single outcome.

    Holds everything scoped to one send: the accumulated assistant text, the
    most recent conversation state, and the last field key/value seen. The
    first ``error`` or ``done`` chunk makes the accumulator terminal; later
    chunks are ignored.

    Args:
        on_chunk: Optional observer, called synchronously for content, field
            and status chunks in arrival order. An observer that raises is
            logged and skipped; the stream carries on.
    """

    def __init__(self, on_chunk: ChunkObserver | None = None) -> None:
        self._on_chunk = on_chunk
        self.phase = StreamPhase.RECEIVING
        self.text = ""
        self.state: ConversationState | None = None
        self.field_key: str | None = None
        self.field_value: Any = None

    @property
    def terminal(self) -> bool:
        return self.phase is not StreamPhase.RECEIVING

    def dispatch(self, chunk: StreamingChunk) -> MessageResult | None:
        """Apply one chunk.

        Returns:
            The final result when ``chunk`` completes the stream, else None.

        Raises:
            StreamingError: On an ``error`` chunk, or a ``done`` chunk that
                arrives before any conversation state.
        """
        if self.terminal:
            return None

        if chunk.type is ChunkType.ERROR:
            self.phase = StreamPhase.FAILED
            raise StreamingError(chunk.error or DEFAULT_STREAM_ERROR)
        if chunk.type is ChunkType.DONE:
            return self._complete(chunk)

        if chunk.type is ChunkType.CONTENT:
            if not chunk.content:
                return None
            self.text += chunk.content
        elif chunk.type is ChunkType.FIELD:
            self.field_key = chunk.field_key
            self.field_value = chunk.field_value
        elif chunk.type is ChunkType.STATUS:
            if chunk.status is None:
                return None
            self.state = chunk.status
        self._notify(chunk)
        return None

    def feed_lines(self, lines: list[str]) -> MessageResult | None:
        """Parse and dispatch complete lines until one is terminal."""
        for line in lines:
            chunk = parse_chunk_line(line)
            if chunk is None:
                continue
            result = self.dispatch(chunk)
            if self.terminal:
                return result
        return None

    def _notify(self, chunk: StreamingChunk) -> None:
        if self._on_chunk is None:
            return
        try:
            self._on_chunk(chunk)
        except Exception as e:
            logger.debug(f"Chunk observer failed on {chunk.type.value} chunk: {e}")

    def _complete(self, chunk: StreamingChunk) -> MessageResult:
        if self.state is None:
            self.phase = StreamPhase.FAILED
            raise StreamingError(INCOMPLETE_RESPONSE)

        if chunk.field_key is not None:
            self.field_key = chunk.field_key
            self.field_value = chunk.field_value

        message = ChatMessage(
            id=f"msg-{time.time_ns() // 1_000_000}",
            role=MessageRole.ASSISTANT,
            content=self.text,
            timestamp=datetime.now(UTC).isoformat(),
            field_key=self.field_key,
            field_value=self.field_value,
        )
        self.phase = StreamPhase.COMPLETED
        return MessageResult(message=message, state=self.state)
