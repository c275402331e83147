"""Shared builders for conversation payloads and fake backends."""

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx


def state_payload(session_id: str = "test-session-12345", **overrides: Any) -> dict[str, Any]:
    """Build a ConversationState JSON payload."""
    payload = {
        "session_id": session_id,
        "agent_id": "agent-1",
        "status": "active",
        "collected_fields": {"name": "Ada"},
        "required_fields": ["name", "email", "phone"],
        "completed_fields": ["name"],
        "current_field": "email",
    }
    payload.update(overrides)
    return payload


def sse(chunk: dict[str, Any]) -> bytes:
    """Encode one chunk as a ``data:`` line."""
    return f"data: {json.dumps(chunk)}\n".encode()


class ByteStream:
    """Async byte source that counts how many parts the reader pulled.

    Args:
        parts: Byte increments yielded one per read.
        error: Raised after the last part, to simulate a dropped connection.
    """

    def __init__(self, parts: list[bytes], error: Exception | None = None) -> None:
        self.parts = parts
        self.error = error
        self.pulled = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for part in self.parts:
            self.pulled += 1
            yield part
        if self.error is not None:
            raise self.error


class FakeBackend:
    """Request handler for ``httpx.MockTransport`` mimicking the backend.

    The stream endpoint serves ``self.stream``; the non-streaming endpoint
    answers with ``fallback_payload``. Every request is recorded.
    """

    def __init__(self, session_id: str = "test-session-12345") -> None:
        self.session_id = session_id
        self.requests: list[httpx.Request] = []
        self.stream = ByteStream([])
        self.stream_status = 200
        self.stream_exception: Exception | None = None
        self.fallback_status = 200
        self.fallback_payload: dict[str, Any] = {
            "message": {
                "id": "msg-fallback",
                "role": "assistant",
                "content": "Thanks, what is your email?",
                "timestamp": "2026-01-01T10:00:00+00:00",
            },
            "state": state_payload(session_id),
        }
        self.start_status = 200
        self.start_payload: dict[str, Any] = {
            "session_id": session_id,
            "agent": {
                "id": "agent-1",
                "name": "Intake Bot",
                "welcome_message": "Welcome!",
                "primary_color": "#0f766e",
            },
            "conversation_state": state_payload(session_id, completed_fields=[]),
            "initial_message": {
                "id": "msg-hello",
                "role": "assistant",
                "content": "Hi! What is your name?",
                "timestamp": "2026-01-01T09:59:00+00:00",
            },
        }
        self.transcript: list[dict[str, Any]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/message/stream"):
            if self.stream_exception is not None:
                raise self.stream_exception
            return httpx.Response(
                self.stream_status,
                headers={"content-type": "text/event-stream"},
                content=self.stream,
            )
        if path.endswith("/message") and request.method == "POST":
            return httpx.Response(self.fallback_status, json=self.fallback_payload)
        if path.endswith("/conversations/start"):
            return httpx.Response(self.start_status, json=self.start_payload)
        if path.endswith("/state"):
            return httpx.Response(200, json=self.fallback_payload["state"])
        if path.endswith("/messages"):
            return httpx.Response(200, json=self.transcript)
        return httpx.Response(404, json={"detail": "Not Found"})

    @property
    def stream_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/message/stream")]

    @property
    def fallback_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/message") and r.method == "POST"]
