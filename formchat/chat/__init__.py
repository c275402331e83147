"""Conversation view state shared by the UI.

Responsibilities:
    - Session bootstrap and resume
    - Optimistic transcript updates while a reply streams
    - Required-field progress tracking
"""

from formchat.chat.session import ChatSession, FieldProgress

__all__ = ["ChatSession", "FieldProgress"]
