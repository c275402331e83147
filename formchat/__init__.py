"""formchat - Python client for conversational form agents.

Streams agent replies from the hosted backend and renders a public chat page
that walks visitors through an agent's form fields.

Components:
    - models: Wire schemas for conversations, messages, and stream chunks
    - client: Authenticated HTTP client with streaming and fallback
    - chat: Per-conversation view state and field progress
    - api: FastAPI host application
    - ui: NiceGUI public chat page
"""

__version__ = "0.1.0"
