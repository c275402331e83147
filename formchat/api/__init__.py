"""FastAPI host for the chat UI.

Endpoints:
    - GET /health: Service health status
    - /chat/{slug}: NiceGUI public chat page (mounted by formchat.main)
"""

from formchat.api.app import create_app

__all__ = ["create_app"]
