"""Unit tests for individual components in isolation.

Coverage:
    - client/: Config, transport, stream parsing, send with fallback
    - chat/: Session view state and field progress
    - ui/: Page helpers

HTTP goes through httpx MockTransport so read boundaries are exact.
"""
