"""Integration tests for components working together as a system.

Coverage:
    - Streaming and fallback against a real FastAPI SSE backend
    - Host application routes

No mocks on the client side; the backend is served over ASGITransport.
"""
