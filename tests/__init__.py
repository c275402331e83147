"""Test package for formchat.

Structure:
    - unit/: Individual function and class tests
    - integration/: Client against a stand-in FastAPI backend
    - helpers.py: Payload builders and a scriptable fake backend

Leverages pytest with pytest-check for soft assertions.
"""
