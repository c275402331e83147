"""NiceGUI interface - thin visualization layer for public chats.

Responsibilities:
    - Session start per agent slug, with password prompt
    - Message display with streamed assistant replies
    - Required-field progress and completion state

Contains no protocol logic. Delegates all state to formchat.chat.
"""
