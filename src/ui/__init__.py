"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Conversation display with streamed, Markdown-rendered replies
    - Image attachment picking and validation
    - Single-flight send gate while a reply streams in

Conversation state lives in ``conversation`` and has no NiceGUI
dependency. All model calls go through the relay API.
"""
