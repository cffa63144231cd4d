# llm/__init__.py
"""
LLM Components Package

- client: OpenAI chat completions with timeouts
- prompts: Prompt templates
- message_writer: Personalized gift messages
- chat_assistant: Conversational fact extraction
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .client import LLMClient
    from .message_writer import PersonalizedMessageWriter
    from .chat_assistant import ChatAssistant

__all__ = [
    "LLMClient",
    "PersonalizedMessageWriter",
    "ChatAssistant",
]
