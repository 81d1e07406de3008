"""Language model adapters."""

from labelbot.infrastructure.ai.openai_assistant import OpenAIAssistant, PassthroughExplainer

__all__ = ["OpenAIAssistant", "PassthroughExplainer"]
