"""
LLM Provider implementations.
"""

from .anthropic import AnthropicProvider, ExhaustedRetries, UnexpectedResponseShape

__all__ = ["AnthropicProvider", "ExhaustedRetries", "UnexpectedResponseShape"]
