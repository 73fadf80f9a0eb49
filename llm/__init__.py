"""
LLM Orchestration Module for Barista Bot.

This module handles:
- Per-user session state
- Transcript normalization and prompt rendering
- Resilient calls to the Anthropic Messages API
- Parsing of tagged model replies
"""

from .conversation_store import Session, SessionStore, Turn
from .orchestrator import ChatResponse, ConversationPipeline, InboundMessage, PipelineOutcome
from .prompt_templates import PromptTemplates
from .response_parser import ParsedResponse, ResponseParser
from .transcript import ensure_alternating_roles

__all__ = [
    "ChatResponse",
    "ConversationPipeline",
    "InboundMessage",
    "ParsedResponse",
    "PipelineOutcome",
    "PromptTemplates",
    "ResponseParser",
    "Session",
    "SessionStore",
    "Turn",
    "ensure_alternating_roles",
]
