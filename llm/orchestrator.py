"""
Conversation Pipeline for Barista Bot.

Runs one inbound message through the order-taking pipeline:
RECEIVE -> NORMALIZE -> COMPILE_PROMPT -> CALL_MODEL -> PARSE_RESPONSE
-> MERGE_SLOTS -> SUBMIT_IF_COMPLETE -> LOG -> REPLY.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol

from ordering.slot_validator import SlotValidator
from .conversation_store import ASSISTANT, USER, SessionStore
from .prompt_templates import PromptTemplates
from .providers.anthropic import ExhaustedRetries, RequestCancelled, UnexpectedResponseShape
from .response_parser import ResponseParser
from .transcript import ensure_alternating_roles

logger = logging.getLogger(__name__)

OVERLOADED_REPLY = (
    "Sorry, the service is overloaded right now. Please try again in a few minutes."
)
UNEXPECTED_REPLY = (
    "Sorry, something went wrong while processing your request. Please try again a bit later."
)
MALFORMED_REPLY = "Sorry, something went wrong while processing the response."


class PipelineOutcome(Enum):
    """How a turn ended."""
    OK = "ok"
    MALFORMED_OUTPUT = "malformed_output"
    UNEXPECTED_SHAPE = "unexpected_shape"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"


class OrderSink(Protocol):
    """Receives completed orders."""

    async def submit(self, user_id: str, slots: Mapping[str, str]) -> bool:
        ...


class AuditSink(Protocol):
    """Receives a transcript line per successful turn."""

    async def record(self, display_name: str, user_message: str, reply: str) -> bool:
        ...


class ModelProvider(Protocol):
    async def generate_with_history(
        self,
        messages: List[Dict[str, str]],
        system: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> str:
        ...


@dataclass
class InboundMessage:
    """Message envelope handed over by the transport."""
    user_id: str
    display_name: str
    text: str


@dataclass
class ChatResponse:
    """Result of processing one message."""
    reply: str
    user_id: str
    query: str
    outcome: PipelineOutcome = PipelineOutcome.OK
    slots: Dict[str, str] = field(default_factory=dict)
    missing_slots: List[str] = field(default_factory=list)
    order_complete: bool = False
    order_submitted: bool = False
    processing_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "reply": self.reply,
            "user_id": self.user_id,
            "query": self.query,
            "outcome": self.outcome.value,
            "slots": self.slots,
            "missing_slots": self.missing_slots,
            "order_complete": self.order_complete,
            "order_submitted": self.order_submitted,
            "processing_time_ms": self.processing_time_ms,
        }


class ConversationPipeline:
    """
    Orchestrates the order-taking pipeline.

    Every failure is absorbed here and turned into one of the fixed
    replies above; slots captured on earlier turns are never rolled back.
    """

    def __init__(
        self,
        sessions: SessionStore,
        provider: ModelProvider,
        catalog: Dict[str, Any],
        template: Optional[str] = None,
        parser: Optional[ResponseParser] = None,
        validator: Optional[SlotValidator] = None,
        order_sink: Optional[OrderSink] = None,
        audit_sink: Optional[AuditSink] = None,
        deadline_seconds: Optional[float] = None
    ):
        """
        Initialize the pipeline.

        Args:
            sessions: Session registry
            provider: Model client
            catalog: Read-only product catalog
            template: System prompt template
            parser: Model output parser
            validator: Slot validator
            order_sink: Destination for completed orders
            audit_sink: Destination for dialog transcripts
            deadline_seconds: Overall limit on the model call (None disables)
        """
        self.sessions = sessions
        self.provider = provider
        self.catalog = catalog
        self.template = template or PromptTemplates.ORDER_SYSTEM_PROMPT
        self.parser = parser or ResponseParser()
        self.validator = validator or SlotValidator()
        self.order_sink = order_sink
        self.audit_sink = audit_sink
        self.deadline_seconds = deadline_seconds

    async def process(
        self,
        message: InboundMessage,
        cancel_event: Optional[asyncio.Event] = None
    ) -> ChatResponse:
        """
        Process one inbound message.

        Args:
            message: Inbound envelope
            cancel_event: Set to abandon the model call

        Returns:
            Chat response; never raises for upstream or parsing failures
        """
        start_time = time.time()
        logger.info(
            f"Processing message from {message.display_name} ({message.user_id}): {message.text}"
        )

        async with self.sessions.lock(message.user_id):
            response = await self._process_locked(message, cancel_event)

        response.processing_time_ms = round((time.time() - start_time) * 1000, 2)
        return response

    async def _process_locked(
        self,
        message: InboundMessage,
        cancel_event: Optional[asyncio.Event]
    ) -> ChatResponse:
        user_id = message.user_id

        # RECEIVE
        self.sessions.get_or_create(user_id, message.display_name)
        self.sessions.append_turn(user_id, USER, message.text)
        session = self.sessions.get(user_id)

        # NORMALIZE
        turns = ensure_alternating_roles(session.history)

        # COMPILE_PROMPT
        system_prompt = PromptTemplates.compile(
            self.template, self.catalog, message.text, message.display_name
        )

        # CALL_MODEL
        try:
            raw_text = await self._call_model(
                [t.to_message() for t in turns], system_prompt, cancel_event
            )
        except UnexpectedResponseShape:
            return self._failure(message, UNEXPECTED_REPLY, PipelineOutcome.UNEXPECTED_SHAPE)
        except asyncio.TimeoutError:
            logger.error(f"Model call for user {user_id} exceeded {self.deadline_seconds}s deadline")
            return self._failure(message, OVERLOADED_REPLY, PipelineOutcome.UPSTREAM_UNAVAILABLE)
        except (ExhaustedRetries, RequestCancelled) as e:
            logger.error(f"Model call for user {user_id} failed: {e}")
            return self._failure(message, OVERLOADED_REPLY, PipelineOutcome.UPSTREAM_UNAVAILABLE)
        except Exception as e:
            logger.error(f"Model call for user {user_id} failed with unexpected error: {e}")
            return self._failure(message, OVERLOADED_REPLY, PipelineOutcome.UPSTREAM_UNAVAILABLE)

        # PARSE_RESPONSE
        parsed = self.parser.parse(raw_text)
        if parsed is None:
            return self._failure(message, MALFORMED_REPLY, PipelineOutcome.MALFORMED_OUTPUT)

        # MERGE_SLOTS
        session = self.sessions.merge_slots(user_id, parsed.slots)
        missing = self.validator.missing(session.slots)
        complete = not missing

        # SUBMIT_IF_COMPLETE
        submitted = False
        if complete:
            logger.info(f"All required order data received for user {user_id}")
            submitted = await self._submit_order(user_id, session)
        else:
            logger.info(f"Order for user {user_id} still missing: {', '.join(missing)}")

        self.sessions.append_turn(user_id, ASSISTANT, parsed.block)

        # LOG
        await self._audit(message, parsed.reply)

        # REPLY
        return ChatResponse(
            reply=parsed.reply,
            user_id=user_id,
            query=message.text,
            slots=dict(session.slots),
            missing_slots=missing,
            order_complete=complete,
            order_submitted=submitted,
        )

    async def _call_model(
        self,
        messages: List[Dict[str, str]],
        system_prompt: str,
        cancel_event: Optional[asyncio.Event]
    ) -> str:
        call = self.provider.generate_with_history(messages, system_prompt, cancel_event=cancel_event)
        if self.deadline_seconds:
            return await asyncio.wait_for(call, timeout=self.deadline_seconds)
        return await call

    async def _submit_order(self, user_id: str, session: Any) -> bool:
        """Submit once per session; ``delivered`` is cleared only by a reset."""
        if session.delivered:
            logger.info(f"Order for user {user_id} already submitted, skipping")
            return False
        if not self.order_sink:
            logger.warning(f"No order sink configured, order for user {user_id} not submitted")
            return False

        try:
            ok = await self.order_sink.submit(user_id, dict(session.slots))
        except Exception as e:
            logger.error(f"Order submission for user {user_id} raised: {e}")
            return False

        if ok:
            self.sessions.mark_delivered(user_id)
        return ok

    async def _audit(self, message: InboundMessage, reply: str) -> None:
        if not self.audit_sink:
            return
        try:
            await self.audit_sink.record(message.display_name, message.text, reply)
        except Exception as e:
            logger.error(f"Audit log failed for user {message.user_id}: {e}")

    def _failure(self, message: InboundMessage, reply: str, outcome: PipelineOutcome) -> ChatResponse:
        session = self.sessions.get(message.user_id)
        slots = dict(session.slots) if session else {}
        return ChatResponse(
            reply=reply,
            user_id=message.user_id,
            query=message.text,
            outcome=outcome,
            slots=slots,
            missing_slots=self.validator.missing(slots),
            order_complete=False,
        )
