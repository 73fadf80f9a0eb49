"""
Service initialization and dependency injection for Barista Bot API.

Creates and manages all service instances used by the API.
"""

import logging
from typing import Any, Dict, Optional

from config.settings import get_settings, Settings
from llm.conversation_store import SessionStore
from llm.orchestrator import ConversationPipeline
from llm.prompt_templates import PromptTemplates
from llm.providers.anthropic import AnthropicProvider
from ordering.catalog import CatalogLoader
from ordering.order_router import OrderRouter
from ordering.slot_validator import SlotValidator
from .analytics.audit_log import AuditLogger
from .channels.telegram import TelegramChannel

logger = logging.getLogger(__name__)


class Services:
    """Container for all application services."""

    def __init__(self):
        self.settings: Optional[Settings] = None
        self.catalog: Dict[str, Any] = {}
        self.template: Optional[str] = None
        self.sessions: Optional[SessionStore] = None
        self.provider: Optional[AnthropicProvider] = None
        self.reply_channel: Optional[TelegramChannel] = None
        self.order_router: Optional[OrderRouter] = None
        self.audit_logger: Optional[AuditLogger] = None
        self.pipeline: Optional[ConversationPipeline] = None
        self._initialized = False

    def initialize(self, settings: Optional[Settings] = None):
        """Initialize all services."""
        if self._initialized:
            return

        self.settings = settings or get_settings()
        logger.info(f"Initializing services with model: {self.settings.llm_model_id}")

        try:
            self._init_catalog()
            self._init_template()
            self._init_channels()
            self._init_pipeline()
            self._initialized = True
            logger.info("All services initialized successfully")
        except Exception as e:
            logger.error(f"Service initialization failed: {e}")
            # Allow API to start even if some services fail
            self._initialized = True
            logger.warning("API starting in degraded mode")

    def _init_catalog(self):
        """Load the product catalog."""
        self.catalog = CatalogLoader().load(self.settings.catalog_path)

    def _init_template(self):
        """Load the system prompt template."""
        s = self.settings
        custom = PromptTemplates.load(s.prompt_template_path) if s.prompt_template_path else None
        self.template = PromptTemplates.get_system_prompt(
            brand_name=s.brand_name, custom_template=custom
        )

    def _init_channels(self):
        """Initialize Telegram channels for replies, audit log and orders."""
        s = self.settings

        if s.telegram_bot_token:
            self.reply_channel = TelegramChannel(s.telegram_bot_token)
        else:
            logger.warning("TELEGRAM_BOT_TOKEN not set, replies will not be sent to Telegram")

        audit_channel = TelegramChannel(s.telegram_log_bot_token) if s.audit_enabled else None
        self.audit_logger = AuditLogger(audit_channel, s.telegram_log_chat_id)
        if not s.audit_enabled:
            logger.warning("Audit chat not configured, dialog logging disabled")

        order_channel = TelegramChannel(s.telegram_order_bot_token) if s.order_delivery_enabled else None
        self.order_router = OrderRouter(order_channel, s.telegram_order_chat_id)
        if not s.order_delivery_enabled:
            logger.warning("Order chat not configured, completed orders will not be delivered")

    def _init_pipeline(self):
        """Initialize the session store, model client and pipeline."""
        s = self.settings

        if not s.anthropic_api_key:
            logger.warning("ANTHROPIC_API_KEY not set, model calls will fail")

        validator = SlotValidator()
        self.sessions = SessionStore(validator)
        self.provider = AnthropicProvider(
            api_key=s.anthropic_api_key,
            model_id=s.llm_model_id,
            api_url=s.anthropic_api_url,
            api_version=s.anthropic_version,
            max_tokens=s.max_tokens,
            temperature=s.temperature,
            top_p=s.top_p,
            max_attempts=s.max_attempts,
            initial_delay=s.retry_initial_delay,
            timeout=s.request_timeout,
        )
        self.pipeline = ConversationPipeline(
            sessions=self.sessions,
            provider=self.provider,
            catalog=self.catalog,
            template=self.template,
            validator=validator,
            order_sink=self.order_router,
            audit_sink=self.audit_logger,
            deadline_seconds=s.pipeline_deadline_seconds,
        )
        logger.info("Conversation pipeline ready")

    async def shutdown(self):
        """Release clients and drop session state."""
        if self.provider:
            await self.provider.aclose()
        if self.sessions:
            self.sessions.close()
        self._initialized = False

    @property
    def is_ready(self) -> bool:
        return self._initialized and self.pipeline is not None

    def health(self) -> dict:
        """Return health status of all services."""
        return {
            "initialized": self._initialized,
            "catalog_items": len(self.catalog),
            "pipeline": self.pipeline is not None,
            "telegram_replies": self.reply_channel is not None,
            "audit_log": bool(self.audit_logger and self.audit_logger.enabled),
            "order_delivery": bool(self.settings and self.settings.order_delivery_enabled),
        }


# Singleton
_services = Services()


def get_services() -> Services:
    """Get the global services instance."""
    return _services


def initialize_services():
    """Initialize all services (called at startup)."""
    _services.initialize()


async def shutdown_services():
    """Tear down all services (called at shutdown)."""
    await _services.shutdown()
