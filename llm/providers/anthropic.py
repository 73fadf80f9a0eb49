"""
Anthropic Messages API Provider.

Calls the Messages endpoint over HTTP with bounded retries and
exponential backoff.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

OVERLOADED_ERROR_TYPE = "overloaded_error"


class TransientUpstreamError(Exception):
    """Upstream failure worth retrying."""


class OverloadedError(TransientUpstreamError):
    """The API answered with an overload error payload."""

    def __init__(self, payload: Dict[str, Any]):
        super().__init__("API overloaded")
        self.payload = payload


class ExhaustedRetries(Exception):
    """All attempts failed; carries the last observed error."""

    def __init__(self, last_error: BaseException, attempts: int):
        super().__init__(f"Giving up after {attempts} attempts: {last_error}")
        self.last_error = last_error
        self.attempts = attempts


class RequestCancelled(Exception):
    """The caller abandoned an in-flight request."""


class UnexpectedResponseShape(Exception):
    """Successful call whose payload lacks content[0].text."""

    def __init__(self, payload: Any):
        super().__init__("Unexpected API response shape")
        self.payload = payload


class FailureKind(Enum):
    """Classification of a failed attempt."""
    RETRYABLE = "retryable"
    FATAL = "fatal"


@dataclass
class RetryOutcome:
    """Result of a single API attempt."""
    payload: Optional[Dict[str, Any]] = None
    kind: Optional[FailureKind] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, payload: Dict[str, Any]) -> "RetryOutcome":
        return cls(payload=payload)

    @classmethod
    def failure(cls, kind: FailureKind, error: BaseException) -> "RetryOutcome":
        return cls(kind=kind, error=error)

    @property
    def ok(self) -> bool:
        return self.kind is None


def classify_failure(error: BaseException) -> FailureKind:
    """Overload, transport and decode failures are retryable; anything else is fatal."""
    if isinstance(error, (TransientUpstreamError, httpx.HTTPError, ValueError)):
        return FailureKind.RETRYABLE
    return FailureKind.FATAL


def is_overloaded(data: Any) -> bool:
    if not isinstance(data, dict) or data.get("type") != "error":
        return False
    error = data.get("error")
    return isinstance(error, dict) and error.get("type") == OVERLOADED_ERROR_TYPE


class AnthropicProvider:
    """
    Anthropic LLM provider.

    Supports Claude models via the public Messages API.
    """

    DEFAULT_MODEL = "claude-3-5-sonnet-20240620"
    DEFAULT_URL = "https://api.anthropic.com/v1/messages"
    API_VERSION = "2023-06-01"

    def __init__(
        self,
        api_key: str,
        model_id: str = DEFAULT_MODEL,
        api_url: str = DEFAULT_URL,
        api_version: str = API_VERSION,
        max_tokens: int = 500,
        temperature: float = 0.0,
        top_p: float = 0.1,
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            model_id: Model ID
            api_url: Messages endpoint
            api_version: Value of the anthropic-version header
            max_tokens: Maximum tokens for response
            temperature: Generation temperature
            top_p: Nucleus sampling
            max_attempts: Attempt budget per request
            initial_delay: First backoff delay in seconds
            timeout: Per-attempt HTTP timeout in seconds
            client: Shared HTTP client (one is created if omitted)
            sleep: Awaitable used for backoff delays
        """
        self.api_key = api_key
        self.model_id = model_id
        self.api_url = api_url
        self.api_version = api_version
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.top_p = top_p
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay

        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._sleep = sleep
        logger.info(f"Anthropic provider initialized: {model_id}")

    def build_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
        }

    def build_body(self, messages: List[Dict[str, str]], system: str) -> Dict[str, Any]:
        return {
            "model": self.model_id,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "top_p": self.top_p,
            "system": system,
            "messages": messages,
        }

    async def _post(
        self,
        endpoint: str,
        headers: Dict[str, str],
        body: Dict[str, Any]
    ) -> Dict[str, Any]:
        response = await self._client.post(endpoint, headers=headers, json=body)
        data = response.json()
        if is_overloaded(data):
            raise OverloadedError(data)
        return data

    async def _until_cancelled(
        self,
        awaitable: Awaitable[Any],
        cancel_event: Optional[asyncio.Event],
        stage: str
    ) -> Any:
        """Await ``awaitable`` unless ``cancel_event`` is set first."""
        if cancel_event is None:
            return await awaitable

        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (work, waiter):
                if not task.done():
                    task.cancel()

        if cancel_event.is_set():
            if work.done() and not work.cancelled():
                # Mark the result as retrieved; the caller no longer wants it
                work.exception()
            raise RequestCancelled(f"Request cancelled {stage}")
        return work.result()

    async def _attempt(
        self,
        endpoint: str,
        headers: Dict[str, str],
        body: Dict[str, Any],
        cancel_event: Optional[asyncio.Event] = None
    ) -> RetryOutcome:
        """Run one POST and classify the outcome."""
        try:
            data = await self._until_cancelled(
                self._post(endpoint, headers, body), cancel_event, "in flight"
            )
            return RetryOutcome.success(data)
        except RequestCancelled:
            raise
        except Exception as e:
            return RetryOutcome.failure(classify_failure(e), e)

    async def _backoff(self, delay: float, cancel_event: Optional[asyncio.Event]) -> None:
        await self._until_cancelled(self._sleep(delay), cancel_event, "during backoff")

    async def invoke(
        self,
        endpoint: str,
        headers: Dict[str, str],
        body: Dict[str, Any],
        max_attempts: Optional[int] = None,
        initial_delay: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> Dict[str, Any]:
        """
        POST a request with retries.

        Waits initial_delay * 2**i seconds after failed attempt i, except
        after the last one.

        Args:
            endpoint: URL to call
            headers: Request headers
            body: JSON body
            max_attempts: Override attempt budget
            initial_delay: Override first backoff delay (seconds)
            cancel_event: Set to abandon the request

        Returns:
            Decoded JSON payload

        Raises:
            ExhaustedRetries: every attempt failed with a retryable error
            RequestCancelled: cancel_event was set
        """
        attempts = max_attempts if max_attempts is not None else self.max_attempts
        delay = initial_delay if initial_delay is not None else self.initial_delay
        last_error: Optional[BaseException] = None

        for i in range(attempts):
            if cancel_event is not None and cancel_event.is_set():
                raise RequestCancelled("Request cancelled before attempt")

            outcome = await self._attempt(endpoint, headers, body, cancel_event)
            if cancel_event is not None and cancel_event.is_set():
                raise RequestCancelled("Request cancelled after attempt")
            if outcome.ok:
                return outcome.payload

            logger.error(f"Attempt {i + 1} failed: {outcome.error}")
            if outcome.kind == FailureKind.FATAL:
                raise outcome.error
            last_error = outcome.error

            if i < attempts - 1:
                wait = delay * (2 ** i)
                logger.info(f"Retrying in {wait:.1f}s...")
                await self._backoff(wait, cancel_event)

        raise ExhaustedRetries(last_error, attempts)

    async def generate_with_history(
        self,
        messages: List[Dict[str, str]],
        system: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> str:
        """
        Generate response with conversation history.

        Args:
            messages: List of messages with role and content
            system: System prompt

        Returns:
            Text of the first content block

        Raises:
            UnexpectedResponseShape: payload has no content[0].text
        """
        data = await self.invoke(
            self.api_url,
            self.build_headers(),
            self.build_body(messages, system),
            cancel_event=cancel_event,
        )

        try:
            text = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError):
            logger.error(f"Unexpected API response: {data}")
            raise UnexpectedResponseShape(data)
        if not text:
            logger.error(f"Unexpected API response: {data}")
            raise UnexpectedResponseShape(data)

        logger.info(f"Received response from API: {text}")
        return text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
