"""Client for the external messaging bot that texts complaint updates.

The bot exposes a single webhook. Delivery is best-effort: callers treat a
:class:`NotifierError` as a warning, never as a failed operation.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum

import httpx

from campus_wellness.core.errors import NotifierError
from campus_wellness.core.settings import settings

logger = logging.getLogger(__name__)

HTTP_INTERNAL_SERVER_ERROR = 500


class NotifierUnavailableError(NotifierError):
    """Raised when no notifier endpoint is configured or the circuit is open."""


class CircuitState(Enum):
    """Circuit breaker states for the webhook."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreaker:
    """Stops calling the bot for a while after repeated failures."""

    failure_threshold: int = 5
    recovery_timeout: float = 60.0

    _state: CircuitState = CircuitState.CLOSED
    _failure_count: int = 0
    _last_failure_time: float = 0.0

    def is_open(self) -> bool:
        """Check if circuit is open."""
        if self._state == CircuitState.OPEN:
            if time.time() - self._last_failure_time > self.recovery_timeout:
                self._state = CircuitState.HALF_OPEN
            return self._state == CircuitState.OPEN
        return False

    def record_success(self) -> None:
        """Record a successful delivery."""
        self._state = CircuitState.CLOSED
        self._failure_count = 0

    def record_failure(self) -> None:
        """Record a failed delivery."""
        self._failure_count += 1
        self._last_failure_time = time.time()
        if self._failure_count >= self.failure_threshold or self._state == CircuitState.HALF_OPEN:
            self._state = CircuitState.OPEN

    def get_state(self) -> CircuitState:
        """Get the current circuit breaker state."""
        return self._state


@dataclass(frozen=True)
class NotifierConfig:
    """Immutable configuration for the notifier webhook."""

    url: str | None
    token: str | None
    timeout_seconds: float

    @property
    def enabled(self) -> bool:
        return bool(self.url)


def load_notifier_config() -> NotifierConfig:
    """Build configuration object from global settings."""
    return NotifierConfig(
        url=settings.notifier_url,
        token=settings.notifier_token,
        timeout_seconds=float(settings.notifier_timeout_seconds),
    )


class NotifierClient:
    """HTTP client wrapper for the messaging bot webhook."""

    def __init__(
        self,
        config: NotifierConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or load_notifier_config()
        self._client = http_client
        self._client_lock = asyncio.Lock()
        self._circuit_breaker = CircuitBreaker()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                )
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    async def notify(
        self,
        phone: str,
        summary: str,
        status: str,
        notes: str | None = None,
    ) -> bool:
        """Send one status message to ``phone``.

        The phone number is used only to address the message.

        Raises:
            NotifierUnavailableError: No webhook is configured or the circuit is open.
            NotifierError: The webhook failed or rejected the message.
        """
        if not self.enabled:
            raise NotifierUnavailableError("Notifier is not configured")
        if self._circuit_breaker.is_open():
            raise NotifierUnavailableError("Notifier circuit breaker is open")

        client = await self._ensure_client()
        payload = {
            "studentPhone": phone,
            "complaintDetails": summary,
            "status": status,
            "notes": notes,
        }
        try:
            response = await client.post(
                self.config.url or "",
                json=payload,
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            self._circuit_breaker.record_failure()
            raise NotifierError(f"Notifier request failed: {exc}") from exc

        if response.status_code >= HTTP_INTERNAL_SERVER_ERROR:
            self._circuit_breaker.record_failure()
            raise NotifierError(f"Notifier responded with {response.status_code}")
        if response.is_error:
            # A 4xx is our fault, not the bot's; do not trip the breaker.
            raise NotifierError(f"Notifier rejected the message ({response.status_code})")

        self._circuit_breaker.record_success()
        logger.debug("Notified %s about status %s", _mask(phone), status)
        return True

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _mask(phone: str) -> str:
    return f"***{phone[-4:]}" if len(phone) > 4 else "***"


class _NotifierSingleton:
    _instance: NotifierClient | None = None

    @classmethod
    def get_instance(cls) -> NotifierClient:
        if cls._instance is None:
            cls._instance = NotifierClient()
        return cls._instance


def get_notifier() -> NotifierClient:
    """Return a singleton notifier client instance."""
    return _NotifierSingleton.get_instance()
