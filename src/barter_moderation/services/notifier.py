"""Moderator notification side-channel.

Posts escalation summaries to the realtime trigger endpoint that fans out to
the moderators' private channel. Delivery is best effort: failures are logged
and reported to the caller as ``False``, never raised.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from barter_moderation.core.settings import settings

logger = logging.getLogger(__name__)

HTTP_MULTIPLE_CHOICES = 300


@dataclass(frozen=True)
class NotifierConfig:
    """Immutable configuration for moderator notifications."""

    url: str | None
    token: str | None
    channel: str
    event: str
    timeout_seconds: float

    @property
    def enabled(self) -> bool:
        return bool(self.url)


def load_notifier_config() -> NotifierConfig:
    """Build configuration object from global settings."""
    return NotifierConfig(
        url=settings.moderator_notify_url,
        token=settings.moderator_notify_token,
        channel=settings.moderator_notify_channel,
        event=settings.moderator_notify_event,
        timeout_seconds=float(settings.moderator_notify_timeout_seconds),
    )


class ModeratorNotifier:
    """HTTP client wrapper for pushing events to moderators."""

    def __init__(
        self,
        config: NotifierConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or load_notifier_config()
        self._client = client
        self._owns_client = client is None
        self._client_lock = asyncio.Lock()

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

    async def notify(self, data: Mapping[str, Any]) -> bool:
        """Publish ``data`` on the moderators' channel.

        Returns:
            True if the trigger endpoint accepted the event.
        """
        if not self.enabled:
            logger.debug("Moderator notifications disabled; dropping %s", data.get("type"))
            return False

        client = await self._ensure_client()
        body = {
            "channel": self.config.channel,
            "event": self.config.event,
            "data": dict(data),
        }
        try:
            response = await client.post(
                self.config.url or "",
                json=body,
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            logger.warning("Failed to notify moderators: %s", exc)
            return False

        if response.status_code >= HTTP_MULTIPLE_CHOICES:
            logger.warning(
                "Moderator notification rejected with %s: %s",
                response.status_code,
                response.text[:200],
            )
            return False
        return True

    async def close(self) -> None:
        """Close the underlying HTTP client if this notifier created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None


_notifier: ModeratorNotifier | None = None


def get_notifier() -> ModeratorNotifier:
    """Return the process-wide notifier."""
    global _notifier
    if _notifier is None:
        _notifier = ModeratorNotifier()
    return _notifier
