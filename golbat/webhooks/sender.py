"""Collecting webhook messages and sending them in batches."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable

from golbat.geo.areas import AreaName
from golbat.webhooks.webhook import (
    Webhook,
    WebhookMessage,
    WebhookType,
    webhook_from_config,
)

log = logging.getLogger(__name__)

DEFAULT_INTERVAL = 1.0


class WebhooksSender:
    """Buffers messages by type and sends them to every webhook each interval."""

    def __init__(self, webhooks: Iterable[Webhook], interval: float = DEFAULT_INTERVAL) -> None:
        self.webhooks = tuple(webhooks)
        self.interval = interval if interval > 0 else DEFAULT_INTERVAL
        self._lock = threading.Lock()
        self._collection: dict[WebhookType, list[WebhookMessage]] = {}

    @classmethod
    def from_config(cls, config: Any) -> WebhooksSender:
        """Build a sender from an object with ``webhooks`` and ``webhook_interval``.

        Raises InvalidWebhookError for a bad webhook.
        """
        webhooks = [webhook_from_config(entry) for entry in config.webhooks]
        return cls(webhooks, getattr(config, "webhook_interval", 0) or 0)

    def _take_collection(self) -> dict[WebhookType, list[WebhookMessage]]:
        with self._lock:
            current, self._collection = self._collection, {}
        return current

    def add_message(
        self,
        webhook_type: WebhookType,
        message: Any,
        areas: Iterable[AreaName] = (),
    ) -> None:
        entry = WebhookMessage(
            type=webhook_type.payload_type(), message=message, areas=tuple(areas)
        )
        with self._lock:
            self._collection.setdefault(webhook_type, []).append(entry)

    def flush(self) -> None:
        """Send everything collected so far to every webhook and wait for it."""
        collection = self._take_collection()
        if not self.webhooks:
            return
        with ThreadPoolExecutor(max_workers=len(self.webhooks)) as pool:
            futures = [(pool.submit(wh.send_collection, collection), wh) for wh in self.webhooks]
            for future, webhook in futures:
                error = future.exception()
                if error is not None:
                    log.warning("Webhook to %s failed: %s", webhook.url, error)

    def run(self, stop_event: threading.Event) -> None:
        """Flush in the background every interval until ``stop_event`` is set."""
        while not stop_event.wait(self.interval):
            threading.Thread(target=self.flush, daemon=True).start()