"""Webhook targets, message types and payload delivery."""

from __future__ import annotations

import ipaddress
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Mapping, Sequence
from urllib.parse import urlparse

from golbat.geo.areas import AreaName, area_match_with_wildcards

log = logging.getLogger(__name__)


class WebhookType(IntEnum):
    GYM_DETAILS = 0
    RAID = 1
    QUEST = 2
    POKESTOP = 3
    INVASION = 4
    WEATHER = 5
    FORT_UPDATE = 6
    POKEMON_IV = 7
    POKEMON_NO_IV = 8

    def payload_type(self) -> str:
        """The ``type`` string sent with messages of this kind."""
        return _PAYLOAD_TYPES[self]


_PAYLOAD_TYPES = {
    WebhookType.GYM_DETAILS: "gym_details",
    WebhookType.RAID: "raid",
    WebhookType.QUEST: "quest",
    WebhookType.POKESTOP: "pokestop",
    WebhookType.INVASION: "invasion",
    WebhookType.WEATHER: "weather",
    WebhookType.FORT_UPDATE: "fort_update",
    WebhookType.POKEMON_IV: "pokemon",
    WebhookType.POKEMON_NO_IV: "pokemon",
}

_CONFIG_TYPES = {
    "gym": (WebhookType.GYM_DETAILS,),
    "raid": (WebhookType.RAID,),
    "quest": (WebhookType.QUEST,),
    "pokestop": (WebhookType.POKESTOP,),
    "invasion": (WebhookType.INVASION,),
    "weather": (WebhookType.WEATHER,),
    "fort_update": (WebhookType.FORT_UPDATE,),
    "pokemon_iv": (WebhookType.POKEMON_IV,),
    "pokemon_no_iv": (WebhookType.POKEMON_NO_IV,),
    "pokemon": (WebhookType.POKEMON_IV, WebhookType.POKEMON_NO_IV),
}

Collection = Mapping[WebhookType, Sequence["WebhookMessage"]]


@dataclass
class WebhookConfig:
    """A webhook as configured: its URL, wanted types, areas and headers."""

    url: str
    types: list[str] = field(default_factory=list)
    area_names: list[AreaName] = field(default_factory=list)
    header_map: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class WebhookMessage:
    type: str
    message: Any
    areas: tuple[AreaName, ...] = ()

    def to_json(self) -> dict[str, Any]:
        return {"type": self.type, "message": self.message}


class InvalidWebhookError(ValueError):
    """A webhook configuration cannot be used."""


def _is_local(url: str) -> bool:
    host = urlparse(url).hostname or ""
    if host == "localhost":
        return True
    try:
        return ipaddress.ip_address(host).is_loopback
    except ValueError:
        return False


@dataclass
class Webhook:
    """A destination receiving batches of messages as JSON."""

    url: str
    types_wanted: tuple[WebhookType, ...]
    area_names: tuple[AreaName, ...] = ()
    header_map: dict[str, str] = field(default_factory=dict)
    timeout: float = 30.0

    def get_payload(self, collection: Collection) -> bytes | None:
        """Build the JSON body for the wanted messages, or None if there are none."""
        selected = []
        for wh_type in self.types_wanted:
            for message in collection.get(wh_type, ()):
                if not self.area_names or area_match_with_wildcards(
                    message.areas, self.area_names
                ):
                    selected.append(message.to_json())

        log.info("There are %d webhooks to send to %s", len(selected), self.url)
        if not selected:
            return None
        return json.dumps(selected, separators=(",", ":")).encode("utf-8")

    def send_collection(self, collection: Collection) -> int | None:
        """POST the wanted messages; return the HTTP status, or None if nothing was sent.

        Raises ConnectionError when the request cannot be made.
        """
        payload = self.get_payload(collection)
        if payload is None:
            return None

        request = urllib.request.Request(self.url, data=payload, method="POST")
        request.add_header("X-Golbat", "hey!")
        request.add_header("Content-Type", "application/json")
        for key, value in self.header_map.items():
            request.add_header(key, value)

        if _is_local(self.url):
            opener = urllib.request.build_opener(urllib.request.ProxyHandler({}))
        else:
            opener = urllib.request.build_opener()

        try:
            with opener.open(request, timeout=self.timeout) as response:
                response.read()
                status = response.status
        except urllib.error.HTTPError as exc:
            exc.read()
            exc.close()
            status = exc.code
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise ConnectionError(f"failed to send webhook to {self.url}: {exc}") from exc

        log.debug("Webhook: Response %s", status)
        return status


def webhook_from_config(config: WebhookConfig) -> Webhook:
    """Validate a configured webhook and build it.

    With no types configured, every type is wanted. Raises InvalidWebhookError.
    """
    try:
        parsed = urlparse(config.url)
    except ValueError as exc:
        raise InvalidWebhookError(f"invalid webhook url '{config.url}': {exc}") from exc
    if not parsed.scheme:
        raise InvalidWebhookError(f"invalid webhook url '{config.url}': no scheme")

    wanted: set[WebhookType] = set()
    for name in config.types:
        try:
            wanted.update(_CONFIG_TYPES[name])
        except KeyError:
            raise InvalidWebhookError(f"unknown webhook type '{name}'") from None

    types_wanted = tuple(t for t in WebhookType if not wanted or t in wanted)
    return Webhook(
        url=config.url,
        types_wanted=types_wanted,
        area_names=tuple(config.area_names),
        header_map=dict(config.header_map),
    )