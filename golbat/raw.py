"""Normalising raw proto submissions sent by scanning devices."""

from __future__ import annotations

import base64
import binascii
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Iterator

log = logging.getLogger(__name__)

MAX_RAW_BODY = 5 * 1048576
DEFAULT_LEVEL = 30
AR_SCAN_QUEST_TYPE = 73
POGODROID_ACCOUNT = "Pogodroid"


class RawDecodeError(ValueError):
    """A raw submission body could not be understood."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _decode_b64(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        return b""


@dataclass
class ProtoData:
    """One proto ready for decoding, with the context it was captured in."""

    method: int
    data: bytes = b""
    request: bytes = b""
    have_ar: bool | None = None
    account: str = ""
    level: int = 0
    uuid: str = ""
    scan_context: str = ""
    lat: float = 0.0
    lon: float = 0.0
    timestamp_ms: int = 0


@dataclass(frozen=True)
class InboundRawData:
    """One entry of a submission, still base64 encoded."""

    base64_data: str
    method: int
    request: str = ""
    have_ar: bool | None = None


@dataclass
class RawRequest:
    """A normalised raw submission: device context plus its entries."""

    uuid: str = ""
    account: str = ""
    level: int = DEFAULT_LEVEL
    scan_context: str = ""
    lat_target: float = 0.0
    lon_target: float = 0.0
    have_ar: bool | None = None
    timestamp_ms: int = 0
    entries: list[InboundRawData] = field(default_factory=list)

    def proto_data(self) -> Iterator[ProtoData]:
        """Yield each entry decoded and combined with the request context.

        Payloads that are not valid base64 decode to empty bytes. An entry's
        own AR flag wins over the request-wide one.
        """
        for entry in self.entries:
            yield ProtoData(
                method=entry.method,
                data=_decode_b64(entry.base64_data),
                request=_decode_b64(entry.request) if entry.request else b"",
                have_ar=entry.have_ar if entry.have_ar is not None else self.have_ar,
                account=self.account,
                level=self.level,
                uuid=self.uuid,
                scan_context=self.scan_context,
                lat=self.lat_target,
                lon=self.lon_target,
                timestamp_ms=self.timestamp_ms,
            )


def quests_held_has_ar_task(quests_held: Any) -> bool | None:
    """Whether a list of held quest types includes the AR scan quest.

    Returns None when the value is not a list of numbers.
    """
    if not isinstance(quests_held, list):
        log.error("Raw: unexpected quests_held type in data: %s", type(quests_held).__name__)
        return None
    for quest_id in quests_held:
        if not _is_number(quest_id):
            log.error(
                "Raw: unexpected quest_id type in quests_held: %s", type(quest_id).__name__
            )
            return None
        if int(quest_id) == AR_SCAN_QUEST_TYPE:
            return True
    return False


def check_raw_authorization(header: str, raw_bearer: str) -> bool:
    """Whether an Authorization header satisfies the configured bearer secret."""
    if not raw_bearer:
        return True
    return header == "Bearer " + raw_bearer


def _first_present(entry: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = entry.get(key)
        if value is not None:
            return value
    return None


def _parse_pogodroid(data: Any, origin: str, request: RawRequest) -> None:
    if data is None:
        data = []
    if not isinstance(data, list) or not all(isinstance(e, dict) for e in data):
        raise RawDecodeError("expected a list of objects")
    for entry in data:
        if request.lat_target == 0 and request.lon_target == 0:
            lat, lng = entry.get("lat"), entry.get("lng")
            lat_f = float(lat) if _is_number(lat) else 0.0
            lng_f = float(lng) if _is_number(lng) else 0.0
            if lat_f != 0 and lng_f != 0:
                request.lat_target, request.lon_target = lat_f, lng_f
        payload, method = entry.get("payload"), entry.get("type")
        if not isinstance(payload, str) or not _is_number(method):
            raise RawDecodeError("entry needs a string payload and a numeric type")
        quests_held = entry.get("quests_held")
        request.entries.append(
            InboundRawData(
                base64_data=payload,
                method=int(method),
                have_ar=quests_held_has_ar_task(quests_held)
                if quests_held is not None
                else None,
            )
        )
    request.uuid = origin
    request.account = POGODROID_ACCOUNT


def _parse_standard(data: Any, request: RawRequest) -> None:
    if not isinstance(data, dict):
        raise RawDecodeError("expected a JSON object")

    def text(key: str) -> str:
        value = data.get(key)
        return value if isinstance(value, str) else ""

    def number(key: str) -> float:
        value = data.get(key)
        return float(value) if _is_number(value) else 0.0

    have_ar = data.get("have_ar")
    if isinstance(have_ar, bool):
        request.have_ar = have_ar
    request.uuid = text("uuid")
    request.account = text("username")
    level = data.get("trainerlvl")
    if _is_number(level):
        request.level = int(level)
    request.scan_context = text("scan_context")
    request.lat_target = number("lat_target")
    request.lon_target = number("lon_target")

    contents = data.get("contents")
    if not isinstance(contents, list):
        raise RawDecodeError("missing contents")
    for entry in contents:
        if not isinstance(entry, dict):
            raise RawDecodeError("contents entries must be objects")
        b64data = _first_present(entry, "data", "payload")
        method = _first_present(entry, "method", "type")
        if method is None or b64data is None:
            log.error("Error decoding raw")
            continue
        req = entry.get("request")
        entry_ar = entry.get("have_ar")
        request.entries.append(
            InboundRawData(
                base64_data=b64data if isinstance(b64data, str) else "",
                method=int(method) if _is_number(method) else 0,
                request=req if isinstance(req, str) else "",
                have_ar=entry_ar if isinstance(entry_ar, bool) else None,
            )
        )


def parse_raw_body(
    body: bytes | str, origin: str = "", now_ms: int | None = None
) -> RawRequest:
    """Normalise a raw submission body.

    A non-empty ``origin`` header marks the list-shaped format; otherwise the
    body is an object with a ``contents`` list. Bodies are cut at
    ``MAX_RAW_BODY`` bytes. Raises RawDecodeError when the body is unusable.
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    body = body[:MAX_RAW_BODY]
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RawDecodeError(f"invalid JSON: {exc}") from exc

    request = RawRequest(timestamp_ms=now_ms)
    if origin:
        _parse_pogodroid(data, origin, request)
    else:
        _parse_standard(data, request)
    return request