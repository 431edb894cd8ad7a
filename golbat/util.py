"""Small helpers: name tables, conversions, rounding and truncation."""

from __future__ import annotations

import math
from typing import Any

TEAM_ID_TO_NAME: dict[int, str] = dict(
    enumerate(("harmony", "mystic", "valor", "instinct"))
)

LURE_ID_TO_NAME: dict[int, str] = dict(
    zip(
        range(501, 507),
        ("normal", "glacial", "mossy", "magnetic", "rainy", "sparkly"),
    )
)

INCIDENT_TYPE_TO_NAME: dict[int, str] = dict(
    zip(
        (1, 2, 3, 7, 8, 9),
        ("grunt", "leader", "giovanni", "coin", "kecleon", "showcase"),
    )
)


def bool_to_int(value: bool) -> int:
    """Map a truth value onto 1 or 0."""
    return int(bool(value))


def extract_location_card(display: Any) -> int:
    """Return the location card of a Pokemon display, or 0 when it has none."""
    card = getattr(display, "location_card", None)
    return 0 if card is None else int(card.location_card)


class RoundedFloat4(float):
    """A float that serialises to JSON with exactly four decimals."""

    def to_json(self) -> str:
        number = float(self)
        if math.isnan(number):
            return "NaN"
        if math.isinf(number):
            return "+Inf" if number > 0 else "-Inf"
        return format(number, ".4f")


def truncate_utf8(text: str, max_runes: int) -> tuple[str, bool]:
    """Cut ``text`` to at most ``max_runes`` characters.

    Returns the text and whether it was shortened.
    """
    shortened = len(text) > max_runes
    return (text[:max_runes] if shortened else text), shortened