import json
from types import SimpleNamespace

import pytest

from golbat.util import (
    RoundedFloat4,
    bool_to_int,
    extract_location_card,
    truncate_utf8,
)


def test_bool_to_int():
    assert bool_to_int(True) == 1
    assert bool_to_int(False) == 0


def test_extract_location_card_missing():
    assert extract_location_card(SimpleNamespace(location_card=None)) == 0
    assert extract_location_card(SimpleNamespace()) == 0


def test_extract_location_card_present():
    display = SimpleNamespace(location_card=SimpleNamespace(location_card=7))
    assert extract_location_card(display) == 7


def test_rounded_float_four_decimals():
    assert RoundedFloat4(1.23456).to_json() == "1.2346"
    assert RoundedFloat4(2).to_json() == "2.0000"


def test_rounded_float_round_trip():
    for value in [0.5, -12.3456, 100.0]:
        assert json.loads(RoundedFloat4(value).to_json()) == pytest.approx(value, abs=5e-5)


def test_truncate_longer_text():
    text = "héllo wörld"
    result, changed = truncate_utf8(text, 3)
    assert changed is True
    assert result == "hél"
    assert len(result) == 3


@pytest.mark.parametrize("text", ["", "abc", "日本語"])
def test_truncate_short_text_unchanged(text):
    assert truncate_utf8(text, 3) == (text, False)