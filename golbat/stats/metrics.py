"""Counters and gauges kept in memory and rendered in Prometheus text format."""

from __future__ import annotations

import math
import threading
import time
from typing import Callable, Iterable

from golbat.geo.areas import AreaName
from golbat.stats.collector import StatsCollector, _query_status
from golbat.util import INCIDENT_TYPE_TO_NAME, LURE_ID_TO_NAME, TEAM_ID_TO_NAME

NAMESPACE = "golbat"

_KINDS = ("counter", "gauge")


def _format_value(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


class MetricFamily:
    """A named counter or gauge with one value per combination of label values."""

    def __init__(
        self,
        name: str,
        help_text: str,
        kind: str = "counter",
        labels: Iterable[str] = (),
    ) -> None:
        if kind not in _KINDS:
            raise ValueError(f"unknown metric kind '{kind}'")
        self.name = name
        self.help_text = help_text
        self.kind = kind
        self.labels = tuple(labels)
        self._values: dict[tuple[str, ...], float] = {}
        self._lock = threading.Lock()
        if not self.labels:
            self._values[()] = 0.0

    def _key(self, args: tuple) -> tuple[str, ...]:
        if len(args) != len(self.labels):
            raise ValueError(
                f"{self.name}: expected {len(self.labels)} label values, got {len(args)}"
            )
        return tuple(str(arg) for arg in args)

    def inc(self, *args: str) -> None:
        self.add(1.0, *args)

    def add(self, value: float, *args: str) -> None:
        """Add ``value``; counters refuse negative amounts."""
        if self.kind == "counter" and value < 0:
            raise ValueError(f"{self.name}: counter cannot decrease")
        key = self._key(args)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + float(value)

    def set(self, value: float, *args: str) -> None:
        """Set a gauge to ``value``; counters cannot be set."""
        if self.kind != "gauge":
            raise ValueError(f"{self.name}: only gauges can be set")
        key = self._key(args)
        with self._lock:
            self._values[key] = float(value)

    def value(self, *args: str) -> float:
        key = self._key(args)
        with self._lock:
            return self._values.get(key, 0.0)

    def render(self) -> str:
        """The family in Prometheus text exposition format."""
        with self._lock:
            samples = sorted(self._values.items())
        if not samples:
            return ""
        lines = [f"# HELP {self.name} {self.help_text}", f"# TYPE {self.name} {self.kind}"]
        for key, value in samples:
            if key:
                labels = ",".join(
                    f'{label}="{_escape(val)}"' for label, val in zip(self.labels, key)
                )
                lines.append(f"{self.name}{{{labels}}} {_format_value(value)}")
            else:
                lines.append(f"{self.name} {_format_value(value)}")
        return "\n".join(lines) + "\n"


_STATUS = ("status", "message")

_FAMILIES: tuple[tuple[str, str, str, tuple[str, ...]], ...] = (
    ("raw_requests", "Total number of requests received by raw endpoint", "counter", _STATUS),
    ("decode_methods", "Total number of decoded methods", "counter",
     ("status", "message", "method")),
    ("decode_fort_details", "Total number of decoded: FortDetails", "counter", _STATUS),
    ("decode_get_map_forts", "Total number of decoded: GMF", "counter", _STATUS),
    ("decode_get_gym_info", "Total number of decoded: GetGymInfo", "counter", _STATUS),
    ("decode_encounter", "Total number of decoded: Encounter", "counter", _STATUS),
    ("decode_disk_encounter", "Total number of decoded DiskEncounter", "counter", _STATUS),
    ("decode_quest", "Total number of decoded: Quests", "counter", _STATUS),
    ("decode_social_action_with_request",
     "Total number of decoded: SocialActionWithRequest", "counter", _STATUS),
    ("decode_get_friend_details", "Total number of decoded: GetFriendDetails", "counter",
     _STATUS),
    ("decode_search_player", "Total number of decoded: SearchPlayer", "counter", _STATUS),
    ("decode_gmo", "Total number of decoded: GMO", "counter", _STATUS),
    ("decode_gmo_type", "Total number of decoded: GMO sub-cat", "counter", ("type",)),
    ("decode_start_incident", "Total number of decoded: StartIncident", "counter", _STATUS),
    ("decode_open_invasion", "Total number of decoded: OpenInvasion", "counter", _STATUS),
    ("pokemon_stats_reset_count", "Total number of stats reset", "counter", ("area",)),
    ("pokemon_count_new", "Total new Pokemon count", "counter", ("area",)),
    ("pokemon_count_iv", "Total Pokemon with IV", "counter", ("area",)),
    ("pokemon_count_shiny", "Total Shiny count by pokemon dex id", "counter",
     ("pokemon_id", "form_id")),
    ("pokemon_count_non_shiny", "Total Non-Shiny count by pokemon dex id", "counter",
     ("pokemon_id", "form_id")),
    ("pokemon_count_shundo", "Total Shundo count", "counter", ()),
    ("pokemon_count_snundo", "Total Snundo count", "counter", ()),
    ("pokemon_count_hundo", "Total Hundo count", "counter", ("area",)),
    ("pokemon_count_nundo", "Total Nundo count", "counter", ("area",)),
    ("verified_pokemon_ttl",
     "Verified Pokemon count by area, type and with a flag stating if a Pokemon had "
     "TTL over 30 minutes", "counter", ("area", "type", "above30")),
    ("verified_pokemon_ttl_counter",
     "Verified Pokemon counter by area, type and with a flag stating if a Pokemon had "
     "TTL over 30 minutes", "counter", ("area", "type", "above30")),
    ("raid_count", "Total number of created raids", "counter", ("area", "level")),
    ("fort_count", "Total number of forts additions, removals and updates", "counter",
     ("area", "type", "change")),
    ("incident_count", "Total number of incidents updates", "counter", ("area",)),
    ("duplicate_encounters", "Total number of duplicate encounters", "counter",
     ("sameacct",)),
    ("database_queries", "Total number of database queries by query and status", "counter",
     ("query", "status")),
    ("gyms", "Current gyms grouped by team, in_battle", "gauge", ("team", "in_battle")),
    ("incidents", "Current incidents grouped by kind, confirmed", "gauge",
     ("kind", "confirmed")),
    ("pokemons", "Current Pokemons grouped by has_iv, seen_type", "gauge",
     ("has_iv", "seen_type")),
    ("lures", "Current lures grouped by type", "gauge", ("type",)),
    ("quests", "Current quests", "gauge", ("ar",)),
    ("raids", "Current raids grouped by level", "gauge", ("level",)),
)


def _flag(value: bool) -> str:
    return "1" if value else "0"


def _unique_area_names(areas: Iterable[AreaName]) -> list[str]:
    return list(dict.fromkeys(str(area) for area in areas))


class MetricsCollector(StatsCollector):
    """A statistics collector that keeps Prometheus-style metrics.

    ``clock`` returns Unix time in seconds and is used for remaining TTLs.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._families = {
            short: MetricFamily(f"{NAMESPACE}_{short}", help_text, kind, labels)
            for short, help_text, kind, labels in _FAMILIES
        }

    def family(self, name: str) -> MetricFamily:
        return self._families[name]

    def value(self, name: str, *args: str) -> float:
        """The current value of metric ``name`` (without namespace) for the labels."""
        return self._families[name].value(*args)

    def render(self) -> str:
        return "".join(family.render() for family in self._families.values())

    def inc_raw_requests(self, status, message):
        self._families["raw_requests"].inc(status, message)

    def inc_decode_methods(self, status, message, method):
        self._families["decode_methods"].inc(status, message, method)

    def inc_decode_fort_details(self, status, message):
        self._families["decode_fort_details"].inc(status, message)

    def inc_decode_get_map_forts(self, status, message):
        self._families["decode_get_map_forts"].inc(status, message)

    def inc_decode_get_gym_info(self, status, message):
        self._families["decode_get_gym_info"].inc(status, message)

    def inc_decode_encounter(self, status, message):
        self._families["decode_encounter"].inc(status, message)

    def inc_decode_disk_encounter(self, status, message):
        self._families["decode_disk_encounter"].inc(status, message)

    def inc_decode_quest(self, status, message):
        self._families["decode_quest"].inc(status, message)

    def inc_decode_social_action_with_request(self, status, message):
        self._families["decode_social_action_with_request"].inc(status, message)

    def inc_decode_get_friend_details(self, status, message):
        self._families["decode_get_friend_details"].inc(status, message)

    def inc_decode_search_player(self, status, message):
        self._families["decode_search_player"].inc(status, message)

    def inc_decode_gmo(self, status, message):
        self._families["decode_gmo"].inc(status, message)

    def add_decode_gmo_type(self, typ, value):
        self._families["decode_gmo_type"].add(value, typ)

    def inc_decode_start_incident(self, status, message):
        self._families["decode_start_incident"].inc(status, message)

    def inc_decode_open_invasion(self, status, message):
        self._families["decode_open_invasion"].inc(status, message)

    def add_pokemon_stats_reset_count(self, area, value):
        self._families["pokemon_stats_reset_count"].add(value, area)

    def inc_pokemon_count_new(self, area):
        self._families["pokemon_count_new"].inc(area)

    def inc_pokemon_count_iv(self, area):
        self._families["pokemon_count_iv"].inc(area)

    def inc_pokemon_count_shiny(self, pokemon_id, form_id):
        self._families["pokemon_count_shiny"].inc(pokemon_id, form_id)

    def inc_pokemon_count_non_shiny(self, pokemon_id, form_id):
        self._families["pokemon_count_non_shiny"].inc(pokemon_id, form_id)

    def inc_pokemon_count_shundo(self):
        self._families["pokemon_count_shundo"].inc()

    def inc_pokemon_count_snundo(self):
        self._families["pokemon_count_snundo"].inc()

    def inc_pokemon_count_hundo(self, area):
        self._families["pokemon_count_hundo"].inc(area)

    def inc_pokemon_count_nundo(self, area):
        self._families["pokemon_count_nundo"].inc(area)

    def update_verified_ttl(self, area, seen_type, expire_timestamp):
        """Record the remaining minutes of a verified spawn; past spawns are ignored."""
        seconds_left = (expire_timestamp or 0) - int(self._clock())
        # whole minutes, truncated toward zero
        minutes_left = int(math.copysign(abs(seconds_left) // 60, seconds_left))
        if minutes_left < 0:
            return
        above30 = "1" if minutes_left > 30 else "0"
        labels = (str(area), seen_type or "", above30)
        self._families["verified_pokemon_ttl"].add(float(minutes_left), *labels)
        self._families["verified_pokemon_ttl_counter"].inc(*labels)

    def update_raid_count(self, areas, raid_level):
        for name in _unique_area_names(areas):
            self._families["raid_count"].inc(name, str(int(raid_level)))

    def update_fort_count(self, areas, fort_type, change_type):
        for name in _unique_area_names(areas):
            self._families["fort_count"].inc(name, fort_type, change_type)

    def update_incident_count(self, areas):
        for name in _unique_area_names(areas):
            self._families["incident_count"].inc(name)

    def inc_duplicate_encounters(self, same_account):
        self._families["duplicate_encounters"].inc(_flag(same_account))

    def inc_db_query(self, query, error):
        self._families["database_queries"].inc(query, _query_status(error))

    def set_gyms(self, team_id, in_battle, count):
        team = TEAM_ID_TO_NAME.get(team_id, "Unown")
        self._families["gyms"].set(count, team, _flag(in_battle))

    def set_raids(self, level, count):
        self._families["raids"].set(count, str(int(level)))

    def set_incidents(self, kind, confirmed, count):
        kind_name = INCIDENT_TYPE_TO_NAME.get(kind, "Unown")
        self._families["incidents"].set(count, kind_name, _flag(confirmed))

    def set_lures(self, lure_id, count):
        self._families["lures"].set(count, LURE_ID_TO_NAME.get(lure_id, "Unown"))

    def set_quests(self, ar, no_ar):
        self._families["quests"].set(ar, "1")
        self._families["quests"].set(no_ar, "0")

    def inc_pokemons(self, has_iv, seen_type):
        self._families["pokemons"].add(1.0, _flag(has_iv), seen_type or "")

    def dec_pokemons(self, has_iv, seen_type):
        self._families["pokemons"].add(-1.0, _flag(has_iv), seen_type or "")


_shared_lock = threading.Lock()
_shared_metrics: MetricsCollector | None = None


def get_stats_collector(enabled: bool) -> StatsCollector:
    """The shared metrics collector when enabled, otherwise one that discards events."""
    global _shared_metrics
    if not enabled:
        return StatsCollector()
    with _shared_lock:
        if _shared_metrics is None:
            _shared_metrics = MetricsCollector()
        return _shared_metrics