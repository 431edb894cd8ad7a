"""The statistics interface, whose base implementation records nothing."""

from __future__ import annotations

from typing import Iterable

from golbat.geo.areas import AreaName


class NoRowsError(LookupError):
    """A query that should return a row returned none.

    Statistics treat it as a successful query.
    """

    def __init__(self, message: str = "sql: no rows in result set") -> None:
        super().__init__(message)


def _query_status(error: BaseException | None) -> str:
    """The status label for a finished database query."""
    if error is not None and not isinstance(error, NoRowsError):
        return "error"
    return "success"


class StatsCollector:
    """Receives statistics events. This base class discards all of them."""

    def inc_raw_requests(self, status: str, message: str) -> None:
        pass

    def inc_decode_methods(self, status: str, message: str, method: str) -> None:
        pass

    def inc_decode_fort_details(self, status: str, message: str) -> None:
        pass

    def inc_decode_get_map_forts(self, status: str, message: str) -> None:
        pass

    def inc_decode_get_gym_info(self, status: str, message: str) -> None:
        pass

    def inc_decode_encounter(self, status: str, message: str) -> None:
        pass

    def inc_decode_disk_encounter(self, status: str, message: str) -> None:
        pass

    def inc_decode_quest(self, status: str, message: str) -> None:
        pass

    def inc_decode_social_action_with_request(self, status: str, message: str) -> None:
        pass

    def inc_decode_get_friend_details(self, status: str, message: str) -> None:
        pass

    def inc_decode_search_player(self, status: str, message: str) -> None:
        pass

    def inc_decode_gmo(self, status: str, message: str) -> None:
        pass

    def add_decode_gmo_type(self, typ: str, value: float) -> None:
        pass

    def inc_decode_start_incident(self, status: str, message: str) -> None:
        pass

    def inc_decode_open_invasion(self, status: str, message: str) -> None:
        pass

    def add_pokemon_stats_reset_count(self, area: str, value: float) -> None:
        pass

    def inc_pokemon_count_new(self, area: str) -> None:
        pass

    def inc_pokemon_count_iv(self, area: str) -> None:
        pass

    def inc_pokemon_count_shiny(self, pokemon_id: str, form_id: str) -> None:
        pass

    def inc_pokemon_count_non_shiny(self, pokemon_id: str, form_id: str) -> None:
        pass

    def inc_pokemon_count_shundo(self) -> None:
        pass

    def inc_pokemon_count_snundo(self) -> None:
        pass

    def inc_pokemon_count_hundo(self, area: str) -> None:
        pass

    def inc_pokemon_count_nundo(self, area: str) -> None:
        pass

    def update_verified_ttl(
        self, area: AreaName, seen_type: str | None, expire_timestamp: int | None
    ) -> None:
        pass

    def update_raid_count(self, areas: Iterable[AreaName], raid_level: int) -> None:
        pass

    def update_fort_count(
        self, areas: Iterable[AreaName], fort_type: str, change_type: str
    ) -> None:
        pass

    def update_incident_count(self, areas: Iterable[AreaName]) -> None:
        pass

    def inc_duplicate_encounters(self, same_account: bool) -> None:
        pass

    def inc_db_query(self, query: str, error: BaseException | None) -> None:
        pass

    def set_gyms(self, team_id: int, in_battle: bool, count: float) -> None:
        pass

    def set_raids(self, level: int, count: float) -> None:
        pass

    def set_incidents(self, kind: int, confirmed: bool, count: float) -> None:
        pass

    def set_lures(self, lure_id: int, count: float) -> None:
        pass

    def set_quests(self, ar: float, no_ar: float) -> None:
        pass

    def inc_pokemons(self, has_iv: bool, seen_type: str | None) -> None:
        pass

    def dec_pokemons(self, has_iv: bool, seen_type: str | None) -> None:
        pass