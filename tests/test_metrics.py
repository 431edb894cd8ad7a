import pytest

from golbat.geo.areas import AreaName
from golbat.stats.collector import NoRowsError
from golbat.stats.metrics import MetricFamily, MetricsCollector, get_stats_collector

NOW = 1_700_000_000


@pytest.fixture
def collector():
    return MetricsCollector(clock=lambda: NOW)


def test_family_add_and_inc_agree():
    a = MetricFamily("a", "help", "counter", ("x",))
    b = MetricFamily("b", "help", "counter", ("x",))
    a.inc("v")
    b.add(1.0, "v")
    assert a.value("v") == b.value("v")
    assert a.value("other") == 0.0


def test_counter_rejects_decrease_and_set():
    family = MetricFamily("c", "help", "counter", ("x",))
    with pytest.raises(ValueError):
        family.add(-1.0, "v")
    with pytest.raises(ValueError):
        family.set(3.0, "v")


def test_gauge_set_and_add():
    family = MetricFamily("g", "help", "gauge", ("x",))
    family.set(5.0, "v")
    assert family.value("v") == 5.0
    family.add(-5.0, "v")
    assert family.value("v") == 0.0


def test_wrong_label_count_rejected():
    family = MetricFamily("g", "help", "gauge", ("x", "y"))
    with pytest.raises(ValueError):
        family.set(1.0, "only-one")


def test_unknown_kind_rejected():
    with pytest.raises(ValueError):
        MetricFamily("h", "help", "histogram")


def test_render_format(collector):
    collector.inc_raw_requests("ok", "")
    text = collector.render()
    assert "# HELP golbat_raw_requests Total number of requests received by raw endpoint" in text
    assert "# TYPE golbat_raw_requests counter" in text
    assert 'golbat_raw_requests{status="ok",message=""} 1' in text
    assert "# TYPE golbat_gyms gauge" not in text
    assert "golbat_pokemon_count_shundo 0" in text


def test_render_escapes_label_values():
    family = MetricFamily("esc", "help", "counter", ("x",))
    family.inc('a"b')
    assert 'esc{x="a\\"b"}' in family.render()


def test_db_query_status(collector):
    collector.inc_db_query("select gym", None)
    collector.inc_db_query("select gym", NoRowsError())
    collector.inc_db_query("select gym", RuntimeError("boom"))
    assert collector.value("database_queries", "select gym", "success") == 2 * collector.value(
        "database_queries", "select gym", "error"
    )


def test_set_gyms_uses_team_names(collector):
    collector.set_gyms(0, True, 7.0)
    collector.set_gyms(42, False, 2.0)
    assert collector.value("gyms", "harmony", "1") == 7.0
    assert collector.value("gyms", "Unown", "0") == 2.0


def test_set_incidents_and_lures(collector):
    collector.set_incidents(3, False, 4.0)
    collector.set_lures(502, 6.0)
    collector.set_lures(999, 1.0)
    assert collector.value("incidents", "giovanni", "0") == 4.0
    assert collector.value("lures", "glacial") == 6.0
    assert collector.value("lures", "Unown") == 1.0


def test_set_quests(collector):
    collector.set_quests(10.0, 20.0)
    assert collector.value("quests", "1") == 10.0
    assert collector.value("quests", "0") == 20.0


def test_raid_count_deduplicates_areas(collector):
    park = AreaName(parent="city", name="park")
    collector.update_raid_count([park, park, AreaName(name="zoo")], 5)
    single = collector.value("raid_count", "zoo", "5")
    assert collector.value("raid_count", "city/park", "5") == single


def test_fort_and_incident_counts(collector):
    areas = [AreaName(parent="city", name="city"), AreaName(parent="city", name="city")]
    collector.update_fort_count(areas, "gym", "new")
    collector.update_incident_count(areas)
    assert collector.value("fort_count", "city", "gym", "new") == collector.value(
        "incident_count", "city"
    )
    assert collector.value("fort_count", "city", "gym", "new") > 0


def test_verified_ttl_above_thirty(collector):
    area = AreaName(parent="city", name="park")
    collector.update_verified_ttl(area, "encounter", NOW + 45 * 60)
    assert collector.value("verified_pokemon_ttl", "city/park", "encounter", "1") == 45
    assert collector.value("verified_pokemon_ttl", "city/park", "encounter", "0") == 0


def test_verified_ttl_expired_is_ignored(collector):
    area = AreaName(name="park")
    collector.update_verified_ttl(area, None, NOW - 5 * 60)
    assert collector.value("verified_pokemon_ttl_counter", "park", "", "0") == 0


def test_verified_ttl_truncates_toward_zero(collector):
    area = AreaName(name="park")
    collector.update_verified_ttl(area, "wild", NOW - 30)
    assert collector.value("verified_pokemon_ttl_counter", "park", "wild", "0") > 0
    assert collector.value("verified_pokemon_ttl", "park", "wild", "0") == 0


def test_pokemons_inc_dec_round_trip(collector):
    collector.inc_pokemons(True, "wild")
    collector.inc_pokemons(True, "wild")
    collector.dec_pokemons(True, "wild")
    collector.dec_pokemons(True, "wild")
    assert collector.value("pokemons", "1", "wild") == 0
    collector.dec_pokemons(False, None)
    assert collector.value("pokemons", "0", "") < 0


def test_duplicate_encounters_flag(collector):
    collector.inc_duplicate_encounters(True)
    assert collector.value("duplicate_encounters", "0") == 0
    assert collector.value("duplicate_encounters", "1") > 0


def test_gmo_type_and_reset_count(collector):
    collector.add_decode_gmo_type("cell", 3.0)
    collector.add_pokemon_stats_reset_count("park", 3.0)
    assert collector.value("decode_gmo_type", "cell") == 3.0
    assert collector.value("pokemon_stats_reset_count", "park") == 3.0


def test_unknown_metric_name(collector):
    with pytest.raises(KeyError):
        collector.value("not_a_metric")


def test_get_stats_collector_disabled_discards():
    collector = get_stats_collector(False)
    assert collector.set_quests(1.0, 2.0) is None
    assert collector.inc_raw_requests("ok", "") is None
    assert not hasattr(collector, "render")
    assert not hasattr(collector, "value")


def test_get_stats_collector_enabled_is_shared():
    first = get_stats_collector(True)
    assert first is get_stats_collector(True)
    assert isinstance(first, MetricsCollector)