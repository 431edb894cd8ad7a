# golbat

Python building blocks for a service that takes in raw scan data, matches
it against geofences, keeps statistics and forwards events to webhooks.
It needs nothing beyond the standard library.

## Install

```
pip install .
pip install ".[test]"   # adds pytest for running the tests
```

## Modules

- `golbat.geo.location` has `Location` (`tuple()`), `ApiLocation`
  (`to_location()`), `Bbox`, `normalize_lon` (wraps a longitude into
  [-180, 180)) and `split_route` (splits a sequence into `parts`
  consecutive pieces, with the last piece taking the remainder).
- `golbat.geo.areas` has `AreaName` and `area_match_with_wildcards`.
  `str(AreaName)` gives `parent/name`, or just one of the two when they are
  equal or one is empty, or `unown` when both are empty. When a wanted
  area has `*` as its name, it matches any area in the same parent. When
  it has `*` as its parent, it matches the same name in any parent.
- `golbat.geo.geofence` has `Geofence`, a list of `Location` vertices with
  `contains` (a ray-casting test), `bounding_box`, `to_polygon_string` and
  `to_feature`. It also has GeoJSON helpers that work on plain dicts:
  `polygon_contains`, `multi_polygon_contains`, `match_geofences`,
  `GeofenceIndex` (which checks bounding boxes before polygons) and
  `normalise_fence_request`. The last of these turns a GeoJSON geometry, a
  GeoJSON feature or a `{"fence": [{"lat": .., "lon": ..}, ...]}` body into
  a feature, and raises `ValueError` for anything else.
- `golbat.util` has `bool_to_int`, `extract_location_card`,
  `RoundedFloat4` (`to_json()` writes four decimals), `truncate_utf8` and
  the tables `TEAM_ID_TO_NAME`, `LURE_ID_TO_NAME` and
  `INCIDENT_TYPE_TO_NAME`.
- `golbat.striped_mutex.IntStripedMutex` is a fixed set of locks. A key
  picks its lock as `key % stripes`.
- `golbat.scan.PokemonScan` is a scan record with `compressed_iv`,
  `must_be_boosted`, `must_be_unboosted`, `must_have_rerolled` and
  `remove_ditto_aux_info`.
- `golbat.ttl_cache.TTLCache` is a thread-safe cache with a time-to-live
  for each entry and a clock you can inject. Reading an entry does not
  extend its life.
- `golbat.encounter_cache` has `EncounterValue`, which tracks the accounts
  that have seen an encounter, and `EncounterCache`. The cache's default
  TTL is 60 minutes. `run(stop_event, interval)` purges expired entries
  until the event is set.
- `golbat.devices.DeviceRegistry` keeps the last location of each device
  for `device_hours`. `all_devices()` returns the locations as JSON-ready
  dicts.
- `golbat.logsetup` has `setup_logger`, which logs to stdout and, if you
  ask for it, to `<log_dir>/golbat.log`. The file is rotated by size, and
  backups are timestamped, optionally gzipped and pruned by count and age.
  The module also has `rotate_logs` and `PlainFormatter`, which writes
  lines as `LEVEL timestamp message`.
- `golbat.webhooks.webhook` has `WebhookType`, `WebhookConfig`,
  `WebhookMessage`, `Webhook`, `webhook_from_config` and
  `InvalidWebhookError`. A webhook configured without types receives every
  type. A webhook configured with area names receives only the messages
  whose areas match.
- `golbat.webhooks.sender.WebhooksSender` buffers messages by type.
  `flush()` posts them to every webhook in parallel and logs any webhook
  that fails. `run(stop_event)` flushes in the background once every
  interval, which defaults to 1 second.
- `golbat.stats.collector.StatsCollector` is the statistics interface, and
  its methods discard every event. `NoRowsError` marks a query that
  returned no row, and counts as a success.
- `golbat.stats.metrics` has `MetricFamily` and `MetricsCollector`, which
  keep counters and gauges in memory. `render()` writes them out in the
  Prometheus text format. `get_stats_collector(enabled)` returns one shared
  `MetricsCollector` when enabled, and a discarding `StatsCollector`
  otherwise.
- `golbat.raw` has `parse_raw_body`, which normalises a raw upload into a
  `RawRequest`. A non-empty `origin` selects the list-shaped format.
  `RawRequest.proto_data()` yields decoded `ProtoData` entries. The module
  also has `check_raw_authorization` and `quests_held_has_ar_task`, and it
  raises `RawDecodeError` for bodies it cannot use.
- `golbat.api` has `normalise_gym_ids` (at most 500 distinct ids),
  `parse_gym_search` (distance capped at 500 000 m, limit defaulting to 500
  and capped at 10 000) and `check_api_secret`. It raises `ApiError` with
  an HTTP status and a JSON body.
- `golbat.tappable.Tappable` is a tappable record with `set_spawnpoint`,
  `set_expire_timestamp`, `set_unknown_timestamp`, `has_changes` and
  `to_json`.

## Example

```python
import threading

from golbat.geo.areas import AreaName
from golbat.webhooks.sender import WebhooksSender
from golbat.webhooks.webhook import WebhookConfig, WebhookType, webhook_from_config

hook = webhook_from_config(WebhookConfig(url="http://localhost:9000", types=["raid"]))
sender = WebhooksSender([hook], interval=1.0)
sender.add_message(WebhookType.RAID, {"level": 5}, [AreaName("", "city")])
sender.flush()

stop = threading.Event()
threading.Thread(target=sender.run, args=(stop,)).start()
# ... later
stop.set()
```

## What this package does not do

This is a library, and you build the service around it:

- There is no command-line program and no HTTP or gRPC server. `golbat.raw`
  and `golbat.api` only check and normalise request bodies, and you do the
  routing and the responses.
- Nothing is stored in a database. Records such as `Tappable` only model
  fields and expiry.
- Protos are not decoded. `ProtoData` carries the raw bytes and nothing
  more.
- No signal handlers are installed. You stop `run` loops by setting the
  event that was passed to them.