from golbat.ttl_cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_cache(default_ttl=60):
    clock = FakeClock()
    return TTLCache(default_ttl, clock), clock


def test_set_and_get():
    cache, _ = make_cache()
    cache.set("a", 1)
    assert cache.get("a") == 1
    assert cache.get("missing") is None


def test_default_ttl_expires():
    cache, clock = make_cache(60)
    cache.set("a", 1)
    clock.advance(59)
    assert cache.get("a") == 1
    clock.advance(1)
    assert cache.get("a") is None


def test_explicit_ttl_and_zero_means_default():
    cache, clock = make_cache(60)
    cache.set("short", 1, ttl=10)
    cache.set("default", 2, ttl=0)
    clock.advance(30)
    assert cache.get("short") is None
    assert cache.get("default") == 2


def test_negative_ttl_never_expires():
    cache, clock = make_cache(60)
    cache.set("forever", 1, ttl=-1)
    clock.advance(10**9)
    assert cache.get("forever") == 1


def test_non_positive_default_never_expires():
    cache, clock = make_cache(0)
    cache.set("a", 1)
    clock.advance(10**9)
    assert cache.get("a") == 1


def test_get_does_not_extend_life():
    cache, clock = make_cache(60)
    cache.set("a", 1)
    clock.advance(50)
    assert cache.get("a") == 1
    clock.advance(20)
    assert cache.get("a") is None


def test_items_and_len_skip_expired():
    cache, clock = make_cache(60)
    cache.set("a", 1, ttl=10)
    cache.set("b", 2)
    clock.advance(20)
    assert cache.items() == {"b": 2}
    assert len(cache) == 1


def test_delete_expired_counts():
    cache, clock = make_cache(60)
    cache.set("a", 1, ttl=10)
    cache.set("b", 2, ttl=10)
    cache.set("c", 3)
    clock.advance(15)
    assert cache.delete_expired() == 2
    assert cache.delete_expired() == 0
    assert cache.items() == {"c": 3}


def test_delete():
    cache, _ = make_cache()
    cache.set("a", 1)
    assert cache.delete("a") is True
    assert cache.delete("a") is False
    assert cache.get("a") is None


def test_overwrite_resets_expiry():
    cache, clock = make_cache(60)
    cache.set("a", 1)
    clock.advance(50)
    cache.set("a", 2)
    clock.advance(50)
    assert cache.get("a") == 2