import pytest

from app.core.config import Settings
from app.services.currency.cache import CurrencyCache, build_currency_cache
from tests.fakes import EUR, GBP, USD


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_none_policy_keeps_entries_until_cleared():
    cache = CurrencyCache()
    cache.set("u1", EUR)
    cache.set("u2", GBP)
    assert cache.get("u1") == EUR
    assert len(cache) == 2
    cache.clear("u1")
    assert cache.get("u1") is None
    assert cache.get("u2") == GBP
    cache.clear()
    assert len(cache) == 0


def test_ttl_policy_expires_on_read():
    clock = FakeClock()
    cache = CurrencyCache(policy="ttl", ttl_seconds=60, clock=clock)
    cache.set("u1", EUR)
    clock.now += 59
    assert cache.get("u1") == EUR
    clock.now += 1
    assert cache.get("u1") is None
    assert len(cache) == 0


def test_lru_policy_evicts_least_recently_used():
    cache = CurrencyCache(policy="lru", max_entries=2)
    cache.set("u1", EUR)
    cache.set("u2", GBP)
    assert cache.get("u1") == EUR  # u2 is now the oldest
    cache.set("u3", USD)
    assert cache.get("u2") is None
    assert cache.get("u1") == EUR
    assert cache.get("u3") == USD


@pytest.mark.parametrize(
    "kwargs",
    [{"policy": "forever"}, {"policy": "ttl", "ttl_seconds": 0}, {"policy": "lru", "max_entries": 0}],
)
def test_invalid_configuration_rejected(kwargs):
    with pytest.raises(ValueError):
        CurrencyCache(**kwargs)


def test_built_from_settings(tmp_path):
    settings = Settings(
        db_path=tmp_path / "t.sqlite3", currency_cache_policy="lru", currency_cache_max_entries=3
    )
    cache = build_currency_cache(settings)
    assert cache.policy == "lru"


def test_settings_reject_unknown_policy(tmp_path):
    settings = Settings(db_path=tmp_path / "t.sqlite3", currency_cache_policy="sometimes")
    with pytest.raises(ValueError):
        settings.init_post_load()
