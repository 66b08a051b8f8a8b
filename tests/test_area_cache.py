from src.dispatch.data.area_cache import AreaLookupCache, normalize_city


def test_resolve_area_memoizes_hits_and_misses():
    calls = []

    def loader(city):
        calls.append(city)
        return {"חיפה": "צפון"}.get(city)

    cache = AreaLookupCache()
    assert cache.resolve_area("חיפה", loader) == "צפון"
    assert cache.resolve_area(" חיפה ", loader) == "צפון"
    assert cache.resolve_area("עכו", loader) is None
    assert cache.resolve_area("עכו", loader) is None

    assert calls == ["חיפה", "עכו"]
    assert len(cache) == 2


def test_invalidate_single_key_and_all():
    cache = AreaLookupCache()
    cache.set("חיפה", "צפון")
    cache.set("אילת", "דרום")

    cache.invalidate("חיפה")
    assert "חיפה" not in cache
    assert cache.get("אילת") == "דרום"

    cache.invalidate()
    assert len(cache) == 0


def test_city_abbreviations_share_cache_entry():
    assert normalize_city('ת"א') == "תל אביב"

    cache = AreaLookupCache()
    cache.set("תל אביב", "מרכז")
    assert cache.resolve_area('ת"א', lambda city: "unused") == "מרכז"


def test_separate_caches_do_not_share_state():
    first = AreaLookupCache()
    second = AreaLookupCache()
    first.set("חיפה", "צפון")
    assert second.get("חיפה") is None
