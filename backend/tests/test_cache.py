from flask import g

from domaincms.services.cache import remember, invalidate, get_cache_headers, page_tag, _tag_version


def counting_loader(calls, value="value"):
    def load():
        calls.append(1)
        return value
    return load


def test_request_memo_hits_loader_once(app):
    calls = []
    with app.app_context():
        assert remember("k", counting_loader(calls), tags=("pages",)) == "value"
        assert remember("k", counting_loader(calls), tags=("pages",)) == "value"
    assert len(calls) == 1


def test_store_survives_across_requests(cached_app):
    calls = []
    with cached_app.app_context():
        remember("k", counting_loader(calls), tags=("pages",))
    with cached_app.app_context():
        remember("k", counting_loader(calls), tags=("pages",))
    assert len(calls) == 1


def test_invalidating_a_tag_forces_reload(cached_app):
    calls = []
    with cached_app.app_context():
        remember("k", counting_loader(calls), tags=("pages", page_tag("p1")))
        invalidate(page_tag("p1"))
        assert not hasattr(g, "_query_memo")
        remember("k", counting_loader(calls), tags=("pages", page_tag("p1")))
    assert len(calls) == 2


def test_unrelated_tag_keeps_entry(cached_app):
    calls = []
    with cached_app.app_context():
        remember("k", counting_loader(calls), tags=("pages",))
    with cached_app.app_context():
        invalidate("tables")
        remember("k", counting_loader(calls), tags=("pages",))
    assert len(calls) == 1


def test_none_is_not_stored(cached_app):
    calls = []
    with cached_app.app_context():
        remember("missing", counting_loader(calls, None), tags=("pages",))
    with cached_app.app_context():
        remember("missing", counting_loader(calls, None), tags=("pages",))
    assert len(calls) == 2


def test_cache_headers():
    headers = get_cache_headers(0, 60, 300)
    assert headers["Cache-Control"] == "public, max-age=0, s-maxage=60, stale-while-revalidate=300"


def test_pruned_version_does_not_revive_stale_entry(small_cache_app):
    with small_cache_app.app_context():
        remember("cats", lambda: "old", tags=("categories",), timeout=300)
    with small_cache_app.app_context():
        invalidate("categories")
        for i in range(12):
            remember(f"other-{i}", lambda: "filler", timeout=60)
    with small_cache_app.app_context():
        assert remember("cats", lambda: "new", tags=("categories",), timeout=300) == "new"


def test_invalidate_replaces_version_token(cached_app):
    with cached_app.app_context():
        first = _tag_version("pages")
        assert _tag_version("pages") == first
        invalidate("pages")
        assert _tag_version("pages") != first
