"""
Two-tier query cache.

Tier one is a per-request memo on ``flask.g``: identical reads issued
while building one response hit the database once. Tier two is the
process-wide Flask-Caching store, keyed by the query key plus the current
version token of each of its tags. Invalidating a tag replaces its token,
which orphans every entry stored under the old one; the orphans age out
through their TTL. An evicted token is replaced, never reset.

Cached values must be plain data (dicts, lists, strings). ORM objects are
never stored.

Configure ``CACHE_TYPE = "NullCache"`` to disable tier two; the
request memo is dropped on every invalidation, so writes followed by
reads in one request stay consistent.
"""
import uuid

from flask import g, has_app_context, current_app
from domaincms.extensions import cache

CACHE_DURATIONS = {
    "SHORT": 30,
    "MEDIUM": 60,
    "LONG": 300,
    "STATIC": 3600,
}

CACHE_TAGS = {
    "DOMAINS": "domains",
    "PAGES": "pages",
    "CATEGORIES": "categories",
    "NAVIGATION": "navigation",
    "TABLES": "tables",
}

_MEMO_ATTR = "_query_memo"
_VERSION_PREFIX = "tag-version:"


def domain_tag(slug):
    return f"domain:{slug}"


def page_tag(page_id):
    return f"page:{page_id}"


def table_tag(table_id):
    return f"table:{table_id}"


def _request_memo():
    if not has_app_context():
        return None
    memo = getattr(g, _MEMO_ATTR, None)
    if memo is None:
        memo = {}
        setattr(g, _MEMO_ATTR, memo)
    return memo


def _new_version():
    return uuid.uuid4().hex


def _tag_version(tag):
    """
    Current version token of ``tag``.

    A missing token (never set, evicted or expired) is replaced by a fresh
    one, so entries stored under an earlier token can never match again.
    """
    version_key = f"{_VERSION_PREFIX}{tag}"
    version = cache.get(version_key)
    if version is None:
        token = _new_version()
        cache.add(version_key, token, timeout=0)
        version = cache.get(version_key) or token
    return version


def _versioned_key(key, tags):
    versions = ",".join(f"{tag}={_tag_version(tag)}" for tag in sorted(tags))
    return f"q:{key}|{versions}"


def remember(key, loader, *, tags=(), timeout=CACHE_DURATIONS["MEDIUM"]):
    """
    Return the cached value for ``key`` or compute it with ``loader()``.

    ``None`` results are memoized for the request but not stored across
    requests.
    """
    memo = _request_memo()
    if memo is not None and key in memo:
        return memo[key]

    stored_key = _versioned_key(key, tags)
    value = cache.get(stored_key)

    if value is None:
        value = loader()
        if value is not None:
            cache.set(stored_key, value, timeout=timeout)

    if memo is not None:
        memo[key] = value

    return value


def invalidate(*tags):
    """Give each tag a new version token and drop the request memo."""
    for tag in tags:
        cache.set(f"{_VERSION_PREFIX}{tag}", _new_version(), timeout=0)

    if has_app_context() and hasattr(g, _MEMO_ATTR):
        delattr(g, _MEMO_ATTR)

    if tags:
        current_app.logger.debug("Cache invalidated: %s", ", ".join(tags))


def get_cache_headers(max_age=0, s_maxage=CACHE_DURATIONS["MEDIUM"], stale_while_revalidate=CACHE_DURATIONS["LONG"]):
    return {
        "Cache-Control": (
            f"public, max-age={max_age}, s-maxage={s_maxage}, "
            f"stale-while-revalidate={stale_while_revalidate}"
        ),
    }
