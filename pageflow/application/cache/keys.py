"""Deterministic cache addressing for fetch queries."""

import base64
import json
from typing import Any

from pydantic_core import to_jsonable_python

from ...domain import FetchQuery

_JSON_SCALARS = (str, int, float, bool)


def _dumps(value: Any) -> str:
    return json.dumps(
        to_jsonable_python(value, fallback=str),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def _canonical(value: Any) -> Any:
    """Make value serialise the same way for equal inputs.

    Sets have no stable iteration order (string hashes change per process),
    so their members are sorted by their own canonical JSON.
    """
    if isinstance(value, (set, frozenset)):
        return sorted((_canonical(member) for member in value), key=_dumps)
    if isinstance(value, dict):
        return {key: _canonical(member) for key, member in value.items()}
    if isinstance(value, (list, tuple)):
        return [_canonical(member) for member in value]
    return value


def _canonical_page_key(page_key: Any) -> Any:
    if page_key is None or isinstance(page_key, _JSON_SCALARS):
        return page_key
    return to_jsonable_python(_canonical(page_key), fallback=str)


def derive_cache_key(query: FetchQuery[Any]) -> str:
    """Derive the cache key of a query from its page key and filter.

    The page size is not part of the key. An absent page key and an absent
    filter both serialise to null, which no present value (including an
    empty FilterSpec) can produce.

    Args:
        query: The query about to be fetched.

    Returns:
        URL-safe base64 text of the canonical JSON form of the query.

    Examples:
        >>> derive_cache_key(FetchQuery(page_size=20)) == derive_cache_key(FetchQuery(page_size=50))
        True
    """
    parts = {
        "pageKey": _canonical_page_key(query.page_key),
        "filter": None if query.filter is None else _canonical(query.filter.to_map()),
    }
    payload = _dumps(parts)
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")
