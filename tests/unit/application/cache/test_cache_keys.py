"""Tests for deterministic cache key derivation."""

import base64
import json
from datetime import datetime, timezone

import pytest

from pageflow.application.cache import derive_cache_key
from pageflow.domain import FetchQuery, FilterField, FilterOperator, FilterSpec, SortField


def spec(*filters: FilterField, sorts: tuple[SortField, ...] = ()) -> FilterSpec:
    return FilterSpec(filters=filters, sorts=sorts)


def test_identical_queries_share_a_key():
    first = FetchQuery(page_size=20, page_key=40, filter=spec(FilterField.equals("status", "active")))
    second = FetchQuery(page_size=20, page_key=40, filter=spec(FilterField.equals("status", "active")))
    assert derive_cache_key(first) == derive_cache_key(second)


def test_page_size_is_not_part_of_the_key():
    assert derive_cache_key(FetchQuery(page_size=10)) == derive_cache_key(FetchQuery(page_size=50))


def test_first_page_differs_from_every_other_page():
    first = derive_cache_key(FetchQuery(page_size=10))
    assert first != derive_cache_key(FetchQuery(page_size=10, page_key=0))
    assert first != derive_cache_key(FetchQuery(page_size=10, page_key="null"))


def test_page_key_types_are_distinguished():
    assert derive_cache_key(FetchQuery(page_size=10, page_key=1)) != derive_cache_key(
        FetchQuery(page_size=10, page_key="1")
    )


def test_no_filter_differs_from_empty_filter():
    assert derive_cache_key(FetchQuery(page_size=10)) != derive_cache_key(
        FetchQuery(page_size=10, filter=FilterSpec.empty())
    )


@pytest.mark.parametrize(
    "changed",
    [
        spec(FilterField(field="price", value=100, operation=FilterOperator.LESS_THAN)),
        spec(FilterField(field="price", value=101, operation=FilterOperator.GREATER_THAN)),
        spec(FilterField(field="cost", value=100, operation=FilterOperator.GREATER_THAN)),
        spec(FilterField.custom("price", 100, "greater_than")),
        spec(
            FilterField(field="price", value=100, operation=FilterOperator.GREATER_THAN),
            sorts=(SortField(field="price"),),
        ),
    ],
    ids=["operation", "value", "field", "custom-operation", "added-sort"],
)
def test_any_filter_change_changes_the_key(changed: FilterSpec):
    base = spec(FilterField(field="price", value=100, operation=FilterOperator.GREATER_THAN))
    assert derive_cache_key(FetchQuery(page_size=10, filter=base)) != derive_cache_key(
        FetchQuery(page_size=10, filter=changed)
    )


def test_sort_direction_and_order_change_the_key():
    by_name = SortField(field="name")
    by_price = SortField(field="price")
    keys = {
        derive_cache_key(FetchQuery(page_size=10, filter=spec(sorts=(by_name, by_price)))),
        derive_cache_key(FetchQuery(page_size=10, filter=spec(sorts=(by_price, by_name)))),
        derive_cache_key(
            FetchQuery(page_size=10, filter=spec(sorts=(SortField(field="name", descending=True), by_price)))
        ),
    }
    assert len(keys) == 3


def test_filter_order_changes_the_key():
    a = FilterField.equals("a", 1)
    b = FilterField.equals("b", 2)
    assert derive_cache_key(FetchQuery(page_size=10, filter=spec(a, b))) != derive_cache_key(
        FetchQuery(page_size=10, filter=spec(b, a))
    )


def test_key_is_url_safe_base64_of_json():
    key = derive_cache_key(FetchQuery(page_size=10, page_key=20))

    decoded = json.loads(base64.urlsafe_b64decode(key.encode("ascii")))
    assert decoded == {"pageKey": 20, "filter": None}


def test_non_json_values_are_stable():
    when = datetime(2025, 1, 1, tzinfo=timezone.utc)
    query = FetchQuery(
        page_size=10,
        page_key=when,
        filter=spec(FilterField(field="published_at", value=when, operation=FilterOperator.GREATER_THAN_OR_EQUAL)),
    )
    again = FetchQuery(
        page_size=10,
        page_key=datetime(2025, 1, 1, tzinfo=timezone.utc),
        filter=spec(
            FilterField(
                field="published_at",
                value=datetime(2025, 1, 1, tzinfo=timezone.utc),
                operation=FilterOperator.GREATER_THAN_OR_EQUAL,
            )
        ),
    )
    assert derive_cache_key(query) == derive_cache_key(again)


def test_arbitrary_page_keys_fall_back_to_str():
    class Cursor:
        def __init__(self, token: str):
            self.token = token

        def __str__(self) -> str:
            return f"cursor:{self.token}"

    assert derive_cache_key(FetchQuery(page_size=10, page_key=Cursor("a"))) == derive_cache_key(
        FetchQuery(page_size=10, page_key=Cursor("a"))
    )
    assert derive_cache_key(FetchQuery(page_size=10, page_key=Cursor("a"))) != derive_cache_key(
        FetchQuery(page_size=10, page_key=Cursor("b"))
    )


@pytest.mark.parametrize(
    "members",
    [{"b", "a", "c"}, frozenset({"c", "b", "a"}), {33, 2, 10}],
    ids=["set-of-str", "frozenset-of-str", "set-of-int"],
)
def test_set_values_serialise_sorted(members: set):
    query = FetchQuery(page_size=10, filter=spec(FilterField(field="tag", value=members, operation=FilterOperator.IS_IN)))
    ordered = FetchQuery(
        page_size=10,
        filter=spec(FilterField(field="tag", value=sorted(members), operation=FilterOperator.IS_IN)),
    )

    assert derive_cache_key(query) == derive_cache_key(ordered)
    decoded = json.loads(base64.urlsafe_b64decode(derive_cache_key(query).encode("ascii")))
    assert decoded["filter"]["filters"][0]["value"] == sorted(members)


def test_nested_set_values_are_sorted():
    first = FetchQuery(page_size=10, filter=spec(FilterField(field="tags", value={"any": {"y", "x"}})))
    second = FetchQuery(page_size=10, filter=spec(FilterField(field="tags", value={"any": ["x", "y"]})))

    assert derive_cache_key(first) == derive_cache_key(second)
