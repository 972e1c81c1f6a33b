"""Tests for refresh and filter updates pre-empting loads in flight."""

import asyncio

import pytest

from pageflow import CachePolicy, FilterField, FilterSpec, Page, PageStatus, Paginator
from pageflow.application.fetching import PageSource
from pageflow.domain import FetchQuery
from tests.fixtures import Product, make_products

ACTIVE = FilterSpec(filters=[FilterField.equals("status", "active")])


class Gate:
    def __init__(self) -> None:
        self.entered = asyncio.Event()
        self.released = asyncio.Event()

    def release(self) -> None:
        self.released.set()


class GatedSource(PageSource[Product, int]):
    """Serves two products per page, holding the next fetch of a held key until released."""

    def __init__(self) -> None:
        self.gates: dict[int | None, Gate] = {}
        self.queries: list[FetchQuery[int]] = []

    def hold(self, page_key: int | None) -> Gate:
        gate = self.gates[page_key] = Gate()
        return gate

    async def fetch(self, query: FetchQuery[int]) -> Page[Product, int]:
        self.queries.append(query)
        gate = self.gates.pop(query.page_key, None)
        if gate is not None:
            gate.entered.set()
            await gate.released.wait()
        offset = query.page_key or 0
        label = "Active" if query.filter == ACTIVE else "All"
        return Page(items=make_products(2, start=offset, label=label), next_key=offset + 2, is_last=False)


@pytest.fixture
def gated() -> GatedSource:
    return GatedSource()


@pytest.fixture
def paginator(gated: GatedSource) -> Paginator[Product, int]:
    return Paginator(source=gated, page_size=2, cache_policy=CachePolicy.NETWORK_ONLY)


@pytest.mark.asyncio
async def test_update_filter_discards_superseded_initial_load(gated: GatedSource, paginator: Paginator):
    gate = gated.hold(None)
    stuck = asyncio.create_task(paginator.load_initial())
    await gate.entered.wait()

    await paginator.update_filter(ACTIVE)
    gate.release()
    await stuck

    assert [p.name for p in paginator.state.items] == ["Active 0", "Active 1"]
    assert paginator.state.status is PageStatus.READY
    assert not paginator.is_loading


@pytest.mark.asyncio
async def test_refresh_discards_stuck_next_page(gated: GatedSource, paginator: Paginator):
    await paginator.load_initial()
    gate = gated.hold(2)
    stuck = asyncio.create_task(paginator.load_next())
    await gate.entered.wait()
    assert paginator.is_loading

    await paginator.refresh()
    gate.release()
    await stuck

    assert [p.id for p in paginator.state.items] == [0, 1]
    assert paginator.state.status is PageStatus.READY
    assert paginator.state.has_more is True
    assert not paginator.is_loading


@pytest.mark.asyncio
async def test_superseded_load_does_not_release_guard_of_successor(gated: GatedSource, paginator: Paginator):
    first_gate = gated.hold(None)
    superseded = asyncio.create_task(paginator.load_initial())
    await first_gate.entered.wait()
    await paginator.refresh()

    next_gate = gated.hold(2)
    successor = asyncio.create_task(paginator.load_next())
    await next_gate.entered.wait()

    first_gate.release()
    await superseded
    assert paginator.is_loading
    assert [p.id for p in paginator.state.items] == [0, 1]

    next_gate.release()
    await successor
    assert not paginator.is_loading
    assert [p.id for p in paginator.state.items] == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_next_page_follows_cursor_of_new_run(gated: GatedSource, paginator: Paginator):
    gate = gated.hold(None)
    stuck = asyncio.create_task(paginator.load_initial())
    await gate.entered.wait()
    await paginator.update_filter(ACTIVE)
    gate.release()
    await stuck

    await paginator.load_next()

    assert gated.queries[-1].page_key == 2
    assert gated.queries[-1].filter == ACTIVE
    assert [p.name for p in paginator.state.items] == ["Active 0", "Active 1", "Active 2", "Active 3"]
