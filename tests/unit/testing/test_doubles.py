"""Tests for the pageflow.testing doubles."""

import pytest

from pageflow import CachePolicy, Page, PageStatus, Paginator
from pageflow.domain import FetchQuery
from pageflow.testing import RecordingCacheStore, ScriptedPageSource, StateRecorder


@pytest.mark.asyncio
async def test_over_pages_by_offset():
    source = ScriptedPageSource.over(range(5))

    first = await source.fetch(FetchQuery(page_size=2))
    last = await source.fetch(FetchQuery(page_size=2, page_key=4))

    assert first == Page(items=(0, 1), next_key=2, is_last=False, total_count=5)
    assert last == Page(items=(4,), next_key=None, is_last=True, total_count=5)
    assert source.call_count == 2


@pytest.mark.asyncio
async def test_over_empty_sequence_is_last_page():
    page = await ScriptedPageSource.over([]).fetch(FetchQuery(page_size=10))

    assert page.items == ()
    assert page.is_last


@pytest.mark.asyncio
async def test_scripted_outcomes_take_precedence():
    error = TimeoutError("slow")
    source = (
        ScriptedPageSource.over(range(3))
        .then_raise(error)
        .then_return(Page(items=("x",), is_last=True))
    )

    with pytest.raises(TimeoutError):
        await source.fetch(FetchQuery(page_size=2))
    assert (await source.fetch(FetchQuery(page_size=2))).items == ("x",)
    assert (await source.fetch(FetchQuery(page_size=2))).items == (0, 1)


@pytest.mark.asyncio
async def test_unscripted_fetch_fails_loudly():
    with pytest.raises(AssertionError, match="Unexpected fetch"):
        await ScriptedPageSource().fetch(FetchQuery(page_size=1))


@pytest.mark.asyncio
async def test_recording_store_counts_calls():
    store = RecordingCacheStore()
    query = FetchQuery(page_size=1)
    page = Page(items=(1,), is_last=True)

    await store.put("k", query, page)
    assert await store.get("k", query) == page
    assert await store.has("k")
    await store.remove("k")
    await store.clear()

    assert store.calls == {"put": 1, "get": 1, "has": 1, "remove": 1, "clear": 1}
    assert store.puts == [("k", page)]


@pytest.mark.asyncio
async def test_state_recorder_tracks_snapshots():
    paginator = Paginator(
        source=ScriptedPageSource.over(range(3)),
        page_size=2,
        cache_policy=CachePolicy.NETWORK_ONLY,
    )
    recorder = StateRecorder().attach(paginator)

    await paginator.load_initial()
    recorder.detach()
    await paginator.load_next()

    assert recorder.statuses == [PageStatus.IDLE, PageStatus.READY]
    assert recorder.last.items == (0, 1)
    assert recorder.subscription is None
