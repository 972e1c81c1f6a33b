"""Central test fixtures."""

import pytest

from pageflow.testing import RecordingCacheStore, ScriptedPageSource, StateRecorder
from tests.fixtures import FakeClock, Product, SleepRecorder, make_products


@pytest.fixture
def products() -> list[Product]:
    """Five products with ids 0 to 4."""
    return make_products(5)


@pytest.fixture
def source(products: list[Product]) -> ScriptedPageSource:
    """Offset-paginated source over the products."""
    return ScriptedPageSource.over(products)


@pytest.fixture
def cache_store() -> RecordingCacheStore:
    """In-memory cache store that counts calls."""
    return RecordingCacheStore()


@pytest.fixture
def recorder() -> StateRecorder:
    """Collects published states once attached."""
    return StateRecorder()


@pytest.fixture
def sleeper() -> SleepRecorder:
    """Non-waiting sleep that records requested delays."""
    return SleepRecorder()


@pytest.fixture
def clock() -> FakeClock:
    """Manually advanced clock."""
    return FakeClock()
