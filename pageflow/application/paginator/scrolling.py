"""Headless helpers for list views driven by a paginator.

Nothing here renders anything. These helpers hold the decisions a list
view has to make (what to show for a given state, when scrolling should
request the next page) so that any UI toolkit can reuse them.
"""

from enum import Enum
from typing import Any

from ...domain import PageState, PageStatus
from .paginator import Paginator

DEFAULT_SCROLL_THRESHOLD = 0.8


class ViewKind(str, Enum):
    """What a list view should display for a state."""

    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    CONTENT = "content"


def classify_view(state: PageState[Any]) -> ViewKind:
    """Pick the view to display for state.

    Full-screen loading and error views are only used while there are no
    items; once items exist they stay visible and the view shows content.
    """
    if state.items:
        return ViewKind.CONTENT
    if state.status is PageStatus.LOADING:
        return ViewKind.LOADING
    if state.status is PageStatus.ERROR:
        return ViewKind.ERROR
    if state.status is PageStatus.READY:
        return ViewKind.EMPTY
    return ViewKind.CONTENT


def trailing_slots(state: PageState[Any]) -> int:
    """Number of extra rows to reserve after the items for a loading indicator."""
    return 1 if state.has_more else 0


class InfiniteScroll:
    """Requests the next page once scrolling passes a fraction of the content.

    Attributes:
        paginator: The paginator to drive.
        threshold: Fraction of the scrollable extent, in (0, 1], at which
            the next page is requested.
        enabled: Set to False to stop triggering loads.

    Examples:
        >>> scroll = InfiniteScroll(paginator, threshold=0.8)
        >>> await scroll.on_scroll(offset=850.0, max_extent=1000.0)
        True
    """

    __slots__ = ("paginator", "threshold", "enabled")

    def __init__(
        self,
        paginator: Paginator[Any, Any],
        threshold: float = DEFAULT_SCROLL_THRESHOLD,
        enabled: bool = True,
    ):
        if not 0 < threshold <= 1:
            raise ValueError("threshold must be in (0, 1]")
        self.paginator = paginator
        self.threshold = threshold
        self.enabled = enabled

    def should_load(self, offset: float, max_extent: float) -> bool:
        return self.enabled and offset >= max_extent * self.threshold

    async def on_scroll(self, offset: float, max_extent: float) -> bool:
        """Handle a scroll position change.

        Returns:
            True if the position crossed the threshold and load_next was
            requested. The paginator may still ignore the request (load in
            flight, no more pages).
        """
        if not self.should_load(offset, max_extent):
            return False
        await self.paginator.load_next()
        return True
