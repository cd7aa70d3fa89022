"""Scroll-cursor lifecycle: open, advance, and guaranteed release."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping

import structlog

from ..exceptions import StoreError
from .models import SearchPage
from .store import MATCH_ALL, StoreClient

DEFAULT_PAGE_SIZE = 1000
DEFAULT_SCROLL_TTL = "1m"


class PaginationDriver:
    """Own one server-side cursor over ``index`` for the length of a run.

    The store may rotate the cursor handle on every page, so the driver always
    continues from (and finally releases) the most recently returned handle.
    """

    def __init__(
        self,
        store: StoreClient,
        index: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        scroll_ttl: str = DEFAULT_SCROLL_TTL,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.store = store
        self.index = index
        self.page_size = page_size
        self.scroll_ttl = scroll_ttl
        self.logger = logger or structlog.get_logger("customer_sync.pagination")
        self.cursor: str | None = None
        self._released = False

    def open(self, query: Mapping[str, Any] | None = None) -> SearchPage:
        self.cursor = None
        self._released = False
        page = self.store.search(self.index, query or MATCH_ALL, self.page_size, self.scroll_ttl)
        self._adopt(page)
        return page

    def next(self) -> SearchPage:
        if self.cursor is None:
            raise RuntimeError("next() called before a cursor was opened")
        page = self.store.scroll_next(self.cursor, self.scroll_ttl)
        self._adopt(page)
        return page

    def close(self) -> None:
        """Release the cursor once; a no-op when none was ever issued."""

        if self.cursor is None or self._released:
            return
        self._released = True
        self.store.release_cursor(self.cursor)
        self.logger.debug("cursor_released", index=self.index)

    @contextmanager
    def scroll(self, query: Mapping[str, Any] | None = None) -> Iterator[Iterator[SearchPage]]:
        """Yield an iterator over non-empty pages; the cursor is released on exit."""

        failed = True
        try:
            yield self._pages(query)
            failed = False
        finally:
            if failed:
                self._release_after_failure()
            else:
                self.close()

    # ------------------------------------------------------------------
    def _pages(self, query: Mapping[str, Any] | None) -> Iterator[SearchPage]:
        page = self.open(query)
        while not page.is_empty:
            yield page
            page = self.next()

    def _adopt(self, page: SearchPage) -> None:
        if page.cursor is not None:
            self.cursor = page.cursor

    def _release_after_failure(self) -> None:
        try:
            self.close()
        except StoreError as exc:
            # keep the error that aborted the run
            self.logger.warning("cursor_release_failed", index=self.index, error=str(exc))


__all__ = ["DEFAULT_PAGE_SIZE", "DEFAULT_SCROLL_TTL", "PaginationDriver"]
