"""Pytest configuration providing an in-memory store and shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

import pytest

from customer_sync.config import ConfigLocator, ConfigRepository, ExtractionConfig, SyncConfig
from customer_sync.engine import SearchPage, SourceHit
from customer_sync.exceptions import StoreError


class FakeStore:
    """In-memory stand-in for the search store.

    ``pages`` are served in order: the first by ``search`` and the rest by
    ``scroll_next``; once exhausted an empty page is returned. Every scroll call
    rotates the cursor handle so tests can check the driver follows it.
    """

    def __init__(
        self,
        pages: Iterable[list[dict[str, Any] | None]] = (),
        *,
        fail_scroll_at: int | None = None,
        fail_upsert_at: int | None = None,
        fail_release: bool = False,
        issue_cursor: bool = True,
    ) -> None:
        self.pages = [list(page) for page in pages]
        self.fail_scroll_at = fail_scroll_at
        self.fail_upsert_at = fail_upsert_at
        self.fail_release = fail_release
        self.issue_cursor = issue_cursor
        self.indices: dict[str, dict[str, dict[str, Any]]] = {}
        self.calls: list[tuple[str, Any]] = []
        self.released: list[str] = []
        self.upsert_count = 0
        self._served = 0
        self._cursor_version = 0

    # StoreClient -------------------------------------------------------
    def search(self, index: str, query: Mapping[str, Any], size: int, scroll: str) -> SearchPage:
        self.calls.append(("search", {"index": index, "query": dict(query), "size": size, "scroll": scroll}))
        self._served = 0
        return self._serve()

    def scroll_next(self, cursor: str, scroll: str) -> SearchPage:
        self.calls.append(("scroll", {"cursor": cursor, "scroll": scroll}))
        if self.fail_scroll_at is not None and self._served == self.fail_scroll_at:
            raise StoreError("scroll", "connection reset")
        return self._serve()

    def release_cursor(self, cursor: str) -> None:
        self.calls.append(("release", cursor))
        self.released.append(cursor)
        if self.fail_release:
            raise StoreError("clear_scroll", "cluster unavailable", status_code=503)

    def upsert(self, index: str, doc_id: str, document: Mapping[str, Any]) -> None:
        if self.fail_upsert_at is not None and self.upsert_count == self.fail_upsert_at:
            raise StoreError("index", "mapping conflict", status_code=400)
        self.upsert_count += 1
        self.indices.setdefault(index, {})[doc_id] = dict(document)

    def close(self) -> None:
        self.calls.append(("close", None))

    # helpers -----------------------------------------------------------
    def _serve(self) -> SearchPage:
        self._cursor_version += 1
        cursor = f"cursor-{self._cursor_version}" if self.issue_cursor else None
        if self._served >= len(self.pages):
            return SearchPage(cursor=cursor, hits=[])
        raw_page = self.pages[self._served]
        self._served += 1
        hits = [
            SourceHit(doc_id=f"doc-{self._served}-{position}", source=source)
            for position, source in enumerate(raw_page)
        ]
        return SearchPage(cursor=cursor, hits=hits)

    def documents(self, index: str = "customer") -> dict[str, dict[str, Any]]:
        return self.indices.get(index, {})


def order_doc(customer_id: Any, email: Any = None, **extra: Any) -> dict[str, Any]:
    """Build a source document shaped like an e-commerce order."""

    doc: dict[str, Any] = {
        "customer_id": customer_id,
        "email": email if email is not None else f"customer{customer_id}@example.com",
        "customer_full_name": f"Customer {customer_id}",
        "customer_first_name": "Customer",
        "customer_last_name": str(customer_id),
        "customer_gender": "FEMALE",
        "user": f"user{customer_id}",
        "order_id": 1000 + (customer_id if isinstance(customer_id, int) else 0),
    }
    doc.update(extra)
    return doc


@pytest.fixture
def fake_store_factory() -> Callable[..., FakeStore]:
    return FakeStore


@pytest.fixture
def extraction_config() -> ExtractionConfig:
    return ExtractionConfig(
        source_index="orders",
        destination_index="customer",
        page_size=3,
        scroll_ttl="1m",
        progress_interval=2,
    )


@pytest.fixture
def sample_sync_config(extraction_config: ExtractionConfig) -> SyncConfig:
    return SyncConfig(extraction=extraction_config)


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("CUSTOMER_SYNC_HOME", str(tmp_path))
    for name in (
        "CUSTOMER_SYNC_STORE_URL",
        "CUSTOMER_SYNC_STORE_USERNAME",
        "CUSTOMER_SYNC_STORE_PASSWORD",
        "CUSTOMER_SYNC_STORE_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    repository = ConfigRepository(ConfigLocator(project_root=tmp_path))
    yield repository


@pytest.fixture
def make_order() -> Callable[..., dict[str, Any]]:
    return order_doc
