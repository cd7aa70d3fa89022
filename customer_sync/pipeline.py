"""Extraction pipeline wiring pagination, normalization, dedup and export."""

from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import asdict, dataclass

import structlog

from .config import ExtractionConfig
from .engine import (
    CanonicalCustomer,
    DedupRegister,
    DocumentNormalizer,
    PaginationDriver,
    SearchPage,
    StoreClient,
)
from .engine.exporter import BaseExporter, IndexExporter
from .exceptions import SyncError


@dataclass(slots=True)
class RunSummary:
    """Counters for one run; ``processed`` is the number of unique customers written."""

    processed: int = 0
    rejected: int = 0
    duplicates: int = 0
    pages: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class ExtractionPipeline:
    """Walk the source collection once and write one document per unique customer.

    Pages are processed strictly one after another. Within a page, identities
    are claimed in store order, so the first occurrence of a ``customer_id``
    is the one written even when ``write_workers`` fans the writes out.
    """

    def __init__(
        self,
        driver: PaginationDriver,
        exporter: BaseExporter,
        *,
        normalizer: DocumentNormalizer | None = None,
        progress_interval: int = 500,
        write_workers: int = 1,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.driver = driver
        self.exporter = exporter
        self.normalizer = normalizer or DocumentNormalizer()
        self.progress_interval = progress_interval
        self.write_workers = write_workers
        self.logger = logger or structlog.get_logger("customer_sync.pipeline")

    @classmethod
    def from_config(
        cls,
        config: ExtractionConfig,
        store: StoreClient,
        exporter: BaseExporter | None = None,
    ) -> "ExtractionPipeline":
        driver = PaginationDriver(
            store,
            config.source_index,
            page_size=config.page_size,
            scroll_ttl=config.scroll_ttl,
        )
        return cls(
            driver,
            exporter or IndexExporter(store, config.destination_index),
            progress_interval=config.progress_interval,
            write_workers=config.write_workers,
        )

    # ------------------------------------------------------------------
    def run(self, register: DedupRegister | None = None) -> RunSummary:
        """Scan the source once; ``register`` defaults to a fresh one for this run."""

        register = register if register is not None else DedupRegister()
        summary = RunSummary()
        log = self.logger.bind(index=self.driver.index)
        log.info("extraction_started", page_size=self.driver.page_size, write_workers=self.write_workers)

        executor = ThreadPoolExecutor(self.write_workers, "customer-sync") if self.write_workers > 1 else None
        failed = True
        try:
            with self.driver.scroll() as pages:
                for page in pages:
                    summary.pages += 1
                    accepted = self._select(page, register, summary, log)
                    if executor is None:
                        for customer in accepted:
                            self.exporter.export(customer)
                            self._advance(summary, log)
                    else:
                        self._export_parallel(executor, accepted, summary, log)
            failed = False
        except Exception as exc:
            log.error("extraction_failed", processed=summary.processed, error=str(exc))
            raise
        finally:
            if executor is not None:
                executor.shutdown(wait=True)
            if failed:
                self._flush_after_failure(log)

        self.exporter.flush()
        log.info("extraction_finished", **summary.as_dict())
        return summary

    def _select(
        self,
        page: SearchPage,
        register: DedupRegister,
        summary: RunSummary,
        log: structlog.BoundLogger,
    ) -> list[CanonicalCustomer]:
        accepted: list[CanonicalCustomer] = []
        for hit in page.hits or ():
            result = self.normalizer.normalize(hit)
            if result.customer is None:
                summary.rejected += 1
                log.warning(
                    "document_rejected",
                    doc_id=hit.doc_id,
                    reason=result.reason,
                    customer_id=result.customer_id,
                )
                continue
            customer = result.customer
            if not register.claim(customer.customer_id, customer.email):
                summary.duplicates += 1
                continue
            accepted.append(customer)
        return accepted

    def _export_parallel(
        self,
        executor: ThreadPoolExecutor,
        customers: list[CanonicalCustomer],
        summary: RunSummary,
        log: structlog.BoundLogger,
    ) -> None:
        futures = [executor.submit(self.exporter.export, customer) for customer in customers]
        _, pending = wait(futures, return_when=FIRST_EXCEPTION)
        if pending:
            # a write failed; let the in-flight ones settle before giving up
            for future in pending:
                future.cancel()
            wait(pending)
        first_error: BaseException | None = None
        for future in futures:
            if future.cancelled():
                continue
            error = future.exception()
            if error is None:
                self._advance(summary, log)
            elif first_error is None:
                first_error = error
        if first_error is not None:
            raise first_error

    def _flush_after_failure(self, log: structlog.BoundLogger) -> None:
        try:
            self.exporter.flush()
        except (OSError, SyncError) as exc:
            # keep the error that aborted the run
            log.warning("exporter_flush_failed", error=str(exc))

    def _advance(self, summary: RunSummary, log: structlog.BoundLogger) -> None:
        summary.processed += 1
        if summary.processed % self.progress_interval == 0:
            log.info("customers_indexed", processed=summary.processed)


__all__ = ["ExtractionPipeline", "RunSummary"]
