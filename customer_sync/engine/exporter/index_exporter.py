"""Upsert canonical customers into the destination collection."""

from __future__ import annotations

from ..models import CanonicalCustomer
from ..store import StoreClient
from .base import BaseExporter


class IndexExporter(BaseExporter):
    """Write each customer under its ``customer_id`` so reruns overwrite in place."""

    def __init__(self, store: StoreClient, index: str) -> None:
        self.store = store
        self.index = index

    def export(self, customer: CanonicalCustomer) -> None:
        self.store.upsert(self.index, customer.document_id, customer.to_document())

    def flush(self) -> None:
        # every upsert is sent immediately
        return

    def close(self) -> None:
        # the store client is owned by the caller
        return


__all__ = ["IndexExporter"]
