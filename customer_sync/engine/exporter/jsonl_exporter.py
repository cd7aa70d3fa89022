"""Dry-run exporter writing canonical customers to a JSON-lines file."""

from __future__ import annotations

import json
from pathlib import Path
from threading import Lock

from ...exceptions import ConfigError
from ..models import CanonicalCustomer
from .base import BaseExporter


class JsonLinesExporter(BaseExporter):
    def __init__(self, path: Path) -> None:
        self.path = path
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self.path.open("w", encoding="utf-8", newline="")
        except OSError as exc:
            raise ConfigError(f"Cannot open output file {path}: {exc}") from exc
        self._lock = Lock()

    def export(self, customer: CanonicalCustomer) -> None:
        line = json.dumps(customer.to_document(), ensure_ascii=False, default=str)
        with self._lock:
            self._file.write(line)
            self._file.write("\n")

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        self._file.close()


__all__ = ["JsonLinesExporter"]
