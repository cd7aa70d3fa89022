"""Destination writer contract."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import CanonicalCustomer


class BaseExporter(ABC):
    """Where canonical customers end up; one ``export`` call per unique customer."""

    @abstractmethod
    def export(self, customer: CanonicalCustomer) -> None:
        """Persist a single customer, replacing any previous version."""

    @abstractmethod
    def flush(self) -> None:
        """Flush buffered data to destination."""

    @abstractmethod
    def close(self) -> None:
        """Release underlying resources."""


__all__ = ["BaseExporter"]
