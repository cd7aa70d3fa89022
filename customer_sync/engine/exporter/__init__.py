"""Exporter SPI and implementations."""

from .base import BaseExporter
from .index_exporter import IndexExporter
from .jsonl_exporter import JsonLinesExporter

__all__ = ["BaseExporter", "IndexExporter", "JsonLinesExporter"]
