from __future__ import annotations

import json

import pytest

from customer_sync.engine import CanonicalCustomer
from customer_sync.engine.exporter import IndexExporter, JsonLinesExporter
from customer_sync.exceptions import ConfigError


def customer(customer_id: int, email: str = "a@x.com") -> CanonicalCustomer:
    return CanonicalCustomer(
        customer_id=customer_id,
        email=email,
        customer_full_name="Eddie Underwood",
        customer_first_name="Eddie",
        customer_last_name="Underwood",
        customer_gender="MALE",
        user="eddie",
    )


def test_index_exporter_upserts_by_customer_id(fake_store_factory) -> None:
    store = fake_store_factory()
    exporter = IndexExporter(store, "customer")

    for item in (customer(38), customer(38, "later@x.com"), customer(12)):
        exporter.export(item)
    exporter.flush()
    exporter.close()

    documents = store.documents("customer")
    assert sorted(documents) == ["12", "38"]
    assert documents["38"]["email"] == "later@x.com"
    assert documents["12"]["customer_phone"] == ""
    assert ("close", None) not in store.calls


def test_jsonl_exporter_writes_one_line_per_customer(tmp_path) -> None:
    target = tmp_path / "out" / "customers.jsonl"
    exporter = JsonLinesExporter(target)

    exporter.export(customer(1))
    exporter.export(customer(2, "b@x.com"))
    exporter.flush()
    exporter.close()

    rows = [json.loads(line) for line in target.read_text(encoding="utf-8").splitlines()]
    assert [row["customer_id"] for row in rows] == [1, 2]
    assert rows[1]["email"] == "b@x.com"
    assert list(rows[0]) == [
        "customer_id",
        "customer_full_name",
        "customer_first_name",
        "customer_last_name",
        "customer_gender",
        "email",
        "customer_phone",
        "user",
    ]


def test_jsonl_exporter_reports_unusable_path(tmp_path) -> None:
    blocker = tmp_path / "taken"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(ConfigError, match="Cannot open output file"):
        JsonLinesExporter(blocker / "customers.jsonl")
