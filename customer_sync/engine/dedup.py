"""Run-scoped register of customer identities already emitted."""

from __future__ import annotations

from threading import Lock


class DedupRegister:
    """Map ``customer_id`` to the email it was first seen with.

    Append-only: entries are never replaced or evicted. A fresh register is
    created per run and nothing is persisted.
    """

    def __init__(self) -> None:
        self._emails: dict[int, str] = {}
        self._lock = Lock()

    def seen(self, customer_id: int) -> bool:
        return customer_id in self._emails

    def record(self, customer_id: int, email: str) -> None:
        self._emails.setdefault(customer_id, email)

    def claim(self, customer_id: int, email: str) -> bool:
        """Record the id if absent; return ``True`` only for the first claim."""

        with self._lock:
            if customer_id in self._emails:
                return False
            self._emails[customer_id] = email
            return True

    def email_for(self, customer_id: int) -> str | None:
        return self._emails.get(customer_id)

    def __contains__(self, customer_id: object) -> bool:
        return customer_id in self._emails

    def __len__(self) -> int:
        return len(self._emails)


__all__ = ["DedupRegister"]
