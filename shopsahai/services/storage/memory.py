"""
In-Memory Storage Implementation

Used for tests, for the console driver, and whenever no real backend is
configured. Rows live in plain lists for the lifetime of the process.
"""

from typing import Optional
from uuid import UUID, uuid4

from shopsahai.models.audit import AuditEvent
from shopsahai.models.command import (
    BorrowRecord,
    PurchaseRecord,
    TransactionRecord,
    WriteResult,
)
from shopsahai.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """
    List-backed ledger.

    fail_transactions / fail_purchases / fail_borrows make the matching
    insert report a failure, to exercise the partial and failed paths.
    """

    def __init__(
        self,
        fail_transactions: Optional[str] = None,
        fail_purchases: Optional[str] = None,
        fail_borrows: Optional[str] = None,
    ):
        self.transactions: list[TransactionRecord] = []
        self.purchases: list[PurchaseRecord] = []
        self.borrows: list[BorrowRecord] = []
        self._fail_transactions = fail_transactions
        self._fail_purchases = fail_purchases
        self._fail_borrows = fail_borrows

    async def insert_transaction(self, record: TransactionRecord) -> WriteResult:
        if self._fail_transactions:
            return WriteResult.failed(self._fail_transactions)
        self.transactions.append(record)
        return WriteResult.ok(str(uuid4()))

    async def insert_purchase(self, record: PurchaseRecord) -> WriteResult:
        if self._fail_purchases:
            return WriteResult.failed(self._fail_purchases)
        self.purchases.append(record)
        return WriteResult.ok(str(uuid4()))

    async def insert_borrow(self, record: BorrowRecord) -> WriteResult:
        if self._fail_borrows:
            return WriteResult.failed(self._fail_borrows)
        self.borrows.append(record)
        return WriteResult.ok(str(uuid4()))

    @property
    def write_count(self) -> int:
        return len(self.transactions) + len(self.purchases) + len(self.borrows)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self.events if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events
