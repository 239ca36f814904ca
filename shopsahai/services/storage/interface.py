"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the persistence
collaborator. This allows us to:
1. Swap Google Sheets for the shop's real datastore
2. Use in-memory storage for testing
3. Keep the voice engine decoupled from any schema

The voice engine only ever PROPOSES records. It never reads them back
and never retains them after the write call returns.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from shopsahai.models.command import (
    BorrowRecord,
    PurchaseRecord,
    TransactionRecord,
    WriteResult,
)
from shopsahai.models.audit import AuditEvent


class LedgerStorageInterface(ABC):
    """
    Abstract interface for the three record writes the voice engine makes.

    Implementations report failures through WriteResult instead of
    raising, so the caller can tell a failed mirror write apart from a
    failed primary write.
    """

    @abstractmethod
    async def insert_transaction(self, record: TransactionRecord) -> WriteResult:
        """
        Insert an income or expense row.

        Args:
            record: type, amount, category and description

        Returns:
            WriteResult with the backend's error text on failure
        """
        pass

    @abstractmethod
    async def insert_purchase(self, record: PurchaseRecord) -> WriteResult:
        """
        Insert a purchase row (supplier, total, paid, balance).

        Args:
            record: The purchase; balance is derived from total and paid

        Returns:
            WriteResult with the backend's error text on failure
        """
        pass

    @abstractmethod
    async def insert_borrow(self, record: BorrowRecord) -> WriteResult:
        """
        Insert a borrow row (name, total given, paid, balance).

        Args:
            record: The borrow; balance is derived from total and paid

        Returns:
            WriteResult with the backend's error text on failure
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (one utterance or one dialogue).

        Args:
            correlation_id: The correlation identifier

        Returns:
            List of related events in chronological order
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Worksheet or spreadsheet not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
