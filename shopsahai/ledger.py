"""
Ledger Writer

Turns a validated command into persistence calls and a spoken result.

BUSINESS RULE: Every purchase and every loan given is also cash going
out of the shop, so a purchase/borrow row is always followed by a
mirrored expense transaction for the same total.

DESIGN DECISION: A failed mirror write is reported as PARTIAL, never as
a plain failure. The primary row is already in the books and the user
must be told so, otherwise they would say the command again and create
a duplicate.
"""

from typing import Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from shopsahai.audit import AuditLogger
from shopsahai.models.command import (
    BorrowRecord,
    DialogueKind,
    IntentResult,
    Locale,
    Outcome,
    PurchaseRecord,
    TransactionRecord,
    TransactionType,
    WriteResult,
)
from shopsahai.nlu.lexicon import DEFAULT_LEXICON, Lexicon
from shopsahai.nlu.messages import render
from shopsahai.services.storage import LedgerStorageInterface


logger = structlog.get_logger(__name__)

EntityRecord = Union[PurchaseRecord, BorrowRecord]


# Same limit as TransactionRecord.description
DESCRIPTION_MAX_LENGTH = 500


def voice_description(utterance: str) -> str:
    """Description stored on rows created by voice, cut to the column limit."""
    return f"Added via voice: {utterance}"[:DESCRIPTION_MAX_LENGTH]


class LedgerWriter:
    """Writes records to the persistence collaborator and reports the outcome."""

    def __init__(
        self,
        storage: LedgerStorageInterface,
        lexicon: Optional[Lexicon] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._lexicon = lexicon or DEFAULT_LEXICON
        self._audit_logger = audit_logger or AuditLogger()

    async def _insert(self, record) -> WriteResult:
        """Dispatch to the right insert; unexpected backend errors become failures."""
        try:
            if isinstance(record, TransactionRecord):
                return await self._storage.insert_transaction(record)
            if isinstance(record, PurchaseRecord):
                return await self._storage.insert_purchase(record)
            return await self._storage.insert_borrow(record)
        except Exception as e:
            logger.exception("ledger_insert_raised", record_type=type(record).__name__)
            return WriteResult.failed(str(e))

    # =========================================================================
    # INCOME / EXPENSE
    # =========================================================================

    async def record_transaction(
        self,
        record: TransactionRecord,
        locale: Locale,
        correlation_id: UUID,
        debug: Optional[str] = None,
        warnings: Optional[list[str]] = None,
    ) -> IntentResult:
        kind = record.type.value
        result = await self._insert(record)

        if not result.success:
            await self._audit_logger.log_save_failed(kind, result.error_message or "", correlation_id)
            return IntentResult(
                success=False,
                message=render("save_failed", locale, error=result.error_message),
                outcome=Outcome.PERSISTENCE_FAILED,
                debug=debug,
                warnings=warnings or [],
            )

        await self._audit_logger.log_record_saved(
            kind,
            {"amount": record.amount, "category": record.category, "record_id": result.record_id},
            correlation_id,
        )
        return IntentResult(
            success=True,
            message=render(f"{kind}_saved", locale, amount=record.amount, category=record.category),
            outcome=Outcome.SAVED,
            summary=f"{kind}: ₹{record.amount} ({record.category})",
            debug=debug,
            warnings=warnings or [],
        )

    # =========================================================================
    # PURCHASE / BORROW
    # =========================================================================

    async def record_entity(
        self,
        kind: DialogueKind,
        record: EntityRecord,
        locale: Locale,
        description: str,
        correlation_id: UUID,
        debug: Optional[str] = None,
        warnings: Optional[list[str]] = None,
    ) -> IntentResult:
        """
        Write a purchase/borrow row, then its mirrored expense.

        Outcomes:
        - SAVED: both rows written
        - PARTIAL: primary row written, mirror failed
        - PERSISTENCE_FAILED: primary row failed, mirror not attempted
        """
        if isinstance(record, PurchaseRecord):
            name, total = record.supplier_name, record.total_amount
        else:
            name, total = record.name, record.total_given

        details = {
            "name": name,
            "total": total,
            "paid": record.amount_paid,
            "balance": record.balance,
        }
        summary = f"{kind.value}: {name}, ₹{total} (paid ₹{record.amount_paid}, balance ₹{record.balance})"

        # Mirror is built before any write
        try:
            mirror = TransactionRecord(
                type=TransactionType.EXPENSE,
                amount=total,
                category=self._lexicon.mirror_categories[kind].name(locale),
                description=description[:DESCRIPTION_MAX_LENGTH],
            )
        except ValidationError as e:
            logger.exception("mirror_record_invalid", kind=kind.value)
            await self._audit_logger.log_save_failed(kind.value, str(e), correlation_id)
            return IntentResult(
                success=False,
                message=render("save_failed", locale, error=str(e)),
                outcome=Outcome.PERSISTENCE_FAILED,
                summary=summary,
                debug=debug,
                warnings=warnings or [],
            )

        primary = await self._insert(record)
        if not primary.success:
            await self._audit_logger.log_save_failed(kind.value, primary.error_message or "", correlation_id)
            return IntentResult(
                success=False,
                message=render("save_failed", locale, error=primary.error_message),
                outcome=Outcome.PERSISTENCE_FAILED,
                summary=summary,
                debug=debug,
                warnings=warnings or [],
            )

        await self._audit_logger.log_record_saved(
            kind.value,
            {**details, "record_id": primary.record_id},
            correlation_id,
        )
        saved_message = render(f"{kind.value}_saved", locale, amount=total, name=name)

        mirrored = await self._insert(mirror)
        if not mirrored.success:
            await self._audit_logger.log_mirror_failed(
                kind.value, mirrored.error_message or "", details, correlation_id
            )
            return IntentResult(
                success=True,
                message=render("partial_saved", locale, saved=saved_message, error=mirrored.error_message),
                outcome=Outcome.PARTIAL,
                summary=summary,
                debug=debug,
                warnings=(warnings or []) + [f"Mirrored expense not saved: {mirrored.error_message}"],
            )

        return IntentResult(
            success=True,
            message=saved_message,
            outcome=Outcome.SAVED,
            summary=summary,
            debug=debug,
            warnings=warnings or [],
        )
