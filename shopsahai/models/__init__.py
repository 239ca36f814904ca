"""
Data Models Package

This package contains all Pydantic models used in Shop Sahai Voice.
All data flowing through the voice engine must conform to these schemas.
"""

from shopsahai.models.command import (
    BorrowIntent,
    BorrowRecord,
    ConversationState,
    DialogueKind,
    DialogueStep,
    ExpenseIntent,
    IncomeIntent,
    Intent,
    IntentResult,
    Locale,
    NumberScaleEntry,
    Outcome,
    ParsedAmount,
    PurchaseIntent,
    PurchaseRecord,
    TransactionRecord,
    TransactionType,
    UnrecognizedIntent,
    ValidationIssue,
    ValidationResult,
    WriteResult,
)
from shopsahai.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Command models
    "BorrowIntent",
    "BorrowRecord",
    "ConversationState",
    "DialogueKind",
    "DialogueStep",
    "ExpenseIntent",
    "IncomeIntent",
    "Intent",
    "IntentResult",
    "Locale",
    "NumberScaleEntry",
    "Outcome",
    "ParsedAmount",
    "PurchaseIntent",
    "PurchaseRecord",
    "TransactionRecord",
    "TransactionType",
    "UnrecognizedIntent",
    "ValidationIssue",
    "ValidationResult",
    "WriteResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
