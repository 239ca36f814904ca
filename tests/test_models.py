"""
Tests for Shop Sahai Voice

Test strategy:
1. Unit tests for individual components (models, resolver, validators)
2. Flow tests for classification, dialogues and the session loop
   (in-memory storage, recording speech fakes)
3. No real Google Sheets or speech calls in tests
"""

import pytest
from uuid import uuid4

from pydantic import TypeAdapter, ValidationError

import shopsahai.services.storage as storage_pkg
from shopsahai.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from shopsahai.models.command import (
    BorrowRecord,
    ConversationState,
    DialogueKind,
    DialogueStep,
    Intent,
    Locale,
    ParsedAmount,
    PurchaseIntent,
    PurchaseRecord,
    TransactionRecord,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    WriteResult,
)


class TestAmountModels:
    """Tests for ParsedAmount."""

    def test_unresolved_is_not_zero(self):
        """Test that an unresolved amount carries no value."""
        amount = ParsedAmount.unresolved()
        assert amount.value is None
        assert not amount.is_resolved
        assert not amount.is_positive

    def test_zero_is_resolved_but_not_positive(self):
        """Test the difference between 'heard zero' and 'heard nothing'."""
        amount = ParsedAmount(value=0, matched_text="0")
        assert amount.is_resolved
        assert not amount.is_positive

    def test_rejects_negative(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValidationError):
            ParsedAmount(value=-5, matched_text="-5")


class TestRecordModels:
    """Tests for records handed to storage."""

    def test_transaction_record_creation(self):
        """Test TransactionRecord model creation."""
        record = TransactionRecord(
            type=TransactionType.INCOME,
            amount=500,
            category="  Sales  ",
        )
        assert record.category == "Sales"
        assert record.description == ""

    def test_transaction_record_rejects_zero(self):
        """Test that a zero amount never reaches storage."""
        with pytest.raises(ValidationError):
            TransactionRecord(type=TransactionType.EXPENSE, amount=0, category="Food")

    def test_purchase_balance(self):
        """Test balance is total minus paid."""
        record = PurchaseRecord(supplier_name="Kerala Stores", total_amount=1000, amount_paid=400)
        assert record.balance == 600

    def test_purchase_paid_cannot_exceed_total(self):
        """Test that overpayment is rejected."""
        with pytest.raises(ValueError, match="Amount paid cannot exceed total amount"):
            PurchaseRecord(supplier_name="Kerala Stores", total_amount=500, amount_paid=800)

    def test_borrow_defaults_to_nothing_paid(self):
        """Test BorrowRecord defaults."""
        record = BorrowRecord(name="Ramesh", total_given=500)
        assert record.amount_paid == 0
        assert record.balance == 500

    def test_borrow_rejects_blank_name(self):
        """Test that a blank name is rejected after stripping."""
        with pytest.raises(ValidationError):
            BorrowRecord(name="   ", total_given=500)

    def test_write_result(self):
        """Test WriteResult constructors."""
        assert WriteResult.ok("row-3").success is True
        failed = WriteResult.failed("quota exceeded")
        assert failed.success is False
        assert failed.error_message == "quota exceeded"


class TestIntentModels:
    """Tests for the intent union."""

    def test_discriminated_by_kind(self):
        """Test that the kind field selects the intent variant."""
        intent = TypeAdapter(Intent).validate_python({
            "kind": "purchase",
            "utterance": "purchase 1000 from Kerala Stores",
            "amount": {"value": 1000, "matched_text": "1000"},
            "supplier_name": "Kerala Stores",
        })
        assert isinstance(intent, PurchaseIntent)
        assert intent.amount.value == 1000

    def test_locale_from_language(self):
        """Test UI language names map to locales."""
        assert Locale.from_language("malayalam") is Locale.ML
        assert Locale.from_language("English") is Locale.EN
        assert Locale.from_language("") is Locale.EN
        assert Locale.ML.speech_tag == "ml-IN"


class TestConversationState:
    """Tests for dialogue slots."""

    def test_clear(self):
        """Test that clear() empties the slots and sets the step."""
        state = ConversationState(kind=DialogueKind.BORROW)
        state.entity_name = "Ramesh"
        state.amount = "500"
        state.step = DialogueStep.CONFIRM

        state.clear(DialogueStep.ASK_ENTITY)

        assert state.entity_name == ""
        assert state.amount == ""
        assert state.step == DialogueStep.ASK_ENTITY
        assert state.is_active

    def test_idle_is_not_active(self):
        """Test the default step."""
        assert not ConversationState(kind=DialogueKind.PURCHASE).is_active

    def test_assignment_is_validated(self):
        """Test that an unknown step is rejected."""
        state = ConversationState(kind=DialogueKind.PURCHASE)
        with pytest.raises(ValidationError):
            state.step = "somewhere"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.UTTERANCE_RECEIVED,
            description="Transcript received",
        )
        assert event.event_type == AuditEventType.UTTERANCE_RECEIVED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_SAVED,
            description="Purchase saved",
            details={"supplier_name": "Kerala Stores", "total": 1000},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "record_saved"
        assert log_dict["details"]["supplier_name"] == "Kerala Stores"

    def test_audit_event_to_sheets_row(self):
        """Test conversion to sheets row."""
        event = AuditEvent(
            event_type=AuditEventType.USER_CONFIRMED,
            description="User confirmed dialogue summary",
            is_user_action=True,
        )
        row = event.to_sheets_row()
        assert len(row) == 10  # Expected number of columns
        assert row[2] == "user_confirmed"  # event_type
        assert row[9] == "True"  # is_user_action

    def test_audit_event_builder_utterance_received(self):
        """Test AuditEventBuilder.utterance_received."""
        correlation_id = uuid4()

        event = AuditEventBuilder.utterance_received(
            utterance="income 500 from sales",
            locale="en",
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.UTTERANCE_RECEIVED
        assert event.correlation_id == correlation_id
        assert event.details["utterance"] == "income 500 from sales"
        assert event.is_user_action is True

    def test_audit_event_builder_entity_rejected_long_name(self):
        """Test that a very long rejected name still fits the description."""
        event = AuditEventBuilder.entity_rejected(
            entity_type="purchase",
            name="x" * 1000,
            debug="utterance=...",
            correlation_id=uuid4(),
        )
        assert event.severity == AuditSeverity.WARNING
        assert len(event.description) <= 500
        assert len(event.details["name"]) == 1000

    def test_audit_event_builder_mirror_save_failed(self):
        """Test AuditEventBuilder.mirror_save_failed."""
        event = AuditEventBuilder.mirror_save_failed(
            entity_type="borrow",
            error_message="quota exceeded",
            details={"name": "Ramesh"},
            correlation_id=uuid4(),
        )
        assert event.event_type == AuditEventType.MIRROR_SAVE_FAILED
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "quota exceeded"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="unresolved",
                    message="No amount heard",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1
        assert result.first_error().field == "amount"

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="suspicious_value",
                    message="Unusually large amount",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0
        assert result.warnings == ["Unusually large amount"]

    def test_severity_is_restricted(self):
        """Test that unknown severities are rejected."""
        with pytest.raises(ValidationError):
            ValidationIssue(field="amount", issue_type="x", message="x", severity="fatal")


class TestStorageErrors:
    """Tests for the storage exception hierarchy."""

    def test_backend_errors_share_a_base(self):
        """Test that every exported storage error is a StorageError."""
        assert issubclass(storage_pkg.NotFoundError, storage_pkg.StorageError)
        assert issubclass(storage_pkg.ConnectionError, storage_pkg.StorageError)
        # Rows are append-only, so no backend reports duplicates
        assert not hasattr(storage_pkg, "DuplicateError")
        assert "DuplicateError" not in storage_pkg.__all__


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
