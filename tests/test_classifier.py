"""Tests for one-shot command classification."""

import pytest

from shopsahai.models.audit import AuditEventType
from shopsahai.models.command import (
    BorrowIntent,
    ExpenseIntent,
    IncomeIntent,
    Locale,
    Outcome,
    PurchaseIntent,
    TransactionType,
    UnrecognizedIntent,
)
from shopsahai.nlu.classifier import IntentClassifier, keyword_pattern
from shopsahai.nlu.messages import render
from shopsahai.services.storage import InMemoryLedgerStorage


class TestParse:
    """Keyword routing without side effects."""

    @pytest.mark.parametrize("utterance, intent_type", [
        ("income 500 from sales", IncomeIntent),
        ("expense 200 for food", ExpenseIntent),
        ("purchase 1000 from Kerala Stores", PurchaseIntent),
        ("John borrowed 500 rupees", BorrowIntent),
        ("500 വരുമാനം ചേർക്കുക", IncomeIntent),
        ("ജോൺ 500 രൂപ കടം വാങ്ങി", BorrowIntent),
        ("what is the weather", UnrecognizedIntent),
    ])
    def test_routing(self, classifier, utterance, intent_type):
        """Test that each category keyword selects its intent."""
        assert isinstance(classifier.parse(utterance, Locale.EN), intent_type)

    def test_first_match_wins(self, classifier):
        """Test the fixed order income → expense → purchase → borrow."""
        assert classifier.parse("income and expense 300", Locale.EN).kind == "income"
        assert classifier.parse("purchase on loan 300", Locale.EN).kind == "purchase"

    def test_keywords_are_case_insensitive(self, classifier):
        """Test upper-case transcripts."""
        assert classifier.parse("INCOME 500", Locale.EN).kind == "income"

    @pytest.mark.parametrize("utterance", ["excellent service 500", "sloane 300", "silent 200"])
    def test_keywords_start_a_word(self, classifier, utterance):
        """Test that a keyword inside another word does not select an intent."""
        assert isinstance(classifier.parse(utterance, Locale.EN), UnrecognizedIntent)

    def test_keyword_suffixes_still_match(self):
        """Test that inflected English keywords are still recognised."""
        assert keyword_pattern("borrow").search("john borrowed 500")
        assert keyword_pattern("purchase").search("purchased 300")
        assert not keyword_pattern("lent").search("excellent")
        assert keyword_pattern("കടം").search("കടംവാങ്ങി")

    def test_sub_category(self, classifier):
        """Test income/expense sub-category selection and fallback."""
        assert classifier.parse("income 500 from sales", Locale.EN).category == "Sales"
        assert classifier.parse("expense 200 for travel", Locale.EN).category == "Travel"
        assert classifier.parse("expense 200", Locale.EN).category == "Other"
        assert classifier.parse("expense 200", Locale.ML).category == "മറ്റുള്ളവ"

    def test_malayalam_sub_category(self, classifier):
        """Test that Malayalam category words give Malayalam names."""
        intent = classifier.parse("വിൽപനയിൽ നിന്ന് 500 വരുമാനം", Locale.ML)
        assert intent.category == "വിൽപന"
        assert intent.amount.value == 500


class TestIncomeExpense:
    """Transaction commands."""

    @pytest.mark.asyncio
    async def test_income_from_sales(self, classifier, storage):
        """Test 'income 500 from sales' end to end."""
        result = await classifier.classify("income 500 from sales", Locale.EN)

        assert result.success is True
        assert result.outcome == Outcome.SAVED
        assert result.message == "Successfully added income of ₹500 in Sales category."
        assert len(storage.transactions) == 1
        row = storage.transactions[0]
        assert row.type == TransactionType.INCOME
        assert row.amount == 500
        assert row.category == "Sales"
        assert row.description == "Added via voice: income 500 from sales"

    @pytest.mark.asyncio
    async def test_expense_in_malayalam(self, classifier, storage):
        """Test a Malayalam expense with a word amount."""
        result = await classifier.classify("ഭക്ഷണം ചെലവ് രണ്ടായിരം", Locale.ML)

        assert result.success is True
        assert storage.transactions[0].amount == 2000
        assert storage.transactions[0].category == "ഭക്ഷണം"
        assert "വിജയകരമായി" in result.message

    @pytest.mark.asyncio
    async def test_missing_amount_is_not_zero(self, classifier, storage):
        """Test that an unheard amount blocks the write with a hint and a debug trace."""
        result = await classifier.classify("income from sales", Locale.EN)

        assert result.success is False
        assert result.outcome == Outcome.UNRESOLVED_AMOUNT
        assert result.message == render("income_amount_missing", Locale.EN)
        assert "income from sales" in result.debug
        assert storage.write_count == 0

    @pytest.mark.asyncio
    async def test_storage_failure_is_reported(self, make_classifier):
        """Test that the collaborator's error text reaches the user."""
        storage = InMemoryLedgerStorage(fail_transactions="sheet is read-only")
        result = await make_classifier(storage).classify("expense 200 for food", Locale.EN)

        assert result.success is False
        assert result.outcome == Outcome.PERSISTENCE_FAILED
        assert "sheet is read-only" in result.message


class TestPurchaseBorrow:
    """Entity-bearing commands with the mirrored expense."""

    @pytest.mark.asyncio
    async def test_purchase_with_supplier(self, classifier, storage):
        """Test a purchase row plus its mirrored expense."""
        result = await classifier.classify("purchase 1000 from Kerala Stores", Locale.EN)

        assert result.success is True
        assert result.outcome == Outcome.SAVED
        purchase = storage.purchases[0]
        assert purchase.supplier_name == "Kerala Stores"
        assert purchase.total_amount == 1000
        assert purchase.amount_paid == 0
        assert purchase.balance == 1000

        mirror = storage.transactions[0]
        assert mirror.type == TransactionType.EXPENSE
        assert mirror.amount == 1000
        assert mirror.category == "Purchase"

    @pytest.mark.asyncio
    async def test_borrow(self, classifier, storage):
        """Test 'John borrowed 500 rupees'."""
        result = await classifier.classify("John borrowed 500 rupees", Locale.EN)

        assert result.success is True
        assert storage.borrows[0].name == "John"
        assert storage.borrows[0].total_given == 500
        assert storage.transactions[0].category == "Borrow"

    @pytest.mark.asyncio
    async def test_purchase_without_supplier_writes_nothing(self, classifier, storage):
        """Test that 'purchase 1000' is refused instead of saving a placeholder."""
        result = await classifier.classify("purchase 1000", Locale.EN)

        assert result.success is False
        assert result.outcome == Outcome.INVALID_ENTITY
        assert result.message == render("purchase_name_missing", Locale.EN)
        assert "purchase 1000" in result.debug
        assert storage.write_count == 0

    @pytest.mark.asyncio
    async def test_purchase_without_amount(self, classifier, storage):
        """Test the purchase-specific amount hint."""
        result = await classifier.classify("purchase from Kerala Stores", Locale.EN)

        assert result.outcome == Outcome.UNRESOLVED_AMOUNT
        assert "Purchase 1000 from supplier ABC" in result.message
        assert storage.write_count == 0

    @pytest.mark.asyncio
    async def test_mirror_failure_is_partial(self, make_classifier):
        """Test that a failed mirrored expense is reported as partial success."""
        storage = InMemoryLedgerStorage(fail_transactions="quota exceeded")
        result = await make_classifier(storage).classify(
            "purchase 1000 from Kerala Stores", Locale.EN
        )

        assert result.success is True
        assert result.outcome == Outcome.PARTIAL
        assert "quota exceeded" in result.message
        assert len(storage.purchases) == 1
        assert storage.transactions == []
        assert result.warnings

    @pytest.mark.asyncio
    async def test_primary_failure_skips_mirror(self, make_classifier):
        """Test that no mirror is written when the primary row fails."""
        storage = InMemoryLedgerStorage(fail_borrows="offline")
        result = await make_classifier(storage).classify("John borrowed 500 rupees", Locale.EN)

        assert result.success is False
        assert result.outcome == Outcome.PERSISTENCE_FAILED
        assert "offline" in result.message
        assert storage.write_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("utterance, locale", [
        ("borrow one lakh", Locale.EN),
        ("ഒരു ലക്ഷം കടം", Locale.ML),
    ])
    async def test_scale_word_is_not_a_borrower(self, classifier, storage, utterance, locale):
        """Test that a borrow with only an amount never saves a guessed name."""
        result = await classifier.classify(utterance, locale)

        assert result.success is False
        assert result.outcome == Outcome.INVALID_ENTITY
        assert result.message == render("borrow_name_missing", locale)
        assert storage.write_count == 0

    @pytest.mark.asyncio
    async def test_long_utterance_keeps_both_rows(self, classifier, storage):
        """Test that a long transcript is cut to fit the mirror's description."""
        utterance = "purchase 1000 from Kerala Stores " + "please " * 70
        result = await classifier.classify(utterance, Locale.EN)

        assert result.outcome == Outcome.SAVED
        assert storage.purchases[0].supplier_name == "Kerala Stores"
        assert len(storage.transactions) == 1
        assert len(storage.transactions[0].description) <= 500
        assert storage.transactions[0].description.startswith("Added via voice: purchase 1000")

    @pytest.mark.asyncio
    async def test_overlong_name_writes_nothing(self, classifier, storage):
        """Test that a name longer than the name column is refused."""
        result = await classifier.classify("purchase 1000 from " + "Kerala " * 40, Locale.EN)

        assert result.success is False
        assert result.outcome == Outcome.INVALID_ENTITY
        assert storage.write_count == 0


class TestUnrecognizedAndErrors:
    """Informational replies and the error boundary."""

    @pytest.mark.asyncio
    async def test_unrecognized_gives_usage_hint(self, classifier, storage):
        """Test that an unknown command is informational."""
        result = await classifier.classify("what is the weather", Locale.ML)

        assert result.success is True
        assert result.outcome == Outcome.UNRECOGNIZED
        assert result.message == render("usage_hint", Locale.ML)
        assert storage.write_count == 0

    @pytest.mark.asyncio
    async def test_unexpected_error_is_contained(self, resolver, validator, audit_logger, voice_settings, storage):
        """Test that an internal failure becomes an ERROR result."""
        class BrokenExtractor:
            def extract(self, *args, **kwargs):
                raise RuntimeError("boom")

        classifier = IntentClassifier(
            storage,
            resolver=resolver,
            extractor=BrokenExtractor(),
            validator=validator,
            audit_logger=audit_logger,
            settings=voice_settings,
        )
        result = await classifier.classify("purchase 1000 from Kerala Stores", Locale.EN)

        assert result.success is False
        assert result.outcome == Outcome.ERROR
        assert result.message == render("error", Locale.EN)
        assert storage.write_count == 0

    @pytest.mark.asyncio
    async def test_audit_trail(self, classifier, audit_storage):
        """Test that classification and saving are audited under one correlation id."""
        await classifier.classify("income 500 from sales", Locale.EN)

        types = [e.event_type for e in audit_storage.events]
        assert AuditEventType.INTENT_CLASSIFIED in types
        assert AuditEventType.RECORD_SAVED in types
        assert len({e.correlation_id for e in audit_storage.events}) == 1
