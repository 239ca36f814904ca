"""
Intent Classifier - one-shot command handling

Routes a single utterance to income, expense, purchase or borrow by
keyword, extracts the amount (and category or name), runs the
validation gates, and writes the record.

DESIGN DECISION: Routing is an ordered list of (predicate, builder)
rules producing a typed Intent. First match wins, in this order:
income → expense → purchase → borrow → unrecognized.

CRITICAL BOUNDARIES:
- An amount that was not heard is NEVER saved as zero
- A placeholder name ("Unknown Supplier") is NEVER saved
- Every failure carries a debug trace of what was heard and extracted;
  the trace is logged, never spoken
- Nothing escapes classify(): every path returns an IntentResult
"""

import re
from typing import Callable, Optional
from uuid import UUID

import structlog

from shopsahai.audit import AuditLogger, create_correlation_id
from shopsahai.config import VoiceSettings, get_settings
from shopsahai.ledger import LedgerWriter, voice_description
from shopsahai.models.command import (
    BorrowIntent,
    BorrowRecord,
    DialogueKind,
    ExpenseIntent,
    IncomeIntent,
    Intent,
    IntentResult,
    Locale,
    Outcome,
    ParsedAmount,
    PurchaseIntent,
    PurchaseRecord,
    TransactionRecord,
    TransactionType,
    UnrecognizedIntent,
)
from shopsahai.nlu.entities import EntityExtractor
from shopsahai.nlu.lexicon import DEFAULT_LEXICON, CategoryRule, Lexicon
from shopsahai.nlu.messages import render
from shopsahai.nlu.numerals import NumeralResolver
from shopsahai.services.storage import LedgerStorageInterface
from shopsahai.validation import CommandValidator


logger = structlog.get_logger(__name__)

Predicate = Callable[[str], bool]
Builder = Callable[[str, Locale], Intent]


def keyword_pattern(keyword: str) -> re.Pattern:
    """
    Match a keyword in a casefolded utterance.

    English keywords must start a word ("lent" matches "lent", not
    "excellent") but may carry a suffix ("borrowed"). Malayalam keywords
    match anywhere, since they are inflected in place.
    """
    keyword = keyword.casefold()
    if keyword.isascii():
        return re.compile(rf"(?<![a-z]){re.escape(keyword)}")
    return re.compile(re.escape(keyword))


def debug_trace(utterance: str, amount: Optional[ParsedAmount] = None, **extracted) -> str:
    """What was heard and what was pulled out of it, for diagnosis."""
    parts = [f"utterance={utterance!r}"]
    if amount is not None:
        parts.append(f"amount={amount.value}")
        parts.append(f"matched={amount.matched_text!r}")
    parts.extend(f"{key}={value!r}" for key, value in extracted.items())
    return "; ".join(parts)


class IntentClassifier:
    """
    One-shot voice command classifier.

    Usage:
        classifier = IntentClassifier(storage)
        result = await classifier.classify("income 500 from sales", Locale.EN)
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        lexicon: Optional[Lexicon] = None,
        resolver: Optional[NumeralResolver] = None,
        extractor: Optional[EntityExtractor] = None,
        validator: Optional[CommandValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[VoiceSettings] = None,
    ):
        self._settings = settings or get_settings().voice
        self._lexicon = lexicon or DEFAULT_LEXICON
        self._resolver = resolver or NumeralResolver(self._lexicon)
        self._extractor = extractor or EntityExtractor(
            self._lexicon,
            self._resolver,
            fuzzy_threshold=self._settings.fuzzy_match_threshold,
            fallback_tokens=self._settings.name_fallback_tokens,
        )
        self._validator = validator or CommandValidator(
            self._lexicon, self._resolver, self._settings
        )
        self._audit_logger = audit_logger or AuditLogger()
        self._writer = LedgerWriter(storage, self._lexicon, self._audit_logger)

        self._rules: list[tuple[Predicate, Builder]] = [
            (self._mentions("income"), self._income_intent),
            (self._mentions("expense"), self._expense_intent),
            (self._mentions("purchase"), self._purchase_intent),
            (self._mentions("borrow"), self._borrow_intent),
        ]

    # =========================================================================
    # PARSING - pure, no side effects
    # =========================================================================

    def _mentions(self, category: str) -> Predicate:
        patterns = tuple(keyword_pattern(k) for k in self._lexicon.category_keywords[category])

        def predicate(lowered: str) -> bool:
            return any(p.search(lowered) for p in patterns)

        return predicate

    def parse(self, utterance: str, locale: Locale) -> Intent:
        """Classify an utterance without writing anything."""
        lowered = utterance.casefold()
        for matches, build in self._rules:
            if matches(lowered):
                return build(utterance, locale)
        return UnrecognizedIntent(utterance=utterance)

    @staticmethod
    def _pick_category(
        lowered: str,
        rules: tuple[CategoryRule, ...],
        fallback: CategoryRule,
        locale: Locale,
    ) -> str:
        for rule in rules:
            if any(keyword_pattern(keyword).search(lowered) for keyword in rule.keywords):
                return rule.name(locale)
        return fallback.name(locale)

    def _income_intent(self, utterance: str, locale: Locale) -> IncomeIntent:
        return IncomeIntent(
            utterance=utterance,
            amount=self._resolver.resolve(utterance),
            category=self._pick_category(
                utterance.casefold(),
                self._lexicon.income_categories,
                self._lexicon.other_category,
                locale,
            ),
        )

    def _expense_intent(self, utterance: str, locale: Locale) -> ExpenseIntent:
        return ExpenseIntent(
            utterance=utterance,
            amount=self._resolver.resolve(utterance),
            category=self._pick_category(
                utterance.casefold(),
                self._lexicon.expense_categories,
                self._lexicon.other_category,
                locale,
            ),
        )

    def _extract_name(self, utterance: str, amount: ParsedAmount, kind: DialogueKind, locale: Locale) -> str:
        return self._extractor.extract(
            utterance,
            amount.matched_text,
            locale,
            self._lexicon.references_for(kind, locale),
        )

    def _purchase_intent(self, utterance: str, locale: Locale) -> PurchaseIntent:
        amount = self._resolver.resolve(utterance)
        return PurchaseIntent(
            utterance=utterance,
            amount=amount,
            supplier_name=self._extract_name(utterance, amount, DialogueKind.PURCHASE, locale),
        )

    def _borrow_intent(self, utterance: str, locale: Locale) -> BorrowIntent:
        amount = self._resolver.resolve(utterance)
        return BorrowIntent(
            utterance=utterance,
            amount=amount,
            borrower_name=self._extract_name(utterance, amount, DialogueKind.BORROW, locale),
        )

    # =========================================================================
    # CLASSIFY - parse, gate, write
    # =========================================================================

    async def classify(
        self,
        utterance: str,
        locale: Locale,
        correlation_id: Optional[UUID] = None,
    ) -> IntentResult:
        """
        Classify an utterance and, if it passes the gates, write it.

        Never raises. Unexpected errors become an ERROR result with a
        generic "please try again" message.
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            intent = self.parse(utterance, locale)
            await self._audit_logger.log_intent(intent.kind, utterance, correlation_id)
            logger.info("intent_classified", kind=intent.kind, locale=locale.value)

            if isinstance(intent, IncomeIntent):
                return await self._handle_transaction(intent, TransactionType.INCOME, locale, correlation_id)
            if isinstance(intent, ExpenseIntent):
                return await self._handle_transaction(intent, TransactionType.EXPENSE, locale, correlation_id)
            if isinstance(intent, PurchaseIntent):
                return await self._handle_entity(
                    DialogueKind.PURCHASE, intent, intent.supplier_name, locale, correlation_id
                )
            if isinstance(intent, BorrowIntent):
                return await self._handle_entity(
                    DialogueKind.BORROW, intent, intent.borrower_name, locale, correlation_id
                )

            # Not a command: informational, answered with a usage hint
            return IntentResult(
                success=True,
                message=render("usage_hint", locale),
                outcome=Outcome.UNRECOGNIZED,
                debug=debug_trace(utterance),
            )

        except Exception as e:
            logger.exception("classification_failed", utterance=utterance)
            await self._audit_logger.log_error(
                error_type="classification_error",
                error_message=str(e),
                details={"utterance": utterance},
                correlation_id=correlation_id,
            )
            return IntentResult(
                success=False,
                message=render("error", locale),
                outcome=Outcome.ERROR,
                debug=debug_trace(utterance, error=str(e)),
            )

    async def _handle_transaction(
        self,
        intent,
        type_: TransactionType,
        locale: Locale,
        correlation_id: UUID,
    ) -> IntentResult:
        debug = debug_trace(intent.utterance, intent.amount, category=intent.category)
        validation = self._validator.validate(intent.amount)

        if validation.has_errors:
            await self._audit_logger.log_amount_unresolved(type_.value, debug, correlation_id)
            return IntentResult(
                success=False,
                message=render(f"{type_.value}_amount_missing", locale),
                outcome=Outcome.UNRESOLVED_AMOUNT,
                debug=debug,
            )

        if validation.warnings:
            logger.warning("amount_warning", warnings=validation.warnings, debug=debug)

        record = TransactionRecord(
            type=type_,
            amount=intent.amount.value,
            category=intent.category,
            description=voice_description(intent.utterance),
        )
        return await self._writer.record_transaction(
            record, locale, correlation_id, debug=debug, warnings=validation.warnings
        )

    async def _handle_entity(
        self,
        kind: DialogueKind,
        intent,
        name: str,
        locale: Locale,
        correlation_id: UUID,
    ) -> IntentResult:
        debug = debug_trace(intent.utterance, intent.amount, name=name)
        validation = self._validator.validate(intent.amount, name=name, check_name=True)
        error = validation.first_error()

        if error is not None and error.field == "amount":
            await self._audit_logger.log_amount_unresolved(kind.value, debug, correlation_id)
            return IntentResult(
                success=False,
                message=render(f"{kind.value}_amount_missing", locale),
                outcome=Outcome.UNRESOLVED_AMOUNT,
                debug=debug,
            )

        if error is not None:
            await self._audit_logger.log_entity_rejected(kind.value, name, debug, correlation_id)
            return IntentResult(
                success=False,
                message=render(f"{kind.value}_name_missing", locale),
                outcome=Outcome.INVALID_ENTITY,
                debug=debug,
            )

        if validation.warnings:
            logger.warning("amount_warning", warnings=validation.warnings, debug=debug)

        # A one-shot command carries no payment, so the whole amount is owed
        if kind is DialogueKind.PURCHASE:
            record = PurchaseRecord(supplier_name=name, total_amount=intent.amount.value, amount_paid=0)
        else:
            record = BorrowRecord(name=name, total_given=intent.amount.value, amount_paid=0)

        return await self._writer.record_entity(
            kind,
            record,
            locale,
            voice_description(intent.utterance),
            correlation_id,
            debug=debug,
            warnings=validation.warnings,
        )
