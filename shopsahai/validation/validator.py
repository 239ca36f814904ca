"""
Validation Gates

DESIGN DECISION: Nothing is written unless it passes these gates:

AMOUNT GATE:
- The amount must have been resolved (heard) at all
- It must be strictly positive
- Unusually large amounts pass with a warning

ENTITY NAME GATE:
- Blank names are rejected
- Placeholder and role words ("unknown", "supplier", "person" and their
  Malayalam equivalents) are rejected, alone or combined
- Names made only of numbers and command words are rejected
  ("purchase 1000" is not a supplier)
- Names longer than the name column are rejected

PAID GATE:
- Paid must be known (a number, or an explicit "nothing")
- Paid may not exceed the total

IMPORTANT: Validation NEVER silently fixes issues.
A failed gate sends the user back to say it again.
"""

import re
from typing import Optional

from shopsahai.config import VoiceSettings, get_settings
from shopsahai.models.command import (
    ParsedAmount,
    ValidationIssue,
    ValidationResult,
)
from shopsahai.nlu.lexicon import DEFAULT_LEXICON, Lexicon
from shopsahai.nlu.numerals import NumeralResolver, clean_token


# Same limit as the supplier / borrower name columns
NAME_MAX_LENGTH = 200


class CommandValidator:
    """
    Runs the validation gates over a proposed record.

    The gates are locale-independent: a Malayalam placeholder is rejected
    even in an English session, because speech recognition mixes both.
    """

    def __init__(
        self,
        lexicon: Optional[Lexicon] = None,
        resolver: Optional[NumeralResolver] = None,
        settings: Optional[VoiceSettings] = None,
    ):
        self._lexicon = lexicon or DEFAULT_LEXICON
        self._resolver = resolver or NumeralResolver(self._lexicon)
        self._settings = settings or get_settings().voice
        self._placeholders = {t.casefold() for t in self._lexicon.placeholder_tokens}
        self._command_words = {
            w.casefold()
            for words in self._lexicon.stopwords.values()
            for w in words
        }
        self._nothing = [
            re.compile(rf"(?<!\w){re.escape(w.casefold())}(?!\w)")
            for w in self._lexicon.nothing_words
        ]

    # =========================================================================
    # ENTITY NAME
    # =========================================================================

    def is_placeholder_name(self, name: Optional[str]) -> bool:
        """
        True when a name is blank, a placeholder, or carries no name content.

        Every token must be a placeholder, command word or number for the
        name to be rejected, so "Kerala Stores" passes while "Unknown
        Supplier" and "purchase 1000" do not.
        """
        if not name or not name.strip():
            return True
        if not any(ch.isalpha() for ch in name):
            return True

        tokens = [t for t in (clean_token(tok) for tok in name.split()) if t]
        if not tokens:
            return True

        return all(
            token in self._placeholders
            or token in self._command_words
            or self._resolver.is_number_token(token)
            for token in tokens
        )

    def check_entity_name(self, name: Optional[str]) -> list[ValidationIssue]:
        if self.is_placeholder_name(name):
            return [ValidationIssue(
                field="entity_name",
                issue_type="placeholder",
                message=f"Name {name!r} is blank or a placeholder",
                severity="error",
            )]
        if len(name.strip()) > NAME_MAX_LENGTH:
            return [ValidationIssue(
                field="entity_name",
                issue_type="too_long",
                message=f"Name is longer than {NAME_MAX_LENGTH} characters",
                severity="error",
            )]
        return []

    # =========================================================================
    # AMOUNTS
    # =========================================================================

    def check_amount(
        self,
        amount: ParsedAmount,
        field: str = "amount",
    ) -> list[ValidationIssue]:
        issues = []

        if not amount.is_resolved:
            issues.append(ValidationIssue(
                field=field,
                issue_type="unresolved",
                message="No amount could be recognised",
                severity="error",
            ))
        elif amount.value <= 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))
        elif amount.value > self._settings.max_reasonable_amount:
            issues.append(ValidationIssue(
                field=field,
                issue_type="suspicious_value",
                message=f"Amount (₹{amount.value:,}) seems unusually high",
                severity="warning",
            ))

        return issues

    def means_nothing(self, text: str) -> bool:
        """True when a reply like "nothing" or "ഒന്നുമില്ല" means zero paid."""
        lowered = (text or "").casefold()
        return any(pattern.search(lowered) for pattern in self._nothing)

    def check_paid(
        self,
        paid: Optional[int],
        total: Optional[int],
    ) -> list[ValidationIssue]:
        if paid is None:
            return [ValidationIssue(
                field="paid",
                issue_type="unresolved",
                message="Amount paid could not be recognised",
                severity="error",
            )]
        if total is not None and paid > total:
            return [ValidationIssue(
                field="paid",
                issue_type="inconsistent",
                message=f"Amount paid (₹{paid:,}) is more than the total (₹{total:,})",
                severity="error",
            )]
        return []

    # =========================================================================
    # FULL RECORD
    # =========================================================================

    def validate(
        self,
        amount: ParsedAmount,
        name: Optional[str] = None,
        check_name: bool = False,
        paid: Optional[int] = None,
        check_paid: bool = False,
    ) -> ValidationResult:
        """
        Run the gates that apply to one record.

        Issues are ordered amount, name, paid; the first error decides
        which question the user is asked again.
        """
        issues = self.check_amount(amount)
        if check_name:
            issues.extend(self.check_entity_name(name))
        if check_paid:
            issues.extend(self.check_paid(paid, amount.value))
        return ValidationResult(issues=issues)
