"""
Core Data Models for Shop Sahai Voice

These models define the schemas for everything flowing through the voice
command engine:
1. Parsed amounts and number dictionary entries
2. Intents (what the user asked for)
3. Records proposed to the persistence collaborator
4. Results surfaced to the UI and spoken back
5. Per-dialogue conversation state

DESIGN DECISION: An amount we could not hear is represented explicitly
(ParsedAmount with no value). It is NEVER replaced by zero, because a
silent zero would corrupt the shop's books.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Locale(str, Enum):
    """Supported spoken languages."""
    EN = "en"
    ML = "ml"

    @classmethod
    def from_language(cls, language: str) -> "Locale":
        """Map a UI language name ("english", "malayalam") or code to a Locale."""
        value = (language or "").strip().lower()
        if value in ("malayalam", "ml", "ml-in"):
            return cls.ML
        return cls.EN

    @property
    def speech_tag(self) -> str:
        """BCP-47 tag handed to the speech collaborators."""
        return "ml-IN" if self is Locale.ML else "en-US"


class TransactionType(str, Enum):
    """Cash movement direction of a transaction row."""
    INCOME = "income"
    EXPENSE = "expense"


class DialogueKind(str, Enum):
    """The two entity-bearing record types that have a guided dialogue."""
    BORROW = "borrow"
    PURCHASE = "purchase"


class DialogueStep(str, Enum):
    """
    Steps of a guided dialogue.

    Idle → AskEntity → AskAmount → AskPaid → Confirm → Done
    """
    IDLE = "idle"
    ASK_ENTITY = "ask_entity"
    ASK_AMOUNT = "ask_amount"
    ASK_PAID = "ask_paid"
    CONFIRM = "confirm"
    DONE = "done"


class Outcome(str, Enum):
    """
    What happened to a single turn.

    CRITICAL: PARTIAL is distinct from PERSISTENCE_FAILED. When the
    primary row was written but the mirrored expense was not, the user
    must not be told that nothing was saved.
    """
    SAVED = "saved"
    PARTIAL = "partial"
    UNRESOLVED_AMOUNT = "unresolved_amount"
    INVALID_ENTITY = "invalid_entity"
    INVALID_PAID = "invalid_paid"
    PERSISTENCE_FAILED = "persistence_failed"
    UNRECOGNIZED = "unrecognized"
    PROMPT = "prompt"          # Dialogue is asking the next question
    CANCELLED = "cancelled"
    ERROR = "error"


# =============================================================================
# NUMBERS
# =============================================================================

class NumberScaleEntry(BaseModel):
    """
    One entry of the static number dictionary.

    Scale entries (hundred, thousand, lakh, crore and equivalents)
    multiply the running value instead of adding to it.
    """
    model_config = ConfigDict(frozen=True)

    token: str = Field(..., min_length=1)
    locale: Locale
    value: int = Field(..., ge=0)
    is_scale: bool = False


class ParsedAmount(BaseModel):
    """
    Result of resolving a phrase to an amount.

    matched_text is the exact substring of the phrase that produced the
    value. It is stripped from the utterance before name extraction.
    """
    model_config = ConfigDict(frozen=True)

    value: Optional[int] = Field(default=None, ge=0)
    matched_text: Optional[str] = None

    @classmethod
    def unresolved(cls) -> "ParsedAmount":
        return cls()

    @property
    def is_resolved(self) -> bool:
        return self.value is not None

    @property
    def is_positive(self) -> bool:
        return self.value is not None and self.value > 0


# =============================================================================
# INTENTS - one variant per command category
# =============================================================================

class IncomeIntent(BaseModel):
    kind: Literal["income"] = "income"
    utterance: str
    amount: ParsedAmount
    category: str


class ExpenseIntent(BaseModel):
    kind: Literal["expense"] = "expense"
    utterance: str
    amount: ParsedAmount
    category: str


class PurchaseIntent(BaseModel):
    kind: Literal["purchase"] = "purchase"
    utterance: str
    amount: ParsedAmount
    supplier_name: str


class BorrowIntent(BaseModel):
    kind: Literal["borrow"] = "borrow"
    utterance: str
    amount: ParsedAmount
    borrower_name: str


class UnrecognizedIntent(BaseModel):
    """No category keyword matched. Informational, not an error."""
    kind: Literal["unrecognized"] = "unrecognized"
    utterance: str


Intent = Annotated[
    Union[IncomeIntent, ExpenseIntent, PurchaseIntent, BorrowIntent, UnrecognizedIntent],
    Field(discriminator="kind"),
]


# =============================================================================
# RECORDS - proposed to the persistence collaborator, never retained
# =============================================================================

class TransactionRecord(BaseModel):
    """An income or expense row."""
    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionType
    amount: int = Field(..., gt=0, description="Amount in INR")
    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)


class PurchaseRecord(BaseModel):
    """A purchase from a supplier, possibly partly paid."""
    model_config = ConfigDict(str_strip_whitespace=True)

    supplier_name: str = Field(..., min_length=1, max_length=200)
    total_amount: int = Field(..., gt=0)
    amount_paid: int = Field(default=0, ge=0)

    @property
    def balance(self) -> int:
        return self.total_amount - self.amount_paid

    @model_validator(mode='after')
    def validate_paid(self) -> 'PurchaseRecord':
        if self.amount_paid > self.total_amount:
            raise ValueError("Amount paid cannot exceed total amount")
        return self


class BorrowRecord(BaseModel):
    """Money given to a borrower, possibly partly repaid."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    total_given: int = Field(..., gt=0)
    amount_paid: int = Field(default=0, ge=0)

    @property
    def balance(self) -> int:
        return self.total_given - self.amount_paid

    @model_validator(mode='after')
    def validate_paid(self) -> 'BorrowRecord':
        if self.amount_paid > self.total_given:
            raise ValueError("Amount paid cannot exceed total given")
        return self


class WriteResult(BaseModel):
    """Outcome of one persistence call."""

    success: bool
    error_message: Optional[str] = None
    record_id: Optional[str] = None

    @classmethod
    def ok(cls, record_id: Optional[str] = None) -> "WriteResult":
        return cls(success=True, record_id=record_id)

    @classmethod
    def failed(cls, error_message: str) -> "WriteResult":
        return cls(success=False, error_message=error_message)


# =============================================================================
# RESULTS AND STATE
# =============================================================================

class IntentResult(BaseModel):
    """
    Externally visible outcome of one turn.

    message is spoken and displayed. debug is kept for diagnosing
    recognition failures and is never spoken.
    """

    success: bool
    message: str
    outcome: Outcome
    summary: Optional[str] = None
    debug: Optional[str] = None
    warnings: list[str] = Field(default_factory=list)


class ConversationState(BaseModel):
    """
    Slots of one guided dialogue.

    Slots hold the text we will confirm with the user: the resolved
    amount as digits, or the raw reply when it could not be resolved
    (it is validated at confirm time).
    """
    model_config = ConfigDict(validate_assignment=True)

    kind: DialogueKind
    step: DialogueStep = DialogueStep.IDLE
    entity_name: str = ""
    amount: str = ""
    paid: str = ""

    @property
    def is_active(self) -> bool:
        return self.step != DialogueStep.IDLE

    def clear(self, step: DialogueStep = DialogueStep.IDLE) -> None:
        """Discard all slots and move to the given step."""
        self.entity_name = ""
        self.amount = ""
        self.paid = ""
        self.step = step


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue (amount, entity_name, paid)"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'unresolved', 'placeholder', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Description of the issue for logs and debug traces"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """
    Result of running the validation gates over one proposed record.

    Errors block persistence. Warnings are logged and attached to the
    debug trace but do not block.
    """

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]

    def first_error(self) -> Optional[ValidationIssue]:
        for issue in self.issues:
            if issue.severity == "error":
                return issue
        return None
