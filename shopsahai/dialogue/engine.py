"""
Dialogue Engine - guided Borrow and Purchase entry

Each dialogue collects three slots over several turns:

    Idle → AskEntity → AskAmount → AskPaid → Confirm → Done

RULES:
- Only start() leaves Idle
- At Confirm, only a yes/no reply changes the step; anything else
  repeats the question
- "No" at Confirm goes back to AskAmount
- Reset (start over) and cancel work in AskEntity, AskAmount and AskPaid
- Slots are validated at Confirm; a failed slot is asked again

DESIGN DECISION: AskAmount and AskPaid never block. An unresolved reply
is kept as raw text so the user sees what was heard in the confirmation
summary; it cannot pass the gates at Confirm.
"""

import re
from typing import Optional
from uuid import UUID

import structlog

from shopsahai.audit import AuditLogger, create_correlation_id
from shopsahai.ledger import LedgerWriter, voice_description
from shopsahai.models.command import (
    BorrowRecord,
    ConversationState,
    DialogueKind,
    DialogueStep,
    IntentResult,
    Locale,
    Outcome,
    ParsedAmount,
    PurchaseRecord,
)
from shopsahai.nlu.classifier import debug_trace
from shopsahai.nlu.lexicon import DEFAULT_LEXICON, Lexicon
from shopsahai.nlu.messages import render
from shopsahai.nlu.numerals import NumeralResolver
from shopsahai.validation import CommandValidator


logger = structlog.get_logger(__name__)

# Steps in which reset/cancel are recognised
_COLLECTING = (DialogueStep.ASK_ENTITY, DialogueStep.ASK_AMOUNT, DialogueStep.ASK_PAID)


def _compile(patterns) -> list[re.Pattern]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


class DialogueMachine:
    """
    One guided conversation (Borrow or Purchase).

    The machine owns its ConversationState and a correlation id that
    ties together every audit event of one dialogue.
    """

    def __init__(
        self,
        kind: DialogueKind,
        writer: LedgerWriter,
        resolver: Optional[NumeralResolver] = None,
        validator: Optional[CommandValidator] = None,
        lexicon: Optional[Lexicon] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.kind = kind
        self.state = ConversationState(kind=kind)
        self.correlation_id: Optional[UUID] = None

        self._writer = writer
        self._lexicon = lexicon or DEFAULT_LEXICON
        self._resolver = resolver or NumeralResolver(self._lexicon)
        self._validator = validator or CommandValidator(self._lexicon, self._resolver)
        self._audit_logger = audit_logger or AuditLogger()

        self._affirmative = _compile(self._lexicon.affirmative_patterns)
        self._negative = _compile(self._lexicon.negative_patterns)
        self._reset = _compile(self._lexicon.reset_patterns)
        self._cancel = _compile(self._lexicon.cancel_patterns)

    @property
    def step(self) -> DialogueStep:
        return self.state.step

    @property
    def is_active(self) -> bool:
        return self.state.is_active

    # =========================================================================
    # PROMPTS
    # =========================================================================

    def summary(self, locale: Locale) -> str:
        """Confirmation summary of the current slots."""
        return render(
            f"confirm_{self.kind.value}",
            locale,
            name=self.state.entity_name,
            amount=self.state.amount,
            paid=self.state.paid,
        )

    def current_prompt(self, locale: Locale) -> str:
        """The question the dialogue is waiting on."""
        step = self.state.step
        if step == DialogueStep.ASK_ENTITY:
            return render(f"ask_{self.kind.value}_name", locale)
        if step == DialogueStep.ASK_AMOUNT:
            return render(f"ask_{self.kind.value}_amount", locale)
        if step == DialogueStep.ASK_PAID:
            return render(f"ask_{self.kind.value}_paid", locale)
        if step == DialogueStep.CONFIRM:
            return self.summary(locale)
        return ""

    def _prompt(self, locale: Locale, prefix: Optional[str] = None, **extra) -> IntentResult:
        message = self.current_prompt(locale)
        if prefix:
            message = f"{prefix} {message}"
        fields = {"success": True, "message": message, "outcome": Outcome.PROMPT}
        if self.state.step == DialogueStep.CONFIRM:
            fields["summary"] = self.summary(locale)
        fields.update(extra)
        return IntentResult(**fields)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self, locale: Locale, correlation_id: Optional[UUID] = None) -> IntentResult:
        """Begin a new conversation and ask for the name."""
        self.correlation_id = correlation_id or create_correlation_id()
        self.state.clear(DialogueStep.ASK_ENTITY)
        await self._audit_logger.log_dialogue_started(self.kind.value, self.correlation_id)
        logger.info("dialogue_started", kind=self.kind.value, locale=locale.value)
        return self._prompt(locale)

    async def cancel(self, locale: Locale) -> IntentResult:
        """Discard all slots and return to Idle."""
        if self.correlation_id is not None:
            await self._audit_logger.log_dialogue_cancelled(self.kind.value, self.correlation_id)
        self.state.clear(DialogueStep.IDLE)
        return IntentResult(
            success=True,
            message=render("dialogue_cancelled", locale),
            outcome=Outcome.CANCELLED,
        )

    def acknowledge(self) -> None:
        """Return a finished dialogue to Idle once its result was delivered."""
        if self.state.step == DialogueStep.DONE:
            self.state.clear(DialogueStep.IDLE)
            self.correlation_id = None

    def edit(
        self,
        locale: Locale,
        entity_name: Optional[str] = None,
        amount: Optional[str] = None,
        paid: Optional[str] = None,
    ) -> IntentResult:
        """
        Patch slots from the confirmation screen.

        Only allowed at Confirm; the summary is recomposed. Values are
        checked by the gates when the user says yes.
        """
        if self.state.step != DialogueStep.CONFIRM:
            return self._prompt(locale, success=False)

        if entity_name is not None:
            self.state.entity_name = entity_name.strip()
        if amount is not None:
            self.state.amount = str(amount).strip()
        if paid is not None:
            self.state.paid = str(paid).strip()
        return self._prompt(locale)

    # =========================================================================
    # TURN HANDLING
    # =========================================================================

    async def handle(self, utterance: str, locale: Locale) -> IntentResult:
        """
        Advance the conversation by one reply.

        Never raises; an unexpected error leaves the step unchanged.
        """
        try:
            return await self._advance(utterance.strip(), locale)
        except Exception as e:
            logger.exception("dialogue_turn_failed", kind=self.kind.value, step=self.state.step.value)
            await self._audit_logger.log_error(
                error_type="dialogue_error",
                error_message=str(e),
                details={"utterance": utterance, "step": self.state.step.value},
                correlation_id=self.correlation_id,
            )
            return IntentResult(
                success=False,
                message=render("error", locale),
                outcome=Outcome.ERROR,
                debug=debug_trace(utterance, step=self.state.step.value, error=str(e)),
            )

    async def _advance(self, reply: str, locale: Locale) -> IntentResult:
        step = self.state.step

        if step == DialogueStep.IDLE:
            # Not started: only start() may leave Idle
            return IntentResult(
                success=False,
                message=render("usage_hint", locale),
                outcome=Outcome.UNRECOGNIZED,
            )

        if step == DialogueStep.DONE:
            return IntentResult(success=True, message="", outcome=Outcome.PROMPT)

        if step in _COLLECTING:
            lowered = reply.casefold()
            if any(p.search(lowered) for p in self._cancel):
                return await self.cancel(locale)
            if any(p.search(lowered) for p in self._reset):
                self.state.clear(DialogueStep.ASK_ENTITY)
                await self._audit_logger.log_dialogue_reset(self.kind.value, self.correlation_id)
                return self._prompt(locale, prefix=render("dialogue_restarted", locale))

        if step == DialogueStep.ASK_ENTITY:
            return await self._take_entity(reply, locale)
        if step == DialogueStep.ASK_AMOUNT:
            return self._take_amount(reply, locale)
        if step == DialogueStep.ASK_PAID:
            return self._take_paid(reply, locale)
        return await self._confirm(reply, locale)

    async def _take_entity(self, reply: str, locale: Locale) -> IntentResult:
        if self._validator.check_entity_name(reply):
            debug = debug_trace(reply, name=reply)
            await self._audit_logger.log_entity_rejected(self.kind.value, reply, debug, self.correlation_id)
            return self._prompt(
                locale,
                prefix=render("name_rejected", locale),
                success=False,
                outcome=Outcome.INVALID_ENTITY,
                debug=debug,
            )

        self.state.entity_name = reply
        self.state.step = DialogueStep.ASK_AMOUNT
        return self._prompt(locale)

    def _take_amount(self, reply: str, locale: Locale) -> IntentResult:
        parsed = self._resolver.resolve(reply)
        self.state.amount = str(parsed.value) if parsed.is_resolved else reply
        self.state.step = DialogueStep.ASK_PAID
        return self._prompt(locale, debug=debug_trace(reply, parsed))

    def _take_paid(self, reply: str, locale: Locale) -> IntentResult:
        parsed = self._resolver.resolve(reply)
        if parsed.is_resolved:
            self.state.paid = str(parsed.value)
        elif self._validator.means_nothing(reply):
            self.state.paid = "0"
        else:
            self.state.paid = reply
        self.state.step = DialogueStep.CONFIRM
        return self._prompt(locale, debug=debug_trace(reply, parsed))

    async def _confirm(self, reply: str, locale: Locale) -> IntentResult:
        lowered = reply.casefold()

        if any(p.search(lowered) for p in self._negative):
            await self._audit_logger.log_user_requested_change(self.kind.value, self.correlation_id)
            self.state.step = DialogueStep.ASK_AMOUNT
            return self._prompt(locale)

        if not any(p.search(lowered) for p in self._affirmative):
            return IntentResult(
                success=True,
                message=render("ask_yes_no", locale),
                outcome=Outcome.PROMPT,
                summary=self.summary(locale),
            )

        return await self._save(locale)

    def _paid_value(self) -> Optional[int]:
        parsed = self._resolver.resolve(self.state.paid)
        if parsed.is_resolved:
            return parsed.value
        if self._validator.means_nothing(self.state.paid):
            return 0
        return None

    async def _save(self, locale: Locale) -> IntentResult:
        """Run the gates over the slots and write the record."""
        amount = self._resolver.resolve(self.state.amount)
        paid = self._paid_value()
        slots = {"name": self.state.entity_name, "amount": self.state.amount, "paid": self.state.paid}
        debug = debug_trace(self.summary(locale), amount, name=self.state.entity_name, paid=paid)

        validation = self._validator.validate(
            amount,
            name=self.state.entity_name,
            check_name=True,
            paid=paid,
            check_paid=True,
        )
        error = validation.first_error()

        if error is not None:
            return await self._reject(error.field, locale, debug)

        await self._audit_logger.log_user_confirmed(self.kind.value, slots, self.correlation_id)
        if validation.warnings:
            logger.warning("amount_warning", warnings=validation.warnings, debug=debug)

        record = self._build_record(amount, paid)
        description = voice_description(
            f"{self.kind.value} {self.state.entity_name} {amount.value} paid {paid}"
        )
        result = await self._writer.record_entity(
            self.kind,
            record,
            locale,
            description,
            self.correlation_id,
            debug=debug,
            warnings=validation.warnings,
        )
        self.state.step = DialogueStep.DONE
        return result

    async def _reject(self, field: str, locale: Locale, debug: str) -> IntentResult:
        """Send the user back to the slot that failed its gate."""
        if field == "amount":
            await self._audit_logger.log_amount_unresolved(self.kind.value, debug, self.correlation_id)
            self.state.step = DialogueStep.ASK_AMOUNT
            return self._prompt(
                locale,
                prefix=render("amount_rejected", locale),
                success=False,
                outcome=Outcome.UNRESOLVED_AMOUNT,
                debug=debug,
            )

        if field == "entity_name":
            await self._audit_logger.log_entity_rejected(
                self.kind.value, self.state.entity_name, debug, self.correlation_id
            )
            self.state.step = DialogueStep.ASK_ENTITY
            return self._prompt(
                locale,
                prefix=render("name_rejected", locale),
                success=False,
                outcome=Outcome.INVALID_ENTITY,
                debug=debug,
            )

        self.state.step = DialogueStep.ASK_PAID
        return self._prompt(
            locale,
            prefix=render("paid_rejected", locale),
            success=False,
            outcome=Outcome.INVALID_PAID,
            debug=debug,
        )

    def _build_record(self, amount: ParsedAmount, paid: int):
        if self.kind is DialogueKind.PURCHASE:
            return PurchaseRecord(
                supplier_name=self.state.entity_name,
                total_amount=amount.value,
                amount_paid=paid,
            )
        return BorrowRecord(
            name=self.state.entity_name,
            total_given=amount.value,
            amount_paid=paid,
        )
