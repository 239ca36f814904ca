"""
Session Controller - the outer voice loop

Receives one transcript at a time and decides where it goes:

1. A dialogue is active → the dialogue gets it
2. A starter phrase ("new purchase", "പുതിയ കടം") without an amount →
   that dialogue starts
3. Otherwise → one-shot classification

Every reply is spoken. While speaking the microphone is closed and
transcripts are ignored; listening restarts only after speech has
finished plus a cool-down.

DESIGN DECISION: At most one dialogue exists at a time. The controller
holds a single active-dialogue slot, so Borrow and Purchase can never
both interpret the same utterance. Starter phrases are matched
Purchase first, then Borrow.
"""

import asyncio
from typing import Optional

import structlog

from shopsahai.audit import AuditLogger, create_correlation_id
from shopsahai.config import VoiceSettings, get_settings
from shopsahai.dialogue import DialogueMachine
from shopsahai.models.command import (
    DialogueKind,
    DialogueStep,
    IntentResult,
    Locale,
    Outcome,
)
from shopsahai.nlu.classifier import IntentClassifier
from shopsahai.nlu.lexicon import DEFAULT_LEXICON, Lexicon
from shopsahai.nlu.messages import render
from shopsahai.nlu.numerals import NumeralResolver
from shopsahai.services.speech import SpeechListener, SpeechSynthesizer
from shopsahai.session.scheduler import VoiceScheduler


logger = structlog.get_logger(__name__)

# Starter phrases are checked in this order
STARTER_ORDER = (DialogueKind.PURCHASE, DialogueKind.BORROW)


class SessionController:
    """
    Routes transcripts and owns the speaking/listening cycle.

    Usage:
        controller = SessionController(classifier, dialogues, speaker, listener)
        controller.on_transcript("income 500 from sales")   # from speech-to-text
        result = await controller.handle("new borrow")      # or directly
    """

    def __init__(
        self,
        classifier: IntentClassifier,
        dialogues: dict[DialogueKind, DialogueMachine],
        speaker: SpeechSynthesizer,
        listener: Optional[SpeechListener] = None,
        lexicon: Optional[Lexicon] = None,
        resolver: Optional[NumeralResolver] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[VoiceSettings] = None,
        locale: Optional[Locale] = None,
    ):
        self._settings = settings or get_settings().voice
        self._classifier = classifier
        self._dialogues = dialogues
        self._speaker = speaker
        self._listener = listener
        self._lexicon = lexicon or DEFAULT_LEXICON
        self._resolver = resolver or NumeralResolver(self._lexicon)
        self._audit_logger = audit_logger or AuditLogger()
        self._scheduler = VoiceScheduler(self._settings)

        self.locale = locale or Locale.from_language(self._settings.default_language)
        self.last_result: Optional[IntentResult] = None

        self._active: Optional[DialogueMachine] = None
        self._is_speaking = False
        self._busy = False
        self._dispatch_task: Optional[asyncio.Task] = None
        self._starters = {
            kind: tuple(p.casefold() for p in self._lexicon.dialogue_starters.get(kind, ()))
            for kind in STARTER_ORDER
        }

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def is_speaking(self) -> bool:
        return self._is_speaking

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def scheduler(self) -> VoiceScheduler:
        return self._scheduler

    @property
    def active_dialogue(self) -> Optional[DialogueMachine]:
        return self._active

    @property
    def active_kind(self) -> Optional[DialogueKind]:
        return self._active.kind if self._active else None

    def set_locale(self, locale: Locale) -> None:
        """Switch language between turns."""
        self.locale = locale
        logger.info("locale_changed", locale=locale.value)

    def notify_resumed(self) -> None:
        """Host app came back to the foreground."""
        self._scheduler.mark_resumed()

    # =========================================================================
    # SPEECH-TO-TEXT EVENTS
    # =========================================================================

    def on_transcript(self, text: str) -> None:
        """
        Accept a transcript from speech-to-text.

        Interim deliveries restart the debounce window; only the latest
        text is dispatched. Ignored while speaking or handling a turn.
        """
        if not text or not text.strip():
            return
        if self._is_speaking or self._busy:
            logger.debug("transcript_ignored", speaking=self._is_speaking, busy=self._busy)
            return
        self._scheduler.cancel_listen()
        self._scheduler.debounce(self._dispatch, text)

    def _dispatch(self, text: str) -> None:
        self._dispatch_task = asyncio.ensure_future(self.handle(text))

    async def wait_dispatched(self) -> Optional[IntentResult]:
        """Wait for the last debounced transcript to be handled."""
        if self._dispatch_task is None:
            return None
        return await self._dispatch_task

    async def on_recognition_error(self, error_message: str) -> IntentResult:
        """Speak a recognition failure back in the active locale."""
        await self._audit_logger.log_recognition_error(error_message)
        result = IntentResult(
            success=False,
            message=render("recognition_error", self.locale),
            outcome=Outcome.ERROR,
            debug=f"recognition_error={error_message!r}",
        )
        self._deliver(result)
        return result

    # =========================================================================
    # ROUTING
    # =========================================================================

    async def handle(self, utterance: str) -> IntentResult:
        """Handle one settled utterance start to finish and speak the reply."""
        self._scheduler.cancel_listen()
        self._busy = True
        locale = self.locale
        try:
            result = await self._route(utterance, locale)
        except Exception as e:
            logger.exception("session_turn_failed", utterance=utterance)
            await self._audit_logger.log_error(
                error_type="session_error",
                error_message=str(e),
                details={"utterance": utterance},
            )
            result = IntentResult(
                success=False,
                message=render("error", locale),
                outcome=Outcome.ERROR,
                debug=f"utterance={utterance!r}; error={e!s}",
            )
        finally:
            self._busy = False

        self._deliver(result)
        return result

    async def _route(self, utterance: str, locale: Locale) -> IntentResult:
        # A finished dialogue whose reply was never acknowledged
        self._release_finished()

        if self._active is not None:
            await self._audit_logger.log_utterance(utterance, locale.value, self._active.correlation_id)
            result = await self._active.handle(utterance, locale)
            if self._active.step == DialogueStep.IDLE:
                self._active = None
            return result

        correlation_id = create_correlation_id()
        await self._audit_logger.log_utterance(utterance, locale.value, correlation_id)

        kind = self._match_starter(utterance)
        if kind is not None:
            return await self._begin(kind, locale, correlation_id)

        return await self._classifier.classify(utterance, locale, correlation_id)

    def _match_starter(self, utterance: str) -> Optional[DialogueKind]:
        """Starter phrase of the first matching dialogue, if the utterance has no amount."""
        lowered = utterance.casefold()
        for kind in STARTER_ORDER:
            if any(phrase in lowered for phrase in self._starters[kind]):
                if self._resolver.resolve(utterance).is_resolved:
                    return None
                return kind
        return None

    async def _begin(self, kind: DialogueKind, locale: Locale, correlation_id=None) -> IntentResult:
        self._active = self._dialogues[kind]
        return await self._active.start(locale, correlation_id)

    async def start_dialogue(self, kind: DialogueKind) -> IntentResult:
        """
        Start a dialogue explicitly (for example from a button).

        Declined while another dialogue is in progress.
        """
        self._release_finished()
        if self._active is not None:
            result = IntentResult(
                success=False,
                message=self._active.current_prompt(self.locale),
                outcome=Outcome.PROMPT,
            )
        else:
            result = await self._begin(kind, self.locale)
        self._deliver(result)
        return result

    async def cancel_dialogue(self) -> Optional[IntentResult]:
        """Cancel whatever dialogue is in progress."""
        if self._active is None:
            return None
        result = await self._active.cancel(self.locale)
        self._active = None
        self._deliver(result)
        return result

    def _release_finished(self) -> None:
        if self._active is not None and self._active.step == DialogueStep.DONE:
            self._active.acknowledge()
            self._active = None

    # =========================================================================
    # SPEAKING / LISTENING
    # =========================================================================

    def _deliver(self, result: IntentResult) -> None:
        self.last_result = result
        if result.debug and not result.success:
            logger.info("turn_debug", outcome=result.outcome.value, debug=result.debug)
        self._speak(result.message)

    def _speak(self, text: str) -> None:
        if not text:
            self._scheduler.schedule_listen(self._listen_again)
            return
        if self._listener is not None:
            self._listener.stop_listening()
        self._is_speaking = True
        self._speaker.speak(text, self.locale, self._on_speech_done)

    def _on_speech_done(self) -> None:
        self._is_speaking = False
        self._release_finished()
        self._scheduler.schedule_listen(self._listen_again)

    def _listen_again(self) -> None:
        if self._listener is None or self._is_speaking or self._busy:
            return
        if self._scheduler.in_resume_grace():
            logger.debug("listen_deferred_resume_grace")
            self._scheduler.schedule_listen(self._listen_again, self._scheduler.resume_retry_ms)
            return
        self._listener.start_listening(self.locale)

    def begin_listening(self) -> None:
        """Open the first listening cycle of the session."""
        self._scheduler.schedule_listen(self._listen_again, delay_ms=0)

    def close(self) -> None:
        """Stop timers and the microphone."""
        self._scheduler.cancel_all()
        if self._listener is not None:
            self._listener.stop_listening()
