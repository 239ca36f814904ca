"""
Main Orchestrator for Shop Sahai Voice

This module ties together all the components of the voice engine:

    transcript → SessionController → Dialogue / IntentClassifier
               → Validation gates → LedgerWriter → storage
               → spoken reply

DESIGN DECISION: The orchestrator enforces the boundaries:
- One lexicon, one resolver, one validator shared by every component
- One audit logger, so one correlation id follows a turn everywhere
- Storage is chosen here and nowhere else

This is the "glue" that ensures the system works correctly
even when individual components might behave unexpectedly.
"""

from typing import Optional

import structlog

from shopsahai.audit import AuditLogger
from shopsahai.config import get_settings
from shopsahai.dialogue import DialogueMachine
from shopsahai.ledger import LedgerWriter
from shopsahai.models.command import DialogueKind, Locale
from shopsahai.nlu.classifier import IntentClassifier
from shopsahai.nlu.entities import EntityExtractor
from shopsahai.nlu.lexicon import DEFAULT_LEXICON, Lexicon
from shopsahai.nlu.numerals import NumeralResolver
from shopsahai.services.speech import (
    ConsoleListener,
    ConsoleSpeaker,
    SpeechListener,
    SpeechSynthesizer,
)
from shopsahai.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
)
from shopsahai.session import SessionController
from shopsahai.validation import CommandValidator


logger = structlog.get_logger(__name__)


def create_storage(
    backend: str,
) -> tuple[LedgerStorageInterface, AuditLogger, Optional[GoogleSheetsClient]]:
    """
    Create the ledger storage and audit logger for a backend name.

    Falls back to in-memory storage (with local-only audit logging)
    when Google Sheets is selected but not configured.

    Returns:
        (ledger_storage, audit_logger, sheets_client)
    """
    if backend == "google_sheets":
        try:
            sheets_client = GoogleSheetsClient()
            sheets_client.get_spreadsheet()
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
            return GoogleSheetsLedgerStorage(sheets_client), audit_logger, sheets_client
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", backend=backend, error=str(e))

    return InMemoryLedgerStorage(), AuditLogger(), None


def create_app_components(
    storage: Optional[LedgerStorageInterface] = None,
    speaker: Optional[SpeechSynthesizer] = None,
    listener: Optional[SpeechListener] = None,
    lexicon: Optional[Lexicon] = None,
    audit_logger: Optional[AuditLogger] = None,
    locale: Optional[Locale] = None,
) -> tuple[SessionController, LedgerStorageInterface]:
    """
    Factory function to create all application components.

    Args:
        storage: Ledger backend. If None, chosen from APP storage_backend.
        speaker: Text-to-speech. Console printing if None.
        listener: Speech-to-text listen controls. Console stand-in if None.
        lexicon: Word knowledge. The shipped English + Malayalam lexicon if None.
        audit_logger: Shared audit logger. Created with the storage if None.
        locale: Starting language. VOICE default_language if None.

    Returns:
        (session_controller, ledger_storage)
    """
    settings = get_settings()
    voice = settings.voice

    if storage is None:
        storage, default_audit, _ = create_storage(settings.app.storage_backend)
        audit_logger = audit_logger or default_audit
    audit_logger = audit_logger or AuditLogger()

    lexicon = lexicon or DEFAULT_LEXICON
    resolver = NumeralResolver(lexicon)
    extractor = EntityExtractor(
        lexicon,
        resolver,
        fuzzy_threshold=voice.fuzzy_match_threshold,
        fallback_tokens=voice.name_fallback_tokens,
    )
    validator = CommandValidator(lexicon, resolver, voice)

    classifier = IntentClassifier(
        storage,
        lexicon=lexicon,
        resolver=resolver,
        extractor=extractor,
        validator=validator,
        audit_logger=audit_logger,
        settings=voice,
    )

    writer = LedgerWriter(storage, lexicon, audit_logger)
    dialogues = {
        kind: DialogueMachine(
            kind,
            writer,
            resolver=resolver,
            validator=validator,
            lexicon=lexicon,
            audit_logger=audit_logger,
        )
        for kind in DialogueKind
    }

    controller = SessionController(
        classifier,
        dialogues,
        speaker or ConsoleSpeaker(),
        listener or ConsoleListener(),
        lexicon=lexicon,
        resolver=resolver,
        audit_logger=audit_logger,
        settings=voice,
        locale=locale,
    )

    return controller, storage
