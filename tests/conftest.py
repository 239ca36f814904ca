"""Shared test fixtures: in-memory storage and fake speech, no network."""

from typing import Callable, Optional

import pytest

from shopsahai.audit import AuditLogger
from shopsahai.config import VoiceSettings
from shopsahai.dialogue import DialogueMachine
from shopsahai.ledger import LedgerWriter
from shopsahai.models.command import DialogueKind, Locale
from shopsahai.nlu.classifier import IntentClassifier
from shopsahai.nlu.entities import EntityExtractor
from shopsahai.nlu.lexicon import DEFAULT_LEXICON
from shopsahai.nlu.numerals import NumeralResolver
from shopsahai.services.speech import SpeechListener, SpeechSynthesizer
from shopsahai.services.storage import InMemoryAuditStorage, InMemoryLedgerStorage
from shopsahai.session import SessionController
from shopsahai.validation import CommandValidator


class RecordingSpeaker(SpeechSynthesizer):
    """Records spoken text. Finishes at once unless hold=True."""

    def __init__(self, hold: bool = False):
        self.hold = hold
        self.spoken: list[tuple[str, Locale]] = []
        self._pending: Optional[Callable[[], None]] = None

    def speak(self, text: str, locale: Locale, on_done: Callable[[], None]) -> None:
        self.spoken.append((text, locale))
        if self.hold:
            self._pending = on_done
        else:
            on_done()

    def finish(self) -> None:
        done, self._pending = self._pending, None
        if done is not None:
            done()

    @property
    def last(self) -> str:
        return self.spoken[-1][0]


class RecordingListener(SpeechListener):
    def __init__(self):
        self.is_listening = False
        self.start_count = 0
        self.stop_count = 0

    def start_listening(self, locale: Locale) -> None:
        self.is_listening = True
        self.start_count += 1

    def stop_listening(self) -> None:
        self.is_listening = False
        self.stop_count += 1


@pytest.fixture
def voice_settings():
    return VoiceSettings(
        default_language="english",
        debounce_ms=20,
        speech_cooldown_ms=10,
        resume_grace_ms=150,
        resume_retry_ms=20,
    )


@pytest.fixture
def resolver():
    return NumeralResolver(DEFAULT_LEXICON)


@pytest.fixture
def extractor(resolver):
    return EntityExtractor(DEFAULT_LEXICON, resolver)


@pytest.fixture
def validator(resolver, voice_settings):
    return CommandValidator(DEFAULT_LEXICON, resolver, voice_settings)


@pytest.fixture
def storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def make_classifier(resolver, extractor, validator, audit_logger, voice_settings):
    def factory(storage):
        return IntentClassifier(
            storage,
            lexicon=DEFAULT_LEXICON,
            resolver=resolver,
            extractor=extractor,
            validator=validator,
            audit_logger=audit_logger,
            settings=voice_settings,
        )
    return factory


@pytest.fixture
def classifier(make_classifier, storage):
    return make_classifier(storage)


@pytest.fixture
def make_dialogue(resolver, validator, audit_logger):
    def factory(kind: DialogueKind, storage):
        return DialogueMachine(
            kind,
            LedgerWriter(storage, DEFAULT_LEXICON, audit_logger),
            resolver=resolver,
            validator=validator,
            lexicon=DEFAULT_LEXICON,
            audit_logger=audit_logger,
        )
    return factory


@pytest.fixture
def speaker():
    return RecordingSpeaker()


@pytest.fixture
def held_speaker():
    return RecordingSpeaker(hold=True)


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def make_controller(classifier, make_dialogue, storage, resolver, audit_logger, voice_settings, listener):
    def factory(speaker, locale: Locale = Locale.EN, classifier_override=None):
        return SessionController(
            classifier_override or classifier,
            {kind: make_dialogue(kind, storage) for kind in DialogueKind},
            speaker,
            listener,
            lexicon=DEFAULT_LEXICON,
            resolver=resolver,
            audit_logger=audit_logger,
            settings=voice_settings,
            locale=locale,
        )
    return factory


@pytest.fixture
def controller(make_controller, speaker):
    return make_controller(speaker)
