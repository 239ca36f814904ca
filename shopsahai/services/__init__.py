"""Services package."""

from shopsahai.services.speech import (
    ConsoleListener,
    ConsoleSpeaker,
    SpeechListener,
    SpeechSynthesizer,
)
from shopsahai.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Speech services
    "ConsoleListener",
    "ConsoleSpeaker",
    "SpeechListener",
    "SpeechSynthesizer",
    # Storage services
    "AuditStorageInterface",
    "ConnectionError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
    "LedgerStorageInterface",
    "NotFoundError",
    "StorageError",
]
