"""
Audit Models for Shop Sahai Voice

Every significant voice event is logged for audit purposes.
This provides:
1. Traceability from a spoken sentence to the row it produced
2. Debug traces for recognition failures (what we heard, what we extracted)
3. A record of partial writes that need manual attention

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every step of a voice turn has its own event type.
    """
    # Recognition
    UTTERANCE_RECEIVED = "utterance_received"
    RECOGNITION_ERROR = "recognition_error"

    # One-shot classification
    INTENT_CLASSIFIED = "intent_classified"
    AMOUNT_UNRESOLVED = "amount_unresolved"
    ENTITY_REJECTED = "entity_rejected"

    # Guided dialogues
    DIALOGUE_STARTED = "dialogue_started"
    DIALOGUE_RESET = "dialogue_reset"
    DIALOGUE_CANCELLED = "dialogue_cancelled"
    USER_CONFIRMED = "user_confirmed"
    USER_REQUESTED_CHANGE = "user_requested_change"

    # Persistence
    RECORD_SAVED = "record_saved"
    MIRROR_SAVE_FAILED = "mirror_save_failed"
    SAVE_FAILED = "save_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Record type (e.g., 'transaction', 'purchase', 'borrow', 'dialogue')"
    )

    # Correlation - one utterance, or one whole dialogue
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by something the user said?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, ensure_ascii=False) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.utterance_received(text, "en", correlation_id)
        event = AuditEventBuilder.record_saved("purchase", details, correlation_id)
    """

    @staticmethod
    def utterance_received(
        utterance: str,
        locale: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UTTERANCE_RECEIVED,
            correlation_id=correlation_id,
            description="Transcript received",
            details={
                "utterance": utterance,
                "locale": locale,
            },
            is_user_action=True,
        )

    @staticmethod
    def recognition_error(
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECOGNITION_ERROR,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="Speech recognition reported an error",
            error_message=error_message,
        )

    @staticmethod
    def intent_classified(
        intent_kind: str,
        utterance: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INTENT_CLASSIFIED,
            entity_type=intent_kind,
            correlation_id=correlation_id,
            description=f"Utterance classified as {intent_kind}",
            details={
                "utterance": utterance,
            },
        )

    @staticmethod
    def amount_unresolved(
        entity_type: str,
        debug: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AMOUNT_UNRESOLVED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description="No usable amount found in utterance",
            details={
                "debug": debug,
            },
        )

    @staticmethod
    def entity_rejected(
        entity_type: str,
        name: str,
        debug: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description=f"Rejected name: {name[:200]!r}",
            details={
                "name": name,
                "debug": debug,
            },
        )

    @staticmethod
    def dialogue_started(
        kind: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DIALOGUE_STARTED,
            entity_type=kind,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} dialogue started",
            is_user_action=True,
        )

    @staticmethod
    def dialogue_reset(
        kind: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DIALOGUE_RESET,
            entity_type=kind,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} dialogue restarted by user",
            is_user_action=True,
        )

    @staticmethod
    def dialogue_cancelled(
        kind: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DIALOGUE_CANCELLED,
            entity_type=kind,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} dialogue cancelled by user",
            is_user_action=True,
        )

    @staticmethod
    def user_confirmed(
        kind: str,
        slots: dict,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_CONFIRMED,
            entity_type=kind,
            correlation_id=correlation_id,
            description="User confirmed dialogue summary",
            details=slots,
            is_user_action=True,
        )

    @staticmethod
    def user_requested_change(
        kind: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REQUESTED_CHANGE,
            entity_type=kind,
            correlation_id=correlation_id,
            description="User asked to change the amount",
            is_user_action=True,
        )

    @staticmethod
    def record_saved(
        entity_type: str,
        details: dict,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_SAVED,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} saved",
            details=details,
        )

    @staticmethod
    def mirror_save_failed(
        entity_type: str,
        error_message: str,
        details: dict,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIRROR_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} saved but mirrored expense failed",
            details=details,
            error_message=error_message,
        )

    @staticmethod
    def save_failed(
        entity_type: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description=f"Failed to save {entity_type}",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
