"""
Audit Logger

DESIGN DECISION: Every significant voice event is logged.
This provides:
1. Traceability from what was heard to what was written
2. Debug traces for recognition failures (never spoken aloud)
3. Visibility of partial writes that need manual attention

The audit logger:
- Is async to not block the voice turn
- Gracefully handles failures (doesn't break the turn if logging fails)
- Supports correlation IDs to trace one utterance or one dialogue
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from shopsahai.models.audit import AuditEvent, AuditEventBuilder
from shopsahai.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(ensure_ascii=False)
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_utterance(
        self,
        utterance: str,
        locale: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.utterance_received(utterance, locale, correlation_id))

    async def log_recognition_error(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.recognition_error(error_message, correlation_id))

    async def log_intent(
        self,
        intent_kind: str,
        utterance: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.intent_classified(intent_kind, utterance, correlation_id))

    async def log_amount_unresolved(
        self,
        entity_type: str,
        debug: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.amount_unresolved(entity_type, debug, correlation_id))

    async def log_entity_rejected(
        self,
        entity_type: str,
        name: str,
        debug: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.entity_rejected(entity_type, name, debug, correlation_id))

    async def log_dialogue_started(self, kind: str, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.dialogue_started(kind, correlation_id))

    async def log_dialogue_reset(self, kind: str, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.dialogue_reset(kind, correlation_id))

    async def log_dialogue_cancelled(self, kind: str, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.dialogue_cancelled(kind, correlation_id))

    async def log_user_confirmed(
        self,
        kind: str,
        slots: dict,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.user_confirmed(kind, slots, correlation_id))

    async def log_user_requested_change(self, kind: str, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.user_requested_change(kind, correlation_id))

    async def log_record_saved(
        self,
        entity_type: str,
        details: dict,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.record_saved(entity_type, details, correlation_id))

    async def log_mirror_failed(
        self,
        entity_type: str,
        error_message: str,
        details: dict,
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.mirror_save_failed(entity_type, error_message, details, correlation_id)
        )

    async def log_save_failed(
        self,
        entity_type: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.save_failed(entity_type, error_message, correlation_id))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this when a new utterance arrives, or when a dialogue starts.
    Pass it through all subsequent operations.
    """
    return uuid4()
