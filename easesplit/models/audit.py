"""
Audit Models for Ease Split

Every significant action in a bill-splitting session is recorded.
This provides:
1. A readable history of who was added and what was scanned
2. Debugging information when a receipt scan goes wrong
3. Correlation of all events belonging to one receipt import

DESIGN DECISION: The audit trail is append-only. Events are never edited.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # People
    PERSON_ADDED = "person_added"
    PERSON_RENAMED = "person_renamed"
    PERSON_REMOVED = "person_removed"

    # Items
    ITEM_ADDED = "item_added"
    ITEM_UPDATED = "item_updated"

    # Receipt scanning
    RECEIPT_UPLOADED = "receipt_uploaded"
    RECEIPT_REJECTED = "receipt_rejected"
    RECEIPT_PARSED = "receipt_parsed"
    NO_ITEMS_DETECTED = "no_items_detected"

    # System events
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant session action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
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

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'person', 'item', 'receipt')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one receipt import)"
    )

    description: str = Field(
        ...,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
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
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.person_added(person_id, name)
        event = AuditEventBuilder.receipt_parsed(upload_id, 3, 1, correlation_id)
    """

    @staticmethod
    def person_added(person_id: str, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSON_ADDED,
            entity_type="person",
            entity_id=person_id,
            description=f"Person added: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def person_renamed(person_id: str, old_name: str, new_name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSON_RENAMED,
            entity_type="person",
            entity_id=person_id,
            description=f"Person renamed: {old_name} -> {new_name}",
            details={"old_name": old_name, "new_name": new_name},
            is_user_action=True,
        )

    @staticmethod
    def person_removed(person_id: str, name: str, stale_item_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSON_REMOVED,
            entity_type="person",
            entity_id=person_id,
            description=f"Person removed: {name}",
            details={
                "name": name,
                "items_still_referencing": stale_item_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def item_added(
        item_id: str,
        name: str,
        price: str,
        source: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_ADDED,
            entity_type="item",
            entity_id=item_id,
            correlation_id=correlation_id,
            description=f"Item added: {name} (${price})",
            details={
                "name": name,
                "price": price,
                "source": source,
            },
            is_user_action=source == "manual",
        )

    @staticmethod
    def item_updated(item_id: str, changes: dict[str, Any]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_UPDATED,
            entity_type="item",
            entity_id=item_id,
            description=f"Item updated: {', '.join(sorted(changes))}",
            details=changes,
            is_user_action=True,
        )

    @staticmethod
    def receipt_uploaded(
        upload_id: str,
        filename: Optional[str],
        file_size: Optional[int],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_UPLOADED,
            entity_type="receipt",
            entity_id=upload_id,
            correlation_id=correlation_id,
            description=f"Receipt uploaded: {filename or 'unnamed image'}",
            details={
                "filename": filename,
                "file_size_bytes": file_size,
            },
            is_user_action=True,
        )

    @staticmethod
    def receipt_rejected(
        upload_id: str,
        reason: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="receipt",
            entity_id=upload_id,
            correlation_id=correlation_id,
            description="Receipt upload rejected",
            error_message=reason,
        )

    @staticmethod
    def receipt_parsed(
        upload_id: str,
        item_count: int,
        lines_skipped: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_PARSED,
            entity_type="receipt",
            entity_id=upload_id,
            correlation_id=correlation_id,
            description=f"Receipt parsed: {item_count} items detected",
            details={
                "item_count": item_count,
                "lines_skipped": lines_skipped,
            },
        )

    @staticmethod
    def no_items_detected(
        upload_id: str,
        lines_scanned: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NO_ITEMS_DETECTED,
            severity=AuditSeverity.WARNING,
            entity_type="receipt",
            entity_id=upload_id,
            correlation_id=correlation_id,
            description="No items detected on receipt",
            details={"lines_scanned": lines_scanned},
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
