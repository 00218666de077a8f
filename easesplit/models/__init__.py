"""
Data Models Package

This package contains all Pydantic models used in Ease Split.
All data flowing between the caller, the split engine and the receipt
parser conforms to these schemas.
"""

from easesplit.models.split import (
    Item,
    ItemBreakdown,
    ParseOutcome,
    Person,
    PersonShare,
    ReceiptParseResult,
    SplitSummary,
    new_id,
)
from easesplit.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Split models
    "Item",
    "ItemBreakdown",
    "ParseOutcome",
    "Person",
    "PersonShare",
    "ReceiptParseResult",
    "SplitSummary",
    "new_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
