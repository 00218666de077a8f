"""
Core Data Models for Ease Split

These models define the schemas for everything the split engine and the
receipt parser exchange with their caller.

DESIGN DECISION: Validation happens when a caller builds a model through
the normal constructor. The engine itself never relies on that validation:
snapshots built with `model_construct` (or mutated after construction) may
carry malformed numbers, and the calculator coerces them instead of failing.
"""

from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def new_id() -> str:
    """Generate a fresh opaque identifier."""
    return str(uuid4())


# =============================================================================
# PARTICIPANTS AND ITEMS
# =============================================================================

class Person(BaseModel):
    """
    A participant in the bill split.

    Identity is by `id`; the display name may be edited freely.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Opaque unique identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )


class Item(BaseModel):
    """
    A single billed line.

    `shared_by` lists the ids of the people splitting this item. An item
    shared by nobody still counts toward the grand total.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Opaque unique identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Free-text label"
    )
    price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Unit price"
    )
    quantity: int = Field(
        default=1,
        ge=1,
        description="Number of units"
    )
    tax_percent: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Tax rate as a percentage (13 means 13%)"
    )
    shared_by: list[str] = Field(
        default_factory=list,
        description="Ids of the people splitting this item"
    )

    @field_validator('shared_by')
    @classmethod
    def drop_duplicate_sharers(cls, v: list[str]) -> list[str]:
        """Collapse repeated ids, keeping first-seen order."""
        return list(dict.fromkeys(v))


# =============================================================================
# SPLIT RESULTS
# =============================================================================

class ItemBreakdown(BaseModel):
    """Per-item charge breakdown, before splitting."""
    model_config = ConfigDict(frozen=True)

    item_id: str
    name: str
    base: Decimal
    tax: Decimal
    total: Decimal
    share_count: int = Field(
        ge=0,
        description="Number of distinct people splitting this item"
    )


class PersonShare(BaseModel):
    """What one person owes."""
    model_config = ConfigDict(frozen=True)

    person_id: str
    name: str
    amount: Decimal


class SplitSummary(BaseModel):
    """
    Result of a full split computation.

    Amounts are kept at full precision. Rounding for display is the
    caller's job.
    """
    model_config = ConfigDict(frozen=True)

    items: list[ItemBreakdown] = Field(default_factory=list)
    shares: list[PersonShare] = Field(default_factory=list)
    grand_total: Decimal = Decimal("0")
    unassigned_total: Decimal = Field(
        default=Decimal("0"),
        description="Value of items nobody has been assigned to yet"
    )

    @property
    def per_person(self) -> dict[str, Decimal]:
        """Owed amounts keyed by person id."""
        return {share.person_id: share.amount for share in self.shares}


# =============================================================================
# RECEIPT PARSING RESULTS
# =============================================================================

class ParseOutcome(str, Enum):
    """Outcome of parsing one receipt's OCR text."""
    ITEMS_FOUND = "items_found"
    NO_ITEMS_DETECTED = "no_items_detected"  # Caller should offer manual entry


class ReceiptParseResult(BaseModel):
    """
    Candidate items recognized in one receipt.

    NO_ITEMS_DETECTED is not an error. It tells the caller to prompt
    the user for manual entry.
    """

    outcome: ParseOutcome
    items: list[Item] = Field(default_factory=list)
    lines_scanned: int = Field(default=0, ge=0)
    lines_skipped: int = Field(default=0, ge=0)
    message: str = ""

    @property
    def items_detected(self) -> bool:
        return self.outcome == ParseOutcome.ITEMS_FOUND
