"""
Bill Session Orchestrator for Ease Split

This module is the caller the split engine and the receipt parser were
designed for. It holds the authoritative, in-memory list of people and
items for one bill and composes the core components:

1. Manual entry    (add/rename/remove people, add/update items)
2. Receipt import  (image -> OCR -> parse -> append candidate items)
3. Summary         (people + items -> per-person owed, grand total)

DESIGN DECISION: The engine and parser never see the session. They get
snapshots on every call and return fresh values, so the summary can be
recomputed after any mutation without invalidation logic.

Nothing is persisted. A session lives as long as the object does.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from easesplit.audit import AuditLogger, configure_logging, create_correlation_id
from easesplit.calculator import SplitCalculator
from easesplit.models.audit import AuditEventBuilder
from easesplit.models.split import (
    Item,
    Person,
    ReceiptParseResult,
    SplitSummary,
    new_id,
)
from easesplit.parsing import ReceiptParser
from easesplit.services.ocr import ImageSource, TesseractOCRService, UnsupportedImageError


class SessionError(Exception):
    """Base exception for session errors."""
    pass


class InvalidEntryError(SessionError):
    """A manual entry was rejected (blank name, negative price, ...)."""
    pass


class UnknownPersonError(SessionError):
    """No person with this id is in the session."""

    def __init__(self, person_id: str):
        self.person_id = person_id
        super().__init__(f"Unknown person: {person_id}")


class UnknownItemError(SessionError):
    """No item with this id is in the session."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Unknown item: {item_id}")


class OCRService(Protocol):
    """What the session needs from an OCR backend."""

    def validate_upload(self, filename: Optional[str], file_size: Optional[int]) -> None:
        ...

    async def recognize(self, image: ImageSource) -> str:
        ...


def _entry_error(e: ValidationError) -> InvalidEntryError:
    """Flatten a pydantic error into a one-line message for the user."""
    messages = [
        f"{'.'.join(str(part) for part in err['loc']) or 'value'}: {err['msg']}"
        for err in e.errors()
    ]
    return InvalidEntryError("; ".join(messages))


class BillSession:
    """
    One bill being split.

    Flow:
    1. Add the people at the table
    2. Add items by hand, or import them from a receipt photo
    3. Adjust quantity / tax and tick who shares each item
    4. Read summary() after every change

    `people` and `items` are exposed as tuples; callers mutate through
    the session methods only.
    """

    def __init__(
        self,
        ocr_service: Optional[OCRService] = None,
        parser: Optional[ReceiptParser] = None,
        calculator: Optional[SplitCalculator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        # OCR is created lazily so a session without receipts needs no tesseract
        self._ocr_service = ocr_service
        self._parser = parser or ReceiptParser()
        self._calculator = calculator or SplitCalculator()
        self._audit_logger = audit_logger or AuditLogger()

        self._people: list[Person] = []
        self._items: list[Item] = []

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    @property
    def people(self) -> tuple[Person, ...]:
        return tuple(self._people)

    @property
    def items(self) -> tuple[Item, ...]:
        return tuple(self._items)

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    def _get_ocr_service(self) -> OCRService:
        if self._ocr_service is None:
            self._ocr_service = TesseractOCRService()
        return self._ocr_service

    def _person_index(self, person_id: str) -> int:
        for index, person in enumerate(self._people):
            if person.id == person_id:
                return index
        raise UnknownPersonError(person_id)

    def _item_index(self, item_id: str) -> int:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        raise UnknownItemError(item_id)

    # -------------------------------------------------------------------------
    # People
    # -------------------------------------------------------------------------

    def add_person(self, name: str) -> Person:
        """
        Add a participant.

        Raises:
            InvalidEntryError: If the name is blank
        """
        try:
            person = Person(name=name)
        except ValidationError as e:
            raise _entry_error(e) from e

        self._people.append(person)
        self._audit_logger.log(AuditEventBuilder.person_added(person.id, person.name))
        return person

    def rename_person(self, person_id: str, name: str) -> Person:
        """Change a participant's display name. Identity is unchanged."""
        index = self._person_index(person_id)
        old = self._people[index]
        try:
            person = Person(id=old.id, name=name)
        except ValidationError as e:
            raise _entry_error(e) from e

        self._people[index] = person
        self._audit_logger.log(
            AuditEventBuilder.person_renamed(person.id, old.name, person.name)
        )
        return person

    def remove_person(self, person_id: str) -> Person:
        """
        Remove a participant.

        Items keep the id in shared_by. The calculator drops those shares,
        so the remaining people's totals are unchanged until the user
        reassigns the items.
        """
        index = self._person_index(person_id)
        person = self._people.pop(index)
        stale = sum(1 for item in self._items if person_id in item.shared_by)
        self._audit_logger.log(
            AuditEventBuilder.person_removed(person.id, person.name, stale)
        )
        return person

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    def add_item(
        self,
        name: str,
        price: Any,
        quantity: int = 1,
        tax_percent: Any = Decimal("0"),
    ) -> Item:
        """
        Add an item typed in by hand.

        Price and tax accept anything pydantic can read as a Decimal,
        including numeric strings from a text box.

        Raises:
            InvalidEntryError: If any field is invalid
        """
        try:
            item = Item(
                name=name,
                price=price,
                quantity=quantity,
                tax_percent=tax_percent,
            )
        except ValidationError as e:
            raise _entry_error(e) from e

        self._items.append(item)
        self._audit_logger.log(AuditEventBuilder.item_added(
            item_id=item.id,
            name=item.name,
            price=str(item.price),
            source="manual",
        ))
        return item

    def _update_item(self, item_id: str, **changes: Any) -> Item:
        """Replace an item with a validated copy carrying `changes`."""
        index = self._item_index(item_id)
        data = self._items[index].model_dump()
        data.update(changes)
        try:
            item = Item.model_validate(data)
        except ValidationError as e:
            raise _entry_error(e) from e

        self._items[index] = item
        self._audit_logger.log(AuditEventBuilder.item_updated(
            item.id,
            {key: str(value) for key, value in changes.items()},
        ))
        return item

    def set_quantity(self, item_id: str, quantity: int) -> Item:
        return self._update_item(item_id, quantity=quantity)

    def set_tax_percent(self, item_id: str, tax_percent: Any) -> Item:
        return self._update_item(item_id, tax_percent=tax_percent)

    def set_shared_by(self, item_id: str, person_ids: Iterable[str]) -> Item:
        """Replace the full list of people sharing an item."""
        person_ids = list(person_ids)
        for person_id in person_ids:
            self._person_index(person_id)
        return self._update_item(item_id, shared_by=person_ids)

    def toggle_share(self, item_id: str, person_id: str) -> Item:
        """
        Add a person to an item's sharers, or remove them if already there.

        Removing works for people no longer in the session, so stale ids
        can be cleaned up. Adding requires a known person.
        """
        shared_by = list(self._items[self._item_index(item_id)].shared_by)
        if person_id in shared_by:
            shared_by.remove(person_id)
        else:
            self._person_index(person_id)
            shared_by.append(person_id)
        return self._update_item(item_id, shared_by=shared_by)

    # -------------------------------------------------------------------------
    # Receipt import
    # -------------------------------------------------------------------------

    async def import_receipt(
        self,
        image: ImageSource,
        filename: Optional[str] = None,
    ) -> ReceiptParseResult:
        """
        Scan a receipt and append whatever items it yields.

        Returns:
            The parse result. On NO_ITEMS_DETECTED nothing is appended and
            `result.message` should be shown to the user.

        Raises:
            UnsupportedImageError: If the upload is rejected before OCR
            Any error from the OCR service, unchanged
        """
        correlation_id = create_correlation_id()
        upload_id = new_id()
        file_size = len(image) if isinstance(image, bytes) else None
        ocr_service = self._get_ocr_service()

        try:
            ocr_service.validate_upload(filename, file_size)
        except UnsupportedImageError as e:
            self._audit_logger.log(
                AuditEventBuilder.receipt_rejected(upload_id, str(e), correlation_id)
            )
            raise

        self._audit_logger.log(AuditEventBuilder.receipt_uploaded(
            upload_id=upload_id,
            filename=filename,
            file_size=file_size,
            correlation_id=correlation_id,
        ))

        try:
            text = await ocr_service.recognize(image)
        except Exception as e:
            self._audit_logger.log_external_service_error(
                service="ocr",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        result = self._parser.parse(text)

        if not result.items_detected:
            self._audit_logger.log(AuditEventBuilder.no_items_detected(
                upload_id=upload_id,
                lines_scanned=result.lines_scanned,
                correlation_id=correlation_id,
            ))
            return result

        # The caller gets the result items; the session keeps its own copies
        self._items.extend(item.model_copy(deep=True) for item in result.items)
        self._audit_logger.log(AuditEventBuilder.receipt_parsed(
            upload_id=upload_id,
            item_count=len(result.items),
            lines_skipped=result.lines_skipped,
            correlation_id=correlation_id,
        ))
        for item in result.items:
            self._audit_logger.log(AuditEventBuilder.item_added(
                item_id=item.id,
                name=item.name,
                price=str(item.price),
                source="receipt",
                correlation_id=correlation_id,
            ))

        return result

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def per_person_totals(self) -> dict[str, Decimal]:
        return self._calculator.compute_per_person_totals(self.people, self.items)

    def grand_total(self) -> Decimal:
        return self._calculator.compute_grand_total(self.items)

    def summary(self) -> SplitSummary:
        """Recompute the full split from the current people and items."""
        return self._calculator.summarize(self.people, self.items)


def create_session(use_ocr: bool = True) -> BillSession:
    """
    Factory function to create a ready-to-use session.

    Args:
        use_ocr: Whether to attach the Tesseract OCR service now.
                 Set to False for manual-entry-only sessions; one is
                 still created on the first receipt import.
    """
    configure_logging()
    ocr_service = TesseractOCRService() if use_ocr else None
    return BillSession(ocr_service=ocr_service)
