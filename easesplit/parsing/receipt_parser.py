"""
Receipt Parser

Turns raw OCR text into candidate line items (name + price).

THE LINE RULE:
    <letters/spaces> [spaces] $ [spaces] <digits>[.<1-2 digits>]

The letters/spaces run right before the `$` is the item name and the number
after it is the unit price, written in ASCII digits. A price is only
recognized after a `$` sign. Bare numbers on a receipt are usually
quantities, dates or codes, so they are never read as prices.

DESIGN DECISION: Parsing is best-effort and never raises. OCR output is
noisy; a line that doesn't fit the rule is skipped and the rest of the
receipt is still parsed. An empty result is reported as its own outcome
so the caller can ask the user to type items in manually.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from easesplit.audit.logger import get_logger
from easesplit.models.split import Item, ParseOutcome, ReceiptParseResult

logger = get_logger(__name__)

LINE_ITEM_PATTERN = re.compile(r"([a-zA-Z\s]+)\s*\$\s*([0-9]+(?:\.[0-9]{1,2})?)")

NO_ITEMS_MESSAGE = "No items detected. Please check receipt or type manually."


class ReceiptParser:
    """
    Extracts candidate items from one receipt's OCR text.

    Stateless: each call to `parse` works only on the text it is given,
    so one parser can be shared freely.
    """

    def __init__(self, pattern: re.Pattern = LINE_ITEM_PATTERN):
        self._pattern = pattern

    def _parse_price(self, raw: str) -> Optional[Decimal]:
        """Parse a captured price, or None if it isn't a finite number."""
        try:
            price = Decimal(raw)
        except (InvalidOperation, TypeError, ValueError):
            return None
        return price if price.is_finite() else None

    def parse_line(self, line: str) -> Optional[Item]:
        """
        Apply the line rule to a single line.

        Returns the candidate item, or None when the line doesn't qualify.
        Only the first match on a line is used.
        """
        match = self._pattern.search(line)
        if not match:
            return None

        name = match.group(1).strip()
        price = self._parse_price(match.group(2))

        if not name or price is None:
            return None

        return Item(
            name=name,
            price=price,
            quantity=1,
            tax_percent=Decimal("0"),
            shared_by=[],
        )

    def parse(self, text: str) -> ReceiptParseResult:
        """
        Parse OCR text into candidate items.

        Args:
            text: Raw multi-line text for one receipt image

        Returns:
            ReceiptParseResult with items in input line order, or the
            NO_ITEMS_DETECTED outcome when nothing was recognized
        """
        if not isinstance(text, str):
            text = ""

        lines = text.split("\n")
        items: list[Item] = []

        for line in lines:
            item = self.parse_line(line)
            if item is None:
                continue
            items.append(item)

        skipped = len(lines) - len(items)

        logger.debug(
            "receipt_text_parsed",
            lines_scanned=len(lines),
            lines_skipped=skipped,
            items_found=len(items),
        )

        if not items:
            return ReceiptParseResult(
                outcome=ParseOutcome.NO_ITEMS_DETECTED,
                lines_scanned=len(lines),
                lines_skipped=skipped,
                message=NO_ITEMS_MESSAGE,
            )

        return ReceiptParseResult(
            outcome=ParseOutcome.ITEMS_FOUND,
            items=items,
            lines_scanned=len(lines),
            lines_skipped=skipped,
            message=f"{len(items)} item(s) detected. Please review before splitting.",
        )


_default_parser = ReceiptParser()


def parse_receipt_text(text: str) -> ReceiptParseResult:
    """Parse OCR text with the default line rule."""
    return _default_parser.parse(text)
