"""Receipt text parsing package."""

from easesplit.parsing.receipt_parser import (
    NO_ITEMS_MESSAGE,
    ReceiptParser,
    parse_receipt_text,
)

__all__ = [
    "NO_ITEMS_MESSAGE",
    "ReceiptParser",
    "parse_receipt_text",
]
