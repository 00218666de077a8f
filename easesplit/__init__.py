"""
Ease Split - Source Package

Splits a shared bill among a group of people, optionally starting the
item list from a photo of the receipt.

DESIGN PRINCIPLES:
1. The split engine and receipt parser are pure functions over snapshots
2. Malformed input degrades to safe values; it never crashes a mid-edit UI
3. A receipt with nothing recognizable is a notice, not an error
4. OCR failures are surfaced as-is; nothing retries behind the user's back
"""

__version__ = "1.0.0"
__author__ = "Ease Split Team"
