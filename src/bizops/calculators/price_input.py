"""Editing rules for the unit price field.

For the Refund/Discount product the leading minus is pinned: it is always
present and cannot be deleted by Backspace or Delete.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

_NUMBER_RE = re.compile(r"-?\d+(?:[.,]\d+)?")

BACKSPACE = "Backspace"
DELETE = "Delete"


@dataclass(frozen=True)
class PriceEdit:
    """Field state after a key press."""

    value: str
    cursor: int
    accepted: bool


def parse_price(text: str | None) -> Decimal | None:
    """First number found in ``text``; comma decimals are accepted."""
    match = _NUMBER_RE.search(text or "")
    if not match:
        return None
    try:
        return Decimal(match.group(0).replace(",", "."))
    except InvalidOperation:
        return None


def normalize_price_text(raw: str | None, refund: bool) -> str:
    """Exactly one leading ``-`` for refunds, no leading sign otherwise."""
    body = (raw or "").strip().lstrip("+-")
    if refund:
        return "-" + body
    return body


def apply_key(value: str, cursor: int, key: str, refund: bool) -> PriceEdit:
    """Apply Backspace/Delete at ``cursor``.

    Other keys are not handled here and leave the field unchanged.
    """
    cursor = max(0, min(cursor, len(value)))

    if refund and value.startswith("-"):
        if key == BACKSPACE and cursor in (0, 1):
            return PriceEdit(value, cursor, False)
        if key == DELETE and cursor == 0:
            return PriceEdit(value, cursor, False)

    if key == BACKSPACE:
        if cursor == 0:
            return PriceEdit(value, cursor, False)
        edited = value[: cursor - 1] + value[cursor:]
        new_cursor = cursor - 1
    elif key == DELETE:
        if cursor >= len(value):
            return PriceEdit(value, cursor, False)
        edited = value[:cursor] + value[cursor + 1 :]
        new_cursor = cursor
    else:
        return PriceEdit(value, cursor, False)

    normalized = normalize_price_text(edited, refund)
    # Normalization can add or drop a leading sign
    new_cursor += len(normalized) - len(edited)
    return PriceEdit(normalized, max(0, min(new_cursor, len(normalized))), True)


def submitted_price(text: str | None, refund: bool) -> Decimal | None:
    return parse_price(normalize_price_text(text, refund))
