"""Tests for unit price field editing."""

from decimal import Decimal

import pytest

from bizops.calculators.price_input import (
    BACKSPACE,
    DELETE,
    apply_key,
    normalize_price_text,
    parse_price,
    submitted_price,
)


class TestNormalize:
    """Test sign normalization."""

    def test_refund_gets_single_minus(self):
        assert normalize_price_text("3.50", refund=True) == "-3.50"
        assert normalize_price_text("--3.50", refund=True) == "-3.50"
        assert normalize_price_text("", refund=True) == "-"

    def test_regular_strips_sign(self):
        assert normalize_price_text("-3.50", refund=False) == "3.50"
        assert normalize_price_text("+2", refund=False) == "2"


class TestPinnedMinus:
    """Test that the refund minus cannot be deleted."""

    @pytest.mark.parametrize("cursor", [0, 1])
    def test_backspace_at_start_rejected(self, cursor):
        edit = apply_key("-3.50", cursor, BACKSPACE, refund=True)
        assert edit.accepted is False
        assert edit.value == "-3.50"
        assert edit.cursor == cursor

    def test_delete_before_minus_rejected(self):
        edit = apply_key("-3.50", 0, DELETE, refund=True)
        assert edit.accepted is False
        assert edit.value == "-3.50"
        assert edit.cursor == 0

    def test_backspace_elsewhere_applies(self):
        edit = apply_key("-3.50", 5, BACKSPACE, refund=True)
        assert edit.accepted is True
        assert edit.value == "-3.5"
        assert edit.cursor == 4

    def test_delete_after_minus_applies(self):
        edit = apply_key("-3.50", 1, DELETE, refund=True)
        assert edit.value == "-.50"
        assert edit.cursor == 1

    def test_regular_backspace(self):
        edit = apply_key("3.50", 1, BACKSPACE, refund=False)
        assert edit.accepted is True
        assert edit.value == ".50"
        assert edit.cursor == 0


class TestParsing:
    """Test price parsing and submission."""

    def test_parse_price(self):
        assert parse_price("about 12.5 each") == Decimal("12.5")
        assert parse_price("1,25") == Decimal("1.25")
        assert parse_price("-") is None
        assert parse_price(None) is None

    def test_submitted_price(self):
        assert submitted_price("3.50", refund=True) == Decimal("-3.50")
        assert submitted_price("-3.50", refund=False) == Decimal("3.50")
        assert submitted_price("", refund=True) is None
