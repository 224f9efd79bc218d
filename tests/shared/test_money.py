from decimal import Decimal

from shared.money import ZERO, round2, to_decimal


class TestToDecimal:
    def test_float_goes_through_its_string_form(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_decimal_is_returned_unchanged(self):
        value = Decimal("12.345")
        assert to_decimal(value) is value


class TestRound2:
    def test_rounds_half_up(self):
        assert round2("2.345") == Decimal("2.35")
        assert round2("2.344") == Decimal("2.34")

    def test_pads_to_two_places(self):
        assert str(round2(877)) == "877.00"

    def test_zero(self):
        assert round2(0) == ZERO
