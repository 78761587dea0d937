"""Tests for integer money helpers."""

import pytest

from src.am_common.money import format_amount, to_minor_units, validate_amount


class TestToMinorUnits:
    def test_rupees_to_paise(self) -> None:
        assert to_minor_units(1500) == 150000

    def test_never_below_one(self) -> None:
        assert to_minor_units(0) == 1


class TestValidateAmount:
    @pytest.mark.parametrize("amount", [1, 1200, 10**9])
    def test_positive_integers_pass(self, amount: int) -> None:
        validate_amount(amount)

    @pytest.mark.parametrize("amount", [0, -5, 10.5, True, "100"])
    def test_rejects_non_positive_or_non_int(self, amount: object) -> None:
        with pytest.raises(ValueError):
            validate_amount(amount)  # type: ignore[arg-type]


def test_format_amount() -> None:
    assert format_amount(150000) == "₹150,000"
    assert format_amount(-20) == "-₹20"
    assert format_amount(5, symbol="$") == "$5"
