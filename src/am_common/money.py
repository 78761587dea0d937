"""Integer money helpers.

Auction prices and bids are whole currency units (rupees). The payment
provider takes minor units (paise). No float, no Decimal.
"""

MINOR_UNITS_PER_UNIT = 100


def to_minor_units(amount: int) -> int:
    """Provider amount for a price: floor(amount * 100), never below 1."""
    return max(1, amount * MINOR_UNITS_PER_UNIT)


def validate_amount(amount: int) -> None:
    """Prices and bids must be positive integers."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValueError(f"Amount must be a positive integer, got {amount!r}")


def format_amount(amount: int, symbol: str = "₹") -> str:
    """Display string: 150000 -> '₹150,000'."""
    if amount < 0:
        return f"-{symbol}{-amount:,}"
    return f"{symbol}{amount:,}"
