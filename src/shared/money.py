"""Currency arithmetic helpers. Amounts are Decimals rounded half-up to paise.

Aggregates store amounts as floats; everything that computes with them goes
through ``round2`` first.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from pydantic import BeforeValidator

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """Convert ints, floats, strings and Decimals without float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


# Response field type: always two decimal places, rendered as a JSON string
Money = Annotated[Decimal, BeforeValidator(round2)]
