"""Product pricing and SKU helpers."""

import re
import secrets
import string
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[Decimal, int, float, str]

CENTS = Decimal("0.01")
MAX_SKU_LENGTH = 20
SKU_ALPHABET = string.ascii_uppercase + string.digits


def to_decimal(value: Number) -> Decimal:
    # str() first so floats like 0.1 do not bring their binary noise along
    return value if isinstance(value, Decimal) else Decimal(str(value))


def calculate_selling_price(
    base_price: Number,
    discount_percentage: Number = 0,
    discount_amount: Number = 0,
) -> Decimal:
    """Price after the percentage discount, then the fixed discount.

    Never negative; rounded half-up to cents.

    Example:
        calculate_selling_price(100, 10, 5) -> Decimal("85.00")
    """
    price = to_decimal(base_price) * (1 - to_decimal(discount_percentage) / 100)
    price -= to_decimal(discount_amount)
    return max(Decimal("0"), price).quantize(CENTS, rounding=ROUND_HALF_UP)


def generate_sku(name: str, suffix: Optional[str] = None) -> str:
    """Build a SKU such as "LAPTO-7K2QX" from a product name.

    Args:
        name: Product name; its first five characters form the prefix.
        suffix: Fixed suffix, random when omitted.
    """
    prefix = re.sub(r"[^A-Z0-9]", "", name[:5].upper())
    if len(prefix) < 2:
        prefix = "PROD"
    if suffix is None:
        suffix = "".join(secrets.choice(SKU_ALPHABET) for _ in range(5))
    return f"{prefix}-{suffix}"[:MAX_SKU_LENGTH]
