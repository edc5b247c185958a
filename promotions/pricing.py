"""Price arithmetic for a booking line.

Amounts are integers in the smallest currency unit. The discount is rounded
half-up to a whole unit, so a tie such as 1234.5 becomes 1235 (Python's
built-in ``round`` would give 1234).
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from core.errors import ValidationError
from core.schemas import MAX_INT

MAX_QUANTITY = 1000


class PriceBreakdown(NamedTuple):
    subtotal: int
    discount_amount: int
    final_price: int


def discount_for(subtotal, discount_percent):
    amount = Decimal(subtotal) * Decimal(discount_percent) / Decimal(100)
    return int(amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def compute_total(unit_price, quantity, discount_percent=0):
    if unit_price < 0:
        raise ValueError('unit_price must be >= 0')
    if quantity < 1:
        raise ValueError('quantity must be >= 1')
    if not 0 <= discount_percent <= 100:
        raise ValueError('discount_percent must be between 0 and 100')

    subtotal = unit_price * quantity
    discount_amount = discount_for(subtotal, discount_percent)
    return PriceBreakdown(subtotal, discount_amount, subtotal - discount_amount)


def coerce_quantity(value):
    """Quantities that are missing, non-numeric or below one become 1."""
    if isinstance(value, bool):
        return 1
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        return 1
    return quantity if quantity >= 1 else 1


def order_total(unit_price, quantity, discount_percent=0):
    """``compute_total`` for an order that has to fit the stored price columns."""
    if quantity > MAX_QUANTITY:
        raise ValidationError(
            'Quantity is too large',
            errors={'quantity': f'Input should be less than or equal to {MAX_QUANTITY}'},
        )
    price = compute_total(unit_price, quantity, discount_percent)
    if price.final_price > MAX_INT:
        raise ValidationError('Order total is too large', errors={'quantity': 'Order total is too large'})
    return price
