"""Quotation status rules and totals."""

from decimal import Decimal
from typing import Iterable

from models.quotation import AdditionalCost, QuotationDetail, QuotationStatus
from tools.products import CENTS, to_decimal

# Received is reached only by recording the supplier's answer
ALLOWED_TRANSITIONS = {
    QuotationStatus.SENT: {QuotationStatus.REJECTED, QuotationStatus.LOST},
    QuotationStatus.RECEIVED: {
        QuotationStatus.AWARDED,
        QuotationStatus.PARTIALLY_AWARDED,
        QuotationStatus.REJECTED,
        QuotationStatus.LOST,
    },
    QuotationStatus.PARTIALLY_AWARDED: {
        QuotationStatus.AWARDED,
        QuotationStatus.REJECTED,
        QuotationStatus.LOST,
    },
    QuotationStatus.AWARDED: set(),
    QuotationStatus.REJECTED: set(),
    QuotationStatus.LOST: set(),
}

RECEIVABLE_STATUSES = (QuotationStatus.SENT, QuotationStatus.RECEIVED)


def can_transition(current: QuotationStatus, new: QuotationStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[current]


def calculate_subtotal(details: Iterable[QuotationDetail]) -> Decimal:
    """Sum of quoted quantity times unit price; unquoted lines count as zero."""
    subtotal = sum(
        (
            to_decimal(detail.quoted_quantity or 0)
            * to_decimal(detail.unit_price_quoted or 0)
            for detail in details
        ),
        Decimal("0"),
    )
    return subtotal.quantize(CENTS)


def calculate_total(subtotal: Decimal, additional_costs: Iterable[AdditionalCost]) -> Decimal:
    total = subtotal + sum((to_decimal(cost.amount) for cost in additional_costs), Decimal("0"))
    return total.quantize(CENTS)
