"""Supplier quotation models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class QuotationStatus(str, Enum):
    SENT = "Sent"
    RECEIVED = "Received"
    REJECTED = "Rejected"
    AWARDED = "Awarded"
    LOST = "Lost"
    PARTIALLY_AWARDED = "Partially Awarded"


class AdditionalCostType(str, Enum):
    LOGISTICS = "logistics"
    TAX = "tax"
    INSURANCE = "insurance"
    OTHER = "other"


@dataclass
class QuotationDetail:
    """One product line of a quotation.

    The quoted fields stay empty until the supplier's answer is received.
    """

    product_id: int
    required_quantity: int
    quoted_quantity: Optional[int] = None
    unit_price_quoted: Optional[Decimal] = None
    conditions: str = ""
    estimated_delivery_date: Optional[date] = None
    notes: str = ""
    id: Optional[int] = None


@dataclass
class AdditionalCost:
    description: str
    amount: Decimal
    cost_type: AdditionalCostType
    id: Optional[int] = None


@dataclass
class Quotation:
    """A request for prices sent to one supplier, and its answer.

    Attributes:
        id: Unique identifier.
        supplier_id: Supplier asked to quote.
        status: Where the quotation stands (see tools.quotations).
        request_date: When the request was sent.
        response_deadline: Date the supplier should answer by.
        received_date: Date the answer arrived.
        products_subtotal: Sum of quoted quantity times unit price.
        total_quotation: Subtotal plus additional costs.
        shipping_conditions: Supplier's shipping terms.
        notes: Free text.
        details: Product lines.
        additional_costs: Logistics, tax, insurance and other costs.
    """

    id: int
    supplier_id: int
    status: QuotationStatus = QuotationStatus.SENT
    request_date: Optional[datetime] = None
    response_deadline: Optional[date] = None
    received_date: Optional[date] = None
    products_subtotal: Optional[Decimal] = None
    total_quotation: Optional[Decimal] = None
    shipping_conditions: str = ""
    notes: str = ""
    details: List[QuotationDetail] = field(default_factory=list)
    additional_costs: List[AdditionalCost] = field(default_factory=list)
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
