from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional


@dataclass
class Product:
    id: int
    name: str
    sku: str
    base_price: Decimal
    selling_price: Decimal
    supplier_id: int
    description: str = ""
    cost_price: Decimal = Decimal("0")  # set by goods receipts, never by edits
    discount_percentage: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    unit_of_measure: str = ""
    category_ids: List[int] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    low_stock_threshold: int = 0
    barcode: str = ""
    is_available_for_sale: bool = True
    is_active: bool = True
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
