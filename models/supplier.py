from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Supplier:
    id: int
    name: str
    contact_person: str
    contact_email: str
    contact_phone: str
    address: str
    notes: str = ""
    is_active: bool = True
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
