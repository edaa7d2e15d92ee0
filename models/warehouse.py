from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Warehouse:
    id: int
    name: str
    contact_person: str
    contact_phone: str
    location: Optional[str] = None
    description: Optional[str] = None
    is_default: bool = False
    is_active: bool = True
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
