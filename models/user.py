"""User model and roles."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class UserRole(str, Enum):
    """Closed set of roles a user can hold."""

    EMPLOYEE = "employee"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


MANAGER_ROLES = (UserRole.ADMIN, UserRole.SUPERADMIN)


@dataclass
class User:
    """Represents a StockPilot user.

    Attributes:
        id: Unique identifier (auto-generated).
        email: Login email (unique).
        display_name: Name shown in the interface.
        role: Role governing what the user may do.
        is_active: Inactive users cannot act.
        created_by: ID of the admin who created this user.
        assigned_warehouse_ids: Warehouses an employee is restricted to.
        created_at: Creation timestamp.
    """

    id: int
    email: str
    display_name: Optional[str]
    role: UserRole
    is_active: bool = True
    created_by: Optional[int] = None
    assigned_warehouse_ids: List[int] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @property
    def can_manage(self) -> bool:
        """Whether the user may manage catalogue records."""
        return self.is_active and self.role in MANAGER_ROLES
