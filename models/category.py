"""Category models for the product catalogue."""

from dataclasses import dataclass
from datetime import datetime
from typing import Hashable, Optional

TOP_LEVEL_LABEL = "Top-level"


@dataclass
class Category:
    """Represents a product category.

    Attributes:
        id: Unique identifier (auto-generated by the store).
        name: Display name, unique among siblings.
        description: Optional description of what belongs in this category.
        parent_category_id: Parent category ID, or None for a top-level category.
        sort_order: Position among siblings (ascending).
        is_active: Inactive categories are hidden from employees.
        created_by: ID of the user who created the category.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
    """

    id: Hashable
    name: str
    description: Optional[str] = None
    parent_category_id: Optional[Hashable] = None
    sort_order: int = 0
    is_active: bool = True
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class HierarchicalCategory(Category):
    """A category positioned inside the category forest.

    Attributes:
        depth: 0 for top-level categories, parent's depth + 1 otherwise.
        parent_category_name: Name of the parent, or "Top-level".
    """

    depth: int = 0
    parent_category_name: str = TOP_LEVEL_LABEL
