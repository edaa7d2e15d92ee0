"""Category service for database operations."""

from datetime import datetime
from typing import List, Optional

from models.category import Category, HierarchicalCategory
from tools.categories import category_display_list
from logger import get_logger

logger = get_logger()

COLUMNS = (
    "id, name, description, parent_category_id, sort_order, is_active, "
    "created_by, created_at, updated_at"
)
UPDATABLE_FIELDS = ("name", "description", "parent_category_id", "sort_order")


class CategoryService:
    """Service for managing product categories."""

    def __init__(self, db_manager):
        """Initialize the category service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def find_all(self, include_inactive: bool = True) -> List[Category]:
        """Get all categories from the database.

        Args:
            include_inactive: Whether to include deactivated categories.

        Returns:
            List of Category objects, ordered by sort_order then name.
        """
        sql = f"SELECT {COLUMNS} FROM categories"
        if not include_inactive:
            sql += " WHERE is_active = 1"
        sql += " ORDER BY sort_order, name"

        with self.db_manager.connect() as conn:
            rows = conn.execute(sql).fetchall()
            return [self._row_to_category(row) for row in rows]

    def find(self, category_id: int) -> Optional[Category]:
        """Get a single category by ID.

        Args:
            category_id: The category ID to find.

        Returns:
            Category object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM categories WHERE id = ?", (category_id,)
            ).fetchone()

            if row:
                return self._row_to_category(row)
            return None

    def find_by_name(
        self, name: str, parent_category_id: Optional[int] = None
    ) -> Optional[Category]:
        """Get a category by name under a given parent.

        Args:
            name: The category name to find (case-sensitive).
            parent_category_id: Parent to look under; None for top-level.

        Returns:
            Category object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM categories "
                "WHERE name = ? AND parent_category_id IS ?",
                (name, parent_category_id),
            ).fetchone()

            if row:
                return self._row_to_category(row)
            return None

    def is_name_unique(
        self,
        name: str,
        parent_category_id: Optional[int],
        exclude_id: Optional[int] = None,
    ) -> bool:
        """Check that no sibling already uses name.

        Args:
            name: Candidate name.
            parent_category_id: Parent the name must be unique under.
            exclude_id: Category to ignore (the one being renamed).
        """
        existing = self.find_by_name(name, parent_category_id)
        return existing is None or existing.id == exclude_id

    def create(
        self,
        name: str,
        description: Optional[str] = None,
        parent_category_id: Optional[int] = None,
        sort_order: int = 0,
        created_by: Optional[int] = None,
    ) -> Category:
        """Create a new, active category.

        Args:
            name: Category name (unique under its parent).
            description: Optional description of the category.
            parent_category_id: Optional parent category ID.
            sort_order: Position among siblings.
            created_by: ID of the creating user.

        Returns:
            The created Category object with id populated.

        Raises:
            ValueError: If the parent does not exist or the name is taken.
        """
        if parent_category_id is not None and not self.find(parent_category_id):
            raise ValueError(f"Parent category with ID {parent_category_id} not found")
        if not self.is_name_unique(name, parent_category_id):
            raise ValueError(f'Category name "{name}" must be unique under its parent.')

        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO categories
                    (name, description, parent_category_id, sort_order, created_by)
                VALUES (?, ?, ?, ?, ?)
                """,
                (name, description, parent_category_id, sort_order, created_by),
            )
            conn.commit()
            category_id = cursor.lastrowid

        logger.info(f"Created category '{name}' (ID: {category_id})")
        return self.find(category_id)

    def update(self, category_id: int, **changes) -> Category:
        """Update some fields of an existing category.

        Only name, description, parent_category_id and sort_order can be
        changed. Passing parent_category_id=None moves the category to the top
        level.

        Args:
            category_id: The category ID to update.
            **changes: Fields to change.

        Returns:
            The updated Category object.

        Raises:
            ValueError: If the category is not found, a field is unknown, the
                new parent would create a cycle, or the name clashes with a
                sibling.
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update category fields: {sorted(unknown)}")

        current = self.find(category_id)
        if not current:
            raise ValueError(f"Category with ID {category_id} not found")

        new_name = changes.get("name", current.name)
        new_parent_id = changes.get("parent_category_id", current.parent_category_id)

        if new_parent_id != current.parent_category_id:
            self._check_parent(category_id, new_parent_id)

        if new_name != current.name or new_parent_id != current.parent_category_id:
            if not self.is_name_unique(new_name, new_parent_id, exclude_id=category_id):
                raise ValueError(
                    f'Category name "{new_name}" must be unique under its parent.'
                )

        if changes:
            assignments = ", ".join(f"{column} = ?" for column in changes)
            with self.db_manager.connect() as conn:
                conn.execute(
                    f"UPDATE categories SET {assignments}, "
                    "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*changes.values(), category_id),
                )
                conn.commit()
            logger.info(f"Updated category {category_id}: {sorted(changes)}")

        return self.find(category_id)

    def _check_parent(self, category_id: int, new_parent_id: Optional[int]) -> None:
        """Reject a parent that is missing or would close a cycle."""
        if new_parent_id is None:
            return
        if new_parent_id == category_id:
            raise ValueError("A category cannot be its own parent.")

        index = {category.id: category for category in self.find_all()}
        if new_parent_id not in index:
            raise ValueError(f"Parent category with ID {new_parent_id} not found")

        ancestor = index.get(new_parent_id)
        while ancestor is not None:
            if ancestor.id == category_id:
                raise ValueError(
                    "A category cannot be moved beneath one of its own descendants."
                )
            ancestor = index.get(ancestor.parent_category_id)

    def toggle_active(self, category_id: int) -> bool:
        """Flip a category between active and inactive.

        Categories are never deleted; deactivation hides them instead.

        Returns:
            The new is_active value.

        Raises:
            ValueError: If the category is not found.
        """
        category = self.find(category_id)
        if not category:
            raise ValueError(f"Category with ID {category_id} not found")

        is_active = not category.is_active
        with self.db_manager.connect() as conn:
            conn.execute(
                "UPDATE categories SET is_active = ?, updated_at = CURRENT_TIMESTAMP "
                "WHERE id = ?",
                (int(is_active), category_id),
            )
            conn.commit()

        logger.info(
            f"Category '{category.name}' {'activated' if is_active else 'deactivated'}"
        )
        return is_active

    def hierarchy(
        self, include_inactive: bool = False, search_term: Optional[str] = None
    ) -> List[HierarchicalCategory]:
        """Get categories in tree display order.

        The tree is always built from every category, active or not, and
        only then filtered, so depths stay those of the full tree.

        Args:
            include_inactive: Whether inactive categories are listed.
            search_term: Optional case-insensitive filter.

        Returns:
            List of HierarchicalCategory objects.
        """
        return category_display_list(
            self.find_all(include_inactive=True),
            include_inactive=include_inactive,
            search_term=search_term,
        )

    def _row_to_category(self, row: tuple) -> Category:
        """Convert a database row to a Category object."""
        return Category(
            id=row[0],
            name=row[1],
            description=row[2],
            parent_category_id=row[3],
            sort_order=row[4],
            is_active=bool(row[5]),
            created_by=row[6],
            created_at=datetime.fromisoformat(row[7]) if row[7] else None,
            updated_at=datetime.fromisoformat(row[8]) if row[8] else None,
        )
