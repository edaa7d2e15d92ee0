"""Warehouse service for database operations."""

from datetime import datetime
from typing import List, Optional

from models.warehouse import Warehouse
from logger import get_logger

logger = get_logger()

COLUMNS = (
    "id, name, location, description, contact_person, contact_phone, "
    "is_default, is_active, created_by, created_at, updated_at"
)
UPDATABLE_FIELDS = (
    "name",
    "location",
    "description",
    "contact_person",
    "contact_phone",
    "is_default",
)


class WarehouseService:
    """Service for managing warehouses.

    At most one warehouse is the default; the default warehouse is always
    active.
    """

    def __init__(self, db_manager):
        self.db_manager = db_manager

    def find_all(self, include_inactive: bool = False) -> List[Warehouse]:
        """Get warehouses ordered by name.

        Args:
            include_inactive: Whether to include deactivated warehouses.
        """
        sql = f"SELECT {COLUMNS} FROM warehouses"
        if not include_inactive:
            sql += " WHERE is_active = 1"
        sql += " ORDER BY name"

        with self.db_manager.connect() as conn:
            return [self._row_to_warehouse(row) for row in conn.execute(sql).fetchall()]

    def find(self, warehouse_id: int) -> Optional[Warehouse]:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM warehouses WHERE id = ?", (warehouse_id,)
            ).fetchone()
            return self._row_to_warehouse(row) if row else None

    def find_by_name(self, name: str) -> Optional[Warehouse]:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM warehouses WHERE name = ?", (name,)
            ).fetchone()
            return self._row_to_warehouse(row) if row else None

    def find_default(self) -> Optional[Warehouse]:
        """Get the default warehouse, if one is set."""
        with self.db_manager.connect() as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM warehouses WHERE is_default = 1 LIMIT 1"
            ).fetchone()
            return self._row_to_warehouse(row) if row else None

    def is_name_unique(self, name: str, exclude_id: Optional[int] = None) -> bool:
        existing = self.find_by_name(name)
        return existing is None or existing.id == exclude_id

    def create(
        self,
        name: str,
        contact_person: str,
        contact_phone: str,
        location: Optional[str] = None,
        description: Optional[str] = None,
        is_default: bool = False,
        created_by: Optional[int] = None,
    ) -> Warehouse:
        """Create a new, active warehouse.

        Creating a default warehouse clears the flag on the previous default.

        Raises:
            ValueError: If the name is already in use.
        """
        if not self.is_name_unique(name):
            raise ValueError("Warehouse name must be unique.")

        with self.db_manager.transaction() as conn:
            if is_default:
                conn.execute("UPDATE warehouses SET is_default = 0 WHERE is_default = 1")
            cursor = conn.execute(
                """
                INSERT INTO warehouses
                    (name, location, description, contact_person, contact_phone,
                     is_default, created_by)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    name,
                    location,
                    description,
                    contact_person,
                    contact_phone,
                    int(is_default),
                    created_by,
                ),
            )
            warehouse_id = cursor.lastrowid

        logger.info(f"Created warehouse '{name}' (ID: {warehouse_id})")
        return self.find(warehouse_id)

    def update(self, warehouse_id: int, **changes) -> Warehouse:
        """Update some fields of a warehouse.

        Raises:
            ValueError: If the warehouse is not found, a field is unknown, the
                name is taken, or the only default would be unset.
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update warehouse fields: {sorted(unknown)}")

        current = self.find(warehouse_id)
        if not current:
            raise ValueError(f"Warehouse with ID {warehouse_id} not found")

        if "name" in changes and not self.is_name_unique(
            changes["name"], exclude_id=warehouse_id
        ):
            raise ValueError("Warehouse name must be unique.")

        if "is_default" in changes and not changes["is_default"] and current.is_default:
            raise ValueError(
                "Cannot unset the only default warehouse. "
                "Set another warehouse as default first."
            )

        if "is_default" in changes:
            changes["is_default"] = int(changes["is_default"])

        if changes:
            assignments = ", ".join(f"{column} = ?" for column in changes)
            with self.db_manager.transaction() as conn:
                if changes.get("is_default"):
                    conn.execute(
                        "UPDATE warehouses SET is_default = 0 WHERE id != ?",
                        (warehouse_id,),
                    )
                conn.execute(
                    f"UPDATE warehouses SET {assignments}, "
                    "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*changes.values(), warehouse_id),
                )
            logger.info(f"Updated warehouse {warehouse_id}: {sorted(changes)}")

        return self.find(warehouse_id)

    def toggle_active(self, warehouse_id: int) -> bool:
        """Flip a warehouse between active and inactive.

        Returns:
            The new is_active value.

        Raises:
            ValueError: If the warehouse is not found or is the default.
        """
        warehouse = self.find(warehouse_id)
        if not warehouse:
            raise ValueError(f"Warehouse with ID {warehouse_id} not found")
        if warehouse.is_active and warehouse.is_default:
            logger.warning(f"Refused to deactivate default warehouse '{warehouse.name}'")
            raise ValueError(
                "Cannot deactivate the default warehouse. "
                "Set another warehouse as default first."
            )

        is_active = not warehouse.is_active
        with self.db_manager.connect() as conn:
            conn.execute(
                "UPDATE warehouses SET is_active = ?, updated_at = CURRENT_TIMESTAMP "
                "WHERE id = ?",
                (int(is_active), warehouse_id),
            )
            conn.commit()

        logger.info(
            f"Warehouse '{warehouse.name}' {'activated' if is_active else 'deactivated'}"
        )
        return is_active

    def set_default(self, warehouse_id: int) -> Warehouse:
        """Make a warehouse the single default, activating it if needed.

        Raises:
            ValueError: If the warehouse is not found.
        """
        if not self.find(warehouse_id):
            raise ValueError(f"Warehouse with ID {warehouse_id} not found")

        with self.db_manager.transaction() as conn:
            conn.execute(
                "UPDATE warehouses SET is_default = 0, updated_at = CURRENT_TIMESTAMP "
                "WHERE is_default = 1 AND id != ?",
                (warehouse_id,),
            )
            conn.execute(
                "UPDATE warehouses SET is_default = 1, is_active = 1, "
                "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (warehouse_id,),
            )

        logger.info(f"Warehouse {warehouse_id} is now the default")
        return self.find(warehouse_id)

    def _row_to_warehouse(self, row: tuple) -> Warehouse:
        return Warehouse(
            id=row[0],
            name=row[1],
            location=row[2],
            description=row[3],
            contact_person=row[4],
            contact_phone=row[5],
            is_default=bool(row[6]),
            is_active=bool(row[7]),
            created_by=row[8],
            created_at=datetime.fromisoformat(row[9]) if row[9] else None,
            updated_at=datetime.fromisoformat(row[10]) if row[10] else None,
        )
