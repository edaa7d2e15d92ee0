"""Supplier service for database operations."""

from datetime import datetime
from typing import List, Optional

from models.supplier import Supplier
from logger import get_logger

logger = get_logger()

COLUMNS = (
    "id, name, contact_person, contact_email, contact_phone, address, notes, "
    "is_active, created_by, created_at, updated_at"
)
UPDATABLE_FIELDS = (
    "name",
    "contact_person",
    "contact_email",
    "contact_phone",
    "address",
    "notes",
)


class SupplierService:
    """Service for managing suppliers."""

    def __init__(self, db_manager):
        self.db_manager = db_manager

    def find_all(self, include_inactive: bool = False) -> List[Supplier]:
        """Get suppliers ordered by name.

        Args:
            include_inactive: Whether to include deactivated suppliers.
        """
        sql = f"SELECT {COLUMNS} FROM suppliers"
        if not include_inactive:
            sql += " WHERE is_active = 1"
        sql += " ORDER BY name"

        with self.db_manager.connect() as conn:
            return [self._row_to_supplier(row) for row in conn.execute(sql).fetchall()]

    def find(self, supplier_id: int) -> Optional[Supplier]:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM suppliers WHERE id = ?", (supplier_id,)
            ).fetchone()
            return self._row_to_supplier(row) if row else None

    def find_by_name(self, name: str) -> Optional[Supplier]:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM suppliers WHERE name = ?", (name,)
            ).fetchone()
            return self._row_to_supplier(row) if row else None

    def is_name_unique(self, name: str, exclude_id: Optional[int] = None) -> bool:
        existing = self.find_by_name(name)
        return existing is None or existing.id == exclude_id

    def create(
        self,
        name: str,
        contact_person: str,
        contact_email: str,
        contact_phone: str,
        address: str,
        notes: str = "",
        created_by: Optional[int] = None,
    ) -> Supplier:
        """Create a new, active supplier.

        Raises:
            ValueError: If the name is already in use.
        """
        if not self.is_name_unique(name):
            raise ValueError("Supplier name must be unique.")

        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO suppliers
                    (name, contact_person, contact_email, contact_phone, address,
                     notes, created_by)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    name,
                    contact_person,
                    contact_email,
                    contact_phone,
                    address,
                    notes,
                    created_by,
                ),
            )
            conn.commit()
            supplier_id = cursor.lastrowid

        logger.info(f"Created supplier '{name}' (ID: {supplier_id})")
        return self.find(supplier_id)

    def update(self, supplier_id: int, **changes) -> Supplier:
        """Update some fields of a supplier.

        Raises:
            ValueError: If the supplier is not found, a field is unknown or
                the new name is taken.
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update supplier fields: {sorted(unknown)}")

        if not self.find(supplier_id):
            raise ValueError(f"Supplier with ID {supplier_id} not found")

        if "name" in changes and not self.is_name_unique(
            changes["name"], exclude_id=supplier_id
        ):
            raise ValueError("Supplier name must be unique.")

        if changes:
            assignments = ", ".join(f"{column} = ?" for column in changes)
            with self.db_manager.connect() as conn:
                conn.execute(
                    f"UPDATE suppliers SET {assignments}, "
                    "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*changes.values(), supplier_id),
                )
                conn.commit()
            logger.info(f"Updated supplier {supplier_id}: {sorted(changes)}")

        return self.find(supplier_id)

    def toggle_active(self, supplier_id: int) -> bool:
        """Flip a supplier between active and inactive.

        Returns:
            The new is_active value.

        Raises:
            ValueError: If the supplier is not found.
        """
        supplier = self.find(supplier_id)
        if not supplier:
            raise ValueError(f"Supplier with ID {supplier_id} not found")

        is_active = not supplier.is_active
        with self.db_manager.connect() as conn:
            conn.execute(
                "UPDATE suppliers SET is_active = ?, updated_at = CURRENT_TIMESTAMP "
                "WHERE id = ?",
                (int(is_active), supplier_id),
            )
            conn.commit()

        logger.info(
            f"Supplier '{supplier.name}' {'activated' if is_active else 'deactivated'}"
        )
        return is_active

    def _row_to_supplier(self, row: tuple) -> Supplier:
        return Supplier(
            id=row[0],
            name=row[1],
            contact_person=row[2],
            contact_email=row[3],
            contact_phone=row[4],
            address=row[5],
            notes=row[6],
            is_active=bool(row[7]),
            created_by=row[8],
            created_at=datetime.fromisoformat(row[9]) if row[9] else None,
            updated_at=datetime.fromisoformat(row[10]) if row[10] else None,
        )
