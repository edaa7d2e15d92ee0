"""Product service for database operations."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional

from models.product import Product
from tools.products import calculate_selling_price, generate_sku, to_decimal
from logger import get_logger

logger = get_logger()

COLUMNS = (
    "id, name, description, sku, cost_price, base_price, discount_percentage, "
    "discount_amount, selling_price, unit_of_measure, supplier_id, tags, "
    "low_stock_threshold, barcode, is_available_for_sale, is_active, "
    "created_by, created_at, updated_at"
)
UPDATABLE_FIELDS = (
    "name",
    "description",
    "base_price",
    "discount_percentage",
    "discount_amount",
    "unit_of_measure",
    "supplier_id",
    "category_ids",
    "tags",
    "low_stock_threshold",
    "barcode",
    "is_available_for_sale",
)
PRICING_FIELDS = ("base_price", "discount_percentage", "discount_amount")
MONEY_FIELDS = PRICING_FIELDS + ("cost_price", "selling_price")
SKU_ATTEMPTS = 5


class ProductService:
    """Service for managing products."""

    def __init__(self, db_manager):
        self.db_manager = db_manager

    def find_all(
        self,
        include_inactive: bool = False,
        category_id: Optional[int] = None,
        supplier_id: Optional[int] = None,
        available_for_sale: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[Product]:
        """Get products ordered by name.

        Args:
            include_inactive: Whether to include deactivated products.
            category_id: Only products linked to this category.
            supplier_id: Only products from this supplier.
            available_for_sale: Only products with this sale flag.
            search: Case-insensitive substring of name, SKU or a tag.
        """
        conditions = []
        params = []
        if not include_inactive:
            conditions.append("is_active = 1")
        if available_for_sale is not None:
            conditions.append("is_available_for_sale = ?")
            params.append(int(available_for_sale))
        if category_id is not None:
            conditions.append(
                "id IN (SELECT product_id FROM product_categories WHERE category_id = ?)"
            )
            params.append(category_id)
        if supplier_id is not None:
            conditions.append("supplier_id = ?")
            params.append(supplier_id)

        sql = f"SELECT {COLUMNS} FROM products"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY name, id"

        with self.db_manager.connect() as conn:
            rows = conn.execute(sql, params).fetchall()
            products = [self._row_to_product(conn, row) for row in rows]

        if search:
            needle = search.casefold()
            products = [
                p
                for p in products
                if needle in p.name.casefold()
                or needle in p.sku.casefold()
                or any(needle in tag.casefold() for tag in p.tags)
            ]
        return products

    def find(self, product_id: int) -> Optional[Product]:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM products WHERE id = ?", (product_id,)
            ).fetchone()
            return self._row_to_product(conn, row) if row else None

    def find_by_sku(self, sku: str) -> Optional[Product]:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM products WHERE sku = ?", (sku.strip(),)
            ).fetchone()
            return self._row_to_product(conn, row) if row else None

    def is_sku_unique(self, sku: str, exclude_id: Optional[int] = None) -> bool:
        existing = self.find_by_sku(sku)
        return existing is None or existing.id == exclude_id

    def create(
        self,
        name: str,
        base_price,
        category_ids: List[int],
        supplier_id: int,
        description: str = "",
        sku: Optional[str] = None,
        discount_percentage=0,
        discount_amount=0,
        unit_of_measure: str = "",
        tags: Iterable[str] = (),
        low_stock_threshold: int = 0,
        barcode: str = "",
        is_available_for_sale: bool = True,
        created_by: Optional[int] = None,
    ) -> Product:
        """Create a new, active product with a zero cost price.

        A SKU is generated from the name when none is given.

        Raises:
            ValueError: If the SKU is taken, the supplier or a category is
                missing or inactive, or no category is given.
        """
        sku = self._resolve_sku(name, sku)
        self._check_supplier(supplier_id)
        self._check_categories(category_ids)

        selling_price = calculate_selling_price(
            base_price, discount_percentage, discount_amount
        )

        with self.db_manager.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO products
                    (name, description, sku, cost_price, base_price,
                     discount_percentage, discount_amount, selling_price,
                     unit_of_measure, supplier_id, tags, low_stock_threshold,
                     barcode, is_available_for_sale, created_by)
                VALUES (?, ?, ?, 0, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    name,
                    description,
                    sku,
                    float(to_decimal(base_price)),
                    float(to_decimal(discount_percentage)),
                    float(to_decimal(discount_amount)),
                    float(selling_price),
                    unit_of_measure,
                    supplier_id,
                    _join_tags(tags),
                    low_stock_threshold,
                    barcode,
                    int(is_available_for_sale),
                    created_by,
                ),
            )
            product_id = cursor.lastrowid
            _replace_categories(conn, product_id, category_ids)

        logger.info(f"Created product '{name}' (SKU: {sku}, ID: {product_id})")
        return self.find(product_id)

    def update(self, product_id: int, **changes) -> Product:
        """Update some fields of a product.

        SKU and cost price cannot be changed here. The selling price is
        recomputed whenever a pricing field changes.

        Raises:
            ValueError: If the product is not found, a field is not
                updatable, or a new supplier or category is not valid.
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update product fields: {sorted(unknown)}")

        current = self.find(product_id)
        if not current:
            raise ValueError(f"Product with ID {product_id} not found")

        if "supplier_id" in changes and changes["supplier_id"] != current.supplier_id:
            self._check_supplier(changes["supplier_id"])

        category_ids = changes.pop("category_ids", None)
        if category_ids is not None:
            self._check_categories(category_ids)

        for name in PRICING_FIELDS:
            if name in changes:
                changes[name] = _check_amount(name, changes[name])

        if any(name in changes for name in PRICING_FIELDS):
            pricing = {name: changes.get(name, getattr(current, name)) for name in PRICING_FIELDS}
            changes["selling_price"] = calculate_selling_price(**pricing)

        columns = {}
        for column, value in changes.items():
            if column in MONEY_FIELDS:
                value = float(to_decimal(value))
            elif column == "tags":
                value = _join_tags(value)
            elif column == "is_available_for_sale":
                value = int(value)
            columns[column] = value

        with self.db_manager.transaction() as conn:
            if columns:
                assignments = ", ".join(f"{column} = ?" for column in columns)
                conn.execute(
                    f"UPDATE products SET {assignments}, "
                    "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*columns.values(), product_id),
                )
            if category_ids is not None:
                _replace_categories(conn, product_id, category_ids)
                conn.execute(
                    "UPDATE products SET updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (product_id,),
                )

        changed = sorted(columns) + (["category_ids"] if category_ids is not None else [])
        logger.info(f"Updated product {product_id}: {changed}")
        return self.find(product_id)

    def toggle_active(self, product_id: int) -> bool:
        """Flip a product between active and inactive.

        Returns:
            The new is_active value.

        Raises:
            ValueError: If the product is not found.
        """
        product = self.find(product_id)
        if not product:
            raise ValueError(f"Product with ID {product_id} not found")

        is_active = not product.is_active
        with self.db_manager.connect() as conn:
            conn.execute(
                "UPDATE products SET is_active = ?, updated_at = CURRENT_TIMESTAMP "
                "WHERE id = ?",
                (int(is_active), product_id),
            )
            conn.commit()

        logger.info(
            f"Product '{product.name}' {'activated' if is_active else 'deactivated'}"
        )
        return is_active

    def _resolve_sku(self, name: str, sku: Optional[str]) -> str:
        sku = (sku or "").strip()
        if sku:
            if not self.is_sku_unique(sku):
                raise ValueError(
                    f'Product SKU "{sku}" must be unique. This SKU is already in use.'
                )
            return sku

        for _ in range(SKU_ATTEMPTS):
            candidate = generate_sku(name)
            if self.is_sku_unique(candidate):
                return candidate
            logger.warning(f"Generated SKU {candidate} already in use, retrying")
        raise ValueError("Failed to generate a unique SKU. Please enter one manually.")

    def _check_supplier(self, supplier_id: int) -> None:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                "SELECT is_active FROM suppliers WHERE id = ?", (supplier_id,)
            ).fetchone()
        if not row or not row[0]:
            raise ValueError("Selected primary supplier is not valid or not active.")

    def _check_categories(self, category_ids: List[int]) -> None:
        if not category_ids:
            raise ValueError("At least one category is required.")
        with self.db_manager.connect() as conn:
            for category_id in category_ids:
                row = conn.execute(
                    "SELECT is_active FROM categories WHERE id = ?", (category_id,)
                ).fetchone()
                if not row or not row[0]:
                    raise ValueError(
                        f'Category ID "{category_id}" is not valid or not active.'
                    )

    def _row_to_product(self, conn, row: tuple) -> Product:
        category_rows = conn.execute(
            "SELECT category_id FROM product_categories WHERE product_id = ? "
            "ORDER BY category_id",
            (row[0],),
        ).fetchall()
        return Product(
            id=row[0],
            name=row[1],
            description=row[2],
            sku=row[3],
            cost_price=Decimal(str(row[4])),
            base_price=Decimal(str(row[5])),
            discount_percentage=Decimal(str(row[6])),
            discount_amount=Decimal(str(row[7])),
            selling_price=Decimal(str(row[8])),
            unit_of_measure=row[9],
            supplier_id=row[10],
            tags=[tag for tag in row[11].split(",") if tag],
            low_stock_threshold=row[12],
            barcode=row[13],
            is_available_for_sale=bool(row[14]),
            is_active=bool(row[15]),
            created_by=row[16],
            category_ids=[r[0] for r in category_rows],
            created_at=datetime.fromisoformat(row[17]) if row[17] else None,
            updated_at=datetime.fromisoformat(row[18]) if row[18] else None,
        )


def _check_amount(name: str, value) -> Decimal:
    try:
        amount = to_decimal(value)
    except InvalidOperation:
        raise ValueError(f"{name} must be a number.") from None
    if amount < 0 or (name == "discount_percentage" and amount > 100):
        raise ValueError(f"{name} is out of range.")
    return amount


def _join_tags(tags: Iterable[str]) -> str:
    return ",".join(tag.strip() for tag in tags if tag.strip())


def _replace_categories(conn, product_id: int, category_ids: Iterable[int]) -> None:
    conn.execute("DELETE FROM product_categories WHERE product_id = ?", (product_id,))
    conn.executemany(
        "INSERT INTO product_categories (product_id, category_id) VALUES (?, ?)",
        [(product_id, category_id) for category_id in dict.fromkeys(category_ids)],
    )
