"""Quotation service: requests for prices sent to suppliers."""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from models.quotation import (
    AdditionalCost,
    AdditionalCostType,
    Quotation,
    QuotationDetail,
    QuotationStatus,
)
from tools.quotations import (
    RECEIVABLE_STATUSES,
    calculate_subtotal,
    calculate_total,
    can_transition,
)
from validation import QuotationReceiptForm, validate
from logger import get_logger

logger = get_logger()

COLUMNS = (
    "id, supplier_id, status, request_date, response_deadline, received_date, "
    "products_subtotal, total_quotation, shipping_conditions, notes, "
    "created_by, created_at, updated_at"
)
DETAIL_COLUMNS = (
    "id, product_id, required_quantity, quoted_quantity, unit_price_quoted, "
    "conditions, estimated_delivery_date, notes"
)


class QuotationService:
    """Service for managing supplier quotations."""

    def __init__(self, db_manager):
        self.db_manager = db_manager

    def find_all(
        self,
        supplier_id: Optional[int] = None,
        status: Optional[QuotationStatus] = None,
    ) -> List[Quotation]:
        """Get quotations, newest first."""
        conditions = []
        params = []
        if supplier_id is not None:
            conditions.append("supplier_id = ?")
            params.append(supplier_id)
        if status is not None:
            conditions.append("status = ?")
            params.append(QuotationStatus(status).value)

        sql = f"SELECT {COLUMNS} FROM quotations"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY request_date DESC, id DESC"

        with self.db_manager.connect() as conn:
            rows = conn.execute(sql, params).fetchall()
            return [self._row_to_quotation(conn, row) for row in rows]

    def find(self, quotation_id: int) -> Optional[Quotation]:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM quotations WHERE id = ?", (quotation_id,)
            ).fetchone()
            return self._row_to_quotation(conn, row) if row else None

    def create(
        self,
        supplier_id: int,
        items: Iterable[Tuple[int, int]],
        response_deadline: Optional[date] = None,
        notes: str = "",
        created_by: Optional[int] = None,
    ) -> Quotation:
        """Request a quotation from a supplier.

        Args:
            supplier_id: Supplier to ask.
            items: (product_id, required_quantity) pairs. Unknown or inactive
                products are skipped.
            response_deadline: Date the supplier should answer by.
            notes: Free text sent with the request.
            created_by: ID of the requesting user.

        Raises:
            ValueError: If the supplier is missing or inactive, a quantity is
                not positive, or no active product is requested.
        """
        with self.db_manager.connect() as conn:
            row = conn.execute(
                "SELECT is_active FROM suppliers WHERE id = ?", (supplier_id,)
            ).fetchone()
        if not row or not row[0]:
            raise ValueError("Supplier not found or is not active.")

        lines = []
        for product_id, required_quantity in items:
            if required_quantity <= 0:
                raise ValueError(
                    f"Required quantity for product {product_id} must be positive."
                )
            if not self._is_active_product(product_id):
                logger.warning(
                    f"Product ID {product_id} for quotation is not found or inactive. "
                    "Skipping."
                )
                continue
            lines.append((product_id, required_quantity))

        if not lines:
            raise ValueError(
                "At least one active product must be selected for the quotation request."
            )

        with self.db_manager.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO quotations (supplier_id, response_deadline, notes, created_by)
                VALUES (?, ?, ?, ?)
                """,
                (
                    supplier_id,
                    response_deadline.isoformat() if response_deadline else None,
                    notes,
                    created_by,
                ),
            )
            quotation_id = cursor.lastrowid
            conn.executemany(
                """
                INSERT INTO quotation_details (quotation_id, product_id, required_quantity)
                VALUES (?, ?, ?)
                """,
                [(quotation_id, product_id, quantity) for product_id, quantity in lines],
            )

        logger.info(
            f"Requested quotation {quotation_id} from supplier {supplier_id} "
            f"for {len(lines)} product(s)"
        )
        return self.find(quotation_id)

    def receive(self, quotation_id: int, data: dict) -> Quotation:
        """Record the supplier's answer.

        The subtotal is recomputed from the quoted lines and the total adds
        the additional costs. Previous answers are replaced.

        Args:
            quotation_id: Quotation being answered.
            data: Raw QuotationReceiptForm data.

        Raises:
            ValueError: If the quotation is missing, no longer open, the data
                is invalid, or a line names a product that was not requested.
        """
        quotation = self.find(quotation_id)
        if not quotation:
            raise ValueError(f"Quotation with ID {quotation_id} not found")
        if quotation.status not in RECEIVABLE_STATUSES:
            raise ValueError(
                "Cannot update received details for quotation with status: "
                f"{quotation.status.value}."
            )

        result = validate(QuotationReceiptForm, data)
        if not result.ok:
            raise ValueError("; ".join(result.messages()))
        receipt = result.value

        requested = {detail.product_id: detail.required_quantity for detail in quotation.details}
        details = []
        for item in receipt.details:
            if item.product_id not in requested:
                raise ValueError(
                    f"Product {item.product_id} was not requested in quotation {quotation_id}."
                )
            details.append(
                QuotationDetail(
                    product_id=item.product_id,
                    required_quantity=requested[item.product_id],
                    quoted_quantity=item.quoted_quantity,
                    unit_price_quoted=item.unit_price_quoted,
                    conditions=item.conditions,
                    estimated_delivery_date=item.estimated_delivery_date,
                    notes=item.notes,
                )
            )
        costs = [
            AdditionalCost(cost.description, cost.amount, cost.cost_type)
            for cost in receipt.additional_costs
        ]

        subtotal = calculate_subtotal(details)
        total = calculate_total(subtotal, costs)

        with self.db_manager.transaction() as conn:
            conn.execute(
                """
                UPDATE quotations
                SET status = ?, received_date = ?, products_subtotal = ?,
                    total_quotation = ?, shipping_conditions = ?, notes = ?,
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (
                    QuotationStatus.RECEIVED.value,
                    receipt.received_date.isoformat(),
                    float(subtotal),
                    float(total),
                    receipt.shipping_conditions,
                    receipt.notes,
                    quotation_id,
                ),
            )
            conn.execute(
                "DELETE FROM quotation_details WHERE quotation_id = ?", (quotation_id,)
            )
            conn.execute(
                "DELETE FROM quotation_additional_costs WHERE quotation_id = ?",
                (quotation_id,),
            )
            conn.executemany(
                """
                INSERT INTO quotation_details
                    (quotation_id, product_id, required_quantity, quoted_quantity,
                     unit_price_quoted, conditions, estimated_delivery_date, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        quotation_id,
                        d.product_id,
                        d.required_quantity,
                        d.quoted_quantity,
                        float(d.unit_price_quoted),
                        d.conditions,
                        d.estimated_delivery_date.isoformat(),
                        d.notes,
                    )
                    for d in details
                ],
            )
            conn.executemany(
                """
                INSERT INTO quotation_additional_costs
                    (quotation_id, description, amount, cost_type)
                VALUES (?, ?, ?, ?)
                """,
                [
                    (quotation_id, c.description, float(c.amount), c.cost_type.value)
                    for c in costs
                ],
            )

        logger.info(f"Received quotation {quotation_id}: total {total}")
        return self.find(quotation_id)

    def update_status(self, quotation_id: int, new_status) -> Quotation:
        """Move a quotation to a new status, e.g. mark it as awarded.

        Raises:
            ValueError: If the quotation is missing, the status is unknown or
                the transition is not allowed.
        """
        quotation = self.find(quotation_id)
        if not quotation:
            raise ValueError(f"Quotation with ID {quotation_id} not found")

        try:
            new_status = QuotationStatus(new_status)
        except ValueError:
            raise ValueError(f"Unknown quotation status: {new_status}") from None

        if not can_transition(quotation.status, new_status):
            logger.warning(
                f"Refused quotation {quotation_id} status change "
                f"{quotation.status.value} -> {new_status.value}"
            )
            raise ValueError(
                f"Cannot change quotation status from {quotation.status.value} "
                f"to {new_status.value}."
            )

        with self.db_manager.connect() as conn:
            conn.execute(
                "UPDATE quotations SET status = ?, updated_at = CURRENT_TIMESTAMP "
                "WHERE id = ?",
                (new_status.value, quotation_id),
            )
            conn.commit()

        logger.info(f"Quotation {quotation_id} is now {new_status.value}")
        return self.find(quotation_id)

    def _is_active_product(self, product_id: int) -> bool:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                "SELECT is_active FROM products WHERE id = ?", (product_id,)
            ).fetchone()
        return bool(row and row[0])

    def _row_to_quotation(self, conn, row: tuple) -> Quotation:
        detail_rows = conn.execute(
            f"SELECT {DETAIL_COLUMNS} FROM quotation_details "
            "WHERE quotation_id = ? ORDER BY id",
            (row[0],),
        ).fetchall()
        cost_rows = conn.execute(
            "SELECT id, description, amount, cost_type FROM quotation_additional_costs "
            "WHERE quotation_id = ? ORDER BY id",
            (row[0],),
        ).fetchall()

        return Quotation(
            id=row[0],
            supplier_id=row[1],
            status=QuotationStatus(row[2]),
            request_date=datetime.fromisoformat(row[3]) if row[3] else None,
            response_deadline=date.fromisoformat(row[4]) if row[4] else None,
            received_date=date.fromisoformat(row[5]) if row[5] else None,
            products_subtotal=_to_money(row[6]),
            total_quotation=_to_money(row[7]),
            shipping_conditions=row[8],
            notes=row[9],
            created_by=row[10],
            created_at=datetime.fromisoformat(row[11]) if row[11] else None,
            updated_at=datetime.fromisoformat(row[12]) if row[12] else None,
            details=[
                QuotationDetail(
                    id=d[0],
                    product_id=d[1],
                    required_quantity=d[2],
                    quoted_quantity=d[3],
                    unit_price_quoted=_to_money(d[4]),
                    conditions=d[5],
                    estimated_delivery_date=date.fromisoformat(d[6]) if d[6] else None,
                    notes=d[7],
                )
                for d in detail_rows
            ],
            additional_costs=[
                AdditionalCost(
                    id=c[0],
                    description=c[1],
                    amount=Decimal(str(c[2])),
                    cost_type=AdditionalCostType(c[3]),
                )
                for c in cost_rows
            ],
        )


def _to_money(value) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None
