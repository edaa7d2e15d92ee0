#!/usr/bin/env python3

import sys
import json
from datetime import date

from auth import require_role
from models.quotation import QuotationStatus
from models.user import MANAGER_ROLES
from logger import get_logger

logger = get_logger()


def parse_item(value: str):
    """Parse "PRODUCT_ID:QUANTITY" into a tuple of ints."""
    product_id, _, quantity = value.partition(":")
    try:
        return int(product_id), int(quantity)
    except ValueError:
        raise ValueError(f"Invalid item '{value}', expected PRODUCT_ID:QUANTITY") from None


def _log_quotation(quotation):
    logger.info(
        f"ID: {quotation.id}  supplier {quotation.supplier_id}  [{quotation.status.value}]"
    )
    if quotation.response_deadline:
        logger.info(f"  Answer by: {quotation.response_deadline.isoformat()}")
    if quotation.total_quotation is not None:
        logger.info(
            f"  Subtotal: {quotation.products_subtotal}  Total: {quotation.total_quotation}"
        )


def cmd_list(args, services):
    """List quotations, newest first."""
    require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    quotations = services.quotations.find_all(
        supplier_id=args.supplier_id, status=args.status
    )
    if not quotations:
        logger.info("No quotations found.")
        return

    logger.info("\nQuotations:")
    logger.info("=" * 80)
    for quotation in quotations:
        _log_quotation(quotation)
        logger.info("-" * 80)

    logger.info(f"\nTotal quotations: {len(quotations)}")


def cmd_show(args, services):
    """Show one quotation with its lines and costs."""
    require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    quotation = services.quotations.find(args.quotation_id)
    if not quotation:
        logger.error(f"Quotation with ID {args.quotation_id} not found")
        sys.exit(1)

    _log_quotation(quotation)
    if quotation.shipping_conditions:
        logger.info(f"  Shipping: {quotation.shipping_conditions}")
    for detail in quotation.details:
        quoted = ""
        if detail.quoted_quantity is not None:
            quoted = f" -> {detail.quoted_quantity} x {detail.unit_price_quoted}"
        logger.info(
            f"  Product {detail.product_id}: {detail.required_quantity} required{quoted}"
        )
    for cost in quotation.additional_costs:
        logger.info(f"  + {cost.cost_type.value}: {cost.description} {cost.amount}")


def cmd_create(args, services):
    """Request a quotation from a supplier."""
    actor = require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    try:
        items = [parse_item(item) for item in args.item]
        deadline = date.fromisoformat(args.deadline) if args.deadline else None
        quotation = services.quotations.create(
            args.supplier_id,
            items,
            response_deadline=deadline,
            notes=args.notes or "",
            created_by=actor.id,
        )
    except ValueError as e:
        logger.error(f"Error creating quotation: {e}")
        sys.exit(1)

    logger.info(
        f"\n✓ Quotation {quotation.id} sent with {len(quotation.details)} product(s)"
    )


def cmd_receive(args, services):
    """Record a supplier's answer from a JSON file."""
    require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    with open(args.file, encoding="utf-8") as f:
        data = json.load(f)

    try:
        quotation = services.quotations.receive(args.quotation_id, data)
    except ValueError as e:
        logger.error(f"Error receiving quotation: {e}")
        sys.exit(1)

    logger.info(f"✓ Quotation {quotation.id} received, total {quotation.total_quotation}")


def cmd_status(args, services):
    """Change a quotation's status, e.g. award it."""
    require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    try:
        quotation = services.quotations.update_status(args.quotation_id, args.status)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"✓ Quotation {quotation.id} is now {quotation.status.value}.")


def setup_parser(subparsers):
    """Setup quotations subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    statuses = [status.value for status in QuotationStatus]

    parser = subparsers.add_parser(
        "quotations",
        help="Manage supplier quotations",
        description="Request, receive and award supplier quotations",
    )

    quotations_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available quotation commands",
        dest="subcommand",
        required=True,
    )

    list_parser = quotations_subparsers.add_parser("list", help="List quotations")
    list_parser.add_argument("--supplier-id", type=int)
    list_parser.add_argument("--status", choices=statuses)
    list_parser.set_defaults(func=cmd_list)

    show_parser = quotations_subparsers.add_parser("show", help="Show a quotation")
    show_parser.add_argument("quotation_id", type=int)
    show_parser.set_defaults(func=cmd_show)

    create_parser = quotations_subparsers.add_parser(
        "create", help="Request a quotation from a supplier"
    )
    create_parser.add_argument("supplier_id", type=int)
    create_parser.add_argument(
        "--item",
        action="append",
        required=True,
        help="PRODUCT_ID:QUANTITY (repeatable)",
    )
    create_parser.add_argument("--deadline", help="Answer-by date, YYYY-MM-DD")
    create_parser.add_argument("--notes")
    create_parser.set_defaults(func=cmd_create)

    receive_parser = quotations_subparsers.add_parser(
        "receive", help="Record the supplier's answer"
    )
    receive_parser.add_argument("quotation_id", type=int)
    receive_parser.add_argument(
        "--file",
        required=True,
        help="JSON with shipping_conditions, details and additional_costs",
    )
    receive_parser.set_defaults(func=cmd_receive)

    status_parser = quotations_subparsers.add_parser(
        "status", help="Change a quotation's status"
    )
    status_parser.add_argument("quotation_id", type=int)
    status_parser.add_argument("status", choices=statuses)
    status_parser.set_defaults(func=cmd_status)
