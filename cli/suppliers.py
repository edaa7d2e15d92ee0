#!/usr/bin/env python3

import sys

from auth import require_role
from models.user import MANAGER_ROLES
from validation import SupplierForm, validate
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List suppliers."""
    require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    suppliers = services.suppliers.find_all(include_inactive=args.all)
    if not suppliers:
        logger.info("No suppliers found.")
        return

    logger.info("\nSuppliers:")
    logger.info("=" * 80)
    for supplier in suppliers:
        status = "" if supplier.is_active else " (inactive)"
        logger.info(f"ID: {supplier.id}  {supplier.name}{status}")
        logger.info(f"  Contact: {supplier.contact_person} <{supplier.contact_email}>")
        logger.info(f"  Phone: {supplier.contact_phone}")
        if supplier.notes:
            logger.info(f"  Notes: {supplier.notes}")
        logger.info("-" * 80)

    logger.info(f"\nTotal suppliers: {len(suppliers)}")


def cmd_create(args, services):
    """Create a new supplier."""
    actor = require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    result = validate(
        SupplierForm,
        {
            "name": args.name,
            "contact_person": args.contact_person,
            "contact_email": args.contact_email,
            "contact_phone": args.contact_phone,
            "address": args.address,
            "notes": args.notes or "",
        },
    )
    if not result.ok:
        for message in result.messages():
            logger.error(message)
        sys.exit(1)

    try:
        supplier = services.suppliers.create(
            **result.value.model_dump(), created_by=actor.id
        )
    except ValueError as e:
        logger.error(f"Error creating supplier: {e}")
        sys.exit(1)

    logger.info(f"\n✓ Supplier created successfully with ID: {supplier.id}")


def cmd_toggle(args, services):
    """Activate or deactivate a supplier."""
    require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    try:
        is_active = services.suppliers.toggle_active(args.supplier_id)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"✓ Supplier {'activated' if is_active else 'deactivated'}.")


def setup_parser(subparsers):
    """Setup suppliers subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "suppliers",
        help="Manage suppliers",
        description="List, create and (de)activate suppliers",
    )

    suppliers_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available supplier commands",
        dest="subcommand",
        required=True,
    )

    list_parser = suppliers_subparsers.add_parser("list", help="List suppliers")
    list_parser.add_argument(
        "--all", action="store_true", help="Include inactive suppliers"
    )
    list_parser.set_defaults(func=cmd_list)

    create_parser = suppliers_subparsers.add_parser(
        "create", help="Create a new supplier"
    )
    create_parser.add_argument("name", help="Supplier name")
    create_parser.add_argument("--contact-person", required=True)
    create_parser.add_argument("--contact-email", required=True)
    create_parser.add_argument("--contact-phone", required=True)
    create_parser.add_argument("--address", required=True)
    create_parser.add_argument("--notes")
    create_parser.set_defaults(func=cmd_create)

    toggle_parser = suppliers_subparsers.add_parser(
        "toggle", help="Activate or deactivate a supplier"
    )
    toggle_parser.add_argument("supplier_id", type=int)
    toggle_parser.set_defaults(func=cmd_toggle)
