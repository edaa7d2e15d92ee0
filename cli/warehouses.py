#!/usr/bin/env python3

import sys

from auth import require_role
from models.user import MANAGER_ROLES, UserRole
from validation import WarehouseForm, validate
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List warehouses."""
    actor = require_role(services.current_user(args.acting_as), *UserRole)

    include_inactive = args.all and actor.can_manage
    warehouses = services.warehouses.find_all(include_inactive=include_inactive)
    if actor.role == UserRole.EMPLOYEE and actor.assigned_warehouse_ids:
        warehouses = [w for w in warehouses if w.id in actor.assigned_warehouse_ids]

    if not warehouses:
        logger.info("No warehouses found.")
        return

    logger.info("\nWarehouses:")
    logger.info("=" * 80)
    for warehouse in warehouses:
        flags = []
        if warehouse.is_default:
            flags.append("default")
        if not warehouse.is_active:
            flags.append("inactive")
        suffix = f" ({', '.join(flags)})" if flags else ""
        logger.info(f"ID: {warehouse.id}  {warehouse.name}{suffix}")
        if warehouse.location:
            logger.info(f"  Location: {warehouse.location}")
        logger.info(f"  Contact: {warehouse.contact_person} ({warehouse.contact_phone})")
        logger.info("-" * 80)

    logger.info(f"\nTotal warehouses: {len(warehouses)}")


def cmd_create(args, services):
    """Create a new warehouse."""
    actor = require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    result = validate(
        WarehouseForm,
        {
            "name": args.name,
            "location": args.location,
            "description": args.description,
            "contact_person": args.contact_person,
            "contact_phone": args.contact_phone,
            "is_default": args.default,
        },
    )
    if not result.ok:
        for message in result.messages():
            logger.error(message)
        sys.exit(1)

    form = result.value
    try:
        warehouse = services.warehouses.create(
            **form.model_dump(), created_by=actor.id
        )
    except ValueError as e:
        logger.error(f"Error creating warehouse: {e}")
        sys.exit(1)

    logger.info(f"\n✓ Warehouse created successfully with ID: {warehouse.id}")


def cmd_toggle(args, services):
    """Activate or deactivate a warehouse."""
    require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    try:
        is_active = services.warehouses.toggle_active(args.warehouse_id)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"✓ Warehouse {'activated' if is_active else 'deactivated'}.")


def cmd_default(args, services):
    """Make a warehouse the default."""
    require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    try:
        warehouse = services.warehouses.set_default(args.warehouse_id)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"✓ '{warehouse.name}' is now the default warehouse.")


def setup_parser(subparsers):
    """Setup warehouses subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "warehouses",
        help="Manage warehouses",
        description="List, create and (de)activate warehouses",
    )

    warehouses_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available warehouse commands",
        dest="subcommand",
        required=True,
    )

    list_parser = warehouses_subparsers.add_parser("list", help="List warehouses")
    list_parser.add_argument(
        "--all", action="store_true", help="Include inactive warehouses (admins only)"
    )
    list_parser.set_defaults(func=cmd_list)

    create_parser = warehouses_subparsers.add_parser(
        "create", help="Create a new warehouse"
    )
    create_parser.add_argument("name", help="Warehouse name")
    create_parser.add_argument("--contact-person", required=True)
    create_parser.add_argument("--contact-phone", required=True)
    create_parser.add_argument("--location")
    create_parser.add_argument("--description")
    create_parser.add_argument(
        "--default", action="store_true", help="Make this the default warehouse"
    )
    create_parser.set_defaults(func=cmd_create)

    toggle_parser = warehouses_subparsers.add_parser(
        "toggle", help="Activate or deactivate a warehouse"
    )
    toggle_parser.add_argument("warehouse_id", type=int)
    toggle_parser.set_defaults(func=cmd_toggle)

    default_parser = warehouses_subparsers.add_parser(
        "default", help="Set the default warehouse"
    )
    default_parser.add_argument("warehouse_id", type=int)
    default_parser.set_defaults(func=cmd_default)
