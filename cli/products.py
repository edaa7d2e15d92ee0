#!/usr/bin/env python3

import sys

from auth import require_role
from models.user import MANAGER_ROLES, UserRole
from validation import ProductForm, validate
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List products."""
    actor = require_role(services.current_user(args.acting_as), *UserRole)

    # Employees only see what can be sold
    if actor.can_manage:
        filters = {"include_inactive": args.all}
    else:
        filters = {"include_inactive": False, "available_for_sale": True}

    products = services.products.find_all(
        category_id=args.category_id,
        supplier_id=args.supplier_id,
        search=args.search,
        **filters,
    )
    if not products:
        logger.info("No products found.")
        return

    logger.info("\nProducts:")
    logger.info("=" * 80)
    for product in products:
        status = "" if product.is_active else " (inactive)"
        logger.info(f"ID: {product.id}  [{product.sku}] {product.name}{status}")
        logger.info(
            f"  Price: {product.selling_price} (base {product.base_price})"
            f"  Categories: {product.category_ids}"
        )
        if product.tags:
            logger.info(f"  Tags: {', '.join(product.tags)}")
        logger.info("-" * 80)

    logger.info(f"\nTotal products: {len(products)}")


def cmd_create(args, services):
    """Create a new product."""
    actor = require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    result = validate(
        ProductForm,
        {
            "name": args.name,
            "description": args.description,
            "sku": args.sku,
            "base_price": args.base_price,
            "discount_percentage": args.discount_percentage,
            "discount_amount": args.discount_amount,
            "unit_of_measure": args.unit or "",
            "category_ids": args.category_id or [],
            "supplier_id": args.supplier_id,
            "tags": args.tags,
            "low_stock_threshold": args.low_stock_threshold,
            "barcode": args.barcode or "",
            "is_available_for_sale": not args.not_for_sale,
        },
    )
    if not result.ok:
        for message in result.messages():
            logger.error(message)
        sys.exit(1)

    try:
        product = services.products.create(
            **result.value.model_dump(), created_by=actor.id
        )
    except ValueError as e:
        logger.error(f"Error creating product: {e}")
        sys.exit(1)

    logger.info(
        f"\n✓ Product created with ID {product.id}, SKU {product.sku}, "
        f"selling price {product.selling_price}"
    )


def cmd_update(args, services):
    """Update an existing product's pricing, supplier or categories."""
    require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    changes = {}
    for name in (
        "name",
        "description",
        "base_price",
        "discount_percentage",
        "discount_amount",
        "supplier_id",
    ):
        value = getattr(args, name)
        if value is not None:
            changes[name] = value
    if args.category_id:
        changes["category_ids"] = args.category_id
    if args.tags is not None:
        changes["tags"] = [tag.strip() for tag in args.tags.split(",") if tag.strip()]

    if not changes:
        logger.error("Nothing to update.")
        sys.exit(1)

    try:
        product = services.products.update(args.product_id, **changes)
    except ValueError as e:
        logger.error(f"Error updating product: {e}")
        sys.exit(1)

    logger.info(f"✓ Product {product.id} updated, selling price {product.selling_price}")


def cmd_toggle(args, services):
    """Activate or deactivate a product."""
    require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    try:
        is_active = services.products.toggle_active(args.product_id)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"✓ Product {'activated' if is_active else 'deactivated'}.")


def setup_parser(subparsers):
    """Setup products subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "products",
        help="Manage products",
        description="List, create, update and (de)activate products",
    )

    products_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available product commands",
        dest="subcommand",
        required=True,
    )

    list_parser = products_subparsers.add_parser("list", help="List products")
    list_parser.add_argument("--all", action="store_true", help="Include inactive products")
    list_parser.add_argument("--category-id", type=int, help="Only this category")
    list_parser.add_argument("--supplier-id", type=int, help="Only this supplier")
    list_parser.add_argument("--search", help="Match name, SKU or tag")
    list_parser.set_defaults(func=cmd_list)

    create_parser = products_subparsers.add_parser("create", help="Create a new product")
    create_parser.add_argument("name", help="Product name")
    create_parser.add_argument("--description", required=True)
    create_parser.add_argument("--sku", help="Generated from the name when omitted")
    create_parser.add_argument("--base-price", required=True)
    create_parser.add_argument("--discount-percentage", default="0")
    create_parser.add_argument("--discount-amount", default="0")
    create_parser.add_argument("--unit", help="Unit of measure")
    create_parser.add_argument(
        "--category-id", type=int, action="append", help="Category (repeatable)"
    )
    create_parser.add_argument("--supplier-id", type=int, required=True)
    create_parser.add_argument("--tags", required=True, help="Comma-separated tags")
    create_parser.add_argument("--low-stock-threshold", type=int, default=0)
    create_parser.add_argument("--barcode")
    create_parser.add_argument(
        "--not-for-sale", action="store_true", help="Hide from employees"
    )
    create_parser.set_defaults(func=cmd_create)

    update_parser = products_subparsers.add_parser("update", help="Update a product")
    update_parser.add_argument("product_id", type=int)
    update_parser.add_argument("--name")
    update_parser.add_argument("--description")
    update_parser.add_argument("--base-price")
    update_parser.add_argument("--discount-percentage")
    update_parser.add_argument("--discount-amount")
    update_parser.add_argument("--supplier-id", type=int)
    update_parser.add_argument(
        "--category-id", type=int, action="append", help="Replaces all categories"
    )
    update_parser.add_argument("--tags", help="Comma-separated, replaces all tags")
    update_parser.set_defaults(func=cmd_update)

    toggle_parser = products_subparsers.add_parser(
        "toggle", help="Activate or deactivate a product"
    )
    toggle_parser.add_argument("product_id", type=int)
    toggle_parser.set_defaults(func=cmd_toggle)
