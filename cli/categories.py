#!/usr/bin/env python3

import sys
import json
from typing import List, Optional

from auth import require_role
from config import get_seed_dir
from models.category import HierarchicalCategory
from models.user import MANAGER_ROLES, UserRole
from validation import CategoryForm, validate
from logger import get_logger

logger = get_logger()

INDENT = "    "


def format_category_rows(categories: List[HierarchicalCategory]) -> List[str]:
    """Render categories as indented table rows, one level of INDENT per depth."""
    rows = []
    for category in categories:
        status = "active" if category.is_active else "inactive"
        rows.append(
            f"{category.id:>5}  {INDENT * category.depth}{category.name}"
            f"  [{status}, sort {category.sort_order}, parent: {category.parent_category_name}]"
        )
    return rows


def cmd_list(args, services):
    """List categories as an indented tree."""
    actor = require_role(services.current_user(args.acting_as), *UserRole)

    # Employees only ever see active categories
    include_inactive = args.show_inactive and actor.can_manage
    categories = services.categories.hierarchy(
        include_inactive=include_inactive, search_term=args.search
    )

    if not categories:
        logger.info("No categories found.")
        return

    logger.info("\nCategories:")
    logger.info("=" * 80)
    for row in format_category_rows(categories):
        logger.info(row)
    logger.info("=" * 80)
    logger.info(f"Total categories: {len(categories)}")


def _validated_form(data: dict) -> CategoryForm:
    result = validate(CategoryForm, data)
    if not result.ok:
        for message in result.messages():
            logger.error(message)
        sys.exit(1)
    return result.value


def cmd_create(args, services):
    """Create a new category."""
    actor = require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    form = _validated_form(
        {
            "name": args.name,
            "description": args.description,
            "parent_category_id": args.parent_id,
            "sort_order": args.sort_order,
        }
    )

    try:
        category = services.categories.create(
            form.name,
            form.description,
            form.parent_category_id,
            form.sort_order,
            created_by=actor.id,
        )
    except ValueError as e:
        logger.error(f"Error creating category: {e}")
        sys.exit(1)

    logger.info(f"\n✓ Category created successfully with ID: {category.id}")
    logger.info(f"  Name: {category.name}")
    if category.parent_category_id:
        logger.info(f"  Parent ID: {category.parent_category_id}")


def cmd_update(args, services):
    """Update fields of an existing category."""
    require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    category = services.categories.find(args.category_id)
    if not category:
        logger.error(f"Category with ID {args.category_id} not found.")
        sys.exit(1)

    if args.top_level:
        parent_id = None
    elif args.parent_id is not None:
        parent_id = args.parent_id
    else:
        parent_id = category.parent_category_id

    # Validate the merged record, then send only what changed
    merged = {
        "name": args.name if args.name is not None else category.name,
        "description": (
            args.description if args.description is not None else category.description
        ),
        "parent_category_id": parent_id,
        "sort_order": (
            args.sort_order if args.sort_order is not None else category.sort_order
        ),
    }
    form = _validated_form(merged)
    changes = {
        field: getattr(form, field)
        for field in merged
        if getattr(form, field) != getattr(category, field)
    }

    if not changes:
        logger.info("Nothing to update.")
        return

    try:
        updated = services.categories.update(args.category_id, **changes)
    except ValueError as e:
        logger.error(f"Error updating category: {e}")
        sys.exit(1)

    logger.info(f"✓ Category '{updated.name}' updated ({', '.join(sorted(changes))})")


def cmd_toggle(args, services):
    """Activate or deactivate a category."""
    require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    try:
        is_active = services.categories.toggle_active(args.category_id)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"✓ Category {'activated' if is_active else 'deactivated'}.")


def cmd_seed(args, services):
    """Seed categories from the bundled JSON file."""
    actor = require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    seed_file = get_seed_dir() / "categories.json"
    if not seed_file.exists():
        logger.error(f"Seed file not found: {seed_file}")
        sys.exit(1)

    try:
        with open(seed_file, "r", encoding="utf-8") as f:
            categories_data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Error parsing JSON file: {e}")
        sys.exit(1)

    logger.info("\nSeeding categories from db/seed/categories.json")
    logger.info("=" * 80)

    created, skipped = seed_categories(services, categories_data, created_by=actor.id)

    logger.info("=" * 80)
    logger.info("\nSeeding complete!")
    logger.info(f"Created: {created}")
    logger.info(f"Skipped: {skipped}")


def seed_categories(
    services,
    categories_data: list,
    parent_id: Optional[int] = None,
    depth: int = 0,
    created_by: Optional[int] = None,
):
    """Create seed categories and their children, skipping existing ones.

    Returns:
        Tuple of (created count, skipped count).
    """
    created = skipped = 0
    prefix = INDENT * depth

    for index, category_data in enumerate(categories_data, start=1):
        name = category_data.get("name")
        if not name:
            logger.warning(f"{prefix}Skipping category with no name")
            continue

        existing = services.categories.find_by_name(name, parent_id)
        if existing:
            logger.info(f"{prefix}⊘ Skipped '{name}' (already exists)")
            skipped += 1
            category_id = existing.id
        else:
            category = services.categories.create(
                name,
                category_data.get("description"),
                parent_id,
                category_data.get("sort_order", index),
                created_by=created_by,
            )
            logger.info(f"{prefix}✓ Created '{name}' (ID: {category.id})")
            created += 1
            category_id = category.id

        child_created, child_skipped = seed_categories(
            services,
            category_data.get("children", []),
            category_id,
            depth + 1,
            created_by,
        )
        created += child_created
        skipped += child_skipped

    return created, skipped


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage categories",
        description="List, create, update and (de)activate product categories",
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    # categories list
    list_parser = categories_subparsers.add_parser(
        "list", help="List categories as a tree"
    )
    list_parser.add_argument(
        "--show-inactive",
        action="store_true",
        help="Include inactive categories (admins only)",
    )
    list_parser.add_argument("--search", help="Filter by name, description or parent")
    list_parser.set_defaults(func=cmd_list)

    # categories create
    create_parser = categories_subparsers.add_parser(
        "create", help="Create a new category"
    )
    create_parser.add_argument("name", help="Category name")
    create_parser.add_argument("--description", help="Category description")
    create_parser.add_argument("--parent-id", type=int, help="Parent category ID")
    create_parser.add_argument(
        "--sort-order", type=int, default=0, help="Position among siblings"
    )
    create_parser.set_defaults(func=cmd_create)

    # categories update
    update_parser = categories_subparsers.add_parser(
        "update", help="Update a category"
    )
    update_parser.add_argument("category_id", type=int, help="ID of the category")
    update_parser.add_argument("--name", help="New name")
    update_parser.add_argument("--description", help="New description")
    parent_group = update_parser.add_mutually_exclusive_group()
    parent_group.add_argument("--parent-id", type=int, help="New parent category ID")
    parent_group.add_argument(
        "--top-level", action="store_true", help="Move to the top level"
    )
    update_parser.add_argument("--sort-order", type=int, help="New sort order")
    update_parser.set_defaults(func=cmd_update)

    # categories toggle
    toggle_parser = categories_subparsers.add_parser(
        "toggle", help="Activate or deactivate a category"
    )
    toggle_parser.add_argument("category_id", type=int, help="ID of the category")
    toggle_parser.set_defaults(func=cmd_toggle)

    # categories seed
    seed_parser = categories_subparsers.add_parser(
        "seed", help="Seed categories from JSON file"
    )
    seed_parser.set_defaults(func=cmd_seed)
