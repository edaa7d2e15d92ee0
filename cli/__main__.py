#!/usr/bin/env python3
"""
StockPilot CLI - Command-line interface for catalogue and user administration.

Usage:
    python -m cli [--as EMAIL] <command> <subcommand> [options]

Commands:
    categories   Manage product categories
    warehouses   Manage warehouses
    suppliers    Manage suppliers
    products     Manage products
    quotations   Request and award supplier quotations
    users        Manage users
    migrate      Database migrations

Examples:
    python -m cli migrate apply
    python -m cli users bootstrap owner@example.com
    python -m cli users login owner@example.com
    python -m cli categories seed
    python -m cli categories list --show-inactive
    python -m cli --as clerk@example.com categories list --search laptop
    python -m cli quotations status 3 Awarded
"""

import sys
import argparse
from cli import categories, warehouses, suppliers, products, quotations, users, migrate
from auth import PermissionDenied
from config import load_config
from services.base import Services
from db.manager import DatabaseManager
from logger import setup_logging

SERVICE_COMMANDS = (
    "categories",
    "warehouses",
    "suppliers",
    "products",
    "quotations",
    "users",
)


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="StockPilot - Inventory and procurement management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--as",
        dest="acting_as",
        metavar="EMAIL",
        help="Act as this user instead of [session] user_email",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    categories.setup_parser(subparsers)
    warehouses.setup_parser(subparsers)
    suppliers.setup_parser(subparsers)
    products.setup_parser(subparsers)
    quotations.setup_parser(subparsers)
    users.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            if args.command in SERVICE_COMMANDS:
                args.func(args, Services(config))
            elif args.command == "migrate":
                # Migrate commands need db_manager for raw database operations
                args.func(args, DatabaseManager(config))
            else:
                args.func(args)
        except PermissionDenied as e:
            print(f"Permission denied: {e}")
            sys.exit(1)
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
