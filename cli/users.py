#!/usr/bin/env python3

import sys
from getpass import getpass

from auth import require_role
from config import save_config
from models.user import MANAGER_ROLES
from services.users import UserCreationError
from logger import get_logger

logger = get_logger()


def _prompt_password() -> str:
    password = getpass("Password: ")
    if password != getpass("Confirm password: "):
        logger.error("Passwords do not match.")
        sys.exit(1)
    return password


def cmd_list(args, services):
    """List all users."""
    require_role(services.current_user(args.acting_as), *MANAGER_ROLES)

    users = services.users.find_all()
    if not users:
        logger.info("No users found.")
        return

    logger.info("\nUsers:")
    logger.info("=" * 80)
    for user in users:
        status = "" if user.is_active else " (inactive)"
        logger.info(f"ID: {user.id}  {user.email} [{user.role.value}]{status}")
        if user.display_name:
            logger.info(f"  Name: {user.display_name}")
        if user.assigned_warehouse_ids:
            logger.info(f"  Warehouses: {user.assigned_warehouse_ids}")
        logger.info("-" * 80)

    logger.info(f"\nTotal users: {len(users)}")


def cmd_create(args, services):
    """Create a user on behalf of the acting admin."""
    actor = services.current_user(args.acting_as)
    payload = {
        "email": args.email,
        "password": _prompt_password(),
        "display_name": args.display_name,
        "role_to_assign": args.role,
        "assigned_warehouse_ids": args.warehouse_id or [],
    }

    try:
        result = services.users.create_by_admin(actor, payload)
    except UserCreationError as e:
        logger.error(f"Error creating user ({e.code}): {e}")
        sys.exit(1)

    logger.info(f"✓ {result['message']} (ID: {result['uid']})")


def cmd_bootstrap(args, services):
    """Create the first superadmin of a fresh installation."""
    try:
        user = services.users.bootstrap_superadmin(args.email, _prompt_password())
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"✓ Superadmin {user.email} created (ID: {user.id}).")
    logger.info(f"Run 'users login {user.email}' to act as this user.")


def cmd_login(args, services):
    """Check credentials and remember the user as the session user."""
    user = services.users.authenticate(args.email, getpass("Password: "))
    if user is None:
        logger.error("Invalid email or password, or the account is inactive.")
        sys.exit(1)

    services.config.session_user_email = user.email
    save_config(services.config)
    logger.info(f"✓ Signed in as {user.email} [{user.role.value}].")


def cmd_logout(args, services):
    """Forget the session user."""
    services.config.session_user_email = None
    save_config(services.config)
    logger.info("✓ Signed out.")


def setup_parser(subparsers):
    """Setup users subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "users",
        help="Manage users",
        description="List, create and sign in users",
    )

    users_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available user commands",
        dest="subcommand",
        required=True,
    )

    list_parser = users_subparsers.add_parser("list", help="List users")
    list_parser.set_defaults(func=cmd_list)

    create_parser = users_subparsers.add_parser(
        "create", help="Create a user (admins and superadmins)"
    )
    create_parser.add_argument("email")
    create_parser.add_argument(
        "--role", default="employee", help="employee, admin or superadmin"
    )
    create_parser.add_argument("--display-name")
    create_parser.add_argument(
        "--warehouse-id",
        type=int,
        action="append",
        help="Assigned warehouse (employees only, repeatable)",
    )
    create_parser.set_defaults(func=cmd_create)

    bootstrap_parser = users_subparsers.add_parser(
        "bootstrap", help="Create the first superadmin"
    )
    bootstrap_parser.add_argument("email")
    bootstrap_parser.set_defaults(func=cmd_bootstrap)

    login_parser = users_subparsers.add_parser(
        "login", help="Sign in and store the session user in the config file"
    )
    login_parser.add_argument("email")
    login_parser.set_defaults(func=cmd_login)

    logout_parser = users_subparsers.add_parser(
        "logout", help="Clear the session user"
    )
    logout_parser.set_defaults(func=cmd_logout)
