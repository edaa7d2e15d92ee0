"""User service: lookups and admin-initiated user creation."""

import sqlite3
from datetime import datetime
from typing import List, Optional

from auth import hash_password, verify_password
from models.user import MANAGER_ROLES, User, UserRole
from validation import NewUserRequest, validate
from logger import get_logger

logger = get_logger()

COLUMNS = "id, email, display_name, role, is_active, created_by, created_at"


class UserCreationError(Exception):
    """Raised when an admin cannot create a user.

    Attributes:
        code: One of "unauthenticated", "permission-denied",
            "invalid-argument", "already-exists", "internal".
    """

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


class UserService:
    """Service for managing users."""

    def __init__(self, db_manager):
        """Initialize the user service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def find_all(self) -> List[User]:
        """Get all users ordered by email."""
        with self.db_manager.connect() as conn:
            rows = conn.execute(f"SELECT {COLUMNS} FROM users ORDER BY email").fetchall()
            return [self._row_to_user(conn, row) for row in rows]

    def find(self, user_id: int) -> Optional[User]:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            return self._row_to_user(conn, row) if row else None

    def find_by_email(self, email: str) -> Optional[User]:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM users WHERE email = ?", (email,)
            ).fetchone()
            return self._row_to_user(conn, row) if row else None

    def get_password_hash(self, user_id: int) -> Optional[str]:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                "SELECT password_hash FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            return row[0] if row else None

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the active user with these credentials, or None."""
        user = self.find_by_email(email.strip())
        if user is None or not user.is_active:
            logger.warning(f"Sign-in refused for unknown or inactive user {email}")
            return None
        if not verify_password(password, self.get_password_hash(user.id) or ""):
            logger.warning(f"Sign-in refused for {email}: wrong password")
            return None
        return user

    def bootstrap_superadmin(self, email: str, password: str) -> User:
        """Create the first superadmin of an empty installation.

        Raises:
            ValueError: If users already exist or the credentials are invalid.
        """
        with self.db_manager.connect() as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM users").fetchone()
        if count:
            raise ValueError("Users already exist; ask a superadmin to create accounts.")

        result = validate(
            NewUserRequest,
            {"email": email, "password": password, "role_to_assign": "superadmin"},
        )
        if not result.ok:
            raise ValueError("; ".join(result.messages()))

        user = self._insert(result.value, created_by=None)
        logger.info(f"Bootstrapped superadmin {user.email} (ID: {user.id})")
        return user

    def create_by_admin(self, actor: Optional[User], payload: dict) -> dict:
        """Create a user on behalf of an admin or superadmin.

        Checks run in order: caller present, caller active with a manager
        role, payload valid, caller allowed to grant the requested role,
        email not yet used.

        Args:
            actor: The acting user, or None when nobody is signed in.
            payload: Raw request with email, password, role_to_assign and
                optional display_name and assigned_warehouse_ids.

        Returns:
            Dictionary with success, message and uid of the new user.

        Raises:
            UserCreationError: If any check fails.
        """
        if actor is None:
            logger.error("Unauthenticated call to create a user")
            raise UserCreationError(
                "unauthenticated", "The operation must be called by an authenticated user."
            )

        caller = self.find(actor.id)
        if caller is None or not caller.is_active:
            logger.warning(f"Admin user {actor.id} not found or is inactive.")
            raise UserCreationError(
                "permission-denied", "Admin user not found or is inactive."
            )

        if caller.role not in MANAGER_ROLES:
            logger.warning(
                f"User {caller.id} with role {caller.role.value} attempted to create a user."
            )
            raise UserCreationError(
                "permission-denied", "Caller does not have permission to create users."
            )

        result = validate(NewUserRequest, payload if isinstance(payload, dict) else {})
        if not result.ok:
            raise UserCreationError("invalid-argument", "; ".join(result.messages()))
        request = result.value

        if caller.role == UserRole.ADMIN and request.role_to_assign != UserRole.EMPLOYEE:
            logger.warning(
                f"Admin {caller.id} attempted to create user with role "
                f"{request.role_to_assign.value}."
            )
            raise UserCreationError(
                "permission-denied",
                "Admins can only create users with the 'employee' role.",
            )
        if (
            caller.role == UserRole.SUPERADMIN
            and request.role_to_assign == UserRole.SUPERADMIN
        ):
            logger.warning(
                f"Superadmin {caller.id} attempted to create another superadmin: "
                f"{request.email}."
            )
            raise UserCreationError(
                "permission-denied",
                "Creating other superadmin users is restricted.",
            )

        if self.find_by_email(request.email):
            raise UserCreationError(
                "already-exists", "This email address is already in use."
            )

        missing = self._missing_warehouses(request.assigned_warehouse_ids)
        if missing:
            raise UserCreationError(
                "invalid-argument", f"Unknown warehouse IDs: {missing}"
            )

        try:
            user = self._insert(request, created_by=caller.id)
        except sqlite3.Error as e:
            logger.error(f"Error creating user {request.email}: {e}")
            raise UserCreationError("internal", "Could not create user.") from e

        logger.info(
            f"User {user.id} ({user.email}) created successfully by {caller.id} "
            f"with role {user.role.value}."
        )
        return {
            "success": True,
            "message": f"User {user.email} created successfully with role {user.role.value}.",
            "uid": user.id,
        }

    def _missing_warehouses(self, warehouse_ids: List[int]) -> List[int]:
        if not warehouse_ids:
            return []
        with self.db_manager.connect() as conn:
            placeholders = ", ".join("?" for _ in warehouse_ids)
            rows = conn.execute(
                f"SELECT id FROM warehouses WHERE id IN ({placeholders})",
                tuple(warehouse_ids),
            ).fetchall()
        found = {row[0] for row in rows}
        return [warehouse_id for warehouse_id in warehouse_ids if warehouse_id not in found]

    def _insert(self, request: NewUserRequest, created_by: Optional[int]) -> User:
        display_name = request.display_name or request.email.split("@")[0]
        with self.db_manager.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO users (email, display_name, role, password_hash, created_by)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    request.email,
                    display_name,
                    request.role_to_assign.value,
                    hash_password(request.password),
                    created_by,
                ),
            )
            user_id = cursor.lastrowid

            if request.role_to_assign == UserRole.EMPLOYEE:
                conn.executemany(
                    "INSERT INTO user_warehouses (user_id, warehouse_id) VALUES (?, ?)",
                    [(user_id, wid) for wid in dict.fromkeys(request.assigned_warehouse_ids)],
                )

        return self.find(user_id)

    def _row_to_user(self, conn, row: tuple) -> User:
        warehouse_rows = conn.execute(
            "SELECT warehouse_id FROM user_warehouses WHERE user_id = ? ORDER BY warehouse_id",
            (row[0],),
        ).fetchall()
        return User(
            id=row[0],
            email=row[1],
            display_name=row[2],
            role=UserRole(row[3]),
            is_active=bool(row[4]),
            created_by=row[5],
            assigned_warehouse_ids=[r[0] for r in warehouse_rows],
            created_at=datetime.fromisoformat(row[6]) if row[6] else None,
        )
