"""Base services container for dependency injection."""

from typing import Optional

from config import Config
from db.manager import DatabaseManager
from models.user import User


class Services:
    """Container for all application services.

    This class provides a centralized way to access all services and makes
    it easy to inject mock services for testing.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If provided, config is ignored.
    """

    def __init__(self, config: Config, db_manager=None):
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)

        # Lazy import to avoid circular dependencies
        from services.categories import CategoryService
        from services.warehouses import WarehouseService
        from services.suppliers import SupplierService
        from services.products import ProductService
        from services.quotations import QuotationService
        from services.users import UserService

        self.categories = CategoryService(self.db_manager)
        self.warehouses = WarehouseService(self.db_manager)
        self.suppliers = SupplierService(self.db_manager)
        self.products = ProductService(self.db_manager)
        self.quotations = QuotationService(self.db_manager)
        self.users = UserService(self.db_manager)

    def current_user(self, email: Optional[str] = None) -> Optional[User]:
        """Resolve the acting user.

        Args:
            email: Explicit email; falls back to the session email in config.

        Returns:
            The matching User, or None if nobody is configured or found.
        """
        email = email or self.config.session_user_email
        if not email:
            return None
        return self.users.find_by_email(email)
