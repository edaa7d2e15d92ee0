"""Tests for the products CLI commands."""

from argparse import Namespace
from decimal import Decimal

import pytest

from auth import PermissionDenied
from cli import products as products_cli
from tests.services.test_suppliers import make_supplier


def create_args(acting_as, supplier_id, category_id, /, **overrides):
    args = {
        "acting_as": acting_as,
        "name": "USB Cable",
        "description": "Two metre cable",
        "sku": None,
        "base_price": "20",
        "discount_percentage": "10",
        "discount_amount": "0",
        "unit": None,
        "category_id": [category_id],
        "supplier_id": supplier_id,
        "tags": "usb, cable",
        "low_stock_threshold": 0,
        "barcode": None,
        "not_for_sale": False,
    }
    args.update(overrides)
    return Namespace(**args)


@pytest.fixture
def catalog(services):
    supplier = make_supplier(services, "Acme Parts")
    category = services.categories.create("Cables", "Wires and leads")
    return supplier, category


class TestCommands:
    """Tests for command handlers."""

    def test_create_sets_creator_and_price(self, services, admin, catalog):
        """Test the admin creates a product with a computed price."""
        supplier, category = catalog

        products_cli.cmd_create(create_args(admin.email, supplier.id, category.id), services)

        product = services.products.find_all()[0]
        assert product.created_by == admin.id
        assert product.selling_price == Decimal("18")
        assert product.tags == ["usb", "cable"]

    def test_create_refused_for_employee(self, services, employee, catalog):
        """Test employees cannot create products."""
        supplier, category = catalog

        with pytest.raises(PermissionDenied):
            products_cli.cmd_create(
                create_args(employee.email, supplier.id, category.id), services
            )

    def test_create_invalid_form_exits(self, services, admin, catalog):
        """Test form errors stop the command."""
        supplier, category = catalog

        with pytest.raises(SystemExit):
            products_cli.cmd_create(
                create_args(admin.email, supplier.id, category.id, category_id=None),
                services,
            )

        assert services.products.find_all(include_inactive=True) == []

    def test_employee_sees_only_products_for_sale(
        self, services, admin, employee, catalog, caplog
    ):
        """Test employees never see hidden or inactive products."""
        supplier, category = catalog
        products_cli.cmd_create(create_args(admin.email, supplier.id, category.id), services)
        products_cli.cmd_create(
            create_args(
                admin.email, supplier.id, category.id, name="Bulk Spool", not_for_sale=True
            ),
            services,
        )
        args = Namespace(
            acting_as=employee.email, all=True, category_id=None, supplier_id=None, search=None
        )

        with caplog.at_level("INFO", logger="stockpilot"):
            products_cli.cmd_list(args, services)

        assert "USB Cable" in caplog.text
        assert "Bulk Spool" not in caplog.text
