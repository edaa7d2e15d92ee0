import pytest


def make_supplier(services, name, **kwargs):
    return services.suppliers.create(
        name,
        contact_person="Lee Park",
        contact_email="sales@acme.example",
        contact_phone="555-0199",
        address="12 Harbour Road",
        **kwargs,
    )


class TestSupplierService:
    """Tests for SupplierService."""

    def test_create_supplier(self, services):
        """Test creating a supplier."""
        supplier = make_supplier(services, "Acme Parts", notes="Net 30")

        assert supplier.id > 0
        assert supplier.name == "Acme Parts"
        assert supplier.contact_email == "sales@acme.example"
        assert supplier.notes == "Net 30"
        assert supplier.is_active is True

    def test_create_without_notes(self, services):
        """Test notes default to an empty string."""
        supplier = make_supplier(services, "Quiet Co")

        assert supplier.notes == ""

    def test_create_duplicate_name_raises(self, services):
        """Test supplier names are unique."""
        make_supplier(services, "Acme Parts")

        with pytest.raises(ValueError, match="Supplier name must be unique"):
            make_supplier(services, "Acme Parts")

    def test_find_all_hides_inactive(self, services):
        """Test inactive suppliers are hidden unless requested."""
        active = make_supplier(services, "Active Ltd")
        inactive = make_supplier(services, "Dormant Ltd")
        services.suppliers.toggle_active(inactive.id)

        assert [s.id for s in services.suppliers.find_all()] == [active.id]
        assert len(services.suppliers.find_all(include_inactive=True)) == 2

    def test_update_supplier(self, services):
        """Test a partial update keeps other fields."""
        supplier = make_supplier(services, "Acme Parts")

        updated = services.suppliers.update(supplier.id, contact_phone="555-0200")

        assert updated.contact_phone == "555-0200"
        assert updated.contact_person == "Lee Park"

    def test_update_keep_own_name(self, services):
        """Test re-saving the same name is not a clash."""
        supplier = make_supplier(services, "Acme Parts")

        updated = services.suppliers.update(supplier.id, name="Acme Parts")

        assert updated.name == "Acme Parts"

    def test_update_name_clash_raises(self, services):
        """Test renaming onto another supplier's name is refused."""
        make_supplier(services, "Taken")
        supplier = make_supplier(services, "Free")

        with pytest.raises(ValueError, match="must be unique"):
            services.suppliers.update(supplier.id, name="Taken")

    def test_update_nonexistent_raises(self, services):
        """Test updating an unknown supplier raises."""
        with pytest.raises(ValueError, match="Supplier with ID 9999 not found"):
            services.suppliers.update(9999, notes="x")

    def test_toggle_active(self, services):
        """Test toggling flips is_active."""
        supplier = make_supplier(services, "Flip")

        assert services.suppliers.toggle_active(supplier.id) is False
        assert services.suppliers.find(supplier.id).is_active is False

    def test_toggle_nonexistent_raises(self, services):
        """Test toggling an unknown supplier raises."""
        with pytest.raises(ValueError, match="not found"):
            services.suppliers.toggle_active(9999)
