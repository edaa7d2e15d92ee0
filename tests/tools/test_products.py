"""Tests for product pricing and SKU helpers."""

import re
from decimal import Decimal

import pytest

from tools.products import MAX_SKU_LENGTH, calculate_selling_price, generate_sku


class TestCalculateSellingPrice:
    """Tests for calculate_selling_price."""

    def test_no_discount(self):
        """Test the base price is kept without discounts."""
        assert calculate_selling_price(100) == Decimal("100.00")

    def test_percentage_then_amount(self):
        """Test the percentage applies before the fixed amount."""
        assert calculate_selling_price(100, 10, 5) == Decimal("85.00")

    def test_never_negative(self):
        """Test a large fixed discount floors at zero."""
        assert calculate_selling_price(10, 0, 25) == Decimal("0.00")

    def test_rounds_half_up_to_cents(self):
        """Test the result is rounded to cents."""
        assert calculate_selling_price("19.99", "15") == Decimal("16.99")
        assert calculate_selling_price("0.05", "50") == Decimal("0.03")

    def test_float_input_has_no_binary_noise(self):
        """Test float prices behave like their decimal spelling."""
        assert calculate_selling_price(0.1, 0, 0) == Decimal("0.10")


class TestGenerateSku:
    """Tests for generate_sku."""

    def test_prefix_from_name(self):
        """Test the first five characters form the prefix."""
        assert generate_sku("Laptop Stand", suffix="AB12C") == "LAPTO-AB12C"

    def test_non_alphanumeric_stripped(self):
        """Test punctuation and spaces are dropped from the prefix."""
        assert generate_sku("A-4 paper", suffix="XYZ12") == "A4P-XYZ12"

    @pytest.mark.parametrize("name", ["!", "é", "  x"])
    def test_short_prefix_falls_back(self, name):
        """Test names without two usable characters get the PROD prefix."""
        assert generate_sku(name, suffix="00000") == "PROD-00000"

    def test_random_suffix_format(self):
        """Test generated SKUs have five upper-case alphanumeric characters."""
        sku = generate_sku("Cables")

        assert re.fullmatch(r"CABLE-[A-Z0-9]{5}", sku)

    def test_length_capped(self):
        """Test SKUs never exceed the maximum length."""
        assert len(generate_sku("Boxes", suffix="X" * 30)) == MAX_SKU_LENGTH
