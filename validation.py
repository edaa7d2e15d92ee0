"""Boundary validation for form input.

Each form is a pydantic model. validate() never raises on bad input; it
returns a ValidationResult carrying either the parsed value or the
field-level errors to show next to the offending fields.
"""

import re
from datetime import date
from decimal import Decimal
from dataclasses import dataclass, field
from typing import Annotated, Generic, List, Optional, Type, TypeVar

from pydantic import (
    AfterValidator,
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from models.quotation import AdditionalCostType
from models.user import UserRole

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _check_email(value: str) -> str:
    value = value.strip()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email address.")
    return value


Email = Annotated[str, AfterValidator(_check_email)]


class CategoryForm(BaseModel):
    name: str = Field(min_length=2)
    description: Optional[str] = Field(default=None, min_length=5)
    parent_category_id: Optional[int] = None
    sort_order: int = Field(default=0, ge=0)


class WarehouseForm(BaseModel):
    name: str = Field(min_length=3)
    location: Optional[str] = None
    description: Optional[str] = None
    contact_person: str = Field(min_length=2)
    contact_phone: str = Field(min_length=7)
    is_default: bool = False


class SupplierForm(BaseModel):
    name: str = Field(min_length=2)
    contact_person: str = Field(min_length=2)
    contact_email: Email
    contact_phone: str = Field(min_length=7)
    address: str = Field(min_length=5)
    notes: str = ""


class ProductForm(BaseModel):
    name: str = Field(min_length=2)
    description: str = Field(min_length=5)
    sku: Optional[str] = Field(default=None, max_length=20)
    base_price: Decimal = Field(ge=0)
    discount_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    discount_amount: Decimal = Field(default=Decimal("0"), ge=0)
    unit_of_measure: str = ""
    category_ids: List[int] = Field(min_length=1)
    supplier_id: int
    tags: List[str] = Field(min_length=1)
    low_stock_threshold: int = Field(default=0, ge=0)
    barcode: str = ""
    is_available_for_sale: bool = True

    @field_validator("sku", mode="before")
    @classmethod
    def blank_sku_is_generated(cls, value):
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value):
        # "usb, cable" from the command line
        if isinstance(value, str):
            return [tag.strip() for tag in value.split(",") if tag.strip()]
        return value


class ReceivedItemForm(BaseModel):
    product_id: int
    quoted_quantity: int = Field(ge=0)
    unit_price_quoted: Decimal = Field(ge=0)
    conditions: str = ""
    estimated_delivery_date: date
    notes: str = ""


class AdditionalCostForm(BaseModel):
    description: str = Field(min_length=1)
    amount: Decimal = Field(ge=0)
    cost_type: AdditionalCostType


class QuotationReceiptForm(BaseModel):
    """A supplier's answer to a quotation request."""

    received_date: date = Field(default_factory=date.today)
    shipping_conditions: str = Field(min_length=1)
    notes: str = ""
    details: List[ReceivedItemForm] = Field(min_length=1)
    additional_costs: List[AdditionalCostForm] = Field(default_factory=list)


class NewUserRequest(BaseModel):
    """Payload for admin-initiated user creation."""

    email: Email
    password: str = Field(min_length=6)
    display_name: Optional[str] = Field(default=None, min_length=2)
    role_to_assign: UserRole
    assigned_warehouse_ids: List[int] = Field(default_factory=list)

    @field_validator("display_name", mode="before")
    @classmethod
    def blank_display_name_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def warehouses_only_for_employees(self):
        if self.assigned_warehouse_ids and self.role_to_assign != UserRole.EMPLOYEE:
            raise ValueError(
                "assigned_warehouse_ids can only be set for users with the 'employee' role."
            )
        return self


ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class FieldError:
    field: str  # dotted path, empty for whole-form errors
    message: str


@dataclass
class ValidationResult(Generic[ModelT]):
    value: Optional[ModelT] = None
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def messages(self) -> List[str]:
        """Errors formatted as "field: message" lines."""
        return [
            f"{error.field}: {error.message}" if error.field else error.message
            for error in self.errors
        ]


def validate(model: Type[ModelT], data: dict) -> ValidationResult[ModelT]:
    """Validate raw form data against a form model.

    Args:
        model: Form model class, e.g. CategoryForm.
        data: Raw input mapping.

    Returns:
        ValidationResult with value set on success, errors set otherwise.
    """
    try:
        return ValidationResult(value=model.model_validate(data))
    except ValidationError as e:
        return ValidationResult(
            errors=[
                FieldError(
                    field=".".join(str(part) for part in error["loc"]),
                    message=_clean_message(error["msg"]),
                )
                for error in e.errors()
            ]
        )


def _clean_message(message: str) -> str:
    # pydantic prefixes errors raised from validators with "Value error, "
    prefix = "Value error, "
    if message.startswith(prefix):
        return message[len(prefix):]
    return message
