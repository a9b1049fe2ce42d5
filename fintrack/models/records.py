"""
Core Record Models for fintrack

These models define the strict schemas for the records the form layer
hands to the core: expenses, direct payments between participants, and
income/sale records.

DESIGN DECISION: Records are plain pydantic models with no behaviour
beyond validation. Balance effects live in the ledger, tax effects in the
VAT engine, so a record can be stored, edited and re-applied without
carrying derived state along with it.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from fintrack.models.money import Currency, Money


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """Expense categories offered by the expense form."""
    SHOPIFY = "Shopify"
    ADVERTISING = "Advertising"
    TRANSPORTATION = "Transportation"
    OFFICE_SUPPLIES = "Office Supplies"
    OTHER = "Other"


class Country(str, Enum):
    """
    Supported customer jurisdictions.

    Member names are the short codes, values are display names.
    Both forms are accepted wherever a country is looked up.
    """
    NL = "Netherlands"
    DE = "Germany"
    FR = "France"
    BE = "Belgium"
    IT = "Italy"
    ES = "Spain"
    SE = "Sweden"
    DK = "Denmark"
    IE = "Ireland"
    AT = "Austria"
    CH = "Switzerland"
    UK = "United Kingdom"
    NO = "Norway"
    AU = "Australia"
    CA = "Canada"
    US = "United States"

    @classmethod
    def _missing_(cls, value):
        # Allow Country("NL") as well as Country("Netherlands")
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls.__members__[key]
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class ProductType(str, Enum):
    """Product types with distinct VAT treatment."""
    STANDARD = "Standard"
    FOOD = "Food"
    BOOKS = "Books"
    DIGITAL = "Digital"


class VATType(str, Enum):
    """
    VAT treatment categories.

    The rate tables only ever resolve to STANDARD, REDUCED or ZERO.
    EXEMPT and REVERSE_CHARGE exist for records that are classified
    outside the tables (e.g. by an accountant).
    """
    STANDARD = "Standard"
    REDUCED = "Reduced"
    ZERO = "Zero"
    EXEMPT = "Exempt"
    REVERSE_CHARGE = "Reverse Charge"


def _clean_participant(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValueError("Participant name cannot be empty")
    return name


# =============================================================================
# EXPENSES AND PAYMENTS
# =============================================================================

class Expense(BaseModel):
    """
    An expense, optionally shared with other participants.

    The total is split evenly between the payer and everyone in
    `shared_with`. An expense with nobody in `shared_with` is a personal
    expense and has no effect on balances.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )
    expense_date: date = Field(
        default_factory=date.today,
        description="Date the expense was incurred"
    )
    category: ExpenseCategory = Field(
        default=ExpenseCategory.OTHER,
        description="Expense category"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Total amount paid"
    )
    currency: Currency = Field(
        default=Currency.EUR,
        description="Currency of `amount`"
    )
    paid_by: str = Field(
        ...,
        min_length=1,
        description="Participant who paid"
    )
    description: str = Field(
        default="",
        max_length=500
    )
    shared_with: list[str] = Field(
        default_factory=list,
        description="Co-sharers, not including the payer"
    )
    tax_relevant: bool = False
    is_recurring: bool = False
    proof_url: Optional[str] = Field(
        default=None,
        description="Reference to an uploaded receipt"
    )

    @field_validator("shared_with")
    @classmethod
    def clean_sharers(cls, v: list[str]) -> list[str]:
        cleaned = [_clean_participant(name) for name in v]
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("shared_with contains duplicate participants")
        return cleaned

    @model_validator(mode="after")
    def payer_not_a_sharer(self) -> "Expense":
        """The payer's share is implied; listing them again double-counts."""
        if self.paid_by in self.shared_with:
            raise ValueError("Payer cannot also be listed in shared_with")
        return self

    @property
    def is_shared(self) -> bool:
        return bool(self.shared_with)

    @property
    def money(self) -> Money:
        return Money(amount=self.amount, currency=self.currency)


class Payment(BaseModel):
    """A direct payment from one participant to another to settle up."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    payment_date: date = Field(default_factory=date.today)
    from_participant: str = Field(
        ...,
        min_length=1,
        description="Participant handing over the money"
    )
    to_participant: str = Field(
        ...,
        min_length=1,
        description="Participant receiving the money"
    )
    amount: Decimal = Field(..., gt=0)
    currency: Currency = Currency.EUR

    @model_validator(mode="after")
    def distinct_parties(self) -> "Payment":
        if self.from_participant == self.to_participant:
            raise ValueError("A payment needs two different participants")
        return self


# =============================================================================
# INCOME
# =============================================================================

class IncomeRecord(BaseModel):
    """
    A sale of `quantity` units of a product to a customer in one country.

    `sale_price` is per unit and VAT-inclusive. `ad_spend` is per unit
    in the net-income formula used by period reports.

    CRITICAL: `vat_rate` is a snapshot taken when the record is created
    or edited. Later changes to the rate tables do NOT rewrite history.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    sale_date: date = Field(default_factory=date.today)
    product: str = Field(
        ...,
        min_length=1,
        max_length=200
    )
    product_type: ProductType
    customer_country: Country
    quantity: int = Field(default=1, ge=1)
    cost_price: Decimal = Field(default=Decimal("0"), ge=0)
    sale_price: Decimal = Field(..., ge=0)
    ad_spend: Decimal = Field(default=Decimal("0"), ge=0)
    currency: Currency = Currency.EUR
    added_by: str = Field(default="")
    vat_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        le=1,
        description="VAT rate snapshot, set by the VAT engine"
    )

    @property
    def gross_sales(self) -> Decimal:
        """Sale revenue in the record's currency, VAT included."""
        return self.sale_price * self.quantity

    def require_vat_rate(self) -> Decimal:
        """Return the snapshot rate, failing if the record was never stamped."""
        if self.vat_rate is None:
            raise ValueError(
                f"Income record {self.id} has no VAT rate snapshot"
            )
        return self.vat_rate
