"""Miscellaneous asset schemas.

An asset is a common envelope (name, value, currency, active flag) around a
``details`` variant selected by its ``type`` tag. Each variant only carries
the fields that make sense for that kind of asset.
"""

import datetime as dt
import enum
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import Field, model_validator

from networth.schemas.base import CamelModel


class AssetType(str, enum.Enum):
    """Closed set of asset kinds."""

    FIXED_DEPOSIT = "FIXED_DEPOSIT"
    RECURRING_DEPOSIT = "RECURRING_DEPOSIT"
    BONDS = "BONDS"
    MUTUAL_FUNDS = "MUTUAL_FUNDS"
    GOLD = "GOLD"
    SILVER = "SILVER"
    JEWELS = "JEWELS"
    REAL_ESTATE = "REAL_ESTATE"
    PROVIDENT_FUND = "PROVIDENT_FUND"
    PENSION_FUND = "PENSION_FUND"
    RECEIVABLES = "RECEIVABLES"
    STOCKS = "STOCKS"
    INSURANCE_LINKED = "INSURANCE_LINKED"
    CASH_BANK = "CASH_BANK"


METAL_ASSET_TYPES = frozenset({AssetType.GOLD.value, AssetType.SILVER.value})


class _Details(CamelModel):
    def cost_basis(self) -> Decimal | None:
        """Amount originally put into the asset, when the variant knows it."""
        return None


class FixedDepositDetails(_Details):
    type: Literal["FIXED_DEPOSIT"] = "FIXED_DEPOSIT"
    bank_name: str | None = None
    account_number: str | None = None
    principal_amount: Decimal = Field(..., ge=0)
    interest_rate: Decimal | None = Field(None, ge=0)
    start_date: dt.date | None = None
    maturity_date: dt.date | None = None

    def cost_basis(self) -> Decimal | None:
        return self.principal_amount


class RecurringDepositDetails(_Details):
    type: Literal["RECURRING_DEPOSIT"] = "RECURRING_DEPOSIT"
    bank_name: str | None = None
    account_number: str | None = None
    monthly_deposit_amount: Decimal = Field(..., ge=0)
    interest_rate: Decimal | None = Field(None, ge=0)
    start_date: dt.date | None = None
    maturity_date: dt.date | None = None

    def cost_basis(self) -> Decimal | None:
        return self.monthly_deposit_amount


class BondDetails(_Details):
    type: Literal["BONDS"] = "BONDS"
    issuer: str | None = None
    face_value: Decimal = Field(..., ge=0)
    coupon_rate: Decimal | None = Field(None, ge=0)
    units: Decimal | None = Field(None, gt=0)
    maturity_date: dt.date | None = None

    def cost_basis(self) -> Decimal | None:
        return self.face_value * self.units if self.units is not None else self.face_value


class MutualFundDetails(_Details):
    type: Literal["MUTUAL_FUNDS"] = "MUTUAL_FUNDS"
    fund_name: str | None = None
    fund_house: str | None = None
    nav: Decimal | None = Field(None, ge=0)
    units: Decimal | None = Field(None, ge=0)
    purchase_price: Decimal | None = Field(None, ge=0)

    def cost_basis(self) -> Decimal | None:
        return self.purchase_price


class _MetalDetails(_Details):
    weight_grams: Decimal = Field(..., gt=0)
    purity: str | None = None
    purchase_rate: Decimal | None = Field(None, ge=0)  # price per gram paid
    purchase_date: dt.date | None = None

    def cost_basis(self) -> Decimal | None:
        if self.purchase_rate is None:
            return None
        return self.purchase_rate * self.weight_grams


class GoldDetails(_MetalDetails):
    type: Literal["GOLD"] = "GOLD"


class SilverDetails(_MetalDetails):
    type: Literal["SILVER"] = "SILVER"


class JewelDetails(_Details):
    type: Literal["JEWELS"] = "JEWELS"
    weight_grams: Decimal | None = Field(None, gt=0)
    purity: str | None = None
    purchase_price: Decimal | None = Field(None, ge=0)

    def cost_basis(self) -> Decimal | None:
        return self.purchase_price


class RealEstateDetails(_Details):
    type: Literal["REAL_ESTATE"] = "REAL_ESTATE"
    property_address: str | None = None
    property_type: str | None = None  # residential, commercial, land
    purchase_price: Decimal | None = Field(None, ge=0)
    purchase_date: dt.date | None = None

    def cost_basis(self) -> Decimal | None:
        return self.purchase_price


class _RetirementFundDetails(_Details):
    fund_name: str | None = None
    account_number: str | None = None
    total_contribution: Decimal | None = Field(None, ge=0)

    def cost_basis(self) -> Decimal | None:
        return self.total_contribution


class ProvidentFundDetails(_RetirementFundDetails):
    type: Literal["PROVIDENT_FUND"] = "PROVIDENT_FUND"


class PensionFundDetails(_RetirementFundDetails):
    type: Literal["PENSION_FUND"] = "PENSION_FUND"


class ReceivableDetails(_Details):
    type: Literal["RECEIVABLES"] = "RECEIVABLES"
    debtor_name: str | None = None
    principal_amount: Decimal | None = Field(None, ge=0)
    due_date: dt.date | None = None

    def cost_basis(self) -> Decimal | None:
        return self.principal_amount


class StockAssetDetails(_Details):
    """Shares held outside the transaction ledger (e.g. ESOPs, unlisted)."""

    type: Literal["STOCKS"] = "STOCKS"
    symbol: str | None = None
    quantity: Decimal | None = Field(None, gt=0)
    purchase_price: Decimal | None = Field(None, ge=0)

    def cost_basis(self) -> Decimal | None:
        if self.purchase_price is None or self.quantity is None:
            return None
        return self.purchase_price * self.quantity


class InsuranceLinkedDetails(_Details):
    type: Literal["INSURANCE_LINKED"] = "INSURANCE_LINKED"
    insurer: str | None = None
    policy_number: str | None = None
    premiums_paid: Decimal | None = Field(None, ge=0)
    sum_assured: Decimal | None = Field(None, ge=0)
    maturity_date: dt.date | None = None

    def cost_basis(self) -> Decimal | None:
        return self.premiums_paid


class CashBankDetails(_Details):
    type: Literal["CASH_BANK"] = "CASH_BANK"
    bank_name: str | None = None
    account_number: str | None = None


AssetDetails = Annotated[
    Union[
        FixedDepositDetails,
        RecurringDepositDetails,
        BondDetails,
        MutualFundDetails,
        GoldDetails,
        SilverDetails,
        JewelDetails,
        RealEstateDetails,
        ProvidentFundDetails,
        PensionFundDetails,
        ReceivableDetails,
        StockAssetDetails,
        InsuranceLinkedDetails,
        CashBankDetails,
    ],
    Field(discriminator="type"),
]


class AssetBase(CamelModel):
    """Fields shared by every asset kind."""

    name: str = Field(..., min_length=1, max_length=200)
    currency: str = Field("INR", min_length=3, max_length=3, pattern="^[A-Z]{3}$")
    description: str | None = None
    is_active: bool = True
    details: AssetDetails

    @property
    def type(self) -> str:
        return self.details.type

    @property
    def is_metal(self) -> bool:
        return self.details.type in METAL_ASSET_TYPES


class AssetCreate(AssetBase):
    """Schema for adding an asset.

    ``current_value`` is required except for metals, whose value is derived
    from the live price per gram.
    """

    current_value: Decimal | None = Field(None, ge=0)

    @model_validator(mode="after")
    def require_value_for_non_metals(self) -> "AssetCreate":
        if self.current_value is None and not self.is_metal:
            raise ValueError("currentValue is required for non-metal assets")
        return self


class AssetUpdate(CamelModel):
    """Schema for editing an asset. Omitted fields keep their stored value."""

    name: str | None = Field(None, min_length=1, max_length=200)
    currency: str | None = Field(None, min_length=3, max_length=3, pattern="^[A-Z]{3}$")
    description: str | None = None
    is_active: bool | None = None
    current_value: Decimal | None = Field(None, ge=0)
    details: AssetDetails | None = None


class Asset(AssetBase):
    """A stored asset."""

    id: str
    current_value: Decimal = Field(..., ge=0)
    last_updated: dt.datetime


class AssetSummary(CamelModel):
    """Aggregate value and cost of the miscellaneous assets."""

    total_value: Decimal
    total_cost: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percentage: Decimal
    count: int
