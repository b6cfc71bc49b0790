"""
Core Data Models for the Net Worth Tracker

These models define the strict schemas for every record the tracker keeps.
They are designed to:
1. Reject unknown categories and non-numeric amounts at the input boundary
2. Provide clear validation error messages for the form layer
3. Be serializable to JSON for the key-value store

DESIGN DECISION: Amounts are Decimal, never float. Totals are summed
exactly and only formatted for display at the very edge.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def new_record_id() -> str:
    """Generate a fresh record identifier."""
    return uuid4().hex


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AssetCategory(str, Enum):
    """
    Supported asset categories.

    Values are the human-readable labels used in forms and in the CSV
    schema, so `AssetCategory("Real Estate")` parses a CSV cell directly.
    """
    REAL_ESTATE = "Real Estate"
    VEHICLE = "Vehicle"
    BANK_ACCOUNT = "Bank Account"
    INVESTMENT_ACCOUNT = "Investment Account"
    RETIREMENT_ACCOUNT = "Retirement Account"
    CASH = "Cash"
    CRYPTOCURRENCY = "Cryptocurrency"
    BUSINESS_INTEREST = "Business Interest"
    COLLECTIBLES = "Collectibles"
    JEWELRY = "Jewelry"
    OTHER = "Other"


class LiabilityCategory(str, Enum):
    """Supported liability categories."""
    MORTGAGE = "Mortgage"
    AUTO_LOAN = "Auto Loan"
    STUDENT_LOAN = "Student Loan"
    CREDIT_CARD = "Credit Card"
    PERSONAL_LOAN = "Personal Loan"
    BUSINESS_LOAN = "Business Loan"
    MEDICAL_DEBT = "Medical Debt"
    OTHER = "Other"


# Display metadata, looked up by enum member rather than by raw string.
ASSET_CATEGORY_ICONS: dict[AssetCategory, str] = {
    AssetCategory.REAL_ESTATE: "🏠",
    AssetCategory.VEHICLE: "🚗",
    AssetCategory.BANK_ACCOUNT: "🏦",
    AssetCategory.INVESTMENT_ACCOUNT: "📈",
    AssetCategory.RETIREMENT_ACCOUNT: "📅",
    AssetCategory.CASH: "💵",
    AssetCategory.CRYPTOCURRENCY: "₿",
    AssetCategory.BUSINESS_INTEREST: "💼",
    AssetCategory.COLLECTIBLES: "🎨",
    AssetCategory.JEWELRY: "💎",
    AssetCategory.OTHER: "📦",
}

LIABILITY_CATEGORY_ICONS: dict[LiabilityCategory, str] = {
    LiabilityCategory.MORTGAGE: "🏠",
    LiabilityCategory.AUTO_LOAN: "🚗",
    LiabilityCategory.STUDENT_LOAN: "🎓",
    LiabilityCategory.CREDIT_CARD: "💳",
    LiabilityCategory.PERSONAL_LOAN: "👤",
    LiabilityCategory.BUSINESS_LOAN: "💼",
    LiabilityCategory.MEDICAL_DEBT: "🏥",
    LiabilityCategory.OTHER: "📄",
}


# =============================================================================
# LINKAGE POLICY
# =============================================================================

# Which liability category may back which asset category. Symmetric:
# the liability side uses the inverse mapping.
ASSET_LIABILITY_LINKS: dict[AssetCategory, LiabilityCategory] = {
    AssetCategory.REAL_ESTATE: LiabilityCategory.MORTGAGE,
    AssetCategory.VEHICLE: LiabilityCategory.AUTO_LOAN,
    AssetCategory.BUSINESS_INTEREST: LiabilityCategory.BUSINESS_LOAN,
}

LIABILITY_ASSET_LINKS: dict[LiabilityCategory, AssetCategory] = {
    liability: asset for asset, liability in ASSET_LIABILITY_LINKS.items()
}


def linkable_liability_category(
    category: AssetCategory,
) -> Optional[LiabilityCategory]:
    """Liability category an asset of this category may link to, if any."""
    return ASSET_LIABILITY_LINKS.get(category)


def linkable_asset_category(
    category: LiabilityCategory,
) -> Optional[AssetCategory]:
    """Asset category a liability of this category may link to, if any."""
    return LIABILITY_ASSET_LINKS.get(category)


# =============================================================================
# CORE RECORD MODELS
# =============================================================================

# Amounts beyond these bounds overflow Decimal arithmetic or export as
# millions of digits
MAX_AMOUNT = Decimal("1e15")
MAX_DECIMAL_PLACES = 6


def _require_finite(v: Decimal) -> Decimal:
    if not v.is_finite():
        raise ValueError("Amount must be a finite number")
    if v > MAX_AMOUNT or v < -MAX_AMOUNT:
        raise ValueError(f"Amount must be at most {MAX_AMOUNT:,f} in size")
    if v.normalize().as_tuple().exponent < -MAX_DECIMAL_PLACES:
        raise ValueError(f"Amount can have at most {MAX_DECIMAL_PLACES} decimal places")
    return v


class Asset(BaseModel):
    """
    An owned item of value.

    `associated_debt_id` is a weak reference to a Liability. It is never
    dereferenced directly; use `RecordStore.get_liability()` and treat a
    missing target as "no link".
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_record_id,
        min_length=1,
        description="Unique asset ID, immutable after creation"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name"
    )
    category: AssetCategory
    purchase_date: date
    purchase_price: Decimal = Field(
        ...,
        ge=0,
        description="Price paid"
    )
    current_value: Decimal = Field(
        ...,
        description="Current market value (negative only if truly impaired)"
    )
    associated_debt_id: Optional[str] = Field(
        default=None,
        description="ID of the liability financing this asset"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
    )

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("purchase_price", "current_value")
    @classmethod
    def reject_non_finite(cls, v: Decimal) -> Decimal:
        return _require_finite(v)

    @field_validator("associated_debt_id", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Form selects and text areas submit "" for "nothing"."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Liability(BaseModel):
    """
    A debt obligation.

    `original_amount` is the original principal and is not expected to
    change; `current_balance` normally decreases over time.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_record_id,
        min_length=1,
        description="Unique liability ID, immutable after creation"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
    )
    category: LiabilityCategory
    original_amount: Decimal = Field(..., ge=0)
    current_balance: Decimal = Field(..., ge=0)
    interest_rate: Decimal = Field(
        default=Decimal("0"),
        description="Annual rate as a percentage, e.g. 3.5"
    )
    start_date: date
    associated_asset_id: Optional[str] = Field(
        default=None,
        description="ID of the asset this debt finances"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
    )

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("original_amount", "current_balance", "interest_rate")
    @classmethod
    def reject_non_finite(cls, v: Decimal) -> Decimal:
        return _require_finite(v)

    @field_validator("interest_rate", mode="before")
    @classmethod
    def default_blank_rate(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return Decimal("0")
        return v

    @field_validator("associated_asset_id", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Snapshot(BaseModel):
    """
    A point-in-time capture of aggregate totals.

    CRITICAL: Snapshots are historical facts. The model is frozen and
    nothing in the system recomputes a stored snapshot.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_record_id)
    date: datetime = Field(
        default_factory=utc_now,
        description="When the snapshot was taken"
    )
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    notes: Optional[str] = None


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'link_policy')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """
    Result of validating one submitted form.

    Stage 1: Schema validation (types, required fields, enums)
    Stage 2: Semantic validation (link targets, link policy, sanity checks)
    """

    record_type: str = Field(
        ...,
        pattern="^(asset|liability)$",
    )
    validated_at: datetime = Field(default_factory=utc_now)

    schema_valid: bool
    semantic_valid: bool

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.schema_valid and self.semantic_valid

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == "warning"]


# =============================================================================
# DERIVED VALUE MODELS
# =============================================================================

class CategoryTotal(BaseModel):
    """Count and summed value of the records in one category."""

    count: int = Field(default=0, ge=0)
    total: Decimal = Decimal("0")


class NetWorthChange(BaseModel):
    """Change in net worth against the most recent snapshot."""

    absolute: Decimal
    percentage: Decimal = Field(
        ...,
        description="Relative change in percent; 0 when the baseline is 0"
    )

    @property
    def is_increase(self) -> bool:
        return self.absolute >= 0


class AssetGain(BaseModel):
    """Unrealized gain of an asset against its purchase price."""

    absolute: Decimal
    percentage: Decimal


class NetWorthSummary(BaseModel):
    """
    Everything the overview screen shows, computed in one pass.

    Built fresh on every call - never cached across mutations.
    """

    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    real_estate_equity: Decimal
    vehicle_equity: Decimal
    change: Optional[NetWorthChange] = None

    asset_count: int = 0
    liability_count: int = 0
    snapshot_count: int = 0


class ImportResult(BaseModel):
    """Outcome of a CSV import."""

    assets_added: int = Field(default=0, ge=0)
    liabilities_added: int = Field(default=0, ge=0)
    rows_skipped: int = Field(
        default=0,
        ge=0,
        description="Rows dropped for being short, malformed, or of unknown type"
    )

    @property
    def message(self) -> str:
        return (
            f"Successfully imported {self.assets_added} assets "
            f"and {self.liabilities_added} liabilities!"
        )
