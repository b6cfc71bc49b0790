"""
Two-Stage Record Validation

DESIGN DECISION: Form input is validated in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required fields present (name, category, dates)
- Amounts parse as finite numbers
- Category is one of the fixed enumerations
- This is where raw form strings become typed records

STAGE 2 - SEMANTIC VALIDATION:
- Link target exists in the store
- Link target is in the compatible category (linkage policy)
- Sanity warnings: future dates, balance above principal, negative value

Stage 2 needs the store, and only runs if stage 1 passed.

IMPORTANT: Validation NEVER silently fixes issues. Errors block the
save; warnings are reported alongside a successful save.
"""

from datetime import date, timedelta
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from networth.config import get_settings
from networth.models.records import (
    Asset,
    Liability,
    ValidationIssue,
    ValidationResult,
    linkable_asset_category,
    linkable_liability_category,
    new_record_id,
)
from networth.store.record_store import RecordStore


ASSET_FORM_FIELDS = (
    "name",
    "category",
    "purchase_date",
    "purchase_price",
    "current_value",
    "associated_debt_id",
    "notes",
)

LIABILITY_FORM_FIELDS = (
    "name",
    "category",
    "original_amount",
    "current_balance",
    "interest_rate",
    "start_date",
    "associated_asset_id",
    "notes",
)

FIELD_LABELS = {
    "id": "ID",
    "name": "Name",
    "category": "Category",
    "purchase_date": "Purchase date",
    "purchase_price": "Purchase price",
    "current_value": "Current value",
    "original_amount": "Original amount",
    "current_balance": "Current balance",
    "interest_rate": "Interest rate",
    "start_date": "Start date",
    "associated_debt_id": "Associated debt",
    "associated_asset_id": "Associated asset",
    "notes": "Notes",
}

_MISSING_TYPES = {"missing", "string_too_short"}


class ValidationError(ValueError):
    """
    Submitted form data failed validation.

    The full ValidationResult is attached so the UI can show every issue.
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = [i.message for i in result.issues if i.severity == "error"]
        super().__init__("; ".join(messages) or "Validation failed")


class RecordValidator:
    """
    Validates asset and liability forms against the current store.

    Stage 1: Schema validation (no store needed)
    Stage 2: Semantic validation (link targets live in the store)
    """

    def __init__(self, store: RecordStore):
        self._store = store
        self._settings = get_settings().app

    # -------------------------------------------------------------------------
    # Stage 1
    # -------------------------------------------------------------------------

    def _schema_issues(self, error: PydanticValidationError) -> list[ValidationIssue]:
        """Translate pydantic errors into form-level issues."""
        issues = []
        for err in error.errors():
            field = str(err["loc"][0]) if err["loc"] else "form"
            label = FIELD_LABELS.get(field, field)
            if err["type"] in _MISSING_TYPES:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{label} is required",
                    severity="error",
                ))
            else:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="invalid_value",
                    message=f"{label}: {err['msg']}",
                    severity="error",
                ))
        return issues

    def _build(self, model, form: Mapping[str, Any], fields: tuple, record_id: Optional[str]):
        data = {key: form[key] for key in fields if key in form}
        data["id"] = record_id or new_record_id()
        try:
            return model.model_validate(data), []
        except PydanticValidationError as e:
            return None, self._schema_issues(e)

    # -------------------------------------------------------------------------
    # Stage 2
    # -------------------------------------------------------------------------

    def _future_date_issue(self, field: str, value: date) -> Optional[ValidationIssue]:
        limit = date.today() + timedelta(days=self._settings.future_date_tolerance_days)
        if value > limit:
            return ValidationIssue(
                field=field,
                issue_type="future_date",
                message=f"{FIELD_LABELS[field]} ({value}) is in the future",
                severity="warning",
            )
        return None

    def _asset_semantic_issues(self, asset: Asset) -> list[ValidationIssue]:
        issues = []

        if asset.associated_debt_id:
            previous = self._store.get_asset(asset.id)
            unchanged = previous is not None and previous.associated_debt_id == asset.associated_debt_id
            debt = self._store.get_liability(asset.associated_debt_id)
            allowed = linkable_liability_category(asset.category)

            if debt is None:
                # Re-saving an existing dangling link is tolerated; creating one is not
                issues.append(ValidationIssue(
                    field="associated_debt_id",
                    issue_type="dangling_link" if unchanged else "link_missing",
                    message=(
                        "The linked liability no longer exists"
                        if unchanged
                        else f"Liability {asset.associated_debt_id} does not exist"
                    ),
                    severity="warning" if unchanged else "error",
                ))
            elif allowed is None or debt.category != allowed:
                issues.append(ValidationIssue(
                    field="associated_debt_id",
                    issue_type="link_policy",
                    message=(
                        f"A {asset.category.value} asset cannot be linked to "
                        f"a {debt.category.value} liability"
                    ),
                    severity="error",
                ))

        if asset.current_value < 0:
            issues.append(ValidationIssue(
                field="current_value",
                issue_type="suspicious_value",
                message="Current value is negative",
                severity="warning",
            ))

        future = self._future_date_issue("purchase_date", asset.purchase_date)
        if future:
            issues.append(future)

        return issues

    def _liability_semantic_issues(self, liability: Liability) -> list[ValidationIssue]:
        issues = []

        if liability.associated_asset_id:
            previous = self._store.get_liability(liability.id)
            unchanged = (
                previous is not None
                and previous.associated_asset_id == liability.associated_asset_id
            )
            asset = self._store.get_asset(liability.associated_asset_id)
            allowed = linkable_asset_category(liability.category)

            if asset is None:
                issues.append(ValidationIssue(
                    field="associated_asset_id",
                    issue_type="dangling_link" if unchanged else "link_missing",
                    message=(
                        "The linked asset no longer exists"
                        if unchanged
                        else f"Asset {liability.associated_asset_id} does not exist"
                    ),
                    severity="warning" if unchanged else "error",
                ))
            elif allowed is None or asset.category != allowed:
                issues.append(ValidationIssue(
                    field="associated_asset_id",
                    issue_type="link_policy",
                    message=(
                        f"A {liability.category.value} liability cannot be linked to "
                        f"a {asset.category.value} asset"
                    ),
                    severity="error",
                ))

        if liability.interest_rate < 0:
            issues.append(ValidationIssue(
                field="interest_rate",
                issue_type="invalid_value",
                message="Interest rate cannot be negative",
                severity="error",
            ))

        if liability.current_balance > liability.original_amount:
            issues.append(ValidationIssue(
                field="current_balance",
                issue_type="suspicious_value",
                message="Current balance is higher than the original amount",
                severity="warning",
            ))

        future = self._future_date_issue("start_date", liability.start_date)
        if future:
            issues.append(future)

        return issues

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def validate_asset(
        self,
        form: Mapping[str, Any],
        asset_id: Optional[str] = None,
    ) -> tuple[Optional[Asset], ValidationResult]:
        """
        Run both stages over an asset form.

        Args:
            form: Raw field values keyed by Asset field name
            asset_id: Id of the asset being edited; None for a new asset

        Returns:
            (asset, result) - asset is None if stage 1 failed
        """
        asset, issues = self._build(Asset, form, ASSET_FORM_FIELDS, asset_id)
        schema_valid = asset is not None

        semantic_valid = False
        if asset is not None:
            issues = self._asset_semantic_issues(asset)
            semantic_valid = not any(i.severity == "error" for i in issues)

        return asset, ValidationResult(
            record_type="asset",
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            issues=issues,
        )

    def validate_liability(
        self,
        form: Mapping[str, Any],
        liability_id: Optional[str] = None,
    ) -> tuple[Optional[Liability], ValidationResult]:
        """Run both stages over a liability form. See validate_asset."""
        liability, issues = self._build(
            Liability, form, LIABILITY_FORM_FIELDS, liability_id
        )
        schema_valid = liability is not None

        semantic_valid = False
        if liability is not None:
            issues = self._liability_semantic_issues(liability)
            semantic_valid = not any(i.severity == "error" for i in issues)

        return liability, ValidationResult(
            record_type="liability",
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            issues=issues,
        )

    @staticmethod
    def get_user_friendly_summary(result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "✅ Saved."

        lines = []

        errors = [i for i in result.issues if i.severity == "error"]
        if errors:
            lines.append("❌ Please fix the following:")
            for issue in errors:
                lines.append(f"   • {issue.message}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please double-check:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
