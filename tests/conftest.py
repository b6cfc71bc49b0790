"""
Shared fixtures.

Everything runs against in-memory storage; no test touches the network.
"""

from datetime import date
from decimal import Decimal

import pytest

from networth.audit import AuditLogger
from networth.config import AppSettings, StorageSettings
from networth.models.records import Asset, AssetCategory, Liability, LiabilityCategory
from networth.orchestrator import NetWorthTracker
from networth.services.storage import InMemoryKeyValueStore, KeyValueAuditStorage
from networth.store import RecordRepository, RecordStore


class ScriptedConfirm:
    """Confirmation collaborator that answers from a script and records prompts."""

    def __init__(self, *answers: bool):
        self.answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, message: str) -> bool:
        self.prompts.append(message)
        return self.answers.pop(0) if self.answers else True


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def storage_settings():
    return StorageSettings(backend="memory")


@pytest.fixture
def repository(kv_store, storage_settings):
    return RecordRepository(kv_store, storage_settings)


@pytest.fixture
def audit_storage():
    return KeyValueAuditStorage(InMemoryKeyValueStore())


@pytest.fixture
def confirm():
    return ScriptedConfirm()


@pytest.fixture
def scripted_confirm():
    """The ScriptedConfirm class, for tests that need custom answers."""
    return ScriptedConfirm


@pytest.fixture
def tracker(repository, audit_storage, confirm):
    return NetWorthTracker(
        repository=repository,
        audit_logger=AuditLogger(audit_storage),
        confirm=confirm,
        settings=AppSettings(),
    )


@pytest.fixture
def store():
    return RecordStore()


@pytest.fixture
def make_asset():
    """Factory for valid assets; override any field by keyword."""
    def _make(**overrides) -> Asset:
        fields = {
            "name": "Home",
            "category": AssetCategory.REAL_ESTATE,
            "purchase_date": date(2020, 1, 1),
            "purchase_price": Decimal("300000"),
            "current_value": Decimal("350000"),
        }
        fields.update(overrides)
        return Asset(**fields)
    return _make


@pytest.fixture
def make_liability():
    """Factory for valid liabilities; override any field by keyword."""
    def _make(**overrides) -> Liability:
        fields = {
            "name": "Mortgage",
            "category": LiabilityCategory.MORTGAGE,
            "original_amount": Decimal("250000"),
            "current_balance": Decimal("240000"),
            "interest_rate": Decimal("3.5"),
            "start_date": date(2020, 1, 1),
        }
        fields.update(overrides)
        return Liability(**fields)
    return _make


@pytest.fixture
def home_form():
    """Raw asset form values, as the UI submits them."""
    def _form(**overrides) -> dict:
        form = {
            "name": "Home",
            "category": "Real Estate",
            "purchase_date": "2020-01-01",
            "purchase_price": "300000",
            "current_value": "350000",
            "associated_debt_id": "",
            "notes": "",
        }
        form.update(overrides)
        return form
    return _form


@pytest.fixture
def mortgage_form():
    """Raw liability form values, as the UI submits them."""
    def _form(**overrides) -> dict:
        form = {
            "name": "Mortgage",
            "category": "Mortgage",
            "original_amount": "250000",
            "current_balance": "240000",
            "interest_rate": "3.5",
            "start_date": "2020-01-01",
            "associated_asset_id": "",
            "notes": "",
        }
        form.update(overrides)
        return form
    return _form
