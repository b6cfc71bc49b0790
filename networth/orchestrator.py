"""
Main Orchestrator for the Net Worth Tracker

This module ties together all the components and defines the
operations the UI calls:
1. Record edits (form → validate → store → persist → audit)
2. Destructive actions (confirm → store → persist → audit)
3. Snapshots and CSV import/export
4. Read-only derived figures for rendering

DESIGN DECISION: The orchestrator enforces the boundaries:
- No record reaches the store without passing validation
- No delete happens without the confirmation collaborator agreeing
- Every mutation is persisted immediately and audited

If persisting fails, the in-memory change is kept (the user still sees
it) and the PersistenceError propagates so the UI can warn that it was
not saved.
"""

from typing import Callable, Optional, Union

import structlog

from networth.audit import AuditLogger, create_correlation_id
from networth.calculations import derived, linkage
from networth.config import AppSettings, StorageSettings, get_settings
from networth.csv_codec import EXPORT_TEMPLATE, ImportFailure, export_records, parse_records
from networth.models.records import (
    Asset,
    AssetCategory,
    AssetGain,
    CategoryTotal,
    ImportResult,
    Liability,
    LiabilityCategory,
    NetWorthSummary,
    Snapshot,
    ValidationResult,
)
from networth.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueAuditStorage,
    KeyValueStore,
    PersistenceError,
)
from networth.snapshots import engine as snapshot_engine
from networth.store import RecordRepository, RecordStore
from networth.validation import RecordValidator, ValidationError


logger = structlog.get_logger(__name__)

ConfirmCallback = Callable[[str], bool]

EXPORT_FILENAME = "networth-data.csv"
TEMPLATE_FILENAME = "networth-template.csv"

CONFIRM_DELETE_ASSET = "Are you sure you want to delete this asset?"
CONFIRM_DELETE_LIABILITY = "Are you sure you want to delete this liability?"
CONFIRM_DELETE_ALL = "Are you sure you want to delete ALL data? This cannot be undone!"
CONFIRM_DELETE_ALL_AGAIN = (
    "This will permanently delete all assets, liabilities, and snapshots. "
    "Are you REALLY sure?"
)


def _decline_everything(message: str) -> bool:
    return False


class NetWorthTracker:
    """
    The single object the UI talks to.

    Owns the RecordStore for the session. Reads are computed fresh
    from the store on every call.
    """

    def __init__(
        self,
        repository: RecordRepository,
        audit_logger: Optional[AuditLogger] = None,
        confirm: Optional[ConfirmCallback] = None,
        settings: Optional[AppSettings] = None,
        store: Optional[RecordStore] = None,
    ):
        """
        Args:
            repository: Where the collections are persisted
            audit_logger: Defaults to a local-only logger
            confirm: Asked before destructive actions. If None, every
                destructive action is declined.
            settings: App settings (display limit, currency)
            store: Pre-loaded store; loaded from the repository if None

        Raises:
            PersistenceError: If stored data cannot be read
        """
        self._repository = repository
        self._audit_logger = audit_logger or AuditLogger()
        self._confirm = confirm or _decline_everything
        self._settings = settings or get_settings().app
        self._store = store if store is not None else repository.load()
        self._validator = RecordValidator(self._store)

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _persist(self, operation: str) -> None:
        """
        Save the whole store after a mutation.

        Raises:
            PersistenceError: After logging and auditing the failure.
                The in-memory mutation is not rolled back.
        """
        try:
            self._repository.save(self._store)
        except PersistenceError as e:
            logger.error("persist_failed", operation=operation, error=str(e))
            self._audit_logger.log_persistence_failed(
                operation=operation,
                error_message=str(e),
            )
            raise

    def _reject(self, result: ValidationResult) -> None:
        issues = [
            {"field": i.field, "type": i.issue_type, "message": i.message}
            for i in result.issues
        ]
        self._audit_logger.log_validation_failed(
            record_type=result.record_type,
            issues=issues,
        )
        raise ValidationError(result)

    # =========================================================================
    # RECORD EDITS
    # =========================================================================

    def save_asset(
        self,
        form: dict,
        asset_id: Optional[str] = None,
    ) -> tuple[Asset, ValidationResult]:
        """
        Create or edit an asset from form input.

        Args:
            form: Raw field values keyed by Asset field name
            asset_id: Id of the asset being edited; None to add a new one

        Returns:
            (stored_asset, validation_result) - the result may carry warnings

        Raises:
            ValidationError: If the form has errors. Nothing is stored.
            PersistenceError: If the save to storage failed
        """
        asset, result = self._validator.validate_asset(form, asset_id)
        if not result.is_valid:
            self._reject(result)

        stored, created = self._store.upsert_asset(asset)
        self._persist("save_asset")
        self._audit_logger.log_record_saved(
            entity_type="asset",
            entity_id=stored.id,
            name=stored.name,
            created=created,
        )
        return stored, result

    def save_liability(
        self,
        form: dict,
        liability_id: Optional[str] = None,
    ) -> tuple[Liability, ValidationResult]:
        """Create or edit a liability from form input. See save_asset."""
        liability, result = self._validator.validate_liability(form, liability_id)
        if not result.is_valid:
            self._reject(result)

        stored, created = self._store.upsert_liability(liability)
        self._persist("save_liability")
        self._audit_logger.log_record_saved(
            entity_type="liability",
            entity_id=stored.id,
            name=stored.name,
            created=created,
        )
        return stored, result

    def delete_asset(self, asset_id: str) -> bool:
        """
        Delete an asset after confirmation.

        Liabilities linked to it keep a dangling link.

        Returns:
            True if the asset was deleted; False if it does not exist or
            the user declined
        """
        asset = self._store.get_asset(asset_id)
        if asset is None:
            logger.warning("delete_unknown_asset", asset_id=asset_id)
            return False

        if not self._confirm(CONFIRM_DELETE_ASSET):
            self._audit_logger.log_user_declined("delete asset")
            return False

        self._store.delete_asset(asset_id)
        self._persist("delete_asset")
        self._audit_logger.log_record_deleted(
            entity_type="asset",
            entity_id=asset.id,
            name=asset.name,
        )
        return True

    def delete_liability(self, liability_id: str) -> bool:
        """Delete a liability after confirmation. See delete_asset."""
        liability = self._store.get_liability(liability_id)
        if liability is None:
            logger.warning("delete_unknown_liability", liability_id=liability_id)
            return False

        if not self._confirm(CONFIRM_DELETE_LIABILITY):
            self._audit_logger.log_user_declined("delete liability")
            return False

        self._store.delete_liability(liability_id)
        self._persist("delete_liability")
        self._audit_logger.log_record_deleted(
            entity_type="liability",
            entity_id=liability.id,
            name=liability.name,
        )
        return True

    def delete_all_data(self) -> bool:
        """
        Clear assets, liabilities and snapshot history.

        Asks twice; declining either prompt leaves everything in place.
        The audit trail itself is kept.
        """
        if not (self._confirm(CONFIRM_DELETE_ALL) and self._confirm(CONFIRM_DELETE_ALL_AGAIN)):
            self._audit_logger.log_user_declined("delete all data")
            return False

        counts = (
            len(self._store.assets),
            len(self._store.liabilities),
            len(self._store.snapshots),
        )
        self._store.clear()
        self._persist("delete_all_data")
        self._audit_logger.log_all_data_deleted(*counts)
        return True

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def take_snapshot(self, notes: Optional[str] = None) -> Snapshot:
        """Freeze the current totals into the history."""
        snapshot = snapshot_engine.take_snapshot(self._store, notes)
        self._persist("take_snapshot")
        self._audit_logger.log_snapshot_taken(
            snapshot_id=snapshot.id,
            net_worth=str(snapshot.net_worth),
        )
        return snapshot

    def recent_snapshots(self, limit: Optional[int] = None) -> list[Snapshot]:
        """Most recent snapshots, newest first (display limit from settings)."""
        if limit is None:
            limit = self._settings.snapshot_display_limit
        return snapshot_engine.recent_snapshots(self._store, limit)

    # =========================================================================
    # CSV
    # =========================================================================

    def export_csv(self) -> str:
        """All assets then all liabilities as CSV text (see EXPORT_FILENAME)."""
        assets = self._store.assets
        liabilities = self._store.liabilities
        content = export_records(assets, liabilities)
        self._audit_logger.log_csv_exported(
            asset_count=len(assets),
            liability_count=len(liabilities),
        )
        return content

    def export_template(self) -> str:
        """Static example file for authoring imports (see TEMPLATE_FILENAME)."""
        return EXPORT_TEMPLATE

    def import_csv(self, content: Union[str, bytes]) -> ImportResult:
        """
        Import records from CSV content.

        Accepted rows are added as new records; malformed rows are
        counted in the result. Nothing is added if the content as a
        whole is unreadable.

        Raises:
            ImportFailure: If the content cannot be read at all
            PersistenceError: If the save to storage failed
        """
        correlation_id = create_correlation_id()

        try:
            parsed = parse_records(content)
        except ImportFailure as e:
            self._audit_logger.log_csv_import_failed(
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        self._store.extend(parsed.assets, parsed.liabilities)
        self._persist("import_csv")

        result = ImportResult(
            assets_added=len(parsed.assets),
            liabilities_added=len(parsed.liabilities),
            rows_skipped=parsed.rows_skipped,
        )
        self._audit_logger.log_csv_imported(
            assets_added=result.assets_added,
            liabilities_added=result.liabilities_added,
            rows_skipped=result.rows_skipped,
            correlation_id=correlation_id,
        )
        return result

    # =========================================================================
    # READS
    # =========================================================================

    @property
    def assets(self) -> list[Asset]:
        return self._store.assets

    @property
    def liabilities(self) -> list[Liability]:
        return self._store.liabilities

    @property
    def snapshots(self) -> list[Snapshot]:
        return self._store.snapshots

    def get_asset(self, asset_id: Optional[str]) -> Optional[Asset]:
        return self._store.get_asset(asset_id)

    def get_liability(self, liability_id: Optional[str]) -> Optional[Liability]:
        return self._store.get_liability(liability_id)

    def summary(self) -> NetWorthSummary:
        return derived.summarize(self._store)

    def asset_equity(self, asset: Asset):
        return derived.asset_equity(self._store, asset)

    def asset_gain(self, asset: Asset) -> AssetGain:
        return derived.asset_gain(asset)

    def payoff_percentage(self, liability: Liability):
        return derived.payoff_percentage(liability)

    def asset_breakdown(self) -> dict[str, CategoryTotal]:
        return derived.asset_breakdown(self._store)

    def liability_breakdown(self) -> dict[str, CategoryTotal]:
        return derived.liability_breakdown(self._store)

    def linkable_liabilities(
        self,
        asset_category: Union[AssetCategory, str],
    ) -> list[Liability]:
        return linkage.linkable_liabilities(self._store, asset_category)

    def linkable_assets(
        self,
        liability_category: Union[LiabilityCategory, str],
    ) -> list[Asset]:
        return linkage.linkable_assets(self._store, liability_category)

    def format_currency(self, amount) -> str:
        return derived.format_currency(amount, self._settings.currency_code)


# =============================================================================
# FACTORY
# =============================================================================

def create_key_value_store(settings: Optional[StorageSettings] = None) -> KeyValueStore:
    """Build the key-value backend named by NETWORTH_STORAGE_BACKEND."""
    settings = settings or get_settings().storage

    if settings.backend == "memory":
        return InMemoryKeyValueStore()
    if settings.backend == "google_sheets":
        return GoogleSheetsKeyValueStore(GoogleSheetsClient())
    return JsonFileKeyValueStore(settings.data_file)


def create_app_components(
    confirm: Optional[ConfirmCallback] = None,
    storage_settings: Optional[StorageSettings] = None,
) -> NetWorthTracker:
    """
    Factory function to create all application components.

    Args:
        confirm: Confirmation collaborator for destructive actions
        storage_settings: Override the environment's storage settings

    Returns:
        A NetWorthTracker loaded from the configured backend

    Raises:
        PersistenceError: If the configured backend holds unreadable data
    """
    settings = get_settings()
    storage_settings = storage_settings or settings.storage
    app_settings = settings.app

    try:
        kv_store = create_key_value_store(storage_settings)
    except Exception as e:
        # Backend not configured - continue with an ephemeral session
        logger.warning(
            "storage_not_configured",
            backend=storage_settings.backend,
            error=str(e),
        )
        kv_store = InMemoryKeyValueStore()

    audit_storage = KeyValueAuditStorage(
        kv_store,
        key=storage_settings.audit_key,
        max_events=app_settings.audit_max_events,
    )

    return NetWorthTracker(
        repository=RecordRepository(kv_store, storage_settings),
        audit_logger=AuditLogger(audit_storage),
        confirm=confirm,
        settings=app_settings,
    )
