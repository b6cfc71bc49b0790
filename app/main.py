"""
Streamlit Frontend for the Net Worth Tracker

DESIGN PRINCIPLES:
1. The page only renders - every figure comes from the tracker
2. Explicit confirmation before anything is deleted
3. Clear error messages in simple language
4. Visual feedback for all operations

Destructive actions go through the tracker's confirmation collaborator.
Streamlit cannot block on a dialog, so the collaborator answers from
session state: a prompt counts as confirmed once the user has ticked
the matching box on the page.
"""

from datetime import date
from decimal import Decimal

import streamlit as st

from networth.csv_codec import ImportFailure
from networth.models.records import (
    ASSET_CATEGORY_ICONS,
    LIABILITY_CATEGORY_ICONS,
    AssetCategory,
    LiabilityCategory,
)
from networth.orchestrator import (
    CONFIRM_DELETE_ALL,
    CONFIRM_DELETE_ALL_AGAIN,
    CONFIRM_DELETE_ASSET,
    CONFIRM_DELETE_LIABILITY,
    EXPORT_FILENAME,
    TEMPLATE_FILENAME,
    NetWorthTracker,
    create_app_components,
)
from networth.services.storage import PersistenceError
from networth.validation import RecordValidator, ValidationError


# Page configuration
st.set_page_config(
    page_title="Net Worth Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .positive {
        color: #28a745;
    }
    .negative {
        color: #dc3545;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def session_confirm(message: str) -> bool:
    """Confirmation collaborator: True once the user ticked this prompt."""
    return message in st.session_state.get("confirmed_prompts", set())


def grant(*messages: str) -> None:
    st.session_state.confirmed_prompts = set(messages)


def revoke() -> None:
    st.session_state.confirmed_prompts = set()


@st.cache_resource
def get_tracker() -> NetWorthTracker:
    """Get or create the tracker (cached for the server process)."""
    return create_app_components(confirm=session_confirm)


def main():
    """Main application entry point."""
    try:
        tracker = get_tracker()
    except PersistenceError as e:
        st.error(f"Could not load your saved data: {e}")
        st.stop()

    st.sidebar.title("💰 Net Worth Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Overview", "🏠 Assets", "💳 Liabilities", "📂 Import / Export", "⚙️ Settings"],
        index=0,
    )

    if page == "📊 Overview":
        render_overview_page(tracker)
    elif page == "🏠 Assets":
        render_assets_page(tracker)
    elif page == "💳 Liabilities":
        render_liabilities_page(tracker)
    elif page == "📂 Import / Export":
        render_import_export_page(tracker)
    elif page == "⚙️ Settings":
        render_settings_page(tracker)


def run_mutation(tracker: NetWorthTracker, action, success_message: str):
    """Run a tracker mutation and report the outcome."""
    try:
        result = action()
    except ValidationError as e:
        st.error(RecordValidator.get_user_friendly_summary(e.result))
        return None
    except PersistenceError as e:
        st.warning(f"Your change is shown but could not be saved: {e}")
        return None
    except Exception as e:
        tracker.audit_logger.log_error(type(e).__name__, str(e))
        st.error(f"Something went wrong: {e}")
        return None
    st.success(success_message)
    return result


# =============================================================================
# OVERVIEW
# =============================================================================

def render_overview_page(tracker: NetWorthTracker):
    st.title("📊 Overview")
    summary = tracker.summary()
    fmt = tracker.format_currency

    col1, col2, col3 = st.columns(3)
    col1.metric("Total Assets", fmt(summary.total_assets))
    col2.metric("Total Liabilities", fmt(summary.total_liabilities))

    delta = None
    if summary.change is not None:
        delta = f"{fmt(summary.change.absolute)} ({summary.change.percentage:.1f}%)"
    col3.metric("Net Worth", fmt(summary.net_worth), delta=delta)

    col1, col2 = st.columns(2)
    col1.metric("🏠 Real Estate Equity", fmt(summary.real_estate_equity))
    col2.metric("🚗 Vehicle Equity", fmt(summary.vehicle_equity))

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Assets by Category")
        render_breakdown(tracker, tracker.asset_breakdown(), "No assets yet")
    with col2:
        st.subheader("Liabilities by Category")
        render_breakdown(tracker, tracker.liability_breakdown(), "No liabilities yet")

    st.markdown("---")
    st.subheader("📸 Snapshots")
    notes = st.text_input("Snapshot notes (optional)")
    if st.button("Take Snapshot", type="primary"):
        run_mutation(tracker, lambda: tracker.take_snapshot(notes), "Snapshot saved successfully!")

    snapshots = tracker.recent_snapshots()
    if not snapshots:
        st.info("No snapshots yet. Take one to start tracking your progress.")
    for snapshot in snapshots:
        st.markdown(
            f"**{snapshot.date.strftime('%b %d, %Y')}** - "
            f"Net worth {fmt(snapshot.net_worth)} "
            f"(assets {fmt(snapshot.total_assets)}, "
            f"liabilities {fmt(snapshot.total_liabilities)})"
            + (f"  \n_{snapshot.notes}_" if snapshot.notes else "")
        )


def render_breakdown(tracker: NetWorthTracker, breakdown: dict, empty_message: str):
    if not breakdown:
        st.info(empty_message)
        return
    for category, bucket in breakdown.items():
        st.markdown(
            f"**{category}** ({bucket.count}) - {tracker.format_currency(bucket.total)}"
        )


# =============================================================================
# ASSETS
# =============================================================================

def render_assets_page(tracker: NetWorthTracker):
    st.title("🏠 Assets")

    editing_id = st.session_state.get("editing_asset_id")
    editing = tracker.get_asset(editing_id)
    render_asset_form(tracker, editing)

    st.markdown("---")
    if not tracker.assets:
        st.info("No assets yet. Add your first asset above.")

    for asset in tracker.assets:
        icon = ASSET_CATEGORY_ICONS.get(asset.category, "")
        gain = tracker.asset_gain(asset)
        with st.expander(f"{icon} {asset.name} - {tracker.format_currency(asset.current_value)}"):
            st.markdown(f"**Category:** {asset.category.value}")
            st.markdown(f"**Purchased:** {asset.purchase_date:%b %d, %Y} for "
                        f"{tracker.format_currency(asset.purchase_price)}")
            st.markdown(f"**Gain:** {tracker.format_currency(gain.absolute)} "
                        f"({gain.percentage:.1f}%)")

            debt = tracker.get_liability(asset.associated_debt_id)
            if debt is not None:
                st.markdown(f"**Linked debt:** {debt.name}")
                st.markdown(f"**Equity:** {tracker.format_currency(tracker.asset_equity(asset))}")
            if asset.notes:
                st.markdown(f"_{asset.notes}_")

            col1, col2 = st.columns(2)
            if col1.button("✏️ Edit", key=f"edit_asset_{asset.id}"):
                st.session_state.editing_asset_id = asset.id
                st.rerun()

            sure = col2.checkbox(CONFIRM_DELETE_ASSET, key=f"confirm_asset_{asset.id}")
            if col2.button("🗑️ Delete", key=f"delete_asset_{asset.id}", disabled=not sure):
                grant(CONFIRM_DELETE_ASSET)
                try:
                    if run_mutation(tracker, lambda: tracker.delete_asset(asset.id), "Asset deleted"):
                        st.rerun()
                finally:
                    revoke()


def render_asset_form(tracker: NetWorthTracker, editing):
    st.subheader("Edit Asset" if editing else "Add Asset")
    categories = list(AssetCategory)

    name = st.text_input("Name *", value=editing.name if editing else "")
    category = st.selectbox(
        "Category *",
        options=categories,
        index=categories.index(editing.category) if editing else 0,
        format_func=lambda c: f"{ASSET_CATEGORY_ICONS[c]} {c.value}",
    )
    col1, col2, col3 = st.columns(3)
    purchase_date = col1.date_input(
        "Purchase Date *",
        value=editing.purchase_date if editing else date.today(),
    )
    purchase_price = col2.number_input(
        "Purchase Price *",
        value=float(editing.purchase_price) if editing else 0.0,
        min_value=0.0,
        step=100.0,
    )
    current_value = col3.number_input(
        "Current Value *",
        value=float(editing.current_value) if editing else 0.0,
        step=100.0,
    )

    options = [""] + [l.id for l in tracker.linkable_liabilities(category)]
    current_link = editing.associated_debt_id if editing else ""
    associated_debt_id = st.selectbox(
        "Associated Debt",
        options=options,
        index=options.index(current_link) if current_link in options else 0,
        format_func=lambda i: tracker.get_liability(i).name if i else "None",
        disabled=len(options) == 1,
    )
    notes = st.text_area("Notes", value=(editing.notes or "") if editing else "")

    col1, col2 = st.columns(2)
    if col1.button("💾 Save Asset", type="primary"):
        form = {
            "name": name,
            "category": category,
            "purchase_date": purchase_date,
            "purchase_price": Decimal(str(purchase_price)),
            "current_value": Decimal(str(current_value)),
            "associated_debt_id": associated_debt_id,
            "notes": notes,
        }
        saved = run_mutation(
            tracker,
            lambda: tracker.save_asset(form, editing.id if editing else None),
            "Asset saved",
        )
        if saved:
            _, result = saved
            for warning in result.warnings:
                st.warning(warning)
            st.session_state.editing_asset_id = None
    if editing and col2.button("Cancel"):
        st.session_state.editing_asset_id = None
        st.rerun()


# =============================================================================
# LIABILITIES
# =============================================================================

def render_liabilities_page(tracker: NetWorthTracker):
    st.title("💳 Liabilities")

    editing_id = st.session_state.get("editing_liability_id")
    editing = tracker.get_liability(editing_id)
    render_liability_form(tracker, editing)

    st.markdown("---")
    if not tracker.liabilities:
        st.info("No liabilities yet.")

    for liability in tracker.liabilities:
        icon = LIABILITY_CATEGORY_ICONS.get(liability.category, "")
        payoff = tracker.payoff_percentage(liability)
        with st.expander(
            f"{icon} {liability.name} - {tracker.format_currency(liability.current_balance)}"
        ):
            st.markdown(f"**Category:** {liability.category.value}")
            st.markdown(f"**Original amount:** {tracker.format_currency(liability.original_amount)}")
            st.markdown(f"**Interest rate:** {liability.interest_rate}%")
            st.markdown(f"**Paid off:** {payoff:.1f}%")
            st.progress(min(max(float(payoff) / 100, 0.0), 1.0))

            asset = tracker.get_asset(liability.associated_asset_id)
            if asset is not None:
                st.markdown(f"**Linked asset:** {asset.name}")
            if liability.notes:
                st.markdown(f"_{liability.notes}_")

            col1, col2 = st.columns(2)
            if col1.button("✏️ Edit", key=f"edit_liability_{liability.id}"):
                st.session_state.editing_liability_id = liability.id
                st.rerun()

            sure = col2.checkbox(CONFIRM_DELETE_LIABILITY, key=f"confirm_liability_{liability.id}")
            if col2.button("🗑️ Delete", key=f"delete_liability_{liability.id}", disabled=not sure):
                grant(CONFIRM_DELETE_LIABILITY)
                try:
                    if run_mutation(tracker, lambda: tracker.delete_liability(liability.id), "Liability deleted"):
                        st.rerun()
                finally:
                    revoke()


def render_liability_form(tracker: NetWorthTracker, editing):
    st.subheader("Edit Liability" if editing else "Add Liability")
    categories = list(LiabilityCategory)

    name = st.text_input("Name *", value=editing.name if editing else "")
    category = st.selectbox(
        "Category *",
        options=categories,
        index=categories.index(editing.category) if editing else 0,
        format_func=lambda c: f"{LIABILITY_CATEGORY_ICONS[c]} {c.value}",
    )
    col1, col2 = st.columns(2)
    original_amount = col1.number_input(
        "Original Amount *",
        value=float(editing.original_amount) if editing else 0.0,
        min_value=0.0,
        step=100.0,
    )
    current_balance = col2.number_input(
        "Current Balance *",
        value=float(editing.current_balance) if editing else 0.0,
        min_value=0.0,
        step=100.0,
    )
    col1, col2 = st.columns(2)
    interest_rate = col1.number_input(
        "Interest Rate (%)",
        value=float(editing.interest_rate) if editing else 0.0,
        min_value=0.0,
        step=0.125,
    )
    start_date = col2.date_input(
        "Start Date *",
        value=editing.start_date if editing else date.today(),
    )

    options = [""] + [a.id for a in tracker.linkable_assets(category)]
    current_link = editing.associated_asset_id if editing else ""
    associated_asset_id = st.selectbox(
        "Associated Asset",
        options=options,
        index=options.index(current_link) if current_link in options else 0,
        format_func=lambda i: tracker.get_asset(i).name if i else "None",
        disabled=len(options) == 1,
    )
    notes = st.text_area("Notes", value=(editing.notes or "") if editing else "")

    col1, col2 = st.columns(2)
    if col1.button("💾 Save Liability", type="primary"):
        form = {
            "name": name,
            "category": category,
            "original_amount": Decimal(str(original_amount)),
            "current_balance": Decimal(str(current_balance)),
            "interest_rate": Decimal(str(interest_rate)),
            "start_date": start_date,
            "associated_asset_id": associated_asset_id,
            "notes": notes,
        }
        saved = run_mutation(
            tracker,
            lambda: tracker.save_liability(form, editing.id if editing else None),
            "Liability saved",
        )
        if saved:
            _, result = saved
            for warning in result.warnings:
                st.warning(warning)
            st.session_state.editing_liability_id = None
    if editing and col2.button("Cancel"):
        st.session_state.editing_liability_id = None
        st.rerun()


# =============================================================================
# IMPORT / EXPORT
# =============================================================================

def render_import_export_page(tracker: NetWorthTracker):
    st.title("📂 Import / Export")

    col1, col2 = st.columns(2)
    col1.download_button(
        "⬇️ Export Data",
        data=tracker.export_csv(),
        file_name=EXPORT_FILENAME,
        mime="text/csv",
    )
    col2.download_button(
        "⬇️ Download Template",
        data=tracker.export_template(),
        file_name=TEMPLATE_FILENAME,
        mime="text/csv",
    )

    st.markdown("---")
    uploaded_file = st.file_uploader("Choose a CSV file", type=["csv"])
    if st.button("⬆️ Import", type="primary"):
        if uploaded_file is None:
            st.error("Please select a file first")
            return
        try:
            result = tracker.import_csv(uploaded_file.getvalue())
        except ImportFailure as e:
            st.error(f"Error importing CSV: {e}")
            return
        except PersistenceError as e:
            st.warning(f"Imported records are shown but could not be saved: {e}")
            return
        st.success(result.message)
        if result.rows_skipped:
            st.info(f"{result.rows_skipped} rows were skipped because they could not be read.")


# =============================================================================
# SETTINGS
# =============================================================================

def render_settings_page(tracker: NetWorthTracker):
    st.title("⚙️ Settings")

    st.markdown("### Storage Status")

    from networth.config import validate_all_settings

    status = validate_all_settings()

    for name, key in [("Storage", "storage"), ("Google Sheets", "google_sheets"), ("App", "app")]:
        if key not in status:
            continue
        if status[key]:
            st.success(f"✅ {name} - OK")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")

    st.markdown("### Recent Activity")
    events = tracker.audit_logger.recent_events(limit=20)
    if not events:
        st.info("No activity recorded yet.")
    for event in events:
        st.markdown(f"`{event.timestamp:%Y-%m-%d %H:%M}` {event.description}")

    st.markdown("---")
    st.markdown("### Danger Zone")
    first = st.checkbox(CONFIRM_DELETE_ALL)
    second = st.checkbox(CONFIRM_DELETE_ALL_AGAIN, disabled=not first)
    if st.button("🗑️ Delete All Data", disabled=not (first and second)):
        grant(CONFIRM_DELETE_ALL, CONFIRM_DELETE_ALL_AGAIN)
        try:
            run_mutation(tracker, tracker.delete_all_data, "All data has been deleted.")
        finally:
            revoke()


if __name__ == "__main__":
    main()
