"""Streamlit app for the finance narrative.

The app is a thin view over :class:`~finance_narrative.scenario.ScenarioController`:
the savings-rate slider, the preset buttons and the travel toggle each
call one controller entry point, and the charts are drawn from the
controller's latest snapshot.  The controller lives in
``st.session_state`` so it survives Streamlit reruns.

To run the app from the command line::

    streamlit run finance_narrative/dashboard.py
"""

from __future__ import annotations

import os
import sys
from decimal import Decimal
from typing import Optional

import pandas as pd
import streamlit as st

# Support both ``streamlit run finance_narrative/dashboard.py`` and
# package execution.
if __package__:
    from . import breakdown, config
    from . import visualization as viz
    from .ledger import LedgerStore, load_ledger
    from .logging_setup import configure_logging
    from .models import LedgerError, ScenarioParameterError
    from .scenario import PRESETS, ScenarioController
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from finance_narrative import breakdown, config  # type: ignore
    from finance_narrative import visualization as viz  # type: ignore
    from finance_narrative.ledger import LedgerStore, load_ledger  # type: ignore
    from finance_narrative.logging_setup import configure_logging  # type: ignore
    from finance_narrative.models import LedgerError, ScenarioParameterError  # type: ignore
    from finance_narrative.scenario import PRESETS, ScenarioController  # type: ignore

PRESET_LABELS = {
    'aggressive': "Aggressive saver (25%)",
    'conservative': "Conservative saver (10%)",
    'remove-travel': "Remove travel expense",
    'split-travel': "Split travel over two months",
    'reset': "Reset",
}
CONTROLLER_KEY = 'scenario_controller'


def load_store(uploaded) -> Optional[LedgerStore]:
    """Load the uploaded ledger, or the configured default file."""
    try:
        return load_ledger(uploaded if uploaded is not None else config.LEDGER_PATH)
    except LedgerError as exc:  # pragma: no cover - UI display only
        st.error(f"Failed to load ledger: {exc}")
        return None


def get_controller(store: LedgerStore, source_key: str) -> ScenarioController:
    """Return the session's controller, rebuilding it when the ledger source changes."""
    state = st.session_state
    cached = state.get(CONTROLLER_KEY)
    if cached is None or state.get('ledger_source') != source_key:
        cached = ScenarioController(store)
        state[CONTROLLER_KEY] = cached
        state['ledger_source'] = source_key
    return cached


def sync_savings_rate(controller: ScenarioController, percent: int) -> bool:
    """Push the slider value into the controller; returns whether it changed."""
    rate = Decimal(percent) / Decimal(100)
    if rate == controller.parameters.savings_rate:
        return False
    try:
        controller.set_savings_rate(rate)
    except ScenarioParameterError as exc:
        st.error(str(exc))
        return False
    return True


def _rerun() -> None:
    rerun = getattr(st, 'rerun', None) or getattr(st, 'experimental_rerun', None)
    if rerun is not None:
        rerun()


def render_controls(controller: ScenarioController) -> None:
    st.sidebar.header("What if…")
    current = int((controller.parameters.savings_rate * 100).to_integral_value())
    percent = st.sidebar.slider("Savings rate (%)", min_value=0, max_value=100, value=current)
    sync_savings_rate(controller, percent)

    for name, label in PRESET_LABELS.items():
        if name in PRESETS and st.sidebar.button(label, key=f"preset_{name}"):
            controller.apply_preset(name)
            _rerun()

    toggle_label = "Exclude travel expense" if controller.parameters.travel_included else "Include travel expense"
    if st.sidebar.button(toggle_label, key="toggle_travel"):
        controller.toggle_travel_included()
        _rerun()


def render_ledger_table(store: LedgerStore) -> None:
    """Show the loaded transactions, newest first, in a collapsed table."""
    frame = store.to_frame().sort_values("date", ascending=False, kind="stable")
    frame["date"] = pd.to_datetime(frame["date"]).dt.strftime("%Y-%m-%d")
    with st.expander(f"Transactions ({len(frame)})"):
        st.dataframe(frame, use_container_width=True, hide_index=True)


def main() -> None:
    """Entry point for the Streamlit app."""
    configure_logging()
    st.set_page_config(page_title="Household Finance Story", layout="wide")
    st.title("A Year of Household Finances")

    uploaded = st.sidebar.file_uploader("Ledger CSV (optional)", type=["csv"])
    store = load_store(uploaded)
    if store is None:
        st.stop()
    if len(store) == 0:
        st.warning("The ledger contains no transactions.")
        st.stop()

    source_key = getattr(uploaded, 'name', None) or str(config.LEDGER_PATH)
    controller = get_controller(store, source_key)
    render_controls(controller)
    snapshot = controller.snapshot

    if snapshot.split_matched is False:
        st.warning(
            "The travel expense to split was not found in the ledger; "
            "the split shown is synthetic and the source data should be checked."
        )

    st.subheader("Checking balance")
    st.plotly_chart(viz.balance_figure(snapshot, controller.event), use_container_width=True)
    if snapshot.event is not None and not snapshot.event.exact:
        st.caption("The highlighted point is the closest date to the travel expense, not the expense itself.")

    st.subheader("Savings")
    st.plotly_chart(viz.savings_figure(snapshot), use_container_width=True)

    st.subheader("Monthly spending")
    checking = store.checking()
    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(viz.spending_figure(breakdown.monthly_spending(checking)), use_container_width=True)
    with col2:
        st.plotly_chart(viz.category_pie_figure(breakdown.category_totals(checking)), use_container_width=True)

    render_ledger_table(store)


if __name__ == "__main__":  # pragma: no cover
    main()
