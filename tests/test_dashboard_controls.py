import contextlib
import types
from datetime import date
from decimal import Decimal

import pytest

pytest.importorskip('streamlit')

from finance_narrative import dashboard
from finance_narrative.ledger import LedgerStore
from finance_narrative.models import Account, Transaction


def _store():
    return LedgerStore([
        Transaction(date(2024, 4, 1), Account.CHECKING, 'Income', 'Deposit', Decimal('4500')),
        Transaction(date(2024, 4, 15), Account.CHECKING, 'Travel', 'Expense', Decimal('-1200')),
    ])


def test_get_controller_is_cached_per_source(monkeypatch):
    state = {}
    monkeypatch.setattr(dashboard, 'st', types.SimpleNamespace(session_state=state))
    store = _store()
    first = dashboard.get_controller(store, 'a.csv')
    assert dashboard.get_controller(store, 'a.csv') is first
    assert dashboard.get_controller(store, 'b.csv') is not first
    assert state['ledger_source'] == 'b.csv'


def test_sync_savings_rate_updates_controller(monkeypatch):
    monkeypatch.setattr(dashboard, 'st', types.SimpleNamespace(session_state={}))
    controller = dashboard.get_controller(_store(), 'a.csv')
    assert dashboard.sync_savings_rate(controller, 15) is False
    assert dashboard.sync_savings_rate(controller, 25) is True
    assert controller.parameters.savings_rate == Decimal('0.25')


def test_sync_savings_rate_reports_invalid_values(monkeypatch):
    errors = []
    monkeypatch.setattr(
        dashboard, 'st', types.SimpleNamespace(session_state={}, error=errors.append),
    )
    controller = dashboard.get_controller(_store(), 'a.csv')
    assert dashboard.sync_savings_rate(controller, 150) is False
    assert errors and 'savings_rate' in errors[0]
    assert controller.parameters.savings_rate == Decimal('0.15')


def test_rerun_prefers_streamlit_rerun(monkeypatch):
    called = {}
    monkeypatch.setattr(dashboard, 'st', types.SimpleNamespace(rerun=lambda: called.setdefault('method', 'rerun')))
    dashboard._rerun()
    assert called['method'] == 'rerun'


def test_rerun_falls_back_to_experimental(monkeypatch):
    called = {}
    monkeypatch.setattr(
        dashboard, 'st',
        types.SimpleNamespace(experimental_rerun=lambda: called.setdefault('method', 'experimental')),
    )
    dashboard._rerun()
    assert called['method'] == 'experimental'


def test_render_ledger_table_lists_newest_first(monkeypatch):
    labels, shown = [], []

    def expander(label):
        labels.append(label)
        return contextlib.nullcontext()

    monkeypatch.setattr(
        dashboard, 'st',
        types.SimpleNamespace(expander=expander, dataframe=lambda frame, **kwargs: shown.append(frame)),
    )
    dashboard.render_ledger_table(_store())
    assert labels == ['Transactions (2)']
    assert shown[0]['date'].tolist() == ['2024-04-15', '2024-04-01']
    assert shown[0]['amount'].tolist() == [-1200.0, 4500.0]
