"""Tests for loading the ledger into the Ledger Store."""

from __future__ import annotations

import io
from datetime import date
from decimal import Decimal
from pathlib import Path

import pandas as pd
import pytest

from finance_narrative.ledger import LedgerStore, ledger_from_records, load_ledger
from finance_narrative.models import Account, LedgerError

SAMPLE_LEDGER = Path(__file__).resolve().parents[1] / 'data' / 'personal_finance_transactions.csv'


def _build_df(rows):
    return pd.DataFrame(rows)


def _row(day, account, category, amount, description=''):
    return {
        'date': day,
        'account': account,
        'category': category,
        'type': 'Expense',
        'amount': amount,
        'description': description,
    }


def test_from_frame_converts_and_sorts() -> None:
    df = _build_df([
        _row('2024-04-15', 'Checking', 'Travel', '-1200.00', 'Trip'),
        _row('2024-04-01', 'checking', 'Income', '4500', 'Payroll'),
        _row('2024-04-25', 'Savings', 'Savings Balance', 500.0),
    ])
    store = LedgerStore.from_frame(df)
    assert len(store) == 3
    first = store.transactions[0]
    assert first.date == date(2024, 4, 1)
    assert first.account is Account.CHECKING
    assert first.amount == Decimal('4500')
    assert store.transactions[2].amount == Decimal('500.0')
    assert store.period() == (date(2024, 4, 1), date(2024, 4, 25))


def test_same_day_rows_keep_file_order() -> None:
    df = _build_df([
        _row('2024-01-05', 'Checking', 'Dining', '-10', 'first'),
        _row('2024-01-01', 'Checking', 'Income', '100'),
        _row('2024-01-05', 'Checking', 'Dining', '-30', 'second'),
    ])
    store = LedgerStore.from_frame(df)
    assert [t.description for t in store if t.category == 'Dining'] == ['first', 'second']


def test_column_names_are_case_insensitive() -> None:
    df = pd.DataFrame({
        'Date': ['2024-01-01'], 'Account': ['Checking'], 'Category': ['Income'],
        'Type': ['Deposit'], 'Amount': ['10.00'],
    })
    store = LedgerStore.from_frame(df)
    assert store.transactions[0].description == ''


def test_missing_columns_are_reported() -> None:
    df = pd.DataFrame({'date': ['2024-01-01'], 'amount': ['1']})
    with pytest.raises(LedgerError, match='account'):
        LedgerStore.from_frame(df)


@pytest.mark.parametrize('row, message', [
    (_row('not a date', 'Checking', 'Dining', '-1'), 'date'),
    (_row('2024-01-01', 'Brokerage', 'Dining', '-1'), 'Unknown account'),
    (_row('2024-01-01', 'Checking', 'Dining', 'ten dollars'), 'amount'),
    (_row('2024-01-01', 'Checking', 'Dining', None), 'amount is missing'),
])
def test_bad_rows_raise_ledger_error(row, message) -> None:
    with pytest.raises(LedgerError, match=message):
        LedgerStore.from_frame(_build_df([row]))


def test_account_queries() -> None:
    store = ledger_from_records([
        _row('2024-01-01', 'Checking', 'Income', '4500'),
        _row('2024-01-25', 'Savings', 'Savings Balance', '500'),
        _row('2024-01-26', 'Savings', 'Interest', '1.25'),
        _row('2024-01-27', 'Credit', 'Dining', '-20'),
    ])
    assert [t.category for t in store.checking()] == ['Income']
    assert [t.category for t in store.savings_deposits()] == ['Savings Balance']
    assert len(store.for_account(Account.CREDIT)) == 1


def test_empty_store() -> None:
    store = ledger_from_records([])
    assert len(store) == 0
    assert store.period() is None
    assert store.to_frame().empty


def test_none_transactions_rejected() -> None:
    with pytest.raises(LedgerError):
        LedgerStore(None)


def test_load_ledger_from_buffer() -> None:
    buffer = io.StringIO(
        "date,account,category,type,amount,description\n"
        "2024-04-15,Checking,Travel,Expense,-1200.10,Trip\n"
        "2024-04-01,Checking,Income,Deposit,4500.00,Payroll\n"
    )
    store = load_ledger(buffer)
    assert [t.amount for t in store] == [Decimal('4500.00'), Decimal('-1200.10')]


def test_load_ledger_missing_file(tmp_path) -> None:
    with pytest.raises(LedgerError, match='not found'):
        load_ledger(tmp_path / 'missing.csv')


def test_load_ledger_empty_upload_raises_ledger_error() -> None:
    with pytest.raises(LedgerError, match='Unable to read ledger'):
        load_ledger(io.StringIO(''))


def test_load_ledger_empty_file_raises_ledger_error(tmp_path) -> None:
    target = tmp_path / 'ledger.csv'
    target.write_text('', encoding='utf-8')
    with pytest.raises(LedgerError, match='Unable to read ledger'):
        load_ledger(target)


def test_load_ledger_malformed_rows_raise_ledger_error() -> None:
    buffer = io.StringIO(
        "date,account,category,type,amount,description\n"
        "2024-04-01,Checking,Income,Deposit,4500.00,Payroll\n"
        "2024-04-15,Checking,Travel,Expense,-1200.00,Trip,extra,fields,here\n"
    )
    with pytest.raises(LedgerError, match='Unable to read ledger'):
        load_ledger(buffer)


def test_load_ledger_rejects_other_extensions(tmp_path) -> None:
    target = tmp_path / 'ledger.json'
    target.write_text('{}', encoding='utf-8')
    with pytest.raises(LedgerError, match='extension'):
        load_ledger(target)


def test_sample_ledger_loads() -> None:
    store = load_ledger(SAMPLE_LEDGER)
    travel = [t for t in store if t.category == 'Travel']
    assert len(travel) == 1
    assert travel[0].date == date(2024, 4, 15)
    assert travel[0].amount == Decimal('-1200.00')
    assert len(store.savings_deposits()) == 12


def test_to_frame_round_trips_columns() -> None:
    store = load_ledger(SAMPLE_LEDGER)
    frame = store.to_frame()
    assert list(frame.columns) == ['date', 'account', 'category', 'type', 'amount', 'description']
    assert len(frame) == len(store)
