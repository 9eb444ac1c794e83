#!/usr/bin/env python3
"""Print the ending balances and savings for every scenario preset."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from finance_narrative import config
from finance_narrative.ledger import load_ledger
from finance_narrative.logging_setup import configure_logging
from finance_narrative.models import LedgerError
from finance_narrative.scenario import ScenarioController

PRESET_ORDER = ['reset', 'conservative', 'aggressive', 'remove-travel', 'split-travel']


def _last(series, attr: str) -> str:
    if not series:
        return '-'
    return f"{getattr(series[-1], attr):,.2f}"


def main(ledger_path: str | None = None) -> int:
    configure_logging()
    try:
        store = load_ledger(ledger_path or config.LEDGER_PATH)
    except LedgerError as exc:
        print(f"Unable to load ledger: {exc}", file=sys.stderr)
        return 1

    controller = ScenarioController(store)
    print(f"Transactions: {len(store)}  period: {store.period()}")
    print(f"{'preset':<15}{'rate':>6}{'balance':>14}{'alternative':>14}{'projected':>14}  event")
    for name in PRESET_ORDER:
        snap = controller.apply_preset(name)
        event = '-'
        if snap.event is not None:
            kind = 'exact' if snap.event.exact else 'near'
            event = f"{kind} {snap.event.point.date} {snap.event.point.balance:,.2f}"
        print(
            f"{name:<15}{float(snap.parameters.savings_rate):>6.2f}"
            f"{_last(snap.balance_series, 'balance'):>14}"
            f"{_last(snap.counterfactual_series, 'balance'):>14}"
            f"{_last(snap.projection_series, 'savings'):>14}  {event}"
        )
    print(f"\nRecorded savings: {_last(controller.snapshot.actual_savings_series, 'savings')}")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Summarize each what-if scenario for a ledger file.')
    parser.add_argument('ledger', nargs='?', default=None, help='Ledger CSV (defaults to FINNARR_LEDGER_PATH)')
    args = parser.parse_args()
    raise SystemExit(main(args.ledger))
