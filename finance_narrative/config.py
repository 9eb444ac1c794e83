"""Configuration for the finance narrative.

Centralizes paths, household constants and the default what-if event,
each overridable through environment variables.
"""

from __future__ import annotations

import os
from datetime import date
from decimal import Decimal
from pathlib import Path

from .models import ScenarioEvent

# Base project root - assumes this file is in finance_narrative/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("FINNARR_DATA_DIR", _PROJECT_ROOT / "data"))
LEDGER_PATH = Path(
    os.getenv("FINNARR_LEDGER_PATH", DATA_DIR / "personal_finance_transactions.csv")
).resolve()

# Household constants
MONTHLY_INCOME = Decimal(os.getenv("FINNARR_MONTHLY_INCOME", "4500"))
STARTING_BALANCE = Decimal(os.getenv("FINNARR_STARTING_BALANCE", "5000"))
PROJECTION_YEAR = int(os.getenv("FINNARR_PROJECTION_YEAR", "2024"))
PROJECTION_DAY = 2
DEFAULT_SAVINGS_RATE = Decimal("0.15")

SAVINGS_CATEGORY = "Savings Balance"

TRAVEL_EVENT = ScenarioEvent(
    category="Travel",
    date=date(2024, 4, 15),
    amount=Decimal("-1200"),
    split_dates=(date(2024, 4, 15), date(2024, 5, 15)),
    label="Travel expense",
)


def get_ledger_path() -> str:
    """Get the ledger path as a string."""
    return str(LEDGER_PATH)
