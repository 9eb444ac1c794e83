"""Scenario Controller: the what-if state machine.

The controller owns the ``(savings_rate, travel_included, split_travel)``
tuple and the last computed :class:`~finance_narrative.models.ScenarioSnapshot`.
The UI calls exactly three entry points (:meth:`ScenarioController.set_savings_rate`,
:meth:`ScenarioController.apply_preset` and
:meth:`ScenarioController.toggle_travel_included`); each one recomputes
the snapshot synchronously and notifies subscribed renderers.

The base checking balance and the recorded savings series depend only on
the ledger, so they are derived once at construction and reused.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Dict, List, Optional

from . import config
from .ledger import LedgerStore
from .logging_setup import get_logger
from .models import (
    EventMatch,
    InvalidAmountError,
    ScenarioEvent,
    ScenarioParameterError,
    ScenarioParameters,
    ScenarioSnapshot,
    SeriesInputError,
)
from .money import Number, to_decimal
from .series import (
    build_balance_series,
    build_cumulative_series,
    build_excluding_event,
    build_split_event,
    find_event,
    project_savings,
)

logger = get_logger(__name__)

Listener = Callable[[ScenarioSnapshot], None]

DEFAULT_PARAMETERS = ScenarioParameters(
    savings_rate=config.DEFAULT_SAVINGS_RATE,
    travel_included=True,
    split_travel=False,
)

PRESETS: Dict[str, ScenarioParameters] = {
    'aggressive': ScenarioParameters(Decimal('0.25'), travel_included=True, split_travel=False),
    'conservative': ScenarioParameters(Decimal('0.10'), travel_included=True, split_travel=False),
    'remove-travel': ScenarioParameters(config.DEFAULT_SAVINGS_RATE, travel_included=False, split_travel=False),
    'split-travel': ScenarioParameters(config.DEFAULT_SAVINGS_RATE, travel_included=True, split_travel=True),
    'reset': DEFAULT_PARAMETERS,
    'default': DEFAULT_PARAMETERS,
}


def normalize_parameters(params: ScenarioParameters) -> ScenarioParameters:
    """Never exclude and split the same event: a removed event cannot be split."""
    if not params.travel_included and params.split_travel:
        return ScenarioParameters(params.savings_rate, travel_included=False, split_travel=False)
    return params


def validate_savings_rate(rate: Number) -> Decimal:
    """Return ``rate`` as a Decimal in ``[0, 1]`` or raise :class:`ScenarioParameterError`."""
    try:
        value = to_decimal(rate)
    except InvalidAmountError as exc:
        raise ScenarioParameterError('savings_rate', str(exc)) from exc
    if value < 0 or value > 1:
        raise ScenarioParameterError('savings_rate', f"must be between 0 and 1, got {value}")
    return value


class ScenarioController:
    """Holds the scenario parameters and recomputes derived series on change."""

    def __init__(
        self,
        ledger: LedgerStore,
        *,
        monthly_income: Number = config.MONTHLY_INCOME,
        start_balance: Number = config.STARTING_BALANCE,
        event: ScenarioEvent = config.TRAVEL_EVENT,
        projection_year: int = config.PROJECTION_YEAR,
        parameters: Optional[ScenarioParameters] = None,
    ):
        if ledger is None:
            raise SeriesInputError("ScenarioController: ledger must not be None")
        self.ledger = ledger
        self.monthly_income = to_decimal(monthly_income)
        self.start_balance = to_decimal(start_balance)
        self.event = event
        self.projection_year = projection_year
        self._listeners: List[Listener] = []

        initial = normalize_parameters(parameters or DEFAULT_PARAMETERS)
        validate_savings_rate(initial.savings_rate)
        self._params = initial

        self._checking = ledger.checking()
        self._balance_series = build_balance_series(self._checking, self.start_balance)
        self._actual_savings = build_cumulative_series(ledger.savings_deposits())
        self._snapshot = self._compute(initial)

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def parameters(self) -> ScenarioParameters:
        return self._params

    @property
    def snapshot(self) -> ScenarioSnapshot:
        return self._snapshot

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a redraw callback; returns a function that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def set_savings_rate(self, rate: Number) -> ScenarioSnapshot:
        value = validate_savings_rate(rate)
        return self._transition(ScenarioParameters(
            value,
            travel_included=self._params.travel_included,
            split_travel=self._params.split_travel,
        ))

    def apply_preset(self, name: str) -> ScenarioSnapshot:
        key = str(name).strip().lower() if name is not None else ''
        if key not in PRESETS:
            raise ScenarioParameterError('preset', f"unknown preset '{name}'")
        logger.debug("Applying preset %s", key)
        return self._transition(PRESETS[key])

    def toggle_travel_included(self) -> ScenarioSnapshot:
        return self._transition(ScenarioParameters(
            self._params.savings_rate,
            travel_included=not self._params.travel_included,
            split_travel=False,
        ))

    # ------------------------------------------------------------------
    # Recomputation
    # ------------------------------------------------------------------

    def _transition(self, params: ScenarioParameters) -> ScenarioSnapshot:
        params = normalize_parameters(params)
        snapshot = self._compute(params)
        self._params = params
        self._snapshot = snapshot
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot

    def _compute(self, params: ScenarioParameters) -> ScenarioSnapshot:
        event = self.event
        projection = project_savings(
            params.savings_rate,
            self.monthly_income,
            self.projection_year,
            day=config.PROJECTION_DAY,
        )

        counterfactual = None
        match: Optional[EventMatch] = None
        split_matched: Optional[bool] = None
        if not params.travel_included:
            counterfactual = build_excluding_event(
                self._checking, self.start_balance, event.category, event.date,
            )
        elif params.split_travel:
            outcome = build_split_event(
                self._checking,
                self.start_balance,
                event.category,
                event.date,
                event.amount,
                event.split_dates,
            )
            counterfactual = outcome.series
            split_matched = outcome.matched
            match = find_event(
                outcome.transactions, self.start_balance, event.category, event.date,
                counterfactual,
            )
        else:
            match = find_event(
                self._checking, self.start_balance, event.category, event.date,
                self._balance_series,
            )

        return ScenarioSnapshot(
            balance_series=list(self._balance_series),
            counterfactual_series=counterfactual,
            projection_series=projection,
            actual_savings_series=list(self._actual_savings),
            parameters=params,
            event=match,
            split_matched=split_matched,
        )
