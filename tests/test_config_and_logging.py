import importlib
import logging
from decimal import Decimal

import pytest

from finance_narrative import config, logging_setup
from finance_narrative.money import round2, to_decimal
from finance_narrative.models import InvalidAmountError


def test_config_defaults():
    assert config.DEFAULT_SAVINGS_RATE == Decimal('0.15')
    assert config.PROJECTION_DAY == 2
    assert config.TRAVEL_EVENT.category == 'Travel'
    assert config.TRAVEL_EVENT.amount == Decimal('-1200')


def test_config_environment_overrides(monkeypatch, tmp_path):
    try:
        monkeypatch.setenv('FINNARR_MONTHLY_INCOME', '5200')
        monkeypatch.setenv('FINNARR_STARTING_BALANCE', '100.50')
        monkeypatch.setenv('FINNARR_LEDGER_PATH', str(tmp_path / 'ledger.csv'))
        reloaded = importlib.reload(config)
        assert reloaded.MONTHLY_INCOME == Decimal('5200')
        assert reloaded.STARTING_BALANCE == Decimal('100.50')
        assert reloaded.get_ledger_path() == str((tmp_path / 'ledger.csv').resolve())
    finally:
        monkeypatch.undo()
        importlib.reload(config)


def test_round2_uses_half_away_from_zero():
    assert round2('2.675') == Decimal('2.68')
    assert round2('-2.675') == Decimal('-2.68')
    assert round2(1) == Decimal('1.00')


@pytest.mark.parametrize('value', ['abc', float('inf'), True, None])
def test_to_decimal_rejects_bad_values(value):
    with pytest.raises(InvalidAmountError):
        to_decimal(value)


def test_parse_level(monkeypatch):
    monkeypatch.delenv('FINNARR_LOG_LEVEL', raising=False)
    assert logging_setup._parse_level('debug') == logging.DEBUG
    assert logging_setup._parse_level('10') == 10
    assert logging_setup._parse_level(None) == logging.INFO
    monkeypatch.setenv('FINNARR_LOG_LEVEL', 'WARNING')
    assert logging_setup._parse_level(None) == logging.WARNING


@pytest.mark.parametrize('env_value', ['verbose', 'NOTSET_PLEASE', ' '])
def test_parse_level_ignores_unknown_env_value(monkeypatch, env_value):
    monkeypatch.setenv('FINNARR_LOG_LEVEL', env_value)
    assert logging_setup._parse_level(None) == logging.INFO
    assert logging_setup._parse_level('loud') == logging.INFO
    assert logging_setup._parse_level('error') == logging.ERROR


def test_get_logger_keeps_package_quiet():
    logger = logging_setup.get_logger('finance_narrative.series')
    assert logger.name == 'finance_narrative.series'
    assert logging.getLogger('finance_narrative').handlers


def test_configure_logging_attaches_one_handler(monkeypatch):
    import io

    pkg_logger = logging.getLogger('finance_narrative')
    saved_handlers = list(pkg_logger.handlers)
    saved_level, saved_propagate = pkg_logger.level, pkg_logger.propagate
    monkeypatch.setattr(logging_setup, '_CONFIGURED', False)
    stream = io.StringIO()
    try:
        logging_setup.configure_logging('INFO', stream=stream)
        logging_setup.configure_logging('DEBUG', stream=stream)
        handlers = [h for h in pkg_logger.handlers if isinstance(h, logging.StreamHandler)]
        assert len(handlers) == 1
        logging_setup.get_logger('finance_narrative.ledger').info('hello')
        assert 'hello' in stream.getvalue()
    finally:
        pkg_logger.handlers = saved_handlers
        pkg_logger.setLevel(saved_level)
        pkg_logger.propagate = saved_propagate
