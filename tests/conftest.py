"""Shared fixtures for the SectionCompare test suite."""

import logging

import pytest

from config_logging import AppConfig, reset_config
from section_compare.routes import shutdown_executor


@pytest.fixture
def annual_report_sections():
    """Source and target sections modelled on a yearly report revision."""
    source = [
        {'name': 'Title Page', 'text': 'Annual Report 2023'},
        {'name': 'Executive Summary', 'text': 'Revenue increased by 15% compared to previous year.'},
        {'name': 'Financial Overview', 'text': 'Total assets: $2.5M, Liabilities: $800K'},
        {'name': 'Risk Assessment', 'text': 'Key risks include market volatility.'},
    ]
    target = [
        {'name': 'Title Page', 'text': 'Annual Report 2024'},
        {'name': 'Executive Summary', 'text': 'Revenue increased by 15% compared to previous year.'},
        {'name': 'Financial Overview', 'text': 'Total assets: $3.2M, Liabilities: $900K'},
        {'name': 'Future Projections', 'text': 'Expected growth of 20% in the next fiscal year.'},
    ]
    return source, target


@pytest.fixture
def fresh_config(monkeypatch):
    """Rebuild the global config from a clean environment for each test."""
    for key in ('SC_ENV', 'SC_DEBUG', 'SC_MAX_SECTIONS', 'SC_COMPARE_TIMEOUT',
                'SC_SIMILARITY_METRIC', 'SC_LOG_TO_FILE'):
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def client(fresh_config):
    """Flask test client for the comparison API."""
    from app import create_app

    app = create_app(AppConfig())
    app.config['TESTING'] = True
    with app.test_client() as test_client:
        yield test_client
    shutdown_executor()


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def capture_logger():
    """Attach a list handler to a named logger; returns its record list."""
    attached = []

    def attach(name):
        handler = _ListHandler()
        logging.getLogger(name).addHandler(handler)
        attached.append((name, handler))
        return handler.records

    yield attach
    for name, handler in attached:
        logging.getLogger(name).removeHandler(handler)
