import logging

import pytest

pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.values',
    'tests.fixtures.sqlite',
]


@pytest.fixture(autouse=True)
def debug_logging(caplog):
    """Capture adapter debug logging so SQL dumps are exercised in every test."""
    caplog.set_level(logging.DEBUG, logger='stmtadapter')
    yield
