"""
Conftest for unit tests - overrides autouse fixtures from parent conftest.py
Unit tests work on fakes and temporary files only.
"""
import pytest


@pytest.fixture(scope='function', autouse=True)
def prepare_test_function():
    """Override the parent fixture, unit tests pass explicit paths."""
    yield
