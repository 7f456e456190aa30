#!/usr/bin/env python3

import pytest
from loguru import logger


# https://loguru.readthedocs.io/en/latest/resources/migration.html#replacing-caplog-fixture-from-pytest-library
# Show loguru logs only if CICD pytest fails.
@pytest.fixture
def reportlog(pytestconfig):
    logging_plugin = pytestconfig.pluginmanager.getplugin("logging-plugin")
    handler_id = logger.add(logging_plugin.report_handler, format="{message}")
    yield
    logger.remove(handler_id)


@pytest.fixture(scope='function', autouse=True)
def prepare_test_function(tmp_path, monkeypatch):
    # Any PDF a test saves lands in its own directory
    monkeypatch.chdir(tmp_path)
    yield
