"""
Pytest configuration and fixtures for test isolation.
"""
import os
from pathlib import Path

import pytest

from rollup_stream.backend.factory import default_factory
from rollup_stream.config.environment import EnvironmentVariables
from rollup_stream.utils.logging_config import logging_config


FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True, scope="function")
def reset_environment():
    """Reset environment variables between tests."""
    original_env = os.environ.copy()
    for name in EnvironmentVariables.get_all_variables():
        os.environ.pop(name, None)
    yield
    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def reset_global_state():
    """Drop handlers installed by the CLI and cached default backends."""
    yield
    logging_config.reset()
    default_factory.clear_cache()


@pytest.fixture
def fixtures_dir():
    return FIXTURES_DIR


@pytest.fixture
def hello_plugin():
    """Mapping-style plugin that loads a one-line module for every id."""
    return {"load": lambda module_id: 'console.log("Hello, World!");'}
