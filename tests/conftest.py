"""Pytest configuration and shared fixtures.

Nothing here talks to a real database: the cluster client is replaced by
mocks whose connections return canned ``QueryResult`` objects.
"""

from __future__ import annotations

import os
from unittest.mock import MagicMock

import pytest

# Keep settings independent of any developer .env file
os.environ.setdefault("DAO_ENV_FILE", "tests/.env.test")

from cluster_dao.config import get_settings
from cluster_dao.infrastructure.sql.core.identifier import escape_identifier
from cluster_dao.infrastructure.sql.core.parameters import format_template


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Make every test read settings from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_conn():
    """A checked-out connection; tests set ``execute`` results."""
    return MagicMock()


@pytest.fixture
def mock_cluster(mock_conn):
    """Cluster whose ``get_connection`` context manager yields ``mock_conn``."""
    cluster = MagicMock()
    cluster.get_connection.return_value.__enter__.return_value = mock_conn
    cluster.get_connection.return_value.__exit__.return_value = False
    cluster.escape_identifier.side_effect = escape_identifier
    cluster.format.side_effect = format_template
    return cluster
