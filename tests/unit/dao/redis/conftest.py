"""Shared fixtures for the Redis DAO tests

The same MagicMock plays the client, the pipeline and the pipeline context
manager, so assertions can be made on one object whichever path a DAO takes.
Reads are pre-stubbed as an empty store: no keys, no scope index, no owner
index. Tests override the stubs they need.
"""

from datetime import datetime, UTC
from unittest.mock import MagicMock

import pytest
import redis


NOW = datetime(2026, 10, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def app_prefix() -> str:
    return 'shortlinks:test'


@pytest.fixture
def redis_client() -> redis.Redis:
    """Mock a decoding Redis client holding no shortened URLs."""
    client = MagicMock(spec=redis.client.Pipeline)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0},
    )
    client.pipeline.return_value = client
    client.__enter__.return_value = client
    client.__exit__.return_value = None

    client.exists.return_value = False
    client.get.return_value = None
    client.hgetall.return_value = {}
    client.zrange.return_value = []
    return client


@pytest.fixture
def stored_hash() -> dict[str, str]:
    """HGETALL output of an owned, unexpired record with 7 uses."""
    return {
        'url': 'https://example.com/test',
        'unique_key': 'x7k2p',
        'category': 'news',
        'use_count': '7',
        'owner_type': 'User',
        'owner_id': '42',
        'created_at': repr(NOW.timestamp()),
        'updated_at': repr(NOW.timestamp()),
    }
