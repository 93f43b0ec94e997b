"""Unit tests for the ShortenedURLRedisDAO

Test coverage includes:

1. Insertion behavior
   - Validates inserting a record WATCHes both keys and writes in a transaction.
   - Ensures owned records are added to the owner's index and claim the global index.
   - Confirms taken keys and taken scopes raise ShortenedURLAlreadyExistsError.
   - Confirms an aborted transaction (WatchError) raises ShortenedURLAlreadyExistsError.
   - Confirms Redis connection errors raise DataStoreError.
   - Ensures invalid types raise BeartypeCallHintParamViolation.

2. Retrieval behavior
   - Ensures fetching a stored key returns a populated ShortenedURLModel.
   - Confirms missing keys raise ShortenedURLNotFoundError.
   - Confirms expired records are only hidden when unexpired=True.

3. Dedup lookup
   - Ensures find() follows the scope index to the record.
   - Ensures owner-less lookups use the global index and match owned records.
   - Returns None when the scope is free or the index points at a mismatch.

4. Usage counter
   - Ensures HINCRBY and updated_at are written in one transaction.
   - Confirms missing keys raise ShortenedURLNotFoundError.

5. Owner listing
   - Ensures owned_by() reads the owner's index in order.
"""

import re
from datetime import datetime, timedelta, UTC
from unittest.mock import ANY, call

import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation
from freezegun import freeze_time

from shortlinks.models import Owner, ShortenedURLModel
from shortlinks.dao.exceptions import DataStoreError, ShortenedURLAlreadyExistsError, ShortenedURLNotFoundError
from shortlinks.dao.redis import RedisKeySchema, ShortenedURLRedisDAO


NOW = datetime(2026, 10, 15, 12, 0, 0, tzinfo=UTC)  # same moment as stored_hash timestamps


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def dao(redis_client, app_prefix):
    """Create a ShortenedURLRedisDAO instance with a mocked Redis client."""
    return ShortenedURLRedisDAO(redis_client=redis_client, prefix=app_prefix)


@pytest.fixture
def keys(app_prefix):
    return RedisKeySchema(prefix=app_prefix)


# -------------------------------
# 1. Insertion behavior
# -------------------------------


@freeze_time(NOW)
def test_insert_shortened_url(dao, redis_client, keys):
    """Ensure insert WATCHes both keys, then writes record and scope index atomically."""
    link = ShortenedURLModel(url='https://example.com/test', unique_key='x7k2p', use_count=99)
    link_key = keys.link_key('x7k2p')
    scope_key = keys.link_scope_key('https://example.com/test')

    inserted = dao.insert(link)

    assert inserted.use_count == 0
    assert inserted.created_at == NOW
    assert inserted.updated_at == NOW
    redis_client.pipeline.assert_called_once_with(transaction=True)
    redis_client.watch.assert_called_once_with(link_key, scope_key)
    redis_client.exists.assert_has_calls([call(link_key), call(scope_key)])
    redis_client.multi.assert_called_once()
    redis_client.hset.assert_called_once_with(
        link_key,
        mapping={
            'url': 'https://example.com/test',
            'unique_key': 'x7k2p',
            'use_count': '0',
            'created_at': repr(NOW.timestamp()),
            'updated_at': repr(NOW.timestamp()),
        },
    )
    redis_client.set.assert_called_once_with(scope_key, 'x7k2p')
    redis_client.zadd.assert_not_called()
    redis_client.execute.assert_called_once()


@freeze_time(NOW)
def test_insert_owned_shortened_url_indexes_owner(dao, redis_client, keys):
    owner = Owner('User', '42')
    link = ShortenedURLModel(url='https://example.com/test', unique_key='x7k2p', owner=owner, category='news')

    dao.insert(link)

    redis_client.watch.assert_called_once_with(keys.link_key('x7k2p'), keys.link_scope_key('https://example.com/test', 'news', owner))
    redis_client.set.assert_has_calls(
        [
            call(keys.link_scope_key('https://example.com/test', 'news', owner), 'x7k2p'),
            call(keys.link_scope_key('https://example.com/test', 'news'), 'x7k2p', nx=True),
        ]
    )
    redis_client.zadd.assert_called_once_with(keys.owner_links_key(owner), {'x7k2p': NOW.timestamp()})


def test_insert_with_taken_unique_key(dao, redis_client):
    """Ensure a taken key raises ShortenedURLAlreadyExistsError without writing."""
    redis_client.exists.side_effect = [True, False]
    link = ShortenedURLModel(url='https://example.com/test', unique_key='x7k2p')

    with pytest.raises(ShortenedURLAlreadyExistsError, match=re.escape("Short URL with key 'x7k2p' already exists.")) as exc_info:
        dao.insert(link)

    assert exc_info.value.field == 'unique_key'
    redis_client.hset.assert_not_called()
    redis_client.execute.assert_not_called()


def test_insert_with_taken_scope(dao, redis_client):
    """Ensure a taken (url, category) scope raises ShortenedURLAlreadyExistsError."""
    redis_client.exists.side_effect = [False, True]
    link = ShortenedURLModel(url='https://example.com/test', unique_key='x7k2p', category='news')

    with pytest.raises(ShortenedURLAlreadyExistsError) as exc_info:
        dao.insert(link)

    assert exc_info.value.field == 'url'
    redis_client.execute.assert_not_called()


def test_insert_aborted_by_concurrent_writer(dao, redis_client):
    """Ensure a WatchError on EXEC is reported as a uniqueness violation."""
    redis_client.execute.side_effect = redis.exceptions.WatchError('Watched variable changed.')
    link = ShortenedURLModel(url='https://example.com/test', unique_key='x7k2p')

    with pytest.raises(ShortenedURLAlreadyExistsError, match='concurrently modified') as exc_info:
        dao.insert(link)

    assert exc_info.value.field is None
    assert isinstance(exc_info.value.__cause__, redis.exceptions.WatchError)


def test_insert_with_redis_connection_error(dao, redis_client):
    redis_client.execute.side_effect = redis.exceptions.ConnectionError('Connection error')
    link = ShortenedURLModel(url='https://example.com/test', unique_key='x7k2p')

    with pytest.raises(DataStoreError, match="Can't connect to Redis at redis.test:6379/0."):
        dao.insert(link)


def test_insert_with_invalid_type(dao):
    with pytest.raises((TypeError, BeartypeCallHintParamViolation)):
        dao.insert('https://example.com/notamodel')


# -------------------------------
# 2. Retrieval behavior
# -------------------------------


def test_get_shortened_url(dao, redis_client, keys, stored_hash):
    redis_client.hgetall.return_value = stored_hash

    link = dao.get('x7k2p')

    redis_client.hgetall.assert_called_once_with(keys.link_key('x7k2p'))
    assert link == ShortenedURLModel(
        url='https://example.com/test',
        unique_key='x7k2p',
        category='news',
        owner=Owner('User', '42'),
        use_count=7,
        expires_at=None,
        created_at=NOW,
        updated_at=NOW,
    )


def test_get_missing_shortened_url(dao, redis_client):
    redis_client.hgetall.return_value = {}

    with pytest.raises(ShortenedURLNotFoundError, match=re.escape("Short URL with key 'nope1' not found.")):
        dao.get('nope1')


@freeze_time(NOW)
def test_get_expired_shortened_url(dao, redis_client, stored_hash):
    """Ensure expired records stay readable, but are hidden with unexpired=True."""
    stored_hash['expires_at'] = repr((NOW - timedelta(seconds=1)).timestamp())
    redis_client.hgetall.return_value = stored_hash

    assert dao.get('x7k2p').expires_at == NOW - timedelta(seconds=1)
    with pytest.raises(ShortenedURLNotFoundError, match='expired'):
        dao.get('x7k2p', unexpired=True)


@freeze_time(NOW)
def test_get_unexpired_shortened_url(dao, redis_client, stored_hash):
    stored_hash['expires_at'] = repr((NOW + timedelta(days=1)).timestamp())
    redis_client.hgetall.return_value = stored_hash

    assert dao.get('x7k2p', unexpired=True).unique_key == 'x7k2p'


def test_get_with_redis_connection_error(dao, redis_client):
    redis_client.hgetall.side_effect = redis.exceptions.ConnectionError('Connection error')

    with pytest.raises(DataStoreError):
        dao.get('x7k2p')


@pytest.mark.parametrize('unique_key', [None, 123, 12.34])
def test_get_with_invalid_type(dao, unique_key):
    with pytest.raises((TypeError, BeartypeCallHintParamViolation)):
        dao.get(unique_key)


# -------------------------------
# 3. Dedup lookup
# -------------------------------


def test_find_follows_scope_index(dao, redis_client, keys, stored_hash):
    owner = Owner('User', '42')
    redis_client.get.return_value = 'x7k2p'
    redis_client.hgetall.return_value = stored_hash

    link = dao.find('https://example.com/test', category='news', owner=owner)

    redis_client.get.assert_called_once_with(keys.link_scope_key('https://example.com/test', 'news', owner))
    redis_client.hgetall.assert_called_once_with(keys.link_key('x7k2p'))
    assert link.unique_key == 'x7k2p'


def test_find_free_scope(dao, redis_client):
    redis_client.get.return_value = None

    assert dao.find('https://example.com/test') is None
    redis_client.hgetall.assert_not_called()


def test_find_global_scope_matches_owned_record(dao, redis_client, keys, stored_hash):
    """Ensure an owner-less lookup reads the global index and accepts any owner."""
    redis_client.get.return_value = 'x7k2p'
    redis_client.hgetall.return_value = stored_hash

    link = dao.find('https://example.com/test', category='news')

    redis_client.get.assert_called_once_with(keys.link_scope_key('https://example.com/test', 'news'))
    assert link.owner == Owner('User', '42')


@pytest.mark.parametrize(
    'url, category, owner',
    [
        ('https://example.com/other', 'news', None),
        ('https://example.com/test', None, None),
        ('https://example.com/test', 'news', Owner('User', '43')),
    ],
)
def test_find_ignores_mismatching_record(dao, redis_client, stored_hash, url, category, owner):
    """Ensure a scope index pointing at another scope's record is ignored."""
    redis_client.get.return_value = 'x7k2p'
    redis_client.hgetall.return_value = stored_hash

    assert dao.find(url, category=category, owner=owner) is None


# -------------------------------
# 4. Usage counter
# -------------------------------


@freeze_time(NOW)
def test_increment_use_count(dao, redis_client, keys):
    redis_client.exists.return_value = True
    redis_client.execute.return_value = [8, 0]

    assert dao.increment_use_count('x7k2p') == 8

    link_key = keys.link_key('x7k2p')
    redis_client.pipeline.assert_called_once_with(transaction=True)
    redis_client.hincrby.assert_called_once_with(link_key, 'use_count', 1)
    redis_client.hset.assert_called_once_with(link_key, 'updated_at', repr(NOW.timestamp()))


def test_increment_use_count_by_amount(dao, redis_client, keys):
    redis_client.exists.return_value = True
    redis_client.execute.return_value = [12, 0]

    assert dao.increment_use_count('x7k2p', amount=5) == 12
    redis_client.hincrby.assert_called_once_with(keys.link_key('x7k2p'), 'use_count', 5)


def test_increment_use_count_of_missing_shortened_url(dao, redis_client):
    redis_client.exists.return_value = False

    with pytest.raises(ShortenedURLNotFoundError):
        dao.increment_use_count('nope1')
    redis_client.hincrby.assert_not_called()


def test_increment_use_count_with_redis_connection_error(dao, redis_client):
    redis_client.exists.side_effect = redis.exceptions.ConnectionError('Connection error')

    with pytest.raises(DataStoreError):
        dao.increment_use_count('x7k2p')


# -------------------------------
# 5. Owner listing
# -------------------------------


def test_owned_by(dao, redis_client, keys, stored_hash):
    owner = Owner('User', '42')
    second = dict(stored_hash, unique_key='b2c3d', url='https://example.com/other')
    redis_client.zrange.return_value = ['x7k2p', 'b2c3d', 'gone0']
    redis_client.execute.return_value = [stored_hash, second, {}]

    links = dao.owned_by(owner)

    redis_client.zrange.assert_called_once_with(keys.owner_links_key(owner), 0, -1)
    redis_client.pipeline.assert_called_once_with(transaction=False)
    redis_client.hgetall.assert_has_calls([call(keys.link_key('x7k2p')), call(keys.link_key('b2c3d')), call(ANY)])
    assert [link.unique_key for link in links] == ['x7k2p', 'b2c3d']


def test_owned_by_without_links(dao, redis_client):
    redis_client.zrange.return_value = []

    assert dao.owned_by(Owner('User', '42')) == []
    redis_client.pipeline.assert_not_called()
