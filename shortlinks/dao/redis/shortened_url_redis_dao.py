"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

This module provides a Redis-based implementation of ShortenedURLBaseDAO.

Responsibilities:
    - Insert records while enforcing both uniqueness constraints (unique key
      and (url, category) within the owner scope, or across all owners for
      owner-less records);
    - Retrieve records by key, filtering expired ones on demand;
    - Increment usage counters atomically;
    - Translate Redis failures into DAO exceptions.

Classes:
    ShortenedURLRedisDAO:
        DAO for storing and retrieving ShortenedURLModel in a Redis datastore.

Example:
    >>> from shortlinks.models import ShortenedURLModel
    >>> from shortlinks.dao.redis import ShortenedURLRedisDAO

    >>> dao = ShortenedURLRedisDAO(prefix='shortlinks:dev')
    >>> link = dao.insert(ShortenedURLModel(url='https://example.com/page', unique_key='x7k2p'))
    >>> link.use_count
    0
    >>> dao.increment_use_count('x7k2p')
    1
    >>> dao.get('x7k2p', unexpired=True).use_count
    1
"""

from dataclasses import replace
from datetime import datetime, UTC

import redis
from beartype import beartype

from shortlinks.models import Owner, ShortenedURLModel
from shortlinks.dao.base import ShortenedURLBaseDAO
from shortlinks.dao.redis.mixins import RedisClientMixin
from shortlinks.dao.redis.helpers import handle_redis_connection_error, serialize_shortened_url, deserialize_shortened_url
from shortlinks.dao.exceptions import ShortenedURLAlreadyExistsError, ShortenedURLNotFoundError
from shortlinks.utils.helpers import to_timestamp


class ShortenedURLRedisDAO(RedisClientMixin, ShortenedURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing shortened URL mappings

    This class implements the ShortenedURLBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    NOTE:
        - Records never get a Redis TTL. Expired records stay in the store and
          are filtered at read time (get(..., unexpired=True)).
    """

    @handle_redis_connection_error
    @beartype
    def insert(self, shortened_url: ShortenedURLModel, **kwargs) -> ShortenedURLModel:
        """Insert a shortened URL into Redis

        Both the record key and the scope index key are WATCHed before the
        existence checks, and the writes run in a MULTI/EXEC transaction. If a
        concurrent writer touches either key in between, EXEC aborts and the
        insert is reported as a uniqueness violation.

        Owned records also claim the global (url, category) index with SET NX,
        so owner-less lookups find them unless an earlier record holds the pair.

        Args:
            shortened_url (ShortenedURLModel):
                Record to be inserted. use_count and timestamps are reset.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortenedURLModel: the persisted record.

        Raises:
            ShortenedURLAlreadyExistsError:
                If the unique key or the (url, category, owner) scope is taken.
            DataStoreError:
                If a Redis connection issue occurs.

        Example:
            >>> dao.insert(ShortenedURLModel(url='https://example.com/', unique_key='x7k2p'))
            ShortenedURLModel(url='https://example.com/', unique_key='x7k2p', ...)
        """
        now = datetime.now(UTC)
        record = replace(shortened_url, use_count=0, created_at=now, updated_at=now)

        link_key = self.keys.link_key(record.unique_key)
        link_scope_key = self.keys.link_scope_key(record.url, record.category, record.owner)
        global_scope_key = self.keys.link_scope_key(record.url, record.category)

        try:
            with self.redis.pipeline(transaction=True) as pipe:
                pipe.watch(link_key, link_scope_key)
                if pipe.exists(link_key):
                    raise ShortenedURLAlreadyExistsError(f"Short URL with key '{record.unique_key}' already exists.", field='unique_key')
                if pipe.exists(link_scope_key):
                    raise ShortenedURLAlreadyExistsError(
                        f"Short URL for '{record.url}' already exists in category {record.category!r}.",
                        field='url',
                    )

                pipe.multi()
                pipe.hset(link_key, mapping=serialize_shortened_url(record))
                pipe.set(link_scope_key, record.unique_key)
                if record.owner is not None:
                    # the global index keeps pointing at the first record of the pair
                    pipe.set(global_scope_key, record.unique_key, nx=True)
                    pipe.zadd(self.keys.owner_links_key(record.owner), {record.unique_key: now.timestamp()})
                pipe.execute()
        except redis.exceptions.WatchError as e:
            # NOTE: we can't tell which key was touched, so the field is left unset
            raise ShortenedURLAlreadyExistsError(
                f"Short URL with key '{record.unique_key}' was concurrently modified.",
                field=None,
            ) from e

        return record

    @handle_redis_connection_error
    @beartype
    def get(self, unique_key: str, unexpired: bool = False, **kwargs) -> ShortenedURLModel:
        """Retrieve a stored shortened URL by its unique key

        Args:
            unique_key (str):
                The public token of the record.
            unexpired (bool):
                If True, expired records raise ShortenedURLNotFoundError.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortenedURLModel: the stored record.

        Raises:
            ShortenedURLNotFoundError:
                If the record does not exist (or is expired and unexpired=True).
            DataStoreError:
                If Redis connectivity issues occur.
        """
        data = self.redis.hgetall(self.keys.link_key(unique_key))
        if not data:
            raise ShortenedURLNotFoundError(f"Short URL with key '{unique_key}' not found.")

        record = deserialize_shortened_url(data)
        if unexpired and record.is_expired():
            raise ShortenedURLNotFoundError(f"Short URL with key '{unique_key}' expired at {record.expires_at.isoformat()}.")
        return record

    @handle_redis_connection_error
    @beartype
    def find(self, url: str, category: str | None = None, owner: Owner | None = None, **kwargs) -> ShortenedURLModel | None:
        unique_key = self.redis.get(self.keys.link_scope_key(url, category, owner))
        if unique_key is None:
            return None

        data = self.redis.hgetall(self.keys.link_key(unique_key))
        if not data:
            return None

        record = deserialize_shortened_url(data)
        # Guard against (practically impossible) scope digest collisions
        if (record.url, record.category) != (url, category):
            return None
        if owner is not None and record.owner != owner:
            return None
        return record

    @handle_redis_connection_error
    @beartype
    def increment_use_count(self, unique_key: str, amount: int = 1, **kwargs) -> int:
        """Atomically increment the usage counter of a shortened URL

        NOTE: HINCRBY is executed server-side, so concurrent increments never
              overwrite each other. The counter and updated_at are written in
              one MULTI/EXEC transaction.

        Returns:
            int: the usage counter after the increment.

        Raises:
            ShortenedURLNotFoundError:
                If no record with the given key exists.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.increment_use_count('x7k2p')
            42
        """
        link_key = self.keys.link_key(unique_key)

        # Records are never deleted, so the existence check can't go stale
        if not self.redis.exists(link_key):
            raise ShortenedURLNotFoundError(f"Short URL with key '{unique_key}' not found.")

        with self.redis.pipeline(transaction=True) as pipe:
            pipe.hincrby(link_key, 'use_count', amount)
            pipe.hset(link_key, 'updated_at', to_timestamp(datetime.now(UTC)))
            use_count, _ = pipe.execute()

        return int(use_count)

    @handle_redis_connection_error
    @beartype
    def owned_by(self, owner: Owner, **kwargs) -> list[ShortenedURLModel]:
        unique_keys = self.redis.zrange(self.keys.owner_links_key(owner), 0, -1)
        if not unique_keys:
            return []

        with self.redis.pipeline(transaction=False) as pipe:
            for unique_key in unique_keys:
                pipe.hgetall(self.keys.link_key(unique_key))
            rows = pipe.execute()

        return [deserialize_shortened_url(row) for row in rows if row]
