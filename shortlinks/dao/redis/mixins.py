"""Redis client setup shared by Redis-backed DAOs

Responsibilities:
    - Build a Redis client from discrete connection params or a redis:// URL
    - Verify connectivity once on construction
    - Describe the connection target for error messages

Classes:
    - RedisClientMixin: injects `redis` (client) and `keys` (RedisKeySchema) into a DAO.

Example:
    >>> class ShortenedURLRedisDAO(RedisClientMixin, ShortenedURLBaseDAO):
    ...     pass
    ...
    >>> dao = ShortenedURLRedisDAO(redis_url='redis://cache.internal:6379/2', prefix='shortlinks:prod')
    >>> dao.redis_location
    'cache.internal:6379/2'
"""

from typing import Optional

import redis

from shortlinks.dao.redis.redis_key_schema import RedisKeySchema
from shortlinks.dao.exceptions import DataStoreError


class RedisClientMixin:
    """Redis client and key schema for Redis-backed DAOs

    Attributes:
        redis (redis.Redis):
            Client used for every command. Must decode responses to `str`.
        keys (RedisKeySchema):
            Namespaced key builder.
    """

    def __init__(
        self,
        redis_host: Optional[str] = 'localhost',
        redis_port: Optional[int] = 6379,
        redis_db: Optional[int] = 0,
        redis_username: Optional[str] = None,
        redis_password: Optional[str] = None,
        redis_url: Optional[str] = None,
        redis_socket_timeout: Optional[float] = None,
        redis_client: Optional[redis.Redis] = None,
        prefix: Optional[str] = None,
    ):
        """Attach a Redis client to the DAO

        Precedence: `redis_client`, then `redis_url`, then the discrete
        host/port/db params. Responses are always decoded, since records are
        read back as `str` HASH fields.

        Args:
            redis_host, redis_port, redis_db (Optional):
                Connection target. Port and db may be strings (e.g. from AppConfig).
            redis_username, redis_password (Optional[str]):
                ACL credentials.
            redis_url (Optional[str]):
                redis:// or rediss:// URL, overrides the discrete params.
            redis_socket_timeout (Optional[float]):
                Seconds before a command times out (reported as DataStoreError).
            redis_client (Optional[redis.Redis]):
                Pre-built client, e.g. shared across DAOs.
            prefix (Optional[str]):
                Key namespace, usually app_prefix().

        Raises:
            DataStoreError:
                If the initial PING fails.
        """
        if redis_client is None:
            timeout = None if redis_socket_timeout is None else float(redis_socket_timeout)
            if redis_url is not None:
                redis_client = redis.Redis.from_url(redis_url, decode_responses=True, socket_timeout=timeout)
            else:
                redis_client = redis.Redis(
                    host=redis_host,
                    port=int(redis_port),
                    db=int(redis_db),
                    username=redis_username,
                    password=redis_password,
                    socket_timeout=timeout,
                    decode_responses=True,
                )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self._healthcheck()

    @property
    def redis_location(self) -> str:
        """'<host>:<port>/<db>' of the connection pool, for error messages."""
        info = self.redis.connection_pool.connection_kwargs
        return f"{info.get('host')}:{info.get('port')}/{info.get('db')}"

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis

        Returns:
            bool: True if Redis answered. False only when raise_error=False.

        Raises:
            DataStoreError:
                If Redis is unreachable and raise_error=True.
        """
        try:
            self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            if raise_error:
                raise DataStoreError(f"Can't connect to Redis at {self.redis_location}. Check the provided configuration parameters.") from e
            return False
        return True
