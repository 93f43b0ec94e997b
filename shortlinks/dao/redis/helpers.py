import functools

import redis

from shortlinks.models import Owner, ShortenedURLModel
from shortlinks.types import RedisRecord
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.utils.helpers import to_timestamp, from_timestamp


__all__ = []


def handle_redis_connection_error[F](method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle connection errors

    Args:
        method (Callable[..., Any]):
            Method of a RedisClientMixin subclass which may raise redis ConnectionError or TimeoutError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on connectivity issues with Redis.

    Example:
        >>> @handle_redis_connection_error
        ... def get_link(self, unique_key):
        ...     return self.redis.hgetall(unique_key)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            raise DataStoreError(f"Can't connect to Redis at {self.redis_location}.") from e

    return wrapper


def serialize_shortened_url(shortened_url: ShortenedURLModel) -> RedisRecord:
    """Flatten a record into a Redis HASH mapping (None fields are omitted)"""
    fields = {
        'url': shortened_url.url,
        'unique_key': shortened_url.unique_key,
        'category': shortened_url.category,
        'use_count': str(shortened_url.use_count),
    }
    for name in ('expires_at', 'created_at', 'updated_at'):
        value = getattr(shortened_url, name)
        if value is not None:
            fields[name] = to_timestamp(value)
    if shortened_url.owner is not None:
        fields['owner_type'] = shortened_url.owner.owner_type
        fields['owner_id'] = shortened_url.owner.owner_id
    return {k: v for k, v in fields.items() if v is not None}


def deserialize_shortened_url(data: RedisRecord) -> ShortenedURLModel:
    """Rebuild a record from a Redis HASH mapping (HGETALL output)"""
    owner = None
    if data.get('owner_type') is not None and data.get('owner_id') is not None:
        owner = Owner(owner_type=data['owner_type'], owner_id=data['owner_id'])

    return ShortenedURLModel(
        url=data['url'],
        unique_key=data['unique_key'],
        category=data.get('category'),
        owner=owner,
        use_count=int(data.get('use_count') or 0),
        expires_at=from_timestamp(data.get('expires_at')),
        created_at=from_timestamp(data.get('created_at')),
        updated_at=from_timestamp(data.get('updated_at')),
    )
