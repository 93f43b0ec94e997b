from shortlinks.dao.redis.redis_key_schema import RedisKeySchema
from shortlinks.dao.redis.mixins import RedisClientMixin
from shortlinks.dao.redis.shortened_url_redis_dao import ShortenedURLRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'ShortenedURLRedisDAO',
]
