from shortlinks.dao.base import ShortenedURLBaseDAO
from shortlinks.dao.memory import ShortenedURLMemoryDAO
from shortlinks.dao.redis import ShortenedURLRedisDAO


__all__ = [
    'ShortenedURLBaseDAO',
    'ShortenedURLMemoryDAO',
    'ShortenedURLRedisDAO',
]
