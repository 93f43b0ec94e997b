from shortlinks.dao.memory.shortened_url_memory_dao import ShortenedURLMemoryDAO


__all__ = ['ShortenedURLMemoryDAO']
