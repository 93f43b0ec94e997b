from shortlinks.service.shortened_url_service import ShortenedURLService, FetchResult


__all__ = [
    'ShortenedURLService',
    'FetchResult',
]
