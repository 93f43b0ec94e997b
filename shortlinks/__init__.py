from shortlinks.models import ShortenedURLModel, Owner, RawDestination, ExistingRecord
from shortlinks.service import ShortenedURLService, FetchResult
from shortlinks.exceptions import ShortLinksError, InvalidUrlError, CreationError


__all__ = [
    'ShortenedURLModel',
    'Owner',
    'RawDestination',
    'ExistingRecord',
    'ShortenedURLService',
    'FetchResult',
    'ShortLinksError',
    'InvalidUrlError',
    'CreationError',
]
