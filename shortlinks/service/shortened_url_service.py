"""Link generation and token resolution

This module holds the two protocols built on top of a ShortenedURL DAO:

    * generation: normalize the destination, reuse an existing record of the
      same (url, category, owner) scope, or insert a new record under a random
      (or caller-chosen) key, retrying on key collisions;
    * resolution: map a token back to its destination, skipping expired
      records, counting the use atomically and merging extra query parameters.

Classes:
    FetchResult:
        Outcome of a token resolution.
    ShortenedURLService:
        Generation and resolution protocols bound to a DAO and settings.

Example:
    >>> from shortlinks.dao.memory import ShortenedURLMemoryDAO
    >>> from shortlinks.service import ShortenedURLService
    >>> service = ShortenedURLService(ShortenedURLMemoryDAO())
    >>> link = service.generate('https://example.com/docs?page=1')
    >>> service.generate('HTTPS://EXAMPLE.COM/docs?page=1') == link
    True
    >>> service.fetch_with_token(link.unique_key, {'page': '2'}).url
    'https://example.com/docs?page=2'
    >>> service.fetch_with_token('nope!').url
    '/'
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from shortlinks.models import (
    Destination,
    ExistingRecord,
    Owner,
    RawDestination,
    ShortenedURLModel,
    as_destination,
)
from shortlinks.dao.base import ShortenedURLBaseDAO
from shortlinks.dao.exceptions import DataStoreError, ShortenedURLAlreadyExistsError, ShortenedURLNotFoundError
from shortlinks.exceptions import CreationError, InvalidUrlError
from shortlinks.utils.config import ShortenerSettings, redis_connection_kwargs
from shortlinks.utils.keygen import KeyGenerator
from shortlinks.utils.urls import clean_url, extract_token, merge_params_to_url


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a token resolution.

    Attributes:
        url (str):
            Final destination (with merged params), or the default redirect on a miss.
        shortened_url (Optional[ShortenedURLModel]):
            Resolved record, None when the token is unknown or expired.
    """

    url: str
    shortened_url: ShortenedURLModel | None = None

    @property
    def found(self) -> bool:
        return self.shortened_url is not None


class ShortenedURLService:
    """Generate shortened URLs and resolve tokens against a DAO

    Attributes:
        dao (ShortenedURLBaseDAO):
            Data store enforcing uniqueness and providing atomic increments.
        settings (ShortenerSettings):
            Charset, key length, retry bound, default redirect, subdomain rules.
        key_generator (KeyGenerator):
            Source of key candidates. Built from settings unless injected.
    """

    def __init__(
        self,
        dao: ShortenedURLBaseDAO,
        settings: ShortenerSettings | None = None,
        key_generator: KeyGenerator | None = None,
    ):
        self.dao = dao
        self.settings = settings if settings is not None else ShortenerSettings()
        if key_generator is None:
            key_generator = KeyGenerator(charset=self.settings.character_set, length=self.settings.key_length)
        self.key_generator = key_generator

    @classmethod
    def from_config(cls, config: Mapping[str, Any], prefix: str | None = None) -> 'ShortenedURLService':
        """Build a Redis-backed service from a loaded configuration section

        Args:
            config (Mapping[str, Any]):
                Output of load_config(): {'shortener': {...}, 'redis': {...}}.
            prefix (Optional[str]):
                Redis key namespace, usually app_prefix().

        Example:
            >>> service = ShortenedURLService.from_config(load_config('api'), prefix=app_prefix())
        """
        from shortlinks.dao.redis import ShortenedURLRedisDAO

        settings = ShortenerSettings.from_config(config.get('shortener', {}))
        dao = ShortenedURLRedisDAO(**redis_connection_kwargs(config['redis']), prefix=prefix)
        return cls(dao, settings=settings)

    def generate(
        self,
        destination: Destination | ShortenedURLModel | str,
        owner: Owner | None = None,
        custom_key: str | None = None,
        expires_at: datetime | None = None,
        category: str | None = None,
    ) -> ShortenedURLModel:
        """Generate a shortened URL for a destination, or reuse the existing one

        Procedure:
        - Step 1: Re-link short-circuit for existing records
        - Step 2: Normalize the destination URL
        - Step 3: Return the record of the same (url, category) in the owner scope, if any
        - Step 4: Insert a new record, retrying with fresh candidates on key collisions

        Args:
            destination (Destination | ShortenedURLModel | str):
                Raw URL, or a record from an earlier generation. A record
                already owned by `owner` is returned as is; otherwise its url
                is shortened again for `owner`.
            owner (Optional[Owner]):
                Scope of the dedup lookup and of the url uniqueness constraint.
                None is the global scope, which also matches owned records.
            custom_key (Optional[str]):
                Caller-chosen key used instead of generated candidates.
            expires_at (Optional[datetime]):
                Expiry of a newly created record. Naive datetimes are taken as UTC.
            category (Optional[str]):
                Partition of the url uniqueness scope.

        Returns:
            ShortenedURLModel: the new or reused record.

        Raises:
            InvalidUrlError:
                If the destination can't be normalized.
            CreationError:
                If no record could be inserted within max_creation_retries attempts,
                or the custom key is already taken.
            DataStoreError:
                If the data store is unreachable.
        """
        match as_destination(destination):
            case ExistingRecord(record=record):
                if record.owner == owner:
                    logger.debug('Short URL already owned by requested owner.', extra={'uniqueKey': record.unique_key})
                    return record
                return self.generate(
                    RawDestination(record.url),
                    owner=owner,
                    custom_key=custom_key,
                    expires_at=expires_at,
                    category=category,
                )
            case RawDestination(url=raw_url):
                url = clean_url(raw_url)

        # First check whether the url is already shortened in this scope
        existing = self.dao.find(url, category=category, owner=owner)
        if existing is not None:
            logger.debug('Reusing existing short URL.', extra={'uniqueKey': existing.unique_key, 'category': category})
            return existing

        retries = self.settings.max_creation_retries
        for attempt in range(1, retries + 1):
            unique_key = custom_key if custom_key is not None else self.key_generator.next_candidate()
            candidate = ShortenedURLModel(
                url=url,
                unique_key=unique_key,
                category=category,
                owner=owner,
                expires_at=expires_at,
            )

            try:
                shortened_url = self.dao.insert(candidate)
            except ShortenedURLAlreadyExistsError as e:
                logger.debug(
                    'Short URL candidate rejected by data store.',
                    extra={'uniqueKey': unique_key, 'attempt': attempt, 'retries': retries, 'field': e.field},
                )
                if e.field != 'unique_key':
                    # A concurrent generation for the same scope may have won the race
                    winner = self.dao.find(url, category=category, owner=owner)
                    if winner is not None:
                        return winner
                elif custom_key is not None:
                    # Retrying can't change a caller-chosen key
                    break
            else:
                logger.info('Created short URL.', extra={'uniqueKey': shortened_url.unique_key, 'attempt': attempt})
                return shortened_url

        raise CreationError('Unable to create short url')

    def try_generate(
        self,
        destination: Destination | ShortenedURLModel | str,
        owner: Owner | None = None,
        custom_key: str | None = None,
        expires_at: datetime | None = None,
        category: str | None = None,
    ) -> ShortenedURLModel | None:
        """Same as generate(), but return None instead of raising on failure"""
        try:
            return self.generate(destination, owner=owner, custom_key=custom_key, expires_at=expires_at, category=category)
        except (InvalidUrlError, CreationError, DataStoreError) as e:
            logger.info(
                'Failed to generate short URL.',
                extra={'reason': str(e), 'errorType': type(e).__name__, 'customKey': custom_key},
            )
            return None

    def extract_token(self, token: str | None) -> str:
        return extract_token(token, self.settings.character_set)

    def fetch_with_token(
        self,
        token: str | None,
        additional_params: Mapping[str, Any] | None = None,
        track: bool = True,
    ) -> FetchResult:
        """Resolve a token into its destination URL

        Procedure:
        - Step 1: Keep only the leading charset characters of the token
        - Step 2: Look up an unexpired record with that key
        - Step 3: Count the use (atomic increment in the data store)
        - Step 4: Merge extra query parameters into the destination

        An unknown or expired token is not an error: the result carries the
        default redirect and no record.

        Args:
            token (Optional[str]):
                Token as received from the client, possibly decorated.
            additional_params (Optional[Mapping[str, Any]]):
                Extra query parameters for the destination.
            track (bool):
                If True, increment the record's use_count.

        Returns:
            FetchResult: final url and resolved record (or None).

        Raises:
            DataStoreError:
                If the data store is unreachable.

        Example:
            >>> result = service.fetch_with_token('x7k2p.', {'utm_source': 'mail'})
            >>> result.url
            'https://example.com/page?utm_source=mail'
            >>> result.shortened_url.use_count
            1
        """
        unique_key = self.extract_token(token)
        shortened_url = self._find_unexpired(unique_key)
        if shortened_url is None:
            logger.info('Short URL not found or expired. Using default redirect.', extra={'uniqueKey': unique_key})
            return FetchResult(url=self.settings.default_redirect or '/')

        if track:
            use_count = self.dao.increment_use_count(unique_key)
            shortened_url = replace(shortened_url, use_count=use_count)

        url = merge_params_to_url(
            shortened_url.url,
            additional_params,
            subdomain_param=self.settings.reserved_subdomain_param,
            subdomain=self.settings.subdomain,
        )
        logger.debug('Resolved short URL.', extra={'uniqueKey': unique_key, 'tracked': track})
        return FetchResult(url=url, shortened_url=shortened_url)

    def _find_unexpired(self, unique_key: str) -> ShortenedURLModel | None:
        if not unique_key:
            return None
        try:
            return self.dao.get(unique_key, unexpired=True)
        except ShortenedURLNotFoundError:
            return None
