"""In-process implementation of ShortenedURLBaseDAO

Keeps records in plain dictionaries guarded by a single lock, which makes
every operation atomic with respect to other threads of the same process.
Useful for tests, single-process tools and embedding; data is lost when the
process exits.

A lookup without an owner searches the global scope: it matches the
(url, category) pair whoever owns the record, and a global insert is refused
while any record holds the pair. Owned lookups and inserts only consider that
owner's records.

Example:
    >>> from shortlinks.models import ShortenedURLModel
    >>> from shortlinks.dao.memory import ShortenedURLMemoryDAO
    >>> dao = ShortenedURLMemoryDAO()
    >>> dao.insert(ShortenedURLModel(url='https://example.com/', unique_key='x7k2p')).use_count
    0
    >>> dao.increment_use_count('x7k2p')
    1
"""

from dataclasses import replace
from datetime import datetime, UTC
from threading import Lock

from beartype import beartype

from shortlinks.models import Owner, ShortenedURLModel
from shortlinks.dao.base import ShortenedURLBaseDAO
from shortlinks.dao.exceptions import ShortenedURLAlreadyExistsError, ShortenedURLNotFoundError


type ScopeKey = tuple[Owner | None, str | None, str]
type GlobalKey = tuple[str | None, str]


class ShortenedURLMemoryDAO(ShortenedURLBaseDAO):
    def __init__(self):
        self._lock = Lock()
        self._links: dict[str, ShortenedURLModel] = {}
        self._scopes: dict[ScopeKey, str] = {}
        # (category, url) -> first record of the pair, whoever owns it
        self._globals: dict[GlobalKey, str] = {}

    @beartype
    def insert(self, shortened_url: ShortenedURLModel, **kwargs) -> ShortenedURLModel:
        now = datetime.now(UTC)
        record = replace(shortened_url, use_count=0, created_at=now, updated_at=now)
        scope = (record.owner, record.category, record.url)
        pair = (record.category, record.url)

        with self._lock:
            if record.unique_key in self._links:
                raise ShortenedURLAlreadyExistsError(f"Short URL with key '{record.unique_key}' already exists.", field='unique_key')
            if scope in self._scopes or (record.owner is None and pair in self._globals):
                raise ShortenedURLAlreadyExistsError(
                    f"Short URL for '{record.url}' already exists in category {record.category!r}.",
                    field='url',
                )
            self._links[record.unique_key] = record
            self._scopes[scope] = record.unique_key
            self._globals.setdefault(pair, record.unique_key)

        return record

    @beartype
    def get(self, unique_key: str, unexpired: bool = False, **kwargs) -> ShortenedURLModel:
        with self._lock:
            record = self._links.get(unique_key)

        if record is None or (unexpired and record.is_expired()):
            raise ShortenedURLNotFoundError(f"Short URL with key '{unique_key}' not found.")
        return record

    @beartype
    def find(self, url: str, category: str | None = None, owner: Owner | None = None, **kwargs) -> ShortenedURLModel | None:
        with self._lock:
            if owner is None:
                unique_key = self._globals.get((category, url))
            else:
                unique_key = self._scopes.get((owner, category, url))
            return self._links.get(unique_key) if unique_key is not None else None

    @beartype
    def increment_use_count(self, unique_key: str, amount: int = 1, **kwargs) -> int:
        with self._lock:
            record = self._links.get(unique_key)
            if record is None:
                raise ShortenedURLNotFoundError(f"Short URL with key '{unique_key}' not found.")
            record = replace(record, use_count=record.use_count + amount, updated_at=datetime.now(UTC))
            self._links[unique_key] = record
            return record.use_count

    @beartype
    def owned_by(self, owner: Owner, **kwargs) -> list[ShortenedURLModel]:
        with self._lock:
            records = [record for record in self._links.values() if record.owner == owner]
        return sorted(records, key=lambda record: record.created_at)

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)
