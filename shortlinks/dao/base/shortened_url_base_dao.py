"""Abstract base class for ShortenedURL data access objects (DAOs).

This class establishes a consistent contract for all ShortenedURL DAO
implementations, regardless of the underlying storage mechanism (e.g., Redis,
in-process memory, PostgreSQL).

Responsibilities:
    - Enforce the two uniqueness constraints on insert: unique_key globally,
      and (url, category) within an owner scope (or across all owners for
      owner-less records).
    - Look records up by key, optionally skipping expired ones.
    - Increment usage counters atomically.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from shortlinks.models import ShortenedURLModel
        >>> from shortlinks.dao.redis import ShortenedURLRedisDAO

        >>> dao = ShortenedURLRedisDAO(...)
        >>> dao.insert(ShortenedURLModel(url='https://example.com/', unique_key='x7k2p'))
        ShortenedURLModel(url='https://example.com/', unique_key='x7k2p', ..., use_count=0, ...)

        >>> dao.find('https://example.com/').unique_key
        'x7k2p'

        >>> dao.increment_use_count('x7k2p')
        1
"""

from abc import ABC, abstractmethod

from shortlinks.models import Owner, ShortenedURLModel


class ShortenedURLBaseDAO(ABC):
    """Interface for ShortenedURL data access objects (DAOs).

    Methods:
        insert(shortened_url: ShortenedURLModel, **kwargs) -> ShortenedURLModel:
            Persist a new record, stamping created_at/updated_at and use_count=0.
            Raises ShortenedURLAlreadyExistsError on a uniqueness violation.
            Raises DataStoreError on connection or write failure.

        get(unique_key: str, unexpired: bool = False, **kwargs) -> ShortenedURLModel:
            Retrieve a record by its key.
            Raises ShortenedURLNotFoundError if absent (or expired when unexpired=True).
            Raises DataStoreError on connection or read failure.

        find(url: str, category: str | None, owner: Owner | None, **kwargs) -> ShortenedURLModel | None:
            Retrieve the record of a (url, category) pair within an owner scope.
            Without an owner, any record of the pair matches, whoever owns it.
            Returns None if there is none. Expired records are returned too.

        increment_use_count(unique_key: str, amount: int = 1, **kwargs) -> int:
            Atomically increment the usage counter and return the new value.
            Raises ShortenedURLNotFoundError if absent.

        owned_by(owner: Owner, **kwargs) -> list[ShortenedURLModel]:
            List an owner's records, oldest first.

    Subclassing:
        Datastore-specific implementations (e.g., ShortenedURLRedisDAO or
        ShortenedURLMemoryDAO) must extend this class and implement all
        abstract methods.

    NOTE:
        - Records are never deleted. Expiry is a read-time filter.
        - Two concurrent inserts of the same key or (url, category, scope) must
          produce exactly one winner. The loser gets ShortenedURLAlreadyExistsError.
    """

    @abstractmethod
    def insert(self, shortened_url: ShortenedURLModel, **kwargs) -> ShortenedURLModel:
        """Insert a new ShortenedURLModel into the data store.

        Args:
            shortened_url (ShortenedURLModel):
                The record to be inserted. Timestamps and use_count are ignored.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortenedURLModel: the persisted record, as a read would return it.

        Raises:
            ShortenedURLAlreadyExistsError:
                If the unique key, or the (url, category) pair within the
                owner scope, is already taken. An owner-less record needs the
                pair to be free across all owners.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, unique_key: str, unexpired: bool = False, **kwargs) -> ShortenedURLModel:
        """Retrieve a ShortenedURLModel from the data store by its unique key.

        Args:
            unique_key (str):
                The public token of the record.

            unexpired (bool):
                If True, records whose expires_at is set and not in the future
                are treated as missing.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortenedURLModel: The stored record.

        Raises:
            ShortenedURLNotFoundError:
                If no (unexpired) record with the given key exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def find(self, url: str, category: str | None = None, owner: Owner | None = None, **kwargs) -> ShortenedURLModel | None:
        """Retrieve the record of a normalized url within a category and owner scope.

        With owner=None the global scope is searched: a record of the
        (url, category) pair matches whoever owns it.

        Returns:
            ShortenedURLModel | None: The matching record, or None.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def increment_use_count(self, unique_key: str, amount: int = 1, **kwargs) -> int:
        """Atomically increment the usage counter of a record.

        The increment is a single storage operation, never a read-modify-write
        performed by the caller, so concurrent increments are never lost.

        Returns:
            int: The usage counter after the increment.

        Raises:
            ShortenedURLNotFoundError:
                If no record with the given key exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def owned_by(self, owner: Owner, **kwargs) -> list[ShortenedURLModel]:
        """List all records of an owner, oldest first.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
