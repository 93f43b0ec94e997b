"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    ShortenedURLNotFoundError:
        Raised when a ShortenedURLModel is not found in the data store.

    ShortenedURLAlreadyExistsError:
        Raised when an insert would violate a uniqueness constraint.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, timeouts, OOM, etc.).

Example:
    >>> from shortlinks.dao.exceptions import ShortenedURLAlreadyExistsError
    >>> raise ShortenedURLAlreadyExistsError("Short URL with key 'x7k2p' already exists.", field='unique_key')
    Traceback (most recent call last):
        ...
    shortlinks.dao.exceptions.ShortenedURLAlreadyExistsError: Short URL with key 'x7k2p' already exists.
"""


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class ShortenedURLNotFoundError(DAOError):
    """Exception raised when a ShortenedURLModel is not found in the data store."""

    error_code = 'dao:shortened_url_not_found_error'


class ShortenedURLAlreadyExistsError(DAOError):
    """Exception raised when inserting a ShortenedURLModel violates a uniqueness constraint.

    Attributes:
        field (Optional[str]):
            'unique_key' when the key is taken, 'url' when the (url, category)
            pair is taken within the owner scope, None when the backend can't tell
            (e.g. a concurrent write aborted the transaction).
    """

    error_code = 'dao:shortened_url_already_exists_error'

    def __init__(self, message: str, field: str | None = 'unique_key'):
        super().__init__(message)
        self.field = field


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, OOM, etc.
    """

    error_code = 'dao:data_store_error'
