"""Helper utilities

Functions:
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    to_timestamp(value: datetime | None) -> str
        Serialize an aware datetime for storage ('' for None)
    from_timestamp(value: str | None) -> datetime | None
        Parse a stored timestamp back into an aware UTC datetime
"""

import os
import functools
from datetime import datetime, UTC
from collections.abc import Callable

from shortlinks.exceptions import MissingEnvironmentVariableError


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def to_timestamp(value: datetime | None) -> str:
    if value is None:
        return ''
    if value.tzinfo is None:
        raise ValueError(f'Timestamps must be timezone-aware (given value: {value!r}).')
    return repr(value.timestamp())


def from_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromtimestamp(float(value), tz=UTC)
