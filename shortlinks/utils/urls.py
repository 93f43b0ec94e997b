"""URL utilities for shortened links

Functions:
    clean_url(url) -> str
        Canonicalize a raw destination into a comparable, storable URL.
    extract_token(token, charset) -> str
        Keep only the leading characters of a token which belong to the charset.
    merge_params_to_url(url, params, subdomain_param=None, subdomain=None) -> str
        Merge extra query parameters into a destination URL.

Example:
    >>> clean_url('  HTTP://Example.COM:80/a/./b/../c  ')
    'http://example.com/a/c'
    >>> clean_url('foo/bar')
    '/foo/bar'
    >>> extract_token('abc12).', 'abcdefghijklmnopqrstuvwxyz0123456789')
    'abc12'
    >>> merge_params_to_url('https://x.com/a?b=1', {'id': '5', 'c': '2'})
    'https://x.com/a?b=1&c=2'
"""

import re
from itertools import takewhile
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from shortlinks.constants import DEFAULT_PORTS, RESERVED_PARAMS
from shortlinks.exceptions import InvalidUrlError
from shortlinks.types import QueryParams


REGEX_LINK_HAS_PROTOCOL = re.compile(r'\Ahttps?://', re.IGNORECASE)
REGEX_INVALID_URL_CHARS = re.compile(r'[\x00-\x20\x7f]')
REGEX_PERCENT_ENCODING = re.compile(r'%[0-9a-fA-F]{2}')


def clean_url(url: str | None) -> str:
    """Ensure the url starts with its protocol (or a root path) and is normalized

    Anything that doesn't start with http:// or https:// (case-insensitive) or
    with '/' is treated as a root-relative path.

    Args:
        url (str | None):
            Raw destination. None is treated as an empty string.

    Returns:
        str: Normalized URL.

    Raises:
        InvalidUrlError:
            If the adjusted string can't be parsed as a URI.

    Example:
        >>> clean_url('https://EXAMPLE.com')
        'https://example.com/'
    """
    url = '' if url is None else str(url).strip()
    if not REGEX_LINK_HAS_PROTOCOL.match(url) and not url.startswith('/'):
        url = f'/{url}'
    return _normalize(url)


def _normalize(url: str) -> str:
    if REGEX_INVALID_URL_CHARS.search(url):
        raise InvalidUrlError(f"Bad URI (contains whitespace or control characters): '{url}'")

    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as e:
        raise InvalidUrlError(f"Bad URI: '{url}'") from e

    scheme = parts.scheme.lower()
    host = parts.hostname or ''
    if scheme in DEFAULT_PORTS and not host:
        raise InvalidUrlError(f"Bad URI (missing host): '{url}'")

    netloc = ''
    if parts.netloc:
        netloc = f'[{host}]' if ':' in host else host
        userinfo, at, _ = parts.netloc.rpartition('@')
        if at:
            netloc = f'{userinfo}@{netloc}'
        if port is not None and port != DEFAULT_PORTS.get(scheme):
            netloc = f'{netloc}:{port}'

    path = _remove_dot_segments(parts.path)
    path = REGEX_PERCENT_ENCODING.sub(lambda m: m.group(0).upper(), path)
    if not path and scheme in DEFAULT_PORTS:
        path = '/'

    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))


def _remove_dot_segments(path: str) -> str:
    if '.' not in path:
        return path

    segments = path.split('/')
    output: list[str] = []
    for segment in segments:
        if segment == '.':
            continue
        if segment == '..':
            # never pop the leading '' of an absolute path
            if len(output) > 1:
                output.pop()
            continue
        output.append(segment)

    if segments[-1] in {'.', '..'}:
        output.append('')
    return '/'.join(output)


def extract_token(token: str | None, charset: str) -> str:
    """Return the longest leading run of `token` made of `charset` characters

    Decorated tokens (e.g. a trailing period picked up from a chat message)
    are truncated rather than rejected.

    Example:
        >>> extract_token('x7k2p).', 'abcdefghijklmnopqrstuvwxyz0123456789')
        'x7k2p'
    """
    if not token:
        return ''
    allowed = set(charset)
    return ''.join(takewhile(allowed.__contains__, token))


def merge_params_to_url(
    url: str,
    params: QueryParams | None = None,
    subdomain_param: str | None = None,
    subdomain: str | None = None,
) -> str:
    """Merge extra query parameters into the destination URL

    Routing artifacts are dropped first: the reserved keys 'id', 'action' and
    'controller', and `subdomain_param` when its value equals `subdomain`.
    Remaining params override same-named query parameters already in the URL
    and new ones are appended. List values become repeated keys, None values
    become empty ones (k=).

    Args:
        url (str):
            Destination URL, possibly with an existing query string.
        params (Optional[Mapping[str, Any]]):
            Extra parameters. Never mutated.
        subdomain_param (Optional[str]):
            Name of the parameter carrying the routing subdomain.
        subdomain (Optional[str]):
            Configured subdomain value.

    Returns:
        str: `url` unchanged when nothing is left to merge, the rebuilt URL otherwise.

    Example:
        >>> merge_params_to_url('https://x.com/a?b=1&c=0', {'c': '2', 'controller': 'links'})
        'https://x.com/a?b=1&c=2'
    """
    extra = {key: value for key, value in (params or {}).items() if key not in RESERVED_PARAMS}
    if subdomain_param and subdomain is not None and extra.get(subdomain_param) == subdomain:
        del extra[subdomain_param]

    if not extra:
        return url

    parts = urlsplit(url)
    query: dict[str, list[str] | str] = {}
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        query.setdefault(key, []).append(value)
    query.update((key, _query_value(value)) for key, value in extra.items())

    return urlunsplit(parts._replace(query=urlencode(query, doseq=True)))


def _query_value(value: Any) -> Any:
    # None renders as an empty value (k=), never as the string 'None'
    if value is None:
        return ''
    if isinstance(value, (list, tuple)):
        return ['' if item is None else item for item in value]
    return value
