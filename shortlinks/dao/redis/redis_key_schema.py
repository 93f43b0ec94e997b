import json
import functools
from collections.abc import Callable

import xxhash

from shortlinks.models import Owner


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing shortened URLs.

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "shortlinks:prod" or "shortlinks:dev".

    Key layout:
        links:key:<unique_key>                    -> HASH of record fields
        links:scope:<digest>                      -> STRING holding the unique_key
                                                     (owner-less digest: global index, first record
                                                     of the (url, category) pair across all owners)
        owners:<owner_type>:<owner_id>:links      -> ZSET of unique_keys by creation time

    NOTE: the scope digest is a 128-bit xxhash of (owner, category, url), so
          arbitrarily long URLs and categories containing ':' map onto
          fixed-size keys.
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def link_key(self, unique_key: str) -> str:
        return f'links:key:{unique_key}'

    @prefix_key
    def link_scope_key(self, url: str, category: str | None = None, owner: Owner | None = None) -> str:
        return f'links:scope:{scope_digest(url, category, owner)}'

    @prefix_key
    def owner_links_key(self, owner: Owner) -> str:
        return f'owners:{owner.owner_type}:{owner.owner_id}:links'


def scope_digest(url: str, category: str | None = None, owner: Owner | None = None) -> str:
    owner_type, owner_id = (owner.owner_type, owner.owner_id) if owner is not None else (None, None)
    payload = json.dumps([owner_type, owner_id, category, url], ensure_ascii=False, separators=(',', ':'))
    return xxhash.xxh3_128_hexdigest(payload.encode('utf-8'))
