"""Random short key generation

This module provides the candidate generator used by the link generation
protocol. Candidates are NOT guaranteed to be unique: uniqueness is enforced
by the data store, and the generation protocol retries on collisions.

Classes:
    KeyGenerator:
        Draws fixed-length keys uniformly at random from a character set.

Example:
    >>> from shortlinks.utils import KeyGenerator
    >>> generator = KeyGenerator(charset='abc123', length=5)
    >>> candidate = generator.next_candidate()
    >>> len(candidate)
    5
    >>> set(candidate) <= set('abc123')
    True
"""

import random
import secrets

from shortlinks.constants import Defaults
from shortlinks.exceptions import BadConfigurationError


class KeyGenerator:
    """Generate short key candidates from a fixed character set

    NOTE:
        - The charset and length must stay stable for a deployment. Changing
          them doesn't invalidate existing keys, but changes the entropy of
          future ones (len(charset) ** length possible keys).
        - Uses the OS CSPRNG by default. Inject a seeded `random.Random`
          for reproducible sequences in tests.
    """

    def __init__(self, charset: str = Defaults.CHARSET, length: int = Defaults.KEY_LENGTH, rng: random.Random | None = None):
        if not isinstance(charset, str) or not charset:
            raise BadConfigurationError(f'Key charset must be a non-empty string (given value: {charset!r}).')
        if len(set(charset)) != len(charset):
            raise BadConfigurationError(f'Key charset must not contain duplicate characters (given value: {charset!r}).')
        if isinstance(length, bool) or not isinstance(length, int) or length < 1:
            raise BadConfigurationError(f'Key length must be a positive integer (given value: {length!r}).')

        self.charset = charset
        self.length = length
        self._rng = rng if rng is not None else secrets.SystemRandom()

    def next_candidate(self) -> str:
        return ''.join(self._rng.choices(self.charset, k=self.length))

    def keyspace(self) -> int:
        """Number of distinct keys this generator can produce."""
        return len(self.charset) ** self.length
