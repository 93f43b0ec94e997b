import random

import pytest

from shortlinks.dao.memory import ShortenedURLMemoryDAO
from shortlinks.service import ShortenedURLService
from shortlinks.utils.config import ShortenerSettings
from shortlinks.utils.keygen import KeyGenerator


class ScriptedKeyGenerator(KeyGenerator):
    """KeyGenerator returning a fixed sequence of candidates."""

    def __init__(self, *candidates: str):
        super().__init__()
        self.candidates = list(candidates)
        self.calls = 0

    def next_candidate(self) -> str:
        self.calls += 1
        return self.candidates.pop(0)


@pytest.fixture
def dao():
    return ShortenedURLMemoryDAO()


@pytest.fixture
def settings():
    return ShortenerSettings()


@pytest.fixture
def service(dao, settings):
    return ShortenedURLService(dao, settings=settings, key_generator=KeyGenerator(rng=random.Random(7)))


@pytest.fixture
def scripted_service(dao, settings):
    """Build a service whose key generator replays the given candidates."""

    def _build(*candidates: str) -> ShortenedURLService:
        return ShortenedURLService(dao, settings=settings, key_generator=ScriptedKeyGenerator(*candidates))

    return _build
