from collections.abc import Mapping
from typing import Any


# Type aliases for Python dictionaries
type QueryParams = Mapping[str, Any]
type AppConfig = dict[str, Any]
type SectionConfiguration = dict[str, Any]
type RedisRecord = dict[str, str]
