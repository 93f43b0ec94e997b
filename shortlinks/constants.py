import string
from enum import StrEnum


class Defaults:
    """Default shortener settings."""

    CHARSET = string.ascii_lowercase + string.digits  # a-z0-9
    KEY_LENGTH = 5
    MAX_CREATION_RETRIES = 3
    DEFAULT_REDIRECT = '/'
    SUBDOMAIN_PARAM = 'subdomain'


# Request parameters injected by the routing layer, never forwarded to destinations
RESERVED_PARAMS = frozenset({'id', 'action', 'controller'})

# Default ports dropped during URL normalization
DEFAULT_PORTS = {
    'http': 80,
    'https': 443,
}


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'

    class Shortener(StrEnum):
        CHARSET = 'SHORTLINKS_CHARSET'
        KEY_LENGTH = 'SHORTLINKS_KEY_LENGTH'
        MAX_RETRIES = 'SHORTLINKS_MAX_RETRIES'
        DEFAULT_REDIRECT = 'SHORTLINKS_DEFAULT_REDIRECT'
        SUBDOMAIN = 'SHORTLINKS_SUBDOMAIN'
        SUBDOMAIN_PARAM = 'SHORTLINKS_SUBDOMAIN_PARAM'
