"""Utility functions for application configuration management.

Settings for the shortener come from one of two sources:

    * environment variables (`ShortenerSettings.from_environment()`), handy for
      local development and tests;
    * a JSON document stored in **AWS AppConfig** (`load_config()`), shared by
      every process of a deployment. Each environment (`APP_ENV`) has a
      dedicated AppConfig *Environment* within the AppConfig *Application*
      identified by `APP_NAME`.

The AppConfig JSON follows this structure:

    {
        "build": 7,
        "active_backend": "redis",
        "configs": {
            "api": {
                "shortener": {
                    "character_set": "abcdefghijklmnopqrstuvwxyz0123456789",
                    "key_length": 5,
                    "max_creation_retries": 3,
                    "default_redirect": "https://example.com/",
                    "subdomain": "go",
                    "reserved_subdomain_param": "subdomain"
                },
                "redis": { "host": "...", "port": 6379, "db": 0 }
            }
        }
    }

Each consumer loads its own section (e.g. `"api"`). The `shortener` block is
optional: missing keys fall back to `Defaults`.

Typical usage:
    >>> from shortlinks.utils.config import load_config, ShortenerSettings
    >>> config = load_config('api')
    >>> settings = ShortenerSettings.from_config(config.get('shortener', {}))
    >>> settings.key_length
    5
"""

import os
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import boto3

from shortlinks.constants import ENV, Defaults
from shortlinks.exceptions import BadConfigurationError
from shortlinks.types import AppConfig, SectionConfiguration
from shortlinks.utils.helpers import require_environment


logger = logging.getLogger(__name__)


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'shortlinks'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'shortlinks:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


@dataclass(frozen=True)
class ShortenerSettings:
    """Process-wide shortener settings

    Attributes:
        character_set (str):
            Ordered set of characters used for generated keys and token extraction.
        key_length (int):
            Length of generated keys.
        max_creation_retries (int):
            Maximum number of insert attempts per link generation.
        default_redirect (str):
            URL returned when a token doesn't resolve.
        subdomain (Optional[str]):
            Routing subdomain. When set, `reserved_subdomain_param` carrying this
            value is stripped from merged query parameters.
        reserved_subdomain_param (Optional[str]):
            Name of the query parameter carrying the routing subdomain.
    """

    character_set: str = Defaults.CHARSET
    key_length: int = Defaults.KEY_LENGTH
    max_creation_retries: int = Defaults.MAX_CREATION_RETRIES
    default_redirect: str = Defaults.DEFAULT_REDIRECT
    subdomain: str | None = None
    reserved_subdomain_param: str | None = Defaults.SUBDOMAIN_PARAM

    def __post_init__(self):
        if not isinstance(self.character_set, str) or not self.character_set:
            raise BadConfigurationError(f'character_set must be a non-empty string (given value: {self.character_set!r}).')
        if len(set(self.character_set)) != len(self.character_set):
            raise BadConfigurationError(f'character_set must not contain duplicates (given value: {self.character_set!r}).')
        for name in ('key_length', 'max_creation_retries'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise BadConfigurationError(f'{name} must be a positive integer (given value: {value!r}).')
        if not isinstance(self.default_redirect, str) or not self.default_redirect:
            raise BadConfigurationError(f'default_redirect must be a non-empty string (given value: {self.default_redirect!r}).')

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'ShortenerSettings':
        """Build settings from a configuration mapping (e.g. an AppConfig section)

        Unknown keys are ignored; missing keys use the defaults.

        Raises:
            BadConfigurationError:
                If a value has the wrong type or is out of range.
        """
        kwargs: dict[str, Any] = {}
        if 'character_set' in config:
            charset = config['character_set']
            # Allow JSON arrays of characters as well as plain strings
            kwargs['character_set'] = ''.join(charset) if isinstance(charset, (list, tuple)) else charset
        for name in ('key_length', 'max_creation_retries'):
            if name in config:
                kwargs[name] = _to_int(name, config[name])
        for name in ('default_redirect', 'subdomain', 'reserved_subdomain_param'):
            if name in config:
                kwargs[name] = config[name] or None
        if kwargs.get('default_redirect') is None:
            kwargs.pop('default_redirect', None)
        return cls(**kwargs)

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> 'ShortenerSettings':
        """Build settings from SHORTLINKS_* environment variables

        Example:
            >>> os.environ['SHORTLINKS_KEY_LENGTH'] = '8'
            >>> ShortenerSettings.from_environment().key_length
            8
        """
        environ = os.environ if environ is None else environ
        names = {
            ENV.Shortener.CHARSET: 'character_set',
            ENV.Shortener.KEY_LENGTH: 'key_length',
            ENV.Shortener.MAX_RETRIES: 'max_creation_retries',
            ENV.Shortener.DEFAULT_REDIRECT: 'default_redirect',
            ENV.Shortener.SUBDOMAIN: 'subdomain',
            ENV.Shortener.SUBDOMAIN_PARAM: 'reserved_subdomain_param',
        }
        config = {name: environ[var] for var, name in names.items() if var in environ}
        return cls.from_config(config)


def _to_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise BadConfigurationError(f'{name} must be a positive integer (given value: {value!r}).')
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise BadConfigurationError(f'{name} must be a positive integer (given value: {value!r}).') from e


def redis_connection_kwargs(config: Mapping[str, Any]) -> dict[str, Any]:
    """Map a backend config block onto RedisClientMixin keyword arguments

    Example:
        >>> redis_connection_kwargs({'host': 'redis', 'port': 6379})
        {'redis_host': 'redis', 'redis_port': 6379}
    """
    return {f'redis_{k}': v for k, v in config.items()}


@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(section: str) -> SectionConfiguration:
    """Load configuration for a given section from AWS AppConfig.

    Fetches the AppConfig JSON once and returns the shortener settings block and
    the active backend block of the requested section.

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Args:
        section (str):
            Name of the configuration section (e.g. "api").

    Returns:
        dict: {'shortener': {...}, '<active backend>': {...}}

    Raises:
        MissingEnvironmentVariableError:
            If any AppConfig identifier is not set.
        BadConfigurationError:
            If the document lacks the section or its active backend block.
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'section': section})

    appconfig = boto3.client('appconfigdata')

    # Start an AppConfig data session
    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    # Fetch the configuration
    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()
    config: AppConfig = json.loads(content.decode('utf-8'))

    try:
        backend = config['active_backend']
        section_config = config['configs'][section]
        data = {
            'shortener': section_config.get('shortener', {}),
            backend: section_config[backend],
        }
    except (KeyError, TypeError, AttributeError) as e:
        raise BadConfigurationError(f"AppConfig document has no usable '{section}' section.") from e

    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'section': section, 'build': config.get('build')})
    return data
