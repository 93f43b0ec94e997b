from shortlinks.utils.config import app_env, app_name, app_prefix, load_config, ShortenerSettings, redis_connection_kwargs
from shortlinks.utils.helpers import require_environment, to_timestamp, from_timestamp
from shortlinks.utils.keygen import KeyGenerator
from shortlinks.utils.urls import clean_url, extract_token, merge_params_to_url
from shortlinks.utils.logging import initialize_logging


__all__ = [
    'KeyGenerator',
    'clean_url',
    'extract_token',
    'merge_params_to_url',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'ShortenerSettings',
    'redis_connection_kwargs',
    'require_environment',
    'to_timestamp',
    'from_timestamp',
    'initialize_logging',
]
