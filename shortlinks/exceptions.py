class ShortLinksError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:shortlinks_error'


class InvalidUrlError(ShortLinksError):
    """Raised when a destination can't be normalized into a parseable URL."""

    error_code = 'url:invalid_url_error'


class CreationError(ShortLinksError):
    """Raised when no unique short URL could be persisted within max_creation_retries attempts."""

    error_code = 'link:creation_error'


class ConfigurationError(ShortLinksError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'
