"""Exception types raised by mediasort."""


class MediasortError(Exception):
    """Base error type."""


class ConfigError(MediasortError):
    """Configuration file could not be read or has the wrong shape."""


class InvalidPolicyError(ConfigError):
    """A configuration value is outside its valid domain."""
