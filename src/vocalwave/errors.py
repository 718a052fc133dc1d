"""Exception types raised by vocalwave."""


class VocalwaveError(Exception):
    """Base class for all vocalwave errors."""


class ConfigurationError(VocalwaveError, ValueError):
    """Invalid configuration passed to a component or config object."""


class CaptureError(VocalwaveError):
    """A capture source could not provide audio."""


def require(condition: bool, message: str) -> None:
    """Raise ConfigurationError with ``message`` unless ``condition`` holds."""
    if not condition:
        raise ConfigurationError(message)
