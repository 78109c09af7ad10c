"""Exceptions raised by the countdown rendering pipeline."""


class CountdownError(Exception):
    """Base class for countdown rendering errors."""
    pass


class InvalidInput(CountdownError):
    """Raised when a request cannot be turned into a render request."""
    pass


class InvalidTarget(InvalidInput):
    """Raised when the target date is missing or cannot be parsed."""

    def __init__(self, value=None):
        self.value = value
        super().__init__(f"Invalid target date: {value!r}")


class RenderingFailure(CountdownError):
    """Raised when drawing or encoding fails. Safe for the caller to retry."""
    pass


class AnimationTimeout(RenderingFailure):
    """Raised when frame generation exceeds the configured deadline."""
    pass


class ConfigurationWarning(UserWarning):
    """Non-fatal deployment problem, e.g. a custom font file that does not exist."""
    pass
