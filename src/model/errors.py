"""Exceptions raised by the projection and scoring engine.

Only structural problems are raised. Missing or unusable input values are
reported through factor details and MissingDataWarning records instead.
"""


class InvalidRangeError(ValueError):
    """An age (or age pair) is outside the range the projector can work with."""

    def __init__(self, message: str, field: str | None = None, value=None):
        super().__init__(message)
        self.field = field
        self.value = value


class InvalidProfileError(TypeError):
    """The profile handed to the engine is not a key/value mapping."""
