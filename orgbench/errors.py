"""Engine error taxonomy."""


class EngineError(Exception):
    """Base class for errors raised by the analytics engine."""


class InvalidInputError(EngineError, ValueError):
    """The caller passed something the engine cannot compute over."""


class InsufficientDataError(EngineError):
    """Inputs are valid but do not carry enough data to produce a result."""
