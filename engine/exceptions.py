"""
Exceptions raised by the session engine.

Every operation validates before mutating anything, so a raised exception
always means the state is exactly as it was before the call.
"""


class FredagsligaError(Exception):
    """Base exception for all engine errors."""
    pass


class InvalidSelection(FredagsligaError, ValueError):
    """Team selection violates the active-set or distinct-team constraints."""
    pass


class InvalidDuration(FredagsligaError, ValueError):
    """A countdown was started with a non-positive duration."""
    pass


class InvalidTransition(FredagsligaError, RuntimeError):
    """An operation was invoked from a state that forbids it."""
    pass
