"""
Errors raised by the bracket engine.

All of them are local and synchronous: an operation that raises has not
modified any of its inputs.
"""


class BracketError(ValueError):
    """Base class for bracket engine errors."""


class InvalidInput(BracketError):
    """Team list cannot be turned into a bracket."""


class OutOfRange(BracketError):
    """Round or match index does not exist."""


class InvalidWinner(BracketError):
    """Winner is not one of the match's two occupants."""


class AlreadyDecided(BracketError):
    """Match already has a recorded winner."""
