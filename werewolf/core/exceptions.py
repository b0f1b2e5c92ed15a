"""
Exceptions raised by the game engine.
"""


class GameError(Exception):
    """Base class for engine errors."""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class SetupError(GameError):
    """Raised when a game cannot be created from the given roster/configuration."""


class InvalidSubmissionError(GameError):
    """Raised when a human submission does not match the pending action."""


class RuleViolationError(GameError):
    """Raised when an action breaks a game rule (dead target, reused potion, self-save...)."""
