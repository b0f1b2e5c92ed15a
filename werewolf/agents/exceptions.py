"""
Exceptions for Decision Oracle failures.
"""

from typing import Optional


class OracleError(Exception):
    """Raised when an agent cannot produce a decision for its turn."""

    def __init__(self, player_id: Optional[str], action_type: str, message: str = ""):
        self.player_id = player_id
        self.action_type = action_type
        self.message = message or f"Decision Oracle failed for {player_id} during {action_type}"
        super().__init__(self.message)


class LLMEmptyResponseError(OracleError):
    """Raised when the LLM API call fails or returns an empty response."""

    def __init__(self, player_id: Optional[str], action_type: str, message: str = ""):
        super().__init__(
            player_id,
            action_type,
            message or f"LLM returned empty response for {player_id} during {action_type}",
        )


class UnresolvedChoiceError(OracleError):
    """Raised when an answer names none of the offered candidates."""

    def __init__(self, player_id: Optional[str], action_type: str, answer: str = ""):
        self.answer = answer
        super().__init__(
            player_id,
            action_type,
            f"No candidate recognised in answer from {player_id} during {action_type}: {answer[:120]!r}",
        )
