"""
Win condition evaluation.
"""

from enum import Enum

from .roster import Roster


class Winner(Enum):
    """Verdict of a win check."""
    NONE = "none"
    GOOD = "good"
    WOLF = "wolf"


def evaluate(roster: Roster) -> Winner:
    """
    Check if the game has ended.

    Good wins when no wolf is alive. Wolves win when living wolves are at
    least as many as every other living player combined.
    """
    wolves = len(roster.get_wolves())
    others = len(roster.get_non_wolves())

    if wolves == 0:
        return Winner.GOOD
    if wolves >= others:
        return Winner.WOLF
    return Winner.NONE
