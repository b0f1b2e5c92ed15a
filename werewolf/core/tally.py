"""
Vote tally with weighted ballots and random tie-breaking.
"""

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Callable


@dataclass
class TallyResult:
    """Outcome of counting a set of ballots."""
    winner: Optional[str] = None
    totals: Dict[str, float] = field(default_factory=dict)
    leaders: List[str] = field(default_factory=list)  # Targets sharing the maximum total

    @property
    def is_tie(self) -> bool:
        return len(self.leaders) > 1


def count_votes(ballots: Dict[str, str],
                weight: Optional[Callable[[str], float]] = None) -> Dict[str, float]:
    """
    Sum ballots per target.

    Args:
        ballots: {voter_id: target_id}
        weight: Optional voter weight function (defaults to 1 per ballot)

    Returns:
        {target_id: total} in order of first ballot received
    """
    totals: Dict[str, float] = {}
    for voter, target in ballots.items():
        value = weight(voter) if weight else 1
        totals[target] = totals.get(target, 0) + value
    return totals


def leading_targets(totals: Dict[str, float]) -> List[str]:
    """Get every target sharing the highest total."""
    if not totals:
        return []
    best = max(totals.values())
    return [target for target, total in totals.items() if total == best]


def tally(ballots: Dict[str, str],
          weight: Optional[Callable[[str], float]] = None,
          rng: Optional[random.Random] = None) -> TallyResult:
    """
    Determine the winner of a vote.

    The target with the strictly greatest total wins. When several targets
    share the maximum, one of them is picked uniformly at random from `rng`.
    An empty ballot set produces no winner.
    """
    totals = count_votes(ballots, weight)
    leaders = leading_targets(totals)

    if not leaders:
        return TallyResult(winner=None, totals=totals, leaders=[])

    if len(leaders) == 1:
        return TallyResult(winner=leaders[0], totals=totals, leaders=leaders)

    rng = rng or random.Random()
    # Sort so the pick depends only on the seed, not on ballot arrival order
    winner = rng.choice(sorted(leaders))
    return TallyResult(winner=winner, totals=totals, leaders=leaders)
