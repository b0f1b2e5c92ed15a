"""
Player class representing a game participant.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from enum import Enum

from .roles import Role, RoleType


class DeathCause(Enum):
    """Why a player left the game."""
    WOLF = "wolf"
    POISON = "poison"
    VOTE = "vote"
    SHOT = "shot"
    SELF_DESTRUCT = "self_destruct"


@dataclass
class Player:
    """Represents a player in the game."""
    id: str
    name: str
    role: Role
    alive: bool = True
    is_human: bool = False
    model_key: Optional[str] = None
    death_cause: Optional[DeathCause] = None

    # Role-specific flags: idiot_revealed, can_vote, remedy_used, poison_used, must_run
    flags: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.flags.setdefault("can_vote", True)
        if self.role.role_type == RoleType.WITCH:
            self.flags.setdefault("remedy_used", False)
            self.flags.setdefault("poison_used", False)
        if self.role.role_type == RoleType.IDIOT:
            self.flags.setdefault("idiot_revealed", False)

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"

    @property
    def seat(self) -> int:
        """Ordinal seat number derived from the id ("P3" -> 3)."""
        return int(self.id[1:])

    @property
    def is_wolf(self) -> bool:
        """Check if player is on the wolf team."""
        return self.role.is_wolf

    @property
    def can_vote(self) -> bool:
        """Check if player may cast ballots."""
        return self.alive and bool(self.flags.get("can_vote", True))

    @property
    def idiot_revealed(self) -> bool:
        return bool(self.flags.get("idiot_revealed", False))

    @property
    def must_run(self) -> bool:
        """Check if player is forced to run for sheriff."""
        return bool(self.flags.get("must_run", False))

    def eliminate(self, cause: DeathCause) -> None:
        """Mark player as dead."""
        self.alive = False
        self.death_cause = cause

    def reveal_idiot(self) -> None:
        """Reveal the idiot: survives, but can never vote again."""
        self.flags["idiot_revealed"] = True
        self.flags["can_vote"] = False
