"""
Role definitions and abilities for the Werewolf game.
"""

from enum import Enum
from dataclasses import dataclass


class Team(Enum):
    """Player team affiliation."""
    GOOD = "good"  # Villagers and special roles
    WOLF = "wolf"  # Werewolves


class RoleType(Enum):
    """Player role types."""
    WEREWOLF = "werewolf"
    VILLAGER = "villager"
    SEER = "seer"
    WITCH = "witch"
    HUNTER = "hunter"
    IDIOT = "idiot"


# Roles that may appear at most once in a game
SINGLETON_ROLES = [RoleType.SEER, RoleType.WITCH, RoleType.HUNTER, RoleType.IDIOT]

ROLE_LABELS = {
    RoleType.WEREWOLF: "Werewolf",
    RoleType.VILLAGER: "Villager",
    RoleType.SEER: "Seer",
    RoleType.WITCH: "Witch",
    RoleType.HUNTER: "Hunter",
    RoleType.IDIOT: "Idiot",
}


@dataclass(frozen=True)
class Role:
    """Represents a player's role in the game."""
    role_type: RoleType
    team: Team

    def __str__(self) -> str:
        return self.label

    @property
    def label(self) -> str:
        return ROLE_LABELS[self.role_type]

    @property
    def is_wolf(self) -> bool:
        """Check if role is part of the wolf team."""
        return self.team == Team.WOLF

    @property
    def can_retaliate(self) -> bool:
        """Check if role takes someone down with it when it dies."""
        return self.role_type == RoleType.HUNTER

    @property
    def reveals_instead_of_dying(self) -> bool:
        """Check if role survives an exile vote by revealing itself."""
        return self.role_type == RoleType.IDIOT


def create_role(role_type: RoleType) -> Role:
    """Create a role with appropriate team assignment."""
    team = Team.WOLF if role_type == RoleType.WEREWOLF else Team.GOOD
    return Role(role_type=role_type, team=team)


def parse_role_type(value) -> RoleType:
    """Parse a role name ("werewolf", "wolf", "SEER", ...) into a RoleType."""
    if isinstance(value, RoleType):
        return value
    name = str(value).strip().lower()
    if name == "wolf":
        name = "werewolf"
    return RoleType(name)
