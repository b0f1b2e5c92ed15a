"""
Roster of all players, living and dead.
"""

from typing import List, Optional, Iterable

from .player import Player
from .roles import RoleType


class Roster:
    """Ordered collection of players. Dead players are kept for narration and win checks."""

    def __init__(self, players: Iterable[Player]):
        self.players: List[Player] = list(players)

    def __iter__(self):
        return iter(self.players)

    def __len__(self) -> int:
        return len(self.players)

    def get_player(self, player_id: str) -> Optional[Player]:
        """Get player by id."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_alive_players(self) -> List[Player]:
        """Get all alive players in seat order."""
        return [p for p in self.players if p.alive]

    def get_alive_by_role(self, role_type: RoleType) -> List[Player]:
        return [p for p in self.players if p.alive and p.role.role_type == role_type]

    def get_first_alive(self, role_type: RoleType) -> Optional[Player]:
        alive = self.get_alive_by_role(role_type)
        return alive[0] if alive else None

    def get_wolves(self) -> List[Player]:
        """Get all alive wolf-aligned players."""
        return [p for p in self.get_alive_players() if p.is_wolf]

    def get_non_wolves(self) -> List[Player]:
        """Get all alive good-aligned players."""
        return [p for p in self.get_alive_players() if not p.is_wolf]

    def get_voters(self) -> List[Player]:
        """Get alive players who still hold a vote."""
        return [p for p in self.players if p.can_vote]

    def others_alive(self, player_id: str) -> List[Player]:
        return [p for p in self.get_alive_players() if p.id != player_id]

    @property
    def human(self) -> Optional[Player]:
        return next((p for p in self.players if p.is_human), None)
