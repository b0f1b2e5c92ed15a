"""
Base agent interface for Werewolf players (the Decision Oracle contract).
"""

from typing import Dict, List, Any, Sequence
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..core import Player, GameState, ActionKind, ActionOption, RoleType
from ..config.game_config import GameConfig, default_config


@dataclass
class AgentContext:
    """Context information provided to an agent."""
    player: Player
    game_state: GameState
    kind: ActionKind
    prompt: str
    visible_log: List[str]
    private_info: Dict[str, Any]


class BaseAgent(ABC):
    """
    Abstract base class for all player agents.

    This defines the interface that all agent implementations must follow.
    """

    def __init__(self, player: Player, config: GameConfig = default_config):
        """
        Initialize the agent.

        Args:
            player: The player this agent represents
            config: Game configuration
        """
        self.player = player
        self.config = config

    @abstractmethod
    def choose(self, context: AgentContext, candidates: Sequence[ActionOption],
               allow_abstain: bool = False) -> str:
        """
        Pick one of the offered candidates.

        Args:
            context: Current game context
            candidates: Ordered options, unique ids
            allow_abstain: Whether ABSTAIN_ID is an acceptable answer

        Returns:
            A candidate id or ABSTAIN_ID
        """
        pass

    @abstractmethod
    def speak(self, context: AgentContext, hint: str) -> str:
        """
        Produce a short natural-language statement (speech, last words).

        Args:
            context: Current game context
            hint: What the statement is for

        Returns:
            The statement text
        """
        pass

    async def choose_async(self, context: AgentContext, candidates: Sequence[ActionOption],
                           allow_abstain: bool = False) -> str:
        """Async variant used when ballots are gathered concurrently."""
        return self.choose(context, candidates, allow_abstain)

    def build_context(self, game_state: GameState, kind: ActionKind, prompt: str) -> AgentContext:
        """
        Build context for the agent.

        Args:
            game_state: Current game state
            kind: Decision being asked for
            prompt: Instruction for this decision

        Returns:
            AgentContext with everything this player is allowed to know
        """
        visible_log = game_state.log.recent(game_state.config.log_window, self.player.id)
        return AgentContext(
            player=self.player,
            game_state=game_state,
            kind=kind,
            prompt=prompt,
            visible_log=visible_log,
            private_info=self._get_private_info(game_state),
        )

    def _get_private_info(self, game_state: GameState) -> Dict[str, Any]:
        """
        Collect role-specific private information.

        Seer results are not stored separately; they live in the seer's view
        of the narration log.
        """
        info: Dict[str, Any] = {}
        if self.player.is_wolf:
            info["wolf_mates"] = [
                p.id for p in game_state.roster
                if p.is_wolf and p.id != self.player.id
            ]
        if self.player.role.role_type == RoleType.WITCH:
            info["remedy_used"] = self.player.flags.get("remedy_used", False)
            info["poison_used"] = self.player.flags.get("poison_used", False)
        info["is_sheriff"] = game_state.sheriff.elected_id == self.player.id
        info["can_vote"] = self.player.can_vote
        return info
