"""
Judge/Moderator system for narration and rule enforcement.
"""

from typing import List, Optional, Iterable

from .game_engine import GameState, GameStatus, Step, RetaliationRequest
from .player import Player, DeathCause
from .win_conditions import Winner, evaluate
from .exceptions import RuleViolationError


# Death causes that let a hunter fire back
RETALIATION_CAUSES = [DeathCause.WOLF, DeathCause.VOTE, DeathCause.SHOT]

WINNER_MESSAGES = {
    Winner.GOOD: "🎉 The village wins: every werewolf is gone.",
    Winner.WOLF: "🐺 The werewolves win: they now match the village in numbers.",
}


class Judge:
    """Judge/Moderator that narrates events and enforces rules."""

    def __init__(self, game_state: GameState):
        self.game_state = game_state

    @property
    def config(self):
        return self.game_state.config

    def announce(self, message: str, audience: Optional[Iterable[str]] = None) -> None:
        """Make a judge announcement. Private announcements name their audience."""
        state = self.game_state
        entry = state.log.append(message, state.day, state.phase.value, audience)
        if self.config.use_judge_announcements:
            if entry.audience is None:
                print(f"[JUDGE] {message}")
            else:
                print(f"[JUDGE -> {', '.join(sorted(entry.audience))}] {message}")
        if state.event_emitter:
            state.event_emitter.emit_narration(
                message,
                sorted(entry.audience) if entry.audience is not None else None,
                state.phase.value,
                state.day,
            )

    def player_speaks(self, player: Player, speech: str) -> None:
        """Announce a player's speech."""
        self.announce(f"💬 {player.name}: {speech}")

    def require_alive(self, target_id: Optional[str], actor_id: Optional[str] = None,
                      allow_self: bool = False) -> Player:
        """
        Resolve a target id to a living player.

        Raises:
            RuleViolationError: If the target is unknown, dead, or the actor itself
        """
        target = self.game_state.roster.get_player(target_id) if target_id else None
        if target is None:
            raise RuleViolationError(f"Unknown player: {target_id}")
        if not target.alive:
            raise RuleViolationError(f"{target} is already dead")
        if not allow_self and actor_id is not None and target.id == actor_id:
            raise RuleViolationError(f"{target} cannot target themselves")
        return target

    def eliminate(self, player_id: str, cause: DeathCause, announce: bool = True) -> Player:
        """
        Kill a player and queue a retaliation if their role allows it.

        The true role is revealed in the narration.
        """
        player = self.require_alive(player_id)
        player.eliminate(cause)

        if announce:
            self.announce(f"☠️ {player.name} is out ({cause.value}). Their role was: {player.role.label}.")

        if player.role.can_retaliate and cause in RETALIATION_CAUSES:
            self.game_state.retaliations.append(RetaliationRequest(holder_id=player.id, cause=cause.value))

        state = self.game_state
        if state.event_emitter:
            state.event_emitter.emit_elimination(player.id, cause.value, player.role.role_type.value, state.day)
        return player

    def death_summary(self, players: List[Player]) -> str:
        return ", ".join(f"{p.name} ({p.role.label})" for p in players)

    def check_win(self) -> bool:
        """
        Evaluate the win condition and end the game if it is decided.

        Returns True when the game is over.
        """
        state = self.game_state
        if state.status == GameStatus.ENDED:
            return True

        winner = evaluate(state.roster)
        if winner == Winner.NONE:
            return False

        self.end_game(winner)
        return True

    def end_game(self, winner: Winner) -> None:
        """End the game; nothing runs after this."""
        state = self.game_state
        state.status = GameStatus.ENDED
        state.winner = winner
        state.pending_action = None
        state.retaliations = []
        state.move_to(Step.GAME_OVER)
        self.announce(WINNER_MESSAGES[winner])
        if state.event_emitter:
            state.event_emitter.emit_game_over(winner.value, state.day, state.phase.value)
