"""
Deferred retaliation: a dead hunter may take one living player down.
"""

from typing import Dict

from ..core import GameState, Judge, Player, Step, ActionKind, DeathCause, ABSTAIN_ID
from ..agents import BaseAgent
from .base import PhaseHandler, Decision, player_options


class RetaliationHandler(PhaseHandler):
    """Resolves queued retaliation requests one at a time, oldest first."""

    def __init__(self, game_state: GameState, judge: Judge, agents: Dict[str, BaseAgent]):
        super().__init__(game_state, judge, agents)

    def run_retaliation(self) -> None:
        state = self.game_state
        if not state.retaliations:
            next_step = state.after_retaliation or Step.END_DAY
            state.after_retaliation = None
            state.move_to(next_step)
            return

        request = state.retaliations[0]
        holder = state.roster.get_player(request.holder_id)
        candidates = state.roster.others_alive(holder.id)
        if not candidates:
            state.retaliations.pop(0)
            return

        prompt = "You are the hunter and you have fallen. Shoot one living player, or hold your fire."
        decision = self._ask(holder, ActionKind.HUNTER_SHOT, prompt, player_options(candidates),
                             allow_abstain=True, auto_single=False)
        if decision:
            self.apply_shot(holder, decision)

    def apply_shot(self, actor: Player, decision: Decision) -> None:
        state = self.game_state
        if decision.choice == ABSTAIN_ID:
            state.retaliations.pop(0)
            self.judge.announce(f"🏹 {actor.name} holds their fire.")
            return

        target = self.judge.require_alive(decision.choice, actor.id)
        state.retaliations.pop(0)
        self.judge.announce(f"🏹 {actor.name} is the Hunter and shoots {target.name}!")
        self.judge.eliminate(target.id, DeathCause.SHOT)
        self.judge.check_win()
