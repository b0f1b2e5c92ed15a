"""
Shared plumbing for phase handlers: asking an actor for a decision and
the follow-up bookkeeping after someone dies.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..core import (
    GameState, Judge, Player, Step, ActionKind, ActionOption, PendingAction,
    ElectionStage, DeathCause, ABSTAIN_ID,
)
from ..agents import BaseAgent, UnresolvedChoiceError


@dataclass
class Decision:
    """An answer to a decision, from the human slot or an oracle."""
    choice: str
    text: Optional[str] = None


def player_options(players: Sequence[Player]) -> List[ActionOption]:
    return [ActionOption(p.id, p.name) for p in players]


class PhaseHandler:
    """Base class for handlers that resolve one unit of work at a time."""

    def __init__(self, game_state: GameState, judge: Judge, agents: Dict[str, BaseAgent]):
        self.game_state = game_state
        self.judge = judge
        self.agents = agents

    @property
    def config(self):
        return self.game_state.config

    def _ask(self, actor: Player, kind: ActionKind, prompt: str, options: List[ActionOption],
             allow_abstain: bool = False, text_for: Sequence[str] = (),
             require_text: bool = False, auto_single: bool = True) -> Optional[Decision]:
        """
        Ask an actor for a decision.

        The human slot gets a PendingAction and None is returned; the caller
        must not mutate anything in that case. Everyone else is asked through
        their agent and the decision is returned.

        Raises:
            OracleError: If the agent fails or answers outside the candidates
        """
        if actor.is_human:
            self.game_state.pending_action = PendingAction(
                kind=kind,
                actor_id=actor.id,
                prompt=prompt,
                options=list(options),
                allow_abstain=allow_abstain,
                allow_free_text=bool(text_for),
                require_text_for=list(text_for) if require_text else [],
            )
            return None

        agent = self.agents[actor.id]
        context = None
        if auto_single and len(options) == 1:
            choice = options[0].id
        else:
            context = agent.build_context(self.game_state, kind, prompt)
            choice = agent.choose(context, options, allow_abstain)
            allowed = [o.id for o in options]
            if choice not in allowed and not (allow_abstain and choice == ABSTAIN_ID):
                raise UnresolvedChoiceError(actor.id, kind.value, str(choice))

        text = None
        if choice in text_for:
            context = context or agent.build_context(self.game_state, kind, prompt)
            text = agent.speak(context, prompt).strip()[:self.config.max_free_text] or None
        return Decision(choice, text)

    def pop_turn(self, actor_id: str) -> None:
        """Drop the actor at the head of the turn queue."""
        queue = self.game_state.turn_queue
        if queue and queue[0] == actor_id:
            queue.pop(0)

    def day_opening_step(self) -> Step:
        """First regular step of the day."""
        state = self.game_state
        sheriff = state.sheriff
        if self.config.sheriff_election and not sheriff.finished and state.day == sheriff.election_day:
            return Step.SHERIFF_ELECTION
        return Step.SPEECH

    def after_elimination(self, next_step: Step) -> None:
        """Run queued hunter shots first, then continue with next_step."""
        state = self.game_state
        if state.retaliations:
            state.after_retaliation = next_step
            state.move_to(Step.RETALIATION)
        else:
            state.move_to(next_step)

    def self_destruct(self, actor: Player) -> None:
        """
        A werewolf reveals itself and dies. The day ends at once; an
        election in progress is postponed to the next day (only once).
        """
        state = self.game_state
        self.judge.announce(f"💥 {actor.name} reveals as a werewolf and self-destructs. The day is over.")
        self.judge.eliminate(actor.id, DeathCause.SELF_DESTRUCT)
        if self.judge.check_win():
            return

        sheriff = state.sheriff
        if state.step == Step.SHERIFF_ELECTION and not sheriff.finished:
            if sheriff.deferred:
                sheriff.stage = ElectionStage.FORFEITED
                self.judge.announce("🏅 The sheriff election is abandoned. No one holds the badge.")
            else:
                sheriff.restart(state.day + 1)
                self.judge.announce(f"🏅 The sheriff election is postponed to day {state.day + 1}.")

        state.move_to(Step.END_DAY)
