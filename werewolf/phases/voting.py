"""
Exile vote with sheriff weighting and random tie-breaking.
"""

import asyncio
from typing import List, Dict, Tuple

from ..core import (
    GameState, Judge, Player, Step, ActionKind, DeathCause, tally, TallyResult,
)
from ..agents import BaseAgent, UnresolvedChoiceError
from .base import PhaseHandler, Decision, player_options


class VotingHandler(PhaseHandler):
    """
    Handles the daily exile vote.

    The human ballot (if the human can vote) is collected first through a
    pending action; every AI ballot is then gathered in parallel in one unit,
    and the tally happens in the unit after that.
    """

    def __init__(self, game_state: GameState, judge: Judge, agents: Dict[str, BaseAgent]):
        super().__init__(game_state, judge, agents)

    def candidates_for(self, voter: Player) -> List[Player]:
        """Any living player except the voter."""
        return self.game_state.roster.others_alive(voter.id)

    def vote_weight(self, voter_id: str) -> float:
        if voter_id == self.game_state.sheriff_id:
            return self.config.sheriff_vote_weight
        return 1

    def run_vote(self) -> None:
        state = self.game_state
        if state.turn_queue is None:
            voters = state.roster.get_voters()
            human = [p.id for p in voters if p.is_human]
            state.turn_queue = human + [p.id for p in voters if not p.is_human]
            self.judge.announce("🗳️ Time to vote. Who should be exiled?")

        if not state.turn_queue:
            self._resolve_vote()
            return

        head = state.roster.get_player(state.turn_queue[0])
        if head.is_human:
            prompt = "Vote for the player you want to exile."
            self._ask(head, ActionKind.EXILE_VOTE, prompt, player_options(self.candidates_for(head)))
            return

        self.collect_votes(list(state.turn_queue))

    def apply_vote(self, actor: Player, decision: Decision) -> None:
        target = self.judge.require_alive(decision.choice, actor.id)
        self.game_state.ballots[actor.id] = target.id
        self.judge.announce(f"🗳️ {actor.name} votes to exile {target.name}.")
        self.pop_turn(actor.id)

    async def collect_votes_async(self, voter_ids: List[str]) -> List[Tuple[Player, str]]:
        """
        Ask every AI voter in parallel. Nothing is recorded here, so a failed
        oracle call leaves the vote untouched.
        """
        state = self.game_state
        prompt = "Vote for the player you want to exile."

        async def ask(voter: Player) -> Tuple[Player, str]:
            options = player_options(self.candidates_for(voter))
            if len(options) == 1:
                return voter, options[0].id
            agent = self.agents[voter.id]
            context = agent.build_context(state, ActionKind.EXILE_VOTE, prompt)
            choice = await agent.choose_async(context, options, False)
            if choice not in [o.id for o in options]:
                raise UnresolvedChoiceError(voter.id, ActionKind.EXILE_VOTE.value, str(choice))
            return voter, choice

        voters = [state.roster.get_player(pid) for pid in voter_ids]
        return list(await asyncio.gather(*(ask(v) for v in voters)))

    def collect_votes(self, voter_ids: List[str]) -> None:
        """
        Collect AI ballots (synchronous wrapper, uses async internally).
        """
        results = asyncio.run(self.collect_votes_async(voter_ids))
        for voter, choice in results:
            self.apply_vote(voter, Decision(choice))

    def _resolve_vote(self) -> None:
        state = self.game_state
        result: TallyResult = tally(state.ballots, weight=self.vote_weight, rng=state.rng)

        if state.event_emitter:
            state.event_emitter.emit_vote_results(result.totals, dict(state.ballots), state.day)

        if result.winner is None:
            self.judge.announce("🗳️ No ballots were cast. Nobody is exiled.")
            state.move_to(Step.END_DAY)
            return

        summary = ", ".join(
            f"{state.roster.get_player(pid).name} {total:g}" for pid, total in result.totals.items()
        )
        self.judge.announce(f"🗳️ Results: {summary}.")
        if result.is_tie:
            self.judge.announce("🗳️ The vote is tied; fate decides.")

        target = state.roster.get_player(result.winner)
        if target.role.reveals_instead_of_dying and not target.idiot_revealed:
            target.reveal_idiot()
            self.judge.announce(
                f"🤡 {target.name} is the Idiot! They survive the exile but lose their vote for the rest of the game."
            )
            state.move_to(Step.END_DAY)
            return

        self.judge.announce(f"🗳️ {target.name} is exiled.")
        self.judge.eliminate(target.id, DeathCause.VOTE)
        if self.judge.check_win():
            return

        state.exiled_id = target.id
        state.move_to(Step.LAST_WORDS)
