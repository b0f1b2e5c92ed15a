"""
Sheriff election: signup, campaign speeches, then up to two voting rounds.
"""

from typing import Dict, List

from ..core import (
    GameState, Judge, Player, Step, ActionKind, ActionOption, ElectionStage,
    count_votes, leading_targets,
)
from ..agents import BaseAgent
from .base import PhaseHandler, Decision, player_options


class SheriffElectionHandler(PhaseHandler):
    """
    Runs the sheriff election as a small state machine inside the
    SHERIFF_ELECTION step. The stage lives in GameState.sheriff.
    """

    def __init__(self, game_state: GameState, judge: Judge, agents: Dict[str, BaseAgent]):
        super().__init__(game_state, judge, agents)

    @property
    def sheriff(self):
        return self.game_state.sheriff

    def run_election(self) -> None:
        """Perform one unit of the election."""
        stage = self.sheriff.stage
        if stage == ElectionStage.SIGNUP:
            self._run_signup()
        elif stage == ElectionStage.SPEECH:
            self._run_speech()
        elif stage == ElectionStage.VOTE:
            self._run_vote()
        else:
            self.game_state.move_to(Step.SPEECH)

    def _restart_turns(self) -> None:
        # Same step, fresh queue for the next stage
        self.game_state.move_to(Step.SHERIFF_ELECTION)

    # ---- Signup -----------------------------------------------------------

    def _run_signup(self) -> None:
        state = self.game_state
        if state.turn_queue is None:
            state.turn_queue = [p.id for p in state.roster.get_alive_players()]
            self.judge.announce("🏅 Sheriff election: who wants to run for the badge?")

        if not state.turn_queue:
            self._close_signup()
            return

        actor = state.roster.get_player(state.turn_queue[0])
        if actor.must_run:
            self.apply_signup(actor, Decision("run"))
            return

        options = [ActionOption("run", "Run for sheriff"), ActionOption("decline", "Stay out")]
        prompt = "Do you want to run for sheriff?"
        decision = self._ask(actor, ActionKind.SHERIFF_SIGNUP, prompt, options)
        if decision:
            self.apply_signup(actor, decision)

    def apply_signup(self, actor: Player, decision: Decision) -> None:
        running = decision.choice == "run"
        self.sheriff.signups[actor.id] = running
        if running:
            self.judge.announce(f"🏅 {actor.name} runs for sheriff.")
        self.pop_turn(actor.id)

    def _close_signup(self) -> None:
        state = self.game_state
        sheriff = self.sheriff
        sheriff.candidates = [pid for pid, running in sheriff.signups.items() if running]
        if not sheriff.candidates:
            self._forfeit("Nobody ran for sheriff.")
            return

        names = ", ".join(state.roster.get_player(pid).name for pid in sheriff.candidates)
        self.judge.announce(f"🏅 Candidates: {names}.")
        sheriff.stage = ElectionStage.SPEECH
        self._restart_turns()

    # ---- Campaign speeches ------------------------------------------------

    def speech_options(self, actor: Player) -> List[ActionOption]:
        options = [ActionOption("stay", "Stay in the race")]
        if not actor.must_run:
            options.append(ActionOption("withdraw", "Withdraw"))
        if actor.is_wolf and self.config.allow_self_destruct:
            options.append(ActionOption("self_destruct", "Self-destruct"))
        return options

    def _run_speech(self) -> None:
        state = self.game_state
        if state.turn_queue is None:
            state.turn_queue = list(self.sheriff.candidates)

        if not state.turn_queue:
            self._close_speeches()
            return

        actor = state.roster.get_player(state.turn_queue[0])
        options = self.speech_options(actor)
        prompt = "Give your campaign speech, then decide whether to stay in the race."
        decision = self._ask(actor, ActionKind.SHERIFF_SPEECH, prompt, options,
                             text_for=("stay", "withdraw"))
        if decision:
            self.apply_speech(actor, decision)

    def apply_speech(self, actor: Player, decision: Decision) -> None:
        if decision.choice == "self_destruct":
            self.self_destruct(actor)
            return

        if decision.text:
            self.judge.player_speaks(actor, decision.text)
        if decision.choice == "withdraw":
            self.sheriff.withdrawn.add(actor.id)
            self.judge.announce(f"🏅 {actor.name} withdraws from the race.")
        self.pop_turn(actor.id)

    def _close_speeches(self) -> None:
        remaining = self.sheriff.remaining_candidates
        if not remaining:
            self._forfeit("Every candidate withdrew.")
        elif len(remaining) == 1:
            self._elect(remaining[0])
        else:
            self.sheriff.stage = ElectionStage.VOTE
            self.sheriff.round = 1
            self._restart_turns()

    # ---- Voting -----------------------------------------------------------

    def voters(self) -> List[Player]:
        """Living, vote-eligible players who are not still in the race."""
        candidates = set(self.sheriff.remaining_candidates)
        return [p for p in self.game_state.roster.get_voters() if p.id not in candidates]

    def _run_vote(self) -> None:
        state = self.game_state
        sheriff = self.sheriff
        if state.turn_queue is None:
            voters = self.voters()
            if not voters:
                self._forfeit("Nobody is left to vote.")
                return
            state.turn_queue = [p.id for p in voters]
            names = ", ".join(state.roster.get_player(pid).name for pid in sheriff.contestants)
            self.judge.announce(f"🏅 Sheriff vote, round {sheriff.round}: {names}.")

        if not state.turn_queue:
            self._close_vote()
            return

        actor = state.roster.get_player(state.turn_queue[0])
        contestants = [state.roster.get_player(pid) for pid in sheriff.contestants]
        prompt = "Vote for the candidate you want as sheriff."
        decision = self._ask(actor, ActionKind.SHERIFF_VOTE, prompt, player_options(contestants))
        if decision:
            self.apply_vote(actor, decision)

    def apply_vote(self, actor: Player, decision: Decision) -> None:
        target = self.judge.require_alive(decision.choice, actor.id)
        self.game_state.ballots[actor.id] = target.id
        self.pop_turn(actor.id)

    def _close_vote(self) -> None:
        state = self.game_state
        sheriff = self.sheriff
        totals = count_votes(state.ballots)
        summary = ", ".join(
            f"{state.roster.get_player(pid).name} {int(total)}" for pid, total in totals.items()
        )
        self.judge.announce(f"🏅 Sheriff votes: {summary or 'none'}.")

        leaders = leading_targets(totals)
        if len(leaders) == 1:
            self._elect(leaders[0])
        elif sheriff.round == 1 and leaders:
            sheriff.round = 2
            sheriff.runoff = [pid for pid in sheriff.remaining_candidates if pid in leaders]
            self.judge.announce("🏅 Tie. The tied candidates go to a second round.")
            self._restart_turns()
        else:
            self._forfeit("The vote is tied again.")

    # ---- Outcome ----------------------------------------------------------

    def _elect(self, player_id: str) -> None:
        sheriff = self.sheriff
        sheriff.elected_id = player_id
        sheriff.stage = ElectionStage.DECIDED
        player = self.game_state.roster.get_player(player_id)
        self.judge.announce(f"🏅 {player.name} is elected sheriff.")
        self.game_state.move_to(Step.SPEECH)

    def _forfeit(self, reason: str) -> None:
        self.sheriff.stage = ElectionStage.FORFEITED
        self.judge.announce(f"🏅 {reason} The badge is lost.")
        self.game_state.move_to(Step.SPEECH)
