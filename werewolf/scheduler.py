"""
Phase/step scheduler: drives a game one unit of work at a time and takes
the human slot's answers through submit().
"""

from typing import Callable, Dict, Optional, Tuple

from .core import (
    GameState, GamePhase, Judge, Step, ActionKind, GameError,
    InvalidSubmissionError,
)
from .agents import BaseAgent, OracleError
from .phases import (
    Decision, NightPhaseHandler, SheriffElectionHandler, DayPhaseHandler,
    VotingHandler, RetaliationHandler,
)


class GameScheduler:
    """
    Finite state machine over (phase, step).

    A unit either resolves one actor's decision or one bookkeeping step.
    When the current actor is the human slot the unit only publishes a
    pending action and the scheduler suspends until submit() is called.
    """

    def __init__(self, game_state: GameState, agents: Dict[str, BaseAgent], judge: Optional[Judge] = None):
        self.game_state = game_state
        self.agents = agents
        self.judge = judge or Judge(game_state)

        self.night_handler = NightPhaseHandler(game_state, self.judge, agents)
        self.election_handler = SheriffElectionHandler(game_state, self.judge, agents)
        self.day_handler = DayPhaseHandler(game_state, self.judge, agents)
        self.voting_handler = VotingHandler(game_state, self.judge, agents)
        self.retaliation_handler = RetaliationHandler(game_state, self.judge, agents)

        self.transitions: Dict[Tuple[GamePhase, Step], Callable[[], None]] = {
            (GamePhase.NIGHT, Step.WOLF_KILL): self.night_handler.run_wolf_kill,
            (GamePhase.NIGHT, Step.SEER_CHECK): self.night_handler.run_seer_check,
            (GamePhase.NIGHT, Step.WITCH_ACTION): self.night_handler.run_witch_action,
            (GamePhase.NIGHT, Step.NIGHT_SETTLE): self.night_handler.run_night_settle,
            (GamePhase.DAY, Step.RETALIATION): self.retaliation_handler.run_retaliation,
            (GamePhase.DAY, Step.SHERIFF_ELECTION): self.election_handler.run_election,
            (GamePhase.DAY, Step.SPEECH): self.day_handler.run_speech,
            (GamePhase.DAY, Step.VOTE): self.voting_handler.run_vote,
            (GamePhase.DAY, Step.LAST_WORDS): self.day_handler.run_last_words,
            (GamePhase.DAY, Step.END_DAY): self.day_handler.run_end_day,
        }

        # Same mutation an oracle answer would trigger, keyed by decision kind
        self.appliers: Dict[ActionKind, Callable] = {
            ActionKind.WOLF_KILL: self.night_handler.apply_wolf_kill,
            ActionKind.SEER_CHECK: self.night_handler.apply_seer_check,
            ActionKind.WITCH_ACTION: self.night_handler.apply_witch_action,
            ActionKind.SHERIFF_SIGNUP: self.election_handler.apply_signup,
            ActionKind.SHERIFF_SPEECH: self.election_handler.apply_speech,
            ActionKind.SHERIFF_VOTE: self.election_handler.apply_vote,
            ActionKind.SPEECH_ORDER: self.day_handler.apply_speech_order,
            ActionKind.DAY_SPEECH: self.day_handler.apply_speech,
            ActionKind.EXILE_VOTE: self.voting_handler.apply_vote,
            ActionKind.LAST_WORDS: self.day_handler.apply_last_words,
            ActionKind.HUNTER_SHOT: self.retaliation_handler.apply_shot,
        }

    @property
    def is_suspended(self) -> bool:
        return self.game_state.pending_action is not None

    def step_once(self) -> None:
        """Perform exactly one unit of work."""
        state = self.game_state
        resolver = self.transitions.get((state.phase, state.step))
        if resolver is None:
            raise RuntimeError(f"No resolver for {state.phase.value}/{state.step.value}")
        try:
            resolver()
        except OracleError as e:
            print(f"[ERROR] {e}")
            if state.event_emitter:
                state.event_emitter.emit_fatal_error(str(e), e.player_id, e.action_type)
            raise

    def advance(self, max_steps: Optional[int] = None) -> GameState:
        """
        Perform units of work until the game ends, the human slot is asked
        for a decision, or max_steps units have run.

        Raises:
            OracleError: A unit could not be resolved. The unit did not commit
                anything, so calling advance() again retries it.
        """
        state = self.game_state
        steps = 0
        while state.is_running and state.pending_action is None:
            if max_steps is not None and steps >= max_steps:
                break
            self.step_once()
            steps += 1
        return state

    def submit(self, action_id: str, text: Optional[str] = None) -> GameState:
        """
        Answer the pending action for the human slot, then keep advancing.

        Raises:
            InvalidSubmissionError: No pending action, unknown option id,
                missing required text, or text where none is accepted
        """
        state = self.game_state
        pending = state.pending_action
        if pending is None:
            raise InvalidSubmissionError("There is no pending action")
        if action_id not in pending.option_ids:
            raise InvalidSubmissionError(f"Unknown option '{action_id}' for {pending.kind.value}")

        text = text.strip() if text else None
        if text and not pending.allow_free_text:
            raise InvalidSubmissionError(f"{pending.kind.value} does not accept text")
        if not text and action_id in pending.require_text_for:
            raise InvalidSubmissionError(f"Option '{action_id}' requires text")
        if text:
            text = text[:self.game_state.config.max_free_text]

        actor = state.roster.get_player(pending.actor_id)
        state.pending_action = None
        try:
            self.appliers[pending.kind](actor, Decision(action_id, text))
        except GameError:
            state.pending_action = pending
            raise

        return self.advance()

    def snapshot(self, viewer_id: Optional[str] = None):
        return self.game_state.snapshot(viewer_id)
