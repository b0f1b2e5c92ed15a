"""
Tests for the step scheduler: suspension, submissions and oracle failures.
"""

import pytest
from unittest.mock import MagicMock

from werewolf.agents import LLMEmptyResponseError, OracleError
from werewolf.core import ActionKind, GameStatus, Step, InvalidSubmissionError


def test_advance_suspends_on_human_turn(make_game):
    """Test nothing moves while a pending action is waiting."""
    scheduler = make_game(human_seat=1)
    state = scheduler.advance()

    assert scheduler.is_suspended
    assert state.pending_action.actor_id == "P1"
    entries = len(state.log)
    scheduler.advance()
    assert len(state.log) == entries
    assert state.step == Step.WOLF_KILL


def test_max_steps_limits_work(make_game):
    scheduler = make_game()
    scheduler.advance(max_steps=1)
    state = scheduler.game_state
    assert state.step == Step.WOLF_KILL
    assert state.turn_queue == ["P2"]


def test_all_ai_game_runs_to_the_end(make_game):
    state = make_game().advance()
    assert state.status == GameStatus.ENDED
    assert state.step == Step.GAME_OVER
    assert state.pending_action is None


def test_submit_without_pending_action(make_game):
    with pytest.raises(InvalidSubmissionError):
        make_game().submit("P3")


def test_submit_unknown_option(make_game):
    scheduler = make_game(human_seat=1)
    scheduler.advance()
    with pytest.raises(InvalidSubmissionError):
        scheduler.submit("P2")  # a fellow wolf is not a candidate
    assert scheduler.is_suspended


def test_submit_text_where_none_is_accepted(make_game):
    scheduler = make_game(human_seat=1)
    scheduler.advance()
    with pytest.raises(InvalidSubmissionError):
        scheduler.submit("P3", "with feeling")


def test_submit_abstain(make_game):
    scheduler = make_game(human_seat=1, script={ActionKind.WOLF_KILL: "P4"})
    scheduler.advance()
    scheduler.submit("skip")

    state = scheduler.game_state
    assert state.night.wolf_ballots == {"P2": "P4"}
    assert state.night.wolf_target == "P4"
    assert "🐺 Player1 abstains." in state.log.texts()


def test_required_text(make_game):
    """Test a day speech needs non-blank text, and long text is truncated."""
    scheduler = make_game(human_seat=3)
    scheduler.advance()
    state = scheduler.game_state
    assert state.pending_action.kind == ActionKind.DAY_SPEECH

    with pytest.raises(InvalidSubmissionError):
        scheduler.submit("speak")
    with pytest.raises(InvalidSubmissionError):
        scheduler.submit("speak", "   ")

    scheduler.submit("speak", "x" * 200)
    speech = next(t for t in state.log.texts() if t.startswith("💬 Player3:"))
    assert speech == "💬 Player3: " + "x" * 80


def test_oracle_failure_is_retryable(make_game):
    """Test a failed unit commits nothing and the next advance retries it."""
    def broken(player, ids):
        raise LLMEmptyResponseError(player.id, "seer_check")

    script = {ActionKind.SEER_CHECK: broken}
    scheduler = make_game(script=script)
    state = scheduler.game_state
    state.event_emitter = MagicMock()

    with pytest.raises(OracleError):
        scheduler.advance()

    assert state.step == Step.SEER_CHECK
    assert state.night.seer_target is None
    assert not any(t.startswith("🔮") for t in state.log.texts())
    state.event_emitter.emit_fatal_error.assert_called_once()
    assert state.event_emitter.emit_fatal_error.call_args[0][1] == "P6"

    del script[ActionKind.SEER_CHECK]
    scheduler.advance(max_steps=1)
    assert state.night.seer_target == "P1"
    assert state.step == Step.WITCH_ACTION


def test_out_of_range_answer_is_an_oracle_failure(make_game):
    scheduler = make_game(script={ActionKind.WOLF_KILL: "P9"})
    with pytest.raises(OracleError):
        scheduler.advance()
    assert scheduler.game_state.night.wolf_ballots == {}


def test_failed_ballot_leaves_vote_untouched(make_game, start_day):
    """Test parallel ballots are recorded only when every voter answered."""
    def ballot(player, ids):
        if player.id == "P5":
            raise LLMEmptyResponseError(player.id, "exile_vote")
        return ids[0]

    scheduler = make_game(script={ActionKind.EXILE_VOTE: ballot})
    start_day(scheduler, Step.VOTE)

    with pytest.raises(OracleError):
        scheduler.advance()
    state = scheduler.game_state
    assert state.ballots == {}
    assert not any(t.startswith("🗳️ ") and " votes to exile " in t for t in state.log.texts())
