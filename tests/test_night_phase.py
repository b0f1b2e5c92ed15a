"""
Tests for night phase logic.
"""

import pytest

from werewolf.core import (
    ActionKind, DeathCause, GamePhase, GameStatus, Step, Winner,
    InvalidSubmissionError, RuleViolationError,
)
from werewolf.phases import Decision


def reach_day(scheduler, advance_until):
    return advance_until(scheduler, lambda s: s.phase == GamePhase.DAY)


def test_witch_save_gives_peaceful_night(make_game, advance_until):
    """Test wolves kill P3, seer checks P1, witch saves: nobody dies."""
    script = {
        ActionKind.WOLF_KILL: "P3",
        ActionKind.SEER_CHECK: "P1",
        ActionKind.WITCH_ACTION: "save",
    }
    scheduler = make_game(script=script)
    state = reach_day(scheduler, advance_until)

    assert state.roster.get_player("P3").alive
    assert "Last night was peaceful. No one died." in state.log.texts()
    assert state.roster.get_player("P5").flags["remedy_used"] is True
    assert state.step == Step.SPEECH


def test_witch_uses_one_potion_per_night(make_game, advance_until):
    scheduler = make_game(script={ActionKind.WOLF_KILL: "P3", ActionKind.WITCH_ACTION: "save"})
    state = reach_day(scheduler, advance_until)

    witch = state.roster.get_player("P5")
    assert witch.flags["remedy_used"] is True
    assert witch.flags["poison_used"] is False
    assert [kind for kind, _ in scheduler.agents["P5"].calls] == [ActionKind.WITCH_ACTION]


def test_seer_result_is_private(make_game, advance_until):
    script = {ActionKind.SEER_CHECK: "P1", ActionKind.WITCH_ACTION: "skip"}
    state = reach_day(make_game(script=script), advance_until)

    entry = next(e for e in state.log if e.text.startswith("🔮"))
    assert entry.text == "🔮 Player1 is a Werewolf."
    assert entry.audience == frozenset({"P6"})
    assert state.night.seer_target == "P1"


def test_kill_and_poison_same_night(make_game, advance_until):
    """Test both the wolf victim and the poisoned player die; wolves reach parity."""
    script = {ActionKind.WOLF_KILL: "P3", ActionKind.WITCH_ACTION: "poison:P4"}
    state = reach_day(make_game(script=script), advance_until)

    assert state.roster.get_player("P3").death_cause == DeathCause.WOLF
    assert state.roster.get_player("P4").death_cause == DeathCause.POISON
    assert state.status == GameStatus.ENDED
    assert state.winner == Winner.WOLF
    assert "Last night these players died: Player3 (Villager), Player4 (Villager)." in state.log.texts()


def test_split_wolf_ballots_tie_break(make_game, advance_until):
    """Test a split pack still produces exactly one victim."""
    script = {
        ("P1", ActionKind.WOLF_KILL): "P3",
        ("P2", ActionKind.WOLF_KILL): "P4",
        ActionKind.WITCH_ACTION: "skip",
    }
    state = reach_day(make_game(script=script), advance_until)

    dead = [p.id for p in state.roster if not p.alive]
    assert len(dead) == 1
    assert dead[0] in ("P3", "P4")


def test_wolves_may_kill_nobody(make_game, advance_until):
    script = {ActionKind.WOLF_KILL: "skip", ActionKind.WITCH_ACTION: "skip"}
    state = reach_day(make_game(script=script), advance_until)

    assert state.night.wolf_target is None
    assert all(p.alive for p in state.roster)


def test_witch_is_not_offered_save_without_victim(make_game, advance_until):
    script = {ActionKind.WOLF_KILL: "skip"}
    scheduler = make_game(script=script)
    advance_until(scheduler, lambda s: s.step == Step.WITCH_ACTION)

    witch = scheduler.game_state.roster.get_player("P5")
    ids = [o.id for o in scheduler.night_handler.witch_options(witch)]
    assert "save" not in ids
    assert "poison:P1" in ids
    assert "poison:P5" not in ids


def test_witch_cannot_save_herself(make_game):
    """Test the self-save ban both as an option and as a rule."""
    scheduler = make_game(script={ActionKind.WOLF_KILL: "P5"}, human_seat=5)
    scheduler.advance()

    state = scheduler.game_state
    pending = state.pending_action
    assert pending.kind == ActionKind.WITCH_ACTION
    assert "save" not in pending.option_ids
    assert "You were attacked tonight." in pending.prompt

    with pytest.raises(InvalidSubmissionError):
        scheduler.submit("save")
    assert state.pending_action is pending

    witch = state.roster.get_player("P5")
    with pytest.raises(RuleViolationError):
        scheduler.night_handler.apply_witch_action(witch, Decision("save"))


def test_human_witch_submits_poison(make_game):
    scheduler = make_game(script={ActionKind.WOLF_KILL: "P3"}, human_seat=5)
    scheduler.advance()
    scheduler.submit("poison:P1")

    state = scheduler.game_state
    assert state.roster.get_player("P1").death_cause == DeathCause.POISON
    assert state.roster.get_player("P3").death_cause == DeathCause.WOLF
    assert state.roster.get_player("P5").flags["poison_used"] is True


def test_potions_are_one_shot(make_game, advance_until):
    """Test the remedy is gone on the second night."""
    script = {ActionKind.WOLF_KILL: "P3", ActionKind.WITCH_ACTION: "save"}
    scheduler = make_game(script=script)
    state = advance_until(scheduler, lambda s: s.day == 2 and s.step == Step.WITCH_ACTION)
    assert state.is_running

    witch = state.roster.get_player("P5")
    assert witch.flags["remedy_used"] is True
    ids = [o.id for o in scheduler.night_handler.witch_options(witch)]
    assert "save" not in ids

    with pytest.raises(RuleViolationError):
        scheduler.night_handler.apply_witch_action(witch, Decision("save"))


def test_used_poison_is_rejected(make_game):
    scheduler = make_game()
    witch = scheduler.game_state.roster.get_player("P5")
    witch.flags["poison_used"] = True
    with pytest.raises(RuleViolationError):
        scheduler.night_handler.apply_witch_action(witch, Decision("poison:P1"))


def test_wolves_cannot_target_a_wolf(make_game):
    scheduler = make_game()
    wolf = scheduler.game_state.roster.get_player("P1")
    with pytest.raises(RuleViolationError):
        scheduler.night_handler.apply_wolf_kill(wolf, Decision("P2"))


def test_dead_seer_is_skipped(make_game, advance_until):
    scheduler = make_game(script={ActionKind.WITCH_ACTION: "save"})
    scheduler.game_state.roster.get_player("P6").eliminate(DeathCause.VOTE)
    state = reach_day(scheduler, advance_until)

    assert state.night.seer_target is None
    assert not any(e.text.startswith("🔮") for e in state.log)
