"""
Tests for the exile vote.
"""

from unittest.mock import MagicMock

from werewolf.core import ActionKind, DeathCause, Step


IDIOT_ROLES = ["werewolf", "villager", "idiot", "villager", "seer"]


def vote_for(target):
    """Everyone votes target; target votes the first option."""
    return lambda player, ids: target if target in ids else ids[0]


TIED_VOTE = {
    ("P1", ActionKind.EXILE_VOTE): "P3",
    ("P2", ActionKind.EXILE_VOTE): "P3",
    ("P5", ActionKind.EXILE_VOTE): "P3",
    ("P3", ActionKind.EXILE_VOTE): "P1",
    ("P4", ActionKind.EXILE_VOTE): "P1",
    ("P6", ActionKind.EXILE_VOTE): "P1",
}


def test_tied_vote_exiles_one_leader(make_game, start_day, advance_until):
    """Test a 3-3 tie is broken at random and exactly one leader dies by vote."""
    scheduler = make_game(script=dict(TIED_VOTE))
    start_day(scheduler, Step.VOTE)
    state = advance_until(scheduler, lambda s: s.step != Step.VOTE)

    dead = [p for p in state.roster if not p.alive]
    assert len(dead) == 1
    assert dead[0].id in ("P1", "P3")
    assert dead[0].death_cause == DeathCause.VOTE
    assert "🗳️ The vote is tied; fate decides." in state.log.texts()
    assert state.step == Step.LAST_WORDS
    assert state.exiled_id == dead[0].id


def test_tie_break_depends_only_on_seed(make_game, start_day, advance_until):
    outcomes = []
    for _ in range(2):
        scheduler = make_game(script=dict(TIED_VOTE), random_seed=11)
        start_day(scheduler, Step.VOTE)
        state = advance_until(scheduler, lambda s: s.step != Step.VOTE)
        outcomes.append([p.id for p in state.roster if not p.alive])
    assert outcomes[0] == outcomes[1]


def test_sheriff_ballot_counts_one_and_a_half(make_game, start_day, advance_until):
    """Test sheriff P3 for P1 plus P4 for P1 (2.5) beats P1 and P2 for P4 (2)."""
    script = {
        ("P1", ActionKind.EXILE_VOTE): "P4",
        ("P2", ActionKind.EXILE_VOTE): "P4",
        ("P3", ActionKind.EXILE_VOTE): "P1",
        ("P4", ActionKind.EXILE_VOTE): "P1",
    }
    scheduler = make_game(script=script)
    state = start_day(scheduler, Step.VOTE)
    for player_id in ("P5", "P6"):
        state.roster.get_player(player_id).eliminate(DeathCause.WOLF)
    state.sheriff.elected_id = "P3"
    state.event_emitter = MagicMock()

    advance_until(scheduler, lambda s: s.step != Step.VOTE)

    assert state.roster.get_player("P1").death_cause == DeathCause.VOTE
    assert state.roster.get_player("P4").alive
    assert state.step == Step.LAST_WORDS
    totals = state.event_emitter.emit_vote_results.call_args[0][0]
    assert totals == {"P4": 2, "P1": 2.5}
    assert "🗳️ Results: Player4 2, Player1 2.5." in state.log.texts()


def test_dead_sheriff_has_no_extra_weight(make_game):
    scheduler = make_game()
    state = scheduler.game_state
    state.sheriff.elected_id = "P3"
    assert scheduler.voting_handler.vote_weight("P3") == 1.5
    state.roster.get_player("P3").eliminate(DeathCause.WOLF)
    assert scheduler.voting_handler.vote_weight("P3") == 1


def test_idiot_survives_first_exile(make_game, start_day, advance_until):
    """Test the idiot is revealed instead of dying, then loses their vote."""
    scheduler = make_game(IDIOT_ROLES, script={ActionKind.EXILE_VOTE: vote_for("P3")})
    start_day(scheduler, Step.VOTE)
    state = advance_until(scheduler, lambda s: s.step != Step.VOTE)

    idiot = state.roster.get_player("P3")
    assert idiot.alive
    assert idiot.idiot_revealed
    assert not idiot.can_vote
    assert state.step == Step.END_DAY
    assert any("is the Idiot" in line for line in state.log.texts())

    # A revealed idiot is not asked to vote and dies on the next exile
    scheduler.agents["P3"].calls.clear()
    start_day(scheduler, Step.VOTE)
    advance_until(scheduler, lambda s: s.step != Step.VOTE)

    assert not idiot.alive
    assert idiot.death_cause == DeathCause.VOTE
    assert scheduler.agents["P3"].calls == []


def test_human_ballot_comes_first(make_game, start_day):
    scheduler = make_game(script={ActionKind.EXILE_VOTE: vote_for("P1")}, human_seat=4)
    start_day(scheduler, Step.VOTE)
    scheduler.advance()

    state = scheduler.game_state
    assert state.pending_action.kind == ActionKind.EXILE_VOTE
    assert state.pending_action.actor_id == "P4"
    assert all(not agent.calls for agent in scheduler.agents.values())
    assert "P4" not in state.pending_action.option_ids

    scheduler.submit("P1")
    assert state.roster.get_player("P1").death_cause == DeathCause.VOTE


def test_every_ai_ballot_is_announced(make_game, start_day, advance_until):
    scheduler = make_game(script={ActionKind.EXILE_VOTE: vote_for("P2")})
    start_day(scheduler, Step.VOTE)
    state = advance_until(scheduler, lambda s: s.step != Step.VOTE)

    ballots = [line for line in state.log.texts() if line.startswith("🗳️ ") and " votes to exile " in line]
    assert len(ballots) == 6
    assert "🗳️ Player1 votes to exile Player2." in ballots
