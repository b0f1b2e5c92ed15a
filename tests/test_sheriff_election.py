"""
Tests for the sheriff election.
"""

from werewolf.core import ActionKind, DeathCause, ElectionStage, Step


def runs(*player_ids):
    return lambda player, ids: "run" if player.id in player_ids else "decline"


def elect(make_game, advance_until, script, **config_kwargs):
    scheduler = make_game(script=script, sheriff_election=True, **config_kwargs)
    advance_until(scheduler, lambda s: s.step == Step.SPEECH)
    return scheduler


def test_everyone_declines(make_game, advance_until):
    scheduler = elect(make_game, advance_until, {ActionKind.SHERIFF_SIGNUP: "decline"})
    state = scheduler.game_state

    assert state.sheriff.stage == ElectionStage.FORFEITED
    assert state.sheriff.elected_id is None
    assert "🏅 Nobody ran for sheriff. The badge is lost." in state.log.texts()


def test_election_runs_after_night_one(make_game, advance_until):
    scheduler = make_game(sheriff_election=True)
    state = advance_until(scheduler, lambda s: s.step == Step.SHERIFF_ELECTION)
    assert state.day == 1
    assert "Last night was peaceful. No one died." in state.log.texts()


def test_sole_candidate_is_elected_without_vote(make_game, advance_until):
    scheduler = elect(make_game, advance_until, {ActionKind.SHERIFF_SIGNUP: runs("P3")})
    state = scheduler.game_state

    assert state.sheriff.elected_id == "P3"
    assert state.sheriff.stage == ElectionStage.DECIDED
    assert "💬 Player3: Player3 has something to say." in state.log.texts()
    assert not any(kind == ActionKind.SHERIFF_VOTE for agent in scheduler.agents.values()
                   for kind, _ in agent.calls)


def test_withdrawal_leaves_one_candidate(make_game, advance_until):
    script = {
        ActionKind.SHERIFF_SIGNUP: runs("P1", "P3"),
        ("P1", ActionKind.SHERIFF_SPEECH): "withdraw",
    }
    state = elect(make_game, advance_until, script).game_state

    assert state.sheriff.withdrawn == {"P1"}
    assert state.sheriff.elected_id == "P3"
    assert "🏅 Player1 withdraws from the race." in state.log.texts()


def test_everyone_withdraws(make_game, advance_until):
    script = {ActionKind.SHERIFF_SIGNUP: runs("P1", "P3"), ActionKind.SHERIFF_SPEECH: "withdraw"}
    state = elect(make_game, advance_until, script).game_state
    assert state.sheriff.stage == ElectionStage.FORFEITED


def test_candidates_do_not_vote(make_game, advance_until):
    script = {
        ActionKind.SHERIFF_SIGNUP: runs("P1", "P2"),
        ActionKind.SHERIFF_VOTE: "P2",
    }
    scheduler = elect(make_game, advance_until, script)
    state = scheduler.game_state

    assert state.sheriff.elected_id == "P2"
    voters = {pid for pid, agent in scheduler.agents.items()
              if any(kind == ActionKind.SHERIFF_VOTE for kind, _ in agent.calls)}
    assert voters == {"P3", "P4", "P5", "P6"}


def test_withdrawn_candidate_votes(make_game, advance_until):
    script = {
        ActionKind.SHERIFF_SIGNUP: runs("P1", "P2", "P3"),
        ("P3", ActionKind.SHERIFF_SPEECH): "withdraw",
        ActionKind.SHERIFF_VOTE: "P2",
    }
    scheduler = elect(make_game, advance_until, script)
    state = scheduler.game_state

    assert state.sheriff.elected_id == "P2"
    voters = {pid for pid, agent in scheduler.agents.items()
              if any(kind == ActionKind.SHERIFF_VOTE for kind, _ in agent.calls)}
    assert voters == {"P3", "P4", "P5", "P6"}


def test_second_tie_forfeits(make_game, advance_until):
    """Test a tie goes to one runoff, and a second tie loses the badge."""
    script = {
        ActionKind.SHERIFF_SIGNUP: runs("P1", "P2"),
        ActionKind.SHERIFF_VOTE: lambda p, ids: "P1" if p.id in ("P3", "P4") else "P2",
    }
    state = elect(make_game, advance_until, script).game_state

    texts = state.log.texts()
    assert "🏅 Sheriff vote, round 2: Player1, Player2." in texts
    assert "🏅 The vote is tied again. The badge is lost." in texts
    assert state.sheriff.stage == ElectionStage.FORFEITED
    assert state.sheriff.elected_id is None


def test_runoff_decides(make_game, advance_until):
    script = {ActionKind.SHERIFF_SIGNUP: runs("P1", "P2", "P3")}
    scheduler = make_game(script=script, sheriff_election=True)
    sheriff = scheduler.game_state.sheriff

    def vote(player, ids):
        if sheriff.round == 1:
            return {"P4": "P1", "P5": "P2", "P6": "P3"}[player.id]
        return "P2"

    script[ActionKind.SHERIFF_VOTE] = vote
    advance_until(scheduler, lambda s: s.step == Step.SPEECH)

    assert sheriff.round == 2
    assert sheriff.runoff == ["P1", "P2", "P3"]
    assert sheriff.elected_id == "P2"


def test_must_run_role_signs_up_automatically(make_game, advance_until):
    script = {ActionKind.SHERIFF_SIGNUP: "decline"}
    scheduler = elect(make_game, advance_until, script, must_run_roles=["seer"])
    state = scheduler.game_state

    assert state.sheriff.elected_id == "P6"
    kinds = [kind for kind, _ in scheduler.agents["P6"].calls]
    assert ActionKind.SHERIFF_SIGNUP not in kinds


def test_must_run_candidate_cannot_withdraw(make_game):
    scheduler = make_game(must_run_roles=["seer"])
    seer = scheduler.game_state.roster.get_player("P6")
    ids = [o.id for o in scheduler.election_handler.speech_options(seer)]
    assert ids == ["stay"]


def test_human_signup(make_game, advance_until):
    scheduler = make_game(human_seat=4, sheriff_election=True,
                          script={ActionKind.SHERIFF_SIGNUP: "decline"})
    scheduler.advance()
    state = scheduler.game_state
    assert state.pending_action.kind == ActionKind.SHERIFF_SIGNUP
    assert state.pending_action.option_ids == ["run", "decline"]

    scheduler.submit("run")
    assert state.pending_action.kind == ActionKind.SHERIFF_SPEECH
    assert state.pending_action.require_text_for == []
    scheduler.submit("stay", "Vote for me")

    assert state.sheriff.elected_id == "P4"
    assert "💬 Player4: Vote for me" in state.log.texts()


SELF_DESTRUCT_ROLES = ["werewolf", "werewolf", "werewolf", "villager", "villager",
                       "villager", "villager", "witch", "seer"]


def test_self_destruct_postpones_then_abandons_election(make_game, advance_until):
    """Test the first self-destruct moves the election to tomorrow; the second cancels it."""
    script = {
        ActionKind.WOLF_KILL: "skip",
        ActionKind.WITCH_ACTION: "skip",
        ActionKind.SHERIFF_SIGNUP: runs("P1", "P2"),
        ("P1", ActionKind.SHERIFF_SPEECH): "self_destruct",
        ("P2", ActionKind.SHERIFF_SPEECH): "self_destruct",
    }
    scheduler = make_game(SELF_DESTRUCT_ROLES, script=script, sheriff_election=True,
                          allow_self_destruct=True)
    state = advance_until(scheduler, lambda s: s.day == 2)

    assert state.roster.get_player("P1").death_cause == DeathCause.SELF_DESTRUCT
    assert state.sheriff.election_day == 2
    assert state.sheriff.deferred
    assert state.sheriff.stage == ElectionStage.SIGNUP
    assert "🗳️ Time to vote. Who should be exiled?" not in state.log.texts()
    assert "🏅 The sheriff election is postponed to day 2." in state.log.texts()

    advance_until(scheduler, lambda s: s.sheriff.finished)
    assert state.roster.get_player("P2").death_cause == DeathCause.SELF_DESTRUCT
    assert state.sheriff.stage == ElectionStage.FORFEITED
    assert state.sheriff.elected_id is None
    assert "🏅 The sheriff election is abandoned. No one holds the badge." in state.log.texts()
