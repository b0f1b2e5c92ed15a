"""
Pytest fixtures for Werewolf game tests.
"""

import pytest
from unittest.mock import AsyncMock, patch
from typing import Callable, Dict, List, Optional

from werewolf.core import GameState, GamePhase, Judge, Step
from werewolf.agents import BaseAgent, SimpleLLMAgent
from werewolf.config.game_config import GameConfig
from werewolf.game import create_game
from werewolf.scheduler import GameScheduler


DEFAULT_ROLES = ["werewolf", "werewolf", "villager", "villager", "witch", "seer"]


@pytest.fixture(autouse=True)
def mock_llm_calls(monkeypatch):
    """
    Automatically mock all LLM API calls for all tests.

    No real API call is ever made, even when a test forgets to mock the
    higher-level choose/speak methods: the oracle then answers "" and the
    unit fails with an OracleError.
    """
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    with patch.object(SimpleLLMAgent, '_call_llm', return_value=""), \
            patch.object(SimpleLLMAgent, '_call_llm_async', new_callable=AsyncMock, return_value=""):
        yield


class ScriptedAgent(BaseAgent):
    """
    Agent that answers from a shared script.

    Script keys are (player_id, ActionKind) or ActionKind; values are an
    option id or a callable (player, candidate_ids) -> option id. Without
    an entry the first candidate is chosen.
    """

    def __init__(self, player, config, script: Dict):
        super().__init__(player, config)
        self.script = script
        self.calls: List = []

    def choose(self, context, candidates, allow_abstain=False):
        ids = [c.id for c in candidates]
        self.calls.append((context.kind, ids))
        answer = self.script.get((self.player.id, context.kind), self.script.get(context.kind))
        if callable(answer):
            return answer(self.player, ids)
        if answer is None:
            return ids[0]
        return answer

    def speak(self, context, hint):
        return f"{self.player.name} has something to say."


@pytest.fixture
def game_config():
    """Test game configuration."""
    return GameConfig(
        human_seat=None,
        sheriff_election=False,
        random_seed=7,
        use_judge_announcements=False  # Disable for cleaner test output
    )


@pytest.fixture
def make_game():
    """
    Build a game with roles in seat order (P1 gets roles[0], ...) and
    ScriptedAgents for every AI seat.
    """
    def _make(roles: Optional[List[str]] = None, script: Optional[Dict] = None,
              human_seat: Optional[int] = None, **config_kwargs) -> GameScheduler:
        roles = list(roles or DEFAULT_ROLES)
        config_kwargs.setdefault("sheriff_election", False)
        config_kwargs.setdefault("random_seed", 7)
        config = GameConfig(
            role_distribution=roles,
            human_seat=human_seat,
            use_judge_announcements=False,
            **config_kwargs
        )
        roster_input = [{"name": f"Player{i}", "role": role} for i, role in enumerate(roles, start=1)]
        shared = script if script is not None else {}
        return create_game(config, roster_input, agents=lambda p: ScriptedAgent(p, config, shared))
    return _make


@pytest.fixture
def advance_until():
    """Advance one unit at a time until predicate(state) holds (or the game stops moving)."""
    def _advance(scheduler: GameScheduler, predicate: Callable[[GameState], bool], limit: int = 500) -> GameState:
        state = scheduler.game_state
        for _ in range(limit):
            if predicate(state) or not state.is_running or state.pending_action is not None:
                return state
            scheduler.advance(max_steps=1)
        raise AssertionError("predicate never held")
    return _advance


@pytest.fixture
def start_day():
    """Jump a fresh game to the given day step, skipping the night."""
    def _start(scheduler: GameScheduler, step: Step = Step.SPEECH) -> GameState:
        state = scheduler.game_state
        state.phase = GamePhase.DAY
        state.move_to(step)
        return state
    return _start


@pytest.fixture
def game_state(make_game):
    """A fresh default game (P1, P2 wolves; P3, P4 villagers; P5 witch; P6 seer)."""
    return make_game().game_state


@pytest.fixture
def judge(game_state):
    return Judge(game_state)
