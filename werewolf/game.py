"""
Game setup: validate a roster, deal roles, attach agents and open the first night.
"""

import random
from collections import Counter
from typing import Any, Callable, Dict, List, Optional, Union

from .core import (
    GameState, Judge, Player, Roster, RoleType, SetupError,
    create_role, parse_role_type,
)
from .core.roles import SINGLETON_ROLES, ROLE_LABELS
from .agents import BaseAgent, SimpleLLMAgent, DummyAgent
from .config.game_config import GameConfig
from .scheduler import GameScheduler
from .web.event_emitter import EventEmitter


DEFAULT_AI_NAMES = ["AI-Alpha", "AI-Beta", "AI-Gamma", "AI-Delta", "AI-Sigma",
                    "AI-Omega", "AI-Kappa", "AI-Lambda", "AI-Theta", "AI-Zeta"]
DEFAULT_HUMAN_NAME = "You"

AGENT_TYPES = ["simple_llm_agent", "dummy_agent"]


def _parse_roles(values: List[Any], source: str) -> List[RoleType]:
    try:
        return [parse_role_type(v) for v in values]
    except ValueError as e:
        raise SetupError(f"Unknown role in {source}: {e}")


def validate_distribution(config: GameConfig) -> List[RoleType]:
    """
    Check the configured role multiset.

    Raises:
        SetupError: Unknown role, duplicated singleton, or no wolf/good player
    """
    roles = _parse_roles(config.role_distribution, "role_distribution")
    counts = Counter(roles)
    for role_type in SINGLETON_ROLES:
        if counts[role_type] > 1:
            raise SetupError(f"At most one {ROLE_LABELS[role_type]} is allowed")
    if counts[RoleType.WEREWOLF] == 0:
        raise SetupError("The game needs at least one werewolf")
    if counts[RoleType.WEREWOLF] >= len(roles) - counts[RoleType.WEREWOLF]:
        raise SetupError("Werewolves must start outnumbered")
    return roles


def default_roster(config: GameConfig, human_name: str = DEFAULT_HUMAN_NAME) -> List[Dict[str, Any]]:
    """Unnamed table: the human seat plus AI-* players."""
    ai_names = iter(DEFAULT_AI_NAMES)
    return [
        {"name": human_name if seat == config.human_seat else next(ai_names, f"AI-{seat}")}
        for seat in range(1, len(config.role_distribution) + 1)
    ]


def build_roster(config: GameConfig, roster_input: Optional[List[Dict[str, Any]]],
                 rng: random.Random) -> Roster:
    """
    Build players from input entries ({name, role?, model_key?}).

    Roles are either all given or all omitted; omitted roles are dealt
    from the configured distribution using rng.

    Raises:
        SetupError: On any invalid entry
    """
    distribution = validate_distribution(config)
    size = len(distribution)

    if config.human_seat is not None and not 1 <= config.human_seat <= size:
        raise SetupError(f"human_seat must be between 1 and {size}")

    if roster_input is None:
        roster_input = default_roster(config)

    if len(roster_input) != size:
        raise SetupError(f"Expected {size} players, got {len(roster_input)}")

    names = [str(entry.get("name") or "").strip() for entry in roster_input]
    if not all(names):
        raise SetupError("Every player needs a name")
    if len(set(names)) != len(names):
        raise SetupError("Player names must be unique")

    given = [entry.get("role") for entry in roster_input]
    if any(given) and not all(given):
        raise SetupError("Either every player has a role or none does")
    if all(given):
        roles = _parse_roles(given, "roster")
        if Counter(roles) != Counter(distribution):
            raise SetupError("Roster roles do not match the configured role distribution")
    else:
        roles = list(distribution)
        rng.shuffle(roles)

    must_run = set(_parse_roles(config.must_run_roles, "must_run_roles"))
    players = []
    for seat, (entry, name, role_type) in enumerate(zip(roster_input, names, roles), start=1):
        player = Player(
            id=f"P{seat}",
            name=name,
            role=create_role(role_type),
            is_human=seat == config.human_seat,
            model_key=entry.get("model_key") or None,
        )
        if role_type in must_run:
            player.flags["must_run"] = True
        players.append(player)
    return Roster(players)


def create_agent(player: Player, agent_type: str, config: GameConfig,
                 event_emitter: Optional[EventEmitter] = None) -> BaseAgent:
    """Create an agent of the specified type for a player."""
    if agent_type == "dummy_agent":
        return DummyAgent(player, config)
    elif agent_type == "simple_llm_agent":
        return SimpleLLMAgent(player, config, event_emitter=event_emitter)
    raise SetupError(f"Unknown agent_type: {agent_type}. Must be one of {AGENT_TYPES}")


def build_agents(roster: Roster, config: GameConfig,
                 event_emitter: Optional[EventEmitter] = None) -> Dict[str, BaseAgent]:
    agents = {}
    for player in roster:
        if player.is_human:
            continue
        agent_type = (config.agent_types or {}).get(player.seat, config.agent_type).lower()
        agents[player.id] = create_agent(player, agent_type, config, event_emitter)
    return agents


def narrate_opening(judge: Judge, roster: Roster) -> None:
    counts = Counter(p.role.role_type for p in roster)
    mix = ", ".join(f"{n} {ROLE_LABELS[r]}" for r, n in counts.items())
    judge.announce(f"🎲 The game begins with {len(roster)} players ({mix}).")
    judge.announce("📜 Each night the werewolves kill, the seer inspects and the witch may save or poison. "
                   "Each day everyone speaks, then the table votes one player out.")
    judge.announce("🏆 The village wins when every werewolf is out. "
                   "The werewolves win once they match the rest in numbers.")

    human = roster.human
    if human:
        judge.announce(f"You are {human.name} ({human.id}). Your role: {human.role.label}.",
                       audience=[human.id])

    wolves = [p for p in roster if p.is_wolf]
    if wolves:
        names = ", ".join(f"{w.name} ({w.id})" for w in wolves)
        judge.announce(f"🐺 The pack: {names}.", audience=[w.id for w in wolves])

    judge.announce("🌙 Night 1 falls.")


def create_game(config: GameConfig, roster_input: Optional[List[Dict[str, Any]]] = None,
                agents: Optional[Union[Dict[str, BaseAgent], Callable[[Player], BaseAgent]]] = None,
                event_emitter: Optional[EventEmitter] = None) -> GameScheduler:
    """
    Create a new game, ready for advance().

    Args:
        config: Game configuration (role distribution, rules, agent settings)
        roster_input: Optional [{name, role?, model_key?}] in seat order
        agents: Optional agents keyed by player id, or a factory called per AI
            player, used instead of building them from the config
        event_emitter: Optional recorder for game events

    Raises:
        SetupError: If the roster, configuration or model profiles are invalid.
            Nothing is created in that case.
    """
    rng = random.Random(config.random_seed)
    roster = build_roster(config, roster_input, rng)

    if agents is None:
        agents = build_agents(roster, config, event_emitter)
    elif callable(agents):
        agents = {p.id: agents(p) for p in roster if not p.is_human}
    else:
        missing = [p.id for p in roster if not p.is_human and p.id not in agents]
        if missing:
            raise SetupError(f"No agent for: {', '.join(missing)}")

    game_state = GameState(roster=roster, config=config, rng=rng, event_emitter=event_emitter)
    judge = Judge(game_state)

    if event_emitter:
        event_emitter.emit_game_start(
            [{"id": p.id, "name": p.name, "role": p.role.role_type.value, "is_human": p.is_human}
             for p in roster],
            {pid: type(agent).__name__ for pid, agent in agents.items()},
        )
        event_emitter.save_metadata({
            "players": [p.id for p in roster],
            "wolves": [p.id for p in roster if p.is_wolf],
            "human": game_state.human_id,
            "config": {
                "llm_model": config.llm_model,
                "agent_type": config.agent_type,
                "random_seed": config.random_seed,
                "role_distribution": list(config.role_distribution),
            },
        })

    narrate_opening(judge, roster)
    return GameScheduler(game_state, agents, judge)


class GameSession:
    """Holds the single live game of a process."""

    def __init__(self, config: GameConfig, event_emitter: Optional[EventEmitter] = None):
        self.config = config
        self.event_emitter = event_emitter
        self.scheduler: Optional[GameScheduler] = None

    def new_game(self, roster_input: Optional[List[Dict[str, Any]]] = None,
                 config: Optional[GameConfig] = None) -> GameScheduler:
        """Replace the current game. On SetupError the previous game is kept."""
        scheduler = create_game(config or self.config, roster_input, event_emitter=self.event_emitter)
        self.scheduler = scheduler
        return scheduler

    def require_game(self) -> GameScheduler:
        if self.scheduler is None:
            raise SetupError("No game has been created yet")
        return self.scheduler
