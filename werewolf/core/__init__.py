"""
Core game engine components: game state, players, roles, tallies and rule enforcement.
"""

from .game_engine import (
    GameState, GamePhase, GameStatus, Step, ElectionStage, ActionKind,
    ActionOption, PendingAction, NightMemory, SheriffState, RetaliationRequest,
    ABSTAIN_ID,
)
from .player import Player, DeathCause
from .roles import Role, RoleType, Team, create_role, parse_role_type
from .roster import Roster
from .event_log import EventLog, LogEntry
from .tally import tally, count_votes, leading_targets, TallyResult
from .win_conditions import Winner, evaluate
from .judge import Judge
from .exceptions import GameError, SetupError, InvalidSubmissionError, RuleViolationError

__all__ = [
    'GameState',
    'GamePhase',
    'GameStatus',
    'Step',
    'ElectionStage',
    'ActionKind',
    'ActionOption',
    'PendingAction',
    'NightMemory',
    'SheriffState',
    'RetaliationRequest',
    'ABSTAIN_ID',
    'Player',
    'DeathCause',
    'Role',
    'RoleType',
    'Team',
    'create_role',
    'parse_role_type',
    'Roster',
    'EventLog',
    'LogEntry',
    'tally',
    'count_votes',
    'leading_targets',
    'TallyResult',
    'Winner',
    'evaluate',
    'Judge',
    'GameError',
    'SetupError',
    'InvalidSubmissionError',
    'RuleViolationError',
]
