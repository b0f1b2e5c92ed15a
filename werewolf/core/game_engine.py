"""
Core game state: phases, steps, pending human actions and per-phase scratch state.
"""

import random
from enum import Enum
from typing import List, Optional, Dict, Any, Set, TYPE_CHECKING
from dataclasses import dataclass, field

from .event_log import EventLog
from .roster import Roster
from .win_conditions import Winner
from ..config.game_config import GameConfig

if TYPE_CHECKING:
    from ..web.event_emitter import EventEmitter


ABSTAIN_ID = "skip"


class GamePhase(Enum):
    """Current game phase."""
    NIGHT = "night"
    DAY = "day"


class GameStatus(Enum):
    RUNNING = "running"
    ENDED = "ended"


class Step(Enum):
    """Phase-scoped step of the scheduler."""
    # Night
    WOLF_KILL = "wolf_kill"
    SEER_CHECK = "seer_check"
    WITCH_ACTION = "witch_action"
    NIGHT_SETTLE = "night_settle"
    # Day
    SHERIFF_ELECTION = "sheriff_election"
    SPEECH = "speech"
    VOTE = "vote"
    LAST_WORDS = "last_words"
    RETALIATION = "retaliation"
    END_DAY = "end_day"
    # Terminal
    GAME_OVER = "game_over"


class ActionKind(Enum):
    """Which decision an actor is being asked for."""
    WOLF_KILL = "wolf_kill"
    SEER_CHECK = "seer_check"
    WITCH_ACTION = "witch_action"
    SHERIFF_SIGNUP = "sheriff_signup"
    SHERIFF_SPEECH = "sheriff_speech"
    SHERIFF_VOTE = "sheriff_vote"
    SPEECH_ORDER = "speech_order"
    DAY_SPEECH = "day_speech"
    EXILE_VOTE = "exile_vote"
    LAST_WORDS = "last_words"
    HUNTER_SHOT = "hunter_shot"


class ElectionStage(Enum):
    SIGNUP = "signup"
    SPEECH = "speech"
    VOTE = "vote"
    DECIDED = "decided"
    FORFEITED = "forfeited"


@dataclass
class ActionOption:
    id: str
    label: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "label": self.label}


@dataclass
class PendingAction:
    """A decision waiting on the human slot."""
    kind: ActionKind
    actor_id: str
    prompt: str
    options: List[ActionOption] = field(default_factory=list)
    allow_abstain: bool = False
    allow_free_text: bool = False
    require_text_for: List[str] = field(default_factory=list)  # Option ids that need accompanying text

    def __post_init__(self):
        ids = [o.id for o in self.options]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate option ids in pending action {self.kind}: {ids}")

    @property
    def option_ids(self) -> List[str]:
        ids = [o.id for o in self.options]
        if self.allow_abstain:
            ids.append(ABSTAIN_ID)
        return ids

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "actorId": self.actor_id,
            "prompt": self.prompt,
            "options": [o.to_dict() for o in self.options],
            "allowAbstain": self.allow_abstain,
            "abstainId": ABSTAIN_ID if self.allow_abstain else None,
            "allowFreeText": self.allow_free_text,
            "requireTextFor": list(self.require_text_for),
        }


@dataclass
class NightMemory:
    """Scratch state for a single night. Reset at the start of every night."""
    wolf_ballots: Dict[str, str] = field(default_factory=dict)
    wolf_target: Optional[str] = None
    seer_target: Optional[str] = None
    saved: bool = False
    poison_target: Optional[str] = None

    def reset(self) -> None:
        self.wolf_ballots = {}
        self.wolf_target = None
        self.seer_target = None
        self.saved = False
        self.poison_target = None


@dataclass
class SheriffState:
    """Sheriff election scratch state; the outcome persists for the rest of the game."""
    election_day: int = 1
    stage: ElectionStage = ElectionStage.SIGNUP
    signups: Dict[str, bool] = field(default_factory=dict)
    candidates: List[str] = field(default_factory=list)
    withdrawn: Set[str] = field(default_factory=set)
    round: int = 1
    runoff: List[str] = field(default_factory=list)  # Tied leaders contesting round 2
    elected_id: Optional[str] = None
    deferred: bool = False

    @property
    def finished(self) -> bool:
        return self.stage in (ElectionStage.DECIDED, ElectionStage.FORFEITED)

    @property
    def remaining_candidates(self) -> List[str]:
        return [c for c in self.candidates if c not in self.withdrawn]

    @property
    def contestants(self) -> List[str]:
        """Candidates that can receive ballots in the current round."""
        return list(self.runoff) if self.round == 2 else self.remaining_candidates

    def restart(self, election_day: int) -> None:
        """Throw away partial progress and run the election on another day."""
        self.election_day = election_day
        self.stage = ElectionStage.SIGNUP
        self.signups = {}
        self.candidates = []
        self.withdrawn = set()
        self.round = 1
        self.runoff = []
        self.deferred = True


@dataclass
class RetaliationRequest:
    """A hunter waiting to take a shot after dying."""
    holder_id: str
    cause: str


@dataclass
class GameState:
    """Complete state of one game. Owned and mutated by the scheduler only."""
    roster: Roster
    config: GameConfig = field(default_factory=GameConfig)
    rng: random.Random = field(default_factory=random.Random)
    day: int = 1
    phase: GamePhase = GamePhase.NIGHT
    step: Step = Step.WOLF_KILL
    status: GameStatus = GameStatus.RUNNING
    winner: Winner = Winner.NONE
    pending_action: Optional[PendingAction] = None
    log: EventLog = field(default_factory=EventLog)
    night: NightMemory = field(default_factory=NightMemory)
    sheriff: SheriffState = field(default_factory=SheriffState)

    # Per-step cursor: None until the current step has been set up
    turn_queue: Optional[List[str]] = None
    ballots: Dict[str, str] = field(default_factory=dict)
    exiled_id: Optional[str] = None
    retaliations: List[RetaliationRequest] = field(default_factory=list)
    after_retaliation: Optional[Step] = None
    last_day_starter: Optional[str] = None
    speech_direction: Optional[str] = None

    # Event emitter for run recording (optional)
    event_emitter: Optional['EventEmitter'] = None

    @property
    def is_running(self) -> bool:
        return self.status == GameStatus.RUNNING

    @property
    def human_id(self) -> Optional[str]:
        human = self.roster.human
        return human.id if human else None

    @property
    def sheriff_id(self) -> Optional[str]:
        """Elected sheriff, if still alive."""
        elected = self.sheriff.elected_id
        if elected is None:
            return None
        player = self.roster.get_player(elected)
        return elected if player and player.alive else None

    def move_to(self, step: Step) -> None:
        """Advance the step cursor and drop the previous step's scratch state."""
        self.step = step
        self.turn_queue = None
        self.ballots = {}

    def snapshot(self, viewer_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Read-only projection for display.

        Living players' roles are hidden unless the game has ended or the
        viewer is that player. The log is limited to the most recent window.
        """
        viewer_id = viewer_id or self.human_id
        ended = self.status == GameStatus.ENDED
        viewer = self.roster.get_player(viewer_id) if viewer_id else None

        players_data = []
        for player in self.roster:
            show_role = ended or not player.alive or player.id == viewer_id
            players_data.append({
                "id": player.id,
                "name": player.name,
                "alive": player.alive,
                "isHuman": player.is_human,
                "isSheriff": player.id == self.sheriff.elected_id,
                "idiotRevealed": player.idiot_revealed,
                "role": player.role.role_type.value if show_role else None,
            })

        pending = None
        if self.pending_action and self.pending_action.actor_id == viewer_id:
            pending = self.pending_action.to_dict()

        return {
            "day": self.day,
            "phase": self.phase.value,
            "step": self.step.value,
            "status": self.status.value,
            "winner": self.winner.value,
            "viewerId": viewer_id,
            "viewerRole": viewer.role.role_type.value if viewer else None,
            "sheriff": self.sheriff.elected_id,
            "players": players_data,
            "logs": self.log.recent(self.config.log_window, viewer_id, reveal_all=ended),
            "pendingAction": pending,
        }
