"""
Game configuration and constants.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, List


def _default_roles() -> List[str]:
    return ["werewolf", "werewolf", "villager", "villager", "witch", "seer"]


@dataclass
class GameConfig:
    """Configuration for game parameters."""

    # Table setup
    role_distribution: List[str] = field(default_factory=_default_roles)  # Must match the roster exactly
    human_seat: Optional[int] = 1  # Seat played through submissions; None for an all-AI table
    must_run_roles: List[str] = field(default_factory=list)  # Roles forced to run for sheriff

    # Rules
    sheriff_election: bool = True
    sheriff_vote_weight: float = 1.5
    allow_self_destruct: bool = False  # Wolves may self-destruct during speeches

    # Human input limits
    max_free_text: int = 80  # Characters kept from a speech or last words
    log_window: int = 120  # Log entries exposed in a snapshot

    # LLM settings
    llm_model: str = "gpt-4o-mini"
    llm_base_url: Optional[str] = None
    llm_temperature: float = 0.7
    max_retries: int = 3
    oracle_timeout: float = 60.0  # seconds per Decision Oracle call
    max_action_tokens: int = 200  # Max tokens for a target choice
    max_speech_tokens: int = 300  # Max tokens for speeches and last words
    model_profiles: Optional[Dict[str, Dict[str, str]]] = field(default=None)  # {key: {base_url, api_key, model}}

    # Agent settings
    agent_type: str = "simple_llm_agent"  # Options: "simple_llm_agent" or "dummy_agent" (used if agent_types not specified)
    agent_types: Optional[Dict[int, str]] = field(default=None)  # Per-seat agent types: {seat: "agent_type"}
    random_seed: Optional[int] = None  # Random seed for role shuffle, tie-breaks and dummy agents

    # Narration
    use_judge_announcements: bool = True
    runs_dir: str = "runs"


# Default configuration instance
default_config = GameConfig()
