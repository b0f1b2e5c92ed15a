"""
Agent implementations (Decision Oracles) for Werewolf players.
"""

from .base_agent import BaseAgent, AgentContext
from .llm_agent import SimpleLLMAgent
from .dummy_agent import DummyAgent
from .candidate_resolver import find_candidate, resolve_candidate
from .exceptions import OracleError, LLMEmptyResponseError, UnresolvedChoiceError

__all__ = [
    'BaseAgent',
    'AgentContext',
    'SimpleLLMAgent',
    'DummyAgent',
    'find_candidate',
    'resolve_candidate',
    'OracleError',
    'LLMEmptyResponseError',
    'UnresolvedChoiceError',
]
