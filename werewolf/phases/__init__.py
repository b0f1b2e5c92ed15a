"""
Phase handlers for night, sheriff election, day, voting and retaliation.
"""

from .base import PhaseHandler, Decision
from .day_phase import DayPhaseHandler
from .night_phase import NightPhaseHandler
from .sheriff_election import SheriffElectionHandler
from .voting import VotingHandler
from .retaliation import RetaliationHandler

__all__ = [
    'PhaseHandler',
    'Decision',
    'DayPhaseHandler',
    'NightPhaseHandler',
    'SheriffElectionHandler',
    'VotingHandler',
    'RetaliationHandler',
]
