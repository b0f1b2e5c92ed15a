"""
Run recording and the HTTP game server.
"""

from .event_emitter import EventEmitter
from .run_recorder import RunRecorder

__all__ = ['EventEmitter', 'RunRecorder']
