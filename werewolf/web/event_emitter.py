"""
Event emitter for recording game events to files.
"""

from typing import Dict, Any, Optional, List

from .run_recorder import RunRecorder


class EventEmitter:
    """Event emitter that records game events to files."""

    def __init__(self, run_recorder: Optional[RunRecorder] = None):
        self.run_recorder = run_recorder or RunRecorder()

    def _emit(self, event_type: str, data: Dict[str, Any]) -> None:
        """Emit an event by recording it to file."""
        if self.run_recorder:
            try:
                self.run_recorder.record_event(event_type, data)
            except Exception as e:
                # Don't let recording errors break the game
                print(f"Error recording event: {e}")

    def save_metadata(self, metadata: Dict[str, Any]) -> None:
        if self.run_recorder:
            try:
                self.run_recorder.save_metadata(metadata)
            except Exception as e:
                print(f"Error saving metadata: {e}")

    def emit_game_start(self, players: List[Dict[str, Any]], agent_types: Optional[Dict[str, str]] = None) -> None:
        """Emit game start event."""
        self._emit("game_start", {
            "players": players,
            "agent_types": agent_types or {}
        })

    def emit_phase_change(self, phase: str, day: int) -> None:
        """Emit phase change event."""
        self._emit("phase_change", {
            "phase": phase,
            "day": day
        })

    def emit_narration(self, message: str, audience: Optional[List[str]], phase: str, day: int) -> None:
        """Emit a judge announcement. audience=None means public."""
        self._emit("narration", {
            "message": message,
            "audience": audience,
            "phase": phase,
            "day": day
        })

    def emit_speech(self, player_id: str, speech: str, day: int) -> None:
        """Emit player speech event."""
        self._emit("speech", {
            "player_id": player_id,
            "speech": speech,
            "day": day
        })

    def emit_vote_results(self, totals: Dict[str, float], ballots: Dict[str, str], day: int) -> None:
        """Emit exile vote results event."""
        self._emit("vote_results", {
            "totals": totals,
            "ballots": ballots,
            "day": day
        })

    def emit_elimination(self, player_id: str, cause: str, role: str, day: int) -> None:
        """Emit player elimination event."""
        self._emit("elimination", {
            "player_id": player_id,
            "cause": cause,
            "role": role,
            "day": day
        })

    def emit_game_over(self, winner: Optional[str], day: int, phase: str) -> None:
        """Emit game over event."""
        self._emit("game_over", {
            "winner": winner,
            "day": day,
            "phase": phase
        })

    def emit_fatal_error(self, error_message: str, player_id: Optional[str] = None,
                         action_type: Optional[str] = None) -> None:
        """Emit fatal error event."""
        self._emit("fatal_error", {
            "error_message": error_message,
            "player_id": player_id,
            "action_type": action_type
        })

    def emit_llm_metadata(self, player_id: str, action_type: str, prompt_tokens: int,
                          completion_tokens: int, total_tokens: int, latency_ms: float,
                          model: str) -> None:
        """Emit LLM API call metadata (tokens, latency)."""
        self._emit("llm_metadata", {
            "player_id": player_id,
            "action_type": action_type,
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": total_tokens,
            "latency_ms": latency_ms,
            "model": model
        })
