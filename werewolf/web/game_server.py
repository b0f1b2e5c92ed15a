"""
HTTP API for playing one game against AI players.
"""

import dataclasses
from threading import Lock
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from ..agents import OracleError, SimpleLLMAgent
from ..config.game_config import GameConfig
from ..core import GameError, SetupError, InvalidSubmissionError
from ..game import GameSession, default_roster
from .event_emitter import EventEmitter


def _roster_from_body(body: Dict[str, Any]) -> Optional[list]:
    """Accept [{name, role?, modelKey?}] or just a userName for the default table."""
    players = body.get("players")
    if players is None:
        return None
    if not isinstance(players, list):
        raise SetupError("players must be a list")
    return [
        {
            "name": p.get("name"),
            "role": p.get("role"),
            "model_key": p.get("modelKey") or p.get("model_key"),
        }
        for p in players
    ]


def _config_from_body(base: GameConfig, body: Dict[str, Any]) -> GameConfig:
    """Per-game overrides on top of the server configuration."""
    overrides = {}
    if body.get("seed") is not None:
        try:
            overrides["random_seed"] = int(body["seed"])
        except (TypeError, ValueError):
            raise SetupError("seed must be an integer")
    if body.get("profiles"):
        overrides["model_profiles"] = {
            key: {
                "base_url": profile.get("baseURL") or profile.get("base_url"),
                "api_key": profile.get("apiKey") or profile.get("api_key"),
                "model": profile.get("model"),
            }
            for key, profile in body["profiles"].items()
        }
    if body.get("agentType"):
        overrides["agent_type"] = body["agentType"]
    return dataclasses.replace(base, **overrides) if overrides else base


class GameServer:
    """Flask server holding the single live game of this process."""

    def __init__(self, config: GameConfig, port: int = 5000, host: str = '127.0.0.1',
                 event_emitter: Optional[EventEmitter] = None):
        self.port = port
        self.host = host
        self.config = config
        self.session = GameSession(config, event_emitter)
        # Requests may arrive on several threads; the game is not thread-safe
        self._lock = Lock()

        self.app = Flask(__name__)
        self._setup_routes()

    def _state(self, status: int = 200, error: Optional[str] = None):
        scheduler = self.session.scheduler
        payload = scheduler.snapshot() if scheduler else {}
        if error:
            payload = {"error": error, "state": payload}
        return jsonify(payload), status

    def _advance(self, action):
        """Run action(); map engine errors to HTTP status codes."""
        try:
            action()
        except (SetupError, InvalidSubmissionError) as e:
            return jsonify({"error": e.message}), 400
        except OracleError as e:
            return self._state(502, e.message)
        except GameError as e:
            return jsonify({"error": e.message}), 409
        return self._state()

    def _setup_routes(self):
        """Setup Flask routes."""
        app = self.app

        @app.route('/api/new-game', methods=['POST'])
        def new_game():
            body = request.get_json(silent=True) or {}

            def start():
                config = _config_from_body(self.config, body)
                roster_input = _roster_from_body(body)
                if roster_input is None and body.get("userName"):
                    roster_input = default_roster(config, str(body["userName"]))
                scheduler = self.session.new_game(roster_input, config=config)
                scheduler.advance()

            with self._lock:
                return self._advance(start)

        @app.route('/api/next', methods=['POST'])
        def next_step():
            with self._lock:
                return self._advance(lambda: self.session.require_game().advance())

        @app.route('/api/action', methods=['POST'])
        def submit_action():
            body = request.get_json(silent=True) or {}
            action_id = body.get("actionId")
            text = body.get("speech", body.get("text"))
            if not action_id:
                return jsonify({"error": "actionId is required"}), 400
            if not isinstance(action_id, str) or (text is not None and not isinstance(text, str)):
                return jsonify({"error": "actionId and speech must be strings"}), 400
            with self._lock:
                return self._advance(lambda: self.session.require_game().submit(action_id, text))

        @app.route('/api/state', methods=['GET'])
        def get_state():
            with self._lock:
                if self.session.scheduler is None:
                    return jsonify({"error": "No game yet"}), 404
                viewer = request.args.get("viewer")
                return jsonify(self.session.scheduler.snapshot(viewer))

        @app.route('/api/test-model', methods=['POST'])
        def test_model():
            body = request.get_json(silent=True) or {}
            profile = {
                "base_url": body.get("baseURL") or body.get("base_url"),
                "api_key": body.get("apiKey") or body.get("api_key"),
                "model": body.get("model"),
            }
            result = SimpleLLMAgent.check_connection(profile, timeout=self.config.oracle_timeout)
            missing_fields = not all(profile.values())
            return jsonify(result), 400 if missing_fields else 200

    def start(self) -> None:
        """Start the web server."""
        print(f"\n{'='*60}")
        print(f"Starting game server on http://{self.host}:{self.port}")
        print(f"{'='*60}\n")
        self.app.run(host=self.host, port=self.port, debug=False, use_reloader=False)


def create_app(config: Optional[GameConfig] = None, event_emitter: Optional[EventEmitter] = None) -> Flask:
    """Build the Flask app (used by tests and WSGI servers)."""
    server = GameServer(config or GameConfig(), event_emitter=event_emitter)
    return server.app
