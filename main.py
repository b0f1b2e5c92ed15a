"""
Console entry point: play the human seat from the terminal, watch an
all-AI game, or serve the HTTP API.
"""

import argparse
import random
from typing import Optional

from dotenv import load_dotenv

from werewolf.agents import OracleError
from werewolf.config import GameConfig, load_config
from werewolf.core import GameState, SetupError, InvalidSubmissionError, RuleViolationError
from werewolf.game import create_game
from werewolf.scheduler import GameScheduler
from werewolf.web import EventEmitter, RunRecorder
from werewolf.web.game_server import GameServer

load_dotenv()


class ConsoleGame:
    """Runs one game in the terminal, answering the human seat from stdin."""

    def __init__(self, scheduler: GameScheduler, run_recorder: Optional[RunRecorder] = None):
        self.scheduler = scheduler
        self.run_recorder = run_recorder
        self._log_cursor = 0

    @property
    def game_state(self) -> GameState:
        return self.scheduler.game_state

    def _print_new_log(self) -> None:
        """Print log lines the human may read (the judge echo is off when a human plays)."""
        state = self.game_state
        human_id = state.human_id
        if human_id is None:
            return
        entries = list(state.log)
        for entry in entries[self._log_cursor:]:
            if entry.visible_to(human_id):
                print(entry.text)
        self._log_cursor = len(entries)

    def _ask_human(self) -> None:
        pending = self.game_state.pending_action
        print()
        print(f">>> {pending.prompt}")
        ids = pending.option_ids
        labels = {o.id: o.label for o in pending.options}
        for index, option_id in enumerate(ids, start=1):
            print(f"  {index}. {labels.get(option_id, 'Skip')} [{option_id}]")

        while True:
            answer = input("Your choice: ").strip()
            if answer.isdigit() and 1 <= int(answer) <= len(ids):
                answer = ids[int(answer) - 1]
            text = None
            if pending.allow_free_text and answer in ids:
                required = answer in pending.require_text_for
                hint = "required" if required else "optional, Enter to skip"
                text = input(f"Your words ({hint}): ").strip() or None
            try:
                self.scheduler.submit(answer, text)
                return
            except (InvalidSubmissionError, RuleViolationError) as e:
                print(f"Invalid: {e.message}")

    def run(self, max_retries: int = 3) -> bool:
        """
        Play until the game ends.

        Returns False if the Decision Oracle kept failing.
        """
        failures = 0
        while self.game_state.is_running:
            try:
                if self.game_state.pending_action is not None:
                    self._print_new_log()
                    self._ask_human()
                else:
                    self.scheduler.advance()
                failures = 0
            except OracleError as e:
                failures += 1
                print(f"\n⚠️ Decision Oracle failed ({failures}/{max_retries}): {e.message}")
                if failures >= max_retries:
                    print("\n❌ FATAL ERROR: giving up on this game.")
                    return False
        self._print_new_log()
        return True

    def print_summary(self) -> None:
        """Print a nicely formatted game summary."""
        state = self.game_state
        print("\n📊 GAME SUMMARY")
        print("-" * 60)
        print(f"Winner: {state.winner.value}")
        print(f"Days played: {state.day}")
        print(f"Random Seed: {state.config.random_seed}")
        if state.sheriff.elected_id:
            print(f"Sheriff: {state.roster.get_player(state.sheriff.elected_id)}")
        print("\nPlayers:")
        for player in state.roster:
            status = "alive" if player.alive else f"out ({player.death_cause.value})"
            human = " [you]" if player.is_human else ""
            print(f"  • {player}{human}: {player.role.label}, {status}")


def main():
    """Entry point for running a game."""
    parser = argparse.ArgumentParser(
        description="Play a game of Werewolf against AI players",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                    # Play seat 1 against LLM agents
  python main.py --config configs/dummy_agent.yaml  # Play against dummy agents
  python main.py --no-human --seed 7                # Watch an all-AI game
  python main.py --model gpt-4o-mini                # Override model
  python main.py --serve --port 5000                # Serve the HTTP API
        """
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file (default: use default config)"
    )
    parser.add_argument(
        "--seed",
        "-s",
        type=int,
        default=None,
        help="Random seed for roles, tie-breaks and dummy agents (generated and shown if omitted)"
    )
    parser.add_argument(
        "--model",
        "-m",
        type=str,
        default=None,
        help="LLM model to use (e.g., 'gpt-4o-mini'). Overrides config file setting."
    )
    parser.add_argument(
        "--run-name",
        "-r",
        type=str,
        default=None,
        help="Custom name for this run (default: auto-generated timestamp)"
    )
    parser.add_argument(
        "--no-human",
        action="store_true",
        help="Let AI agents play every seat"
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Serve the HTTP API instead of playing in the terminal"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=5000,
        help="Port for --serve (default: 5000)"
    )

    args = parser.parse_args()

    config: GameConfig = load_config(args.config)
    if args.seed is not None:
        config.random_seed = args.seed
    if args.model is not None:
        config.llm_model = args.model
    if args.no_human:
        config.human_seat = None

    run_recorder = RunRecorder(config.runs_dir)
    run_recorder.create_run(args.run_name)
    event_emitter = EventEmitter(run_recorder)
    print(f"Recording game to: {run_recorder.get_run_path()}/")

    if args.serve:
        GameServer(config, port=args.port, event_emitter=event_emitter).start()
        return

    # Console games always run with a known seed so they can be replayed
    if config.random_seed is None:
        config.random_seed = random.randint(0, 2**31 - 1)
    if config.human_seat is not None:
        # The console shows the human only what they may see
        config.use_judge_announcements = False

    print("Werewolf")
    print("=" * 60)
    if args.config:
        print(f"Using config: {args.config}")
        print(f"Agent type: {config.agent_type}")
    if args.model:
        print(f"Model override: {args.model}")
    print(f"Random Seed: {config.random_seed}")
    print("=" * 60)

    try:
        scheduler = create_game(config, event_emitter=event_emitter)
    except SetupError as e:
        print(f"Cannot start the game: {e.message}")
        return

    game = ConsoleGame(scheduler, run_recorder)
    game.run(max_retries=config.max_retries)
    game.print_summary()
    print(f"\nGame events saved to: {run_recorder.get_run_path()}")


if __name__ == "__main__":
    main()
