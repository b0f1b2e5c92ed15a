"""
Day phase handler for speeches, last words and the end of the day.
"""

from typing import Dict, List

from ..core import (
    GameState, GamePhase, Judge, Player, Step, ActionKind, ActionOption,
)
from ..agents import BaseAgent
from .base import PhaseHandler, Decision


SPEECH_DIRECTIONS = [
    ActionOption("forward", "Clockwise (next seat first)"),
    ActionOption("reverse", "Counter-clockwise (previous seat first)"),
]


class DayPhaseHandler(PhaseHandler):
    """Handles day phase operations: speaking order, speeches and last words."""

    def __init__(self, game_state: GameState, judge: Judge, agents: Dict[str, BaseAgent]):
        super().__init__(game_state, judge, agents)

    # ---- Speaking order ---------------------------------------------------

    def speaking_order(self) -> List[str]:
        """
        Order of today's speeches.

        With a living sheriff, speaking starts next to the sheriff in the
        chosen direction and the sheriff speaks last. Otherwise the first
        speaker moves one seat along every day.
        """
        state = self.game_state
        alive = state.roster.get_alive_players()
        ids = [p.id for p in alive]

        sheriff_id = state.sheriff_id
        if sheriff_id:
            index = ids.index(sheriff_id)
            rotated = ids[index + 1:] + ids[:index]
            if state.speech_direction == "reverse":
                rotated.reverse()
            return rotated + [sheriff_id]

        starter = self._next_starter(alive)
        state.last_day_starter = starter
        index = ids.index(starter)
        return ids[index:] + ids[:index]

    def _next_starter(self, alive: List[Player]) -> str:
        last = self.game_state.last_day_starter
        if last is None:
            return alive[0].id
        last_seat = self.game_state.roster.get_player(last).seat
        later = [p for p in alive if p.seat > last_seat]
        return (later or alive)[0].id

    def apply_speech_order(self, actor: Player, decision: Decision) -> None:
        self.game_state.speech_direction = decision.choice
        label = "clockwise" if decision.choice == "forward" else "counter-clockwise"
        self.judge.announce(f"🏅 Sheriff {actor.name} calls the speeches {label}.")

    # ---- Speeches ---------------------------------------------------------

    def speech_options(self, actor: Player) -> List[ActionOption]:
        options = [ActionOption("speak", "Speak")]
        if actor.is_wolf and self.config.allow_self_destruct:
            options.append(ActionOption("self_destruct", "Self-destruct"))
        return options

    def run_speech(self) -> None:
        state = self.game_state
        if state.turn_queue is None:
            sheriff_id = state.sheriff_id
            if sheriff_id and state.speech_direction is None:
                sheriff = state.roster.get_player(sheriff_id)
                prompt = "As sheriff, choose the direction of today's speeches. You speak last."
                decision = self._ask(sheriff, ActionKind.SPEECH_ORDER, prompt, SPEECH_DIRECTIONS)
                if decision:
                    self.apply_speech_order(sheriff, decision)
                return

            state.turn_queue = self.speaking_order()
            first = state.roster.get_player(state.turn_queue[0])
            self.judge.announce(f"🗣️ Day {state.day} speeches begin with {first.name}.")

        if not state.turn_queue:
            state.move_to(Step.VOTE)
            return

        actor = state.roster.get_player(state.turn_queue[0])
        prompt = "It is your turn to speak. Share your thoughts with the table."
        decision = self._ask(actor, ActionKind.DAY_SPEECH, prompt, self.speech_options(actor),
                             text_for=("speak",), require_text=True)
        if decision:
            self.apply_speech(actor, decision)

    def apply_speech(self, actor: Player, decision: Decision) -> None:
        if decision.choice == "self_destruct":
            self.self_destruct(actor)
            return

        self.judge.player_speaks(actor, decision.text or "...")
        if self.game_state.event_emitter:
            self.game_state.event_emitter.emit_speech(actor.id, decision.text or "", self.game_state.day)
        self.pop_turn(actor.id)

    # ---- Last words -------------------------------------------------------

    def run_last_words(self) -> None:
        state = self.game_state
        exiled = state.roster.get_player(state.exiled_id) if state.exiled_id else None
        if exiled is None:
            self.after_elimination(Step.END_DAY)
            return

        options = [ActionOption("done", "Finish")]
        prompt = "You have been exiled. Say your last words."
        decision = self._ask(exiled, ActionKind.LAST_WORDS, prompt, options, text_for=("done",))
        if decision:
            self.apply_last_words(exiled, decision)

    def apply_last_words(self, actor: Player, decision: Decision) -> None:
        if decision.text:
            self.judge.announce(f"🕯️ {actor.name}'s last words: {decision.text}")
        else:
            self.judge.announce(f"🕯️ {actor.name} leaves without a word.")
        self.game_state.exiled_id = None
        self.after_elimination(Step.END_DAY)

    # ---- End of day -------------------------------------------------------

    def run_end_day(self) -> None:
        """Close the day and start the next night."""
        state = self.game_state
        state.day += 1
        state.phase = GamePhase.NIGHT
        state.night.reset()
        state.speech_direction = None
        state.exiled_id = None
        if state.event_emitter:
            state.event_emitter.emit_phase_change(state.phase.value, state.day)
        self.judge.announce(f"🌙 Night {state.day} falls.")
        state.move_to(Step.WOLF_KILL)
