"""
Night phase handler: werewolf kill, seer check, witch potions and settlement.
"""

from typing import Dict, List

from ..core import (
    GameState, GamePhase, Judge, Player, RoleType, Step, ActionKind, ActionOption,
    DeathCause, RuleViolationError, tally, ABSTAIN_ID,
)
from ..agents import BaseAgent
from .base import PhaseHandler, Decision, player_options


class NightPhaseHandler(PhaseHandler):
    """Handles night operations in order: wolves, seer, witch, then settlement."""

    def __init__(self, game_state: GameState, judge: Judge, agents: Dict[str, BaseAgent]):
        super().__init__(game_state, judge, agents)

    def _wolf_ids(self) -> List[str]:
        return [w.id for w in self.game_state.roster.get_wolves()]

    # ---- Werewolves -------------------------------------------------------

    def run_wolf_kill(self) -> None:
        """
        Ask the next living wolf for a ballot. Once every wolf has voted the
        ballots are tallied (unweighted, random tie-break) into tonight's target.
        """
        state = self.game_state
        if state.turn_queue is None:
            state.turn_queue = self._wolf_ids()
            self.judge.announce("🐺 Werewolves, open your eyes and choose tonight's victim.")

        if not state.turn_queue:
            self._settle_wolf_ballots()
            return

        actor = state.roster.get_player(state.turn_queue[0])
        candidates = state.roster.get_non_wolves()
        prompt = "You are a werewolf. Choose who to kill tonight."
        decision = self._ask(actor, ActionKind.WOLF_KILL, prompt, player_options(candidates),
                             allow_abstain=True)
        if decision:
            self.apply_wolf_kill(actor, decision)

    def apply_wolf_kill(self, actor: Player, decision: Decision) -> None:
        state = self.game_state
        if decision.choice == ABSTAIN_ID:
            message = f"🐺 {actor.name} abstains."
        else:
            target = self.judge.require_alive(decision.choice, actor.id)
            if target.is_wolf:
                raise RuleViolationError(f"Werewolves cannot kill their own: {target}")
            state.night.wolf_ballots[actor.id] = target.id
            message = f"🐺 {actor.name} votes to kill {target.name}."
        self.judge.announce(message, audience=self._wolf_ids())
        self.pop_turn(actor.id)

    def _settle_wolf_ballots(self) -> None:
        state = self.game_state
        result = tally(state.night.wolf_ballots, rng=state.rng)
        state.night.wolf_target = result.winner
        wolves = self._wolf_ids()
        if result.winner:
            target = state.roster.get_player(result.winner)
            self.judge.announce(f"🐺 The pack settles on {target.name}.", audience=wolves)
        else:
            self.judge.announce("🐺 The pack kills no one tonight.", audience=wolves)
        state.move_to(Step.SEER_CHECK)

    # ---- Seer -------------------------------------------------------------

    def run_seer_check(self) -> None:
        state = self.game_state
        seer = state.roster.get_first_alive(RoleType.SEER)
        if seer is None:
            state.move_to(Step.WITCH_ACTION)
            return

        candidates = state.roster.others_alive(seer.id)
        prompt = "You are the seer. Choose one player to inspect."
        decision = self._ask(seer, ActionKind.SEER_CHECK, prompt, player_options(candidates))
        if decision:
            self.apply_seer_check(seer, decision)

    def apply_seer_check(self, actor: Player, decision: Decision) -> None:
        state = self.game_state
        target = self.judge.require_alive(decision.choice, actor.id)
        state.night.seer_target = target.id
        self.judge.announce(f"🔮 {target.name} is a {target.role.label}.", audience=[actor.id])
        state.move_to(Step.WITCH_ACTION)

    # ---- Witch ------------------------------------------------------------

    def witch_options(self, witch: Player) -> List[ActionOption]:
        """
        Potions the witch may use tonight.

        save: a wolf target exists, it is not the witch, remedy unused.
        poison:<id>: any living player but the witch, poison unused.
        """
        state = self.game_state
        options = []
        target_id = state.night.wolf_target
        if target_id and target_id != witch.id and not witch.flags["remedy_used"]:
            target = state.roster.get_player(target_id)
            options.append(ActionOption("save", f"Save {target.name}"))
        if not witch.flags["poison_used"]:
            for p in state.roster.others_alive(witch.id):
                options.append(ActionOption(f"poison:{p.id}", f"Poison {p.name}"))
        return options

    def run_witch_action(self) -> None:
        state = self.game_state
        witch = state.roster.get_first_alive(RoleType.WITCH)
        if witch is None:
            state.move_to(Step.NIGHT_SETTLE)
            return

        options = self.witch_options(witch)
        if not options:
            state.move_to(Step.NIGHT_SETTLE)
            return

        target = state.roster.get_player(state.night.wolf_target) if state.night.wolf_target else None
        if target is None:
            victim = "Nobody was attacked tonight."
        elif target.id == witch.id:
            victim = "You were attacked tonight."
        else:
            victim = f"{target.name} was attacked tonight."
        prompt = f"You are the witch. {victim} You may use one potion or skip."
        decision = self._ask(witch, ActionKind.WITCH_ACTION, prompt, options,
                             allow_abstain=True, auto_single=False)
        if decision:
            self.apply_witch_action(witch, decision)

    def apply_witch_action(self, actor: Player, decision: Decision) -> None:
        """
        Apply the witch's choice.

        Raises:
            RuleViolationError: Reused potion, self-save, or no one to save
        """
        state = self.game_state
        night = state.night
        choice = decision.choice

        if choice == "save":
            if actor.flags["remedy_used"]:
                raise RuleViolationError("The remedy has already been used")
            if night.wolf_target is None:
                raise RuleViolationError("There is no one to save tonight")
            if night.wolf_target == actor.id:
                raise RuleViolationError("The witch cannot save herself")
            actor.flags["remedy_used"] = True
            night.saved = True
            target = state.roster.get_player(night.wolf_target)
            self.judge.announce(f"🧪 You used the remedy on {target.name}.", audience=[actor.id])
        elif choice.startswith("poison:"):
            if actor.flags["poison_used"]:
                raise RuleViolationError("The poison has already been used")
            target = self.judge.require_alive(choice.split(":", 1)[1], actor.id)
            actor.flags["poison_used"] = True
            night.poison_target = target.id
            self.judge.announce(f"☠️ You poured poison for {target.name}.", audience=[actor.id])
        elif choice != ABSTAIN_ID:
            raise RuleViolationError(f"Unknown witch action: {choice}")

        state.move_to(Step.NIGHT_SETTLE)

    # ---- Settlement -------------------------------------------------------

    def run_night_settle(self) -> None:
        """
        Resolve the night and open the day.

        The wolf target dies unless saved; the poison target always dies.
        A player hit by both is recorded as poisoned.
        """
        state = self.game_state
        night = state.night

        deaths: Dict[str, DeathCause] = {}
        if night.wolf_target and not night.saved:
            deaths[night.wolf_target] = DeathCause.WOLF
        if night.poison_target:
            deaths[night.poison_target] = DeathCause.POISON

        state.phase = GamePhase.DAY
        if state.event_emitter:
            state.event_emitter.emit_phase_change(state.phase.value, state.day)
        self.judge.announce(f"☀️ Day {state.day} dawns.")

        if not deaths:
            self.judge.announce("Last night was peaceful. No one died.")
        else:
            victims = [state.roster.get_player(pid) for pid in deaths]
            self.judge.announce(f"Last night these players died: {self.judge.death_summary(victims)}.")
            for victim in victims:
                self.judge.eliminate(victim.id, deaths[victim.id], announce=False)

        if self.judge.check_win():
            return

        self.after_elimination(self.day_opening_step())
