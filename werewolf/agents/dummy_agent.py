"""
Dummy Agent implementation with deterministic behavior.
"""

import random
from typing import List, Sequence, Set

from .base_agent import BaseAgent, AgentContext
from ..core import Player, ActionKind, ActionOption, ABSTAIN_ID
from ..config.game_config import GameConfig, default_config


WITCH_SAVE_CHANCE = 0.55
WITCH_POISON_CHANCE = 0.35
SHERIFF_RUN_CHANCE = 0.5

SPEECHES = [
    "I have no hard information yet, so I will watch how people vote.",
    "Last night tells us something. Let's not rush the vote.",
    "I am a good player. Ask me anything.",
    "Someone has been very quiet. That worries me.",
]

CAMPAIGN_SPEECHES = [
    "Give me the badge and I will keep the village organised.",
    "I will use the badge to lead us to the wolves.",
]

LAST_WORDS = [
    "I was on your side. Find the wolves.",
    "Remember who pushed the vote against me.",
]

# Fixed answers for decisions that do not pick a player
PREFERRED_OPTIONS = {
    ActionKind.SHERIFF_SPEECH: "stay",
    ActionKind.SPEECH_ORDER: "forward",
    ActionKind.DAY_SPEECH: "speak",
    ActionKind.LAST_WORDS: "done",
}


class DummyAgent(BaseAgent):
    """
    Simple dummy agent with seeded random behavior:
    - Wolves: kill a random non-wolf
    - Seer: inspect a random player not inspected before
    - Witch: save tonight's victim (55%), otherwise poison someone (35%), otherwise skip
    - Votes: random living player, wolves avoid their mates when they can
    - Speeches: canned lines
    """

    def __init__(self, player: Player, config: GameConfig = default_config):
        super().__init__(player, config)
        # Use seed from config if provided, otherwise use None (non-deterministic)
        seed = config.random_seed
        if seed is not None:
            # Combine seed with seat so each player has different but reproducible randomness
            self.random = random.Random(seed + player.seat)
        else:
            self.random = random.Random()
        self.checked_players: Set[str] = set()

    def choose(self, context: AgentContext, candidates: Sequence[ActionOption],
               allow_abstain: bool = False) -> str:
        ids = [c.id for c in candidates]
        if not ids:
            return ABSTAIN_ID

        preferred = PREFERRED_OPTIONS.get(context.kind)
        if preferred in ids:
            return preferred

        if context.kind == ActionKind.WITCH_ACTION:
            return self._witch_choice(ids, allow_abstain)

        if context.kind == ActionKind.SHERIFF_SIGNUP:
            if "run" in ids and self.random.random() < SHERIFF_RUN_CHANCE:
                return "run"
            return "decline" if "decline" in ids else ids[0]

        if context.kind == ActionKind.SEER_CHECK:
            unchecked = [i for i in ids if i not in self.checked_players]
            target = self.random.choice(unchecked or ids)
            self.checked_players.add(target)
            return target

        if context.kind in (ActionKind.EXILE_VOTE, ActionKind.SHERIFF_VOTE, ActionKind.HUNTER_SHOT):
            return self.random.choice(self._avoid_mates(context, ids))

        return self.random.choice(ids)

    def _witch_choice(self, ids: List[str], allow_abstain: bool) -> str:
        if "save" in ids and self.random.random() < WITCH_SAVE_CHANCE:
            return "save"
        poisons = [i for i in ids if i.startswith("poison:")]
        if poisons and self.random.random() < WITCH_POISON_CHANCE:
            return self.random.choice(poisons)
        if allow_abstain:
            return ABSTAIN_ID
        return ids[0]

    def _avoid_mates(self, context: AgentContext, ids: List[str]) -> List[str]:
        mates = set(context.private_info.get("wolf_mates", []))
        if not mates:
            return ids
        others = [i for i in ids if i not in mates]
        return others or ids

    def speak(self, context: AgentContext, hint: str) -> str:
        if context.kind == ActionKind.SHERIFF_SPEECH:
            return self.random.choice(CAMPAIGN_SPEECHES)
        if context.kind == ActionKind.LAST_WORDS:
            return self.random.choice(LAST_WORDS)
        return self.random.choice(SPEECHES)
