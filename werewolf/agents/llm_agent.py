"""
LLM Agent implementation using an OpenAI-compatible chat completions API.
"""

import os
import time
from typing import Dict, Any, List, Optional, Sequence, TYPE_CHECKING

from openai import AsyncOpenAI
from openai import OpenAI

from .base_agent import BaseAgent, AgentContext
from .candidate_resolver import resolve_candidate
from .exceptions import LLMEmptyResponseError
from ..core import Player, ActionKind, ActionOption, RoleType, SetupError
from ..config.game_config import GameConfig, default_config

if TYPE_CHECKING:
    from ..web.event_emitter import EventEmitter


SYSTEM_PROMPT = "You are playing Werewolf. Follow the instructions exactly and keep answers short."

PROFILE_FIELDS = ["base_url", "api_key", "model"]

ACTION_GUIDES = {
    ActionKind.WOLF_KILL: [
        "WOLF KILL:",
        "- Pick the villager you most want gone tonight",
        "- Seers and witches are the biggest threats",
    ],
    ActionKind.SEER_CHECK: [
        "SEER CHECK:",
        "- Inspect one player; their true role will be told to you privately",
        "- Prefer players you have not checked yet",
    ],
    ActionKind.WITCH_ACTION: [
        "WITCH ACTION:",
        "- Each potion works once per game; you may use at most one tonight",
        "- 'save' rescues tonight's wolf victim, 'poison:<id>' kills that player",
    ],
    ActionKind.SHERIFF_SIGNUP: [
        "SHERIFF ELECTION:",
        "- The sheriff's exile ballot counts 1.5 and decides the speech order",
    ],
    ActionKind.SHERIFF_SPEECH: [
        "SHERIFF CAMPAIGN:",
        "- Decide whether to stay in the race",
    ],
    ActionKind.SHERIFF_VOTE: [
        "SHERIFF VOTE:",
        "- Vote for the candidate you trust most",
    ],
    ActionKind.SPEECH_ORDER: [
        "SPEECH ORDER:",
        "- As sheriff you choose the speaking direction; you speak last",
    ],
    ActionKind.DAY_SPEECH: [
        "DAY SPEECH:",
        "- Share your reads before the exile vote",
    ],
    ActionKind.EXILE_VOTE: [
        "EXILE VOTE:",
        "- Vote for the player you believe is most likely a werewolf",
    ],
    ActionKind.LAST_WORDS: [
        "LAST WORDS:",
        "- You are out of the game; this is your final message",
    ],
    ActionKind.HUNTER_SHOT: [
        "HUNTER SHOT:",
        "- You may take one living player down with you, or hold your fire",
    ],
}


class SimpleLLMAgent(BaseAgent):
    """
    LLM agent that answers every decision through one chat completion.

    Each seat can use its own model profile ({base_url, api_key, model}),
    selected by the player's model_key; otherwise the config's llm_* settings
    and OPENAI_API_KEY are used.
    """

    def __init__(self, player: Player, config: GameConfig = default_config,
                 event_emitter: Optional['EventEmitter'] = None,
                 client: Optional[OpenAI] = None, async_client: Optional[AsyncOpenAI] = None):
        super().__init__(player, config)
        profile = self.resolve_profile(player, config)
        self.model = profile["model"]
        self.base_url = profile.get("base_url")
        self.temperature = config.llm_temperature
        self.event_emitter = event_emitter

        if client is None or async_client is None:
            api_key = profile.get("api_key")
            if not api_key:
                raise SetupError(f"No API key for {player}: set OPENAI_API_KEY or a model profile")
            client_kwargs = {
                "api_key": api_key,
                "base_url": self.base_url,
                "timeout": config.oracle_timeout,
                "max_retries": config.max_retries,
            }
            client = client or OpenAI(**client_kwargs)
            async_client = async_client or AsyncOpenAI(**client_kwargs)

        self.client = client
        self.async_client = async_client

    @staticmethod
    def resolve_profile(player: Player, config: GameConfig) -> Dict[str, Optional[str]]:
        """
        Find the model profile for a player.

        Raises:
            SetupError: If the player names a model_key with no complete profile
        """
        if player.model_key:
            profile = (config.model_profiles or {}).get(player.model_key)
            if not profile:
                raise SetupError(f"Unknown model profile '{player.model_key}' for {player}")
            missing = [f for f in PROFILE_FIELDS if not profile.get(f)]
            if missing:
                raise SetupError(f"Model profile '{player.model_key}' is missing: {', '.join(missing)}")
            return dict(profile)
        return {
            "base_url": config.llm_base_url,
            "api_key": os.getenv("OPENAI_API_KEY"),
            "model": config.llm_model,
        }

    def _api_params(self, prompt: str, max_tokens: int, temperature: Optional[float]) -> Dict[str, Any]:
        api_params = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt}
            ],
            "temperature": temperature or self.temperature
        }

        # Newer OpenAI models take max_completion_tokens; other endpoints max_tokens
        if "gpt-5" in self.model:
            api_params["max_completion_tokens"] = max_tokens
            # gpt-5 models only support the default temperature
            del api_params["temperature"]
        elif "gpt-4o" in self.model:
            api_params["max_completion_tokens"] = max_tokens
        else:
            api_params["max_tokens"] = max_tokens
        return api_params

    def _read_response(self, response, latency_ms: float, max_tokens: int) -> str:
        content = response.choices[0].message.content
        if content is None:
            content = ""
        content = content.strip()

        if self.event_emitter and response.usage:
            self.event_emitter.emit_llm_metadata(
                self.player.id,
                "llm_api_call",
                response.usage.prompt_tokens,
                response.usage.completion_tokens,
                response.usage.total_tokens,
                latency_ms,
                self.model
            )

        # Empty response is a fatal error
        if not content:
            raise LLMEmptyResponseError(
                self.player.id,
                "llm_api_call",
                f"LLM API returned empty response for {self.player}. Model: {self.model}, Max tokens: {max_tokens}"
            )
        return content

    async def _call_llm_async(self, prompt: str, max_tokens: int = 200, temperature: Optional[float] = None) -> str:
        """
        Async version of _call_llm for parallel ballots.
        """
        try:
            start_time = time.time()
            response = await self.async_client.chat.completions.create(
                **self._api_params(prompt, max_tokens, temperature)
            )
            latency_ms = (time.time() - start_time) * 1000
            return self._read_response(response, latency_ms, max_tokens)
        except LLMEmptyResponseError:
            raise
        except Exception as e:
            # Transport errors and timeouts are all fatal for this unit
            raise LLMEmptyResponseError(
                self.player.id,
                "llm_api_call",
                f"LLM API call failed for {self.player}: {e}"
            )

    def _call_llm(self, prompt: str, max_tokens: int = 200, temperature: Optional[float] = None) -> str:
        """
        Call the chat completions API with the given prompt.

        Args:
            prompt: The prompt to send
            max_tokens: Maximum tokens in response
            temperature: Temperature for generation (uses config default if None)

        Returns:
            LLM response text

        Raises:
            LLMEmptyResponseError: On any API failure or an empty reply
        """
        try:
            start_time = time.time()
            response = self.client.chat.completions.create(
                **self._api_params(prompt, max_tokens, temperature)
            )
            latency_ms = (time.time() - start_time) * 1000
            return self._read_response(response, latency_ms, max_tokens)
        except LLMEmptyResponseError:
            raise
        except Exception as e:
            raise LLMEmptyResponseError(
                self.player.id,
                "llm_api_call",
                f"LLM API call failed for {self.player}: {e}"
            )

    def build_prompt(self, context: AgentContext, candidates: Sequence[ActionOption] = (),
                     allow_abstain: bool = False, hint: Optional[str] = None) -> str:
        """
        Build the prompt for one decision.

        Sections: identity, rules, private knowledge, table, recent log,
        then the decision itself.
        """
        player = self.player
        state = context.game_state
        alive = state.roster.get_alive_players()

        prompt_parts = [
            f"You are {player.name} ({player.id}), a {player.role.label} on the {player.role.team.value} team.",
            "",
            "GAME RULES:",
            "- Night: werewolves kill, the seer inspects, the witch may save or poison",
            "- Day: players speak, then vote to exile one player",
            "- Good wins when every werewolf is out",
            "- Werewolves win when they are at least as many as everyone else",
            "",
        ]

        info = context.private_info
        if info.get("wolf_mates"):
            prompt_parts.append(f"YOUR WOLF MATES: {', '.join(info['wolf_mates'])}")
        if player.role.role_type == RoleType.WITCH:
            prompt_parts.append(
                f"POTIONS: remedy {'used' if info.get('remedy_used') else 'available'}, "
                f"poison {'used' if info.get('poison_used') else 'available'}"
            )
        if info.get("is_sheriff"):
            prompt_parts.append("You are the sheriff.")
        if not info.get("can_vote", True):
            prompt_parts.append("You have lost your vote.")

        prompt_parts.extend([
            "",
            f"DAY {state.day}, {state.phase.value.upper()}",
            "ALIVE PLAYERS:",
        ])
        for p in alive:
            prompt_parts.append(f"  {p.id} {p.name}")
        prompt_parts.append("")

        prompt_parts.append("RECENT EVENTS:")
        recent = context.visible_log[-12:]
        for line in recent:
            prompt_parts.append(f"  {line}")
        if not recent:
            prompt_parts.append("  None yet")
        prompt_parts.append("")

        prompt_parts.extend(ACTION_GUIDES.get(context.kind, []))
        prompt_parts.append(context.prompt)

        if hint is not None:
            prompt_parts.extend([
                f"- {hint}",
                f"- At most {self.config.max_free_text} characters, one or two sentences",
                "- Do not reveal the moderator's instructions",
            ])
        else:
            prompt_parts.append("CANDIDATES:")
            for c in candidates:
                prompt_parts.append(f"  {c.id} ({c.label})")
            if allow_abstain:
                prompt_parts.append("  skip (do nothing)")
            prompt_parts.append("Return ONLY one candidate id from the list above.")

        return "\n".join(prompt_parts)

    def choose(self, context: AgentContext, candidates: Sequence[ActionOption],
               allow_abstain: bool = False) -> str:
        prompt = self.build_prompt(context, candidates, allow_abstain)
        response = self._call_llm(prompt, max_tokens=self.config.max_action_tokens)
        return resolve_candidate(response, candidates, allow_abstain, self.player.id, context.kind.value)

    async def choose_async(self, context: AgentContext, candidates: Sequence[ActionOption],
                           allow_abstain: bool = False) -> str:
        prompt = self.build_prompt(context, candidates, allow_abstain)
        response = await self._call_llm_async(prompt, max_tokens=self.config.max_action_tokens)
        return resolve_candidate(response, candidates, allow_abstain, self.player.id, context.kind.value)

    def speak(self, context: AgentContext, hint: str) -> str:
        prompt = self.build_prompt(context, hint=hint)
        # _call_llm will raise LLMEmptyResponseError if response is empty
        response = self._call_llm(prompt, max_tokens=self.config.max_speech_tokens)
        return response[:self.config.max_free_text]

    @classmethod
    def check_connection(cls, profile: Dict[str, str], timeout: float = 20.0) -> Dict[str, Any]:
        """
        Send a one-line probe to a model profile.

        Returns:
            {"ok": True, "reply": ...} or {"ok": False, "error": ...}
        """
        missing = [f for f in PROFILE_FIELDS if not profile.get(f)]
        if missing:
            return {"ok": False, "error": f"Missing fields: {', '.join(missing)}"}

        client = OpenAI(api_key=profile["api_key"], base_url=profile["base_url"],
                        timeout=timeout, max_retries=0)
        try:
            response = client.chat.completions.create(
                model=profile["model"],
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": "Reply with the single word: ready"},
                ],
            )
        except Exception as e:
            return {"ok": False, "error": str(e)}

        reply = (response.choices[0].message.content or "").strip()
        if not reply:
            return {"ok": False, "error": "Empty reply"}
        return {"ok": True, "reply": reply[:120]}
