"""
LLM-powered decision provider for casino agents.
Every play/stop decision goes through the LLM; there are no heuristic shortcuts.
On any failure the engine falls back to a safe answer instead of raising.
"""
import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from anthropic import Anthropic

from games.base import GameInfo
from .config import Config

logger = logging.getLogger("casinoarena.strategy")

ANALYSIS_UNAVAILABLE = "Analysis unavailable"
FALLBACK_REASONING = "Error communicating with AI service"

# Only the tail of the history is shown to the model
PROMPT_HISTORY_LIMIT = 5


DECISION_SYSTEM_TEMPLATE = """You are an AI agent playing casino games. You have a current balance of ${balance}.
Available games: {games_list}.

Your goal is to make strategic decisions about which game to play and how much to bet.
Consider your current balance, recent performance, and game odds when making decisions.

Respond with a JSON object containing:
- "action": "play" or "stop" (stop if balance is too low or you want to cash out)
- "gameId": the game to play (if action is "play")
- "betAmount": how much to bet (if action is "play")
- "gameOptions": optional game-specific options, e.g. {{"color": "red"}} for roulette
- "reasoning": brief explanation of your decision

Example response:
{{
  "action": "play",
  "gameId": "blackjack",
  "betAmount": 50,
  "reasoning": "Balance is healthy, betting conservatively on blackjack which has better odds"
}}

Always respond with valid JSON only - no markdown, no extra text."""

DECISION_PROMPT_TEMPLATE = """Current balance: ${balance}
Recent games (last {limit}): {history}

What is your next move?"""

ANALYSIS_PROMPT_TEMPLATE = """Analyze this casino gaming session:
- Player: {player_id}
- Starting balance: ${start_balance:.2f}
- Ending balance: ${end_balance:.2f}
- Total games played: {total_games}
- Wins: {wins}
- Losses: {losses}
- Net change: ${net_change:+.2f}

Provide a brief analysis of the performance and strategy."""


@dataclass
class Decision:
    """A single play/stop decision for one turn."""
    action: str  # play / stop
    game_id: str | None = None
    bet_amount: float = 0.0
    game_options: dict = field(default_factory=dict)
    reasoning: str = ""

    @property
    def is_play(self) -> bool:
        return self.action == "play"

    @classmethod
    def stop(cls, reasoning: str = "") -> "Decision":
        return cls(action="stop", reasoning=reasoning)

    def to_dict(self) -> dict:
        return asdict(self)


class DecisionProvider(ABC):
    """Supplies play/stop decisions and post-session analysis."""

    @abstractmethod
    def get_game_decision(
        self,
        player_id: str,
        balance: float,
        available_games: list[GameInfo],
        recent_history: list,
    ) -> Decision:
        ...

    @abstractmethod
    def analyze_session(
        self,
        player_id: str,
        start_balance: float,
        end_balance: float,
        total_games: int,
        wins: int,
        losses: int,
    ) -> str:
        ...


class StrategyEngine(DecisionProvider):
    """Decision provider backed by the Anthropic Messages API."""

    def __init__(self, config: Config):
        self.config = config
        self.client = Anthropic(api_key=config.anthropic_api_key)
        self.decision_log: list[dict] = []

    def _call_llm(self, system: str | None, prompt: str, max_tokens: int) -> str:
        """Make an LLM API call and return the response text."""
        kwargs = {
            "model": self.config.llm_model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system
        try:
            response = self.client.messages.create(**kwargs)
            return response.content[0].text
        except Exception as e:
            logger.error(f"LLM API call failed: {e}")
            raise

    def _parse_json(self, text: str) -> dict:
        """Parse JSON from LLM response, handling common issues."""
        cleaned = text.strip()
        if cleaned.startswith("```"):
            lines = cleaned.split("\n")
            lines = [l for l in lines if not l.strip().startswith("```")]
            cleaned = "\n".join(lines)

        return json.loads(cleaned)

    def _sanitize(self, raw: dict, available_games: list[GameInfo]) -> Decision:
        """Coerce a raw model response into a well-formed Decision."""
        action = str(raw.get("action", "stop")).lower()
        if action not in ("play", "stop"):
            action = "stop"

        reasoning = str(raw.get("reasoning", ""))
        if action == "stop":
            return Decision.stop(reasoning)

        game_id = raw.get("gameId") or raw.get("game_id")
        if not game_id and available_games:
            game_id = available_games[0].id

        try:
            bet_amount = float(raw.get("betAmount", raw.get("bet_amount", 0)) or 0)
        except (TypeError, ValueError):
            bet_amount = 0.0
        if not math.isfinite(bet_amount):
            bet_amount = 0.0

        options = raw.get("gameOptions") or raw.get("game_options") or {}
        if not isinstance(options, dict):
            options = {}

        return Decision(
            action="play",
            game_id=str(game_id) if game_id else None,
            bet_amount=bet_amount,
            game_options=options,
            reasoning=reasoning,
        )

    def get_game_decision(
        self,
        player_id: str,
        balance: float,
        available_games: list[GameInfo],
        recent_history: list,
    ) -> Decision:
        """
        Ask the LLM whether to keep playing, and if so which game and how much.

        Returns a stop decision if the LLM cannot be reached or answers garbage.
        """
        games_list = ", ".join(f"{g.name} ({g.id}, min bet ${g.min_bet:g})" for g in available_games)
        tail = [
            r.to_dict() if hasattr(r, "to_dict") else r
            for r in recent_history[-PROMPT_HISTORY_LIMIT:]
        ]

        system = DECISION_SYSTEM_TEMPLATE.format(balance=f"{balance:.2f}", games_list=games_list)
        prompt = DECISION_PROMPT_TEMPLATE.format(
            balance=f"{balance:.2f}",
            limit=PROMPT_HISTORY_LIMIT,
            history=json.dumps(tail, indent=2),
        )

        try:
            raw = self._call_llm(system, prompt, self.config.llm_max_tokens)
            decision = self._sanitize(self._parse_json(raw), available_games)
        except Exception as e:
            logger.error(f"Failed to get AI decision for {player_id}: {e}")
            return Decision.stop(FALLBACK_REASONING)

        self.decision_log.append({
            "player_id": player_id,
            "balance": balance,
            "decision": decision.to_dict(),
        })
        if decision.is_play:
            logger.info(
                f"[{player_id}] AI decision: play {decision.game_id} "
                f"for ${decision.bet_amount:.2f} ({decision.reasoning})"
            )
        else:
            logger.info(f"[{player_id}] AI decision: stop ({decision.reasoning})")

        return decision

    def analyze_session(
        self,
        player_id: str,
        start_balance: float,
        end_balance: float,
        total_games: int,
        wins: int,
        losses: int,
    ) -> str:
        """Get a short natural-language review of a finished session."""
        prompt = ANALYSIS_PROMPT_TEMPLATE.format(
            player_id=player_id,
            start_balance=start_balance,
            end_balance=end_balance,
            total_games=total_games,
            wins=wins,
            losses=losses,
            net_change=end_balance - start_balance,
        )
        try:
            return self._call_llm(None, prompt, self.config.analysis_max_tokens).strip()
        except Exception as e:
            logger.error(f"Failed to analyze session for {player_id}: {e}")
            return ANALYSIS_UNAVAILABLE

    def get_decision_log(self) -> list[dict]:
        """Return the full decision log for review."""
        return self.decision_log.copy()
