"""
In-memory casino backend for offline runs.
Simple house-edge games; not a fairness model.
"""
import logging
import math
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .base import FALLBACK_GAMES, BetOutcome, CasinoAPIError, GameBackend, GameInfo

logger = logging.getLogger("casinoarena.local")

# game id -> (win probability, payout multiplier on the stake)
HOUSE_ODDS = {
    "slots": (0.45, 2.0),
    "blackjack": (0.48, 2.0),
    "roulette": (18 / 37, 2.0),
}

ROULETTE_COLORS = ("red", "black")


@dataclass
class LocalAccount:
    player_id: str
    balance: float
    history: list[dict] = field(default_factory=list)


class LocalCasino(GameBackend):
    """Holds accounts in memory and settles bets with a seeded RNG."""

    def __init__(self, games: list[GameInfo] | None = None, seed: int | None = None):
        self.games = {g.id: g for g in (games or FALLBACK_GAMES)}
        self.rng = random.Random(seed)
        self.accounts: dict[str, LocalAccount] = {}

    def _account(self, player_id: str) -> LocalAccount:
        account = self.accounts.get(player_id)
        if account is None:
            raise CasinoAPIError(f"Unknown player {player_id}", status_code=404)
        return account

    def create_account(self, player_id: str, initial_balance: float) -> dict:
        if player_id in self.accounts:
            raise CasinoAPIError(f"Account {player_id} already exists", status_code=409)
        if initial_balance < 0:
            raise CasinoAPIError("Initial balance cannot be negative", status_code=400)
        self.accounts[player_id] = LocalAccount(player_id=player_id, balance=float(initial_balance))
        logger.info(f"Account created for {player_id} (balance={initial_balance:.2f})")
        return {"playerId": player_id, "balance": float(initial_balance)}

    def get_balance(self, player_id: str) -> float:
        return self._account(player_id).balance

    def get_available_games(self) -> list[GameInfo]:
        return list(self.games.values())

    def _spin(self, game_id: str, options: dict) -> bool:
        win_prob, _ = HOUSE_ODDS.get(game_id, (0.45, 2.0))
        if game_id == "roulette":
            color = str(options.get("color", "red")).lower()
            if color not in ROULETTE_COLORS:
                raise CasinoAPIError(f"Unsupported roulette color {color!r}", status_code=400)
        return self.rng.random() < win_prob

    def place_bet(
        self,
        player_id: str,
        game_id: str,
        bet_amount: float,
        options: dict | None = None,
    ) -> BetOutcome:
        account = self._account(player_id)
        game = self.games.get(game_id)
        if game is None:
            raise CasinoAPIError(f"Unknown game {game_id!r}", status_code=404)
        if not math.isfinite(bet_amount) or bet_amount <= 0:
            raise CasinoAPIError("Bet must be a positive amount", status_code=400)
        if bet_amount < game.min_bet:
            raise CasinoAPIError(
                f"Bet {bet_amount:.2f} below {game.name} minimum {game.min_bet:.2f}",
                status_code=400,
            )
        if bet_amount > account.balance:
            raise CasinoAPIError("Insufficient funds", status_code=400)

        won = self._spin(game_id, options or {})
        _, multiplier = HOUSE_ODDS.get(game_id, (0.45, 2.0))
        payout = round(bet_amount * multiplier, 2) if won else 0.0

        account.balance = round(account.balance - bet_amount + payout, 2)
        account.history.append({
            "game": game_id,
            "bet": bet_amount,
            "won": won,
            "payout": payout,
            "balance": account.balance,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
        return BetOutcome(won=won, payout=payout, new_balance=account.balance)

    def get_game_history(self, player_id: str, limit: int = 10) -> list[dict]:
        history = self._account(player_id).history
        return history[-limit:] if limit > 0 else []

    def get_player_stats(self, player_id: str) -> dict:
        account = self._account(player_id)
        wins = sum(1 for h in account.history if h["won"])
        return {
            "playerId": player_id,
            "balance": account.balance,
            "totalGames": len(account.history),
            "wins": wins,
            "losses": len(account.history) - wins,
            "totalBet": sum(h["bet"] for h in account.history),
            "totalWon": sum(h["payout"] for h in account.history),
        }
