"""
Base casino backend interface and shared game types.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class CasinoAPIError(Exception):
    """Raised when the casino backend cannot fulfil a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class GameInfo:
    """A playable game from the casino catalog."""
    id: str
    name: str
    min_bet: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "GameInfo":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            min_bet=float(data.get("minBet", data.get("min_bet", 0.0)) or 0.0),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "minBet": self.min_bet}


@dataclass
class BetOutcome:
    """Result of a single bet as reported by the backend."""
    won: bool
    payout: float
    new_balance: float
    details: dict = field(default_factory=dict)  # Backend-specific extras

    @classmethod
    def from_dict(cls, data: dict) -> "BetOutcome":
        known = {"won", "payout", "newBalance"}
        return cls(
            won=bool(data["won"]),
            payout=float(data.get("payout", 0.0) or 0.0),
            new_balance=float(data["newBalance"]),
            details={k: v for k, v in data.items() if k not in known},
        )


# Used when the backend catalog cannot be fetched
FALLBACK_GAMES = (
    GameInfo(id="blackjack", name="Blackjack", min_bet=10),
    GameInfo(id="roulette", name="Roulette", min_bet=5),
    GameInfo(id="slots", name="Slots", min_bet=1),
)


class GameBackend(ABC):
    """Abstract casino backend. Holds the authoritative balances."""

    @abstractmethod
    def create_account(self, player_id: str, initial_balance: float) -> dict:
        """Create a player account. Returns a dict with at least ``balance``."""
        ...

    @abstractmethod
    def get_balance(self, player_id: str) -> float:
        ...

    @abstractmethod
    def get_available_games(self) -> list[GameInfo]:
        ...

    @abstractmethod
    def place_bet(
        self,
        player_id: str,
        game_id: str,
        bet_amount: float,
        options: dict | None = None,
    ) -> BetOutcome:
        """
        Place a bet on a game.

        Args:
            player_id: Player identifier
            game_id: Game identifier from the catalog
            bet_amount: Amount to bet, must be positive
            options: Game-specific options (e.g. {"color": "red"} for roulette)

        Returns:
            BetOutcome with win flag, payout and the new balance
        """
        ...

    @abstractmethod
    def get_game_history(self, player_id: str, limit: int = 10) -> list[dict]:
        ...

    @abstractmethod
    def get_player_stats(self, player_id: str) -> dict:
        ...
