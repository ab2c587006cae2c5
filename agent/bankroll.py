"""
Per-agent bankroll ledger: balance, running counters and the round history.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class RoundRecord:
    """One settled bet. Never modified after it is appended."""
    game_id: str
    bet: float
    won: bool
    payout: float
    balance: float  # Balance after the bet settled
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "game": self.game_id,
            "bet": self.bet,
            "won": self.won,
            "payout": self.payout,
            "balance": self.balance,
            "timestamp": self.timestamp,
        }


def _percent(numerator: float, denominator: float) -> float:
    return round(numerator / denominator * 100, 2)


@dataclass
class Bankroll:
    """
    Tracks one player's money and results.

    Counters are updated as rounds are recorded and are never rebuilt from
    the history, so wins + losses always equals len(history).
    """

    initial_balance: float
    balance: float = 0.0
    wins: int = 0
    losses: int = 0
    total_bet: float = 0.0
    total_won: float = 0.0
    history: list[RoundRecord] = field(default_factory=list)

    def __post_init__(self):
        if self.balance == 0.0:
            self.balance = self.initial_balance

    @property
    def games_played(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        """Win percentage, 0 when nothing has been played yet."""
        if self.games_played == 0:
            return 0.0
        return _percent(self.wins, self.games_played)

    @property
    def net_profit(self) -> float:
        return self.balance - self.initial_balance

    @property
    def roi(self) -> float | None:
        """Return on the starting balance as a percentage."""
        if self.initial_balance == 0:
            return None
        return _percent(self.net_profit, self.initial_balance)

    def record_result(self, game_id: str, wager: float, won: bool, payout: float, new_balance: float) -> RoundRecord:
        """Record a settled bet using the backend-reported balance."""
        record = RoundRecord(
            game_id=game_id,
            bet=wager,
            won=won,
            payout=payout,
            balance=new_balance,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        self.history.append(record)
        self.balance = new_balance
        self.total_bet += wager

        if won:
            self.wins += 1
            self.total_won += payout
        else:
            self.losses += 1

        return record

    def get_summary(self) -> str:
        """Get a summary of bankroll status."""
        roi = f"{self.roi:+.2f}%" if self.roi is not None else "n/a"
        return (
            f"Balance: ${self.balance:.2f}\n"
            f"Initial: ${self.initial_balance:.2f}\n"
            f"Net P&L: ${self.net_profit:+.2f} (ROI {roi})\n"
            f"Games: {self.games_played} (W: {self.wins}, L: {self.losses})\n"
            f"Win rate: {self.win_rate:.2f}%\n"
            f"Wagered: ${self.total_bet:.2f} | Returned: ${self.total_won:.2f}\n"
        )
