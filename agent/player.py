"""
A single casino player agent.

Lifecycle: UNINITIALIZED -> ACTIVE -> INACTIVE. INACTIVE is terminal; an
inactive agent keeps its record for the final report but never plays again.
"""
import math
from dataclasses import dataclass
from enum import Enum

from games.base import BetOutcome, GameBackend, GameInfo
from .bankroll import Bankroll, RoundRecord
from .config import Config
from .reporter import Reporter
from .strategy_engine import ANALYSIS_UNAVAILABLE, DecisionProvider


class AgentState(Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    INACTIVE = "inactive"


class ExitReason(Enum):
    STOPPED = "stopped"            # decision provider chose to stop
    OUT_OF_FUNDS = "out_of_funds"
    INVALID_BET = "invalid_bet"


class TurnStatus(Enum):
    PLAYED = "played"
    IDLE = "idle"                  # agent was not active
    STOPPED = "stopped"
    OUT_OF_FUNDS = "out_of_funds"
    INVALID_BET = "invalid_bet"
    FAILED = "failed"              # collaborator error, retried next round


@dataclass
class TurnResult:
    """Outcome of one turn. Only PLAYED carries a bet outcome."""
    status: TurnStatus
    outcome: BetOutcome | None = None
    record: RoundRecord | None = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is TurnStatus.PLAYED


@dataclass(frozen=True)
class AgentSnapshot:
    """Point-in-time statistics for one agent."""
    agent_id: str
    start_balance: float
    current_balance: float
    net_profit: float
    roi: float | None
    total_games: int
    wins: int
    losses: int
    win_rate: float
    total_bet: float
    total_won: float
    active: bool
    exit_reason: str | None = None

    def to_dict(self) -> dict:
        return {
            "agent_id": self.agent_id,
            "start_balance": self.start_balance,
            "current_balance": self.current_balance,
            "net_profit": round(self.net_profit, 2),
            "roi": self.roi,
            "total_games": self.total_games,
            "wins": self.wins,
            "losses": self.losses,
            "win_rate": self.win_rate,
            "total_bet": self.total_bet,
            "total_won": self.total_won,
            "active": self.active,
            "exit_reason": self.exit_reason,
        }


class PlayerAgent:
    """One simulated player with its own balance, history and lifecycle."""

    def __init__(
        self,
        number: int,
        config: Config,
        backend: GameBackend,
        provider: DecisionProvider,
        reporter: Reporter | None = None,
    ):
        self.id = f"agent_{number}"
        self.config = config
        self.backend = backend
        self.provider = provider
        self.reporter = reporter or Reporter()
        self.start_balance = config.initial_balance
        self.bankroll = Bankroll(initial_balance=config.initial_balance)
        self.state = AgentState.UNINITIALIZED
        self.exit_reason: ExitReason | None = None

    @property
    def is_active(self) -> bool:
        return self.state is AgentState.ACTIVE

    @property
    def balance(self) -> float:
        return self.bankroll.balance

    @property
    def history(self) -> list[RoundRecord]:
        return self.bankroll.history

    def initialize(self) -> bool:
        """Open the remote account. Failure leaves the agent UNINITIALIZED."""
        if self.state is not AgentState.UNINITIALIZED:
            return self.is_active
        try:
            account = self.backend.create_account(self.id, self.start_balance)
            balance = float(account["balance"])
        except Exception as e:
            self.reporter.agent_init_failed(self.id, e)
            return False

        self.bankroll.balance = balance
        self.state = AgentState.ACTIVE
        self.reporter.agent_initialized(self.id, balance)
        return True

    def _deactivate(self, reason: ExitReason, detail: str = "") -> TurnResult:
        self.state = AgentState.INACTIVE
        self.exit_reason = reason
        self.reporter.agent_exited(self.id, reason, detail)
        return TurnResult(status=TurnStatus(reason.value), reason=detail)

    def play_round(self, available_games: list[GameInfo]) -> TurnResult:
        """
        Play one turn: refresh the balance, ask for a decision, place the bet.

        Collaborator errors never escape; they produce a FAILED result and
        leave the agent ACTIVE so it is retried next round.
        """
        if not self.is_active:
            return TurnResult(status=TurnStatus.IDLE)

        try:
            balance = self.backend.get_balance(self.id)
            self.bankroll.balance = balance

            if balance <= 0:
                return self._deactivate(ExitReason.OUT_OF_FUNDS, f"balance ${balance:.2f}")

            decision = self.provider.get_game_decision(
                self.id, balance, available_games, list(self.bankroll.history)
            )

            if not decision.is_play:
                return self._deactivate(ExitReason.STOPPED, decision.reasoning)

            # Silently clamped to what the agent can cover
            bet_amount = min(decision.bet_amount, balance)
            if not math.isfinite(bet_amount) or bet_amount <= 0:
                return self._deactivate(ExitReason.INVALID_BET, f"bet ${bet_amount:.2f}")

            outcome = self.backend.place_bet(
                self.id, decision.game_id, bet_amount, decision.game_options or {}
            )
        except Exception as e:
            self.reporter.turn_failed(self.id, e)
            return TurnResult(status=TurnStatus.FAILED, reason=str(e))

        record = self.bankroll.record_result(
            game_id=decision.game_id,
            wager=bet_amount,
            won=outcome.won,
            payout=outcome.payout,
            new_balance=outcome.new_balance,
        )
        self.reporter.bet_settled(self.id, record)
        return TurnResult(status=TurnStatus.PLAYED, outcome=outcome, record=record)

    def get_snapshot(self) -> AgentSnapshot:
        br = self.bankroll
        return AgentSnapshot(
            agent_id=self.id,
            start_balance=self.start_balance,
            current_balance=br.balance,
            net_profit=br.net_profit,
            roi=br.roi,
            total_games=br.games_played,
            wins=br.wins,
            losses=br.losses,
            win_rate=br.win_rate,
            total_bet=br.total_bet,
            total_won=br.total_won,
            active=self.is_active,
            exit_reason=self.exit_reason.value if self.exit_reason else None,
        )

    def get_session_analysis(self) -> str:
        """Best-effort LLM review of the session; never raises."""
        snap = self.get_snapshot()
        try:
            return self.provider.analyze_session(
                self.id,
                snap.start_balance,
                snap.current_balance,
                snap.total_games,
                snap.wins,
                snap.losses,
            )
        except Exception as e:
            self.reporter.analysis_failed(self.id, e)
            return ANALYSIS_UNAVAILABLE

    def __repr__(self) -> str:
        return f"PlayerAgent({self.id}, {self.state.value}, balance={self.balance:.2f})"
