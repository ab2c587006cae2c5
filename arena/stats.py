"""
End-of-run aggregation over the whole cohort.
"""
from dataclasses import dataclass, field

from agent.player import AgentSnapshot


@dataclass(frozen=True)
class CohortSummary:
    total_start_balance: float
    total_end_balance: float
    total_profit: float
    total_games: int
    total_wins: int
    total_losses: int
    win_rate: float | None  # None when no games were played

    @property
    def win_rate_display(self) -> str:
        if self.win_rate is None:
            return "n/a (no games played)"
        return f"{self.win_rate:.2f}%"

    def to_dict(self) -> dict:
        return {
            "total_start_balance": self.total_start_balance,
            "total_end_balance": self.total_end_balance,
            "total_profit": round(self.total_profit, 2),
            "total_games": self.total_games,
            "total_wins": self.total_wins,
            "total_losses": self.total_losses,
            "win_rate": self.win_rate,
        }


def summarize(snapshots: list[AgentSnapshot]) -> CohortSummary:
    """Aggregate per-agent snapshots into cohort totals."""
    total_start = sum(s.start_balance for s in snapshots)
    total_end = sum(s.current_balance for s in snapshots)
    total_games = sum(s.total_games for s in snapshots)
    total_wins = sum(s.wins for s in snapshots)

    win_rate = None
    if total_games > 0:
        win_rate = round(total_wins / total_games * 100, 2)

    return CohortSummary(
        total_start_balance=total_start,
        total_end_balance=total_end,
        total_profit=total_end - total_start,
        total_games=total_games,
        total_wins=total_wins,
        total_losses=sum(s.losses for s in snapshots),
        win_rate=win_rate,
    )


@dataclass(frozen=True)
class AgentReport:
    snapshot: AgentSnapshot
    analysis: str

    def to_dict(self) -> dict:
        return {**self.snapshot.to_dict(), "analysis": self.analysis}


@dataclass
class FinalReport:
    rounds_played: int
    stop_cause: str  # limit / exhausted / stopped
    agents: list[AgentReport] = field(default_factory=list)
    summary: CohortSummary | None = None

    def to_dict(self) -> dict:
        return {
            "rounds_played": self.rounds_played,
            "stop_cause": self.stop_cause,
            "agents": [a.to_dict() for a in self.agents],
            "summary": self.summary.to_dict() if self.summary else None,
        }

    def render(self) -> str:
        """Human-readable report, one line per fact."""
        lines = ["===== FINAL STATISTICS ====="]
        for entry in self.agents:
            s = entry.snapshot
            roi = f"{s.roi:.2f}%" if s.roi is not None else "n/a"
            lines += [
                "",
                f"Agent: {s.agent_id}",
                f"  Starting Balance: ${s.start_balance:.2f}",
                f"  Final Balance: ${s.current_balance:.2f}",
                f"  Net Profit/Loss: ${s.net_profit:.2f}",
                f"  ROI: {roi}",
                f"  Total Games: {s.total_games}",
                f"  Wins: {s.wins}",
                f"  Losses: {s.losses}",
                f"  Win Rate: {s.win_rate:.2f}%",
                f"  Total Bet: ${s.total_bet:.2f}",
                f"  Total Won: ${s.total_won:.2f}",
                f"  AI Analysis: {entry.analysis}",
            ]

        if self.summary:
            t = self.summary
            lines += [
                "",
                "===== AGGREGATE STATISTICS =====",
                f"Total Starting Balance: ${t.total_start_balance:.2f}",
                f"Total Final Balance: ${t.total_end_balance:.2f}",
                f"Total Profit/Loss: ${t.total_profit:.2f}",
                f"Total Games Played: {t.total_games}",
                f"Total Wins: {t.total_wins}",
                f"Total Losses: {t.total_losses}",
                f"Overall Win Rate: {t.win_rate_display}",
            ]
        return "\n".join(lines)
