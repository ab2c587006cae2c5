"""
Run observers. The agent and the arena report what happens through a
Reporter instead of writing to a logger directly.
"""
import logging

logger = logging.getLogger("casinoarena.report")


class Reporter:
    """Base observer. Every hook is a no-op, which keeps tests quiet."""

    def catalog_fallback(self, error: Exception, games: list) -> None:
        pass

    def agent_initialized(self, agent_id: str, balance: float) -> None:
        pass

    def agent_init_failed(self, agent_id: str, error: Exception) -> None:
        pass

    def cohort_ready(self, size: int, requested: int) -> None:
        pass

    def run_started(self, cohort_size: int, max_rounds: int | None) -> None:
        pass

    def round_started(self, round_num: int, max_rounds: int | None, active_count: int) -> None:
        pass

    def bet_settled(self, agent_id: str, record) -> None:
        pass

    def agent_exited(self, agent_id: str, reason, detail: str = "") -> None:
        pass

    def turn_failed(self, agent_id: str, error: Exception) -> None:
        pass

    def intermediate_report(self, round_num: int, snapshots: list) -> None:
        pass

    def analysis_failed(self, agent_id: str, error: Exception) -> None:
        pass

    def run_finished(self, report) -> None:
        pass


class LoggingReporter(Reporter):
    """Writes every event to the ``casinoarena.report`` logger."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def catalog_fallback(self, error, games):
        self.log.error(f"Failed to fetch available games: {error}")
        self.log.info(f"Using fallback games list: {', '.join(g.id for g in games)}")

    def agent_initialized(self, agent_id, balance):
        self.log.info(f"Agent initialized: {agent_id} (balance=${balance:.2f})")

    def agent_init_failed(self, agent_id, error):
        self.log.error(f"Failed to initialize agent {agent_id}: {error}")

    def cohort_ready(self, size, requested):
        self.log.info(f"Initialized {size}/{requested} agents successfully")

    def run_started(self, cohort_size, max_rounds):
        limit = "infinite" if max_rounds is None else max_rounds
        self.log.info(f"Starting game loop: agents={cohort_size} max_rounds={limit}")

    def round_started(self, round_num, max_rounds, active_count):
        label = f"Round {round_num}" if max_rounds is None else f"Round {round_num}/{max_rounds}"
        self.log.info(f"{label} (active agents: {active_count})")

    def bet_settled(self, agent_id, record):
        self.log.debug(
            f"{agent_id} {'won' if record.won else 'lost'} ${record.bet:.2f} "
            f"at {record.game_id} -> ${record.balance:.2f}"
        )

    def agent_exited(self, agent_id, reason, detail=""):
        suffix = f": {detail}" if detail else ""
        self.log.warning(f"{agent_id} left the table ({reason.value}){suffix}")

    def turn_failed(self, agent_id, error):
        self.log.error(f"Error during {agent_id} play round: {error}")

    def intermediate_report(self, round_num, snapshots):
        self.log.info(f"===== Round {round_num} Intermediate Stats =====")
        for snap in snapshots:
            self.log.info(
                f"  {snap.agent_id}: balance=${snap.current_balance:.2f} "
                f"profit=${snap.net_profit:+.2f} games={snap.total_games} "
                f"win_rate={snap.win_rate:.2f}% active={snap.active}"
            )

    def analysis_failed(self, agent_id, error):
        self.log.error(f"Failed to get session analysis for {agent_id}: {error}")

    def run_finished(self, report):
        self.log.info(f"Game loop completed after {report.rounds_played} rounds ({report.stop_cause})")
        for line in report.render().splitlines():
            self.log.info(line)
