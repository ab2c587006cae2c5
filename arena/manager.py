"""
Arena Manager: drives a cohort of player agents through discrete rounds.

Turns inside a round run one agent at a time, in cohort order, so the
backend always sees a single well-defined sequence of bets.
"""
import logging
import time

from agent.config import Config
from agent.player import AgentSnapshot, PlayerAgent, TurnResult
from agent.reporter import LoggingReporter, Reporter
from agent.strategy_engine import DecisionProvider
from games.base import FALLBACK_GAMES, GameBackend, GameInfo
from .stats import AgentReport, FinalReport, summarize

logger = logging.getLogger("casinoarena.arena")

STOP_LIMIT = "limit"
STOP_EXHAUSTED = "exhausted"
STOP_REQUESTED = "stopped"


class ArenaManager:
    """
    Owns the cohort, runs the round loop and produces the final report.
    """

    def __init__(
        self,
        config: Config,
        backend: GameBackend,
        provider: DecisionProvider,
        reporter: Reporter | None = None,
        sleep=time.sleep,
    ):
        self.config = config
        self.backend = backend
        self.provider = provider
        self.reporter = reporter or LoggingReporter()
        self.sleep = sleep

        self.agents: list[PlayerAgent] = []
        self.available_games: list[GameInfo] = []
        self.running = False
        self.stop_requested = False
        self.round = 0
        self.round_results: dict[str, TurnResult] = {}
        self.last_report: FinalReport | None = None

    @property
    def max_rounds(self) -> int | None:
        return self.config.max_rounds

    def _load_catalog(self) -> list[GameInfo]:
        try:
            games = list(self.backend.get_available_games())
            if not games:
                raise ValueError("backend returned an empty game catalog")
            logger.info(f"Fetched available games: {', '.join(g.id for g in games)}")
            return games
        except Exception as e:
            games = list(FALLBACK_GAMES)
            self.reporter.catalog_fallback(e, games)
            return games

    def initialize_cohort(self, target_count: int | None = None) -> bool:
        """
        Fetch the catalog and open accounts for ``target_count`` agents.

        Agents whose account creation fails are dropped without retry.
        Returns True if at least one agent is ready to play.
        """
        if target_count is None:
            target_count = self.config.agents_count
        logger.info(f"Initializing arena with {target_count} agents")

        self.available_games = self._load_catalog()

        self.agents = []
        for number in range(1, target_count + 1):
            agent = PlayerAgent(number, self.config, self.backend, self.provider, self.reporter)
            if agent.initialize():
                self.agents.append(agent)

        self.reporter.cohort_ready(len(self.agents), target_count)
        return len(self.agents) > 0

    def active_agents(self) -> list[PlayerAgent]:
        return [a for a in self.agents if a.is_active]

    def _should_continue(self) -> bool:
        return self.running and (self.max_rounds is None or self.round < self.max_rounds)

    def run(self) -> FinalReport | None:
        """
        Run rounds until the limit is reached, every agent has left, or
        stop() is called. Returns the final report, or None with no cohort.
        """
        if not self.agents:
            logger.error("No agents available to run game loop")
            return None

        # A stop() issued before the loop starts still ends the run
        self.running = not self.stop_requested
        self.round = 0
        stop_cause = STOP_REQUESTED
        self.reporter.run_started(len(self.agents), self.max_rounds)

        while self._should_continue():
            self.round += 1
            active = self.active_agents()

            if not active:
                logger.info("No active agents remaining, ending game loop")
                stop_cause = STOP_EXHAUSTED
                break

            self.reporter.round_started(self.round, self.max_rounds, len(active))
            self.round_results = {}

            for agent in active:
                result = agent.play_round(self.available_games)
                self.round_results[agent.id] = result
                if self.config.turn_delay > 0:
                    self.sleep(self.config.turn_delay)

            if self.config.report_every > 0 and self.round % self.config.report_every == 0:
                self.reporter.intermediate_report(self.round, self.snapshots())
        else:
            if self.running:
                stop_cause = STOP_LIMIT

        self.running = False
        self.stop_requested = False
        report = self.build_final_report(stop_cause)
        self.last_report = report
        self.reporter.run_finished(report)
        return report

    def stop(self):
        """Ask the loop to finish after the current round."""
        self.stop_requested = True
        self.running = False
        logger.info("Arena stop requested")

    def snapshots(self) -> list[AgentSnapshot]:
        return [a.get_snapshot() for a in self.agents]

    def build_final_report(self, stop_cause: str) -> FinalReport:
        entries = []
        for agent in self.agents:
            entries.append(AgentReport(
                snapshot=agent.get_snapshot(),
                analysis=agent.get_session_analysis(),
            ))

        return FinalReport(
            rounds_played=self.round,
            stop_cause=stop_cause,
            agents=entries,
            summary=summarize([e.snapshot for e in entries]),
        )

    def get_leaderboard(self) -> list[dict]:
        """Agents ranked by net profit."""
        rankings = [s.to_dict() for s in self.snapshots()]
        rankings.sort(key=lambda x: x["net_profit"], reverse=True)
        return rankings
