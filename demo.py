"""
Casino Arena Demo - offline run of LLM-driven players against the in-memory casino.
Needs ANTHROPIC_API_KEY; no casino backend is required.
"""
import sys
import os
import logging

# Windows encoding fix
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from agent.config import Config
from agent.strategy_engine import StrategyEngine
from arena.manager import ArenaManager
from arena.stats import FinalReport
from games.local_casino import LocalCasino

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("casinoarena.demo")

DEMO_AGENTS = 3
DEMO_ROUNDS = 5
DEMO_BALANCE = 500.0


def print_banner():
    banner = """
    ============================================
        CASINO ARENA - AI Player Demo
    ============================================
        LLM-driven agents take turns at an
        in-memory casino, one bet at a time.
    ============================================
    """
    print(banner)


def print_section(title: str):
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}\n")


def demo_setup(config: Config) -> ArenaManager:
    """Open accounts for the demo cohort."""
    print_section("1. SETUP - Opening Player Accounts")

    arena = ArenaManager(config, LocalCasino(), StrategyEngine(config))
    if not arena.initialize_cohort(DEMO_AGENTS):
        raise RuntimeError("No demo agents could be initialized")

    for agent in arena.agents:
        print(f"  Created: {agent.id} - ${agent.balance:.2f}")
    print(f"\n  Games: {', '.join(g.name for g in arena.available_games)}")
    return arena


def demo_rounds(arena: ArenaManager) -> FinalReport:
    print_section(f"2. PLAY - Up to {DEMO_ROUNDS} Rounds")
    return arena.run()


def demo_leaderboard(arena: ArenaManager, report: FinalReport):
    print_section("3. RESULTS")
    print(f"  Rounds played: {report.rounds_played} ({report.stop_cause})\n")
    for i, r in enumerate(arena.get_leaderboard()):
        status = "playing" if r["active"] else (r["exit_reason"] or "inactive")
        print(
            f"  {i+1}. {r['agent_id']}: ${r['current_balance']:.2f} "
            f"({r['net_profit']:+.2f}) {r['wins']}W/{r['losses']}L [{status}]"
        )
    print(f"\n  Overall win rate: {report.summary.win_rate_display}")


def demo_bankrolls(arena: ArenaManager):
    print_section("4. BANKROLLS")
    for agent in arena.agents:
        print(f"  {agent.id}:")
        for line in agent.bankroll.get_summary().splitlines():
            print(f"    {line}")
        print()


def demo_llm_reasoning(engine: StrategyEngine, per_agent: int = 2):
    """Show the last few LLM decisions for each agent."""
    print_section("5. LLM REASONING EXAMPLES")

    by_agent: dict[str, list[dict]] = {}
    for entry in engine.get_decision_log():
        by_agent.setdefault(entry["player_id"], []).append(entry)

    for player_id, entries in by_agent.items():
        print(f"  {player_id}'s recent decisions:")
        for entry in entries[-per_agent:]:
            d = entry["decision"]
            target = f"{d['game_id']} ${d['bet_amount']:.2f}" if d["action"] == "play" else "-"
            print(f"    [${entry['balance']:.2f}] {d['action']} {target}")
            print(f"    Reasoning: {d['reasoning'][:120]}")
        print()


def main():
    print_banner()

    config = Config(
        initial_balance=DEMO_BALANCE,
        agents_count=DEMO_AGENTS,
        max_rounds=DEMO_ROUNDS,
        turn_delay=0.2,
        report_every=DEMO_ROUNDS,
    )
    errors = config.validate()
    if errors:
        print(f"  Cannot run demo: {', '.join(errors)}")
        return

    arena = demo_setup(config)
    report = demo_rounds(arena)
    demo_leaderboard(arena, report)
    demo_bankrolls(arena)
    demo_llm_reasoning(arena.provider)


if __name__ == "__main__":
    main()
