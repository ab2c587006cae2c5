"""
Casino Arena CLI - run a cohort of LLM-driven players against a casino backend.
"""
import sys
import os
import logging
import json
import signal
import click

if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from agent.config import Config
from agent.game_client import GameClient
from agent.strategy_engine import StrategyEngine
from arena.manager import ArenaManager
from games.base import FALLBACK_GAMES, CasinoAPIError
from games.local_casino import LocalCasino

LOG_FORMAT = "%(asctime)s [%(name)s] %(message)s"

logger = logging.getLogger("casinoarena.cli")


def setup_logging(verbose: bool = False, log_file: str | None = None):
    handlers = [logging.StreamHandler()]
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=True,
    )


def make_backend(config: Config, offline: bool):
    if offline:
        return LocalCasino()
    return GameClient(config)


@click.group()
@click.option("--offline/--online", default=False, help="Use the in-memory casino instead of the HTTP backend")
@click.option("--verbose", is_flag=True, help="Log every settled bet")
@click.option("--log-file", default=None, help="Also write logs to this file")
@click.pass_context
def cli(ctx, offline, verbose, log_file):
    """Casino Arena - LLM agents at the tables"""
    setup_logging(verbose, log_file)
    ctx.ensure_object(dict)
    ctx.obj["config"] = Config()
    ctx.obj["offline"] = offline


@cli.command()
@click.option("--agents", type=int, default=None, help="Number of agents (default: AGENTS_COUNT)")
@click.option("--rounds", type=int, default=None, help="Round limit, 0 for no limit (default: MAX_ROUNDS)")
@click.option("--balance", type=float, default=None, help="Starting balance per agent")
@click.option("--delay", type=float, default=None, help="Seconds between turns")
@click.option("--report-every", type=int, default=None, help="Intermediate stats interval in rounds")
@click.pass_context
def run(ctx, agents, rounds, balance, delay, report_every):
    """Run the round loop until the limit, bust-out, or Ctrl+C."""
    config = ctx.obj["config"]
    if agents is not None:
        config.agents_count = agents
    if rounds is not None:
        config.max_rounds = rounds if rounds > 0 else None
    if balance is not None:
        config.initial_balance = balance
    if delay is not None:
        config.turn_delay = delay
    if report_every is not None:
        config.report_every = report_every

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        sys.exit(1)

    logger.info("===== Casino Arena Starting =====")
    logger.info(
        f"agents={config.agents_count} balance=${config.initial_balance:.2f} "
        f"max_rounds={config.rounds_label} model={config.llm_model} "
        f"backend={'offline' if ctx.obj['offline'] else config.casino_api_url}"
    )

    arena = ArenaManager(config, make_backend(config, ctx.obj["offline"]), StrategyEngine(config))
    if not arena.initialize_cohort(config.agents_count):
        logger.error("Failed to initialize any agents")
        sys.exit(1)

    def _shutdown_handler(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, finishing the current round...")
        arena.stop()

    signal.signal(signal.SIGINT, _shutdown_handler)
    signal.signal(signal.SIGTERM, _shutdown_handler)

    report = arena.run()
    if report is None:
        sys.exit(1)
    logger.info("===== Casino Arena Completed =====")


@cli.command()
@click.pass_context
def status(ctx):
    """Show configuration and backend reachability."""
    config = ctx.obj["config"]
    print("Casino Arena Status")
    print("=" * 40)
    print(f"Backend: {'offline (in-memory)' if ctx.obj['offline'] else config.casino_api_url}")
    print(f"Model: {config.llm_model}")
    print(f"Agents: {config.agents_count}")
    print(f"Starting balance: ${config.initial_balance:.2f}")
    print(f"Max rounds: {config.rounds_label}")

    errors = config.validate()
    if errors:
        print(f"\nWarnings: {', '.join(errors)}")

    if not ctx.obj["offline"]:
        reachable = GameClient(config).ping()
        print(f"\nBackend reachable: {'yes' if reachable else 'no'}")


@cli.command()
@click.pass_context
def games(ctx):
    """List the playable games."""
    config = ctx.obj["config"]
    try:
        catalog = make_backend(config, ctx.obj["offline"]).get_available_games()
    except CasinoAPIError as e:
        print(f"Could not fetch catalog ({e}); fallback list:")
        catalog = list(FALLBACK_GAMES)
    for game in catalog:
        print(f"  {game.id:<12} {game.name:<12} min bet ${game.min_bet:.2f}")


@cli.command()
@click.argument("player_id")
@click.option("--limit", default=10, help="Number of recent games")
@click.pass_context
def history(ctx, player_id, limit):
    """Get a player's recent games from the backend."""
    config = ctx.obj["config"]
    try:
        records = GameClient(config).get_game_history(player_id, limit)
        print(json.dumps(records, indent=2, default=str))
    except CasinoAPIError as e:
        print(f"Error: {e}")
        sys.exit(1)


@cli.command()
@click.argument("player_id")
@click.pass_context
def stats(ctx, player_id):
    """Get a player's stats from the backend."""
    config = ctx.obj["config"]
    try:
        player_stats = GameClient(config).get_player_stats(player_id)
        print(json.dumps(player_stats, indent=2, default=str))
    except CasinoAPIError as e:
        print(f"Error: {e}")
        sys.exit(1)


@cli.command()
@click.pass_context
def demo(ctx):
    """Run the offline demo."""
    from demo import main
    main()


def main():
    cli()


if __name__ == "__main__":
    main()
