"""
Casino Arena Web API - start, watch and stop a run over HTTP.
Run with: python -m web.app
"""
import sys
import os
import logging
import threading
import time

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from flask import Flask, jsonify, request
from agent.config import Config
from agent.game_client import GameClient
from agent.reporter import LoggingReporter
from agent.strategy_engine import StrategyEngine
from arena.manager import ArenaManager
from games.local_casino import LocalCasino

app = Flask(__name__)
logger = logging.getLogger("casinoarena.web")

# Global arena state
arena: ArenaManager | None = None
arena_lock = threading.Lock()
run_thread: threading.Thread | None = None
match_feed: list[dict] = []

FEED_LIMIT = 50


def add_feed_event(event_type: str, message: str):
    """Add an event to the live feed."""
    match_feed.append({
        "type": event_type,
        "message": message,
        "timestamp": time.time(),
    })


class FeedReporter(LoggingReporter):
    """Logs like the CLI and mirrors the interesting events into the feed."""

    def agent_initialized(self, agent_id, balance):
        super().agent_initialized(agent_id, balance)
        add_feed_event("agent_joined", f"{agent_id} sat down with ${balance:.2f}")

    def round_started(self, round_num, max_rounds, active_count):
        super().round_started(round_num, max_rounds, active_count)
        add_feed_event("round", f"Round {round_num} ({active_count} active)")

    def bet_settled(self, agent_id, record):
        super().bet_settled(agent_id, record)
        verb = "won" if record.won else "lost"
        add_feed_event("bet", f"{agent_id} {verb} ${record.bet:.2f} at {record.game_id}")

    def agent_exited(self, agent_id, reason, detail=""):
        super().agent_exited(agent_id, reason, detail)
        add_feed_event("agent_left", f"{agent_id} left ({reason.value})")

    def turn_failed(self, agent_id, error):
        super().turn_failed(agent_id, error)
        add_feed_event("error", f"{agent_id}: {error}")

    def run_finished(self, report):
        super().run_finished(report)
        add_feed_event("finished", f"Run finished after {report.rounds_played} rounds ({report.stop_cause})")


def make_arena(config: Config) -> ArenaManager:
    """Build an arena wired to the configured backend."""
    offline = os.getenv("CASINO_OFFLINE", "").lower() in ("1", "true", "yes")
    backend = LocalCasino() if offline else GameClient(config)
    return ArenaManager(config, backend, StrategyEngine(config), reporter=FeedReporter())


def is_running() -> bool:
    return run_thread is not None and run_thread.is_alive()


def _run_arena(mgr: ArenaManager):
    try:
        mgr.run()
    except Exception as e:
        logger.error(f"Run crashed: {e}")
        add_feed_event("error", f"Run crashed: {e}")


# --- API Endpoints ---

@app.route("/api/status")
def api_status():
    """Run status and per-agent snapshots."""
    mgr = arena
    if mgr is None:
        return jsonify({"is_running": False, "round": 0, "max_rounds": None, "agents": []})

    return jsonify({
        "is_running": is_running(),
        "round": mgr.round,
        "max_rounds": mgr.max_rounds,
        "games": [g.to_dict() for g in mgr.available_games],
        "agents": [s.to_dict() for s in mgr.snapshots()],
    })


@app.route("/api/leaderboard")
def api_leaderboard():
    """Agents ranked by net profit."""
    if arena is None:
        return jsonify([])
    return jsonify(arena.get_leaderboard())


@app.route("/api/feed")
def api_feed():
    """Live feed (most recent events)."""
    return jsonify(match_feed[-FEED_LIMIT:])


@app.route("/api/report")
def api_report():
    """Final report of the last finished run."""
    if arena is None or arena.last_report is None:
        return jsonify(None)
    return jsonify(arena.last_report.to_dict())


@app.route("/api/run", methods=["POST"])
def api_run():
    """Initialize a cohort and start the round loop in the background."""
    global arena, run_thread
    data = request.get_json(silent=True) or {}

    with arena_lock:
        if is_running():
            return jsonify({"error": "A run is already in progress"}), 409

        config = Config()
        try:
            if "agents" in data:
                config.agents_count = int(data["agents"])
            if "rounds" in data:
                rounds = int(data["rounds"])
                config.max_rounds = rounds if rounds > 0 else None
            if "balance" in data:
                config.initial_balance = float(data["balance"])
            if "delay" in data:
                config.turn_delay = float(data["delay"])
        except (TypeError, ValueError) as e:
            return jsonify({"error": f"Invalid parameter: {e}"}), 400

        errors = config.validate()
        if errors:
            return jsonify({"error": "; ".join(errors)}), 400

        match_feed.clear()
        mgr = make_arena(config)
        if not mgr.initialize_cohort(config.agents_count):
            return jsonify({"error": "No agents could be initialized"}), 500

        arena = mgr
        add_feed_event("run_start", f"Run starting with {len(mgr.agents)} agents")
        run_thread = threading.Thread(target=_run_arena, args=(mgr,), daemon=True)
        run_thread.start()

    return jsonify({
        "success": True,
        "agents": [a.id for a in mgr.agents],
        "max_rounds": config.max_rounds,
    })


@app.route("/api/stop", methods=["POST"])
def api_stop():
    """Request a graceful stop at the end of the current round."""
    if arena is None or not is_running():
        return jsonify({"error": "No run in progress"}), 409
    arena.stop()
    add_feed_event("stop", "Stop requested, finishing the current round")
    return jsonify({"success": True, "round": arena.round})


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")
    port = int(os.environ.get("PORT", 5000))
    print("\n  Casino Arena API starting...")
    print(f"  Status at http://localhost:{port}/api/status\n")
    app.run(debug=True, port=port, host="0.0.0.0", use_reloader=False, threaded=True)
