"""Scripted collaborators for arena and agent tests."""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from agent.strategy_engine import Decision, DecisionProvider
from games.base import FALLBACK_GAMES, BetOutcome, CasinoAPIError, GameBackend


class FakeBackend(GameBackend):
    """
    Keeps balances in a dict. Every bet loses unless ``win`` says otherwise;
    failures are injected per player id.
    """

    def __init__(self, games=None, fail_games=False, fail_create=(), win=False, multiplier=2.0):
        self.games = list(games) if games is not None else list(FALLBACK_GAMES)
        self.fail_games = fail_games
        self.fail_create = set(fail_create)
        self.win = win
        self.multiplier = multiplier
        self.balances: dict[str, float] = {}
        self.fail_balance: set[str] = set()
        self.fail_bets: set[str] = set()
        self.bets: list[tuple] = []
        self.balance_calls: list[str] = []

    def create_account(self, player_id, initial_balance):
        if player_id in self.fail_create:
            raise CasinoAPIError(f"cannot create {player_id}", status_code=500)
        self.balances[player_id] = initial_balance
        return {"balance": initial_balance}

    def get_balance(self, player_id):
        self.balance_calls.append(player_id)
        if player_id in self.fail_balance:
            raise CasinoAPIError("balance service down", status_code=503)
        return self.balances[player_id]

    def get_available_games(self):
        if self.fail_games:
            raise CasinoAPIError("catalog down", status_code=503)
        return self.games

    def place_bet(self, player_id, game_id, bet_amount, options=None):
        self.bets.append((player_id, game_id, bet_amount, options))
        if player_id in self.fail_bets:
            raise CasinoAPIError("table closed", status_code=503)
        won = self.win(player_id, len(self.bets)) if callable(self.win) else self.win
        payout = bet_amount * self.multiplier if won else 0.0
        self.balances[player_id] = self.balances[player_id] - bet_amount + payout
        return BetOutcome(won=won, payout=payout, new_balance=self.balances[player_id])

    def get_game_history(self, player_id, limit=10):
        return [b for b in self.bets if b[0] == player_id][-limit:]

    def get_player_stats(self, player_id):
        return {"balance": self.balances[player_id]}


class ScriptedProvider(DecisionProvider):
    """
    Returns queued decisions per player, then ``default``.
    ``on_decide`` runs before each answer, e.g. to request a stop mid-round.
    """

    def __init__(self, default=None, scripts=None, analysis="Solid session.", fail_analysis=False):
        self.default = default or Decision(action="play", game_id="slots", bet_amount=100)
        self.scripts = {k: list(v) for k, v in (scripts or {}).items()}
        self.analysis = analysis
        self.fail_analysis = fail_analysis
        self.raise_for: set[str] = set()
        self.on_decide = None
        self.calls: list[dict] = []

    def get_game_decision(self, player_id, balance, available_games, recent_history):
        self.calls.append({
            "player_id": player_id,
            "balance": balance,
            "games": list(available_games),
            "history_len": len(recent_history),
        })
        if self.on_decide:
            self.on_decide(player_id)
        if player_id in self.raise_for:
            raise RuntimeError("provider exploded")
        queue = self.scripts.get(player_id)
        if queue:
            return queue.pop(0)
        return self.default

    def analyze_session(self, player_id, start_balance, end_balance, total_games, wins, losses):
        if self.fail_analysis:
            raise RuntimeError("analysis down")
        return f"{self.analysis} ({player_id}: {total_games} games)"
