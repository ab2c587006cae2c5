"""Tests for the in-memory casino backend."""
import sys
import os
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from agent.config import Config
from agent.reporter import Reporter
from arena.manager import ArenaManager
from games.base import FALLBACK_GAMES, CasinoAPIError
from games.local_casino import LocalCasino
from fakes import ScriptedProvider


@pytest.fixture
def casino():
    c = LocalCasino(seed=42)
    c.create_account("agent_1", 100.0)
    return c


class TestAccounts:
    def test_create_account(self):
        c = LocalCasino()
        assert c.create_account("agent_1", 250.0)["balance"] == 250.0
        assert c.get_balance("agent_1") == 250.0

    def test_duplicate_account(self, casino):
        with pytest.raises(CasinoAPIError) as exc:
            casino.create_account("agent_1", 100.0)
        assert exc.value.status_code == 409

    def test_unknown_player(self, casino):
        with pytest.raises(CasinoAPIError):
            casino.get_balance("agent_9")

    def test_catalog(self, casino):
        assert casino.get_available_games() == list(FALLBACK_GAMES)


class TestBets:
    def test_balance_moves_with_outcome(self, casino):
        outcome = casino.place_bet("agent_1", "slots", 10)
        expected = 100 - 10 + (20 if outcome.won else 0)
        assert outcome.new_balance == expected
        assert casino.get_balance("agent_1") == expected

    def test_seeded_rng_is_repeatable(self):
        results = []
        for _ in range(2):
            c = LocalCasino(seed=7)
            c.create_account("agent_1", 1000.0)
            results.append([c.place_bet("agent_1", "slots", 1).won for _ in range(20)])
        assert results[0] == results[1]

    def test_rejects_unknown_game(self, casino):
        with pytest.raises(CasinoAPIError, match="Unknown game"):
            casino.place_bet("agent_1", "craps", 10)

    def test_rejects_below_min_bet(self, casino):
        with pytest.raises(CasinoAPIError, match="minimum"):
            casino.place_bet("agent_1", "blackjack", 5)

    def test_rejects_overdraw(self, casino):
        with pytest.raises(CasinoAPIError, match="Insufficient"):
            casino.place_bet("agent_1", "slots", 500)

    @pytest.mark.parametrize("amount", [0, -5, float("nan"), float("inf")])
    def test_rejects_non_positive_or_non_finite(self, casino, amount):
        with pytest.raises(CasinoAPIError, match="positive amount"):
            casino.place_bet("agent_1", "slots", amount)
        assert casino.get_balance("agent_1") == 100

    def test_roulette_color(self, casino):
        casino.place_bet("agent_1", "roulette", 5, {"color": "black"})
        with pytest.raises(CasinoAPIError, match="color"):
            casino.place_bet("agent_1", "roulette", 5, {"color": "green"})

    def test_history_and_stats(self, casino):
        for _ in range(4):
            casino.place_bet("agent_1", "slots", 1)

        assert len(casino.get_game_history("agent_1", limit=3)) == 3
        stats = casino.get_player_stats("agent_1")
        assert stats["totalGames"] == 4
        assert stats["wins"] + stats["losses"] == 4
        assert stats["totalBet"] == 4


class TestWithArena:
    def test_full_run_offline(self):
        config = Config(anthropic_api_key="test-key", initial_balance=100.0, max_rounds=20, turn_delay=0)
        casino = LocalCasino(seed=1)
        arena = ArenaManager(config, casino, ScriptedProvider(), reporter=Reporter())

        assert arena.initialize_cohort(3)
        report = arena.run()

        for agent in arena.agents:
            assert agent.balance == casino.get_balance(agent.id)
            assert agent.bankroll.wins + agent.bankroll.losses == len(agent.history)
        assert report.summary.total_games == sum(len(a.history) for a in arena.agents)
