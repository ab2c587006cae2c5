"""Tests for the strategy engine (mocked LLM calls)."""
import sys
import os
import json
import pytest
from unittest.mock import MagicMock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from agent.bankroll import RoundRecord
from agent.config import Config
from agent.strategy_engine import (
    ANALYSIS_UNAVAILABLE,
    FALLBACK_REASONING,
    Decision,
    StrategyEngine,
)
from games.base import FALLBACK_GAMES

GAMES = list(FALLBACK_GAMES)


def make_mock_engine():
    """Create a StrategyEngine with mocked LLM client."""
    config = Config(anthropic_api_key="test-key")
    engine = StrategyEngine(config)

    # Mock the Anthropic client
    mock_client = MagicMock()
    engine.client = mock_client
    return engine, mock_client


def mock_response(text: str):
    """Create a mock Anthropic response."""
    mock = MagicMock()
    mock.content = [MagicMock(text=text)]
    return mock


def record(i: int) -> RoundRecord:
    return RoundRecord("slots", 10, i % 2 == 0, 20 if i % 2 == 0 else 0, 1000 + i, f"t{i}")


class TestGameDecision:
    def test_play_decision(self):
        engine, client = make_mock_engine()
        client.messages.create.return_value = mock_response(json.dumps({
            "action": "play",
            "gameId": "blackjack",
            "betAmount": 50,
            "reasoning": "Healthy balance.",
        }))

        decision = engine.get_game_decision("agent_1", 1000.0, GAMES, [])

        assert decision == Decision(
            action="play", game_id="blackjack", bet_amount=50.0, game_options={}, reasoning="Healthy balance."
        )
        assert decision.is_play
        assert len(engine.decision_log) == 1

    def test_stop_decision(self):
        engine, client = make_mock_engine()
        client.messages.create.return_value = mock_response(json.dumps({
            "action": "stop",
            "reasoning": "Cashing out.",
        }))

        decision = engine.get_game_decision("agent_1", 1000.0, GAMES, [])

        assert decision.action == "stop"
        assert not decision.is_play
        assert decision.reasoning == "Cashing out."

    def test_game_options(self):
        engine, client = make_mock_engine()
        client.messages.create.return_value = mock_response(json.dumps({
            "action": "play",
            "gameId": "roulette",
            "betAmount": 25,
            "gameOptions": {"color": "black"},
            "reasoning": "Black is due.",
        }))

        decision = engine.get_game_decision("agent_1", 1000.0, GAMES, [])
        assert decision.game_options == {"color": "black"}

    def test_markdown_fenced_json(self):
        engine, client = make_mock_engine()
        client.messages.create.return_value = mock_response(
            '```json\n{"action": "play", "gameId": "slots", "betAmount": 5, "reasoning": "fun"}\n```'
        )

        decision = engine.get_game_decision("agent_1", 100.0, GAMES, [])
        assert decision.game_id == "slots"
        assert decision.bet_amount == 5.0

    def test_unknown_action_becomes_stop(self):
        engine, client = make_mock_engine()
        client.messages.create.return_value = mock_response(json.dumps({"action": "double_down"}))

        assert engine.get_game_decision("agent_1", 100.0, GAMES, []).action == "stop"

    def test_missing_game_defaults_to_first(self):
        engine, client = make_mock_engine()
        client.messages.create.return_value = mock_response(json.dumps({"action": "play", "betAmount": 10}))

        decision = engine.get_game_decision("agent_1", 100.0, GAMES, [])
        assert decision.game_id == "blackjack"

    def test_bad_bet_amount_is_zero(self):
        engine, client = make_mock_engine()
        client.messages.create.return_value = mock_response(json.dumps({
            "action": "play", "gameId": "slots", "betAmount": "lots",
        }))

        assert engine.get_game_decision("agent_1", 100.0, GAMES, []).bet_amount == 0.0

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), "inf", "-Infinity"])
    def test_non_finite_bet_amount_is_zero(self, amount):
        engine, client = make_mock_engine()
        # json.dumps writes bare NaN / Infinity tokens, which json.loads accepts
        client.messages.create.return_value = mock_response(json.dumps({
            "action": "play", "gameId": "slots", "betAmount": amount,
        }))

        decision = engine.get_game_decision("agent_1", 100.0, GAMES, [])
        assert decision.is_play
        assert decision.bet_amount == 0.0

    def test_api_error_falls_back_to_stop(self):
        engine, client = make_mock_engine()
        client.messages.create.side_effect = RuntimeError("overloaded")

        decision = engine.get_game_decision("agent_1", 100.0, GAMES, [])

        assert decision.action == "stop"
        assert decision.reasoning == FALLBACK_REASONING
        assert engine.decision_log == []

    def test_invalid_json_falls_back_to_stop(self):
        engine, client = make_mock_engine()
        client.messages.create.return_value = mock_response("I think I'll play slots!")

        assert engine.get_game_decision("agent_1", 100.0, GAMES, []).action == "stop"

    def test_prompt_uses_last_five_records(self):
        engine, client = make_mock_engine()
        client.messages.create.return_value = mock_response(json.dumps({"action": "stop"}))
        history = [record(i) for i in range(8)]

        engine.get_game_decision("agent_1", 1007.0, GAMES, history)

        kwargs = client.messages.create.call_args.kwargs
        prompt = kwargs["messages"][0]["content"]
        assert '"timestamp": "t7"' in prompt
        assert '"timestamp": "t3"' in prompt
        assert '"timestamp": "t2"' not in prompt
        assert "Blackjack (blackjack" in kwargs["system"]
        assert kwargs["model"] == engine.config.llm_model


class TestSessionAnalysis:
    def test_analysis_text(self):
        engine, client = make_mock_engine()
        client.messages.create.return_value = mock_response("  A disciplined session.  ")

        text = engine.analyze_session("agent_1", 1000.0, 1200.0, 10, 6, 4)

        assert text == "A disciplined session."
        kwargs = client.messages.create.call_args.kwargs
        assert "system" not in kwargs
        assert kwargs["max_tokens"] == engine.config.analysis_max_tokens
        assert "Net change: $+200.00" in kwargs["messages"][0]["content"]

    def test_analysis_failure(self):
        engine, client = make_mock_engine()
        client.messages.create.side_effect = RuntimeError("timeout")

        assert engine.analyze_session("agent_1", 1000.0, 0.0, 10, 0, 10) == ANALYSIS_UNAVAILABLE


class TestDecision:
    def test_stop_factory(self):
        decision = Decision.stop("done")
        assert decision.action == "stop"
        assert decision.bet_amount == 0.0

    def test_to_dict(self):
        decision = Decision(action="play", game_id="slots", bet_amount=5)
        assert decision.to_dict()["game_id"] == "slots"

    def test_decision_log_copy(self):
        engine, client = make_mock_engine()
        client.messages.create.return_value = mock_response(json.dumps({"action": "stop"}))
        engine.get_game_decision("agent_1", 100.0, GAMES, [])

        log = engine.get_decision_log()
        log.clear()
        assert len(engine.decision_log) == 1
