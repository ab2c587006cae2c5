from .strategy_engine import StrategyEngine, DecisionProvider, Decision
from .bankroll import Bankroll, RoundRecord
from .player import PlayerAgent, AgentSnapshot, TurnResult, TurnStatus
from .reporter import Reporter, LoggingReporter
from .game_client import GameClient
from .config import Config
