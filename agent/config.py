import os
import sys
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Fix encoding on Windows
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")

load_dotenv()


def _round_limit_from_env() -> int | None:
    """MAX_ROUNDS=0 (or unset) means no limit."""
    value = int(os.getenv("MAX_ROUNDS", "0") or 0)
    return value if value > 0 else None


@dataclass
class Config:
    # LLM
    anthropic_api_key: str = field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""))
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "claude-sonnet-4-5-20250929"))
    llm_max_tokens: int = 500
    analysis_max_tokens: int = 300

    # Casino backend
    casino_api_url: str = field(default_factory=lambda: os.getenv("CASINO_API_URL", "http://localhost:7777"))
    casino_timeout: float = field(default_factory=lambda: float(os.getenv("CASINO_TIMEOUT", "10")))
    initial_balance: float = field(default_factory=lambda: float(os.getenv("INITIAL_BALANCE", "1000")))

    # Run
    agents_count: int = field(default_factory=lambda: int(os.getenv("AGENTS_COUNT", "3")))
    max_rounds: int | None = field(default_factory=_round_limit_from_env)
    report_every: int = field(default_factory=lambda: int(os.getenv("REPORT_EVERY", "10")))
    turn_delay: float = field(default_factory=lambda: float(os.getenv("TURN_DELAY", "1.0")))

    @property
    def is_unbounded(self) -> bool:
        return self.max_rounds is None

    @property
    def rounds_label(self) -> str:
        return "infinite" if self.is_unbounded else str(self.max_rounds)

    def validate(self) -> list[str]:
        errors = []
        if not self.anthropic_api_key:
            errors.append("ANTHROPIC_API_KEY not set")
        if self.agents_count < 1:
            errors.append(f"AGENTS_COUNT must be at least 1 (got {self.agents_count})")
        if self.initial_balance <= 0:
            errors.append(f"INITIAL_BALANCE must be positive (got {self.initial_balance})")
        if self.max_rounds is not None and self.max_rounds < 1:
            errors.append(f"MAX_ROUNDS must be positive or unset (got {self.max_rounds})")
        if self.report_every < 1:
            errors.append(f"REPORT_EVERY must be at least 1 (got {self.report_every})")
        if self.turn_delay < 0:
            errors.append(f"TURN_DELAY cannot be negative (got {self.turn_delay})")
        return errors
