"""
HTTP client for the remote casino backend.
Handles accounts, balances, the game catalog and bet placement.
"""
import logging

import requests

from games.base import BetOutcome, CasinoAPIError, GameBackend, GameInfo
from .config import Config

logger = logging.getLogger("casinoarena.client")


class GameClient(GameBackend):
    """JSON-over-HTTP implementation of the casino backend."""

    def __init__(self, config: Config, session: requests.Session | None = None):
        self.config = config
        self.base_url = config.casino_api_url.rstrip("/")
        self.timeout = config.casino_timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def _request(self, method: str, path: str, **kwargs) -> dict:
        """Send a request and return the decoded JSON body."""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise CasinoAPIError(f"{method} {path} failed: {e}") from e

        if not response.ok:
            raise CasinoAPIError(
                f"{method} {path} returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise CasinoAPIError(f"{method} {path} returned invalid JSON") from e

    @staticmethod
    def _parse(parser, data, what: str):
        """Apply a parser to a response body, turning shape errors into CasinoAPIError."""
        try:
            return parser(data)
        except (KeyError, TypeError, ValueError) as e:
            raise CasinoAPIError(f"Malformed {what} response: {e!r}") from e

    def create_account(self, player_id: str, initial_balance: float) -> dict:
        try:
            data = self._request(
                "POST",
                "/account/create",
                json={"playerId": player_id, "initialBalance": initial_balance},
            )
            balance = self._parse(lambda d: float(d["balance"]), data, "account")
        except CasinoAPIError as e:
            logger.error(f"Failed to create account for {player_id}: {e}")
            raise
        logger.info(f"Account created for {player_id} (balance={balance:.2f})")
        return {**data, "balance": balance}

    def get_balance(self, player_id: str) -> float:
        try:
            data = self._request("GET", f"/account/{player_id}/balance")
            return self._parse(lambda d: float(d["balance"]), data, "balance")
        except CasinoAPIError as e:
            logger.error(f"Failed to get balance for {player_id}: {e}")
            raise

    def get_available_games(self) -> list[GameInfo]:
        try:
            data = self._request("GET", "/games")
            return self._parse(lambda d: [GameInfo.from_dict(g) for g in d["games"]], data, "games")
        except CasinoAPIError as e:
            logger.error(f"Failed to fetch available games: {e}")
            raise

    def place_bet(
        self,
        player_id: str,
        game_id: str,
        bet_amount: float,
        options: dict | None = None,
    ) -> BetOutcome:
        try:
            data = self._request(
                "POST",
                "/game/play",
                json={
                    "playerId": player_id,
                    "gameId": game_id,
                    "betAmount": bet_amount,
                    "options": options or {},
                },
            )
            outcome = self._parse(BetOutcome.from_dict, data, "bet")
        except CasinoAPIError as e:
            logger.error(f"Failed to place bet for {player_id}: {e}")
            raise

        net_change = outcome.payout - bet_amount if outcome.won else -bet_amount
        logger.info(
            f"{player_id} {'WON' if outcome.won else 'LOST'} at {game_id} | "
            f"bet={bet_amount:.2f} payout={outcome.payout:.2f} "
            f"net={net_change:+.2f} balance={outcome.new_balance:.2f}"
        )
        return outcome

    def get_game_history(self, player_id: str, limit: int = 10) -> list[dict]:
        try:
            data = self._request("GET", f"/account/{player_id}/history", params={"limit": limit})
            return self._parse(lambda d: list(d["history"]), data, "history")
        except CasinoAPIError as e:
            logger.error(f"Failed to get game history for {player_id}: {e}")
            raise

    def get_player_stats(self, player_id: str) -> dict:
        try:
            data = self._request("GET", f"/account/{player_id}/stats")
            return self._parse(lambda d: dict(d["stats"]), data, "stats")
        except CasinoAPIError as e:
            logger.error(f"Failed to get stats for {player_id}: {e}")
            raise

    def ping(self) -> bool:
        """Check that the backend answers the catalog endpoint."""
        try:
            self._request("GET", "/games")
            return True
        except CasinoAPIError:
            return False
