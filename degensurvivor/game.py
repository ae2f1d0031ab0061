"""Game engine: scheduling games, registering players, running rounds and predictions."""

from __future__ import annotations

import logging

from .errors import GameError, GameErrorKind
from .models import (
    MAX_USERNAME_LENGTH,
    MIN_PLAYER,
    PREDICTION_LOCKOUT_SECONDS,
    REGISTRATION_CLOSE_BEFORE_START,
    ROUND_DURATION_SECONDS,
    TOTAL_ROUNDS,
    GameState,
    GameStatus,
    GameType,
    PlayerState,
    PredictionChoice,
    RoundPrediction,
    RoundResult,
)
from .vault import TokenLedger

log = logging.getLogger(__name__)

_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_U32_MASK = 0xFFFF_FFFF


def _u64(value: int) -> int:
    if not 0 <= value <= _U64_MAX:
        raise GameError(GameErrorKind.ARITHMETIC_OVERFLOW)
    return value


def _i64(value: int) -> int:
    if not _I64_MIN <= value <= _I64_MAX:
        raise GameError(GameErrorKind.ARITHMETIC_OVERFLOW)
    return value


def prize_pool_account(game_id: int) -> str:
    """Name of the token account holding a game's entry fees."""
    return f"prize-pool:{game_id}"


class GameEngine:
    """Holds every game, player entry and round result, and enforces the game rules."""

    def __init__(self, ledger=None):
        self.ledger = TokenLedger() if ledger is None else ledger
        self._games: dict[int, GameState] = {}
        self._players: dict[tuple[int, str], PlayerState] = {}
        self._rounds: dict[tuple[int, int], RoundResult] = {}

    # Lookups

    def game(self, game_id) -> GameState:
        """Return the game; raise KeyError if it does not exist."""
        try:
            return self._games[game_id]
        except KeyError:
            raise KeyError(game_id) from None

    def player(self, game_id, player) -> PlayerState:
        """Return a player's entry in a game; raise KeyError if there is none."""
        try:
            return self._players[(game_id, player)]
        except KeyError:
            raise KeyError((game_id, player)) from None

    def round_result(self, game_id, round_number) -> RoundResult:
        """Return the result record of a round; raise KeyError if it was never opened."""
        try:
            return self._rounds[(game_id, round_number)]
        except KeyError:
            raise KeyError((game_id, round_number)) from None

    def _game_for_creator(self, creator, game_id) -> GameState:
        game = self.game(game_id)
        if game.creator != creator:
            raise GameError(GameErrorKind.UNAUTHORIZED)
        return game

    def _open_round(self, game, round_number, start_price_btc, start_price_sol, now) -> RoundResult:
        key = (game.game_id, round_number)
        if key in self._rounds:
            raise GameError(GameErrorKind.INVALID_ROUND_NUMBER)
        result = RoundResult(
            game_id=game.game_id,
            round_number=round_number,
            round_type=game.round_types[round_number - 1],
            start_price_btc=start_price_btc,
            start_price_sol=start_price_sol,
            round_start_ts=now,
            round_end_ts=_i64(now + ROUND_DURATION_SECONDS),
        )
        self._rounds[key] = result
        return result

    # Instructions

    def create_game(self, creator, game_id, game_type, start_time, entry_fee, now) -> GameState:
        """Schedule a new game starting at ``start_time``."""
        if game_id in self._games:
            raise ValueError(f"game {game_id} already exists")
        if start_time <= now:
            raise GameError(GameErrorKind.INVALID_START_TIME)

        game = GameState(
            game_id=game_id,
            game_type=GameType(game_type),
            creator=creator,
            start_time=start_time,
            created_at=now,
            entry_fee=_u64(entry_fee),
            prize_pool_token_account=prize_pool_account(game_id),
        )
        self._games[game_id] = game
        log.info(
            "Game created: id=%s type=%s start=%s fee=%s",
            game_id, game.game_type.name, start_time, entry_fee,
        )
        return game

    def join_game(self, player, game_id, username, now) -> PlayerState:
        """Register a player, moving the entry fee from the player into the prize pool."""
        game = self.game(game_id)
        if (game_id, player) in self._players:
            raise GameError(GameErrorKind.PLAYER_ALREADY_JOINED)
        if game.status is not GameStatus.PENDING:
            raise GameError(GameErrorKind.GAME_ALREADY_STARTED)
        if game.total_players >= game.max_players:
            raise GameError(GameErrorKind.GAME_FULL)

        registration_deadline = _i64(game.start_time - REGISTRATION_CLOSE_BEFORE_START)
        if now >= registration_deadline:
            raise GameError(GameErrorKind.REGISTRATION_CLOSED)
        if len(username.encode("utf-8")) > MAX_USERNAME_LENGTH:
            raise GameError(GameErrorKind.USERNAME_TOO_LONG)

        new_pool = _u64(game.prize_pool + game.entry_fee)
        self.ledger.transfer(player, game.prize_pool_token_account, game.entry_fee)

        state = PlayerState(
            game_id=game_id,
            player=player,
            username=username,
            entry_slot=game.total_players + 1,
        )
        self._players[(game_id, player)] = state
        game.total_players += 1
        game.prize_pool = new_pool

        log.info(
            "Player joined: game=%s player=%s username=%s slot=%s players=%s pool=%s",
            game_id, player, username, state.entry_slot, game.total_players, game.prize_pool,
        )
        return state

    def start_game(self, creator, game_id, start_price_btc=None, start_price_sol=None, now=0) -> RoundResult:
        """Activate the game and open round 1; return the round's result record."""
        game = self._game_for_creator(creator, game_id)
        if game.status is not GameStatus.PENDING:
            raise GameError(GameErrorKind.INVALID_GAME_STATUS)
        if now <= game.start_time:
            raise GameError(GameErrorKind.GAME_NOT_STARTED)
        if game.total_players < MIN_PLAYER:
            raise GameError(GameErrorKind.INSUFFICIENT_PLAYERS)

        result = self._open_round(game, 1, start_price_btc, start_price_sol, now)
        game.status = GameStatus.ACTIVE
        game.current_round = 1
        game.actual_start_time = now
        game.players_finalized = True

        log.info(
            "Game started: id=%s players=%s pool=%s btc=%s sol=%s",
            game_id, game.total_players, game.prize_pool, start_price_btc, start_price_sol,
        )
        return result

    def submit_prediction(self, player, game_id, round_number, choice, now) -> RoundPrediction:
        """Record a player's choice for the current round."""
        game = self.game(game_id)
        state = self._players.get((game_id, player))
        if state is None:
            raise GameError(GameErrorKind.PLAYER_NOT_IN_GAME)
        if game.status is not GameStatus.ACTIVE:
            raise GameError(GameErrorKind.INVALID_GAME_STATUS)
        if not 1 <= round_number <= TOTAL_ROUNDS:
            raise GameError(GameErrorKind.INVALID_ROUND_NUMBER)
        if round_number != game.current_round:
            raise GameError(GameErrorKind.INVALID_ROUND_NUMBER)
        if state.has_predicted(round_number):
            raise GameError(GameErrorKind.ALREADY_PREDICTED)

        result = self._rounds.get((game_id, round_number))
        if result is None:
            raise GameError(GameErrorKind.INVALID_ROUND_NUMBER)
        if now >= result.round_end_ts:
            raise GameError(GameErrorKind.PREDICTION_WINDOW_CLOSED)
        lockout_start = _i64(result.round_end_ts - PREDICTION_LOCKOUT_SECONDS)
        if now >= lockout_start:
            raise GameError(GameErrorKind.PREDICTION_TOO_LATE)

        response_time = _i64(now - result.round_start_ts) & _U32_MASK
        total_response = _u64(state.total_response_time + response_time)

        prediction = RoundPrediction(
            round_number=round_number,
            choice=PredictionChoice(choice),
            submitted_at=now,
            response_time=response_time,
        )
        state.predictions[round_number - 1] = prediction
        state.total_response_time = total_response
        if round_number == 1:
            state.first_prediction_ts = now

        log.info(
            "Prediction submitted: player=%s round=%s choice=%s response=%ss",
            player, round_number, prediction.choice.name, response_time,
        )
        return prediction

    def advance_round(self, creator, game_id, next_round, start_price_btc=None, start_price_sol=None, now=0) -> RoundResult:
        """Move the game on to ``next_round`` and open its result record."""
        game = self._game_for_creator(creator, game_id)
        if game.status is not GameStatus.ACTIVE:
            raise GameError(GameErrorKind.INVALID_GAME_STATUS)
        if next_round != game.current_round + 1:
            raise GameError(GameErrorKind.INVALID_ROUND_NUMBER)
        if next_round > TOTAL_ROUNDS:
            raise GameError(GameErrorKind.INVALID_ROUND_NUMBER)

        result = self._open_round(game, next_round, start_price_btc, start_price_sol, now)
        game.current_round = next_round
        log.info(
            "Round advanced: game=%s round=%s btc=%s sol=%s",
            game_id, next_round, start_price_btc, start_price_sol,
        )
        return result

    def update_round_result(self, creator, game_id, round_number, end_price_btc, end_price_sol, correct_answer, now) -> RoundResult:
        """Store a round's end prices and correct answer, and compute the price changes."""
        try:
            result = self._rounds[(game_id, round_number)]
        except KeyError:
            raise GameError(GameErrorKind.INVALID_ROUND_NUMBER) from None

        result.end_price_btc = end_price_btc
        result.end_price_sol = end_price_sol
        result.correct_answer = PredictionChoice(correct_answer)
        result.evaluation_ts = now
        if result.start_price_btc is not None and end_price_btc is not None:
            result.price_change_btc = _i64(end_price_btc - result.start_price_btc)
        if result.start_price_sol is not None and end_price_sol is not None:
            result.price_change_sol = _i64(end_price_sol - result.start_price_sol)

        log.info(
            "Round result updated by %s: game=%s round=%s btc=%s sol=%s answer=%s",
            creator, game_id, round_number, end_price_btc, end_price_sol, result.correct_answer.name,
        )
        return result

    def complete_game(self, creator, game_id, now) -> GameState:
        """Mark the game completed and its leaderboard final."""
        game = self.game(game_id)
        game.status = GameStatus.COMPLETED
        game.leaderboard_finalized = True
        game.end_time = now
        log.info(
            "Game completed by %s: players=%s pool=%s top=%s score=%s",
            creator, game.total_players, game.prize_pool, game.top_scorer, game.highest_score,
        )
        return game