"""Round evaluation, leaderboard ranking and prize claims for games held by a GameEngine."""

from __future__ import annotations

import logging

from .errors import GameError, GameErrorKind
from .models import (
    POINT_CLOSER,
    POINT_EXACT,
    POINT_PARTIAL,
    TOTAL_ROUNDS,
    GameStatus,
    PlayerState,
)
from .scoring import calculate_points, prize_amount

log = logging.getLogger(__name__)

_U16_MAX = 2**16 - 1
_U32_MASK = 0xFFFF_FFFF
_MAX_WINNING_RANK = 10


def _player_state(engine, game_id, player) -> PlayerState:
    try:
        return engine.player(game_id, player)
    except KeyError:
        raise GameError(GameErrorKind.PLAYER_NOT_IN_GAME) from None


def _game_for_creator(engine, creator, game_id):
    game = engine.game(game_id)
    if game.creator != creator:
        raise GameError(GameErrorKind.UNAUTHORIZED)
    return game


def evaluate_round(engine, creator, game_id, player, round_number, now) -> int:
    """Score a player's prediction for an ended round; return the points earned."""
    _game_for_creator(engine, creator, game_id)
    state = _player_state(engine, game_id, player)
    try:
        result = engine.round_result(game_id, round_number)
    except KeyError:
        raise GameError(GameErrorKind.INVALID_ROUND_NUMBER) from None

    if now <= result.round_end_ts:
        raise GameError(GameErrorKind.ROUND_NOT_ENDED)

    prediction = state.get_prediction(round_number)
    if prediction is None:
        raise GameError(GameErrorKind.NO_PREDICTION_FOUND)
    if prediction.points_earned != 0:
        raise GameError(GameErrorKind.ALREADY_EVALUATED)
    if result.correct_answer is None:
        raise GameError(GameErrorKind.NO_PREDICTION_FOUND)

    points = calculate_points(result.round_type, prediction.choice, result.correct_answer)
    total_score = state.total_score + points
    if total_score > _U16_MAX:
        raise GameError(GameErrorKind.ARITHMETIC_OVERFLOW)

    prediction.points_earned = points
    prediction.is_correct = points == POINT_EXACT
    state.scores[round_number - 1] = points
    state.total_score = total_score
    state.rounds_evaluated += 1
    if state.rounds_evaluated == TOTAL_ROUNDS:
        state.all_rounds_completed = True
        state.avg_response_time = (state.total_response_time // TOTAL_ROUNDS) & _U32_MASK

    result.total_predictions += 1
    if points == POINT_EXACT:
        result.correct_predictions += 1
    elif points in (POINT_PARTIAL, POINT_CLOSER):
        result.partial_correct += 1
    else:
        result.wrong_predictions += 1

    log.info(
        "Round evaluated: game=%s player=%s round=%s points=%s total=%s",
        game_id, player, round_number, points, state.total_score,
    )
    return points


def finalize_leaderboard(engine, creator, game_id, player, rank) -> int:
    """Give a fully evaluated player a final rank; return the prize that rank earns."""
    game = _game_for_creator(engine, creator, game_id)
    state = _player_state(engine, game_id, player)

    if game.status is not GameStatus.ACTIVE:
        raise GameError(GameErrorKind.INVALID_GAME_STATUS)
    if not state.all_rounds_completed:
        raise GameError(GameErrorKind.PLAYERS_NOT_EVALUATED)

    state.final_rank = rank
    state.prize_amount = prize_amount(rank, game.prize_pool, game.platform_fee_bps)
    if rank == 1:
        game.top_scorer = state.player
        game.highest_score = state.total_score

    log.info(
        "Player ranked: game=%s player=%s username=%s rank=%s score=%s prize=%s",
        game_id, player, state.username, rank, state.total_score, state.prize_amount,
    )
    return state.prize_amount


def claim_prize(engine, player, game_id) -> int:
    """Mark a winner's prize as claimed; return the prize amount."""
    game = engine.game(game_id)
    state = _player_state(engine, game_id, player)

    if game.status is not GameStatus.COMPLETED:
        raise GameError(GameErrorKind.INVALID_GAME_STATUS)
    if not game.leaderboard_finalized:
        raise GameError(GameErrorKind.LEADERBOARD_NOT_FINALIZED)
    rank = state.final_rank
    if rank is None:
        raise GameError(GameErrorKind.LEADERBOARD_NOT_FINALIZED)
    if rank > _MAX_WINNING_RANK:
        raise GameError(GameErrorKind.NOT_A_WINNER)
    if state.prize_claimed:
        raise GameError(GameErrorKind.PRIZE_ALREADY_CLAIMED)

    state.prize_claimed = True
    log.info(
        "Prize claimed: game=%s player=%s rank=%s amount=%s",
        game_id, player, rank, state.prize_amount,
    )
    return state.prize_amount