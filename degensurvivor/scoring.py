"""Points for round predictions and prize amounts for final ranks."""

from __future__ import annotations

from .models import (
    BPS_DIVISOR,
    POINT_CLOSER,
    POINT_EXACT,
    POINT_FAR,
    POINT_PARTIAL,
    POINT_WRONG,
    PRIZE_RANK_1_BPS,
    PRIZE_RANK_2_BPS,
    PRIZE_RANK_3_BPS,
    PRIZE_RANK_4_5_BPS,
    PRIZE_RANK_6_10_BPS,
    PredictionChoice,
    RoundType,
)

_U64_MAX = 2**64 - 1

_MAGNITUDE_ORDER = (
    PredictionChoice.RANGE_A,
    PredictionChoice.RANGE_B,
    PredictionChoice.RANGE_C,
    PredictionChoice.RANGE_D,
)

_ZONE_NUMBERS = {
    PredictionChoice.ZONE_A: 1,
    PredictionChoice.ZONE_B: 2,
    PredictionChoice.ZONE_C: 3,
    PredictionChoice.ZONE_D: 4,
}


def calculate_points(round_type, player_choice, correct_answer) -> int:
    """Points a choice earns in a round of the given type."""
    if round_type is RoundType.MAGNITUDE:
        return magnitude_points(player_choice, correct_answer)
    if round_type is RoundType.RANGE:
        return range_points(player_choice, correct_answer)
    return POINT_EXACT if player_choice == correct_answer else POINT_WRONG


def magnitude_points(player_choice, correct_answer) -> int:
    """Full points for the right range, partial for a neighbouring one."""
    if player_choice == correct_answer:
        return POINT_EXACT
    if player_choice in _MAGNITUDE_ORDER and correct_answer in _MAGNITUDE_ORDER:
        distance = abs(_MAGNITUDE_ORDER.index(player_choice) - _MAGNITUDE_ORDER.index(correct_answer))
        if distance == 1:
            return POINT_PARTIAL
    return POINT_WRONG


def range_points(player_choice, correct_answer) -> int:
    """Points by zone distance; choices that are not zones count as zone 0."""
    if player_choice == correct_answer:
        return POINT_EXACT
    distance = abs(_ZONE_NUMBERS.get(player_choice, 0) - _ZONE_NUMBERS.get(correct_answer, 0))
    if distance == 1:
        return POINT_CLOSER
    if distance == 2:
        return POINT_FAR
    return POINT_WRONG


def prize_bps(rank) -> int:
    """Share of the distributable pool for a rank, in basis points; 0 outside the top 10."""
    if rank == 1:
        return PRIZE_RANK_1_BPS
    if rank == 2:
        return PRIZE_RANK_2_BPS
    if rank == 3:
        return PRIZE_RANK_3_BPS
    if rank in (4, 5):
        return PRIZE_RANK_4_5_BPS
    if 6 <= rank <= 10:
        return PRIZE_RANK_6_10_BPS
    return 0


def _bps_of(amount: int, bps: int) -> int:
    value = amount * bps // BPS_DIVISOR
    return value if value <= _U64_MAX else 0


def prize_amount(rank, prize_pool, platform_fee_bps) -> int:
    """Prize for a rank once the platform fee is taken from the pool."""
    platform_fee = _bps_of(prize_pool, platform_fee_bps)
    distributable = max(prize_pool - platform_fee, 0)
    return _bps_of(distributable, prize_bps(rank))