"""Prize distribution: per-game prize pools, winner claims and platform fee collection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .errors import PrizeError, PrizeErrorKind
from .scoring import prize_bps
from .vault import TokenLedger

log = logging.getLogger(__name__)

PRIZE_POOL_SEED = b"prize-pool"
CLAIM_RECORD_SEED = b"claim-record"
FEE_COLLECTOR_SEED = b"fee-collector"

PLATFORM_FEE_BPS = 600
BPS_DIVISOR = 10_000
TOTAL_WINNERS = 10

PRIZE_RANK_1_BPS = 4000
PRIZE_RANK_2_BPS = 2000
PRIZE_RANK_3_BPS = 1200
PRIZE_RANK_4_5_BPS = 600
PRIZE_RANK_6_10_BPS = 200

_U16_MAX = 2**16 - 1
_U64_MAX = 2**64 - 1


def _checked(value: int, limit: int = _U64_MAX) -> int:
    if not 0 <= value <= limit:
        raise PrizeError(PrizeErrorKind.ARITHMETIC_OVERFLOW)
    return value


def _bps_of(amount: int, bps: int) -> int:
    value = amount * bps // BPS_DIVISOR
    return value if value <= _U64_MAX else 0


def calculate_prize_amount(rank, total_pool, platform_fee) -> int:
    """Prize for a rank from the pool left after the platform fee; 0 outside the top 10."""
    distributable = max(total_pool - platform_fee, 0)
    return _bps_of(distributable, prize_bps(rank))


@dataclass
class PrizePool:
    """Prize bookkeeping for one game."""

    game_id: int
    game_state: str
    total_pool: int
    platform_fee: int
    admin: str
    created_at: int
    game_state_bump: int = 0
    distributed_amount: int = 0
    platform_fee_collected: bool = False
    claims_processed: int = 0
    total_winners: int = TOTAL_WINNERS
    fully_distributed: bool = False
    first_claim_at: int | None = None
    last_claim_at: int | None = None


@dataclass(frozen=True)
class ClaimRecord:
    """Audit record of one player's prize claim."""

    game_id: int
    player: str
    rank: int
    amount: int
    claimed_at: int
    claim_signature: bytes = field(default=bytes(64))
    claim_successful: bool = True


@dataclass
class FeeCollector:
    """Running totals of platform fees across all games."""

    admin: str
    total_fees_collected: int = 0
    total_fees_withdrawn: int = 0
    available_balance: int = 0
    games_processed: int = 0
    last_withdrawal_at: int | None = None


class PrizeDistributor:
    """Holds prize pools and claim records and moves prize tokens out of pool accounts."""

    def __init__(self, ledger=None):
        self.ledger = TokenLedger() if ledger is None else ledger
        self.pools: dict[int, PrizePool] = {}
        self.claims: dict[tuple[int, str], ClaimRecord] = {}
        self.fee_collector: FeeCollector | None = None

    def _pool(self, game_id) -> PrizePool:
        pool = self.pools.get(game_id)
        if pool is None:
            raise PrizeError(PrizeErrorKind.PRIZE_POOL_NOT_INITIALIZED)
        return pool

    def initialize_prize_pool(self, admin, game_id, game_state, total_pool, game_state_bump=0, now=0) -> PrizePool:
        """Create the prize pool of a completed game, setting aside the platform fee."""
        if game_id in self.pools:
            raise ValueError(f"prize pool for game {game_id} already exists")
        platform_fee = _bps_of(total_pool, PLATFORM_FEE_BPS)
        pool = PrizePool(
            game_id=game_id,
            game_state=game_state,
            total_pool=total_pool,
            platform_fee=platform_fee,
            admin=admin,
            created_at=now,
            game_state_bump=game_state_bump,
        )
        self.pools[game_id] = pool
        log.info(
            "Prize pool initialized: game=%s total=%s fee=%s (%s%%) distributable=%s",
            game_id, total_pool, platform_fee, PLATFORM_FEE_BPS // 100, total_pool - platform_fee,
        )
        return pool

    def claim_prize(self, player, game_id, rank, prize_amount, pool_account, now) -> ClaimRecord:
        """Pay a winner's prize from ``pool_account`` and record the claim."""
        pool = self._pool(game_id)
        if (game_id, player) in self.claims:
            raise PrizeError(PrizeErrorKind.ALREADY_CLAIMED)
        if not 1 <= rank <= TOTAL_WINNERS:
            raise PrizeError(PrizeErrorKind.NOT_A_WINNER)

        expected = calculate_prize_amount(rank, pool.total_pool, pool.platform_fee)
        if prize_amount != expected:
            raise PrizeError(PrizeErrorKind.PRIZE_AMOUNT_MISMATCH)
        if self.ledger.balance(pool_account) < prize_amount:
            raise PrizeError(PrizeErrorKind.INSUFFICIENT_PRIZE_POOL)

        distributed = _checked(pool.distributed_amount + prize_amount)
        claims = _checked(pool.claims_processed + 1, _U16_MAX)

        self.ledger.transfer(pool_account, player, prize_amount)

        pool.distributed_amount = distributed
        pool.claims_processed = claims
        if pool.first_claim_at is None:
            pool.first_claim_at = now
        pool.last_claim_at = now
        if pool.claims_processed == pool.total_winners:
            pool.fully_distributed = True

        record = ClaimRecord(
            game_id=game_id,
            player=player,
            rank=rank,
            amount=prize_amount,
            claimed_at=now,
        )
        self.claims[(game_id, player)] = record
        log.info(
            "Prize claimed: player=%s rank=%s amount=%s distributed=%s claims=%s/%s",
            player, rank, prize_amount, pool.distributed_amount,
            pool.claims_processed, pool.total_winners,
        )
        return record

    def collect_platform_fee(self, admin, game_id, pool_account, now) -> FeeCollector:
        """Move a game's platform fee to the admin, once per game."""
        pool = self._pool(game_id)
        if pool.admin != admin:
            raise PrizeError(PrizeErrorKind.UNAUTHORIZED)
        if pool.platform_fee_collected:
            raise PrizeError(PrizeErrorKind.FEE_ALREADY_COLLECTED)
        fee = pool.platform_fee
        if fee <= 0:
            raise PrizeError(PrizeErrorKind.NO_FEES_AVAILABLE)

        collector = self.fee_collector or FeeCollector(admin=admin)
        total_collected = _checked(collector.total_fees_collected + fee)
        total_withdrawn = _checked(collector.total_fees_withdrawn + fee)
        games_processed = _checked(collector.games_processed + 1)

        self.ledger.transfer(pool_account, admin, fee)
        pool.platform_fee_collected = True

        collector.total_fees_collected = total_collected
        collector.total_fees_withdrawn = total_withdrawn
        collector.games_processed = games_processed
        collector.last_withdrawal_at = now
        self.fee_collector = collector

        log.info(
            "Platform fee collected: game=%s fee=%s total=%s games=%s",
            game_id, fee, collector.total_fees_collected, collector.games_processed,
        )
        return collector