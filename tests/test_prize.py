import pytest

from degensurvivor.errors import PrizeError, PrizeErrorKind
from degensurvivor.prize import (
    PRIZE_RANK_1_BPS,
    PRIZE_RANK_2_BPS,
    PRIZE_RANK_3_BPS,
    PRIZE_RANK_4_5_BPS,
    PRIZE_RANK_6_10_BPS,
    TOTAL_WINNERS,
    PrizeDistributor,
    calculate_prize_amount,
)
from degensurvivor.vault import TokenLedger

POOL_ACCOUNT = "prize-pool:1"
ADMIN = "admin"


def make_distributor(total_pool=25_000, funded=None, game_id=1):
    ledger = TokenLedger()
    ledger.mint_to(POOL_ACCOUNT, total_pool if funded is None else funded)
    distributor = PrizeDistributor(ledger)
    distributor.initialize_prize_pool(ADMIN, game_id, "game-state", total_pool, 255, 100)
    return distributor


@pytest.mark.parametrize(
    "rank, bps",
    [
        (1, PRIZE_RANK_1_BPS),
        (2, PRIZE_RANK_2_BPS),
        (3, PRIZE_RANK_3_BPS),
        (4, PRIZE_RANK_4_5_BPS),
        (5, PRIZE_RANK_4_5_BPS),
        (6, PRIZE_RANK_6_10_BPS),
        (10, PRIZE_RANK_6_10_BPS),
    ],
)
def test_prize_of_whole_bps_pool_equals_rank_share(rank, bps):
    assert calculate_prize_amount(rank, 10_000, 0) == bps


@pytest.mark.parametrize("rank", [0, 11, 50])
def test_non_winning_rank_gets_nothing(rank):
    assert calculate_prize_amount(rank, 1_000_000, 60_000) == 0


def test_fee_larger_than_pool_leaves_nothing():
    assert calculate_prize_amount(1, 100, 500) == 0


def test_all_prizes_fit_in_distributable_pool():
    total, fee = 1_000_003, 60_000
    paid = sum(calculate_prize_amount(rank, total, fee) for rank in range(1, 11))
    assert paid <= total - fee


def test_initialize_sets_platform_fee():
    distributor = make_distributor(25_000)
    pool = distributor.pools[1]
    assert pool.platform_fee == 1500
    assert pool.total_winners == TOTAL_WINNERS
    assert pool.admin == ADMIN
    assert pool.created_at == 100
    assert not pool.platform_fee_collected


def test_initialize_twice_fails():
    distributor = make_distributor()
    with pytest.raises(ValueError):
        distributor.initialize_prize_pool(ADMIN, 1, "game-state", 10, 0, 0)


def test_claim_transfers_tokens_and_records():
    distributor = make_distributor(25_000)
    pool = distributor.pools[1]
    amount = calculate_prize_amount(1, pool.total_pool, pool.platform_fee)
    record = distributor.claim_prize("alice", 1, 1, amount, POOL_ACCOUNT, 500)
    assert record.amount == amount
    assert record.rank == 1
    assert record.claim_successful
    assert record.claim_signature == bytes(64)
    assert distributor.ledger.balance("alice") == amount
    assert distributor.ledger.balance(POOL_ACCOUNT) == 25_000 - amount
    assert pool.distributed_amount == amount
    assert pool.claims_processed == 1
    assert pool.first_claim_at == 500
    assert pool.last_claim_at == 500


def test_second_claim_updates_last_claim_only():
    distributor = make_distributor(25_000)
    pool = distributor.pools[1]
    first = calculate_prize_amount(1, pool.total_pool, pool.platform_fee)
    second = calculate_prize_amount(2, pool.total_pool, pool.platform_fee)
    distributor.claim_prize("alice", 1, 1, first, POOL_ACCOUNT, 500)
    distributor.claim_prize("bob", 1, 2, second, POOL_ACCOUNT, 700)
    assert pool.first_claim_at == 500
    assert pool.last_claim_at == 700
    assert pool.distributed_amount == first + second


def test_double_claim_rejected():
    distributor = make_distributor()
    pool = distributor.pools[1]
    amount = calculate_prize_amount(3, pool.total_pool, pool.platform_fee)
    distributor.claim_prize("alice", 1, 3, amount, POOL_ACCOUNT, 500)
    with pytest.raises(PrizeError) as info:
        distributor.claim_prize("alice", 1, 3, amount, POOL_ACCOUNT, 600)
    assert info.value.kind is PrizeErrorKind.ALREADY_CLAIMED


@pytest.mark.parametrize("rank", [0, 11])
def test_claim_with_losing_rank_rejected(rank):
    distributor = make_distributor()
    with pytest.raises(PrizeError) as info:
        distributor.claim_prize("alice", 1, rank, 0, POOL_ACCOUNT, 500)
    assert info.value.kind is PrizeErrorKind.NOT_A_WINNER


def test_claim_with_wrong_amount_rejected():
    distributor = make_distributor()
    pool = distributor.pools[1]
    amount = calculate_prize_amount(1, pool.total_pool, pool.platform_fee)
    with pytest.raises(PrizeError) as info:
        distributor.claim_prize("alice", 1, 1, amount + 1, POOL_ACCOUNT, 500)
    assert info.value.kind is PrizeErrorKind.PRIZE_AMOUNT_MISMATCH
    assert distributor.ledger.balance("alice") == 0


def test_claim_from_underfunded_pool_rejected():
    distributor = make_distributor(25_000, funded=1)
    pool = distributor.pools[1]
    amount = calculate_prize_amount(1, pool.total_pool, pool.platform_fee)
    with pytest.raises(PrizeError) as info:
        distributor.claim_prize("alice", 1, 1, amount, POOL_ACCOUNT, 500)
    assert info.value.kind is PrizeErrorKind.INSUFFICIENT_PRIZE_POOL


def test_claim_without_pool_rejected():
    distributor = PrizeDistributor()
    with pytest.raises(PrizeError) as info:
        distributor.claim_prize("alice", 9, 1, 0, POOL_ACCOUNT, 500)
    assert info.value.kind is PrizeErrorKind.PRIZE_POOL_NOT_INITIALIZED


def test_ten_claims_fully_distribute():
    distributor = make_distributor(1_000_000)
    pool = distributor.pools[1]
    for rank in range(1, 11):
        amount = calculate_prize_amount(rank, pool.total_pool, pool.platform_fee)
        distributor.claim_prize(f"player{rank}", 1, rank, amount, POOL_ACCOUNT, 500 + rank)
        assert pool.fully_distributed == (rank == 10)
    assert pool.claims_processed == TOTAL_WINNERS
    assert distributor.ledger.balance(POOL_ACCOUNT) == pool.total_pool - pool.distributed_amount


def test_collect_platform_fee():
    distributor = make_distributor(25_000)
    pool = distributor.pools[1]
    collector = distributor.collect_platform_fee(ADMIN, 1, POOL_ACCOUNT, 900)
    assert distributor.ledger.balance(ADMIN) == pool.platform_fee
    assert pool.platform_fee_collected
    assert collector.admin == ADMIN
    assert collector.total_fees_collected == pool.platform_fee
    assert collector.total_fees_withdrawn == pool.platform_fee
    assert collector.games_processed == 1
    assert collector.last_withdrawal_at == 900


def test_collect_fee_twice_rejected():
    distributor = make_distributor()
    distributor.collect_platform_fee(ADMIN, 1, POOL_ACCOUNT, 900)
    with pytest.raises(PrizeError) as info:
        distributor.collect_platform_fee(ADMIN, 1, POOL_ACCOUNT, 901)
    assert info.value.kind is PrizeErrorKind.FEE_ALREADY_COLLECTED


def test_collect_fee_by_stranger_rejected():
    distributor = make_distributor()
    with pytest.raises(PrizeError) as info:
        distributor.collect_platform_fee("mallory", 1, POOL_ACCOUNT, 900)
    assert info.value.kind is PrizeErrorKind.UNAUTHORIZED
    assert distributor.fee_collector is None


def test_collect_zero_fee_rejected():
    distributor = make_distributor(10)
    with pytest.raises(PrizeError) as info:
        distributor.collect_platform_fee(ADMIN, 1, POOL_ACCOUNT, 900)
    assert info.value.kind is PrizeErrorKind.NO_FEES_AVAILABLE


def test_fees_accumulate_across_games():
    distributor = make_distributor(25_000)
    distributor.ledger.mint_to("prize-pool:2", 50_000)
    distributor.initialize_prize_pool(ADMIN, 2, "game-state-2", 50_000, 254, 100)
    distributor.collect_platform_fee(ADMIN, 1, POOL_ACCOUNT, 900)
    collector = distributor.collect_platform_fee(ADMIN, 2, "prize-pool:2", 950)
    expected = distributor.pools[1].platform_fee + distributor.pools[2].platform_fee
    assert collector.games_processed == 2
    assert collector.total_fees_collected == expected
    assert distributor.ledger.balance(ADMIN) == expected
    assert collector.last_withdrawal_at == 950