import pytest

from degensurvivor.errors import VaultError, VaultErrorKind
from degensurvivor.vault import LAMPORTS_PER_SOL, MAX_WITHDRAWAL_FEE_BPS, Vault
from degensurvivor.vault_admin import (
    collect_game_fee,
    set_paused,
    transfer_admin,
    update_conversion_rate,
    update_withdrawal_fee,
)


@pytest.fixture
def vault():
    return Vault("admin")


@pytest.fixture
def funded_vault(vault):
    vault.deposit("alice", LAMPORTS_PER_SOL)
    return vault


def test_set_paused_blocks_deposits(vault):
    set_paused(vault, "admin", True)
    assert vault.paused is True
    with pytest.raises(VaultError) as info:
        vault.deposit("alice", LAMPORTS_PER_SOL)
    assert info.value.kind is VaultErrorKind.VAULT_PAUSED


def test_set_paused_round_trip(vault):
    set_paused(vault, "admin", True)
    set_paused(vault, "admin", False)
    assert vault.paused is False
    assert vault.deposit("alice", LAMPORTS_PER_SOL) == vault.conversion_rate


def test_set_paused_requires_admin(vault):
    with pytest.raises(VaultError) as info:
        set_paused(vault, "mallory", True)
    assert info.value.kind is VaultErrorKind.UNAUTHORIZED
    assert vault.paused is False


def test_update_conversion_rate(vault):
    update_conversion_rate(vault, "admin", 20_000)
    assert vault.conversion_rate == 20_000


def test_update_conversion_rate_rejects_zero(vault):
    before = vault.conversion_rate
    with pytest.raises(VaultError) as info:
        update_conversion_rate(vault, "admin", 0)
    assert info.value.kind is VaultErrorKind.INVALID_CONVERSION_RATE
    assert vault.conversion_rate == before


def test_update_conversion_rate_requires_admin(vault):
    with pytest.raises(VaultError) as info:
        update_conversion_rate(vault, "mallory", 5)
    assert info.value.kind is VaultErrorKind.UNAUTHORIZED


def test_update_withdrawal_fee_accepts_maximum(vault):
    update_withdrawal_fee(vault, "admin", MAX_WITHDRAWAL_FEE_BPS)
    assert vault.withdrawal_fee_bps == MAX_WITHDRAWAL_FEE_BPS


def test_update_withdrawal_fee_rejects_above_maximum(vault):
    before = vault.withdrawal_fee_bps
    with pytest.raises(VaultError) as info:
        update_withdrawal_fee(vault, "admin", MAX_WITHDRAWAL_FEE_BPS + 1)
    assert info.value.kind is VaultErrorKind.FEE_EXCEEDS_MAXIMUM
    assert vault.withdrawal_fee_bps == before


def test_transfer_admin_moves_authority(vault):
    transfer_admin(vault, "admin", "bob")
    assert vault.admin == "bob"
    with pytest.raises(VaultError) as info:
        set_paused(vault, "admin", True)
    assert info.value.kind is VaultErrorKind.UNAUTHORIZED
    set_paused(vault, "bob", True)
    assert vault.paused is True


def test_collect_game_fee_worked_example(funded_vault):
    lamports_before = funded_vault.lamports
    balance_before = funded_vault.current_sol_balance
    fee_degen, fee_sol = collect_game_fee(funded_vault, "admin", "platform", 7, 25_000)
    assert (fee_degen, fee_sol) == (1_500, 150_000_000)
    assert funded_vault.payouts["platform"] == fee_sol
    assert funded_vault.lamports == lamports_before - fee_sol
    assert funded_vault.current_sol_balance == balance_before - fee_sol
    assert funded_vault.total_sol_withdrawal == fee_sol


def test_collect_game_fee_zero_fees(funded_vault):
    assert collect_game_fee(funded_vault, "admin", "platform", 1, 0) == (0, 0)
    assert funded_vault.payouts["platform"] == 0


def test_collect_game_fee_insufficient_funds(vault):
    with pytest.raises(VaultError) as info:
        collect_game_fee(vault, "admin", "platform", 1, 25_000)
    assert info.value.kind is VaultErrorKind.VAULT_INSUFFICIENT_FUNDS
    assert vault.payouts["platform"] == 0


def test_collect_game_fee_requires_admin(funded_vault):
    with pytest.raises(VaultError) as info:
        collect_game_fee(funded_vault, "mallory", "platform", 1, 25_000)
    assert info.value.kind is VaultErrorKind.UNAUTHORIZED


def test_collect_game_fee_balance_underflow_leaves_state(vault):
    vault.lamports = LAMPORTS_PER_SOL
    with pytest.raises(VaultError) as info:
        collect_game_fee(vault, "admin", "platform", 1, 25_000)
    assert info.value.kind is VaultErrorKind.ARITHMETIC_OVERFLOW
    assert vault.lamports == LAMPORTS_PER_SOL
    assert vault.total_sol_withdrawal == 0


def test_collect_game_fee_zero_rate_overflows(funded_vault):
    funded_vault.conversion_rate = 0
    with pytest.raises(VaultError) as info:
        collect_game_fee(funded_vault, "admin", "platform", 1, 25_000)
    assert info.value.kind is VaultErrorKind.ARITHMETIC_OVERFLOW