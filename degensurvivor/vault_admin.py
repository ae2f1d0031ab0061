"""Administrative operations on the vault: pausing, fees, admin hand-over and game fees."""

from __future__ import annotations

import logging

from .errors import VaultError, VaultErrorKind
from .vault import BPS_DIVISOR, LAMPORTS_PER_SOL, MAX_WITHDRAWAL_FEE_BPS, U64_MAX

log = logging.getLogger(__name__)

# Share of a game's entry fees kept by the platform, in basis points (6%).
GAME_FEE_BPS = 600


def _require_admin(vault, admin) -> None:
    if admin != vault.admin:
        raise VaultError(VaultErrorKind.UNAUTHORIZED)


def _checked(value: int) -> int:
    if not 0 <= value <= U64_MAX:
        raise VaultError(VaultErrorKind.ARITHMETIC_OVERFLOW)
    return value


def set_paused(vault, admin, paused) -> None:
    """Pause or resume deposits and withdrawals."""
    _require_admin(vault, admin)
    vault.paused = bool(paused)
    log.info("Vault paused status: %s", vault.paused)


def update_conversion_rate(vault, admin, new_rate) -> None:
    """Set how many DEGEN one SOL buys; the rate must be positive."""
    _require_admin(vault, admin)
    if new_rate <= 0:
        raise VaultError(VaultErrorKind.INVALID_CONVERSION_RATE)
    vault.conversion_rate = new_rate
    log.info("Conversion rate updated to: %s DEGEN per SOL", new_rate)


def update_withdrawal_fee(vault, admin, new_fee_bps) -> None:
    """Set the withdrawal fee in basis points, at most the allowed maximum."""
    _require_admin(vault, admin)
    if new_fee_bps > MAX_WITHDRAWAL_FEE_BPS:
        raise VaultError(VaultErrorKind.FEE_EXCEEDS_MAXIMUM)
    vault.withdrawal_fee_bps = new_fee_bps
    log.info("Withdrawal fee updated to: %s%%", new_fee_bps // 100)


def transfer_admin(vault, admin, new_admin) -> None:
    """Hand admin authority over to ``new_admin``."""
    _require_admin(vault, admin)
    vault.admin = new_admin
    log.info("Admin transferred to: %s", new_admin)


def collect_game_fee(vault, admin, platform_wallet, game_id, total_entry_fees_degen) -> tuple[int, int]:
    """Pay the platform its share of a game's entry fees in SOL.

    Returns the fee as (DEGEN equivalent, lamports paid).
    """
    _require_admin(vault, admin)

    fee_degen = _checked(total_entry_fees_degen * GAME_FEE_BPS // BPS_DIVISOR)
    if vault.conversion_rate == 0:
        raise VaultError(VaultErrorKind.ARITHMETIC_OVERFLOW)
    fee_sol = _checked(fee_degen * LAMPORTS_PER_SOL) // vault.conversion_rate

    if vault.lamports < fee_sol:
        raise VaultError(VaultErrorKind.VAULT_INSUFFICIENT_FUNDS)

    total_withdrawal = _checked(vault.total_sol_withdrawal + fee_sol)
    current_balance = _checked(vault.current_sol_balance - fee_sol)

    vault.lamports -= fee_sol
    vault.payouts[platform_wallet] += fee_sol
    vault.total_sol_withdrawal = total_withdrawal
    vault.current_sol_balance = current_balance

    log.info(
        "Platform game fee collected: game=%s entry_fees=%s fee_degen=%s fee_lamports=%s wallet=%s",
        game_id, total_entry_fees_degen, fee_degen, fee_sol, platform_wallet,
    )
    return fee_degen, fee_sol