"""Vault and treasury: SOL deposits exchanged for DEGEN tokens, with timelocked withdrawals."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum

from .errors import VaultError, VaultErrorKind

log = logging.getLogger(__name__)

GLOBAL_VAULT_SEED = b"global-vault"
USER_VAULT_SEED = b"user-vault"
FEE_COLLECTOR_SEED = b"fee-collector"

DEFAULT_CONVERSION_RATE = 10_000
DEFAULT_WITHDRAWAL_FEE_BPS = 500
MAX_WITHDRAWAL_FEE_BPS = 1000
WITHDRAWAL_TIMELOCK_SECONDS = 24 * 60 * 60
MIN_DEPOSIT_LAMPORTS = 10_000_000
MAX_DEPOSIT_LAMPORTS = 100_000_000_000
TOKEN_DECIMALS = 9
BPS_DIVISOR = 10_000
LAMPORTS_PER_SOL = 1_000_000_000

U64_MAX = 2**64 - 1
I64_MIN = -(2**63)
I64_MAX = 2**63 - 1


def _u64(value: int) -> int:
    if not 0 <= value <= U64_MAX:
        raise VaultError(VaultErrorKind.ARITHMETIC_OVERFLOW)
    return value


def _i64(value: int) -> int:
    if not I64_MIN <= value <= I64_MAX:
        raise VaultError(VaultErrorKind.ARITHMETIC_OVERFLOW)
    return value


def _checked_div(numerator: int, divisor: int) -> int:
    if divisor == 0:
        raise VaultError(VaultErrorKind.ARITHMETIC_OVERFLOW)
    return numerator // divisor


class TokenLedger:
    """Balances of a single fungible token, keyed by account owner."""

    def __init__(self, decimals: int = TOKEN_DECIMALS):
        self.decimals = decimals
        self.supply = 0
        self._balances: Counter[str] = Counter()

    @staticmethod
    def _check_amount(amount: int) -> None:
        if amount < 0:
            raise ValueError(f"token amount must not be negative: {amount}")

    def balance(self, account) -> int:
        return self._balances[account]

    def mint_to(self, account, amount) -> None:
        self._check_amount(amount)
        self._balances[account] += amount
        self.supply += amount

    def burn(self, account, amount) -> None:
        self._check_amount(amount)
        if self._balances[account] < amount:
            raise ValueError(f"insufficient token balance in {account!r}")
        self._balances[account] -= amount
        self.supply -= amount

    def transfer(self, source, destination, amount) -> None:
        self._check_amount(amount)
        if self._balances[source] < amount:
            raise ValueError(f"insufficient token balance in {source!r}")
        self._balances[source] -= amount
        self._balances[destination] += amount


class WithdrawalState(Enum):
    NONE = "none"
    PENDING = "pending"
    READY = "ready"


@dataclass
class UserVault:
    """Per-user deposit and withdrawal bookkeeping."""

    owner: str
    total_degen_balance: int = 0
    total_deposit: int = 0
    total_withdrawal: int = 0
    pending_withdrawal_amount: int = 0
    withdrawal_unlock_ts: int = 0
    withdrawal_requested_at: int = 0

    def has_pending_withdrawal(self) -> bool:
        return self.pending_withdrawal_amount > 0

    def is_withdrawal_ready(self, current_ts) -> bool:
        return self.has_pending_withdrawal() and current_ts >= self.withdrawal_unlock_ts

    def withdrawal_state(self, current_ts) -> WithdrawalState:
        if not self.has_pending_withdrawal():
            return WithdrawalState.NONE
        if self.is_withdrawal_ready(current_ts):
            return WithdrawalState.READY
        return WithdrawalState.PENDING


class Vault:
    """The global vault: holds deposited SOL and is the DEGEN mint authority.

    ``lamports`` is the SOL actually held by the vault; ``payouts`` records the
    lamports it has paid out to each account.
    """

    def __init__(self, admin, ledger=None):
        self.admin = admin
        self.ledger = TokenLedger() if ledger is None else ledger
        self.total_sol_deposited = 0
        self.total_sol_withdrawal = 0
        self.current_sol_balance = 0
        self.conversion_rate = DEFAULT_CONVERSION_RATE
        self.withdrawal_fee_bps = DEFAULT_WITHDRAWAL_FEE_BPS
        self.paused = False
        self.lamports = 0
        self.payouts: Counter[str] = Counter()
        self._users: dict[str, UserVault] = {}
        log.info(
            "Vault initialized: admin=%s rate=%s fee=%s%%",
            admin, self.conversion_rate, self.withdrawal_fee_bps // 100,
        )

    def _require_active(self) -> None:
        if self.paused:
            raise VaultError(VaultErrorKind.VAULT_PAUSED)

    def user_vault(self, user) -> UserVault:
        """Return the user's vault record; raise KeyError if the user never deposited."""
        try:
            return self._users[user]
        except KeyError:
            raise KeyError(user) from None

    def deposit(self, user, sol_amount) -> int:
        """Take ``sol_amount`` lamports from the user and mint DEGEN; return the amount minted."""
        self._require_active()
        if sol_amount < MIN_DEPOSIT_LAMPORTS:
            raise VaultError(VaultErrorKind.DEPOSIT_TOO_SMALL)
        if sol_amount > MAX_DEPOSIT_LAMPORTS:
            raise VaultError(VaultErrorKind.DEPOSIT_TOO_LARGE)

        account = self._users.get(user) or UserVault(owner=user)
        degen_amount = _checked_div(_u64(sol_amount * self.conversion_rate), LAMPORTS_PER_SOL)

        total_deposited = _u64(self.total_sol_deposited + sol_amount)
        current_balance = _u64(self.current_sol_balance + sol_amount)
        user_deposit = _u64(account.total_deposit + sol_amount)
        user_degen = _u64(account.total_degen_balance + degen_amount)

        self.lamports += sol_amount
        self.ledger.mint_to(user, degen_amount)
        self.total_sol_deposited = total_deposited
        self.current_sol_balance = current_balance
        account.total_deposit = user_deposit
        account.total_degen_balance = user_degen
        self._users[user] = account

        log.info("Deposit: user=%s lamports=%s degen=%s", user, sol_amount, degen_amount)
        return degen_amount

    def request_withdrawal(self, user, degen_amount, now) -> int:
        """Start the withdrawal timelock for ``degen_amount``; return the unlock time."""
        account = self.user_vault(user)
        self._require_active()
        if degen_amount <= 0:
            raise VaultError(VaultErrorKind.INVALID_WITHDRAWAL_AMOUNT)
        if account.has_pending_withdrawal():
            raise VaultError(VaultErrorKind.WITHDRAWAL_ALREADY_PENDING)
        if account.total_degen_balance < degen_amount:
            raise VaultError(VaultErrorKind.INSUFFICIENT_BALANCE)

        sol_amount = _checked_div(_u64(degen_amount * LAMPORTS_PER_SOL), self.conversion_rate)
        if self.current_sol_balance < sol_amount:
            raise VaultError(VaultErrorKind.VAULT_INSUFFICIENT_FUNDS)

        unlock_ts = _i64(now + WITHDRAWAL_TIMELOCK_SECONDS)
        account.pending_withdrawal_amount = degen_amount
        account.withdrawal_requested_at = now
        account.withdrawal_unlock_ts = unlock_ts

        log.info("Withdrawal requested: user=%s degen=%s unlock=%s", user, degen_amount, unlock_ts)
        return unlock_ts

    def execute_withdrawal(self, user, fee_collector, now) -> tuple[int, int]:
        """Burn the pending DEGEN and pay out SOL; return (lamports to user, fee lamports)."""
        account = self.user_vault(user)
        self._require_active()
        if not account.has_pending_withdrawal():
            raise VaultError(VaultErrorKind.NO_PENDING_WITHDRAWAL)
        if not account.is_withdrawal_ready(now):
            raise VaultError(VaultErrorKind.WITHDRAWAL_TIMELOCK_ACTIVE)

        degen_amount = account.pending_withdrawal_amount
        total_sol = _checked_div(_u64(degen_amount * LAMPORTS_PER_SOL), self.conversion_rate)
        fee_amount = _u64(total_sol * self.withdrawal_fee_bps) // BPS_DIVISOR
        user_receives = _u64(total_sol - fee_amount)

        if self.current_sol_balance < total_sol:
            raise VaultError(VaultErrorKind.VAULT_INSUFFICIENT_FUNDS)
        if self.lamports < total_sol:
            raise VaultError(VaultErrorKind.VAULT_INSUFFICIENT_FUNDS)

        total_withdrawal = _u64(self.total_sol_withdrawal + total_sol)
        current_balance = _u64(self.current_sol_balance - total_sol)
        user_withdrawal = _u64(account.total_withdrawal + total_sol)
        user_degen = _u64(account.total_degen_balance - degen_amount)

        self.ledger.burn(user, degen_amount)

        self.lamports -= user_receives
        self.payouts[user] += user_receives
        if fee_amount > 0:
            self.lamports -= fee_amount
            self.payouts[fee_collector] += fee_amount

        self.total_sol_withdrawal = total_withdrawal
        self.current_sol_balance = current_balance
        account.total_withdrawal = user_withdrawal
        account.total_degen_balance = user_degen
        account.pending_withdrawal_amount = 0
        account.withdrawal_unlock_ts = 0
        account.withdrawal_requested_at = 0

        log.info(
            "Withdrawal executed: user=%s burned=%s paid=%s fee=%s",
            user, degen_amount, user_receives, fee_amount,
        )
        return user_receives, fee_amount