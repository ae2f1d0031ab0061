"""Error kinds and exceptions raised by the game, oracle, prize and vault components."""

from __future__ import annotations

from enum import Enum, unique

ERROR_CODE_OFFSET = 6000


@unique
class GameErrorKind(Enum):
    """Failures of the game engine; each value is the user-facing message."""

    GAME_NOT_STARTED = "Game has Not started yet"
    GAME_ALREADY_STARTED = "Game has already started, cannot join"
    GAME_FULL = "Game is full, maximum players reached"
    GAME_ALREADY_COMPLETED = "Game has already been completed"
    PLAYER_ALREADY_JOINED = "Player has already joined this game"
    PLAYER_NOT_IN_GAME = "Player has not joined this game"
    ALREADY_PREDICTED = "Player has already submitted prediction for this round"
    PREDICTION_WINDOW_CLOSED = "Prediction window has closed for this round"
    PREDICTION_TOO_LATE = "Cannot predict in last 5 seconds (anti-cheat)"
    INVALID_ROUND_NUMBER = "Wrong round number provided"
    ROUND_NOT_ENDED = "Round has not ended yet, cannot evaluate"
    NO_PREDICTION_FOUND = "Player did not make a prediction for this round"
    ALREADY_EVALUATED = "This round has already been evaluated for this player"
    PLAYERS_NOT_EVALUATED = "Not all players have been evaluated yet"
    LEADERBOARD_NOT_FINALIZED = "Leaderboard has not been finalized yet"
    LEADERBOARD_ALREADY_FINALIZED = "Leaderboard has already been finalized"
    NOT_A_WINNER = "Player is not a winner (rank > 10)"
    PRIZE_ALREADY_CLAIMED = "Prize has already been claimed"
    UNAUTHORIZED = "Unauthorized: Only game creator can perform this action"
    INVALID_START_TIME = "Game start time must be in the future"
    INSUFFICIENT_PLAYERS = "Not enough players to start game"
    USERNAME_TOO_LONG = "Username is too long (max 20 characters)"
    INVALID_GAME_STATUS = "Invalid game status for this operation"
    ARITHMETIC_OVERFLOW = "Arithmetic overflow occurred"
    INVALID_PREDICTION_CHOICE = "Invalid prediction choice for this round type"
    REGISTRATION_CLOSED = "Cannot join game, registration closes 2 minutes before start"


@unique
class OracleErrorKind(Enum):
    """Failures of the price oracle."""

    PRICE_STALE = "Price data is too old (stale), refresh required"
    LOW_CONFIDENCE = "Price confidence interval is too high (unreliable)"
    INSUFFICIENT_PUBLISHERS = "Not enough publishers contributing to price"
    WRONG_PRICE_FEED = "Pyth price feed account does not match configuration"
    PRICE_NOT_AVAILABLE = "Pyth reports price as unavailable or halted"
    PYTH_DESERIALIZATION_ERROR = "Failed to deserialize Pyth price account"
    ORACLE_PAUSED = "Oracle is currently paused by admin"
    UNAUTHORIZED = "Unauthorized: Only admin can perform this action"
    INVALID_ASSET_TYPE = "Invalid asset type provided"
    SNAPSHOT_ALREADY_EXISTS = "Price snapshot already exists for this round"
    ARITHMETIC_OVERFLOW = "Arithmetic overflow occurred"
    INVALID_STALENESS_THRESHOLD = "Invalid staleness threshold (must be positive)"
    INVALID_CONFIDENCE_THRESHOLD = "Invalid confidence threshold"


@unique
class PrizeErrorKind(Enum):
    """Failures of the prize distributor."""

    PRIZE_POOL_NOT_INITIALIZED = "Prize pool has not been initialized for this game"
    ALREADY_CLAIMED = "Prize has already been claimed by this player"
    NOT_A_WINNER = "Player is not a winner (rank must be 1-10)"
    GAME_NOT_COMPLETED = "Game is not completed yet, prizes cannot be claimed"
    LEADERBOARD_NOT_FINALIZED = "Leaderboard has not been finalized"
    INSUFFICIENT_PRIZE_POOL = "Prize pool has insufficient funds"
    FEE_ALREADY_COLLECTED = "Platform fee has already been collected"
    INVALID_RANK = "Invalid rank provided (must be 1-10)"
    PRIZE_AMOUNT_MISMATCH = "Prize amount does not match calculated amount"
    UNAUTHORIZED = "Unauthorized: Only admin can perform this action"
    ARITHMETIC_OVERFLOW = "Arithmetic overflow occurred"
    GAME_STATE_VERIFICATION_FAILED = "Game state verification failed"
    PLAYER_STATE_VERIFICATION_FAILED = "Player state verification failed"
    NO_FEES_AVAILABLE = "No platform fees available to withdraw"


@unique
class VaultErrorKind(Enum):
    """Failures of the vault and treasury."""

    VAULT_PAUSED = "Vault is currently paused by admin"
    DEPOSIT_TOO_SMALL = "Deposit amount is too small"
    DEPOSIT_TOO_LARGE = "Deposite Amount is too large"
    INSUFFICIENT_BALANCE = "Insufficient balance"
    WITHDRAWAL_TIMELOCK_ACTIVE = "Withdrawal timelock is still active"
    NO_PENDING_WITHDRAWAL = "No pending withdrawal request found"
    WITHDRAWAL_ALREADY_PENDING = "User already has a pending withdrawal"
    INVALID_WITHDRAWAL_AMOUNT = "Withdrawal amount cannot be zero"
    VAULT_INSUFFICIENT_FUNDS = "Vault has insufficient SOL for withdrawal"
    FEE_EXCEEDS_MAXIMUM = "Fee percentage exceeds maximum allowed (10%)"
    ARITHMETIC_OVERFLOW = "Arithmetic overflow occurred"
    INVALID_CONVERSION_RATE = "Invalid conversion rate (must be > 0)"
    UNAUTHORIZED = "Unauthorized: Only admin can perform this action"
    INVALID_TOKEN_MINT = "Invalid token mint provided"
    INVALID_TOKEN_ACCOUNT = "Token account does not belong to user"


class ProgramError(Exception):
    """Base exception carrying an error kind, its message and numeric code."""

    kind_type: type[Enum] = Enum

    def __init__(self, kind):
        if not isinstance(kind, self.kind_type):
            raise TypeError(
                f"{type(self).__name__} expects a {self.kind_type.__name__}, got {kind!r}"
            )
        super().__init__(kind.value)
        self.kind = kind

    @property
    def message(self) -> str:
        return self.kind.value

    @property
    def code(self) -> int:
        """Numeric error code: the offset plus the kind's position in its enum."""
        return ERROR_CODE_OFFSET + list(type(self.kind)).index(self.kind)


class GameError(ProgramError):
    kind_type = GameErrorKind


class OracleError(ProgramError):
    kind_type = OracleErrorKind


class PrizeError(ProgramError):
    kind_type = PrizeErrorKind


class VaultError(ProgramError):
    kind_type = VaultErrorKind