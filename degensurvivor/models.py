"""Game rules constants and the records describing games, players and rounds."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

GAME_SEED = b"game"
PLAYER_SEED = b"player"
ROUND_RESULT_SEED = b"round-result"

DEFAULT_ENTRY_FEE = 500_000_000_000
MAX_PLAYER = 50
MIN_PLAYER = 2
TOTAL_ROUNDS = 5
ROUND_DURATION_SECONDS = 60
ROUND_GAP_SECONDS = 120
PREDICTION_LOCKOUT_SECONDS = 5
PLATFORM_FEE_BPS = 600
MAX_USERNAME_LENGTH = 20

POINT_EXACT = 100
POINT_PARTIAL = 50
POINT_CLOSER = 60
POINT_FAR = 20
POINT_WRONG = 0

PRIZE_RANK_1_BPS = 4000
PRIZE_RANK_2_BPS = 2000
PRIZE_RANK_3_BPS = 1200
PRIZE_RANK_4_5_BPS = 600
PRIZE_RANK_6_10_BPS = 200

BPS_DIVISOR = 10_000
REGISTRATION_CLOSE_BEFORE_START = 120


class GameType(Enum):
    BTC_ONLY = auto()
    SOL_ONLY = auto()
    BTC_VS_SOL = auto()


class GameStatus(Enum):
    PENDING = auto()
    ACTIVE = auto()
    COMPLETED = auto()
    CANCELLED = auto()


class RoundType(Enum):
    PRICE_DIRECTION = auto()
    MAGNITUDE = auto()
    COMPARATIVE = auto()
    RANGE = auto()
    TREND = auto()


class PredictionChoice(Enum):
    UP = auto()
    DOWN = auto()
    RANGE_A = auto()
    RANGE_B = auto()
    RANGE_C = auto()
    RANGE_D = auto()
    BTC_MORE = auto()
    SOL_MORE = auto()
    EQUAL = auto()
    ZONE_A = auto()
    ZONE_B = auto()
    ZONE_C = auto()
    ZONE_D = auto()
    HIGHER_HIGHER = auto()
    LOWER_LOWER = auto()
    HIGHER_LOWER = auto()
    LOWER_HIGHER = auto()


DEFAULT_ROUND_TYPES = (
    RoundType.PRICE_DIRECTION,
    RoundType.MAGNITUDE,
    RoundType.COMPARATIVE,
    RoundType.RANGE,
    RoundType.TREND,
)


@dataclass
class RoundPrediction:
    round_number: int
    choice: PredictionChoice
    submitted_at: int
    response_time: int
    points_earned: int = 0
    is_correct: bool = False


@dataclass
class GameState:
    """One scheduled game; round deadlines follow from the start time unless given."""

    game_id: int
    game_type: GameType
    creator: str
    start_time: int
    status: GameStatus = GameStatus.PENDING
    created_at: int = 0
    actual_start_time: int | None = None
    end_time: int | None = None
    current_round: int = 0
    total_rounds: int = TOTAL_ROUNDS
    round_deadlines: list[int] = field(default_factory=list)
    entry_fee: int = DEFAULT_ENTRY_FEE
    prize_pool: int = 0
    prize_pool_token_account: str = ""
    platform_fee_bps: int = PLATFORM_FEE_BPS
    prize_pool_distributed: bool = False
    total_players: int = 0
    max_players: int = MAX_PLAYER
    players_finalized: bool = False
    round_types: list[RoundType] = field(default_factory=lambda: list(DEFAULT_ROUND_TYPES))
    leaderboard_finalized: bool = False
    top_scorer: str | None = None
    highest_score: int = 0

    def __post_init__(self):
        if not self.round_deadlines:
            self.round_deadlines = [
                self.start_time + ROUND_GAP_SECONDS * index + ROUND_DURATION_SECONDS
                for index in range(TOTAL_ROUNDS)
            ]


@dataclass
class PlayerState:
    """A player's entry in one game: predictions, scores and prize."""

    game_id: int
    player: str
    username: str
    entry_slot: int = 0
    predictions: list[RoundPrediction | None] = field(default_factory=lambda: [None] * TOTAL_ROUNDS)
    scores: list[int] = field(default_factory=lambda: [0] * TOTAL_ROUNDS)
    total_score: int = 0
    rounds_evaluated: int = 0
    all_rounds_completed: bool = False
    final_rank: int | None = None
    prize_amount: int = 0
    prize_claimed: bool = False
    total_response_time: int = 0
    avg_response_time: int = 0
    first_prediction_ts: int = 0

    def has_predicted(self, round_number) -> bool:
        """True if a prediction is stored for the round; False for rounds outside 1..5."""
        return self.get_prediction(round_number) is not None

    def get_prediction(self, round_number) -> RoundPrediction | None:
        if not 1 <= round_number <= TOTAL_ROUNDS:
            return None
        return self.predictions[round_number - 1]


@dataclass
class RoundResult:
    """Prices, answer and tallies for one round of a game."""

    game_id: int
    round_number: int
    round_type: RoundType
    start_price_btc: int | None = None
    end_price_btc: int | None = None
    start_price_sol: int | None = None
    end_price_sol: int | None = None
    price_change_btc: int = 0
    price_change_sol: int = 0
    correct_answer: PredictionChoice | None = None
    round_start_ts: int = 0
    round_end_ts: int = 0
    evaluation_ts: int | None = None
    total_predictions: int = 0
    correct_predictions: int = 0
    partial_correct: int = 0
    wrong_predictions: int = 0