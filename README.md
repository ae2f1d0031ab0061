# degensurvivor

A rules engine for a five-round price prediction game. Players join a
scheduled game by paying an entry fee in DEGEN tokens. They predict BTC
and SOL price moves across five rounds of different question types,
and the top ten by score share the prize pool.

All state is held in memory by plain Python objects. Every operation
that depends on time takes the current Unix timestamp as a `now`
argument, so a whole game can be played through deterministically.

## Components

- `degensurvivor.vault`: `Vault`, `UserVault` and `TokenLedger`.
  `Vault.deposit` takes lamports (0.01 to 100 SOL per deposit) and mints
  DEGEN into the `TokenLedger`. The conversion rate defaults to 10,000
  token units per SOL. `Vault.request_withdrawal` starts a 24-hour
  timelock. `Vault.execute_withdrawal` burns the tokens and pays out
  SOL, less the withdrawal fee (5% by default). It returns the amount
  paid to the user and the fee. `UserVault.withdrawal_state` reports
  `WithdrawalState.NONE`, `PENDING` or `READY`.
- `degensurvivor.vault_admin` holds administrative functions that take
  a vault and the caller:
  - `set_paused`
  - `update_conversion_rate` (the rate must be positive)
  - `update_withdrawal_fee` (at most 1000 bps)
  - `transfer_admin`
  - `collect_game_fee`, which pays a platform wallet 6% of a game's
    entry fees, converted to lamports.
- `degensurvivor.oracle`: `Oracle` checks each `PriceUpdate` against the
  configured feed for the asset. It rejects updates that are stale or
  whose confidence is too low. Accepted updates are stored as
  `PriceSnapshot`s, one per game, round, `AssetType` and `SnapshotType`.
  `normalize_price` converts a raw price and exponent to micro-dollars.
  `Oracle.update` lets the admin change feeds and thresholds, or pause
  the oracle.
- `degensurvivor.models` defines the game constants, the enums
  (`GameType`, `GameStatus`, `RoundType`, `PredictionChoice`) and the
  records `GameState`, `PlayerState`, `RoundPrediction` and
  `RoundResult`.
- `degensurvivor.game`: `GameEngine` has these operations:
  - `create_game` schedules a game.
  - `join_game` moves the entry fee from the player's ledger balance
    into the game's prize pool account. Registration closes 2 minutes
    before the start, and a game holds at most 50 players.
  - `start_game` needs at least 2 players and opens round 1.
  - `submit_prediction` accepts one choice per round. It is refused in
    the last 5 seconds of a 60-second round.
  - `advance_round`, `update_round_result` and `complete_game` run the
    rest of the game.
- `degensurvivor.results` scores the game:
  - `evaluate_round` scores one player's prediction after a round has
    ended.
  - `finalize_leaderboard` sets a player's rank and prize.
  - `claim_prize` marks a winner's prize as claimed.
- `degensurvivor.scoring` holds the pure rules: `calculate_points`,
  `magnitude_points`, `range_points`, `prize_bps` and `prize_amount`.
- `degensurvivor.prize`: `PrizeDistributor`.
  `initialize_prize_pool` sets aside a 6% platform fee.
  `claim_prize` checks the amount for the rank, transfers it from a pool
  token account and records a `ClaimRecord`. `collect_platform_fee`
  pays the fee to the pool admin once per game and keeps running
  totals in a `FeeCollector`.

Every rule violation raises a subclass of
`degensurvivor.errors.ProgramError`: `GameError`, `OracleError`,
`PrizeError` or `VaultError`. Each one carries a `kind` enum member,
its `message`, and a numeric `code`: 6000 plus the kind's position in
its enum.

## Installing

```
pip install .
```

## Scoring

| Round | Type            | Exact | Near miss                           |
|-------|-----------------|-------|-------------------------------------|
| 1     | Price direction | 100   | none                                |
| 2     | Magnitude       | 100   | 50 for an adjacent range            |
| 3     | Comparative     | 100   | none                                |
| 4     | Range           | 100   | 60 one zone away, 20 two zones away |
| 5     | Trend           | 100   | none                                |

```python
from degensurvivor.models import RoundType, PredictionChoice
from degensurvivor.scoring import calculate_points, prize_amount

calculate_points(RoundType.RANGE, PredictionChoice.ZONE_B, PredictionChoice.ZONE_A)  # 60
prize_amount(1, 1_000_000, 600)  # 376000
```

## Prize split

The platform fee (6%) comes off the pool first. The rest is split by
rank:

| Rank  | Share   |
|-------|---------|
| 1     | 40%     |
| 2     | 20%     |
| 3     | 12%     |
| 4–5   | 6% each |
| 6–10  | 2% each |

Ranks above 10 receive nothing.

## What it does not do

- There is no command-line tool, server or user interface. The package
  is a library to be driven from Python code.
- Nothing is persisted. Games, balances and snapshots live only in the
  objects that hold them.
- Prices are not fetched from any network source. Callers pass a
  `PriceUpdate` to `Oracle.fetch_and_store`, and pass start and end
  prices to the `GameEngine` themselves.
- SOL is bookkeeping only. `Vault.lamports` holds the vault's balance
  and `Vault.payouts` records what has been paid to each account.
- `results.claim_prize` only marks the prize as claimed. To move the
  prize tokens, use `PrizeDistributor.claim_prize`.

## Running the tests

```
pip install .[test]
pytest
```