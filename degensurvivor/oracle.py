"""Price oracle: validated price snapshots taken from an external price feed."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, replace
from enum import Enum

from .errors import OracleError, OracleErrorKind

log = logging.getLogger(__name__)

ORACLE_CONFIG_SEED = b"oracle-config"
PRICE_SNAPSHOT_SEED = b"price-snapshot"

DEFAULT_STALENESS_THRESHOLD = 60
DEFAULT_CONFIDENCE_THRESHOLD = 1000
DEFAULT_MIN_PUBLISHERS = 3

PYTH_STATUS_UNKNOWN = 0
PYTH_STATUS_TRADING = 1
PYTH_STATUS_HALTED = 2
PYTH_STATUS_AUCTION = 3

MICRO_DOLLARS_MULTIPLIER = 1_000_000

# Publisher count is not exposed by the price feed; a fixed assumption is recorded.
ASSUMED_PUBLISHERS = 5

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_U64_MAX = 2**64 - 1


class AssetType(Enum):
    BTC = 0
    SOL = 1


class SnapshotType(Enum):
    START = 0
    END = 1


class PriceStatus(Enum):
    VALID = "valid"
    STALE = "stale"
    LOW_CONFIDENCE = "low_confidence"
    INSUFFICIENT_PUBLISHERS = "insufficient_publishers"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"


@dataclass(frozen=True)
class PriceUpdate:
    """A price message as published by a feed."""

    feed: str
    price: int
    conf: int
    exponent: int
    publish_time: int


@dataclass
class OracleConfig:
    admin: str
    btc_price_feed: str
    sol_price_feed: str
    staleness_threshold: int
    confidence_threshold: int
    min_publishers: int
    emergency_pause: bool = False
    last_updated: int = 0

    def feed_for(self, asset_type: AssetType) -> str:
        return self.btc_price_feed if asset_type is AssetType.BTC else self.sol_price_feed


@dataclass(frozen=True)
class PriceSnapshot:
    game_id: int
    round_number: int
    asset_type: AssetType
    snapshot_type: SnapshotType
    snapshot_time: int
    price: int
    exponent: int
    confidence: int
    publish_time: int
    num_publishers: int
    pyth_status: int
    price_normalized: int
    staleness: int
    status: PriceStatus


def normalize_price(price: int, exponent: int) -> int:
    """Convert a raw price and exponent to whole micro-dollars, saturating to 0..2**64-1."""
    try:
        scale = 10.0**exponent
    except OverflowError:
        scale = math.inf
    value = float(price) * scale * float(MICRO_DOLLARS_MULTIPLIER)
    if math.isnan(value) or value <= 0:
        return 0
    if value >= 2.0**64:
        return _U64_MAX
    return int(value)


def _validate_thresholds(staleness_threshold, confidence_threshold) -> None:
    if staleness_threshold is not None and staleness_threshold <= 0:
        raise OracleError(OracleErrorKind.INVALID_STALENESS_THRESHOLD)
    if confidence_threshold is not None and confidence_threshold <= 0:
        raise OracleError(OracleErrorKind.INVALID_CONFIDENCE_THRESHOLD)


class Oracle:
    """Holds the oracle configuration and the snapshots it has stored."""

    def __init__(
        self,
        admin,
        btc_price_feed,
        sol_price_feed,
        staleness_threshold=DEFAULT_STALENESS_THRESHOLD,
        confidence_threshold=DEFAULT_CONFIDENCE_THRESHOLD,
        min_publishers=DEFAULT_MIN_PUBLISHERS,
        now=None,
    ):
        _validate_thresholds(staleness_threshold, confidence_threshold)
        self.config = OracleConfig(
            admin=admin,
            btc_price_feed=btc_price_feed,
            sol_price_feed=sol_price_feed,
            staleness_threshold=staleness_threshold,
            confidence_threshold=confidence_threshold,
            min_publishers=min_publishers,
            emergency_pause=False,
            last_updated=int(time.time()) if now is None else now,
        )
        self._snapshots: dict[tuple, PriceSnapshot] = {}
        log.info("Oracle initialized: admin=%s btc=%s sol=%s", admin, btc_price_feed, sol_price_feed)

    def fetch_and_store(self, game_id, round_number, asset_type, snapshot_type, price_update, now):
        """Validate a price update and store it as the snapshot for one round."""
        key = (game_id, round_number, AssetType(asset_type), SnapshotType(snapshot_type))
        if key in self._snapshots:
            raise OracleError(OracleErrorKind.SNAPSHOT_ALREADY_EXISTS)

        config = self.config
        if config.emergency_pause:
            raise OracleError(OracleErrorKind.ORACLE_PAUSED)
        if price_update.feed != config.feed_for(key[2]):
            raise OracleError(OracleErrorKind.WRONG_PRICE_FEED)

        staleness = now - price_update.publish_time
        if not _I64_MIN <= staleness <= _I64_MAX:
            raise OracleError(OracleErrorKind.ARITHMETIC_OVERFLOW)
        if staleness > config.staleness_threshold:
            raise OracleError(OracleErrorKind.PRICE_STALE)
        if price_update.conf > config.confidence_threshold:
            raise OracleError(OracleErrorKind.LOW_CONFIDENCE)

        if staleness > config.staleness_threshold:
            status = PriceStatus.STALE
        elif price_update.conf > config.confidence_threshold:
            status = PriceStatus.LOW_CONFIDENCE
        else:
            status = PriceStatus.VALID

        snapshot = PriceSnapshot(
            game_id=game_id,
            round_number=round_number,
            asset_type=key[2],
            snapshot_type=key[3],
            snapshot_time=now,
            price=price_update.price,
            exponent=price_update.exponent,
            confidence=price_update.conf,
            publish_time=price_update.publish_time,
            num_publishers=ASSUMED_PUBLISHERS,
            pyth_status=PYTH_STATUS_TRADING,
            price_normalized=normalize_price(price_update.price, price_update.exponent),
            staleness=staleness,
            status=status,
        )
        self._snapshots[key] = snapshot
        log.info(
            "Price snapshot created: game=%s round=%s asset=%s type=%s normalized=%s",
            game_id, round_number, key[2].name, key[3].name, snapshot.price_normalized,
        )
        return snapshot

    def update(
        self,
        admin,
        now,
        new_btc_feed=None,
        new_sol_feed=None,
        new_staleness_threshold=None,
        new_confidence_threshold=None,
        new_min_publishers=None,
        emergency_pause=None,
    ):
        """Change any of the given settings; only the admin may do so."""
        if admin != self.config.admin:
            raise OracleError(OracleErrorKind.UNAUTHORIZED)
        _validate_thresholds(new_staleness_threshold, new_confidence_threshold)

        changes = {
            "btc_price_feed": new_btc_feed,
            "sol_price_feed": new_sol_feed,
            "staleness_threshold": new_staleness_threshold,
            "confidence_threshold": new_confidence_threshold,
            "min_publishers": new_min_publishers,
            "emergency_pause": emergency_pause,
        }
        applied = {name: value for name, value in changes.items() if value is not None}
        self.config = replace(self.config, **applied, last_updated=now)
        log.info("Oracle configuration updated: %s", applied)
        return self.config

    def snapshot(self, game_id, round_number, asset_type, snapshot_type):
        """Return a stored snapshot; raise KeyError if there is none."""
        key = (game_id, round_number, AssetType(asset_type), SnapshotType(snapshot_type))
        try:
            return self._snapshots[key]
        except KeyError:
            raise KeyError(key) from None