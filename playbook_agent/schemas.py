"""
Data models shared by the detector pipeline, the classifier and the
signal normaliser.

Every model here is an immutable dataclass. A ``MarketContext`` is
built fresh for each evaluation and never mutated afterwards, so the
same value can be handed to several playbooks (or several threads)
without copying.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional, Tuple

Direction = Literal["bullish", "bearish"]
Trend = Literal["bullish", "bearish", "neutral"]
Session = Literal["asian", "london", "ny"]
Volatility = Literal["high", "low"]
ZoneType = Literal["high", "low"]
MMMPhase = Literal["accumulation", "manipulation", "distribution", "none"]
PremiumDiscount = Literal["premium", "discount"]
SignalDirection = Literal["long", "short", "neutral"]
Grade = Literal["A", "B", "C"]


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive input is taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Candle:
    """A single OHLCV bar.

    Attributes:
        time: Bar open time. Normalised to timezone-aware UTC.
        open: Opening price.
        high: Highest traded price.
        low: Lowest traded price.
        close: Closing price.
        volume: Traded volume, or None when the feed carries none.
    """

    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "time", ensure_utc(self.time))

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


# --- detector results -------------------------------------------------------


@dataclass(frozen=True)
class TrendResult:
    direction: Trend = "neutral"
    strength: float = 0.0


@dataclass(frozen=True)
class LiquidityZone:
    """A swing point or previous-day extreme that may hold resting orders.

    Attributes:
        level: Price of the zone.
        type: "high" for buy-side liquidity above price, "low" for
            sell-side liquidity below it.
        swept: True once price traded through the level and closed back
            on the original side.
    """

    level: float
    type: ZoneType
    swept: bool = False


@dataclass(frozen=True)
class LiquidityResult:
    zones: Tuple[LiquidityZone, ...] = ()
    swept: Tuple[LiquidityZone, ...] = ()


@dataclass(frozen=True)
class VolumeResult:
    spike: bool = False
    displacement: bool = False
    average: float = 0.0


@dataclass(frozen=True)
class TrendlineState:
    exists: bool = False
    touches: int = 0
    respected: bool = False
    direction: Optional[Literal["ascending", "descending"]] = None


@dataclass(frozen=True)
class MMMResult:
    phase: MMMPhase = "none"
    level: Optional[float] = None


@dataclass(frozen=True)
class BreakerBlock:
    exists: bool = False
    type: Optional[Direction] = None
    level: Optional[float] = None


@dataclass(frozen=True)
class PremiumDiscountResult:
    exists: bool = False
    zone: Optional[PremiumDiscount] = None
    equilibrium: Optional[float] = None


@dataclass(frozen=True)
class OTEResult:
    available: bool = False
    level: Optional[float] = None


@dataclass(frozen=True)
class FairValueGap:
    exists: bool = False
    type: Optional[Direction] = None
    top: Optional[float] = None
    bottom: Optional[float] = None
    unfilled: bool = False


@dataclass(frozen=True)
class StructureShift:
    """Close beyond the most recent swing point.

    ``bos`` marks a break in the direction of the higher-timeframe trend,
    ``mss`` a break against it. With a neutral trend a break is neither.
    """

    exists: bool = False
    direction: Optional[Direction] = None
    level: Optional[float] = None
    bos: bool = False
    mss: bool = False


@dataclass(frozen=True)
class OrderBlock:
    type: Direction
    high: float
    low: float
    index: int


@dataclass(frozen=True)
class BalanceState:
    in_balance: bool = False
    lvn_detected: bool = False


@dataclass(frozen=True)
class BalanceResult:
    in_balance: bool = False
    high: Optional[float] = None
    low: Optional[float] = None


@dataclass(frozen=True)
class ImbalanceResult:
    detected: bool = False
    type: Optional[Literal["gap_up", "gap_down"]] = None
    top: Optional[float] = None
    bottom: Optional[float] = None


# --- pipeline values --------------------------------------------------------


@dataclass(frozen=True)
class MarketContext:
    """Snapshot of every detector output for one evaluation.

    Attributes:
        session: Trading session of the latest candle.
        htf_trend: Higher-timeframe bias.
        price: Close of the latest candle.
        high: High of the latest candle.
        low: Low of the latest candle.
        volume: Volume of the latest candle (0 when missing).
        po3_zone_present: A premium/discount range exists.
        price_at_po3: Price sits in the premium or discount half.
        premium_discount: Which half price sits in, if any.
        liquidity_sweep: At least one liquidity zone was swept.
        swept_direction: Type of the first swept zone. Set iff
            ``liquidity_sweep``.
        liquidity_zones: All zones considered, with their swept flag.
        structure_break: An MSS or breaker block is present.
        break_direction: Direction of that break.
        volume_spike: Volume exceeded 1.5x the trailing average.
        displacement: Spike candle with a body of at least 70% of range.
        ote_retrace: Price retraced into the optimal-entry band.
        ote_level: Canonical or raw retracement level. Set iff
            ``ote_retrace``.
        trendline: Trendline existence, touches and respect.
        balance_zones: Balance and low-volume-node flags.
        volatility: "high" when a volume spike is present.
        previous_day_high: Prior-day high, if supplied.
        previous_day_low: Prior-day low, if supplied.
    """

    session: Session
    htf_trend: Trend
    price: float
    high: float
    low: float
    volume: float
    po3_zone_present: bool
    price_at_po3: bool
    liquidity_sweep: bool
    swept_direction: Optional[ZoneType]
    liquidity_zones: Tuple[LiquidityZone, ...]
    structure_break: bool
    break_direction: Optional[Direction]
    volume_spike: bool
    displacement: bool
    ote_retrace: bool
    ote_level: Optional[float]
    trendline: TrendlineState
    balance_zones: BalanceState
    volatility: Volatility
    previous_day_high: Optional[float] = None
    previous_day_low: Optional[float] = None
    trend_strength: float = 0.0
    premium_discount: Optional[PremiumDiscount] = None
    mmm_phase: MMMResult = field(default_factory=MMMResult)
    breaker: BreakerBlock = field(default_factory=BreakerBlock)
    fair_value_gap: FairValueGap = field(default_factory=FairValueGap)
    structure_shift: StructureShift = field(default_factory=StructureShift)
    order_blocks: Tuple[OrderBlock, ...] = ()
    imbalance: ImbalanceResult = field(default_factory=ImbalanceResult)
    candles: Tuple[Candle, ...] = ()


@dataclass(frozen=True)
class PlaybookSignal:
    """Trade idea produced by one playbook.

    ``playbook`` is the enum member used for dispatch and filtering;
    ``playbook_name`` is its display name.
    """

    playbook: Any  # playbook_agent.playbooks.Playbook
    playbook_name: str
    direction: Direction
    context: str
    tp_logic: str
    confidence: float
    session: Session


@dataclass(frozen=True)
class ClassifierOutput:
    signal: Optional[PlaybookSignal]
    priority: int
    timestamp: datetime


@dataclass(frozen=True)
class FlowrexSignal:
    """Normalised, graded signal handed to callers.

    Attributes:
        direction: "long", "short" or "neutral".
        confidence: Adjusted confidence, clamped to [0, 100].
        grade: "A" (>= 75), "B" (>= 50) or "C".
        playbook: Display name of the matched playbook, or "NONE".
        primary_playbook: Same as ``playbook``.
        backup_playbook: Runner-up playbook, currently never populated.
        reasons: Satisfied conditions in a fixed order.
        risk_hints: Penalties applied plus standing cautions.
        timeframe: Chart timeframe supplied by the caller.
        instrument: Instrument supplied by the caller.
        symbol: Optional broker symbol.
        created_at: UTC creation time.
    """

    direction: SignalDirection
    confidence: float
    grade: Grade
    playbook: str
    primary_playbook: str
    reasons: Tuple[str, ...]
    risk_hints: Tuple[str, ...]
    timeframe: str
    instrument: str
    created_at: datetime
    symbol: Optional[str] = None
    backup_playbook: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "direction": self.direction,
            "confidence": self.confidence,
            "grade": self.grade,
            "playbook": self.playbook,
            "primaryPlaybook": self.primary_playbook,
            "backupPlaybook": self.backup_playbook,
            "reasons": list(self.reasons),
            "riskHints": list(self.risk_hints),
            "timeframe": self.timeframe,
            "instrument": self.instrument,
            "symbol": self.symbol,
            "createdAt": self.created_at.isoformat(),
        }
