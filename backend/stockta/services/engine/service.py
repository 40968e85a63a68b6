"""
Indicator Engine Service Implementation

Builds the persisted indicator rows (MA, RSI, MACD, KDJ), detects the
oscillator crossovers and runs the four composite signal pipelines.
Pure Python/NumPy, no I/O.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Sequence

import numpy as np

from stockta.core.config import Settings, get_settings
from stockta.schemas.indicators import IndicatorRequest, IndicatorRow
from stockta.schemas.market import Bar, DaySnapshot, Period
from stockta.schemas.signals import SignalCategory, SignalEvent, SignalSide, sort_events
from stockta.services.base import BarSequenceError
from stockta.services.engine.interface import IndicatorServiceInterface
from stockta.services.indicators.calculations import cross, ma_full_window
from stockta.services.indicators.incremental import RecomputePlan, plan_recompute
from stockta.services.indicators.oscillators import (
    OscillatorParams,
    gain_ratio,
    kdj_series,
    macd_series,
)
from stockta.services.signals import (
    BottomDetectionResult,
    PressureResult,
    ReversalResult,
    TrendLadderResult,
    calculate_bottom_detection,
    calculate_pressure,
    calculate_reversal,
    calculate_trend_ladder,
)

logger = logging.getLogger(__name__)

MA_PERIODS = (5, 10, 20, 60)
RSI_PERIODS = (6, 12, 24)


@dataclass
class ComputeResult:
    """Rows and signals of one computation over one symbol and period."""

    symbol: str
    period: Period
    rows: list[IndicatorRow]
    signals: list[SignalEvent]

    bottom: Optional[BottomDetectionResult] = None
    pressure: Optional[PressureResult] = None
    ladder: Optional[TrendLadderResult] = None
    reversal: Optional[ReversalResult] = None

    # Index of the first recomputed bar
    start_index: int = 0
    full_recompute: bool = True

    def signals_by_side(self, side: SignalSide) -> list[SignalEvent]:
        return [e for e in self.signals if e.side == side]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "period": self.period.value,
            "start_index": self.start_index,
            "full_recompute": self.full_recompute,
            "rows": [r.model_dump(mode="json") for r in self.rows],
            "signals": [e.model_dump(mode="json") for e in self.signals],
            "ladder_summary": self.ladder.signal_summary() if self.ladder else None,
            "pressure_bars": {
                "red": [asdict(b) for b in self.pressure.red_bars],
                "green": [asdict(b) for b in self.pressure.green_bars],
            } if self.pressure else None,
        }


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    Stateless between calls; the oscillator parameters are injected at
    construction.
    """

    def __init__(
        self,
        params: Optional[OscillatorParams] = None,
        config: Optional[Settings] = None,
    ):
        self._config = config or get_settings()
        self._params = params or OscillatorParams.from_settings(self._config)

    @property
    def params(self) -> OscillatorParams:
        return self._params

    async def execute(self, input_data: IndicatorRequest) -> ComputeResult:
        request = await self.validate_input(input_data)
        if request.prior_rows is not None:
            return self.compute_incremental(
                request.bars,
                request.prior_rows,
                period=request.period,
                symbol=request.symbol,
                snapshot=request.snapshot,
            )
        return self.compute(
            request.bars,
            period=request.period,
            symbol=request.symbol,
            snapshot=request.snapshot,
        )

    def compute(
        self,
        bars: Sequence[Bar],
        period: Period = Period.DAILY,
        symbol: Optional[str] = None,
        snapshot: Optional[DaySnapshot] = None,
    ) -> ComputeResult:
        symbol = self._validate_bars(bars, symbol)
        result = self._run(bars, period, symbol, snapshot, RecomputePlan(start=0))
        logger.debug(f"Full compute {symbol} {period.value}: {len(result.rows)} rows")
        return result

    def compute_incremental(
        self,
        bars: Sequence[Bar],
        prior_rows: Sequence[IndicatorRow],
        period: Period = Period.DAILY,
        symbol: Optional[str] = None,
        snapshot: Optional[DaySnapshot] = None,
    ) -> ComputeResult:
        symbol = self._validate_bars(bars, symbol)
        plan = plan_recompute(bars, prior_rows, symbol=symbol, period=period)
        if plan.is_full:
            logger.info(f"Full recompute {symbol} {period.value}: {plan.reason}")
            return self._run(bars, period, symbol, snapshot, plan)

        result = self._run(bars, period, symbol, snapshot, plan)
        logger.info(
            f"Incremental recompute {symbol} {period.value} from index {plan.start} "
            f"({plan.reason}): {len(result.rows)} rows"
        )
        return result

    async def health_check(self) -> bool:
        return True

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _validate_bars(self, bars: Sequence[Bar], symbol: Optional[str]) -> str:
        """Check the bar ordering contract and resolve the row symbol."""
        for previous, current in zip(bars, bars[1:]):
            if current.trade_date <= previous.trade_date:
                raise BarSequenceError(
                    self.name,
                    f"Trade dates must be strictly increasing: {previous.trade_date} "
                    f"followed by {current.trade_date}",
                    {"previous": previous.trade_date, "current": current.trade_date},
                )

        symbols = {b.symbol for b in bars if b.symbol}
        if symbol:
            symbols.add(symbol)
        if len(symbols) > 1:
            raise BarSequenceError(
                self.name,
                f"Bars mix symbols: {sorted(symbols)}",
                {"symbols": sorted(symbols)},
            )
        return symbol or (symbols.pop() if symbols else "")

    def _run(
        self,
        bars: Sequence[Bar],
        period: Period,
        symbol: str,
        snapshot: Optional[DaySnapshot],
        plan: RecomputePlan,
    ) -> ComputeResult:
        bars = list(bars)
        rows = self._build_rows(bars, period, symbol, plan)
        crossovers = crossover_events(rows, plan.anchor)

        bottom = calculate_bottom_detection(bars)
        pressure = calculate_pressure(bars)
        ladder = calculate_trend_ladder(bars, snapshot)
        reversal = calculate_reversal(bars)

        events = list(crossovers)
        for pipeline in (bottom, ladder, reversal):
            if pipeline is not None:
                events.extend(pipeline.events)

        keep = self._config.full_recompute_keep_rows
        if not plan.is_full:
            # Only the recomputed suffix is reported
            suffix_dates = {row.trade_date for row in rows}
            events = [e for e in events if e.trade_date in suffix_dates]
        elif keep is not None:
            rows = rows[max(len(rows) - keep, 0):]

        return ComputeResult(
            symbol=symbol,
            period=period,
            rows=rows,
            signals=sort_events(events),
            bottom=bottom,
            pressure=pressure,
            ladder=ladder,
            reversal=reversal,
            start_index=plan.start,
            full_recompute=plan.is_full,
        )

    def _build_rows(
        self,
        bars: list[Bar],
        period: Period,
        symbol: str,
        plan: RecomputePlan,
    ) -> list[IndicatorRow]:
        closes = np.array([b.close for b in bars], dtype=float)
        highs = np.array([b.high for b in bars], dtype=float)
        lows = np.array([b.low for b in bars], dtype=float)

        # Windowed fields are recomputed over the full history and sliced
        averages = {f"ma{p}": ma_full_window(closes, p) for p in MA_PERIODS}
        strengths = {f"rsi{p}": gain_ratio(closes, p) for p in RSI_PERIODS}

        macd_states = macd_series(closes[plan.start:], seed=plan.macd_seed, params=self._params)
        kdj_states = kdj_series(
            highs, lows, closes, start=plan.start, seed=plan.kdj_seed, params=self._params
        )

        rows = []
        for offset, (macd_state, kdj_state) in enumerate(zip(macd_states, kdj_states)):
            i = plan.start + offset
            values = {name: float(series[i]) for name, series in averages.items()}
            values.update({name: float(series[i]) for name, series in strengths.items()})
            rows.append(
                IndicatorRow(
                    symbol=symbol,
                    trade_date=bars[i].trade_date,
                    period=period,
                    macd=macd_state.macd,
                    macd_ema1=macd_state.ema_fast,
                    macd_ema2=macd_state.ema_slow,
                    macd_dif=macd_state.dif,
                    macd_dea=macd_state.dea,
                    kdj_k=kdj_state.k,
                    kdj_d=kdj_state.d,
                    kdj_j=kdj_state.j,
                    **values,
                )
            )
        return rows


def crossover_events(
    rows: Sequence[IndicatorRow], previous: Optional[IndicatorRow] = None
) -> list[SignalEvent]:
    """
    MACD and KDJ golden/dead crosses over consecutive rows.

    ``previous`` is the row right before rows[0]; without it the first row
    has nothing to cross from.
    """
    chain = ([previous] if previous is not None else []) + list(rows)
    if not chain:
        return []

    dif = np.array([r.macd_dif for r in chain])
    dea = np.array([r.macd_dea for r in chain])
    k = np.array([r.kdj_k for r in chain])
    d = np.array([r.kdj_d for r in chain])

    rules = {
        SignalCategory.MACD_GOLDEN_CROSS: cross(dif, dea),
        SignalCategory.MACD_DEAD_CROSS: cross(dea, dif),
        SignalCategory.KDJ_GOLDEN_CROSS: cross(k, d),
        SignalCategory.KDJ_DEAD_CROSS: cross(d, k),
    }
    events = []
    for category, fired in rules.items():
        for i in np.flatnonzero(fired):
            events.append(SignalEvent(trade_date=chain[i].trade_date, category=category))
    return sort_events(events)
