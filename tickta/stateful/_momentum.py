# -*- coding: utf-8 -*-
"""tickta stateful -- momentum indicators.

Registered kinds
----------------
average_gain, average_loss, rsi, stoch, stochrsi, williams_r, macd
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from ._base import (
    EMAState,
    SMAState,
    WilderState,
    WindowBuffer,
    _as_period,
    batch,
    ema_make,
    ema_update_raw,
    sma_make,
    sma_update_raw,
    wilder_make,
    wilder_update_raw,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)


# ===========================================================================
# AVERAGE GAIN / AVERAGE LOSS
# ===========================================================================
# delta = x - prev_x (first sample: no delta)
# gain = max(delta, 0), loss = max(-delta, 0)
# average = Wilder(period) running sum / period

@dataclass
class AvgChangeState:
    losses: bool
    smoother: WilderState
    prev: Optional[float] = None


def avg_change_make(period: int, losses: bool = False) -> AvgChangeState:
    return AvgChangeState(losses=losses, smoother=wilder_make(period))


def avg_change_update_raw(
    state: AvgChangeState, x: float
) -> Tuple[Optional[float], AvgChangeState]:
    """Single-step average gain (or loss).  Returns (value | None, state)."""
    prev = state.prev
    state.prev = x
    if prev is None:
        return None, state
    delta = x - prev
    move = max(-delta, 0.0) if state.losses else max(delta, 0.0)
    total, state.smoother = wilder_update_raw(state.smoother, move)
    if total is None:
        return None, state
    return total / state.smoother.period, state


def _avg_change_update(
    state: AvgChangeState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], AvgChangeState]:
    val, state = avg_change_update_raw(state, bar["close"])
    return [val], state


def _rsi_warmup(params: Dict[str, Any]) -> int:
    return _as_period(params, "period", 14) + 1


STATEFUL_REGISTRY["average_gain"] = StatefulIndicator(
    kind="average_gain",
    inputs=("close",),
    init=lambda params: avg_change_make(_as_period(params, "period", 14)),
    update=_avg_change_update,
    output_names=lambda params: [f"AVGGAIN_{_as_period(params, 'period', 14)}"],
    warmup=_rsi_warmup,
)

STATEFUL_REGISTRY["average_loss"] = StatefulIndicator(
    kind="average_loss",
    inputs=("close",),
    init=lambda params: avg_change_make(_as_period(params, "period", 14), losses=True),
    update=_avg_change_update,
    output_names=lambda params: [f"AVGLOSS_{_as_period(params, 'period', 14)}"],
    warmup=_rsi_warmup,
)


def average_gain(values: Any, period: int = 14, **kwargs: Any) -> List[float]:
    return batch("average_gain", values, period=period, **kwargs)


def average_loss(values: Any, period: int = 14, **kwargs: Any) -> List[float]:
    return batch("average_loss", values, period=period, **kwargs)


# ===========================================================================
# RSI
# ===========================================================================
# avg_loss == 0              -> 100  (flat input included)
# avg_gain == 0              -> 0
# otherwise 100 - 100 / (1 + avg_gain / avg_loss), rounded to 2 places
# with exact ties going up (3.125 -> 3.13)
# Default period=14

_CENTS = Decimal("0.01")


def _round_cents(value: float) -> float:
    """Round to 2 places on the exact binary value, ties away from zero."""
    return float(Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP))


@dataclass
class RSIState:
    gain: AvgChangeState
    loss: AvgChangeState


def rsi_make(period: int) -> RSIState:
    return RSIState(gain=avg_change_make(period), loss=avg_change_make(period, losses=True))


def rsi_update_raw(state: RSIState, x: float) -> Tuple[Optional[float], RSIState]:
    """Single-step RSI.  Returns (value | None, state)."""
    g_val, state.gain = avg_change_update_raw(state.gain, x)
    l_val, state.loss = avg_change_update_raw(state.loss, x)
    if g_val is None or l_val is None:
        return None, state
    if l_val == 0.0:
        return 100.0, state
    if g_val == 0.0:
        return 0.0, state
    rs = g_val / l_val
    return _round_cents(100.0 - 100.0 / (1.0 + rs)), state


def _rsi_update(
    state: RSIState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], RSIState]:
    val, state = rsi_update_raw(state, bar["close"])
    return [val], state


STATEFUL_REGISTRY["rsi"] = StatefulIndicator(
    kind="rsi",
    inputs=("close",),
    init=lambda params: rsi_make(_as_period(params, "period", 14)),
    update=_rsi_update,
    output_names=lambda params: [f"RSI_{_as_period(params, 'period', 14)}"],
    warmup=_rsi_warmup,
)


def rsi(values: Any, period: int = 14, **kwargs: Any) -> List[float]:
    """Relative Strength Index."""
    return batch("rsi", values, period=period, **kwargs)


# ===========================================================================
# STOCH  -- Stochastic oscillator
# ===========================================================================
# %K = 100 * (close - lowest_low) / (highest_high - lowest_low), 0 on a flat range
# %D = SMA(%K, signal_period); present once %K is, d None until warm.
# Defaults: period=14, signal_period=3

class StochasticOutput(NamedTuple):
    k: float
    d: Optional[float]


@dataclass
class StochState:
    highs: WindowBuffer
    lows: WindowBuffer
    d_sma: SMAState


def stoch_make(period: int, signal_period: int) -> StochState:
    return StochState(
        highs=WindowBuffer(period),
        lows=WindowBuffer(period),
        d_sma=sma_make(signal_period),
    )


def stoch_update_raw(
    state: StochState, high: float, low: float, close: float
) -> Tuple[Optional[float], Optional[float], StochState]:
    """Single-step stochastic.  Returns (k | None, d | None, state)."""
    state.highs.push(high)
    state.lows.push(low)
    if not state.highs.is_full():
        return None, None, state
    hi = state.highs.max()
    lo = state.lows.min()
    rng = hi - lo
    k = (close - lo) / rng * 100.0 if rng != 0.0 else 0.0
    d, state.d_sma = sma_update_raw(state.d_sma, k)
    return k, d, state


def _stoch_init(params: Dict[str, Any]) -> StochState:
    return stoch_make(
        _as_period(params, "period", 14),
        _as_period(params, "signal_period", 3),
    )


def _stoch_update(
    state: StochState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], StochState]:
    k, d, state = stoch_update_raw(state, bar["high"], bar["low"], bar["close"])
    return [k, d], state


def _stoch_output_names(params: Dict[str, Any]) -> List[str]:
    p = f"_{_as_period(params, 'period', 14)}_{_as_period(params, 'signal_period', 3)}"
    return [f"STOCHk{p}", f"STOCHd{p}"]


STATEFUL_REGISTRY["stoch"] = StatefulIndicator(
    kind="stoch",
    inputs=("high", "low", "close"),
    init=_stoch_init,
    update=_stoch_update,
    output_names=_stoch_output_names,
    warmup=lambda params: _as_period(params, "period", 14),
    output_type=StochasticOutput,
)


def stochastic(
    high: Any, low: Any, close: Any, period: int = 14, signal_period: int = 3, **kwargs: Any
) -> List[StochasticOutput]:
    """Stochastic oscillator ``(k, d)`` per bar."""
    return batch("stoch", high, low, close, period=period, signal_period=signal_period, **kwargs)


# ===========================================================================
# STOCHRSI
# ===========================================================================
# 1) RSI(close, rsi_period)
# 2) Stochastic(stochastic_period, signal=k_period) fed high=low=close=RSI
# 3) d = SMA(stochastic %D, d_period)
# Output once all three are warm: stoch_rsi = %K, k = %D, d = step 3.
# Defaults: rsi_period=14, stochastic_period=14, k_period=3, d_period=3

class StochasticRSIOutput(NamedTuple):
    stoch_rsi: float
    k: float
    d: float


@dataclass
class StochRSIState:
    rsi: RSIState
    stoch: StochState
    d_sma: SMAState


def _stochrsi_periods(params: Dict[str, Any]) -> Tuple[int, int, int, int]:
    return (
        _as_period(params, "rsi_period", 14),
        _as_period(params, "stochastic_period", 14),
        _as_period(params, "k_period", 3),
        _as_period(params, "d_period", 3),
    )


def _stochrsi_init(params: Dict[str, Any]) -> StochRSIState:
    rsi_period, stochastic_period, k_period, d_period = _stochrsi_periods(params)
    return StochRSIState(
        rsi=rsi_make(rsi_period),
        stoch=stoch_make(stochastic_period, k_period),
        d_sma=sma_make(d_period),
    )


def _stochrsi_update(
    state: StochRSIState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], StochRSIState]:
    absent: List[Optional[float]] = [None, None, None]

    rsi_val, state.rsi = rsi_update_raw(state.rsi, bar["close"])
    if rsi_val is None:
        return absent, state

    k, d, state.stoch = stoch_update_raw(state.stoch, rsi_val, rsi_val, rsi_val)
    if d is None:
        return absent, state

    smooth, state.d_sma = sma_update_raw(state.d_sma, d)
    if smooth is None:
        return absent, state
    return [k, d, smooth], state


def _stochrsi_output_names(params: Dict[str, Any]) -> List[str]:
    p = "_" + "_".join(str(n) for n in _stochrsi_periods(params))
    return [f"STOCHRSI{p}", f"STOCHRSIk{p}", f"STOCHRSId{p}"]


def _stochrsi_warmup(params: Dict[str, Any]) -> int:
    rsi_period, stochastic_period, k_period, d_period = _stochrsi_periods(params)
    return rsi_period + stochastic_period + k_period + d_period - 2


STATEFUL_REGISTRY["stochrsi"] = StatefulIndicator(
    kind="stochrsi",
    inputs=("close",),
    init=_stochrsi_init,
    update=_stochrsi_update,
    output_names=_stochrsi_output_names,
    warmup=_stochrsi_warmup,
    output_type=StochasticRSIOutput,
)


def stochastic_rsi(
    values: Any,
    rsi_period: int = 14,
    stochastic_period: int = 14,
    k_period: int = 3,
    d_period: int = 3,
    **kwargs: Any,
) -> List[StochasticRSIOutput]:
    """Stochastic RSI ``(stoch_rsi, k, d)`` per bar."""
    return batch(
        "stochrsi", values,
        rsi_period=rsi_period,
        stochastic_period=stochastic_period,
        k_period=k_period,
        d_period=d_period,
        **kwargs,
    )


# ===========================================================================
# WILLIAMS %R
# ===========================================================================
# %R = -100 * (highest_high - close) / (highest_high - lowest_low)
# Flat range -> -100.  Default period=14

@dataclass
class WillRState:
    highs: WindowBuffer
    lows: WindowBuffer


def _willr_init(params: Dict[str, Any]) -> WillRState:
    period = _as_period(params, "period", 14)
    return WillRState(highs=WindowBuffer(period), lows=WindowBuffer(period))


def _willr_update(
    state: WillRState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], WillRState]:
    state.highs.push(bar["high"])
    state.lows.push(bar["low"])
    if not state.highs.is_full():
        return [None], state
    hi = state.highs.max()
    lo = state.lows.min()
    rng = hi - lo
    if rng == 0.0:
        return [-100.0], state
    return [(hi - bar["close"]) / rng * -100.0], state


STATEFUL_REGISTRY["williams_r"] = StatefulIndicator(
    kind="williams_r",
    inputs=("high", "low", "close"),
    init=_willr_init,
    update=_willr_update,
    output_names=lambda params: [f"WILLR_{_as_period(params, 'period', 14)}"],
    warmup=lambda params: _as_period(params, "period", 14),
)


def williams_r(high: Any, low: Any, close: Any, period: int = 14, **kwargs: Any) -> List[float]:
    """Williams %R."""
    return batch("williams_r", high, low, close, period=period, **kwargs)


# ===========================================================================
# MACD
# ===========================================================================
# MACD = EMA(close, fast) - EMA(close, slow)
# Signal = EMA(MACD, signal)   -- warmup starts when first MACD value appears
# Hist = MACD - Signal
# Defaults: fast=12, slow=26, signal=9

class MACDOutput(NamedTuple):
    macd: float
    signal: Optional[float]
    histogram: Optional[float]


@dataclass
class MACDState:
    ema_fast: EMAState
    ema_slow: EMAState
    ema_signal: EMAState


def _macd_periods(params: Dict[str, Any]) -> Tuple[int, int, int]:
    fast   = _as_period(params, "fast",   12)
    slow   = _as_period(params, "slow",   26)
    signal = _as_period(params, "signal",  9)
    if slow < fast:
        fast, slow = slow, fast
    return fast, slow, signal


def _macd_init(params: Dict[str, Any]) -> MACDState:
    fast, slow, signal = _macd_periods(params)
    return MACDState(
        ema_fast=ema_make(fast),
        ema_slow=ema_make(slow),
        ema_signal=ema_make(signal),
    )


def _macd_update(
    state: MACDState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], MACDState]:
    x = bar["close"]

    fast_val, state.ema_fast = ema_update_raw(state.ema_fast, x)
    slow_val, state.ema_slow = ema_update_raw(state.ema_slow, x)

    macd_val: Optional[float] = None
    sig_val:  Optional[float] = None
    hist_val: Optional[float] = None

    if fast_val is not None and slow_val is not None:
        macd_val = fast_val - slow_val
        sig_val, state.ema_signal = ema_update_raw(state.ema_signal, macd_val)
        if sig_val is not None:
            hist_val = macd_val - sig_val

    return [macd_val, sig_val, hist_val], state


def _macd_output_names(params: Dict[str, Any]) -> List[str]:
    p = "_" + "_".join(str(n) for n in _macd_periods(params))
    return [f"MACD{p}", f"MACDs{p}", f"MACDh{p}"]


STATEFUL_REGISTRY["macd"] = StatefulIndicator(
    kind="macd",
    inputs=("close",),
    init=_macd_init,
    update=_macd_update,
    output_names=_macd_output_names,
    warmup=lambda params: _macd_periods(params)[1],
    output_type=MACDOutput,
)


def macd(
    values: Any, fast: int = 12, slow: int = 26, signal: int = 9, **kwargs: Any
) -> List[MACDOutput]:
    """MACD ``(macd, signal, histogram)`` per bar."""
    return batch("macd", values, fast=fast, slow=slow, signal=signal, **kwargs)
