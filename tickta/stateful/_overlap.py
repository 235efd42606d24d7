# -*- coding: utf-8 -*-
"""tickta stateful -- moving averages and smoothers.

Each section follows the pattern:
  1. State dataclass  (if beyond what _base already provides)
  2. init / update / output_names / warmup helpers
  3. STATEFUL_REGISTRY["<kind>"] = StatefulIndicator(...)
  4. the batch function for the kind

Registered kinds
----------------
sma, ema, wema, wma, wilder
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ._base import (
    ConfigurationError,
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
    wema_make,
    wilder_make,
    wilder_update_raw,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)


def _period_warmup(default: int):
    def _warmup(params: Dict[str, Any]) -> int:
        return _as_period(params, "period", default)
    return _warmup


# ===========================================================================
# SMA
# ===========================================================================
# sma = window.sum() / period once the window is full.  Default period = 10.

def _sma_init(params: Dict[str, Any]) -> SMAState:
    return sma_make(_as_period(params, "period", 10))


def _sma_update(
    state: SMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], SMAState]:
    val, state = sma_update_raw(state, bar["close"])
    return [val], state


def _sma_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"SMA_{_as_period(params, 'period', 10)}"]


STATEFUL_REGISTRY["sma"] = StatefulIndicator(
    kind="sma",
    inputs=("close",),
    init=_sma_init,
    update=_sma_update,
    output_names=_sma_output_names,
    warmup=_period_warmup(10),
)


def sma(values: Any, period: int = 10, **kwargs: Any) -> List[float]:
    """Simple Moving Average over *values*."""
    return batch("sma", values, period=period, **kwargs)


# ===========================================================================
# EMA
# ===========================================================================
# alpha = 2/(period+1), seeded with the SMA of the first `period` samples.

def _ema_init(params: Dict[str, Any]) -> EMAState:
    return ema_make(_as_period(params, "period", 10))


def _ema_update(
    state: EMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], EMAState]:
    val, state = ema_update_raw(state, bar["close"])
    return [val], state


def _ema_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"EMA_{_as_period(params, 'period', 10)}"]


STATEFUL_REGISTRY["ema"] = StatefulIndicator(
    kind="ema",
    inputs=("close",),
    init=_ema_init,
    update=_ema_update,
    output_names=_ema_output_names,
    warmup=_period_warmup(10),
)


def ema(values: Any, period: int = 10, **kwargs: Any) -> List[float]:
    """Exponential Moving Average, SMA-seeded."""
    return batch("ema", values, period=period, **kwargs)


# ===========================================================================
# WEMA  -- Wilder's exponential average, alpha = 1/period, SMA seed
# ===========================================================================

def _wema_init(params: Dict[str, Any]) -> EMAState:
    return wema_make(_as_period(params, "period", 14))


def _wema_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"WEMA_{_as_period(params, 'period', 14)}"]


STATEFUL_REGISTRY["wema"] = StatefulIndicator(
    kind="wema",
    inputs=("close",),
    init=_wema_init,
    update=_ema_update,
    output_names=_wema_output_names,
    warmup=_period_warmup(14),
)


def wema(values: Any, period: int = 14, **kwargs: Any) -> List[float]:
    """Wilder's exponential moving average."""
    return batch("wema", values, period=period, **kwargs)


# ===========================================================================
# WMA  -- weighted moving average
# ===========================================================================
# Default weights are linear 1..period (oldest..newest).  With linear weights
#   num' = num - window_sum + period * x
# keeps each step O(1); explicit `weights` fall back to a dot product.

@dataclass
class WMAState:
    window: WindowBuffer
    weights: Optional[Tuple[float, ...]]
    denom: float
    numerator: Optional[float] = None


def _wma_weights(params: Dict[str, Any]) -> Optional[Tuple[float, ...]]:
    weights = params.get("weights")
    if weights is None:
        return None
    try:
        weights = tuple(float(w) for w in weights)
    except (TypeError, ValueError):
        raise ConfigurationError(f"weights must be numbers, got {weights!r}") from None
    if not weights:
        raise ConfigurationError("weights must not be empty")
    if sum(weights) == 0.0:
        raise ConfigurationError("weights must not sum to zero")
    return weights


def _wma_period(params: Dict[str, Any]) -> int:
    weights = _wma_weights(params)
    if weights is not None:
        return len(weights)
    return _as_period(params, "period", 10)


def _wma_init(params: Dict[str, Any]) -> WMAState:
    weights = _wma_weights(params)
    period = _wma_period(params)
    if weights is None:
        denom = period * (period + 1) / 2.0
    else:
        denom = sum(weights)
    return WMAState(window=WindowBuffer(period), weights=weights, denom=denom)


def _wma_update(
    state: WMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], WMAState]:
    x = bar["close"]
    window = state.window
    n = window.period

    if state.weights is not None:
        window.push(x)
        if not window.is_full():
            return [None], state
        num = sum(w * v for w, v in zip(state.weights, window))
        return [num / state.denom], state

    if state.numerator is None:
        window.push(x)
        if not window.is_full():
            return [None], state
        state.numerator = sum((i + 1) * v for i, v in enumerate(window))
        return [state.numerator / state.denom], state

    state.numerator = state.numerator - window.sum() + n * x
    window.push(x)
    return [state.numerator / state.denom], state


def _wma_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"WMA_{_wma_period(params)}"]


STATEFUL_REGISTRY["wma"] = StatefulIndicator(
    kind="wma",
    inputs=("close",),
    init=_wma_init,
    update=_wma_update,
    output_names=_wma_output_names,
    warmup=_wma_period,
)


def wma(
    values: Any,
    period: int = 10,
    weights: Optional[Sequence[float]] = None,
    **kwargs: Any,
) -> List[float]:
    """Weighted Moving Average.  *weights* (oldest first) overrides *period*."""
    if weights is not None:
        return batch("wma", values, weights=tuple(weights), **kwargs)
    return batch("wma", values, period=period, **kwargs)


# ===========================================================================
# WILDER  -- Wilder smoothing (running sum form)
# ===========================================================================
# First `period` samples: plain sum, emitted at the `period`-th sample.
# After that: result = prev - prev/period + x.  No window is kept.

def _wilder_init(params: Dict[str, Any]) -> WilderState:
    return wilder_make(_as_period(params, "period", 14))


def _wilder_update(
    state: WilderState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], WilderState]:
    val, state = wilder_update_raw(state, bar["close"])
    return [val], state


def _wilder_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"WILDER_{_as_period(params, 'period', 14)}"]


STATEFUL_REGISTRY["wilder"] = StatefulIndicator(
    kind="wilder",
    inputs=("close",),
    init=_wilder_init,
    update=_wilder_update,
    output_names=_wilder_output_names,
    warmup=_period_warmup(14),
)


def wilder_smoothing(values: Any, period: int = 14, **kwargs: Any) -> List[float]:
    """Wilder smoothing as used inside ADX / ATR."""
    return batch("wilder", values, period=period, **kwargs)
