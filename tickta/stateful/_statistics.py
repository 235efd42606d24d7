# -*- coding: utf-8 -*-
"""tickta stateful -- window statistics.

Registered kinds
----------------
sum, highest, lowest, sd
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ._base import (
    SMAState,
    WindowBuffer,
    _as_period,
    batch,
    sma_make,
    sma_update_raw,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)


def _period_warmup(params: Dict[str, Any]) -> int:
    return _as_period(params, "period", 14)


def _window_init(params: Dict[str, Any]) -> WindowBuffer:
    return WindowBuffer(_as_period(params, "period", 14))


def _window_update(aggregate: Callable[[WindowBuffer], float]):
    def _update(
        state: WindowBuffer, bar: Dict[str, Any], params: Dict[str, Any]
    ) -> Tuple[List[Optional[float]], WindowBuffer]:
        state.push(bar["close"])
        if not state.is_full():
            return [None], state
        return [aggregate(state)], state
    return _update


def _window_names(prefix: str):
    def _names(params: Dict[str, Any]) -> List[str]:
        return [f"{prefix}_{_as_period(params, 'period', 14)}"]
    return _names


# ===========================================================================
# SUM / HIGHEST / LOWEST  -- the WindowBuffer aggregates as indicators
# ===========================================================================

for _kind, _prefix, _agg in (
    ("sum", "SUM", WindowBuffer.sum),
    ("highest", "MAX", WindowBuffer.max),
    ("lowest", "MIN", WindowBuffer.min),
):
    STATEFUL_REGISTRY[_kind] = StatefulIndicator(
        kind=_kind,
        inputs=("close",),
        init=_window_init,
        update=_window_update(_agg),
        output_names=_window_names(_prefix),
        warmup=_period_warmup,
    )


def rolling_sum(values: Any, period: int = 14, **kwargs: Any) -> List[float]:
    """Sum of the last *period* values."""
    return batch("sum", values, period=period, **kwargs)


def highest(values: Any, period: int = 14, **kwargs: Any) -> List[float]:
    """Maximum of the last *period* values."""
    return batch("highest", values, period=period, **kwargs)


def lowest(values: Any, period: int = 14, **kwargs: Any) -> List[float]:
    """Minimum of the last *period* values."""
    return batch("lowest", values, period=period, **kwargs)


# ===========================================================================
# SD  -- population standard deviation
# ===========================================================================
# mean comes from an SMA(period); the squared deviations are summed over the
# live window on every step (O(period)), not kept as a running sum of squares.
# A window whose min equals its max is exactly 0.

@dataclass
class SDState:
    sma: SMAState
    window: WindowBuffer


def _sd_init(params: Dict[str, Any]) -> SDState:
    period = _as_period(params, "period", 14)
    return SDState(sma=sma_make(period), window=WindowBuffer(period))


def sd_update_raw(state: SDState, x: float) -> Tuple[Optional[float], SDState]:
    """Single-step standard deviation.  Returns (value | None, state)."""
    state.window.push(x)
    mean, state.sma = sma_update_raw(state.sma, x)
    if mean is None:
        return None, state
    window = state.window
    if window.min() == window.max():
        return 0.0, state
    sq = 0.0
    for v in window:
        sq += (v - mean) ** 2
    return math.sqrt(sq / window.period), state


def _sd_update(
    state: SDState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], SDState]:
    val, state = sd_update_raw(state, bar["close"])
    return [val], state


STATEFUL_REGISTRY["sd"] = StatefulIndicator(
    kind="sd",
    inputs=("close",),
    init=_sd_init,
    update=_sd_update,
    output_names=_window_names("SD"),
    warmup=_period_warmup,
)


def sd(values: Any, period: int = 14, **kwargs: Any) -> List[float]:
    """Population standard deviation over the last *period* values."""
    return batch("sd", values, period=period, **kwargs)
