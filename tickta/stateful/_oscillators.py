# -*- coding: utf-8 -*-
"""tickta stateful -- price oscillators.

Registered kinds
----------------
typical_price, cci
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

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

CCI_CONSTANT = 0.015


def typical_price_raw(high: float, low: float, close: float) -> float:
    return (high + low + close) / 3.0


# ===========================================================================
# TYPICAL PRICE  -- (high + low + close) / 3, every bar
# ===========================================================================

def _tp_update(
    state: None, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], None]:
    return [typical_price_raw(bar["high"], bar["low"], bar["close"])], state


STATEFUL_REGISTRY["typical_price"] = StatefulIndicator(
    kind="typical_price",
    inputs=("high", "low", "close"),
    init=lambda params: None,
    update=_tp_update,
    output_names=lambda params: ["TYPP"],
    warmup=lambda params: 1,
)


def typical_price(high: Any, low: Any, close: Any, **kwargs: Any) -> List[float]:
    return batch("typical_price", high, low, close, **kwargs)


# ===========================================================================
# CCI  -- Commodity Channel Index
# ===========================================================================
# tp   = typical price
# mad  = sum(|tp_i - sma(tp)|) / period over the live window
# cci  = (tp - sma(tp)) / (0.015 * mad);  mad == 0 -> 0
# Default period=20

@dataclass
class CCIState:
    window: WindowBuffer
    sma: SMAState


def _cci_init(params: Dict[str, Any]) -> CCIState:
    period = _as_period(params, "period", 20)
    return CCIState(window=WindowBuffer(period), sma=sma_make(period))


def _cci_update(
    state: CCIState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], CCIState]:
    tp = typical_price_raw(bar["high"], bar["low"], bar["close"])
    state.window.push(tp)
    mean, state.sma = sma_update_raw(state.sma, tp)
    if mean is None:
        return [None], state

    dev = 0.0
    for v in state.window:
        dev += abs(v - mean)
    mad = dev / state.window.period
    if mad == 0.0:
        return [0.0], state
    return [(tp - mean) / (CCI_CONSTANT * mad)], state


STATEFUL_REGISTRY["cci"] = StatefulIndicator(
    kind="cci",
    inputs=("high", "low", "close"),
    init=_cci_init,
    update=_cci_update,
    output_names=lambda params: [f"CCI_{_as_period(params, 'period', 20)}"],
    warmup=lambda params: _as_period(params, "period", 20),
)


def cci(high: Any, low: Any, close: Any, period: int = 20, **kwargs: Any) -> List[float]:
    """Commodity Channel Index."""
    return batch("cci", high, low, close, period=period, **kwargs)
