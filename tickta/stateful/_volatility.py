# -*- coding: utf-8 -*-
"""tickta stateful -- volatility indicators.

Registered kinds
----------------
true_range, atr, bbands
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from ._base import (
    ConfigurationError,
    EMAState,
    SMAState,
    _as_float,
    _as_period,
    _fmt_num,
    batch,
    ema_update_raw,
    sma_make,
    sma_update_raw,
    wema_make,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)
from ._statistics import SDState, _sd_init, sd_update_raw


# ===========================================================================
# TRUE RANGE
# ===========================================================================
# TR = max(high - low, |high - prev_close|, |low - prev_close|)
# First bar has no previous close: absent.

@dataclass
class TRState:
    prev_close: Optional[float] = None


def tr_update_raw(
    state: TRState, high: float, low: float, close: float
) -> Tuple[Optional[float], TRState]:
    """Single-step True Range.  Returns (tr | None, state)."""
    prev = state.prev_close
    state.prev_close = close
    if prev is None:
        return None, state
    return max(high - low, abs(high - prev), abs(low - prev)), state


def _tr_update(
    state: TRState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], TRState]:
    val, state = tr_update_raw(state, bar["high"], bar["low"], bar["close"])
    return [val], state


STATEFUL_REGISTRY["true_range"] = StatefulIndicator(
    kind="true_range",
    inputs=("high", "low", "close"),
    init=lambda params: TRState(),
    update=_tr_update,
    output_names=lambda params: ["TRUERANGE"],
    warmup=lambda params: 2,
)


def true_range(high: Any, low: Any, close: Any, **kwargs: Any) -> List[float]:
    """True Range of each bar against the previous close."""
    return batch("true_range", high, low, close, **kwargs)


# ===========================================================================
# ATR  -- WEMA(period) of True Range
# ===========================================================================

@dataclass
class ATRState:
    tr: TRState
    avg: EMAState


def _atr_init(params: Dict[str, Any]) -> ATRState:
    period = _as_period(params, "period", 14)
    return ATRState(tr=TRState(), avg=wema_make(period))


def _atr_update(
    state: ATRState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], ATRState]:
    tr, state.tr = tr_update_raw(state.tr, bar["high"], bar["low"], bar["close"])
    if tr is None:
        return [None], state
    val, state.avg = ema_update_raw(state.avg, tr)
    return [val], state


def _atr_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"ATR_{_as_period(params, 'period', 14)}"]


STATEFUL_REGISTRY["atr"] = StatefulIndicator(
    kind="atr",
    inputs=("high", "low", "close"),
    init=_atr_init,
    update=_atr_update,
    output_names=_atr_output_names,
    warmup=lambda params: _as_period(params, "period", 14) + 1,
)


def atr(high: Any, low: Any, close: Any, period: int = 14, **kwargs: Any) -> List[float]:
    """Average True Range (Wilder)."""
    return batch("atr", high, low, close, period=period, **kwargs)


# ===========================================================================
# BBANDS  -- Bollinger Bands
# ===========================================================================
# middle = SMA, upper/lower = middle +/- std_dev * SD,
# pb = (x - lower) / (upper - lower); pb is None when upper == lower.
# A format hook is applied to the bands before pb is taken from them.
# Defaults: period=20, std_dev=2

class BollingerBandsOutput(NamedTuple):
    middle: float
    upper: float
    lower: float
    pb: Optional[float]


@dataclass
class BBandsState:
    std_dev: float
    sma: SMAState
    sd: SDState


def _bbands_std(params: Dict[str, Any]) -> float:
    std_dev = _as_float(params, "std_dev", 2.0)
    if std_dev < 0:
        raise ConfigurationError(f"std_dev must not be negative, got {std_dev}")
    return std_dev


def _bbands_init(params: Dict[str, Any]) -> BBandsState:
    period = _as_period(params, "period", 20)
    return BBandsState(
        std_dev=_bbands_std(params),
        sma=sma_make(period),
        sd=_sd_init({"period": period}),
    )


def _bbands_update(
    state: BBandsState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], BBandsState]:
    x = bar["close"]
    mid, state.sma = sma_update_raw(state.sma, x)
    dev, state.sd = sd_update_raw(state.sd, x)
    if mid is None or dev is None:
        return [None, None, None, None], state

    upper = mid + dev * state.std_dev
    lower = mid - dev * state.std_dev
    fmt = params.get("format")
    if fmt is not None:
        mid, upper, lower = fmt(mid), fmt(upper), fmt(lower)
    width = upper - lower
    pb = (x - lower) / width if width != 0.0 else None
    if fmt is not None and pb is not None:
        pb = fmt(pb)
    return [mid, upper, lower, pb], state


def _bbands_output_names(params: Dict[str, Any]) -> List[str]:
    period = _as_period(params, "period", 20)
    p = f"_{period}_{_fmt_num(_bbands_std(params))}"
    return [f"BBM{p}", f"BBU{p}", f"BBL{p}", f"BBP{p}"]


STATEFUL_REGISTRY["bbands"] = StatefulIndicator(
    kind="bbands",
    inputs=("close",),
    init=_bbands_init,
    update=_bbands_update,
    output_names=_bbands_output_names,
    warmup=lambda params: _as_period(params, "period", 20),
    output_type=BollingerBandsOutput,
    formats_output=True,
)


def bollinger_bands(
    values: Any, period: int = 20, std_dev: float = 2.0, **kwargs: Any
) -> List[BollingerBandsOutput]:
    """Bollinger Bands ``(middle, upper, lower, pb)`` per bar."""
    return batch("bbands", values, period=period, std_dev=std_dev, **kwargs)
