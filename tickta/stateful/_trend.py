# -*- coding: utf-8 -*-
"""tickta stateful -- directional movement and trend strength.

Registered kinds
----------------
plus_dm, minus_dm, adx
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from ._base import (
    EMAState,
    WilderState,
    _as_period,
    batch,
    ema_update_raw,
    wema_make,
    wilder_make,
    wilder_update_raw,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)
from ._volatility import TRState, tr_update_raw


# ===========================================================================
# PLUS_DM / MINUS_DM
# ===========================================================================
# up = high - prev_high, dn = prev_low - low
# DM+ = up if (up > dn and up > 0) else 0
# DM- = dn if (dn > up and dn > 0) else 0
# First bar has nothing to diff against: absent.

@dataclass
class DMState:
    prev_high: Optional[float] = None
    prev_low:  Optional[float] = None


def dm_update_raw(
    state: DMState, high: float, low: float
) -> Tuple[Optional[float], Optional[float], DMState]:
    """Single-step directional movement.  Returns (dm+ | None, dm- | None, state)."""
    prev_high, prev_low = state.prev_high, state.prev_low
    state.prev_high = high
    state.prev_low = low
    if prev_high is None:
        return None, None, state

    up = high - prev_high
    dn = prev_low - low
    pdm = up if (up > dn and up > 0) else 0.0
    mdm = dn if (dn > up and dn > 0) else 0.0
    return pdm, mdm, state


def _plus_dm_update(
    state: DMState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], DMState]:
    pdm, _, state = dm_update_raw(state, bar["high"], bar["low"])
    return [pdm], state


def _minus_dm_update(
    state: DMState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], DMState]:
    _, mdm, state = dm_update_raw(state, bar["high"], bar["low"])
    return [mdm], state


STATEFUL_REGISTRY["plus_dm"] = StatefulIndicator(
    kind="plus_dm",
    inputs=("high", "low"),
    init=lambda params: DMState(),
    update=_plus_dm_update,
    output_names=lambda params: ["PDM"],
    warmup=lambda params: 2,
)

STATEFUL_REGISTRY["minus_dm"] = StatefulIndicator(
    kind="minus_dm",
    inputs=("high", "low"),
    init=lambda params: DMState(),
    update=_minus_dm_update,
    output_names=lambda params: ["MDM"],
    warmup=lambda params: 2,
)


def plus_dm(high: Any, low: Any, **kwargs: Any) -> List[float]:
    return batch("plus_dm", high, low, **kwargs)


def minus_dm(high: Any, low: Any, **kwargs: Any) -> List[float]:
    return batch("minus_dm", high, low, **kwargs)


# ===========================================================================
# ADX
# ===========================================================================
# TR, DM+, DM-           -> three Wilder(period) running sums
# PDI = 100 * sDM+ / sTR,  MDI = 100 * sDM- / sTR    (sTR == 0 -> both 0)
# DX  = 100 * |PDI - MDI| / (PDI + MDI)             (PDI + MDI == 0 -> 0)
# ADX = WEMA(DX, period); absent until it warms (bar 2 * period).
# Default: period=14

class ADXOutput(NamedTuple):
    adx: float
    pdi: float
    mdi: float


@dataclass
class ADXState:
    tr: TRState
    dm: DMState
    tr_sum: WilderState
    pdm_sum: WilderState
    mdm_sum: WilderState
    dx_avg: EMAState


def _adx_init(params: Dict[str, Any]) -> ADXState:
    period = _as_period(params, "period", 14)
    return ADXState(
        tr=TRState(),
        dm=DMState(),
        tr_sum=wilder_make(period),
        pdm_sum=wilder_make(period),
        mdm_sum=wilder_make(period),
        dx_avg=wema_make(period),
    )


def _adx_update(
    state: ADXState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], ADXState]:
    high, low, close = bar["high"], bar["low"], bar["close"]
    absent: List[Optional[float]] = [None, None, None]

    tr, state.tr = tr_update_raw(state.tr, high, low, close)
    pdm, mdm, state.dm = dm_update_raw(state.dm, high, low)
    if tr is None:
        return absent, state

    s_tr, state.tr_sum = wilder_update_raw(state.tr_sum, tr)
    s_pdm, state.pdm_sum = wilder_update_raw(state.pdm_sum, pdm)
    s_mdm, state.mdm_sum = wilder_update_raw(state.mdm_sum, mdm)
    if s_tr is None or s_pdm is None or s_mdm is None:
        return absent, state

    if s_tr != 0.0:
        pdi = s_pdm * 100.0 / s_tr
        mdi = s_mdm * 100.0 / s_tr
    else:
        pdi = mdi = 0.0

    di_sum = pdi + mdi
    dx = abs(pdi - mdi) / di_sum * 100.0 if di_sum != 0.0 else 0.0

    adx_val, state.dx_avg = ema_update_raw(state.dx_avg, dx)
    if adx_val is None:
        return absent, state
    return [adx_val, pdi, mdi], state


def _adx_output_names(params: Dict[str, Any]) -> List[str]:
    period = _as_period(params, "period", 14)
    return [f"ADX_{period}", f"DMP_{period}", f"DMN_{period}"]


STATEFUL_REGISTRY["adx"] = StatefulIndicator(
    kind="adx",
    inputs=("high", "low", "close"),
    init=_adx_init,
    update=_adx_update,
    output_names=_adx_output_names,
    warmup=lambda params: 2 * _as_period(params, "period", 14),
    output_type=ADXOutput,
)


def adx(high: Any, low: Any, close: Any, period: int = 14, **kwargs: Any) -> List[ADXOutput]:
    """Average Directional Index ``(adx, pdi, mdi)`` per bar."""
    return batch("adx", high, low, close, period=period, **kwargs)
