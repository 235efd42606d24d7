# -*- coding: utf-8 -*-
"""tickta.stateful – streaming / stateful indicator package.

Category modules populate STATEFUL_REGISTRY at import time.  This package
re-exports it plus the shared base API and every batch function.
"""
from __future__ import annotations

# Base API (always available)
from ._base import (
    NAN,
    TAError,
    ConfigurationError,
    WindowBuffer,
    WilderState,
    EMAState,
    SMAState,
    StatefulIndicator,
    STATEFUL_REGISTRY,
    Stream,
    batch,
    get_indicator,
    replay_seed,
    to_frame,
    round_to,
    wilder_update_raw,
    ema_update_raw,
    sma_update_raw,
    build_state_key,
    resolve_output_names,
    stateful_supported_kinds,
    STATEFUL_SPEC_EXCLUDES,
)

# ---------------------------------------------------------------------------
# Category modules – each populates the shared registry on import
# ---------------------------------------------------------------------------
from ._overlap import sma, ema, wema, wma, wilder_smoothing
from ._statistics import rolling_sum, highest, lowest, sd
from ._volatility import true_range, atr, bollinger_bands, BollingerBandsOutput
from ._momentum import (
    average_gain,
    average_loss,
    rsi,
    stochastic,
    stochastic_rsi,
    williams_r,
    macd,
    StochasticOutput,
    StochasticRSIOutput,
    MACDOutput,
)
from ._oscillators import typical_price, cci
from ._trend import plus_dm, minus_dm, adx, ADXOutput
from ._utils import cross_up, cross_down, cross_over
from ._study import StatefulStudy

__all__ = [
    # base
    "NAN",
    "TAError",
    "ConfigurationError",
    "WindowBuffer",
    "WilderState",
    "EMAState",
    "SMAState",
    "StatefulIndicator",
    "STATEFUL_REGISTRY",
    "Stream",
    "StatefulStudy",
    "batch",
    "get_indicator",
    "replay_seed",
    "to_frame",
    "round_to",
    "wilder_update_raw",
    "ema_update_raw",
    "sma_update_raw",
    "build_state_key",
    "resolve_output_names",
    "stateful_supported_kinds",
    # outputs
    "BollingerBandsOutput",
    "StochasticOutput",
    "StochasticRSIOutput",
    "MACDOutput",
    "ADXOutput",
    # batch functions
    "sma",
    "ema",
    "wema",
    "wma",
    "wilder_smoothing",
    "rolling_sum",
    "highest",
    "lowest",
    "sd",
    "true_range",
    "atr",
    "bollinger_bands",
    "average_gain",
    "average_loss",
    "rsi",
    "stochastic",
    "stochastic_rsi",
    "williams_r",
    "macd",
    "typical_price",
    "cci",
    "plus_dm",
    "minus_dm",
    "adx",
    "cross_up",
    "cross_down",
    "cross_over",
]
