# -*- coding: utf-8 -*-
"""tickta stateful – shared base: window primitive, state classes, helpers,
registry and the batch / stream drivers.

All category modules (``_overlap``, ``_momentum``, …) import from here
and populate the registry at load time.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import (
    Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple,
)

import logging
import math
import numbers

logger = logging.getLogger(__name__)

NAN = float("nan")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class TAError(Exception):
    """Base class for every error raised by tickta."""


class ConfigurationError(TAError, ValueError):
    """Invalid indicator configuration or inputs, raised at construction."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _is_nan(x: Any) -> bool:
    """True when *x* is None or a float NaN."""
    return x is None or (isinstance(x, float) and math.isnan(x))


def _param(params: Dict[str, Any], key: str, default: Any) -> Any:
    """Pull *key* from *params*; treat None as missing → default."""
    value = params.get(key, default)
    return default if value is None else value


def _as_period(params: Dict[str, Any], key: str, default: int) -> int:
    """Read a window length; must be a positive integer."""
    value = _param(params, key, default)
    if isinstance(value, bool):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")
    try:
        period = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}") from None
    if period != value:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")
    if period <= 0:
        raise ConfigurationError(f"{key} must be positive, got {period}")
    return period


def _as_float(params: Dict[str, Any], key: str, default: float) -> float:
    value = _param(params, key, default)
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a number, got {value!r}") from None
    if not math.isfinite(result):
        raise ConfigurationError(f"{key} must be finite, got {value!r}")
    return result


def round_to(decimals: int) -> Callable[[float], float]:
    """Format hook rounding every emitted value to *decimals* places."""
    def _fmt(value: float) -> float:
        return round(value, decimals)
    return _fmt


# ---------------------------------------------------------------------------
# Window primitive
# ---------------------------------------------------------------------------

class WindowBuffer:
    """The last *period* samples plus running sum / min / max.

    ``sum`` is maintained in O(1); ``min`` and ``max`` use monotonic deques
    of ``(value, insertion index)`` so each push is amortised O(1).
    """

    __slots__ = ("period", "_values", "_sum", "_pushed", "_mins", "_maxs")

    def __init__(self, period: int):
        if isinstance(period, bool) or not isinstance(period, numbers.Integral) or period <= 0:
            raise ConfigurationError(f"period must be a positive integer, got {period!r}")
        self.period = int(period)
        self._values: deque = deque()
        self._sum = 0.0
        self._pushed = 0
        self._mins: deque = deque()
        self._maxs: deque = deque()

    def push(self, x: float) -> None:
        if len(self._values) == self.period:
            self._sum -= self._values.popleft()
        self._values.append(x)
        self._sum += x

        idx = self._pushed
        self._pushed += 1
        oldest = self._pushed - self.period

        while self._mins and self._mins[-1][0] >= x:
            self._mins.pop()
        self._mins.append((x, idx))
        while self._mins[0][1] < oldest:
            self._mins.popleft()

        while self._maxs and self._maxs[-1][0] <= x:
            self._maxs.pop()
        self._maxs.append((x, idx))
        while self._maxs[0][1] < oldest:
            self._maxs.popleft()

    def is_full(self) -> bool:
        return self._pushed >= self.period

    def sum(self) -> float:
        return self._sum

    def min(self) -> Optional[float]:
        return self._mins[0][0] if self._mins else None

    def max(self) -> Optional[float]:
        return self._maxs[0][0] if self._maxs else None

    def count(self) -> int:
        """Samples currently held (at most ``period``)."""
        return len(self._values)

    @property
    def pushed(self) -> int:
        return self._pushed

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"WindowBuffer(period={self.period}, values={list(self._values)!r})"


# ---------------------------------------------------------------------------
# Shared state classes
# ---------------------------------------------------------------------------

@dataclass
class WilderState:
    """Wilder's running sum.

    Absent for the first ``period - 1`` samples, the plain sum at the
    ``period``-th sample, then ``prev - prev / period + x``.
    """
    period: int
    result: Optional[float] = None
    _sum: float = 0.0
    _count: int = 0


@dataclass
class EMAState:
    """Reusable for EMA / WEMA.

    EMA  -> alpha = 2 / (period + 1)   via ``ema_make``
    WEMA -> alpha = 1 / period          via ``wema_make``

    First output = SMA(x[0:period]), then ``alpha * x + (1 - alpha) * last``.
    """
    period: int
    alpha: float
    last: Optional[float] = None
    _warmup_sum: float = 0.0
    _warmup_count: int = 0


@dataclass
class SMAState:
    window: WindowBuffer


# ---------------------------------------------------------------------------
# Low-level update helpers
# ---------------------------------------------------------------------------

def wilder_make(period: int) -> WilderState:
    return WilderState(period=period)


def wilder_update_raw(state: WilderState, x: float) -> Tuple[Optional[float], WilderState]:
    """Single-step Wilder smoothing.  Returns (value | None, state)."""
    if state._count < state.period:
        state._count += 1
        state._sum += x
        if state._count < state.period:
            return None, state
        state.result = state._sum
        return state.result, state
    state.result = state.result - state.result / state.period + x
    return state.result, state


def ema_make(period: int) -> EMAState:
    """EMA state – alpha = 2 / (period + 1)."""
    return EMAState(period=period, alpha=2.0 / (period + 1.0))


def wema_make(period: int) -> EMAState:
    """WEMA / Wilder average state – alpha = 1 / period."""
    return EMAState(period=period, alpha=1.0 / period)


def ema_update_raw(state: EMAState, x: float) -> Tuple[Optional[float], EMAState]:
    """Single-step EMA / WEMA update.  Returns (value | None, state).

    Returns None while warming up (fewer than *period* samples seen).
    """
    if state.last is None:
        state._warmup_sum += x
        state._warmup_count += 1
        if state._warmup_count < state.period:
            return None, state
        state.last = state._warmup_sum / state.period   # SMA seed
        return state.last, state
    state.last = state.alpha * x + (1.0 - state.alpha) * state.last
    return state.last, state


def sma_make(period: int) -> SMAState:
    return SMAState(window=WindowBuffer(period))


def sma_update_raw(state: SMAState, x: float) -> Tuple[Optional[float], SMAState]:
    """Single-step SMA.  Returns (value | None, state)."""
    state.window.push(x)
    if not state.window.is_full():
        return None, state
    return state.window.sum() / state.window.period, state


# ---------------------------------------------------------------------------
# Indicator descriptor & registry  (populated by category modules)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatefulIndicator:
    """Immutable descriptor for a single stateful indicator."""
    kind:         str
    inputs:       Tuple[str, ...]
    init:         Callable[[Dict[str, Any]], Any]
    update:       Callable[[Any, Dict[str, Any], Dict[str, Any]],
                           Tuple[List[Any], Any]]
    output_names: Callable[[Dict[str, Any]], List[str]]
    warmup:       Callable[[Dict[str, Any]], int]
    output_type:  Optional[type] = None
    # update() applies the format hook itself (params["format"]).
    formats_output: bool = False


# Populated by category modules at import time.
STATEFUL_REGISTRY: Dict[str, StatefulIndicator] = {}


def get_indicator(kind: str) -> StatefulIndicator:
    indicator = STATEFUL_REGISTRY.get(str(kind).lower())
    if indicator is None:
        raise ConfigurationError(f"Indicator '{kind}' not found in STATEFUL_REGISTRY")
    return indicator


def stateful_supported_kinds() -> List[str]:
    """Return sorted list of supported indicator kinds."""
    return sorted(STATEFUL_REGISTRY.keys())


# ---------------------------------------------------------------------------
# Input normalisation
# ---------------------------------------------------------------------------

def _as_column(values: Any, name: str) -> List[float]:
    """Any 1-d sequence / ndarray / Series -> list of floats (NaN kept)."""
    import pandas as pd          # lazy – pandas not required at module load
    if isinstance(values, (str, bytes)) or not hasattr(values, "__len__"):
        raise ConfigurationError(f"input '{name}' must be a sequence, got {type(values).__name__}")
    series = pd.Series(values, dtype="float64")
    return series.tolist()


def _columns_from(inputs: Sequence[str], source: Any) -> Dict[str, List[float]]:
    """Extract the indicator's input columns from *source*.

    *source* is a mapping or DataFrame keyed by input name, a bare series
    for single-input kinds, or a tuple of parallel series in ``inputs``
    order.  An empty sequence yields empty columns.
    """
    columns: Dict[str, List[float]] = {}
    if isinstance(source, Mapping) or hasattr(source, "columns"):
        for name in inputs:
            try:
                column = source[name]
            except (KeyError, IndexError, TypeError):
                raise ConfigurationError(f"missing input series '{name}'") from None
            columns[name] = _as_column(column, name)
    elif len(inputs) == 1:
        columns[inputs[0]] = _as_column(source, inputs[0])
    elif isinstance(source, (str, bytes)) or not hasattr(source, "__len__"):
        raise ConfigurationError(f"seed must be a sequence, got {type(source).__name__}")
    elif len(source) == 0:
        columns = {name: [] for name in inputs}
    elif len(source) != len(inputs):
        raise ConfigurationError(
            f"need {len(inputs)} parallel series {tuple(inputs)}, got {len(source)}"
        )
    else:
        for name, column in zip(inputs, source):
            columns[name] = _as_column(column, name)
    _check_lengths(columns)
    return columns


def _check_lengths(columns: Mapping[str, Sequence[float]]) -> None:
    lengths = {k: len(v) for k, v in columns.items()}
    if len(set(lengths.values())) > 1:
        detail = ", ".join(f"{k}={n}" for k, n in lengths.items())
        raise ConfigurationError(f"input series must have equal length ({detail})")


def _rows(columns: Mapping[str, List[float]]) -> Iterator[Dict[str, float]]:
    keys = list(columns.keys())
    if not keys:
        return
    for row in zip(*(columns[k] for k in keys)):
        yield dict(zip(keys, row))


# ---------------------------------------------------------------------------
# Stream: one long-lived indicator instance
# ---------------------------------------------------------------------------

class Stream:
    """Incremental driver for one registered indicator.

    >>> s = Stream("sma", period=3)
    >>> [s.advance(x) for x in (1, 2, 3, 4)]
    [None, None, 2.0, 3.0]
    """

    def __init__(
        self,
        kind: str,
        *,
        seed: Any = None,
        format: Optional[Callable[[float], float]] = None,
        **params: Any,
    ):
        self.indicator = get_indicator(kind)
        self.kind = self.indicator.kind
        self.params: Dict[str, Any] = dict(params)
        self.format = format
        self._update_params = self.params
        if format is not None and self.indicator.formats_output:
            self._update_params = dict(self.params, format=format)
        self.state = self.indicator.init(self.params)
        self.count = 0
        logger.debug("stream %s created with %r", self.kind, self.params)
        if seed is not None:
            self.seed(seed)

    @property
    def inputs(self) -> Tuple[str, ...]:
        return self.indicator.inputs

    @property
    def warmup(self) -> int:
        return self.indicator.warmup(self.params)

    @property
    def is_ready(self) -> bool:
        return self.count >= self.warmup

    def output_names(self) -> List[str]:
        return self.indicator.output_names(self.params)

    def seed(self, source: Any) -> "Stream":
        """Replay historical rows silently.

        *source* is anything ``batch`` takes as input: a bare series for
        single-input kinds, a tuple of parallel series, or a mapping /
        DataFrame keyed by input name.  An empty seed is a no-op.
        """
        columns = _columns_from(self.inputs, source)
        replayed = 0
        for bar in _rows(columns):
            if self._step(bar) is not None:
                replayed += 1
        logger.debug("stream %s seeded with %d rows", self.kind, replayed)
        return self

    def advance(self, sample: Any) -> Any:
        """Feed one sample; returns the next output or None while absent."""
        values = self._step(self._bar(sample))
        if values is None:
            return None
        return self._pack(values)

    def _bar(self, sample: Any) -> Dict[str, Any]:
        inputs = self.inputs
        if isinstance(sample, Mapping):
            try:
                return {k: sample[k] for k in inputs}
            except KeyError as exc:
                raise KeyError(f"{self.kind} needs inputs {inputs}, missing {exc}") from None
        if isinstance(sample, (tuple, list)):
            if len(sample) != len(inputs):
                raise ValueError(f"{self.kind} needs {len(inputs)} values {inputs}, got {len(sample)}")
            return dict(zip(inputs, sample))
        if len(inputs) != 1:
            raise ValueError(f"{self.kind} needs inputs {inputs}, got a scalar")
        return {inputs[0]: sample}

    def _step(self, bar: Dict[str, Any]) -> Optional[List[Any]]:
        if any(_is_nan(v) for v in bar.values()):
            return None
        bar = {k: float(v) for k, v in bar.items()}
        values, self.state = self.indicator.update(self.state, bar, self._update_params)
        self.count += 1
        return values

    def _pack(self, values: List[Any]) -> Any:
        if all(v is None for v in values):
            return None
        if self.format is not None and not self.indicator.formats_output:
            values = [
                self.format(v) if isinstance(v, float) else v
                for v in values
            ]
        output_type = self.indicator.output_type
        if output_type is None:
            return values[0]
        return output_type(*values)

    def __repr__(self) -> str:
        return f"Stream({self.kind!r}, count={self.count}, params={self.params!r})"


# ---------------------------------------------------------------------------
# Batch driver
# ---------------------------------------------------------------------------

def batch(
    kind: str,
    *series: Any,
    reversed_input: bool = False,
    format: Optional[Callable[[float], float]] = None,
    **params: Any,
) -> List[Any]:
    """Run a fresh :class:`Stream` over full input series.

    One positional series per indicator input, in the order of
    ``STATEFUL_REGISTRY[kind].inputs``.  Returns the present outputs only;
    an input shorter than the warm-up yields ``[]``.
    """
    stream = Stream(kind, format=format, **params)
    inputs = stream.inputs
    if len(series) != len(inputs):
        raise ConfigurationError(
            f"{stream.kind} needs {len(inputs)} series {inputs}, got {len(series)}"
        )
    columns = {name: _as_column(s, name) for name, s in zip(inputs, series)}
    _check_lengths(columns)
    if reversed_input:
        logger.debug("batch %s with reversed input", stream.kind)
        columns = {k: v[::-1] for k, v in columns.items()}

    result: List[Any] = []
    for bar in _rows(columns):
        out = stream.advance(bar)
        if out is not None:
            result.append(out)

    if reversed_input:
        result.reverse()
    return result


def replay_seed(kind: str, inputs: Any, params: Dict[str, Any]) -> Any:
    """Generic seed: replay the stateful update over historical series.

    Returns the final *State* after processing all rows; rows holding a
    NaN are skipped.
    """
    return Stream(kind, seed=inputs, **params).state


def to_frame(kind: str, outputs: Sequence[Any], **params: Any) -> "pd.DataFrame":  # noqa: F821
    """Batch outputs -> DataFrame named by ``output_names``; None -> NaN."""
    import pandas as pd
    indicator = get_indicator(kind)
    names = indicator.output_names(params)
    if indicator.output_type is None:
        rows = [[NAN if v is None else v] for v in outputs]
    else:
        rows = [[NAN if v is None else v for v in out] for out in outputs]
    return pd.DataFrame(rows, columns=names)


# ---------------------------------------------------------------------------
# Output-name helpers
# ---------------------------------------------------------------------------

STATEFUL_SPEC_EXCLUDES = frozenset({
    "kind", "prefix", "suffix", "delimiter", "col_names", "format",
})


def build_state_key(kind: str, spec: Dict[str, Any]) -> str:
    """Deterministic cache-key from *kind* + non-meta params."""
    parts = sorted(
        ((k, v) for k, v in spec.items() if k not in STATEFUL_SPEC_EXCLUDES),
        key=lambda x: x[0],
    )
    payload = "|".join(f"{k}={repr(v)}" for k, v in parts)
    return f"{kind}|{payload}" if payload else kind


def resolve_output_names(
        base_names: List[str], spec: Dict[str, Any]
) -> Tuple[Optional[List[str]], Optional[str]]:
    """Apply prefix / suffix / col_names overrides from *spec*."""
    names = list(base_names)
    delimiter = spec.get("delimiter", "_")
    prefix = spec.get("prefix") or ""
    suffix = spec.get("suffix") or ""
    if prefix:
        prefix = f"{prefix}{delimiter}"
    if suffix:
        suffix = f"{delimiter}{suffix}"
    if prefix or suffix:
        names = [f"{prefix}{n}{suffix}" for n in names]
    col_names = spec.get("col_names")
    if col_names is not None:
        if not isinstance(col_names, tuple):
            col_names = (col_names,)
        if len(col_names) < len(names):
            return None, f"[!] col_names too short: {len(col_names)} < {len(names)}"
        names = list(col_names[: len(names)])
    return names, None


def _fmt_num(val: Any) -> Any:
    if isinstance(val, float) and float(val).is_integer():
        return int(val)
    return val
