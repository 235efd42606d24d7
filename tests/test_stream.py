# -*- coding: utf-8 -*-
import math

import pandas as pd
import pytest

import tickta as ta
from tickta.stateful import STATEFUL_REGISTRY, stateful_supported_kinds

from .conftest import INPUT_COLUMNS

KINDS = stateful_supported_kinds()

SMALL_PARAMS = {
    "stochrsi": {"rsi_period": 5, "stochastic_period": 4, "k_period": 2, "d_period": 3},
    "macd": {"fast": 3, "slow": 6, "signal": 4},
    "adx": {"period": 5},
    "bbands": {"period": 8, "std_dev": 1.5},
}


def _series(kind, df):
    return [df[INPUT_COLUMNS[name]] for name in STATEFUL_REGISTRY[kind].inputs]


def _replay(stream, df):
    columns = [INPUT_COLUMNS[name] for name in stream.inputs]
    out = []
    for row in df[columns].itertuples(index=False):
        value = stream.advance(dict(zip(stream.inputs, row)))
        if value is not None:
            out.append(value)
    return out


@pytest.mark.parametrize("kind", KINDS)
@pytest.mark.parametrize("params", [None, "small"])
def test_batch_equals_stream(kind, params, ohlc):
    params = SMALL_PARAMS.get(kind, {"period": 3}) if params == "small" else {}
    if kind in ("typical_price", "true_range", "plus_dm", "minus_dm") or kind.startswith("cross"):
        params = {}
    expected = ta.batch(kind, *_series(kind, ohlc), **params)
    got = _replay(ta.Stream(kind, **params), ohlc)
    assert got == expected
    assert len(got) == len(ohlc) - ta.Stream(kind, **params).warmup + 1


@pytest.mark.parametrize("kind", KINDS)
def test_prefix_equivalence(kind, ohlc):
    stream = ta.Stream(kind)
    head = ohlc.iloc[:80]
    emitted = []
    for n, row in enumerate(head.itertuples(index=False), start=1):
        bar = {name: getattr(row, INPUT_COLUMNS[name]) for name in stream.inputs}
        value = stream.advance(bar)
        if value is not None:
            emitted.append(value)
        if n % 13 == 0:
            assert emitted == ta.batch(kind, *_series(kind, head.iloc[:n]))


@pytest.mark.parametrize("kind", KINDS)
def test_warmup_boundary(kind, ohlc):
    stream = ta.Stream(kind)
    warmup = stream.warmup
    series = _series(kind, ohlc)
    assert ta.batch(kind, *[s.iloc[: warmup - 1] for s in series]) == []
    assert len(ta.batch(kind, *[s.iloc[:warmup] for s in series])) == 1

    columns = [INPUT_COLUMNS[name] for name in stream.inputs]
    rows = ohlc[columns].to_numpy().tolist()
    for row in rows[: warmup - 1]:
        assert stream.advance(tuple(row)) is None
        assert not stream.is_ready
    assert stream.advance(tuple(rows[warmup - 1])) is not None
    assert stream.is_ready


@pytest.mark.parametrize("kind", KINDS)
def test_reversed_input_round_trip(kind, ohlc):
    series = _series(kind, ohlc.iloc[:120])
    forward = ta.batch(kind, *series)
    descending = [s.iloc[::-1] for s in series]
    assert ta.batch(kind, *descending, reversed_input=True) == forward[::-1]


def test_outputs_are_finite(ohlc):
    for kind in KINDS:
        for out in ta.batch(kind, *_series(kind, ohlc)):
            values = out if isinstance(out, tuple) else (out,)
            for v in values:
                assert v is None or isinstance(v, bool) or math.isfinite(v), kind


def test_empty_input_is_empty():
    assert ta.sma([], period=3) == []
    assert ta.adx([], [], [], period=3) == []


def test_format_hook():
    s = ta.Stream("sma", period=3, format=ta.round_to(2))
    assert [s.advance(x) for x in (1, 1, 2)] == [None, None, 1.33]
    assert ta.sma([1, 1, 2, 2], period=3, format=ta.round_to(1)) == [1.3, 1.7]


def test_format_hook_leaves_absent_fields():
    out = ta.bollinger_bands([4.0] * 5, period=5, format=ta.round_to(1))
    assert out == [ta.BollingerBandsOutput(4.0, 4.0, 4.0, None)]


def test_stream_seed_from_mapping_and_frame():
    s = ta.Stream("sma", period=3, seed={"close": [1, 2, 3]})
    assert s.count == 3
    assert s.advance(4) == 3.0

    frame = pd.DataFrame({"close": [1.0, 2.0, 3.0]})
    s = ta.Stream("sma", period=3, seed=frame)
    assert s.advance(4) == 3.0


def test_stream_seed_from_bare_series():
    assert ta.Stream("sma", period=3, seed=[]).count == 0
    s = ta.Stream("sma", period=3, seed=[1.0, 2.0, 3.0])
    assert s.count == 3
    assert s.advance(4.0) == 3.0

    s = ta.Stream("sma", period=3, seed=pd.Series([1.0, 2.0, 3.0]))
    assert s.advance(4.0) == 3.0


def test_stream_seed_from_parallel_series(ohlc):
    head, tail = ohlc.iloc[:100], ohlc.iloc[100:]
    seed = (head["high"].tolist(), head["low"].tolist(), head["close"].tolist())
    seeded = ta.Stream("adx", period=5, seed=seed)
    assert seeded.count == 100

    from_frame = ta.Stream("adx", period=5, seed=head)
    for bar in tail[["high", "low", "close"]].itertuples(index=False):
        assert seeded.advance(tuple(bar)) == from_frame.advance(tuple(bar))

    assert ta.Stream("adx", period=5, seed=[]).count == 0
    assert ta.Stream("adx", period=5, seed=([], [], [])).count == 0


def test_stream_seed_shape_errors():
    with pytest.raises(ta.ConfigurationError):
        ta.Stream("adx", period=5, seed=([1.0, 2.0], [1.0, 2.0]))
    with pytest.raises(ta.ConfigurationError):
        ta.Stream("adx", period=5, seed=([1.0, 2.0], [1.0], [1.0, 2.0]))
    with pytest.raises(ta.ConfigurationError):
        ta.Stream("adx", period=5, seed={"high": [1.0]})


def test_stream_seed_matches_full_replay(ohlc):
    head, tail = ohlc.iloc[:200], ohlc.iloc[200:]
    seeded = ta.Stream("adx", period=10, seed=head)
    cont = [seeded.advance(bar) for bar in tail[["high", "low", "close"]].to_dict("records")]
    full = ta.batch("adx", ohlc["high"], ohlc["low"], ohlc["close"], period=10)
    assert cont == full[-len(tail):]


def test_replay_seed_returns_state():
    state = ta.replay_seed("wilder", {"close": [1, 2, 3]}, {"period": 3})
    assert isinstance(state, ta.WilderState)
    assert state.result == 6.0


def test_nan_rows_are_skipped():
    s = ta.Stream("sma", period=2)
    assert s.advance(1.0) is None
    assert s.advance(float("nan")) is None
    assert s.advance(None) is None
    assert s.count == 1
    assert s.advance(3.0) == 2.0
    assert ta.sma([1.0, float("nan"), 3.0], period=2) == [2.0]


def test_advance_input_shapes():
    s = ta.Stream("typical_price")
    assert s.advance({"high": 3, "low": 1, "close": 2}) == 2.0
    assert s.advance([6, 2, 4]) == 4.0
    with pytest.raises(ValueError):
        s.advance(5.0)
    with pytest.raises(ValueError):
        s.advance((1, 2))
    with pytest.raises(KeyError):
        s.advance({"high": 1})


@pytest.mark.parametrize("period", [0, -1, 2.5, "x", True])
def test_bad_period_is_configuration_error(period):
    with pytest.raises(ta.ConfigurationError):
        ta.Stream("sma", period=period)
    with pytest.raises(ValueError):
        ta.sma([1, 2, 3], period=period)


def test_unknown_kind():
    with pytest.raises(ta.ConfigurationError):
        ta.Stream("nope")


def test_wrong_series_count():
    with pytest.raises(ta.ConfigurationError):
        ta.batch("sma", [1, 2], [1, 2], period=2)
    with pytest.raises(ta.ConfigurationError):
        ta.batch("cci", [1, 2], period=2)


def test_streams_do_not_share_state(ohlc):
    close = ohlc["close"].tolist()
    a = ta.Stream("rsi", period=14)
    b = ta.Stream("rsi", period=5)
    out_a, out_b = [], []
    for x in close:
        out_a.append(a.advance(x))
        out_b.append(b.advance(x))
    assert [v for v in out_a if v is not None] == ta.rsi(close, period=14)
    assert [v for v in out_b if v is not None] == ta.rsi(close, period=5)


def test_output_names():
    assert ta.Stream("adx", period=7).output_names() == ["ADX_7", "DMP_7", "DMN_7"]
    assert ta.Stream("sma", period=5).output_names() == ["SMA_5"]
