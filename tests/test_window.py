# -*- coding: utf-8 -*-
import numpy as np
import pytest

from tickta import ConfigurationError, WindowBuffer


def test_window_aggregates_follow_fifo_eviction():
    w = WindowBuffer(3)
    for x in (5.0, 1.0, 4.0):
        w.push(x)
    assert w.is_full()
    assert (w.sum(), w.min(), w.max(), w.count()) == (10.0, 1.0, 5.0, 3)

    w.push(2.0)
    assert list(w) == [1.0, 4.0, 2.0]
    assert (w.sum(), w.min(), w.max()) == (7.0, 1.0, 4.0)

    w.push(3.0)
    assert list(w) == [4.0, 2.0, 3.0]
    assert (w.min(), w.max()) == (2.0, 4.0)


def test_window_warmup():
    w = WindowBuffer(4)
    assert w.min() is None and w.max() is None
    w.push(1.0)
    w.push(2.0)
    assert not w.is_full()
    assert w.count() == 2
    assert w.sum() == 3.0
    w.push(3.0)
    w.push(4.0)
    w.push(5.0)
    assert w.is_full()
    assert w.count() == 4
    assert w.pushed == 5


def test_window_min_max_match_brute_force():
    rng = np.random.default_rng(3)
    values = rng.integers(0, 20, 500).astype(float)
    period = 7
    w = WindowBuffer(period)
    for i, x in enumerate(values):
        w.push(float(x))
        live = values[max(0, i - period + 1): i + 1]
        assert w.min() == live.min()
        assert w.max() == live.max()
        assert w.sum() == pytest.approx(live.sum())


def test_window_repeated_values_keep_extremes():
    w = WindowBuffer(3)
    for x in (2.0, 2.0, 2.0, 2.0):
        w.push(x)
    assert w.min() == w.max() == 2.0


@pytest.mark.parametrize("period", [0, -3, 2.5, True, None])
def test_window_rejects_bad_period(period):
    with pytest.raises(ConfigurationError):
        WindowBuffer(period)


def test_window_accepts_numpy_integer_period():
    w = WindowBuffer(np.int64(3))
    assert w.period == 3
    assert type(w.period) is int
    for x in (1.0, 2.0, 3.0, 4.0):
        w.push(x)
    assert w.sum() == 9.0
