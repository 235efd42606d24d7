# -*- coding: utf-8 -*-
import math

import pytest

import tickta as ta


def test_true_range():
    assert ta.true_range([10, 12, 11], [8, 9, 9], [9, 11, 10]) == [3.0, 2.0]


def test_atr_is_wema_of_true_range():
    high = [10, 12, 11, 13]
    low = [8, 9, 9, 10]
    close = [9, 11, 10, 12]
    assert ta.atr(high, low, close, period=2) == pytest.approx([2.5, 2.75])


def test_bollinger_bands_reference_case():
    values = list(range(1, 21))
    result = ta.bollinger_bands(values, period=20, std_dev=2)
    assert len(result) == 1

    std = math.sqrt(33.25)
    out = result[0]
    assert out.middle == pytest.approx(10.5)
    assert out.upper == pytest.approx(10.5 + 2 * std)
    assert out.lower == pytest.approx(10.5 - 2 * std)
    assert std == pytest.approx(5.7663, abs=1e-4)
    assert out.pb == pytest.approx((20 - out.lower) / (out.upper - out.lower))


def test_bollinger_bands_flat_window_has_no_pb():
    result = ta.bollinger_bands([3.0] * 6, period=5, std_dev=2)
    assert len(result) == 2
    for out in result:
        assert out.middle == out.upper == out.lower == 3.0
        assert out.pb is None


def test_bollinger_middle_is_sma(ohlc):
    close = ohlc["close"].tolist()
    bands = ta.bollinger_bands(close, period=20, std_dev=2.5)
    assert [b.middle for b in bands] == ta.sma(close, period=20)
    for b in bands:
        assert b.lower <= b.middle <= b.upper


def test_bollinger_rejects_negative_multiplier():
    with pytest.raises(ta.ConfigurationError):
        ta.bollinger_bands([1, 2, 3], period=2, std_dev=-1)


def test_bollinger_to_frame():
    outputs = ta.bollinger_bands(list(range(1, 23)), period=20, std_dev=2)
    df = ta.to_frame("bbands", outputs, period=20, std_dev=2)
    assert list(df.columns) == ["BBM_20_2", "BBU_20_2", "BBL_20_2", "BBP_20_2"]
    assert len(df) == 3
    assert df["BBM_20_2"].iloc[0] == pytest.approx(10.5)


def test_bollinger_pb_uses_formatted_bands():
    values = [1.0, 2.0, 4.0]
    fmt = ta.round_to(1)
    out = ta.bollinger_bands(values, period=3, std_dev=1, format=fmt)[0]

    mid = 7.0 / 3.0
    dev = math.sqrt(((1 - mid) ** 2 + (2 - mid) ** 2 + (4 - mid) ** 2) / 3)
    upper, lower = round(mid + dev, 1), round(mid - dev, 1)
    assert (out.middle, out.upper, out.lower) == (round(mid, 1), upper, lower)
    assert out.pb == round((4.0 - lower) / (upper - lower), 1)


def test_bollinger_format_hook_applied_once():
    out = ta.bollinger_bands([1.0, 2.0, 4.0], period=3, std_dev=1, format=lambda v: v + 1000)[0]
    raw = ta.bollinger_bands([1.0, 2.0, 4.0], period=3, std_dev=1)[0]
    assert out.middle == raw.middle + 1000
    assert out.upper == raw.upper + 1000
    assert out.pb == (4.0 - out.lower) / (out.upper - out.lower) + 1000
