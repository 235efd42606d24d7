# -*- coding: utf-8 -*-
import math

import pytest

import tickta as ta


def test_study_run_matches_batch(ohlc):
    study = ta.StatefulStudy([
        {"kind": "sma", "period": 5},
        {"kind": "rsi", "period": 7, "prefix": "fast"},
        {"kind": "bbands", "period": 10, "std_dev": 2},
    ])
    df = study.run(ohlc)

    assert list(df.columns) == study.columns
    assert study.columns[:2] == ["SMA_5", "fast_RSI_7"]
    assert df.index.equals(ohlc.index)

    sma = df["SMA_5"]
    assert math.isnan(sma.iloc[3])
    assert sma.dropna().tolist() == ta.sma(ohlc["close"], period=5)
    assert df["fast_RSI_7"].dropna().tolist() == ta.rsi(ohlc["close"], period=7)
    bands = ta.bollinger_bands(ohlc["close"], period=10, std_dev=2)
    assert df["BBU_10_2"].dropna().tolist() == [b.upper for b in bands]


def test_study_update_and_seed(ohlc):
    specs = [{"kind": "adx", "period": 5}, {"kind": "cci", "period": 5}]
    seeded = ta.StatefulStudy(specs).seed(ohlc.iloc[:100])
    row = seeded.update(ohlc.iloc[100][["high", "low", "close"]].to_dict())

    full = ta.StatefulStudy(specs).run(ohlc.iloc[:101])
    for column, value in row.items():
        assert value == pytest.approx(full[column].iloc[-1])


def test_study_duplicate_spec_warns():
    with pytest.warns(UserWarning):
        study = ta.StatefulStudy([{"kind": "sma", "period": 3}, {"kind": "sma", "period": 3}])
    assert study.columns == ["SMA_3"]


def test_study_col_names_and_errors(ohlc):
    study = ta.StatefulStudy([{"kind": "macd", "col_names": ("m", "s", "h")}])
    assert study.columns == ["m", "s", "h"]
    with pytest.raises(ta.ConfigurationError):
        ta.StatefulStudy([{"kind": "macd", "col_names": ("m",)}])
    with pytest.raises(ta.ConfigurationError):
        ta.StatefulStudy([{"period": 3}])
    with pytest.raises(ta.ConfigurationError):
        ta.StatefulStudy([{"kind": "sma"}]).run(ohlc[["open"]])
