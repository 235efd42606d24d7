# -*- coding: utf-8 -*-
import numpy as np
import pandas as pd
import pytest


def make_ohlc(rows: int, seed: int) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    idx = pd.date_range("2025-01-01", periods=rows, freq="1min")
    base = 100 + rng.standard_normal(rows).cumsum()
    close = base + rng.normal(0, 0.2, rows)
    open_ = base + rng.normal(0, 0.2, rows)
    high = np.maximum(open_, close) + rng.random(rows) * 0.5
    low = np.minimum(open_, close) - rng.random(rows) * 0.5
    return pd.DataFrame(
        {
            "open": open_,
            "high": high,
            "low": low,
            "close": close,
        },
        index=idx,
    )


@pytest.fixture(scope="session")
def ohlc() -> pd.DataFrame:
    return make_ohlc(300, 7)


# Input name -> frame column used to drive every registered kind.
INPUT_COLUMNS = {
    "close": "close",
    "high": "high",
    "low": "low",
    "line_a": "close",
    "line_b": "open",
}
