# -*- coding: utf-8 -*-
"""tickta stateful -- many indicators advanced together, one bar at a time.

A study is a list of spec dicts (``{"kind": "rsi", "period": 14}``); each
spec owns its own :class:`Stream`.  ``prefix`` / ``suffix`` / ``col_names``
rename the output columns.
"""
from __future__ import annotations

import logging
import warnings
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ._base import (
    NAN,
    STATEFUL_SPEC_EXCLUDES,
    ConfigurationError,
    Stream,
    build_state_key,
    resolve_output_names,
)

logger = logging.getLogger(__name__)


class StatefulStudy:
    """Advance every spec's stream with the same bar."""

    def __init__(self, specs: Sequence[Dict[str, Any]]):
        self.streams: Dict[str, Stream] = {}
        self._columns: Dict[str, List[str]] = {}

        for spec in specs:
            kind = spec.get("kind")
            if not kind:
                raise ConfigurationError(f"study spec without 'kind': {spec!r}")
            key = build_state_key(kind, spec)
            if key in self.streams:
                warnings.warn(f"[!] duplicate study spec skipped: {key}", UserWarning, stacklevel=2)
                continue
            params = {k: v for k, v in spec.items() if k not in STATEFUL_SPEC_EXCLUDES}
            stream = Stream(kind, format=spec.get("format"), **params)
            names, err = resolve_output_names(stream.output_names(), spec)
            if names is None:
                raise ConfigurationError(err)
            self.streams[key] = stream
            self._columns[key] = names

        logger.debug("study built with %d streams", len(self.streams))

    @property
    def columns(self) -> List[str]:
        return [c for names in self._columns.values() for c in names]

    @property
    def inputs(self) -> List[str]:
        seen: List[str] = []
        for stream in self.streams.values():
            for name in stream.inputs:
                if name not in seen:
                    seen.append(name)
        return seen

    def update(self, bar: Mapping[str, Any]) -> Dict[str, Optional[Any]]:
        """Feed one bar to every stream; absent values are None."""
        row: Dict[str, Optional[Any]] = {}
        for key, stream in self.streams.items():
            out = stream.advance(bar)
            names = self._columns[key]
            if out is None:
                row.update(dict.fromkeys(names))
            elif stream.indicator.output_type is None:
                row[names[0]] = out
            else:
                row.update(zip(names, out))
        return row

    def seed(self, df: "pd.DataFrame") -> "StatefulStudy":  # noqa: F821
        """Replay historical rows into every stream without collecting output."""
        for stream in self.streams.values():
            stream.seed(df)
        return self

    def run(self, df: "pd.DataFrame") -> "pd.DataFrame":  # noqa: F821
        """Advance over *df* row by row; result is aligned to ``df.index``."""
        import pandas as pd

        missing = [name for name in self.inputs if name not in df.columns]
        if missing:
            raise ConfigurationError(f"missing input columns: {missing}")

        records = []
        for bar in df[self.inputs].to_dict("records"):
            row = self.update(bar)
            records.append({k: NAN if v is None else v for k, v in row.items()})
        return pd.DataFrame(records, index=df.index, columns=self.columns)
