# -*- coding: utf-8 -*-
"""tickta stateful -- line crossing signals.

Registered kinds
----------------
cross_up, cross_down, cross_over
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from ._base import batch, StatefulIndicator, STATEFUL_REGISTRY


# ===========================================================================
# CROSS_UP / CROSS_DOWN / CROSS_OVER
# ===========================================================================
# side = sign(a - b).  Bars where a == b do not change the remembered side,
# so a cross through a run of equal values fires on the first bar that
# leaves it.  The first bar is always False.

@dataclass
class CrossState:
    side: int = 0


def cross_update_raw(state: CrossState, a: float, b: float) -> Tuple[bool, bool, CrossState]:
    """Single-step crossing.  Returns (crossed_up, crossed_down, state)."""
    side = (a > b) - (a < b)
    if side == 0:
        return False, False, state
    prev = state.side
    state.side = side
    return prev < 0 < side, side < 0 < prev, state


def _cross_update(pick: int):
    def _update(
        state: CrossState, bar: Dict[str, Any], params: Dict[str, Any]
    ) -> Tuple[List[bool], CrossState]:
        up, down, state = cross_update_raw(state, bar["line_a"], bar["line_b"])
        if pick > 0:
            return [up], state
        if pick < 0:
            return [down], state
        return [up or down], state
    return _update


for _kind, _pick in (("cross_up", 1), ("cross_down", -1), ("cross_over", 0)):
    STATEFUL_REGISTRY[_kind] = StatefulIndicator(
        kind=_kind,
        inputs=("line_a", "line_b"),
        init=lambda params: CrossState(),
        update=_cross_update(_pick),
        output_names=lambda params, _n=_kind.upper(): [_n],
        warmup=lambda params: 1,
    )


def cross_up(line_a: Any, line_b: Any, **kwargs: Any) -> List[bool]:
    """True on bars where *line_a* crosses above *line_b*."""
    return batch("cross_up", line_a, line_b, **kwargs)


def cross_down(line_a: Any, line_b: Any, **kwargs: Any) -> List[bool]:
    """True on bars where *line_a* crosses below *line_b*."""
    return batch("cross_down", line_a, line_b, **kwargs)


def cross_over(line_a: Any, line_b: Any, **kwargs: Any) -> List[bool]:
    """True on bars where the two lines cross in either direction."""
    return batch("cross_over", line_a, line_b, **kwargs)
