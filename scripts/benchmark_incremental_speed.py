#!/usr/bin/env python3
"""Benchmark incremental update speed per indicator kind.

Seeds a Stream on a growing history, then times advance() over the tail
rows.  Update cost should not depend on history length.
"""
from __future__ import annotations

import argparse
import copy
from time import perf_counter

from _common import make_ohlcv, parse_list

import tickta as ta


def time_call(fn, runs: int) -> float:
    times = []
    for _ in range(max(runs, 1)):
        start = perf_counter()
        fn()
        times.append(perf_counter() - start)
    return sum(times) / len(times)


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument(
        "--sizes",
        type=str,
        default="1000,10000,50000",
        help="comma-separated total row counts",
    )
    ap.add_argument("--tail", type=int, default=100, help="new rows per update")
    ap.add_argument("--seed", type=int, default=7)
    ap.add_argument("--kinds", type=str, default="", help="comma-separated kinds (default: all)")
    ap.add_argument("--runs", type=int, default=3, help="timed runs")
    args = ap.parse_args()

    sizes = [int(v) for v in parse_list(args.sizes)]
    kinds = parse_list(args.kinds) or ta.stateful_supported_kinds()

    print(f"[i] sizes: {sizes}")
    print(f"[i] tail: {args.tail}")
    print(f"[i] runs: {args.runs}")

    for rows in sizes:
        if rows <= args.tail + 1:
            print(f"[i] skip rows={rows} (need > tail+1)")
            continue

        df = make_ohlcv(rows, args.seed)
        split = rows - args.tail
        df_hist = df.iloc[:split]
        df_tail = df.iloc[split:]

        for kind in kinds:
            base = ta.Stream(kind, seed=df_hist)
            bars = df_tail[list(base.inputs)].to_dict("records")

            def run_tail():
                stream = copy.deepcopy(base)
                for bar in bars:
                    stream.advance(bar)

            avg = time_call(run_tail, args.runs)
            print(
                f"[tail] kind={kind} rows={rows} tail={args.tail} avg_s={avg:.6f} "
                f"us_per_bar={1e6 * avg / max(args.tail, 1):.2f}"
            )


if __name__ == "__main__":
    main()
