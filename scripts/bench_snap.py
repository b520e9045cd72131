#!/usr/bin/env python3
"""Benchmark bounding-box, overlap and snap calls.

Usage (from the repo root):
    python scripts/bench_snap.py             # default: 3 iterations, 100 calls
    python scripts/bench_snap.py -n 5        # 5 iterations
    python scripts/bench_snap.py -c 1000     # 1000 calls per iteration
"""

import argparse
import statistics
import sys
import time
from pathlib import Path

# Add repo root to path
SCRIPT_DIR = Path(__file__).resolve().parent
ROOT_DIR = SCRIPT_DIR.parent
sys.path.insert(0, str(ROOT_DIR))

from mirror_engine.collision import do_pieces_overlap  # noqa: E402
from mirror_engine.shapes import get_piece_bounding_box  # noqa: E402
from mirror_engine.snap import calculate_snap_position  # noqa: E402
from mirror_engine.types import GameAreaConfig, PiecePosition  # noqa: E402

CONFIG = GameAreaConfig(width=700, height=500, mirror_line_x=700, piece_size=100)

TARGETS = [
    PiecePosition(type="A", x=490, y=200, rotation=0),
    PiecePosition(type="B", x=250, y=300, rotation=90),
    PiecePosition(type="A", x=150, y=120, rotation=45),
]


def _moving_pieces(count: int) -> list[PiecePosition]:
    types = ("A", "B")
    return [
        PiecePosition(
            type=types[i % 2],
            x=100 + (i * 37) % 300,
            y=80 + (i * 53) % 250,
            rotation=(i % 8) * 45,
        )
        for i in range(count)
    ]


def _bench_bbox(pieces):
    for p in pieces:
        get_piece_bounding_box(CONFIG, p)


def _bench_overlap(pieces):
    for p in pieces:
        for t in TARGETS:
            do_pieces_overlap(CONFIG, p, t)


def _bench_snap(pieces):
    for p in pieces:
        calculate_snap_position(CONFIG, p, TARGETS)


BENCHMARKS = [
    ("bounding box", _bench_bbox),
    ("overlap", _bench_overlap),
    ("snap", _bench_snap),
]


def main():
    parser = argparse.ArgumentParser(description="Benchmark snap engine calls")
    parser.add_argument(
        "-n",
        "--iterations",
        type=int,
        default=3,
        help="Number of iterations (default: 3)",
    )
    parser.add_argument(
        "-c",
        "--calls",
        type=int,
        default=100,
        help="Calls per iteration (default: 100)",
    )
    args = parser.parse_args()

    pieces = _moving_pieces(args.calls)
    print(f"Benchmark: {args.calls} calls, {len(TARGETS)} placed pieces")
    print(f"Iterations: {args.iterations}")

    for name, fn in BENCHMARKS:
        fn(pieces)  # warmup
        times_ms = []
        for _ in range(args.iterations):
            start = time.perf_counter()
            fn(pieces)
            times_ms.append((time.perf_counter() - start) * 1000)
        print()
        print(f"{name}:")
        print(f"  Median: {statistics.median(times_ms):.2f} ms")
        print(f"  Mean:   {statistics.mean(times_ms):.2f} ms")


if __name__ == "__main__":
    main()
