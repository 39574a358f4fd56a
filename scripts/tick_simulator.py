from __future__ import annotations

import argparse
import time

from livechart.series.generator import generate_initial_window, generate_next_bar, make_rng
from livechart.series.window import BarWindow


def run(capacity: int = 100, ticks: int = 30, seed: int | None = None) -> None:
    """
    Fills a window and advances it `ticks` times without any UI.

    - The window starts at now - capacity seconds, base price 100.0.
    - Each tick appends one bar and evicts the oldest.
    - We print every new bar plus the evicted one.
    """
    rng = make_rng(seed)
    window = BarWindow(capacity=capacity)
    window.fill(generate_initial_window(capacity, int(time.time()) - capacity, 100.0, rng))

    print(f"Initial window: {len(window)} bars, last close={window.last().close}\n")

    for _ in range(ticks):
        bar, evicted = window.push(generate_next_bar(window.last(), rng))
        print(
            f"[TICK] t={bar.time} "
            f"O={bar.open} H={bar.high} L={bar.low} C={bar.close} V={bar.volume} "
            f"(evicted t={evicted.time if evicted else None})"
        )

    bars = window.snapshot()
    print(f"\nDone.")
    print(f"Window size: {len(bars)}")
    print(f"Time span: {bars[0].time} -> {bars[-1].time}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--capacity", type=int, default=100)
    parser.add_argument("--ticks", type=int, default=30)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    run(capacity=args.capacity, ticks=args.ticks, seed=args.seed)
