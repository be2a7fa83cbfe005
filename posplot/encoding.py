"""Line-point encoding of position pairs and ANS symbol distributions."""

from __future__ import annotations

import heapq
import math


def get_x_enc(x: int) -> int:
    """Return x * (x - 1) / 2."""
    return x * (x - 1) // 2


def square_to_line_point(x: int, y: int) -> int:
    """Map an unordered pair of positions onto a single line point."""
    if y > x:
        x, y = y, x
    return get_x_enc(x) + y


def line_point_to_square(index: int) -> tuple[int, int]:
    """Map a line point back to the pair (x, y) with y < x."""
    x = 0
    for i in range(63, -1, -1):
        new_x = x + (1 << i)
        if get_x_enc(new_x) <= index:
            x = new_x
    return x, index - get_x_enc(x)


def create_normalized_count(r: float) -> list[int]:
    """Normalized symbol counts (summing to 2**14) for deltas with parameter r.

    Symbols whose count would be 1 are reported as -1, the low-probability
    marker used by finite-state entropy tables.
    """
    e = 2.718281828459
    min_prb_threshold = 1e-50
    total_quanta = 1 << 14

    dpdf: list[float] = []
    p = 1 - ((e - 1) / e) ** (1.0 / r)
    while p > min_prb_threshold and len(dpdf) < 255:
        dpdf.append(p)
        n = len(dpdf)
        p = (e ** (1.0 / r) - 1) * (e - 1) ** (1.0 / r)
        p /= e ** ((n + 1) / r)

    counts = [1] * len(dpdf)

    def gain(i: int) -> float:
        return dpdf[i] * (math.log2(counts[i] + 1) - math.log2(counts[i]))

    heap = [(-gain(i), i) for i in range(len(dpdf))]
    heapq.heapify(heap)
    for _ in range(total_quanta - len(dpdf)):
        _, i = heapq.heappop(heap)
        counts[i] += 1
        heapq.heappush(heap, (-gain(i), i))

    return [-1 if c == 1 else c for c in counts]