"""
Tabulated proximity weights (the bilateral kernel).

The color table maps an integer L1 color distance to exp(-d / (C * gamma_col)),
the spatial table maps a window offset to exp(-factor * |offset| / gamma_pos).
Both are built once per matching call and read-only afterwards.
"""
import numpy as np


def color_table(channels: int, gamma_col: float) -> np.ndarray:
    """Color proximity weights for distances 0..channels*255.

    Built by the recurrence t[k] = t[k-1] * exp(-1 / (channels * gamma_col)).
    """
    n = channels * 255 + 1
    step = np.float32(np.exp(-1.0 / (channels * gamma_col)))
    table = np.empty(n, dtype=np.float32)
    table[0] = 1
    table[1:] = np.cumprod(np.full(n - 1, step, dtype=np.float32), dtype=np.float32)
    return table


def spatial_table(radius: int, gamma_pos: float, factor: int = 1) -> np.ndarray:
    """Spatial proximity weights over the (2r+1)x(2r+1) window, indexed [dy+r, dx+r]."""
    dy, dx = np.mgrid[-radius:radius + 1, -radius:radius + 1]
    dist = np.sqrt((dx * dx + dy * dy).astype(np.float32))
    return np.exp(-factor * dist / np.float32(gamma_pos)).astype(np.float32)
