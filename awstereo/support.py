"""Adaptive support windows."""
import numpy as np


def support(image: np.ndarray, xp: int, yp: int, radius: int,
            color_table: np.ndarray, out: np.ndarray) -> None:
    """Fill color proximity weights of the window centered at (xp, yp).

    `image` is an (H, W, C) float array and `out` a (2r+1, 2r+1) window. Only
    offsets falling inside the image are written; the others keep their value.
    """
    height, width = image.shape[:2]
    y0, y1 = max(yp - radius, 0), min(yp + radius + 1, height)
    x0, x1 = max(xp - radius, 0), min(xp + radius + 1, width)
    patch = image[y0:y1, x0:x1, :]
    dist = np.abs(patch - image[yp, xp, :]).sum(axis=2).astype(np.intp)
    np.minimum(dist, color_table.shape[0] - 1, out=dist)
    out[y0 - yp + radius:y1 - yp + radius, x0 - xp + radius:x1 - xp + radius] = color_table[dist]


class WindowCache:
    """Rolling set of target support windows along one scanline.

    Window centered at absolute column x lives in slot (x - disp_min) % nd, so
    that moving the reference pixel one step right recycles the oldest slot for
    the new column x + disp_max. Buffers are allocated once.
    """

    def __init__(self, image: np.ndarray, disp_min: int, disp_max: int,
                 radius: int, color_table: np.ndarray):
        self.image = image
        self.disp_min = disp_min
        self.disp_max = disp_max
        self.radius = radius
        self.color_table = color_table
        self.nd = disp_max - disp_min + 1
        dim = 2 * radius + 1
        self.windows = np.zeros((self.nd, dim, dim), dtype=np.float32)

    def slot(self, x: int) -> int:
        return (x - self.disp_min) % self.nd

    def window(self, x: int) -> np.ndarray:
        return self.windows[self.slot(x)]

    def _compute(self, x: int, y: int) -> None:
        # a window centered outside the image is never read
        if 0 <= x < self.image.shape[1]:
            support(self.image, x, y, self.radius, self.color_table, self.windows[self.slot(x)])

    def prime(self, y: int) -> None:
        """Target windows for all disparities except disp_max, at column 0."""
        for d in range(self.disp_min, self.disp_max):
            self._compute(d, y)

    def advance(self, xp: int, y: int) -> None:
        """Target window at disparity disp_max for reference column xp."""
        self._compute(xp + self.disp_max, y)
