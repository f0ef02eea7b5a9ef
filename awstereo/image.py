"""
Float image with shallow copy.

An `Image` is a handle on a float32 buffer of shape (height, width, channels),
channels interleaved. Handles created with `share()` or `copy.copy()` alias the
same pixels, so writing through one is visible through the others; `clone()`
returns an independent deep copy.
"""
from typing import Callable, Optional

import cv2
import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

# RGB to gray conversion weights
GRAY_WEIGHTS = (0.212671, 0.715160, 0.072169)


class Image:
    """Float image class, with shallow copy for performance.

    Pixel access is `im[x, y]` or `im[x, y, c]`; the underlying array is
    indexed `data[y, x, c]`.
    """

    def __init__(self, width: int = 0, height: int = 0, channels: int = 1,
                 data: Optional[np.ndarray] = None):
        if data is None:
            data = np.zeros((height, width, channels), dtype=np.float32)
        elif data.ndim == 2:
            data = data[:, :, np.newaxis]
        if data.ndim != 3:
            raise ValueError(f"Image buffer must be 2-D or 3-D, got shape {data.shape}")
        self.data = data

    @classmethod
    def from_array(cls, arr, copy: bool = True) -> "Image":
        """Wrap `arr` (H x W or H x W x C) as a float32 image."""
        arr = np.asarray(arr)
        if copy or arr.dtype != np.float32:
            arr = arr.astype(np.float32)
        return cls(data=arr)

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def channels(self) -> int:
        return self.data.shape[2]

    @property
    def shape(self):
        return self.width, self.height, self.channels

    def __getitem__(self, key):
        x, y, *c = key
        return self.data[y, x, c[0] if c else 0]

    def __setitem__(self, key, value):
        x, y, *c = key
        self.data[y, x, c[0] if c else 0] = value

    def __repr__(self):
        return f"Image(width={self.width}, height={self.height}, channels={self.channels})"

    # ------------------------ Copies ------------------------

    def share(self) -> "Image":
        """Shallow copy: the new handle aliases the same pixels."""
        return Image(data=self.data)

    def clone(self) -> "Image":
        """Deep copy."""
        return Image(data=self.data.copy())

    def __copy__(self):
        return self.share()

    def __deepcopy__(self, memo):
        return self.clone()

    def shares_buffer(self, other: "Image") -> bool:
        return np.shares_memory(self.data, other.data)

    def plane(self, c: int = 0) -> np.ndarray:
        """2-D view on channel `c`."""
        return self.data[:, :, c]

    def channel(self, c: int) -> "Image":
        """Single-channel image aliasing channel `c`."""
        return Image(data=self.data[:, :, c:c + 1])

    def fill(self, value: float) -> "Image":
        self.data.fill(value)
        return self

    # ------------------------ Filters ------------------------

    def gray(self) -> "Image":
        """Convert image to gray level."""
        if self.channels == 1:
            return self.share()
        if self.channels != 3:
            raise ValueError(f"cannot convert {self.channels}-channel image to gray")
        r, g, b = (self.data[:, :, i] for i in range(3))
        wr, wg, wb = (np.float32(v) for v in GRAY_WEIGHTS)
        return Image(data=wr * r + wg * g + wb * b)

    def grad_x(self) -> "Image":
        """Derivative along x of a gray image (centered, one-sided on borders)."""
        if self.channels != 1:
            raise ValueError("x-derivative expects a single-channel image")
        p = self.plane()
        out = np.zeros_like(p)
        if self.width > 1:
            out[:, 0] = p[:, 1] - p[:, 0]
            out[:, -1] = p[:, -1] - p[:, -2]
            out[:, 1:-1] = 0.5 * (p[:, 2:] - p[:, :-2])
        return Image(data=out)

    def median_color(self, radius: int) -> "Image":
        """Square median filter applied to each channel independently."""
        k = 2 * radius + 1
        out = np.empty_like(self.data)
        for c in range(self.channels):
            plane = np.ascontiguousarray(self.plane(c))
            if radius == 0:
                out[:, :, c] = plane
            elif k <= 5:
                out[:, :, c] = cv2.medianBlur(plane, k)
            else:
                # cv2.medianBlur is limited to 3x3 and 5x5 kernels on float data
                padded = np.pad(plane, radius, mode="edge")
                out[:, :, c] = np.median(sliding_window_view(padded, (k, k)), axis=(-2, -1))
        return Image(data=out)

    def fill_min_x(self, v_min: float) -> None:
        """Fill invalid runs of each row with the min of their valid borders."""
        self._fill_x(v_min, min)

    def fill_max_x(self, v_min: float) -> None:
        """Fill invalid runs of each row with the max of their valid borders."""
        self._fill_x(v_min, max)

    def _fill_x(self, v_min: float, pick: Callable[[float, float], float]) -> None:
        for row in self.plane():
            valid = row >= v_min
            if not valid.any():
                continue
            w = row.shape[0]
            x = 0
            while x < w:
                if valid[x]:
                    x += 1
                    continue
                x1 = x
                while x1 < w and not valid[x1]:
                    x1 += 1
                if x == 0:
                    v = row[x1]
                elif x1 == w:
                    v = row[x - 1]
                else:
                    v = pick(row[x - 1], row[x1])
                row[x:x1] = v
                x = x1
