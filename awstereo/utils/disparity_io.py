"""Reading and writing disparity maps (float TIFF and 8-bit PNG)."""
import os

import cv2
import numpy as np

from awstereo import config
from awstereo.image import Image


def _as_plane(disp) -> np.ndarray:
    if isinstance(disp, Image):
        return disp.plane()
    return np.asarray(disp, dtype=np.float32)


def invalid_mask(disp, v_min: float, v_max: float) -> np.ndarray:
    """True where the disparity is non-finite or outside [v_min, v_max]."""
    values = _as_plane(disp)
    with np.errstate(invalid="ignore"):
        return ~(np.isfinite(values) & (values >= v_min) & (values <= v_max))


def save_disparity(path: str, disp, d_min: int, d_max: int) -> None:
    """Save the disparity map as float TIFF, invalid values written as NaN."""
    out = _as_plane(disp).astype(np.float32)
    out[invalid_mask(out, d_min, d_max)] = np.nan
    if not cv2.imwrite(path, out):
        raise RuntimeError(f"Error writing file {path}")


def load_disparity(path: str) -> Image:
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Missing expected file: {path}")
    disp = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if disp is None:
        raise FileNotFoundError(f"Unable to read file {path} as an image")
    if disp.ndim == 3:
        disp = disp[:, :, 0]
    return Image.from_array(disp)


def disparity_to_color(disp, v_min: float, v_max: float,
                       gray_min: int = config.GRAY_MIN,
                       gray_max: int = config.GRAY_MAX) -> np.ndarray:
    """Map disparities to gray levels with an affine function.

    `v_min` maps to `gray_min` and `v_max` to `gray_max`; values outside
    [v_min, v_max] are assumed invalid and painted in cyan. Returns a BGR
    uint8 image ready for cv2.imwrite.
    """
    values = _as_plane(disp)
    a = (gray_max - gray_min) / (v_max - v_min) if v_max > v_min else 0.0
    b = gray_min - a * v_min
    invalid = invalid_mask(values, v_min, v_max)
    gray = np.clip(a * np.where(invalid, v_min, values) + b + 0.5, 0, 255).astype(np.uint8)
    out = np.repeat(gray[:, :, np.newaxis], 3, axis=2)
    out[invalid] = config.INVALID_COLOR_RGB[::-1]
    return out


def save_disparity_png(path: str, disp, d_min: int, d_max: int,
                       gray_min: int = config.GRAY_MIN,
                       gray_max: int = config.GRAY_MAX) -> None:
    if not cv2.imwrite(path, disparity_to_color(disp, d_min, d_max, gray_min, gray_max)):
        raise RuntimeError(f"Error writing file {path}")


def tiff_to_png(in_path: str, v_min: float, v_max: float, out_path: str,
                gray_min: int = config.GRAY_MIN, gray_max: int = config.GRAY_MAX) -> None:
    """Float TIFF to 8-bit color PNG conversion."""
    if v_max < v_min:
        raise ValueError(f"vMax({v_max}) < vMin({v_min})")
    save_disparity_png(out_path, load_disparity(in_path), v_min, v_max, gray_min, gray_max)
