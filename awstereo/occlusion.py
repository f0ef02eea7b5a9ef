"""
Occlusion detection and filling.

The left disparity map is cross-checked against the right one; pixels whose
two disparities disagree are marked invalid. After densification along the
scanlines, invalid pixels get a weighted median of the densified map, with
bilateral weights driven by a guidance image.
"""
import numpy as np

from awstereo.image import Image
from awstereo.params import ParamOcclusion


def detect_occlusion(disparity_left: Image, disparity_right: Image,
                     d_occlusion: float, tol_disp: float) -> None:
    """Mark in `disparity_left` the pixels failing the left-right check."""
    disp_l = disparity_left.plane()
    disp_r = disparity_right.plane()
    h, w = disp_l.shape
    xs = np.arange(w)
    for y in range(h):
        finite = np.isfinite(disp_l[y])
        d = np.where(finite, disp_l[y], 0).astype(np.int64)
        x_prime = xs + d
        inb = finite & (x_prime >= 0) & (x_prime < w)
        consistent = np.zeros(w, dtype=bool)
        if np.any(inb):
            diff = np.abs(d[inb] + disp_r[y, x_prime[inb]])
            consistent[inb] = diff <= tol_disp
        disp_l[y, ~consistent] = d_occlusion


def weighted_median(image: Image, guidance: Image, where: np.ndarray,
                    v_min: int, v_max: int, radius: int,
                    sigma_space: float, sigma_color: float) -> Image:
    """Weighted median of `image` at the pixels flagged in `where`.

    Weights combine spatial distance and color distance in `guidance`; the
    histogram is binned on the integers of [v_min, v_max] and values outside
    are ignored. Other pixels are copied.
    """
    out = image.clone()
    values = image.plane()
    result = out.plane()
    guide = guidance.data
    h, w = values.shape
    n_bins = int(v_max) - int(v_min) + 1
    s_space = 1.0 / (sigma_space * sigma_space)
    s_color = 1.0 / (sigma_color * sigma_color)

    for y, x in zip(*np.nonzero(where)):
        y0, y1 = max(y - radius, 0), min(y + radius + 1, h)
        x0, x1 = max(x - radius, 0), min(x + radius + 1, w)
        win = values[y0:y1, x0:x1]
        with np.errstate(invalid="ignore"):
            valid = (win >= v_min) & (win <= v_max)
        if not valid.any():
            continue
        dy, dx = np.mgrid[y0 - y:y1 - y, x0 - x:x1 - x]
        dist2 = ((guide[y0:y1, x0:x1, :] - guide[y, x, :]) ** 2).sum(axis=2)
        weight = np.exp(-(dx * dx + dy * dy) * s_space - dist2 * s_color)

        bins = win[valid].astype(np.int64) - int(v_min)
        histo = np.bincount(bins, weights=weight[valid], minlength=n_bins)
        cumul = np.cumsum(histo)
        result[y, x] = v_min + np.searchsorted(cumul, 0.5 * cumul[-1])
    return out


def fill_occlusion(disp_dense: Image, guidance: Image, disparity: Image,
                   disp_min: int, disp_max: int, param: ParamOcclusion) -> None:
    """Replace `disparity` by `disp_dense`, smoothed where it was invalid."""
    disp = disparity.plane()
    with np.errstate(invalid="ignore"):
        invalid = ~((disp >= disp_min) & (disp <= disp_max))
    filled = weighted_median(disp_dense, guidance, invalid, disp_min, disp_max,
                             param.median_radius, param.sigma_space, param.sigma_color)
    disparity.data[...] = filled.data
