"""
Adaptive Weights disparity computation (Yoon and Kweon).

The dissimilarity of a pixel p of image 1 with the pixel q = p + (d, 0) of
image 2 is the raw matching cost aggregated over the patch around p, each
pixel of the patch weighted by the combination of its support weight in the
reference window (around p) and in the target window (around q). Label
selection is winner-takes-all, in both directions at once.
"""
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Optional, Tuple

import numpy as np
from tqdm import tqdm

from awstereo import config
from awstereo.combination import Combination, combine
from awstereo.cost import CostVolume, build_cost_volume
from awstereo.image import Image
from awstereo.params import ParamDisparity
from awstereo.support import WindowCache, support
from awstereo.weights import color_table, spatial_table

FLOAT_MAX = np.finfo(np.float32).max


def check_inputs(im1: Image, im2: Image, disp_min: int, disp_max: int) -> None:
    """Reject inputs the matcher cannot handle."""
    if (im1.width, im1.height) != (im2.width, im2.height):
        raise ValueError(
            f"The images must have the same size! ({im1.width}x{im1.height} vs {im2.width}x{im2.height})"
        )
    if im1.channels != im2.channels:
        raise ValueError(f"The images must have the same channels! ({im1.channels} vs {im2.channels})")
    if disp_min > disp_max:
        raise ValueError(f"Wrong disparity range! (dMin={disp_min} > dMax={disp_max})")


def _match_row(yp: int, im1: np.ndarray, im2: np.ndarray, cost: CostVolume,
               radius: int, dist_c: np.ndarray, dist_p: np.ndarray,
               combination: Combination,
               disp1: np.ndarray, disp2: np.ndarray,
               e1: np.ndarray, e2: np.ndarray) -> None:
    height, width = im1.shape[:2]
    disp_min, disp_max = cost.disp_min, cost.disp_max
    nd = disp_max - disp_min + 1
    dim = 2 * radius + 1
    ds = np.arange(disp_min, disp_max + 1)

    # Image window for the weights in the reference image
    weights1 = np.zeros((dim, dim), dtype=np.float32)
    # Weights windows on the target image, one per disparity
    cache = None
    if combination.uses_target:
        cache = WindowCache(im2, disp_min, disp_max, radius, dist_c)
        cache.prime(yp)

    y0, y1 = max(yp - radius, 0), min(yp + radius + 1, height)
    wy0, wy1 = y0 - yp + radius, y1 - yp + radius
    cost_rows = cost.layers[:, y0:y1, :]
    spatial_rows = dist_p[wy0:wy1, :]

    for xp in range(width):
        support(im1, xp, yp, radius, dist_c, weights1)
        if cache is not None:
            cache.advance(xp, yp)

        x0, x1 = max(xp - radius, 0), min(xp + radius + 1, width)
        wx0, wx1 = x0 - xp + radius, x1 - xp + radius
        # pixels of the patch whose match q+offset is inside image 2
        target = np.arange(x0, x1)[np.newaxis, :] + ds[:, np.newaxis]
        inside = ((0 <= target) & (target < width)).astype(np.float32)[:, np.newaxis, :]

        w1 = weights1[wy0:wy1, wx0:wx1]
        w2 = None
        if cache is not None:
            w2 = cache.windows[(xp + ds - disp_min) % nd][:, wy0:wy1, wx0:wx1]
        weights = combine(combination, w1, w2) * spatial_rows[:, wx0:wx1] * inside

        num = (weights * cost_rows[:, :, x0:x1]).sum(axis=(1, 2))
        den = weights.sum(axis=(1, 2))
        with np.errstate(divide="ignore", invalid="ignore"):
            energy = num / den

        # Winner takes all label selection
        for i in range(nd):
            d = disp_min + i
            xq = xp + d
            if not 0 <= xq < width:
                continue
            e = energy[i]
            if e1[yp, xp] > e:
                e1[yp, xp] = e
                disp1[yp, xp] = d
            if e2[yp, xq] > e:
                e2[yp, xq] = e
                disp2[yp, xq] = -d


def disparity_aw(im1: Image, im2: Image, disp_min: int, disp_max: int,
                 param: ParamDisparity, disparity1: Image, disparity2: Image,
                 combination=config.COMBINATION, workers: int = config.NUM_WORKERS,
                 progress: bool = False) -> Tuple[Image, Image]:
    """Adaptive weights disparity computation.

    Fills `disparity1` (image 1 to image 2) and `disparity2` (image 2 to
    image 1) in place; pixels without any admissible disparity keep their
    value. Inputs are assumed validated (see `check_inputs`).

    Returns the images of minimal dissimilarity E1 and E2.
    """
    combination = Combination.parse(combination)
    radius = param.window_radius
    width, height = im1.width, im1.height

    # Tabulated proximity weights
    dist_c = color_table(im1.channels, param.gamma_col)
    dist_p = spatial_table(radius, param.gamma_pos, combination.spatial_factor)

    cost = build_cost_volume(im1, im2, disp_min, disp_max, param)

    # Images of dissimilarity 1->2 and 2->1
    e1 = Image(width, height).fill(FLOAT_MAX)
    e2 = Image(width, height).fill(FLOAT_MAX)

    match_row = partial(_match_row, im1=im1.data, im2=im2.data, cost=cost,
                        radius=radius, dist_c=dist_c, dist_p=dist_p,
                        combination=combination,
                        disp1=disparity1.plane(), disp2=disparity2.plane(),
                        e1=e1.plane(), e2=e2.plane())
    rows = range(height)
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            for _ in tqdm(pool.map(match_row, rows), total=height,
                          desc="Matching rows", disable=not progress):
                pass
    else:
        for yp in tqdm(rows, desc="Matching rows", disable=not progress):
            match_row(yp)
    return e1, e2


def compute_disparity(im1: Image, im2: Image, disp_min: int, disp_max: int,
                      param: Optional[ParamDisparity] = None, combination=config.COMBINATION,
                      workers: int = config.NUM_WORKERS,
                      progress: bool = False) -> Tuple[Image, Image]:
    """Validate inputs, allocate both maps with the dMin-1 sentinel and match."""
    if param is None:
        param = ParamDisparity()
    param.check()
    check_inputs(im1, im2, disp_min, disp_max)

    disparity1 = Image(im1.width, im1.height).fill(disp_min - 1)
    disparity2 = Image(im1.width, im1.height).fill(disp_min - 1)
    disparity_aw(im1, im2, disp_min, disp_max, param, disparity1, disparity2,
                 combination=combination, workers=workers, progress=progress)
    return disparity1, disparity2
