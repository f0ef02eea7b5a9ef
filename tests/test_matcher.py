import math

import numpy as np
import pytest

from awstereo.combination import Combination
from awstereo.cost import build_cost_volume
from awstereo.image import Image
from awstereo.matcher import check_inputs, compute_disparity, disparity_aw
from awstereo.params import ParamDisparity

ALL_COMBINATIONS = list(Combination)


def _textured(rng, w, h, c=3, high=256):
    return Image.from_array(rng.integers(0, high, (h, w, c)))


def _shifted_pair(rng, w, h, shift):
    """im2(x + shift) = im1(x); the first columns of im2 are random."""
    im1 = _textured(rng, w, h)
    im2 = _textured(rng, w, h)
    im2.data[:, shift:] = im1.data[:, :w - shift]
    return im1, im2


def _run(im1, im2, disp_min, disp_max, param, combination, workers=1):
    d1 = Image(im1.width, im1.height).fill(disp_min - 1)
    d2 = Image(im1.width, im1.height).fill(disp_min - 1)
    e1, e2 = disparity_aw(im1, im2, disp_min, disp_max, param, d1, d2,
                          combination=combination, workers=workers)
    return d1, d2, e1, e2


def _naive(im1, im2, disp_min, disp_max, param, combination):
    """Direct evaluation of the aggregated dissimilarity, without tables or cache."""
    a, b = im1.data.astype(np.float64), im2.data.astype(np.float64)
    h, w, c = a.shape
    r = param.window_radius
    cost = build_cost_volume(im1, im2, disp_min, disp_max, param).layers.astype(np.float64)
    ops = {
        Combination.LEFT: lambda w1, w2: w1,
        Combination.MAX: max,
        Combination.MIN: min,
        Combination.MULT: lambda w1, w2: w1 * w2,
        Combination.PLUS: lambda w1, w2: w1 + w2,
    }
    comb = ops[combination]

    def weight(im, xc, yc, dx, dy):
        dist = int(np.abs(im[yc + dy, xc + dx] - im[yc, xc]).sum())
        return math.exp(-dist / (c * param.gamma_col)) * math.exp(-math.hypot(dx, dy) / param.gamma_pos)

    energy = np.full((h, w, disp_max - disp_min + 1), np.nan)
    for y in range(h):
        for x in range(w):
            for d in range(disp_min, disp_max + 1):
                if not 0 <= x + d < w:
                    continue
                num = den = 0.0
                for dy in range(-r, r + 1):
                    for dx in range(-r, r + 1):
                        if not (0 <= y + dy < h and 0 <= x + dx < w and 0 <= x + dx + d < w):
                            continue
                        w1 = weight(a, x, y, dx, dy)
                        w2 = 1.0 if combination is Combination.LEFT else weight(b, x + d, y, dx, dy)
                        cw = comb(w1, w2)
                        num += cw * cost[d - disp_min, y + dy, x + dx]
                        den += cw
                energy[y, x, d - disp_min] = num / den
    return energy


UNCLAMPED = ParamDisparity(color_threshold=1000, gradient_threshold=1000, alpha=0.5,
                           gamma_col=12, gamma_pos=17.5, window_radius=2)


def test_output_dimensions():
    rng = np.random.default_rng(0)
    im1, im2 = _textured(rng, 7, 5), _textured(rng, 7, 5)
    d1, d2, e1, e2 = _run(im1, im2, -1, 2, UNCLAMPED, Combination.MULT)
    for im in (d1, d2, e1, e2):
        assert (im.width, im.height) == (7, 5)


@pytest.mark.parametrize("combination", ALL_COMBINATIONS)
def test_uniform_pair_zero_disparity(combination):
    im = Image(6, 4, 3).fill(80)
    d1, d2 = compute_disparity(im, im.clone(), 0, 0, ParamDisparity(window_radius=1),
                               combination=combination)
    assert np.all(d1.plane() == 0)
    assert np.all(d2.plane() == 0)


@pytest.mark.parametrize("combination", ALL_COMBINATIONS)
def test_ties_keep_first_candidate(combination):
    im = Image(6, 3, 3).fill(80)
    d1, d2 = compute_disparity(im, im.clone(), -1, 2, ParamDisparity(window_radius=1),
                               combination=combination)
    # all admissible costs are equal: smallest d for image 1, first (x, d) scanned for image 2
    for y in range(3):
        assert d1.plane()[y].tolist() == [0, -1, -1, -1, -1, -1]
        assert d2.plane()[y].tolist() == [0, -1, -2, -2, -2, -2]


@pytest.mark.parametrize("combination", ALL_COMBINATIONS)
def test_shift_of_two_pixels(combination):
    rng = np.random.default_rng(1)
    im1, im2 = _shifted_pair(rng, 5, 5, 2)
    param = ParamDisparity(alpha=0, window_radius=1)
    d1, d2 = compute_disparity(im1, im2, 0, 4, param, combination=combination)
    # columns whose match stays inside image 2
    assert np.all(d1.plane()[:, :3] == 2)
    assert np.all(d2.plane()[:, 2:] == -2)


def test_disparity_within_range():
    rng = np.random.default_rng(2)
    im1, im2 = _textured(rng, 9, 6), _textured(rng, 9, 6)
    d1, d2 = compute_disparity(im1, im2, -2, 2, UNCLAMPED)
    assert np.all((d1.plane() >= -2) & (d1.plane() <= 2))
    assert np.all((d2.plane() >= -2) & (d2.plane() <= 2))


def test_unreachable_pixels_keep_sentinel():
    rng = np.random.default_rng(3)
    im1, im2 = _textured(rng, 6, 3), _textured(rng, 6, 3)
    d1, d2, _, _ = _run(im1, im2, 2, 3, UNCLAMPED, Combination.MAX)
    assert np.all(d1.plane()[:, 4:] == 1)
    assert np.all(d2.plane()[:, :2] == 1)
    assert np.all(np.isin(d1.plane()[:, :3], [2, 3]))


@pytest.mark.parametrize("combination", ALL_COMBINATIONS)
def test_cross_costs_are_consistent(combination):
    rng = np.random.default_rng(4)
    im1, im2 = _textured(rng, 10, 5), _textured(rng, 10, 5)
    d1, _, e1, e2 = _run(im1, im2, -2, 2, UNCLAMPED, combination)
    for y in range(5):
        for x in range(10):
            d = int(d1[x, y])
            assert e2[x + d, y] <= e1[x, y]


def test_idempotent():
    rng = np.random.default_rng(5)
    im1, im2 = _textured(rng, 8, 5), _textured(rng, 8, 5)
    first = _run(im1, im2, -1, 3, UNCLAMPED, Combination.PLUS)
    second = _run(im1, im2, -1, 3, UNCLAMPED, Combination.PLUS)
    for a, b in zip(first, second):
        np.testing.assert_array_equal(a.data, b.data)


def test_workers_do_not_change_result():
    rng = np.random.default_rng(6)
    im1, im2 = _textured(rng, 9, 7), _textured(rng, 9, 7)
    single = _run(im1, im2, -2, 2, UNCLAMPED, Combination.MULT, workers=1)
    pooled = _run(im1, im2, -2, 2, UNCLAMPED, Combination.MULT, workers=4)
    for a, b in zip(single, pooled):
        np.testing.assert_array_equal(a.data, b.data)


@pytest.mark.parametrize("combination", ALL_COMBINATIONS)
def test_matches_direct_evaluation(combination):
    rng = np.random.default_rng(7)
    im1, im2 = _textured(rng, 8, 5), _textured(rng, 8, 5)
    d1, d2, e1, e2 = _run(im1, im2, -1, 2, UNCLAMPED, combination)
    energy = _naive(im1, im2, -1, 2, UNCLAMPED, combination)
    for y in range(5):
        for x in range(8):
            best = np.nanmin(energy[y, x])
            # selected label is optimal up to float32 rounding of the tables
            assert energy[y, x, int(d1[x, y]) + 1] == pytest.approx(best, rel=1e-3)
            assert e1[x, y] == pytest.approx(best, rel=1e-3)
            # image 2 pixel xq is reached from x = xq - d
            candidates = [energy[y, x - d, d + 1] for d in range(-1, 3) if 0 <= x - d < 8]
            assert e2[x, y] == pytest.approx(min(candidates), rel=1e-3)
            assert energy[y, x + int(d2[x, y]), -int(d2[x, y]) + 1] == pytest.approx(min(candidates), rel=1e-3)


def test_single_channel_images():
    rng = np.random.default_rng(8)
    im1, im2 = _shifted_pair(rng, 8, 4, 1)
    gray1, gray2 = im1.channel(0), im2.channel(0)
    d1, _ = compute_disparity(gray1, gray2, 0, 2, ParamDisparity(alpha=0, window_radius=1))
    assert np.all(d1.plane()[:, :7] == 1)


def test_check_inputs():
    with pytest.raises(ValueError, match="same size"):
        check_inputs(Image(3, 2, 3), Image(2, 2, 3), 0, 1)
    with pytest.raises(ValueError, match="channels"):
        check_inputs(Image(3, 2, 3), Image(3, 2, 1), 0, 1)
    with pytest.raises(ValueError, match="disparity range"):
        check_inputs(Image(3, 2), Image(3, 2), 2, 1)


def test_compute_disparity_validates_params():
    im = Image(3, 3, 3)
    with pytest.raises(ValueError, match="alpha"):
        compute_disparity(im, im, 0, 1, ParamDisparity(alpha=1.5))


def test_compute_disparity_default_params():
    im = Image(4, 3, 3).fill(10)
    d1, d2 = compute_disparity(im, im.clone(), 0, 1)
    assert d1.plane().tolist() == [[0, 0, 0, 0]] * 3
    assert d2.plane().tolist() == [[0, -1, -1, -1]] * 3
