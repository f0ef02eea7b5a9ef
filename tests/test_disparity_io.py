import cv2
import numpy as np
import pytest

from awstereo.image import Image
from awstereo.utils.disparity_io import (
    disparity_to_color,
    invalid_mask,
    load_disparity,
    save_disparity,
    tiff_to_png,
)

CYAN_BGR = [255, 255, 0]


def test_invalid_mask():
    disp = np.array([[-1, 0, 2.5, 3, np.nan, np.inf]], dtype=np.float32)
    assert invalid_mask(disp, 0, 3).tolist() == [[True, False, False, False, True, True]]


def test_tiff_round_trip_writes_nan(tmp_path):
    disp = Image.from_array(np.array([[0, 1.5, -3], [4, 2, 2]]))
    path = str(tmp_path / "disp.tif")
    save_disparity(path, disp, 0, 3)
    back = load_disparity(path).plane()
    assert back.dtype == np.float32
    np.testing.assert_array_equal(np.isnan(back), [[False, False, True], [True, False, False]])
    assert back[0, 1] == 1.5
    # the input is left untouched
    assert disp[2, 0] == -3


def test_load_missing_disparity(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_disparity(str(tmp_path / "missing.tif"))


def test_affine_gray_mapping():
    out = disparity_to_color(np.array([[0, 5, 10]]), 0, 10)
    assert out.dtype == np.uint8
    assert out.shape == (1, 3, 3)
    # gray_min=255 for vmin, gray_max=0 for vmax
    assert out[0, :, 0].tolist() == [255, 128, 0]
    assert np.all(out[0, :, 0] == out[0, :, 2])


def test_custom_gray_levels():
    out = disparity_to_color(np.array([[2, 4]]), 2, 4, gray_min=0, gray_max=200)
    assert out[0, :, 1].tolist() == [0, 200]


def test_invalid_pixels_are_cyan():
    out = disparity_to_color(np.array([[np.nan, 1, 11]]), 0, 10)
    assert out[0, 0].tolist() == CYAN_BGR
    assert out[0, 2].tolist() == CYAN_BGR
    assert out[0, 1].tolist() != CYAN_BGR


def test_empty_range_is_constant():
    out = disparity_to_color(np.array([[3, 3]]), 3, 3)
    assert out[0, :, 0].tolist() == [255, 255]


def test_tiff_to_png(tmp_path):
    tif = str(tmp_path / "in.tif")
    png = str(tmp_path / "out.png")
    save_disparity(tif, np.array([[0, 10, -5]], dtype=np.float32), -100, 100)
    tiff_to_png(tif, 0, 10, png)
    bgr = cv2.imread(png, cv2.IMREAD_COLOR)
    assert bgr[0, 0].tolist() == [255, 255, 255]
    assert bgr[0, 1].tolist() == [0, 0, 0]
    assert bgr[0, 2].tolist() == CYAN_BGR


def test_tiff_to_png_rejects_reversed_range(tmp_path):
    with pytest.raises(ValueError, match="vMax"):
        tiff_to_png(str(tmp_path / "in.tif"), 5, 1, str(tmp_path / "out.png"))
