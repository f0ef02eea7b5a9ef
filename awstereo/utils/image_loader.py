import os
from typing import Tuple

import cv2
import numpy as np

from awstereo.image import Image


class ImageLoader:
    """Load stereo color images as float RGB `Image`s with values in [0, 255].

    `load_from` expects the Middlebury names inside the provided directory:
      - `view1.png`  (image 1, reference)
      - `view5.png`  (image 2, target)

    Usage:
        loader = ImageLoader()
        im1, im2 = loader.load_from('StereoMatchingTestings/Art')
        im1, im2 = loader.load_pair('left.png', 'right.png')
    """

    LEFT_FILENAME = "view1.png"
    RIGHT_FILENAME = "view5.png"

    def __init__(self, base_dir: str = ""):
        """Optional `base_dir` is prepended to provided paths.

        If `base_dir` is empty, paths are relative to the current working
        directory.
        """
        self.base_dir = base_dir

    def _full_path(self, *parts: str) -> str:
        if self.base_dir:
            return os.path.join(self.base_dir, *parts)
        return os.path.join(*parts)

    def load_color(self, path: str) -> Image:
        """Read `path` as an 8-bit color image, returned as RGB float32.

        Raises:
            FileNotFoundError: if the file is missing or cannot be decoded.
        """
        full_path = self._full_path(path)
        if not os.path.isfile(full_path):
            raise FileNotFoundError(f"Missing expected file: {full_path}")
        bgr = cv2.imread(full_path, cv2.IMREAD_COLOR)
        if bgr is None:
            raise FileNotFoundError(f"Unable to read file {full_path} as an image")
        rgb = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
        return Image.from_array(rgb.astype(np.float32), copy=False)

    def load_pair(self, path1: str, path2: str) -> Tuple[Image, Image]:
        """Load and return (im1, im2), rejecting pairs of different sizes."""
        im1 = self.load_color(path1)
        im2 = self.load_color(path2)
        if (im1.width, im1.height) != (im2.width, im2.height):
            raise ValueError(
                f"The images must have the same size! "
                f"({im1.width}x{im1.height} vs {im2.width}x{im2.height})"
            )
        return im1, im2

    def load_from(self, dir_path: str) -> Tuple[Image, Image]:
        """Load the `view1.png` / `view5.png` pair of a Middlebury directory."""
        return self.load_pair(os.path.join(dir_path, self.LEFT_FILENAME),
                              os.path.join(dir_path, self.RIGHT_FILENAME))
