"""Raw matching cost volume."""
from typing import Iterator

import numpy as np

from awstereo.image import Image
from awstereo.params import ParamDisparity


class CostVolume:
    """Stack of raw matching cost images, one per integer disparity.

    Layer `d` is stored at index `d - disp_min` of `layers`, an array of shape
    (nd, height, width).
    """

    def __init__(self, layers: np.ndarray, disp_min: int):
        self.layers = layers
        self.disp_min = disp_min

    @property
    def disp_max(self) -> int:
        return self.disp_min + len(self) - 1

    def __len__(self) -> int:
        return self.layers.shape[0]

    def __iter__(self) -> Iterator[Image]:
        for i in range(len(self)):
            yield Image(data=self.layers[i])

    def layer(self, d: int) -> Image:
        """Cost image at disparity `d` (aliases the volume)."""
        return Image(data=self.layers[d - self.disp_min])


def cost_layer(im1: Image, im2: Image, gradient1: Image, gradient2: Image,
               d: int, param: ParamDisparity) -> np.ndarray:
    """Computes the raw matching costs at disparity `d`.

    At each pixel, a linear combination of the mean color L1 distance and of
    the x-derivatives absolute difference, each with a max threshold.
    """
    width, height = im1.width, im1.height
    alpha = np.float32(param.alpha)
    tau_col = np.float32(param.color_threshold)
    tau_grad = np.float32(param.gradient_threshold)

    # Max distance if disparity moves outside image
    cost = np.full((height, width), (1 - alpha) * tau_col + alpha * tau_grad, dtype=np.float32)

    x0, x1 = max(0, -d), min(width, width - d)
    if x0 >= x1:
        return cost
    col1 = im1.data[:, x0:x1, :]
    col2 = im2.data[:, x0 + d:x1 + d, :]
    cost_color = np.abs(col1 - col2).sum(axis=2) * np.float32(1.0 / im1.channels)
    np.minimum(cost_color, tau_col, out=cost_color)

    cost_gradient = np.abs(gradient1.plane()[:, x0:x1] - gradient2.plane()[:, x0 + d:x1 + d])
    np.minimum(cost_gradient, tau_grad, out=cost_gradient)

    cost[:, x0:x1] = (1 - alpha) * cost_color + alpha * cost_gradient
    return cost


def build_cost_volume(im1: Image, im2: Image, disp_min: int, disp_max: int,
                      param: ParamDisparity) -> CostVolume:
    """Compute raw matching cost for all disparities in [disp_min, disp_max]."""
    gradient1 = im1.gray().grad_x()
    gradient2 = im2.gray().grad_x()
    nd = disp_max - disp_min + 1
    layers = np.empty((nd, im1.height, im1.width), dtype=np.float32)
    for d in range(disp_min, disp_max + 1):
        layers[d - disp_min] = cost_layer(im1, im2, gradient1, gradient2, d, param)
    return CostVolume(layers, disp_min)
