#!/usr/bin/env python3
"""
Show the adaptive (bilateral) weights of a square window.

Usage:
    awstereo-weights [options] im1.png x y out.png [im2.png disp]

With im2.png and -c, the window of pixel (x, y) in im1 is combined with the
window of pixel (x + disp, y) in im2. Without -c, the window of im1 is only
restricted to the bounds of im2. The output is rescaled so that the center
weight is 255.
"""
import argparse
import sys

import cv2
import numpy as np

from awstereo.combination import Combination, combine
from awstereo.image import Image
from awstereo.params import ParamDisparity
from awstereo.support import support
from awstereo.utils.image_loader import ImageLoader
from awstereo.weights import color_table, spatial_table


def _inside(center, radius, size):
    pos = center + np.arange(-radius, radius + 1)
    return (pos >= 0) & (pos < size)


def weight_window(im1: Image, xp: int, yp: int, radius: int,
                  gamma_col: float, gamma_pos: float,
                  im2: Image = None, xq: int = None, combination=None) -> np.ndarray:
    """Compute the window of weights around pixel (xp, yp) in `im1`."""
    if not (0 <= xp < im1.width and 0 <= yp < im1.height):
        raise ValueError(f"pixel ({xp},{yp}) outside image 1")
    dim = 2 * radius + 1
    dist_c = color_table(im1.channels, gamma_col)

    w1 = np.zeros((dim, dim), dtype=np.float32)
    support(im1.data, xp, yp, radius, dist_c, w1)
    mask = _inside(yp, radius, im1.height)[:, np.newaxis] & _inside(xp, radius, im1.width)[np.newaxis, :]

    if im2 is None:
        return w1 * spatial_table(radius, gamma_pos) * mask

    if not (0 <= xq < im2.width and yp < im2.height):
        raise ValueError(f"pixel ({xq},{yp}) outside image 2")
    mask &= _inside(yp, radius, im2.height)[:, np.newaxis] & _inside(xq, radius, im2.width)[np.newaxis, :]
    # without a combination, the window of im1 restricted to the bounds of im2
    if combination is None:
        return w1 * spatial_table(radius, gamma_pos) * mask

    comb = Combination.parse(combination)
    if im2.channels != im1.channels:
        raise ValueError("The images must have the same channels!")
    w2 = np.zeros((dim, dim), dtype=np.float32)
    support(im2.data, xq, yp, radius, dist_c, w2)
    return combine(comb, w1, w2) * spatial_table(radius, gamma_pos, comb.spatial_factor) * mask


def rescale(w: np.ndarray) -> np.ndarray:
    """Rescale weights to interval [0,255], max value at the middle."""
    r = w.shape[0] // 2
    f = 255.0 / w[r, r]
    return np.clip(f * w, 0, 255)


def build_parser():
    p = ParamDisparity()
    parser = argparse.ArgumentParser(prog="awstereo-weights", description="Show weights")
    parser.add_argument("im1", help="image 1, PNG")
    parser.add_argument("x", type=int)
    parser.add_argument("y", type=int)
    parser.add_argument("out", help="output PNG")
    parser.add_argument("extra", nargs="*", metavar="im2.png disp",
                        help="second image and disparity of the target window")
    parser.add_argument("-R", type=int, dest="radius", default=p.window_radius,
                        help="radius of the window patch")
    parser.add_argument("--gcol", type=float, default=p.gamma_col, help="gamma for color similarity")
    parser.add_argument("--gpos", type=float, default=p.gamma_pos, help="gamma for distance")
    parser.add_argument("-c", dest="comb", default=None,
                        help="weights combination: max, min, mult or plus (relevant only with im2.png)")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if len(args.extra) not in (0, 2):
        parser.print_usage(sys.stderr)
        return 1
    try:
        ParamDisparity(gamma_col=args.gcol, gamma_pos=args.gpos, window_radius=args.radius).check()
        loader = ImageLoader()
        im1 = loader.load_color(args.im1)
        im2 = xq = None
        if args.extra:
            im2 = loader.load_color(args.extra[0])
            try:
                xq = args.x + int(args.extra[1])
            except ValueError:
                raise ValueError("Error reading disparity") from None
        w = weight_window(im1, args.x, args.y, args.radius, args.gcol, args.gpos,
                          im2=im2, xq=xq, combination=args.comb)
        if not cv2.imwrite(args.out, (rescale(w) + 0.5).astype(np.uint8)):
            raise RuntimeError(f"Unable to write file {args.out}")
    except (ValueError, FileNotFoundError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
