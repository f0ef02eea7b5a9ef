#!/usr/bin/env python3
"""
Float TIFF to 8-bit color PNG conversion.

The value->gray function is affine: gray=a*value+b. Values outside
[vMin,vMax] are assumed invalid and written in cyan color.

Usage:
    awstereo-tiff2png [options] in.tif vMin vMax out.png
"""
import argparse
import sys

from awstereo import config
from awstereo.utils.disparity_io import tiff_to_png


def main(argv=None):
    parser = argparse.ArgumentParser(prog="awstereo-tiff2png", description="Float TIFF to 8-bit color PNG conversion.")
    parser.add_argument("input", help="float TIFF")
    parser.add_argument("vmin", type=float)
    parser.add_argument("vmax", type=float)
    parser.add_argument("output", help="PNG")
    parser.add_argument("-m", "--min", type=int, dest="gray_min", default=config.GRAY_MIN,
                        help="gray level for vMin")
    parser.add_argument("-M", "--max", type=int, dest="gray_max", default=config.GRAY_MAX,
                        help="gray level for vMax")
    args = parser.parse_args(argv)
    try:
        tiff_to_png(args.input, args.vmin, args.vmax, args.output, args.gray_min, args.gray_max)
    except (ValueError, FileNotFoundError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
