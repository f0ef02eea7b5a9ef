#!/usr/bin/env python3
"""
Yoon-Kweon disparity map estimation with adaptive weights.

Steps:
 1) Load the color pair via awstereo/utils/image_loader.py
 2) Validate parameters, disparity range and image sizes
 3) Adaptive weights matching, both directions at once
 4) Post-processing: left-right consistency check (occlusion detection)
 5) Post-processing: densify occlusions along scanlines (max or min fill)
 6) Post-processing: weighted median guided by the median-filtered image 1

Outputs (in --out-dir):
 - disparity.tif / disparity.png                             : raw disparity
 - disparity_postprocessed.tif / disparity_postprocessed.png : occlusions filled

Usage:
    awstereo [options] im1.png im2.png dmin dmax
"""
import argparse
import os
import sys

from awstereo import config
from awstereo.combination import Combination
from awstereo.image import Image
from awstereo.matcher import check_inputs, disparity_aw
from awstereo.occlusion import detect_occlusion, fill_occlusion
from awstereo.params import ParamDisparity, ParamOcclusion
from awstereo.utils.disparity_io import save_disparity, save_disparity_png
from awstereo.utils.image_loader import ImageLoader


def ensure_results_dir(out_dir):
    os.makedirs(out_dir, exist_ok=True)


def build_parser():
    p = ParamDisparity()
    q = ParamOcclusion()
    parser = argparse.ArgumentParser(
        prog="awstereo",
        description="Yoon-Kweon disparity map estimation with adaptive weights.",
    )
    parser.add_argument("im1", help="Image 1 (reference), PNG")
    parser.add_argument("im2", help="Image 2 (target), PNG")
    parser.add_argument("dmin", type=int, help="Min disparity")
    parser.add_argument("dmax", type=int, help="Max disparity")

    group = parser.add_argument_group("Adaptive weights parameters")
    group.add_argument("--gcol", type=float, default=p.gamma_col, help="gamma for color difference")
    group.add_argument("--gpos", type=float, default=p.gamma_pos, help="gamma for spatial distance")
    group.add_argument("-R", type=int, dest="radius", default=p.window_radius, help="radius of patch window")
    group.add_argument("-A", type=float, dest="alpha", default=p.alpha, help="value of alpha for matching cost")
    group.add_argument("-t", type=float, dest="tau_col", default=p.color_threshold,
                       help="threshold for color difference in matching cost")
    group.add_argument("-g", type=float, dest="tau_grad", default=p.gradient_threshold,
                       help="threshold for gradient difference in matching cost")
    group.add_argument("-C", "--comb", default=config.COMBINATION,
                       choices=[c.value for c in Combination], help="weights combination")
    group.add_argument("-j", "--workers", type=int, default=config.NUM_WORKERS,
                       help="threads processing the scanlines")

    group = parser.add_argument_group("Occlusion detection")
    group.add_argument("-o", type=float, dest="tol_disp", default=q.tol_disp,
                       help="tolerance for left-right disp. diff.")

    group = parser.add_argument_group("Densification")
    group.add_argument("-O", type=int, dest="sense", default=config.SENSE,
                       help="camera sense: 0=right, 1=left")
    group.add_argument("-r", type=int, dest="median_radius", default=q.median_radius,
                       help="radius of the weighted median filter")
    group.add_argument("-c", type=float, dest="sigma_color", default=q.sigma_color, help="value of sigma_color")
    group.add_argument("-s", type=float, dest="sigma_space", default=q.sigma_space, help="value of sigma_space")

    group = parser.add_argument_group("Display")
    group.add_argument("-a", type=int, dest="gray_min", default=config.GRAY_MIN,
                       help="value of gray for min disparity")
    group.add_argument("-b", type=int, dest="gray_max", default=config.GRAY_MAX,
                       help="value of gray for max disparity")
    parser.add_argument("--out-dir", default=config.RESULTS_DIR, help="output directory")
    parser.add_argument("--no-progress", action="store_true", help="hide the progress bar")
    return parser


def params_from_args(args):
    param_d = ParamDisparity(
        color_threshold=args.tau_col,
        gradient_threshold=args.tau_grad,
        alpha=args.alpha,
        gamma_col=args.gcol,
        gamma_pos=args.gpos,
        window_radius=args.radius,
    )
    param_occ = ParamOcclusion(
        tol_disp=args.tol_disp,
        sigma_space=args.sigma_space,
        sigma_color=args.sigma_color,
        median_radius=args.median_radius,
    )
    param_d.check()
    param_occ.check()
    if args.sense not in (0, 1):
        raise ValueError(f"invalid camera motion direction {args.sense} (must be 0 or 1)")
    return param_d, param_occ


def save_outputs(out_dir, name, disparity, d_min, d_max, gray_min, gray_max):
    save_disparity(os.path.join(out_dir, name + ".tif"), disparity, d_min, d_max)
    save_disparity_png(os.path.join(out_dir, name + ".png"), disparity, d_min, d_max, gray_min, gray_max)


def densify(disparity, d_min, sense):
    """Fill occlusions along x: toward the background given the camera motion."""
    disp_dense = disparity.clone()
    if sense == 0:
        disp_dense.fill_max_x(d_min)
    else:
        disp_dense.fill_min_x(d_min)
    return disp_dense


def run(args):
    param_d, param_occ = params_from_args(args)
    d_min, d_max = args.dmin, args.dmax

    # Step 1: load images
    im1, im2 = ImageLoader().load_pair(args.im1, args.im2)

    # Step 2: validate
    check_inputs(im1, im2, d_min, d_max)
    ensure_results_dir(args.out_dir)

    # Step 3: adaptive weights matching
    print(f"Range of disparities: {d_max - d_min + 1} disparities, combination {args.comb}")
    disparity = Image(im1.width, im1.height).fill(d_min - 1)
    disparity2 = Image(im1.width, im1.height).fill(d_min - 1)
    disparity_aw(im1, im2, d_min, d_max, param_d, disparity, disparity2,
                 combination=args.comb, workers=args.workers,
                 progress=config.SHOW_PROGRESS and not args.no_progress)
    save_outputs(args.out_dir, config.OUTFILE_RAW, disparity, d_min, d_max, args.gray_min, args.gray_max)

    # Step 4: occlusions
    print("Detect occlusions...")
    detect_occlusion(disparity, disparity2, d_min - 1, param_occ.tol_disp)

    # Step 5: densification
    print("Post-processing: fill occlusions")
    disp_dense = densify(disparity, d_min, args.sense)

    # Step 6: smoothing
    print("Post-processing: smooth the disparity map")
    guidance = im1.median_color(config.GUIDANCE_MEDIAN_RADIUS)
    fill_occlusion(disp_dense, guidance, disparity, d_min, d_max, param_occ)
    save_outputs(args.out_dir, config.OUTFILE_POSTPROCESSED, disparity, d_min, d_max,
                 args.gray_min, args.gray_max)
    return disparity


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        run(args)
    except (ValueError, FileNotFoundError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
