"""Stereo disparity estimation with Yoon-Kweon adaptive support weights."""
from awstereo.combination import Combination
from awstereo.image import Image
from awstereo.matcher import compute_disparity, disparity_aw
from awstereo.params import ParamDisparity, ParamOcclusion

__version__ = "0.1.0"

__all__ = [
    "Combination",
    "Image",
    "ParamDisparity",
    "ParamOcclusion",
    "compute_disparity",
    "disparity_aw",
]
