"""
Configuration for the adaptive-weights stereo pipeline.

All parameters are documented for clarity and easy tuning. The values below
are the defaults picked up by `awstereo.params` and by the command line tools.
"""

# ------------------------ Output ------------------------
# Directory receiving the disparity maps written by the pipeline.
RESULTS_DIR = "results"

# Base names of the output files; each is written as float TIFF and as PNG.
OUTFILE_RAW = "disparity"                     # Winner-takes-all map, before post-processing
OUTFILE_POSTPROCESSED = "disparity_postprocessed"  # After occlusion detection and filling

# ------------------------ Matching cost ------------------------
COLOR_THRESHOLD = 30.0           # tau_col: ceiling of the color L1 cost
GRADIENT_THRESHOLD = 2.0         # tau_grad: ceiling of the x-derivative cost
ALPHA = 0.9                      # Weight of the gradient cost vs the color cost, in [0, 1]

# ------------------------ Adaptive weights ------------------------
GAMMA_COL = 12.0                 # Decay of the color proximity weight
GAMMA_POS = 17.5                 # Decay of the spatial proximity weight
WINDOW_RADIUS = 17               # Patch is (2r+1)x(2r+1)

# Combination of reference and target weights: "left", "max", "min", "mult" or "plus".
COMBINATION = "mult"

# Rows are independent; more than one worker processes them in a thread pool.
NUM_WORKERS = 1
SHOW_PROGRESS = True             # tqdm progress bar over the scanlines

# ------------------------ Occlusion detection ------------------------
TOL_DISP = 0.0                   # Max allowed |d1 + d2| for the left-right cross-check

# ------------------------ Densification ------------------------
# Camera motion direction: 0 moves to the right (fill with max), 1 to the left (fill with min).
SENSE = 0
MEDIAN_RADIUS = 9                # Radius of the weighted median filter
SIGMA_SPACE = 9.0                # Spatial sigma of the weighted median
SIGMA_COLOR = 255 * 0.1          # Color sigma of the weighted median
GUIDANCE_MEDIAN_RADIUS = 1       # Median pre-filter applied to the guidance image

# ------------------------ Display ------------------------
GRAY_MIN = 255                   # Gray level for the min disparity
GRAY_MAX = 0                     # Gray level for the max disparity
INVALID_COLOR_RGB = (0, 255, 255)  # Cyan for pixels without a valid disparity
