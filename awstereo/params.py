"""Parameter sets of the matcher and of the post-processing."""
from dataclasses import dataclass

from awstereo import config


@dataclass
class ParamDisparity:
    """Parameters specific to the disparity computation with adaptive weights."""

    color_threshold: float = config.COLOR_THRESHOLD
    gradient_threshold: float = config.GRADIENT_THRESHOLD
    alpha: float = config.ALPHA
    gamma_col: float = config.GAMMA_COL
    gamma_pos: float = config.GAMMA_POS
    window_radius: int = config.WINDOW_RADIUS

    def check(self) -> None:
        """Raise ValueError if a parameter is outside its domain."""
        if self.window_radius < 0:
            raise ValueError(f"window radius must be >= 0, got {self.window_radius}")
        if self.gamma_col <= 0:
            raise ValueError(f"gamma_col must be > 0, got {self.gamma_col}")
        if self.gamma_pos <= 0:
            raise ValueError(f"gamma_pos must be > 0, got {self.gamma_pos}")
        if not 0 <= self.alpha <= 1:
            raise ValueError(f"alpha must be in [0,1], got {self.alpha}")
        if self.color_threshold < 0:
            raise ValueError(f"color threshold must be >= 0, got {self.color_threshold}")
        if self.gradient_threshold < 0:
            raise ValueError(f"gradient threshold must be >= 0, got {self.gradient_threshold}")


@dataclass
class ParamOcclusion:
    """Parameters of occlusion detection and filling."""

    tol_disp: float = config.TOL_DISP
    sigma_space: float = config.SIGMA_SPACE
    sigma_color: float = config.SIGMA_COLOR
    median_radius: int = config.MEDIAN_RADIUS

    def check(self) -> None:
        if self.tol_disp < 0:
            raise ValueError(f"disparity tolerance must be >= 0, got {self.tol_disp}")
        if self.median_radius < 0:
            raise ValueError(f"median radius must be >= 0, got {self.median_radius}")
        if self.sigma_space <= 0:
            raise ValueError(f"sigma_space must be > 0, got {self.sigma_space}")
        if self.sigma_color <= 0:
            raise ValueError(f"sigma_color must be > 0, got {self.sigma_color}")
