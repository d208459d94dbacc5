"""
Configuration dataclass for silhouette to mesh conversion.

This module defines the ExtrusionConfig dataclass that holds all the
parameters for the conversion process. This keeps function signatures
clean and makes it easy to add new parameters in the future without
breaking the API.
"""

from dataclasses import dataclass
from typing import Tuple
from .constants import (
    THICKNESS,
    EDGE_DIVISIONS,
    BEVEL_DEPTH_RATIO,
    BEVEL_WIDTH_RATIO,
    CONTOUR_COMPLEXITY_THRESHOLD,
    MIN_BOX_SIZE_PX,
    MASK_BLUR_RADIUS_PX,
    CENTER_TOLERANCE,
    POINT_DECIMATION_STEP,
    TEXTURE_SIZE_PX,
    TEXTURE_MARGIN,
    EDGE_COLOR,
    DEFAULT_OUTPUT_FORMAT,
    SUPPORTED_OUTPUT_FORMATS,
)


@dataclass
class ExtrusionConfig:
    """
    Configuration for silhouette to mesh conversion.

    Attributes:
        thickness: Total thickness of the solid (outline units, extent 1.0)
        edge_divisions: Ring transitions from front to back face (>= 1)
        bevel_depth_ratio: Oval half-depth as a fraction of thickness
        bevel_width_ratio: Oval half-width as a fraction of thickness
        contour_complexity_threshold: Minimum contour points to consider a piece
        min_box_size_px: Minimum piece bounding box size in pixels
        mask_blur_radius_px: Blur radius for the texture alpha mask
        center_tolerance: How far from the center a piece box may start (0-1]
        decimation_step: Keep every Nth contour point
        texture_size_px: Side of the square texture canvas
        texture_margin: Empty margin around the piece in the texture [0, 0.5)
        edge_color: RGB color of the rim material
        output_format: "glb", "obj" or "stl"
        validate_mesh: If True, run trimesh validation before export
    """

    thickness: float = THICKNESS
    edge_divisions: int = EDGE_DIVISIONS
    bevel_depth_ratio: float = BEVEL_DEPTH_RATIO
    bevel_width_ratio: float = BEVEL_WIDTH_RATIO

    # Detection options
    contour_complexity_threshold: int = CONTOUR_COMPLEXITY_THRESHOLD
    min_box_size_px: int = MIN_BOX_SIZE_PX
    mask_blur_radius_px: float = MASK_BLUR_RADIUS_PX
    center_tolerance: float = CENTER_TOLERANCE

    # Outline options
    decimation_step: int = POINT_DECIMATION_STEP

    # Texture options
    texture_size_px: int = TEXTURE_SIZE_PX
    texture_margin: float = TEXTURE_MARGIN

    # Output options
    edge_color: Tuple[int, int, int] = EDGE_COLOR
    output_format: str = DEFAULT_OUTPUT_FORMAT
    validate_mesh: bool = False

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.thickness <= 0:
            raise ValueError(f"thickness must be positive, got {self.thickness}")
        if self.edge_divisions < 1:
            raise ValueError(f"edge_divisions must be at least 1, got {self.edge_divisions}")
        if self.bevel_depth_ratio <= 0:
            raise ValueError(f"bevel_depth_ratio must be positive, got {self.bevel_depth_ratio}")
        if self.bevel_width_ratio < 0:
            raise ValueError(f"bevel_width_ratio must be non-negative, got {self.bevel_width_ratio}")
        if self.contour_complexity_threshold < 3:
            raise ValueError(
                f"contour_complexity_threshold must be at least 3, got {self.contour_complexity_threshold}"
            )
        if self.min_box_size_px < 0:
            raise ValueError(f"min_box_size_px must be non-negative, got {self.min_box_size_px}")
        if self.mask_blur_radius_px < 0:
            raise ValueError(f"mask_blur_radius_px must be non-negative, got {self.mask_blur_radius_px}")
        if not 0 < self.center_tolerance <= 1:
            raise ValueError(f"center_tolerance must be in (0, 1], got {self.center_tolerance}")
        if self.decimation_step < 1:
            raise ValueError(f"decimation_step must be at least 1, got {self.decimation_step}")
        if self.texture_size_px <= 0:
            raise ValueError(f"texture_size_px must be positive, got {self.texture_size_px}")
        if not 0 <= self.texture_margin < 0.5:
            raise ValueError(f"texture_margin must be in [0, 0.5), got {self.texture_margin}")
        if not isinstance(self.edge_color, tuple) or len(self.edge_color) != 3:
            raise ValueError(f"edge_color must be an RGB tuple, got {self.edge_color}")
        if not all(0 <= c <= 255 for c in self.edge_color):
            raise ValueError(f"edge_color RGB values must be 0-255, got {self.edge_color}")

        # Accept ".glb" and "GLB" as well as "glb"
        self.output_format = self.output_format.lower().lstrip('.')
        if self.output_format not in SUPPORTED_OUTPUT_FORMATS:
            raise ValueError(
                f"output_format must be one of {sorted(SUPPORTED_OUTPUT_FORMATS)}, got {self.output_format}"
            )
