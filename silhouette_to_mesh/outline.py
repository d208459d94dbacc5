"""
Outline preparation between piece detection and triangulation.

Raw contours come out of OpenCV with hundreds of points, in pixel
coordinates with y pointing down. The mesh core wants a few dozen points,
centered on the origin, scaled so the larger dimension is 1.0, +y up and
counter-clockwise. These small helpers do exactly that, in that order.
"""

import logging
from typing import List, Sequence, TYPE_CHECKING

from .vector2 import Vector2

if TYPE_CHECKING:
    from .config import ExtrusionConfig
    from .piece_detector import Piece

logger = logging.getLogger(__name__)


def decimate_points(points: Sequence[Vector2], step: int) -> List[Vector2]:
    """Keep every `step`-th point, starting with the first."""
    if step < 1:
        raise ValueError(f"step must be at least 1, got {step}")
    return [p for i, p in enumerate(points) if i % step == 0]


def normalize_points(points: Sequence[Vector2], width: float, height: float) -> List[Vector2]:
    """
    Map box-relative pixel coordinates into the unit frame.

    The box center goes to the origin, the larger box dimension becomes
    1.0 and y is flipped to point up. Flipping y mirrors the outline, so
    the order is reversed as well to keep the winding counter-clockwise.
    """
    if width <= 0 and height <= 0:
        raise ValueError(f"Cannot normalize an outline with a {width}x{height} box")

    factor = 1.0 / max(width, height)
    normalized = [
        Vector2((p.x - width / 2) * factor, -(p.y - height / 2) * factor)
        for p in points
    ]
    normalized.reverse()
    return normalized


def remove_duplicate_points(points: Sequence[Vector2]) -> List[Vector2]:
    """Drop points equal to their predecessor, including the wrap-around."""
    result: List[Vector2] = []
    for p in points:
        if not result or p != result[-1]:
            result.append(p)
    while len(result) > 1 and result[0] == result[-1]:
        result.pop()
    return result


def prepare_outline(piece: 'Piece', config: 'ExtrusionConfig') -> List[Vector2]:
    """
    Decimate, normalize and clean a piece outline for meshing.

    Raises:
        ValueError: If fewer than 3 distinct points survive
    """
    decimated = decimate_points(piece.points, config.decimation_step)
    normalized = normalize_points(decimated, piece.width, piece.height)
    cleaned = remove_duplicate_points(normalized)

    logger.debug(
        f"Outline: {len(piece.points)} raw -> {len(decimated)} decimated "
        f"-> {len(cleaned)} distinct points"
    )

    if len(cleaned) < 3:
        raise ValueError(
            f"Outline has only {len(cleaned)} points after decimation "
            f"(step {config.decimation_step}). Try a smaller decimation step."
        )
    return cleaned
