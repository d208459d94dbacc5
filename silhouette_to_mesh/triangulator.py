"""
Polygon triangulation by greedy ear selection.

We turn a simple polygon (an ordered, implicitly closed list of points)
into N - 2 triangles that reference the ORIGINAL point indices. This is
ear clipping with a twist: instead of cutting the first ear we find, every
iteration scores all valid ears and cuts the one whose corner angle is
closest to 60 degrees. Near-equilateral triangles make the front and back
faces of the extruded mesh much more uniform. ✂️

The polygon must be counter-clockwise with +y pointing up. We don't check
that the input is simple; on bad input we either produce something
deterministic or raise TriangulationError, never a half-finished result.

Complexity is O(n^3) in the worst case, which is fine for the tens of
points a decimated contour gives us.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .vector2 import Vector2

logger = logging.getLogger(__name__)

Triangle = Tuple[int, int, int]

# The "ideal" ear: corner angle of an equilateral triangle
TARGET_EAR_ANGLE = math.pi / 3


class TriangulationError(RuntimeError):
    """
    Raised when no vertex of the remaining polygon qualifies as an ear.

    This means the points do not form a simple counter-clockwise polygon
    (or hit an exact-collinearity corner case). The caller should give up
    on this outline; there is no partial triangulation to salvage.
    """

    def __init__(self, message: str, iteration: int, remaining: List[int]):
        super().__init__(message)
        self.iteration = iteration
        self.remaining = remaining


@dataclass
class TriangulationResult:
    """Output of triangulate(): N - 2 triangles as original-index triples."""

    triangles: List[Triangle] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.triangles)

    def __repr__(self) -> str:
        return f"TriangulationResult(triangles={len(self.triangles)})"


@dataclass(frozen=True)
class EarCandidate:
    """Best ear found so far during one scan of the remaining polygon."""

    diff: float
    position: int
    triangle: Triangle


def calc_turn_angle(v1: Vector2, v2: Vector2) -> Optional[float]:
    """
    Counter-clockwise angle from v1 to v2, in [0, 2π).

    Returns None when either vector has zero length (duplicate points):
    there is no angle to measure, so the vertex cannot be an ear.
    """
    if v1.magnitude() == 0 or v2.magnitude() == 0:
        return None

    n1 = v1.normalize()
    n2 = v2.normalize()
    sin = n1.cross(n2)
    # Clamp: rounding can push |cos| a hair past 1 and acos would raise
    cos = max(-1.0, min(1.0, n1.dot(n2)))

    if sin >= 0:
        return math.acos(cos)
    return 2 * math.pi - math.acos(cos)


def is_same_side(a: Vector2, b: Vector2, p1: Vector2, p2: Vector2) -> bool:
    """True if p1 and p2 lie on the same side of line ab (or on it)."""
    edge = b.sub(a)
    c1 = edge.cross(p1.sub(a))
    c2 = edge.cross(p2.sub(a))
    return c1 * c2 >= 0


def is_point_in_triangle(a: Vector2, b: Vector2, c: Vector2, p: Vector2) -> bool:
    """
    Same-side point-in-triangle test.

    Points on an edge count as inside, so an ear is also rejected when
    another vertex touches it.
    """
    return (
        is_same_side(a, b, c, p)
        and is_same_side(b, c, a, p)
        and is_same_side(c, a, b, p)
    )


def triangle_signed_area(a: Vector2, b: Vector2, c: Vector2) -> float:
    """Signed area of triangle abc (positive = counter-clockwise)."""
    return b.sub(a).cross(c.sub(a)) / 2


def polygon_signed_area(points: Sequence[Vector2]) -> float:
    """Signed area of a closed polygon via the shoelace formula (positive = CCW)."""
    n = len(points)
    total = 0.0
    for i in range(n):
        total += points[i].cross(points[(i + 1) % n])
    return total / 2


def _find_best_ear(points: Sequence[Vector2], remaining: List[int]) -> Optional[EarCandidate]:
    """
    Score every remaining vertex and return the best ear, if any.

    `remaining` holds original indices in polygon order; positions in it
    are treated cyclically.
    """
    best: Optional[EarCandidate] = None
    count = len(remaining)

    for position in range(count):
        i_prev = remaining[position - 1]
        i_cur = remaining[position]
        i_next = remaining[(position + 1) % count]

        p_prev = points[i_prev]
        p_cur = points[i_cur]
        p_next = points[i_next]

        angle = calc_turn_angle(p_next.sub(p_cur), p_prev.sub(p_cur))
        # Reflex (or degenerate) corner: can't be an ear
        if angle is None or angle >= math.pi:
            continue

        diff = abs(angle - TARGET_EAR_ANGLE)
        if best is not None and diff >= best.diff:
            continue

        blocked = any(
            is_point_in_triangle(p_prev, p_cur, p_next, points[index])
            for index in remaining
            if index not in (i_prev, i_cur, i_next)
        )
        if blocked:
            continue

        best = EarCandidate(diff=diff, position=position, triangle=(i_prev, i_cur, i_next))

    return best


def triangulate(points: Sequence[Vector2]) -> TriangulationResult:
    """
    Triangulate a simple counter-clockwise polygon.

    Args:
        points: Polygon vertices in order (implicitly closed), at least 3

    Returns:
        TriangulationResult with exactly len(points) - 2 triangles. Each
        triangle is (previous, ear, next) in original indices, so it has
        the same counter-clockwise winding as the polygon.

    Raises:
        ValueError: If fewer than 3 points are given
        TriangulationError: If at some step no valid ear exists
    """
    if len(points) < 3:
        raise ValueError(f"A polygon needs at least 3 points, got {len(points)}")

    # The arena of original indices still in the polygon. Removing by
    # position keeps it in polygon order; triangles always store the
    # original indices pulled out of it.
    remaining = list(range(len(points)))
    result = TriangulationResult()

    logger.debug(f"Triangulating polygon with {len(points)} vertices")

    iteration = 0
    while len(remaining) > 2:
        ear = _find_best_ear(points, remaining)
        if ear is None:
            logger.error(
                f"No ear found at iteration {iteration} with {len(remaining)} vertices left"
            )
            raise TriangulationError(
                f"Failed to find a valid ear at iteration {iteration} "
                f"({len(remaining)} vertices remaining). "
                f"The outline is probably self-intersecting or not counter-clockwise.",
                iteration=iteration,
                remaining=list(remaining),
            )

        logger.debug(
            f"Iteration {iteration}: cut ear {ear.triangle} "
            f"(angle off by {math.degrees(ear.diff):.1f}°)"
        )
        del remaining[ear.position]
        result.triangles.append(ear.triangle)
        iteration += 1

    logger.debug(f"Triangulation complete: {len(result.triangles)} triangles")
    return result
