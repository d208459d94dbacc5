"""
Test helper utilities for creating test fixtures and sample data.

This module provides outline fixtures (plain lists of Vector2, counter-
clockwise with +y up) and small synthetic photographs used across
multiple test files.
"""

import math
import os
import random
import sys
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from silhouette_to_mesh.vector2 import Vector2


def make_outline(coords: List[Tuple[float, float]]) -> List[Vector2]:
    """Turn (x, y) tuples into Vector2 points."""
    return [Vector2(float(x), float(y)) for x, y in coords]


def unit_square() -> List[Vector2]:
    """Centered 1x1 square, counter-clockwise."""
    return make_outline([(-0.5, -0.5), (0.5, -0.5), (0.5, 0.5), (-0.5, 0.5)])


def equilateral_triangle() -> List[Vector2]:
    """Equilateral triangle with side 1, counter-clockwise."""
    return make_outline([(-0.5, -0.25), (0.5, -0.25), (0.0, -0.25 + math.sqrt(3) / 2)])


def regular_polygon(sides: int, radius: float = 0.5) -> List[Vector2]:
    """Regular polygon centered on the origin, counter-clockwise."""
    return [
        Vector2(radius * math.cos(2 * math.pi * i / sides), radius * math.sin(2 * math.pi * i / sides))
        for i in range(sides)
    ]


def l_shape() -> List[Vector2]:
    """
    L-shaped hexagon made of three unit squares (area 3).

    Vertex 3 at (1, 1) is the reflex corner.
    """
    return make_outline([(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2)])


def star(points: int = 5, outer: float = 0.5, inner: float = 0.2) -> List[Vector2]:
    """Star polygon alternating outer and inner radius, counter-clockwise."""
    result = []
    for i in range(points * 2):
        radius = outer if i % 2 == 0 else inner
        angle = math.pi / 2 + math.pi * i / points
        result.append(Vector2(radius * math.cos(angle), radius * math.sin(angle)))
    return result


def random_star_polygon(sides: int, seed: int) -> List[Vector2]:
    """
    Seeded random star-shaped polygon around the origin, counter-clockwise.

    Angles are jittered within their own slice of the circle so they stay
    strictly increasing, which keeps the polygon simple.
    """
    rng = random.Random(seed)
    step = 2 * math.pi / sides
    result = []
    for i in range(sides):
        angle = step * (i + rng.uniform(0.1, 0.9))
        radius = rng.uniform(0.15, 0.5)
        result.append(Vector2(radius * math.cos(angle), radius * math.sin(angle)))
    return result


def create_photo_image(
    size: Tuple[int, int] = (200, 200),
    circle: Optional[Tuple[int, int, int]] = (100, 100, 60),
    color: Tuple[int, int, int] = (40, 30, 120),
    background: Tuple[int, int, int] = (255, 255, 255),
    filepath: Optional[str] = None
) -> str:
    """
    Create a "photo" of a dark disc on a plain light background.

    Args:
        size: (width, height) of the image
        circle: (center x, center y, radius), or None for a blank photo
        color: RGB color of the disc
        background: RGB color of the paper
        filepath: Optional path to save image (defaults to temp file)

    Returns:
        Path to the created image file
    """
    img = create_photo(size, circle, color, background)

    if filepath is None:
        fd, filepath = tempfile.mkstemp(suffix='.png')
        os.close(fd)

    img.save(filepath)
    return filepath


def create_photo(
    size: Tuple[int, int] = (200, 200),
    circle: Optional[Tuple[int, int, int]] = (100, 100, 60),
    color: Tuple[int, int, int] = (40, 30, 120),
    background: Tuple[int, int, int] = (255, 255, 255)
) -> Image.Image:
    """Same as create_photo_image() but returns the PIL image."""
    img = Image.new('RGB', size, background)
    if circle is not None:
        cx, cy, r = circle
        draw = ImageDraw.Draw(img)
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=color)
    return img


def cleanup_test_file(filepath: str) -> None:
    """
    Remove a test file if it exists.

    Args:
        filepath: Path to file to remove
    """
    if filepath and os.path.exists(filepath):
        try:
            os.remove(filepath)
        except OSError:
            pass


def triangles_area(points: List[Vector2], triangles) -> float:
    """Summed signed area of index triangles over `points`."""
    total = 0.0
    for a, b, c in triangles:
        pa, pb, pc = points[a], points[b], points[c]
        total += pb.sub(pa).cross(pc.sub(pa)) / 2
    return total
