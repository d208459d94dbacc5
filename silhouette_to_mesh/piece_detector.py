"""
Piece detection: find object silhouettes in a photograph.

The photo is thresholded (Otsu picks the split between "paper" and
"object" automatically), every contour in the resulting binary image is
traced, and contours that are big and detailed enough become Pieces.
Each Piece carries its outline in bounding-box pixel coordinates and a
cut-out RGBA image of the object whose alpha is the (softened) silhouette.

This module knows nothing about meshes; it just hands outlines and
textures to the rest of the pipeline. 📸
"""

import logging
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

import cv2
import numpy as np
from PIL import Image, ImageDraw, ImageFilter

from .vector2 import Vector2

# Import for type checking only (avoids circular imports)
if TYPE_CHECKING:
    from .config import ExtrusionConfig

logger = logging.getLogger(__name__)


class NoPieceFoundError(ValueError):
    """Raised when an image contains no usable silhouette."""


class Piece:
    """
    One detected silhouette.

    Attributes:
        x, y: Top-left corner of the bounding box in image pixels
        width, height: Bounding box size (max - min, in pixels)
        points: Outline in box-relative pixel coordinates (y down),
                in canonical winding order
        image: RGBA cut-out of the box, alpha = blurred silhouette mask
    """

    def __init__(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        points: List[Vector2],
        image: Image.Image
    ):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.points = points
        self.image = image

    @property
    def box_area(self) -> int:
        return self.width * self.height

    def __repr__(self) -> str:
        return (
            f"Piece(x={self.x}, y={self.y}, {self.width}x{self.height}px, "
            f"{len(self.points)} points)"
        )


def outline_direction(points: Sequence[Vector2]) -> float:
    """
    Winding indicator: sum of (next.x - cur.x) * (next.y + cur.y).

    Positive for one rotational direction, negative for the other. This
    is -2x the shoelace area, so it is positive for outlines that are
    clockwise in a y-up frame.
    """
    total = 0.0
    count = len(points)
    for i, cur in enumerate(points):
        nxt = points[(i + 1) % count]
        total += (nxt.x - cur.x) * (nxt.y + cur.y)
    return total


def orient_outline(points: List[Vector2]) -> List[Vector2]:
    """Return the outline in canonical order (non-positive direction sum)."""
    if outline_direction(points) > 0:
        return list(reversed(points))
    return list(points)


def _threshold_image(image: Image.Image) -> np.ndarray:
    """Grayscale + Otsu binary threshold, as a uint8 0/255 array."""
    gray = np.array(image.convert('L'), dtype=np.uint8)
    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    return binary


def _cut_out_piece(
    image: Image.Image,
    box: Tuple[int, int, int, int],
    points: Sequence[Vector2],
    blur_radius: float
) -> Image.Image:
    """Crop the box and mask it with the filled, blurred outline."""
    x, y, width, height = box
    cut = image.convert('RGBA').crop((x, y, x + width, y + height))

    mask = Image.new('L', (width, height), 0)
    draw = ImageDraw.Draw(mask)
    draw.polygon([(p.x, p.y) for p in points], fill=255)
    if blur_radius > 0:
        mask = mask.filter(ImageFilter.GaussianBlur(blur_radius))

    # Keep the photo's own transparency where it has any
    alpha = np.minimum(np.array(cut.getchannel('A')), np.array(mask))
    cut.putalpha(Image.fromarray(alpha.astype(np.uint8)))
    return cut


def detect_pieces(image: Image.Image, config: Optional['ExtrusionConfig'] = None) -> List[Piece]:
    """
    Find all candidate silhouettes in an image.

    Args:
        image: Source photograph (any PIL mode)
        config: ExtrusionConfig with detection thresholds (defaults if None)

    Returns:
        List of Piece objects in contour order (may be empty)
    """
    if config is None:
        from .config import ExtrusionConfig
        config = ExtrusionConfig()

    binary = _threshold_image(image)
    contours, _ = cv2.findContours(binary, cv2.RETR_TREE, cv2.CHAIN_APPROX_SIMPLE)
    logger.debug(f"Found {len(contours)} raw contours")

    pieces: List[Piece] = []
    for contour in contours:
        coords = contour.reshape(-1, 2)
        if len(coords) < config.contour_complexity_threshold:
            continue

        min_x, min_y = (int(v) for v in coords.min(axis=0))
        max_x, max_y = (int(v) for v in coords.max(axis=0))
        width = max_x - min_x
        height = max_y - min_y

        if width <= config.min_box_size_px or height <= config.min_box_size_px:
            logger.debug(f"Skipping {width}x{height}px contour (too small)")
            continue

        points = [Vector2(float(px - min_x), float(py - min_y)) for px, py in coords]
        texture = _cut_out_piece(image, (min_x, min_y, width, height), points, config.mask_blur_radius_px)

        piece = Piece(
            x=min_x,
            y=min_y,
            width=width,
            height=height,
            points=orient_outline(points),
            image=texture
        )
        logger.debug(f"Detected {piece!r}")
        pieces.append(piece)

    logger.info(f"Detected {len(pieces)} candidate pieces")
    return pieces


def select_main_piece(
    pieces: Sequence[Piece],
    image_size: Tuple[int, int],
    center_tolerance: float
) -> Piece:
    """
    Pick the piece that is most likely the photographed object.

    Pieces whose bounding box starts at the image border (the frame of the
    photo shows up as a contour too) are ignored; of the rest, the one with
    the largest bounding box wins.

    Args:
        pieces: Candidates from detect_pieces()
        image_size: (width, height) of the source image
        center_tolerance: Fraction of the half-size a box origin may sit
                          away from the image center

    Raises:
        NoPieceFoundError: If no piece qualifies
    """
    image_width, image_height = image_size
    best: Optional[Piece] = None

    for piece in pieces:
        if abs(piece.x - image_width / 2) > center_tolerance * image_width / 2:
            continue
        if abs(piece.y - image_height / 2) > center_tolerance * image_height / 2:
            continue
        if best is None or piece.box_area > best.box_area:
            best = piece

    if best is None:
        raise NoPieceFoundError(
            f"No piece found among {len(pieces)} candidates. "
            f"Photograph the object on a plain, contrasting background."
        )

    logger.info(f"Selected {best!r}")
    return best
