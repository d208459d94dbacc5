"""
Core conversion logic for photo silhouette to 3D mesh.

This module contains the pure business logic for turning a photograph of
an object into a textured, beveled 3D model. It's completely separate
from the CLI layer, making it easy to use programmatically or test.

No print statements, no argparse, just clean conversion logic! 🎯
"""

import math
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from PIL import Image

from .config import ExtrusionConfig
from .constants import COORDINATE_PRECISION
from .mesh_exporter import export_mesh, mesh_bounds
from .mesh_extruder import ExtrudedMesh, extrude_polygon
from .mesh_validation import validate_mesh
from .outline import prepare_outline
from .piece_detector import detect_pieces, select_main_piece
from .texture import build_texture
from .triangulator import triangulate
from .vector2 import Vector2


def format_filesize(size_bytes: int) -> str:
    """
    Convert a file size in bytes to a human-readable format.

    Examples:
        >>> format_filesize(0)
        '0B'
        >>> format_filesize(1024)
        '1.0 KB'
        >>> format_filesize(1536)
        '1.5 KB'
    """
    if size_bytes == 0:
        return "0B"
    size_units = ("B", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB")
    i = math.floor(math.log(size_bytes, 1024))
    p = math.pow(1024, i)
    s = round(size_bytes / p, 2)
    return f"{s} {size_units[i]}"


def build_mesh_from_outline(
    points: Sequence[Vector2],
    texture: Any = None,
    config: Optional[ExtrusionConfig] = None
) -> ExtrudedMesh:
    """
    Triangulate an outline and extrude it. The whole mesh core in one call.

    Args:
        points: Counter-clockwise outline (+y up), centered, extent ~1.0
        texture: Opaque texture handle for the front/back material
        config: ExtrusionConfig (defaults if None)

    Raises:
        TriangulationError: If the outline can't be triangulated
        DegenerateOutlineError: If the outline has duplicate neighbors
    """
    if config is None:
        config = ExtrusionConfig()
    result = triangulate(points)
    return extrude_polygon(points, result.triangles, texture, config)


def convert_image_to_mesh(
    input_path: str,
    output_path: str,
    config: Optional[ExtrusionConfig] = None,
    progress_callback: Optional[Callable[[str, str], None]] = None
) -> Dict[str, Any]:
    """
    Convert a photograph of an object to a 3D mesh file.

    The process:
    1. Load the image
    2. Detect silhouettes and pick the main piece
    3. Build the texture canvas from the piece cut-out
    4. Decimate and normalize the outline
    5. Triangulate and extrude into a beveled solid
    6. Optionally validate the mesh
    7. Export (glb, obj or stl)

    Nothing is written unless every step succeeds.

    Args:
        input_path: Path to input image file
        output_path: Path where the mesh file should be written
        config: ExtrusionConfig object with all parameters (uses defaults if None)
        progress_callback: Optional function to call with progress updates
                           Signature: callback(stage: str, message: str)

    Returns:
        Dictionary with conversion statistics

    Raises:
        FileNotFoundError: If input image doesn't exist
        NoPieceFoundError: If no silhouette is found
        ValueError: If the outline is too small or the mesh fails validation
        TriangulationError: If the outline can't be triangulated
    """

    def _progress(stage: str, message: str):
        if progress_callback:
            progress_callback(stage, message)

    if config is None:
        config = ExtrusionConfig()

    input_file = Path(input_path)
    if not input_file.exists():
        raise FileNotFoundError(f"Input image not found: {input_path}")

    # Step 1: Load image
    _progress("load", f"Loading image: {input_file.name}")
    with Image.open(input_file) as img:
        image = img.convert('RGBA')
    _progress("load", f"Image loaded: {image.width}x{image.height}px")

    # Step 2: Detect the object
    _progress("detect", "Detecting silhouettes...")
    pieces = detect_pieces(image, config)
    piece = select_main_piece(pieces, image.size, config.center_tolerance)
    _progress("detect", f"Selected {piece.width}x{piece.height}px piece from {len(pieces)} candidates")

    # Step 3: Texture
    texture = build_texture(piece.image, config.texture_size_px, config.texture_margin)

    # Step 4: Outline
    _progress("outline", "Preparing outline...")
    points = prepare_outline(piece, config)
    _progress("outline", f"Outline: {len(piece.points)} -> {len(points)} points")

    # Step 5: Triangulate and extrude
    _progress("triangulate", f"Triangulating {len(points)} points...")
    triangulation = triangulate(points)
    _progress("triangulate", f"{len(triangulation.triangles)} triangles")

    _progress("extrude", "Extruding beveled solid...")
    mesh = extrude_polygon(points, triangulation.triangles, texture, config)
    _progress("extrude", f"{len(mesh.vertices)} vertices, {len(mesh.triangles)} triangles")

    # Step 6: Validate
    validation = None
    if config.validate_mesh:
        _progress("validate", "Validating mesh...")
        validation = validate_mesh(mesh, input_file.stem)
        if not validation.is_valid:
            raise ValueError(
                f"Generated mesh failed validation: {'; '.join(validation.errors)}"
            )
        _progress("validate", "✓ Watertight and consistently wound")

    # Step 7: Export
    _progress("export", f"Writing {config.output_format} file...")
    export_mesh(mesh, output_path, config.output_format)
    _progress("export", "Complete!")

    bounds_min, bounds_max = mesh_bounds(mesh)
    extents = [round(float(v), COORDINATE_PRECISION) for v in bounds_max - bounds_min]

    stats: Dict[str, Any] = {
        'image_width': image.width,
        'image_height': image.height,
        'num_pieces': len(pieces),
        'piece_box': (piece.x, piece.y, piece.width, piece.height),
        'num_contour_points': len(piece.points),
        'num_outline_points': len(points),
        'num_vertices': len(mesh.vertices),
        'num_triangles': len(mesh.triangles),
        'group_index_counts': [g.index_count for g in mesh.groups],
        'extents': extents,
        'output_path': output_path,
        'file_size': format_filesize(os.path.getsize(output_path)),
    }

    if validation is not None:
        stats['validation'] = validation

    return stats
