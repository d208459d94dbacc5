"""
Silhouette to Mesh Converter Package

Turn a photograph of a flat object into a textured, beveled 3D model:
silhouette detection, greedy ear triangulation and extrusion with a
rounded rim, exported as glb, obj or stl.
"""

__version__ = "1.0.0"

# Make the CLI main function easily accessible
from .cli import main

# Core conversion functions and configuration
from .silhouette_to_mesh import convert_image_to_mesh, build_mesh_from_outline
from .config import ExtrusionConfig

# Mesh core
from .vector2 import Vector2
from .triangulator import triangulate, TriangulationError
from .mesh_extruder import (
    extrude_polygon,
    ExtrudedMesh,
    MaterialSpec,
    LengthMismatchError,
    DegenerateOutlineError
)
from .piece_detector import NoPieceFoundError

# Mesh utility functions for validation and statistics
from .mesh_validation import validate_mesh, count_mesh_stats

__all__ = [
    "main",
    "convert_image_to_mesh",
    "build_mesh_from_outline",
    "ExtrusionConfig",
    "Vector2",
    "triangulate",
    "TriangulationError",
    "extrude_polygon",
    "ExtrudedMesh",
    "MaterialSpec",
    "LengthMismatchError",
    "DegenerateOutlineError",
    "NoPieceFoundError",
    "validate_mesh",
    "count_mesh_stats"
]
