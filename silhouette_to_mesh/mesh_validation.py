"""
Mesh validation module using trimesh for quality checks.

The extruder is supposed to hand back a closed solid every single time.
This module double-checks that claim before a mesh is written to disk:

- Watertight (no holes or gaps between the faces and the rim)
- Consistent winding (every normal points outward)
- Manifold (every edge shared by exactly 2 faces)
- Positive enclosed volume
- Buffers that agree with each other (UVs, normals, material groups)

Validation never modifies the mesh. A broken mesh is reported, not patched.
"""

from typing import List, Dict, Any, Tuple
import logging
from collections import Counter

import numpy as np
import trimesh

from .mesh_extruder import ExtrudedMesh

# Set up logging for this module
logger = logging.getLogger(__name__)


class ValidationResult:
    """
    Result of mesh validation containing issues found and statistics.

    This encapsulates validation results in a way that's independent
    of the backend validation library used.
    """

    def __init__(self):
        """Initialize an empty validation result."""
        self.is_valid = True
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.stats: Dict[str, Any] = {}

    def add_error(self, message: str) -> None:
        """Add a critical error that makes the mesh invalid."""
        self.is_valid = False
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        """Add a non-critical warning about mesh quality."""
        self.warnings.append(message)

    def add_stat(self, key: str, value: Any) -> None:
        """Add a statistic about the mesh."""
        self.stats[key] = value

    def __repr__(self) -> str:
        status = "VALID" if self.is_valid else "INVALID"
        return f"ValidationResult({status}, errors={len(self.errors)}, warnings={len(self.warnings)})"


def count_mesh_stats(mesh: ExtrudedMesh) -> Tuple[int, int]:
    """Return (vertex count, triangle count)."""
    return len(mesh.vertices), len(mesh.triangles)


def _check_buffers(mesh: ExtrudedMesh, mesh_name: str, result: ValidationResult) -> None:
    """Checks that don't need trimesh: shapes, finiteness, index ranges, groups."""
    num_vertices = len(mesh.vertices)

    if not np.all(np.isfinite(mesh.vertices)):
        result.add_error(f"{mesh_name} has non-finite vertex positions (NaN or Infinity)")

    if len(mesh.uvs) != num_vertices:
        result.add_error(f"{mesh_name} has {len(mesh.uvs)} UVs for {num_vertices} vertices")

    if len(mesh.normals) != num_vertices:
        result.add_error(f"{mesh_name} has {len(mesh.normals)} normals for {num_vertices} vertices")

    if len(mesh.triangles) and (mesh.triangles.min() < 0 or mesh.triangles.max() >= num_vertices):
        result.add_error(f"{mesh_name} has triangle indices outside [0, {num_vertices})")

    # Material groups must tile the index buffer exactly, in order
    expected_offset = 0
    for group in mesh.groups:
        if group.index_offset != expected_offset:
            result.add_error(
                f"{mesh_name} material group {group.material_id} starts at {group.index_offset}, "
                f"expected {expected_offset}"
            )
        if group.index_count % 3 != 0:
            result.add_error(
                f"{mesh_name} material group {group.material_id} has {group.index_count} indices "
                f"(not a multiple of 3)"
            )
        expected_offset = group.index_offset + group.index_count

    total_indices = len(mesh.indices)
    if expected_offset != total_indices:
        result.add_error(
            f"{mesh_name} material groups cover {expected_offset} of {total_indices} indices"
        )
    result.add_stat("groups", [(g.material_id, g.index_count) for g in mesh.groups])


def validate_mesh(mesh: ExtrudedMesh, mesh_name: str = "mesh") -> ValidationResult:
    """
    Validate an extruded mesh.

    Args:
        mesh: ExtrudedMesh to validate
        mesh_name: Name for error messages

    Returns:
        ValidationResult with detailed findings
    """
    result = ValidationResult()
    result.add_stat("vertices", len(mesh.vertices))
    result.add_stat("triangles", len(mesh.triangles))

    _check_buffers(mesh, mesh_name, result)
    if not result.is_valid:
        # Geometry checks on broken buffers would only add noise
        logger.warning(f"{mesh_name}: buffer checks failed, skipping geometry checks")
        return result

    tmesh = trimesh.Trimesh(
        vertices=mesh.vertices,
        faces=mesh.triangles,
        process=False  # Don't merge or repair, we want to see the mesh as built
    )

    # Critical check: Watertightness
    if tmesh.is_watertight:
        result.add_stat("watertight", True)
    else:
        result.add_error(f"{mesh_name} is not watertight (has holes or open boundaries)")

    # Critical check: Winding consistency
    if tmesh.is_winding_consistent:
        result.add_stat("winding_consistent", True)
    else:
        result.add_error(f"{mesh_name} has inconsistent triangle winding")

    # Critical check: Non-manifold edges (edges shared by 3+ faces)
    edge_face_count = Counter(tuple(edge) for edge in np.sort(tmesh.edges, axis=1).tolist())
    nonmanifold_edges = [edge for edge, count in edge_face_count.items() if count > 2]
    result.add_stat("nonmanifold_edges", len(nonmanifold_edges))
    if nonmanifold_edges:
        result.add_error(f"{mesh_name} has {len(nonmanifold_edges)} non-manifold edges")

    # Important check: Valid volume, pointing outward
    if tmesh.is_volume:
        result.add_stat("is_volume", True)
        result.add_stat("volume", float(tmesh.volume))
        if tmesh.volume < 0:
            result.add_error(f"{mesh_name} has negative volume (mesh is inside-out)")
    elif tmesh.is_watertight and tmesh.is_winding_consistent:
        result.add_error(f"{mesh_name} does not enclose a valid volume")

    # Topological check: a closed surface without handles has Euler number 2
    euler = tmesh.euler_number
    result.add_stat("euler_number", euler)
    if euler != 2:
        result.add_warning(f"{mesh_name} has unusual topology (euler={euler})")

    # Quality check: Degenerate faces
    degenerate_count = int((tmesh.area_faces < 1e-12).sum())
    if degenerate_count > 0:
        result.add_warning(f"{mesh_name} has {degenerate_count} degenerate (zero-area) triangles")
        result.add_stat("degenerate_faces", degenerate_count)

    result.add_stat("surface_area", float(tmesh.area))
    result.add_stat("extents", [float(x) for x in tmesh.extents])

    logger.debug(f"Validated {mesh_name}: {result!r}")
    return result


def get_mesh_report(mesh: ExtrudedMesh, mesh_name: str = "mesh") -> str:
    """
    Generate a human-readable mesh quality report.

    Args:
        mesh: Mesh to analyze
        mesh_name: Name for the report

    Returns:
        Formatted report string
    """
    result = validate_mesh(mesh, mesh_name)

    lines = []
    lines.append(f"=== Mesh Quality Report: {mesh_name} ===")
    lines.append("")

    lines.append("Basic Statistics:")
    lines.append(f"  Vertices: {result.stats['vertices']:,}")
    lines.append(f"  Triangles: {result.stats['triangles']:,}")
    for material_id, index_count in result.stats.get('groups', []):
        lines.append(f"  Material {material_id}: {index_count // 3:,} triangles")
    lines.append("")

    lines.append("Validation Status:")
    if result.is_valid:
        lines.append("  ✅ VALID - Mesh passed all critical checks")
    else:
        lines.append("  ❌ INVALID - Mesh has critical issues")

    lines.append(f"  Watertight: {'✅ Yes' if result.stats.get('watertight') else '❌ No'}")
    lines.append(f"  Winding Consistent: {'✅ Yes' if result.stats.get('winding_consistent') else '❌ No'}")
    lines.append(f"  Valid Volume: {'✅ Yes' if result.stats.get('is_volume') else '❌ No'}")
    if 'euler_number' in result.stats:
        lines.append(f"  Euler Number: {result.stats['euler_number']}")
    lines.append("")

    if 'volume' in result.stats:
        lines.append("Physical Properties:")
        lines.append(f"  Volume: {result.stats['volume']:.6f}")
        lines.append(f"  Surface Area: {result.stats['surface_area']:.4f}")
        ext = result.stats['extents']
        lines.append(f"  Dimensions: {ext[0]:.3f} × {ext[1]:.3f} × {ext[2]:.3f}")
        lines.append("")

    if result.errors:
        lines.append("Errors:")
        for error in result.errors:
            lines.append(f"  ❌ {error}")
        lines.append("")

    if result.warnings:
        lines.append("Warnings:")
        for warning in result.warnings:
            lines.append(f"  ⚠️ {warning}")
        lines.append("")

    return "\n".join(lines)
