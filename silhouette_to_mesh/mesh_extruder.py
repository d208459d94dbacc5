"""
Mesh extrusion: from a triangulated outline to a closed, beveled solid.

This is where the flat silhouette becomes a physical-looking object! We
take the outline points plus their triangulation and build:

1. A front face at z = -thickness/2 (winding flipped so it faces -z)
2. A back face at z = +thickness/2 (winding as triangulated, faces +z)
3. A rounded rim: intermediate rings pushed outward along each vertex's
   miter direction, following an oval profile from front to back

The rings are stitched into quad strips, every ring reuses the planar UV
of its outline point, and the index buffer is split into two material
groups: the textured faces and the untextured rim.

Vertex layout (N = number of outline points, D = edge divisions):

    [0, N)            front face
    [N, 2N)           back face
    [2N + kN, 3N + kN) bevel ring k, for k in 0 .. D-2
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np

from .vector2 import Vector2
from .constants import (
    MITER_EPSILON,
    UV_OFFSET,
    FACE_METALNESS,
    FACE_ROUGHNESS,
    EDGE_METALNESS,
    EDGE_ROUGHNESS,
    EDGE_COLOR,
)

# Import for type checking only (avoids circular imports)
if TYPE_CHECKING:
    from .config import ExtrusionConfig

logger = logging.getLogger(__name__)

Triangle = Tuple[int, int, int]

# Material group ids
FACE_MATERIAL = 0
EDGE_MATERIAL = 1


class LengthMismatchError(ValueError):
    """Raised when two ring paths handed to stitch_paths differ in length."""


class DegenerateOutlineError(ValueError):
    """Raised when an outline vertex has no usable miter direction."""


@dataclass(frozen=True)
class MaterialGroup:
    """
    A sub-range of the index buffer drawn with one material.

    Offsets and counts are in INDEX units (3 per triangle), the way a
    renderer's draw groups address a flat index buffer.
    """

    index_offset: int
    index_count: int
    material_id: int

    def face_slice(self) -> slice:
        """The same range expressed as rows of the (F, 3) triangle array."""
        return slice(self.index_offset // 3, (self.index_offset + self.index_count) // 3)


@dataclass(frozen=True)
class MaterialSpec:
    """Renderer-independent description of one material, indexed by material id."""

    name: str
    metalness: float
    roughness: float
    color: Optional[Tuple[int, int, int]] = None
    textured: bool = False


def build_materials(edge_color: Tuple[int, int, int] = EDGE_COLOR) -> List[MaterialSpec]:
    """The textured face material and the plain metallic rim material."""
    return [
        MaterialSpec(
            name="drawing",
            metalness=FACE_METALNESS,
            roughness=FACE_ROUGHNESS,
            textured=True
        ),
        MaterialSpec(
            name="edge",
            metalness=EDGE_METALNESS,
            roughness=EDGE_ROUGHNESS,
            color=edge_color
        ),
    ]


class ExtrudedMesh:
    """
    A closed 3D mesh with UVs, smooth normals and material groups.

    Buffers are numpy arrays:
    - vertices: (V, 3) float positions
    - triangles: (F, 3) int vertex indices, counter-clockwise = outward
    - uvs: (V, 2) float texture coordinates
    - normals: (V, 3) float unit vertex normals

    `materials[material_id]` describes the material of each group.
    `texture` is whatever the caller passed in (usually a PIL image) and
    is only ever bound to the textured material.
    """

    def __init__(
        self,
        vertices: np.ndarray,
        triangles: np.ndarray,
        uvs: np.ndarray,
        normals: np.ndarray,
        groups: List[MaterialGroup],
        texture: Any = None,
        materials: Optional[List[MaterialSpec]] = None
    ):
        self.vertices = vertices
        self.triangles = triangles
        self.uvs = uvs
        self.normals = normals
        self.groups = groups
        self.texture = texture
        self.materials = materials if materials is not None else build_materials()

    @property
    def indices(self) -> np.ndarray:
        """Flat index buffer (3 entries per triangle)."""
        return self.triangles.reshape(-1)

    def group_triangles(self, material_id: int) -> np.ndarray:
        """All triangles drawn with the given material."""
        parts = [self.triangles[g.face_slice()] for g in self.groups if g.material_id == material_id]
        if not parts:
            return np.zeros((0, 3), dtype=self.triangles.dtype)
        return np.concatenate(parts)

    def __repr__(self) -> str:
        return (
            f"ExtrudedMesh(vertices={len(self.vertices)}, triangles={len(self.triangles)}, "
            f"groups={len(self.groups)})"
        )


def calc_oval(a: float, b: float, phase: float) -> Tuple[float, float]:
    """
    Point on an axis-aligned oval.

    Args:
        a: Half of the oval's width (x axis)
        b: Half of the oval's height (y axis)
        phase: Angle from the positive x axis

    Returns:
        (a * cos(phase), b * sin(phase))
    """
    return a * math.cos(phase), b * math.sin(phase)


def calc_miter_direction(prev: Vector2, cur: Vector2, nxt: Vector2) -> Vector2:
    """
    Outward offset direction at `cur` for a counter-clockwise outline.

    Normally this is the angle bisector of the two edges, flipped by the
    sign of their cross product so it points out of the shape at both
    convex and reflex corners. When the edges are (nearly) collinear the
    bisector is meaningless:
    - straight run: use the outward edge normal
    - spike folding back on itself: point out of the spike tip

    Raises:
        DegenerateOutlineError: If cur coincides with a neighbor
    """
    to_prev = prev.sub(cur)
    to_next = nxt.sub(cur)
    if to_prev.magnitude() == 0 or to_next.magnitude() == 0:
        raise DegenerateOutlineError(
            f"Outline has a zero-length edge at {cur!r}; remove duplicate points before extruding"
        )

    v_cp = to_prev.normalize()
    v_cn = to_next.normalize()
    sin = v_cp.cross(v_cn)

    if abs(sin) >= MITER_EPSILON:
        return v_cp.add(v_cn).normalize().multiply(math.copysign(1.0, sin))

    bisector = v_cp.add(v_cn)
    if bisector.magnitude() < MITER_EPSILON:
        # Straight run: right-hand normal of the edge direction is outward
        direction = v_cn.sub(v_cp).normalize()
        logger.debug(f"Collinear vertex at {cur!r}, using edge normal")
        return Vector2(direction.y, -direction.x)

    logger.warning(f"Outline folds back on itself at {cur!r}, offsetting out of the spike")
    return bisector.normalize().multiply(-1.0)


def stitch_paths(path1: Sequence[int], path2: Sequence[int]) -> List[Triangle]:
    """
    Connect two closed vertex loops with a strip of quads.

    Each quad (path1[i], path1[i+1], path2[i+1], path2[i]) becomes two
    triangles. Winding follows path1 -> path2, so stitching front towards
    back gives outward-facing rim triangles.

    Raises:
        LengthMismatchError: If the paths have different lengths
    """
    if len(path1) != len(path2):
        raise LengthMismatchError(
            f"Paths must have the same length to be stitched, got {len(path1)} and {len(path2)}"
        )

    triangles: List[Triangle] = []
    count = len(path1)
    for i in range(count):
        p11 = path1[i]
        p12 = path1[(i + 1) % count]
        p21 = path2[i]
        p22 = path2[(i + 1) % count]
        triangles.append((p11, p12, p22))
        triangles.append((p11, p22, p21))
    return triangles


def compute_vertex_normals(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """
    Smooth vertex normals by area-weighted face normal accumulation.

    The raw cross product of two triangle edges is the face normal scaled
    by twice the triangle area, so summing them per vertex weights big
    faces more than slivers. Vertices without faces get a zero normal.
    """
    normals = np.zeros_like(vertices, dtype=np.float64)
    if len(triangles) == 0:
        return normals

    v0 = vertices[triangles[:, 0]]
    v1 = vertices[triangles[:, 1]]
    v2 = vertices[triangles[:, 2]]
    face_normals = np.cross(v1 - v0, v2 - v0)

    for corner in range(3):
        np.add.at(normals, triangles[:, corner], face_normals)

    lengths = np.linalg.norm(normals, axis=1)
    nonzero = lengths > 0
    normals[nonzero] /= lengths[nonzero][:, np.newaxis]
    return normals


def _build_bevel_ring(
    points: Sequence[Vector2],
    miters: Sequence[Vector2],
    phase: float,
    depth: float,
    width: float
) -> List[Tuple[float, float, float]]:
    """One intermediate ring: every point pushed outward along its miter."""
    oval_x, oval_y = calc_oval(depth, width, phase)
    ring = []
    for point, miter in zip(points, miters):
        offset = miter.multiply(oval_y)
        ring.append((point.x + offset.x, point.y + offset.y, -oval_x))
    return ring


def extrude_polygon(
    points: Sequence[Vector2],
    triangles: Sequence[Triangle],
    texture: Any = None,
    config: Optional['ExtrusionConfig'] = None
) -> ExtrudedMesh:
    """
    Extrude a triangulated outline into a closed, beveled solid.

    Args:
        points: Counter-clockwise outline (+y up), centered, extent ~1.0
        triangles: Triangulation of `points` (N - 2 CCW triangles)
        texture: Opaque texture handle bound to the face material
        config: ExtrusionConfig with thickness and bevel settings (defaults if None)

    Returns:
        ExtrudedMesh with N * (edge_divisions + 1) vertices and two
        material groups (faces, rim)

    Raises:
        ValueError: If there are fewer than 3 points
        DegenerateOutlineError: If the outline has duplicate neighbors
        LengthMismatchError: If ring construction ever pairs unequal paths
    """
    if config is None:
        from .config import ExtrusionConfig
        config = ExtrusionConfig()

    num_points = len(points)
    if num_points < 3:
        raise ValueError(f"Cannot extrude an outline with {num_points} points")

    thickness = config.thickness
    edge_divisions = config.edge_divisions
    depth = thickness * config.bevel_depth_ratio
    width = thickness * config.bevel_width_ratio

    logger.debug(
        f"Extruding {num_points} points, {len(triangles)} triangles, "
        f"thickness={thickness}, edge_divisions={edge_divisions}"
    )

    # ========================================================================
    # Front and back faces
    # ========================================================================
    front_points = [(p.x, p.y, -thickness / 2) for p in points]
    front_indices = list(range(num_points))
    front_tris = [(t[0], t[2], t[1]) for t in triangles]

    back_points = [(p.x, p.y, thickness / 2) for p in points]
    back_indices = [i + num_points for i in range(num_points)]
    back_tris = [(t[0] + num_points, t[1] + num_points, t[2] + num_points) for t in triangles]

    # ========================================================================
    # Bevel rings
    # ========================================================================
    # Miter directions only depend on the outline, so compute them once
    miters = [
        calc_miter_direction(points[j - 1], points[j], points[(j + 1) % num_points])
        for j in range(num_points)
    ]

    edge_points: List[Tuple[float, float, float]] = []
    edge_paths: List[List[int]] = [front_indices]
    for ring in range(edge_divisions - 1):
        phase = math.pi / edge_divisions * (ring + 1)
        edge_points.extend(_build_bevel_ring(points, miters, phase, depth, width))
        first = num_points * 2 + ring * num_points
        edge_paths.append(list(range(first, first + num_points)))
    edge_paths.append(back_indices)

    edge_tris: List[Triangle] = []
    for i in range(edge_divisions):
        edge_tris.extend(stitch_paths(edge_paths[i], edge_paths[i + 1]))

    # ========================================================================
    # Assemble buffers
    # ========================================================================
    vertices = np.array(front_points + back_points + edge_points, dtype=np.float64)
    all_tris = np.array(front_tris + back_tris + edge_tris, dtype=np.int64).reshape(-1, 3)

    # Same planar mapping for every ring: texture projected along z
    planar_uv = [(p.x + UV_OFFSET, p.y + UV_OFFSET) for p in points]
    uvs = np.array(planar_uv * (edge_divisions + 1), dtype=np.float64)

    normals = compute_vertex_normals(vertices, all_tris)

    face_index_count = (len(front_tris) + len(back_tris)) * 3
    edge_index_count = len(edge_tris) * 3
    groups = [
        MaterialGroup(index_offset=0, index_count=face_index_count, material_id=FACE_MATERIAL),
        MaterialGroup(index_offset=face_index_count, index_count=edge_index_count, material_id=EDGE_MATERIAL),
    ]

    mesh = ExtrudedMesh(
        vertices=vertices,
        triangles=all_tris,
        uvs=uvs,
        normals=normals,
        groups=groups,
        texture=texture,
        materials=build_materials(config.edge_color)
    )
    logger.debug(f"Extrusion complete: {mesh!r}")
    return mesh
