"""
Mesh export via trimesh.

An ExtrudedMesh carries two material groups. Formats that understand
materials (glb, obj) get one geometry per group, named after its
material: the faces with a PBR material whose base color is the photo
texture, the rim with a plain grey metallic material. STL has no
materials at all, so it gets the whole mesh as a single geometry.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import trimesh
from trimesh.visual.material import PBRMaterial
from trimesh.visual.texture import TextureVisuals

from .mesh_extruder import ExtrudedMesh, MaterialSpec
from .constants import SUPPORTED_OUTPUT_FORMATS

logger = logging.getLogger(__name__)


def to_trimesh(mesh: ExtrudedMesh) -> trimesh.Trimesh:
    """The whole mesh as one trimesh geometry (positions, faces, normals only)."""
    return trimesh.Trimesh(
        vertices=mesh.vertices,
        faces=mesh.triangles,
        vertex_normals=mesh.normals,
        process=False
    )


def to_pbr_material(spec: MaterialSpec, texture=None) -> PBRMaterial:
    """Translate a MaterialSpec; the texture is only used by textured materials."""
    if spec.textured:
        return PBRMaterial(
            name=spec.name,
            baseColorTexture=texture,
            metallicFactor=spec.metalness,
            roughnessFactor=spec.roughness
        )
    color = spec.color if spec.color is not None else (255, 255, 255)
    return PBRMaterial(
        name=spec.name,
        baseColorFactor=[color[0], color[1], color[2], 255],
        metallicFactor=spec.metalness,
        roughnessFactor=spec.roughness
    )


def to_scene(mesh: ExtrudedMesh) -> trimesh.Scene:
    """
    One textured geometry per material group, collected in a scene.

    Each geometry keeps the full vertex buffer (process=False) so its
    faces can use the original indices, UVs and normals untouched.
    """
    scene = trimesh.Scene()
    for group in mesh.groups:
        spec = mesh.materials[group.material_id]
        geometry = trimesh.Trimesh(
            vertices=mesh.vertices,
            faces=mesh.triangles[group.face_slice()],
            vertex_normals=mesh.normals,
            process=False
        )
        geometry.visual = TextureVisuals(
            uv=mesh.uvs,
            material=to_pbr_material(spec, mesh.texture)
        )
        scene.add_geometry(geometry, geom_name=spec.name, node_name=spec.name)
    return scene


def check_output_format(file_format: str) -> str:
    """Normalize ".GLB" style names to "glb"; raise ValueError if unsupported."""
    file_format = file_format.lower().lstrip('.')
    if file_format not in SUPPORTED_OUTPUT_FORMATS:
        raise ValueError(
            f"Unsupported output format '{file_format}'. "
            f"Use one of: {', '.join(sorted(SUPPORTED_OUTPUT_FORMATS))}"
        )
    return file_format


def export_mesh(mesh: ExtrudedMesh, output_path: str, file_format: Optional[str] = None) -> str:
    """
    Write a mesh to disk.

    Args:
        mesh: Mesh to export
        output_path: Destination file
        file_format: "glb", "obj" or "stl" (defaults to the file extension)

    Returns:
        The path written

    Raises:
        ValueError: If the format is not supported
    """
    if file_format is None:
        file_format = Path(output_path).suffix
    file_format = check_output_format(file_format)

    if file_format == "stl":
        target = to_trimesh(mesh)
    else:
        target = to_scene(mesh)

    logger.info(f"Writing {file_format} file: {output_path}")
    target.export(str(output_path), file_type=file_format)
    return str(output_path)


def mesh_bounds(mesh: ExtrudedMesh) -> Tuple[np.ndarray, np.ndarray]:
    """(min corner, max corner) of the vertex positions."""
    return mesh.vertices.min(axis=0), mesh.vertices.max(axis=0)
