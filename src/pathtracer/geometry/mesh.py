"""Polygon mesh input: OBJ loading and fan triangulation.

A mesh is a list of vertex positions and a list of polygonal faces indexing
into them. Each face with k vertices becomes k - 2 triangles sharing the
face's first vertex.

Example:
    >>> mesh = MeshData(
    ...     positions=[(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)],
    ...     faces=[(0, 1, 2, 3)],
    ... )
    >>> triangulate_faces(mesh.faces)
    [(0, 1, 2), (0, 2, 3)]
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import numpy.typing as npt
import pywavefront
from pywavefront.exceptions import PywavefrontException

from pathtracer.core.transform import Matrix4, transform_points

logger = logging.getLogger(__name__)


class MeshLoadError(RuntimeError):
    """Raised when a mesh file cannot be read or parsed."""


@dataclass
class MeshData:
    """Vertex positions and polygonal faces of a mesh.

    Attributes:
        positions: Vertex positions (x, y, z).
        faces: Faces as sequences of zero-based vertex indices (three or more).
    """

    positions: list[tuple[float, float, float]] = field(default_factory=list)
    faces: list[tuple[int, ...]] = field(default_factory=list)


def triangulate_faces(faces: Sequence[Sequence[int]]) -> list[tuple[int, int, int]]:
    """Split polygons into triangles fanning out from their first vertex.

    Faces with fewer than three vertices are skipped.
    """
    triangles: list[tuple[int, int, int]] = []
    for face in faces:
        for k in range(1, len(face) - 1):
            triangles.append((face[0], face[k], face[k + 1]))
    return triangles


def mesh_to_triangles(
    mesh: MeshData,
    transform: Matrix4 | None = None,
) -> npt.NDArray[np.float64]:
    """Triangulate a mesh and place it in world space.

    Args:
        mesh: The mesh to convert.
        transform: Optional 4x4 object-to-world transform.

    Returns:
        An (N, 3, 3) array of triangle vertices.

    Raises:
        ValueError: If a face references a vertex that does not exist.
    """
    positions = np.asarray(mesh.positions, dtype=np.float64).reshape(-1, 3)
    if transform is not None:
        positions = transform_points(transform, positions)

    triangles = triangulate_faces(mesh.faces)
    if not triangles:
        return np.zeros((0, 3, 3), dtype=np.float64)

    indices = np.asarray(triangles, dtype=np.int64)
    if indices.min() < 0 or indices.max() >= len(positions):
        raise ValueError(
            f"Face index out of range for mesh with {len(positions)} vertices"
        )
    return positions[indices]


def load_obj(path: str | Path) -> MeshData:
    """Read vertex positions and faces from a Wavefront OBJ file.

    The file is parsed with PyWavefront, which fans polygons into triangles
    from their first vertex. Faces keep indexing the file's ``v`` records
    in the order they appear.

    Args:
        path: Path to the OBJ file.

    Returns:
        The mesh with zero-based triangle faces.

    Raises:
        MeshLoadError: If the file cannot be read or a record is malformed.
    """
    path = Path(path)
    if not path.is_file():
        raise MeshLoadError(f"Unable to open mesh file {path}: no such file")

    try:
        scene = pywavefront.Wavefront(str(path), collect_faces=True, create_materials=True)
    except (OSError, ValueError, IndexError, PywavefrontException) as e:
        raise MeshLoadError(f"Unable to parse mesh file {path}: {e}") from e

    mesh = MeshData(positions=[tuple(v[:3]) for v in scene.vertices])
    for obj_mesh in scene.mesh_list:
        mesh.faces.extend(tuple(face) for face in obj_mesh.faces)

    logger.info(
        "Loaded %s: %d vertices, %d faces", path, len(mesh.positions), len(mesh.faces)
    )
    return mesh
