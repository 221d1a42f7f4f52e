"""Unit tests for mesh input.

Tests cover:
- Fan triangulation of polygons
- Conversion to world-space triangle arrays with a transform
- OBJ loading (polygon faces, vertex order, comments)
- Load failures
"""

import numpy as np
import pytest

from pathtracer.core.transform import translate
from pathtracer.geometry.mesh import (
    MeshData,
    MeshLoadError,
    load_obj,
    mesh_to_triangles,
    triangulate_faces,
)

QUAD_OBJ = """\
# unit quad
v 0 0 0
v 1 0 0
v 1 1 0
v 0 1 0
vn 0 0 1
f 1//1 2//1 3//1 4//1
"""


class TestTriangulation:
    """Tests for fan triangulation."""

    def test_triangle_unchanged(self):
        """Test that a triangle stays a single triangle."""
        assert triangulate_faces([(0, 1, 2)]) == [(0, 1, 2)]

    def test_pentagon_fans_from_first_vertex(self):
        """Test that a k-gon gives k - 2 triangles sharing the first vertex."""
        assert triangulate_faces([(5, 6, 7, 8, 9)]) == [(5, 6, 7), (5, 7, 8), (5, 8, 9)]

    def test_short_faces_skipped(self):
        """Test that faces with fewer than three vertices are ignored."""
        assert triangulate_faces([(0, 1), (2,)]) == []


class TestMeshToTriangles:
    """Tests for converting MeshData to triangle arrays."""

    def test_transform_applied(self):
        """Test that positions are transformed before triangulation."""
        mesh = MeshData(positions=[(0, 0, 0), (1, 0, 0), (0, 1, 0)], faces=[(0, 1, 2)])
        triangles = mesh_to_triangles(mesh, translate(0.0, 0.0, -5.0))
        assert triangles.shape == (1, 3, 3)
        np.testing.assert_allclose(triangles[0, :, 2], [-5.0, -5.0, -5.0])

    def test_empty_mesh(self):
        """Test that a mesh without faces gives an empty array."""
        assert mesh_to_triangles(MeshData()).shape == (0, 3, 3)

    def test_index_out_of_range(self):
        """Test that a face referencing a missing vertex is rejected."""
        mesh = MeshData(positions=[(0, 0, 0), (1, 0, 0), (0, 1, 0)], faces=[(0, 1, 3)])
        with pytest.raises(ValueError, match="out of range"):
            mesh_to_triangles(mesh)


class TestLoadObj:
    """Tests for the OBJ reader."""

    def test_load_quad(self, tmp_path):
        """Test that a quad is read as two triangles fanned from its first vertex."""
        path = tmp_path / "quad.obj"
        path.write_text(QUAD_OBJ)

        mesh = load_obj(path)
        assert len(mesh.positions) == 4
        assert len(mesh.faces) == 2
        assert all(len(face) == 3 and 0 in face for face in mesh.faces)
        assert len(mesh_to_triangles(mesh)) == 2

    def test_vertex_order_kept(self, tmp_path):
        """Test that positions keep the order of the file's v records."""
        path = tmp_path / "tri.obj"
        path.write_text("v 0 0 0\nv 2 0 0\nv 0 3 0\nf 1 2 3\n")

        mesh = load_obj(path)
        np.testing.assert_allclose(mesh.positions, [(0, 0, 0), (2, 0, 0), (0, 3, 0)])
        assert sorted(mesh.faces[0]) == [0, 1, 2]

    def test_comments_ignored(self, tmp_path):
        """Test that comment lines do not add vertices."""
        path = tmp_path / "comments.obj"
        path.write_text("# header\nv 0 0 0\n# middle\nv 1 0 0\nv 0 1 0\nf 1 2 3\n")

        mesh = load_obj(path)
        assert len(mesh.positions) == 3
        assert len(mesh.faces) == 1

    def test_missing_file_raises(self, tmp_path):
        """Test that an unreadable path raises MeshLoadError."""
        with pytest.raises(MeshLoadError, match="Unable to open"):
            load_obj(tmp_path / "missing.obj")

    def test_malformed_vertex_raises(self, tmp_path):
        """Test that a vertex with a non-numeric coordinate is rejected."""
        path = tmp_path / "bad.obj"
        path.write_text("v 0 0 0\nv 1 zero 0\n")
        with pytest.raises(MeshLoadError, match="bad.obj"):
            load_obj(path)

    def test_load_error_is_runtime_error(self):
        """Test that MeshLoadError can be caught as RuntimeError."""
        assert issubclass(MeshLoadError, RuntimeError)
