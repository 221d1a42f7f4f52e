"""4x4 affine transforms for placing meshes in world space.

Transforms are NumPy float64 arrays that act on column vectors, so
``translate(...) @ scale(...)`` scales first and translates second. They are
only used on the Python side while a scene is being built.

Example:
    >>> object_to_world = translate(0.0, -1.5, -5.0) @ translate(1.0, -1.5, 0.0)
    >>> transform_points(object_to_world, [(0.0, 0.0, 0.0)])
    array([[ 1., -3., -5.]])
"""

import math

import numpy as np
import numpy.typing as npt

Matrix4 = npt.NDArray[np.float64]


def identity() -> Matrix4:
    """Return the 4x4 identity transform."""
    return np.eye(4, dtype=np.float64)


def translate(x: float, y: float, z: float) -> Matrix4:
    """Return a translation by (x, y, z)."""
    m = identity()
    m[:3, 3] = (x, y, z)
    return m


def scale(x: float, y: float, z: float) -> Matrix4:
    """Return a per-axis scale."""
    return np.diag([x, y, z, 1.0]).astype(np.float64)


def scale_linear(factor: float) -> Matrix4:
    """Return a uniform scale by ``factor``."""
    return scale(factor, factor, factor)


def rotate_x(degrees: float) -> Matrix4:
    """Return a rotation about the x axis (right handed)."""
    c, s = _cos_sin(degrees)
    m = identity()
    m[1, 1], m[1, 2] = c, -s
    m[2, 1], m[2, 2] = s, c
    return m


def rotate_y(degrees: float) -> Matrix4:
    """Return a rotation about the y axis (right handed)."""
    c, s = _cos_sin(degrees)
    m = identity()
    m[0, 0], m[0, 2] = c, s
    m[2, 0], m[2, 2] = -s, c
    return m


def rotate_z(degrees: float) -> Matrix4:
    """Return a rotation about the z axis (right handed)."""
    c, s = _cos_sin(degrees)
    m = identity()
    m[0, 0], m[0, 1] = c, -s
    m[1, 0], m[1, 1] = s, c
    return m


def inverse(matrix: Matrix4) -> Matrix4:
    """Invert a transform.

    Raises:
        ValueError: If the matrix is singular.
    """
    try:
        return np.linalg.inv(matrix)
    except np.linalg.LinAlgError as e:
        raise ValueError("Transform is not invertible") from e


def transform_points(matrix: Matrix4, points: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Apply a transform to an (N, 3) array of points.

    Args:
        matrix: The 4x4 transform.
        points: Points as an (N, 3) array-like.

    Returns:
        The transformed (N, 3) points.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    homogeneous = np.hstack([pts, np.ones((pts.shape[0], 1))])
    out = homogeneous @ matrix.T
    return out[:, :3] / out[:, 3:4]


def _cos_sin(degrees: float) -> tuple[float, float]:
    radians = math.radians(degrees)
    return math.cos(radians), math.sin(radians)
