from typing import Any, Iterable, List, Optional, Sequence, Tuple, TypeVar, cast

import numpy as np
import numpy.typing as npt

Vector = npt.NDArray[np.floating[Any]]
Edge = Tuple[int, int]

T = TypeVar("T")

TAU = 2 * np.pi

# Skip-list arcs never grow taller than this
MAX_SKIPLIST_HEIGHT = 15

# Circumcircle plane normals shorter than this are treated as zero, i. e. the
# three sites (nearly) coincide and there is no well-defined circumcenter
DEGENERATE_EPSILON = 1e-12

# Slack when comparing the activation colatitude of a new circle event against
# the current sweep position
SWEEP_EPSILON = 1e-9

NORTH_POLE = np.array([0.0, 0.0, 1.0])

# Regular tetrahedron with one vertex at the north pole: the other three sit
# at colatitude arccos(-1/3), spaced 2pi/3 apart in azimuth
TWO_PI_3 = 2 * np.pi / 3
FOUR_PI_3 = 4 * np.pi / 3
TETRAHEDRON_THETA = float(np.arccos(-1 / 3))


def shift(a: Sequence[T], n: int = 1) -> Sequence[T]:
    if len(a) == 0:
        return a

    m = n % len(a)

    return [*a[m:], *a[:m]]


def get_rotation_matrix_xz(theta: float) -> npt.NDArray[np.float64]:
    """Return the matrix with rotates a vector by `theta` about the y-axis"""

    return np.array(
        [
            [np.cos(theta), 0, np.sin(theta)],
            [0, 1, 0],
            [-np.sin(theta), 0, np.cos(theta)],
        ]
    )


def get_rotation_matrix_yz(rho: float) -> npt.NDArray[np.float64]:
    """Return the matrix with rotates a vector by `rho` about the x-axis"""

    return np.array(
        [
            [1, 0, 0],
            [0, np.cos(rho), np.sin(rho)],
            [0, -np.sin(rho), np.cos(rho)],
        ]
    )


def get_rotation_matrix(theta: float, rho: float) -> npt.NDArray[np.float64]:
    """Return the matrix with rotates a vector by `theta` about the y-axis and `rho` about the x-axis"""
    R_xz = get_rotation_matrix_xz(theta)
    R_yz = get_rotation_matrix_yz(rho)

    return R_yz.dot(R_xz)


def get_rotation_matrix_to_north(direction: Vector) -> npt.NDArray[np.float64]:
    """Return the rotation matrix `R` with `R.dot(direction) == (0, 0, 1)`.

    `direction` must be a unit vector. The rotation is about the axis
    orthogonal to both `direction` and the north pole (Rodrigues' formula); if
    `direction` is the south pole we rotate by pi about the x-axis instead.
    """
    axis = np.cross(direction, NORTH_POLE)
    sin_angle = np.linalg.norm(axis)
    cos_angle = direction.dot(NORTH_POLE)

    if np.isclose(sin_angle, 0):
        if cos_angle > 0:
            return np.eye(3)
        return np.diag([1.0, -1.0, -1.0])

    skew = np.array(
        [
            [0, -axis[2], axis[1]],
            [axis[2], 0, -axis[0]],
            [-axis[1], axis[0], 0],
        ]
    )

    return cast(
        npt.NDArray[np.float64],
        np.eye(3) + skew + skew.dot(skew) * ((1 - cos_angle) / sin_angle**2),
    )


def sort_edge(edge: Tuple[int, int]) -> Tuple[int, int]:
    if edge[0] > edge[1]:
        return (edge[1], edge[0])
    else:
        return edge


def sort_edges(edges: Iterable[Edge]) -> List[Edge]:
    """Sort each edge individually and then the entire list lexicographically"""
    return sorted(map(sort_edge, edges))


def random_scatter_sphere(n: int) -> List[Vector]:
    """Randomly scatter `n` points on the surface of the 2-sphere"""
    points = []
    while len(points) < n:
        point = np.random.randn(3)
        points.append(point / np.linalg.norm(point))

    return points


def tetrahedron_points(rotation: Optional[npt.NDArray[np.float64]] = None) -> List[Vector]:
    """Vertices of a regular tetrahedron inscribed in the unit sphere, one of
    them at the north pole, optionally rotated by `rotation`."""
    sin_theta = np.sin(TETRAHEDRON_THETA)
    cos_theta = np.cos(TETRAHEDRON_THETA)
    points = [NORTH_POLE.copy()] + [
        np.array([sin_theta * np.cos(phi), sin_theta * np.sin(phi), cos_theta])
        for phi in (0.0, TWO_PI_3, FOUR_PI_3)
    ]
    if rotation is not None:
        points = [rotation.dot(point) for point in points]

    return points
