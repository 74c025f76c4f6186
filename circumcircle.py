from dataclasses import dataclass
from typing import Optional

import numpy as np

from geometry import PointSphere, normalize
from util import DEGENERATE_EPSILON, Vector


@dataclass(frozen=True)
class Circumcircle:
    center: PointSphere

    # Geodesic radius
    radius: float

    # Colatitude of the point of the circle farthest from the north pole. Once
    # the sweep line reaches it, the circle is tangent to the sweep line.
    lowest_theta: float


def get_circumcircle(a: Vector, b: Vector, c: Vector) -> Optional[Circumcircle]:
    """Return the circle through the three unit vectors, or `None` if they
    (nearly) coincide and the circle is not well defined.

    Every circle on the sphere has two centers, `n` and `-n`. We pick the one
    around which `a, b, c` run clockwise when looking at the sphere from
    outside: for three consecutive beach arcs ordered by azimuth that is the
    point where the middle arc gets squeezed out.
    """
    # Normal of the plane through the three points; `a, b, c` run
    # counterclockwise around it
    normal = np.cross(a, b) + np.cross(b, c) + np.cross(c, a)
    if not np.all(np.isfinite(normal)) or np.linalg.norm(normal) < DEGENERATE_EPSILON:
        return None

    center = PointSphere.from_cartesian(normalize(-normal))
    radius = float(np.arccos(np.clip(center.cartesian.dot(a), -1, 1)))

    return Circumcircle(center, radius, center.theta + radius)
