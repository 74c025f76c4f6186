import logging
from typing import Optional, cast

import numpy as np

from util import DEGENERATE_EPSILON, TAU, Vector


class PointSphere:
    """Point on the unit sphere.

    Stored as colatitude `theta` (angle from the north pole) and azimuth `phi`
    (angle around the z-axis, measured from the x-axis, in (-pi, pi]). The
    cartesian coordinates are computed on first access and cached. Points are
    ordered lexicographically by `(theta, phi)`, which is the order in which
    the sweep line reaches them.
    """

    def __init__(
        self, theta: float, phi: float, cartesian: Optional[Vector] = None
    ) -> None:
        self.theta = float(theta)
        self.phi = float(phi)
        self._cartesian = cartesian

    @classmethod
    def from_cartesian(cls, point: Vector) -> "PointSphere":
        x, y, z = point
        theta = np.arccos(np.clip(z, -1, 1))

        return cls(theta, azimuth(x, y), np.array(point, dtype=np.float64))

    @property
    def cartesian(self) -> Vector:
        if self._cartesian is None:
            sin_theta = np.sin(self.theta)
            self._cartesian = np.array(
                [
                    sin_theta * np.cos(self.phi),
                    sin_theta * np.sin(self.phi),
                    np.cos(self.theta),
                ]
            )

        return self._cartesian

    def __lt__(self, other: "PointSphere") -> bool:
        return (self.theta, self.phi) < (other.theta, other.phi)

    def __gt__(self, other: "PointSphere") -> bool:
        return (self.theta, self.phi) > (other.theta, other.phi)

    def __repr__(self) -> str:
        return f"PointSphere(theta={self.theta:.6f}, phi={self.phi:.6f})"


def azimuth(x: float, y: float) -> float:
    # Points on the z-axis have no azimuth; pin them to 0 instead of relying on atan2(0, 0)
    if x == 0 and y == 0:
        return 0.0

    return wrap_angle(float(np.arctan2(y, x)))


def wrap_angle(phi: float) -> float:
    """Map an angle into (-pi, pi]"""
    wrapped = (phi + np.pi) % TAU - np.pi
    if wrapped <= -np.pi:
        wrapped += TAU

    return float(wrapped)


def normalize(v: Vector) -> Vector:
    """Scale `v` to unit length. The zero vector has no direction; it is
    returned as zeros and a warning is logged instead of dividing by zero."""
    norm = np.linalg.norm(v)
    if norm == 0:
        logging.warning("Cannot normalize zero vector, leaving it at the origin")
        return np.zeros(3)

    return cast(Vector, np.asarray(v, dtype=np.float64) / norm)


def cross_product(a: Vector, b: Vector) -> Vector:
    return cast(Vector, np.cross(a, b))


def angle_between(a: PointSphere, b: PointSphere) -> float:
    """Great-circle angle between two points on the unit sphere"""
    return float(np.arccos(np.clip(a.cartesian.dot(b.cartesian), -1, 1)))


def geodesic_distance(v: Vector, w: Vector) -> float:
    # Need to clip since numeric errors may result in dot product > 1 even if inputs all have norm 1
    cos_angle = v.dot(w) / (np.linalg.norm(v) * np.linalg.norm(w))

    return float(np.arccos(np.clip(cos_angle, -1, 1)))


def arc_theta(site: PointSphere, phi: float, sweep_theta: float) -> float:
    """Colatitude of the beach arc of `site` at azimuth `phi`.

    The arc is the set of points `q` which are as far from `site` as from the
    sweep line, `angle(q, site) == sweep_theta - q.theta`. Expanding the cosine
    of both sides gives `tan(q.theta) = a / d` below, with `a >= 0` as long as
    the site has already been swept.
    """
    a = np.cos(site.theta) - np.cos(sweep_theta)
    d = np.sin(sweep_theta) - np.sin(site.theta) * np.cos(phi - site.phi)

    return float(np.arctan2(a, d))


def phi_to_point(site: PointSphere, phi: float, sweep_theta: float) -> PointSphere:
    """Point on the beach arc of `site` at azimuth `phi`"""
    return PointSphere(arc_theta(site, phi, sweep_theta), phi)


def parabolic_intersection(
    left: PointSphere, right: PointSphere, sweep_theta: float
) -> float:
    """Azimuth of the breakpoint between the beach arcs of `left` and `right`,
    where `left` is the arc that comes first in increasing azimuth.

    Equating the arc colatitudes of both sites yields
    `A cos(phi) + B sin(phi) = C`. The two arcs cross twice; the breakpoint we
    want is the one where `right` takes over from `left`, which is the root
    `atan2(B, A) + acos(C / |(A, B)|)`.
    """
    cos_sweep = np.cos(sweep_theta)
    sin_sweep = np.sin(sweep_theta)
    a_left = np.cos(left.theta) - cos_sweep
    a_right = np.cos(right.theta) - cos_sweep
    sin_left = np.sin(left.theta)
    sin_right = np.sin(right.theta)

    A = a_right * sin_left * np.cos(left.phi) - a_left * sin_right * np.cos(right.phi)
    B = a_right * sin_left * np.sin(left.phi) - a_left * sin_right * np.sin(right.phi)
    C = (a_right - a_left) * sin_sweep

    rho = np.hypot(A, B)
    if rho < DEGENERATE_EPSILON:
        # Both arcs have collapsed onto the same meridian
        logging.debug(f"Degenerate breakpoint between {left} and {right}")
        return left.phi

    return wrap_angle(float(np.arctan2(B, A) + np.arccos(np.clip(C / rho, -1, 1))))
