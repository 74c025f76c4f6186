import numpy as np

from circumcircle import get_circumcircle
from geometry import PointSphere
from util import random_scatter_sphere


def ring(theta: float, phis) -> list:
    return [PointSphere(theta, phi).cartesian for phi in phis]


def test_center_is_equidistant():
    np.random.seed(3)
    a, b, c = random_scatter_sphere(3)
    circumcircle = get_circumcircle(a, b, c)
    assert circumcircle is not None

    center = circumcircle.center.cartesian
    for point in (a, b, c):
        assert np.isclose(np.arccos(np.clip(center.dot(point), -1, 1)), circumcircle.radius)
    assert np.isclose(circumcircle.lowest_theta, circumcircle.center.theta + circumcircle.radius)


def test_clockwise_triple_has_near_center():
    # Seen from above the north pole, decreasing azimuth runs clockwise
    circumcircle = get_circumcircle(*ring(0.3, (0.0, -2 * np.pi / 3, -4 * np.pi / 3)))
    assert circumcircle is not None

    assert np.isclose(circumcircle.center.theta, 0, atol=1e-7)
    assert np.isclose(circumcircle.radius, 0.3)
    assert np.isclose(circumcircle.lowest_theta, 0.3)


def test_counterclockwise_triple_has_far_center():
    circumcircle = get_circumcircle(*ring(0.3, (0.0, 2 * np.pi / 3, 4 * np.pi / 3)))
    assert circumcircle is not None

    assert np.isclose(circumcircle.center.theta, np.pi)
    assert np.isclose(circumcircle.radius, np.pi - 0.3)
    # The circle is only tangent to the sweep line once it has passed the south pole
    assert circumcircle.lowest_theta > np.pi


def test_great_circle():
    circumcircle = get_circumcircle(*ring(np.pi / 2, (0.0, -1.0, -2.5)))
    assert circumcircle is not None

    assert np.isclose(circumcircle.radius, np.pi / 2)
    assert np.isclose(circumcircle.center.theta, 0, atol=1e-7)


def test_coincident_points():
    a, b = random_scatter_sphere(2)

    assert get_circumcircle(a, a, a) is None
    assert get_circumcircle(a, a, b) is None


def test_nearly_coincident_points():
    a = PointSphere(1.0, 1.0)
    b = PointSphere(1.0 + 1e-8, 1.0)
    c = PointSphere(1.0, 1.0 + 1e-8)

    assert get_circumcircle(a.cartesian, b.cartesian, c.cartesian) is None
