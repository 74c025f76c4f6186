from typing import List

import numpy as np
import pytest

from beach_line import HEAD, NIL, BeachLine, random_height
from geometry import PointSphere, wrap_angle


def check_links(beach_line: BeachLine, expected: List[int]) -> None:
    """Compare the beach line against the expected arc order and verify the
    links on every level"""
    assert list(beach_line) == expected
    assert len(beach_line) == len(expected)

    if expected:
        assert beach_line.first == expected[0]
        assert beach_line.tail == expected[-1]
        for idx, arc in enumerate(expected):
            assert beach_line.next_arc(arc) == expected[(idx + 1) % len(expected)]
            assert beach_line.prev_arc(arc) == expected[idx - 1]

    for level in range(beach_line.max_height):
        # Every level is the subsequence of arcs tall enough for it
        tall = [arc for arc in expected if beach_line.arcs[arc].height > level]
        on_level = []
        node = HEAD
        while beach_line.arcs[node].next[level] != NIL:
            succ = beach_line.arcs[node].next[level]
            assert beach_line.arcs[succ].prev[level] == node
            on_level.append(succ)
            node = succ
        assert on_level == tall


def test_random_height():
    rng = np.random.default_rng(0)
    heights = [random_height(rng, 5) for _ in range(2000)]

    assert min(heights) == 1
    assert max(heights) == 5
    assert 1.7 < np.mean(heights) < 2.2


def test_initial_arc():
    beach_line = BeachLine([PointSphere(0.0, 0.0)], rng=np.random.default_rng(1))
    arc = beach_line.add_initial_arc(0)

    check_links(beach_line, [arc])
    assert beach_line.next_arc(arc) == arc
    assert beach_line.prev_arc(arc) == arc
    with pytest.raises(ValueError):
        beach_line.add_initial_arc(0)


@pytest.mark.parametrize("seed", range(5))
def test_insert_and_remove(seed: int):
    rng = np.random.default_rng(seed)
    beach_line = BeachLine([], rng=np.random.default_rng(seed), max_height=6)
    expected = [beach_line.add_initial_arc(0)]

    for step in range(300):
        if len(expected) > 1 and rng.random() < 0.4:
            arc = expected.pop(rng.integers(len(expected)))
            beach_line.remove(arc)
            assert not beach_line.arcs[arc].alive
        else:
            idx = rng.integers(len(expected))
            arc = beach_line.insert_after(expected[idx], step)
            expected.insert(idx + 1, arc)

        if step % 25 == 0:
            check_links(beach_line, expected)

    check_links(beach_line, expected)
    beach_line.clear()
    check_links(beach_line, [])


def test_pending_event():
    beach_line = BeachLine([], rng=np.random.default_rng(2))
    arc = beach_line.add_initial_arc(0)
    beach_line.arcs[arc].event = 7

    assert beach_line.is_pending(arc, 7)
    assert not beach_line.is_pending(arc, 8)

    other = beach_line.insert_after(arc, 1)
    beach_line.arcs[other].event = 9
    beach_line.remove(other)
    assert not beach_line.is_pending(other, 9)


def test_find_arc():
    # Sites on one circle of latitude, evenly spaced in azimuth: every arc is
    # centered on its site and the breakpoints lie halfway in between
    n = 8
    spacing = 2 * np.pi / n
    phis = [wrap_angle(-np.pi + 0.3 + k * spacing) for k in range(n)]
    sites = [PointSphere(0.5, phi) for phi in phis]
    beach_line = BeachLine(sites, rng=np.random.default_rng(3))

    # Start in the middle so that the azimuth seam falls inside the list
    order = [(3 + k) % n for k in range(n)]
    arcs = [beach_line.add_initial_arc(order[0])]
    for site in order[1:]:
        arcs.append(beach_line.insert_after(arcs[-1], site))
    arc_of_site = {beach_line.arcs[arc].site: arc for arc in arcs}

    assert np.isclose(
        beach_line.breakpoint(arc_of_site[0], arc_of_site[1], 0.6),
        wrap_angle(phis[0] + spacing / 2),
    )
    for site, phi in enumerate(phis):
        assert beach_line.find_arc(phi, 0.6) == arc_of_site[site]
        assert beach_line.find_arc(wrap_angle(phi + 0.4 * spacing), 0.6) == arc_of_site[site]
        assert beach_line.find_arc(wrap_angle(phi + 0.6 * spacing), 0.6) == arc_of_site[(site + 1) % n]


def test_find_arc_on_empty_beach_line():
    beach_line = BeachLine([])

    with pytest.raises(ValueError):
        beach_line.find_arc(0.0, 1.0)
