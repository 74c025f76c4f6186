import numpy as np

from half_edges import HalfEdgeBuilder, assemble
from util import get_rotation_matrix


def test_twin_pair_becomes_one_edge():
    builder = HalfEdgeBuilder()
    first, second = builder.add_twin_pair(4, 2, np.array([1.0, 0, 0]))
    v0 = builder.add_vertex(np.array([0, 1.0, 0]))
    v1 = builder.add_vertex(np.array([0, -1.0, 0]))
    builder.finish(first, v1)
    assert builder.open_half_edges() == [second]
    builder.finish(second, v0)

    diagram = assemble(np.zeros((5, 3)), builder)

    assert builder.half_edges[first].twin == second
    assert diagram.voronoi_edges == [(0, 1)]
    assert diagram.delaunay_edges == [(2, 4)]
    assert not diagram.degenerate


def test_open_edges_are_dropped():
    builder = HalfEdgeBuilder()
    first, _ = builder.add_twin_pair(0, 1, np.array([1.0, 0, 0]))
    vertex = builder.add_vertex(np.array([0, 0, 1.0]))
    builder.finish(first, vertex)
    builder.add_half_edge(1, 2, vertex)

    diagram = assemble(np.zeros((3, 3)), builder)
    assert diagram.voronoi_edges == []
    assert diagram.n_open_edges == 2
    assert diagram.degenerate

    cancelled = assemble(np.zeros((3, 3)), builder, cancelled=True)
    assert not cancelled.degenerate


def test_finished_edge_keeps_its_end():
    builder = HalfEdgeBuilder()
    v0 = builder.add_vertex(np.array([1.0, 0, 0]))
    v1 = builder.add_vertex(np.array([0, 1.0, 0]))
    edge = builder.add_half_edge(0, 1, v0)
    builder.finish(edge, v1)
    builder.finish(edge, v0)
    builder.finish(None, v0)

    assert builder.half_edges[edge].end == v1
    assert assemble(np.zeros((2, 3)), builder).voronoi_edges == [(0, 1)]


def test_vertices_are_rotated_back():
    rotation = get_rotation_matrix(0.4, -1.1)
    point = np.array([0.6, 0.0, 0.8])
    builder = HalfEdgeBuilder()
    builder.add_vertex(rotation.dot(point))

    diagram = assemble(np.zeros((0, 3)), builder, rotation=rotation)

    assert np.allclose(diagram.vertices[0], point)
