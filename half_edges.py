import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from util import Edge, Vector, sort_edge


@dataclass
class HalfEdge:
    """Boundary between the cells of `left_site` and `right_site`, traced by
    one breakpoint of the beach line.

    Half-edges born at a circle event start at a Voronoi vertex (`start`).
    Half-edges born at a site event come in pairs that leave the same point
    on the beach line (`origin`) in opposite directions; that point is not a
    vertex, so `start` stays `None` and the pair is joined through `twin`.
    """

    left_site: int
    right_site: int
    start: Optional[int] = None
    origin: Optional[Vector] = None
    twin: Optional[int] = None
    end: Optional[int] = None
    is_finished: bool = False


class HalfEdgeBuilder:
    def __init__(self) -> None:
        self.half_edges: List[HalfEdge] = []
        self.vertices: List[Vector] = []

    def add_vertex(self, point: Vector) -> int:
        self.vertices.append(point)
        return len(self.vertices) - 1

    def add_twin_pair(
        self, left_site: int, right_site: int, origin: Vector
    ) -> Tuple[int, int]:
        """Start the two half-edges on either side of a freshly inserted arc.
        Return `(left|right, right|left)`."""
        first = len(self.half_edges)
        second = first + 1
        self.half_edges.append(HalfEdge(left_site, right_site, origin=origin, twin=second))
        self.half_edges.append(HalfEdge(right_site, left_site, origin=origin, twin=first))

        return first, second

    def add_half_edge(self, left_site: int, right_site: int, start_vertex: int) -> int:
        self.half_edges.append(HalfEdge(left_site, right_site, start=start_vertex))
        return len(self.half_edges) - 1

    def finish(self, edge_idx: Optional[int], end_vertex: int) -> None:
        if edge_idx is None:
            logging.warning(f"No half-edge to finish at vertex {end_vertex}")
            return

        edge = self.half_edges[edge_idx]
        if edge.is_finished:
            # A finished half-edge is never reopened
            logging.warning(
                f"Half-edge {edge_idx} already ends at vertex {edge.end}, ignoring vertex {end_vertex}"
            )
            return

        edge.end = end_vertex
        edge.is_finished = True

    def open_half_edges(self) -> List[int]:
        return [idx for idx, edge in enumerate(self.half_edges) if not edge.is_finished]


@dataclass(frozen=True, eq=False)
class VoronoiDiagram:
    """Voronoi diagram and Delaunay graph of points on the unit sphere.

    `voronoi_edges[i]` is a pair of indices into `vertices` and
    `delaunay_edges[i]` the pair of indices into `sites` of the two cells that
    meet along it, so both lists have the same length and order.
    """

    sites: Vector
    vertices: Vector
    voronoi_edges: List[Edge]
    delaunay_edges: List[Edge]

    # Circle events dropped because the three sites had no circumcircle
    n_degenerate: int = 0

    # Half-edges that never got an end vertex and were dropped
    n_open_edges: int = 0

    cancelled: bool = False

    @property
    def n_cells(self) -> int:
        return len(self.sites)

    @property
    def degenerate(self) -> bool:
        return self.n_degenerate > 0 or (self.n_open_edges > 0 and not self.cancelled)


def assemble(
    sites: Vector,
    builder: HalfEdgeBuilder,
    n_degenerate: int = 0,
    cancelled: bool = False,
    rotation: Optional[Vector] = None,
) -> VoronoiDiagram:
    """Turn the half-edges into a diagram. Twin pairs are joined into one
    edge between their two end vertices; anything still open is dropped.

    `rotation` is the matrix the sites were rotated by before the sweep; its
    inverse is applied to the vertices.
    """
    voronoi_edges: List[Edge] = []
    delaunay_edges: List[Edge] = []
    n_open = 0

    for idx, edge in enumerate(builder.half_edges):
        if edge.start is None:
            assert edge.twin is not None
            if edge.twin < idx:
                continue
            twin = builder.half_edges[edge.twin]
            if not (edge.is_finished and twin.is_finished):
                n_open += 1
                continue
            endpoints = (edge.end, twin.end)
        else:
            if not edge.is_finished:
                n_open += 1
                continue
            endpoints = (edge.start, edge.end)

        voronoi_edges.append(sort_edge(endpoints))
        delaunay_edges.append(sort_edge((edge.left_site, edge.right_site)))

    vertices = (
        np.array(builder.vertices, dtype=np.float64)
        if len(builder.vertices) > 0
        else np.empty((0, 3))
    )
    if rotation is not None:
        # Row vectors: `v @ R` applies the transpose, i. e. the inverse rotation
        vertices = vertices.dot(rotation)

    return VoronoiDiagram(
        sites=sites,
        vertices=vertices,
        voronoi_edges=voronoi_edges,
        delaunay_edges=delaunay_edges,
        n_degenerate=n_degenerate,
        n_open_edges=n_open,
        cancelled=cancelled,
    )
