from typing import Dict, List, Set, Tuple

import numpy as np
from scipy.spatial import SphericalVoronoi

from util import Edge, Vector, shift, sort_edge, sort_edges


def get_voronoi_scipy(points: List[Vector]) -> Tuple[Vector, List[Edge], List[Edge]]:
    """Voronoi diagram of points on the unit sphere as computed by scipy.

    Return `vertices, voronoi_edges, delaunay_edges` in the same form as the
    sweep: edges are sorted index pairs into the vertices and sites.
    """
    voronoi_diagram = SphericalVoronoi(np.array(points))
    voronoi_diagram.sort_vertices_of_regions()

    # For each Voronoi edge, store the sites whose regions contain it
    edge_sites: Dict[Edge, List[int]] = {}
    for site, region in enumerate(voronoi_diagram.regions):
        for current, next in zip(region, shift(region)):
            edge_sites.setdefault(sort_edge((current, next)), []).append(site)

    voronoi_edges: List[Edge] = []
    delaunay_edges: List[Edge] = []
    for edge, sites in sorted(edge_sites.items()):
        if len(sites) != 2:
            raise ValueError(
                f"Voronoi edge {edge} borders {len(sites)} regions instead of 2"
            )
        voronoi_edges.append(edge)
        delaunay_edges.append(sort_edge((sites[0], sites[1])))

    return voronoi_diagram.vertices, voronoi_edges, delaunay_edges


def get_delaunay_edges_scipy(points: List[Vector]) -> Set[Edge]:
    _, _, delaunay_edges = get_voronoi_scipy(points)

    return set(sort_edges(delaunay_edges))
