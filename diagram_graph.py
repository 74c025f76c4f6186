from typing import List

import networkx

from half_edges import VoronoiDiagram


def delaunay_graph(diagram: VoronoiDiagram) -> networkx.Graph:
    """Graph on the sites whose edges are the Delaunay edges"""
    graph = networkx.Graph()
    graph.add_nodes_from(range(diagram.n_cells))
    graph.add_edges_from(diagram.delaunay_edges)

    return graph


def voronoi_graph(diagram: VoronoiDiagram) -> networkx.Graph:
    """Graph on the Voronoi vertices whose edges are the Voronoi edges"""
    graph = networkx.Graph()
    graph.add_nodes_from(range(len(diagram.vertices)))
    graph.add_edges_from(diagram.voronoi_edges)

    return graph


def euler_characteristic(diagram: VoronoiDiagram) -> int:
    """V - E + F of the diagram, with one face per cell. It is 2 for every
    complete diagram of the sphere."""
    return len(diagram.vertices) - len(diagram.voronoi_edges) + diagram.n_cells


def vertex_degrees(diagram: VoronoiDiagram) -> List[int]:
    graph = voronoi_graph(diagram)

    return [degree for _, degree in sorted(graph.degree())]
