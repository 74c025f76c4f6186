import logging
from abc import ABCMeta, abstractmethod
from typing import List, Optional, Sequence, Union

import numpy as np
import numpy.typing as npt

from beach_line import BeachLine
from circumcircle import get_circumcircle
from event_queue import CircleEvent, EventQueue, SiteEvent
from geometry import PointSphere, normalize, phi_to_point
from half_edges import HalfEdgeBuilder, VoronoiDiagram, assemble
from util import SWEEP_EPSILON, Vector, get_rotation_matrix_to_north

THREAD_NUMBERS = (1, 2, 4)


class SweepSnapshot:
    """Read-only view of a running sweep, handed to observers after every
    event. The diagram is only assembled when asked for."""

    def __init__(self, sweep: "SphereSweep", arc: Optional[int]) -> None:
        self._sweep = sweep
        self.arc_site = None if arc is None else sweep.beach_line.arcs[arc].site
        self.sweep_theta = sweep.sweep_theta
        self.cells = sweep.beach_line.cells()

    @property
    def diagram(self) -> VoronoiDiagram:
        return self._sweep.current_diagram()


class SweepObserver(metaclass=ABCMeta):
    @abstractmethod
    def on_event(self, snapshot: SweepSnapshot) -> None:
        # Called after every processed event. Must not modify the sweep.
        raise NotImplementedError()

    @abstractmethod
    def should_continue(self) -> bool:
        # Called between events and may block, e.g. to step through the sweep.
        # Returning False cancels the sweep.
        raise NotImplementedError()


class NullObserver(SweepObserver):
    def on_event(self, snapshot: SweepSnapshot) -> None:
        pass

    def should_continue(self) -> bool:
        return True


class SphereSweep:
    """Sweep a circle of latitude from the north pole to the south pole (and,
    for the last circle events, past it), keeping the beach line of arcs
    between the swept and the unswept part of the sphere."""

    def __init__(
        self,
        points: npt.NDArray[np.float64],
        seed: Optional[int] = None,
        observer: Optional[SweepObserver] = None,
        rotation: Optional[npt.NDArray[np.float64]] = None,
    ) -> None:
        self.points = points
        self.rotation = rotation
        swept_points = points if rotation is None else points.dot(rotation.T)
        self.sites = [PointSphere.from_cartesian(point) for point in swept_points]

        self.queue = EventQueue(self.sites)
        self.beach_line = BeachLine(self.sites, rng=np.random.default_rng(seed))
        self.builder = HalfEdgeBuilder()
        self.observer = observer if observer is not None else NullObserver()

        self.sweep_theta = 0.0
        self.n_degenerate = 0
        self.cancelled = False

    def run(self) -> VoronoiDiagram:
        while self.queue:
            if not self.observer.should_continue():
                logging.warning(
                    f"Sweep cancelled at theta={self.sweep_theta:.6f} with {len(self.queue)} events left"
                )
                self.cancelled = True
                break

            event = self.queue.pop()
            if isinstance(event, SiteEvent):
                self.sweep_theta = event.theta
                arc = self.handle_site_event(event)
            else:
                if not self.beach_line.is_pending(event.arc, event.event_id):
                    logging.debug(f"Skipping stale circle event {event.event_id}")
                    continue
                self.sweep_theta = event.theta
                arc = self.handle_circle_event(event)

            self.observer.on_event(SweepSnapshot(self, arc))

        diagram = self.current_diagram()
        if diagram.n_open_edges > 0 and not self.cancelled:
            logging.warning(
                f"Dropped {diagram.n_open_edges} open edges, the input is degenerate"
            )

        return diagram

    def current_diagram(self) -> VoronoiDiagram:
        return assemble(
            self.points,
            self.builder,
            n_degenerate=self.n_degenerate,
            cancelled=self.cancelled,
            rotation=self.rotation,
        )

    def handle_site_event(self, event: SiteEvent) -> int:
        logging.debug(f"-- site {event.site} (theta={event.theta:.6f}, phi={event.phi:.6f}) --")
        beach_line = self.beach_line

        if len(beach_line) == 0:
            return beach_line.add_initial_arc(event.site)

        arc = beach_line.find_arc(event.phi, self.sweep_theta)
        record = beach_line.arcs[arc]
        origin = phi_to_point(self.sites[record.site], event.phi, self.sweep_theta)
        logging.debug(f"Splitting arc of site {record.site}")

        # The circle event of the split arc is a false alarm
        record.event = None

        new_arc = beach_line.insert_after(arc, event.site)
        left_edge, right_edge = self.builder.add_twin_pair(
            record.site, event.site, origin.cartesian
        )

        if len(beach_line) == 2:
            # A lone arc wraps all the way around, so the new arc borders it on both sides
            record.right_edge = beach_line.arcs[new_arc].left_edge = left_edge
            beach_line.arcs[new_arc].right_edge = record.left_edge = right_edge
            return arc

        copy = beach_line.insert_after(new_arc, record.site)
        beach_line.arcs[copy].right_edge = record.right_edge
        record.right_edge = beach_line.arcs[new_arc].left_edge = left_edge
        beach_line.arcs[new_arc].right_edge = beach_line.arcs[copy].left_edge = right_edge

        self.check_circle_event(arc)
        self.check_circle_event(copy)

        return arc

    def handle_circle_event(self, event: CircleEvent) -> int:
        logging.debug(
            f"-- circle {event.event_id} sites {event.sites} (theta={event.theta:.6f}) --"
        )
        beach_line = self.beach_line
        arc = event.arc
        record = beach_line.arcs[arc]
        left = beach_line.prev_arc(arc)
        right = beach_line.next_arc(arc)
        vertex = self.builder.add_vertex(event.circumcircle.center.cartesian)

        if len(beach_line) == 3:
            # The last three arcs close up around the final vertex at once
            self.builder.finish(record.left_edge, vertex)
            self.builder.finish(record.right_edge, vertex)
            self.builder.finish(beach_line.arcs[right].right_edge, vertex)
            beach_line.clear()
            return arc

        self.builder.finish(record.left_edge, vertex)
        self.builder.finish(record.right_edge, vertex)
        beach_line.remove(arc)

        left_record = beach_line.arcs[left]
        right_record = beach_line.arcs[right]
        new_edge = self.builder.add_half_edge(left_record.site, right_record.site, vertex)
        left_record.right_edge = right_record.left_edge = new_edge

        self.check_circle_event(left)
        self.check_circle_event(right)

        return arc

    def check_circle_event(self, arc: int) -> None:
        """Schedule the circle event of `arc` with its current neighbours,
        replacing whatever was pending before."""
        beach_line = self.beach_line
        record = beach_line.arcs[arc]
        record.event = None

        left = beach_line.arcs[beach_line.prev_arc(arc)].site
        right = beach_line.arcs[beach_line.next_arc(arc)].site
        sites = (left, record.site, right)
        if len(set(sites)) < 3:
            return

        circumcircle = get_circumcircle(*(self.sites[site].cartesian for site in sites))
        if circumcircle is None:
            self.n_degenerate += 1
            logging.warning(f"Sites {sites} have no circumcircle, dropping circle event")
            return

        if circumcircle.lowest_theta < self.sweep_theta - SWEEP_EPSILON:
            logging.debug(
                f"Circle of sites {sites} lies behind the sweep line ({circumcircle.lowest_theta:.6f})"
            )
            return

        event = self.queue.push_circle_event(arc, sites, circumcircle)
        record.event = event.event_id


def generate_voronoi(
    points: Union[Sequence[Vector], npt.NDArray[np.floating]],
    num_threads: int = 1,
    observer: Optional[SweepObserver] = None,
    seed: Optional[int] = None,
    sweep_pole: Optional[Vector] = None,
) -> VoronoiDiagram:
    """Compute the Voronoi diagram and Delaunay graph of points on the unit sphere.

    Points are normalised onto the sphere first. `seed` fixes the skip-list
    heights; `sweep_pole` is the direction the sweep starts from (the north
    pole by default). `num_threads` may be 1, 2 or 4; since no hemisphere merge
    is implemented, 2 and 4 run the same single sweep.
    """
    if num_threads not in THREAD_NUMBERS:
        raise ValueError(
            f"Number of threads must be one of {THREAD_NUMBERS} but got {num_threads}"
        )
    if num_threads != 1:
        logging.warning(
            f"Partitioned sweep with {num_threads} threads is not available, running a single sweep"
        )

    points_arr = np.array(points, dtype=np.float64)
    if points_arr.size == 0:
        points_arr = points_arr.reshape((0, 3))
    if points_arr.ndim != 2 or points_arr.shape[1] != 3:
        raise ValueError(f"Points must be of shape (n, 3) but got {points_arr.shape}")
    if not np.all(np.isfinite(points_arr)):
        raise ValueError("Points must have finite coordinates")
    points_arr = np.array([normalize(point) for point in points_arr]).reshape((-1, 3))

    rotation = None
    if sweep_pole is not None:
        pole = np.array(sweep_pole, dtype=np.float64)
        if pole.shape != (3,) or np.linalg.norm(pole) == 0:
            raise ValueError(f"Sweep pole must be a non-zero 3-vector but got {sweep_pole}")
        rotation = get_rotation_matrix_to_north(pole / np.linalg.norm(pole))

    diagram = SphereSweep(points_arr, seed=seed, observer=observer, rotation=rotation).run()
    logging.info(
        f"Voronoi diagram of {diagram.n_cells} sites: {len(diagram.vertices)} vertices, "
        f"{len(diagram.voronoi_edges)} edges"
    )

    return diagram


def get_cells(diagram: VoronoiDiagram) -> List[List[int]]:
    """For every site, the indices of the Voronoi edges bounding its cell"""
    cells: List[List[int]] = [[] for _ in range(diagram.n_cells)]
    for idx, (site1, site2) in enumerate(diagram.delaunay_edges):
        cells[site1].append(idx)
        cells[site2].append(idx)

    return cells
