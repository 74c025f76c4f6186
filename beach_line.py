import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence

import numpy as np

from geometry import PointSphere, arc_theta, parabolic_intersection
from util import DEGENERATE_EPSILON, MAX_SKIPLIST_HEIGHT, TAU

NIL = -1

# Index of the sentinel record in front of the first arc
HEAD = 0


@dataclass
class Arc:
    """Beach-line record for one site.

    Arcs live in an arena (`BeachLine.arcs`) and refer to each other by index.
    `next[level]` and `prev[level]` are the skip-list links for every level
    below `height`. An arc never leaves the arena; removal only unlinks it and
    clears `alive`.
    """

    site: int
    height: int
    next: List[int]
    prev: List[int]

    # Identifier of the pending circle event that would squeeze this arc out
    event: Optional[int] = None

    # Half-edges traced by the breakpoints on either side
    left_edge: Optional[int] = None
    right_edge: Optional[int] = None

    alive: bool = True


def random_height(
    rng: np.random.Generator, max_height: int = MAX_SKIPLIST_HEIGHT
) -> int:
    height = 1
    while height < max_height and rng.random() < 0.5:
        height += 1

    return height


@dataclass
class BeachLine:
    """The beach line as a skip list of arcs, ordered by azimuth.

    On the sphere the beach line is cyclic: the last arc is followed by the
    first. Level 0 is stored as a linear list between the sentinel and `tail`
    and `next_arc` / `prev_arc` close the cycle. Search keys are breakpoint
    azimuths measured from the left breakpoint of the first arc, so they
    increase along the list no matter where the -pi/pi seam currently lies.
    """

    sites: Sequence[PointSphere]
    rng: np.random.Generator = field(default_factory=np.random.default_rng)
    max_height: int = MAX_SKIPLIST_HEIGHT

    def __post_init__(self) -> None:
        self.arcs: List[Arc] = [
            Arc(
                site=NIL,
                height=self.max_height,
                next=[NIL] * self.max_height,
                prev=[NIL] * self.max_height,
            )
        ]
        self.tail = NIL
        self.size = 0

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[int]:
        arc = self.arcs[HEAD].next[0]
        while arc != NIL:
            yield arc
            arc = self.arcs[arc].next[0]

    @property
    def first(self) -> int:
        return self.arcs[HEAD].next[0]

    def next_arc(self, arc: int) -> int:
        following = self.arcs[arc].next[0]
        return self.first if following == NIL else following

    def prev_arc(self, arc: int) -> int:
        preceding = self.arcs[arc].prev[0]
        return self.tail if preceding == HEAD else preceding

    def cells(self) -> List[int]:
        """Sites of the arcs in azimuth order"""
        return [self.arcs[arc].site for arc in self]

    def is_pending(self, arc: int, event_id: int) -> bool:
        record = self.arcs[arc]
        return record.alive and record.event == event_id

    def _new_arc(self, site: int) -> int:
        height = random_height(self.rng, self.max_height)
        self.arcs.append(Arc(site, height, [NIL] * height, [NIL] * height))

        return len(self.arcs) - 1

    def add_initial_arc(self, site: int) -> int:
        if self.size > 0:
            raise ValueError(
                f"Initial arc can only be added to an empty beach line, but it holds {self.size} arcs"
            )
        arc = self._new_arc(site)
        record = self.arcs[arc]
        for level in range(record.height):
            record.prev[level] = HEAD
            self.arcs[HEAD].next[level] = arc
        self.tail = arc
        self.size = 1

        return arc

    def insert_after(self, anchor: int, site: int) -> int:
        """Link a new arc for `site` directly behind `anchor` and return it"""
        arc = self._new_arc(site)
        record = self.arcs[arc]

        # The predecessor on each level is the closest arc at or before
        # `anchor` that is tall enough; walk back from the one found on the
        # level below
        pred = anchor
        for level in range(record.height):
            while self.arcs[pred].height <= level:
                pred = self.arcs[pred].prev[level - 1]
            succ = self.arcs[pred].next[level]
            record.prev[level] = pred
            record.next[level] = succ
            self.arcs[pred].next[level] = arc
            if succ != NIL:
                self.arcs[succ].prev[level] = arc

        if self.tail == anchor:
            self.tail = arc
        self.size += 1

        return arc

    def remove(self, arc: int) -> None:
        record = self.arcs[arc]
        for level in range(record.height):
            pred = record.prev[level]
            succ = record.next[level]
            self.arcs[pred].next[level] = succ
            if succ != NIL:
                self.arcs[succ].prev[level] = pred

        if self.tail == arc:
            self.tail = NIL if record.prev[0] == HEAD else record.prev[0]
        record.alive = False
        record.event = None
        self.size -= 1

    def clear(self) -> None:
        for arc in list(self):
            self.remove(arc)

    def breakpoint(self, left: int, right: int, sweep_theta: float) -> float:
        return parabolic_intersection(
            self.sites[self.arcs[left].site],
            self.sites[self.arcs[right].site],
            sweep_theta,
        )

    def _key(self, arc: int, origin: float, sweep_theta: float) -> float:
        # Right breakpoint of `arc`, measured from `origin`
        if arc == self.tail:
            return TAU
        right_breakpoint = self.breakpoint(arc, self.next_arc(arc), sweep_theta)

        return (right_breakpoint - origin) % TAU

    def find_arc(self, phi: float, sweep_theta: float) -> int:
        """Return the arc above azimuth `phi` when the sweep line is at `sweep_theta`"""
        if self.size == 0:
            raise ValueError("Cannot search an empty beach line")
        if self.size == 1:
            return self.first

        origin = self.breakpoint(self.tail, self.first, sweep_theta)
        target = (phi - origin) % TAU

        node = HEAD
        for level in reversed(range(self.max_height)):
            succ = self.arcs[node].next[level]
            while succ != NIL and self._key(succ, origin, sweep_theta) < target:
                node = succ
                succ = self.arcs[node].next[level]

        found = self.arcs[node].next[0]
        if found == NIL:
            logging.debug(f"Azimuth {phi:.6f} wrapped past the last arc")
            found = self.first

        return self._climb(found, phi, sweep_theta)

    def _height_at(self, arc: int, phi: float, sweep_theta: float) -> float:
        return arc_theta(self.sites[self.arcs[arc].site], phi, sweep_theta)

    def _climb(self, arc: int, phi: float, sweep_theta: float) -> int:
        # Zero-width arcs have both breakpoints at the same azimuth, and rounding
        # may then put the search next to the right arc. The beach line is the
        # upper envelope of the arcs, so step to a neighbour that lies above.
        theta = self._height_at(arc, phi, sweep_theta)
        for _ in range(self.size):
            candidates = [
                (self._height_at(neighbour, phi, sweep_theta), neighbour)
                for neighbour in (self.prev_arc(arc), self.next_arc(arc))
            ]
            best_theta, best = max(candidates)
            if best_theta <= theta + DEGENERATE_EPSILON:
                break
            logging.debug(f"Moving search result at azimuth {phi:.6f} to arc {best}")
            arc, theta = best, best_theta

        return arc
