import heapq
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

from circumcircle import Circumcircle
from geometry import PointSphere


@dataclass(frozen=True)
class SiteEvent:
    theta: float
    phi: float
    site: int


@dataclass(frozen=True)
class CircleEvent:
    """Candidate Voronoi vertex, stored by value in the queue.

    `arc` is the arc that would be squeezed out and `event_id` is what that
    arc has to point to for the event to still be pending. Events are never
    taken out of the queue when the beach line changes under them; they are
    recognised as stale when popped.
    """

    theta: float
    phi: float
    event_id: int
    arc: int
    sites: Tuple[int, int, int]
    circumcircle: Circumcircle


Event = Union[SiteEvent, CircleEvent]


class EventQueue:
    """Site events (sorted once, never modified) merged with a heap of circle
    events. Both are ordered by `(theta, phi, sequence number)`, where site
    events take the sequence numbers `0 .. n - 1` in sorted order and circle
    events count up from `n` in order of creation."""

    def __init__(self, sites: Sequence[PointSphere]) -> None:
        order = sorted(range(len(sites)), key=lambda i: (sites[i].theta, sites[i].phi))
        self._site_events = [SiteEvent(sites[i].theta, sites[i].phi, i) for i in order]
        self._next_site = 0
        self._circle_events: List[Tuple[float, float, int, CircleEvent]] = []
        self._sequence = len(self._site_events)

    def __len__(self) -> int:
        return len(self._site_events) - self._next_site + len(self._circle_events)

    def __bool__(self) -> bool:
        return len(self) > 0

    @property
    def n_site_events_left(self) -> int:
        return len(self._site_events) - self._next_site

    def push_circle_event(
        self, arc: int, sites: Tuple[int, int, int], circumcircle: Circumcircle
    ) -> CircleEvent:
        event = CircleEvent(
            circumcircle.lowest_theta,
            circumcircle.center.phi,
            self._sequence,
            arc,
            sites,
            circumcircle,
        )
        self._sequence += 1
        heapq.heappush(
            self._circle_events, (event.theta, event.phi, event.event_id, event)
        )

        return event

    def pop(self) -> Event:
        if len(self) == 0:
            raise IndexError("pop from empty event queue")

        if self._next_site < len(self._site_events):
            site_event = self._site_events[self._next_site]
            site_key = (site_event.theta, site_event.phi, self._next_site)
            if not self._circle_events or site_key <= self._circle_events[0][:3]:
                self._next_site += 1
                return site_event

        return heapq.heappop(self._circle_events)[3]
