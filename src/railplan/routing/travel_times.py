"""
All-pairs shortest travel times between stations.

One Dijkstra run per source station fills a dense station x station matrix.
Durations are non-negative, so settling the closest unvisited station first is
always optimal. Pairs that cannot reach each other keep the `UNREACHABLE`
sentinel (infinity); the search checks for it rather than treating it as an
error.
"""
import heapq
import logging
import math
from itertools import count
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from railplan.exceptions import UnknownStationError
from railplan.network.graph import Network
from railplan.network.models import Route, Station

logger = logging.getLogger(__name__)

UNREACHABLE = math.inf


def dijkstra(network: Network, source: Station) -> Tuple[Dict[Station, float], Dict[Station, Optional[Station]]]:
    """Single-source shortest travel times over the collapsed route graph.

    Args:
        network: Station graph.
        source: Station to start from.

    Returns:
        Tuple of (settled distance per reachable station, predecessor per
        reachable station). The source has distance 0 and predecessor None.
    """
    if source not in network:
        raise UnknownStationError(source.name)

    distances: Dict[Station, float] = {source: 0.0}
    predecessors: Dict[Station, Optional[Station]] = {source: None}
    settled = set()
    # Counter keeps heap entries comparable without ordering Station objects
    tie_breaker = count()
    frontier = [(0.0, next(tie_breaker), source)]

    while frontier:
        dist, _, station = heapq.heappop(frontier)
        if station in settled:
            continue
        settled.add(station)

        for neighbor, duration in network.neighbors(station):
            if neighbor in settled:
                continue
            candidate = dist + duration
            if candidate < distances.get(neighbor, UNREACHABLE):
                distances[neighbor] = candidate
                predecessors[neighbor] = station
                heapq.heappush(frontier, (candidate, next(tie_breaker), neighbor))

    return distances, predecessors


class TravelTimeTable:
    """Read-only lookup of the shortest travel time between every pair of stations."""

    def __init__(
        self,
        network: Network,
        times: np.ndarray,
        predecessors: Sequence[Dict[Station, Optional[Station]]],
    ):
        self._network = network
        self._stations: Tuple[Station, ...] = network.stations
        self._index: Dict[Station, int] = {s: i for i, s in enumerate(self._stations)}
        self._times = times
        self._times.setflags(write=False)
        self._predecessors = tuple(predecessors)

    @classmethod
    def from_network(cls, network: Network) -> 'TravelTimeTable':
        """Run Dijkstra from every station and collect the results."""
        n_stations = len(network.stations)
        times = np.full((n_stations, n_stations), UNREACHABLE, dtype=float)
        predecessors = []

        for i, source in enumerate(network.stations):
            distances, preds = dijkstra(network, source)
            for j, target in enumerate(network.stations):
                if target in distances:
                    times[i, j] = distances[target]
            predecessors.append(preds)

        # Routes are bidirectional; absorb float rounding from summing hops in opposite orders
        times = np.minimum(times, times.T)

        unreachable_pairs = int(np.isinf(times).sum())
        if unreachable_pairs:
            logger.warning(
                f"Network is disconnected: {unreachable_pairs} ordered station pairs are unreachable"
            )
        logger.debug(f"Computed travel-time table for {n_stations} stations")
        return cls(network, times, predecessors)

    @property
    def stations(self) -> Tuple[Station, ...]:
        return self._stations

    @property
    def matrix(self) -> np.ndarray:
        """The raw (read-only) travel-time matrix, indexed in station order."""
        return self._times

    def _position(self, station: Station) -> int:
        try:
            return self._index[station]
        except KeyError:
            raise UnknownStationError(getattr(station, 'name', str(station))) from None

    def time(self, origin: Station, destination: Station) -> float:
        """Shortest travel time, or `UNREACHABLE` if no route connects the stations."""
        return float(self._times[self._position(origin), self._position(destination)])

    def is_reachable(self, origin: Station, destination: Station) -> bool:
        return not math.isinf(self.time(origin, destination))

    def path(self, origin: Station, destination: Station) -> List[Station]:
        """Stations visited along one shortest route, both ends included.

        Returns an empty list when the destination is unreachable.
        """
        if not self.is_reachable(origin, destination):
            return []
        preds = self._predecessors[self._position(origin)]
        path = [destination]
        while path[-1] != origin:
            path.append(preds[path[-1]])
        path.reverse()
        return path

    def legs(self, origin: Station, destination: Station) -> List[Route]:
        """Concrete route hops along `path(origin, destination)`, oriented in travel direction."""
        stations = self.path(origin, destination)
        return [
            self._network.route_between(first, second)
            for first, second in zip(stations, stations[1:])
        ]

    def to_frame(self) -> pd.DataFrame:
        """Labelled view of the table, rows are origins and columns destinations."""
        names = [station.name for station in self._stations]
        return pd.DataFrame(self._times.copy(), index=names, columns=names)
