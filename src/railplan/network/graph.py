"""
Station graph used by the travel-time oracle.

The network is immutable once built. Parallel routes between the same pair of
stations are collapsed to the cheapest one while the adjacency is assembled,
so every consumer sees at most one edge per station pair.
"""
import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from railplan.exceptions import UnknownStationError
from railplan.network.models import Route, Station

logger = logging.getLogger(__name__)


class Network:
    """Stations plus the bidirectional routes connecting them."""

    def __init__(self, stations: Iterable[Station], routes: Iterable[Route]):
        self._stations: Tuple[Station, ...] = tuple(stations)
        self._by_name: Dict[str, Station] = {}
        for station in self._stations:
            if station.name in self._by_name:
                raise ValueError(f"Duplicate station name: {station.name}")
            self._by_name[station.name] = station

        self._routes: Tuple[Route, ...] = tuple(routes)
        self._cheapest: Dict[frozenset, Route] = {}
        for route in self._routes:
            self._add_route(route)

        # Neighbor lists are sorted by name so every traversal is deterministic
        adjacency: Dict[Station, List[Tuple[Station, float]]] = {
            station: [] for station in self._stations
        }
        for route in self._cheapest.values():
            first, second = route.station_pair
            adjacency[first].append((second, route.duration))
            adjacency[second].append((first, route.duration))
        self._adjacency: Dict[Station, Tuple[Tuple[Station, float], ...]] = {
            station: tuple(sorted(neighbors, key=lambda item: item[0].name))
            for station, neighbors in adjacency.items()
        }

        logger.debug(
            f"Built network with {len(self._stations)} stations, "
            f"{len(self._routes)} routes ({len(self._cheapest)} after collapsing parallel routes)"
        )

    def _add_route(self, route: Route) -> None:
        for station in route.station_pair:
            if station.name not in self._by_name:
                raise UnknownStationError(station.name, referenced_by=f"route {route.name}")
        if not math.isfinite(route.duration):
            raise ValueError(f"Route {route.name} has a non-finite duration: {route.duration}")
        if route.duration < 0:
            raise ValueError(
                f"Route {route.name} has a negative duration: {route.duration}"
            )

        first, second = route.station_pair
        if first == second:
            logger.debug(f"Ignoring route {route.name}: both ends are {first.name}")
            return

        key = frozenset(route.station_pair)
        current = self._cheapest.get(key)
        if current is None or route.duration < current.duration:
            self._cheapest[key] = route

    @property
    def stations(self) -> Tuple[Station, ...]:
        return self._stations

    @property
    def routes(self) -> Tuple[Route, ...]:
        """All declared routes, including parallel and self routes."""
        return self._routes

    def __contains__(self, station: Station) -> bool:
        return station in self._adjacency

    def __len__(self) -> int:
        return len(self._stations)

    def station(self, name: str, referenced_by: str = None) -> Station:
        """Look up a station by name."""
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownStationError(name, referenced_by=referenced_by) from None

    def neighbors(self, station: Station) -> Sequence[Tuple[Station, float]]:
        """Return `(adjacent station, duration)` pairs reachable with a single route."""
        try:
            return self._adjacency[station]
        except KeyError:
            raise UnknownStationError(getattr(station, 'name', str(station))) from None

    def route_between(self, first: Station, second: Station) -> Optional[Route]:
        """Return the cheapest route linking two adjacent stations, oriented first -> second."""
        route = self._cheapest.get(frozenset((first, second)))
        if route is None:
            return None
        if route.station_pair[0] != first:
            return route.reverse()
        return route

    def __repr__(self):
        return (
            f"Network(stations={[s.name for s in self._stations]}, "
            f"routes={[r.name for r in self._routes]})"
        )
