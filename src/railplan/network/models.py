from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Station:
    """A named stop in the rail network."""
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Route:
    """A bidirectional connection between two stations."""
    name: str
    station_pair: Tuple[Station, Station]
    duration: float

    def reverse(self) -> 'Route':
        first, second = self.station_pair
        return Route(name=self.name, station_pair=(second, first), duration=self.duration)


@dataclass(frozen=True)
class Package:
    """A parcel that has to travel from `origin` to `destination`."""
    name: str
    weight: float
    origin: Station
    destination: Station

    @property
    def is_trivially_delivered(self) -> bool:
        """A package already sitting at its destination needs no movement."""
        return self.origin == self.destination


@dataclass(frozen=True)
class Train:
    """A capacity-constrained vehicle starting at `initial_station`."""
    name: str
    capacity: float
    initial_station: Station

    def can_carry(self, weight: float) -> bool:
        return weight <= self.capacity
