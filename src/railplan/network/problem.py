"""
Problem instance: the network plus the packages to move and the trains available.

Instances can be assembled from in-memory records, from plain dictionaries, or
from a YAML file with the layout::

    stations: [A, B, C]
    routes:
      - {name: AB, from: A, to: B, duration: 10}
    packages:
      - {name: P1, weight: 5, origin: A, destination: C}
    trains:
      - {name: T1, capacity: 5, station: A}
"""
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

import yaml

from railplan.exceptions import UnknownStationError
from railplan.network.graph import Network
from railplan.network.models import Package, Route, Station, Train

logger = logging.getLogger(__name__)

# Raw record shapes, mirroring the command-line forms
RouteRecord = Tuple[str, str, str, float]      # name, station1, station2, travel time
PackageRecord = Tuple[str, float, str, str]    # name, weight, start, destination
TrainRecord = Tuple[str, float, str]           # name, capacity, initial station


@dataclass(frozen=True)
class DeliveryProblem:
    """Validated input to the planner."""
    network: Network
    packages: Tuple[Package, ...]
    trains: Tuple[Train, ...]

    def __post_init__(self):
        object.__setattr__(self, 'packages', tuple(self.packages))
        object.__setattr__(self, 'trains', tuple(self.trains))

        _ensure_unique((p.name for p in self.packages), 'package')
        _ensure_unique((t.name for t in self.trains), 'train')

        for package in self.packages:
            if not math.isfinite(package.weight):
                raise ValueError(
                    f"Package {package.name} has a non-finite weight: {package.weight}"
                )
            if package.weight < 0:
                raise ValueError(
                    f"Package {package.name} has a negative weight: {package.weight}"
                )
            for station in (package.origin, package.destination):
                if station not in self.network:
                    raise UnknownStationError(station.name, referenced_by=f"package {package.name}")

        for train in self.trains:
            if not math.isfinite(train.capacity):
                raise ValueError(
                    f"Train {train.name} has a non-finite capacity: {train.capacity}"
                )
            if train.capacity < 0:
                raise ValueError(
                    f"Train {train.name} has a negative capacity: {train.capacity}"
                )
            if train.initial_station not in self.network:
                raise UnknownStationError(
                    train.initial_station.name, referenced_by=f"train {train.name}"
                )

    @property
    def stations(self) -> Tuple[Station, ...]:
        return self.network.stations

    @property
    def routes(self) -> Tuple[Route, ...]:
        return self.network.routes

    def summary(self) -> Dict[str, int]:
        return {
            'stations': len(self.network.stations),
            'routes': len(self.network.routes),
            'packages': len(self.packages),
            'trains': len(self.trains),
        }

    @classmethod
    def from_records(
        cls,
        station_names: Iterable[str],
        routes: Iterable[RouteRecord] = (),
        packages: Iterable[PackageRecord] = (),
        trains: Iterable[TrainRecord] = (),
    ) -> 'DeliveryProblem':
        """Build a problem from name-based records, resolving every station reference."""
        stations = [Station(name) for name in station_names]
        by_name = {station.name: station for station in stations}

        def resolve(name: str, referenced_by: str) -> Station:
            try:
                return by_name[name]
            except KeyError:
                raise UnknownStationError(name, referenced_by=referenced_by) from None

        network = Network(
            stations,
            [
                Route(
                    name=name,
                    station_pair=(
                        resolve(first, f"route {name}"),
                        resolve(second, f"route {name}"),
                    ),
                    duration=duration,
                )
                for name, first, second, duration in routes
            ],
        )
        package_objs = [
            Package(
                name=name,
                weight=weight,
                origin=resolve(origin, f"package {name}"),
                destination=resolve(destination, f"package {name}"),
            )
            for name, weight, origin, destination in packages
        ]
        train_objs = [
            Train(
                name=name,
                capacity=capacity,
                initial_station=resolve(initial, f"train {name}"),
            )
            for name, capacity, initial in trains
        ]
        return cls(network=network, packages=package_objs, trains=train_objs)

    @classmethod
    def from_dict(cls, data: dict) -> 'DeliveryProblem':
        """Build a problem from the dictionary layout described in the module docstring."""
        if not isinstance(data, dict):
            raise ValueError("Problem definition must be a mapping")
        missing = [key for key in ('stations', 'trains') if key not in data]
        if missing:
            raise ValueError(f"Problem definition is missing required keys: {missing}")

        try:
            routes = [
                (str(r['name']), str(r['from']), str(r['to']), float(r['duration']))
                for r in data.get('routes') or []
            ]
            packages = [
                (str(p['name']), float(p['weight']), str(p['origin']), str(p['destination']))
                for p in data.get('packages') or []
            ]
            trains = [
                (str(t['name']), float(t['capacity']), str(t['station']))
                for t in data.get('trains') or []
            ]
        except KeyError as e:
            raise ValueError(f"Problem definition entry is missing field {e}") from None

        return cls.from_records(
            [str(name) for name in data['stations']],
            routes=routes,
            packages=packages,
            trains=trains,
        )

    @classmethod
    def from_yaml(cls, path: Path | str) -> 'DeliveryProblem':
        """Load a problem definition from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Network file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f)
        problem = cls.from_dict(data)
        logger.info(f"Loaded problem from {path}: {problem.summary()}")
        return problem


def _ensure_unique(names: Iterable[str], kind: str) -> None:
    seen = set()
    duplicates: List[str] = []
    for name in names:
        if name in seen:
            duplicates.append(name)
        seen.add(name)
    if duplicates:
        raise ValueError(f"Duplicate {kind} names: {sorted(set(duplicates))}")
