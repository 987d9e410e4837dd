"""Required pick-up and drop-off events derived from the package list."""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from railplan.core_types import ActionKind
from railplan.network.models import Package, Station


@dataclass(frozen=True)
class Action:
    """A single required event: handle `package` at `station`."""
    kind: ActionKind
    package: Package
    station: Station

    def __str__(self):
        return f"{self.kind.value}({self.package.name}) at {self.station.name}"


def build_action_catalogue(packages: Iterable[Package]) -> Tuple[Action, ...]:
    """Emit one pick-up at the origin and one drop-off at the destination per package.

    Pick-up always precedes drop-off for the same package. Packages already at
    their destination need no handling and produce no actions.
    """
    actions: List[Action] = []
    for package in packages:
        if package.is_trivially_delivered:
            continue
        actions.append(Action(ActionKind.PICK_UP, package, package.origin))
        actions.append(Action(ActionKind.DROP_OFF, package, package.destination))
    return tuple(actions)


def _group_by_station(actions: Iterable[Action], kind: ActionKind) -> Dict[Station, Tuple[Action, ...]]:
    grouped: Dict[Station, List[Action]] = {}
    for action in actions:
        if action.kind == kind:
            grouped.setdefault(action.station, []).append(action)
    return {station: tuple(items) for station, items in grouped.items()}


def pickups_at(actions: Iterable[Action]) -> Dict[Station, Tuple[Action, ...]]:
    """Pick-up actions grouped by the station where they happen."""
    return _group_by_station(actions, ActionKind.PICK_UP)


def dropoffs_at(actions: Iterable[Action]) -> Dict[Station, Tuple[Action, ...]]:
    """Drop-off actions grouped by the station where they happen."""
    return _group_by_station(actions, ActionKind.DROP_OFF)
