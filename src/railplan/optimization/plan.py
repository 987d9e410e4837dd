"""
Delivery plans: per-train action sequences with absolute timestamps.

A plan is rebuilt mechanically from the transitions of the optimal search
path. Every transition becomes a move (when the train changes station)
followed by its drops and then its pick-ups, all stamped with the arrival time.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from railplan.core_types import ActionKind, PackageStatus
from railplan.network.models import Package, Route, Station, Train
from railplan.network.problem import DeliveryProblem
from railplan.optimization.search import Transition
from railplan.routing.travel_times import TravelTimeTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanStep:
    """One action of one train.

    For moves `time` is the arrival time at `station` and `departed_at` the
    time the train left its previous station; `route` lists the route hops used.
    """
    train: Train
    action: ActionKind
    station: Station
    time: float
    package: Optional[Package] = None
    departed_at: Optional[float] = None
    route: Tuple[Route, ...] = ()

    def describe(self) -> str:
        if self.action == ActionKind.MOVE_TO:
            via = " -> ".join(r.name for r in self.route)
            return (
                f"[{self.departed_at:g} -> {self.time:g}] {self.train.name}: "
                f"move to {self.station.name}" + (f" via {via}" if via else "")
            )
        return (
            f"[{self.time:g}] {self.train.name}: {self.action.value} "
            f"{self.package.name} at {self.station.name}"
        )


@dataclass(frozen=True)
class RouteLeg:
    """A single physical route traversal, as listed in the instruction output."""
    begin_at: float
    train: Train
    route: Route
    picked_packages: Tuple[Package, ...] = ()
    dropped_packages: Tuple[Package, ...] = ()


@dataclass
class Plan:
    """Per-train ordered actions plus the overall makespan."""
    steps_by_train: Dict[Train, List[PlanStep]]
    makespan: float
    pre_delivered: Tuple[Package, ...] = field(default_factory=tuple)

    @property
    def trains(self) -> List[Train]:
        return list(self.steps_by_train)

    def steps(self, train: Train) -> List[PlanStep]:
        return self.steps_by_train.get(train, [])

    def instructions(self) -> List[PlanStep]:
        """Every step of every train in global time order (stable per train)."""
        order = {train: i for i, train in enumerate(self.steps_by_train)}
        indexed = [
            (step.time if step.departed_at is None else step.departed_at, order[train], i, step)
            for train, steps in self.steps_by_train.items()
            for i, step in enumerate(steps)
        ]
        return [step for *_, step in sorted(indexed, key=lambda item: item[:3])]

    def route_legs(self) -> List[RouteLeg]:
        """Break moves into individual route hops with their own begin times.

        Packages picked up before a move are reported on the first hop of the
        move, and packages dropped at its end on the last hop.
        """
        legs: List[RouteLeg] = []
        for train, steps in self.steps_by_train.items():
            picked_before_move: List[Package] = []
            pending_legs: List[RouteLeg] = []
            for step in steps:
                if step.action == ActionKind.PICK_UP:
                    picked_before_move.append(step.package)
                elif step.action == ActionKind.MOVE_TO:
                    legs.extend(pending_legs)
                    pending_legs = []
                    begin_at = step.departed_at
                    for hop in step.route:
                        pending_legs.append(RouteLeg(begin_at=begin_at, train=train, route=hop))
                        begin_at += hop.duration
                    if pending_legs and picked_before_move:
                        pending_legs[0] = replace(
                            pending_legs[0], picked_packages=tuple(picked_before_move)
                        )
                    picked_before_move = []
                elif step.action == ActionKind.DROP_OFF and pending_legs:
                    last = pending_legs[-1]
                    pending_legs[-1] = replace(
                        last, dropped_packages=last.dropped_packages + (step.package,)
                    )
            legs.extend(pending_legs)
        return sorted(legs, key=lambda leg: leg.begin_at)

    def package_status(self, package: Package, at_time: float) -> PackageStatus:
        """Status of a package at a given instant of the plan."""
        if package in self.pre_delivered:
            return PackageStatus.DELIVERED
        status = PackageStatus.PENDING
        for step in self.instructions():
            if step.package != package or step.time > at_time:
                continue
            if step.action == ActionKind.PICK_UP:
                status = PackageStatus.LOADED
            elif step.action == ActionKind.DROP_OFF:
                status = PackageStatus.DELIVERED
        return status

    def to_frame(self) -> pd.DataFrame:
        """One row per plan step."""
        rows = [
            {
                'Train': step.train.name,
                'Action': step.action.value,
                'Station': step.station.name,
                'Time': step.time,
                'Departed_At': step.departed_at,
                'Package': step.package.name if step.package else None,
                'Route': ",".join(r.name for r in step.route) or None,
            }
            for step in self.instructions()
        ]
        columns = ['Train', 'Action', 'Station', 'Time', 'Departed_At', 'Package', 'Route']
        return pd.DataFrame(rows, columns=columns)

    def legs_frame(self) -> pd.DataFrame:
        rows = [
            {
                'Begin_At': leg.begin_at,
                'Train': leg.train.name,
                'Route': leg.route.name,
                'From': leg.route.station_pair[0].name,
                'To': leg.route.station_pair[1].name,
                'Duration': leg.route.duration,
                'Picked_Packages': ",".join(p.name for p in leg.picked_packages) or None,
                'Dropped_Packages': ",".join(p.name for p in leg.dropped_packages) or None,
            }
            for leg in self.route_legs()
        ]
        columns = [
            'Begin_At', 'Train', 'Route', 'From', 'To', 'Duration',
            'Picked_Packages', 'Dropped_Packages'
        ]
        return pd.DataFrame(rows, columns=columns)

    def describe(self) -> List[str]:
        lines = [step.describe() for step in self.instructions()]
        for package in self.pre_delivered:
            lines.append(f"[0] {package.name} is already at {package.destination.name}")
        return lines


def extract_plan(
    problem: DeliveryProblem,
    travel_times: TravelTimeTable,
    transitions: Iterable[Transition],
    pre_delivered: Iterable[Package] = (),
) -> Plan:
    """Turn the transitions of the optimal search path into per-train steps."""
    steps_by_train: Dict[Train, List[PlanStep]] = {train: [] for train in problem.trains}
    makespan = 0.0

    for transition in transitions:
        train = transition.train
        steps = steps_by_train[train]
        if transition.destination != transition.origin:
            steps.append(PlanStep(
                train=train,
                action=ActionKind.MOVE_TO,
                station=transition.destination,
                time=transition.arrived_at,
                departed_at=transition.departed_at,
                route=tuple(travel_times.legs(transition.origin, transition.destination)),
            ))
        for package in transition.dropped:
            steps.append(PlanStep(
                train=train,
                action=ActionKind.DROP_OFF,
                station=transition.destination,
                time=transition.arrived_at,
                package=package,
            ))
        for package in transition.picked:
            steps.append(PlanStep(
                train=train,
                action=ActionKind.PICK_UP,
                station=transition.destination,
                time=transition.arrived_at,
                package=package,
            ))
        makespan = max(makespan, transition.arrived_at)

    return Plan(
        steps_by_train=steps_by_train,
        makespan=makespan,
        pre_delivered=tuple(pre_delivered),
    )


def validate_plan(plan: Plan, problem: DeliveryProblem) -> List[str]:
    """Check a plan against the delivery invariants.

    Returns:
        Human-readable violations; an empty list means the plan is valid.
    """
    violations: List[str] = []
    picked: Dict[Package, Tuple[Train, float]] = {}
    dropped: Dict[Package, Tuple[Train, float]] = {}

    for train, steps in plan.steps_by_train.items():
        position = train.initial_station
        load: Dict[Package, float] = {}
        for step in steps:
            if step.action == ActionKind.MOVE_TO:
                position = step.station
                continue
            package = step.package
            if step.station != position:
                violations.append(
                    f"{train.name} handles {package.name} at {step.station.name} "
                    f"while located at {position.name}"
                )
            if step.action == ActionKind.PICK_UP:
                if package in picked:
                    violations.append(f"Package {package.name} is picked up more than once")
                picked[package] = (train, step.time)
                if step.station != package.origin:
                    violations.append(
                        f"Package {package.name} picked up at {step.station.name}, "
                        f"not at its origin {package.origin.name}"
                    )
                load[package] = package.weight
                if sum(load.values()) > train.capacity:
                    violations.append(
                        f"{train.name} exceeds capacity {train.capacity:g} at {step.time:g} "
                        f"(load {sum(load.values()):g})"
                    )
            elif step.action == ActionKind.DROP_OFF:
                if package not in load:
                    violations.append(
                        f"{train.name} drops {package.name} without carrying it"
                    )
                load.pop(package, None)
                dropped[package] = (train, step.time)
                if step.station != package.destination:
                    violations.append(
                        f"Package {package.name} dropped at {step.station.name}, "
                        f"not at its destination {package.destination.name}"
                    )

    for package in problem.packages:
        if package.is_trivially_delivered:
            continue
        if package not in dropped:
            violations.append(f"Package {package.name} is never delivered")
            continue
        if package not in picked:
            violations.append(f"Package {package.name} is never picked up")
            continue
        pick_train, pick_time = picked[package]
        drop_train, drop_time = dropped[package]
        if pick_train != drop_train:
            violations.append(
                f"Package {package.name} picked up by {pick_train.name} "
                f"but dropped by {drop_train.name}"
            )
        if pick_time > drop_time:
            violations.append(
                f"Package {package.name} dropped at {drop_time:g} before its pick-up at {pick_time:g}"
            )

    if violations:
        for violation in violations:
            logger.warning(violation)
    return violations
