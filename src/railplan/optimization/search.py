"""
Uniform-cost search over joint fleet states.

A state records where every train is, how long each train has been busy, and
the status of every package (pending, loaded on a given train, or delivered).
The cost of a state is the fleet makespan, the largest elapsed time over all
trains. Each transition moves exactly one train to a useful station along its
shortest route and handles packages there: drops first, then a subset of the
waiting packages that fits the remaining capacity. Because a state's cost never
decreases along a transition, the first all-delivered state popped from the
frontier is optimal.

Complexity is exponential in the number of packages and trains; instance
size limits and an optional expansion/time budget keep runs bounded.
"""
import heapq
import logging
import math
import time
from dataclasses import dataclass
from itertools import combinations, count
from typing import Dict, List, NamedTuple, Optional, Tuple

from railplan.config.parameters import Parameters
from railplan.exceptions import (
    InstanceTooLargeError,
    NoFeasiblePlanError,
    SearchBudgetExceededError,
)
from railplan.network.models import Package, Station, Train
from railplan.network.problem import DeliveryProblem
from railplan.optimization.actions import build_action_catalogue, dropoffs_at, pickups_at
from railplan.routing.travel_times import TravelTimeTable

logger = logging.getLogger(__name__)

# Package status codes inside a search state; values >= 0 are the index of the carrying train
PENDING = -1
DELIVERED = -2

# How often (in expansions) the wall-clock budget is checked
_CLOCK_CHECK_INTERVAL = 1024


class SearchState(NamedTuple):
    """Joint snapshot of the fleet. Equal snapshots are the same search node."""
    positions: Tuple[int, ...]      # station index per train
    elapsed: Tuple[float, ...]      # busy time per train
    statuses: Tuple[int, ...]       # PENDING, DELIVERED or carrying train index, per package

    @property
    def cost(self) -> float:
        return max(self.elapsed, default=0.0)

    def is_complete(self) -> bool:
        return all(status == DELIVERED for status in self.statuses)


class _Move(NamedTuple):
    train: int
    origin: int
    destination: int
    departed_at: float
    arrived_at: float
    dropped: Tuple[int, ...]
    picked: Tuple[int, ...]


@dataclass(frozen=True)
class Transition:
    """One train's move plus the packages it handled on arrival."""
    train: Train
    origin: Station
    destination: Station
    departed_at: float
    arrived_at: float
    dropped: Tuple[Package, ...]
    picked: Tuple[Package, ...]

    @property
    def travel_time(self) -> float:
        return self.arrived_at - self.departed_at


@dataclass(frozen=True)
class SearchResult:
    """Optimal sequence of transitions and statistics about the run."""
    transitions: Tuple[Transition, ...]
    makespan: float
    pre_delivered: Tuple[Package, ...]
    expanded: int
    generated: int
    elapsed_sec: float


def check_instance_limits(problem: DeliveryProblem, parameters: Parameters) -> None:
    """Reject instances larger than the configured bounds."""
    counts = {
        'max_stations': len(problem.stations),
        'max_packages': sum(1 for p in problem.packages if not p.is_trivially_delivered),
        'max_trains': len(problem.trains),
    }
    for key, actual in counts.items():
        limit = parameters.limits[key]
        if actual > limit:
            raise InstanceTooLargeError(
                f"Instance exceeds {key}={limit} (got {actual}); "
                f"raise the limit in the configuration to search anyway"
            )


def check_trivial_feasibility(problem: DeliveryProblem, travel_times: TravelTimeTable) -> None:
    """Fail fast when some package can never be delivered by any train.

    Trains never leave their connected component and the search only drops a
    package at its destination, so a package is deliverable only if one train
    can lift it, reach its origin, and the origin reaches the destination.
    """
    pending = [p for p in problem.packages if not p.is_trivially_delivered]
    if pending and not problem.trains:
        raise NoFeasiblePlanError("There are packages to deliver but no trains")

    for package in pending:
        heavy_enough = [t for t in problem.trains if t.can_carry(package.weight)]
        if not heavy_enough:
            raise NoFeasiblePlanError(
                f"Package {package.name} (weight {package.weight}) is heavier than "
                f"the capacity of every train"
            )
        if not travel_times.is_reachable(package.origin, package.destination):
            raise NoFeasiblePlanError(
                f"Package {package.name}: destination {package.destination.name} is "
                f"unreachable from origin {package.origin.name}"
            )
        if not any(
            travel_times.is_reachable(t.initial_station, package.origin)
            for t in heavy_enough
        ):
            raise NoFeasiblePlanError(
                f"Package {package.name}: no train able to carry it can reach "
                f"origin {package.origin.name}"
            )


class DeliverySearch:
    """Uniform-cost search for the minimum-makespan delivery plan."""

    def __init__(
        self,
        problem: DeliveryProblem,
        travel_times: TravelTimeTable,
        parameters: Optional[Parameters] = None,
    ):
        self.problem = problem
        self.travel_times = travel_times
        self.parameters = parameters or Parameters()

        self._stations: Tuple[Station, ...] = travel_times.stations
        station_index = {s: i for i, s in enumerate(self._stations)}
        self._times = travel_times.matrix
        self._trains: Tuple[Train, ...] = problem.trains
        self._packages: Tuple[Package, ...] = problem.packages
        self._capacities = tuple(t.capacity for t in self._trains)
        self._weights = tuple(p.weight for p in self._packages)
        self._origins = tuple(station_index[p.origin] for p in self._packages)
        self._destinations = tuple(station_index[p.destination] for p in self._packages)
        self._starts = tuple(station_index[t.initial_station] for t in self._trains)

        package_index = {p: i for i, p in enumerate(self._packages)}
        catalogue = build_action_catalogue(self._packages)
        self._waiting_at: Dict[int, Tuple[int, ...]] = {
            station_index[station]: tuple(package_index[a.package] for a in actions)
            for station, actions in pickups_at(catalogue).items()
        }
        self._delivered_at: Dict[int, Tuple[int, ...]] = {
            station_index[station]: tuple(package_index[a.package] for a in actions)
            for station, actions in dropoffs_at(catalogue).items()
        }

    def initial_state(self) -> SearchState:
        statuses = tuple(
            DELIVERED if p.is_trivially_delivered else PENDING
            for p in self._packages
        )
        return SearchState(
            positions=self._starts,
            elapsed=tuple(0.0 for _ in self._trains),
            statuses=statuses,
        )

    def _moves_for_train(self, state: SearchState, train: int) -> List[Tuple[SearchState, _Move]]:
        position = state.positions[train]
        statuses = state.statuses
        loaded = [i for i, s in enumerate(statuses) if s == train]
        load = sum(self._weights[i] for i in loaded)

        destinations = {self._destinations[i] for i in loaded}
        destinations.update(self._origins[i] for i, s in enumerate(statuses) if s == PENDING)

        successors = []
        for destination in sorted(destinations):
            travel = self._times[position, destination]
            if math.isinf(travel):
                continue

            dropped = tuple(
                i for i in self._delivered_at.get(destination, ()) if statuses[i] == train
            )
            free = self._capacities[train] - (load - sum(self._weights[i] for i in dropped))
            waiting = [
                i for i in self._waiting_at.get(destination, ())
                if statuses[i] == PENDING and self._weights[i] <= free
            ]

            departed_at = state.elapsed[train]
            arrived_at = departed_at + float(travel)
            elapsed = state.elapsed[:train] + (arrived_at,) + state.elapsed[train + 1:]
            positions = state.positions[:train] + (destination,) + state.positions[train + 1:]

            for picked in self._pickup_choices(waiting, free, allow_empty=bool(dropped)):
                new_statuses = list(statuses)
                for i in dropped:
                    new_statuses[i] = DELIVERED
                for i in picked:
                    new_statuses[i] = train
                successor = SearchState(positions, elapsed, tuple(new_statuses))
                move = _Move(train, position, destination, departed_at, arrived_at, dropped, picked)
                successors.append((successor, move))
        return successors

    def _pickup_choices(self, waiting: List[int], free: float, allow_empty: bool):
        """Every subset of waiting packages whose combined weight fits in `free`."""
        if allow_empty:
            yield ()
        for size in range(1, len(waiting) + 1):
            for subset in combinations(waiting, size):
                if sum(self._weights[i] for i in subset) <= free:
                    yield subset

    def successors(self, state: SearchState) -> List[Tuple[SearchState, _Move]]:
        """All states reachable by moving one train once."""
        result = []
        for train in range(len(self._trains)):
            result.extend(self._moves_for_train(state, train))
        return result

    def run(self) -> SearchResult:
        """Search until the first complete state is popped from the frontier."""
        check_instance_limits(self.problem, self.parameters)
        check_trivial_feasibility(self.problem, self.travel_times)

        max_expanded = self.parameters.max_expanded_states
        time_limit = self.parameters.time_limit_sec
        progress_interval = self.parameters.search['progress_interval']

        start_time = time.perf_counter()
        start = self.initial_state()
        tie_breaker = count()
        frontier = [(start.cost, next(tie_breaker), start)]
        parents: Dict[SearchState, Optional[Tuple[SearchState, _Move]]] = {start: None}
        expanded_states = set()
        generated = 1

        while frontier:
            cost, _, state = heapq.heappop(frontier)
            if state in expanded_states:
                continue

            if state.is_complete():
                elapsed_sec = time.perf_counter() - start_time
                logger.info(
                    f"Found optimal plan with makespan {cost:g} "
                    f"({len(expanded_states)} states expanded, {generated} generated, "
                    f"{elapsed_sec:.2f}s)"
                )
                return SearchResult(
                    transitions=self._reconstruct(parents, state),
                    makespan=cost,
                    pre_delivered=tuple(p for p in self._packages if p.is_trivially_delivered),
                    expanded=len(expanded_states),
                    generated=generated,
                    elapsed_sec=elapsed_sec,
                )

            expanded_states.add(state)
            expanded = len(expanded_states)

            if max_expanded and expanded > max_expanded:
                raise SearchBudgetExceededError(
                    f"Search stopped after expanding {max_expanded} states without finding a plan",
                    expanded=expanded,
                    elapsed_sec=time.perf_counter() - start_time,
                )
            if time_limit and expanded % _CLOCK_CHECK_INTERVAL == 0:
                elapsed_sec = time.perf_counter() - start_time
                if elapsed_sec > time_limit:
                    raise SearchBudgetExceededError(
                        f"Search stopped after {elapsed_sec:.1f}s (limit {time_limit:g}s) "
                        f"without finding a plan",
                        expanded=expanded,
                        elapsed_sec=elapsed_sec,
                    )
            if expanded % progress_interval == 0:
                logger.info(
                    f"Expanded {expanded} states, frontier {len(frontier)}, current makespan {cost:g}"
                )

            for successor, move in self.successors(state):
                if successor in parents:
                    continue
                parents[successor] = (state, move)
                generated += 1
                heapq.heappush(frontier, (successor.cost, next(tie_breaker), successor))

        raise NoFeasiblePlanError(
            f"Search exhausted {len(expanded_states)} states without delivering every package"
        )

    def _reconstruct(
        self,
        parents: Dict[SearchState, Optional[Tuple[SearchState, _Move]]],
        terminal: SearchState,
    ) -> Tuple[Transition, ...]:
        """Walk the predecessor chain back from `terminal` to the initial state."""
        moves: List[_Move] = []
        state = terminal
        while parents[state] is not None:
            state, move = parents[state]
            moves.append(move)
        moves.reverse()
        return tuple(
            Transition(
                train=self._trains[m.train],
                origin=self._stations[m.origin],
                destination=self._stations[m.destination],
                departed_at=m.departed_at,
                arrived_at=m.arrived_at,
                dropped=tuple(self._packages[i] for i in m.dropped),
                picked=tuple(self._packages[i] for i in m.picked),
            )
            for m in moves
        )


def search_delivery_plan(
    problem: DeliveryProblem,
    travel_times: TravelTimeTable,
    parameters: Optional[Parameters] = None,
) -> SearchResult:
    """Find the minimum-makespan sequence of transitions that delivers every package."""
    return DeliverySearch(problem, travel_times, parameters).run()
