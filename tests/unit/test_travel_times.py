import math

import hypothesis.strategies as st
import numpy as np
import pytest
from hypothesis import given, settings

from railplan.exceptions import UnknownStationError
from railplan.network import Network, Route, Station
from railplan.routing import UNREACHABLE, TravelTimeTable, dijkstra


def _network(n_stations, edges):
    stations = [Station(f"S{i}") for i in range(n_stations)]
    routes = [
        Route(f"R{k}", (stations[i], stations[j]), duration)
        for k, (i, j, duration) in enumerate(edges)
    ]
    return Network(stations, routes)


@st.composite
def random_networks(draw):
    n = draw(st.integers(min_value=1, max_value=6))
    edges = draw(st.lists(
        st.tuples(
            st.integers(min_value=0, max_value=n - 1),
            st.integers(min_value=0, max_value=n - 1),
            st.integers(min_value=0, max_value=50),
        ),
        max_size=10,
    ))
    return n, edges


def _floyd_warshall(n, edges):
    dist = np.full((n, n), math.inf)
    np.fill_diagonal(dist, 0.0)
    for i, j, duration in edges:
        if i != j:
            dist[i, j] = min(dist[i, j], duration)
            dist[j, i] = min(dist[j, i], duration)
    for k in range(n):
        dist = np.minimum(dist, dist[:, [k]] + dist[[k], :])
    return dist


@settings(max_examples=30)
@given(random_networks())
def test_table_is_symmetric_with_zero_diagonal(graph):
    n, edges = graph
    table = TravelTimeTable.from_network(_network(n, edges))
    times = table.matrix
    assert np.array_equal(times, times.T)
    assert np.all(np.diag(times) == 0)


@settings(max_examples=30)
@given(random_networks())
def test_table_satisfies_triangle_inequality(graph):
    n, edges = graph
    times = TravelTimeTable.from_network(_network(n, edges)).matrix
    for a in range(n):
        for b in range(n):
            for c in range(n):
                assert times[a, c] <= times[a, b] + times[b, c]


@settings(max_examples=30)
@given(random_networks())
def test_table_matches_floyd_warshall(graph):
    n, edges = graph
    times = TravelTimeTable.from_network(_network(n, edges)).matrix
    assert np.array_equal(times, _floyd_warshall(n, edges))


@settings(max_examples=20)
@given(random_networks())
def test_path_legs_add_up_to_time(graph):
    n, edges = graph
    network = _network(n, edges)
    table = TravelTimeTable.from_network(network)
    for origin in network.stations:
        for destination in network.stations:
            legs = table.legs(origin, destination)
            if not table.is_reachable(origin, destination):
                assert legs == []
                continue
            assert sum(r.duration for r in legs) == table.time(origin, destination)
            path = table.path(origin, destination)
            assert path[0] == origin and path[-1] == destination
            for leg, (first, second) in zip(legs, zip(path, path[1:])):
                assert leg.station_pair == (first, second)


def test_parallel_routes_use_minimum(parallel_routes_problem):
    table = TravelTimeTable.from_network(parallel_routes_problem.network)
    silom = parallel_routes_problem.network.station("silom")
    thonburi = parallel_routes_problem.network.station("thonburi")
    assert table.time(silom, thonburi) == 10
    assert table.time(thonburi, silom) == 10
    assert [r.name for r in table.legs(silom, thonburi)] == ["r2"]


def test_unreachable_pairs_use_sentinel(caplog):
    network = _network(3, [(0, 1, 10)])
    with caplog.at_level("WARNING"):
        table = TravelTimeTable.from_network(network)
    s0, s1, s2 = network.stations
    assert table.time(s0, s2) == UNREACHABLE
    assert not table.is_reachable(s2, s1)
    assert table.path(s0, s2) == []
    assert table.path(s2, s2) == [s2]
    assert any("disconnected" in message for _, _, message in caplog.record_tuples)


def test_matrix_is_read_only():
    table = TravelTimeTable.from_network(_network(2, [(0, 1, 4)]))
    with pytest.raises(ValueError):
        table.matrix[0, 1] = 0


def test_unknown_station_lookup():
    table = TravelTimeTable.from_network(_network(2, [(0, 1, 4)]))
    with pytest.raises(UnknownStationError):
        table.time(Station("S0"), Station("nowhere"))
    with pytest.raises(UnknownStationError):
        dijkstra(_network(1, []), Station("nowhere"))


def test_multi_hop_path_and_frame(line_problem):
    network = line_problem.network
    table = TravelTimeTable.from_network(network)
    a, e = network.station("A"), network.station("E")
    assert table.time(a, e) == 110
    assert [s.name for s in table.path(a, e)] == ["A", "B", "C", "D", "E"]
    assert [r.name for r in table.legs(e, a)] == ["DE", "CD", "BC", "AB"]

    frame = table.to_frame()
    assert list(frame.index) == ["A", "B", "C", "D", "E"]
    assert frame.loc["B", "D"] == 90
    # The frame is a copy; editing it leaves the table untouched
    frame.loc["A", "B"] = 0
    assert table.time(a, network.station("B")) == 10


def test_dijkstra_single_source(line_problem):
    network = line_problem.network
    distances, predecessors = dijkstra(network, network.station("C"))
    assert distances[network.station("A")] == 60
    assert predecessors[network.station("C")] is None
    assert predecessors[network.station("A")] == network.station("B")
