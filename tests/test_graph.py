import threading
from decimal import Decimal

import pytest

from fare_calculator.domain.errors import (
    GraphFrozenError,
    NoRouteFoundError,
    PathReconstructionError,
    StationNotFoundError,
)
from fare_calculator.domain.models import FareInfo, FarePolicy, Station
from fare_calculator.graph import TransitGraph, build_graph

SVC = FarePolicy.STORED_VALUE_CARD
SJT = FarePolicy.SINGLE_JOURNEY_TICKET


def st(code: str, line: str = "L") -> Station:
    return Station(line, code, code.lower())


def leg_sum(result):
    return sum((leg.fare for leg in result.legs), Decimal(0))


def test_ensure_node_is_idempotent_and_ordered():
    graph = TransitGraph()

    assert graph.ensure_node(st("A")) == 0
    assert graph.ensure_node(st("B")) == 1
    assert graph.ensure_node(st("A")) == 0
    assert graph.stations() == (st("A"), st("B"))


def test_station_identity_uses_value_equality():
    graph = TransitGraph()
    graph.ensure_node(Station("L", "A", "Alpha"))

    assert Station("L", "A", "Alpha") in graph
    assert Station("M", "A", "Alpha") not in graph
    assert Station("L", "A", "Other") not in graph


def test_add_edge_is_undirected_and_last_write_wins():
    graph = TransitGraph()
    graph.add_edge(st("A"), st("B"), FareInfo(10, 12))
    graph.add_edge(st("B"), st("A"), FareInfo(7, 9))

    assert graph.fare_between(st("A"), st("B")) == FareInfo(7, 9)
    assert graph.fare_between(st("B"), st("A")) == FareInfo(7, 9)
    assert graph.edge_count == 1


def test_transfer_overwrites_priced_edge_with_zero():
    graph = TransitGraph()
    graph.add_edge(st("A"), st("B"), FareInfo(10, 12))
    graph.add_transfer(st("A"), st("B"))

    fare = graph.fare_between(st("A"), st("B"))
    assert fare is not None and fare.is_transfer


def test_strict_transfer_rejects_unknown_station():
    graph = TransitGraph(strict_transfers=True)
    graph.ensure_node(st("A"))

    with pytest.raises(StationNotFoundError) as exc:
        graph.add_transfer(st("A"), st("B"))

    assert exc.value.station == str(st("B"))
    assert st("B") not in graph


def test_permissive_transfer_registers_unknown_station():
    graph = TransitGraph(strict_transfers=False)
    graph.ensure_node(st("A"))

    graph.add_transfer(st("A"), st("B", line="M"))

    assert st("B", line="M") in graph
    result = graph.shortest_path(st("A"), st("B", line="M"), SVC)
    assert result.total == 0


def test_same_station_is_free_single_stop():
    graph = TransitGraph()
    graph.add_edge(st("A"), st("B"), FareInfo(10, 12))

    paths = graph.shortest_paths(st("A"), st("A"))

    for result in (paths.stored_value_card, paths.single_journey_ticket):
        assert result.total == 0
        assert result.path == (st("A"),)
        assert result.legs == ()


def test_unknown_station_raises():
    graph = TransitGraph()
    graph.ensure_node(st("A"))

    with pytest.raises(StationNotFoundError):
        graph.shortest_paths(st("A"), st("Nope"))
    with pytest.raises(StationNotFoundError):
        graph.shortest_paths(st("Nope"), st("A"))


def test_isolated_station_has_no_route():
    graph = TransitGraph()
    graph.add_edge(st("A"), st("B"), FareInfo(10, 12))
    graph.ensure_node(st("C"))

    with pytest.raises(NoRouteFoundError) as exc:
        graph.shortest_paths(st("A"), st("C"))

    assert exc.value.destination == str(st("C"))
    assert exc.value.policy == SVC.value


def test_policies_are_solved_independently():
    graph = TransitGraph()
    graph.add_edge(st("A"), st("B"), FareInfo(2, 20))
    graph.add_edge(st("B"), st("C"), FareInfo(2, 20))
    graph.add_edge(st("A"), st("C"), FareInfo(30, 25))

    paths = graph.shortest_paths(st("A"), st("C"))

    assert paths.stored_value_card.path == (st("A"), st("B"), st("C"))
    assert paths.stored_value_card.total == 4
    assert paths.single_journey_ticket.path == (st("A"), st("C"))
    assert paths.single_journey_ticket.total == 25


def test_equal_cost_keeps_first_predecessor():
    graph = TransitGraph()
    graph.add_edge(st("A"), st("C"), FareInfo(10, 10))
    graph.add_edge(st("A"), st("B"), FareInfo(5, 5))
    graph.add_edge(st("B"), st("C"), FareInfo(5, 5))

    result = graph.shortest_path(st("A"), st("C"), SVC)

    assert result.total == 10
    assert result.path == (st("A"), st("C"))


def test_negative_fares_are_skipped():
    graph = TransitGraph()
    graph.add_edge(st("A"), st("B"), FareInfo(-5, -5))
    graph.add_edge(st("A"), st("C"), FareInfo(1, 1))
    graph.add_edge(st("C"), st("B"), FareInfo(1, 1))

    result = graph.shortest_path(st("A"), st("B"), SJT)

    assert result.total == 2
    assert result.path == (st("A"), st("C"), st("B"))


def test_only_negative_edge_means_no_route():
    graph = TransitGraph()
    graph.add_edge(st("A"), st("B"), FareInfo(-1, -1))

    with pytest.raises(NoRouteFoundError):
        graph.shortest_path(st("A"), st("B"), SVC)


def test_broken_predecessor_chain_is_reported():
    graph = TransitGraph()
    graph.ensure_node(st("A"))
    graph.ensure_node(st("B"))
    graph.ensure_node(st("C"))

    with pytest.raises(PathReconstructionError) as exc:
        graph._reconstruct({2: 1}, 0, 2)

    assert exc.value.broken_at == str(st("B"))
    assert not isinstance(exc.value, NoRouteFoundError)


def test_frozen_graph_rejects_mutation():
    graph = TransitGraph()
    graph.add_edge(st("A"), st("B"), FareInfo(1, 1))
    graph.freeze()

    with pytest.raises(GraphFrozenError):
        graph.ensure_node(st("C"))
    with pytest.raises(GraphFrozenError):
        graph.add_edge(st("A"), st("C"), FareInfo(1, 1))
    with pytest.raises(GraphFrozenError):
        graph.add_transfer(st("A"), st("B"))

    assert graph.shortest_path(st("A"), st("B"), SVC).total == 1


def test_concurrent_registration_assigns_one_index_per_station():
    graph = TransitGraph()
    names = [st(str(i)) for i in range(50)]
    barrier = threading.Barrier(8)
    results = []

    def worker():
        barrier.wait()
        results.append([graph.ensure_node(s) for s in names])

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(graph) == 50
    assert all(r == results[0] for r in results)
    assert sorted(results[0]) == list(range(50))


def test_total_matches_leg_fares_and_is_symmetric(directory):
    graph = build_graph(directory)
    nodes = graph.stations()

    for a in nodes:
        for b in nodes:
            there = graph.shortest_paths(a, b)
            back = graph.shortest_paths(b, a)
            for policy in FarePolicy:
                result = there.for_policy(policy)
                assert result.path[0] == a and result.path[-1] == b
                assert result.total == leg_sum(result)
                recomputed = sum(
                    (
                        graph.fare_between(u, v).for_policy(policy)
                        for u, v in zip(result.path, result.path[1:])
                    ),
                    Decimal(0),
                )
                assert result.total == recomputed
                assert result.total == back.for_policy(policy).total


def test_adding_transfer_never_raises_a_total():
    def network(with_transfer: bool) -> TransitGraph:
        graph = TransitGraph()
        graph.add_edge(st("A", "L1"), st("B", "L1"), FareInfo(10, 12))
        graph.add_edge(st("B", "L1"), st("C", "L1"), FareInfo(10, 12))
        graph.add_edge(st("A", "L1"), st("C", "L1"), FareInfo(30, 15))
        graph.add_edge(st("D", "L2"), st("E", "L2"), FareInfo(5, 6))
        graph.add_transfer(st("C", "L1"), st("D", "L2"))
        if with_transfer:
            graph.add_transfer(st("A", "L1"), st("E", "L2"))
        return graph

    before = network(False)
    after = network(True)

    for a in before.stations():
        for b in before.stations():
            for policy in FarePolicy:
                old = before.shortest_path(a, b, policy).total
                new = after.shortest_path(a, b, policy).total
                assert new <= old

    assert after.shortest_path(st("A", "L1"), st("E", "L2"), SVC).total == 0


def test_transfer_joins_disconnected_components():
    graph = TransitGraph()
    graph.add_edge(st("A", "L1"), st("B", "L1"), FareInfo(10, 12))
    graph.add_edge(st("C", "L2"), st("D", "L2"), FareInfo(5, 6))

    with pytest.raises(NoRouteFoundError):
        graph.shortest_path(st("A", "L1"), st("D", "L2"), SVC)

    graph.add_transfer(st("B", "L1"), st("C", "L2"))
    result = graph.shortest_path(st("A", "L1"), st("D", "L2"), SVC)

    assert result.total == 15
    assert result.transfer_count == 1


def test_neighbors_lists_adjacent_stations():
    graph = TransitGraph()
    graph.add_edge(st("A"), st("B"), FareInfo(1, 2))
    graph.add_edge(st("A"), st("C"), FareInfo(3, 4))

    assert graph.neighbors(st("A")) == {
        st("B"): FareInfo(1, 2),
        st("C"): FareInfo(3, 4),
    }
    assert graph.fare_between(st("B"), st("C")) is None


def test_graph_satisfies_query_port(directory):
    from fare_calculator.ports import FareGraphPort

    assert isinstance(build_graph(directory), FareGraphPort)
