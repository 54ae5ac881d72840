"""
Tests for the Topological Scheduler.

These tests verify:
- Dependency ordering (every edge respected)
- Deterministic ordering of independent nodes
- Isolated nodes and empty graphs
- Cycle detection, self-loops included
"""

import itertools
import random

import pytest

from inflow.errors import CycleError, InvalidWorkflowError
from inflow.graph.node import Connection, Node, NodeType
from inflow.graph.scheduler import order
from tests.utils.builders import edges, nodes


def ids(ordered):
    return [node.id for node in ordered]


class TestOrder:
    """Tests for order()."""

    def test_linear_chain(self):
        """A -> B -> C runs in chain order."""
        result = order(nodes("A", "B", "C"), edges("A>B", "B>C"))
        assert ids(result) == ["A", "B", "C"]

    def test_chain_given_out_of_order(self):
        """Input order does not override dependencies."""
        result = order(nodes("C", "B", "A"), edges("A>B", "B>C"))
        assert ids(result) == ["A", "B", "C"]

    def test_diamond(self):
        """A -> {B, C} -> D: A first, D last."""
        result = order(nodes("A", "B", "C", "D"), edges("A>B", "A>C", "B>D", "C>D"))
        assert ids(result)[0] == "A"
        assert ids(result)[-1] == "D"
        assert set(ids(result)[1:3]) == {"B", "C"}

    def test_independent_nodes_keep_input_order(self):
        """Nodes with no relationship are returned in input order."""
        result = order(nodes("X", "A", "M"), [])
        assert ids(result) == ["X", "A", "M"]

    def test_siblings_released_in_input_order(self):
        """Dependents of one node follow input order, not connection order."""
        result = order(nodes("root", "b", "a"), edges("root>a", "root>b"))
        assert ids(result) == ["root", "b", "a"]

    def test_isolated_node_is_scheduled(self):
        """A node without connections still appears."""
        result = order(nodes("A", "B", "lonely"), edges("A>B"))
        assert sorted(ids(result)) == ["A", "B", "lonely"]
        assert ids(result).index("A") < ids(result).index("B")

    def test_single_node(self):
        assert ids(order(nodes("only"), [])) == ["only"]

    def test_empty_graph(self):
        """No nodes, no connections: empty order."""
        assert order([], []) == []

    def test_returns_original_node_objects(self):
        """The scheduled nodes are the input nodes, data included."""
        node = Node(id="fetch", type=NodeType.HTTP_REQUEST, data={"endpoint": "https://x"})
        result = order([node], [])
        assert result[0] is node

    def test_duplicate_edges(self):
        """A repeated connection does not break ordering."""
        result = order(nodes("A", "B"), edges("A>B", "A>B"))
        assert ids(result) == ["A", "B"]

    def test_deterministic(self):
        """Same input, same order."""
        graph = (nodes("A", "B", "C", "D", "E"), edges("A>C", "B>C", "C>D", "A>E"))
        assert ids(order(*graph)) == ids(order(*graph))


class TestOrderCycles:
    """Tests for cycle detection."""

    def test_two_node_cycle(self):
        """A -> B -> A fails with CycleError naming both nodes."""
        with pytest.raises(CycleError) as exc_info:
            order(nodes("A", "B"), edges("A>B", "B>A"))
        assert set(exc_info.value.cycle_nodes) == {"A", "B"}

    def test_self_loop(self):
        """A -> A is a cycle."""
        with pytest.raises(CycleError) as exc_info:
            order(nodes("A"), edges("A>A"))
        assert exc_info.value.cycle_nodes == ["A"]

    def test_cycle_behind_valid_prefix(self):
        """Nodes before the cycle are schedulable; the cycle members are reported."""
        with pytest.raises(CycleError) as exc_info:
            order(nodes("start", "B", "C"), edges("start>B", "B>C", "C>B"))
        assert "start" not in exc_info.value.cycle_nodes
        assert {"B", "C"} <= set(exc_info.value.cycle_nodes)

    def test_cycle_error_is_permanent(self):
        """Cycles are never retried."""
        from inflow.errors import PermanentError

        with pytest.raises(PermanentError):
            order(nodes("A", "B", "C"), edges("A>B", "B>C", "C>A"))

    def test_cycle_message(self):
        with pytest.raises(CycleError, match="cycle"):
            order(nodes("A", "B"), edges("A>B", "B>A"))


class TestOrderValidation:
    """Tests for malformed input."""

    def test_unknown_connection_endpoint(self):
        with pytest.raises(InvalidWorkflowError, match="ghost"):
            order(nodes("A"), edges("A>ghost"))

    def test_duplicate_node_id(self):
        with pytest.raises(InvalidWorkflowError, match="Duplicate"):
            order(nodes("A", "A"), [])


class TestOrderProperties:
    """Property checks over random DAGs."""

    @pytest.mark.parametrize("seed", range(10))
    def test_every_edge_respected(self, seed):
        """For each connection u -> v, u comes before v; each node exactly once."""
        rng = random.Random(seed)
        node_ids = [f"n{i}" for i in range(12)]
        # Edges only from lower to higher rank keep the graph acyclic
        rank = node_ids[:]
        rng.shuffle(rank)
        connections = [
            Connection(a, b)
            for a, b in itertools.combinations(rank, 2)
            if rng.random() < 0.25
        ]
        shuffled = nodes(*node_ids)
        rng.shuffle(shuffled)

        result = ids(order(shuffled, connections))

        assert sorted(result) == sorted(node_ids)
        position = {node_id: i for i, node_id in enumerate(result)}
        for conn in connections:
            assert position[conn.from_node_id] < position[conn.to_node_id]
