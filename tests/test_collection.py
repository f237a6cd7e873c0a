"""Tests for TopologicalCollection."""

import itertools

import pytest

from topograph import (
    Dependency,
    KeyEquality,
    Node,
    SortError,
    SortFailure,
    SortResult,
    TopologicalCollection,
)


def _pairs(edges: list[Dependency[str]] | tuple[Dependency[str], ...]) -> set[tuple[str, str]]:
    return {(edge.ancestor.value, edge.dependent.value) for edge in edges}


def _values(nodes: list[Node[str]]) -> list[str]:
    return [node.value for node in nodes]


@pytest.fixture
def chain() -> TopologicalCollection[str]:
    """A -> B -> C."""
    graph = TopologicalCollection[str]()
    graph.add_dependency("A", "B")
    graph.add_dependency("B", "C")
    return graph


@pytest.fixture
def diamond() -> TopologicalCollection[str]:
    """A -> C, B -> C, C -> D."""
    graph = TopologicalCollection[str]()
    graph.add_dependency("A", "C")
    graph.add_dependency("B", "C")
    graph.add_dependency("C", "D")
    return graph


class TestAddValue:
    """Tests for registering values."""

    def test_returns_node_wrapping_value(self) -> None:
        graph = TopologicalCollection[str]()
        node = graph.add_value("A")
        assert node.value == "A"
        assert node.collection is graph
        assert len(graph) == 1

    def test_is_idempotent(self) -> None:
        graph = TopologicalCollection[str]()
        first = graph.add_value("A")
        second = graph.add_value("A")
        assert first is second
        assert len(graph) == 1

    def test_preserves_insertion_order(self) -> None:
        graph = TopologicalCollection[str]()
        for value in ["c", "a", "b"]:
            graph.add_value(value)
        assert graph.values == ["c", "a", "b"]
        assert list(graph) == ["c", "a", "b"]

    def test_contains(self) -> None:
        graph = TopologicalCollection[str]()
        node = graph.add_value("A")
        assert "A" in graph
        assert node in graph
        assert "B" not in graph


class TestAddDependency:
    """Tests for adding dependencies."""

    def test_registers_both_values(self) -> None:
        graph = TopologicalCollection[str]()
        graph.add_dependency("A", "B")
        assert graph.values == ["A", "B"]
        assert _pairs(graph.edges) == {("A", "B")}

    def test_returns_dependent_node(self) -> None:
        graph = TopologicalCollection[str]()
        node = graph.add_dependency("A", "B")
        assert node.value == "B"
        assert node is graph.find("B")

    def test_duplicate_is_noop(self) -> None:
        graph = TopologicalCollection[str]()
        graph.add_dependency("A", "B")
        revision = graph.revision
        graph.add_dependency("A", "B")
        assert len(graph) == 2
        assert len(graph.edges) == 1
        assert graph.revision == revision

    def test_reverse_pair_is_a_different_edge(self) -> None:
        graph = TopologicalCollection[str]()
        graph.add_dependency("A", "B")
        graph.add_dependency("B", "A")
        assert _pairs(graph.edges) == {("A", "B"), ("B", "A")}

    def test_self_loop_registers_node_without_edge(self) -> None:
        graph = TopologicalCollection[str]()
        node = graph.add_dependency("A", "A")
        assert node.value == "A"
        assert len(graph) == 1
        assert graph.edges == []

    def test_add_dependencies(self) -> None:
        graph = TopologicalCollection[str]()
        graph.add_dependencies([("A", "B"), ("B", "C"), ("A", "B")])
        assert _pairs(graph.edges) == {("A", "B"), ("B", "C")}


class TestRemove:
    """Tests for removing values."""

    def test_remove_unknown_value(self, chain: TopologicalCollection[str]) -> None:
        assert chain.remove("Z") is False
        assert len(chain) == 3

    def test_remove_drops_touching_edges(self, chain: TopologicalCollection[str]) -> None:
        assert chain.remove("B") is True
        assert chain.values == ["A", "C"]
        assert chain.edges == []

    def test_no_query_returns_removed_value(self, diamond: TopologicalCollection[str]) -> None:
        diamond.remove("C")
        assert "C" not in diamond
        for node in diamond.nodes:
            assert "C" not in _values(diamond.ancestors(node))
            assert "C" not in _values(diamond.dependents(node))
        assert "C" not in _values(diamond.roots())
        assert _values(diamond.roots()) == ["A", "B", "D"]

    def test_removed_node_has_no_neighbours(self, chain: TopologicalCollection[str]) -> None:
        chain.remove("B")
        assert chain.ancestors("B") == []
        assert chain.dependents("B") == []

    def test_readded_value_sorts_after_older_values(self) -> None:
        graph = TopologicalCollection[str]()
        for value in ["A", "B", "C"]:
            graph.add_value(value)
        graph.remove("A")
        graph.add_value("A")
        assert graph.sort().order == ("B", "C", "A")

    def test_clear(self, chain: TopologicalCollection[str]) -> None:
        chain.clear()
        assert len(chain) == 0
        assert chain.edges == []
        assert chain.roots() == []


class TestQueries:
    """Tests for roots, leaves, ancestors and dependents."""

    def test_roots_chain(self, chain: TopologicalCollection[str]) -> None:
        assert _values(chain.roots()) == ["A"]

    def test_roots_multiple(self, diamond: TopologicalCollection[str]) -> None:
        assert _values(diamond.roots()) == ["A", "B"]

    def test_roots_include_isolated_values(self, chain: TopologicalCollection[str]) -> None:
        chain.add_value("X")
        assert _values(chain.roots()) == ["A", "X"]

    def test_roots_of_cycle_are_empty(self) -> None:
        graph = TopologicalCollection[str]()
        graph.add_dependencies([("A", "B"), ("B", "A")])
        assert graph.roots() == []

    def test_leaves(self, diamond: TopologicalCollection[str]) -> None:
        assert _values(diamond.leaves()) == ["D"]

    def test_ancestors(self, diamond: TopologicalCollection[str]) -> None:
        assert _values(diamond.ancestors("C")) == ["A", "B"]
        assert diamond.ancestors("A") == []

    def test_dependents(self, diamond: TopologicalCollection[str]) -> None:
        assert _values(diamond.dependents("A")) == ["C"]
        assert _values(diamond.dependents("C")) == ["D"]
        assert diamond.dependents("D") == []

    def test_queries_accept_nodes(self, diamond: TopologicalCollection[str]) -> None:
        node = diamond.find("C")
        assert node is not None
        assert _values(diamond.ancestors(node)) == ["A", "B"]

    def test_node_views_follow_edge_set(self, chain: TopologicalCollection[str]) -> None:
        node = chain.find("B")
        assert node is not None
        assert _values(node.ancestors) == ["A"]
        assert _values(node.dependents) == ["C"]

        chain.add_dependency("B", "D")
        assert _values(node.dependents) == ["C", "D"]

    def test_find_unknown(self, chain: TopologicalCollection[str]) -> None:
        assert chain.find("Z") is None

    def test_unknown_value_has_no_neighbours(self, chain: TopologicalCollection[str]) -> None:
        assert chain.ancestors("Z") == []
        assert chain.dependents("Z") == []


class TestSortScenarios:
    """Sorting behaviour for small, fully specified graphs."""

    def test_linear_chain(self, chain: TopologicalCollection[str]) -> None:
        result = chain.sort()
        assert result.success is True
        assert result.order == ("A", "B", "C")
        assert result.remaining_edges == ()
        assert result.failure is None

    def test_three_cycle(self) -> None:
        graph = TopologicalCollection[str]()
        graph.add_dependencies([("A", "B"), ("B", "C"), ("C", "A")])

        result = graph.sort()

        assert result.success is False
        assert result.failure is SortFailure.CYCLE
        assert result.order is None
        assert result.remaining_edges is not None
        assert _pairs(result.remaining_edges) == {("A", "B"), ("B", "C"), ("C", "A")}

    def test_single_value(self) -> None:
        graph = TopologicalCollection[str]()
        graph.add_value("A")
        result = graph.sort()
        assert result.success is True
        assert result.order == ("A",)

    def test_single_value_with_self_loop(self) -> None:
        graph = TopologicalCollection[str]()
        graph.add_dependency("A", "A")
        result = graph.sort()
        assert result.success is True
        assert result.order == ("A",)

    def test_empty_collection(self) -> None:
        result = TopologicalCollection[str]().sort()
        assert result.success is False
        assert result.failure is SortFailure.EMPTY
        assert result.order is None
        assert result.remaining_edges is None

    def test_diamond(self, diamond: TopologicalCollection[str]) -> None:
        result = diamond.sort()
        assert result.success is True
        assert result.order is not None
        order = list(result.order)
        assert order in (["A", "B", "C", "D"], ["B", "A", "C", "D"])
        # First inserted wins among ready values
        assert order == ["A", "B", "C", "D"]

    def test_inconsistent_singleton(self) -> None:
        graph = TopologicalCollection[str]()
        node = graph.add_value("A")
        # Only reachable by bypassing add_dependency
        graph._edges[Dependency(node, node)] = None

        result = graph.sort()

        assert result.success is False
        assert result.failure is SortFailure.INCONSISTENT_SINGLETON
        assert result.order is None
        assert result.remaining_edges is None


class TestSortProperties:
    """General properties of sort over many graphs."""

    @pytest.mark.parametrize("size", [2, 3, 5, 8])
    def test_acyclic_totality(self, size: int) -> None:
        # Every forward pair i -> j (i < j) over a shuffled insertion order
        values = [f"n{i}" for i in range(size)]
        graph = TopologicalCollection[str]()
        for value in reversed(values):
            graph.add_value(value)
        for i, j in itertools.combinations(range(size), 2):
            if (i + j) % 2 == 0:
                graph.add_dependency(values[i], values[j])

        result = graph.sort()

        assert result.success is True
        assert result.order is not None
        assert sorted(result.order) == sorted(values)
        position = {value: index for index, value in enumerate(result.order)}
        for edge in graph.edges:
            assert position[edge.ancestor.value] < position[edge.dependent.value]

    def test_residual_edges_exclude_acyclic_part(self) -> None:
        graph = TopologicalCollection[str]()
        graph.add_dependencies([("X", "Y"), ("Y", "A"), ("A", "B"), ("B", "A")])

        result = graph.sort()

        assert result.success is False
        assert result.remaining_edges is not None
        assert _pairs(result.remaining_edges) == {("A", "B"), ("B", "A")}

    def test_residual_edges_include_downstream_of_cycle(self) -> None:
        graph = TopologicalCollection[str]()
        graph.add_dependencies([("A", "B"), ("B", "A"), ("B", "C")])

        result = graph.sort()

        assert result.remaining_edges is not None
        assert _pairs(result.remaining_edges) == {("A", "B"), ("B", "A"), ("B", "C")}

    def test_sort_does_not_mutate_graph(self) -> None:
        graph = TopologicalCollection[str]()
        graph.add_dependencies([("A", "B"), ("B", "C"), ("C", "A"), ("C", "D")])
        edges_before = _pairs(graph.edges)

        graph.sort()

        assert _pairs(graph.edges) == edges_before
        assert graph.values == ["A", "B", "C", "D"]

    def test_has_cycle(self, chain: TopologicalCollection[str]) -> None:
        assert chain.has_cycle() is False
        chain.add_dependency("C", "A")
        assert chain.has_cycle() is True
        chain.remove("C")
        assert chain.has_cycle() is False


class TestSortCache:
    """The cached sort result is a view invalidated by mutation."""

    def test_repeated_sort_returns_cached_result(self, chain: TopologicalCollection[str]) -> None:
        first = chain.sort()
        assert chain.last_result is first
        assert chain.sort() is first

    def test_mutation_invalidates_cache(self, chain: TopologicalCollection[str]) -> None:
        first = chain.sort()
        chain.add_dependency("C", "D")
        assert chain.last_result is None
        second = chain.sort()
        assert second is not first
        assert second.order == ("A", "B", "C", "D")

    def test_noop_mutation_keeps_cache(self, chain: TopologicalCollection[str]) -> None:
        first = chain.sort()
        chain.add_value("A")
        chain.add_dependency("A", "B")
        chain.remove("Z")
        assert chain.last_result is first


class TestSortResult:
    """Tests for SortResult helpers."""

    def test_raise_for_failure_returns_order(self, chain: TopologicalCollection[str]) -> None:
        assert chain.sort().raise_for_failure() == ("A", "B", "C")

    def test_raise_for_failure_on_cycle(self) -> None:
        graph = TopologicalCollection[str]()
        graph.add_dependencies([("A", "B"), ("B", "A")])
        result = graph.sort()

        with pytest.raises(SortError, match="Cycle") as excinfo:
            result.raise_for_failure()

        assert excinfo.value.result is result
        assert "A -> B" in str(excinfo.value)

    def test_raise_for_failure_on_empty(self) -> None:
        with pytest.raises(SortError, match="empty"):
            SortResult[str](success=False, failure=SortFailure.EMPTY).raise_for_failure()


class TestCustomEquality:
    """Identity routed through a custom equality strategy."""

    def test_case_insensitive_nodes(self) -> None:
        graph = TopologicalCollection(KeyEquality(str.casefold))
        first = graph.add_value("Build")
        second = graph.add_value("BUILD")
        assert first is second
        assert graph.values == ["Build"]

    def test_case_insensitive_edges(self) -> None:
        graph = TopologicalCollection(KeyEquality(str.casefold))
        graph.add_dependency("build", "test")
        graph.add_dependency("BUILD", "Test")
        assert len(graph.edges) == 1

    def test_case_insensitive_self_loop(self) -> None:
        graph = TopologicalCollection(KeyEquality(str.casefold))
        graph.add_dependency("a", "A")
        assert len(graph) == 1
        assert graph.edges == []

    def test_case_insensitive_queries_and_removal(self) -> None:
        graph = TopologicalCollection(KeyEquality(str.casefold))
        graph.add_dependency("fetch", "build")
        assert "FETCH" in graph
        assert _values(graph.dependents("Fetch")) == ["build"]
        assert graph.remove("BUILD") is True
        assert graph.edges == []

    def test_equality_by_derived_key(self) -> None:
        graph = TopologicalCollection(KeyEquality(lambda pair: pair[0]))
        graph.add_dependency(("a", 1), ("b", 2))
        graph.add_dependency(("a", 99), ("c", 3))
        assert graph.values == [("a", 1), ("b", 2), ("c", 3)]
        assert graph.sort().order == (("a", 1), ("b", 2), ("c", 3))

    def test_nodes_of_different_collections_not_equal(self) -> None:
        folded = TopologicalCollection(KeyEquality(str.casefold))
        exact = TopologicalCollection[str]()
        lower = folded.add_value("a")
        upper = exact.add_value("A")
        assert lower != upper
        assert upper != lower
        assert exact.add_value("a") != folded.add_value("a")

    def test_lookup_with_node_of_other_collection(self) -> None:
        folded = TopologicalCollection(KeyEquality(str.casefold))
        folded.add_dependency("fetch", "build")
        other = TopologicalCollection[str]()
        node = other.add_value("FETCH")
        assert node in folded
        assert _values(folded.dependents(node)) == ["build"]
