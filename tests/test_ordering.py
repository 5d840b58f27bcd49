from __future__ import annotations

from generations import assign_generations
from ordering import (
    LayerGraph,
    Unit,
    build_supernode_layers,
    compute_member_upstream_index,
    compute_member_upstream_index_multi,
    count_crossings,
    couple_unit_id,
    median_of,
    minimize_crossings,
    single_unit_id,
)


def _crossed_graph() -> LayerGraph:
    graph = LayerGraph(
        layers=[
            [Unit("S:a", 0, ["a"]), Unit("S:b", 0, ["b"])],
            [Unit("S:c", 1, ["c"]), Unit("S:d", 1, ["d"])],
        ],
        edges=[("S:a", "S:d"), ("S:b", "S:c")],
    )
    graph.reindex()
    return graph


def test_unit_ids() -> None:
    assert couple_unit_id("b", "a") == "C:a:b"
    assert single_unit_id("a") == "S:a"


def test_median_of() -> None:
    assert median_of([], 7) == 7
    assert median_of([3, 1], 0) == 2
    assert median_of([5, 1, 2], 0) == 2


def test_build_supernode_layers_groups_couples(extended_family) -> None:
    people = extended_family.graph.people
    gen = assign_generations(people, "Vater")

    build = build_supernode_layers(gen, people)

    assert (build.min_gen, build.max_gen) == (0, 2)
    assert [u.id for u in build.graph.layers[0]] == ["C:Mutter:Vater"]
    assert [u.id for u in build.graph.layers[1]] == ["C:Frau1:Kind1", "C:Kind2:Mann2", "S:Kind3"]
    assert [u.id for u in build.graph.layers[2]] == ["S:Enkel1", "S:Enkelin2"]
    assert build.unit_of_member["Frau1"] == "C:Frau1:Kind1"
    assert ("C:Mutter:Vater", "S:Kind3") in build.graph.edges
    assert ("C:Frau1:Kind1", "S:Enkel1") in build.graph.edges
    # one edge per unit pair even though both partners are parents
    assert len(build.graph.edges) == len(set(build.graph.edges)) == 5


def test_count_crossings() -> None:
    assert count_crossings(_crossed_graph()) == 1


def test_minimize_crossings_removes_simple_crossing() -> None:
    graph = minimize_crossings(_crossed_graph())

    assert count_crossings(graph) == 0
    assert [u.id for u in graph.layers[1]] == ["S:d", "S:c"]
    assert graph.index_of_unit["S:d"] == 0


def test_minimize_crossings_is_deterministic(extended_family) -> None:
    people = extended_family.graph.people
    gen = assign_generations(people, "Vater")

    first = minimize_crossings(build_supernode_layers(gen, people).graph)
    second = minimize_crossings(build_supernode_layers(gen, people).graph)

    assert [[u.id for u in layer] for layer in first.layers] == [
        [u.id for u in layer] for layer in second.layers
    ]


def test_upstream_index(extended_family) -> None:
    people = extended_family.graph.people
    gen = assign_generations(people, "Vater")
    build = build_supernode_layers(gen, people)

    single = compute_member_upstream_index(gen, people, build)
    multi = compute_member_upstream_index_multi(gen, people, build)

    assert "Vater" not in single
    assert single["Kind1"] == 0
    assert single["Enkel1"] == build.unit_index("Kind1")
    assert single["Enkelin2"] == build.unit_index("Kind2")
    # parents (index 0 or 1) and the grandparents at index 0 pull the value down
    assert multi["Enkelin2"] < single["Enkelin2"]
