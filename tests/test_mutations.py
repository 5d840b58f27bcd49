from __future__ import annotations

import pytest

from errors import (
    AlreadyMarriedError,
    InvariantViolation,
    PersonNotFoundError,
    TooManyParentsError,
    UnsupportedRelationshipError,
)
from models import Relation
import mutations


def _state(graph) -> dict:
    return {
        pid: (p.spouse_id, list(p.parent_ids), list(p.child_ids), set(p.adopted_child_ids))
        for pid, p in graph.people.items()
    }


def test_add_spouse_links_both_sides(builder) -> None:
    builder.person("A", "M")
    builder.person("B", "F")

    mutations.add_spouse(builder.graph, "A", "B")

    assert builder.people["A"].spouse_id == "B"
    assert builder.people["B"].spouse_id == "A"


def test_add_spouse_is_idempotent_in_either_order(builder) -> None:
    builder.person("A", "M")
    builder.person("B", "F")
    builder.marry("A", "B")
    before = _state(builder.graph)

    mutations.add_spouse(builder.graph, "A", "B")
    mutations.add_spouse(builder.graph, "B", "A")

    assert _state(builder.graph) == before


def test_add_spouse_rejects_a_second_marriage(builder) -> None:
    builder.person("A", "M")
    builder.person("B", "F")
    builder.person("C", "F")
    builder.marry("A", "B")

    with pytest.raises(AlreadyMarriedError, match="A is already married to B."):
        mutations.add_spouse(builder.graph, "A", "C")
    assert builder.people["C"].spouse_id is None


def test_add_spouse_rejects_self(builder) -> None:
    builder.person("A", "M")

    with pytest.raises(InvariantViolation):
        mutations.add_spouse(builder.graph, "A", "A")


def test_unknown_person_is_reported(builder) -> None:
    builder.person("A", "M")

    with pytest.raises(PersonNotFoundError):
        mutations.add_spouse(builder.graph, "A", "ghost")


def test_add_child_attaches_to_mixed_sex_couple(builder) -> None:
    builder.person("Dad", "M")
    builder.person("Mom", "F")
    builder.marry("Dad", "Mom")

    builder.kid("Mom", "Kid")

    assert set(builder.people["Kid"].parent_ids) == {"Dad", "Mom"}
    assert builder.people["Dad"].child_ids == ["Kid"]
    assert builder.people["Mom"].child_ids == ["Kid"]


def test_add_child_only_attaches_acting_parent_of_same_sex_couple(builder) -> None:
    builder.person("A", "F")
    builder.person("B", "F")
    builder.marry("A", "B")

    builder.kid("A", "Kid")

    assert builder.people["Kid"].parent_ids == ["A"]
    assert builder.people["B"].child_ids == []


def test_add_child_of_single_parent(builder) -> None:
    builder.person("S", "F")

    builder.kid("S", "Kid", adopted=True)

    assert builder.people["Kid"].parent_ids == ["S"]
    assert builder.people["S"].adopted_child_ids == {"Kid"}


def test_add_child_writes_nothing_when_cap_would_be_exceeded(builder) -> None:
    builder.person("Dad", "M")
    builder.person("Mom", "F")
    builder.marry("Dad", "Mom")
    builder.person("Other", "M")
    builder.person("Kid", "F")
    builder.link("Other", "Kid")
    before = _state(builder.graph)

    with pytest.raises(TooManyParentsError):
        mutations.add_child(builder.graph, "Mom", "Kid")

    assert _state(builder.graph) == before


def test_third_parent_is_rejected_and_graph_unchanged(builder) -> None:
    for pid in ("A", "B", "C", "P"):
        builder.person(pid)
    builder.link("A", "P")
    builder.link("B", "P")
    before = _state(builder.graph)

    with pytest.raises(TooManyParentsError):
        mutations.add_parent(builder.graph, "P", "P", "C")

    assert _state(builder.graph) == before


def test_marry_existing_parent_fails_on_third_parent(builder) -> None:
    builder.person("A", "M")
    builder.person("B", "F")
    builder.person("C", "M")
    builder.person("P")
    builder.link("A", "P")
    builder.link("B", "P")

    with pytest.raises(TooManyParentsError):
        mutations.add_parent(builder.graph, "P", "P", "C", marry_existing_parent=True)

    assert builder.people["A"].spouse_id is None
    assert builder.people["B"].spouse_id is None
    assert builder.people["P"].parent_ids == ["A", "B"]


def test_marry_existing_parent_marries_the_two_parents(builder) -> None:
    builder.person("A", "M")
    builder.person("B", "F")
    builder.person("P")
    builder.link("A", "P")

    mutations.add_parent(builder.graph, "P", "P", "B", marry_existing_parent=True)

    assert builder.people["A"].spouse_id == "B"
    assert builder.people["B"].spouse_id == "A"
    # marrying does not copy children across
    assert builder.people["B"].child_ids == ["P"]


def test_add_parent_is_one_sided(builder) -> None:
    builder.person("Kid")
    builder.person("Mom", "F")
    builder.person("Step", "M")
    builder.marry("Mom", "Step")

    mutations.add_parent(builder.graph, "Kid", "Kid", "Mom")

    assert builder.people["Kid"].parent_ids == ["Mom"]
    assert builder.people["Step"].child_ids == []


def test_add_parent_moves_root_above_parentless_root(builder) -> None:
    builder.person("Root", "M")
    builder.person("Wife", "F")
    builder.marry("Root", "Wife")
    builder.person("Opa", "M")
    builder.person("Oma", "F")
    builder.person("Schwiegervater", "M")

    root = mutations.add_parent(builder.graph, "Root", "Root", "Opa")
    assert root == "Opa"

    # Root already has a parent now
    assert mutations.add_parent(builder.graph, root, "Root", "Oma") == "Opa"

    # The root's spouse is not the root any more
    assert mutations.add_parent(builder.graph, root, "Wife", "Schwiegervater") == "Opa"


def test_add_parent_of_root_spouse_moves_root(builder) -> None:
    builder.person("Root", "M")
    builder.person("Wife", "F")
    builder.marry("Root", "Wife")
    builder.person("Schwiegervater", "M")

    assert mutations.add_parent(builder.graph, "Root", "Wife", "Schwiegervater") == "Schwiegervater"


def test_add_parent_elsewhere_keeps_root(builder) -> None:
    builder.person("Root", "M")
    builder.kid("Root", "Kid")
    builder.person("Other", "F")

    assert mutations.add_parent(builder.graph, "Root", "Kid", "Other") == "Root"


def test_add_member_creates_person_and_reports_root(builder) -> None:
    builder.person("Root", "M")

    result = mutations.add_member(builder.graph, "Root", "Root", "Vater", "M", Relation.PARENT)

    assert result.person.name == "Vater"
    assert result.root_id == result.person.id
    assert builder.people["Root"].parent_ids == [result.person.id]


def test_add_member_accepts_relation_strings(builder) -> None:
    builder.person("Root", "M")

    result = mutations.add_member(builder.graph, "Root", "Root", "Frau", "F", "SPOUSE")

    assert builder.people["Root"].spouse_id == result.person.id
    assert result.root_id == "Root"


def test_add_member_unsupported_relation(builder) -> None:
    builder.person("Root", "M")

    with pytest.raises(UnsupportedRelationshipError):
        mutations.add_member(builder.graph, "Root", "Root", "X", "M", "COUSIN")
    assert len(builder.graph) == 1


def test_add_member_removes_new_person_on_failure(builder) -> None:
    builder.person("A", "M")
    builder.person("B", "F")
    builder.marry("A", "B")

    with pytest.raises(AlreadyMarriedError):
        mutations.add_member(builder.graph, "A", "A", "C", "F", Relation.SPOUSE)

    assert set(builder.people) == {"A", "B"}
