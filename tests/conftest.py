from __future__ import annotations

import pytest

from family import FamilyTree, setup_sample_family
from graph import FamilyGraph
from models import Person
import mutations


class GraphBuilder:
    """Builds small graphs whose person ids are their names."""

    def __init__(self) -> None:
        self.graph = FamilyGraph()

    @property
    def people(self) -> dict[str, Person]:
        return self.graph.people

    def person(self, pid: str, sex: str = "M") -> Person:
        return self.graph.new_person(pid, sex, person_id=pid)

    def marry(self, a: str, b: str) -> None:
        mutations.add_spouse(self.graph, a, b)

    def kid(self, parent: str, pid: str, sex: str = "M", adopted: bool = False) -> Person:
        child = self.person(pid, sex)
        mutations.add_child(self.graph, parent, pid, adopted=adopted)
        return child

    def link(self, parent: str, child: str) -> None:
        mutations.link_parent(self.graph, parent, child)


@pytest.fixture()
def builder() -> GraphBuilder:
    return GraphBuilder()


@pytest.fixture()
def sample_family() -> FamilyTree:
    return setup_sample_family()


@pytest.fixture()
def extended_family() -> FamilyTree:
    """
    Vater + Mutter -> Kind1, Kind2, Kind3
    Kind1 + Frau1 -> Enkel1
    Kind2 + Mann2 -> Enkelin2
    """
    b = GraphBuilder()
    b.person("Vater", "M")
    b.person("Mutter", "F")
    b.marry("Vater", "Mutter")
    b.kid("Mutter", "Kind1", "M")
    b.kid("Mutter", "Kind2", "F")
    b.kid("Mutter", "Kind3", "M")
    b.person("Frau1", "F")
    b.marry("Kind1", "Frau1")
    b.kid("Kind1", "Enkel1", "M")
    b.person("Mann2", "M")
    b.marry("Kind2", "Mann2")
    b.kid("Kind2", "Enkelin2", "F")
    return FamilyTree(b.graph, "Vater")


@pytest.fixture()
def bloodline_family() -> GraphBuilder:
    """
    GP1 + GP2 -> P, A
    P + S -> F (focus), Sib
    A + AS -> C
    C + CS -> C2
    F + FS
    """
    b = GraphBuilder()
    b.person("GP1", "M")
    b.person("GP2", "F")
    b.marry("GP1", "GP2")
    b.kid("GP1", "P", "M")
    b.kid("GP1", "A", "F")
    b.person("S", "F")
    b.marry("P", "S")
    b.kid("P", "F", "M")
    b.kid("P", "Sib", "F")
    b.person("AS", "M")
    b.marry("A", "AS")
    b.kid("A", "C", "M")
    b.person("CS", "F")
    b.marry("C", "CS")
    b.kid("C", "C2", "F")
    b.person("FS", "F")
    b.marry("F", "FS")
    return b
