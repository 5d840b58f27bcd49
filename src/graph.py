"""Person arena and NetworkX projections of it."""

import logging
import uuid

import networkx as nx

from errors import InvariantViolation, PersonNotFoundError
from models import Person, Sex

logger = logging.getLogger(__name__)


def new_person_id() -> str:
    return uuid.uuid4().hex[:10]


class FamilyGraph:
    """
    Arena of people keyed by identifier.

    Relations are stored as identifier references on each Person, so the
    arena doubles as the identifier -> person index. Insertion order is kept
    and used wherever a stable order is needed.
    """

    def __init__(self):
        self.people: dict[str, Person] = {}

    def __contains__(self, person_id: object) -> bool:
        return person_id in self.people

    def __iter__(self):
        return iter(self.people.values())

    def __len__(self) -> int:
        return len(self.people)

    def new_person(self, name: str, sex: Sex | str, person_id: str | None = None) -> Person:
        """Create and register a person. Identifiers are never reused."""
        if person_id is None:
            person_id = new_person_id()
            while person_id in self.people:
                person_id = new_person_id()
        elif person_id in self.people:
            raise InvariantViolation(f"Person ID {person_id} is already taken")

        person = Person(id=person_id, name=name, sex=Sex(sex))
        self.people[person_id] = person
        return person

    def add(self, person: Person) -> Person:
        """Register an already built person (used when rebuilding a snapshot)."""
        if person.id in self.people:
            raise InvariantViolation(f"Person ID {person.id} is already taken")
        self.people[person.id] = person
        return person

    def get(self, person_id: str) -> Person:
        try:
            return self.people[person_id]
        except KeyError:
            raise PersonNotFoundError(person_id) from None

    def remove(self, person_id: str) -> None:
        """Drop a person and every link that points at them."""
        person = self.people.pop(person_id, None)
        if person is None:
            return
        spouse = self.people.get(person.spouse_id) if person.spouse_id else None
        if spouse is not None and spouse.spouse_id == person_id:
            spouse.spouse_id = None
        for pid in person.parent_ids:
            parent = self.people.get(pid)
            if parent is None:
                continue
            if person_id in parent.child_ids:
                parent.child_ids.remove(person_id)
            parent.adopted_child_ids.discard(person_id)
        for cid in person.child_ids:
            child = self.people.get(cid)
            if child is not None and person_id in child.parent_ids:
                child.parent_ids.remove(person_id)
        logger.debug("removed person %s", person_id)

    def spouse_of(self, person: Person) -> Person | None:
        if person.spouse_id is None:
            return None
        return self.people.get(person.spouse_id)

    def parents_of(self, person: Person) -> list[Person]:
        return [self.people[pid] for pid in person.parent_ids if pid in self.people]

    def children_of(self, person: Person) -> list[Person]:
        return [self.people[cid] for cid in person.child_ids if cid in self.people]

    # ------------------------------------------------------------------
    # NetworkX projections
    # ------------------------------------------------------------------

    def to_networkx(self) -> nx.DiGraph:
        """
        Build a NetworkX directed graph of the arena.

        Person nodes carry `person_name` and `sex`. PARENT_OF edges go from
        parent to child and carry the per-edge `adopted` flag; a couple gets a
        SPOUSE_OF edge in both directions.
        """
        G = nx.DiGraph()

        for p in self.people.values():
            G.add_node(p.id, person_name=p.name, sex=p.sex.value)

        for p in self.people.values():
            for cid in p.child_ids:
                if cid in self.people:
                    G.add_edge(
                        p.id,
                        cid,
                        relationship_type="PARENT_OF",
                        adopted=cid in p.adopted_child_ids,
                    )
            if p.spouse_id and p.spouse_id in self.people:
                G.add_edge(p.id, p.spouse_id, relationship_type="SPOUSE_OF")

        return G
