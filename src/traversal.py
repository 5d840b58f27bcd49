"""Breadth-first walks over the person arena and the lookup primitives built on them."""

from collections import deque
from collections.abc import Iterator

from graph import FamilyGraph
from models import Lookup, Person, Sex


def matches(person: Person, ref: str, by: Lookup) -> bool:
    if by is Lookup.NAME:
        return person.name == ref
    return person.id == ref


# ============================================================================
# Downward BFS (children + spouse), keeps depths
# ============================================================================


def traverse(graph: FamilyGraph, root_id: str) -> Iterator[tuple[Person, int]]:
    """
    Yield (person, depth) from the root downwards.

    Children are one level deeper than their parent, a spouse sits at the
    same depth as their partner. Each person is yielded once, at the depth of
    the first path that reached them.
    """
    if root_id not in graph:
        return
    queue: deque[tuple[str, int]] = deque([(root_id, 0)])
    seen: set[str] = set()
    while queue:
        pid, depth = queue.popleft()
        if pid in seen or pid not in graph:
            continue
        seen.add(pid)
        person = graph.people[pid]
        yield person, depth

        for cid in person.child_ids:
            queue.append((cid, depth + 1))
        if person.spouse_id:
            queue.append((person.spouse_id, depth))


def depths_from(graph: FamilyGraph, root_id: str) -> dict[str, int]:
    return {p.id: depth for p, depth in traverse(graph, root_id)}


# ============================================================================
# Connected walk (parents + children + spouse), full component
# ============================================================================


def walk_connected(graph: FamilyGraph, start_id: str) -> Iterator[Person]:
    stack = [start_id]
    seen: set[str] = set()
    while stack:
        pid = stack.pop()
        if pid in seen or pid not in graph:
            continue
        seen.add(pid)
        person = graph.people[pid]
        yield person

        if person.spouse_id:
            stack.append(person.spouse_id)
        stack.extend(person.child_ids)
        stack.extend(person.parent_ids)


def find_connected(graph: FamilyGraph, start_id: str, person_id: str) -> Person | None:
    """Find a person anywhere in the start person's component (up, down, or through a spouse)."""
    for person in walk_connected(graph, start_id):
        if person.id == person_id:
            return person
    return None


# ============================================================================
# Lookup primitives (name- or identifier-keyed)
# ============================================================================


def find(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> Person | None:
    for person, _ in traverse(graph, root_id):
        if matches(person, ref, by):
            return person
    return None


def parent_of(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> Person | None:
    """First person (in BFS order) that has a child matching `ref`."""
    for person, _ in traverse(graph, root_id):
        for cid in person.child_ids:
            child = graph.people.get(cid)
            if child is not None and matches(child, ref, by):
                return person
    return None


def _parent_by_sex(graph: FamilyGraph, parent: Person | None, sex: Sex) -> Person | None:
    if parent is None:
        return None
    if parent.sex is sex:
        return parent
    return graph.spouse_of(parent)


def father_of(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> Person | None:
    return _parent_by_sex(graph, parent_of(graph, root_id, ref, by), Sex.MALE)


def mother_of(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> Person | None:
    return _parent_by_sex(graph, parent_of(graph, root_id, ref, by), Sex.FEMALE)


def children_of(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> list[Person]:
    person = find(graph, root_id, ref, by)
    if person is None:
        return []
    return graph.children_of(person)


def siblings_of(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> list[Person]:
    """Children of any of the person's parents, excluding the person (half-siblings included)."""
    person = find(graph, root_id, ref, by)
    if person is None:
        return []
    return person_siblings(graph, person)


def person_siblings(graph: FamilyGraph, person: Person) -> list[Person]:
    out: dict[str, Person] = {}
    for parent in graph.parents_of(person):
        for child in graph.children_of(parent):
            if child.id != person.id:
                out.setdefault(child.id, child)
    return list(out.values())


def spouse_of(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> Person | None:
    person = find(graph, root_id, ref, by)
    if person is None:
        return None
    return graph.spouse_of(person)
