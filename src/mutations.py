"""Mutation operations on the person arena.

Every operation either completes with all invariants intact or raises an
InvariantViolation subclass and leaves the graph untouched:
- spouse links are symmetric, and a person has at most one spouse
- a person has at most two parents
- parent -> child and child -> parent links are written as a pair
- adoption flags only reference the parent's own children
"""

from dataclasses import dataclass
import logging

from errors import (
    AlreadyMarriedError,
    InvariantViolation,
    TooManyParentsError,
    UnsupportedRelationshipError,
)
from graph import FamilyGraph
from models import Person, Relation, Sex

logger = logging.getLogger(__name__)


@dataclass
class MutationResult:
    person: Person
    root_id: str


def _check_can_link(parent: Person, child: Person) -> None:
    if parent.id == child.id:
        raise InvariantViolation(f"{parent.name} cannot be their own parent.")
    if len(child.parent_ids) >= 2 and parent.id not in child.parent_ids:
        raise TooManyParentsError(f"{child.name} already has two parents.")


def _link(parent: Person, child: Person, adopted: bool) -> None:
    if child.id not in parent.child_ids:
        parent.child_ids.append(child.id)
    if parent.id not in child.parent_ids:
        child.parent_ids.append(parent.id)
    if adopted:
        parent.adopted_child_ids.add(child.id)


def link_parent(graph: FamilyGraph, parent_id: str, child_id: str, adopted: bool = False) -> None:
    """
    Link exactly one parent with a child.

    No propagation to the parent's spouse and no automatic marriage. Linking
    an existing pair again is a no-op (apart from setting the adoption flag).
    """
    parent = graph.get(parent_id)
    child = graph.get(child_id)
    _check_can_link(parent, child)
    _link(parent, child, adopted)


def add_spouse(graph: FamilyGraph, member_id: str, spouse_id: str) -> None:
    """Marry two people without touching parents or children."""
    member = graph.get(member_id)
    spouse = graph.get(spouse_id)

    if member.id == spouse.id:
        raise InvariantViolation(f"{member.name} cannot marry themselves.")
    if member.spouse_id == spouse.id and spouse.spouse_id == member.id:
        return

    for a in (member, spouse):
        if a.is_married():
            current = graph.people.get(a.spouse_id)
            current_name = current.name if current else a.spouse_id
            raise AlreadyMarriedError(f"{a.name} is already married to {current_name}.")

    member.spouse_id = spouse.id
    spouse.spouse_id = member.id
    logger.debug("married %s and %s", member.id, spouse.id)


def add_child(graph: FamilyGraph, parent_id: str, child_id: str, adopted: bool = False) -> None:
    """
    Attach a child using the canonical attachment policy.

    If the acting parent is married to someone of the other sex, the child is
    linked to both members of the couple (same adoption flag). Otherwise only
    the acting parent gets the child.
    """
    parent = graph.get(parent_id)
    child = graph.get(child_id)

    parents = [parent]
    spouse = graph.spouse_of(parent)
    if spouse is not None and spouse.sex is not parent.sex:
        parents.append(spouse)

    # Check every link first so a failure writes nothing
    missing = [p for p in parents if p.id not in child.parent_ids]
    for p in parents:
        if p.id == child.id:
            raise InvariantViolation(f"{p.name} cannot be their own parent.")
    if len(child.parent_ids) + len(missing) > 2:
        raise TooManyParentsError(f"{child.name} already has two parents.")

    for p in parents:
        _link(p, child, adopted)


def add_parent(
    graph: FamilyGraph,
    root_id: str,
    child_id: str,
    parent_id: str,
    marry_existing_parent: bool = False,
) -> str:
    """
    Attach a new parent to a child that has fewer than two parents.

    The new parent is linked one-sidedly; their spouse does not become a
    parent of the child. With `marry_existing_parent`, the child's two
    parents are married if neither is married yet (children lists are left
    alone).

    Returns:
        The root identifier to use from now on. It changes to the new parent
        only when the child had no parents and was the root or the root's
        spouse.
    """
    child = graph.get(child_id)
    new_parent = graph.get(parent_id)
    root = graph.people.get(root_id)

    had_parents_before = bool(child.parent_ids)
    was_root_or_root_spouse = root is not None and (
        root.id == child.id or root.spouse_id == child.id
    )

    link_parent(graph, new_parent.id, child.id)

    if marry_existing_parent:
        unique_parents = list(dict.fromkeys(child.parent_ids))
        if len(unique_parents) == 2:
            p1, p2 = (graph.get(pid) for pid in unique_parents)
            if not p1.is_married() and not p2.is_married():
                add_spouse(graph, p1.id, p2.id)

    if was_root_or_root_spouse and not had_parents_before:
        logger.debug("root moves from %s to %s", root_id, new_parent.id)
        return new_parent.id
    return root_id


def add_member(
    graph: FamilyGraph,
    root_id: str,
    source_id: str,
    name: str,
    sex: Sex | str,
    relation: Relation | str,
    *,
    adopted: bool = False,
    marry_existing_parent: bool = False,
) -> MutationResult:
    """Create a person related to `source_id` and return it with the resulting root."""
    try:
        relation = Relation(relation)
    except ValueError:
        raise UnsupportedRelationshipError(f"Relationship not supported: {relation}") from None

    source = graph.get(source_id)
    member = graph.new_person(name, sex)

    try:
        if relation is Relation.CHILD:
            add_child(graph, source.id, member.id, adopted=adopted)
        elif relation is Relation.SPOUSE:
            add_spouse(graph, source.id, member.id)
        elif relation is Relation.PARENT:
            root_id = add_parent(
                graph, root_id, source.id, member.id, marry_existing_parent=marry_existing_parent
            )
        else:  # pragma: no cover - every Relation is handled above
            raise UnsupportedRelationshipError(f"Relationship not supported: {relation}")
    except Exception:
        graph.remove(member.id)
        raise

    return MutationResult(person=member, root_id=root_id)
