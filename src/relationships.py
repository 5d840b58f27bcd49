"""Relationship queries: "what is X to Y" and group lookups (uncles, cousins, ...)."""

from collections.abc import Callable
import logging

from errors import PersonNotFoundError, UnsupportedRelationshipError
from graph import FamilyGraph
from models import Kinship, Lookup, Person, RelativeQuery
import traversal
from traversal import person_siblings

logger = logging.getLogger(__name__)


def _dedupe(people: list[Person]) -> list[Person]:
    return list({p.id: p for p in people}.values())


def _ids(people: list[Person | None]) -> set[str]:
    return {p.id for p in people if p is not None}


# ============================================================================
# Person-level primitives
# ============================================================================


def parent_candidates(graph: FamilyGraph, person: Person) -> list[Person]:
    """The person's parents plus the parents' spouses (step-parents)."""
    out = []
    for parent in graph.parents_of(person):
        out.append(parent)
        spouse = graph.spouse_of(parent)
        if spouse is not None:
            out.append(spouse)
    return _dedupe(out)


def child_candidates(graph: FamilyGraph, person: Person) -> list[Person]:
    """Children of the person and of the person's spouse."""
    out = list(graph.children_of(person))
    spouse = graph.spouse_of(person)
    if spouse is not None:
        out.extend(graph.children_of(spouse))
    return _dedupe(out)


def person_cousins(graph: FamilyGraph, person: Person) -> list[Person]:
    """
    Children of the siblings of the person's parents (and of the parents' spouses).

    One-directional: a step-parent's nephew is the person's cousin, but the
    person is not the nephew's cousin, since the nephew's walk up never passes
    through the step-parent.
    """
    out = []
    for parent in parent_candidates(graph, person):
        for uncle_aunt in person_siblings(graph, parent):
            out.extend(graph.children_of(uncle_aunt))
    return [c for c in _dedupe(out) if c.id != person.id]


def _by_sex(relative: Person, male: Kinship, female: Kinship) -> Kinship:
    return male if relative.is_male() else female


# ============================================================================
# Pairwise resolver
# ============================================================================


def _locate(graph: FamilyGraph, root_id: str, ref: str, by: Lookup) -> tuple[Person, int] | None:
    for person, depth in traversal.traverse(graph, root_id):
        if traversal.matches(person, ref, by):
            return person, depth
    return None


def get_relationship(
    graph: FamilyGraph,
    root_id: str,
    member_ref: str,
    relative_ref: str,
    by: Lookup = Lookup.ID,
) -> Kinship:
    """
    Name what `relative` is to `member`.

    Both are located with the depth-stamped descent from the root. Depth
    deltas of two or more only resolve to ANCESTOR / DESCENDANT. Returns
    Kinship.NONE when no rule matches.

    Raises:
        PersonNotFoundError: if either endpoint is not reachable from the root.
    """
    located_member = _locate(graph, root_id, member_ref, by)
    if located_member is None:
        raise PersonNotFoundError(member_ref, role="member")
    located_relative = _locate(graph, root_id, relative_ref, by)
    if located_relative is None:
        raise PersonNotFoundError(relative_ref, role="relative")

    member, m_depth = located_member
    relative, r_depth = located_relative

    if m_depth - r_depth >= 2:
        return Kinship.ANCESTOR
    if r_depth - m_depth >= 2:
        return Kinship.DESCENDANT

    if m_depth == r_depth:
        return _same_generation(graph, member, relative)
    if m_depth - r_depth == 1:
        return _generation_above(graph, member, relative)
    return _generation_below(graph, member, relative)


def _same_generation(graph: FamilyGraph, member: Person, relative: Person) -> Kinship:
    if member.spouse_id == relative.id:
        return Kinship.SPOUSE

    siblings = person_siblings(graph, member)
    if relative.id in _ids(siblings):
        return _by_sex(relative, Kinship.BROTHER, Kinship.SISTER)

    spouse = graph.spouse_of(member)
    spouse_siblings = person_siblings(graph, spouse) if spouse is not None else []
    in_laws = [graph.spouse_of(s) for s in siblings] + spouse_siblings
    if relative.id in _ids(in_laws):
        return _by_sex(relative, Kinship.BROTHER_IN_LAW, Kinship.SISTER_IN_LAW)

    cousins = person_cousins(graph, member)
    if relative.id in _ids(cousins):
        return Kinship.COUSIN
    if relative.id in _ids([graph.spouse_of(c) for c in cousins]):
        return Kinship.COUSIN_IN_LAW

    return Kinship.NONE


def _generation_above(graph: FamilyGraph, member: Person, relative: Person) -> Kinship:
    if relative.id in _ids(parent_candidates(graph, member)):
        return _by_sex(relative, Kinship.FATHER, Kinship.MOTHER)

    spouse = graph.spouse_of(member)
    if spouse is not None and relative.id in _ids(parent_candidates(graph, spouse)):
        return _by_sex(relative, Kinship.FATHER_IN_LAW, Kinship.MOTHER_IN_LAW)

    return Kinship.NONE


def _generation_below(graph: FamilyGraph, member: Person, relative: Person) -> Kinship:
    kids = child_candidates(graph, member)
    if relative.id in _ids(kids):
        return _by_sex(relative, Kinship.SON, Kinship.DAUGHTER)
    if relative.id in _ids([graph.spouse_of(k) for k in kids]):
        return _by_sex(relative, Kinship.SON_IN_LAW, Kinship.DAUGHTER_IN_LAW)

    return Kinship.NONE


# ============================================================================
# Group queries
# ============================================================================


def grand_children(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> list[Person]:
    out = []
    for child in traversal.children_of(graph, root_id, ref, by):
        out.extend(graph.children_of(child))
    return _dedupe(out)


def cousins(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> list[Person]:
    person = traversal.find(graph, root_id, ref, by)
    if person is None:
        return []
    return person_cousins(graph, person)


def _uncles_or_aunts(graph: FamilyGraph, parent: Person | None, want_male: bool) -> list[Person]:
    """Siblings of `parent` of the wanted sex, or the spouse of a sibling of the other sex."""
    if parent is None:
        return []
    out = []
    for sib in person_siblings(graph, parent):
        candidate = sib if sib.is_male() == want_male else graph.spouse_of(sib)
        if candidate is not None:
            out.append(candidate)
    return out


def paternal_uncles(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> list[Person]:
    return _uncles_or_aunts(graph, traversal.father_of(graph, root_id, ref, by), want_male=True)


def maternal_uncles(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> list[Person]:
    return _uncles_or_aunts(graph, traversal.mother_of(graph, root_id, ref, by), want_male=True)


def paternal_aunts(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> list[Person]:
    return _uncles_or_aunts(graph, traversal.father_of(graph, root_id, ref, by), want_male=False)


def maternal_aunts(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> list[Person]:
    return _uncles_or_aunts(graph, traversal.mother_of(graph, root_id, ref, by), want_male=False)


def _in_laws(graph: FamilyGraph, root_id: str, ref: str, by: Lookup, want_male: bool) -> list[Person]:
    """Spouse's siblings of the wanted sex, plus spouses of own siblings of the other sex."""
    out = []
    spouse = traversal.spouse_of(graph, root_id, ref, by)
    if spouse is not None:
        out.extend(s for s in person_siblings(graph, spouse) if s.is_male() == want_male)
    for sib in traversal.siblings_of(graph, root_id, ref, by):
        if sib.is_male() != want_male:
            sib_spouse = graph.spouse_of(sib)
            if sib_spouse is not None:
                out.append(sib_spouse)
    return out


def sister_in_laws(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> list[Person]:
    return _in_laws(graph, root_id, ref, by, want_male=False)


def brother_in_laws(graph: FamilyGraph, root_id: str, ref: str, by: Lookup = Lookup.ID) -> list[Person]:
    return _in_laws(graph, root_id, ref, by, want_male=True)


def _males(people: list[Person]) -> list[Person]:
    return [p for p in people if p.is_male()]


def _females(people: list[Person]) -> list[Person]:
    return [p for p in people if p.is_female()]


QueryFn = Callable[[FamilyGraph, str, str, Lookup], "list[Person] | Person | None"]

QUERIES: dict[RelativeQuery, QueryFn] = {
    RelativeQuery.PATERNAL_UNCLE: paternal_uncles,
    RelativeQuery.MATERNAL_UNCLE: maternal_uncles,
    RelativeQuery.PATERNAL_AUNT: paternal_aunts,
    RelativeQuery.MATERNAL_AUNT: maternal_aunts,
    RelativeQuery.SISTER_IN_LAW: sister_in_laws,
    RelativeQuery.BROTHER_IN_LAW: brother_in_laws,
    RelativeQuery.COUSIN: cousins,
    RelativeQuery.FATHER: traversal.father_of,
    RelativeQuery.MOTHER: traversal.mother_of,
    RelativeQuery.CHILD: traversal.children_of,
    RelativeQuery.SON: lambda g, r, ref, by: _males(traversal.children_of(g, r, ref, by)),
    RelativeQuery.DAUGHTER: lambda g, r, ref, by: _females(traversal.children_of(g, r, ref, by)),
    RelativeQuery.BROTHER: lambda g, r, ref, by: _males(traversal.siblings_of(g, r, ref, by)),
    RelativeQuery.SISTER: lambda g, r, ref, by: _females(traversal.siblings_of(g, r, ref, by)),
    RelativeQuery.GRAND_CHILD: grand_children,
    RelativeQuery.GRAND_DAUGHTER: lambda g, r, ref, by: _females(grand_children(g, r, ref, by)),
    RelativeQuery.GRAND_SON: lambda g, r, ref, by: _males(grand_children(g, r, ref, by)),
    RelativeQuery.SIBLING: traversal.siblings_of,
    RelativeQuery.SPOUSE: traversal.spouse_of,
}


def get_by_relationship(
    graph: FamilyGraph,
    root_id: str,
    ref: str,
    query: RelativeQuery | str,
    by: Lookup = Lookup.ID,
) -> list[Person] | Person | None:
    """Return the relatives of `ref` of one kind: a list, a single person, or None."""
    try:
        query = RelativeQuery(query)
    except ValueError:
        raise UnsupportedRelationshipError(f"Relationship not supported: {query}") from None
    return QUERIES[query](graph, root_id, ref, by)


# ============================================================================
# Whole-tree summaries
# ============================================================================


def member_names(graph: FamilyGraph, root_id: str) -> list[str]:
    return [p.name for p, _ in traversal.traverse(graph, root_id)]


def mothers_with_most_girl_children(graph: FamilyGraph, root_id: str) -> list[Person]:
    """Mothers (female members, or female spouses of members) with the most daughters."""
    mothers: list[Person] = []
    max_girls = 0
    seen: set[str] = set()

    for person, _ in traversal.traverse(graph, root_id):
        mother = person if person.is_female() else graph.spouse_of(person)
        if mother is None or not mother.is_female() or mother.id in seen:
            continue
        seen.add(mother.id)

        girls = len(_females(graph.children_of(mother)))
        if girls > max_girls:
            max_girls = girls
            mothers = [mother]
        elif girls > 0 and girls == max_girls:
            mothers.append(mother)

    logger.debug("most daughters: %d (%d mothers)", max_girls, len(mothers))
    return mothers
