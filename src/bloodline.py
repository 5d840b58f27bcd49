"""Focus filter: restrict the people map to a person's bloodline."""

from dataclasses import dataclass
import logging

import networkx as nx

from models import Person

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterOptions:
    """
    kin_depth: 0 direct line only, 1 + siblings, 2 + cousins, 3 + second cousins.
    include_spouses: add the spouses of visible people (they are not expanded further).
    """

    kin_depth: int = 0
    include_spouses: bool = False

    def __post_init__(self):
        if self.kin_depth not in (0, 1, 2, 3):
            raise ValueError(f"kin_depth must be between 0 and 3, got {self.kin_depth}")


def parent_graph(people: dict[str, Person]) -> nx.DiGraph:
    """Parent -> child DiGraph of the map (edges to people outside the map are dropped)."""
    G = nx.DiGraph()
    G.add_nodes_from(people)
    for m in people.values():
        for cid in m.child_ids:
            if cid in people:
                G.add_edge(m.id, cid)
        for pid in m.parent_ids:
            if pid in people:
                G.add_edge(pid, m.id)
    return G


def _parents(people: dict[str, Person], pid: str) -> list[str]:
    m = people.get(pid)
    return [p for p in m.parent_ids if p in people] if m else []


def _children(people: dict[str, Person], pid: str) -> list[str]:
    m = people.get(pid)
    return [c for c in m.child_ids if c in people] if m else []


def _siblings(people: dict[str, Person], pid: str) -> list[str]:
    out: dict[str, None] = {}
    for parent in _parents(people, pid):
        for cid in _children(people, parent):
            if cid != pid:
                out[cid] = None
    return list(out)


def _cousins(people: dict[str, Person], pid: str) -> list[str]:
    out: dict[str, None] = {}
    for parent in _parents(people, pid):
        for uncle_aunt in _siblings(people, parent):
            for cid in _children(people, uncle_aunt):
                out[cid] = None
    return list(out)


def _second_cousins(people: dict[str, Person], pid: str) -> list[str]:
    """Cousins of the parents and children of the cousins."""
    out: dict[str, None] = {}
    for parent in _parents(people, pid):
        for c in _cousins(people, parent):
            out[c] = None
    for c in _cousins(people, pid):
        for k in _children(people, c):
            out[k] = None
    return list(out)


def filter_bloodline(
    people: dict[str, Person],
    focus_id: str,
    options: FilterOptions | None = None,
) -> dict[str, Person]:
    """
    Select the part of `people` that is relevant to `focus_id`.

    Start with every ancestor and descendant of the focus, then widen to the
    siblings, cousins and second cousins of the people already visible,
    according to `options.kin_depth`. Spouses are added last and only for
    people already visible. An unknown focus returns the map unfiltered.
    """
    options = options or FilterOptions()
    if focus_id not in people:
        logger.debug("focus %s not in map; no filtering", focus_id)
        return people

    G = parent_graph(people)
    visible: set[str] = {focus_id}
    visible |= nx.ancestors(G, focus_id)
    visible |= nx.descendants(G, focus_id)

    widenings = [_siblings, _cousins, _second_cousins]
    for step in widenings[: options.kin_depth]:
        for pid in sorted(visible):
            visible.update(step(people, pid))

    if options.include_spouses:
        for pid in list(visible):
            sid = people[pid].spouse_id
            if sid and sid in people:
                visible.add(sid)

    logger.debug("bloodline of %s: %d of %d people", focus_id, len(visible), len(people))
    # Keep the map's own order for stable layouts
    return {pid: m for pid, m in people.items() if pid in visible}
