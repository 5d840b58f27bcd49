"""Graph validation for family tree data."""

import networkx as nx

from graph import FamilyGraph


def validate_graph(graph: FamilyGraph) -> list[str]:
    """
    Validate the family graph for:
    - Cycles in parent-child relationships
    - Spouse links that are one-sided or point at a missing person
    - People with more than two parents
    - Parent/child links recorded on one side only
    - Adoption flags on someone who is not the parent's child

    Returns a list of warning messages.
    """
    warnings: list[str] = []
    people = graph.people

    # Only PARENT_OF edges take part in cycle detection
    G = graph.to_networkx()
    parent_edges = [
        (u, v) for u, v, d in G.edges(data=True) if d.get("relationship_type") == "PARENT_OF"
    ]
    parent_graph = nx.DiGraph(parent_edges)

    try:
        cycle = nx.find_cycle(parent_graph, orientation="original")
        cycle_nodes = [people[edge[0]].name for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass

    for p in people.values():
        if p.spouse_id:
            spouse = people.get(p.spouse_id)
            if spouse is None:
                warnings.append(f"Missing: spouse {p.spouse_id} of {p.name} does not exist")
            elif spouse.spouse_id != p.id:
                warnings.append(f"Asymmetric: {p.name} is married to {spouse.name}, but not vice versa")

        if len(p.parent_ids) > 2:
            warnings.append(f"Impossible: {p.name} has {len(p.parent_ids)} parents")

        for cid in p.child_ids:
            child = people.get(cid)
            if child is not None and p.id not in child.parent_ids:
                warnings.append(f"One-sided: {p.name} lists {child.name} as child, but not vice versa")
        for pid in p.parent_ids:
            parent = people.get(pid)
            if parent is not None and p.id not in parent.child_ids:
                warnings.append(f"One-sided: {p.name} lists {parent.name} as parent, but not vice versa")

        for cid in sorted(p.adopted_child_ids):
            if cid not in p.child_ids:
                warnings.append(f"Invalid: {p.name} marks {cid} as adopted, but has no such child")

    return warnings
