"""Supernode layering and crossing minimization.

Layered (Sugiyama-style) ordering of one generation row against the next:
- A married couple is a single ordering unit, so spouses stay adjacent.
- Units are reordered by alternating top-down / bottom-up median sweeps.
- Sweeping stops as soon as the crossing count stops improving.

This is a heuristic; it does not look for the minimum number of crossings.
"""

from dataclasses import dataclass, field
import logging

from config import CROSSING_SWEEPS, UPSTREAM_DEPTH
from models import Person

logger = logging.getLogger(__name__)


@dataclass
class Unit:
    id: str
    gen: int
    member_ids: list[str]
    order: int = 0


@dataclass
class LayerGraph:
    layers: list[list[Unit]]  # index = gen - min_gen
    edges: list[tuple[str, str]]  # (parent unit id, child unit id), child one layer below
    gen_of_unit: dict[str, int] = field(default_factory=dict)
    index_of_unit: dict[str, int] = field(default_factory=dict)

    def reindex(self) -> None:
        for layer in self.layers:
            for i, u in enumerate(layer):
                u.order = i
                self.gen_of_unit[u.id] = u.gen
                self.index_of_unit[u.id] = i


@dataclass
class SupernodeBuild:
    graph: LayerGraph
    min_gen: int
    max_gen: int
    unit_of_member: dict[str, str]

    def unit_index(self, member_id: str) -> int | None:
        uid = self.unit_of_member.get(member_id)
        if uid is None:
            return None
        return self.graph.index_of_unit.get(uid)


def couple_unit_id(a: str, b: str) -> str:
    x, y = sorted((a, b))
    return f"C:{x}:{y}"


def single_unit_id(a: str) -> str:
    return f"S:{a}"


def build_supernode_layers(gen: dict[str, int], people: dict[str, Person]) -> SupernodeBuild:
    """Build one layer per generation with couple/single units and parent->child unit edges."""
    members = [m for m in people.values() if m.id in gen]

    by_gen: dict[int, list[Person]] = {}
    for m in members:
        by_gen.setdefault(gen[m.id], []).append(m)

    min_gen = min(by_gen) if by_gen else 0
    max_gen = max(by_gen) if by_gen else 0

    layers: list[list[Unit]] = [[] for _ in range(max_gen - min_gen + 1)] if by_gen else []
    used_in_couple: set[str] = set()
    for g, arr in by_gen.items():
        in_row = {m.id for m in arr}
        for m in arr:
            if m.id in used_in_couple:
                continue
            sid = m.spouse_id if m.spouse_id in in_row else None
            if sid and sid not in used_in_couple:
                layers[g - min_gen].append(Unit(couple_unit_id(m.id, sid), g, [m.id, sid]))
                used_in_couple.update((m.id, sid))
            else:
                layers[g - min_gen].append(Unit(single_unit_id(m.id), g, [m.id]))

    # Deterministic starting order
    for layer in layers:
        layer.sort(key=lambda u: u.id)

    unit_of_member: dict[str, str] = {}
    for layer in layers:
        for u in layer:
            for mid in u.member_ids:
                unit_of_member[mid] = u.id

    edges: list[tuple[str, str]] = []
    seen_edges: set[tuple[str, str]] = set()
    for m in members:
        g = gen[m.id]
        for cid in m.child_ids:
            # only downward edges to the next layer
            if cid not in gen or gen[cid] != g + 1:
                continue
            e = (unit_of_member[m.id], unit_of_member[cid])
            if e not in seen_edges:
                seen_edges.add(e)
                edges.append(e)

    graph = LayerGraph(layers=layers, edges=edges)
    graph.reindex()
    return SupernodeBuild(graph=graph, min_gen=min_gen, max_gen=max_gen, unit_of_member=unit_of_member)


def median_of(values: list[float], fallback: float) -> float:
    """Median (mean of the middle two for even counts); `fallback` when empty."""
    if not values:
        return fallback
    a = sorted(values)
    mid = len(a) // 2
    if len(a) % 2 == 1:
        return a[mid]
    return (a[mid - 1] + a[mid]) / 2


def sweep(graph: LayerGraph, down: bool) -> None:
    """Reorder every layer by the median index of its neighbours in the fixed adjacent layer."""
    layers = graph.layers
    span = len(layers)
    if span < 2:
        return
    indices = range(1, span) if down else range(span - 2, -1, -1)
    step = 1 if down else -1

    for li in indices:
        fixed = {u.id: i for i, u in enumerate(layers[li - step])}
        cur = layers[li]
        in_layer = {u.id for u in cur}
        neighbors: dict[str, list[float]] = {u.id: [] for u in cur}

        for parent_u, child_u in graph.edges:
            if down and child_u in in_layer and parent_u in fixed:
                neighbors[child_u].append(fixed[parent_u])
            elif not down and parent_u in in_layer and child_u in fixed:
                neighbors[parent_u].append(fixed[child_u])

        keyed = [(median_of(neighbors[u.id], i), i, u) for i, u in enumerate(cur)]
        # stable: old index breaks ties
        keyed.sort(key=lambda t: (t[0], t[1]))
        layers[li] = [u for _, _, u in keyed]

        for i, u in enumerate(layers[li]):
            u.order = i
            graph.index_of_unit[u.id] = i


def count_crossings(graph: LayerGraph) -> int:
    """Count crossings between consecutive layers (pairwise inversions of sorted edges)."""
    total = 0
    idx = graph.index_of_unit
    for li in range(len(graph.layers) - 1):
        top = {u.id for u in graph.layers[li]}
        bottom = {u.id for u in graph.layers[li + 1]}
        here = sorted(
            (idx[a], idx[b]) for a, b in graph.edges if a in top and b in bottom
        )
        for i in range(len(here)):
            for j in range(i + 1, len(here)):
                (xi, xj), (yi, yj) = here[i], here[j]
                if (xi < yi and xj > yj) or (xi > yi and xj < yj):
                    total += 1
    return total


def minimize_crossings(graph: LayerGraph, max_iters: int = CROSSING_SWEEPS) -> LayerGraph:
    """Alternate down/up sweeps until the crossing count stops improving or `max_iters` is hit."""
    last = count_crossings(graph)
    best_orders = [list(layer) for layer in graph.layers]
    for it in range(max_iters):
        sweep(graph, down=True)
        sweep(graph, down=False)
        cur = count_crossings(graph)
        logger.debug("sweep %d: %d crossings", it + 1, cur)
        if cur < last:
            last = cur
            best_orders = [list(layer) for layer in graph.layers]
            continue
        if cur > last:
            # Keep the best order seen so far
            graph.layers = best_orders
            graph.reindex()
        break
    return graph


def compute_member_upstream_index(
    gen: dict[str, int], people: dict[str, Person], build: SupernodeBuild
) -> dict[str, float]:
    """Median unit index of each person's parents one generation up."""
    out: dict[str, float] = {}
    for m in people.values():
        if m.id not in gen:
            continue
        g = gen[m.id]
        parent_idx = []
        for pid in m.parent_ids:
            if gen.get(pid) != g - 1:
                continue
            idx = build.unit_index(pid)
            if idx is not None:
                parent_idx.append(idx)
        if parent_idx:
            out[m.id] = median_of(parent_idx, 0)
    return out


def compute_member_upstream_index_multi(
    gen: dict[str, int],
    people: dict[str, Person],
    build: SupernodeBuild,
    max_depth: int = UPSTREAM_DEPTH,
) -> dict[str, float]:
    """
    Multi-level upstream index.

    Considers parents (depth 1), grandparents (depth 2) and so on up to
    `max_depth`. The result is the mean of the plain median of the ancestor
    unit indices and their weighted average, nearer ancestors weighing more.
    """
    out: dict[str, float] = {}

    def gather(pid: str, depth: int, target_gen: int, acc: list[tuple[float, float]]) -> None:
        if depth == 0:
            return
        m = people.get(pid)
        if m is None:
            return
        for parent_id in m.parent_ids:
            if gen.get(parent_id) != target_gen - 1:
                continue
            idx = build.unit_index(parent_id)
            if idx is not None:
                acc.append((idx, 1 / (max_depth - depth + 1)))
            gather(parent_id, depth - 1, gen[parent_id], acc)

    for m in people.values():
        if m.id not in gen:
            continue
        acc: list[tuple[float, float]] = []
        gather(m.id, max_depth, gen[m.id], acc)
        if not acc:
            continue
        acc.sort(key=lambda t: t[0])
        med = acc[len(acc) // 2][0]
        sum_w = sum(w for _, w in acc)
        avg = sum(i * w for i, w in acc) / sum_w
        out[m.id] = (med + avg) / 2

    return out
