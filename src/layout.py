"""
Geometric placement of a family graph.

Turns the ordered generation layers into positioned person cards, union
markers (one per couple or single parent with children) and the
parent -> union -> child edges between them. Rows are processed top-down;
each child row is grouped by parent block, centered under its union
markers and packed without overlaps before the next row is derived from it.
"""

import logging

from blocks import (
    ChildGroup,
    ParentBlock,
    RowBlock,
    align_blocks_to_centers,
    augment_groups_with_singletons,
    build_family_blocks,
    build_parent_row_blocks,
    enforce_spouse_adjacency_in_row,
    join_couples,
    lay_out_group,
    merge_child_groups_by_spouses,
    pack_blocks_left_to_right,
    register_child_group,
    resolve_row_overlaps,
    row_groups,
)
from bloodline import FilterOptions, filter_bloodline
from config import LayoutConfig
from generations import assign_generations, symmetrize
from graph import FamilyGraph
from models import LayoutEdge, LayoutResult, Person, PositionedNode
from ordering import (
    build_supernode_layers,
    compute_member_upstream_index_multi,
    median_of,
    minimize_crossings,
)

logger = logging.getLogger(__name__)


def union_id(parent_ids: list[str]) -> str:
    if len(parent_ids) == 2:
        a, b = sorted(parent_ids)
        return f"U:{a}:{b}"
    return f"U:{parent_ids[0]}:_"


def _edge(source: str, target: str, adopted: bool = False) -> LayoutEdge:
    return LayoutEdge(id=f"e-{source}-{target}", source=source, target=target, adopted=adopted)


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


class _LayoutPass:
    """State of one layout run over a private copy of the people map."""

    def __init__(self, people: dict[str, Person], root_id: str, config: LayoutConfig):
        self.people = people
        self.config = config

        self.gen = assign_generations(people, root_id, config.max_level_passes)
        self.build = build_supernode_layers(self.gen, people)
        minimize_crossings(self.build.graph, config.crossing_sweeps)
        self.upstream = compute_member_upstream_index_multi(
            self.gen, people, self.build, config.upstream_depth
        )

        row_height = config.card_height + config.min_v_gap
        self.gen_y = {g: (g - self.build.min_gen) * row_height for g in self.gens()}

        self.persons: dict[str, PositionedNode] = {}
        self.unions: dict[str, PositionedNode] = {}
        self.edges: list[LayoutEdge] = []

        self.groups_by_gen: dict[int, list[ChildGroup]] = {}
        self.parent_order: dict[int, dict[str, int]] = {}
        self.fine_index: dict[int, dict[str, float]] = {}
        self.union_centers: dict[int, dict[int, list[float]]] = {}
        self.placed_as_child: set[str] = set()

    def gens(self) -> range:
        return range(self.build.min_gen, self.build.max_gen + 1)

    def row(self, g: int) -> list[PositionedNode]:
        return [n for n in self.persons.values() if n.gen == g]

    def run(self) -> LayoutResult:
        self.place_units()
        for g in self.gens():
            if g > self.build.min_gen:
                self.align_child_row(g)
            for order, block in enumerate(build_family_blocks(self.row(g), self.people, g)):
                self.place_block(block, order)
        self.settle_rows()
        self.spread_rows()
        self.recenter_rows()
        self.attach_unions()
        return self.finish()

    # ------------------------------------------------------------------
    # 1. Units left to right
    # ------------------------------------------------------------------

    def _put_person(self, pid: str, g: int, x: float) -> PositionedNode:
        cfg = self.config
        node = PositionedNode(
            id=pid,
            kind="person",
            gen=g,
            x=x,
            y=self.gen_y[g],
            w=cfg.card_width,
            h=cfg.card_height,
            person_id=pid,
        )
        self.persons[pid] = node
        return node

    def place_units(self) -> None:
        cfg = self.config
        for g, layer in zip(self.gens(), self.build.graph.layers):
            cursor = 0.0
            for unit in layer:
                if len(unit.member_ids) == 2:
                    a, b = unit.member_ids
                    up_a, up_b = self.upstream.get(a), self.upstream.get(b)
                    # the partner whose family sits further left goes left
                    if up_a is not None and up_b is not None and up_a > up_b:
                        a, b = b, a
                    self._put_person(a, g, cursor)
                    right = self._put_person(b, g, cursor + cfg.card_width + cfg.min_couple_gap)
                    cursor = right.right + cfg.min_h_gap
                else:
                    node = self._put_person(unit.member_ids[0], g, cursor)
                    cursor = node.right + cfg.min_h_gap

        for g in self.gens():
            row = self.row(g)
            enforce_spouse_adjacency_in_row(row, self.people, cfg)
            pack_blocks_left_to_right(build_parent_row_blocks(row, self.people), cfg.min_block_gap)

    # ------------------------------------------------------------------
    # 2-4. Unions and children
    # ------------------------------------------------------------------

    def _parent_ids(self, pid: str) -> list[str]:
        person = self.people.get(pid)
        return person.parent_ids if person else []

    def _fine_index(self, cid: str, block_order: int) -> float | None:
        """Weighted ancestor unit position: parents, grandparents (+0.25), great-grandparents (+0.1)."""
        values: list[float] = []

        def add(pid: str, bias: float) -> None:
            idx = self.build.unit_index(pid)
            if idx is not None:
                values.append(idx + bias * _sign(idx))

        for pid in self._parent_ids(cid):
            add(pid, 0.0)
            for gp in self._parent_ids(pid):
                add(gp, 0.25)
                for ggp in self._parent_ids(gp):
                    add(ggp, 0.1)

        if not values:
            return None
        avg = sum(values) / len(values)
        return (median_of(values, 0) + avg) / 2 + block_order * 1e-3

    def place_block(self, block: ParentBlock, order: int) -> None:
        child_ids = [cid for cid in block.child_ids if cid in self.persons]
        if not child_ids:
            return
        cfg = self.config

        parents = [self.persons[pid] for pid in block.parent_ids]
        center = sum(p.center_x for p in parents) / len(parents)
        uid = union_id(block.parent_ids)
        self.unions[uid] = PositionedNode(
            id=uid,
            kind="union",
            gen=block.gen,
            x=center - cfg.union_width / 2,
            y=self.gen_y[block.gen] + cfg.card_height + cfg.union_dy,
            w=cfg.union_width,
            h=cfg.union_height,
            spouse_ids=tuple(block.parent_ids),
        )
        for pid in block.parent_ids:
            self.edges.append(_edge(pid, uid))

        child_gen = block.gen + 1
        for cid in child_ids:
            adopted = any(cid in self.people[pid].adopted_child_ids for pid in block.parent_ids)
            self.edges.append(_edge(uid, cid, adopted))

        # A child already hung under an earlier block (other parent) stays there
        run = [
            cid
            for cid in child_ids
            if self.persons[cid].gen == child_gen and cid not in self.placed_as_child
        ]
        if not run:
            return

        fine = self.fine_index.setdefault(child_gen, {})
        total = len(run) * cfg.card_width + (len(run) - 1) * cfg.min_child_gap
        x = center - total / 2
        for cid in run:
            self.persons[cid].x = x
            x += cfg.card_width + cfg.min_child_gap
            self.placed_as_child.add(cid)
            idx = self._fine_index(cid, order)
            if idx is not None:
                fine[cid] = idx

        self.parent_order.setdefault(child_gen, {}).update({cid: order for cid in run})
        register_child_group(self.groups_by_gen, child_gen, order, run)
        self.union_centers.setdefault(child_gen, {}).setdefault(order, []).append(center)

    def align_child_row(self, g: int) -> None:
        row = self.row(g)
        if not row:
            return
        augment_groups_with_singletons(g, self.groups_by_gen, row, self.parent_order.get(g, {}))
        merge_child_groups_by_spouses(g, self.groups_by_gen, row, self.people)

        fine = self.fine_index.get(g, {})
        centers_by_order = self.union_centers.get(g, {})
        blocks: list[RowBlock] = []
        centers: list[float] = []
        for group in sorted(self.groups_by_gen.get(g, []), key=lambda gr: gr.order):
            nodes = [self.persons[cid] for cid in group.ids]
            nodes.sort(key=lambda n: (fine.get(n.id, float("inf")), n.x, n.id))
            lay_out_group(nodes, self.people, self.config)

            wanted = centers_by_order.get(group.order)
            if wanted:
                centers.append(sum(wanted) / len(wanted))
            else:
                centers.append(sum(n.center_x for n in nodes) / len(nodes))
            blocks.append(RowBlock.of(nodes))

        align_blocks_to_centers(blocks, centers, self.config.min_block_gap)
        logger.debug("gen %d: %d child groups aligned", g, len(blocks))

    # ------------------------------------------------------------------
    # 5-8. Row clean-up, vertical spacing, centering
    # ------------------------------------------------------------------

    def settle_rows(self) -> None:
        """Rejoin couples (sex-aware) and push everything else clear of them."""
        cfg = self.config
        for g in self.gens():
            row = self.row(g)
            if not row:
                continue
            groups = row_groups(row, self.people)
            join_couples(groups, cfg)
            passes = resolve_row_overlaps(groups, cfg.min_gap, cfg.max_overlap_passes)
            logger.debug("gen %d: overlaps settled in %d passes", g, passes)

    def spread_rows(self) -> None:
        cfg = self.config
        gens = sorted({n.gen for n in self.persons.values()})
        row_y = {g: min(n.y for n in self.row(g)) for g in gens}
        for prev, nxt in zip(gens, gens[1:]):
            needed = row_y[prev] + cfg.card_height + cfg.min_v_gap
            if row_y[nxt] >= needed:
                continue
            dy = needed - row_y[nxt]
            for n in list(self.persons.values()) + list(self.unions.values()):
                if n.gen >= nxt:
                    n.y += dy
            for g in gens:
                if g >= nxt:
                    row_y[g] += dy

    def recenter_rows(self) -> None:
        rows = [r for r in (self.row(g) for g in self.gens()) if r]
        if not rows:
            return
        spans = [(min(n.x for n in r), max(n.right for n in r)) for r in rows]
        widest = max(right - left for left, right in spans)
        for r, (left, right) in zip(rows, spans):
            offset = (widest - (right - left)) / 2 - left
            if abs(offset) < 0.5:
                continue
            for n in r:
                n.x += offset

    def attach_unions(self) -> None:
        """Put every union marker back at the midpoint of its parents."""
        for u in self.unions.values():
            parents = [self.persons[pid] for pid in u.spouse_ids if pid in self.persons]
            if parents:
                center = sum(p.center_x for p in parents) / len(parents)
                u.x = center - u.w / 2

    def finish(self) -> LayoutResult:
        nodes = list(self.persons.values()) + list(self.unions.values())
        result = LayoutResult(min_gen=self.build.min_gen, max_gen=self.build.max_gen)
        if not nodes:
            return result

        margin = self.config.margin
        dx = margin - min(n.x for n in nodes)
        dy = margin - min(n.y for n in nodes)
        for n in nodes:
            n.x += dx
            n.y += dy

        result.nodes = nodes
        result.edges = self.edges
        result.width = max(n.right for n in nodes) + margin
        result.height = max(n.y + n.h for n in nodes) + margin
        logger.debug(
            "layout: %d persons, %d unions, %d edges, %.0fx%.0f",
            len(self.persons),
            len(self.unions),
            len(self.edges),
            result.width,
            result.height,
        )
        return result


def compute_layout(
    people: dict[str, Person],
    root_id: str,
    config: LayoutConfig | None = None,
) -> LayoutResult:
    """
    Lay out a people map with `root_id` at generation 0.

    The map is copied first (one-sided links are completed on the copy), so
    the caller's people are never touched. An empty map gives an empty
    800x600 result. The output is fully deterministic for a given map.
    """
    config = config or LayoutConfig()
    if not people:
        return LayoutResult()
    people = {pid: p.copy() for pid, p in people.items()}
    symmetrize(people)
    return _LayoutPass(people, root_id, config).run()


def compute_layout_filtered(
    graph: FamilyGraph,
    focus_id: str | None = None,
    options: FilterOptions | None = None,
    config: LayoutConfig | None = None,
) -> LayoutResult:
    """
    Lay out the graph, restricted to the bloodline of `focus_id` when given.

    The focus becomes the layout root when it survives filtering; otherwise
    the first person of the (filtered) map is used.
    """
    people = graph.people
    if focus_id and focus_id in people:
        people = filter_bloodline(people, focus_id, options or FilterOptions())
    if not people:
        return LayoutResult()
    root_id = focus_id if focus_id in people else next(iter(people))
    return compute_layout(people, root_id, config)
