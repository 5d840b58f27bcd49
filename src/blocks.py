"""Row-level placement helpers: couples, parent blocks, child groups and overlap sweeps."""

from dataclasses import dataclass, field
import logging

from config import LayoutConfig
from models import Person, PositionedNode

logger = logging.getLogger(__name__)

EPS = 1e-9
NO_ORDER = 10**9


@dataclass
class RowBlock:
    """A run of nodes in one row that moves as a whole."""

    nodes: list[PositionedNode]
    left: float
    right: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @classmethod
    def of(cls, nodes: list[PositionedNode]) -> "RowBlock":
        return cls(nodes, min(n.x for n in nodes), max(n.right for n in nodes))

    def shift(self, dx: float) -> None:
        if dx == 0:
            return
        for n in self.nodes:
            n.x += dx
        self.left += dx
        self.right += dx


@dataclass
class ParentBlock:
    """
    Parents whose children hang from one union marker.

    `sort_x` only drives the block order in the row; exclusive-children
    blocks of a couple member get a sort_x just outside the couple so they
    sit on that member's side.
    """

    gen: int
    parent_ids: list[str]
    child_ids: list[str]
    x: float
    width: float
    sort_x: float


@dataclass
class ChildGroup:
    order: int
    ids: list[str] = field(default_factory=list)


# ============================================================================
# Couples
# ============================================================================


def spouse_left_right(
    a: PositionedNode, b: PositionedNode, people: dict[str, Person]
) -> tuple[PositionedNode, PositionedNode]:
    """Male left / female right for mixed-sex couples, otherwise current x order."""
    pa, pb = people.get(a.id), people.get(b.id)
    if pa is not None and pb is not None:
        if pa.is_male() and pb.is_female():
            return a, b
        if pa.is_female() and pb.is_male():
            return b, a
    return (a, b) if a.x <= b.x else (b, a)


def _spouse_in_row(n: PositionedNode, by_id: dict[str, PositionedNode], people: dict[str, Person]) -> str | None:
    person = people.get(n.id)
    if person is None or not person.spouse_id:
        return None
    return person.spouse_id if person.spouse_id in by_id else None


def row_groups(row: list[PositionedNode], people: dict[str, Person]) -> list[list[PositionedNode]]:
    """Split a row into couples ([left, right]) and singles, in x order."""
    by_id = {n.id: n for n in row}
    seen: set[str] = set()
    groups: list[list[PositionedNode]] = []
    for n in sorted(row, key=lambda n: n.x):
        if n.id in seen:
            continue
        sid = _spouse_in_row(n, by_id, people)
        if sid and sid not in seen:
            left, right = spouse_left_right(n, by_id[sid], people)
            groups.append([left, right])
            seen.update((left.id, right.id))
        else:
            groups.append([n])
            seen.add(n.id)
    return groups


def join_couples(groups: list[list[PositionedNode]], config: LayoutConfig) -> None:
    """Put the right partner of every couple exactly one couple gap after the left one."""
    for g in groups:
        if len(g) == 2:
            g[1].x = g[0].x + config.card_width + config.min_couple_gap


def enforce_spouse_adjacency_in_row(
    row: list[PositionedNode], people: dict[str, Person], config: LayoutConfig
) -> None:
    """Re-lay a row compactly from its leftmost x, couples adjacent and sex-aware."""
    if not row:
        return
    cx = min(n.x for n in row)
    for g in row_groups(row, people):
        if len(g) == 2:
            g[0].x = cx
            g[1].x = cx + config.card_width + config.min_couple_gap
            cx = g[1].x + config.card_width + config.min_h_gap
        else:
            g[0].x = cx
            cx = g[0].x + config.card_width + config.min_h_gap


# ============================================================================
# Parent rows
# ============================================================================


def build_parent_row_blocks(row: list[PositionedNode], people: dict[str, Person]) -> list[RowBlock]:
    """One block per couple or single, sorted by left edge."""
    blocks = [RowBlock.of(g) for g in row_groups(row, people)]
    blocks.sort(key=lambda b: b.left)
    return blocks


def pack_blocks_left_to_right(blocks: list[RowBlock], gap: float) -> None:
    """Pack blocks tightly in the given order, starting at the first block's left edge."""
    if len(blocks) <= 1:
        return
    prev_right = blocks[0].left
    for i, blk in enumerate(blocks):
        desired_left = prev_right if i == 0 else prev_right + gap
        blk.shift(desired_left - blk.left)
        prev_right = blk.right
    logger.debug("packed %d blocks", len(blocks))


def build_family_blocks(
    row: list[PositionedNode], people: dict[str, Person], gen: int
) -> list[ParentBlock]:
    """
    Derive the child-bearing blocks of a parent row.

    A couple block carries the children both partners share. Children only
    one partner has (from another relationship) go to a single-parent block
    on that partner's side. A person without a partner in the row gets one
    block with all their children. Blocks are returned in sort_x order.
    """
    ordered = sorted(row, key=lambda n: n.x)
    by_id = {n.id: n for n in ordered}
    seen: set[str] = set()
    blocks: list[ParentBlock] = []

    def kids_of(pid: str) -> list[str]:
        person = people.get(pid)
        return [c for c in person.child_ids if c in people] if person else []

    for n in ordered:
        if n.id in seen:
            continue
        sid = _spouse_in_row(n, by_id, people)
        if sid and sid not in seen:
            s = by_id[sid]
            left, right = (n, s) if n.x <= s.x else (s, n)
            a_kids, b_kids = kids_of(left.id), kids_of(right.id)
            shared = [k for k in a_kids if k in b_kids]
            excl_left = [k for k in a_kids if k not in b_kids]
            excl_right = [k for k in b_kids if k not in a_kids]

            x = left.x
            width = right.right - left.x
            blocks.append(ParentBlock(gen, [left.id, right.id], shared, x, width, x + width / 2))
            seen.update((left.id, right.id))

            if excl_left:
                blocks.append(ParentBlock(gen, [left.id], excl_left, left.x, left.w, left.x - 0.001))
            if excl_right:
                blocks.append(
                    ParentBlock(gen, [right.id], excl_right, right.x, right.w, right.right + 0.001)
                )
        else:
            blocks.append(ParentBlock(gen, [n.id], kids_of(n.id), n.x, n.w, n.center_x))
            seen.add(n.id)

    blocks.sort(key=lambda b: b.sort_x)
    return blocks


# ============================================================================
# Child rows
# ============================================================================


def register_child_group(
    groups_by_gen: dict[int, list[ChildGroup]], gen: int, order: int, ids: list[str]
) -> None:
    groups_by_gen.setdefault(gen, []).append(ChildGroup(order, list(ids)))


def augment_groups_with_singletons(
    gen: int,
    groups_by_gen: dict[int, list[ChildGroup]],
    row: list[PositionedNode],
    parent_order: dict[str, int],
) -> None:
    """Give every row member without a group one, keyed by its parent block order (or last)."""
    existing = groups_by_gen.get(gen, [])
    grouped = {cid for g in existing for cid in g.ids}
    singles = [n.id for n in row if n.id not in grouped]
    if not singles:
        return

    group_by_order: dict[int, ChildGroup] = {}
    for g in existing:
        group_by_order.setdefault(g.order, g)

    singles_by_order: dict[int, list[str]] = {}
    for cid in singles:
        singles_by_order.setdefault(parent_order.get(cid, NO_ORDER), []).append(cid)

    x_of = {n.id: n.x for n in row}
    for order, ids in singles_by_order.items():
        ids.sort(key=lambda cid: x_of.get(cid, 0))
        group = group_by_order.get(order)
        if group is not None:
            group.ids.extend(ids)
        else:
            register_child_group(groups_by_gen, gen, order, ids)


def merge_child_groups_by_spouses(
    gen: int,
    groups_by_gen: dict[int, list[ChildGroup]],
    row: list[PositionedNode],
    people: dict[str, Person],
) -> None:
    """Union-find merge of groups that hold the two partners of a couple."""
    groups = groups_by_gen.get(gen)
    if not groups or len(groups) <= 1 or not row:
        return

    group_of: dict[str, int] = {}
    for gi, g in enumerate(groups):
        for cid in g.ids:
            group_of[cid] = gi

    parent = list(range(len(groups)))

    def find(x: int) -> int:
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    by_id = {n.id: n for n in row}
    for n in row:
        sid = _spouse_in_row(n, by_id, people)
        if not sid:
            continue
        ga, gb = group_of.get(n.id), group_of.get(sid)
        if ga is None or gb is None:
            continue
        ra, rb = find(ga), find(gb)
        if ra != rb:
            parent[rb] = ra

    buckets: dict[int, ChildGroup] = {}
    for gi, g in enumerate(groups):
        root = find(gi)
        bucket = buckets.setdefault(root, ChildGroup(g.order))
        bucket.order = min(bucket.order, g.order)
        bucket.ids.extend(g.ids)

    groups_by_gen[gen] = sorted(buckets.values(), key=lambda g: g.order)


def lay_out_group(
    nodes: list[PositionedNode], people: dict[str, Person], config: LayoutConfig
) -> None:
    """Lay a group out contiguously from its left edge, in the given order, couples adjacent."""
    if not nodes:
        return
    by_id = {n.id: n for n in nodes}
    cx = min(n.x for n in nodes)
    seen: set[str] = set()
    for n in nodes:
        if n.id in seen:
            continue
        sid = _spouse_in_row(n, by_id, people)
        if sid and sid not in seen:
            left, right = spouse_left_right(n, by_id[sid], people)
            left.x = cx
            right.x = cx + config.card_width + config.min_couple_gap
            cx = right.right + config.min_child_gap
            seen.update((left.id, right.id))
        else:
            n.x = cx
            cx = n.right + config.min_child_gap
            seen.add(n.id)


def align_blocks_to_centers(blocks: list[RowBlock], desired_centers: list[float], gap: float) -> None:
    """
    Center each block under its desired x without overlaps.

    A left-to-right sweep pushes blocks right of their predecessor, then a
    right-to-left sweep pulls them back toward their centers where there is
    room.
    """
    if not blocks:
        return
    lefts = [b.left for b in blocks]
    widths = [b.width for b in blocks]

    lefts[0] = desired_centers[0] - widths[0] / 2
    for i in range(1, len(blocks)):
        want = desired_centers[i] - widths[i] / 2
        lefts[i] = max(want, lefts[i - 1] + widths[i - 1] + gap)

    for i in range(len(blocks) - 2, -1, -1):
        want = desired_centers[i] - widths[i] / 2
        max_right = lefts[i + 1] - gap
        new_right = min(lefts[i] + widths[i], max_right)
        lefts[i] = min(max(want, lefts[i]), new_right - widths[i])

    for blk, left in zip(blocks, lefts):
        blk.shift(left - blk.left)


# ============================================================================
# Overlap resolution
# ============================================================================


def resolve_row_overlaps(groups: list[list[PositionedNode]], gap: float, max_passes: int) -> int:
    """
    Push groups right until every pair is at least `gap` apart.

    Each group moves as a whole (a couple keeps its inner spacing). Sweeps
    repeat until nothing moves or `max_passes` is reached; the number of
    passes used is returned.
    """
    for passes in range(1, max_passes + 1):
        moved = False
        prev_right = None
        for g in sorted(groups, key=lambda g: (min(n.x for n in g), g[0].id)):
            left = min(n.x for n in g)
            if prev_right is not None and left < prev_right + gap - EPS:
                dx = prev_right + gap - left
                for n in g:
                    n.x += dx
                moved = True
            right = max(n.right for n in g)
            prev_right = right if prev_right is None else max(prev_right, right)
        if not moved:
            return passes
    logger.warning("row overlaps still moving after %d passes", max_passes)
    return max_passes
