"""Generation numbers for layout rows."""

from collections import deque
import logging
import math

from config import MAX_LEVEL_PASSES
from models import Person

logger = logging.getLogger(__name__)


def symmetrize(people: dict[str, Person]) -> None:
    """Complete one-sided parent/child links in place (on layout copies only)."""
    for m in people.values():
        for cid in m.child_ids:
            c = people.get(cid)
            if c is not None and m.id not in c.parent_ids:
                c.parent_ids.append(m.id)
        for pid in m.parent_ids:
            p = people.get(pid)
            if p is not None and m.id not in p.child_ids:
                p.child_ids.append(m.id)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _propagate(people: dict[str, Person], start_id: str, gen: dict[str, int]) -> None:
    queue = deque([start_id])
    while queue:
        cur = queue.popleft()
        m = people.get(cur)
        if m is None:
            continue
        g = gen[cur]
        for pid in m.parent_ids:
            if pid in people and pid not in gen:
                gen[pid] = g - 1
                queue.append(pid)
        for cid in m.child_ids:
            if cid in people and cid not in gen:
                gen[cid] = g + 1
                queue.append(cid)
        sid = m.spouse_id
        if sid and sid in people and sid not in gen:
            gen[sid] = g
            queue.append(sid)


def assign_generations(
    people: dict[str, Person],
    root_id: str,
    max_level_passes: int = MAX_LEVEL_PASSES,
) -> dict[str, int]:
    """
    Assign an integer generation to every person, root = 0.

    Parents are one above, children one below, spouses level. People the
    root's component does not reach are seeded component by component at 0.
    Couples that still differ are then forced to the rounded average; the
    leveling pass repeats until nothing changes or the pass cap is hit.
    """
    gen: dict[str, int] = {}
    if root_id in people:
        gen[root_id] = 0
        _propagate(people, root_id, gen)

    for pid in people:
        if pid not in gen:
            gen[pid] = 0
            _propagate(people, pid, gen)

    for level_pass in range(max_level_passes):
        changed = False
        for m in people.values():
            sid = m.spouse_id
            if not sid or sid not in gen or m.id not in gen:
                continue
            g_a, g_b = gen[m.id], gen[sid]
            if g_a != g_b:
                new_g = _round_half_up((g_a + g_b) / 2)
                gen[m.id] = new_g
                gen[sid] = new_g
                changed = True
        if not changed:
            break
        logger.debug("leveled couples (pass %d)", level_pass + 1)

    return gen
