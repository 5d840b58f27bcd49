"""Snapshot <-> live graph conversion, plus JSON helpers for the CLI."""

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path

from family import FamilyTree
from graph import FamilyGraph
from models import Person, Sex
from validation import validate_graph

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================


@dataclass
class PersonRecord:
    id: str
    name: str
    sex: str  # MALE or FEMALE
    spouse_id: str | None = None
    parent_ids: list[str] = field(default_factory=list)
    child_ids: list[str] = field(default_factory=list)
    adopted_child_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sex": self.sex,
            "spouse_id": self.spouse_id,
            "parent_ids": list(self.parent_ids),
            "child_ids": list(self.child_ids),
            "adopted_child_ids": list(self.adopted_child_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PersonRecord":
        """Read a record; the camelCase keys of older exports are accepted too."""
        return cls(
            id=data["id"],
            name=data["name"],
            sex=data.get("sex") or data["gender"],
            spouse_id=data.get("spouse_id", data.get("spouseId")),
            parent_ids=list(data.get("parent_ids", data.get("parentIds")) or []),
            child_ids=list(data.get("child_ids", data.get("childrenIds")) or []),
            adopted_child_ids=list(
                data.get("adopted_child_ids", data.get("adoptedChildrenIds")) or []
            ),
        )


@dataclass
class Snapshot:
    root_id: str | None
    people: list[PersonRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"root_id": self.root_id, "people": [p.to_dict() for p in self.people]}

    @classmethod
    def from_dict(cls, data: dict) -> "Snapshot":
        people = data.get("people")
        if people is None:
            # keyed by id: {"members": {"<id>": {...}}}
            people = list((data.get("members") or {}).values())
        return cls(
            root_id=data.get("root_id", data.get("rootId")),
            people=[PersonRecord.from_dict(p) for p in people],
        )


# ============================================================================
# Rebuild / serialize
# ============================================================================


def _known(ids: list[str], people: dict[str, Person], owner: Person, what: str) -> list[str]:
    """Keep the ids that exist, once each, in order."""
    out: list[str] = []
    for i in ids:
        if i not in people:
            logger.warning("dropping unknown %s %s of %s", what, i, owner.name)
        elif i not in out:
            out.append(i)
    return out


def rebuild(snapshot: Snapshot) -> FamilyTree:
    """
    Build a live FamilyTree from a snapshot.

    Reverse links missing from the records are completed; identifiers that
    point at nobody and adoption flags that do not name one of the person's
    children are dropped. Both repairs are logged as warnings, and so is
    every remaining validation warning.
    """
    graph = FamilyGraph()
    for rec in snapshot.people:
        graph.add(
            Person(
                id=rec.id,
                name=rec.name,
                sex=Sex(rec.sex),
                spouse_id=rec.spouse_id,
                parent_ids=list(rec.parent_ids),
                child_ids=list(rec.child_ids),
                adopted_child_ids=set(rec.adopted_child_ids),
            )
        )

    people = graph.people
    for p in people.values():
        if p.spouse_id and p.spouse_id not in people:
            logger.warning("dropping unknown spouse %s of %s", p.spouse_id, p.name)
            p.spouse_id = None
        p.parent_ids = _known(p.parent_ids, people, p, "parent")
        p.child_ids = _known(p.child_ids, people, p, "child")

    for p in people.values():
        for cid in p.child_ids:
            child = people[cid]
            if p.id not in child.parent_ids:
                child.parent_ids.append(p.id)
        for pid in p.parent_ids:
            parent = people[pid]
            if p.id not in parent.child_ids:
                parent.child_ids.append(p.id)
        if p.spouse_id:
            spouse = people[p.spouse_id]
            if spouse.spouse_id is None:
                spouse.spouse_id = p.id

    for p in people.values():
        if len(p.parent_ids) > 2:
            logger.warning("%s has %d parents after completing reverse links", p.name, len(p.parent_ids))

    for p in people.values():
        bad = p.adopted_child_ids - set(p.child_ids)
        for cid in sorted(bad):
            logger.warning("dropping adoption flag of %s for non-child %s", p.name, cid)
        p.adopted_child_ids -= bad

    root_id = snapshot.root_id
    if root_id not in people and people:
        fallback = next(iter(people))
        logger.warning("root %s not found, using %s", root_id, fallback)
        root_id = fallback

    for w in validate_graph(graph):
        logger.warning(w)

    logger.debug("rebuilt %d people, root %s", len(people), root_id)
    return FamilyTree(graph, root_id)


def serialize(tree: FamilyTree) -> Snapshot:
    records = [
        PersonRecord(
            id=p.id,
            name=p.name,
            sex=p.sex.value,
            spouse_id=p.spouse_id,
            parent_ids=list(p.parent_ids),
            child_ids=list(p.child_ids),
            adopted_child_ids=sorted(p.adopted_child_ids),
        )
        for p in tree.graph.people.values()
    ]
    return Snapshot(root_id=tree.root_id, people=records)


def load_snapshot(path: Path) -> Snapshot:
    with open(path, encoding="utf-8") as f:
        return Snapshot.from_dict(json.load(f))


def save_snapshot(snapshot: Snapshot, path: Path) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(snapshot.to_dict(), f, indent=2)
