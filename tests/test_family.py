from __future__ import annotations

import json

import pytest

from errors import PersonNotFoundError
from family import FamilyTree
from main import main
from models import Relation
from snapshot import save_snapshot, serialize


def test_with_root_couple() -> None:
    tree = FamilyTree.with_root_couple("Vater", "Mutter")

    assert tree.root.name == "Vater"
    assert tree.graph.spouse_of(tree.root).name == "Mutter"


def test_sample_family_children_belong_to_both_parents(sample_family) -> None:
    vater = sample_family.root
    mutter = sample_family.graph.spouse_of(vater)

    assert [c.name for c in sample_family.graph.children_of(vater)] == ["Kind1", "Kind2", "Kind3"]
    assert mutter.child_ids == vater.child_ids


def test_adding_a_parent_to_the_root_moves_the_root(sample_family) -> None:
    opa = sample_family.add_member_by_id(sample_family.root_id, "Opa", "M", Relation.PARENT)

    assert sample_family.root_id == opa.id
    assert "Opa" in sample_family.member_names()


def test_add_member_by_id_unknown_source(sample_family) -> None:
    with pytest.raises(PersonNotFoundError):
        sample_family.add_member_by_id("ghost", "X", "M", "CHILD")


def test_find_by_id_reaches_people_above_the_root(sample_family) -> None:
    kind1 = sample_family.find("Kind1")
    frau = sample_family.add_member_by_id(kind1.id, "Frau1", "F", Relation.SPOUSE)
    other = sample_family.add_member_by_id(frau.id, "Pate", "M", Relation.PARENT)

    assert sample_family.root.name == "Vater"
    assert sample_family.find("Frau1") is frau
    assert sample_family.find("Pate") is None
    assert sample_family.find_by_id(other.id) is other
    assert sample_family.index[other.id] is other


def test_cli_demo_writes_layout(tmp_path, capsys) -> None:
    out = tmp_path / "layout.json"

    assert main(["--demo", "--out", str(out)]) == 0

    data = json.loads(out.read_text())
    assert len([n for n in data["nodes"] if n["kind"] == "person"]) == 5
    assert "Done!" in capsys.readouterr().out


def test_cli_snapshot_with_relationship(tmp_path, capsys, extended_family) -> None:
    snap_path = tmp_path / "family.json"
    save_snapshot(serialize(extended_family), snap_path)
    out = tmp_path / "layout.json"

    code = main([str(snap_path), "--relationship", "Kind1", "Vater", "--focus", "Kind1", "--out", str(out)])

    assert code == 0
    assert "Vater is FATHER of Kind1" in capsys.readouterr().out
    assert out.exists()


def test_cli_requires_input() -> None:
    with pytest.raises(SystemExit):
        main([])
