from __future__ import annotations

import logging

from snapshot import PersonRecord, Snapshot, load_snapshot, rebuild, save_snapshot, serialize


def _record(pid: str, sex: str = "MALE", **kwargs) -> PersonRecord:
    return PersonRecord(id=pid, name=pid, sex=sex, **kwargs)


def test_round_trip_is_stable(extended_family) -> None:
    extended_family.graph.people["Kind1"].adopted_child_ids.add("Enkel1")
    first = serialize(extended_family)

    again = serialize(rebuild(Snapshot.from_dict(first.to_dict())))

    assert again == first
    assert again.root_id == "Vater"


def test_rebuild_gives_index_and_root(sample_family) -> None:
    tree = rebuild(serialize(sample_family))

    assert tree.root_id == sample_family.root_id
    assert set(tree.index) == set(sample_family.graph.people)
    assert tree.get_relationship("Kind1", "Mutter").value == "MOTHER"


def test_rebuild_completes_reverse_links() -> None:
    snap = Snapshot(
        root_id="A",
        people=[
            _record("A", spouse_id="B", child_ids=["K"]),
            _record("B", "FEMALE"),
            _record("K", parent_ids=[]),
        ],
    )

    tree = rebuild(snap)

    assert tree.index["K"].parent_ids == ["A"]
    assert tree.index["B"].spouse_id == "A"


def test_rebuild_drops_dangling_ids_with_warning(caplog) -> None:
    snap = Snapshot(
        root_id="A",
        people=[
            _record("A", spouse_id="ghost", child_ids=["K", "nobody"], adopted_child_ids=["K", "X"]),
            _record("K", parent_ids=["A", "A"]),
        ],
    )

    with caplog.at_level(logging.WARNING, logger="snapshot"):
        tree = rebuild(snap)

    a = tree.index["A"]
    assert a.spouse_id is None
    assert a.child_ids == ["K"]
    assert a.adopted_child_ids == {"K"}
    assert tree.index["K"].parent_ids == ["A"]
    assert "unknown spouse ghost" in caplog.text
    assert "unknown child nobody" in caplog.text
    assert "non-child X" in caplog.text


def test_rebuild_falls_back_to_first_person_as_root() -> None:
    tree = rebuild(Snapshot(root_id="missing", people=[_record("A"), _record("B")]))

    assert tree.root_id == "A"


def test_from_dict_accepts_keyed_members() -> None:
    data = {
        "rootId": "a",
        "members": {
            "a": {"id": "a", "name": "Anna", "gender": "FEMALE", "spouseId": None, "childrenIds": ["b"]},
            "b": {"id": "b", "name": "Ben", "gender": "MALE", "parentIds": ["a"], "childrenIds": []},
        },
    }

    snap = Snapshot.from_dict(data)

    assert snap.root_id == "a"
    assert snap.people[0].sex == "FEMALE"
    assert snap.people[0].child_ids == ["b"]
    assert snap.people[1].parent_ids == ["a"]


def test_save_and_load(tmp_path, sample_family) -> None:
    path = tmp_path / "family.json"
    snap = serialize(sample_family)

    save_snapshot(snap, path)

    assert load_snapshot(path) == snap


def test_rebuild_warns_about_too_many_parents(caplog) -> None:
    snap = Snapshot(
        root_id="A",
        people=[
            _record("A", child_ids=["K"]),
            _record("B", child_ids=["K"]),
            _record("C", child_ids=["K"]),
            _record("K"),
        ],
    )

    with caplog.at_level(logging.WARNING, logger="snapshot"):
        tree = rebuild(snap)

    assert tree.index["K"].parent_ids == ["A", "B", "C"]
    assert "K has 3 parents after completing reverse links" in caplog.text
