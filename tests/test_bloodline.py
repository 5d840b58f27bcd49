from __future__ import annotations

import pytest

from bloodline import FilterOptions, filter_bloodline, parent_graph


def test_direct_line_only(bloodline_family) -> None:
    sub = filter_bloodline(bloodline_family.people, "F")

    assert set(sub) == {"F", "P", "S", "GP1", "GP2"}


def test_descendants_are_included(bloodline_family) -> None:
    sub = filter_bloodline(bloodline_family.people, "A")

    assert set(sub) == {"A", "GP1", "GP2", "C", "C2"}


def test_spouses_are_added_but_not_expanded(bloodline_family) -> None:
    sub = filter_bloodline(bloodline_family.people, "F", FilterOptions(include_spouses=True))

    assert set(sub) == {"F", "P", "S", "GP1", "GP2", "FS"}


def test_kin_depth_one_adds_siblings(bloodline_family) -> None:
    sub = filter_bloodline(bloodline_family.people, "F", FilterOptions(kin_depth=1))

    assert set(sub) == {"F", "P", "S", "GP1", "GP2", "Sib", "A"}


def test_kin_depth_two_adds_cousins(bloodline_family) -> None:
    sub = filter_bloodline(bloodline_family.people, "F", FilterOptions(kin_depth=2))

    assert {"Sib", "A", "C"} <= set(sub)
    assert "C2" not in sub
    assert "AS" not in sub


def test_kin_depth_three_adds_second_cousins(bloodline_family) -> None:
    sub = filter_bloodline(bloodline_family.people, "F", FilterOptions(kin_depth=3))

    assert "C2" in sub


def test_filter_keeps_map_order(bloodline_family) -> None:
    sub = filter_bloodline(bloodline_family.people, "F")

    assert list(sub) == [pid for pid in bloodline_family.people if pid in sub]


def test_unknown_focus_returns_map_unchanged(bloodline_family) -> None:
    people = bloodline_family.people

    assert filter_bloodline(people, "nobody") is people


@pytest.mark.parametrize("depth", [-1, 4])
def test_kin_depth_is_bounded(depth) -> None:
    with pytest.raises(ValueError):
        FilterOptions(kin_depth=depth)


def test_parent_graph_edges(bloodline_family) -> None:
    G = parent_graph(bloodline_family.people)

    assert G.has_edge("P", "F")
    assert G.has_edge("GP2", "A")
    assert not G.has_edge("F", "FS")
