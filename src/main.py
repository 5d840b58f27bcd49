"""
1) Load a family snapshot (JSON) or build the sample family.
2) Rebuild the live family graph from it.
3) Validate the graph for cycles, one-sided links and bad adoption flags.
4) Optionally answer a "what is X to Y" query.
5) Lay the graph out, optionally around a focus person.
6) Write the layout as JSON.
"""

import argparse
import json
import logging
from pathlib import Path

from bloodline import FilterOptions
from config import LayoutConfig
from errors import FamilyGraphError
from family import setup_sample_family
from models import Lookup
from snapshot import load_snapshot, rebuild
from validation import validate_graph


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Lay out a family graph snapshot.")
    parser.add_argument("snapshot", nargs="?", type=Path, help="snapshot JSON file")
    parser.add_argument("--demo", action="store_true", help="use the built-in sample family")
    parser.add_argument("--focus", help="person id to center the bloodline filter on")
    parser.add_argument("--kin-depth", type=int, default=0, choices=[0, 1, 2, 3])
    parser.add_argument("--include-spouses", action="store_true")
    parser.add_argument(
        "--relationship",
        nargs=2,
        metavar=("MEMBER", "RELATIVE"),
        help="print what RELATIVE is to MEMBER (ids)",
    )
    parser.add_argument("--config", type=Path, help="JSON file with layout overrides")
    parser.add_argument("--out", type=Path, default=Path("layout.json"))
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)
    if not args.demo and args.snapshot is None:
        parser.error("a snapshot file or --demo is required")
    return args


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.demo:
        print("Building sample family...")
        tree = setup_sample_family()
    else:
        print(f"Loading snapshot: {args.snapshot}")
        tree = rebuild(load_snapshot(args.snapshot))
    print(f"  Tree has {len(tree.graph)} people, root {tree.root_id}")

    print("Validating graph...")
    warnings = validate_graph(tree.graph)
    if warnings:
        print(f"  Found {len(warnings)} validation warnings:")
        for w in warnings[:10]:
            print(f"    - {w}")
        if len(warnings) > 10:
            print(f"    ... and {len(warnings) - 10} more")
    else:
        print("  No validation issues found")

    if args.relationship:
        member_id, relative_id = args.relationship
        try:
            kinship = tree.get_relationship(member_id, relative_id, by=Lookup.ID)
        except FamilyGraphError as e:
            print(f"  {e}")
            return 1
        print(f"  {relative_id} is {kinship.value} of {member_id}")

    config = LayoutConfig()
    if args.config:
        with open(args.config, encoding="utf-8") as f:
            config = LayoutConfig.from_dict(json.load(f))

    print("Computing layout...")
    options = FilterOptions(kin_depth=args.kin_depth, include_spouses=args.include_spouses)
    result = tree.layout(args.focus, options, config)
    print(
        f"  {len(result.person_nodes())} people, {len(result.union_nodes())} unions, "
        f"{len(result.edges)} edges on {result.width:.0f}x{result.height:.0f}"
    )

    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, indent=2)
    print(f"Layout saved to {args.out}")
    print("Done!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
