"""FamilyTree: a person arena plus the root the lookups start from."""

import logging

from bloodline import FilterOptions
from config import LayoutConfig
from errors import PersonNotFoundError
from graph import FamilyGraph
from layout import compute_layout_filtered
from models import Kinship, LayoutResult, Lookup, Person, Relation, RelativeQuery, Sex
import mutations
import relationships
import traversal

logger = logging.getLogger(__name__)


class FamilyTree:
    """
    The live family graph and its root.

    Lookups (`get`, `get_relationship`, `member_names`, ...) walk down from
    the root, so only people the root's descent reaches are found by them.
    Mutations go through `add_member_by_id`, which also applies the root
    change a new parent can cause.
    """

    def __init__(self, graph: FamilyGraph | None = None, root_id: str | None = None):
        self.graph = graph if graph is not None else FamilyGraph()
        self.root_id = root_id

    @classmethod
    def with_root_couple(cls, father_name: str, mother_name: str) -> "FamilyTree":
        """Start a tree with a married couple; the father is the root."""
        tree = cls()
        father = tree.graph.new_person(father_name, Sex.MALE)
        mother = tree.graph.new_person(mother_name, Sex.FEMALE)
        mutations.add_spouse(tree.graph, father.id, mother.id)
        tree.root_id = father.id
        return tree

    @property
    def root(self) -> Person | None:
        if self.root_id is None:
            return None
        return self.graph.people.get(self.root_id)

    @property
    def index(self) -> dict[str, Person]:
        """Identifier -> person for everyone in the arena."""
        return self.graph.people

    def add_member_by_id(
        self,
        source_id: str,
        name: str,
        sex: Sex | str,
        relation: Relation | str,
        *,
        adopted: bool = False,
        marry_existing_parent: bool = False,
    ) -> Person:
        """
        Add a person related to `source_id` and return them.

        Raises:
            PersonNotFoundError: if `source_id` is not in the tree.
            InvariantViolation: if the new link would break a graph invariant.
        """
        if source_id not in self.graph:
            raise PersonNotFoundError(source_id, role="source person")
        result = mutations.add_member(
            self.graph,
            self.root_id,
            source_id,
            name,
            sex,
            relation,
            adopted=adopted,
            marry_existing_parent=marry_existing_parent,
        )
        if result.root_id != self.root_id:
            logger.info("root changed to %s (%s)", result.root_id, self.graph.people[result.root_id].name)
        self.root_id = result.root_id
        return result.person

    def find_by_id(self, person_id: str) -> Person | None:
        """Find someone connected to the root in any direction."""
        if self.root_id is None:
            return None
        return traversal.find_connected(self.graph, self.root_id, person_id)

    def find(self, ref: str, by: Lookup = Lookup.NAME) -> Person | None:
        return traversal.find(self.graph, self.root_id, ref, by)

    def get(
        self, ref: str, query: RelativeQuery | str, by: Lookup = Lookup.NAME
    ) -> list[Person] | Person | None:
        return relationships.get_by_relationship(self.graph, self.root_id, ref, query, by)

    def get_relationship(self, member_ref: str, relative_ref: str, by: Lookup = Lookup.NAME) -> Kinship:
        return relationships.get_relationship(self.graph, self.root_id, member_ref, relative_ref, by)

    def mothers_with_most_girl_children(self) -> list[Person]:
        return relationships.mothers_with_most_girl_children(self.graph, self.root_id)

    def member_names(self) -> list[str]:
        return relationships.member_names(self.graph, self.root_id)

    def layout(
        self,
        focus_id: str | None = None,
        options: FilterOptions | None = None,
        config: LayoutConfig | None = None,
    ) -> LayoutResult:
        return compute_layout_filtered(self.graph, focus_id, options, config)


def setup_sample_family() -> FamilyTree:
    """Vater and Mutter with their children Kind1, Kind2 and Kind3 (added through Mutter)."""
    family = FamilyTree.with_root_couple("Vater", "Mutter")
    mother_id = family.root.spouse_id or family.root_id

    family.add_member_by_id(mother_id, "Kind1", Sex.MALE, Relation.CHILD)
    family.add_member_by_id(mother_id, "Kind2", Sex.FEMALE, Relation.CHILD)
    family.add_member_by_id(mother_id, "Kind3", Sex.MALE, Relation.CHILD)
    return family
