"""Data classes for family graph entities and layout output."""

from dataclasses import asdict, dataclass, field
import enum


class Sex(enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"

    @classmethod
    def _missing_(cls, value):
        # Accept the short GEDCOM-style codes and any casing.
        if isinstance(value, str):
            v = value.strip().upper()
            if v in ("M", "MALE"):
                return cls.MALE
            if v in ("F", "FEMALE"):
                return cls.FEMALE
        return None


class Relation(enum.Enum):
    """Relation a new person gets to an existing one."""

    CHILD = "CHILD"
    SPOUSE = "SPOUSE"
    PARENT = "PARENT"


class Kinship(enum.Enum):
    """What a relative is to a member."""

    ANCESTOR = "ANCESTOR"
    DESCENDANT = "DESCENDANT"
    SPOUSE = "SPOUSE"
    BROTHER = "BROTHER"
    SISTER = "SISTER"
    BROTHER_IN_LAW = "BROTHER-IN-LAW"
    SISTER_IN_LAW = "SISTER-IN-LAW"
    COUSIN = "COUSIN"
    COUSIN_IN_LAW = "COUSIN-IN-LAW"
    FATHER = "FATHER"
    MOTHER = "MOTHER"
    FATHER_IN_LAW = "FATHER-IN-LAW"
    MOTHER_IN_LAW = "MOTHER-IN-LAW"
    SON = "SON"
    DAUGHTER = "DAUGHTER"
    SON_IN_LAW = "SON-IN-LAW"
    DAUGHTER_IN_LAW = "DAUGHTER-IN-LAW"
    NONE = "NONE"


class RelativeQuery(enum.Enum):
    PATERNAL_UNCLE = "PATERNAL-UNCLE"
    MATERNAL_UNCLE = "MATERNAL-UNCLE"
    PATERNAL_AUNT = "PATERNAL-AUNT"
    MATERNAL_AUNT = "MATERNAL-AUNT"
    SISTER_IN_LAW = "SISTER-IN-LAW"
    BROTHER_IN_LAW = "BROTHER-IN-LAW"
    COUSIN = "COUSIN"
    FATHER = "FATHER"
    MOTHER = "MOTHER"
    CHILD = "CHILD"
    SON = "SON"
    DAUGHTER = "DAUGHTER"
    BROTHER = "BROTHER"
    SISTER = "SISTER"
    GRAND_CHILD = "GRAND-CHILD"
    GRAND_DAUGHTER = "GRAND-DAUGHTER"
    GRAND_SON = "GRAND-SON"
    SIBLING = "SIBLING"
    SPOUSE = "SPOUSE"


class Lookup(enum.Enum):
    """How a person reference is matched: by identifier or by display name."""

    ID = "id"
    NAME = "name"


@dataclass
class Person:
    id: str
    name: str
    sex: Sex
    spouse_id: str | None = None
    parent_ids: list[str] = field(default_factory=list)
    child_ids: list[str] = field(default_factory=list)
    adopted_child_ids: set[str] = field(default_factory=set)

    def is_married(self) -> bool:
        return self.spouse_id is not None

    def is_male(self) -> bool:
        return self.sex is Sex.MALE

    def is_female(self) -> bool:
        return self.sex is Sex.FEMALE

    def copy(self) -> "Person":
        return Person(
            id=self.id,
            name=self.name,
            sex=self.sex,
            spouse_id=self.spouse_id,
            parent_ids=list(self.parent_ids),
            child_ids=list(self.child_ids),
            adopted_child_ids=set(self.adopted_child_ids),
        )


# ============================================================================
# Layout output
# ============================================================================


@dataclass
class PositionedNode:
    id: str
    kind: str  # "person" or "union"
    gen: int
    x: float
    y: float
    w: float
    h: float
    person_id: str | None = None
    spouse_ids: tuple[str, ...] = ()

    @property
    def center_x(self) -> float:
        return self.x + self.w / 2

    @property
    def right(self) -> float:
        return self.x + self.w

    def to_dict(self) -> dict:
        d = asdict(self)
        d["spouse_ids"] = list(self.spouse_ids)
        return d


@dataclass
class LayoutEdge:
    id: str
    source: str
    target: str
    source_side: str = "bottom"
    target_side: str = "top"
    adopted: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class LayoutResult:
    nodes: list[PositionedNode] = field(default_factory=list)
    edges: list[LayoutEdge] = field(default_factory=list)
    width: float = 800.0
    height: float = 600.0
    min_gen: int = 0
    max_gen: int = 0

    def person_nodes(self) -> list[PositionedNode]:
        return [n for n in self.nodes if n.kind == "person"]

    def union_nodes(self) -> list[PositionedNode]:
        return [n for n in self.nodes if n.kind == "union"]

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "width": self.width,
            "height": self.height,
            "min_gen": self.min_gen,
            "max_gen": self.max_gen,
        }
