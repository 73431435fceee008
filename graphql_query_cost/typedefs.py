# Copyright 2026-present Kensho Technologies, LLC.
from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Dict, FrozenSet, List, Optional


@unique
class TypeKind(Enum):
    """The kind of the named type a field returns, once list and non-null wrappers are removed."""

    SCALAR = "scalar"
    ENUM = "enum"
    OBJECT = "object"
    INTERFACE = "interface"
    UNION = "union"
    UNKNOWN = "unknown"


@unique
class CostCategory(Enum):
    """The cost rule that applies to a field. Exactly one category applies to each field."""

    MUTATION_ROOT = "mutation_root"
    CONNECTION = "connection"
    OBJECT = "object"
    ABSTRACT = "abstract"
    LEAF = "leaf"
    PASS_THROUGH = "pass_through"


@dataclass
class SelectionNode:
    """One field occurrence in a query, with everything needed to cost it.

    Fragment spreads and inline fragments are already expanded: each child is a field occurrence,
    annotated with the type condition under which it was selected.
    """

    field_name: str

    # Name of the type the field was selected on: the enclosing field's return type, or the type
    # condition of the fragment the field was selected in.
    parent_type_name: str

    # Kind of the field's return type, after unwrapping lists and non-nulls.
    type_kind: TypeKind = TypeKind.UNKNOWN

    alias: Optional[str] = None

    # Name of the field's unwrapped return type, if known.
    return_type_name: Optional[str] = None

    is_connection: bool = False
    is_mutation_root: bool = False
    is_introspection: bool = False

    # True if a @skip or @include directive excludes this occurrence from the response.
    is_skipped: bool = False

    # Argument values supplied at this occurrence, with variables and defaults already applied.
    arguments: Dict[str, Any] = field(default_factory=dict)

    # Concrete object types the return type may resolve to. Empty if unknown.
    possible_type_names: FrozenSet[str] = frozenset()

    # Concrete object types covered by parent_type_name. Empty if unknown.
    parent_possible_type_names: FrozenSet[str] = frozenset()

    children: List["SelectionNode"] = field(default_factory=list)

    @property
    def response_key(self) -> str:
        """Return the key under which the field appears in the response: its alias or name."""
        return self.alias or self.field_name


@dataclass
class QuerySelectionTree:
    """The field occurrences of one operation, ready to be costed."""

    # "query", "mutation" or "subscription".
    operation_type: str

    # Name of the schema's root type for the operation, e.g. "QueryRoot".
    root_type_name: str

    # The operation's top-level field occurrences.
    selections: List[SelectionNode] = field(default_factory=list)

    operation_name: Optional[str] = None


@dataclass
class CostBreakdown:
    """The computed cost of one field, mirroring the shape of the query."""

    response_key: str
    field_name: str
    parent_type_name: Optional[str]
    category: CostCategory

    # Aggregated cost of the selections under this field.
    child_cost: int

    # The field's own cost, including child_cost as folded in by its cost rule.
    own_cost: int

    # Only set for connection fields.
    page_size: Optional[int] = None
    multiplier: Optional[int] = None

    # Number of query occurrences merged into this field.
    occurrence_count: int = 1

    children: List["CostBreakdown"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation of the breakdown tree."""
        return {
            "response_key": self.response_key,
            "field_name": self.field_name,
            "parent_type_name": self.parent_type_name,
            "category": self.category.value,
            "child_cost": self.child_cost,
            "own_cost": self.own_cost,
            "page_size": self.page_size,
            "multiplier": self.multiplier,
            "occurrence_count": self.occurrence_count,
            "children": [child.to_dict() for child in self.children],
        }
