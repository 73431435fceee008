# Copyright 2026-present Kensho Technologies, LLC.
"""Per-field cost rules.

Each field falls into exactly one CostCategory, chosen by the first matching entry of an ordered
rule table. The category then selects the formula that folds the field's aggregated child cost
into the field's own cost:

    mutation root   mutation_cost, plus the child cost if the model says so
    connection      multiplier(page size) * items cost + page info metadata cost
    object          object_cost + child cost
    abstract        max(child cost, abstract_floor_cost)
    leaf            0
    pass-through    child cost
"""
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .cost_model import CostModel
from .typedefs import CostCategory, TypeKind


@dataclass(frozen=True)
class FieldCostInputs:
    """Everything the cost rules need to know about one field."""

    category: CostCategory

    # Aggregated cost of the field's selections. None if nothing was selected under the field.
    child_cost: Optional[int] = None

    # Largest page size requested across all occurrences of the field, if any.
    page_size: Optional[int] = None

    # Whether the page info object was selected under a connection field.
    has_page_info: bool = False


# Predicates take (type_kind, is_connection, is_mutation_root).
CategoryPredicate = Callable[[TypeKind, bool, bool], bool]


def _is_mutation_root(type_kind: TypeKind, is_connection: bool, is_mutation_root: bool) -> bool:
    return is_mutation_root


def _is_connection(type_kind: TypeKind, is_connection: bool, is_mutation_root: bool) -> bool:
    return is_connection


def _is_object(type_kind: TypeKind, is_connection: bool, is_mutation_root: bool) -> bool:
    return type_kind == TypeKind.OBJECT


def _is_abstract(type_kind: TypeKind, is_connection: bool, is_mutation_root: bool) -> bool:
    return type_kind in (TypeKind.INTERFACE, TypeKind.UNION)


def _is_leaf(type_kind: TypeKind, is_connection: bool, is_mutation_root: bool) -> bool:
    return type_kind in (TypeKind.SCALAR, TypeKind.ENUM)


# Checked in order, the first match wins.
_CATEGORY_RULES: Tuple[Tuple[CostCategory, CategoryPredicate], ...] = (
    (CostCategory.MUTATION_ROOT, _is_mutation_root),
    (CostCategory.CONNECTION, _is_connection),
    (CostCategory.OBJECT, _is_object),
    (CostCategory.ABSTRACT, _is_abstract),
    (CostCategory.LEAF, _is_leaf),
)


def get_cost_category(
    type_kind: TypeKind, is_connection: bool, is_mutation_root: bool
) -> CostCategory:
    """Return the cost category of a field, falling back to pass-through for unknown types."""
    for category, predicate in _CATEGORY_RULES:
        if predicate(type_kind, is_connection, is_mutation_root):
            return category
    return CostCategory.PASS_THROUGH


def _get_mutation_root_cost(cost_model: CostModel, child_cost: int, inputs: FieldCostInputs) -> int:
    if cost_model.mutation_includes_child_cost:
        return cost_model.mutation_cost + child_cost
    return cost_model.mutation_cost


def _get_connection_cost(cost_model: CostModel, child_cost: int, inputs: FieldCostInputs) -> int:
    """Multiply only the items cost by the page size multiplier, and charge page info flatly."""
    if inputs.has_page_info:
        items_cost = max(child_cost - cost_model.page_info_base_cost, 0)
        metadata_cost = cost_model.page_info_metadata_cost
    else:
        items_cost = child_cost
        metadata_cost = 0

    return cost_model.get_connection_multiplier(inputs.page_size) * items_cost + metadata_cost


def _get_object_cost(cost_model: CostModel, child_cost: int, inputs: FieldCostInputs) -> int:
    return cost_model.object_cost + child_cost


def _get_abstract_cost(cost_model: CostModel, child_cost: int, inputs: FieldCostInputs) -> int:
    # The child cost of an interface or union field is already the maximum over its possible
    # concrete types, so only the floor needs applying here.
    return max(child_cost, cost_model.abstract_floor_cost)


def _get_leaf_cost(cost_model: CostModel, child_cost: int, inputs: FieldCostInputs) -> int:
    return 0


def _get_pass_through_cost(cost_model: CostModel, child_cost: int, inputs: FieldCostInputs) -> int:
    return child_cost


_COST_RULES: Dict[CostCategory, Callable[[CostModel, int, FieldCostInputs], int]] = {
    CostCategory.MUTATION_ROOT: _get_mutation_root_cost,
    CostCategory.CONNECTION: _get_connection_cost,
    CostCategory.OBJECT: _get_object_cost,
    CostCategory.ABSTRACT: _get_abstract_cost,
    CostCategory.LEAF: _get_leaf_cost,
    CostCategory.PASS_THROUGH: _get_pass_through_cost,
}


def get_field_own_cost(cost_model: CostModel, inputs: FieldCostInputs) -> int:
    """Return the own cost of a field, given its category and aggregated child cost.

    Args:
        cost_model: the constants to cost the field with
        inputs: the field's category, aggregated child cost, page size and page info selection

    Returns:
        int, the field's own cost, which already accounts for the cost of its children
    """
    child_cost = inputs.child_cost if inputs.child_cost is not None else 0
    return _COST_RULES[inputs.category](cost_model, child_cost, inputs)
