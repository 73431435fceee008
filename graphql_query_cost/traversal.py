# Copyright 2026-present Kensho Technologies, LLC.
"""Single-pass, bottom-up cost evaluation of a query's selections.

The traversal keeps a stack of ComplexityScope objects mirroring the path from the operation root to
the field being visited. Occurrences of the same response key selected on the same parent type
under the same parent scope, e.g. via two fragment spreads, are merged into one scope. Since merged
occurrences need not be adjacent in the query, a scope's own cost is only computed once the whole
query has been walked, by folding the scope tree bottom-up: each scope's cost is computed exactly
once, after all its children's.

A traversal is single-use and owns all of its state, so independent traversals may run
concurrently.
"""
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .cost_model import DEFAULT_COST_MODEL, CostModel, normalize_page_size
from .field_cost import FieldCostInputs, get_cost_category, get_field_own_cost
from .typedefs import CostBreakdown, CostCategory, QuerySelectionTree, SelectionNode


class ComplexityScope:
    """Accumulator for one (parent type, response key) pair within one query evaluation."""

    def __init__(
        self,
        parent_type_name: Optional[str],
        response_key: str,
        field_name: str,
        category: CostCategory,
        possible_type_names: FrozenSet[str],
    ) -> None:
        """Create an empty scope, before any of its occurrences are recorded."""
        self.parent_type_name = parent_type_name
        self.response_key = response_key
        self.field_name = field_name
        self.category = category
        self.possible_type_names = possible_type_names

        # Every occurrence of the field in the query that was merged into this scope.
        self.occurrences: List[SelectionNode] = []

        # Child scopes, grouped by the type they were selected on, then keyed by response key.
        self.children_by_type: Dict[str, Dict[str, "ComplexityScope"]] = {}

        # For each type that children were selected on, the concrete types it covers.
        self.covered_types_by_type: Dict[str, Set[str]] = {}

        self.has_page_info = False

    @classmethod
    def make_root(cls, root_type_name: str, operation_label: str) -> "ComplexityScope":
        """Create the synthetic scope whose children are the top-level selections."""
        return cls(None, operation_label, root_type_name, CostCategory.PASS_THROUGH, frozenset())

    def get_or_create_child(self, node: SelectionNode, cost_model: CostModel) -> "ComplexityScope":
        """Return the child scope for the node's (parent type, response key), creating it if new."""
        scopes_for_type = self.children_by_type.setdefault(node.parent_type_name, {})
        covered_types = self.covered_types_by_type.setdefault(node.parent_type_name, set())
        covered_types.update(node.parent_possible_type_names)

        child_scope = scopes_for_type.get(node.response_key)
        if child_scope is None:
            child_scope = ComplexityScope(
                node.parent_type_name,
                node.response_key,
                node.field_name,
                get_cost_category(node.type_kind, node.is_connection, node.is_mutation_root),
                node.possible_type_names,
            )
            scopes_for_type[node.response_key] = child_scope

        if (
            self.category == CostCategory.CONNECTION
            and node.field_name == cost_model.page_info_field_name
        ):
            self.has_page_info = True

        return child_scope

    def get_page_size(self, cost_model: CostModel) -> Optional[int]:
        """Return the largest page size requested by any occurrence, or None if none was given."""
        page_sizes = [
            page_size
            for page_size in (
                cost_model.get_requested_page_size(occurrence.arguments)
                for occurrence in self.occurrences
            )
            if page_size is not None
        ]
        if not page_sizes:
            return None
        return max(page_sizes)


def _aggregate_child_cost(scope: ComplexityScope, cost_by_type: Dict[str, int]) -> int:
    """Combine the per-type child costs of a scope into its child cost.

    Children selected on a type that covers every concrete type the field may return are always
    paid for. When the field may return one of several concrete types, only the most expensive
    concrete type's selections are paid for, rather than the sum of all type-conditioned ones.
    """
    if not scope.possible_type_names or len(cost_by_type) < 2:
        return sum(cost_by_type.values())

    def _cost_for_concrete_type(concrete_type_name: str) -> int:
        return sum(
            cost
            for type_name, cost in cost_by_type.items()
            if not scope.covered_types_by_type.get(type_name)
            or concrete_type_name in scope.covered_types_by_type[type_name]
        )

    return max(
        _cost_for_concrete_type(concrete_type_name)
        for concrete_type_name in scope.possible_type_names
    )


class CostTraversal:
    """Visitor-style cost evaluation of one query: call enter_field and leave_field per field.

    Fields must be entered in pre-order and left in post-order. Introspection fields and fields
    excluded by @skip or @include are ignored, along with everything under them, but must still be
    entered and left like any other field.
    """

    def __init__(
        self,
        cost_model: CostModel = DEFAULT_COST_MODEL,
        root_type_name: str = "Query",
        operation_label: str = "query",
    ) -> None:
        """Start a new evaluation with only the synthetic root scope on the stack."""
        self.cost_model = cost_model
        self._root_scope = ComplexityScope.make_root(root_type_name, operation_label)
        self._scope_stack: List[ComplexityScope] = [self._root_scope]

        # Number of enclosing fields currently ignored; nothing under them is recorded.
        self._ignored_depth = 0

    @property
    def depth(self) -> int:
        """Return the number of fields entered and not yet left, including ignored ones."""
        return len(self._scope_stack) - 1 + self._ignored_depth

    def enter_field(self, node: SelectionNode) -> None:
        """Record a field occurrence and make its scope the current one."""
        if self._ignored_depth > 0 or node.is_introspection or node.is_skipped:
            self._ignored_depth += 1
            return

        scope = self._scope_stack[-1].get_or_create_child(node, self.cost_model)
        scope.occurrences.append(node)
        self._scope_stack.append(scope)

    def leave_field(self, node: SelectionNode) -> None:
        """Close the current field occurrence, which must be the given node."""
        if self._ignored_depth > 0:
            self._ignored_depth -= 1
            return

        if len(self._scope_stack) < 2:
            raise AssertionError(
                f"Attempted to leave field {node.response_key} on {node.parent_type_name}, but no "
                f"field was entered. This is a bug."
            )

        scope = self._scope_stack[-1]
        if scope.occurrences[-1] is not node:
            raise AssertionError(
                f"Attempted to leave field {node.response_key} on {node.parent_type_name}, but the "
                f"innermost entered field is {scope.response_key} on {scope.parent_type_name}. "
                f"This is a bug."
            )
        self._scope_stack.pop()

    def _evaluate_scope(self, scope: ComplexityScope) -> CostBreakdown:
        """Compute the breakdown of the scope, after computing those of all its descendants."""
        child_breakdowns: List[CostBreakdown] = []
        cost_by_type: Dict[str, int] = {}
        for type_name, child_scopes in scope.children_by_type.items():
            for child_scope in child_scopes.values():
                child_breakdown = self._evaluate_scope(child_scope)
                child_breakdowns.append(child_breakdown)
                cost_by_type[type_name] = cost_by_type.get(type_name, 0) + child_breakdown.own_cost

        child_cost = _aggregate_child_cost(scope, cost_by_type)

        page_size = None
        multiplier = None
        if scope.category == CostCategory.CONNECTION:
            page_size = normalize_page_size(scope.get_page_size(self.cost_model))
            multiplier = self.cost_model.get_connection_multiplier(page_size)

        own_cost = get_field_own_cost(
            self.cost_model,
            FieldCostInputs(
                category=scope.category,
                child_cost=child_cost,
                page_size=page_size,
                has_page_info=scope.has_page_info,
            ),
        )

        return CostBreakdown(
            response_key=scope.response_key,
            field_name=scope.field_name,
            parent_type_name=scope.parent_type_name,
            category=scope.category,
            child_cost=child_cost,
            own_cost=own_cost,
            page_size=page_size,
            multiplier=multiplier,
            occurrence_count=len(scope.occurrences),
            children=child_breakdowns,
        )

    def finish(self) -> CostBreakdown:
        """Return the cost breakdown of the whole query, whose own cost is the query's cost."""
        if len(self._scope_stack) != 1 or self._ignored_depth != 0:
            open_fields = [scope.response_key for scope in self._scope_stack[1:]]
            raise AssertionError(
                f"Attempted to finish cost evaluation with {self.depth} fields still open: "
                f"{open_fields}. This is a bug."
            )
        return self._evaluate_scope(self._root_scope)


def walk_selections(traversal: CostTraversal, selections: Iterable[SelectionNode]) -> None:
    """Enter and leave each of the selections and their children, depth-first."""
    for node in selections:
        traversal.enter_field(node)
        walk_selections(traversal, node.children)
        traversal.leave_field(node)


def estimate_cost_with_breakdown(
    selection_tree: QuerySelectionTree, cost_model: CostModel = DEFAULT_COST_MODEL
) -> Tuple[int, CostBreakdown]:
    """Return the cost of the selection tree, and the breakdown of that cost per field.

    Args:
        selection_tree: the operation's field occurrences, with fragments already expanded
        cost_model: the constants to cost the fields with

    Returns:
        tuple (cost, breakdown), where breakdown mirrors the merged query tree and its own_cost
        is the cost of the whole query
    """
    traversal = CostTraversal(
        cost_model,
        root_type_name=selection_tree.root_type_name,
        operation_label=selection_tree.operation_name or selection_tree.operation_type,
    )
    walk_selections(traversal, selection_tree.selections)
    breakdown = traversal.finish()
    return breakdown.own_cost, breakdown


def estimate_cost(
    selection_tree: QuerySelectionTree, cost_model: CostModel = DEFAULT_COST_MODEL
) -> int:
    """Return the cost of the selection tree."""
    cost, _ = estimate_cost_with_breakdown(selection_tree, cost_model)
    return cost
