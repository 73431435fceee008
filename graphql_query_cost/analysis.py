# Copyright 2026-present Kensho Technologies, LLC.
from dataclasses import dataclass, field
import logging
from typing import Any, Mapping, Optional, Tuple

from graphql import GraphQLSchema

from .cost_model import DEFAULT_COST_MODEL, CostModel
from .global_utils import ASTWithParameters, QueryStringWithParameters, cached_property
from .selection_tree import build_selection_tree
from .traversal import estimate_cost_with_breakdown
from .typedefs import CostBreakdown, QuerySelectionTree


logger = logging.getLogger(__name__)


@dataclass
class QueryCostAnalysis:
    """A cache for cost analysis passes over a fixed query, schema and cost model."""

    schema: GraphQLSchema
    ast_with_parameters: ASTWithParameters
    cost_model: CostModel = field(default=DEFAULT_COST_MODEL)

    @cached_property
    def query_string_with_parameters(self) -> QueryStringWithParameters:
        """Return the query in string form."""
        return QueryStringWithParameters.from_ast_with_parameters(self.ast_with_parameters)

    @cached_property
    def selection_tree(self) -> QuerySelectionTree:
        """Return the field occurrences of the query, annotated for cost estimation."""
        return build_selection_tree(
            self.schema,
            self.ast_with_parameters.query_ast,
            variables=self.ast_with_parameters.parameters,
            operation_name=self.ast_with_parameters.operation_name,
            cost_model=self.cost_model,
        )

    @cached_property
    def breakdown(self) -> CostBreakdown:
        """Return the cost of each field of the query, mirroring the query's shape."""
        cost, breakdown = estimate_cost_with_breakdown(self.selection_tree, self.cost_model)
        logger.debug(
            "Estimated cost %(cost)s for %(operation_type)s operation %(operation_name)s.",
            {
                "cost": cost,
                "operation_type": self.selection_tree.operation_type,
                "operation_name": self.selection_tree.operation_name,
            },
        )
        return breakdown

    @cached_property
    def cost(self) -> int:
        """Return the estimated cost of the query."""
        return self.breakdown.own_cost


def analyze_query_string(
    schema: GraphQLSchema,
    query_with_params: QueryStringWithParameters,
    cost_model: CostModel = DEFAULT_COST_MODEL,
) -> QueryCostAnalysis:
    """Create a QueryCostAnalysis object for the given query string and parameters."""
    ast_with_params = ASTWithParameters.from_query_string_with_parameters(query_with_params)
    return analyze_query_ast(schema, ast_with_params, cost_model)


def analyze_query_ast(
    schema: GraphQLSchema,
    ast_with_params: ASTWithParameters,
    cost_model: CostModel = DEFAULT_COST_MODEL,
) -> QueryCostAnalysis:
    """Create a QueryCostAnalysis object for the given query AST and parameters."""
    # Exists for parity with analyze_query_string(), so that nobody prints an AST into a string
    # only to parse it again.
    return QueryCostAnalysis(schema, ast_with_params, cost_model)


def estimate_query_cost_with_breakdown(
    schema: GraphQLSchema,
    query_string: str,
    variables: Optional[Mapping[str, Any]] = None,
    operation_name: Optional[str] = None,
    cost_model: CostModel = DEFAULT_COST_MODEL,
) -> Tuple[int, CostBreakdown]:
    """Estimate the cost of a GraphQL query before executing it, with a per-field breakdown.

    Args:
        schema: the schema the query is written against
        query_string: the GraphQL query document
        variables: values of the operation's variables, by variable name
        operation_name: which operation to cost, required if the document has several
        cost_model: the constants to cost the fields with

    Returns:
        tuple (cost, breakdown), where breakdown mirrors the query's merged fields

    Raises:
        - GraphQLParsingError if the query string is not valid GraphQL syntax
        - GraphQLValidationError if the operation to cost cannot be determined or walked
    """
    query_with_params = QueryStringWithParameters(
        query_string, dict(variables or {}), operation_name
    )
    analysis = analyze_query_string(schema, query_with_params, cost_model)
    return analysis.cost, analysis.breakdown


def estimate_query_cost(
    schema: GraphQLSchema,
    query_string: str,
    variables: Optional[Mapping[str, Any]] = None,
    operation_name: Optional[str] = None,
    cost_model: CostModel = DEFAULT_COST_MODEL,
) -> int:
    """Estimate the cost of a GraphQL query before executing it.

    See estimate_query_cost_with_breakdown() for the meaning of the arguments.
    """
    cost, _ = estimate_query_cost_with_breakdown(
        schema, query_string, variables, operation_name, cost_model
    )
    return cost
