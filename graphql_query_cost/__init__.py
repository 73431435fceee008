# Copyright 2026-present Kensho Technologies, LLC.
"""Commonly-used functions and data types from this package."""
from .analysis import (  # noqa
    QueryCostAnalysis,
    analyze_query_ast,
    analyze_query_string,
    estimate_query_cost,
    estimate_query_cost_with_breakdown,
)
from .ast_manipulation import safe_parse_graphql  # noqa
from .cost_model import (  # noqa
    DEFAULT_COST_MODEL,
    DEFAULT_PAGE_SIZE_BUCKETS,
    LOG_CALIBRATED_COST_MODEL,
    BucketedConnectionMultiplier,
    ConnectionMultiplier,
    CostModel,
    LogCalibratedConnectionMultiplier,
    cost_model_from_dict,
)
from .debugging_utils import pretty_print_cost_breakdown  # noqa
from .exceptions import (  # noqa
    GraphQLParsingError,
    GraphQLValidationError,
    InvalidCostModelError,
    QueryCostError,
)
from .global_utils import ASTWithParameters, QueryStringWithParameters  # noqa
from .selection_tree import build_selection_tree  # noqa
from .traversal import CostTraversal, estimate_cost, estimate_cost_with_breakdown  # noqa
from .typedefs import (  # noqa
    CostBreakdown,
    CostCategory,
    QuerySelectionTree,
    SelectionNode,
    TypeKind,
)


__package_name__ = "graphql-query-cost"
__version__ = "0.1.0"
