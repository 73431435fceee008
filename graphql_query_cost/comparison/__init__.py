# Copyright 2026-present Kensho Technologies, LLC.
"""Tooling to validate cost estimates against the costs a live API charges.

Nothing here is needed to estimate costs: it sends the queries to a real API, which reports the cost
it charged, and records how far the estimates are from those charges.
"""
from .client import AdminApiClient, RemoteFieldCost, RemoteQueryCost  # noqa
from .query_files import (  # noqa
    QueryFile,
    default_variables,
    extract_variable_names,
    is_fragment_only,
    load_query_files,
    load_random_query_files,
)
from .report import CostComparison, CostComparisonReport  # noqa
from .runner import QueryCostComparisonRunner  # noqa
