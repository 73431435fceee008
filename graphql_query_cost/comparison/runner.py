# Copyright 2026-present Kensho Technologies, LLC.
"""Compare estimated query costs with the costs a live API charges for the same queries.

Used as: python -m graphql_query_cost.comparison.runner SCHEMA_FILE QUERY_FILE [VARIABLES_JSON]
"""
import json
import logging
import sys
import time
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

from funcy import retry
from graphql import GraphQLError, GraphQLSchema
import requests

from ..analysis import estimate_query_cost
from ..cost_model import DEFAULT_COST_MODEL, CostModel
from ..exceptions import QueryCostError, RemoteQueryCostError, RemoteQueryThrottledError
from ..tool import load_schema
from .client import AdminApiClient, RemoteFieldCost, RemoteQueryCost
from .query_files import QueryFile, default_variables, read_query_file
from .report import CostComparisonReport


logger = logging.getLogger(__name__)

# Errors worth sending the same query again for.
TRANSIENT_ERRORS = (requests.ConnectionError, requests.Timeout, RemoteQueryThrottledError)


def format_remote_field_costs(fields: Sequence[RemoteFieldCost], indent_size: int = 2) -> str:
    """Return the per-field costs reported by the remote API, indented by path depth."""
    return "\n".join(
        "{}{}: requested_total_cost={} requested_children_cost={}".format(
            " " * (indent_size * len(field_cost.path)),
            field_cost.name,
            field_cost.requested_total_cost,
            field_cost.requested_children_cost,
        )
        for field_cost in fields
    )


class QueryCostComparisonRunner:
    """Estimates query costs locally, executes the queries remotely, and records both costs."""

    def __init__(
        self,
        schema: GraphQLSchema,
        client: AdminApiClient,
        cost_model: CostModel = DEFAULT_COST_MODEL,
        report: Optional[CostComparisonReport] = None,
        pause_seconds: float = 0.5,
        max_attempts: int = 3,
        retry_delay_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Create a runner.

        Args:
            schema: the schema the queries are written against, matching the API version
            client: sends queries to the live API
            cost_model: the constants to estimate costs with
            report: where results are recorded, a new report if not given
            pause_seconds: how long to wait after each remote query, to respect rate limits
            max_attempts: how many times to send a query failing with a transient error
            retry_delay_seconds: how long to wait before sending a failed query again
            sleep: called to wait between queries
        """
        self.schema = schema
        self.client = client
        self.cost_model = cost_model
        self.report = report if report is not None else CostComparisonReport()
        self.pause_seconds = pause_seconds
        self.max_attempts = max_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self.sleep = sleep

    def _execute_remotely(
        self, query_string: str, variables: Mapping[str, Any]
    ) -> RemoteQueryCost:
        # pylint: disable=no-value-for-parameter
        execute_with_retries = retry(
            self.max_attempts, errors=TRANSIENT_ERRORS, timeout=self.retry_delay_seconds
        )(self.client.execute_query)
        # pylint: enable=no-value-for-parameter
        return execute_with_retries(query_string, variables)

    def run_query_string(
        self,
        query_string: str,
        name: str = "query",
        variables: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """Compare the estimated and the actual cost of the query, returning True on success."""
        variables = dict(variables or {})

        try:
            estimated_cost = estimate_query_cost(
                self.schema, query_string, variables, cost_model=self.cost_model
            )
        except QueryCostError as e:
            self.report.add_error(name, f"Cost estimation error: {e}")
            logger.warning("Could not estimate the cost of %s: %s", name, e)
            return False

        try:
            remote_cost = self._execute_remotely(query_string, variables)
        except (requests.RequestException, RemoteQueryCostError) as e:
            self.report.add_error(name, f"API request error: {e}")
            logger.warning("Could not execute %s remotely: %s", name, e)
            return False
        finally:
            self.sleep(self.pause_seconds)

        if remote_cost.errors:
            self.report.add_error(name, remote_cost.error_message)
            logger.warning("API returned errors for %s: %s", name, remote_cost.error_message)
            return False
        if remote_cost.requested_query_cost is None:
            raise AssertionError(
                f"Expected the client to report a cost for {name} or raise. This is a bug."
            )

        comparison = self.report.add_result(
            name, estimated_cost, remote_cost.requested_query_cost, remote_cost.fields
        )
        logger.info(
            "%(name)s: estimated %(estimated)s, actual %(actual)s, diff %(difference)s "
            "(%(percent_difference)s%%)",
            {
                "name": name,
                "estimated": comparison.estimated,
                "actual": comparison.actual,
                "difference": comparison.difference,
                "percent_difference": comparison.percent_difference,
            },
        )
        if remote_cost.fields:
            logger.debug(
                "Field costs for %s:\n%s", name, format_remote_field_costs(remote_cost.fields)
            )
        return True

    def run_query_file(
        self, query_file: QueryFile, variables: Optional[Mapping[str, Any]] = None
    ) -> bool:
        """Compare costs for the query file, with default variables unless others are given."""
        if variables is None:
            variables = default_variables(query_file.content)
        return self.run_query_string(query_file.content, query_file.name, variables)

    def run_query_files(self, query_files: Iterable[QueryFile]) -> CostComparisonReport:
        """Compare costs for each of the query files, and return the report."""
        for query_file in query_files:
            self.run_query_file(query_file)
        return self.report


def main(argv: Optional[List[str]] = None) -> int:
    """Compare the estimated and the actual cost of one query file."""
    args = sys.argv[1:] if argv is None else argv
    if len(args) not in (2, 3):
        sys.stderr.write(
            "Usage: python -m graphql_query_cost.comparison.runner "
            "SCHEMA_FILE QUERY_FILE [VARIABLES_JSON]\n"
        )
        return 1
    logging.basicConfig(level=logging.DEBUG)

    schema_path, query_path = args[0], args[1]
    try:
        variables = json.loads(args[2]) if len(args) == 3 else None
        if variables is not None and not isinstance(variables, dict):
            raise ValueError("VARIABLES_JSON must be a JSON object")
        schema = load_schema(schema_path)
        query_file = read_query_file(query_path)
        runner = QueryCostComparisonRunner(schema, AdminApiClient.from_environment())
        success = runner.run_query_file(query_file, variables)
    except (QueryCostError, GraphQLError, OSError, ValueError) as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1

    sys.stdout.write(runner.report.render_summary() + "\n")
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
