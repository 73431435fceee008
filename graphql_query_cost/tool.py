#!/usr/bin/env python
# Copyright 2026-present Kensho Technologies, LLC.
"""Utility modeled after json.tool, estimates the cost of a GraphQL query read from stdin.

Used as: python -m graphql_query_cost.tool SCHEMA_FILE [--variables JSON] [--breakdown]
"""
import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from graphql import GraphQLError, GraphQLSchema, build_client_schema, build_schema

from .analysis import estimate_query_cost_with_breakdown
from .cost_model import DEFAULT_COST_MODEL, CostModel, cost_model_from_dict
from .debugging_utils import pretty_print_cost_breakdown
from .exceptions import QueryCostError


def load_schema(schema_path: str) -> GraphQLSchema:
    """Load a schema from SDL, or from an introspection result if the file is JSON."""
    with open(schema_path, "r", encoding="utf-8") as f:
        schema_text = f.read()

    if schema_path.endswith(".json"):
        introspection = json.loads(schema_text)
        if isinstance(introspection, dict):
            introspection = introspection.get("data", introspection)
        try:
            return build_client_schema(introspection)
        except TypeError as e:
            # graphql-core reports malformed introspection results as TypeErrors.
            raise ValueError(f"Invalid introspection result in {schema_path}: {e}") from e
    return build_schema(schema_text)


def load_cost_model(cost_model_path: Optional[str]) -> CostModel:
    """Load a cost model from a JSON file, or return the default one."""
    if cost_model_path is None:
        return DEFAULT_COST_MODEL
    with open(cost_model_path, "r", encoding="utf-8") as f:
        return cost_model_from_dict(json.load(f))


def _make_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m graphql_query_cost.tool",
        description="Estimate the cost of the GraphQL query read from standard input.",
    )
    parser.add_argument("schema", help="schema file, as SDL or as a JSON introspection result")
    parser.add_argument("--variables", default="{}", help="JSON object of variable values")
    parser.add_argument("--operation-name", default=None, help="operation to estimate")
    parser.add_argument("--cost-model", default=None, help="JSON file of cost model constants")
    parser.add_argument(
        "--breakdown", action="store_true", help="also print the cost of each field"
    )
    parser.add_argument(
        "--json", action="store_true", help="write the result as a JSON object"
    )
    parser.add_argument("--verbose", action="store_true", help="log debugging information")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Read a GraphQL query from standard input, and output its estimated cost."""
    args = _make_argument_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    query = "".join(sys.stdin.readlines())
    try:
        schema = load_schema(args.schema)
        cost_model = load_cost_model(args.cost_model)
        variables = json.loads(args.variables)
        if not isinstance(variables, dict):
            raise ValueError("--variables must be a JSON object")
        cost, breakdown = estimate_query_cost_with_breakdown(
            schema, query, variables, args.operation_name, cost_model
        )
    except (QueryCostError, GraphQLError, OSError, ValueError) as e:
        sys.stderr.write(f"Could not estimate query cost: {e}\n")
        return 1

    if args.json:
        result: Dict[str, Any] = {"cost": cost}
        if args.breakdown:
            result["breakdown"] = breakdown.to_dict()
        sys.stdout.write(json.dumps(result, indent=2) + "\n")
    else:
        sys.stdout.write(f"{cost}\n")
        if args.breakdown:
            sys.stdout.write(pretty_print_cost_breakdown(breakdown) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
