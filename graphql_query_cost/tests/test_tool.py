# Copyright 2026-present Kensho Technologies, LLC.
from io import StringIO
import json
import os
import tempfile
from typing import List, Tuple
import unittest
from unittest.mock import patch

from graphql import build_schema, get_introspection_query, graphql_sync

from .. import tool
from ..cost_model import LOG_CALIBRATED_COST_MODEL
from .test_helpers import SCHEMA_TEXT
from .test_input_data import (
    ORDERS_QUERY,
    ORDERS_QUERY_COST,
    ORDERS_QUERY_LOG_CALIBRATED_COST,
    ORDERS_VARIABLES,
)


class ToolTests(unittest.TestCase):
    def setUp(self) -> None:
        """Write the test schema to a temporary directory."""
        temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(temp_dir.cleanup)
        self.temp_dir = temp_dir.name

        self.schema_path = self._write_file("schema.graphql", SCHEMA_TEXT)

    def _write_file(self, file_name: str, contents: str) -> str:
        path = os.path.join(self.temp_dir, file_name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(contents)
        return path

    def _run_tool(self, query: str, argv: List[str]) -> Tuple[int, str, str]:
        """Run the tool with the query on stdin, returning (exit code, stdout, stderr)."""
        stdout = StringIO()
        stderr = StringIO()
        with patch("sys.stdin", StringIO(query)), patch("sys.stdout", stdout), patch(
            "sys.stderr", stderr
        ):
            exit_code = tool.main(argv)
        return exit_code, stdout.getvalue(), stderr.getvalue()

    def test_cost(self) -> None:
        exit_code, stdout, _ = self._run_tool(
            ORDERS_QUERY, [self.schema_path, "--variables", json.dumps(ORDERS_VARIABLES)]
        )
        self.assertEqual(0, exit_code)
        self.assertEqual(f"{ORDERS_QUERY_COST}\n", stdout)

    def test_breakdown(self) -> None:
        exit_code, stdout, _ = self._run_tool(
            "{ orders(first: 10) { nodes { id } } }", [self.schema_path, "--breakdown"]
        )
        self.assertEqual(0, exit_code)
        expected_output = (
            "4\n"
            "query [pass_through] cost=4 child_cost=4\n"
            "  QueryRoot.orders [connection] cost=4 child_cost=1 page_size=10 multiplier=4\n"
            "    OrderConnection.nodes [object] cost=1 child_cost=0\n"
            "      Order.id [leaf] cost=0 child_cost=0\n"
        )
        self.assertEqual(expected_output, stdout)

    def test_json_output(self) -> None:
        exit_code, stdout, _ = self._run_tool(
            "{ shop { name } }", [self.schema_path, "--json", "--breakdown"]
        )
        self.assertEqual(0, exit_code)
        result = json.loads(stdout)
        self.assertEqual(1, result["cost"])
        self.assertEqual("shop", result["breakdown"]["children"][0]["response_key"])

        _, stdout, _ = self._run_tool("{ shop { name } }", [self.schema_path, "--json"])
        self.assertEqual({"cost": 1}, json.loads(stdout))

    def test_cost_model_file(self) -> None:
        cost_model_path = self._write_file(
            "cost_model.json", json.dumps(LOG_CALIBRATED_COST_MODEL.to_dict())
        )
        exit_code, stdout, _ = self._run_tool(
            ORDERS_QUERY,
            [
                self.schema_path,
                "--variables",
                json.dumps(ORDERS_VARIABLES),
                "--cost-model",
                cost_model_path,
            ],
        )
        self.assertEqual(0, exit_code)
        self.assertEqual(f"{ORDERS_QUERY_LOG_CALIBRATED_COST}\n", stdout)

    def test_operation_name(self) -> None:
        query = """
            query Shop { shop { name } }
            query Orders { orders(first: 10) { nodes { id } } }
        """
        _, stdout, _ = self._run_tool(query, [self.schema_path, "--operation-name", "Orders"])
        self.assertEqual("4\n", stdout)

    def test_introspection_schema(self) -> None:
        introspection = graphql_sync(build_schema(SCHEMA_TEXT), get_introspection_query())
        schema_path = self._write_file("schema.json", json.dumps({"data": introspection.data}))

        query = "{ orders(first: 10) { nodes { id } } }"
        exit_code, stdout, _ = self._run_tool(query, [schema_path])
        self.assertEqual(0, exit_code)
        self.assertEqual("4\n", stdout)

    def test_errors(self) -> None:
        invalid_invocations = (
            ("{ shop { name }", [self.schema_path]),
            ("{ shop { name } }", [os.path.join(self.temp_dir, "missing.graphql")]),
            ("{ shop { name } }", [self.schema_path, "--variables", "not json"]),
            ("{ shop { name } }", [self.schema_path, "--variables", "[1]"]),
            ("{ shop { name } }", [self.schema_path, "--variables", '"x"']),
            ("{ shop { name } }", [self._write_file("schema.json", json.dumps({"data": {}}))]),
            ("{ shop { name } }", [self._write_file("invalid.graphql", "type {")]),
            (
                "{ shop { name } }",
                [
                    self.schema_path,
                    "--cost-model",
                    self._write_file("cost_model.json", '{"mutation_cost": -1}'),
                ],
            ),
            (
                "{ orders(first: 300) { nodes { id } } }",
                [
                    self.schema_path,
                    "--cost-model",
                    self._write_file(
                        "tail_offset.json",
                        json.dumps({"multiplier": {"kind": "buckets", "tail_offset": "3"}}),
                    ),
                ],
            ),
        )
        for query, argv in invalid_invocations:
            exit_code, stdout, stderr = self._run_tool(query, argv)
            self.assertEqual(1, exit_code, msg=argv)
            self.assertEqual("", stdout)
            self.assertTrue(stderr.startswith("Could not estimate query cost:"), msg=stderr)

    def test_variables_must_be_an_object(self) -> None:
        exit_code, _, stderr = self._run_tool(
            "{ shop { name } }", [self.schema_path, "--variables", "[1]"]
        )
        self.assertEqual(1, exit_code)
        self.assertEqual(
            "Could not estimate query cost: --variables must be a JSON object\n", stderr
        )
