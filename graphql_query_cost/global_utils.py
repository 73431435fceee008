# Copyright 2026-present Kensho Technologies, LLC.
from dataclasses import dataclass, field
from functools import cached_property  # noqa  # pylint: disable=unused-import
from typing import Any, Dict, Optional, Type, TypeVar

from graphql import DocumentNode
from graphql.language.printer import print_ast

from .ast_manipulation import safe_parse_graphql


QueryStringWithParametersT = TypeVar(
    "QueryStringWithParametersT", bound="QueryStringWithParameters"
)
ASTWithParametersT = TypeVar("ASTWithParametersT", bound="ASTWithParameters")


@dataclass
class QueryStringWithParameters:
    """A query string and the values of its variables."""

    query_string: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    # Which operation to cost, if the query string defines several.
    operation_name: Optional[str] = None

    @classmethod
    def from_ast_with_parameters(
        cls: Type[QueryStringWithParametersT], ast_with_params: "ASTWithParameters"
    ) -> QueryStringWithParametersT:
        """Print the AST back into a query string, keeping the parameters and operation name."""
        return cls(
            print_ast(ast_with_params.query_ast),
            ast_with_params.parameters,
            ast_with_params.operation_name,
        )


@dataclass
class ASTWithParameters:
    """A query AST and the values of its variables."""

    query_ast: DocumentNode
    parameters: Dict[str, Any] = field(default_factory=dict)

    # Which operation to cost, if the document defines several.
    operation_name: Optional[str] = None

    @classmethod
    def from_query_string_with_parameters(
        cls: Type[ASTWithParametersT], query_with_params: QueryStringWithParameters
    ) -> ASTWithParametersT:
        """Parse the query string, keeping the parameters and operation name."""
        return cls(
            safe_parse_graphql(query_with_params.query_string),
            query_with_params.parameters,
            query_with_params.operation_name,
        )
