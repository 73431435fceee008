# Copyright 2026-present Kensho Technologies, LLC.
from typing import Dict, Optional

from graphql.error import GraphQLSyntaxError
from graphql.language.ast import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    InlineFragmentNode,
    OperationDefinitionNode,
)
from graphql.language.parser import parse

from .exceptions import GraphQLParsingError, GraphQLValidationError


def get_ast_field_name(ast: FieldNode) -> str:
    """Return the field name for the given AST node."""
    return ast.name.value


def get_inline_fragment_type_name(ast: InlineFragmentNode) -> Optional[str]:
    """Return the name of the type condition of the inline fragment, if it has one."""
    if ast.type_condition is None:
        return None
    return ast.type_condition.name.value


def safe_parse_graphql(graphql_string: str) -> DocumentNode:
    """Return an AST representation of the given GraphQL input, reraising GraphQL library errors."""
    try:
        ast = parse(graphql_string)
    except GraphQLSyntaxError as e:
        raise GraphQLParsingError(e) from e

    return ast


def get_operation_definition(
    document_ast: DocumentNode, operation_name: Optional[str] = None
) -> OperationDefinitionNode:
    """Return the operation to evaluate: the named one, or the only one in the document."""
    if not isinstance(document_ast, DocumentNode):
        raise AssertionError(
            'Received an unexpected value for "document_ast": {}'.format(document_ast)
        )

    operations = [
        definition
        for definition in document_ast.definitions
        if isinstance(definition, OperationDefinitionNode)
    ]

    if operation_name is None:
        if len(operations) != 1:
            raise GraphQLValidationError(
                "Expected a GraphQL document with exactly one operation when no operation name is "
                "given, but found {} operations.".format(len(operations))
            )
        return operations[0]

    for operation in operations:
        if operation.name is not None and operation.name.value == operation_name:
            return operation

    raise GraphQLValidationError(
        'No operation named "{}" was found in the GraphQL document.'.format(operation_name)
    )


def get_fragment_definitions(document_ast: DocumentNode) -> Dict[str, FragmentDefinitionNode]:
    """Return the fragment definitions in the document, keyed by fragment name."""
    fragment_definitions: Dict[str, FragmentDefinitionNode] = {}
    for definition in document_ast.definitions:
        if isinstance(definition, FragmentDefinitionNode):
            fragment_name = definition.name.value
            if fragment_name in fragment_definitions:
                raise GraphQLValidationError(
                    'Fragment "{}" is defined more than once.'.format(fragment_name)
                )
            fragment_definitions[fragment_name] = definition
    return fragment_definitions


def is_fragment_only_document(document_ast: DocumentNode) -> bool:
    """Return True if the document defines fragments and no operations."""
    has_fragments = False
    for definition in document_ast.definitions:
        if isinstance(definition, OperationDefinitionNode):
            return False
        if isinstance(definition, FragmentDefinitionNode):
            has_fragments = True
    return has_fragments
