# Copyright 2026-present Kensho Technologies, LLC.
"""Materialize the selection tree of a GraphQL operation for cost estimation.

This is where graphql-core's parser, schema and value coercion meet the cost estimator: fragments
are expanded, directives and variables are applied, and every field occurrence is annotated with
the type information its cost depends on. Anything the schema does not describe is annotated as
unknown rather than rejected, since cost estimation is a best-effort check.
"""
import logging
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from graphql import (
    GraphQLError,
    GraphQLField,
    GraphQLIncludeDirective,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLSkipDirective,
    get_named_type,
    is_abstract_type,
    is_enum_type,
    is_interface_type,
    is_object_type,
    is_scalar_type,
    is_union_type,
)
from graphql.execution.values import (
    get_argument_values,
    get_directive_values,
    get_variable_values,
)
from graphql.language.ast import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    OperationDefinitionNode,
    OperationType,
    SelectionSetNode,
)

from .ast_manipulation import (
    get_ast_field_name,
    get_fragment_definitions,
    get_inline_fragment_type_name,
    get_operation_definition,
)
from .cost_model import DEFAULT_COST_MODEL, CostModel
from .exceptions import GraphQLValidationError
from .typedefs import QuerySelectionTree, SelectionNode, TypeKind


logger = logging.getLogger(__name__)

INTROSPECTION_FIELD_NAMES = frozenset({"__typename", "__schema", "__type"})

# Used as the parent type name of selections made on a type the schema does not describe.
UNKNOWN_TYPE_NAME = ""


def get_type_kind(graphql_type: Optional[GraphQLNamedType]) -> TypeKind:
    """Return the kind of the given named type."""
    if graphql_type is None:
        return TypeKind.UNKNOWN
    elif is_scalar_type(graphql_type):
        return TypeKind.SCALAR
    elif is_enum_type(graphql_type):
        return TypeKind.ENUM
    elif is_object_type(graphql_type):
        return TypeKind.OBJECT
    elif is_interface_type(graphql_type):
        return TypeKind.INTERFACE
    elif is_union_type(graphql_type):
        return TypeKind.UNION
    return TypeKind.UNKNOWN


def get_possible_type_names(
    schema: GraphQLSchema, graphql_type: Optional[GraphQLNamedType]
) -> FrozenSet[str]:
    """Return the names of the concrete object types a value of the given type may have."""
    if graphql_type is None:
        return frozenset()
    elif is_object_type(graphql_type):
        return frozenset({graphql_type.name})
    elif is_abstract_type(graphql_type):
        return frozenset(
            possible_type.name for possible_type in schema.get_possible_types(graphql_type)
        )
    return frozenset()


def _get_root_type(schema: GraphQLSchema, operation: OperationDefinitionNode) -> GraphQLObjectType:
    """Return the schema's root type for the operation."""
    root_types = {
        OperationType.QUERY: schema.query_type,
        OperationType.MUTATION: schema.mutation_type,
        OperationType.SUBSCRIPTION: schema.subscription_type,
    }
    root_type = root_types.get(operation.operation)
    if root_type is None:
        raise GraphQLValidationError(
            f"The schema does not support {operation.operation.value} operations."
        )
    return root_type


def _coerce_variables(
    schema: GraphQLSchema,
    operation: OperationDefinitionNode,
    variables: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    """Coerce the variables according to their definitions, or use them raw if that fails."""
    raw_variables = dict(variables or {})
    coerced_variables = get_variable_values(
        schema, operation.variable_definitions or [], raw_variables
    )
    if isinstance(coerced_variables, list):
        logger.warning(
            "Could not coerce variables %(variables)s for cost estimation, using them as given. "
            "Errors: %(errors)s",
            {
                "variables": raw_variables,
                "errors": [error.message for error in coerced_variables],
            },
        )
        return raw_variables
    return coerced_variables


class _SelectionTreeBuilder:
    """Builds the selection nodes of one operation. Not reusable across operations."""

    def __init__(
        self,
        schema: GraphQLSchema,
        cost_model: CostModel,
        fragment_definitions: Dict[str, FragmentDefinitionNode],
        variables: Dict[str, Any],
    ) -> None:
        """Create a builder for the given schema, fragments and coerced variables."""
        self.schema = schema
        self.cost_model = cost_model
        self.fragment_definitions = fragment_definitions
        self.variables = variables

    def _is_excluded_by_directives(self, ast: Any) -> bool:
        """Return True if @skip or @include removes the AST node from the response."""
        try:
            skip_arguments = get_directive_values(GraphQLSkipDirective, ast, self.variables)
            if skip_arguments is not None and skip_arguments.get("if") is True:
                return True
            include_arguments = get_directive_values(GraphQLIncludeDirective, ast, self.variables)
            if include_arguments is not None and include_arguments.get("if") is False:
                return True
        except GraphQLError as e:
            # An unresolvable condition could include the selection, so it is charged.
            logger.debug("Could not evaluate @skip or @include directives, including: %s", e)
        return False

    def _get_argument_values(
        self, field_definition: GraphQLField, ast: FieldNode
    ) -> Dict[str, Any]:
        """Return the coerced arguments of the field occurrence, or none if they are malformed."""
        try:
            return get_argument_values(field_definition, ast, self.variables)
        except GraphQLError as e:
            logger.debug(
                "Could not resolve the arguments of field %s, treating them as absent: %s",
                get_ast_field_name(ast),
                e,
            )
            return {}

    def _get_field_definition(
        self, parent_type: Optional[GraphQLNamedType], field_name: str
    ) -> Optional[GraphQLField]:
        """Return the definition of the field on the parent type, if the schema has one."""
        if parent_type is None:
            return None
        if not (is_object_type(parent_type) or is_interface_type(parent_type)):
            return None
        return parent_type.fields.get(field_name)

    def build_field(
        self,
        ast: FieldNode,
        parent_type: Optional[GraphQLNamedType],
        parent_type_name: str,
        fragment_path: Tuple[str, ...],
    ) -> SelectionNode:
        """Return the selection node for one field occurrence, with its children."""
        field_name = get_ast_field_name(ast)
        alias = ast.alias.value if ast.alias is not None else None
        node = SelectionNode(
            field_name=field_name,
            parent_type_name=parent_type_name,
            alias=alias,
            is_introspection=field_name in INTROSPECTION_FIELD_NAMES,
            parent_possible_type_names=get_possible_type_names(self.schema, parent_type),
        )
        if self._is_excluded_by_directives(ast):
            node.is_skipped = True
            return node
        if node.is_introspection:
            # Introspection is free, along with everything selected under it.
            return node

        field_definition = self._get_field_definition(parent_type, field_name)
        if field_definition is None:
            logger.debug(
                "Field %s is not defined on type %s, costing it as unknown.",
                field_name,
                parent_type_name,
            )
            return_type = None
        else:
            return_type = get_named_type(field_definition.type)
            node.arguments = self._get_argument_values(field_definition, ast)

        node.type_kind = get_type_kind(return_type)
        node.possible_type_names = get_possible_type_names(self.schema, return_type)
        if return_type is not None:
            node.return_type_name = return_type.name
            node.is_connection = self._is_connection_type(return_type)
        node.is_mutation_root = parent_type is not None and parent_type is self.schema.mutation_type

        if ast.selection_set is not None:
            child_parent_type_name = (
                return_type.name if return_type is not None else UNKNOWN_TYPE_NAME
            )
            node.children = self.build_selections(
                ast.selection_set, return_type, child_parent_type_name, fragment_path
            )
        return node

    def _is_connection_type(self, graphql_type: GraphQLNamedType) -> bool:
        suffix = self.cost_model.connection_type_suffix
        return (
            is_object_type(graphql_type)
            and graphql_type.name.endswith(suffix)
            and graphql_type.name != suffix
        )

    def _get_type_condition(
        self,
        type_condition_name: Optional[str],
        parent_type: Optional[GraphQLNamedType],
        parent_type_name: str,
    ) -> Tuple[Optional[GraphQLNamedType], str]:
        """Return the type and type name that selections inside a fragment are made on."""
        if type_condition_name is None:
            return parent_type, parent_type_name
        return self.schema.get_type(type_condition_name), type_condition_name

    def build_selections(
        self,
        selection_set: SelectionSetNode,
        parent_type: Optional[GraphQLNamedType],
        parent_type_name: str,
        fragment_path: Tuple[str, ...],
    ) -> List[SelectionNode]:
        """Return the field occurrences in the selection set, expanding fragments in place.

        Args:
            selection_set: the selections to expand
            parent_type: the type the selections are made on, or None if it is unknown
            parent_type_name: name of that type, as written in the query
            fragment_path: names of the fragments being expanded, outermost first

        Returns:
            list of SelectionNode, one per field occurrence, in query order

        Raises:
            GraphQLValidationError if a fragment spread names an undefined fragment, or if fragment
            spreads form a cycle
        """
        selection_nodes: List[SelectionNode] = []
        for selection in selection_set.selections:
            if isinstance(selection, FieldNode):
                selection_nodes.append(
                    self.build_field(selection, parent_type, parent_type_name, fragment_path)
                )
            elif isinstance(selection, InlineFragmentNode):
                if self._is_excluded_by_directives(selection):
                    continue
                fragment_type, fragment_type_name = self._get_type_condition(
                    get_inline_fragment_type_name(selection), parent_type, parent_type_name
                )
                selection_nodes.extend(
                    self.build_selections(
                        selection.selection_set, fragment_type, fragment_type_name, fragment_path
                    )
                )
            elif isinstance(selection, FragmentSpreadNode):
                if self._is_excluded_by_directives(selection):
                    continue
                fragment_name = selection.name.value
                if fragment_name in fragment_path:
                    raise GraphQLValidationError(
                        f"Fragment {fragment_name} spreads itself through fragments "
                        f"{fragment_path}, which is not allowed."
                    )
                fragment_definition = self.fragment_definitions.get(fragment_name)
                if fragment_definition is None:
                    raise GraphQLValidationError(
                        f"Fragment spread refers to undefined fragment {fragment_name}."
                    )
                fragment_type, fragment_type_name = self._get_type_condition(
                    fragment_definition.type_condition.name.value, parent_type, parent_type_name
                )
                selection_nodes.extend(
                    self.build_selections(
                        fragment_definition.selection_set,
                        fragment_type,
                        fragment_type_name,
                        fragment_path + (fragment_name,),
                    )
                )
            else:
                raise AssertionError(
                    f"Unexpected selection {selection} of type {type(selection).__name__}. "
                    f"This is a bug."
                )
        return selection_nodes


def build_selection_tree(
    schema: GraphQLSchema,
    document_ast: DocumentNode,
    variables: Optional[Mapping[str, Any]] = None,
    operation_name: Optional[str] = None,
    cost_model: CostModel = DEFAULT_COST_MODEL,
) -> QuerySelectionTree:
    """Return the field occurrences of the operation, annotated for cost estimation.

    Args:
        schema: the schema the query is written against
        document_ast: the parsed query document
        variables: values of the operation's variables, by variable name
        operation_name: which operation to cost, required if the document has several
        cost_model: the model whose connection naming conventions apply

    Returns:
        QuerySelectionTree with fragments expanded and skipped selections marked

    Raises:
        GraphQLValidationError if the operation cannot be determined, if the schema has no root
        type for it, or if its fragments are undefined or cyclic
    """
    operation = get_operation_definition(document_ast, operation_name)
    root_type = _get_root_type(schema, operation)
    builder = _SelectionTreeBuilder(
        schema,
        cost_model,
        get_fragment_definitions(document_ast),
        _coerce_variables(schema, operation, variables),
    )
    return QuerySelectionTree(
        operation_type=operation.operation.value,
        root_type_name=root_type.name,
        selections=builder.build_selections(operation.selection_set, root_type, root_type.name, ()),
        operation_name=operation.name.value if operation.name is not None else None,
    )
