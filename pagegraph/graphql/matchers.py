"""Operation-name matchers for call-site arguments.

Each matcher handles one argument shape and returns an operation name or
None. ARGUMENT_MATCHERS is tried in order; the first matcher whose node kinds
include the argument's kind and that returns a name wins.
"""

from collections.abc import Callable
from typing import Any

from pagegraph.ast_parser import node_text, unwrap_expression
from pagegraph.graphql.context import (
    OperationContext,
    operation_name_from_graphql_call,
    operation_name_from_text,
    template_text,
)
from pagegraph.graphql.names import clean_operation_name, is_placeholder

_DOCUMENT_ALIAS_SUFFIXES = ("Document", "Query", "Mutation")
_OBJECT_OPERATION_KEYS = ("query", "mutation")

Matcher = Callable[[Any, OperationContext], str | None]


def resolve_identifier(
    name: str, context: OperationContext, seen: set[str] | None = None
) -> str | None:
    """Resolve a bare identifier through the file's name tables.

    Order: variable operations (following alias chains), codegen documents,
    document imports, then the cleaned identifier itself. Placeholders such
    as `Query` resolve to None when nothing maps them.
    """
    if seen is None:
        seen = set()
    if name in seen:
        return None
    seen.add(name)

    variable_op = context.variable_operations.get(name)
    if variable_op:
        if variable_op in context.variable_operations:
            return resolve_identifier(variable_op, context, seen)
        if variable_op.endswith(_DOCUMENT_ALIAS_SUFFIXES):
            return (
                context.codegen_map.get(variable_op)
                or context.document_imports.get(variable_op)
                or clean_operation_name(variable_op)
                or None
            )
        return variable_op

    codegen_op = context.codegen_map.get(name)
    if codegen_op:
        return codegen_op

    imported_op = context.document_imports.get(name)
    if imported_op:
        return imported_op

    if is_placeholder(name):
        return None

    return clean_operation_name(name) or None


def match_identifier(node: Any, context: OperationContext) -> str | None:
    return resolve_identifier(node_text(node), context)


def match_member_expression(node: Any, context: OperationContext) -> str | None:
    """`Page.Query` via the static-property table, else the cleaned property."""
    obj = node.child_by_field_name("object")
    prop = node.child_by_field_name("property")
    if prop is None or prop.type != "property_identifier":
        return None

    prop_name = node_text(prop)
    if obj is not None and obj.type == "identifier":
        static_op = context.static_property_operations.get(f"{node_text(obj)}.{prop_name}")
        if static_op:
            return static_op

    if is_placeholder(prop_name):
        return None
    return clean_operation_name(prop_name) or None


def match_graphql_call(node: Any, context: OperationContext) -> str | None:
    """gql`query X {...}`, gql(`...`) and graphql("...") wrappers."""
    return operation_name_from_graphql_call(node)


def match_template_literal(node: Any, context: OperationContext) -> str | None:
    return operation_name_from_text(template_text(node))


def match_object_literal(node: Any, context: OperationContext) -> str | None:
    """`{ query: GetUserDocument, variables }` - recurse into the query value."""
    for prop in node.named_children:
        if prop.type == "pair":
            key = prop.child_by_field_name("key")
            if key is None or node_text(key).strip("'\"") not in _OBJECT_OPERATION_KEYS:
                continue
            return resolve_argument(prop.child_by_field_name("value"), context)
        if prop.type == "shorthand_property_identifier" and node_text(prop) in _OBJECT_OPERATION_KEYS:
            return resolve_identifier(node_text(prop), context)
    return None


ARGUMENT_MATCHERS: list[tuple[frozenset[str], Matcher]] = [
    (frozenset({"identifier"}), match_identifier),
    (frozenset({"member_expression"}), match_member_expression),
    (frozenset({"call_expression"}), match_graphql_call),
    (frozenset({"template_string"}), match_template_literal),
    (frozenset({"object"}), match_object_literal),
]


def resolve_argument(node: Any, context: OperationContext) -> str | None:
    """Run the matchers over one argument expression."""
    node = unwrap_expression(node)
    if node is None:
        return None
    for kinds, matcher in ARGUMENT_MATCHERS:
        if node.type not in kinds:
            continue
        result = matcher(node, context)
        if result:
            return result
    return None
