"""Per-file context used to resolve operation names at call sites.

One pass over a file collects:
- document imports: `import { GetUserDocument } from './__generated__/graphql'`
- variable operations: ``const Q = gql`query GetUser {...}` `` and `const doc = GetUserDocument`
- static-property operations: ``Page.Query = gql`...` `` and ``static Query = gql`...` ``
"""

import re
from dataclasses import dataclass, field
from typing import Any

from pagegraph.ast_parser import node_text, string_value, unwrap_expression
from pagegraph.utils.constants import GRAPHQL_TEMPLATE_FUNCTIONS, OPERATION_NAME_RE

_DOCUMENT_ALIAS_SUFFIXES = ("Document", "Query", "Mutation")
_GRAPHQL_SOURCE_MARKERS = ("__generated__", "generated", "graphql", ".generated")
_INTERPOLATION_RE = re.compile(r"\$\{[^}]*\}")
_QUERY_MUTATION_SUFFIX_RE = re.compile(r"Query$|Mutation$")


@dataclass
class OperationContext:
    """Name tables for one file."""

    document_imports: dict[str, str] = field(default_factory=dict)
    variable_operations: dict[str, str] = field(default_factory=dict)
    static_property_operations: dict[str, str] = field(default_factory=dict)
    # Document export name -> operation name, from codegen output and known definitions
    codegen_map: dict[str, str] = field(default_factory=dict)


def callee_name(function_node: Any) -> str | None:
    """`foo` for foo(...), `bar` for a.b.bar(...)."""
    if function_node is None:
        return None
    if function_node.type == "identifier":
        return node_text(function_node)
    if function_node.type == "member_expression":
        prop = function_node.child_by_field_name("property")
        if prop is not None:
            return node_text(prop)
    return None


def first_argument(call: Any) -> Any:
    """First non-comment argument of a call, or None."""
    arguments = call.child_by_field_name("arguments")
    if arguments is None or arguments.type != "arguments":
        return None
    for arg in arguments.named_children:
        if arg.type != "comment":
            return unwrap_expression(arg)
    return None


def is_tagged_template(call: Any) -> bool:
    arguments = call.child_by_field_name("arguments")
    return arguments is not None and arguments.type == "template_string"


def template_text(template: Any) -> str:
    """Literal text of a template string up to its first interpolation."""
    return node_text(template)[1:-1].split("${", 1)[0]


def template_body(template: Any) -> str:
    """Whole template text with `${...}` interpolations removed."""
    return _INTERPOLATION_RE.sub("", node_text(template)[1:-1])


def operation_name_from_text(text: str) -> str | None:
    match = OPERATION_NAME_RE.search(text)
    return match.group(2) if match else None


def graphql_template_of(node: Any) -> Any:
    """The template/string argument of gql`...`, gql(`...`) or graphql("..."), else None."""
    node = unwrap_expression(node)
    if node is None or node.type != "call_expression":
        return None
    function = node.child_by_field_name("function")
    if function is None or function.type != "identifier":
        return None
    if node_text(function) not in GRAPHQL_TEMPLATE_FUNCTIONS:
        return None
    if is_tagged_template(node):
        return node.child_by_field_name("arguments")
    arg = first_argument(node)
    if arg is not None and arg.type in ("template_string", "string"):
        return arg
    return None


def operation_name_from_graphql_call(node: Any) -> str | None:
    """Operation name from a gql/graphql tagged template or wrapper call."""
    node = unwrap_expression(node)
    template = graphql_template_of(node)
    if template is not None:
        if template.type == "string":
            return operation_name_from_text(string_value(template) or "")
        return operation_name_from_text(template_text(template))
    if node is not None and node.type == "call_expression":
        function = node.child_by_field_name("function")
        if function is not None and node_text(function) in GRAPHQL_TEMPLATE_FUNCTIONS:
            return operation_name_from_text(node_text(node))
    return None


def _collect_document_imports(import_stmt: Any, imports: dict[str, str]) -> None:
    source = string_value(import_stmt.child_by_field_name("source")) or ""
    is_graphql_source = any(m in source for m in _GRAPHQL_SOURCE_MARKERS) or source.endswith(
        ".graphql"
    )

    clause = next((c for c in import_stmt.named_children if c.type == "import_clause"), None)
    if clause is None:
        return

    local_names = []
    for child in clause.named_children:
        if child.type == "identifier":
            local_names.append(node_text(child))
        elif child.type == "named_imports":
            for spec in child.named_children:
                if spec.type != "import_specifier":
                    continue
                local = spec.child_by_field_name("alias")
                if local is None:
                    local = spec.child_by_field_name("name")
                if local is not None:
                    local_names.append(node_text(local))

    for local in local_names:
        if local.endswith("Document") or is_graphql_source:
            imports[local] = re.sub(r"Document$", "", local, count=1)
        if local.endswith("Query") or local.endswith("Mutation"):
            imports[local] = _QUERY_MUTATION_SUFFIX_RE.sub("", local, count=1)


def _collect_variable(declarator: Any, operations: dict[str, str]) -> None:
    name = declarator.child_by_field_name("name")
    value = unwrap_expression(declarator.child_by_field_name("value"))
    if name is None or name.type != "identifier" or value is None:
        return

    var_name = node_text(name)
    if value.type == "identifier":
        init_name = node_text(value)
        if init_name.endswith(_DOCUMENT_ALIAS_SUFFIXES):
            operations[var_name] = init_name
        return

    operation_name = operation_name_from_graphql_call(value)
    if operation_name:
        operations[var_name] = operation_name


def _collect_static_assignment(assignment: Any, operations: dict[str, str]) -> None:
    left = assignment.child_by_field_name("left")
    if left is None or left.type != "member_expression":
        return
    obj = left.child_by_field_name("object")
    prop = left.child_by_field_name("property")
    if obj is None or prop is None or obj.type != "identifier":
        return

    operation_name = operation_name_from_graphql_call(assignment.child_by_field_name("right"))
    if operation_name:
        operations[f"{node_text(obj)}.{node_text(prop)}"] = operation_name


def _collect_static_fields(class_node: Any, operations: dict[str, str]) -> None:
    class_name = class_node.child_by_field_name("name")
    body = class_node.child_by_field_name("body")
    if class_name is None or body is None:
        return
    for member in body.named_children:
        if member.type != "public_field_definition":
            continue
        if not any(not c.is_named and c.type == "static" for c in member.children):
            continue
        prop = member.child_by_field_name("name")
        operation_name = operation_name_from_graphql_call(member.child_by_field_name("value"))
        if prop is not None and operation_name:
            operations[f"{node_text(class_name)}.{node_text(prop)}"] = operation_name


def build_context(root: Any, codegen_map: dict[str, str] | None = None) -> OperationContext:
    """Collect the name tables of one parsed file."""
    context = OperationContext(codegen_map=dict(codegen_map or {}))

    stack = [root]
    while stack:
        node = stack.pop()
        kind = node.type
        if kind == "import_statement":
            _collect_document_imports(node, context.document_imports)
            continue
        if kind == "variable_declarator":
            _collect_variable(node, context.variable_operations)
        elif kind == "assignment_expression":
            _collect_static_assignment(node, context.static_property_operations)
        elif kind in ("class_declaration", "class"):
            _collect_static_fields(node, context.static_property_operations)
        stack.extend(reversed(node.named_children))

    return context
