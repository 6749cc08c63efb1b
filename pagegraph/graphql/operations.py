"""Data-operation call-site extraction.

Finds Apollo-style hook calls (`useQuery(GetUserDocument)`, `useMutation(...)`,
`use<Name>Query(...)`) and client calls (`client.query({ query })`) in a file
and resolves each to an operation name. A call whose name cannot be resolved
is not an operation reference; nothing is guessed from the hook's own name.
"""

from collections.abc import Iterator
from typing import Any

from pagegraph.ast_parser import ASTParser, node_text
from pagegraph.cache.run_cache import RunCache
from pagegraph.exceptions import ParseFailure
from pagegraph.graphql.context import (
    OperationContext,
    build_context,
    callee_name,
    first_argument,
    is_tagged_template,
)
from pagegraph.graphql.matchers import resolve_argument
from pagegraph.graphql.names import (
    clean_operation_name,
    has_graphql_indicators,
    is_graphql_hook,
    is_placeholder,
    kind_for_call,
)
from pagegraph.models import OperationFact, OperationKind
from pagegraph.utils.constants import CLIENT_OPERATION_METHODS

_TYPE_NAME_NODES = ("type_identifier", "nested_type_identifier", "generic_type")


def _generic_type_name(call: Any) -> str | None:
    """`GetUserQuery` from useQuery<GetUserQuery, GetUserQueryVariables>(...)."""
    type_arguments = call.child_by_field_name("type_arguments")
    if type_arguments is None:
        return None
    first = next((c for c in type_arguments.named_children if c.type != "comment"), None)
    if first is None or first.type not in _TYPE_NAME_NODES:
        return None
    if first.type == "generic_type":
        name = first.child_by_field_name("name")
        first = name if name is not None else first.named_children[0]
    if first.type == "nested_type_identifier":
        first = first.named_children[-1]
    return node_text(first)


def resolve_operation_name(call: Any, context: OperationContext) -> str | None:
    """Operation name referenced by one call site, or None.

    Tries the type argument first, then the first call argument through
    ARGUMENT_MATCHERS. Calls without arguments are never operations.
    """
    arg = first_argument(call)
    if arg is None:
        return None

    type_name = _generic_type_name(call)
    if type_name and not is_placeholder(type_name):
        cleaned = clean_operation_name(type_name)
        if cleaned:
            return cleaned

    return resolve_argument(arg, context)


def iter_operation_calls(root: Any) -> Iterator[tuple[Any, OperationKind]]:
    """Yield (call node, kind) for every hook or client call site in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "call_expression" and not is_tagged_template(node):
            function = node.child_by_field_name("function")
            name = callee_name(function)
            if name:
                is_method = function.type == "member_expression"
                if is_graphql_hook(name):
                    yield node, kind_for_call(name)
                elif is_method and name in CLIENT_OPERATION_METHODS:
                    arg = first_argument(node)
                    if arg is not None and arg.type == "object":
                        yield node, kind_for_call(name, is_method=True)
        stack.extend(reversed(node.named_children))


def operations_from_tree(
    root: Any, rel_path: str, codegen_map: dict[str, str] | None = None
) -> list[OperationFact]:
    context = build_context(root, codegen_map)
    facts: list[OperationFact] = []
    seen = set()
    for call, kind in iter_operation_calls(root):
        name = resolve_operation_name(call, context)
        if not name or (kind, name) in seen:
            continue
        seen.add((kind, name))
        facts.append(OperationFact(operation_name=name, kind=kind, file=rel_path))
    return facts


def extract_operations(
    content: str,
    file: str = "<memory>",
    codegen_map: dict[str, str] | None = None,
    parser: ASTParser | None = None,
) -> list[OperationFact]:
    """Operation references in a source text, deduplicated per (kind, name)."""
    if not has_graphql_indicators(content):
        return []
    if parser is None:
        parser = ASTParser(RunCache("."))
    try:
        tree = parser.parse_content(content, file)
    except ParseFailure:
        return []
    return operations_from_tree(tree.root_node, file, codegen_map)


class OperationExtractor:
    """Cached per-file operation extraction over one run."""

    def __init__(self, parser: ASTParser, cache: RunCache, codegen_map: dict[str, str] | None = None):
        self.parser = parser
        self.cache = cache
        self.codegen_map = codegen_map or {}

    def facts(self, rel_path: str) -> list[OperationFact]:
        return self.cache.operations(rel_path, self._compute)

    def _compute(self, rel_path: str) -> list[OperationFact]:
        content = self.cache.read_text(rel_path)
        if not content or not has_graphql_indicators(content):
            return []
        try:
            tree = self.parser.parse_file(rel_path)
        except ParseFailure:
            return []
        return operations_from_tree(tree.root_node, rel_path, self.codegen_map)
