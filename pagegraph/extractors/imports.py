"""Import/export extraction from TypeScript/JavaScript ASTs.

Two cached passes per file:
- import edges: every runtime dependency (imports, re-exports, require(),
  dynamic import()) with the names requested where they can be enumerated;
- export info: the file's re-export surface and whether it is a pure barrel.

Type-only imports and re-exports are dropped; they are erased at compile
time and cannot pull code into a page. Unparseable files yield no edges and
an empty, non-barrel export info.
"""

from typing import Any

from pagegraph.ast_parser import ASTParser, node_text, string_value
from pagegraph.cache.run_cache import RunCache
from pagegraph.exceptions import ParseFailure
from pagegraph.models import ExportInfo, ImportEdge

# Top-level nodes that never disqualify a pure barrel
_NEUTRAL_TOP_LEVEL = {"comment", "hash_bang_line", "empty_statement"}


def _has_keyword(node: Any, *keywords: str) -> bool:
    """True if node has an anonymous child token among keywords."""
    return any(not c.is_named and c.type in keywords for c in node.children)


def _first_string(node: Any) -> str | None:
    """First string literal among node's descendants, depth-first."""
    stack = [node]
    while stack:
        current = stack.pop()
        value = string_value(current)
        if value is not None:
            return value
        stack.extend(reversed(current.named_children))
    return None


def _name_text(node: Any) -> str:
    """Identifier text, or string value for `{ "a-b" as c }` names."""
    value = string_value(node)
    return value if value is not None else node_text(node)


def _import_names(import_stmt: Any) -> frozenset[str] | None | bool:
    """Names requested by an import statement.

    Returns None for unenumerable shapes (default, namespace, side-effect),
    False when every specifier is type-only, else the imported names.
    """
    clause = next((c for c in import_stmt.named_children if c.type == "import_clause"), None)
    if clause is None:
        return None

    names = set()
    saw_type_only = False
    for child in clause.named_children:
        if child.type in ("identifier", "namespace_import"):
            return None
        if child.type != "named_imports":
            continue
        for spec in child.named_children:
            if spec.type != "import_specifier":
                continue
            if _has_keyword(spec, "type", "typeof"):
                saw_type_only = True
                continue
            name_node = spec.child_by_field_name("name")
            if name_node is not None:
                names.add(_name_text(name_node))

    if not names:
        return False if saw_type_only else None
    return frozenset(names)


def _reexport_names(export_stmt: Any) -> frozenset[str] | None:
    """Names a re-export pulls from its source module (original, not aliased)."""
    clause = next((c for c in export_stmt.named_children if c.type == "export_clause"), None)
    if clause is None:
        return None
    names = set()
    for spec in clause.named_children:
        if spec.type != "export_specifier" or _has_keyword(spec, "type"):
            continue
        name_node = spec.child_by_field_name("name")
        if name_node is not None:
            names.add(_name_text(name_node))
    return frozenset(names) if names else None


def _is_reexport_shape(export_stmt: Any) -> bool:
    """`export * ...` / `export { ... } [from ...]` with no declaration or default."""
    if export_stmt.child_by_field_name("declaration") is not None:
        return False
    if export_stmt.child_by_field_name("value") is not None:
        return False
    if _has_keyword(export_stmt, "default", "="):
        return False
    return _has_keyword(export_stmt, "*") or any(
        c.type in ("export_clause", "namespace_export") for c in export_stmt.named_children
    )


def _is_directive(node: Any) -> bool:
    """`'use client';` style prologue."""
    if node.type != "expression_statement":
        return False
    inner = node.named_children
    return len(inner) == 1 and inner[0].type == "string"


class ImportExportExtractor:
    """Cached import-edge and export-info extraction over one run."""

    def __init__(self, parser: ASTParser, cache: RunCache):
        self.parser = parser
        self.cache = cache

    def edges(self, rel_path: str) -> list[ImportEdge]:
        return self.cache.edges(rel_path, self._compute_edges)

    def exports(self, rel_path: str) -> ExportInfo:
        return self.cache.exports(rel_path, self._compute_exports)

    def _compute_edges(self, rel_path: str) -> list[ImportEdge]:
        try:
            tree = self.parser.parse_file(rel_path)
        except ParseFailure:
            return []
        return extract_import_edges(tree.root_node, rel_path)

    def _compute_exports(self, rel_path: str) -> ExportInfo:
        try:
            tree = self.parser.parse_file(rel_path)
        except ParseFailure:
            return ExportInfo()
        return extract_export_info(tree.root_node)


def extract_import_edges(root: Any, rel_path: str) -> list[ImportEdge]:
    """Collect runtime dependency edges in document order."""
    edges: list[ImportEdge] = []

    def add(node: Any, specifier: str | None, names: frozenset[str] | None) -> None:
        if not specifier:
            return
        edges.append(
            ImportEdge(
                from_file=rel_path,
                specifier=specifier,
                imported_names=names,
                offset=node.start_byte,
                line=node.start_point[0] + 1,
            )
        )

    stack = [root]
    while stack:
        node = stack.pop()
        kind = node.type

        if kind == "import_statement":
            if _has_keyword(node, "type", "typeof"):
                continue
            require_clause = next(
                (c for c in node.named_children if c.type == "import_require_clause"), None
            )
            if require_clause is not None:
                add(node, _first_string(require_clause), None)
                continue
            names = _import_names(node)
            if names is False:
                continue
            add(node, string_value(node.child_by_field_name("source")), names)
            continue

        if kind == "export_statement":
            source = node.child_by_field_name("source")
            if source is not None:
                if not _has_keyword(node, "type"):
                    add(node, string_value(source), _reexport_names(node))
                continue

        elif kind == "call_expression":
            function = node.child_by_field_name("function")
            arguments = node.child_by_field_name("arguments")
            if function is not None and arguments is not None:
                is_require = function.type == "identifier" and node_text(function) == "require"
                if is_require or function.type == "import":
                    args = [a for a in arguments.named_children if a.type != "comment"]
                    if args:
                        add(node, string_value(args[0]), None)

        stack.extend(reversed(node.children))

    return edges


def extract_export_info(root: Any) -> ExportInfo:
    """Named re-export map, star re-exports and pure-barrel flag.

    A pure barrel contains nothing but imports and re-exports at top level.
    """
    info = ExportInfo(is_pure_barrel=True)

    for item in root.children:
        kind = item.type
        if kind in _NEUTRAL_TOP_LEVEL or kind == "import_statement" or _is_directive(item):
            continue

        if kind == "export_statement" and _is_reexport_shape(item):
            specifier = string_value(item.child_by_field_name("source"))
            if _has_keyword(item, "type"):
                continue
            if specifier is None:
                info.declared.update(_local_export_names(item))
                continue
            if _has_keyword(item, "*") and not any(
                c.type == "namespace_export" for c in item.named_children
            ):
                info.stars.append(specifier)
                continue
            for c in item.named_children:
                if c.type == "namespace_export":
                    alias = c.named_children[-1] if c.named_children else None
                    if alias is not None:
                        info.named[_name_text(alias)] = specifier
                        info.origin_names[_name_text(alias)] = "*"
                elif c.type == "export_clause":
                    for spec in c.named_children:
                        if spec.type != "export_specifier" or _has_keyword(spec, "type"):
                            continue
                        name_node = spec.child_by_field_name("name")
                        alias_node = spec.child_by_field_name("alias")
                        if name_node is None:
                            continue
                        original = _name_text(name_node)
                        exported = _name_text(alias_node) if alias_node is not None else original
                        info.named[exported] = specifier
                        info.origin_names[exported] = original
            continue

        if kind == "export_statement":
            info.declared.update(_declared_names(item))
        info.is_pure_barrel = False

    return info


def _local_export_names(export_stmt: Any) -> set[str]:
    """Exported names of `export { a, b as c }` without a source."""
    names = set()
    for clause in export_stmt.named_children:
        if clause.type != "export_clause":
            continue
        for spec in clause.named_children:
            if spec.type != "export_specifier":
                continue
            target = spec.child_by_field_name("alias")
            if target is None:
                target = spec.child_by_field_name("name")
            if target is not None:
                names.add(_name_text(target))
    return names


def _declared_names(export_stmt: Any) -> set[str]:
    """Names exported by `export const/function/class ...` and `export default`."""
    if _has_keyword(export_stmt, "default"):
        return {"default"}

    declaration = export_stmt.child_by_field_name("declaration")
    if declaration is None:
        return set()

    name_node = declaration.child_by_field_name("name")
    if name_node is not None:
        return {node_text(name_node)}

    names = set()
    for child in declaration.named_children:
        if child.type == "variable_declarator":
            target = child.child_by_field_name("name")
            if target is not None and target.type == "identifier":
                names.add(node_text(target))
    return names
