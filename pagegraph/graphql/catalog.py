"""Operation catalog - where each GraphQL operation is defined and used.

Definitions come from three places, first definition of a name wins:
1. `.graphql` / `.gql` documents
2. inline gql`...` / graphql(`...`) templates in source files
3. GraphQL Code Generator outputs (`export const XDocument = {...}`)

Usage files are source files that reference an operation, either through a
whole-word `<Name>Document` mention or through a resolved hook/client call.
Failures only move coverage counters; nothing here raises for a bad file.
"""

import re
from pathlib import Path
from typing import Any

from graphql import GraphQLError, OperationDefinitionNode, parse

from pagegraph.ast_parser import ASTParser, node_text, string_value
from pagegraph.cache.run_cache import RunCache
from pagegraph.exceptions import ParseFailure
from pagegraph.graphql.codegen import parse_codegen_document_exports
from pagegraph.graphql.context import graphql_template_of, template_body
from pagegraph.graphql.names import has_graphql_indicators
from pagegraph.graphql.operations import OperationExtractor
from pagegraph.models import OperationKind, OperationSource
from pagegraph.universe import FileUniverse, matches_glob
from pagegraph.utils.constants import (
    CODEGEN_FILE_PATTERNS,
    GRAPHQL_DOCUMENT_EXTENSIONS,
    GRAPHQL_TEMPLATE_FUNCTIONS,
)
from pagegraph.utils.logging import logger

# Single alternation regexes get slow past this many names
_MAX_REGEX_NAMES = 2000


class OperationCatalog:
    """Builds OperationSource records for one repository."""

    def __init__(
        self,
        project_root: str | Path,
        universe: FileUniverse,
        parser: ASTParser,
        cache: RunCache,
        graphql_files: list[str] | None = None,
    ):
        self.project_root = Path(project_root)
        self.universe = universe
        self.parser = parser
        self.cache = cache
        self.graphql_files = graphql_files
        # Document variable name -> operation name (GetUserDocument -> GetUser, GET_USER -> GetUser)
        self.document_names: dict[str, str] = {}
        self.coverage = {
            "files_scanned": 0,
            "parse_failures": 0,
            "graphql_parse_failures": 0,
            "codegen_files_detected": 0,
            "codegen_exports_found": 0,
        }

    def build(self) -> list[OperationSource]:
        definitions: list[OperationSource] = []
        definitions.extend(self._from_graphql_documents())
        definitions.extend(self._from_inline_templates())
        definitions.extend(self._from_codegen())

        unique: dict[str, OperationSource] = {}
        for op in definitions:
            if op.operation_name not in unique:
                unique[op.operation_name] = op

        for name in unique:
            self.document_names.setdefault(f"{name}Document", name)

        sources = list(unique.values())
        self._find_usage(sources)

        logger.info(
            f"Operation catalog: {len(sources)} operations "
            f"({self.coverage['files_scanned']} files scanned, "
            f"{self.coverage['parse_failures']} parse failures, "
            f"{self.coverage['codegen_exports_found']} codegen exports)"
        )
        return sources

    def _parse_operations(self, text: str, rel_path: str) -> list[OperationSource]:
        try:
            document = parse(text)
        except GraphQLError as e:
            self.coverage["graphql_parse_failures"] += 1
            logger.debug(f"GraphQL parse error in {rel_path}: {e}")
            return []

        ops = []
        for definition in document.definitions:
            if not isinstance(definition, OperationDefinitionNode) or definition.name is None:
                continue
            ops.append(
                OperationSource(
                    operation_name=definition.name.value,
                    kind=OperationKind.parse(definition.operation.value),
                    defined_in_file=rel_path,
                )
            )
        return ops

    def _from_graphql_documents(self) -> list[OperationSource]:
        files = self.graphql_files
        if files is None:
            files = FileUniverse.scan(
                self.project_root, include=[f"**/*{ext}" for ext in GRAPHQL_DOCUMENT_EXTENSIONS]
            ).files

        ops = []
        for rel_path in files:
            content = self.cache.read_text(rel_path)
            if content:
                ops.extend(self._parse_operations(content, rel_path))
        return ops

    def _from_inline_templates(self) -> list[OperationSource]:
        ops = []
        for rel_path in self.universe:
            self.coverage["files_scanned"] += 1
            content = self.cache.read_text(rel_path)
            if not content or not any(fn in content for fn in GRAPHQL_TEMPLATE_FUNCTIONS):
                continue
            try:
                tree = self.parser.parse_file(rel_path)
            except ParseFailure:
                self.coverage["parse_failures"] += 1
                continue

            for template, var_name in _graphql_templates(tree.root_node):
                text = string_value(template) if template.type == "string" else template_body(template)
                if not text:
                    continue
                found = self._parse_operations(text, rel_path)
                for op in found:
                    if var_name:
                        self.document_names.setdefault(var_name, op.operation_name)
                ops.extend(found)
        return ops

    def _from_codegen(self) -> list[OperationSource]:
        ops = []
        for rel_path in self.universe:
            if not any(matches_glob(rel_path, p) for p in CODEGEN_FILE_PATTERNS):
                continue
            content = self.cache.read_text(rel_path)
            if not content or "Document" not in content or "definitions" not in content:
                continue

            self.coverage["codegen_files_detected"] += 1
            try:
                tree = self.parser.parse_file(rel_path)
            except ParseFailure:
                self.coverage["parse_failures"] += 1
                continue

            exports = parse_codegen_document_exports(tree.root_node)
            self.coverage["codegen_exports_found"] += len(exports)
            for export in exports:
                self.document_names[export.document_name] = export.operation_name
                ops.append(
                    OperationSource(
                        operation_name=export.operation_name,
                        kind=export.kind,
                        defined_in_file=rel_path,
                    )
                )
            if exports:
                located = ", ".join(f"{e.document_name}:{e.line}" for e in exports)
                logger.debug(f"Codegen output {rel_path} exports {located}")
        return ops

    def _find_usage(self, sources: list[OperationSource]) -> None:
        if not sources:
            return

        by_name = {op.operation_name: op for op in sources}
        document_refs = {
            doc: by_name[name] for doc, name in self.document_names.items() if name in by_name
        }

        names_pattern = None
        document_keys = sorted(
            (k for k in document_refs if k.endswith("Document")), key=lambda k: (-len(k), k)
        )
        if document_keys and len(document_keys) < _MAX_REGEX_NAMES:
            names_pattern = re.compile(
                r"\b(" + "|".join(re.escape(k) for k in document_keys) + r")\b"
            )

        extractor = OperationExtractor(self.parser, self.cache, codegen_map=self.document_names)

        for rel_path in self.universe:
            content = self.cache.read_text(rel_path)
            if not content or not has_graphql_indicators(content):
                continue

            if names_pattern is not None:
                for match in names_pattern.finditer(content):
                    _add_usage(document_refs[match.group(1)], rel_path)

            for fact in extractor.facts(rel_path):
                op = by_name.get(fact.operation_name)
                if op is not None:
                    _add_usage(op, rel_path)


def _add_usage(op: OperationSource, rel_path: str) -> None:
    if rel_path != op.defined_in_file and rel_path not in op.usage_files:
        op.usage_files.append(rel_path)


def _graphql_templates(root: Any) -> list[tuple[Any, str | None]]:
    """(template node, enclosing variable name) for every gql/graphql literal."""
    found = []
    stack: list[tuple[Any, str | None]] = [(root, None)]
    while stack:
        node, var_name = stack.pop()
        if node.type == "variable_declarator":
            name = node.child_by_field_name("name")
            if name is not None and name.type == "identifier":
                var_name = node_text(name)
        if node.type == "call_expression":
            template = graphql_template_of(node)
            if template is not None:
                found.append((template, var_name))
                continue
        for child in reversed(node.named_children):
            stack.append((child, var_name))
    return found
