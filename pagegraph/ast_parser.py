"""AST parser for TypeScript/JavaScript sources using Tree-sitter."""

from pathlib import PurePosixPath
from typing import Any

from tree_sitter_language_pack import get_parser

from pagegraph.cache.run_cache import MISSING, RunCache
from pagegraph.exceptions import ParseFailure
from pagegraph.utils.logging import logger

# The TSX grammar is a superset that also accepts JSX in plain .js files;
# .ts keeps its own grammar so `<T>value` casts are not read as JSX.
LANGUAGE_BY_EXTENSION = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "tsx",
    ".jsx": "tsx",
    ".mjs": "tsx",
    ".cjs": "tsx",
}


def node_text(node: Any) -> str:
    """Decoded source text of a tree-sitter node."""
    if node is None:
        return ""
    return node.text.decode("utf-8", errors="ignore")


def unwrap_expression(node: Any) -> Any:
    """Strip parentheses, `as`/`satisfies` casts and non-null assertions."""
    while node is not None and node.type in (
        "parenthesized_expression",
        "as_expression",
        "satisfies_expression",
        "non_null_expression",
        "type_assertion",
    ):
        inner = [c for c in node.named_children if c.type != "comment"]
        if not inner:
            break
        if node.type == "type_assertion":
            node = inner[-1]
        else:
            node = inner[0]
    return node


def string_value(node: Any) -> str | None:
    """Value of a string literal node (quotes removed), else None."""
    if node is None or node.type != "string":
        return None
    text = node_text(node)
    if len(text) >= 2 and text[0] in "'\"" and text[-1] == text[0]:
        return text[1:-1]
    return None


class ASTParser:
    """Tree-sitter parser front-end with per-run tree caching."""

    def __init__(self, cache: RunCache):
        self.cache = cache
        self.parsers: dict[str, Any] = {}

    def _get_parser(self, language: str) -> Any:
        if language not in self.parsers:
            self.parsers[language] = get_parser(language)
        return self.parsers[language]

    @staticmethod
    def language_for(rel_path: str) -> str:
        return LANGUAGE_BY_EXTENSION.get(PurePosixPath(rel_path).suffix, "tsx")

    def parse_content(self, content: str, rel_path: str = "<memory>") -> Any:
        """Parse source text; raise ParseFailure on syntax errors."""
        parser = self._get_parser(self.language_for(rel_path))
        tree = parser.parse(content.encode("utf-8"))
        if tree.root_node.has_error:
            raise ParseFailure(rel_path, "syntax error")
        return tree

    def parse_file(self, rel_path: str) -> Any:
        """Parse an indexed file once per run.

        Failures are cached and re-raised, so a broken file is parsed once.
        """
        cached = self.cache.get_tree(rel_path)
        if cached is not MISSING:
            if isinstance(cached, ParseFailure):
                raise cached
            return cached

        content = self.cache.read_text(rel_path)
        if content is None:
            failure = ParseFailure(rel_path, "unreadable")
            self.cache.set_tree(rel_path, failure)
            raise failure

        try:
            tree = self.parse_content(content, rel_path)
        except ParseFailure as failure:
            logger.debug(str(failure))
            self.cache.set_tree(rel_path, failure)
            raise

        self.cache.set_tree(rel_path, tree)
        return tree
