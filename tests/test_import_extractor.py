"""Tests for import-edge and export-info extraction."""
import pytest

from pagegraph.ast_parser import ASTParser
from pagegraph.cache.run_cache import RunCache
from pagegraph.exceptions import ParseFailure
from pagegraph.extractors import ImportExportExtractor, extract_export_info, extract_import_edges


@pytest.fixture
def parser():
    return ASTParser(RunCache("."))


def edges_of(parser, source, rel_path="src/file.tsx"):
    tree = parser.parse_content(source, rel_path)
    return extract_import_edges(tree.root_node, rel_path)


def exports_of(parser, source, rel_path="src/index.ts"):
    tree = parser.parse_content(source, rel_path)
    return extract_export_info(tree.root_node)


class TestImportEdges:
    """Runtime dependency edges."""

    def test_named_imports_are_enumerated(self, parser):
        edges = edges_of(parser, "import { a, b as c } from './x';\n")
        assert len(edges) == 1
        assert edges[0].specifier == "./x"
        assert edges[0].imported_names == frozenset({"a", "b"})
        assert edges[0].from_file == "src/file.tsx"

    @pytest.mark.parametrize(
        "source",
        [
            "import React from 'react';",
            "import * as api from './api';",
            "import Default, { named } from './mixed';",
            "import './styles.css';",
            "const m = require('./legacy');",
            "const Page = lazy(() => import('./Page'));",
            "export * from './all';",
        ],
    )
    def test_unenumerable_shapes_have_unknown_names(self, parser, source):
        edges = edges_of(parser, source)
        assert len(edges) == 1
        assert edges[0].imported_names is None

    def test_type_only_imports_are_dropped(self, parser):
        source = (
            "import type { User } from './types';\n"
            "import { type Role } from './roles';\n"
            "export type { Thing } from './things';\n"
        )
        assert edges_of(parser, source) == []

    def test_mixed_type_specifiers_keep_runtime_names(self, parser):
        edges = edges_of(parser, "import { type Role, hasRole } from './roles';")
        assert edges[0].imported_names == frozenset({"hasRole"})

    def test_named_reexport_uses_original_names(self, parser):
        edges = edges_of(parser, "export { GetFoo as Foo } from './a';", "src/index.ts")
        assert edges[0].imported_names == frozenset({"GetFoo"})

    def test_edges_record_lines(self, parser):
        source = "import { a } from './a';\n\nimport { b } from './b';\n"
        lines = [e.line for e in edges_of(parser, source)]
        assert lines == [1, 3]

    def test_document_order(self, parser):
        source = "import './first';\nexport { x } from './second';\nrequire('./third');\n"
        assert [e.specifier for e in edges_of(parser, source)] == ["./first", "./second", "./third"]


class TestExportInfo:
    """Re-export surface and pure-barrel detection."""

    def test_pure_barrel(self, parser):
        info = exports_of(parser, "export * from './a';\nexport { B } from './b';\n")
        assert info.is_pure_barrel
        assert info.stars == ["./a"]
        assert info.named == {"B": "./b"}

    def test_directive_and_imports_keep_barrel_pure(self, parser):
        info = exports_of(parser, "'use client';\nimport { x } from './x';\nexport { x };\n")
        assert info.is_pure_barrel
        assert info.declared == {"x"}

    def test_declaration_disqualifies_barrel(self, parser):
        info = exports_of(parser, "export * from './a';\nexport const local = 1;\n")
        assert not info.is_pure_barrel
        assert info.declared == {"local"}

    def test_aliased_reexport_remembers_origin_name(self, parser):
        info = exports_of(parser, "export { Button as PrimaryButton } from './Button';\n")
        assert info.named == {"PrimaryButton": "./Button"}
        assert info.origin_names == {"PrimaryButton": "Button"}

    def test_namespace_reexport(self, parser):
        info = exports_of(parser, "export * as api from './api';\n")
        assert info.named == {"api": "./api"}
        assert info.origin_names == {"api": "*"}
        assert info.stars == []

    def test_default_export_declares_default(self, parser):
        info = exports_of(parser, "export default function Page() { return null; }\n", "src/page.tsx")
        assert info.declared == {"default"}
        assert not info.is_pure_barrel


class TestImportExportExtractor:
    """Cached per-file extraction."""

    def test_parse_failure_yields_empty_results(self, make_repo):
        root = make_repo({"src/broken.ts": "import { from './x';\nconst = ;\n"})
        cache = RunCache(root)
        extractor = ImportExportExtractor(ASTParser(cache), cache)
        assert extractor.edges("src/broken.ts") == []
        info = extractor.exports("src/broken.ts")
        assert not info.is_pure_barrel
        assert info.named == {}

    def test_parse_failure_is_cached(self, make_repo):
        root = make_repo({"src/broken.ts": "export const = ;\n"})
        cache = RunCache(root)
        parser = ASTParser(cache)
        with pytest.raises(ParseFailure):
            parser.parse_file("src/broken.ts")
        with pytest.raises(ParseFailure):
            parser.parse_file("src/broken.ts")
        assert cache.get_stats()["parse_failures"] == 1

    def test_missing_file(self, make_repo):
        root = make_repo({})
        cache = RunCache(root)
        extractor = ImportExportExtractor(ASTParser(cache), cache)
        assert extractor.edges("src/missing.ts") == []
