"""Tests for barrel re-export resolution."""
from pagegraph.ast_parser import ASTParser
from pagegraph.extractors import BarrelResolver, ImportExportExtractor


def barrel_resolver(repo_context, files):
    root, universe, cache, resolver = repo_context(files)
    extractor = ImportExportExtractor(ASTParser(cache), cache)
    return BarrelResolver(extractor, resolver)


class TestBarrelResolver:
    """Named and star re-export chains."""

    def test_star_reexport_finds_defining_module(self, repo_context):
        barrels = barrel_resolver(
            repo_context,
            {
                "src/queries/index.ts": "export * from './a';\nexport * from './b';\n",
                "src/queries/a.ts": "export const GetFoo = 1;\n",
                "src/queries/b.ts": "export const GetBar = 2;\n",
            },
        )
        assert barrels.resolve_export("src/queries/index.ts", "GetFoo") == "src/queries/a.ts"
        assert barrels.resolve_export("src/queries/index.ts", "GetBar") == "src/queries/b.ts"

    def test_named_reexport(self, repo_context):
        barrels = barrel_resolver(
            repo_context,
            {
                "src/ui/index.ts": "export { Button } from './Button';\n",
                "src/ui/Button.tsx": "export const Button = () => null;\n",
            },
        )
        assert barrels.resolve_export("src/ui/index.ts", "Button") == "src/ui/Button.tsx"

    def test_nested_barrels_follow_origin_name(self, repo_context):
        barrels = barrel_resolver(
            repo_context,
            {
                "src/index.ts": "export { Primary as Main } from './ui';\n",
                "src/ui/index.ts": "export { Button as Primary } from './Button';\n",
                "src/ui/Button.tsx": "export const Button = () => null;\n",
            },
        )
        assert barrels.resolve_export("src/index.ts", "Main") == "src/ui/Button.tsx"

    def test_namespace_reexport_resolves_to_target(self, repo_context):
        barrels = barrel_resolver(
            repo_context,
            {
                "src/index.ts": "export * as api from './api';\n",
                "src/api.ts": "export const fetchUser = () => null;\n",
            },
        )
        assert barrels.resolve_export("src/index.ts", "api") == "src/api.ts"

    def test_unknown_name(self, repo_context):
        barrels = barrel_resolver(
            repo_context,
            {
                "src/index.ts": "export * from './a';\n",
                "src/a.ts": "export const a = 1;\n",
            },
        )
        assert barrels.resolve_export("src/index.ts", "Missing") is None

    def test_cyclic_star_reexports_terminate(self, repo_context):
        barrels = barrel_resolver(
            repo_context,
            {
                "src/a.ts": "export * from './b';\n",
                "src/b.ts": "export * from './a';\n",
            },
        )
        assert barrels.resolve_export("src/a.ts", "Anything") is None

    def test_cyclic_named_reexports_terminate(self, repo_context):
        barrels = barrel_resolver(
            repo_context,
            {
                "src/a.ts": "export { X } from './b';\n",
                "src/b.ts": "export { X } from './a';\n",
            },
        )
        assert barrels.resolve_export("src/a.ts", "X") is None

    def test_visited_barrel_returns_none(self, repo_context):
        barrels = barrel_resolver(
            repo_context,
            {
                "src/index.ts": "export * from './a';\n",
                "src/a.ts": "export const a = 1;\n",
            },
        )
        assert barrels.resolve_export("src/index.ts", "a", {"src/index.ts"}) is None
