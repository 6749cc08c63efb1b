"""Barrel resolution - map an exported name to the file that defines it."""

from pagegraph.extractors.imports import ImportExportExtractor
from pagegraph.utils.logging import logger


class BarrelResolver:
    """Follows named and star re-export chains to a symbol's origin file.

    Every recursion threads an explicit visited set; a file seen twice in one
    lookup ends that branch with None, so cyclic re-exports terminate.
    """

    def __init__(self, extractor: ImportExportExtractor, resolver):
        self.extractor = extractor
        self.resolver = resolver

    def resolve_export(
        self, barrel: str, exported_name: str, visited: set[str] | None = None
    ) -> str | None:
        """Origin file of exported_name as seen from barrel, or None."""
        if visited is None:
            visited = set()
        if barrel in visited:
            return None
        visited.add(barrel)

        info = self.extractor.exports(barrel)

        if exported_name in info.declared:
            return barrel

        specifier = info.named.get(exported_name)
        if specifier is not None:
            target = self.resolver.resolve(barrel, specifier)
            if target is None:
                return None
            origin_name = info.origin_names.get(exported_name, exported_name)
            if origin_name == "*":
                return target
            if self.extractor.exports(target).is_pure_barrel:
                return self.resolve_export(target, origin_name, visited)
            return target

        for star in info.stars:
            star_file = self.resolver.resolve(barrel, star)
            if star_file is None:
                continue
            found = self.resolve_export(star_file, exported_name, visited)
            if found is not None:
                return found

        logger.debug(f"Export '{exported_name}' not found through {barrel}")
        return None
