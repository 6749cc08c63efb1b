"""Run-lifetime caches."""

from .run_cache import MISSING, RunCache

__all__ = ["MISSING", "RunCache"]
