"""Centralized constants for pagegraph.

This module provides a single source of truth for resolution extensions,
traversal limits, classification thresholds and GraphQL detection tokens.

CRITICAL: This file should contain ONLY configuration constants.
NO business logic.
"""

import re

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Per-repository directory holding runtime config and optional log files
PAGEGRAPH_DIR_NAME = ".pagegraph"

# ============================================================================
# FILE SYSTEM CONFIGURATION
# ============================================================================

# Directories never scanned for the file universe
# These are build artifacts, dependencies, or caches
SKIP_DIRS: set[str] = {
    # Version control
    ".git",
    ".hg",
    ".svn",

    # Dependencies
    "node_modules",

    # Build artifacts
    "dist",
    "build",
    "out",

    # JavaScript framework artifacts
    ".next",  # Next.js
    ".nuxt",  # Nuxt.js
    ".turbo",

    # Coverage reports
    "coverage",
    ".coverage",

    # pagegraph output
    PAGEGRAPH_DIR_NAME,
}

# Default include globs for the file universe
DEFAULT_INCLUDE_PATTERNS: list[str] = ["**/*.ts", "**/*.tsx"]

# Maximum file size read into the run cache (default: 2MB)
DEFAULT_MAX_FILE_SIZE = 2 * 1024 * 1024

# Extensions tried (in order) for extensionless specifiers
RESOLVE_EXTENSIONS: tuple[str, ...] = (
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".mts",
    ".cts",
    ".mjs",
    ".cjs",
)

# Runtime extensions stripped before extension-agnostic lookup
SOURCE_EXTENSION_RE = re.compile(r"\.(d\.ts|ts|tsx|js|jsx|mts|cts|mjs|cjs)$")

# Project configuration files, nearest first
PROJECT_CONFIG_FILES: tuple[str, ...] = ("tsconfig.json", "jsconfig.json")

# Canonical page roots tried when locating a page entry file
CANONICAL_PAGE_ROOTS: tuple[str, ...] = (
    "src/pages/",
    "pages/",
    "src/app/",
    "app/",
    "frontend/src/pages/",
    "frontend/src/app/",
    "app/javascript/pages/",
    "app/javascript/app/",
)

# ============================================================================
# TRAVERSAL LIMITS
# ============================================================================

# Hard caps per page traversal; exceeding them truncates silently
MAX_TRAVERSAL_NODES = 20000
MAX_TRAVERSAL_DEPTH = 30

# Hop cost of following a named import through a barrel (one in, one out)
BARREL_HOP_COST = 2

# ============================================================================
# CLASSIFICATION THRESHOLDS
# ============================================================================

COMMON_THRESHOLD_MIN = 10
COMMON_THRESHOLD_PERCENTILE = 0.9
LOCAL_THRESHOLD_MIN = 2
LOCAL_THRESHOLD_FRACTION = 0.05
CLOSE_HOP_LIMIT = 2

# ============================================================================
# GRAPHQL DETECTION
# ============================================================================

GRAPHQL_QUERY_HOOKS: tuple[str, ...] = (
    "useQuery",
    "useLazyQuery",
    "useSuspenseQuery",
    "useBackgroundQuery",
    "useReadQuery",
)

GRAPHQL_MUTATION_HOOKS: tuple[str, ...] = ("useMutation",)

GRAPHQL_OTHER_HOOKS: tuple[str, ...] = ("useSubscription", "useFragment", "useApolloClient")

ALL_GRAPHQL_HOOKS: tuple[str, ...] = (
    GRAPHQL_QUERY_HOOKS + GRAPHQL_MUTATION_HOOKS + GRAPHQL_OTHER_HOOKS
)

# Client method calls treated as operation call sites (first arg must be an object)
CLIENT_OPERATION_METHODS: dict[str, str] = {
    "query": "query",
    "mutate": "mutation",
    "subscribe": "subscription",
}

# Template tags / wrapper functions whose literal text is a GraphQL document
GRAPHQL_TEMPLATE_FUNCTIONS: frozenset[str] = frozenset({"gql", "graphql"})

# Cheap substring pre-filter: files containing none of these are skipped
GRAPHQL_INDICATORS: tuple[str, ...] = (
    "Document",
    "useQuery",
    "useMutation",
    "useLazyQuery",
    "useSuspenseQuery",
    "useBackgroundQuery",
    "useSubscription",
    "Query",
    "Mutation",
    "gql",
    "graphql",
    "GET_",
    "FETCH_",
    "SEARCH_",
    "CREATE_",
    "UPDATE_",
    "DELETE_",
    "SUBSCRIBE_",
    "@apollo",
    "ApolloClient",
)

# Operation name inside a GraphQL literal
OPERATION_NAME_RE = re.compile(r"(query|mutation|subscription)\s+(\w+)", re.IGNORECASE)

# Codegen output files scanned for `XDocument = {"kind":"Document",...}` exports
CODEGEN_FILE_PATTERNS: tuple[str, ...] = (
    "**/__generated__/graphql.ts",
    "**/__generated__/gql.ts",
    "**/generated/graphql.ts",
    "**/generated/gql.ts",
    "**/*.generated.ts",
    "**/*.generated.tsx",
    "**/graphql/generated.ts",
    "**/gql/generated.ts",
)

GRAPHQL_DOCUMENT_EXTENSIONS: tuple[str, ...] = (".graphql", ".gql")

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_PREFIX = "PAGEGRAPH"
