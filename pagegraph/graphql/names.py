"""Operation-name cleanup and hook classification."""

import re

from pagegraph.models import OperationKind
from pagegraph.utils.constants import (
    ALL_GRAPHQL_HOOKS,
    CLIENT_OPERATION_METHODS,
    GRAPHQL_INDICATORS,
    GRAPHQL_MUTATION_HOOKS,
    GRAPHQL_QUERY_HOOKS,
)

_PREFIX_RE = re.compile(r"^(GET_|FETCH_|CREATE_|UPDATE_|DELETE_)")
_SNAKE_SUFFIX_RE = re.compile(r"_QUERY$|_MUTATION$")
_DOCUMENT_SUFFIX_RE = re.compile(r"Document$")
_TYPE_SUFFIX_RE = re.compile(r"Query$|Mutation$|Variables$|Subscription$")
_PLACEHOLDER_RE = re.compile(r"^(Query|Mutation|QUERY|MUTATION|Document)$", re.IGNORECASE)

_CUSTOM_QUERY_HOOK_RE = re.compile(r"^use[A-Z].*Query$")
_CUSTOM_MUTATION_HOOK_RE = re.compile(r"^use[A-Z].*Mutation$")


def clean_operation_name(name: str) -> str:
    """Strip conventional prefixes and suffixes, one pass each.

    >>> clean_operation_name("GET_USER_QUERY")
    'USER'
    >>> clean_operation_name("GetUserDocument")
    'GetUser'
    >>> clean_operation_name("GetUserQuery")
    'GetUser'
    """
    name = _PREFIX_RE.sub("", name, count=1)
    name = _SNAKE_SUFFIX_RE.sub("", name, count=1)
    name = _DOCUMENT_SUFFIX_RE.sub("", name, count=1)
    return _TYPE_SUFFIX_RE.sub("", name, count=1)


def is_placeholder(name: str) -> bool:
    """Bare `Query` / `Mutation` / `Document` tokens name nothing."""
    return bool(_PLACEHOLDER_RE.match(name))


def has_graphql_indicators(content: str) -> bool:
    return any(token in content for token in GRAPHQL_INDICATORS)


def is_query_hook(name: str) -> bool:
    return name in GRAPHQL_QUERY_HOOKS or bool(_CUSTOM_QUERY_HOOK_RE.match(name))


def is_mutation_hook(name: str) -> bool:
    return name in GRAPHQL_MUTATION_HOOKS or bool(_CUSTOM_MUTATION_HOOK_RE.match(name))


def is_subscription_hook(name: str) -> bool:
    return name == "useSubscription"


def is_graphql_hook(name: str) -> bool:
    return name in ALL_GRAPHQL_HOOKS or is_query_hook(name) or is_mutation_hook(name)


def kind_for_call(callee_name: str, is_method: bool = False) -> OperationKind:
    """Operation kind implied by the call site."""
    if is_method and callee_name in CLIENT_OPERATION_METHODS:
        return OperationKind.parse(CLIENT_OPERATION_METHODS[callee_name])
    if is_mutation_hook(callee_name):
        return OperationKind.MUTATION
    if is_subscription_hook(callee_name):
        return OperationKind.SUBSCRIPTION
    return OperationKind.QUERY
