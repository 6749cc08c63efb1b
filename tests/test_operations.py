"""Tests for data-operation call-site extraction and name resolution.

Tests cover:
1. Name cleanup and hook classification
2. Each argument matcher against a table of argument shapes
3. extract_operations end to end (kinds, dedupe, pre-filter)
"""
import pytest

from pagegraph.ast_parser import ASTParser
from pagegraph.cache.run_cache import RunCache
from pagegraph.graphql import extract_operations, resolve_operation_name
from pagegraph.graphql.context import build_context, first_argument
from pagegraph.graphql.matchers import (
    match_graphql_call,
    match_identifier,
    match_member_expression,
    match_object_literal,
    match_template_literal,
    resolve_argument,
)
from pagegraph.graphql.names import clean_operation_name, is_placeholder, kind_for_call
from pagegraph.graphql.operations import iter_operation_calls
from pagegraph.models import OperationKind


@pytest.fixture(scope="module")
def parser():
    return ASTParser(RunCache("."))


def first_call(parser, source):
    """(call node, per-file context) for the first operation call site in source."""
    tree = parser.parse_content(source, "src/component.tsx")
    call, _ = next(iter_operation_calls(tree.root_node))
    return call, build_context(tree.root_node)


def names_and_kinds(source, **kwargs):
    return [(f.operation_name, f.kind) for f in extract_operations(source, **kwargs)]


class TestNameCleanup:
    """Prefix/suffix stripping and placeholders."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("GET_USER_QUERY", "USER"),
            ("FETCH_POSTS", "POSTS"),
            ("DELETE_POST_MUTATION", "POST"),
            ("GetUserDocument", "GetUser"),
            ("GetUserQuery", "GetUser"),
            ("UpdateUserMutation", "UpdateUser"),
            ("OnMessageSubscription", "OnMessage"),
            ("GetUserQueryVariables", "GetUserQuery"),
            ("CreateUser", "CreateUser"),
        ],
    )
    def test_clean_operation_name(self, raw, expected):
        assert clean_operation_name(raw) == expected

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Query", True),
            ("query", True),
            ("MUTATION", True),
            ("Document", True),
            ("GetUser", False),
            ("QueryUser", False),
        ],
    )
    def test_is_placeholder(self, name, expected):
        assert is_placeholder(name) is expected

    @pytest.mark.parametrize(
        "callee,is_method,expected",
        [
            ("useQuery", False, OperationKind.QUERY),
            ("useLazyQuery", False, OperationKind.QUERY),
            ("useGetUserQuery", False, OperationKind.QUERY),
            ("useMutation", False, OperationKind.MUTATION),
            ("useCreateUserMutation", False, OperationKind.MUTATION),
            ("useSubscription", False, OperationKind.SUBSCRIPTION),
            ("query", True, OperationKind.QUERY),
            ("mutate", True, OperationKind.MUTATION),
            ("subscribe", True, OperationKind.SUBSCRIPTION),
        ],
    )
    def test_kind_for_call(self, callee, is_method, expected):
        assert kind_for_call(callee, is_method=is_method) is expected


class TestArgumentMatchers:
    """One table per argument shape."""

    @pytest.mark.parametrize(
        "source,expected",
        [
            (
                "import { GetUserDocument } from './__generated__/graphql';\n"
                "useQuery(GetUserDocument);\n",
                "GetUser",
            ),
            ("const GET_USER = gql`query GetUser { user { id } }`;\nuseQuery(GET_USER);\n", "GetUser"),
            ("const doc = GetUserDocument;\nuseQuery(doc);\n", "GetUser"),
            ("const FooQuery = BarQuery;\nconst BarQuery = FooQuery;\nuseQuery(FooQuery);\n", None),
            ("useQuery(FETCH_POSTS_QUERY);\n", "POSTS"),
            ("useQuery(Query);\n", None),
        ],
    )
    def test_identifier(self, parser, source, expected):
        call, context = first_call(parser, source)
        assert match_identifier(first_argument(call), context) == expected

    @pytest.mark.parametrize(
        "source,expected",
        [
            (
                "class UserPage {\n  static Query = gql`query UserPage { me { id } }`;\n}\n"
                "useQuery(UserPage.Query);\n",
                "UserPage",
            ),
            ("Page.query = gql`query PageData { me { id } }`;\nuseQuery(Page.query);\n", "PageData"),
            ("useQuery(queries.GetUserQuery);\n", "GetUser"),
            ("useQuery(queries.Query);\n", None),
        ],
    )
    def test_member_expression(self, parser, source, expected):
        call, context = first_call(parser, source)
        assert match_member_expression(first_argument(call), context) == expected

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("useQuery(gql`query Inline { a }`);\n", "Inline"),
            ("useQuery(gql(`mutation Wrapped { a }`));\n", "Wrapped"),
            ("useQuery(graphql('subscription Str { a }'));\n", "Str"),
            ("useQuery(gql`{ a }`);\n", None),
        ],
    )
    def test_graphql_call(self, parser, source, expected):
        call, context = first_call(parser, source)
        assert match_graphql_call(first_argument(call), context) == expected

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("useQuery(`query Direct { a }`);\n", "Direct"),
            ("useQuery(`query Prefixed${fragment} { a }`);\n", "Prefixed"),
            ("useQuery(`{ a }`);\n", None),
        ],
    )
    def test_template_literal(self, parser, source, expected):
        call, context = first_call(parser, source)
        assert match_template_literal(first_argument(call), context) == expected

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("client.query({ query: GetUserDocument, variables: { id } });\n", "GetUser"),
            ("client.mutate({ mutation: gql`mutation Save { a }` });\n", "Save"),
            ("const query = gql`query Short { a }`;\nclient.query({ query });\n", "Short"),
            ("useQuery({ variables: { id: 1 } });\n", None),
        ],
    )
    def test_object_literal(self, parser, source, expected):
        call, context = first_call(parser, source)
        assert match_object_literal(first_argument(call), context) == expected

    def test_resolve_argument_unwraps_casts(self, parser):
        call, context = first_call(parser, "useQuery((GetUserDocument as any));\n")
        assert resolve_argument(first_argument(call), context) == "GetUser"


class TestResolveOperationName:
    """Call-site level ordering."""

    def test_generic_type_argument_wins(self, parser):
        call, context = first_call(
            parser, "useQuery<GetUserQuery, GetUserQueryVariables>(USER_DOC);\n"
        )
        assert resolve_operation_name(call, context) == "GetUser"

    def test_placeholder_generic_falls_through(self, parser):
        call, context = first_call(parser, "useQuery<Query>(GetPostsDocument);\n")
        assert resolve_operation_name(call, context) == "GetPosts"

    def test_zero_arguments_is_never_an_operation(self, parser):
        call, context = first_call(parser, "useGetUserQuery<GetUserQuery>();\n")
        assert resolve_operation_name(call, context) is None


class TestExtractOperations:
    """End-to-end extraction from source text."""

    def test_hooks_and_kinds(self):
        source = (
            "import { GetUserDocument, SaveUserDocument } from './__generated__/graphql';\n"
            "export function UserContainer() {\n"
            "  const { data } = useQuery(GetUserDocument);\n"
            "  const [save] = useMutation(SaveUserDocument);\n"
            "  useSubscription(OnMessageDocument);\n"
            "  return null;\n"
            "}\n"
        )
        assert names_and_kinds(source) == [
            ("GetUser", OperationKind.QUERY),
            ("SaveUser", OperationKind.MUTATION),
            ("OnMessage", OperationKind.SUBSCRIPTION),
        ]

    def test_client_calls(self):
        source = (
            "async function load(client) {\n"
            "  await client.query({ query: GetUserDocument });\n"
            "  await client.mutate({ mutation: CreateUserDocument });\n"
            "  client.query('not an object');\n"
            "}\n"
        )
        assert names_and_kinds(source) == [
            ("GetUser", OperationKind.QUERY),
            ("CreateUser", OperationKind.MUTATION),
        ]

    def test_hook_name_alone_is_not_an_operation(self):
        source = "export const A = () => {\n  useGetUserQuery({ variables: { id: 1 } });\n  return null;\n};\n"
        assert extract_operations(source) == []

    def test_same_operation_is_reported_once(self):
        source = "useQuery(GetUserDocument);\nuseQuery(GetUserDocument);\n"
        assert names_and_kinds(source) == [("GetUser", OperationKind.QUERY)]

    def test_codegen_map_resolves_identifiers(self):
        source = "useQuery(USER_DOC);\n"
        assert names_and_kinds(source, codegen_map={"USER_DOC": "CurrentUser"}) == [
            ("CurrentUser", OperationKind.QUERY)
        ]

    def test_prefilter_skips_plain_files(self):
        assert extract_operations("export const x = 1;\n") == []

    def test_unparseable_source_yields_nothing(self):
        assert extract_operations("useQuery(GetUserDocument;\nconst = ;\n") == []

    def test_facts_carry_file(self):
        facts = extract_operations("useQuery(GetUserDocument);\n", file="src/a.tsx")
        assert facts[0].file == "src/a.tsx"
