"""GraphQL Code Generator output parsing.

Reads `export const XDocument = {"kind":"Document","definitions":[...]} as unknown as DocumentNode`
exports from the AST rather than by regex, so formatting changes in the
generated files do not matter.
"""

from dataclasses import dataclass
from typing import Any

from pagegraph.ast_parser import node_text, string_value, unwrap_expression
from pagegraph.models import OperationKind


@dataclass
class CodegenDocumentExport:
    """One exported document object."""

    document_name: str
    operation_name: str
    kind: OperationKind
    line: int


def literal_value(node: Any) -> Any:
    """Evaluate a JSON-like literal expression; unknown constructs become None."""
    node = unwrap_expression(node)
    if node is None:
        return None

    kind = node.type
    if kind == "object":
        out = {}
        for prop in node.named_children:
            if prop.type != "pair":
                continue
            key_node = prop.child_by_field_name("key")
            key = string_value(key_node)
            if key is None and key_node is not None and key_node.type in (
                "property_identifier",
                "number",
            ):
                key = node_text(key_node)
            if key is None:
                continue
            out[key] = literal_value(prop.child_by_field_name("value"))
        return out
    if kind == "array":
        return [literal_value(e) for e in node.named_children if e.type != "comment"]
    if kind == "string":
        return string_value(node)
    if kind == "template_string" and not any(
        c.type == "template_substitution" for c in node.named_children
    ):
        return node_text(node)[1:-1]
    if kind == "number":
        text = node_text(node)
        try:
            return int(text)
        except ValueError:
            try:
                return float(text)
            except ValueError:
                return None
    if kind == "true":
        return True
    if kind == "false":
        return False
    return None


def _primary_operation(document: dict) -> tuple[str, OperationKind] | None:
    definitions = document.get("definitions")
    if not isinstance(definitions, list) or not definitions:
        return None
    first = definitions[0]
    if not isinstance(first, dict) or first.get("kind") != "OperationDefinition":
        return None
    name = first.get("name")
    operation_name = name.get("value") if isinstance(name, dict) else None
    if not isinstance(operation_name, str) or not operation_name:
        return None
    return operation_name, OperationKind.parse(first.get("operation"))


def parse_codegen_document_exports(root: Any) -> list[CodegenDocumentExport]:
    """Exported `*Document` constants whose first definition is an operation."""
    exports: list[CodegenDocumentExport] = []

    for item in root.named_children:
        if item.type != "export_statement":
            continue
        declaration = item.child_by_field_name("declaration")
        if declaration is None or declaration.type not in ("lexical_declaration", "variable_declaration"):
            continue

        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            document_name = node_text(name_node)
            if not document_name.endswith("Document"):
                continue

            value = unwrap_expression(declarator.child_by_field_name("value"))
            if value is None or value.type != "object":
                continue
            document = literal_value(value)
            if not isinstance(document, dict) or document.get("kind") != "Document":
                continue

            primary = _primary_operation(document)
            if primary is None:
                continue
            operation_name, kind = primary
            exports.append(
                CodegenDocumentExport(
                    document_name=document_name,
                    operation_name=operation_name,
                    kind=kind,
                    line=name_node.start_point[0] + 1,
                )
            )

    return exports
