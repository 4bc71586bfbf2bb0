"""Build the structural Service/Method/Param model from Go source files.

The extractor walks the syntax trees produced by
:mod:`~clisync.parser.loader` in two passes:

* **Pass 1** collects every ``type X struct { ... }`` definition into a
  ``{name: ParsedStruct}`` map. Generators use it to expand options-shaped
  parameters into individual flags.
* **Pass 2** visits every ``type X interface { ... }`` whose name carries
  the service suffix (``Service`` by default) and no excluded marker
  (``Preview``), converting each interface method into a
  :class:`~clisync.models.Method`.

Per-method rules:

1. A leading ``context.Context`` parameter sets ``has_context`` and is
   not recorded as a parameter.
2. ``a, b Type`` declarations yield one :class:`~clisync.models.Param`
   per name.
3. Unnamed parameters get a name from :func:`infer_param_name`.
4. Every result becomes a :class:`~clisync.models.Return`; ``error``
   results are marked as the failure channel.

The single public entry point is :func:`extract_model`. The type and name
helpers are public because the manifest store reuses them.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator, Optional

from tree_sitter import Node

from clisync.models import (
    Conventions,
    Method,
    Param,
    ParsedStruct,
    Return,
    Service,
    StructField,
)
from clisync.parser.loader import SourceFile, load_sources
from clisync.output import debug

# Go predeclared type names; an unnamed parameter of one of these types
# cannot be given a meaningful name.
_PREDECLARED_TYPES = frozenset({
    "any", "bool", "byte", "comparable", "complex64", "complex128", "error",
    "float32", "float64", "int", "int8", "int16", "int32", "int64", "rune",
    "string", "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
})

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Matches json:"..." inside a struct tag.
_JSON_TAG_RE = re.compile(r'(?:^|\s)json:"([^"]*)"')

_METHOD_NODE_TYPES = ("method_elem", "method_spec")
_PARAM_NODE_TYPES = ("parameter_declaration", "variadic_parameter_declaration")


def extract_model(
    sdk_path: str | Path,
    exclude_patterns: Optional[list[str]] = None,
    conventions: Optional[Conventions] = None,
) -> tuple[list[Service], dict[str, ParsedStruct]]:
    """Extract services and struct definitions from the SDK at *sdk_path*.

    Args:
        sdk_path: Directory containing the SDK's Go package.
        exclude_patterns: Gitignore-style patterns of files to skip.
        conventions: Naming conventions; defaults to :class:`Conventions()`.

    Returns:
        ``(services, structs)``. Services keep file and declaration order.
        A package without any matching interface yields an empty list.

    Raises:
        SourceLocationError: If the location cannot be read.
        SourceParseError: If any source file is malformed.
    """
    conv = conventions or Conventions()
    sources = load_sources(sdk_path, exclude_patterns)
    debug(f"Parsing {len(sources)} source files in {sdk_path}")

    structs = collect_structs(sources)
    services = collect_services(sources, conv)
    return services, structs


def collect_structs(sources: list[SourceFile]) -> dict[str, ParsedStruct]:
    """Pass 1: every struct type definition, keyed by name."""
    structs: dict[str, ParsedStruct] = {}
    for source in sources:
        for name, type_node in _type_specs(source.root):
            if type_node.type == "struct_type":
                structs[name] = parse_struct(name, type_node)
    return structs


def collect_services(sources: list[SourceFile], conventions: Conventions) -> list[Service]:
    """Pass 2: every interface matching the service naming convention."""
    services: list[Service] = []
    for source in sources:
        for name, type_node in _type_specs(source.root):
            if type_node.type != "interface_type":
                continue
            if not is_service_name(name, conventions):
                continue
            services.append(parse_interface(name, type_node, conventions))
    return services


def is_service_name(name: str, conventions: Conventions) -> bool:
    """Return True if *name* designates a service contract."""
    if not name.endswith(conventions.service_suffix):
        return False
    return not any(marker and marker in name for marker in conventions.excluded_markers)


# --- Interfaces ---


def parse_interface(name: str, node: Node, conventions: Conventions) -> Service:
    """Convert an ``interface_type`` node into a :class:`Service`."""
    service = Service(name=name)
    for child in node.named_children:
        if child.type not in _METHOD_NODE_TYPES:
            continue
        name_node = child.child_by_field_name("name")
        if name_node is None:
            continue
        service.methods.append(_parse_method(_text(name_node), child, conventions))
    return service


def _parse_method(name: str, node: Node, conventions: Conventions) -> Method:
    method = Method(name=name)

    params_node = node.child_by_field_name("parameters")
    entries = _flatten_parameters(params_node) if params_node is not None else []
    for position, (param_name, type_str) in enumerate(entries):
        if position == 0 and type_str == conventions.context_type:
            method.has_context = True
            continue
        if not param_name or param_name == "_":
            param_name = infer_param_name(type_str, len(method.params), conventions)
        method.params.append(Param(name=param_name, type=type_str))

    result_node = node.child_by_field_name("result")
    if result_node is not None:
        method.returns = _parse_results(result_node, conventions)
    return method


def _parse_results(node: Node, conventions: Conventions) -> list[Return]:
    if node.type == "parameter_list":
        types = [type_str for _, type_str in _flatten_parameters(node)]
    else:
        types = [type_to_string(node)]
    return [Return(type=t, is_error=t == conventions.failure_type) for t in types]


def _flatten_parameters(node: Node) -> list[tuple[str, str]]:
    """Return one ``(name, type)`` pair per parameter of a ``parameter_list``.

    Go lists are either fully named or fully unnamed. In a named list, a
    bare identifier followed by a named declaration is a name sharing the
    next type (``a, b int``); unnamed parameters get an empty name.
    """
    declarations = [c for c in node.named_children if c.type in _PARAM_NODE_TYPES]
    named = any(decl.children_by_field_name("name") for decl in declarations)

    entries: list[tuple[str, str]] = []
    pending: list[str] = []
    for decl in declarations:
        type_str = _declaration_type(decl)
        names = [_text(n) for n in decl.children_by_field_name("name")]
        if not named:
            entries.append(("", type_str))
        elif not names and decl.type == "parameter_declaration" and _IDENT_RE.match(type_str):
            pending.append(type_str)
        else:
            entries.extend((n, type_str) for n in pending + (names or [""]))
            pending = []
    entries.extend(("", p) for p in pending)
    return entries


def _declaration_type(decl: Node) -> str:
    type_node = decl.child_by_field_name("type")
    type_str = type_to_string(type_node) if type_node is not None else "unknown"
    if decl.type == "variadic_parameter_declaration":
        return "..." + type_str
    return type_str


# --- Structs ---


def parse_struct(name: str, node: Node) -> ParsedStruct:
    """Convert a ``struct_type`` node into a :class:`ParsedStruct`.

    Only exported, named fields are kept; embedded fields are skipped.
    """
    parsed = ParsedStruct(name=name)
    for field_list in node.named_children:
        if field_list.type != "field_declaration_list":
            continue
        for decl in field_list.named_children:
            if decl.type != "field_declaration":
                continue
            names = decl.children_by_field_name("name")
            if not names:
                continue
            type_node = decl.child_by_field_name("type")
            type_str = type_to_string(type_node) if type_node is not None else "unknown"
            tag_node = decl.child_by_field_name("tag")
            json_key, optional = parse_json_tag(_text(tag_node) if tag_node is not None else "")
            for name_node in names:
                field_name = _text(name_node)
                if not field_name[:1].isupper():
                    continue
                parsed.fields.append(
                    StructField(name=field_name, type=type_str, json_tag=json_key, optional=optional)
                )
    return parsed


def parse_json_tag(raw_tag: str) -> tuple[str, bool]:
    """Return ``(key, optional)`` from a raw struct tag literal.

    Both raw (backquoted) and interpreted (double-quoted) literals are
    accepted. Tags without a ``json`` entry give ``("", False)``.

    Example::

        >>> parse_json_tag('`json:"app_id,omitempty"`')
        ('app_id', True)
    """
    tag = raw_tag.strip()
    if tag.startswith("`") and tag.endswith("`"):
        tag = tag[1:-1]
    elif tag.startswith('"') and tag.endswith('"'):
        tag = tag[1:-1].replace('\\"', '"')

    match = _JSON_TAG_RE.search(tag)
    if match is None:
        return "", False
    parts = match.group(1).split(",")
    return parts[0], "omitempty" in parts[1:]


# --- Types and names ---


def type_to_string(node: Node) -> str:
    """Render a type expression node to its canonical string."""
    kind = node.type
    if kind in ("type_identifier", "identifier", "package_identifier"):
        return _text(node)
    if kind == "qualified_type":
        package = node.child_by_field_name("package")
        name = node.child_by_field_name("name")
        if package is None or name is None:
            return "unknown"
        return f"{_text(package)}.{_text(name)}"
    if kind == "pointer_type":
        inner = _first_named(node)
        return "*" + (type_to_string(inner) if inner is not None else "unknown")
    if kind in ("slice_type", "array_type", "implicit_length_array_type"):
        element = node.child_by_field_name("element")
        return "[]" + (type_to_string(element) if element is not None else "unknown")
    if kind == "map_type":
        key = node.child_by_field_name("key")
        value = node.child_by_field_name("value")
        if key is None or value is None:
            return "unknown"
        return f"map[{type_to_string(key)}]{type_to_string(value)}"
    if kind == "interface_type":
        return "interface{}"
    if kind == "parenthesized_type":
        inner = _first_named(node)
        return type_to_string(inner) if inner is not None else "unknown"
    return "unknown"


def base_type_name(type_str: str) -> str:
    """Strip variadic, pointer and slice markers plus package qualification."""
    base = type_str
    if base.startswith("..."):
        base = base[3:]
    while base.startswith(("*", "[]")):
        base = base[1:] if base.startswith("*") else base[2:]
    if "." in base:
        base = base.rsplit(".", 1)[1]
    return base


def infer_param_name(type_str: str, position: int, conventions: Optional[Conventions] = None) -> str:
    """Infer a parameter name from its type.

    ``*scalingo.AppsCreateOpts`` gives ``opts``, ``UpdateParams`` gives
    ``params`` and ``*Addon`` gives ``addon``. Predeclared types and
    non-identifier types fall back to ``arg<position>``.
    """
    conv = conventions or Conventions()
    base = base_type_name(type_str)
    if not base or not _IDENT_RE.match(base) or base in _PREDECLARED_TYPES:
        return f"arg{position}"

    name = base[0].lower() + base[1:]
    if any(suffix and name.endswith(suffix) for suffix in conv.options_suffixes):
        return "opts"
    if any(suffix and name.endswith(suffix) for suffix in conv.params_suffixes):
        return "params"
    return name


# --- Tree helpers ---


def _type_specs(root: Node) -> Iterator[tuple[str, Node]]:
    """Yield ``(name, type_node)`` for every top-level ``type`` declaration."""
    for decl in root.named_children:
        if decl.type != "type_declaration":
            continue
        for spec in decl.named_children:
            if spec.type != "type_spec":
                continue
            name_node = spec.child_by_field_name("name")
            type_node = spec.child_by_field_name("type")
            if name_node is None or type_node is None:
                continue
            yield _text(name_node), type_node


def _first_named(node: Node) -> Optional[Node]:
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None


def _text(node: Node) -> str:
    return node.text.decode("utf-8") if node.text is not None else ""
