"""Classify parameter and return type signatures.

Every decision that depends on the *shape* of a type goes through this
module: which return value is the primary one, how it is rendered, and
whether a parameter is expanded into flags or treated as pagination
options. Generators and the manifest store share these functions so that
a command's renderer hint is the same wherever it is derived.
"""

from __future__ import annotations

from typing import Optional

from clisync.models import (
    Conventions,
    Method,
    ParsedStruct,
    RendererHint,
    ReturnShape,
)
from clisync.parser.extractor import base_type_name

_RENDERERS = {
    ReturnShape.COLLECTION: RendererHint.TABLE,
    ReturnShape.COMPOSITE: RendererHint.DETAIL,
    ReturnShape.PASSTHROUGH: RendererHint.PASSTHROUGH,
    ReturnShape.NONE: RendererHint.SUCCESS,
}


def classify_return(type_str: str, conventions: Optional[Conventions] = None) -> ReturnShape:
    """Classify a primary return type into a :class:`ReturnShape`.

    Example::

        >>> classify_return("[]Widget")
        <ReturnShape.COLLECTION: 'collection'>
        >>> classify_return("*http.Response")
        <ReturnShape.PASSTHROUGH: 'passthrough'>
    """
    conv = conventions or Conventions()
    if not type_str or type_str == conv.failure_type:
        return ReturnShape.NONE
    if type_str.startswith("[]"):
        return ReturnShape.COLLECTION
    if type_str in conv.passthrough_types:
        return ReturnShape.PASSTHROUGH
    return ReturnShape.COMPOSITE


def renderer_for(shape: ReturnShape) -> RendererHint:
    """Map a :class:`ReturnShape` to the renderer hint of its command."""
    return _RENDERERS[shape]


def primary_return_type(method: Method, conventions: Optional[Conventions] = None) -> str:
    """Return the first non-failure, non-pagination-metadata return type, or ``""``."""
    conv = conventions or Conventions()
    for ret in method.returns:
        if ret.is_error or ret.type == conv.failure_type:
            continue
        if base_type_name(ret.type) == conv.pagination_meta_type:
            continue
        return ret.type
    return ""


def method_renderer(method: Method, conventions: Optional[Conventions] = None) -> RendererHint:
    """Renderer hint of *method*, from its primary return type."""
    return renderer_for(classify_return(primary_return_type(method, conventions), conventions))


def is_pagination_param(type_str: str, conventions: Optional[Conventions] = None) -> bool:
    """Return True if *type_str* is the pagination options type."""
    conv = conventions or Conventions()
    return base_type_name(type_str) == conv.pagination_type


def is_expandable_param(
    type_str: str,
    structs: dict[str, ParsedStruct],
    conventions: Optional[Conventions] = None,
) -> bool:
    """Return True if *type_str* is a known options/params struct.

    The base type must be a parsed struct whose name ends in one of the
    options or parameters suffixes. Pagination options are not expandable:
    they get dedicated flags instead.
    """
    conv = conventions or Conventions()
    if type_str.startswith(("[]", "...", "map[")):
        return False
    base = base_type_name(type_str)
    if base not in structs or base == conv.pagination_type:
        return False
    suffixes = [s for s in conv.options_suffixes + conv.params_suffixes if s]
    return any(base.endswith(suffix) for suffix in suffixes)
