"""Tests for clisync.parser.shapes -- return classification and parameter shapes."""

from __future__ import annotations

import pytest

from clisync.models import (
    Conventions,
    Method,
    ParsedStruct,
    RendererHint,
    Return,
    ReturnShape,
    StructField,
)
from clisync.parser.shapes import (
    classify_return,
    is_expandable_param,
    is_pagination_param,
    method_renderer,
    primary_return_type,
    renderer_for,
)


def _method(*types: str) -> Method:
    return Method(
        name="M",
        returns=[Return(type=t, is_error=t == "error") for t in types],
    )


@pytest.mark.parametrize(
    ("type_str", "shape"),
    [
        ("[]*App", ReturnShape.COLLECTION),
        ("[]Widget", ReturnShape.COLLECTION),
        ("*App", ReturnShape.COMPOSITE),
        ("string", ReturnShape.COMPOSITE),
        ("*http.Response", ReturnShape.PASSTHROUGH),
        ("", ReturnShape.NONE),
        ("error", ReturnShape.NONE),
    ],
)
def test_classify_return(type_str: str, shape: ReturnShape) -> None:
    assert classify_return(type_str) == shape


def test_custom_passthrough_types() -> None:
    conv = Conventions(passthrough_types=["io.ReadCloser"])
    assert classify_return("io.ReadCloser", conv) == ReturnShape.PASSTHROUGH
    assert classify_return("*http.Response", conv) == ReturnShape.COMPOSITE


def test_renderer_for_every_shape() -> None:
    assert renderer_for(ReturnShape.COLLECTION) == RendererHint.TABLE
    assert renderer_for(ReturnShape.COMPOSITE) == RendererHint.DETAIL
    assert renderer_for(ReturnShape.PASSTHROUGH) == RendererHint.PASSTHROUGH
    assert renderer_for(ReturnShape.NONE) == RendererHint.SUCCESS


class TestPrimaryReturn:
    def test_skips_pagination_meta_and_errors(self) -> None:
        assert primary_return_type(_method("PaginationMeta", "[]*Event", "error")) == "[]*Event"

    def test_error_only(self) -> None:
        assert primary_return_type(_method("error")) == ""

    def test_no_returns(self) -> None:
        assert primary_return_type(Method(name="M")) == ""

    def test_method_renderer(self) -> None:
        assert method_renderer(_method("[]*Event", "PaginationMeta", "error")) == RendererHint.TABLE
        assert method_renderer(_method("error")) == RendererHint.SUCCESS


class TestParamShapes:
    @pytest.fixture
    def structs(self) -> dict[str, ParsedStruct]:
        field = [StructField(name="Name", type="string")]
        return {
            name: ParsedStruct(name=name, fields=field)
            for name in ("AppsCreateOpts", "UpdateParams", "Owner", "PaginationOpts")
        }

    def test_pagination_param(self) -> None:
        assert is_pagination_param("PaginationOpts")
        assert is_pagination_param("*scalingo.PaginationOpts")
        assert not is_pagination_param("AppsCreateOpts")

    def test_options_struct_is_expandable(self, structs) -> None:
        assert is_expandable_param("*AppsCreateOpts", structs)
        assert is_expandable_param("UpdateParams", structs)

    def test_non_options_struct_is_not_expandable(self, structs) -> None:
        assert not is_expandable_param("Owner", structs)

    def test_unknown_type_is_not_expandable(self, structs) -> None:
        assert not is_expandable_param("OtherOpts", structs)

    def test_collections_are_not_expandable(self, structs) -> None:
        assert not is_expandable_param("[]AppsCreateOpts", structs)
        assert not is_expandable_param("...AppsCreateOpts", structs)

    def test_pagination_is_not_expandable(self, structs) -> None:
        assert not is_expandable_param("PaginationOpts", structs)
