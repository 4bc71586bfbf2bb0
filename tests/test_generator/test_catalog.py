"""Tests for clisync.generator.catalog -- the ``spec.toml`` command catalog."""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest

from clisync.exceptions import GenerationError
from clisync.generator import generate_catalog
from clisync.generator.catalog import CATALOG_FILENAME, build_catalog, command_spec
from clisync.models import RendererHint
from clisync.parser import detect_chains, extract_model


@pytest.fixture
def delta(sdk_dir: Path):
    services, _ = extract_model(sdk_dir)
    detect_chains(services)
    return {s.name: s.methods for s in services}


def test_widgets_catalog(widgets_sdk: Path, tmp_path: Path) -> None:
    services, _ = extract_model(widgets_sdk)
    path = generate_catalog({s.name: s.methods for s in services}, tmp_path, "v1.2.0")

    assert path == tmp_path / CATALOG_FILENAME
    with path.open("rb") as fh:
        document = tomllib.load(fh)
    assert document["version"] == 1
    assert document["sdk_version"] == "v1.2.0"
    assert document["commands"] == {
        "widgets-list": {
            "service": "WidgetsService",
            "method": "List",
            "use": "list",
            "flags": [],
            "returns": "[]Widget",
            "renderer": "table",
        }
    }


class TestCommandSpec:
    def test_flags_are_kebab_case_params(self, delta) -> None:
        method = next(m for m in delta["AppsService"] if m.name == "AppsDestroy")
        spec = command_spec("AppsService", method)
        assert spec.flags == ["name", "current-name"]
        assert spec.renderer == RendererHint.SUCCESS
        assert spec.returns == ""

    def test_chained_param_keeps_its_name(self, delta) -> None:
        method = next(m for m in delta["AppsService"] if m.name == "Logs")
        spec = command_spec("AppsService", method)
        assert spec.flags == ["logs-url", "n"]
        assert spec.renderer == RendererHint.PASSTHROUGH

    def test_options_struct_keeps_its_name(self, delta) -> None:
        method = next(m for m in delta["AppsService"] if m.name == "AppsCreate")
        assert command_spec("AppsService", method).flags == ["opts"]

    def test_pagination_param_keeps_its_name(self, delta) -> None:
        method = next(m for m in delta["EventsService"] if m.name == "EventsList")
        assert command_spec("EventsService", method).flags == ["app", "opts"]

    def test_pagination_return(self, delta) -> None:
        method = next(m for m in delta["EventsService"] if m.name == "EventsList")
        spec = command_spec("EventsService", method)
        assert spec.returns == "[]*Event"
        assert spec.use == "list"


def test_hidden_methods_are_left_out(delta) -> None:
    catalog = build_catalog(delta)
    assert "apps-logs-url" not in catalog.commands
    assert "apps-logs" in catalog.commands
    assert list(catalog.commands)[:2] == ["apps-list", "apps-show"]


def test_unwritable_catalog(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(GenerationError):
        generate_catalog({}, blocker / "out")
