"""Tests for clisync.generator.commands.

Generated bindings are checked twice: as source text (constants, flags,
call shape) and by importing the written module and calling ``run`` with
a fake SDK client.
"""

from __future__ import annotations

import ast
import importlib.util
import json
from pathlib import Path
from types import ModuleType
from typing import Any

import pytest
import typer
from typer.testing import CliRunner

from clisync import runtime
from clisync.exceptions import GenerationError
from clisync.generator import generate_commands
from clisync.generator.commands import REGISTRY_SOURCE, render_binding
from clisync.models import Method, Param, Return, Service
from clisync.parser import detect_chains, extract_model


class FakeClient:
    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def _record(self, name: str, args: tuple[Any, ...]) -> None:
        assert isinstance(args[0], runtime.CallContext)
        self.calls.append((name, args[1:]))

    def AppsCreate(self, *args: Any) -> dict[str, Any]:
        self._record("AppsCreate", args)
        return {"id": "app-1", "name": args[1]["name"]}

    def AppsDestroy(self, *args: Any) -> None:
        self._record("AppsDestroy", args)

    def LogsURL(self, *args: Any) -> str:
        self._record("LogsURL", args)
        return f"https://logs/{args[1]}"

    def Logs(self, *args: Any) -> str:
        self._record("Logs", args)
        return f"{args[1]}?n={args[2]}"

    def EventsList(self, *args: Any) -> tuple[list[dict[str, str]], dict[str, int]]:
        self._record("EventsList", args)
        return [{"id": "ev-1", "type": "deploy"}], {"current_page": 1, "total_pages": 3}


@pytest.fixture
def model(sdk_dir: Path):
    services, structs = extract_model(sdk_dir)
    detect_chains(services)
    return {s.name: s.methods for s in services}, structs


@pytest.fixture
def generated(model, tmp_path: Path) -> Path:
    delta, structs = model
    out = tmp_path / "out"
    generate_commands(delta, out, structs)
    return out


@pytest.fixture
def client() -> FakeClient:
    fake = FakeClient()
    runtime.set_client_factory(lambda: fake)
    return fake


def _load(path: Path) -> ModuleType:
    spec = importlib.util.spec_from_file_location(f"binding_{path.stem}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _source(model, service: str, method: str) -> str:
    delta, structs = model
    target = next(m for m in delta[service] if m.name == method)
    return render_binding(service, target, structs)


# ------------------------------------------------------------------ #
# Files
# ------------------------------------------------------------------ #


class TestGenerateCommands:
    def test_one_module_per_visible_method(self, generated: Path) -> None:
        names = sorted(p.name for p in generated.iterdir())
        assert names == [
            "__init__.py",
            "apps_create.py",
            "apps_destroy.py",
            "apps_list.py",
            "apps_logs.py",
            "apps_restart.py",
            "apps_show.py",
            "events_list.py",
            "events_unnamed.py",
        ]

    def test_hidden_chain_target_has_no_binding(self, generated: Path) -> None:
        assert not (generated / "apps_logs_url.py").exists()

    def test_registry_module(self, generated: Path) -> None:
        assert (generated / "__init__.py").read_text() == REGISTRY_SOURCE

    def test_returns_written_paths(self, model, tmp_path: Path) -> None:
        delta, structs = model
        written = generate_commands({"AppsService": delta["AppsService"][:1]}, tmp_path, structs)
        assert written == [tmp_path / "apps_list.py"]

    def test_unwritable_output(self, model, tmp_path: Path) -> None:
        delta, structs = model
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(GenerationError, match="Failed to write"):
            generate_commands(delta, blocker / "out", structs)

    def test_every_binding_is_valid_python(self, generated: Path) -> None:
        for path in generated.glob("*.py"):
            ast.parse(path.read_text(), filename=str(path))


# ------------------------------------------------------------------ #
# Source
# ------------------------------------------------------------------ #


class TestRenderBinding:
    def test_constants(self, model) -> None:
        source = _source(model, "AppsService", "AppsList")
        assert "SERVICE = 'AppsService'" in source
        assert "METHOD = 'AppsList'" in source
        assert "GROUP = 'apps'" in source
        assert "COMMAND = 'list'" in source
        assert "RENDERER = 'table'" in source

    def test_renderer_hints(self, model) -> None:
        assert "RENDERER = 'detail'" in _source(model, "AppsService", "AppsShow")
        assert "RENDERER = 'success'" in _source(model, "AppsService", "AppsDestroy")
        assert "RENDERER = 'passthrough'" in _source(model, "AppsService", "AppsRestart")

    def test_flag_descriptors(self, model) -> None:
        source = _source(model, "AppsService", "AppsCreate")
        assert "runtime.Flag('name', 'str', True)" in source
        assert "runtime.Flag('parent-app', 'str', False)" in source
        assert "runtime.Flag('force', 'bool', False)" in source
        assert "tags" not in source

    def test_chain_call_precedes_method_call(self, model) -> None:
        source = _source(model, "AppsService", "Logs")
        chain = source.index("_logs_url = runtime.call(client, 'LogsURL', app, context=True)")
        call = source.index("return runtime.call(client, METHOD, _logs_url, n, context=True)")
        assert chain < call

    def test_context_free_chain_target(self) -> None:
        target = Method(name="Region", returns=[Return(type="string")])
        deploy = Method(
            name="Deploy",
            has_context=True,
            params=[Param(name="region", type="string")],
            returns=[Return(type="error", is_error=True)],
        )
        detect_chains([Service(name="DeploysService", methods=[target, deploy])])
        source = render_binding("DeploysService", deploy)
        assert "_region = runtime.call(client, 'Region')\n" in source
        assert "runtime.call(client, METHOD, _region, context=True)" in source

    def test_pagination_unpacked(self, model) -> None:
        source = _source(model, "EventsService", "EventsList")
        assert "result, meta = runtime.call(" in source
        assert "runtime.report_pagination(meta)" in source

    def test_output_option_default(self, model) -> None:
        assert "typer.Option('table', \"--output\"" in _source(model, "AppsService", "AppsList")
        assert "typer.Option('detail', \"--output\"" in _source(model, "AppsService", "AppsShow")


# ------------------------------------------------------------------ #
# Execution
# ------------------------------------------------------------------ #


class TestGeneratedRun:
    def test_struct_flags_rebuild_options(self, generated: Path, client: FakeClient) -> None:
        module = _load(generated / "apps_create.py")
        result = module.run(name="web", parent_app=None, stack_id=None, force=False)
        assert result == {"id": "app-1", "name": "web"}
        assert client.calls == [("AppsCreate", ({"name": "web", "force": False},))]

    def test_chained_call(self, generated: Path, client: FakeClient) -> None:
        module = _load(generated / "apps_logs.py")
        assert module.run(app="web", n=10) == "https://logs/web?n=10"
        assert [name for name, _ in client.calls] == ["LogsURL", "Logs"]

    def test_failure_only_method_returns_none(self, generated: Path, client: FakeClient) -> None:
        module = _load(generated / "apps_destroy.py")
        assert module.run(name="web", current_name="web") is None
        assert client.calls == [("AppsDestroy", ("web", "web"))]

    def test_pagination_returns_primary_result(self, generated: Path, client: FakeClient) -> None:
        module = _load(generated / "events_list.py")
        result = module.run(app="web", page=2, per_page=None)
        assert result == [{"id": "ev-1", "type": "deploy"}]
        assert client.calls == [("EventsList", ("web", {"page": 2}))]


class TestGeneratedCommand:
    class JobsClient:
        def JobsRun(self, ctx: runtime.CallContext, run: str) -> dict[str, str]:
            return {"id": "job-1", "run": run}

    def test_flag_named_like_entry_point(self, tmp_path: Path) -> None:
        method = Method(
            name="JobsRun",
            has_context=True,
            params=[Param(name="run", type="string")],
            returns=[Return(type="*Job"), Return(type="error", is_error=True)],
        )
        generate_commands({"JobsService": [method]}, tmp_path)
        module = _load(tmp_path / "jobs_run.py")
        runtime.set_client_factory(self.JobsClient)

        app = typer.Typer()
        app.command()(module.command)
        result = CliRunner().invoke(app, ["--run", "nightly", "-o", "json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"id": "job-1", "run": "nightly"}
