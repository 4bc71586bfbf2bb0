"""Emit one executable Typer binding per new SDK method.

Each binding is a standalone Python module in the output directory, named
``<group>_<command>.py``. It exposes:

* ``SERVICE``, ``METHOD``, ``GROUP``, ``COMMAND``, ``RENDERER``, ``HELP``
  -- identification and the renderer hint chosen from the return shape;
* ``FLAGS`` -- ``runtime.Flag(name, type, required)`` per CLI flag;
* ``run(**inputs)`` -- calls the SDK through :mod:`clisync.runtime` and
  returns the primary result (or raises);
* ``command(...)`` -- the Typer callback, which hands ``run`` and the flag
  values to :func:`clisync.runtime.execute`.

The package ``__init__.py`` mounts every binding with
``register_all(app)``.

Source is assembled line by line rather than from templates: everything
that varies is decided by :mod:`~clisync.generator.param_mapper` and
:mod:`~clisync.parser.shapes` before any text is produced.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from clisync.config import atomic_write
from clisync.exceptions import GenerationError
from clisync.generator.naming import (
    binding_module_name,
    command_use,
    sanitize_identifier,
    service_group,
)
from clisync.generator.param_mapper import ArgumentPlan, plan_arguments
from clisync.models import Conventions, FlagSpec, Method, ParsedStruct, RendererHint
from clisync.output import debug
from clisync.parser.extractor import base_type_name
from clisync.parser.shapes import method_renderer

REGISTRY_SOURCE = '''"""Generated command registry.

Do not edit: regenerate with ``clisync generate``.
"""

import typer

from clisync import runtime


def register_all(app: typer.Typer) -> int:
    """Mount every binding module of this package on *app*."""
    return runtime.register_package(app, __name__)
'''

_ANNOTATIONS = {
    "str": "str",
    "int": "int",
    "float": "float",
    "bool": "bool",
    "list[str]": "List[str]",
}


def generate_commands(
    delta: dict[str, list[Method]],
    output_dir: str | Path,
    structs: Optional[dict[str, ParsedStruct]] = None,
    conventions: Optional[Conventions] = None,
) -> list[Path]:
    """Write one binding per visible method of *delta* plus the registry.

    Hidden methods (chain targets) are skipped.

    Returns:
        Paths of the bindings written, in delta order.

    Raises:
        GenerationError: On the first file that cannot be written.
    """
    out = Path(output_dir)
    written: list[Path] = []
    for service_name, methods in delta.items():
        for method in methods:
            if method.hidden:
                debug(f"Skipping hidden method {service_name}.{method.name}")
                continue
            module = binding_module_name(service_name, method.name, _suffix(conventions))
            path = out / f"{module}.py"
            _write(path, render_binding(service_name, method, structs, conventions))
            debug(f"Wrote {path}")
            written.append(path)

    _write(out / "__init__.py", REGISTRY_SOURCE)
    return written


def render_binding(
    service_name: str,
    method: Method,
    structs: Optional[dict[str, ParsedStruct]] = None,
    conventions: Optional[Conventions] = None,
) -> str:
    """Return the Python source of the binding for *method*."""
    conv = conventions or Conventions()
    flags, plans = plan_arguments(method, structs, conv)
    renderer = method_renderer(method, conv)
    help_text = f"Call {service_name}.{method.name}."

    lines = [
        f'"""Generated binding for {service_name}.{method.name}.',
        "",
        "Do not edit: regenerate with ``clisync generate``.",
        '"""',
        "",
        "from typing import List, Optional",
        "",
        "import typer",
        "",
        "from clisync import runtime",
        "",
        f"SERVICE = {service_name!r}",
        f"METHOD = {method.name!r}",
        f"GROUP = {service_group(service_name, conv.service_suffix)!r}",
        f"COMMAND = {command_use(service_name, method.name, conv.service_suffix)!r}",
        f"RENDERER = {renderer.value!r}",
        f"HELP = {help_text!r}",
        "FLAGS = [",
    ]
    lines.extend(f"    runtime.Flag({f.name!r}, {f.type!r}, {f.required!r})," for f in flags)
    lines.append("]")
    lines.extend(["", ""])
    lines.extend(_run_function(method, flags, plans, conv))
    lines.extend(["", ""])
    lines.extend(_command_function(flags, renderer, help_text))
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------


def _run_function(
    method: Method,
    flags: list[FlagSpec],
    plans: list[ArgumentPlan],
    conventions: Conventions,
) -> list[str]:
    if flags:
        params = ", ".join(_run_param(f) for f in flags)
        signature = f"def run(*, {params}) -> object:"
    else:
        signature = "def run() -> object:"

    body = [
        f'    """Call {method.name} and return its primary result."""',
        "    client = runtime.new_client()",
    ]
    args = [_argument_expr(plan, body) for plan in plans]
    call = _call_expr("METHOD", args, method.has_context)

    non_error = [r for r in method.returns if not r.is_error]
    if not non_error:
        body.append(f"    {call}")
        body.append("    return None")
    elif len(non_error) == 1:
        body.append(f"    return {call}")
    else:
        targets = []
        result_taken = False
        for ret in non_error:
            if base_type_name(ret.type) == conventions.pagination_meta_type:
                targets.append("meta")
            elif not result_taken:
                targets.append("result")
                result_taken = True
            else:
                targets.append("_")
        body.append(f"    {', '.join(targets)} = {call}")
        if "meta" in targets:
            body.append("    runtime.report_pagination(meta)")
        body.append("    return result" if result_taken else "    return None")
    return [signature] + body


def _run_param(flag: FlagSpec) -> str:
    annotation = _ANNOTATIONS.get(flag.type, "str")
    if flag.required:
        return f"{flag.var}: {annotation}"
    if flag.type == "bool":
        return f"{flag.var}: bool = False"
    return f"{flag.var}: Optional[{annotation}] = None"


def _argument_expr(plan: ArgumentPlan, body: list[str]) -> str:
    if plan.kind == "chained":
        chain_args = [_argument_expr(arg, body) for arg in plan.chain_args]
        var = "_" + sanitize_identifier(plan.param.name)
        context = plan.param.chained_from.has_context
        body.append(f"    {var} = {_call_expr(repr(plan.chain_method), chain_args, context)}")
        return var
    if plan.kind == "struct":
        items = ", ".join(f"{f.field!r}: {f.var}" for f in plan.flags)
        return f"runtime.build_struct({{{items}}})"
    flag = plan.flags[0]
    if plan.kind == "json":
        return f"runtime.parse_json({flag.var}, {flag.name!r})"
    return flag.var


def _call_expr(method_expr: str, args: list[str], has_context: bool) -> str:
    parts = ["client", method_expr] + args
    if has_context:
        parts.append("context=True")
    return f"runtime.call({', '.join(parts)})"


# ---------------------------------------------------------------------------
# command()
# ---------------------------------------------------------------------------


def _command_function(flags: list[FlagSpec], renderer: RendererHint, help_text: str) -> list[str]:
    default_output = "table" if renderer == RendererHint.TABLE else "detail"
    lines = ["def command("]
    for flag in flags:
        lines.append(f"    {_option_param(flag)},")
    lines.append(
        f'    output: str = typer.Option({default_output!r}, "--output", "-o", '
        f'help="Output format: table, detail or json."),'
    )
    lines.append(") -> None:")
    lines.append(f'    """{help_text}"""')
    kwargs = "".join(f", {f.var}={f.var}" for f in flags)
    lines.append(f"    runtime.execute(run, RENDERER, output{kwargs})")
    return lines


def _option_param(flag: FlagSpec) -> str:
    annotation = _ANNOTATIONS.get(flag.type, "str")
    option = f"--{flag.name}"
    if flag.required:
        return f"{flag.var}: {annotation} = typer.Option(..., {option!r}, help={flag.help!r})"
    if flag.type == "bool":
        return f"{flag.var}: bool = typer.Option(False, {option!r}, help={flag.help!r})"
    return f"{flag.var}: Optional[{annotation}] = typer.Option(None, {option!r}, help={flag.help!r})"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _suffix(conventions: Optional[Conventions]) -> str:
    return (conventions or Conventions()).service_suffix


def _write(path: Path, source: str) -> None:
    try:
        atomic_write(path, source)
    except OSError as exc:
        raise GenerationError(f"Failed to write {path}: {exc}") from exc
