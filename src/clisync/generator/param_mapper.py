"""Map method parameters to CLI flags and call arguments.

This module decides, for every parameter of a method, which flags the
generated command exposes and how the call argument is rebuilt from them.
:func:`plan_arguments` returns both the flat flag list and one
:class:`ArgumentPlan` per parameter; :mod:`~clisync.generator.commands`
turns those into source code.

**Mapping rules:**

* **Chained parameters** get no flag of their own. The binding calls the
  chain target with the target's parameters (mapped with these same rules)
  and passes the result on.
* **Pagination options** (``PaginationOpts``) become ``--page`` and
  ``--per-page``.
* **Options/params structs** (``*AppsCreateOpts``, ``UpdateParams``) are
  expanded into one flag per exported, non-complex field. Nested structs,
  slices, maps and pointers to structs are skipped.
* **Everything else** becomes one flag named after the parameter. Struct,
  map and slice values other than ``[]string`` are passed as JSON text.

**Go types** map to ``int``, ``float``, ``bool``, ``list[str]`` for
``[]string``, and ``str`` for anything else.

Flag names are the kebab-cased parameter or field name. When two
parameters produce the same flag, the later one is prefixed with its
parameter name (``--opts-name``), or numbered when that adds nothing
(``--job``, ``--job-2``). Names the generated module itself uses, such
as ``run``, keep their flag but get a trailing underscore on the variable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from clisync.generator.naming import sanitize_identifier, to_kebab_case
from clisync.models import Conventions, FlagSpec, Method, Param, ParsedStruct
from clisync.parser.extractor import base_type_name
from clisync.parser.shapes import is_expandable_param, is_pagination_param


# ---------------------------------------------------------------------------
# Type mapping
# ---------------------------------------------------------------------------

_INT_TYPES = frozenset({
    "int", "int8", "int16", "int32", "int64",
    "uint", "uint8", "uint16", "uint32", "uint64", "byte", "rune",
})
_FLOAT_TYPES = frozenset({"float32", "float64"})

# Flag names and variables used by every generated command.
_RESERVED_FLAGS = frozenset({"output", "help"})
_RESERVED_VARS = frozenset({
    "output", "client", "result", "meta", "runtime", "typer", "run", "command",
    "renderer", "output_format",
})


def go_type_to_python(go_type: str) -> str:
    """Map a Go type string to the flag type name.

    Example::

        >>> go_type_to_python("*int64")
        'int'
        >>> go_type_to_python("[]string")
        'list[str]'
        >>> go_type_to_python("map[string]string")
        'str'
    """
    type_str = go_type.lstrip("*")
    if type_str in _INT_TYPES:
        return "int"
    if type_str in _FLOAT_TYPES:
        return "float"
    if type_str == "bool":
        return "bool"
    if type_str in ("[]string", "...string"):
        return "list[str]"
    return "str"


def needs_json(go_type: str, structs: dict[str, ParsedStruct]) -> bool:
    """Return True if a ``str`` flag of *go_type* must be decoded as JSON."""
    if go_type_to_python(go_type) != "str":
        return False
    if go_type.startswith(("[]", "...", "map[")) or go_type == "interface{}":
        return True
    return base_type_name(go_type) in structs


def is_complex_field(go_type: str, structs: dict[str, ParsedStruct]) -> bool:
    """Return True for nested struct, slice, map and pointer-to-struct fields."""
    if go_type.startswith(("[]", "map[")) or go_type == "interface{}":
        return True
    return base_type_name(go_type) in structs


# ---------------------------------------------------------------------------
# Argument plans
# ---------------------------------------------------------------------------


@dataclass
class ArgumentPlan:
    """How one call argument is built from flag values.

    ``kind`` is one of:

    * ``"flag"`` -- the value of ``flags[0]`` as is.
    * ``"json"`` -- ``flags[0]`` decoded from JSON.
    * ``"struct"`` -- a mapping of every flag's ``field`` to its value.
    * ``"chained"`` -- the result of calling ``chain_method`` with
      ``chain_args``.
    """

    param: Param
    kind: str
    flags: list[FlagSpec] = field(default_factory=list)
    chain_method: Optional[str] = None
    chain_args: list["ArgumentPlan"] = field(default_factory=list)


class _FlagSet:
    """Ordered flags with unique names and variables."""

    def __init__(self) -> None:
        self.flags: list[FlagSpec] = []
        self._names: dict[str, FlagSpec] = {}
        self._vars: set[str] = set()
        self._chained: set[str] = set()

    def add(self, flag: FlagSpec, owner: str, via_chain: bool = False) -> FlagSpec:
        """Add *flag*, renaming it on collision.

        A plain parameter requested through a chain target is merged with
        an existing flag of the same name and type. Two parameters of the
        method itself always get separate flags.
        """
        existing = self._names.get(flag.name)
        if (
            existing is not None
            and (via_chain or existing.name in self._chained)
            and existing.field is None
            and flag.field is None
            and existing.target == flag.target
            and existing.go_type == flag.go_type
        ):
            if via_chain:
                self._chained.add(existing.name)
            return existing

        name, var = flag.name, flag.var
        taken = name in self._names or var in self._vars
        if name in _RESERVED_FLAGS or (taken and to_kebab_case(owner) != flag.name):
            name = f"{to_kebab_case(owner)}-{flag.name}"
            var = sanitize_identifier(f"{owner}_{flag.var}")
        if var in _RESERVED_VARS:
            var = f"{var}_"
        base_name, base_var, counter = name, var, 2
        while name in self._names or name in _RESERVED_FLAGS or var in self._vars:
            name, var = f"{base_name}-{counter}", f"{base_var}_{counter}"
            counter += 1

        flag = flag.model_copy(update={"name": name, "var": var})
        self.flags.append(flag)
        self._names[name] = flag
        self._vars.add(var)
        if via_chain:
            self._chained.add(name)
        return flag


def plan_arguments(
    method: Method,
    structs: Optional[dict[str, ParsedStruct]] = None,
    conventions: Optional[Conventions] = None,
) -> tuple[list[FlagSpec], list[ArgumentPlan]]:
    """Plan the flags and call arguments of *method*.

    Returns:
        ``(flags, plans)`` where *flags* is the de-duplicated flag list of
        the command and *plans* has one entry per method parameter, in
        order.
    """
    structs = structs or {}
    conv = conventions or Conventions()
    flag_set = _FlagSet()
    plans = [_plan_param(param, structs, conv, flag_set) for param in method.params]
    return flag_set.flags, plans


def _plan_param(
    param: Param,
    structs: dict[str, ParsedStruct],
    conventions: Conventions,
    flag_set: _FlagSet,
    via_chain: bool = False,
) -> ArgumentPlan:
    if param.chained_from is not None:
        chain_args = [
            _plan_param(source, structs, conventions, flag_set, via_chain=True)
            for source in param.chained_from.source_params
        ]
        return ArgumentPlan(
            param=param,
            kind="chained",
            chain_method=param.chained_from.method_name,
            chain_args=chain_args,
        )

    if is_pagination_param(param.type, conventions):
        flags = [
            flag_set.add(_pagination_flag(param, "page", "Page number"), param.name, via_chain),
            flag_set.add(
                _pagination_flag(param, "per_page", "Items per page"), param.name, via_chain
            ),
        ]
        return ArgumentPlan(param=param, kind="struct", flags=flags)

    if is_expandable_param(param.type, structs, conventions):
        struct = structs[base_type_name(param.type)]
        flags = []
        for struct_field in struct.fields:
            if struct_field.json_tag == "-" or is_complex_field(struct_field.type, structs):
                continue
            flag = _field_flag(param, struct.name, struct_field)
            flags.append(flag_set.add(flag, param.name, via_chain))
        return ArgumentPlan(param=param, kind="struct", flags=flags)

    py_type = go_type_to_python(param.type)
    flag = FlagSpec(
        name=to_kebab_case(param.name),
        var=sanitize_identifier(param.name),
        type=py_type,
        go_type=param.type,
        required=py_type != "bool",
        help=f"{param.name} ({param.type})",
        target=param.name,
    )
    flag = flag_set.add(flag, param.name, via_chain)
    kind = "json" if needs_json(param.type, structs) else "flag"
    return ArgumentPlan(param=param, kind=kind, flags=[flag])


def _pagination_flag(param: Param, key: str, help_text: str) -> FlagSpec:
    return FlagSpec(
        name=to_kebab_case(key),
        var=key,
        type="int",
        go_type="int",
        required=False,
        help=help_text,
        target=param.name,
        field=key,
    )


def _field_flag(param: Param, struct_name: str, struct_field) -> FlagSpec:
    py_type = go_type_to_python(struct_field.type)
    required = not (
        struct_field.optional or py_type == "bool" or struct_field.type.startswith("*")
    )
    return FlagSpec(
        name=to_kebab_case(struct_field.name),
        var=sanitize_identifier(struct_field.name),
        type=py_type,
        go_type=struct_field.type,
        required=required,
        help=f"{struct_name}.{struct_field.name} ({struct_field.type})",
        target=param.name,
        field=struct_field.json_tag or struct_field.name,
    )
