"""Name conversions shared by the binding and catalog generators.

Go identifiers are CamelCase (``AppsService``, ``LogsURL``); generated
commands use kebab-case (``apps``, ``logs-url``), generated Python code
uses snake_case identifiers, and generated files are named after both.
"""

from __future__ import annotations

import keyword
import re

# Matches any character that is not alphanumeric or underscore.
_INVALID_IDENT_RE = re.compile(r"[^a-zA-Z0-9_]")


def _split_words(name: str, separator: str) -> str:
    # "AppsCreate" -> "Apps_Create", "LogsURL" -> "Logs_URL", "URLPath" -> "URL_Path"
    result = re.sub(r"([a-z0-9])([A-Z])", rf"\1{separator}\2", name)
    return re.sub(r"([A-Z]+)([A-Z][a-z])", rf"\1{separator}\2", result)


def to_kebab_case(name: str) -> str:
    """Convert a CamelCase or snake_case name to kebab-case.

    Example::

        >>> to_kebab_case("LogsURL")
        'logs-url'
        >>> to_kebab_case("per_page")
        'per-page'
    """
    return _split_words(name, "-").lower().replace("_", "-")


def sanitize_identifier(name: str) -> str:
    """Convert a Go name to a valid Python identifier.

    Applies the following transformations in order:

    1. CamelCase boundaries are split with underscores (``appID`` becomes
       ``app_id``).
    2. The string is lowercased.
    3. Hyphens, dots and other invalid characters become underscores.
    4. Consecutive and leading/trailing underscores are collapsed.
    5. An empty result defaults to ``"value"``.
    6. A leading digit gets an underscore prefix.
    7. Python keywords get a trailing underscore (``type`` is fine,
       ``from`` becomes ``from_``).
    """
    result = _split_words(name, "_").lower()
    result = _INVALID_IDENT_RE.sub("_", result)
    result = re.sub(r"_+", "_", result).strip("_")
    if not result:
        result = "value"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result


def service_group(service_name: str, suffix: str = "Service") -> str:
    """Command group of a service: ``AppsService`` -> ``apps``."""
    base = service_name[: -len(suffix)] if suffix and service_name.endswith(suffix) else service_name
    return to_kebab_case(base or service_name)


def command_use(service_name: str, method_name: str, suffix: str = "Service") -> str:
    """Command name of a method within its group.

    A method name that repeats the service prefix has it stripped
    (``AppsList`` on ``AppsService`` becomes ``list``); a method whose
    name *is* the prefix keeps it.
    """
    prefix = service_name[: -len(suffix)] if suffix and service_name.endswith(suffix) else service_name
    use = method_name
    if prefix and method_name.startswith(prefix) and len(method_name) > len(prefix):
        use = method_name[len(prefix):]
    return to_kebab_case(use)


def command_key(service_name: str, method_name: str, suffix: str = "Service") -> str:
    """Catalog key of a command: ``WidgetsService.List`` -> ``widgets-list``."""
    group = service_group(service_name, suffix)
    return f"{group}-{command_use(service_name, method_name, suffix)}"


def binding_module_name(service_name: str, method_name: str, suffix: str = "Service") -> str:
    """Module name of a generated binding: ``widgets_list``."""
    return sanitize_identifier(command_key(service_name, method_name, suffix).replace("-", "_"))
