"""Detect parameters whose value comes from calling another method first.

A parameter is *chained* when a sibling method of the same service has the
same name once both are lower-cased, e.g. the ``logsURL`` parameter of
``Logs`` and the ``LogsURL(ctx, app)`` accessor. The binding for ``Logs``
then asks for ``--app``, calls ``LogsURL`` itself, and passes the result
on. The accessor is marked hidden: it stays callable but gets no command
of its own.

Chains are one hop long. The recorded source parameters are plain copies
of the target's parameters with any chain annotation dropped, so a target
whose own parameters would chain further is called with them as plain
inputs.
"""

from __future__ import annotations

from typing import Optional

from clisync.models import ChainedParam, Conventions, Method, Param, Service
from clisync.output import debug
from clisync.parser.shapes import primary_return_type


def detect_chains(
    services: list[Service],
    conventions: Optional[Conventions] = None,
) -> list[Service]:
    """Annotate chained parameters and hide chain targets, in place.

    All matches are computed against the model as given before any
    annotation is applied, so running detection again on its own output
    yields the same assignments.

    Returns:
        The same *services* list, for chaining calls.
    """
    for service in services:
        by_name = {method.name.lower(): method for method in service.methods}
        assignments: list[tuple[Param, Method]] = []

        for method in service.methods:
            for param in method.params:
                target = by_name.get(param.name.lower())
                if target is None or target is method:
                    continue
                if not primary_return_type(target, conventions):
                    continue
                assignments.append((param, target))

        for param, target in assignments:
            param.chained_from = ChainedParam(
                method_name=target.name,
                has_context=target.has_context,
                source_params=[
                    Param(name=p.name, type=p.type) for p in target.params
                ],
            )
            target.hidden = True
            debug(f"{service.name}: parameter {param.name} chained from {target.name}")

    return services
