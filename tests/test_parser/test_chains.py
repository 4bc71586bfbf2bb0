"""Tests for clisync.parser.chains -- chained parameter detection."""

from __future__ import annotations

from pathlib import Path

from clisync.models import Method, Param, Return, Service
from clisync.parser import detect_chains, extract_model


def _method(service: Service, name: str) -> Method:
    return next(m for m in service.methods if m.name == name)


def _apps(sdk_dir: Path) -> Service:
    services, _ = extract_model(sdk_dir)
    detect_chains(services)
    return next(s for s in services if s.name == "AppsService")


class TestDetectChains:
    def test_parameter_matching_sibling_method_is_chained(self, sdk_dir: Path) -> None:
        logs = _method(_apps(sdk_dir), "Logs")
        chained = logs.params[0].chained_from
        assert logs.params[0].name == "logsURL"
        assert chained is not None
        assert chained.method_name == "LogsURL"
        assert [(p.name, p.type) for p in chained.source_params] == [("app", "string")]
        assert chained.has_context is True

    def test_other_parameters_untouched(self, sdk_dir: Path) -> None:
        logs = _method(_apps(sdk_dir), "Logs")
        assert logs.params[1].name == "n"
        assert logs.params[1].chained_from is None

    def test_chain_target_is_hidden(self, sdk_dir: Path) -> None:
        apps = _apps(sdk_dir)
        assert _method(apps, "LogsURL").hidden is True
        assert _method(apps, "Logs").hidden is False
        assert _method(apps, "AppsList").hidden is False

    def test_detection_is_idempotent(self, sdk_dir: Path) -> None:
        services, _ = extract_model(sdk_dir)
        detect_chains(services)
        first = [s.model_dump() for s in services]
        detect_chains(services)
        assert [s.model_dump() for s in services] == first

    def test_method_never_chains_to_itself(self) -> None:
        method = Method(
            name="Token",
            params=[Param(name="token", type="string")],
            returns=[Return(type="string"), Return(type="error", is_error=True)],
        )
        detect_chains([Service(name="AuthService", methods=[method])])
        assert method.params[0].chained_from is None
        assert method.hidden is False

    def test_records_target_context(self) -> None:
        target = Method(name="Region", returns=[Return(type="string")])
        user = Method(name="Deploy", has_context=True, params=[Param(name="region", type="string")])
        detect_chains([Service(name="DeploysService", methods=[target, user])])
        assert user.params[0].chained_from.has_context is False

    def test_target_without_primary_return_is_not_a_source(self) -> None:
        target = Method(name="Ping", returns=[Return(type="error", is_error=True)])
        user = Method(name="Use", params=[Param(name="ping", type="string")])
        detect_chains([Service(name="NetService", methods=[target, user])])
        assert user.params[0].chained_from is None
        assert target.hidden is False

    def test_chains_stay_within_a_service(self) -> None:
        target = Method(name="Region", returns=[Return(type="string")])
        user = Method(name="Deploy", params=[Param(name="region", type="string")])
        detect_chains([
            Service(name="RegionsService", methods=[target]),
            Service(name="DeploysService", methods=[user]),
        ])
        assert user.params[0].chained_from is None

    def test_source_params_drop_nested_chains(self) -> None:
        token = Method(name="Token", returns=[Return(type="string")])
        url = Method(
            name="URL",
            params=[Param(name="token", type="string")],
            returns=[Return(type="string")],
        )
        fetch = Method(name="Fetch", params=[Param(name="url", type="string")])
        detect_chains([Service(name="FilesService", methods=[token, url, fetch])])

        chained = fetch.params[0].chained_from
        assert chained is not None
        assert chained.method_name == "URL"
        assert chained.source_params[0].chained_from is None
        # The target's own parameter is still annotated on the target itself.
        assert url.params[0].chained_from is not None
