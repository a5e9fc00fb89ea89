"""Tests for discovery job submission."""

import pytest

from discovery.models import CredentialNotFoundError, DiscoveryStatus
from discovery.submitter import (
    DiscoveryJobSubmitter,
    build_core_plugin_context,
    build_interfaces_plugin_context,
    build_job_configuration,
    resolve_credential,
)
from swis.client import SwisError


@pytest.fixture
def scripted(swis):
    swis.on_query("FROM Orion.Credential", [{"ID": 7}])
    swis.invoke_results[("Orion.Discovery", "CreateCorePluginConfiguration")] = "<core/>"
    swis.invoke_results[("Orion.NPM.Interfaces", "CreateInterfacesPluginConfiguration")] = "<interfaces/>"
    swis.invoke_results[("Orion.Discovery", "StartDiscovery")] = 42
    return swis


class TestResolveCredential:
    @pytest.mark.asyncio
    async def test_numeric_id_passes_through(self, swis):
        assert await resolve_credential(swis, 12) == 12
        assert swis.queries == []

    @pytest.mark.asyncio
    async def test_name_lookup(self, scripted):
        assert await resolve_credential(scripted, "snmp-ro") == 7
        (query, params), = scripted.queries
        assert "Orion.Credential" in query
        assert params == {"name": "snmp-ro"}

    @pytest.mark.asyncio
    async def test_unknown_name(self, swis):
        with pytest.raises(CredentialNotFoundError, match="snmp-rw"):
            await resolve_credential(swis, "snmp-rw")


class TestPayloads:
    def test_core_context(self):
        context = build_core_plugin_context({"10.0.0.2", "10.0.0.1"}, 7, {"wmi_retries": 3})
        dumped = context.model_dump()
        assert dumped["BulkList"] == [{"Address": "10.0.0.1"}, {"Address": "10.0.0.2"}]
        assert dumped["Credentials"] == [{"CredentialID": 7, "Order": 1}]
        assert dumped["WmiRetriesCount"] == 3

    def test_interfaces_context_defaults(self):
        dumped = build_interfaces_plugin_context({}).model_dump()
        assert dumped["AutoImportStatus"] == ["Up", "Down", "Shutdown"]
        assert dumped["AutoImportExpressionFilter"] == []

    def test_job_configuration(self):
        configuration = build_job_configuration(
            "job", ["<core/>", "<interfaces/>"], {"engine_id": 3, "delete_profile_after_discovery": True}
        ).model_dump()
        assert configuration["Name"] == "job"
        assert configuration["EngineId"] == 3
        assert configuration["JobTimeoutSeconds"] == 3600
        assert configuration["IsAutoImport"] is True
        assert configuration["IsHidden"] is True
        assert configuration["PluginConfigurations"] == [
            {"PluginConfigurationItem": "<core/>"},
            {"PluginConfigurationItem": "<interfaces/>"},
        ]


class TestSubmit:
    @pytest.mark.asyncio
    async def test_submit(self, scripted):
        submitter = DiscoveryJobSubmitter(scripted, {"engine_id": 2})
        job = await submitter.submit(["10.0.0.1", " 10.0.0.2 "], "snmp-ro", name="provision")

        assert job.id == "42"
        assert job.target_addresses == frozenset({"10.0.0.1", "10.0.0.2"})
        assert job.credential_ref == 7
        assert job.name == "provision"
        assert job.status is DiscoveryStatus.IN_PROGRESS

        verbs = [(entity, verb) for entity, verb, _ in scripted.invocations]
        assert verbs == [
            ("Orion.Discovery", "CreateCorePluginConfiguration"),
            ("Orion.NPM.Interfaces", "CreateInterfacesPluginConfiguration"),
            ("Orion.Discovery", "StartDiscovery"),
        ]
        (start_args,) = scripted.invocations[-1][2]
        assert start_args["EngineId"] == 2
        assert [p["PluginConfigurationItem"] for p in start_args["PluginConfigurations"]] == [
            "<core/>", "<interfaces/>"
        ]

    @pytest.mark.asyncio
    async def test_empty_targets(self, scripted):
        with pytest.raises(ValueError, match="target address"):
            await DiscoveryJobSubmitter(scripted).submit(["", "  "], 7)
        assert scripted.invocations == []

    @pytest.mark.asyncio
    async def test_unknown_credential_stops_before_invoking(self, swis):
        with pytest.raises(CredentialNotFoundError):
            await DiscoveryJobSubmitter(swis).submit(["10.0.0.1"], "missing")
        assert swis.invocations == []

    @pytest.mark.asyncio
    async def test_submission_failure_is_not_retried(self, scripted):
        scripted.invoke_results[("Orion.Discovery", "StartDiscovery")] = SwisError(400, "Invalid engine")
        with pytest.raises(SwisError, match="Invalid engine"):
            await DiscoveryJobSubmitter(scripted).submit(["10.0.0.1"], 7)
        starts = [i for i in scripted.invocations if i[1] == "StartDiscovery"]
        assert len(starts) == 1
