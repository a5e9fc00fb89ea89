"""Tests for post-discovery reconciliation."""

import pytest

from conftest import GIG_URI, NODE_URI, VLAN_URI
from discovery.models import DiscoveredEntity, DiscoveryJob, DiscoveryLog, DiscoveryStatus, EntityType
from discovery.reconciler import ResultReconciler, matches_any, short_name


def _job(status=DiscoveryStatus.UNKNOWN):
    return DiscoveryJob(id="42", target_addresses=frozenset({"10.0.0.1"}), credential_ref=7, status=status)


def _log(result=DiscoveryStatus.FINISHED):
    return DiscoveryLog(result=result, description=result.name, error_message="", batch_id="batch-1")


class TestHelpers:
    @pytest.mark.parametrize("caption, expected", [
        ("core1.example.com", "core1"),
        ("core1", "core1"),
        ("", ""),
        ("10.0.0.1", "10.0.0.1"),
    ])
    def test_short_name(self, caption, expected):
        assert short_name(caption) == expected

    def test_matches_any(self):
        assert matches_any("GigabitEthernet0/1", ["gig*"])
        assert matches_any("Vlan1", ["Gi*", "vlan?"])
        assert not matches_any("Vlan1", ["Gi*"])
        assert not matches_any("Vlan1", [])

    def test_entity_node_id(self):
        assert DiscoveredEntity(EntityType.NODE, "a", "N:10").node_id == 10
        assert DiscoveredEntity(EntityType.OTHER, "b", "V:77").node_id is None
        assert DiscoveredEntity(EntityType.NODE, "c", "").node_id is None


class TestFetchLog:
    @pytest.mark.asyncio
    async def test_log_is_keyed_by_profile(self, finished_batch):
        log = await ResultReconciler(finished_batch).fetch_log("42")
        assert log.result is DiscoveryStatus.FINISHED
        assert log.batch_id == "batch-1"
        assert finished_batch.queried("Orion.DiscoveryLogs ")[0][1] == {"profileId": 42}

    @pytest.mark.asyncio
    async def test_missing_log(self, swis):
        assert await ResultReconciler(swis).fetch_log("42") is None


class TestReconcile:
    @pytest.mark.asyncio
    async def test_prunes_unmatched_interfaces(self, finished_batch):
        report = await ResultReconciler(finished_batch).reconcile(_job(), _log(), ["Gig*"])

        assert report.succeeded
        (node,) = report.nodes
        assert node.name == "core1.example.com"
        assert node.node_id == 10
        assert node.address == "10.0.0.1"
        assert [i.display_name for i in node.interfaces] == ["GigabitEthernet0/1"]
        assert finished_batch.deletes == [VLAN_URI]
        assert report.errors == []

    @pytest.mark.asyncio
    async def test_only_node_entities_are_read(self, finished_batch):
        await ResultReconciler(finished_batch).reconcile(_job(), _log(), ["*"])
        assert finished_batch.reads == [NODE_URI]
        assert finished_batch.deletes == []

    @pytest.mark.asyncio
    async def test_no_patterns_keeps_everything(self, finished_batch):
        report = await ResultReconciler(finished_batch).reconcile(_job(), _log())
        assert len(report.nodes[0].interfaces) == 2
        assert finished_batch.deletes == []

    @pytest.mark.asyncio
    async def test_rename_and_custom_properties(self, finished_batch):
        report = await ResultReconciler(finished_batch).reconcile(
            _job(), _log(), ["*"], rename=True, custom_properties={"Site": "DC1"}
        )
        assert report.nodes[0].name == "core1"
        assert finished_batch.updates == [
            (NODE_URI, {"Caption": "core1"}),
            (NODE_URI + "/CustomProperties", {"Site": "DC1"}),
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [s for s in DiscoveryStatus if s is not DiscoveryStatus.FINISHED])
    async def test_unfinished_result_touches_nothing(self, finished_batch, result):
        report = await ResultReconciler(finished_batch).reconcile(_job(), _log(result), ["Gig*"])
        assert report.status is result
        assert not report.succeeded
        assert report.nodes == []
        assert finished_batch.queried("DiscoveryLogItems") == []
        assert finished_batch.reads == finished_batch.updates == finished_batch.deletes == []

    @pytest.mark.asyncio
    async def test_missing_log_is_an_error_report(self, swis):
        report = await ResultReconciler(swis).reconcile(_job(DiscoveryStatus.UNKNOWN), None)
        assert report.nodes == []
        assert report.error_message == "Discovery log not found"
        assert not report.succeeded

    @pytest.mark.asyncio
    async def test_node_failure_is_isolated(self, finished_batch):
        finished_batch.on_query("FROM Orion.DiscoveryLogItems", [
            {"EntityType": "Orion.Nodes", "DisplayName": "broken", "NetObjectID": "N:11"},
            {"EntityType": "Orion.Nodes", "DisplayName": "core1.example.com", "NetObjectID": "N:10"},
        ])
        finished_batch.failing_uris.add("swis://orion.test/Orion/Orion.Nodes/NodeID=11")

        report = await ResultReconciler(finished_batch).reconcile(_job(), _log(), ["Gig*"])

        assert [n.node_id for n in report.nodes] == [10]
        (error,) = report.errors
        assert error["entity"] == "broken"
        assert error["ref"] == "N:11"

    @pytest.mark.asyncio
    async def test_interface_delete_failure_is_isolated(self, finished_batch):
        finished_batch.on_query("FROM Orion.NPM.Interfaces", [
            {"InterfaceID": 1, "Caption": "GigabitEthernet0/1", "Uri": GIG_URI},
            {"InterfaceID": 2, "Caption": "Vlan1", "Uri": VLAN_URI},
            {"InterfaceID": 3, "Caption": "Null0", "Uri": VLAN_URI + "3"},
        ])
        finished_batch.failing_uris.add(VLAN_URI)

        report = await ResultReconciler(finished_batch).reconcile(_job(), _log(), ["Gig*"])

        assert finished_batch.deletes == [VLAN_URI, VLAN_URI + "3"]
        assert [i.display_name for i in report.nodes[0].interfaces] == ["GigabitEthernet0/1"]
        (error,) = report.errors
        assert error["interface"] == "Vlan1"
