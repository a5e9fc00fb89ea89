"""Shared fixtures: an in-memory stand-in for the SWIS client.

The fake records every call so tests can assert exactly which remote
operations a component issued, and serves canned rows keyed by a
distinctive fragment of the SWQL text.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from swis.client import SwisError
from swis.models import SwisConnection


class FakeSwisClient:
    """Records calls and replays scripted responses."""

    def __init__(self, server: str = "orion.test"):
        self.connection = SwisConnection(server=server, session=MagicMock())
        self.responses: dict[str, list[Any]] = {}
        self.invoke_results: dict[tuple[str, str], Any] = {}
        self.entities: dict[str, Any] = {}
        self.failing_uris: set[str] = set()

        self.queries: list[tuple[str, dict]] = []
        self.invocations: list[tuple[str, str, tuple]] = []
        self.reads: list[str] = []
        self.updates: list[tuple[str, dict]] = []
        self.deletes: list[str] = []

    def on_query(self, fragment: str, *responses: Any) -> None:
        """Script successive results for queries containing ``fragment``.

        The last response repeats once the others are used up.
        """
        self.responses[fragment] = list(responses)

    async def query(self, query: str, **parameters: Any) -> list[dict]:
        self.queries.append((query, parameters))
        for fragment, responses in self.responses.items():
            if fragment in query:
                result = responses.pop(0) if len(responses) > 1 else responses[0]
                if isinstance(result, Exception):
                    raise result
                return result
        return []

    async def invoke(self, entity: str, verb: str, *args: Any) -> Any:
        self.invocations.append((entity, verb, args))
        result = self.invoke_results.get((entity, verb))
        if isinstance(result, Exception):
            raise result
        return result

    async def read(self, uri: str) -> dict:
        self.reads.append(uri)
        if uri in self.failing_uris:
            raise SwisError(500, f"Unable to read {uri}", uri)
        return self.entities[uri]

    async def update(self, uri: str, **properties: Any) -> None:
        self.updates.append((uri, properties))
        if uri in self.failing_uris:
            raise SwisError(500, f"Unable to update {uri}", uri)

    async def delete(self, uri: str) -> None:
        self.deletes.append(uri)
        if uri in self.failing_uris:
            raise SwisError(500, f"Unable to delete {uri}", uri)

    def queried(self, fragment: str) -> list[tuple[str, dict]]:
        return [q for q in self.queries if fragment in q[0]]


@pytest.fixture
def swis() -> FakeSwisClient:
    return FakeSwisClient()


NODE_URI = "swis://orion.test/Orion/Orion.Nodes/NodeID=10"
GIG_URI = "swis://orion.test/Orion/Orion.Nodes/NodeID=10/Interfaces/InterfaceID=1"
VLAN_URI = "swis://orion.test/Orion/Orion.Nodes/NodeID=10/Interfaces/InterfaceID=2"


@pytest.fixture
def finished_batch(swis: FakeSwisClient) -> FakeSwisClient:
    """A finished discovery with one node carrying two interfaces."""
    swis.on_query("FROM Orion.DiscoveryLogs ", [{
        "Result": 2,
        "ResultDescription": "Finished",
        "ErrorMessage": "",
        "BatchID": "batch-1",
    }])
    swis.on_query("FROM Orion.DiscoveryLogItems", [
        {"EntityType": "Orion.Nodes", "DisplayName": "core1.example.com", "NetObjectID": "N:10"},
        {"EntityType": "Orion.Volumes", "DisplayName": "C:\\", "NetObjectID": "V:77"},
    ])
    swis.on_query("FROM Orion.NPM.Interfaces", [
        {"InterfaceID": 1, "Caption": "GigabitEthernet0/1", "Uri": GIG_URI},
        {"InterfaceID": 2, "Caption": "Vlan1", "Uri": VLAN_URI},
    ])
    swis.entities[NODE_URI] = {"Caption": "core1.example.com", "IPAddress": "10.0.0.1"}
    return swis
