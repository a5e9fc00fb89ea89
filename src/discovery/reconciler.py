"""
Post-discovery reconciliation: read the discovery log, annotate nodes, prune interfaces
"""

import fnmatch
import ipaddress
import logging
from typing import Any, Dict, List, Optional, Sequence

from swis.client import SwisClient
from .models import (
    DiscoveredEntity,
    DiscoveryJob,
    DiscoveryLog,
    DiscoveryReport,
    DiscoveryStatus,
    EntityType,
    ManagedInterface,
    NodeReport,
)
from .poller import profile_id

logger = logging.getLogger(__name__)

LOG_QUERY = (
    "SELECT TOP 1 Result, ResultDescription, ErrorMessage, BatchID "
    "FROM Orion.DiscoveryLogs WHERE ProfileID = @profileId ORDER BY FinishedTimeStamp DESC"
)
LOG_ITEMS_QUERY = (
    "SELECT EntityType, DisplayName, NetObjectID "
    "FROM Orion.DiscoveryLogItems WHERE BatchID = @batchId"
)
INTERFACES_QUERY = "SELECT InterfaceID, Caption, Uri FROM Orion.NPM.Interfaces WHERE NodeID = @nodeId"

NODE_ENTITY = "Orion.Nodes"

def short_name(caption: str) -> str:
    """Host part of a caption: everything before the first domain separator"""
    try:
        ipaddress.ip_address(caption)
        return caption
    except ValueError:
        return caption.split(".", 1)[0]

def matches_any(name: str, patterns: Sequence[str]) -> bool:
    """Case-insensitive ``*`` wildcard match against any pattern"""
    lowered = name.lower()
    return any(fnmatch.fnmatchcase(lowered, pattern.lower()) for pattern in patterns)

class ResultReconciler:
    """Turns a terminal discovery job into a DiscoveryReport"""

    def __init__(self, client: SwisClient):
        self.client = client

    async def fetch_log(self, job_id: str) -> Optional[DiscoveryLog]:
        rows = await self.client.query(LOG_QUERY, profileId=profile_id(job_id))
        if not rows:
            return None
        row = rows[0]
        return DiscoveryLog(
            result=DiscoveryStatus.from_code(row.get("Result")),
            description=row.get("ResultDescription") or "",
            error_message=row.get("ErrorMessage") or "",
            batch_id=row.get("BatchID"),
        )

    async def fetch_entities(self, batch_id: str) -> List[DiscoveredEntity]:
        rows = await self.client.query(LOG_ITEMS_QUERY, batchId=batch_id)
        entities = []
        for row in rows:
            entity_type = EntityType.NODE if row.get("EntityType") == NODE_ENTITY else EntityType.OTHER
            entities.append(DiscoveredEntity(
                type=entity_type,
                display_name=row.get("DisplayName") or "",
                external_ref=row.get("NetObjectID") or "",
            ))
        return entities

    async def fetch_interfaces(self, node_id: int) -> List[ManagedInterface]:
        rows = await self.client.query(INTERFACES_QUERY, nodeId=node_id)
        return [ManagedInterface(display_name=row.get("Caption") or "", ref=row["Uri"]) for row in rows]

    async def reconcile(self, job: DiscoveryJob, log: Optional[DiscoveryLog],
                        include_interfaces: Optional[Sequence[str]] = None,
                        rename: bool = False,
                        custom_properties: Optional[Dict[str, Any]] = None) -> DiscoveryReport:
        """
        Build the report for a terminal job.

        Only a FINISHED log result goes on to touch entities. Interfaces whose
        caption matches none of ``include_interfaces`` are deleted from the
        inventory; with no patterns every interface is kept. A failure on one
        node or one interface is recorded in ``report.errors`` and the batch
        carries on.
        """
        if log is None:
            logger.error(f"No discovery log found for job {job.id}")
            return DiscoveryReport(job.id, job.status, error_message="Discovery log not found")

        report = DiscoveryReport(job.id, log.result, log.description, log.error_message)

        if log.result is not DiscoveryStatus.FINISHED:
            logger.warning(f"Discovery {job.id} ended with {log.result.name}: "
                           f"{log.description} {log.error_message}".rstrip())
            return report

        entities = await self.fetch_entities(log.batch_id)
        nodes = [e for e in entities if e.type is EntityType.NODE]
        logger.info(f"Discovery {job.id} batch {log.batch_id}: {len(entities)} entities, {len(nodes)} nodes")

        for entity in nodes:
            try:
                node_report = await self._reconcile_node(
                    entity, include_interfaces or [], rename, custom_properties, report
                )
                report.nodes.append(node_report)
            except Exception as e:
                logger.error(f"Reconciliation failed for {entity.display_name} ({entity.external_ref}): {e}")
                report.errors.append({
                    "entity": entity.display_name,
                    "ref": entity.external_ref,
                    "error": str(e),
                })

        return report

    async def _reconcile_node(self, entity: DiscoveredEntity, patterns: Sequence[str],
                              rename: bool, custom_properties: Optional[Dict[str, Any]],
                              report: DiscoveryReport) -> NodeReport:
        node_id = entity.node_id
        if node_id is None:
            raise ValueError(f"Unrecognised node reference '{entity.external_ref}'")

        uri = self.client.connection.entity_uri(NODE_ENTITY, NodeID=node_id)
        node = await self.client.read(uri)

        caption = node.get("Caption") or entity.display_name
        name = caption
        if rename:
            name = short_name(caption)
            if name != caption:
                await self.client.update(uri, Caption=name)
                logger.info(f"Renamed node {node_id}: {caption} -> {name}")

        if custom_properties:
            await self.client.update(f"{uri}/CustomProperties", **custom_properties)
            logger.debug(f"Set custom properties on node {node_id}: {custom_properties}")

        kept = []
        for interface in await self.fetch_interfaces(node_id):
            if not patterns or matches_any(interface.display_name, patterns):
                kept.append(interface)
                continue
            try:
                await self.client.delete(interface.ref)
                logger.info(f"Removed interface '{interface.display_name}' from {name}")
            except Exception as e:
                logger.error(f"Failed to remove interface '{interface.display_name}' from {name}: {e}")
                report.errors.append({
                    "entity": name,
                    "interface": interface.display_name,
                    "ref": interface.ref,
                    "error": str(e),
                })

        return NodeReport(
            name=name,
            node_id=node_id,
            address=node.get("IPAddress") or "",
            uri=uri,
            interfaces=kept,
        )
