"""
Inventory Service - wires configuration, SWIS session and the query/discovery components
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

# Local imports
from config_loader import load_config, setup_logging, get_swis_ssl_config
from http_helper import create_swis_session
from swis.client import SwisClient
from swis.models import SwisConnection
from query.filters import (
    EventFilter,
    NodeFilter,
    SyslogFilter,
    compile_event_query,
    compile_node_query,
    compile_syslog_query,
)
from discovery.manager import NodeDiscovery
from discovery.models import DiscoveryReport

logger = logging.getLogger(__name__)

class InventoryService:
    """Entry point for read queries and node provisioning against one Orion server"""

    def __init__(self, config_path: str = "config/config.yaml", config: Optional[Dict] = None):
        self.config = config if config is not None else load_config(config_path)
        setup_logging(self.config)

        self.session = None
        self.client: Optional[SwisClient] = None
        self.discovery: Optional[NodeDiscovery] = None

    async def start(self):
        """Open the authenticated session and build the components"""
        if self.session is not None and not self.session.closed:
            logger.debug("SWIS session already open")
            return

        swis = self.config['swis']
        ssl_config = get_swis_ssl_config(self.config)

        logger.info(f"Connecting to SWIS at {swis['server']}:{swis['port']} as {swis['username']}")

        self.session = create_swis_session(
            swis['username'],
            swis['password'],
            timeout_seconds=ssl_config['timeout_seconds'],
            ssl_verify=ssl_config['ssl_verify'],
            ca_cert_path=ssl_config['ca_cert_path'],
        )
        connection = SwisConnection(server=swis['server'], session=self.session, port=swis['port'])
        self.client = SwisClient(connection)
        self.discovery = NodeDiscovery(self.client, self.config)

    async def stop(self):
        if self.session is not None and not self.session.closed:
            await self.session.close()
        self.session = None
        self.client = None
        self.discovery = None
        logger.info("SWIS session closed")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    def _require_client(self) -> SwisClient:
        if self.client is None:
            raise RuntimeError("Service not started")
        return self.client

    # ================== READ QUERIES ==================

    async def get_syslog(self, params: SyslogFilter, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        client = self._require_client()
        return await client.query(compile_syslog_query(params, now).text)

    async def get_events(self, params: EventFilter, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        client = self._require_client()
        return await client.query(compile_event_query(params, now).text)

    async def get_nodes(self, params: NodeFilter) -> List[Dict[str, Any]]:
        client = self._require_client()
        return await client.query(compile_node_query(params).text)

    # ================== PROVISIONING ==================

    async def add_nodes(self, addresses: Iterable[str], credential: Union[int, str],
                        include_interfaces: Optional[Sequence[str]] = None,
                        rename: bool = False,
                        custom_properties: Optional[Dict[str, Any]] = None,
                        name: Optional[str] = None) -> DiscoveryReport:
        self._require_client()
        return await self.discovery.discover(
            addresses, credential,
            include_interfaces=include_interfaces,
            rename=rename,
            custom_properties=custom_properties,
            name=name,
        )
