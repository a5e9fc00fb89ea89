"""
Discovery job submission: credential lookup, plugin configuration and StartDiscovery
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel

from swis.client import SwisClient
from .models import CredentialNotFoundError, DiscoveryJob, DiscoveryStatus

logger = logging.getLogger(__name__)

# Request payloads (field names follow the SWIS verb schemas)
class BulkAddress(BaseModel):
    Address: str

class CredentialOrder(BaseModel):
    CredentialID: int
    Order: int = 1

class CorePluginContext(BaseModel):
    BulkList: List[BulkAddress]
    Credentials: List[CredentialOrder]
    WmiRetriesCount: int = 1
    WmiRetryIntervalMiliseconds: int = 1000

class InterfacesPluginContext(BaseModel):
    AutoImportStatus: List[str]
    AutoImportVlanPortTypes: List[str]
    AutoImportVirtualTypes: List[str]
    AutoImportExpressionFilter: List[Dict[str, Any]] = []

class PluginConfiguration(BaseModel):
    PluginConfigurationItem: str

class DiscoveryJobConfiguration(BaseModel):
    Name: str
    EngineId: int
    JobTimeoutSeconds: int
    SearchTimeoutMiliseconds: int
    SnmpTimeoutMiliseconds: int
    SnmpRetries: int
    RepeatIntervalMiliseconds: int
    SnmpPort: int
    HopCount: int
    PreferredSnmpVersion: str
    DisableIcmp: bool
    AllowDuplicateNodes: bool
    IsAutoImport: bool
    IsHidden: bool
    PluginConfigurations: List[PluginConfiguration]

CREDENTIAL_QUERY = "SELECT ID FROM Orion.Credential WHERE Name = @name AND CredentialOwner = 'Orion'"

async def resolve_credential(client: SwisClient, credential: Union[int, str]) -> int:
    """Return the numeric id of a credential given either its id or its name"""
    if isinstance(credential, int) and not isinstance(credential, bool):
        return credential

    rows = await client.query(CREDENTIAL_QUERY, name=credential)
    if not rows:
        logger.error(f"Credential not found: {credential}")
        raise CredentialNotFoundError(f"Credential not found: {credential}")

    credential_id = int(rows[0]["ID"])
    logger.debug(f"Resolved credential '{credential}' to ID {credential_id}")
    return credential_id

def build_core_plugin_context(addresses: Iterable[str], credential_id: int,
                              settings: Dict[str, Any]) -> CorePluginContext:
    return CorePluginContext(
        BulkList=[BulkAddress(Address=address) for address in sorted(addresses)],
        Credentials=[CredentialOrder(CredentialID=credential_id, Order=1)],
        WmiRetriesCount=settings.get('wmi_retries', 1),
        WmiRetryIntervalMiliseconds=settings.get('wmi_retry_interval_ms', 1000),
    )

def build_interfaces_plugin_context(settings: Dict[str, Any]) -> InterfacesPluginContext:
    return InterfacesPluginContext(
        AutoImportStatus=settings.get('auto_import_status', ['Up', 'Down', 'Shutdown']),
        AutoImportVlanPortTypes=settings.get('auto_import_vlan_port_types', ['Trunk', 'Access', 'Unknown']),
        AutoImportVirtualTypes=settings.get('auto_import_virtual_types', ['Physical', 'Virtual', 'Unknown']),
        AutoImportExpressionFilter=settings.get('auto_import_expression_filter', []),
    )

def build_job_configuration(name: str, plugin_items: Iterable[str],
                            settings: Dict[str, Any]) -> DiscoveryJobConfiguration:
    """Job envelope; ``IsHidden`` makes the server delete the profile once it finishes"""
    return DiscoveryJobConfiguration(
        Name=name,
        EngineId=settings.get('engine_id', 1),
        JobTimeoutSeconds=settings.get('job_timeout_seconds', 3600),
        SearchTimeoutMiliseconds=settings.get('search_timeout_ms', 5000),
        SnmpTimeoutMiliseconds=settings.get('snmp_timeout_ms', 5000),
        SnmpRetries=settings.get('snmp_retries', 2),
        RepeatIntervalMiliseconds=settings.get('repeat_interval_ms', 1800),
        SnmpPort=settings.get('snmp_port', 161),
        HopCount=settings.get('hop_count', 0),
        PreferredSnmpVersion=settings.get('preferred_snmp_version', 'SNMP2c'),
        DisableIcmp=settings.get('disable_icmp', False),
        AllowDuplicateNodes=settings.get('allow_duplicate_nodes', False),
        IsAutoImport=settings.get('auto_import', True),
        IsHidden=settings.get('delete_profile_after_discovery', True),
        PluginConfigurations=[PluginConfiguration(PluginConfigurationItem=item) for item in plugin_items],
    )

class DiscoveryJobSubmitter:
    """Builds a discovery job and starts it on the server"""

    def __init__(self, client: SwisClient, discovery_settings: Optional[Dict] = None,
                 interface_settings: Optional[Dict] = None):
        self.client = client
        self.discovery_settings = discovery_settings or {}
        self.interface_settings = interface_settings or {}

    async def submit(self, addresses: Iterable[str], credential: Union[int, str],
                     name: Optional[str] = None) -> DiscoveryJob:
        """
        Submit a discovery for ``addresses`` and return the job handle.

        Failures (unknown credential, rejected verb) propagate; nothing is retried.
        """
        targets = frozenset(a.strip() for a in addresses if a and a.strip())
        if not targets:
            raise ValueError("At least one target address is required")

        credential_id = await resolve_credential(self.client, credential)

        core_context = build_core_plugin_context(targets, credential_id, self.discovery_settings)
        core_item = await self.client.invoke(
            'Orion.Discovery', 'CreateCorePluginConfiguration', core_context.model_dump()
        )

        interfaces_context = build_interfaces_plugin_context(self.interface_settings)
        interfaces_item = await self.client.invoke(
            'Orion.NPM.Interfaces', 'CreateInterfacesPluginConfiguration', interfaces_context.model_dump()
        )

        job_name = name or f"Inventory discovery {datetime.now(timezone.utc):%Y-%m-%d %H:%M:%S}"
        configuration = build_job_configuration(job_name, [core_item, interfaces_item], self.discovery_settings)

        profile_id = await self.client.invoke('Orion.Discovery', 'StartDiscovery', configuration.model_dump())
        logger.info(f"Discovery '{job_name}' submitted for {len(targets)} addresses: profile {profile_id}")

        return DiscoveryJob(
            id=str(profile_id),
            target_addresses=targets,
            credential_ref=credential_id,
            name=job_name,
            status=DiscoveryStatus.IN_PROGRESS,
        )
