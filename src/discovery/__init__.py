"""
Discovery module for provisioning nodes through Orion network discovery
"""

from .manager import NodeDiscovery
from .models import (
    CredentialNotFoundError,
    DiscoveredEntity,
    DiscoveryCancelledError,
    DiscoveryJob,
    DiscoveryLog,
    DiscoveryProgress,
    DiscoveryReport,
    DiscoveryStatus,
    DiscoveryTimeoutError,
    EntityType,
    ManagedInterface,
    NodeReport,
)
from .poller import DiscoveryPoller
from .reconciler import ResultReconciler
from .submitter import DiscoveryJobSubmitter

__all__ = [
    'NodeDiscovery', 'DiscoveryJobSubmitter', 'DiscoveryPoller', 'ResultReconciler',
    'CredentialNotFoundError', 'DiscoveryCancelledError', 'DiscoveryTimeoutError',
    'DiscoveredEntity', 'DiscoveryJob', 'DiscoveryLog', 'DiscoveryProgress', 'DiscoveryReport',
    'DiscoveryStatus', 'EntityType', 'ManagedInterface', 'NodeReport',
]
