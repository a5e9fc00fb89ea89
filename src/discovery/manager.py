"""
Node discovery manager: submit -> poll -> reconcile
"""

import logging
import time
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Union

from swis.client import SwisClient
from .models import DiscoveryProgress, DiscoveryReport
from .poller import DiscoveryPoller
from .reconciler import ResultReconciler
from .submitter import DiscoveryJobSubmitter

logger = logging.getLogger(__name__)

class NodeDiscovery:
    """Runs a discovery job end to end and reconciles what it found"""

    def __init__(self, client: SwisClient, config: Optional[Dict] = None,
                 should_cancel: Optional[Callable[[], bool]] = None):
        config = config or {}
        self.client = client
        self.discovery_settings = config.get('discovery', {})
        self.interface_settings = config.get('interfaces', {})

        self.submitter = DiscoveryJobSubmitter(client, self.discovery_settings, self.interface_settings)
        self.poller = DiscoveryPoller(
            client,
            poll_interval=self.discovery_settings.get('poll_interval_seconds', 5),
            timeout=self.discovery_settings.get('poll_timeout_seconds'),
            should_cancel=should_cancel,
        )
        self.reconciler = ResultReconciler(client)

    def add_progress_callback(self, callback: Callable[[DiscoveryProgress], Any]):
        self.poller.add_progress_callback(callback)

    async def discover(self, addresses: Iterable[str], credential: Union[int, str],
                       include_interfaces: Optional[Sequence[str]] = None,
                       rename: bool = False,
                       custom_properties: Optional[Dict[str, Any]] = None,
                       name: Optional[str] = None) -> DiscoveryReport:
        """
        Discover ``addresses`` and return the reconciled report.

        Submission errors propagate. A job that does not finish comes back as
        a report whose ``succeeded`` is False.
        """
        job = await self.submitter.submit(addresses, credential, name=name)
        job.status = await self.poller.wait(job.id)

        # the profile may be gone by now; the log is keyed by the id we kept
        log = await self.reconciler.fetch_log(job.id)
        report = await self.reconciler.reconcile(
            job, log,
            include_interfaces=include_interfaces,
            rename=rename,
            custom_properties=custom_properties,
        )

        duration = time.time() - job.submitted_at
        logger.info(f"[PASS] Discovery {job.id} complete: status={report.status.name}, "
                    f"{len(report.nodes)} nodes, {len(report.errors)} errors in {duration:.1f}s")
        return report
