"""
Discovery status polling
"""

import asyncio
import logging
import time
from typing import Any, Callable, List, Optional

from swis.client import SwisClient
from .models import (
    DiscoveryCancelledError,
    DiscoveryProgress,
    DiscoveryStatus,
    DiscoveryTimeoutError,
)

logger = logging.getLogger(__name__)

STATUS_QUERY = "SELECT Status FROM Orion.DiscoveryProfiles WHERE ProfileID = @profileId"

def profile_id(job_id: str) -> Any:
    """Profile ids are integers on the wire but travel as strings in DiscoveryJob"""
    return int(job_id) if str(job_id).isdigit() else job_id

class DiscoveryPoller:
    """Polls a discovery profile until it leaves IN_PROGRESS.

    Without ``timeout`` or ``should_cancel`` there is no client-side bound:
    the wait lasts as long as the server's own job timeout allows, and a
    stuck job blocks the caller indefinitely. Either hook ends the wait early
    (``DiscoveryTimeoutError`` / ``DiscoveryCancelledError``) and leaves the
    remote job as it is.
    """

    def __init__(self, client: SwisClient, poll_interval: float = 5,
                 timeout: Optional[float] = None,
                 should_cancel: Optional[Callable[[], bool]] = None):
        self.client = client
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.should_cancel = should_cancel
        self.progress_callbacks: List[Callable] = []

    def add_progress_callback(self, callback: Callable[[DiscoveryProgress], Any]):
        """Add callback for progress updates (plain function or coroutine function)"""
        self.progress_callbacks.append(callback)

    async def fetch_status(self, job_id: str) -> DiscoveryStatus:
        rows = await self.client.query(STATUS_QUERY, profileId=profile_id(job_id))
        if not rows:
            # Hidden profiles are deleted by the server as soon as they finish
            logger.debug(f"Discovery profile {job_id} no longer exists")
            return DiscoveryStatus.UNKNOWN
        return DiscoveryStatus.from_code(rows[0].get("Status"))

    async def wait(self, job_id: str) -> DiscoveryStatus:
        """Block until the job reaches a terminal status and return it"""
        start_time = time.time()
        polls = 0

        logger.info(f"Waiting for discovery {job_id} (interval {self.poll_interval}s)")

        while True:
            status = await self.fetch_status(job_id)
            polls += 1
            elapsed = time.time() - start_time

            await self._notify(DiscoveryProgress(job_id, status, elapsed, polls))

            if status.is_terminal:
                logger.info(f"Discovery {job_id} finished polling with status {status.name} "
                            f"after {polls} polls ({elapsed:.1f}s)")
                return status

            if self.timeout is not None and elapsed >= self.timeout:
                raise DiscoveryTimeoutError(
                    f"Discovery {job_id} still in progress after {elapsed:.0f}s"
                )
            if self.should_cancel is not None and self.should_cancel():
                logger.warning(f"Discovery {job_id} wait cancelled by caller; remote job left running")
                raise DiscoveryCancelledError(f"Discovery {job_id} wait cancelled")

            await asyncio.sleep(self.poll_interval)

    async def _notify(self, progress: DiscoveryProgress):
        for callback in self.progress_callbacks:
            try:
                result = callback(progress)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"Progress callback failed: {e}")
