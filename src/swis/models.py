"""
SWIS connection structures
"""

from dataclasses import dataclass
from typing import Any

import aiohttp

@dataclass(frozen=True)
class SwisConnection:
    """Server address plus the authenticated session used to reach it.

    Produced by whoever owns credentials (see ``http_helper.create_swis_session``)
    and handed to every component explicitly; nothing here mutates or caches it.
    """
    server: str
    session: aiohttp.ClientSession
    port: int = 17778
    base_path: str = "SolarWinds/InformationService/v3/Json"

    @property
    def base_url(self) -> str:
        return f"https://{self.server}:{self.port}/{self.base_path}"

    def entity_uri(self, entity: str, **keys: Any) -> str:
        """Build a SWIS entity URI, e.g. ``swis://srv/Orion/Orion.Nodes/NodeID=5``"""
        key_part = ",".join(f"{name}={value}" for name, value in keys.items())
        return f"swis://{self.server}/Orion/{entity}/{key_part}"
