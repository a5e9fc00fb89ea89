"""
SWIS JSON client: SWQL queries, verb invocation and entity access by URI
"""

import logging
from typing import List, Dict, Optional, Any

from .models import SwisConnection

logger = logging.getLogger(__name__)

class SwisError(Exception):
    """Raised when the Information Service rejects a request"""

    def __init__(self, status: int, message: str, url: str = ""):
        self.status = status
        self.message = message
        self.url = url
        super().__init__(f"SWIS HTTP {status}: {message}")

class SwisClient:
    """Thin async wrapper around the SWIS REST/JSON endpoints"""

    def __init__(self, connection: SwisConnection):
        if connection is None or not connection.server:
            raise ValueError("SWIS connection requires a server address")
        if connection.session is None:
            raise ValueError("SWIS connection requires an authenticated session")
        self.connection = connection
        self.session = connection.session

    async def query(self, query: str, **parameters: Any) -> List[Dict[str, Any]]:
        """Run a SWQL query and return its rows"""
        payload = {"query": query, "parameters": parameters}
        result = await self._request("POST", "Query", payload)
        rows = (result or {}).get("results", [])
        logger.debug(f"Query returned {len(rows)} rows")
        return rows

    async def invoke(self, entity: str, verb: str, *args: Any) -> Any:
        return await self._request("POST", f"Invoke/{entity}/{verb}", list(args))

    async def read(self, uri: str) -> Dict[str, Any]:
        return await self._request("GET", uri)

    async def update(self, uri: str, **properties: Any) -> None:
        await self._request("POST", uri, properties)

    async def delete(self, uri: str) -> None:
        await self._request("DELETE", uri)

    async def _request(self, method: str, path: str, payload: Optional[Any] = None) -> Any:
        url = f"{self.connection.base_url}/{path}"
        logger.debug(f"SWIS {method} {url}")

        kwargs = {}
        if payload is not None:
            kwargs["json"] = payload

        async with self.session.request(method, url, **kwargs) as response:
            if response.status >= 400:
                message = await _fault_message(response)
                logger.debug(f"SWIS {method} {url} failed: HTTP {response.status}: {message}")
                raise SwisError(response.status, message, url)

            # DELETE and update replies carry an empty body without a JSON content type
            return await response.json(content_type=None)

async def _fault_message(response) -> str:
    """Pull the service's error message out of a fault body, falling back to the raw text"""
    text = await response.text()
    try:
        body = await response.json(content_type=None)
    except ValueError:
        return text[:500]
    if isinstance(body, dict):
        return body.get("Message") or body.get("message") or text[:500]
    return text[:500]
