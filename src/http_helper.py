# HTTP Helper for SWIS Connections
# SSL-aware, authenticated session configuration for the Orion Information Service

import aiohttp
import ssl
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

def create_swis_session(
    username: str,
    password: str,
    timeout_seconds: float = 30,
    ssl_verify: bool = False,
    ca_cert_path: str = None
) -> aiohttp.ClientSession:
    """
    Create properly configured aiohttp session for SWIS connections (always HTTPS)
    Basic authentication is attached to every request made through the session
    """
    ssl_context = ssl.create_default_context()

    if not ssl_verify:
        # Orion installs with a self-signed certificate
        ssl_context.check_hostname = False
        ssl_context.verify_mode = ssl.CERT_NONE
        logger.warning("SSL verification disabled for SWIS session")
    else:
        ssl_context.check_hostname = True
        ssl_context.verify_mode = ssl.CERT_REQUIRED

        # Load custom CA certificate if provided
        if ca_cert_path:
            ca_path = Path(ca_cert_path)
            if ca_path.exists():
                ssl_context.load_verify_locations(ca_path)
                logger.info(f"Loaded custom CA certificate: {ca_path}")
            else:
                logger.warning(f"CA certificate not found: {ca_path}")

    connector = aiohttp.TCPConnector(
        ssl=ssl_context,
        limit=10,                   # Total connection pool limit
        limit_per_host=5,           # Single Orion server, a few keep-alive connections
        force_close=False,
        enable_cleanup_closed=True
    )

    return aiohttp.ClientSession(
        connector=connector,
        auth=aiohttp.BasicAuth(username, password),
        headers={'Content-Type': 'application/json'},
        timeout=aiohttp.ClientTimeout(total=timeout_seconds)
    )
