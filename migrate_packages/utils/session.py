"""
Session utilities for registry operations.

This module provides utilities for creating and configuring HTTP clients
with transport retries and connection pooling.
"""

from typing import Dict, Optional
import importlib.util
import logging

import httpx
from httpx import HTTPTransport

from .._version import __version__

# ============================================================================
# HTTP Configuration Constants
# ============================================================================

# Connection level retries performed by the transport (connect errors only)
MAX_RETRIES = 3

USER_AGENT = f"gh-migrate-packages/{__version__}"


def create_session_with_retry(
    auth: Optional[httpx.Auth] = None,
    timeout: float = 30.0,
    max_connections: int = 100,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.Client:
    """
    Create an httpx client with retry strategy and connection pooling.

    Args:
        auth: Optional httpx authentication flow applied to every request
        timeout: Total timeout in seconds (default: 30.0)
        max_connections: Maximum number of connections in the pool (default: 100)
        headers: Additional default headers

    Returns:
        Configured httpx.Client object with:
        - Connection retries on the transport
        - HTTP/2 support when h2 is installed
        - Connection pooling sized for parallel workers
        - Redirect following (registry downloads redirect to blob storage)

    Example:
        >>> client = create_session_with_retry(auth=TokenAuth("ghp_example"))
        >>> response = client.get("https://api.github.com/rate_limit")
    """
    limits = httpx.Limits(
        max_connections=max_connections,
        max_keepalive_connections=max(20, max_connections // 5),
    )

    timeout_config = httpx.Timeout(timeout, connect=10.0)

    # httpx doesn't have built-in retry like requests.adapters.Retry;
    # the transport retries failed connection attempts only
    transport = HTTPTransport(
        limits=limits,
        retries=MAX_RETRIES,
    )

    default_headers = {
        "Accept-Encoding": "gzip, deflate",
        "User-Agent": USER_AGENT,
    }
    if headers:
        default_headers.update(headers)

    use_http2 = importlib.util.find_spec("h2") is not None
    if not use_http2:
        logging.debug("HTTP/2 support not available (h2 package not installed)")

    return httpx.Client(
        auth=auth,
        transport=transport,
        timeout=timeout_config,
        follow_redirects=True,
        headers=default_headers,
        http2=use_http2,
    )


__all__ = ["create_session_with_retry", "USER_AGENT"]
