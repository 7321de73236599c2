"""
Rate limit aware GitHub GraphQL client.

Every query is preceded by a ``rateLimit`` probe. When the remaining budget
is zero the client blocks until the server-declared reset time, probes
again, and only then sends the query. Rate limiting only ever delays a
query; it never drops one.
"""

# Standard library imports
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

# Third-party imports
import httpx

# Local imports
from ..models.graphql import GraphQLError, RateLimit
from ..utils import create_session_with_retry
from ..utils.constants import DEFAULT_TIMEOUT, GITHUB_GRAPHQL_URL
from .auth import TokenAuth

RATE_LIMIT_QUERY = "query { rateLimit { remaining resetAt } }"

# Wait used when the budget is exhausted but the reset time has already passed
MIN_RATE_LIMIT_WAIT = 1.0


class GraphQLResponseError(Exception):
    """The GraphQL endpoint answered with an ``errors`` array."""

    def __init__(self, errors: list) -> None:
        self.errors = errors
        super().__init__("; ".join(e.message for e in errors))


def graphql_endpoint(hostname: Optional[str] = None) -> str:
    """
    GraphQL endpoint for github.com or a GitHub Enterprise Server host.

    Example:
        >>> graphql_endpoint("https://github.example.com")
        'https://github.example.com/api/graphql'
    """
    if not hostname:
        return GITHUB_GRAPHQL_URL
    if not hostname.startswith(("http://", "https://")):
        hostname = f"https://{hostname}"
    return f"{hostname.rstrip('/')}/api/graphql"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RateLimitAwareGraphQLClient:
    """GraphQL client that waits out an exhausted rate limit before each query."""

    def __init__(
        self,
        token: str,
        hostname: Optional[str] = None,
        *,
        session: Optional[httpx.Client] = None,
        sleep: Callable[[float], Any] = time.sleep,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Initialize the client.

        Args:
            token: Access token
            hostname: Optional GitHub Enterprise Server hostname
            session: Optional preconfigured httpx client
            sleep: Blocking wait used for rate limit delays
            now: Clock returning an aware UTC datetime
        """
        self.endpoint = graphql_endpoint(hostname)
        self.session = session or create_session_with_retry(auth=TokenAuth(token), timeout=DEFAULT_TIMEOUT)
        self._sleep = sleep
        self._now = now

    def _post(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Send one GraphQL request and return its ``data`` object."""
        response = self.session.post(self.endpoint, json={"query": query, "variables": variables or {}})
        if not response.is_success:
            logging.debug("GraphQL request failed: %s - %s", response.status_code, response.text)
            raise httpx.HTTPError(f"Failed to query GraphQL: {response.status_code} - {response.text}")

        payload = response.json()
        if payload.get("errors"):
            raise GraphQLResponseError([GraphQLError.model_validate(e) for e in payload["errors"]])
        return payload.get("data") or {}

    def rate_limit(self) -> RateLimit:
        """Probe the current rate limit budget."""
        data = self._post(RATE_LIMIT_QUERY)
        return RateLimit.model_validate(data.get("rateLimit"))

    def wait_for_rate_limit(self) -> None:
        """Block until the rate limit budget is non-zero."""
        while True:
            budget = self.rate_limit()
            logging.debug("Rate limit remaining: %d", budget.remaining)
            if budget.remaining > 0:
                return

            wait_seconds = (budget.reset_at - self._now()).total_seconds()
            wait_seconds = max(wait_seconds, MIN_RATE_LIMIT_WAIT)
            logging.warning("Rate limit exceeded, sleeping until %s (%.0fs)", budget.reset_at.isoformat(), wait_seconds)
            self._sleep(wait_seconds)

    def query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a query once the rate limit allows it.

        Args:
            query: GraphQL query document
            variables: Query variables

        Returns:
            The ``data`` object of the response

        Raises:
            httpx.HTTPError: On transport errors or non-2xx responses
            GraphQLResponseError: If the response contains errors
        """
        self.wait_for_rate_limit()
        return self._post(query, variables)

    def close(self) -> None:
        """Close the session and release all connections."""
        self.session.close()


__all__ = [
    "RateLimitAwareGraphQLClient",
    "GraphQLResponseError",
    "graphql_endpoint",
    "RATE_LIMIT_QUERY",
    "MIN_RATE_LIMIT_WAIT",
]
