"""
Token authentication for GitHub APIs and package registries.

GitHub's REST and GraphQL APIs and the npm, Maven, NuGet and RubyGems
registries accept the personal access token as a bearer token. The
container registry answers with a ``WWW-Authenticate`` challenge instead;
the token is exchanged for a registry token scoped to the repository, which
is cached and sent up front on later requests to the same repository.
"""

# Standard library imports
import base64
import logging
import re
import threading
from typing import Dict, Generator, Optional, Tuple

# Third-party imports
import httpx

_CHALLENGE_PARAM = re.compile(r'(\w+)="([^"]*)"')

# Username sent with the token during the registry token exchange; registries ignore it
REGISTRY_USERNAME = "migrate-packages"


def parse_bearer_challenge(header: str) -> Optional[Dict[str, str]]:
    """
    Parse a ``WWW-Authenticate: Bearer ...`` challenge.

    Args:
        header: Raw header value

    Returns:
        Challenge parameters (realm, service, scope) or None for non-bearer challenges
    """
    scheme, _, params = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return dict(_CHALLENGE_PARAM.findall(params))


class TokenAuth(httpx.Auth):
    """Bearer token authentication with registry challenge handling."""

    requires_response_body = True

    def __init__(self, token: str) -> None:
        """
        Initialize token authentication.

        Args:
            token: Personal access token
        """
        self._token = token
        self._registry_tokens: Dict[Tuple[str, str], str] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _repository_key(url: httpx.URL) -> Tuple[str, str]:
        # /v2/<org>/<name>/... identifies one container repository
        return url.host, "/".join(url.path.split("/")[:4])

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        """
        Execute the authentication flow for a request.

        Sends the cached registry token when one exists for the repository,
        otherwise the access token. A bearer challenge triggers a token
        exchange and a single retry.
        """
        key = self._repository_key(request.url)
        with self._lock:
            registry_token = self._registry_tokens.get(key)
        request.headers["Authorization"] = f"Bearer {registry_token or self._token}"

        response = yield request

        if response.status_code != 401:
            return

        challenge = parse_bearer_challenge(response.headers.get("WWW-Authenticate", ""))
        if not challenge or "realm" not in challenge:
            logging.debug("Received 401 without a bearer challenge from %s", request.url.host)
            return

        logging.debug("Exchanging token for registry scope %s", challenge.get("scope", ""))
        params = {k: v for k, v in challenge.items() if k in ("service", "scope")}
        token_request = httpx.Request("GET", challenge["realm"], params=params)
        credentials = base64.b64encode(f"{REGISTRY_USERNAME}:{self._token}".encode()).decode("ascii")
        token_request.headers["Authorization"] = f"Basic {credentials}"
        token_response = yield token_request

        if not token_response.is_success:
            logging.error("Registry token exchange failed: %s", token_response.status_code)
            return

        payload = token_response.json()
        new_token = payload.get("token") or payload.get("access_token")
        if not new_token:
            logging.error("Registry token exchange returned no token")
            return

        with self._lock:
            self._registry_tokens[key] = new_token
        request.headers["Authorization"] = f"Bearer {new_token}"
        yield request


__all__ = ["TokenAuth", "parse_bearer_challenge", "REGISTRY_USERNAME"]
