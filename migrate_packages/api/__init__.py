"""
GitHub API client modules.

This package provides clients for the two sides of a migration:
- Token authentication with container registry token exchange
- Rate limit aware GraphQL client
- Source client for catalog fetch and file download
- Target client for registry uploads and package settings
"""

from .auth import TokenAuth
from .graphql_client import GraphQLResponseError, RateLimitAwareGraphQLClient, graphql_endpoint
from .source_client import SourceRegistryClient
from .target_client import TargetRegistryClient

__all__ = [
    "TokenAuth",
    "GraphQLResponseError",
    "RateLimitAwareGraphQLClient",
    "graphql_endpoint",
    "SourceRegistryClient",
    "TargetRegistryClient",
]
