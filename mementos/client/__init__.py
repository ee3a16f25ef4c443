"""
Client data layer: HTTP client, query cache and optimistic mutations.
"""
from .api_client import ApiClient, ApiError
from .cache import QueryCache
from .mutations import Mutation, MutationRunner
from .store import MementosStore

__all__ = [
    "ApiClient",
    "ApiError",
    "MementosStore",
    "Mutation",
    "MutationRunner",
    "QueryCache",
]
