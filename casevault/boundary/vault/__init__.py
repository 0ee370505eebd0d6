"""
Remote vault boundary: httpx client and payload schemas.
"""

from casevault.boundary.vault.client import VaultClient
from casevault.boundary.vault.schemas import (
    IngestionJob,
    ObjectText,
    SearchChunk,
    SearchSource,
    StorageTarget,
    Vault,
    VaultObject,
    VaultSearchResult,
)

__all__ = [
    "VaultClient",
    "Vault",
    "StorageTarget",
    "VaultObject",
    "IngestionJob",
    "ObjectText",
    "SearchChunk",
    "SearchSource",
    "VaultSearchResult",
]
