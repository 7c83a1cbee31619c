"""Directory lookups mapping identities to their current public keys."""

from __future__ import annotations

import logging
import os
from typing import Dict, Optional, Protocol

import httpx

from .config import CruxConnectConfig, load_config
from .identity import CruxId

logger = logging.getLogger(__name__)


class DirectoryLookup(Protocol):
    """Read-only capability resolving an identity to its public key.

    ``resolve`` returns ``None`` when the directory has no record for the
    identity. Network or backend failures are raised, never mapped to ``None``.
    """

    async def resolve(self, identity: CruxId) -> Optional[str]:
        """Return the public key currently registered for ``identity``."""


class InMemoryDirectory:
    """Store identity records in local memory.

    Useful for tests or single-process deployments. Records are not persisted
    across restarts.
    """

    def __init__(self, records: Optional[Dict[str, str]] = None) -> None:
        self._records: Dict[CruxId, str] = {}
        for identity, public_key in (records or {}).items():
            self.register(identity, public_key)

    def register(self, identity: CruxId | str, public_key: str) -> None:
        self._records[CruxId.coerce(identity)] = public_key

    def unregister(self, identity: CruxId | str) -> None:
        self._records.pop(CruxId.coerce(identity), None)

    async def resolve(self, identity: CruxId) -> Optional[str]:
        return self._records.get(CruxId.coerce(identity))


class HttpDirectory:
    """Resolve identities against a JSON directory service.

    Expects ``GET {base_url}/identities/{identity}`` to answer with
    ``{"publicKey": "<hex>"}`` and 404 for unknown identities.
    """

    def __init__(self, base_url: str, timeout: float = 5.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def resolve(self, identity: CruxId) -> Optional[str]:
        url = f"{self.base_url}/identities/{identity}"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(url)
        if response.status_code == 404:
            logger.debug(f"Directory has no record for {identity}")
            return None
        response.raise_for_status()
        return response.json().get("publicKey")


def get_directory(
    backend: Optional[str] = None, config: Optional[CruxConnectConfig] = None
) -> DirectoryLookup:
    """Factory function to get the configured directory lookup."""

    config = config or load_config()
    base_url = os.getenv("CRUXCONNECT_DIRECTORY_URL")
    if base_url and backend is None:
        return HttpDirectory(base_url, timeout=config.directory.http.timeout)

    backend = (backend or config.directory.backend).lower()
    if backend == "inmemory":
        return InMemoryDirectory()
    elif backend == "http":
        http_conf = config.directory.http
        if not http_conf.base_url:
            raise ValueError("directory.http.base_url is required for the http backend")
        return HttpDirectory(http_conf.base_url, timeout=http_conf.timeout)
    else:
        raise ValueError(f"Unsupported directory backend: {backend}")


__all__ = ["DirectoryLookup", "InMemoryDirectory", "HttpDirectory", "get_directory"]
