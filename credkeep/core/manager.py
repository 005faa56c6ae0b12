"""Credential manager — single entry point for the outer command layer.

Wires the registry, store, verification engine, import pipeline, and
token resolver over one shared cache.

Examples
--------
::

    registry = CredentialRegistry()
    load_credential_plugins(registry)
    manager = CredentialManager(registry)

    await manager.import_credential("gitHubSSH", "~/.ssh/id_ed25519")
    for detail in manager.list():
        print(detail.key, detail.status.value)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from credkeep.core.cache import Cache
from credkeep.core.importer import ImportPipeline
from credkeep.core.registry import CredentialRegistry
from credkeep.core.store import CredentialStore
from credkeep.core.tokens import TokenResolver
from credkeep.core.verification import VerificationEngine
from credkeep.models.credentials import (
    CredentialDetail,
    CredentialSpec,
    SupportedCredential,
)

logger = logging.getLogger(__name__)


class CredentialManager:
    """Facade over the credential lifecycle components.

    Parameters
    ----------
    registry:
        The process registry of credential specs.
    cache:
        Shared cache; defaults to the process cache.
    db_path:
        Credentials document location; defaults to settings.
    """

    def __init__(
        self,
        registry: CredentialRegistry | None = None,
        *,
        cache: Cache | None = None,
        db_path: Path | None = None,
    ) -> None:
        self.registry = registry if registry is not None else CredentialRegistry()
        self.store = CredentialStore(self.registry, cache=cache, db_path=db_path)
        self.verifier = VerificationEngine(self.store, self.registry)
        self.importer = ImportPipeline(self.store, self.registry, self.verifier)
        self.tokens = TokenResolver(self.store)

    # -- Registry -----------------------------------------------------------

    def register_credential_type(self, spec: CredentialSpec | Mapping[str, Any]) -> CredentialSpec:
        return self.registry.register(spec)

    def list_supported(self) -> list[SupportedCredential]:
        return self.registry.list_supported()

    # -- Queries ------------------------------------------------------------

    def detail(self, key: str) -> CredentialDetail:
        return self.store.detail(key)

    def list(self) -> list[CredentialDetail]:
        return self.store.list()

    async def get_token(self, key: str) -> Any:
        return await self.tokens.get_token(key)

    # -- Mutations ----------------------------------------------------------

    async def import_credential(
        self,
        key: str,
        src_path: str | Path,
        dest_path: str | Path | None = None,
        *,
        replace: bool = False,
        no_verify: bool = False,
    ) -> CredentialDetail:
        return await self.importer.import_credential(
            key, src_path, dest_path, replace=replace, no_verify=no_verify
        )

    async def verify_creds(
        self,
        keys: Iterable[str] | None = None,
        *,
        re_verify: bool = False,
        throw_on_error: bool = False,
    ) -> list[str]:
        """Verify stored credentials and persist the resulting statuses.

        The document is written even when *throw_on_error* re-raises, so a
        credential found invalid stays recorded as invalid.
        """
        before = {key: self.store.get_record(key) for key in self.store.keys()}
        try:
            failed = await self.verifier.verify_creds(
                keys, re_verify=re_verify, throw_on_error=throw_on_error
            )
        finally:
            after = {key: self.store.get_record(key) for key in self.store.keys()}
            if after != before:
                await asyncio.to_thread(self.store.persist)
        if failed:
            logger.warning("%d credential(s) failed verification: %s", len(failed), ", ".join(failed))
        return failed
