"""Credential store — the in-memory record set and its persisted document.

The record set lives in a shared cache under a single well-known key, so
every store in the process that shares the cache sees the same records.
Every successful mutating operation writes the full set back to the
document (write-through); there is no cross-process locking and the last
writer wins.

Document layout (YAML)::

    gitHubSSH:
      files:
      - /home/me/.ssh/id_ed25519
      - /home/me/.ssh/id_ed25519.pub
      status: set and ready

Display fields (``name``, ``description``) are derived from the registered
spec and never persisted.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from credkeep.config import CredkeepSettings
from credkeep.core.cache import Cache, process_cache
from credkeep.core.document import DocumentFormatError, read_document, write_document
from credkeep.core.registry import CredentialRegistry
from credkeep.errors import IOFailure, NotFoundError, UnknownCredentialType
from credkeep.models.credentials import (
    CredentialDetail,
    CredentialRecord,
    CredentialStatus,
)

logger = logging.getLogger(__name__)

CREDS_DB_CACHE_KEY = "credkeep-credentials-db"


class CredentialStore:
    """Loads, queries, and persists credential records.

    Parameters
    ----------
    registry:
        Supplies the specs that records are validated and enriched against.
    cache:
        Shared cache holding the record set.  Defaults to the process cache.
    db_path:
        Location of the credentials document.  Defaults to
        ``CredkeepSettings().db_path``.
    """

    def __init__(
        self,
        registry: CredentialRegistry,
        *,
        cache: Cache | None = None,
        db_path: Path | None = None,
    ) -> None:
        self._registry = registry
        self._cache = cache if cache is not None else process_cache()
        self._db_path = Path(db_path) if db_path is not None else CredkeepSettings().db_path
        self._records: dict[str, CredentialRecord] = self.load()

    @property
    def db_path(self) -> Path:
        return self._db_path

    # ------------------------------------------------------------------
    # Load / persist
    # ------------------------------------------------------------------

    def load(self) -> dict[str, CredentialRecord]:
        """Return the shared record set, reading the document on a cache miss.

        A missing document yields an empty store.

        Raises
        ------
        IOFailure
            The document exists but cannot be read or parsed.
        """
        records = self._cache.get(CREDS_DB_CACHE_KEY)
        if records is None:
            records = self._read()
            self._cache.put(CREDS_DB_CACHE_KEY, records)
            logger.debug("Loaded %d credential record(s) from %s.", len(records), self._db_path)
        self._records = records
        return records

    def reload(self) -> None:
        """Discard in-memory changes and re-read the last persisted document.

        The shared set is updated in place so other stores sharing the
        cache observe the rollback too.
        """
        fresh = self._read()
        records = self._cache.get(CREDS_DB_CACHE_KEY)
        if records is None:
            records = fresh
            self._cache.put(CREDS_DB_CACHE_KEY, records)
        else:
            records.clear()
            records.update(fresh)
        self._records = records
        logger.debug("Reloaded credential records from %s.", self._db_path)

    def persist(self) -> None:
        """Write the full record set to the document, overwriting it.

        Raises
        ------
        IOFailure
            The document cannot be written.
        """
        snapshot = copy.deepcopy(self._records)
        data = {key: record.to_document() for key, record in snapshot.items()}
        try:
            write_document(self._db_path, data)
        except (OSError, yaml.YAMLError) as exc:
            raise IOFailure(f"Could not write credentials DB {self._db_path}: {exc}") from exc
        logger.debug("Persisted %d credential record(s) to %s.", len(data), self._db_path)

    def _read(self) -> dict[str, CredentialRecord]:
        try:
            raw = read_document(self._db_path, create_on_missing={})
        except (OSError, yaml.YAMLError, DocumentFormatError) as exc:
            raise IOFailure(f"Could not read credentials DB {self._db_path}: {exc}") from exc

        records: dict[str, CredentialRecord] = {}
        for key, entry in raw.items():
            if not isinstance(entry, Mapping):
                raise IOFailure(
                    f"Malformed entry '{key}' in credentials DB {self._db_path}."
                )
            try:
                records[str(key)] = CredentialRecord(
                    key=str(key),
                    files=list(entry.get("files") or []),
                    status=entry.get("status", CredentialStatus.NOT_SET),
                )
            except ValidationError as exc:
                raise IOFailure(
                    f"Malformed entry '{key}' in credentials DB {self._db_path}: {exc}"
                ) from exc
        return records

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def get_record(self, key: str) -> CredentialRecord | None:
        return self._records.get(key)

    def put_record(self, record: CredentialRecord) -> None:
        """Create or replace the record for ``record.key`` (in memory only)."""
        self._records[record.key] = record

    def set_status(self, key: str, status: CredentialStatus) -> CredentialRecord:
        """Replace the status of an existing record (in memory only)."""
        record = self._records[key].model_copy(update={"status": status})
        self._records[key] = record
        return record

    def keys(self) -> list[str]:
        return list(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def detail(self, key: str, *, include_capabilities: bool = False) -> CredentialDetail:
        """Merge the spec for *key* with its stored record.

        Raises
        ------
        UnknownCredentialType
            *key* is not a registered credential type.
        NotFoundError
            No credential has been imported for *key*.
        """
        spec = self._registry.get(key)
        if spec is None:
            raise UnknownCredentialType(
                f"'{key}' is not a valid credential. Perhaps there is a missing plugin?"
            )
        record = self._records.get(key)
        if record is None:
            raise NotFoundError(
                f"Credential '{key}' is not stored. Try:\n\n"
                f"credkeep import {key} /path/to/credential/file"
            )

        fields: dict[str, Any] = {
            "key": spec.key,
            "name": spec.name,
            "description": spec.description,
            "type": spec.type,
            "status": record.status,
            "files": list(record.files),
        }
        if include_capabilities:
            fields["verify"] = spec.verify
            fields["get_token"] = spec.get_token
        return CredentialDetail(**fields)

    def list(self) -> list[CredentialDetail]:
        """Detail views for every stored record."""
        return [self.detail(key) for key in self.keys()]
