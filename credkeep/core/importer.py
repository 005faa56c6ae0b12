"""Import pipeline — materializes credential files and records them.

An import either fully succeeds (record written, verified when requested,
document persisted) or leaves the in-memory store, the document and the
destination directory as they were.  A copy, verification or persist
failure removes the files the import placed, restores any files it
replaced, and reloads the last persisted document before the error is
re-raised.

File layout when ``dest_path`` is given::

    {dest_path}/{key}        — private key or token file
    {dest_path}/{key}.pub    — public key (SSH key pairs only)

Files replaced by a ``replace`` import are parked as ``.{name}.bak`` beside
the target until the import commits.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

from credkeep.core.registry import CredentialRegistry
from credkeep.core.store import CredentialStore
from credkeep.core.verification import VerificationEngine
from credkeep.errors import ConflictError, IOFailure, UnsupportedTypeError
from credkeep.models.credentials import (
    KNOWN_TYPES,
    CredentialDetail,
    CredentialRecord,
    CredentialStatus,
    CredentialType,
)

logger = logging.getLogger(__name__)

PUBLIC_KEY_SUFFIX = ".pub"
BACKUP_SUFFIX = ".bak"


def _copy_file(src: Path, dest: Path) -> None:
    """Copy *src* to *dest*, which must not exist yet."""
    try:
        with src.open("rb") as reader, dest.open("xb") as writer:
            shutil.copyfileobj(reader, writer)
    except FileExistsError as exc:
        raise IOFailure(
            f"Refusing to overwrite existing credential file {dest}; set 'replace' to update it."
        ) from exc
    except OSError as exc:
        raise IOFailure(f"Could not copy {src} to {dest}: {exc}") from exc


class PlacedFiles:
    """Files an import wrote, plus the originals it moved aside."""

    def __init__(self, files: list[str]) -> None:
        self.files = files
        self.written: list[Path] = []
        self.backups: dict[Path, Path] = {}

    def commit(self) -> None:
        for backup in self.backups.values():
            backup.unlink(missing_ok=True)
        self.backups.clear()
        self.written.clear()

    def rollback(self) -> None:
        for path in self.written:
            path.unlink(missing_ok=True)
        for target, backup in self.backups.items():
            backup.replace(target)
        self.commit()


def _materialize(
    key: str,
    cred_type: str,
    src_path: Path,
    dest_path: Path | None,
    *,
    replace: bool,
) -> PlacedFiles:
    """Copy or reference the credential files, listing them in record order.

    ``dest_path=None`` references the source files in place.  A failed copy
    undoes the copies made before it.
    """
    sources = [src_path]
    if cred_type == CredentialType.SSH_KEY_PAIR:
        sources.append(src_path.with_name(src_path.name + PUBLIC_KEY_SUFFIX))

    if dest_path is None:
        return PlacedFiles([str(path) for path in sources])

    try:
        dest_path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IOFailure(f"Could not create credential directory {dest_path}: {exc}") from exc

    targets = [dest_path / key]
    if cred_type == CredentialType.SSH_KEY_PAIR:
        targets.append(dest_path / f"{key}{PUBLIC_KEY_SUFFIX}")

    placed = PlacedFiles([str(path) for path in targets])
    try:
        for src, dest in zip(sources, targets):
            if replace and dest.exists():
                backup = dest.with_name(f".{dest.name}{BACKUP_SUFFIX}")
                try:
                    dest.replace(backup)
                except OSError as exc:
                    raise IOFailure(f"Could not move {dest} aside: {exc}") from exc
                placed.backups[dest] = backup
            _copy_file(src, dest)
            placed.written.append(dest)
    except IOFailure:
        placed.rollback()
        raise
    return placed


class ImportPipeline:
    """Creates or replaces credential records from files on disk.

    Parameters
    ----------
    store:
        The record store to write into.
    registry:
        Supplies the spec (and therefore the type) for each key.
    verifier:
        Runs post-import verification.
    """

    def __init__(
        self,
        store: CredentialStore,
        registry: CredentialRegistry,
        verifier: VerificationEngine,
    ) -> None:
        self._store = store
        self._registry = registry
        self._verifier = verifier

    async def import_credential(
        self,
        key: str,
        src_path: str | Path,
        dest_path: str | Path | None = None,
        *,
        replace: bool = False,
        no_verify: bool = False,
    ) -> CredentialDetail:
        """Add (or, with *replace*, update) the credential for *key*.

        Parameters
        ----------
        key:
            Registered credential type key.
        src_path:
            The credential file.  For SSH key pairs the public key is
            expected at ``src_path + ".pub"``.
        dest_path:
            Directory to copy the files into.  When omitted the files are
            referenced where they are.
        replace:
            Must be true to update an existing credential, and false to
            create a new one.
        no_verify:
            Skip verifying the credential against its service.

        Raises
        ------
        UnknownCredentialType
            *key* is not registered.
        ConflictError
            *replace* does not match whether a record exists.
        UnsupportedTypeError
            The spec's type is not one the importer can materialize.
        IOFailure
            Copying files or writing the document failed.
        """
        spec = self._registry.get(
            key,
            required=True,
            message="Cannot import unknown credential type '{key}'.",
        )

        exists = key in self._store
        if exists and not replace:
            raise ConflictError(
                f"Credential '{key}' already exists; set 'replace' to true to update the entry."
            )
        if not exists and replace:
            raise ConflictError(
                f"Credential '{key}' does not exist; unset 'replace' to create the entry."
            )

        if spec.type not in KNOWN_TYPES:
            raise UnsupportedTypeError(
                f"Do not know how to handle credential type '{spec.type}' on import."
            )

        src = Path(src_path).expanduser().absolute()
        dest = Path(dest_path).expanduser().absolute() if dest_path is not None else None
        if dest is not None and dest.resolve() == src.parent.resolve():
            dest = None
        placed = await asyncio.to_thread(
            _materialize, key, spec.type, src, dest, replace=replace
        )

        self._store.put_record(
            CredentialRecord(key=key, files=placed.files, status=CredentialStatus.SET_BUT_UNTESTED)
        )

        try:
            if not no_verify:
                await self._verifier.verify_creds([key], throw_on_error=True)
            await asyncio.to_thread(self._store.persist)
        except Exception:
            logger.warning("Import of '%s' failed; rolling back.", key)
            await asyncio.to_thread(self._store.reload)
            await asyncio.to_thread(placed.rollback)
            raise

        await asyncio.to_thread(placed.commit)
        logger.info("Imported credential '%s' (%d file(s)).", key, len(placed.files))
        return self._store.detail(key)
