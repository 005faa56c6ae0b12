"""Verification engine — runs each record's verify capability.

Status transitions driven here:

* success                        -> SET_AND_VERIFIED
* ``CredentialExpiredError``     -> SET_BUT_EXPIRED
* any other failure              -> SET_BUT_INVALID

Records that are NOT_SET are never verified, and SET_AND_VERIFIED records
are only re-verified on request.  Each call makes exactly one attempt per
key; there is no retry.  The engine mutates the in-memory store only;
persisting is the caller's job.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from credkeep.core.capability import invoke_capability
from credkeep.core.registry import CredentialRegistry
from credkeep.core.store import CredentialStore
from credkeep.errors import CredentialExpiredError, VerificationFailure
from credkeep.models.credentials import CredentialRecord, CredentialStatus

logger = logging.getLogger(__name__)


class VerificationEngine:
    """Verifies stored credentials through their registered capability."""

    def __init__(self, store: CredentialStore, registry: CredentialRegistry) -> None:
        self._store = store
        self._registry = registry

    @staticmethod
    def needs_verification(record: CredentialRecord, re_verify: bool = False) -> bool:
        """Whether *record* should be attempted on this pass."""
        if record.status == CredentialStatus.NOT_SET:
            return False
        if record.status == CredentialStatus.SET_AND_VERIFIED and not re_verify:
            return False
        return True

    async def verify_creds(
        self,
        keys: Iterable[str] | None = None,
        *,
        re_verify: bool = False,
        throw_on_error: bool = False,
    ) -> list[str]:
        """Verify *keys* (default: every stored record).

        Parameters
        ----------
        keys:
            Keys to verify.  Keys without a stored record are skipped.
        re_verify:
            Also verify records that are already SET_AND_VERIFIED.
        throw_on_error:
            Re-raise the first failure instead of collecting it.

        Returns
        -------
        list[str]
            Keys whose verification failed, in attempt order.  Skipped keys
            are not reported.
        """
        targets = list(keys) if keys is not None else self._store.keys()
        failed: list[str] = []

        for key in targets:
            record = self._store.get_record(key)
            if record is None or not self.needs_verification(record, re_verify):
                logger.debug("Skipping verification of '%s'.", key)
                continue

            spec = self._registry.get(
                key,
                required=True,
                message="Unknown credential '{key}' found in DB while attempting to verify credentials.",
            )
            try:
                result = await invoke_capability(spec.verify, record.files)
                if result is False:
                    raise VerificationFailure(
                        f"Credential '{spec.label}' was rejected by its verifier."
                    )
            except CredentialExpiredError:
                self._store.set_status(key, CredentialStatus.SET_BUT_EXPIRED)
                logger.warning("Credential '%s' has expired.", key)
                if throw_on_error:
                    raise
                failed.append(key)
            except Exception as exc:
                self._store.set_status(key, CredentialStatus.SET_BUT_INVALID)
                logger.warning("Credential '%s' failed verification: %s", key, exc)
                if throw_on_error:
                    raise
                failed.append(key)
            else:
                self._store.set_status(key, CredentialStatus.SET_AND_VERIFIED)
                logger.info("Credential '%s' verified.", key)

        return failed
