"""Token resolver — retrieves auth tokens through the credential's plugin."""

from __future__ import annotations

import logging
from typing import Any

from credkeep.core.capability import invoke_capability
from credkeep.core.store import CredentialStore
from credkeep.errors import BadRequestError, CapabilityNotImplementedError
from credkeep.models.credentials import CredentialType

logger = logging.getLogger(__name__)


class TokenResolver:
    """Resolves the token value for stored ``AUTH_TOKEN`` credentials."""

    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    async def get_token(self, key: str) -> Any:
        """Return the token for *key*.

        Raises
        ------
        UnknownCredentialType, NotFoundError
            As for ``CredentialStore.detail``.
        BadRequestError
            The credential is not an auth token.
        CapabilityNotImplementedError
            The credential type has no token retrieval capability.
        """
        detail = self._store.detail(key, include_capabilities=True)
        if detail.type != CredentialType.AUTH_TOKEN:
            raise BadRequestError(
                f"Credential '{detail.name}' does not provide an authorization token."
            )
        if detail.get_token is None:
            raise CapabilityNotImplementedError(
                f"Credential '{detail.name}' does not support token retrieval."
            )

        logger.debug("Retrieving token for '%s'.", key)
        return await invoke_capability(detail.get_token, detail.files)
