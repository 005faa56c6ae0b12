"""Credential registry — the process-wide set of supported credential specs.

Specs are contributed by plugins at startup and are never removed.  Each
spec must carry a ``verify`` capability; ``get_token`` is optional and only
meaningful for ``AUTH_TOKEN`` credentials.  Required fields are checked at
registration time so a malformed plugin fails when it loads, not the first
time a capability is called.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from credkeep.errors import SpecValidationError, UnknownCredentialType
from credkeep.models.credentials import CredentialSpec, SupportedCredential

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = ("key", "name", "type", "verify")

# Manifest spellings accepted for capability fields.
_FIELD_ALIASES: dict[str, str] = {
    "verifyFunc": "verify",
    "getTokenFunc": "get_token",
}

DEFAULT_LOOKUP_MESSAGE = "Unknown credential type '{key}'."


def _spec_name(data: Mapping[str, Any]) -> str:
    return data.get("name") or data.get("key") or "UNKNOWN"


class CredentialRegistry:
    """Append-only registry of ``CredentialSpec`` keyed by ``spec.key``.

    Examples
    --------
    >>> registry = CredentialRegistry()
    >>> registry.register({
    ...     "key": "gitHubAPI",
    ...     "name": "GitHub API token",
    ...     "type": "token",
    ...     "verify": lambda files: True,
    ... }).key
    'gitHubAPI'
    >>> registry.list_supported()[0].get_token
    False
    """

    def __init__(self) -> None:
        self._specs: dict[str, CredentialSpec] = {}

    # -- Registration -------------------------------------------------------

    def register(self, spec: CredentialSpec | Mapping[str, Any]) -> CredentialSpec:
        """Validate and add a credential spec.

        Raises
        ------
        SpecValidationError
            If a required field is missing or invalid, or if a different
            spec is already registered under the same key.
        """
        if not isinstance(spec, CredentialSpec):
            spec = self._coerce(spec)

        existing = self._specs.get(spec.key)
        if existing is not None:
            if existing == spec:
                return existing
            raise SpecValidationError(
                f"Credential type '{spec.key}' is already registered by "
                f"'{existing.label}'."
            )

        self._specs[spec.key] = spec
        logger.debug("Registered credential type %s (%s)", spec.key, spec.type)
        return spec

    @staticmethod
    def _coerce(data: Mapping[str, Any]) -> CredentialSpec:
        fields = {_FIELD_ALIASES.get(k, k): v for k, v in data.items()}
        for field in REQUIRED_FIELDS:
            if fields.get(field) is None:
                raise SpecValidationError(
                    f"Credentials spec '{_spec_name(fields)}' missing field {field}."
                )
        try:
            return CredentialSpec(**fields)
        except ValidationError as exc:
            raise SpecValidationError(
                f"Credentials spec '{_spec_name(fields)}' is invalid: {exc}"
            ) from exc

    # -- Lookup -------------------------------------------------------------

    def get(
        self,
        key: str,
        *,
        required: bool = False,
        message: str = DEFAULT_LOOKUP_MESSAGE,
    ) -> CredentialSpec | None:
        """Return the spec for *key*.

        When *required* is true a miss raises ``UnknownCredentialType`` with
        *message* formatted against ``key``.
        """
        spec = self._specs.get(key)
        if spec is None and required:
            raise UnknownCredentialType(message.format(key=key))
        return spec

    def list_supported(self) -> list[SupportedCredential]:
        """All specs, with capabilities reduced to presence flags."""
        return [
            SupportedCredential(
                key=spec.key,
                name=spec.name,
                description=spec.description,
                type=spec.type,
                verify=spec.verify is not None,
                get_token=spec.get_token is not None,
            )
            for spec in self._specs.values()
        ]

    def keys(self) -> list[str]:
        return list(self._specs)

    def __contains__(self, key: object) -> bool:
        return key in self._specs

    def __iter__(self) -> Iterator[CredentialSpec]:
        return iter(list(self._specs.values()))

    def __len__(self) -> int:
        return len(self._specs)
