"""Credential plugin discovery via ``importlib.metadata`` entry points.

A plugin package declares its credential types in ``pyproject.toml``::

    [project.entry-points."credkeep.credentials"]
    github = "credkeep_github.specs:CRED_SPECS"

The entry point may resolve to a ``CredentialSpec``, a mapping with the
spec fields, an iterable of either, or a zero-argument callable returning
one of those.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from importlib import metadata
from typing import Any

from credkeep.config import PLUGIN_GROUP
from credkeep.core.registry import CredentialRegistry
from credkeep.errors import SpecValidationError
from credkeep.models.credentials import CredentialSpec

logger = logging.getLogger(__name__)


def iter_specs(obj: Any) -> list[CredentialSpec | Mapping[str, Any]]:
    """Flatten a plugin export into a list of spec candidates.

    Raises
    ------
    SpecValidationError
        The export is not a spec, a mapping, an iterable of those, or a
        factory producing them.
    """
    if isinstance(obj, (CredentialSpec, Mapping)):
        return [obj]
    if callable(obj):
        return iter_specs(obj())
    if isinstance(obj, Iterable) and not isinstance(obj, (str, bytes)):
        specs: list[CredentialSpec | Mapping[str, Any]] = []
        for item in obj:
            if not isinstance(item, (CredentialSpec, Mapping)):
                raise SpecValidationError(
                    f"Plugin export contains a {type(item).__name__}, expected a credential spec."
                )
            specs.append(item)
        return specs
    raise SpecValidationError(
        f"Plugin export of type {type(obj).__name__} is not a credential spec."
    )


def load_credential_plugins(
    registry: CredentialRegistry,
    group: str = PLUGIN_GROUP,
) -> list[str]:
    """Register every credential spec exported under *group*.

    A plugin that fails to load or exports an invalid spec is logged and
    skipped; the remaining plugins still register.

    Returns
    -------
    list[str]
        Keys registered by this call, in load order.
    """
    registered: list[str] = []
    for entry_point in metadata.entry_points(group=group):
        try:
            export = entry_point.load()
            candidates = iter_specs(export)
        except Exception as exc:
            logger.warning("Skipping credential plugin '%s': %s", entry_point.name, exc)
            continue

        for candidate in candidates:
            try:
                spec = registry.register(candidate)
            except SpecValidationError as exc:
                logger.warning("Skipping spec from plugin '%s': %s", entry_point.name, exc)
                continue
            registered.append(spec.key)

    if registered:
        logger.info("Loaded %d credential type(s) from plugins.", len(registered))
    return registered
