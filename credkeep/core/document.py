"""Structured YAML document reader/writer.

Documents are mappings at the top level.  Writes go to a sibling temp file
that is then moved over the target, so a crash never leaves a half-written
document behind.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


class DocumentFormatError(ValueError):
    """Raised when a document parses but is not a mapping."""


def read_document(path: Path, *, create_on_missing: dict[str, Any] | None = None) -> dict[str, Any]:
    """Load the mapping stored at *path*.

    Parameters
    ----------
    path:
        The YAML file to read.
    create_on_missing:
        Returned (as a deep copy) when *path* does not exist.  When ``None``
        a missing file raises ``FileNotFoundError``.

    Raises
    ------
    OSError
        The file exists but cannot be read.
    yaml.YAMLError
        The file is not valid YAML.
    DocumentFormatError
        The top-level value is not a mapping.
    """
    path = Path(path)
    if create_on_missing is not None and not path.exists():
        logger.debug("No document at %s; using empty default.", path)
        return copy.deepcopy(create_on_missing)

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DocumentFormatError(
            f"Expected a mapping at the top of {path}, found {type(data).__name__}."
        )
    return data


def write_document(path: Path, data: dict[str, Any]) -> None:
    """Overwrite *path* with *data*, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    with tmp_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, default_flow_style=False, sort_keys=True)
    tmp_path.replace(path)
    logger.debug("Wrote document %s (%d entries).", path, len(data))
