"""credkeep: local registry of host credentials.

Tracks which named credentials (SSH key pairs, API tokens) a host has
configured, where their backing files live, and whether they have been
verified against the service they authenticate to.  Verification and token
retrieval are supplied per credential type by plugins.
"""

__version__ = "0.1.0"
__description__ = "Local credential registry with plugin-supplied verification"

from credkeep.core.manager import CredentialManager
from credkeep.core.registry import CredentialRegistry
from credkeep.core.store import CredentialStore
from credkeep.models.credentials import (
    CredentialDetail,
    CredentialRecord,
    CredentialSpec,
    CredentialStatus,
    CredentialType,
)

__all__ = [
    "CredentialManager",
    "CredentialRegistry",
    "CredentialStore",
    "CredentialSpec",
    "CredentialRecord",
    "CredentialDetail",
    "CredentialStatus",
    "CredentialType",
    "__version__",
]
