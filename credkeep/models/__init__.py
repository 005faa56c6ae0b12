"""credkeep data models — Pydantic v2, frozen (immutable)."""

from credkeep.models.credentials import (
    KNOWN_TYPES,
    CredentialDetail,
    CredentialRecord,
    CredentialSpec,
    CredentialStatus,
    CredentialType,
    SupportedCredential,
    TokenCapability,
    VerifyCapability,
)

__all__ = [
    # enums
    "CredentialType",
    "CredentialStatus",
    "KNOWN_TYPES",
    # capabilities
    "VerifyCapability",
    "TokenCapability",
    # models
    "CredentialSpec",
    "CredentialRecord",
    "CredentialDetail",
    "SupportedCredential",
]
