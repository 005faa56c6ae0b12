"""Credential models — types, lifecycle statuses, specs, records, and views.

Specs are the static description of a credential type contributed by a
plugin.  Records are the persisted, per-host entries created by import.
The detail view merges the two for display.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CredentialType(str, Enum):
    """The kinds of credential the import pipeline knows how to materialize."""

    SSH_KEY_PAIR = "ssh"
    AUTH_TOKEN = "token"


class CredentialStatus(str, Enum):
    """Verification lifecycle of a stored credential.

    Values are the strings written to the credentials document.
    """

    NOT_SET = "not set"
    SET_BUT_UNTESTED = "set but untested"
    SET_AND_VERIFIED = "set and ready"
    SET_BUT_INVALID = "set invalid"
    SET_BUT_EXPIRED = "set but expired"


KNOWN_TYPES: frozenset[str] = frozenset(t.value for t in CredentialType)

# Capabilities receive the record's ordered file list.  Either may be a plain
# function or a coroutine function; callers always await the result.
VerifyCapability = Callable[[list[str]], Union[bool, None, Awaitable[Any]]]
TokenCapability = Callable[[list[str]], Union[str, Awaitable[str]]]


class CredentialSpec(BaseModel):
    """Registered description of a credential type and its capabilities.

    Examples
    --------
    >>> spec = CredentialSpec(
    ...     key="gitHubAPI",
    ...     name="GitHub API token",
    ...     type=CredentialType.AUTH_TOKEN,
    ...     verify=lambda files: True,
    ... )
    >>> spec.get_token is None
    True
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    type: str  # CredentialType value; unknown types register but cannot import
    verify: VerifyCapability
    get_token: TokenCapability | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _type_value(cls, value: Any) -> Any:
        return value.value if isinstance(value, Enum) else value

    @property
    def label(self) -> str:
        """Human-readable name for messages."""
        return self.name or self.key


class CredentialRecord(BaseModel):
    """Persisted entry for one configured credential.

    ``files[0]`` is the primary credential file; for SSH key pairs
    ``files[1]`` is the matching public key.  Order is significant.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    files: list[str] = Field(default_factory=list)
    status: CredentialStatus = CredentialStatus.NOT_SET

    def to_document(self) -> dict[str, Any]:
        """Storage form: only the fields owned by the record."""
        return {"files": list(self.files), "status": self.status.value}


class CredentialDetail(BaseModel):
    """Merged spec + record view handed to the outer layer.

    Capabilities are attached only on request and are never serialized.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str
    name: str
    description: str = ""
    type: str
    status: CredentialStatus = CredentialStatus.NOT_SET
    files: list[str] = Field(default_factory=list)
    verify: VerifyCapability | None = Field(default=None, exclude=True, repr=False)
    get_token: TokenCapability | None = Field(default=None, exclude=True, repr=False)


class SupportedCredential(BaseModel):
    """A registered spec with its capabilities reduced to presence flags."""

    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    description: str = ""
    type: str
    verify: bool
    get_token: bool
