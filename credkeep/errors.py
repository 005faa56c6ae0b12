"""Error taxonomy for the credential engine.

Every error carries an HTTP-style ``status_code`` and a process
``exit_code`` so the outer command layer can map failures without
inspecting messages.  Recoverable lookups (``NotFoundError``,
``ConflictError``) and unexpected failures (``IOFailure``) are distinct
types.
"""

from __future__ import annotations


class CredentialError(Exception):
    """Base class for all credential engine errors."""

    status_code: int = 500
    exit_code: int = 1


class BadRequestError(CredentialError):
    """The caller asked for something that cannot be done with this input."""

    status_code = 400
    exit_code = 2


class SpecValidationError(BadRequestError, ValueError):
    """A credential spec is malformed (missing or invalid field)."""


class UnknownCredentialType(BadRequestError, LookupError):
    """No registered spec matches the requested key."""


class UnsupportedTypeError(BadRequestError):
    """A spec declares a credential type the importer cannot handle."""


class NotFoundError(CredentialError, LookupError):
    """The key is valid but no credential has been imported for it."""

    status_code = 404
    exit_code = 3


class ConflictError(CredentialError):
    """The replace flag does not match whether a record already exists."""

    status_code = 409
    exit_code = 4


class VerificationFailure(CredentialError):
    """A verify capability rejected the credential."""

    status_code = 401
    exit_code = 5


class CredentialExpiredError(VerificationFailure):
    """A verify capability reported the credential as expired."""


class CapabilityNotImplementedError(CredentialError, NotImplementedError):
    """The credential type does not provide the requested capability."""

    status_code = 501
    exit_code = 6


class IOFailure(CredentialError, OSError):
    """Reading, writing, or copying a file failed."""

    status_code = 500
    exit_code = 7
