"""Tests for credential models — enums, specs, records, detail views."""

from __future__ import annotations

import pytest

from credkeep.models.credentials import (
    KNOWN_TYPES,
    CredentialDetail,
    CredentialRecord,
    CredentialSpec,
    CredentialStatus,
    CredentialType,
)


class TestEnums:
    def test_type_values(self):
        assert CredentialType.SSH_KEY_PAIR == "ssh"
        assert CredentialType.AUTH_TOKEN == "token"
        assert KNOWN_TYPES == {"ssh", "token"}

    def test_status_values_match_document_strings(self):
        assert CredentialStatus.NOT_SET.value == "not set"
        assert CredentialStatus.SET_BUT_UNTESTED.value == "set but untested"
        assert CredentialStatus.SET_AND_VERIFIED.value == "set and ready"
        assert CredentialStatus.SET_BUT_INVALID.value == "set invalid"
        assert CredentialStatus.SET_BUT_EXPIRED.value == "set but expired"


class TestCredentialSpec:
    def test_defaults(self):
        spec = CredentialSpec(key="k", name="K", type="token", verify=lambda files: True)
        assert spec.description == ""
        assert spec.get_token is None
        assert spec.label == "K"

    def test_frozen(self):
        spec = CredentialSpec(key="k", name="K", type="token", verify=lambda files: True)
        with pytest.raises(Exception):
            spec.key = "changed"

    def test_verify_must_be_callable(self):
        with pytest.raises(Exception):
            CredentialSpec(key="k", name="K", type="token", verify="not callable")

    def test_unknown_type_is_accepted(self):
        spec = CredentialSpec(key="k", name="K", type="oauth", verify=lambda files: True)
        assert spec.type not in KNOWN_TYPES


class TestCredentialRecord:
    def test_status_from_string(self):
        record = CredentialRecord(key="k", files=["/a"], status="set and ready")
        assert record.status is CredentialStatus.SET_AND_VERIFIED

    def test_to_document_has_only_storage_fields(self):
        record = CredentialRecord(
            key="k", files=["/a", "/a.pub"], status=CredentialStatus.SET_BUT_UNTESTED
        )
        assert record.to_document() == {
            "files": ["/a", "/a.pub"],
            "status": "set but untested",
        }

    def test_model_copy_keeps_file_order(self):
        record = CredentialRecord(key="k", files=["/b", "/a"])
        updated = record.model_copy(update={"status": CredentialStatus.SET_BUT_INVALID})
        assert updated.files == ["/b", "/a"]
        assert record.status is CredentialStatus.NOT_SET


class TestCredentialDetail:
    def test_capabilities_excluded_from_dump(self):
        detail = CredentialDetail(
            key="k", name="K", type="token",
            verify=lambda files: True, get_token=lambda files: "t",
        )
        dumped = detail.model_dump()
        assert "verify" not in dumped
        assert "get_token" not in dumped
        assert dumped["status"] is CredentialStatus.NOT_SET
