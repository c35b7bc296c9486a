"""Tests for session keys and filename sanitising."""

from uuid import uuid4

import pytest

from dicom_vault.core.value_objects import SessionKey, safe_filename


class TestSafeFilename:
    """Test filename sanitising."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("scan.dcm", "scan.dcm"),
            ("../../etc/passwd", "passwd"),
            ("C:\\images\\chest ct.dcm", "chest_ct.dcm"),
            (".hidden", "hidden"),
            ("..", "file"),
            ("ü ñ.dcm", "_.dcm"),
        ],
    )
    def test_sanitises(self, raw, expected):
        assert safe_filename(raw) == expected

    def test_caps_length(self):
        assert len(safe_filename("a" * 300 + ".dcm")) == 64


class TestSessionKey:
    """Test session identity."""

    def test_same_owner_and_filename_share_a_directory(self, owner_id):
        assert SessionKey(owner_id, "scan.dcm").directory_name == SessionKey(owner_id, "scan.dcm").directory_name

    def test_colliding_safe_names_get_distinct_directories(self, owner_id):
        first = SessionKey(owner_id, "chest ct.dcm")
        second = SessionKey(owner_id, "chest_ct.dcm")

        assert first.safe_filename == second.safe_filename
        assert first.directory_name != second.directory_name

    def test_owners_are_isolated(self):
        assert SessionKey(uuid4(), "scan.dcm") != SessionKey(uuid4(), "scan.dcm")

    def test_rejects_blank_filename(self, owner_id):
        with pytest.raises(ValueError):
            SessionKey(owner_id, "   ")

    def test_rejects_non_uuid_owner(self):
        with pytest.raises(ValueError):
            SessionKey("owner-1", "scan.dcm")

    def test_hashable(self, owner_id):
        assert len({SessionKey(owner_id, "scan.dcm"), SessionKey(owner_id, "scan.dcm")}) == 1
