"""
Test Suite for Archive Packaging

Tests:
- Entry order, names and content
- Manifest stored as the archive comment
- Byte-identical output for identical input
- Packaging failures
"""

import hashlib
import io
import zipfile

import pytest

from sqlseed.archive import (
    FIXED_DATE_TIME,
    MAX_COMMENT_BYTES,
    ArchivePackager,
    entry_names,
    read_archive,
)
from sqlseed.errors import PackagingError


@pytest.fixture
def artifacts():
    return {
        "users.sql": "-- users: 1 rows\nINSERT INTO users\n  (id)\nVALUES\n  (1);\n",
        "orders.sql": "-- orders: 0 rows\n",
    }


@pytest.fixture
def packager():
    return ArchivePackager()


class TestArchivePackager:
    """Test ZIP assembly"""

    def test_entries_in_order(self, packager, artifacts):
        entries, manifest = read_archive(packager.package(artifacts))

        assert list(entries) == ["users.sql", "orders.sql"]
        assert entries == artifacts
        assert manifest is None

    def test_manifest_in_comment(self, packager, artifacts):
        archive = packager.package(artifacts, {"seed": 42, "dialect": "ansi"})
        entries, manifest = read_archive(archive)

        assert len(entries) == 2
        assert manifest["seed"] == 42
        assert manifest["dialect"] == "ansi"
        assert [f["name"] for f in manifest["files"]] == ["users.sql", "orders.sql"]

        users = manifest["files"][0]
        data = artifacts["users.sql"].encode("utf-8")
        assert users["size"] == len(data)
        assert users["sha256"] == hashlib.sha256(data).hexdigest()

    def test_content_hash(self, packager, artifacts):
        _, manifest = read_archive(packager.package(artifacts, {}))
        listing = "".join(f"{f['name']}:{f['sha256']}\n" for f in manifest["files"])
        assert manifest["content_hash"] == hashlib.sha256(listing.encode("utf-8")).hexdigest()

    def test_identical_input_identical_bytes(self, artifacts):
        first = ArchivePackager().package(artifacts, {"seed": 1})
        second = ArchivePackager().package(dict(artifacts), {"seed": 1})
        assert first == second

    def test_fixed_metadata(self, packager, artifacts):
        with zipfile.ZipFile(io.BytesIO(packager.package(artifacts))) as zf:
            for info in zf.infolist():
                assert info.date_time == FIXED_DATE_TIME
                assert info.create_system == 3
                assert (info.external_attr >> 16) & 0o777 == 0o644
                assert info.compress_type == zipfile.ZIP_DEFLATED

    def test_stored_compression(self, artifacts):
        archive = ArchivePackager("stored").package(artifacts)
        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            assert all(info.compress_type == zipfile.ZIP_STORED for info in zf.infolist())

    def test_invalid_compression(self):
        with pytest.raises(ValueError):
            ArchivePackager("bzip9")

    def test_names_are_cleaned(self, packager):
        entries, _ = read_archive(packager.package({"../evil/x.sql": "x"}))
        assert list(entries) == ["_evil_x.sql"]

    def test_duplicate_names(self, packager):
        with pytest.raises(PackagingError) as exc_info:
            packager.package({"a/b.sql": "x", "a_b.sql": "y"})
        assert exc_info.value.entry == "a_b.sql"

    def test_non_text_content(self, packager):
        with pytest.raises(PackagingError):
            packager.package({"a.sql": 5})

    def test_oversized_manifest(self, packager, artifacts):
        with pytest.raises(PackagingError):
            packager.package(artifacts, {"padding": "x" * (MAX_COMMENT_BYTES + 1)})

    def test_empty_archive(self, packager):
        entries, manifest = read_archive(packager.package({}, {"tables": []}))
        assert entries == {}
        assert manifest["files"] == []


class TestEntryNames:
    """Test table to entry name mapping"""

    def test_plain_name(self):
        assert entry_names(["users"]) == {"users": "users.sql"}

    def test_unsafe_name(self):
        assert entry_names(["public/users"]) == {"public/users": "public_users.sql"}

    def test_colliding_names_get_suffixes(self):
        names = entry_names(["a/b", "a_b", "a:b"])
        assert names == {"a/b": "a_b.sql", "a_b": "a_b_2.sql", "a:b": "a_b_3.sql"}

    def test_names_differing_in_case(self):
        assert entry_names(["Users", "users"]) == {"Users": "Users.sql", "users": "users_2.sql"}
