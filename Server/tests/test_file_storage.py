"""
Tests for the version store in VersionVault Server

Tests version numbering, concurrent commits, latest/specific version
resolution, listing and the staging area discipline.
"""

import hashlib
import io
import logging
import sys
import threading
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from exceptions import InvalidUploadError, NotFoundError, StorageIOError
from file_storage import VersionStore, ParseVersionToken, ScanVersions, STAGING_DIR_NAME
from namespaces import ResolveDirectory


@pytest.fixture
def store(tmp_path):
    version_store = VersionStore(storage_root=tmp_path / "uploads")
    version_store.InitializeStorage()
    return version_store


@pytest.fixture
def invoices(store):
    return ResolveDirectory(store.storage_root, "alice", "invoices")


# ==================== Setup ====================

def test_initialize_storage_is_idempotent(tmp_path):
    """Test that storage root and staging area are created and re-creatable"""
    version_store = VersionStore(storage_root=tmp_path / "a" / "b")
    version_store.InitializeStorage()
    version_store.InitializeStorage()

    assert (tmp_path / "a" / "b").is_dir()
    assert (tmp_path / "a" / "b" / STAGING_DIR_NAME).is_dir()


def test_initialize_storage_failure_raises_storage_error(tmp_path):
    """Test that an uncreatable root is reported as StorageIOError"""
    blocker = tmp_path / "blocker"
    blocker.write_bytes(b"not a directory")

    with pytest.raises(StorageIOError):
        VersionStore(storage_root=blocker / "uploads").InitializeStorage()


# ==================== Commit ====================

def test_serial_commits_are_numbered_without_gaps(store, invoices):
    """Test that N serial commits produce versions 1..N"""
    versions = [store.Commit(invoices, "report.pdf", b"rev %d" % i).version for i in range(5)]

    assert versions == [1, 2, 3, 4, 5]
    assert sorted(p.name for p in invoices.iterdir()) == [
        "report_v1.pdf", "report_v2.pdf", "report_v3.pdf", "report_v4.pdf", "report_v5.pdf"
    ]


def test_commit_returns_descriptor(store, invoices):
    """Test the descriptor returned by a commit"""
    content = b"%PDF-1.4 invoice"
    descriptor = store.Commit(invoices, "report.pdf", content)

    assert descriptor.file_name == "report_v1.pdf"
    assert descriptor.full_path == invoices / "report_v1.pdf"
    assert descriptor.version == 1
    assert descriptor.size == len(content)
    assert descriptor.sha256 == hashlib.sha256(content).hexdigest()
    assert descriptor.committed_at.tzinfo is not None


def test_commit_creates_missing_directories(store):
    """Test that the namespace directory is created on first upload"""
    directory = ResolveDirectory(store.storage_root, "newuser", "photos")
    assert not directory.exists()

    store.Commit(directory, "cat.jpg", b"jpeg")

    assert (directory / "cat_v1.jpg").is_file()


def test_commit_accepts_file_objects(store, invoices):
    """Test streaming content from a binary file object"""
    payload = b"x" * 50000
    descriptor = store.Commit(invoices, "big.bin", io.BytesIO(payload))

    assert descriptor.size == len(payload)
    assert descriptor.full_path.read_bytes() == payload


def test_commit_leaves_no_staging_files(store, invoices):
    """Test that the staging area is empty after commits"""
    store.Commit(invoices, "report.pdf", b"one")
    store.Commit(invoices, "report.pdf", b"two")

    assert list(store.staging_root.iterdir()) == []


def test_commit_rejects_empty_name(store, invoices):
    """Test that an empty original file name is rejected"""
    with pytest.raises(InvalidUploadError):
        store.Commit(invoices, "", b"data")


def test_empty_upload_allowed_by_default(store, invoices):
    """Test that zero-byte uploads become regular versions"""
    descriptor = store.Commit(invoices, "empty.txt", b"")

    assert descriptor.version == 1
    assert descriptor.size == 0
    assert descriptor.full_path.read_bytes() == b""


def test_empty_upload_rejected_when_disabled(tmp_path):
    """Test the strict zero-byte policy"""
    version_store = VersionStore(storage_root=tmp_path, allow_empty_uploads=False)
    version_store.InitializeStorage()
    directory = ResolveDirectory(tmp_path, "alice", "invoices")

    with pytest.raises(InvalidUploadError):
        version_store.Commit(directory, "empty.txt", b"")

    assert list(directory.iterdir()) == []
    assert list(version_store.staging_root.iterdir()) == []


def test_commit_refuses_to_overwrite(store, invoices, monkeypatch):
    """Test that an existing final name is never overwritten"""
    store.Commit(invoices, "report.pdf", b"original")
    monkeypatch.setattr(store, "_NextVersion", lambda directory, stem, extension: 1)

    with pytest.raises(StorageIOError):
        store.Commit(invoices, "report.pdf", b"intruder")

    assert (invoices / "report_v1.pdf").read_bytes() == b"original"
    assert list(store.staging_root.iterdir()) == []


def test_failed_rename_leaves_no_artifact(store, invoices, monkeypatch):
    """Test that a rename failure leaves neither a final artifact nor a staging file"""
    def failing_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("file_storage.os.replace", failing_replace)

    with pytest.raises(StorageIOError):
        store.Commit(invoices, "report.pdf", b"data")

    assert list(invoices.iterdir()) == []
    assert list(store.staging_root.iterdir()) == []
    assert len(store.lock_table) == 0


def test_concurrent_commits_get_distinct_versions(store, invoices):
    """Test that racing commits for the same file never share a version"""
    store.Commit(invoices, "report.pdf", b"existing 1")
    store.Commit(invoices, "report.pdf", b"existing 2")

    thread_count = 8
    barrier = threading.Barrier(thread_count)
    results = []
    errors = []

    def upload(index):
        try:
            barrier.wait()
            results.append(store.Commit(invoices, "report.pdf", b"concurrent %d" % index).version)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=upload, args=(i,)) for i in range(thread_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert sorted(results) == list(range(3, 3 + thread_count))
    assert len(list(invoices.iterdir())) == 2 + thread_count
    assert len(store.lock_table) == 0


def test_exact_stem_matching(store, invoices):
    """Test that a.txt and ab.txt keep separate version sequences"""
    store.Commit(invoices, "a.txt", b"a1")
    store.Commit(invoices, "a.txt", b"a2")
    store.Commit(invoices, "a.txt", b"a3")

    assert store.Commit(invoices, "ab.txt", b"ab1").version == 1
    assert store.Commit(invoices, "a.txt", b"a4").version == 4
    assert store.ResolveLatest(invoices, "ab", ".txt").version == 1


def test_concurrent_commits_for_different_stems(store, invoices):
    """Test that a.txt and ab.txt uploaded together both start at version 1"""
    barrier = threading.Barrier(2)
    results = {}

    def upload(name):
        barrier.wait()
        results[name] = store.Commit(invoices, name, name.encode()).version

    threads = [threading.Thread(target=upload, args=(name,)) for name in ("a.txt", "ab.txt")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results == {"a.txt": 1, "ab.txt": 1}


def test_extension_is_part_of_the_key(store, invoices):
    """Test that report.pdf and report.docx are versioned independently"""
    store.Commit(invoices, "report.pdf", b"pdf")
    store.Commit(invoices, "report.pdf", b"pdf")

    assert store.Commit(invoices, "report.docx", b"docx").version == 1


def test_files_without_extension(store, invoices):
    """Test versioning of names without an extension"""
    store.Commit(invoices, "Makefile", b"all:")
    descriptor = store.Commit(invoices, "Makefile", b"all: build")

    assert descriptor.file_name == "Makefile_v2"
    assert store.ResolveLatest(invoices, "Makefile", "").version == 2


# ==================== Resolution ====================

def test_report_example(store, invoices):
    """Test committing report.pdf twice and reading it back"""
    store.Commit(invoices, "report.pdf", b"first")
    store.Commit(invoices, "report.pdf", b"second")

    latest = store.ResolveLatest(invoices, "report", ".pdf")
    assert latest.file_name == "report_v2.pdf"
    assert latest.version == 2

    first = store.ResolveVersion(invoices, "report", ".pdf", 1)
    assert first.file_name == "report_v1.pdf"

    assert store.ListNamespace(invoices) == ["report_v1.pdf", "report_v2.pdf"]


def test_resolve_latest_after_many_commits(store, invoices):
    """Test that latest is the highest version, not the lexicographic last name"""
    for i in range(12):
        store.Commit(invoices, "report.pdf", b"%d" % i)

    assert store.ResolveLatest(invoices, "report", ".pdf").file_name == "report_v12.pdf"


def test_resolve_latest_without_commits(store, invoices):
    """Test NotFound for a namespace with no prior commits"""
    with pytest.raises(NotFoundError):
        store.ResolveLatest(invoices, "report", ".pdf")

    invoices.mkdir(parents=True)
    with pytest.raises(NotFoundError):
        store.ResolveLatest(invoices, "report", ".pdf")


def test_resolve_version_round_trip(store, invoices):
    """Test that every committed version reads back byte-identical"""
    payloads = [b"\x00\x01binary", b"", "unicode é".encode("utf-8")]
    for payload in payloads:
        store.Commit(invoices, "data.bin", payload)

    for version, payload in enumerate(payloads, start=1):
        descriptor = store.ResolveVersion(invoices, "data", ".bin", version)
        assert descriptor.full_path.read_bytes() == payload
        assert descriptor.size == len(payload)


def test_resolve_version_not_committed(store, invoices):
    """Test NotFound for versions never committed"""
    store.Commit(invoices, "report.pdf", b"only")

    for version in (0, -1, 2, 99):
        with pytest.raises(NotFoundError):
            store.ResolveVersion(invoices, "report", ".pdf", version)


def test_list_versions_newest_first(store, invoices):
    """Test the version history of a logical file"""
    for i in range(3):
        store.Commit(invoices, "report.pdf", b"v" * (i + 1))
    store.Commit(invoices, "other.pdf", b"other")

    history = store.ListVersions(invoices, "report", ".pdf")

    assert [d.version for d in history] == [3, 2, 1]
    assert [d.size for d in history] == [3, 2, 1]


def test_list_namespace_missing_directory(store):
    """Test NotFound when listing a namespace that was never written"""
    with pytest.raises(NotFoundError):
        store.ListNamespace(ResolveDirectory(store.storage_root, "nobody", "nothing"))


def test_state_survives_new_store_instance(store, invoices):
    """Test that a restarted store continues the existing sequence"""
    store.Commit(invoices, "report.pdf", b"before restart")

    restarted = VersionStore(storage_root=store.storage_root)
    restarted.InitializeStorage()

    assert restarted.Commit(invoices, "report.pdf", b"after restart").version == 2


# ==================== Scanning ====================

def test_parse_version_token():
    """Test exact pattern matching of artifact names"""
    assert ParseVersionToken("report_v1.pdf", "report", ".pdf") == "1"
    assert ParseVersionToken("report_v10.pdf", "report", ".pdf") == "10"
    assert ParseVersionToken("report2_v1.pdf", "report", ".pdf") is None
    assert ParseVersionToken("report_v1.docx", "report", ".pdf") is None
    assert ParseVersionToken("report_v.pdf", "report", ".pdf") is None
    assert ParseVersionToken("report_v1_v2.pdf", "report_v1", ".pdf") == "2"
    assert ParseVersionToken("report_v1_v2.pdf", "report", ".pdf") is None


def test_unparsable_token_is_skipped_with_warning(store, invoices, caplog):
    """Test that a damaged artifact name is ignored and logged"""
    store.Commit(invoices, "report.pdf", b"good")
    (invoices / "report_vX.pdf").write_bytes(b"placed by hand")

    with caplog.at_level(logging.WARNING, logger="file_storage"):
        latest = store.ResolveLatest(invoices, "report", ".pdf")

    assert latest.version == 1
    assert "unparsable version token" in caplog.text


def test_duplicate_version_picks_last_token(store, invoices, caplog):
    """Test deterministic tie-break for externally placed duplicates"""
    invoices.mkdir(parents=True)
    (invoices / "report_v02.pdf").write_bytes(b"padded")
    (invoices / "report_v2.pdf").write_bytes(b"plain")

    with caplog.at_level(logging.WARNING, logger="file_storage"):
        versions = ScanVersions(invoices, "report", ".pdf")
        latest = store.ResolveLatest(invoices, "report", ".pdf")

    assert versions == {2: "report_v2.pdf"}
    assert latest.file_name == "report_v2.pdf"
    assert "Duplicate version 2" in caplog.text
    assert store.Commit(invoices, "report.pdf", b"next").version == 3


# ==================== Long Names and Odd Entries ====================

def test_resolve_version_with_overlong_name(store, invoices):
    """Test that a version whose artifact name exceeds filesystem limits is NotFound"""
    store.Commit(invoices, "r.pdf", b"only")

    with pytest.raises(NotFoundError):
        store.ResolveVersion(invoices, "r", ".pdf", int("9" * 300))


def test_commit_with_overlong_name(store, invoices):
    """Test that an upload name too long for the filesystem is rejected cleanly"""
    with pytest.raises(InvalidUploadError):
        store.Commit(invoices, "a" * 252 + ".txt", b"x")

    assert list(invoices.iterdir()) == []
    assert list(store.staging_root.iterdir()) == []
    assert len(store.lock_table) == 0


def test_directory_matching_artifact_name_is_skipped(store, invoices):
    """Test that a directory named like an artifact is not treated as a version"""
    store.Commit(invoices, "report.pdf", b"real")
    (invoices / "report_v5.pdf").mkdir()

    assert ScanVersions(invoices, "report", ".pdf") == {1: "report_v1.pdf"}
    assert store.ResolveLatest(invoices, "report", ".pdf").version == 1
    with pytest.raises(NotFoundError):
        store.ResolveVersion(invoices, "report", ".pdf", 5)
