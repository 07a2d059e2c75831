"""
VersionVault Server - File Storage Management

This module handles versioned file storage:
- Storage directory structure creation
- Version numbering by directory scan (no metadata database)
- Atomic commits through a staging area
- Latest/specific version resolution and listing

Version numbering:
- First upload of report.pdf: report_v1.pdf
- Second upload: report_v2.pdf
- Highest version number is always the current version

The namespace directory is the only index. Commits for the same logical
file are serialized through VersionLockTable; readers never take a lock
because artifacts only appear under their final name via an atomic rename.
"""

import errno
import hashlib
import io
import logging
import os
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Tuple, Union

from exceptions import InvalidUploadError, NotFoundError, StorageIOError
from models.infrastructure import ArtifactDescriptor
from namespaces import SplitFileName, BuildArtifactName
from version_locks import VersionLockTable

logger = logging.getLogger(__name__)


# ==================== Storage Configuration ====================

DEFAULT_STORAGE_ROOT = "uploads"
STAGING_DIR_NAME = ".staging"
DEFAULT_CHUNK_SIZE = 8192

_VERSION_TOKEN = re.compile(r"[0-9]+")


# ==================== Path Checks ====================

def _PathCheck(predicate, path: Path) -> bool:
    """
    Run an existence predicate such as Path.is_file

    A name longer than the filesystem allows cannot exist, so it reads as
    False; any other filesystem error becomes StorageIOError.
    """
    try:
        return predicate()
    except OSError as e:
        if e.errno == errno.ENAMETOOLONG:
            return False
        raise StorageIOError(f"Failed to check {path}: {str(e)}") from e


# ==================== Version Scanning ====================

def ParseVersionToken(entry_name: str, stem: str, extension: str) -> Optional[str]:
    """
    Extract the version token from an artifact name of the given stem

    Only exact matches of <stem>_v<digits><ext> count; "report2_v1.pdf" is not a
    version of "report".

    Returns:
        str: The digit token, or None if the entry is not a version of this file
    """
    prefix = f"{stem}_v"
    if not entry_name.startswith(prefix) or not entry_name.endswith(extension):
        return None

    token_end = len(entry_name) - len(extension)
    if token_end < len(prefix):
        return None
    token = entry_name[len(prefix):token_end]

    if _VERSION_TOKEN.fullmatch(token):
        return token

    # A token without dots or "_v" can only be a damaged artifact of this stem;
    # anything else belongs to a longer stem such as "report_v1_final"
    if token and "." not in token and "_v" not in token:
        logger.warning(f"Skipping artifact with unparsable version token: {entry_name}")
    return None


def ScanVersions(directory: Path, stem: str, extension: str) -> Dict[int, str]:
    """
    Scan a namespace directory for all versions of one logical file

    Args:
        directory: Namespace directory
        stem: File name without extension
        extension: Extension including the dot, or ""

    Returns:
        dict: version number -> artifact file name. When two names parse to the
              same number (e.g. report_v2.pdf and report_v02.pdf), the one with
              the lexicographically last token is kept and a warning is logged.

    Raises:
        FileNotFoundError: If directory does not exist
    """
    versions: Dict[int, Tuple[str, str]] = {}

    with os.scandir(directory) as entries:
        for entry in entries:
            token = ParseVersionToken(entry.name, stem, extension)
            if token is None:
                continue

            if not entry.is_file():
                logger.warning(f"Skipping non-file entry matching artifact name: {entry.name}")
                continue

            version = int(token)
            existing = versions.get(version)
            if existing is not None:
                logger.warning(
                    f"Duplicate version {version} for {stem}{extension} in {directory}: "
                    f"{existing[1]} and {entry.name}"
                )
                if existing[0] >= token:
                    continue
            versions[version] = (token, entry.name)

    return {version: name for version, (token, name) in versions.items()}


# ==================== Version Store ====================

class VersionStore:
    """
    Versioned file store rooted at a single storage directory

    Holds no state between calls besides the commit lock table; everything
    else is read back from the filesystem, so a restarted server sees exactly
    what was committed before.
    """

    def __init__(self, storage_root: Union[str, Path] = DEFAULT_STORAGE_ROOT,
                 allow_empty_uploads: bool = True, chunk_size: int = DEFAULT_CHUNK_SIZE,
                 lock_table: Optional[VersionLockTable] = None):
        self.storage_root = Path(storage_root)
        self.staging_root = self.storage_root / STAGING_DIR_NAME
        self.allow_empty_uploads = allow_empty_uploads
        self.chunk_size = chunk_size
        self.lock_table = lock_table or VersionLockTable()

    # ---------- Setup ----------

    def InitializeStorage(self) -> None:
        """
        Create the storage root and staging directory

        Idempotent; run once before accepting requests.

        Raises:
            StorageIOError: If the directories cannot be created
        """
        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
            logger.info(f"Storage root directory ready: {self.storage_root.absolute()}")

            self.staging_root.mkdir(exist_ok=True)
            logger.info(f"Staging directory ready: {self.staging_root.absolute()}")

        except OSError as e:
            logger.error(f"Failed to initialize storage: {str(e)}")
            raise StorageIOError(f"Failed to initialize storage: {str(e)}") from e

    # ---------- Commit ----------

    def Commit(self, directory: Path, original_file_name: str,
               content: Union[bytes, BinaryIO]) -> ArtifactDescriptor:
        """
        Store content as the next version of original_file_name in directory

        Steps:
        1. Stream content into a staging file (hash and size computed on the way)
        2. Under the per-file lock: scan versions, pick max + 1, rename into place

        Args:
            directory: Namespace directory (created if missing)
            original_file_name: Uploaded file name, e.g. "report.pdf"
            content: File bytes or a binary file-like object

        Returns:
            ArtifactDescriptor: The committed artifact

        Raises:
            InvalidUploadError: Bad file name, or empty content when not allowed
            StorageIOError: Directory creation, write or rename failed
        """
        stem, extension = SplitFileName(original_file_name)
        directory = Path(directory)

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create namespace directory {directory}: {str(e)}")
            raise StorageIOError(f"Failed to create directory: {str(e)}") from e

        staged_path, size, file_hash = self._WriteStagingFile(content)

        try:
            if size == 0 and not self.allow_empty_uploads:
                raise InvalidUploadError("Empty uploads are not allowed")

            key = (str(directory.absolute()), stem, extension)
            with self.lock_table.Hold(key):
                next_version = self._NextVersion(directory, stem, extension)
                file_name = BuildArtifactName(stem, next_version, extension)
                final_path = directory / file_name

                try:
                    if final_path.exists():
                        raise StorageIOError(f"Refusing to overwrite existing artifact: {final_path}")
                    os.replace(staged_path, final_path)
                except OSError as e:
                    if e.errno == errno.ENAMETOOLONG:
                        raise InvalidUploadError(f"File name too long: {original_file_name}") from e
                    raise StorageIOError(f"Failed to move upload into place: {str(e)}") from e

                committed_at = datetime.now(timezone.utc)

        except Exception:
            staged_path.unlink(missing_ok=True)
            raise

        logger.info(
            f"Committed {original_file_name} as version {next_version}: {final_path} "
            f"(size: {size} bytes, hash: {file_hash[:16]}...)"
        )

        return ArtifactDescriptor(
            file_name=file_name,
            full_path=final_path,
            version=next_version,
            committed_at=committed_at,
            size=size,
            sha256=file_hash
        )

    def _WriteStagingFile(self, content: Union[bytes, BinaryIO]) -> Tuple[Path, int, str]:
        """Write content to a unique staging file and return (path, size, sha256)"""
        if isinstance(content, (bytes, bytearray, memoryview)):
            content = io.BytesIO(bytes(content))

        staged_path = self.staging_root / f"{uuid.uuid4().hex}.upload"
        sha256_hash = hashlib.sha256()
        size = 0

        try:
            self.staging_root.mkdir(parents=True, exist_ok=True)
            with open(staged_path, 'xb') as f:
                while chunk := content.read(self.chunk_size):
                    f.write(chunk)
                    sha256_hash.update(chunk)
                    size += len(chunk)
                f.flush()
                os.fsync(f.fileno())

        except OSError as e:
            staged_path.unlink(missing_ok=True)
            logger.error(f"Failed to write staging file {staged_path}: {str(e)}")
            raise StorageIOError(f"Failed to write upload: {str(e)}") from e

        return staged_path, size, sha256_hash.hexdigest()

    def _NextVersion(self, directory: Path, stem: str, extension: str) -> int:
        """Next version number: 1 if none exist, otherwise MAX(version) + 1"""
        try:
            versions = ScanVersions(directory, stem, extension)
        except OSError as e:
            raise StorageIOError(f"Failed to list directory {directory}: {str(e)}") from e

        if not versions:
            return 1
        return max(versions) + 1

    # ---------- Resolution ----------

    def ResolveLatest(self, directory: Path, stem: str, extension: str) -> ArtifactDescriptor:
        """
        Get the highest committed version of a logical file

        Raises:
            NotFoundError: If the directory does not exist or holds no version
        """
        versions = self._ScanExisting(directory, stem, extension)
        if not versions:
            raise NotFoundError(f"File not found: {stem}{extension}")

        latest = max(versions)
        return self._Describe(Path(directory) / versions[latest], latest)

    def ResolveVersion(self, directory: Path, stem: str, extension: str,
                       version: int) -> ArtifactDescriptor:
        """
        Get one specific version by exact name lookup (no directory scan)

        Raises:
            NotFoundError: If that version was never committed
        """
        if version < 1:
            raise NotFoundError(f"File version not found: {stem}{extension} v{version}")

        artifact_path = Path(directory) / BuildArtifactName(stem, version, extension)
        if not _PathCheck(artifact_path.is_file, artifact_path):
            raise NotFoundError(f"File version not found: {artifact_path.name}")

        return self._Describe(artifact_path, version)

    def ListVersions(self, directory: Path, stem: str, extension: str) -> List[ArtifactDescriptor]:
        """
        Get all versions of a logical file, newest first

        Raises:
            NotFoundError: If the directory does not exist or holds no version
        """
        versions = self._ScanExisting(directory, stem, extension)
        if not versions:
            raise NotFoundError(f"File not found: {stem}{extension}")

        return [
            self._Describe(Path(directory) / versions[version], version)
            for version in sorted(versions, reverse=True)
        ]

    def ListNamespace(self, directory: Path) -> List[str]:
        """
        List every entry in a namespace directory, sorted by name

        Raises:
            NotFoundError: If the directory does not exist
        """
        directory = Path(directory)
        if not _PathCheck(directory.is_dir, directory):
            raise NotFoundError("No files found")

        try:
            return sorted(entry.name for entry in directory.iterdir())
        except OSError as e:
            raise StorageIOError(f"Failed to list directory {directory}: {str(e)}") from e

    def _ScanExisting(self, directory: Path, stem: str, extension: str) -> Dict[int, str]:
        directory = Path(directory)
        if not _PathCheck(directory.is_dir, directory):
            raise NotFoundError("No files found")

        try:
            return ScanVersions(directory, stem, extension)
        except OSError as e:
            raise StorageIOError(f"Failed to list directory {directory}: {str(e)}") from e

    def _Describe(self, artifact_path: Path, version: int) -> ArtifactDescriptor:
        try:
            stat_result = artifact_path.stat()
        except FileNotFoundError as e:
            raise NotFoundError(f"File version not found: {artifact_path.name}") from e
        except OSError as e:
            raise StorageIOError(f"Failed to stat {artifact_path}: {str(e)}") from e

        return ArtifactDescriptor(
            file_name=artifact_path.name,
            full_path=artifact_path,
            version=version,
            committed_at=datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc),
            size=stat_result.st_size
        )
