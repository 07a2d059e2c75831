"""
VersionVault Server - Namespace Resolution

This module maps a (userId, category) namespace to its storage directory
and splits logical file names into the (stem, extension) versioning key.

Directory layout:
/storage_root/
  <userId>/
    <category>/
      <stem>_v<N><ext>

All functions are pure; nothing here touches the filesystem.
"""

import os
from pathlib import Path
from typing import Optional, Tuple

from exceptions import InvalidNamespaceError, InvalidUploadError


DEFAULT_USER_ID = "defaultUser"
DEFAULT_CATEGORY = "uncategorized"

_FORBIDDEN_CHARACTERS = ("/", "\\", "\x00")


def ValidateNamespaceSegment(value: str, field_name: str) -> str:
    """
    Check that a userId or category is safe to use as a single directory name

    Args:
        value: Segment to validate
        field_name: Name used in error messages ("userId" or "category")

    Returns:
        str: The unchanged value

    Raises:
        InvalidNamespaceError: If the value could escape its parent directory
                               or collide with the staging directory
    """
    if any(character in value for character in _FORBIDDEN_CHARACTERS):
        raise InvalidNamespaceError(f"Invalid {field_name}: path separators are not allowed")

    if value in (".", ".."):
        raise InvalidNamespaceError(f"Invalid {field_name}: '{value}' is not allowed")

    # Leading-dot names are reserved for the staging area
    if value.startswith("."):
        raise InvalidNamespaceError(f"Invalid {field_name}: names may not start with '.'")

    return value


def ResolveDirectory(storage_root, user_id: Optional[str] = None,
                     category: Optional[str] = None) -> Path:
    """
    Resolve the storage directory for a namespace

    Empty or missing values fall back to DEFAULT_USER_ID and DEFAULT_CATEGORY.

    Args:
        storage_root: Root directory for file storage
        user_id: Owner of the files
        category: Category within the user's storage

    Returns:
        Path: storage_root / user_id / category

    Raises:
        InvalidNamespaceError: If user_id or category is unsafe
    """
    user_id = ValidateNamespaceSegment(user_id or DEFAULT_USER_ID, "userId")
    category = ValidateNamespaceSegment(category or DEFAULT_CATEGORY, "category")
    return Path(storage_root) / user_id / category


def SplitFileName(file_name: Optional[str]) -> Tuple[str, str]:
    """
    Split a logical file name into (stem, extension)

    The extension starts at the last dot that is not the first character,
    so "archive.tar.gz" -> ("archive.tar", ".gz") and ".bashrc" -> (".bashrc", "").

    Raises:
        InvalidUploadError: If the name is empty or contains path components
    """
    if not file_name:
        raise InvalidUploadError("File name must not be empty")

    if any(character in file_name for character in _FORBIDDEN_CHARACTERS):
        raise InvalidUploadError(f"Invalid file name: {file_name!r}")

    if file_name in (".", ".."):
        raise InvalidUploadError(f"Invalid file name: {file_name!r}")

    stem, extension = os.path.splitext(file_name)
    return stem, extension


def BuildArtifactName(stem: str, version: int, extension: str) -> str:
    """Build the on-disk name of one version: <stem>_v<N><ext>"""
    return f"{stem}_v{version}{extension}"
