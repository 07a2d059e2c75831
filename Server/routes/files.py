"""
VersionVault Server - File Operations Endpoints

This module contains endpoints for uploading files, resolving the latest or
a specific version, listing a namespace, and downloading stored versions.

Blocking filesystem work runs in the threadpool so slow disks never stall
the event loop.
"""

import logging
from typing import Optional, Tuple
from pathlib import Path
from fastapi import APIRouter, HTTPException, status, Query, File as FastAPIFile, UploadFile, Form
from fastapi.responses import FileResponse
from starlette.concurrency import run_in_threadpool

from exceptions import (
    VersionVaultError, InvalidNamespaceError, InvalidUploadError,
    NotFoundError, StorageIOError
)
from models.api import (
    FileUploadResponse, LatestFileResponse, FileVersionResponse,
    NamespaceListResponse, FileMetadata, VersionHistoryResponse
)
from namespaces import ResolveDirectory, SplitFileName


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


# ==================== Helpers ====================

def _ToHTTPException(error: VersionVaultError) -> HTTPException:
    """Map a storage error to the HTTP status the API reports for it"""
    if isinstance(error, (InvalidNamespaceError, InvalidUploadError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, StorageIOError):
        logger.error(f"Storage failure: {str(error)}")
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Storage operation failed"
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


def _RequireParameters(*values: Optional[str]) -> None:
    """Reject requests with any missing or empty query parameter"""
    if not all(values):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required query parameters"
        )


def _ParseVersion(version: str) -> int:
    try:
        return int(version)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid version: {version!r} is not an integer"
        )


def _ResolveLogicalFile(user_id: str, category: str, file_name: str) -> Tuple[Path, str, str]:
    """Resolve (directory, stem, extension) for a lookup request"""
    from storage import version_store

    directory = ResolveDirectory(version_store.storage_root, user_id, category)
    stem, extension = SplitFileName(file_name)
    return directory, stem, extension


# ==================== Upload Endpoint ====================

@router.post("/upload", response_model=FileUploadResponse, tags=["Files"])
async def upload_file(
    file: Optional[UploadFile] = FastAPIFile(None),
    user_id: Optional[str] = Form(None, alias="userId"),
    category: Optional[str] = Form(None)
):
    """
    Upload a file as the next version of its logical name

    Missing userId/category fall back to "defaultUser"/"uncategorized".

    Args:
        file: File to upload (multipart/form-data)
        user_id: Owner namespace
        category: Category within the owner's namespace

    Returns:
        FileUploadResponse with the new file name, path, version and hash

    Raises:
        HTTPException: 400 for missing file or invalid names, 500 on storage failure
    """
    from storage import version_store

    if file is None or not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded"
        )

    try:
        directory = ResolveDirectory(version_store.storage_root, user_id, category)
        descriptor = await run_in_threadpool(
            version_store.Commit, directory, file.filename, file.file
        )

    except VersionVaultError as e:
        logger.warning(f"Upload of '{file.filename}' rejected: {str(e)}")
        raise _ToHTTPException(e)
    except Exception as e:
        logger.error(f"Error uploading file '{file.filename}': {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload file"
        )

    return FileUploadResponse(
        message="File uploaded successfully!",
        file_name=descriptor.file_name,
        full_path=str(descriptor.full_path),
        version=descriptor.version,
        committed_at=descriptor.committed_at,
        size=descriptor.size,
        sha256=descriptor.sha256
    )


# ==================== Lookup Endpoints ====================

@router.get("/files/latest", response_model=LatestFileResponse, tags=["Files"])
async def get_latest_file(
    user_id: Optional[str] = Query(None, alias="userId"),
    category: Optional[str] = Query(None),
    file_name: Optional[str] = Query(None, alias="fileName", description="Logical file name, e.g. report.pdf")
):
    """
    Get the latest version of a file

    Returns:
        LatestFileResponse: Artifact name, path and version number
    """
    from storage import version_store

    _RequireParameters(user_id, category, file_name)

    try:
        directory, stem, extension = _ResolveLogicalFile(user_id, category, file_name)
        descriptor = await run_in_threadpool(
            version_store.ResolveLatest, directory, stem, extension
        )
    except VersionVaultError as e:
        raise _ToHTTPException(e)
    except Exception as e:
        logger.error(f"Error looking up '{file_name}' in {user_id}/{category}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to look up file"
        )

    return LatestFileResponse(
        latest_file=descriptor.file_name,
        path=str(descriptor.full_path),
        version=descriptor.version
    )


@router.get("/files/version", response_model=FileVersionResponse, tags=["Files"])
async def get_file_version(
    user_id: Optional[str] = Query(None, alias="userId"),
    category: Optional[str] = Query(None),
    file_name: Optional[str] = Query(None, alias="fileName"),
    version: Optional[str] = Query(None, description="Version number (1 = first upload)")
):
    """
    Get a specific version of a file

    Returns:
        FileVersionResponse: Artifact name, path and version number
    """
    from storage import version_store

    _RequireParameters(user_id, category, file_name, version)
    version_number = _ParseVersion(version)

    try:
        directory, stem, extension = _ResolveLogicalFile(user_id, category, file_name)
        descriptor = await run_in_threadpool(
            version_store.ResolveVersion, directory, stem, extension, version_number
        )
    except VersionVaultError as e:
        raise _ToHTTPException(e)
    except Exception as e:
        logger.error(f"Error looking up '{file_name}' in {user_id}/{category}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to look up file"
        )

    return FileVersionResponse(
        file=descriptor.file_name,
        path=str(descriptor.full_path),
        version=descriptor.version
    )


@router.get("/files/list", response_model=NamespaceListResponse, tags=["Files"])
async def list_files(
    user_id: Optional[str] = Query(None, alias="userId"),
    category: Optional[str] = Query(None)
):
    """
    List all stored artifacts in a namespace

    Returns:
        NamespaceListResponse: Raw artifact names, sorted
    """
    from storage import version_store

    _RequireParameters(user_id, category)

    try:
        directory = ResolveDirectory(version_store.storage_root, user_id, category)
        files = await run_in_threadpool(version_store.ListNamespace, directory)
    except VersionVaultError as e:
        raise _ToHTTPException(e)
    except Exception as e:
        logger.error(f"Error listing files for {user_id}/{category}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve file list"
        )

    logger.info(f"Listed {len(files)} files for {user_id}/{category}")
    return NamespaceListResponse(files=files)


@router.get("/files/versions", response_model=VersionHistoryResponse, tags=["Files"])
async def get_file_versions(
    user_id: Optional[str] = Query(None, alias="userId"),
    category: Optional[str] = Query(None),
    file_name: Optional[str] = Query(None, alias="fileName")
):
    """
    Get all versions of a file

    Returns a list of all versions sorted by version number (newest first).
    The highest version number is always the current version.
    """
    from storage import version_store

    _RequireParameters(user_id, category, file_name)

    try:
        directory, stem, extension = _ResolveLogicalFile(user_id, category, file_name)
        descriptors = await run_in_threadpool(
            version_store.ListVersions, directory, stem, extension
        )
    except VersionVaultError as e:
        raise _ToHTTPException(e)
    except Exception as e:
        logger.error(f"Error looking up '{file_name}' in {user_id}/{category}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to look up file"
        )

    return VersionHistoryResponse(
        file_name=file_name,
        versions=[
            FileMetadata(
                version=descriptor.version,
                file=descriptor.file_name,
                path=str(descriptor.full_path),
                size=descriptor.size,
                committed_at=descriptor.committed_at
            )
            for descriptor in descriptors
        ]
    )


@router.get("/files/download", tags=["Files"])
async def download_file(
    user_id: Optional[str] = Query(None, alias="userId"),
    category: Optional[str] = Query(None),
    file_name: Optional[str] = Query(None, alias="fileName"),
    version: Optional[str] = Query(None, description="Version to download (latest if omitted)")
):
    """
    Download the content of a stored version

    Streams the latest version unless a version number is given.

    Returns:
        FileResponse: Binary file content with appropriate headers
    """
    from storage import version_store

    _RequireParameters(user_id, category, file_name)
    version_number = _ParseVersion(version) if version else None

    try:
        directory, stem, extension = _ResolveLogicalFile(user_id, category, file_name)
        if version_number is None:
            descriptor = await run_in_threadpool(
                version_store.ResolveLatest, directory, stem, extension
            )
        else:
            descriptor = await run_in_threadpool(
                version_store.ResolveVersion, directory, stem, extension, version_number
            )
    except VersionVaultError as e:
        raise _ToHTTPException(e)
    except Exception as e:
        logger.error(f"Error looking up '{file_name}' in {user_id}/{category}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to look up file"
        )

    logger.info(f"Downloading {descriptor.full_path} ({descriptor.size} bytes)")

    return FileResponse(
        path=str(descriptor.full_path),
        filename=descriptor.file_name,
        media_type='application/octet-stream'
    )
