"""
VersionVault Server - API Models Package

This package contains Pydantic models for all API endpoints.
"""

from models.api.file_metadata import FileMetadata, VersionHistoryResponse
from models.api.file_operations import (
    FileUploadResponse,
    LatestFileResponse,
    FileVersionResponse,
    NamespaceListResponse
)

__all__ = [
    'FileMetadata',
    'VersionHistoryResponse',
    'FileUploadResponse',
    'LatestFileResponse',
    'FileVersionResponse',
    'NamespaceListResponse',
]
