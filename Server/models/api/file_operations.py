"""
VersionVault Server - File Operations API Models

Pydantic models for upload and version lookup responses.
Field names are serialized in camelCase to match the wire format.
"""

from datetime import datetime
from typing import List
from pydantic import BaseModel, ConfigDict, Field


class FileUploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    file_name: str = Field(alias="fileName")
    full_path: str = Field(alias="fullPath")
    version: int
    committed_at: datetime = Field(alias="committedAt")
    size: int
    sha256: str


class LatestFileResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    latest_file: str = Field(alias="latestFile")
    path: str
    version: int


class FileVersionResponse(BaseModel):
    file: str
    path: str
    version: int


class NamespaceListResponse(BaseModel):
    files: List[str]
