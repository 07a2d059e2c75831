"""
VersionVault Server - File Metadata API Models

Pydantic models for the version history of a logical file.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class FileMetadata(BaseModel):
    """Response model for one stored version"""
    model_config = ConfigDict(populate_by_name=True)

    version: int
    file: str
    path: str
    size: Optional[int]
    committed_at: datetime = Field(alias="committedAt")


class VersionHistoryResponse(BaseModel):
    """All versions of one logical file, newest first"""
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(alias="fileName")
    versions: List[FileMetadata]
