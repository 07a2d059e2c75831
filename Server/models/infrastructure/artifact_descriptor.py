"""
VersionVault Server - Artifact Descriptor Model

Dataclass describing one committed version of a logical file.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
from dataclasses import dataclass


@dataclass(frozen=True)
class ArtifactDescriptor:
    """
    One immutable artifact on disk: <stem>_v<version><ext>
    """
    file_name: str
    full_path: Path
    version: int
    committed_at: datetime  # Commit time, or file mtime for resolved artifacts
    size: Optional[int] = None
    sha256: Optional[str] = None  # Only known for artifacts committed in this call
