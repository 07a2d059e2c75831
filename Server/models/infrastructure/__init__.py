"""
VersionVault Server - Infrastructure Models Package

This package contains dataclass models for infrastructure components
like artifact descriptors and commit locks.
"""

from models.infrastructure.artifact_descriptor import ArtifactDescriptor
from models.infrastructure.version_lock import VersionKey, VersionLock

__all__ = [
    'ArtifactDescriptor',
    'VersionKey',
    'VersionLock',
]
