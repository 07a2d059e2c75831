"""
VersionVault Server - Storage IO Error Exception

Exception raised when the filesystem refuses an operation
(permissions, disk full, failed rename).
"""

from exceptions.versionvault_error import VersionVaultError


class StorageIOError(VersionVaultError):
    """Exception for filesystem failures."""
    pass
