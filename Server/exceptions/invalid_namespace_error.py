"""
VersionVault Server - Invalid Namespace Error Exception

Exception raised when a userId or category cannot be used as a directory name.
"""

from exceptions.versionvault_error import VersionVaultError


class InvalidNamespaceError(VersionVaultError):
    """Exception for unsafe or malformed userId/category values."""
    pass
