"""
VersionVault Server - Not Found Error Exception

Exception raised when a namespace directory or artifact version does not exist.
"""

from exceptions.versionvault_error import VersionVaultError


class NotFoundError(VersionVaultError):
    """Exception for missing namespaces and versions."""
    pass
