"""
VersionVault Server - Invalid Upload Error Exception

Exception raised for missing file parts, bad file names and rejected content.
"""

from exceptions.versionvault_error import VersionVaultError


class InvalidUploadError(VersionVaultError):
    """Exception for uploads that cannot be committed."""
    pass
