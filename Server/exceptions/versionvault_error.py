"""
VersionVault Server - Base Error Exception

Base exception class for all version store errors.
"""


class VersionVaultError(Exception):
    """Base exception for version store errors."""
    pass
