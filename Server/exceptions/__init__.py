"""
VersionVault Server - Exceptions Package

Contains all exception classes raised by the version store and namespace
resolver. Route handlers translate them into HTTP responses.
"""

from exceptions.versionvault_error import VersionVaultError
from exceptions.invalid_namespace_error import InvalidNamespaceError
from exceptions.invalid_upload_error import InvalidUploadError
from exceptions.not_found_error import NotFoundError
from exceptions.storage_io_error import StorageIOError

__all__ = [
    'VersionVaultError',
    'InvalidNamespaceError',
    'InvalidUploadError',
    'NotFoundError',
    'StorageIOError',
]
