"""
VersionVault Server - Storage Module

This module exports the global version_store instance for use across the application.
"""

from file_storage import VersionStore

# Global version store instance
# Initialized in server.py lifespan handler
version_store: VersionStore = None
