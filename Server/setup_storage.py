#!/usr/bin/env python3
"""
VersionVault Server - Storage Setup Script

This script prepares a storage root for deployment:
1. Creates the storage root directory
2. Creates the staging directory used for in-flight uploads
3. Reports the namespaces already present

The server performs the same initialization at startup; running this script
first lets operators check permissions before the service goes live.

Usage:
    python setup_storage.py [--storage-root PATH]
"""

import argparse
import sys
from pathlib import Path

# Ensure we can import from the same directory
sys.path.insert(0, str(Path(__file__).parent))

from config import get_settings
from exceptions import StorageIOError
from file_storage import VersionStore, STAGING_DIR_NAME


def print_header():
    """Print script header"""
    print("=" * 70)
    print("VersionVault Server - Storage Setup Script")
    print("=" * 70)
    print()


def ListNamespaces(storage_root: Path) -> list:
    """Return every existing <userId>/<category> pair under storage_root"""
    namespaces = []
    for user_dir in sorted(storage_root.iterdir()):
        if not user_dir.is_dir() or user_dir.name == STAGING_DIR_NAME:
            continue
        for category_dir in sorted(user_dir.iterdir()):
            if category_dir.is_dir():
                namespaces.append(f"{user_dir.name}/{category_dir.name}")
    return namespaces


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Initialize VersionVault storage")
    parser.add_argument(
        "--storage-root",
        default=None,
        help="Storage root directory (defaults to VERSIONVAULT_STORAGE_ROOT or 'uploads')"
    )
    args = parser.parse_args(argv)

    print_header()

    storage_root = args.storage_root or get_settings().storage_root
    store = VersionStore(storage_root=storage_root)

    try:
        store.InitializeStorage()
    except StorageIOError as e:
        print(f"[ERROR] Storage initialization failed: {str(e)}")
        return 1

    print(f"[OK] Storage root: {store.storage_root.absolute()}")
    print(f"[OK] Staging area: {store.staging_root.absolute()}")

    namespaces = ListNamespaces(store.storage_root)
    print(f"[OK] Existing namespaces: {len(namespaces)}")
    for namespace in namespaces:
        print(f"  - {namespace}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
