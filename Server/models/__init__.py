"""
VersionVault Server - Models Package

This package contains all data models for the VersionVault server:
- api: API endpoint Pydantic models
- infrastructure: Dataclass models for storage components
"""

# Re-export all models for convenient importing
from models.api import *
from models.infrastructure import *
