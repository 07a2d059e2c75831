"""
VersionVault Server - Routes Package

This package contains the FastAPI routers for status and file endpoints.
"""
