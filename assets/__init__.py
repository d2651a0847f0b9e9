"""
Assets Module

Flat-directory file store behind an authenticated HTTP API.

Components:
- store: AssetStore, the only code touching the filesystem
- service: AssetService, validation in front of the store
- routes: API endpoints for list, upload, fetch, delete
- content_types: extension allow-list and Content-Type table
"""

from .exceptions import (
    AssetError,
    FileTooLarge,
    InvalidRequest,
    NotFound,
    StorageUnavailable,
    UnsupportedType,
)
from .service import AssetService
from .store import Asset, AssetStore, AssetStream, sanitize_name

__all__ = [
    "Asset",
    "AssetError",
    "AssetService",
    "AssetStore",
    "AssetStream",
    "FileTooLarge",
    "InvalidRequest",
    "NotFound",
    "StorageUnavailable",
    "UnsupportedType",
    "sanitize_name",
]
