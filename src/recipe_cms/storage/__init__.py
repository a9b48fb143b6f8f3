"""Storage targets for uploaded assets."""

from .config import (
    AssetType,
    LocalStorageConfig,
    S3StorageConfig,
    ServerRoute,
    StorageConfig,
    StorageKind,
    build_storage,
)


__all__ = [
    "AssetType",
    "LocalStorageConfig",
    "S3StorageConfig",
    "ServerRoute",
    "StorageConfig",
    "StorageKind",
    "build_storage",
]
